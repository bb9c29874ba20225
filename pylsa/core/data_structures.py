# Copyright 2024 inuex35
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Core data structures for single-epoch code/phase estimation"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .constants import SOLQ_NONE, SYS_NONE


@dataclass
class SatelliteObservation:
    """Observables and precomputed corrections for one satellite at one epoch.

    Attributes
    ----------
    sat : int
        Satellite id
    system : int
        System tag (SYS_GPS, SYS_GAL, ...); 0 means unused for bias estimation
    sat_pos : np.ndarray
        Satellite ECEF position at transmission time (m), shape (3,)
    pseudorange : float
        Code observation (m)
    approx_range : float
        Approximate geometric range from the approximate receiver position (m)
    phase : float or None
        Carrier phase observation (cycles); None when phase is not tracked
    snr : float
        Signal-to-noise ratio (dB-Hz)
    elevation : float
        Satellite elevation (degrees)
    sat_clock : float
        Satellite clock error (s)
    tropo : float
        Tropospheric delay (m)
    iono : float
        Ionospheric delay on the code observable (m)
    windup : float
        Phase wind-up (cycles)
    wavelength : float
        Carrier wavelength (m); only used when ``phase`` is set

    Notes
    -----
    Satellite positions, clocks and atmospheric delays are computed upstream.
    """
    sat: int
    system: int
    sat_pos: np.ndarray
    pseudorange: float
    approx_range: float
    phase: Optional[float] = None
    snr: float = 0.0
    elevation: float = 90.0
    sat_clock: float = 0.0
    tropo: float = 0.0
    iono: float = 0.0
    windup: float = 0.0
    wavelength: float = 0.0

    @property
    def has_phase(self) -> bool:
        return self.phase is not None


@dataclass
class EpochObservations:
    """All satellites observed at one epoch plus the approximate receiver position

    Attributes
    ----------
    approx_pos : np.ndarray
        Approximate receiver ECEF position (m), shape (3,)
    satellites : list[SatelliteObservation]
        Code-tracked satellites; the phase subset is those with ``phase`` set
    time : float, optional
        Epoch time tag (GPST seconds), carried through to the solution
    """
    approx_pos: np.ndarray
    satellites: List[SatelliteObservation] = field(default_factory=list)
    time: Optional[float] = None

    @property
    def n_code(self) -> int:
        return len(self.satellites)

    @property
    def n_phase(self) -> int:
        return sum(1 for s in self.satellites if s.has_phase)

    def to_arrays(self) -> dict:
        """Convert to the keyword arguments of ``code_phase_least_squares``.

        Phase observations and wavelengths are aligned to the phase-tracked
        subset, in the same order as the satellites list.
        """
        sats = self.satellites
        phase_sats = [s for s in sats if s.has_phase]
        return {
            'approx_pos': np.asarray(self.approx_pos, dtype=np.float64),
            'sat_pos': np.array([s.sat_pos for s in sats], dtype=np.float64).reshape(-1, 3),
            'pseudorange': np.array([s.pseudorange for s in sats], dtype=np.float64),
            'phase': np.array([s.phase for s in phase_sats], dtype=np.float64),
            'snr': np.array([s.snr for s in sats], dtype=np.float64),
            'elevation': np.array([s.elevation for s in sats], dtype=np.float64),
            'approx_range': np.array([s.approx_range for s in sats], dtype=np.float64),
            'code_sats': [s.sat for s in sats],
            'phase_sats': [s.sat for s in phase_sats],
            'sat_clock': np.array([s.sat_clock for s in sats], dtype=np.float64),
            'tropo': np.array([s.tropo for s in sats], dtype=np.float64),
            'iono': np.array([s.iono for s in sats], dtype=np.float64),
            'windup': np.array([s.windup for s in sats], dtype=np.float64),
            'systems': np.array([s.system for s in sats], dtype=int),
            'wavelength': np.array([s.wavelength for s in phase_sats], dtype=np.float64),
        }


@dataclass(frozen=True)
class UnknownLayout:
    """Column layout of the unknown vector.

    Order: position correction (3), ambiguities (n_phase), receiver clock (1),
    inter-system biases (one per entry of ``bias_systems``).

    Attributes
    ----------
    n_phase : int
        Number of phase-tracked satellites
    reference_system : int
        Lowest non-zero system tag present (SYS_NONE when no tag is set)
    bias_systems : tuple[int, ...]
        Non-reference system tags in ascending order
    """
    n_phase: int
    reference_system: int = SYS_NONE
    bias_systems: Tuple[int, ...] = ()

    @property
    def n_isb(self) -> int:
        return len(self.bias_systems)

    @property
    def n_unknowns(self) -> int:
        return 4 + self.n_phase + self.n_isb

    @property
    def position(self) -> slice:
        return slice(0, 3)

    @property
    def ambiguities(self) -> slice:
        return slice(3, 3 + self.n_phase)

    @property
    def clock(self) -> int:
        return 3 + self.n_phase

    @property
    def isb(self) -> slice:
        start = 4 + self.n_phase
        return slice(start, start + self.n_isb)


@dataclass(frozen=True)
class DOP:
    """Dilution of precision of the code-only geometry

    Attributes
    ----------
    pdop, hdop, vdop : float
        Position, horizontal and vertical DOP
    cov_xyz : np.ndarray
        Geometry-only cofactor matrix in ECEF, shape (3, 3)
    cov_enu : np.ndarray
        Same cofactor matrix rotated to East-North-Up, shape (3, 3)
    """
    pdop: float
    hdop: float
    vdop: float
    cov_xyz: np.ndarray
    cov_enu: np.ndarray


@dataclass
class Solution:
    """Float code/phase solution for one epoch.

    Covariance fields are None when the epoch has no redundancy (n == m);
    this is a valid outcome, not a failure.

    Attributes
    ----------
    position : np.ndarray
        Estimated receiver ECEF position (m), shape (3,)
    clock : float
        Receiver clock offset (s)
    isb : np.ndarray
        Inter-system biases (s), one per entry of ``isb_systems``
    isb_systems : tuple[int, ...]
        System tags the biases refer to, ascending; the reference system is
        the lowest tag present and has no entry
    ambiguities : np.ndarray
        Float ambiguity estimates (cycles), aligned to ``phase_sats``
    code_sats, phase_sats : list[int]
        Satellites used for code and phase rows
    wavelengths : np.ndarray
        Wavelengths of the phase satellites (m)
    residuals : np.ndarray
        Post-fit residuals, code rows first then phase rows (m)
    n_unknowns : int
        Size of the unknown vector
    sigma02 : float or None
        A posteriori unit-weight variance
    cov_position : np.ndarray or None
        Position covariance (m²), shape (3, 3)
    var_clock : float or None
        Receiver clock variance (s²)
    cov_isb : np.ndarray or None
        Inter-system bias covariance (s²)
    cov_ambiguities : np.ndarray or None
        Ambiguity covariance (cycles²)
    dop : DOP or None
        Only set when DOP was requested
    time : float or None
        Epoch time tag
    type : int
        SOLQ_FLOAT with phase rows, SOLQ_SINGLE for code-only epochs
    """
    position: np.ndarray
    clock: float
    isb: np.ndarray
    isb_systems: Tuple[int, ...]
    ambiguities: np.ndarray
    code_sats: List[int]
    phase_sats: List[int]
    wavelengths: np.ndarray
    residuals: np.ndarray
    n_unknowns: int
    sigma02: Optional[float] = None
    cov_position: Optional[np.ndarray] = None
    var_clock: Optional[float] = None
    cov_isb: Optional[np.ndarray] = None
    cov_ambiguities: Optional[np.ndarray] = None
    dop: Optional[DOP] = None
    time: Optional[float] = None
    type: int = SOLQ_NONE

    @property
    def n_code(self) -> int:
        return len(self.code_sats)

    @property
    def n_phase(self) -> int:
        return len(self.phase_sats)

    @property
    def n_obs(self) -> int:
        return self.n_code + self.n_phase

    @property
    def redundancy(self) -> int:
        return self.n_obs - self.n_unknowns

    @property
    def has_covariance(self) -> bool:
        return self.cov_position is not None

    @property
    def code_residuals(self) -> np.ndarray:
        return self.residuals[:self.n_code]

    @property
    def phase_residuals(self) -> np.ndarray:
        return self.residuals[self.n_code:]

    @property
    def ambiguities_m(self) -> np.ndarray:
        """Ambiguity estimates scaled to metres (wavelength times cycles)"""
        return self.wavelengths * self.ambiguities

    def get_llh(self):
        """Get geodetic position in latitude, longitude, height.

        Returns
        -------
        np.ndarray
            [lat (rad), lon (rad), height (m)] on the WGS84 ellipsoid
        """
        from ..coordinate import ecef2llh
        return ecef2llh(self.position)

    def get_enu_cov(self):
        """Get position covariance matrix in local ENU coordinates.

        Returns
        -------
        np.ndarray or None
            3x3 covariance in [East, North, Up] (m²), None without redundancy
        """
        if self.cov_position is None:
            return None
        from ..coordinate import covecef2enu
        return covecef2enu(self.get_llh(), self.cov_position)

    def position_std_enu(self):
        """Standard deviations [east, north, up] (m), or None without redundancy"""
        cov_enu = self.get_enu_cov()
        if cov_enu is None:
            return None
        return np.sqrt(np.clip(np.diag(cov_enu), 0.0, None))
