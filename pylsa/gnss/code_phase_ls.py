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

"""Single-epoch code + phase least-squares positioning.

Estimates receiver position, receiver clock, inter-system biases and float
carrier-phase ambiguities from one epoch of pseudorange and carrier-phase
observations. Nothing is carried over between calls: every epoch starts from
the approximate position and re-estimates its ambiguities.
"""

from typing import Callable, Optional

import numpy as np

from ..core.constants import CLIGHT, SOLQ_FLOAT, SOLQ_SINGLE
from ..core.data_structures import EpochObservations, Solution
from ..core.exceptions import InputError
from ..core.stats import EstimatorConfig
from .design_matrix import build_design_matrix, build_layout
from .diagnostics import covariance_blocks, post_fit_diagnostics
from .dop import compute_dop as _compute_dop
from .geometry import line_of_sight, phase_subset_index
from .normal_equations import solve_normal_equations
from .observation_model import known_term_vector, observation_vector
from .weighting import cofactor_matrix, observation_covariance


def _as_vector(name, value, length):
    arr = np.asarray(value, dtype=np.float64).reshape(-1)
    if arr.shape[0] != length:
        raise InputError(f"{name} has {arr.shape[0]} elements, expected {length}")
    return arr


def code_phase_least_squares(approx_pos, sat_pos, pseudorange, phase, snr, elevation,
                             approx_range, code_sats, phase_sats, sat_clock, tropo,
                             iono, windup, systems, wavelength,
                             config: Optional[EstimatorConfig] = None,
                             compute_dop: bool = False,
                             local_cov_transform: Optional[Callable] = None,
                             time: Optional[float] = None) -> Solution:
    """
    Weighted least-squares code + phase solution for one epoch

    Parameters:
    -----------
    approx_pos : np.ndarray
        Approximate receiver ECEF position (m), shape (3,)
    sat_pos : np.ndarray
        Satellite ECEF positions of the code satellites (m), shape (n_code, 3)
    pseudorange : np.ndarray
        Code observations (m), shape (n_code,)
    phase : np.ndarray
        Phase observations (cycles), aligned to ``phase_sats``; may be None
        when ``phase_sats`` is empty
    snr : np.ndarray
        Signal-to-noise ratios (dB-Hz), shape (n_code,)
    elevation : np.ndarray
        Satellite elevations (degrees), shape (n_code,)
    approx_range : np.ndarray
        Approximate geometric ranges (m), shape (n_code,)
    code_sats : sequence of int
        Code satellite ids
    phase_sats : sequence of int
        Phase satellite ids, a subset of ``code_sats``
    sat_clock : np.ndarray
        Satellite clock errors (s), shape (n_code,)
    tropo : np.ndarray
        Tropospheric delays (m), shape (n_code,)
    iono : np.ndarray
        Ionospheric code delays (m), shape (n_code,)
    windup : np.ndarray
        Phase wind-up (cycles), shape (n_code,)
    systems : array_like of int
        System tags, shape (n_code,); 0 = no system
    wavelength : np.ndarray
        Carrier wavelengths (m), aligned to ``phase_sats``; may be None
        when ``phase_sats`` is empty
    config : EstimatorConfig, optional
        A priori variances and cofactor model (default: EstimatorConfig())
    compute_dop : bool
        Also compute PDOP/HDOP/VDOP at the estimated position
    local_cov_transform : callable, optional
        ECEF to ENU covariance transform used for DOP
    time : float, optional
        Epoch time tag copied to the solution

    Returns:
    --------
    solution : Solution
        Covariance fields are None when n == m. ``ambiguities`` and
        ``cov_ambiguities`` are in cycles and cycles²;
        ``solution.ambiguities_m`` gives the ambiguities in metres.

    Raises:
    -------
    InputError
        Inconsistent array sizes or satellite lists, non-finite observations
        or corrections
    DegenerateGeometryError
        Zero or non-finite range, non-finite coordinates
    SingularNormalMatrixError
        Not enough independent observations
    """
    if config is None:
        config = EstimatorConfig()

    code_sats = [int(s) for s in code_sats]
    phase_sats = [int(s) for s in phase_sats]
    n_code = len(code_sats)
    n_phase = len(phase_sats)

    approx_pos = _as_vector('approx_pos', approx_pos, 3)
    sat_pos = np.asarray(sat_pos, dtype=np.float64).reshape(-1, 3)
    if sat_pos.shape[0] != n_code:
        raise InputError(f"sat_pos has {sat_pos.shape[0]} rows, expected {n_code}")
    pseudorange = _as_vector('pseudorange', pseudorange, n_code)
    snr = _as_vector('snr', snr, n_code)
    elevation = _as_vector('elevation', elevation, n_code)
    approx_range = _as_vector('approx_range', approx_range, n_code)
    sat_clock = _as_vector('sat_clock', sat_clock, n_code)
    tropo = _as_vector('tropo', tropo, n_code)
    iono = _as_vector('iono', iono, n_code)
    windup = _as_vector('windup', windup, n_code)
    # Code-only epochs may pass None for the phase arrays
    if n_phase == 0:
        phase = np.zeros(0) if phase is None else phase
        wavelength = np.zeros(0) if wavelength is None else wavelength
    phase = _as_vector('phase', phase, n_phase)
    wavelength = _as_vector('wavelength', wavelength, n_phase)
    systems = np.asarray(systems, dtype=int).reshape(-1)
    if systems.shape[0] != n_code:
        raise InputError(f"systems has {systems.shape[0]} elements, expected {n_code}")

    if np.any(~np.isfinite(wavelength)) or np.any(wavelength <= 0.0):
        raise InputError(f"Wavelengths must be positive and finite, got {wavelength}")

    phase_index = phase_subset_index(code_sats, phase_sats)

    # Wind-up only enters the phase rows
    for name, values, sats in (('pseudorange', pseudorange, code_sats),
                               ('phase', phase, phase_sats),
                               ('sat_clock', sat_clock, code_sats),
                               ('tropo', tropo, code_sats),
                               ('iono', iono, code_sats),
                               ('windup', windup[phase_index], phase_sats)):
        bad = ~np.isfinite(values)
        if np.any(bad):
            raise InputError(f"{name} is not finite for satellites "
                             f"{[sats[i] for i in np.flatnonzero(bad)]}")

    # Geometry and design matrix
    los = line_of_sight(approx_pos, sat_pos, approx_range, code_sats)
    layout = build_layout(systems, phase_index)
    A = build_design_matrix(los, phase_index, wavelength, systems, layout)

    # Observation model
    b = known_term_vector(approx_range, sat_clock, tropo, iono, windup,
                          wavelength, phase_index)
    y0 = observation_vector(pseudorange, phase, wavelength)

    # Stochastic model
    Q = cofactor_matrix(elevation, snr, config.cofactor_model)
    Qyy = observation_covariance(Q, phase_index, config.sigma2_code, config.sigma2_phase)

    fit = solve_normal_equations(A, Qyy, y0, b, tolerance=config.singular_tolerance)
    x_hat = fit.x_hat

    position = approx_pos + x_hat[layout.position]
    solution = Solution(
        position=position,
        clock=float(x_hat[layout.clock]) / CLIGHT,
        isb=x_hat[layout.isb] / CLIGHT,
        isb_systems=layout.bias_systems,
        ambiguities=x_hat[layout.ambiguities].copy(),
        code_sats=code_sats,
        phase_sats=phase_sats,
        wavelengths=wavelength.copy(),
        residuals=np.zeros(n_code + n_phase),
        n_unknowns=layout.n_unknowns,
        time=time,
        type=SOLQ_FLOAT if n_phase > 0 else SOLQ_SINGLE,
    )

    diagnostics = post_fit_diagnostics(fit, A, y0, b)
    solution.residuals = diagnostics.residuals
    if diagnostics.cxx is not None:
        blocks = covariance_blocks(diagnostics.cxx, layout)
        solution.sigma02 = diagnostics.sigma02
        solution.cov_position = blocks.position
        solution.cov_ambiguities = blocks.ambiguities
        solution.var_clock = blocks.clock
        solution.cov_isb = blocks.isb

    if compute_dop:
        solution.dop = _compute_dop(los, position, local_cov_transform)

    return solution


def solve_epoch(epoch: EpochObservations, config: Optional[EstimatorConfig] = None,
                compute_dop: bool = False,
                local_cov_transform: Optional[Callable] = None) -> Solution:
    """Solve one :class:`EpochObservations` (see ``code_phase_least_squares``)"""
    return code_phase_least_squares(**epoch.to_arrays(), config=config,
                                    compute_dop=compute_dop,
                                    local_cov_transform=local_cov_transform,
                                    time=epoch.time)


class CodePhaseLeastSquares:
    """Single-epoch code + phase estimator bound to a configuration

    Holds only read-only configuration and collaborators, so one instance
    can serve many epochs, also from several threads.
    """

    def __init__(self, config: Optional[EstimatorConfig] = None,
                 compute_dop: bool = False,
                 local_cov_transform: Optional[Callable] = None):
        """
        Initialize the estimator

        Parameters:
        -----------
        config : EstimatorConfig, optional
            Estimator configuration (default: EstimatorConfig())
        compute_dop : bool
            Compute DOP for every solved epoch
        local_cov_transform : callable, optional
            ECEF to ENU covariance transform used for DOP
        """
        self.config = config if config is not None else EstimatorConfig()
        self.compute_dop = compute_dop
        self.local_cov_transform = local_cov_transform

    def solve(self, epoch: EpochObservations) -> Solution:
        """Solve one epoch"""
        return solve_epoch(epoch, self.config, self.compute_dop, self.local_cov_transform)

    def __call__(self, epoch: EpochObservations) -> Solution:
        return self.solve(epoch)
