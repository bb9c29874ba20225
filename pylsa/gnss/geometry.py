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

"""Receiver-satellite geometry for the single-epoch estimator"""

from typing import Sequence

import numpy as np

from ..core.exceptions import DegenerateGeometryError, InputError


def line_of_sight(approx_pos, sat_pos, approx_range, sats=None) -> np.ndarray:
    """
    Unit line-of-sight vectors from the approximate receiver to each satellite

    The caller-supplied approximate ranges are used as normalisation so that
    corrected geometric distances (e.g. with Sagnac or light-time terms) can
    be passed in unchanged.

    Parameters:
    -----------
    approx_pos : np.ndarray
        Approximate receiver ECEF position (m), shape (3,)
    sat_pos : np.ndarray
        Satellite ECEF positions (m), shape (n, 3)
    approx_range : np.ndarray
        Approximate receiver-satellite ranges (m), shape (n,)
    sats : sequence, optional
        Satellite ids, only used to report offending satellites

    Returns:
    --------
    los : np.ndarray
        Direction cosines (satellite - receiver) / range, shape (n, 3)

    Raises:
    -------
    DegenerateGeometryError
        Non-finite coordinates, or a zero, negative or non-finite range
    """
    approx_pos = np.asarray(approx_pos, dtype=np.float64)
    sat_pos = np.asarray(sat_pos, dtype=np.float64)
    approx_range = np.asarray(approx_range, dtype=np.float64)

    if not np.all(np.isfinite(approx_pos)):
        raise DegenerateGeometryError("Approximate receiver position is not finite")

    if sats is None:
        sats = list(range(len(approx_range)))

    bad_pos = ~np.all(np.isfinite(sat_pos), axis=1)
    if np.any(bad_pos):
        bad = [sats[i] for i in np.flatnonzero(bad_pos)]
        raise DegenerateGeometryError(f"Non-finite satellite position for {bad}", bad)

    bad_range = ~np.isfinite(approx_range) | (approx_range <= 0.0)
    if np.any(bad_range):
        bad = [sats[i] for i in np.flatnonzero(bad_range)]
        raise DegenerateGeometryError(f"Zero or non-finite approximate range for {bad}", bad)

    return (sat_pos - approx_pos) / approx_range[:, None]


def phase_subset_index(code_sats: Sequence[int], phase_sats: Sequence[int]) -> np.ndarray:
    """
    Positions of the phase-tracked satellites inside the code satellite list

    Parameters:
    -----------
    code_sats : sequence of int
        Code-tracked satellite ids
    phase_sats : sequence of int
        Phase-tracked satellite ids, a subset of ``code_sats``

    Returns:
    --------
    index : np.ndarray
        Integer indices into ``code_sats``, in ``phase_sats`` order
    """
    code_sats = list(code_sats)
    phase_sats = list(phase_sats)

    if len(set(code_sats)) != len(code_sats):
        raise InputError(f"Duplicate satellites in code list: {code_sats}")
    if len(set(phase_sats)) != len(phase_sats):
        raise InputError(f"Duplicate satellites in phase list: {phase_sats}")

    position = {sat: i for i, sat in enumerate(code_sats)}
    missing = [sat for sat in phase_sats if sat not in position]
    if missing:
        raise InputError(f"Phase satellites without code observation: {missing}")

    return np.array([position[sat] for sat in phase_sats], dtype=int)
