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

"""Known terms and observation vectors for code and carrier phase"""

import numpy as np

from ..core.constants import CLIGHT


def code_known_term(approx_range, sat_clock, tropo, iono):
    """
    Modelled pseudorange without receiver-dependent unknowns

    b = rho - c*dts + T + I

    Parameters:
    -----------
    approx_range : np.ndarray
        Approximate geometric ranges (m)
    sat_clock : np.ndarray
        Satellite clock errors (s)
    tropo : np.ndarray
        Tropospheric delays (m)
    iono : np.ndarray
        Ionospheric code delays (m)

    Returns:
    --------
    b_code : np.ndarray
        Known term for the code rows (m)
    """
    return (np.asarray(approx_range, dtype=np.float64)
            - CLIGHT * np.asarray(sat_clock, dtype=np.float64)
            + np.asarray(tropo, dtype=np.float64)
            + np.asarray(iono, dtype=np.float64))


def phase_known_term(approx_range, sat_clock, tropo, iono, windup, wavelength):
    """
    Modelled carrier phase (in metres) without ambiguity and receiver terms

    b = rho - c*dts + T - I + lambda*w

    The ionosphere advances the carrier, hence the sign flip with respect to
    the code known term. All inputs are already restricted to the
    phase-tracked satellites.

    Returns:
    --------
    b_phase : np.ndarray
        Known term for the phase rows (m)
    """
    return (np.asarray(approx_range, dtype=np.float64)
            - CLIGHT * np.asarray(sat_clock, dtype=np.float64)
            + np.asarray(tropo, dtype=np.float64)
            - np.asarray(iono, dtype=np.float64)
            + np.asarray(wavelength, dtype=np.float64) * np.asarray(windup, dtype=np.float64))


def known_term_vector(approx_range, sat_clock, tropo, iono, windup,
                      wavelength, phase_index) -> np.ndarray:
    """
    Stacked known-term vector b = [b_code; b_phase]

    Parameters:
    -----------
    approx_range, sat_clock, tropo, iono, windup : np.ndarray
        Per code satellite, shape (n_code,)
    wavelength : np.ndarray
        Per phase satellite (m), shape (n_phase,)
    phase_index : np.ndarray
        Indices of the phase satellites in the code list

    Returns:
    --------
    b : np.ndarray
        Shape (n_code + n_phase,)
    """
    idx = np.asarray(phase_index, dtype=int)
    approx_range = np.asarray(approx_range, dtype=np.float64)
    sat_clock = np.asarray(sat_clock, dtype=np.float64)
    tropo = np.asarray(tropo, dtype=np.float64)
    iono = np.asarray(iono, dtype=np.float64)
    windup = np.asarray(windup, dtype=np.float64)

    b_code = code_known_term(approx_range, sat_clock, tropo, iono)
    b_phase = phase_known_term(approx_range[idx], sat_clock[idx], tropo[idx],
                               iono[idx], windup[idx], wavelength)
    return np.concatenate([b_code, b_phase])


def observation_vector(pseudorange, phase, wavelength) -> np.ndarray:
    """
    Stacked observation vector y0 = [P; lambda * L]

    Parameters:
    -----------
    pseudorange : np.ndarray
        Code observations (m), shape (n_code,)
    phase : np.ndarray
        Phase observations of the phase satellites (cycles), shape (n_phase,)
    wavelength : np.ndarray
        Wavelengths of the phase satellites (m), shape (n_phase,)

    Returns:
    --------
    y0 : np.ndarray
        Shape (n_code + n_phase,), metres
    """
    phase_m = np.asarray(wavelength, dtype=np.float64) * np.asarray(phase, dtype=np.float64)
    return np.concatenate([np.asarray(pseudorange, dtype=np.float64), phase_m])
