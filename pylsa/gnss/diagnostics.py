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

"""Post-fit residuals, unit-weight variance and parameter covariance"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..core.constants import CLIGHT
from ..core.data_structures import UnknownLayout
from .normal_equations import LeastSquaresFit


@dataclass
class PostFitDiagnostics:
    """Residual analysis of a solved epoch

    Attributes
    ----------
    residuals : np.ndarray
        v = y0 - (A x̂ + b), shape (n,)
    redundancy : int
        n - m
    sigma02 : float or None
        Unit-weight variance vᵀWv / (n - m); None when n == m
    cxx : np.ndarray or None
        Parameter covariance σ0² N⁻¹; None when n == m
    """
    residuals: np.ndarray
    redundancy: int
    sigma02: Optional[float] = None
    cxx: Optional[np.ndarray] = None


@dataclass
class CovarianceBlocks:
    """Parameter covariance split by unknown group, clock terms in seconds"""
    position: np.ndarray
    ambiguities: np.ndarray
    clock: float
    isb: np.ndarray


def post_fit_diagnostics(fit: LeastSquaresFit, A, y0, b) -> PostFitDiagnostics:
    """
    Compute residuals and, with positive redundancy, the a posteriori covariance

    Parameters:
    -----------
    fit : LeastSquaresFit
        Solved normal equations
    A : np.ndarray
        Design matrix, shape (n, m)
    y0, b : np.ndarray
        Observation and known-term vectors, shape (n,)

    Returns:
    --------
    diagnostics : PostFitDiagnostics
    """
    A = np.asarray(A, dtype=np.float64)
    residuals = np.asarray(y0, dtype=np.float64) - (A @ fit.x_hat + np.asarray(b, dtype=np.float64))
    redundancy = A.shape[0] - A.shape[1]

    if redundancy <= 0:
        return PostFitDiagnostics(residuals=residuals, redundancy=redundancy)

    sigma02 = fit.weighted_norm2(residuals) / redundancy
    cxx = sigma02 * fit.normal_inverse()
    # Symmetrise against round-off
    cxx = 0.5 * (cxx + cxx.T)
    return PostFitDiagnostics(residuals=residuals, redundancy=redundancy,
                              sigma02=sigma02, cxx=cxx)


def covariance_blocks(cxx, layout: UnknownLayout) -> CovarianceBlocks:
    """
    Slice the parameter covariance into position, ambiguity, clock and ISB parts

    Clock and inter-system-bias terms are converted from m² to s².
    """
    cxx = np.asarray(cxx, dtype=np.float64)
    amb = layout.ambiguities
    isb = layout.isb
    return CovarianceBlocks(
        position=cxx[layout.position, layout.position].copy(),
        ambiguities=cxx[amb, amb].copy(),
        clock=float(cxx[layout.clock, layout.clock]) / CLIGHT**2,
        isb=cxx[isb, isb] / CLIGHT**2,
    )
