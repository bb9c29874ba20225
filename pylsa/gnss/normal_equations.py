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

"""Weighted normal equations

The observation covariance is never inverted explicitly. With Qyy = L Lᵀ
(Cholesky), the model is whitened as Aw = L⁻¹A, lw = L⁻¹(y0 - b), so that
N = AᵀQyy⁻¹A = AwᵀAw and AᵀQyy⁻¹(y0 - b) = Awᵀlw. N is then solved with its
own Cholesky factorisation.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from scipy.linalg import cho_factor, cho_solve, cholesky, solve_triangular

from ..core.exceptions import InputError, SingularNormalMatrixError
from ..core.stats import SINGULAR_TOL


@dataclass
class LeastSquaresFit:
    """Factorised weighted least-squares problem and its solution

    Attributes
    ----------
    x_hat : np.ndarray
        Estimated unknown vector, shape (m,)
    N : np.ndarray
        Normal matrix AᵀWA, shape (m, m)
    n_factor : tuple
        ``scipy.linalg.cho_factor`` output for N
    q_factor : np.ndarray
        Lower Cholesky factor of the observation covariance
    rcond : float
        Reciprocal condition number of the Jacobi-scaled normal matrix
    """
    x_hat: np.ndarray
    N: np.ndarray
    n_factor: Tuple[np.ndarray, bool]
    q_factor: np.ndarray
    rcond: float

    @property
    def n_unknowns(self) -> int:
        return self.N.shape[0]

    def normal_inverse(self) -> np.ndarray:
        """N⁻¹ through the Cholesky factor"""
        return cho_solve(self.n_factor, np.eye(self.n_unknowns))

    def whiten(self, v) -> np.ndarray:
        """L⁻¹v, so that ||L⁻¹v||² = vᵀWv"""
        return solve_triangular(self.q_factor, np.asarray(v, dtype=np.float64), lower=True)

    def weighted_norm2(self, v) -> float:
        """vᵀWv"""
        vw = self.whiten(v)
        return float(vw @ vw)


def scaled_rcond(N: np.ndarray) -> float:
    """
    Reciprocal 2-norm condition number of N after Jacobi scaling

    Columns of the code/phase model differ in units and weight by several
    orders of magnitude; scaling by the diagonal makes the test reflect rank
    deficiency rather than units.
    """
    d = np.sqrt(np.diag(N))
    if np.any(~np.isfinite(d)) or np.any(d <= 0.0):
        return 0.0
    Ns = N / np.outer(d, d)
    s = np.linalg.svd(Ns, compute_uv=False)
    if s[0] <= 0.0:
        return 0.0
    return float(s[-1] / s[0])


def solve_normal_equations(A, Qyy, y0, b, tolerance=SINGULAR_TOL) -> LeastSquaresFit:
    """
    Solve x̂ = (AᵀWA)⁻¹AᵀW(y0 - b) with W = Qyy⁻¹

    Parameters:
    -----------
    A : np.ndarray
        Design matrix, shape (n, m)
    Qyy : np.ndarray
        Observation covariance, shape (n, n), symmetric positive definite
    y0 : np.ndarray
        Observation vector, shape (n,)
    b : np.ndarray
        Known-term vector, shape (n,)
    tolerance : float
        Minimum accepted reciprocal condition number of the scaled normal
        matrix

    Returns:
    --------
    fit : LeastSquaresFit

    Raises:
    -------
    SingularNormalMatrixError
        Fewer observations than unknowns, or N not invertible within tolerance
    InputError
        Qyy not positive definite, or non-finite A, Qyy or y0 - b
    """
    A = np.asarray(A, dtype=np.float64)
    n, m = A.shape

    if n < m:
        raise SingularNormalMatrixError(
            f"Not enough observations: {n} observations for {m} unknowns",
            n_obs=n, n_unknowns=m)

    try:
        L = cholesky(np.asarray(Qyy, dtype=np.float64), lower=True)
    except np.linalg.LinAlgError as exc:
        raise InputError("Observation covariance is not positive definite") from exc
    except ValueError as exc:
        raise InputError("Observation covariance is not finite") from exc

    misclosure = np.asarray(y0, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    try:
        Aw = solve_triangular(L, A, lower=True)
        lw = solve_triangular(L, misclosure, lower=True)
    except ValueError as exc:
        raise InputError("Design matrix or misclosure vector is not finite") from exc

    N = Aw.T @ Aw
    rcond = scaled_rcond(N)
    if rcond < tolerance:
        raise SingularNormalMatrixError(
            f"Normal matrix is singular (rcond={rcond:.3e}, {n} observations, {m} unknowns)",
            n_obs=n, n_unknowns=m, rcond=rcond)

    try:
        n_factor = cho_factor(N, lower=True)
    except np.linalg.LinAlgError as exc:
        raise SingularNormalMatrixError(
            "Normal matrix is not positive definite",
            n_obs=n, n_unknowns=m, rcond=rcond) from exc

    x_hat = cho_solve(n_factor, Aw.T @ lw)

    return LeastSquaresFit(x_hat=x_hat, N=N, n_factor=n_factor, q_factor=L, rcond=rcond)
