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

"""Dilution of Precision (DOP) of the code geometry"""

import numpy as np
from scipy.linalg import cho_factor, cho_solve

from ..coordinate.transforms import global2local_cov
from ..core.data_structures import DOP
from ..core.exceptions import SingularNormalMatrixError
from ..core.stats import SINGULAR_TOL
from .design_matrix import geometry_matrix
from .normal_equations import scaled_rcond


def compute_dop(los, position, local_cov_transform=None, include_clock=False) -> DOP:
    """
    Compute PDOP, HDOP and VDOP from the unweighted code geometry

    Parameters:
    -----------
    los : np.ndarray
        Line-of-sight unit vectors of the code satellites, shape (n, 3)
    position : np.ndarray
        ECEF position at which the local ENU frame is defined (m)
    local_cov_transform : callable, optional
        ``(cov_xyz, position) -> cov_enu`` (default: ``global2local_cov``)
    include_clock : bool
        Keep a receiver clock column in the geometry before taking the 3x3
        position block. Default is the position-only geometry.

    Returns:
    --------
    dop : DOP

    Raises:
    -------
    SingularNormalMatrixError
        Geometry matrix is rank deficient
    """
    if local_cov_transform is None:
        local_cov_transform = global2local_cov

    G = geometry_matrix(los, include_clock=include_clock)
    if G.shape[0] < G.shape[1]:
        raise SingularNormalMatrixError(
            f"Not enough satellites for DOP: {G.shape[0]}",
            n_obs=G.shape[0], n_unknowns=G.shape[1])

    GtG = G.T @ G
    rcond = scaled_rcond(GtG)
    if rcond < SINGULAR_TOL:
        raise SingularNormalMatrixError(
            f"Geometry matrix is rank deficient (rcond={rcond:.3e})",
            n_obs=G.shape[0], n_unknowns=G.shape[1], rcond=rcond)

    try:
        factor = cho_factor(GtG, lower=True)
    except np.linalg.LinAlgError as exc:
        raise SingularNormalMatrixError(
            "Geometry matrix is rank deficient",
            n_obs=G.shape[0], n_unknowns=G.shape[1]) from exc

    cov_xyz = cho_solve(factor, np.eye(G.shape[1]))[:3, :3]
    cov_enu = np.asarray(local_cov_transform(cov_xyz, position), dtype=np.float64)

    pdop = np.sqrt(max(np.trace(cov_xyz), 0.0))
    hdop = np.sqrt(max(cov_enu[0, 0] + cov_enu[1, 1], 0.0))
    vdop = np.sqrt(max(cov_enu[2, 2], 0.0))

    return DOP(pdop=float(pdop), hdop=float(hdop), vdop=float(vdop),
               cov_xyz=cov_xyz, cov_enu=cov_enu)
