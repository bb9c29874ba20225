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

"""Coordinate transformation utilities"""


import numpy as np

from ..core.constants import E2_WGS84, RE_WGS84


def ecef2llh(xyz: np.ndarray) -> np.ndarray:
    """Convert ECEF coordinates to geodetic coordinates

    Parameters
    ----------
    xyz : np.ndarray
        ECEF coordinates [x, y, z] in meters

    Returns
    -------
    np.ndarray
        Geodetic coordinates [lat, lon, height]:
        - lat: latitude in radians (-π/2 to π/2)
        - lon: longitude in radians (-π to π)
        - height: height above WGS84 ellipsoid in meters

    Notes
    -----
    Iterates on the prime vertical radius until the latitude update falls
    below 1e-12 rad, which takes a handful of iterations for terrestrial
    points. The poles are handled through the z-axis branch.

    Examples
    --------
    >>> ecef = np.array([-3961904.9, 3348993.8, 3698211.8])  # Tokyo approx.
    >>> lat, lon, h = ecef2llh(ecef)
    """
    x, y, z = float(xyz[0]), float(xyz[1]), float(xyz[2])
    p = np.hypot(x, y)

    if p < 1e-9:
        # On the rotation axis: longitude undefined, use zero
        lat = np.copysign(np.pi / 2, z) if z != 0.0 else 0.0
        b = RE_WGS84 * np.sqrt(1.0 - E2_WGS84)
        return np.array([lat, 0.0, abs(z) - b])

    lon = np.arctan2(y, x)
    lat = np.arctan2(z, p * (1.0 - E2_WGS84))
    for _ in range(10):
        sin_lat = np.sin(lat)
        N = RE_WGS84 / np.sqrt(1.0 - E2_WGS84 * sin_lat**2)
        lat_new = np.arctan2(z + E2_WGS84 * N * sin_lat, p)
        if abs(lat_new - lat) < 1e-12:
            lat = lat_new
            break
        lat = lat_new

    sin_lat = np.sin(lat)
    N = RE_WGS84 / np.sqrt(1.0 - E2_WGS84 * sin_lat**2)
    cos_lat = np.cos(lat)
    if abs(cos_lat) > 1e-10:
        h = p / cos_lat - N
    else:
        h = abs(z) - N * (1.0 - E2_WGS84)

    return np.array([lat, lon, h])


def llh2ecef(llh: np.ndarray) -> np.ndarray:
    """Convert geodetic coordinates to ECEF coordinates

    Parameters
    ----------
    llh : np.ndarray
        Geodetic coordinates [lat (rad), lon (rad), height (m)]

    Returns
    -------
    np.ndarray
        ECEF coordinates [x, y, z] in meters
    """
    lat, lon, h = llh[0], llh[1], llh[2]
    sin_lat = np.sin(lat)
    cos_lat = np.cos(lat)

    N = RE_WGS84 / np.sqrt(1.0 - E2_WGS84 * sin_lat**2)

    return np.array([
        (N + h) * cos_lat * np.cos(lon),
        (N + h) * cos_lat * np.sin(lon),
        (N * (1.0 - E2_WGS84) + h) * sin_lat,
    ])


def compute_rotation_matrix_enu(llh: np.ndarray) -> np.ndarray:
    """Compute rotation matrix from ECEF to ENU coordinates

    Parameters
    ----------
    llh : np.ndarray
        Geodetic coordinates [lat, lon, height]; only lat/lon (rad) are used

    Returns
    -------
    np.ndarray
        Rotation matrix R (3x3) with v_enu = R @ v_ecef
    """
    lat, lon = llh[0], llh[1]
    sin_lat = np.sin(lat)
    cos_lat = np.cos(lat)
    sin_lon = np.sin(lon)
    cos_lon = np.cos(lon)

    return np.array([
        [-sin_lon, cos_lon, 0.0],
        [-sin_lat * cos_lon, -sin_lat * sin_lon, cos_lat],
        [cos_lat * cos_lon, cos_lat * sin_lon, sin_lat]
    ])


def ecef2enu(xyz: np.ndarray, org_llh: np.ndarray) -> np.ndarray:
    """Convert ECEF to local ENU coordinates relative to an origin

    Parameters
    ----------
    xyz : np.ndarray
        ECEF coordinates [x, y, z] in meters
    org_llh : np.ndarray
        Origin geodetic coordinates [lat (rad), lon (rad), height (m)]

    Returns
    -------
    np.ndarray
        ENU coordinates [east, north, up] in meters
    """
    R = compute_rotation_matrix_enu(org_llh)
    return R @ (np.asarray(xyz, dtype=np.float64) - llh2ecef(org_llh))


def covecef2enu(llh: np.ndarray, P_ecef: np.ndarray) -> np.ndarray:
    """Transform covariance matrix from ECEF to ENU coordinate system

    Parameters
    ----------
    llh : np.ndarray
        Geodetic coordinates [lat (rad), lon (rad), height (m)] of the rotation
    P_ecef : np.ndarray
        Covariance matrix in ECEF coordinates (3x3)

    Returns
    -------
    np.ndarray
        Covariance matrix in ENU coordinates (3x3), P_enu = R P_ecef Rᵀ
    """
    R = compute_rotation_matrix_enu(llh)
    return R @ np.asarray(P_ecef, dtype=np.float64) @ R.T


def global2local_cov(cov_xyz: np.ndarray, pos_xyz: np.ndarray) -> np.ndarray:
    """Rotate an ECEF covariance to the East-North-Up frame at an ECEF position

    This is the default local-frame transform used by the DOP calculator.

    Parameters
    ----------
    cov_xyz : np.ndarray
        Covariance (or cofactor) matrix in ECEF (3x3)
    pos_xyz : np.ndarray
        ECEF position defining the local frame (m)

    Returns
    -------
    np.ndarray
        Covariance matrix in ENU (3x3)
    """
    return covecef2enu(ecef2llh(pos_xyz), cov_xyz)
