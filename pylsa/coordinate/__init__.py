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

"""Coordinate transformation utilities

Geodetic/ECEF conversions and the ECEF to East-North-Up rotations used to
express position covariances and DOP in the local frame.
"""

from .transforms import (
    compute_rotation_matrix_enu,
    covecef2enu,
    ecef2enu,
    ecef2llh,
    global2local_cov,
    llh2ecef,
)
