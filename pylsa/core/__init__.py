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

"""Core Module.

Fundamental components shared by the estimator:

- **Constants**: speed of light, carrier frequencies/wavelengths, WGS84
  parameters and the GNSS system tags used for inter-system biases
- **Data Structures**: per-satellite observations, epoch containers, the
  unknown-vector layout, DOP records and the epoch solution
- **Statistical Parameters**: a priori code/phase variances, stochastic
  model parameters and the immutable :class:`EstimatorConfig`
- **Exceptions**: the error kinds a single-epoch solve can raise

Example Usage:
    >>> from pylsa.core import *
    >>>
    >>> config = EstimatorConfig.from_dict({'sigma_code': 0.5, 'weighting': 'snr'})
    >>> obs = SatelliteObservation(sat=5, system=SYS_GPS,
    ...                            sat_pos=np.array([15600e3, 7540e3, 20140e3]),
    ...                            pseudorange=21000000.0, approx_range=20999990.0)
"""

from .constants import *
from .data_structures import *
from .exceptions import *
from .stats import *
