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

"""Exceptions raised by the single-epoch estimator.

All of them derive from ``ValueError`` so callers that already guard solver
calls with ``except ValueError`` keep working.
"""


class EstimationError(ValueError):
    """Base class for failures of a single-epoch solve"""


class InputError(EstimationError):
    """Observation arrays are inconsistent (shapes, satellite lists, wavelengths)"""


class DegenerateGeometryError(EstimationError):
    """Zero or non-finite receiver-satellite range, or non-finite coordinates.

    Parameters
    ----------
    message : str
        Human readable description
    satellites : list, optional
        Satellite ids responsible for the failure
    """

    def __init__(self, message, satellites=None):
        super().__init__(message)
        self.satellites = list(satellites) if satellites is not None else []


class SingularNormalMatrixError(EstimationError):
    """Normal matrix cannot be inverted within the configured tolerance.

    Parameters
    ----------
    message : str
        Human readable description
    n_obs : int
        Number of observations
    n_unknowns : int
        Number of unknown parameters
    rcond : float, optional
        Reciprocal condition number of the scaled normal matrix, when known
    """

    def __init__(self, message, n_obs=0, n_unknowns=0, rcond=None):
        super().__init__(message)
        self.n_obs = n_obs
        self.n_unknowns = n_unknowns
        self.rcond = rcond
