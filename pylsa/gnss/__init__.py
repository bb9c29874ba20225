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

"""GNSS estimation module.

Single-epoch weighted least-squares positioning from pseudorange and
carrier-phase observations of one or more constellations.

Key Components:
- Geometry: line-of-sight vectors from the approximate receiver position
- Design matrix: position, float ambiguity, clock and inter-system bias columns
- Observation model: code and phase known terms and observation vectors
- Stochastic model: elevation/SNR cofactors and block-diagonal covariance
- Normal equations: Cholesky-based weighted solution
- Diagnostics: residuals, unit-weight variance, parameter covariance
- DOP: geometry-only PDOP/HDOP/VDOP
- Batch: independent processing of epoch sequences

Examples:
    >>> from pylsa.gnss import solve_epoch
    >>> sol = solve_epoch(epoch, config, compute_dop=True)
    >>> sol.position, sol.clock, sol.isb, sol.dop.pdop
"""

from .batch import EpochResult, solutions_to_dataframe, solve_epochs
from .code_phase_ls import CodePhaseLeastSquares, code_phase_least_squares, solve_epoch
from .dop import compute_dop
from .weighting import CofactorModel, WeightingModel

__all__ = [
    'code_phase_least_squares',
    'solve_epoch',
    'CodePhaseLeastSquares',
    'compute_dop',
    'CofactorModel',
    'WeightingModel',
    'solve_epochs',
    'solutions_to_dataframe',
    'EpochResult',
]
