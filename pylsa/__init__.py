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

"""
PyLSA - GNSS Least-Squares Adjustment Library

Single-epoch weighted least-squares estimation of receiver position, clock,
inter-system biases and float carrier-phase ambiguities from multi-system
pseudorange and carrier-phase observations, with covariance and DOP
diagnostics.
"""

__version__ = "1.0.0"
__author__ = "PyLSA Development Team"
__title__ = "pylsa"
__description__ = "Single-epoch GNSS code/phase least-squares estimation"

from .core import *
from .coordinate import *
from .gnss import *
