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

"""Design matrix of the combined code/phase observation model.

Rows are ordered code first (one per code satellite) then phase (one per
phase satellite). Columns follow :class:`pylsa.core.data_structures.UnknownLayout`.

When several systems are present the numerically lowest tag is the clock
reference and gets no bias column. The choice is a convention; it only fixes
what each estimated inter-system bias is relative to.
"""

from typing import Tuple

import numpy as np

from ..core.constants import SYS_NONE
from ..core.data_structures import UnknownLayout


def select_bias_systems(code_systems, phase_index=None) -> Tuple[int, Tuple[int, ...]]:
    """
    Reference system and the systems that need an inter-system bias

    Parameters:
    -----------
    code_systems : array_like
        System tag of every code satellite (0 = unused)
    phase_index : array_like, optional
        Indices of the phase satellites in the code list

    Returns:
    --------
    reference : int
        Lowest non-zero tag present, SYS_NONE if there is none
    bias_systems : tuple[int, ...]
        Remaining non-zero tags, ascending
    """
    code_systems = np.asarray(code_systems, dtype=int)
    tags = code_systems
    if phase_index is not None and len(phase_index) > 0:
        tags = np.concatenate([code_systems, code_systems[np.asarray(phase_index, dtype=int)]])

    present = np.unique(tags[tags != SYS_NONE])
    if present.size == 0:
        return SYS_NONE, ()
    return int(present[0]), tuple(int(s) for s in present[1:])


def build_layout(code_systems, phase_index) -> UnknownLayout:
    """Unknown-vector layout for an epoch"""
    reference, bias_systems = select_bias_systems(code_systems, phase_index)
    return UnknownLayout(n_phase=len(phase_index),
                         reference_system=reference,
                         bias_systems=bias_systems)


def build_design_matrix(los, phase_index, wavelength, code_systems,
                        layout: UnknownLayout) -> np.ndarray:
    """
    Assemble the design matrix A (n x m)

    Parameters:
    -----------
    los : np.ndarray
        Line-of-sight unit vectors of the code satellites, shape (n_code, 3)
    phase_index : np.ndarray
        Indices of the phase satellites in the code list, shape (n_phase,)
    wavelength : np.ndarray
        Wavelengths of the phase satellites (m), shape (n_phase,)
    code_systems : array_like
        System tags of the code satellites
    layout : UnknownLayout
        Column layout

    Returns:
    --------
    A : np.ndarray
        Design matrix, shape (n_code + n_phase, layout.n_unknowns)
    """
    los = np.asarray(los, dtype=np.float64)
    phase_index = np.asarray(phase_index, dtype=int)
    code_systems = np.asarray(code_systems, dtype=int)

    n_code = los.shape[0]
    n_phase = len(phase_index)
    A = np.zeros((n_code + n_phase, layout.n_unknowns))

    # Position: negative direction cosines; phase rows reuse their satellite's
    A[:n_code, layout.position] = -los
    A[n_code:, layout.position] = -los[phase_index]

    # Ambiguities: -lambda on the satellite's own phase row
    rows = n_code + np.arange(n_phase)
    cols = layout.ambiguities.start + np.arange(n_phase)
    A[rows, cols] = -np.asarray(wavelength, dtype=np.float64)

    # Receiver clock (m)
    A[:, layout.clock] = 1.0

    # Inter-system bias indicators
    row_systems = np.concatenate([code_systems, code_systems[phase_index]])
    for col, system in zip(range(layout.isb.start, layout.isb.stop), layout.bias_systems):
        A[row_systems == system, col] = 1.0

    return A


def geometry_matrix(los, include_clock=False) -> np.ndarray:
    """
    Code-only geometry matrix used for dilution of precision

    Parameters:
    -----------
    los : np.ndarray
        Line-of-sight unit vectors, shape (n, 3)
    include_clock : bool
        Append the receiver clock column of ones

    Returns:
    --------
    G : np.ndarray
        Shape (n, 3) or (n, 4)
    """
    G = -np.asarray(los, dtype=np.float64)
    if include_clock:
        G = np.hstack([G, np.ones((G.shape[0], 1))])
    return G
