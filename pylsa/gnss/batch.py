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

"""Epoch-by-epoch processing of an observation sequence.

Every epoch is solved independently. Epochs that cannot be solved are
reported and dropped; the other epochs are unaffected.
"""

import concurrent.futures
from dataclasses import dataclass
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from ..core.constants import R2D, SOLQ_NONE
from ..core.data_structures import EpochObservations, Solution
from ..core.exceptions import EstimationError
from ..core.stats import EstimatorConfig
from ..logger import get_logger
from .code_phase_ls import CodePhaseLeastSquares

logger = get_logger(__name__)

SOLUTION_COLUMNS = [
    'epoch', 'time', 'status', 'x', 'y', 'z', 'lat', 'lon', 'height',
    'clock', 'n_code', 'n_phase', 'redundancy', 'sigma0',
    'std_e', 'std_n', 'std_u', 'pdop', 'hdop', 'vdop', 'error',
]


@dataclass
class EpochResult:
    """Outcome of one epoch

    Attributes
    ----------
    epoch : int
        Index of the epoch in the input sequence
    time : float or None
        Epoch time tag
    solution : Solution or None
        None when the epoch could not be solved
    error : str or None
        Reason the epoch was dropped
    """
    epoch: int
    time: Optional[float]
    solution: Optional[Solution] = None
    error: Optional[str] = None

    @property
    def solved(self) -> bool:
        return self.solution is not None


def _solve_one(estimator: CodePhaseLeastSquares, index: int,
               epoch: EpochObservations) -> EpochResult:
    try:
        solution = estimator.solve(epoch)
    except EstimationError as exc:
        logger.warning("Epoch %d (t=%s) dropped: %s: %s",
                       index, epoch.time, type(exc).__name__, exc)
        return EpochResult(epoch=index, time=epoch.time, error=f"{type(exc).__name__}: {exc}")

    logger.debug("Epoch %d (t=%s) solved: %d code, %d phase, redundancy %d",
                 index, epoch.time, solution.n_code, solution.n_phase, solution.redundancy)
    logger.trace("Epoch %d position %s clock %.3e s isb %s",
                 index, solution.position, solution.clock, solution.isb)
    return EpochResult(epoch=index, time=epoch.time, solution=solution)


def solve_epochs(epochs: Iterable[EpochObservations],
                 config: Optional[EstimatorConfig] = None,
                 compute_dop: bool = False,
                 max_workers: Optional[int] = None) -> List[EpochResult]:
    """
    Solve a sequence of epochs independently

    Parameters:
    -----------
    epochs : iterable of EpochObservations
        Epochs to process
    config : EstimatorConfig, optional
        Shared, read-only configuration
    compute_dop : bool
        Compute DOP for every solved epoch
    max_workers : int, optional
        Number of worker threads; None or 1 processes sequentially

    Returns:
    --------
    results : list[EpochResult]
        One result per input epoch, in input order
    """
    estimator = CodePhaseLeastSquares(config, compute_dop=compute_dop)
    epochs = list(epochs)

    if max_workers is None or max_workers <= 1:
        results = [_solve_one(estimator, i, epoch) for i, epoch in enumerate(epochs)]
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(executor.map(_solve_one, [estimator] * len(epochs),
                                        range(len(epochs)), epochs))

    n_solved = sum(1 for r in results if r.solved)
    logger.info("Processed %d epochs: %d solved, %d dropped",
                len(results), n_solved, len(results) - n_solved)
    return results


def solutions_to_dataframe(results: Iterable[EpochResult]) -> pd.DataFrame:
    """
    Tabulate epoch results

    Parameters:
    -----------
    results : iterable of EpochResult
        Output of :func:`solve_epochs`

    Returns:
    --------
    df : pd.DataFrame
        One row per epoch with columns ``SOLUTION_COLUMNS``. Latitude and
        longitude are in degrees, clock in seconds; quantities that are
        undefined for an epoch are NaN.
    """
    rows = []
    for result in results:
        row = dict.fromkeys(SOLUTION_COLUMNS, np.nan)
        row.update(epoch=result.epoch, time=result.time, status=SOLQ_NONE,
                   error=result.error)
        sol = result.solution
        if sol is not None:
            llh = sol.get_llh()
            row.update(
                status=sol.type,
                x=sol.position[0], y=sol.position[1], z=sol.position[2],
                lat=llh[0] * R2D, lon=llh[1] * R2D, height=llh[2],
                clock=sol.clock,
                n_code=sol.n_code, n_phase=sol.n_phase,
                redundancy=sol.redundancy,
            )
            if sol.sigma02 is not None:
                row['sigma0'] = np.sqrt(sol.sigma02)
            std_enu = sol.position_std_enu()
            if std_enu is not None:
                row.update(std_e=std_enu[0], std_n=std_enu[1], std_u=std_enu[2])
            if sol.dop is not None:
                row.update(pdop=sol.dop.pdop, hdop=sol.dop.hdop, vdop=sol.dop.vdop)
        rows.append(row)

    return pd.DataFrame(rows, columns=SOLUTION_COLUMNS)
