#!/usr/bin/env python3
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
Stochastic Model
================

Elevation and SNR dependent cofactors (relative variances) for code and
phase observations, and the block-diagonal observation covariance built
from them.
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np

from ..core.exceptions import InputError
from ..core.stats import ELEA, MIN_ELEVATION, SNR_0, SNR_1, SNR_A, SNR_AMP


class WeightingModel(Enum):
    """Cofactor model types"""
    EQUAL = "equal"  # Unit cofactors
    ELEVATION = "elevation"  # 1 / sin^2(el)
    SNR = "snr"  # SNR-only
    ELEVATION_SNR = "elevation_snr"  # Elevation x SNR
    EXPONENTIAL = "exponential"  # (1 + exp(-el / elea))^2


@dataclass(frozen=True)
class CofactorModel:
    """
    Elevation and SNR dependent cofactors for GNSS observations

    Instances are callables mapping elevation (degrees) and SNR (dB-Hz)
    arrays to one relative variance per satellite. Larger values mean less
    weight.

    Attributes
    ----------
    model : WeightingModel
        Model to use
    min_elevation : float
        Elevations below this value (degrees) are clamped before the
        elevation models are evaluated
    snr_a, snr_0, snr_1, snr_amp : float
        SNR weighting function parameters (dB-Hz): slope, lower bound,
        saturation level and cofactor value at the lower bound
    elea : float
        Decay constant of the exponential elevation model (degrees)
    """
    model: WeightingModel = WeightingModel.ELEVATION
    min_elevation: float = MIN_ELEVATION
    snr_a: float = SNR_A
    snr_0: float = SNR_0
    snr_1: float = SNR_1
    snr_amp: float = SNR_AMP
    elea: float = ELEA

    def __post_init__(self):
        if not isinstance(self.model, WeightingModel):
            object.__setattr__(self, 'model', WeightingModel(self.model))
        if not 0.0 < self.min_elevation <= 90.0:
            raise ValueError(f"min_elevation must be in (0, 90], got {self.min_elevation}")
        if self.snr_1 <= self.snr_0:
            raise ValueError("snr_1 must be greater than snr_0")
        if self.snr_a <= 0 or self.elea <= 0:
            raise ValueError("snr_a and elea must be positive")

    def __call__(self, elevation, snr) -> np.ndarray:
        """
        Compute per-satellite cofactors

        Parameters
        ----------
        elevation : array_like
            Satellite elevations (degrees)
        snr : array_like
            Signal-to-noise ratios (dB-Hz)

        Returns
        -------
        q : np.ndarray
            Relative variances, same length as ``elevation``
        """
        elevation = np.atleast_1d(np.asarray(elevation, dtype=np.float64))
        snr = np.atleast_1d(np.asarray(snr, dtype=np.float64))

        if self.model == WeightingModel.EQUAL:
            return np.ones_like(elevation)
        if self.model == WeightingModel.ELEVATION:
            return self._sine_cofactor(elevation)
        if self.model == WeightingModel.EXPONENTIAL:
            return self._exponential_cofactor(elevation)
        if self.model == WeightingModel.SNR:
            return self._snr_cofactor(snr)
        return self._sine_cofactor(elevation) * self._snr_cofactor(snr)

    def _clamped(self, elevation: np.ndarray) -> np.ndarray:
        return np.clip(elevation, self.min_elevation, 90.0)

    def _sine_cofactor(self, elevation: np.ndarray) -> np.ndarray:
        """
        Sine elevation model

        q = 1 / sin^2(elevation)
        """
        return 1.0 / np.sin(np.radians(self._clamped(elevation))) ** 2

    def _exponential_cofactor(self, elevation: np.ndarray) -> np.ndarray:
        """
        Exponential elevation model

        q = (1 + exp(-elevation / elea))^2
        """
        return (1.0 + np.exp(-self._clamped(elevation) / self.elea)) ** 2

    def _snr_cofactor(self, snr: np.ndarray) -> np.ndarray:
        """
        SNR weighting function

        Equals ``snr_amp`` at ``snr_0`` and 1 at and above ``snr_1``.
        """
        a, s0, s1, amp = self.snr_a, self.snr_0, self.snr_1, self.snr_amp
        q = 10.0 ** (-(snr - s1) / a) * (
            (amp / 10.0 ** (-(s0 - s1) / a) - 1.0) / (s0 - s1) * (snr - s1) + 1.0)
        q = np.where(snr >= s1, 1.0, q)
        # Below s0 the linear term can go negative; hold the value at s0
        return np.where(snr <= s0, amp, q)


def cofactor_matrix(elevation, snr, cofactor_model) -> np.ndarray:
    """
    Code cofactor matrix Q for all code satellites

    Parameters
    ----------
    elevation : array_like
        Satellite elevations (degrees)
    snr : array_like
        Signal-to-noise ratios (dB-Hz)
    cofactor_model : callable
        ``(elevation, snr) -> relative variances``

    Returns
    -------
    Q : np.ndarray
        Diagonal cofactor matrix, shape (n, n)
    """
    n = len(np.atleast_1d(elevation))
    q = np.asarray(cofactor_model(elevation, snr), dtype=np.float64).reshape(-1)
    if q.shape != (n,):
        raise InputError(f"Cofactor model returned {q.shape[0]} values for {n} satellites")
    if not np.all(np.isfinite(q)) or np.any(q <= 0):
        raise InputError(f"Cofactors must be positive and finite, got {q}")
    return np.diag(q)


def observation_covariance(Q, phase_index, sigma2_code, sigma2_phase) -> np.ndarray:
    """
    Block-diagonal covariance of the stacked code/phase observation vector

    Parameters
    ----------
    Q : np.ndarray
        Code cofactor matrix, shape (n_code, n_code)
    phase_index : np.ndarray
        Indices of the phase satellites in the code list
    sigma2_code, sigma2_phase : float
        A priori variances of code and phase observations (m²)

    Returns
    -------
    Qyy : np.ndarray
        Shape (n_code + n_phase, n_code + n_phase)
    """
    Q = np.asarray(Q, dtype=np.float64)
    idx = np.asarray(phase_index, dtype=int)
    n_code = Q.shape[0]
    n = n_code + len(idx)

    Qyy = np.zeros((n, n))
    Qyy[:n_code, :n_code] = sigma2_code * Q
    Qyy[n_code:, n_code:] = sigma2_phase * Q[np.ix_(idx, idx)]
    return Qyy
