#!/usr/bin/env python
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
Estimator Statistical Parameters
================================

A priori observation variances, stochastic-model parameters and the
immutable configuration value handed to every single-epoch solve.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict

import numpy as np

# ============================================================================
# A PRIORI OBSERVATION ERRORS
# ============================================================================
SIGMA_CODE = 0.6         # Code (pseudorange) a priori std (m)
SIGMA_PHASE = 0.003      # Carrier phase a priori std (m)

SIGMA2_CODE = SIGMA_CODE ** 2     # 0.36 m²
SIGMA2_PHASE = SIGMA_PHASE ** 2   # 9e-6 m²

# ============================================================================
# STOCHASTIC MODEL
# ============================================================================
WEIGHTING = "elevation"  # Default cofactor model
MIN_ELEVATION = 1.0      # Elevation clamp for the elevation models (deg)

# SNR weighting function (dB-Hz)
SNR_A = 30.0             # Slope parameter a
SNR_0 = 10.0             # Lower SNR bound s0
SNR_1 = 50.0             # SNR above which the cofactor is 1
SNR_AMP = 30.0           # Cofactor value at s0 (A)

DEFAULT_SNR_PARAMS = [SNR_A, SNR_0, SNR_1, SNR_AMP]

# Exponential elevation model
ELEA = 10.0              # Elevation decay constant (deg)

# ============================================================================
# NUMERICAL TOLERANCES
# ============================================================================
SINGULAR_TOL = 1e-12     # Min reciprocal condition of the scaled normal matrix

# ============================================================================
# DEFAULT CONFIGURATIONS
# ============================================================================

DEFAULT_STATS = {
    'sigma_code': SIGMA_CODE,
    'sigma_phase': SIGMA_PHASE,
    'weighting': WEIGHTING,
    'min_elevation': MIN_ELEVATION,
    'snr_params': DEFAULT_SNR_PARAMS,
    'elea': ELEA,
    'singular_tolerance': SINGULAR_TOL,
}

# Geodetic-grade receivers with clean phase tracking
HIGH_PRECISION_STATS = {
    'sigma_code': 0.3,
    'sigma_phase': 0.002,
    'weighting': 'elevation_snr',
    'min_elevation': 5.0,
}

# Mass-market receivers, urban environments
ROBUST_STATS = {
    'sigma_code': 3.0,
    'sigma_phase': 0.01,
    'weighting': 'snr',
    'min_elevation': 1.0,
}


def _default_cofactor_model():
    from ..gnss.weighting import CofactorModel
    return CofactorModel()


@dataclass(frozen=True)
class EstimatorConfig:
    """Configuration of the single-epoch code/phase estimator.

    The value is immutable: build it once before processing and pass it to
    every call. Use :meth:`with_overrides` to derive a modified copy.

    Attributes
    ----------
    sigma2_code : float
        A priori variance of code observations (m²)
    sigma2_phase : float
        A priori variance of phase observations (m²)
    cofactor_model : callable
        Maps ``(elevation_deg, snr_dbhz)`` arrays to per-satellite relative
        variances (see :class:`pylsa.gnss.weighting.CofactorModel`)
    singular_tolerance : float
        Minimum reciprocal condition number accepted for the Jacobi-scaled
        normal matrix
    """
    sigma2_code: float = SIGMA2_CODE
    sigma2_phase: float = SIGMA2_PHASE
    cofactor_model: Callable[[np.ndarray, np.ndarray], np.ndarray] = field(
        default_factory=_default_cofactor_model)
    singular_tolerance: float = SINGULAR_TOL

    def __post_init__(self):
        for name in ('sigma2_code', 'sigma2_phase'):
            value = getattr(self, name)
            if not np.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be positive and finite, got {value}")
        if not callable(self.cofactor_model):
            raise ValueError("cofactor_model must be callable")
        if not 0 < self.singular_tolerance < 1:
            raise ValueError(
                f"singular_tolerance must be in (0, 1), got {self.singular_tolerance}")

    @property
    def sigma_code(self) -> float:
        return float(np.sqrt(self.sigma2_code))

    @property
    def sigma_phase(self) -> float:
        return float(np.sqrt(self.sigma2_phase))

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'EstimatorConfig':
        """Build a configuration from a dictionary

        Missing keys fall back to :data:`DEFAULT_STATS`. Standard deviations
        (``sigma_code``/``sigma_phase``) and variances
        (``sigma2_code``/``sigma2_phase``) are both accepted; variances win.

        Example config:
        {
            'sigma_code': 0.6,
            'sigma_phase': 0.003,
            'weighting': 'elevation_snr',
            'min_elevation': 5.0,
            'snr_params': [30.0, 10.0, 50.0, 30.0],
        }
        """
        from ..gnss.weighting import CofactorModel, WeightingModel

        unknown = set(config) - set(DEFAULT_STATS) - {'sigma2_code', 'sigma2_phase'}
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

        merged = dict(DEFAULT_STATS)
        merged.update(config)

        sigma2_code = merged.get('sigma2_code', merged['sigma_code'] ** 2)
        sigma2_phase = merged.get('sigma2_phase', merged['sigma_phase'] ** 2)

        snr_a, snr_0, snr_1, snr_amp = merged['snr_params']
        model = CofactorModel(
            model=WeightingModel(merged['weighting']),
            min_elevation=merged['min_elevation'],
            snr_a=snr_a,
            snr_0=snr_0,
            snr_1=snr_1,
            snr_amp=snr_amp,
            elea=merged['elea'],
        )
        return cls(sigma2_code=sigma2_code,
                   sigma2_phase=sigma2_phase,
                   cofactor_model=model,
                   singular_tolerance=merged['singular_tolerance'])

    def with_overrides(self, **kwargs) -> 'EstimatorConfig':
        """Return a copy with the given fields replaced"""
        return replace(self, **kwargs)
