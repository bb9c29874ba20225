"""Shared fixtures: synthetic epochs generated from a known truth"""

import numpy as np
import pytest

from pylsa.coordinate.transforms import compute_rotation_matrix_enu, llh2ecef
from pylsa.core.constants import CLIGHT, LAM_L1, SYS_GPS
from pylsa.core.data_structures import EpochObservations, SatelliteObservation

# Azimuth / elevation (degrees) of a well spread constellation
SKY = [
    (0.0, 85.0), (45.0, 30.0), (90.0, 50.0), (135.0, 20.0), (180.0, 60.0),
    (225.0, 35.0), (270.0, 25.0), (315.0, 45.0), (20.0, 15.0), (200.0, 12.0),
    (110.0, 70.0), (300.0, 18.0),
]

TRUE_LLH = np.array([np.radians(35.7), np.radians(139.7), 40.0])
SAT_RANGE = 2.2e7


def satellite_positions(receiver, sky):
    """ECEF satellite positions at SAT_RANGE along the given azimuth/elevation"""
    R = compute_rotation_matrix_enu(TRUE_LLH)
    positions = []
    for az, el in sky:
        az_r, el_r = np.radians(az), np.radians(el)
        enu = np.array([np.cos(el_r) * np.sin(az_r),
                        np.cos(el_r) * np.cos(az_r),
                        np.sin(el_r)])
        positions.append(receiver + SAT_RANGE * (R.T @ enu))
    return np.array(positions)


def make_synthetic_epoch(n_sats=8, systems=None, n_phase=None, clock=1.0e-5,
                         isb=None, ambiguities=None, approx_offset=(12.0, -7.0, 9.0),
                         code_noise=0.0, phase_noise=0.0, seed=0, time=None):
    """
    Build an epoch whose observations follow the estimator's model exactly

    Parameters
    ----------
    n_sats : int
        Number of code satellites (at most len(SKY))
    systems : list of int, optional
        System tag per satellite (default: all GPS)
    n_phase : int, optional
        Number of phase-tracked satellites, the first ``n_phase`` ones
        (default: all)
    clock : float
        True receiver clock offset (s)
    isb : dict, optional
        True inter-system bias per system tag (s)
    ambiguities : array_like, optional
        True ambiguities of the phase satellites (cycles)
    approx_offset : array_like
        Approximate minus true receiver position (m)
    code_noise, phase_noise : float
        Standard deviation of white noise added to code / phase (m)

    Returns
    -------
    epoch : EpochObservations
    truth : dict
    """
    rng = np.random.default_rng(seed)
    sky = SKY[:n_sats]
    if systems is None:
        systems = [SYS_GPS] * n_sats
    if n_phase is None:
        n_phase = n_sats
    isb = isb or {}
    if ambiguities is None:
        ambiguities = rng.integers(-50, 50, size=n_phase).astype(float) + 0.25

    true_pos = llh2ecef(TRUE_LLH)
    approx_pos = true_pos + np.asarray(approx_offset, dtype=float)
    sat_pos = satellite_positions(true_pos, sky)

    satellites = []
    for i, (az, el) in enumerate(sky):
        rho_true = np.linalg.norm(sat_pos[i] - true_pos)
        approx_range = np.linalg.norm(sat_pos[i] - approx_pos)
        sat_clock = 1.0e-4 * (i + 1) / n_sats
        tropo = 2.3 / np.sin(np.radians(el))
        iono = 1.5 + 0.1 * i
        windup = 0.05 * i
        wavelength = LAM_L1
        bias = CLIGHT * (clock + isb.get(systems[i], 0.0))

        common = rho_true - CLIGHT * sat_clock + tropo + bias
        pseudorange = common + iono + code_noise * rng.standard_normal()
        phase = None
        if i < n_phase:
            phase_m = common - iono + phase_noise * rng.standard_normal()
            phase = phase_m / wavelength + windup - ambiguities[i]

        satellites.append(SatelliteObservation(
            sat=i + 1, system=systems[i], sat_pos=sat_pos[i],
            pseudorange=pseudorange, approx_range=approx_range, phase=phase,
            snr=35.0 + el / 5.0, elevation=el, sat_clock=sat_clock,
            tropo=tropo, iono=iono, windup=windup, wavelength=wavelength))

    truth = {
        'position': true_pos,
        'clock': clock,
        'isb': isb,
        'ambiguities': np.asarray(ambiguities[:n_phase], dtype=float),
    }
    return EpochObservations(approx_pos=approx_pos, satellites=satellites, time=time), truth


@pytest.fixture
def synthetic_epoch():
    """Factory fixture, see ``make_synthetic_epoch``"""
    return make_synthetic_epoch
