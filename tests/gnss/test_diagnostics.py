"""Tests for residuals, unit-weight variance and covariance blocks"""

import numpy as np
import pytest

from pylsa.core.constants import CLIGHT, SYS_GAL, SYS_GPS
from pylsa.core.data_structures import UnknownLayout
from pylsa.gnss.diagnostics import covariance_blocks, post_fit_diagnostics
from pylsa.gnss.normal_equations import solve_normal_equations


def _fit(n, m, seed=0):
    rng = np.random.default_rng(seed)
    A = rng.standard_normal((n, m))
    Qyy = np.diag(rng.uniform(0.5, 2.0, size=n))
    b = rng.standard_normal(n)
    y0 = A @ rng.standard_normal(m) + b + 0.1 * rng.standard_normal(n)
    return solve_normal_equations(A, Qyy, y0, b), A, Qyy, y0, b


def test_residuals_and_unit_weight_variance():
    fit, A, Qyy, y0, b = _fit(10, 4)
    diag = post_fit_diagnostics(fit, A, y0, b)

    v = y0 - (A @ fit.x_hat + b)
    np.testing.assert_allclose(diag.residuals, v)
    assert diag.redundancy == 6
    assert diag.sigma02 == pytest.approx(v @ np.linalg.solve(Qyy, v) / 6, rel=1e-10)


def test_covariance_is_scaled_normal_inverse():
    fit, A, Qyy, y0, b = _fit(10, 4, seed=1)
    diag = post_fit_diagnostics(fit, A, y0, b)

    expected = diag.sigma02 * np.linalg.inv(A.T @ np.linalg.solve(Qyy, A))
    np.testing.assert_allclose(diag.cxx, expected, rtol=1e-8, atol=1e-14)
    np.testing.assert_array_equal(diag.cxx, diag.cxx.T)


def test_no_covariance_without_redundancy():
    fit, A, _, y0, b = _fit(4, 4, seed=2)
    diag = post_fit_diagnostics(fit, A, y0, b)
    assert diag.redundancy == 0
    assert diag.sigma02 is None
    assert diag.cxx is None
    np.testing.assert_allclose(diag.residuals, 0.0, atol=1e-9)


def test_covariance_blocks():
    layout = UnknownLayout(n_phase=2, reference_system=SYS_GPS, bias_systems=(SYS_GAL,))
    cxx = np.diag(np.arange(1.0, layout.n_unknowns + 1))
    blocks = covariance_blocks(cxx, layout)

    np.testing.assert_array_equal(blocks.position, np.diag([1.0, 2.0, 3.0]))
    np.testing.assert_array_equal(blocks.ambiguities, np.diag([4.0, 5.0]))
    assert blocks.clock == pytest.approx(6.0 / CLIGHT**2)
    np.testing.assert_allclose(blocks.isb, [[7.0 / CLIGHT**2]])


def test_covariance_blocks_are_copies():
    layout = UnknownLayout(n_phase=1)
    cxx = np.eye(layout.n_unknowns)
    blocks = covariance_blocks(cxx, layout)
    blocks.position[0, 0] = 99.0
    assert cxx[0, 0] == 1.0
    assert blocks.isb.shape == (0, 0)
