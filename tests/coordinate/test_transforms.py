import unittest
import numpy as np
from pylsa.coordinate.transforms import (
    ecef2llh, llh2ecef, ecef2enu, compute_rotation_matrix_enu,
    covecef2enu, global2local_cov
)
from pylsa.core.constants import RE_WGS84, FE_WGS84


class TestCoordinateTransforms(unittest.TestCase):

    def setUp(self):
        # Test points
        self.tokyo_llh = np.array([np.radians(35.6762), np.radians(139.6503), 40.0])  # Tokyo Tower
        self.newyork_llh = np.array([np.radians(40.7128), np.radians(-74.0060), 10.0])  # New York
        self.equator_llh = np.array([0.0, 0.0, 0.0])  # Equator, prime meridian
        self.pole_llh = np.array([np.radians(90.0), 0.0, 0.0])  # North pole

    def test_llh2ecef_ecef2llh_round_trip(self):
        test_points = [
            self.tokyo_llh,
            self.newyork_llh,
            self.equator_llh,
            self.pole_llh,
            np.array([np.radians(-35.0), np.radians(150.0), 100.0]),  # Southern hemisphere
            np.array([np.radians(10.0), np.radians(20.0), 20200e3]),  # GNSS orbit altitude
        ]

        for llh in test_points:
            xyz = llh2ecef(llh)
            llh_recovered = ecef2llh(xyz)

            np.testing.assert_allclose(llh_recovered[:2], llh[:2], rtol=1e-10, atol=1e-10,
                                       err_msg=f"Round-trip failed for lat/lon {llh}")
            np.testing.assert_allclose(llh_recovered[2], llh[2], rtol=1e-8, atol=1e-6,
                                       err_msg=f"Round-trip failed for height {llh}")

    def test_llh2ecef_known_values(self):
        # Equator, prime meridian, sea level: on the X axis
        xyz = llh2ecef(np.array([0.0, 0.0, 0.0]))
        self.assertAlmostEqual(xyz[0], RE_WGS84, places=3)
        self.assertAlmostEqual(xyz[1], 0.0, places=3)
        self.assertAlmostEqual(xyz[2], 0.0, places=3)

        # North pole: on the Z axis at the polar radius
        xyz = llh2ecef(np.array([np.pi / 2, 0.0, 0.0]))
        b = RE_WGS84 * np.sqrt(1 - FE_WGS84 * (2 - FE_WGS84))
        self.assertAlmostEqual(xyz[0], 0.0, places=3)
        self.assertAlmostEqual(xyz[1], 0.0, places=3)
        self.assertAlmostEqual(xyz[2], b, places=3)

    def test_ecef2llh_known_values(self):
        llh = ecef2llh(np.array([RE_WGS84, 0.0, 0.0]))
        self.assertAlmostEqual(llh[0], 0.0, places=10)
        self.assertAlmostEqual(llh[1], 0.0, places=10)
        self.assertAlmostEqual(llh[2], 0.0, places=3)

    def test_ecef2llh_on_axis(self):
        b = RE_WGS84 * np.sqrt(1 - FE_WGS84 * (2 - FE_WGS84))
        llh = ecef2llh(np.array([0.0, 0.0, -(b + 100.0)]))
        self.assertAlmostEqual(llh[0], -np.pi / 2, places=12)
        self.assertEqual(llh[1], 0.0)
        self.assertAlmostEqual(llh[2], 100.0, places=6)

    def test_rotation_matrix_orthonormal(self):
        for llh in (self.tokyo_llh, self.newyork_llh, self.equator_llh):
            R = compute_rotation_matrix_enu(llh)
            np.testing.assert_allclose(R @ R.T, np.eye(3), atol=1e-12)
            self.assertAlmostEqual(np.linalg.det(R), 1.0, places=12)

    def test_up_axis_points_outward(self):
        R = compute_rotation_matrix_enu(self.tokyo_llh)
        xyz = llh2ecef(self.tokyo_llh)
        xyz_above = llh2ecef(self.tokyo_llh + np.array([0.0, 0.0, 100.0]))
        np.testing.assert_allclose(R @ (xyz_above - xyz), [0.0, 0.0, 100.0], atol=1e-6)

    def test_ecef2enu(self):
        org = self.newyork_llh
        # Origin maps to zero
        np.testing.assert_allclose(ecef2enu(llh2ecef(org), org), np.zeros(3), atol=1e-6)

        # A point slightly north has a positive north component only
        north = org + np.array([np.radians(0.001), 0.0, 0.0])
        enu = ecef2enu(llh2ecef(north), org)
        self.assertGreater(enu[1], 100.0)
        self.assertLess(abs(enu[0]), 1e-3)

    def test_covariance_rotation(self):
        P = np.diag([4.0, 1.0, 9.0])
        P_enu = covecef2enu(self.tokyo_llh, P)

        # Trace and eigenvalues are invariant under rotation
        self.assertAlmostEqual(np.trace(P_enu), 14.0, places=10)
        np.testing.assert_allclose(np.sort(np.linalg.eigvalsh(P_enu)), [1.0, 4.0, 9.0], atol=1e-10)
        np.testing.assert_allclose(P_enu, P_enu.T, atol=1e-12)

        # Isotropic covariance is unchanged
        np.testing.assert_allclose(covecef2enu(self.tokyo_llh, np.eye(3)), np.eye(3), atol=1e-12)

    def test_global2local_cov_matches_covecef2enu(self):
        xyz = llh2ecef(self.newyork_llh)
        A = np.array([[1.0, 0.2, 0.1], [0.0, 2.0, 0.3], [0.0, 0.0, 1.5]])
        P = A @ A.T
        np.testing.assert_allclose(global2local_cov(P, xyz),
                                   covecef2enu(self.newyork_llh, P), atol=1e-8)


if __name__ == '__main__':
    unittest.main()
