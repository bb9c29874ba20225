#!/usr/bin/env python3
"""Test suite for physical constants"""

import unittest
import numpy as np
from pylsa.core.constants import (
    CLIGHT, FREQ_L1, FREQ_L2, FREQ_L5, FREQ_B1I,
    LAM_L1, LAM_L2, LAM_B1I,
    RE_WGS84, FE_WGS84, E2_WGS84, R2D, D2R,
    SYS_NONE, SYS_GPS, SYS_GLO, SYS_GAL, SYS_BDS, SYS_QZS, SYS_SBS, SYS_IRN,
    lam_carr, sys2char, char2sys
)


class TestPhysicalConstants(unittest.TestCase):
    """Test physical constants values"""

    def test_speed_of_light(self):
        """Test speed of light constant"""
        self.assertEqual(CLIGHT, 299792458.0)

    def test_gps_frequencies(self):
        """Test GPS frequency constants"""
        self.assertAlmostEqual(FREQ_L1, 1575.42e6, delta=1e6)
        self.assertAlmostEqual(FREQ_L2, 1227.60e6, delta=1e6)
        self.assertAlmostEqual(FREQ_L5, 1176.45e6, delta=1e6)
        self.assertGreater(FREQ_L1, FREQ_L2)
        self.assertGreater(FREQ_L2, FREQ_L5)

    def test_wavelengths(self):
        """Test carrier wavelengths"""
        self.assertAlmostEqual(LAM_L1, 0.1903, delta=1e-4)
        self.assertAlmostEqual(LAM_L2, 0.2442, delta=1e-4)
        self.assertAlmostEqual(LAM_B1I, CLIGHT / FREQ_B1I, places=12)
        self.assertEqual(lam_carr(FREQ_L1), LAM_L1)
        self.assertEqual(lam_carr(0.0), 0.0)

    def test_earth_parameters(self):
        """Test WGS84 parameters"""
        self.assertAlmostEqual(RE_WGS84, 6378137.0, delta=1.0)
        self.assertAlmostEqual(FE_WGS84, 1.0 / 298.257223563, delta=1e-12)
        self.assertAlmostEqual(E2_WGS84, 6.69437999014e-3, delta=1e-12)

    def test_unit_conversions(self):
        self.assertAlmostEqual(180.0 * D2R, np.pi, places=12)
        self.assertAlmostEqual(R2D * D2R, 1.0, places=12)


class TestSystemTags(unittest.TestCase):
    """Test GNSS system identifiers"""

    def test_tags_are_distinct_bits(self):
        tags = [SYS_GPS, SYS_GLO, SYS_GAL, SYS_BDS, SYS_QZS, SYS_SBS, SYS_IRN]
        self.assertEqual(len(set(tags)), len(tags))
        for tag in tags:
            self.assertEqual(tag & (tag - 1), 0)
        self.assertEqual(SYS_NONE, 0)

    def test_reference_order(self):
        # The lowest tag present is the clock reference
        self.assertLess(SYS_GPS, SYS_GLO)
        self.assertLess(SYS_GLO, SYS_GAL)
        self.assertLess(SYS_GAL, SYS_BDS)

    def test_char_conversion(self):
        for c in 'GRECJSI':
            self.assertEqual(sys2char(char2sys(c)), c)
        self.assertEqual(char2sys('e'), SYS_GAL)
        self.assertEqual(char2sys('X'), SYS_NONE)
        self.assertEqual(sys2char(SYS_NONE), ' ')


if __name__ == '__main__':
    unittest.main()
