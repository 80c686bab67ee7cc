import math
import unittest
import numpy as np
from physics_utils import (
    normalize_vector, rotation_about_axis, cartesian_to_spherical,
    spherical_to_cartesian, look_at_rotation, PhysicsError,
)

class TestNormalizeVector(unittest.TestCase):

    def test_normalize_typical_vector(self):
        np.testing.assert_array_almost_equal(normalize_vector(np.array([3.0, 4.0])), [0.6, 0.8])

    def test_normalize_zero_vector(self):
        np.testing.assert_array_almost_equal(normalize_vector(np.zeros(3)), np.zeros(3))

    def test_normalize_list_input(self):
        np.testing.assert_array_almost_equal(normalize_vector([0, -2, 0]), [0.0, -1.0, 0.0])

class TestRotationAboutAxis(unittest.TestCase):

    def test_quarter_turn_about_y(self):
        rot = rotation_about_axis([0, 1, 0], math.pi / 2)
        # Right-handed about +Y: +Z goes to +X
        np.testing.assert_array_almost_equal(rot @ np.array([0.0, 0.0, 1.0]), [1.0, 0.0, 0.0])

    def test_quarter_turn_about_x(self):
        rot = rotation_about_axis([2, 0, 0], math.pi / 2)
        np.testing.assert_array_almost_equal(rot @ np.array([0.0, 0.0, 1.0]), [0.0, -1.0, 0.0])

    def test_result_is_orthonormal(self):
        rot = rotation_about_axis([1, 2, 3], 0.7)
        np.testing.assert_array_almost_equal(rot @ rot.T, np.eye(3))
        self.assertAlmostEqual(np.linalg.det(rot), 1.0)

    def test_zero_axis_raises(self):
        with self.assertRaises(PhysicsError):
            rotation_about_axis([0, 0, 0], 1.0)

class TestSphericalConversion(unittest.TestCase):

    def test_axes(self):
        radius, polar, azimuth = cartesian_to_spherical([0.0, 0.0, 5.0])
        self.assertAlmostEqual(radius, 5.0)
        self.assertAlmostEqual(polar, math.pi / 2)
        self.assertAlmostEqual(azimuth, 0.0)

        radius, polar, _ = cartesian_to_spherical([0.0, 2.0, 0.0])
        self.assertAlmostEqual(radius, 2.0)
        self.assertAlmostEqual(polar, 0.0)

        _, _, azimuth = cartesian_to_spherical([1.0, 0.0, 0.0])
        self.assertAlmostEqual(azimuth, math.pi / 2)

    def test_round_trip(self):
        offset = np.array([0.3, 3.0, 10.0])
        np.testing.assert_array_almost_equal(spherical_to_cartesian(*cartesian_to_spherical(offset)), offset)

    def test_zero_offset(self):
        self.assertEqual(cartesian_to_spherical([0, 0, 0]), (0.0, 0.0, 0.0))

class TestLookAtRotation(unittest.TestCase):

    def test_looking_down_negative_z(self):
        rot = look_at_rotation([0.0, 0.0, 5.0], [0.0, 0.0, 0.0])
        np.testing.assert_array_almost_equal(rot, np.eye(3))

    def test_backward_axis_points_at_eye(self):
        eye = np.array([1.0, 2.0, 3.0])
        rot = look_at_rotation(eye, np.zeros(3))
        np.testing.assert_array_almost_equal(rot[:, 2], eye / np.linalg.norm(eye))
        np.testing.assert_array_almost_equal(rot.T @ rot, np.eye(3))
        # Right axis stays horizontal
        self.assertAlmostEqual(rot[1, 0], 0.0)

    def test_looking_along_up_axis_stays_orthonormal(self):
        rot = look_at_rotation([0.0, 4.0, 0.0], [0.0, 0.0, 0.0])
        np.testing.assert_array_almost_equal(rot.T @ rot, np.eye(3))

    def test_coincident_eye_and_target_raises(self):
        with self.assertRaises(PhysicsError):
            look_at_rotation([1.0, 1.0, 1.0], [1.0, 1.0, 1.0])

if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
