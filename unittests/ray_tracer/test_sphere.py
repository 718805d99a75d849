from unittest import TestCase

import numpy as np

from msis.orbits import MOON_RADIUS
from msis.ray_tracer import Rays, Sphere


class TestSphere(TestCase):

    def setUp(self):

        self.sphere = Sphere()

    def test_creation(self):

        self.assertEqual(self.sphere.radius, MOON_RADIUS)
        self.assertEqual(Sphere(10).radius, 10.0)

        for radius in [0, -1]:

            with self.subTest(radius=radius):
                with self.assertRaises(ValueError):
                    Sphere(radius)

    def test_head_on(self):

        for scale in [1, 2, 0.001]:

            with self.subTest(scale=scale):

                intersection = self.sphere.intersect([3e6, 0, 0], [-scale, 0, 0])

                self.assertTrue(intersection.check)
                self.assertAlmostEqual(intersection.t * scale, 3e6 - MOON_RADIUS, places=3)
                self.assertAlmostEqual(intersection.distance, 3e6 - MOON_RADIUS, places=3)
                np.testing.assert_allclose(intersection.point, [MOON_RADIUS, 0, 0], rtol=0, atol=1e-6)

    def test_off_center(self):

        start = np.array([1e6, -2.5e6, 3e5])
        direction = -start + np.array([2e5, 1e5, 0])

        intersection = self.sphere.intersect(start, direction)

        self.assertTrue(intersection.check)
        self.assertAlmostEqual(np.linalg.norm(intersection.point) / MOON_RADIUS, 1, places=12)
        self.assertAlmostEqual(intersection.distance, np.linalg.norm(intersection.point - start), places=4)

        # the visible face is the one closer to the start
        self.assertLess(intersection.distance, np.linalg.norm(start))

    def test_pointing_away(self):

        intersection = self.sphere.intersect([3e6, 0, 0], [1, 0, 0])

        self.assertFalse(intersection.check)
        self.assertTrue(np.isnan(intersection.t))
        self.assertIsNone(intersection.point)
        self.assertTrue(np.isnan(intersection.distance))

    def test_miss(self):

        self.assertFalse(self.sphere.intersect([3e6, 2e6, 0], [-1, 0, 0]).check)

    def test_tangent(self):

        intersection = self.sphere.intersect([3e6, MOON_RADIUS, 0], [-1, 0, 0])

        self.assertTrue(intersection.check)
        self.assertAlmostEqual(intersection.t, 3e6)
        np.testing.assert_allclose(intersection.point, [0, MOON_RADIUS, 0], rtol=0, atol=1e-6)

    def test_zero_direction(self):

        self.assertFalse(self.sphere.intersect([3e6, 0, 0], [0, 0, 0]).check)

    def test_trace(self):

        directions = np.array([[-1, 1, -1, -1],
                               [0, 0, 0.1, 0],
                               [0, 0, 0, 0.9]])

        results = self.sphere.trace(Rays([3e6, 0, 0], directions))

        self.assertEqual(results.shape, (4,))

        for index, direction in enumerate(directions.T):

            with self.subTest(direction=direction):

                intersection = self.sphere.intersect([3e6, 0, 0], direction)

                self.assertEqual(results['check'][index], intersection.check)

                if intersection.check:
                    self.assertAlmostEqual(results['distance'][index], intersection.distance, places=4)
                    np.testing.assert_allclose(results['intersect'][index], intersection.point, rtol=0, atol=1e-6)
                    np.testing.assert_allclose(results['normal'][index], intersection.point / MOON_RADIUS,
                                               rtol=0, atol=1e-12)
                else:
                    self.assertTrue(np.isnan(results['distance'][index]))
                    self.assertTrue(np.isnan(results['intersect'][index]).all())
                    self.assertTrue(np.isnan(results['normal'][index]).all())

        np.testing.assert_array_equal(results['check'], [True, False, True, False])

    def test_compute_normals(self):

        normals = self.sphere.compute_normals([[MOON_RADIUS, 0], [0, 0], [0, 2 * MOON_RADIUS]])

        np.testing.assert_array_almost_equal(normals, [[1, 0], [0, 0], [0, 1]])

        np.testing.assert_array_almost_equal(self.sphere.compute_normals([0, 0, -5]), [0, 0, -1])

    def test_repr(self):

        self.assertEqual(repr(Sphere(10.0)), 'Sphere(radius=10.0)')
