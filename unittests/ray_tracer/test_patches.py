from unittest import TestCase

import numpy as np

from msis.camera import build_camera_frame, nadir_orientation
from msis.rotations import rotation_quaternion
from msis.ray_tracer import Sphere, SurfacePatch, PatchSet, patch_containing, select_surface_patches
from msis.utilities.spherical_coordinates import cartesian_to_selenographic


class TestPatchContaining(TestCase):

    def test_buckets(self):

        cases = [((0.0, 0.0), (0, 5, 0, 5)),
                 ((-0.1, 10.0), (-5, 0, 10, 15)),
                 ((4.999, 359.9), (0, 5, 355, 360)),
                 ((12.5, 182.2), (10, 15, 180, 185)),
                 ((-12.5, 182.2), (-15, -10, 180, 185)),
                 ((-5.0, 5.0), (-10, -5, 5, 10)),
                 ((5.0, -0.1), (5, 10, 355, 360)),
                 ((0.0, 360.0), (0, 5, 0, 5)),
                 ((0.0, -725.0), (0, 5, 355, 360))]

        for (lat, lon), expected in cases:

            with self.subTest(lat=lat, lon=lon):

                patch = patch_containing(lat, lon)

                self.assertEqual(patch, expected)
                self.assertIsInstance(patch, SurfacePatch)

    def test_poles(self):

        self.assertEqual(patch_containing(90, 10), (85, 90, 10, 15))
        self.assertEqual(patch_containing(-90, 10), (-90, -85, 10, 15))
        self.assertEqual(patch_containing(89.9, 0), (85, 90, 0, 5))
        self.assertEqual(patch_containing(-89.9, 0), (-90, -85, 0, 5))

    def test_never_wraps(self):

        for lat in np.linspace(-90, 90, 37):
            for lon in [-1e-12, 359.999999, 360 - 1e-13, 720]:

                with self.subTest(lat=lat, lon=lon):

                    patch = patch_containing(lat, lon)

                    self.assertGreaterEqual(patch.lat_start, -90)
                    self.assertLessEqual(patch.lat_end, 90)
                    self.assertGreaterEqual(patch.lon_start, 0)
                    self.assertLessEqual(patch.lon_end, 360)

    def test_size(self):

        self.assertEqual(patch_containing(12.5, 182.2, size=10), (10, 20, 180, 190))

    def test_key_and_name(self):

        patch = SurfacePatch(0, 5, 355, 360)

        self.assertEqual(patch.key, '0,5,355,360')
        self.assertEqual(patch.pattern_name(4), 'pattern_LDEM_4_lat_0_5_lon_355_360')
        self.assertEqual(SurfacePatch(-10, -5, 0, 5).pattern_name(64), 'pattern_LDEM_64_lat_-10_-5_lon_0_5')


class TestPatchSet(TestCase):

    def test_unique_ordered(self):

        patches = PatchSet([(0, 5, 0, 5), (-5, 0, 0, 5), (0, 5, 0, 5)])

        self.assertEqual(len(patches), 2)
        self.assertEqual(patches.keys, ['0,5,0,5', '-5,0,0,5'])

        patches.add(SurfacePatch(-5, 0, 0, 5))
        patches.add(SurfacePatch(0, 5, 355, 360))

        self.assertEqual(patches.keys, ['0,5,0,5', '-5,0,0,5', '0,5,355,360'])

        self.assertIn((0, 5, 355, 360), patches)
        self.assertNotIn((5, 10, 0, 5), patches)

        for patch in patches:
            self.assertIsInstance(patch, SurfacePatch)

    def test_equality(self):

        first = PatchSet([(0, 5, 0, 5), (-5, 0, 0, 5)])
        second = PatchSet([(-5, 0, 0, 5), (0, 5, 0, 5), (0, 5, 0, 5)])

        self.assertEqual(first, second)
        self.assertNotEqual(first, PatchSet([(0, 5, 0, 5)]))
        self.assertNotEqual(first, ['0,5,0,5', '-5,0,0,5'])


class TestSelectSurfacePatches(TestCase):

    def setUp(self):

        self.sphere = Sphere()
        self.position = np.array([3e6, 0, 0])

    def test_nadir(self):

        camera = build_camera_frame(self.position, nadir_orientation(self.position), 40, 100, 100, nadir=True)

        patches = select_surface_patches(camera, self.sphere)

        # the boresight hits the surface at lat 0, lon 0
        for patch in [(0, 5, 0, 5), (0, 5, 355, 360), (-5, 0, 0, 5), (-5, 0, 355, 360)]:

            with self.subTest(patch=patch):
                self.assertIn(patch, patches)

        # the first patch is the one seen by the top left pixel
        corner = self.sphere.intersect(camera.position, camera.pixel_ray(1, 1))

        self.assertTrue(corner.check)

        self.assertEqual(next(iter(patches)), patch_containing(*cartesian_to_selenographic(corner.point,
                                                                                           self.sphere.radius)))

    def test_matches_pixel_by_pixel(self):

        camera = build_camera_frame(self.position, nadir_orientation(self.position), 60, 24, 16, nadir=True)

        expected = PatchSet()

        for y in range(1, camera.height + 1):
            for x in range(1, camera.width + 1):

                intersection = self.sphere.intersect(camera.position, camera.pixel_ray(x, y))

                if intersection.check:
                    expected.add(patch_containing(*cartesian_to_selenographic(intersection.point,
                                                                              self.sphere.radius)))

        patches = select_surface_patches(camera, self.sphere)

        self.assertEqual(patches, expected)
        self.assertEqual(patches.keys, expected.keys)

    def test_looking_away(self):

        camera = build_camera_frame(self.position, rotation_quaternion([0, 0, 1], np.pi), 40, 20, 20)

        patches = select_surface_patches(camera, self.sphere)

        self.assertEqual(len(patches), 0)
