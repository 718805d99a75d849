from unittest import TestCase

import numpy as np

from msis.utilities import vectors


class TestAsVector(TestCase):

    def test_copy_read_only(self):

        data = [1, 2, 3]

        vector = vectors.as_vector(data)

        self.assertEqual(vector.dtype, np.float64)
        np.testing.assert_array_equal(vector, data)
        self.assertFalse(vector.flags.writeable)

        source = np.array([1., 2., 3.])
        vector = vectors.as_vector(source)
        source[1] = 7

        np.testing.assert_array_equal(vector, [1, 2, 3])

    def test_size(self):

        self.assertEqual(vectors.as_vector([[1], [2], [3]], 3).shape, (3,))

        with self.assertRaises(ValueError):
            vectors.as_vector([1, 2], 3)


class TestVectorOperations(TestCase):

    def test_norm_unit(self):

        self.assertAlmostEqual(vectors.norm([3, 4, 0]), 5)
        np.testing.assert_array_almost_equal(vectors.unit([3, 4, 0]), [0.6, 0.8, 0])

        self.assertTrue(np.isnan(vectors.unit([0, 0, 0])).all())

    def test_cross(self):

        np.testing.assert_array_equal(vectors.cross([1, 0, 0], [0, 1, 0]), [0, 0, 1])
        np.testing.assert_array_equal(vectors.cross([0, 1, 0], [1, 0, 0]), [0, 0, -1])

    def test_rotate_2d(self):

        # the angle grows from +y toward +x
        np.testing.assert_array_almost_equal(vectors.rotate_2d([0, 1], np.pi / 2), [1, 0])
        np.testing.assert_array_almost_equal(vectors.rotate_2d([0, 1], np.pi), [0, -1])
        np.testing.assert_array_almost_equal(vectors.rotate_2d([1, 0], np.pi / 2), [0, -1])
        np.testing.assert_array_almost_equal(vectors.rotate_2d([2, 3], 0), [2, 3])

    def test_rotate_about_axis(self):

        np.testing.assert_array_almost_equal(vectors.rotate_about_axis([1, 0, 0], [0, 0, 1], np.pi / 2), [0, 1, 0])
        np.testing.assert_array_almost_equal(vectors.rotate_about_axis([1, 0, 0], [0, 0, 5], np.pi / 2), [0, 1, 0])
        np.testing.assert_array_almost_equal(vectors.rotate_about_axis([0, 0, 1], [0, 0, 1], 1.3), [0, 0, 1])

    def test_angle_between(self):

        self.assertAlmostEqual(vectors.angle_between([1, 0, 0], [0, 2, 0]), np.pi / 2)
        self.assertAlmostEqual(vectors.angle_between([1, 0, 0], [1, 0, 0]), 0)
        self.assertAlmostEqual(vectors.angle_between([1, 0, 0], [-3, 0, 0]), np.pi)
