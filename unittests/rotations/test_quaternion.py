from unittest import TestCase

import pickle

import numpy as np

from msis.rotations import Quaternion, rotation_quaternion, IDENTITY
from msis.utilities.vectors import rotate_about_axis


class TestQuaternion(TestCase):

    def test_init(self):

        quaternion = Quaternion()

        self.assertEqual(quaternion.real, 0)
        np.testing.assert_array_equal(quaternion.vector, [0, 0, 0])

        for seq_type in [list, tuple, np.array]:

            with self.subTest(seq_type=seq_type):

                quaternion = Quaternion(4, seq_type([1, 2, 3]))

                self.assertEqual(quaternion.real, 4)
                np.testing.assert_array_equal(quaternion.vector, [1, 2, 3])

        with self.assertRaises(ValueError):
            Quaternion(1, [1, 2])

    def test_no_aliasing(self):

        vector = np.array([1., 2., 3.])

        quaternion = Quaternion(1, vector)

        vector[0] = 10

        np.testing.assert_array_equal(quaternion.vector, [1, 2, 3])

        with self.assertRaises(ValueError):
            quaternion.vector[0] = 5

    def test_from_array(self):

        quaternion = Quaternion.from_array([1, 2, 3, 4])

        self.assertEqual(quaternion.real, 4)
        np.testing.assert_array_equal(quaternion.vector, [1, 2, 3])
        np.testing.assert_array_equal(quaternion.as_array(), [1, 2, 3, 4])

        with self.assertRaises(ValueError):
            Quaternion.from_array([1, 2, 3])

    def test_arithmetic(self):

        q1 = Quaternion(1, [2, 3, 4])
        q2 = Quaternion(5, [6, 7, 8])

        self.assertEqual(q1 + q2, Quaternion(6, [8, 10, 12]))
        self.assertEqual(q2 - q1, Quaternion(4, [4, 4, 4]))
        self.assertEqual(-q1, Quaternion(-1, [-2, -3, -4]))
        self.assertEqual(q1 * 2, Quaternion(2, [4, 6, 8]))
        self.assertEqual(2 * q1, Quaternion(2, [4, 6, 8]))

    def test_hamilton_product(self):

        i = Quaternion(0, [1, 0, 0])
        j = Quaternion(0, [0, 1, 0])
        k = Quaternion(0, [0, 0, 1])

        self.assertEqual(i * j, k)
        self.assertEqual(j * k, i)
        self.assertEqual(k * i, j)
        self.assertEqual(j * i, -k)
        self.assertEqual(i * i, Quaternion(-1, [0, 0, 0]))

        q1 = Quaternion(1, [2, 3, 4])
        q2 = Quaternion(5, [6, 7, 8])

        np.testing.assert_array_almost_equal((q1 * q2).as_array(), [12, 30, 24, -60])

    def test_norm_normalized_conjugate(self):

        quaternion = Quaternion(1, [1, 1, 1])

        self.assertAlmostEqual(quaternion.norm(), 2)
        self.assertAlmostEqual(quaternion.normalized().norm(), 1)
        np.testing.assert_array_almost_equal(quaternion.normalized().as_array(), [0.5, 0.5, 0.5, 0.5])
        self.assertEqual(quaternion.conjugate(), Quaternion(1, [-1, -1, -1]))

        product = quaternion * quaternion.conjugate()

        self.assertAlmostEqual(product.real, 4)
        np.testing.assert_array_almost_equal(product.vector, [0, 0, 0])

    def test_rotation_quaternion(self):

        quaternion = rotation_quaternion([0, 0, 2], np.pi / 2)

        self.assertAlmostEqual(quaternion.norm(), 1)
        np.testing.assert_array_almost_equal(quaternion.as_array(), [0, 0, np.sqrt(2) / 2, np.sqrt(2) / 2])

        np.testing.assert_array_almost_equal(quaternion.rotate([1, 0, 0]), [0, 1, 0])

    def test_rotate_matches_rodrigues(self):

        rng = np.random.default_rng(1)

        for _ in range(20):

            axis = rng.normal(size=3)
            vector = rng.normal(size=3)
            angle = rng.uniform(-2 * np.pi, 2 * np.pi)

            with self.subTest(axis=axis, vector=vector, angle=angle):
                np.testing.assert_array_almost_equal(rotation_quaternion(axis, angle).rotate(vector),
                                                     rotate_about_axis(vector, axis, angle))

    def test_composition(self):

        about_z = rotation_quaternion([0, 0, 1], np.pi / 2)
        about_x = rotation_quaternion([1, 0, 0], np.pi / 2)

        # rotate about z first, then about x
        np.testing.assert_array_almost_equal((about_x * about_z).rotate([1, 0, 0]), [0, 0, 1])

    def test_identity(self):

        np.testing.assert_array_almost_equal(IDENTITY.rotate([1, 2, 3]), [1, 2, 3])

    def test_pickle(self):

        quaternion = Quaternion(0.5, [0.5, -0.5, 0.5])

        self.assertEqual(pickle.loads(pickle.dumps(quaternion)), quaternion)

    def test_hash(self):

        self.assertEqual(hash(Quaternion(1, [0, 0, 0])), hash(IDENTITY))
