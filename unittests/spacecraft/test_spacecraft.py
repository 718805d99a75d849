from unittest import TestCase

import numpy as np

from msis.camera import build_camera_frame, nadir_orientation, DEFAULT_DIRECTION
from msis.errors import ConfigurationError
from msis.options import SimulationOptions
from msis.orbits import KeplerOrbit, OrbitalElements, DEFAULT_EPOCH
from msis.rotations import Quaternion, rotation_quaternion
from msis.spacecraft import Spacecraft, SpacecraftState, create_spacecraft_state
from msis.utilities.spice_interface import FixedPosition


class TestSpacecraft(TestCase):

    def setUp(self):

        self.orbit = KeplerOrbit(OrbitalElements(3737150.0, 0.1, 0.5, 1.0, 0.3, 2.0, epoch=51000.0))

    def test_requires_position(self):

        with self.assertRaises(ConfigurationError):
            Spacecraft()

    def test_zero_orientation(self):

        with self.assertRaises(ConfigurationError):
            Spacecraft(fixed_position=[3e6, 0, 0], initial_orientation=Quaternion(0, [0, 0, 0]))

    def test_orientation_normalized(self):

        spacecraft = Spacecraft(fixed_position=[3e6, 0, 0], initial_orientation=Quaternion(2, [0, 0, 0]))

        self.assertFalse(spacecraft.nadir)
        np.testing.assert_array_almost_equal(spacecraft.initial_orientation.as_array(), [0, 0, 0, 1])

    def test_fixed_position(self):

        spacecraft = Spacecraft(orbit=self.orbit, fixed_position=[3e6, 1, 2])

        position = spacecraft.position(51001.0)

        np.testing.assert_array_equal(position, [3e6, 1, 2])

        # the fixed position overrides the orbit
        position[0] = 0

        np.testing.assert_array_equal(spacecraft.position(51002.0), [3e6, 1, 2])

    def test_orbit_position(self):

        spacecraft = Spacecraft(orbit=self.orbit)

        for time in [51000.0, 51000.3, 51003.0]:

            with self.subTest(time=time):
                np.testing.assert_array_equal(spacecraft.position(time), self.orbit.position(time))

    def test_epoch(self):

        self.assertEqual(Spacecraft(orbit=self.orbit, fixed_time=52000.0).epoch, 51000.0)
        self.assertEqual(Spacecraft(fixed_position=[3e6, 0, 0], fixed_time=52000.0).epoch, 52000.0)
        self.assertEqual(Spacecraft(fixed_position=[3e6, 0, 0]).epoch, DEFAULT_EPOCH)

    def test_nadir_orientation(self):

        spacecraft = Spacecraft(orbit=self.orbit)

        self.assertTrue(spacecraft.nadir)

        position = spacecraft.position(51000.5)

        self.assertEqual(spacecraft.orientation(51000.5, position), nadir_orientation(position))

    def test_orientation_transition(self):

        initial = rotation_quaternion([1, 0, 0], 0.25)

        spacecraft = Spacecraft(orbit=self.orbit, initial_orientation=initial, orientation_rate=[0, 0, 1e-5])

        # at the epoch the orientation is the initial orientation
        np.testing.assert_array_almost_equal(spacecraft.orientation(51000.0, [3e6, 0, 0]).as_array(),
                                             initial.as_array())

        # one day later the spacecraft has turned 0.864 rad about z
        expected = rotation_quaternion([0, 0, 1], 0.864) * initial

        np.testing.assert_array_almost_equal(spacecraft.orientation(51001.0, [3e6, 0, 0]).as_array(),
                                             expected.as_array())

    def test_repr(self):

        spacecraft = Spacecraft(fixed_position=[3e6, 0, 0], fixed_time=51544.5)

        self.assertIn('fixed_position=[3000000.0, 0.0, 0.0]', repr(spacecraft))
        self.assertIn('fixed_time=51544.5', repr(spacecraft))


class TestCreateSpacecraftState(TestCase):

    def setUp(self):

        self.options = SimulationOptions(fov=30, width=64, height=48)
        self.ephemeris = FixedPosition([1.5e11, 2e10, 0])

    def test_nadir(self):

        spacecraft = Spacecraft(fixed_position=[3e6, 0, 0])

        state = create_spacecraft_state(spacecraft, 51544.75, self.options, self.ephemeris)

        self.assertIsInstance(state, SpacecraftState)
        self.assertEqual(state.time, 51544.75)
        self.assertIs(state.spacecraft, spacecraft)
        self.assertAlmostEqual(state.altitude, 3e6)

        np.testing.assert_array_equal(state.position, [3e6, 0, 0])
        np.testing.assert_array_equal(state.sun_position, [1.5e11, 2e10, 0])

        expected = build_camera_frame([3e6, 0, 0], nadir_orientation([3e6, 0, 0]), 30, 64, 48, nadir=True)

        for name in ['position', 'direction', 'right', 'up']:

            with self.subTest(name=name):
                np.testing.assert_array_almost_equal(getattr(state.camera, name), getattr(expected, name))

        self.assertEqual((state.camera.fov, state.camera.width, state.camera.height), (30, 64, 48))

    def test_given_orientation(self):

        orientation = rotation_quaternion([0, 0, 1], np.pi / 2)

        spacecraft = Spacecraft(fixed_position=[0, 3e6, 0], initial_orientation=orientation)

        state = create_spacecraft_state(spacecraft, 51544.5, self.options, self.ephemeris)

        np.testing.assert_array_almost_equal(state.orientation.as_array(), orientation.as_array())

        np.testing.assert_array_almost_equal(state.camera.direction / np.linalg.norm(state.camera.direction),
                                             orientation.rotate(DEFAULT_DIRECTION))

    def test_orbit(self):

        orbit = KeplerOrbit(OrbitalElements(3737150.0, 0.1, 0.5, 1.0, 0.3, 2.0))

        state = create_spacecraft_state(Spacecraft(orbit=orbit), 51545.0, self.options, self.ephemeris)

        np.testing.assert_array_equal(state.position, orbit.position(51545.0))

    def test_immutable(self):

        state = create_spacecraft_state(Spacecraft(fixed_position=[3e6, 0, 0]), 51544.5, self.options,
                                        self.ephemeris)

        with self.assertRaises(AttributeError):
            state.time = 0

        with self.assertRaises(ValueError):
            state.position[0] = 0

        with self.assertRaises(ValueError):
            state.sun_position[0] = 0
