from unittest import TestCase

from dataclasses import replace
from pathlib import Path
from tempfile import TemporaryDirectory

from msis.errors import ConfigurationError
from msis.options import SimulationOptions, SURFACE_RESOLUTIONS
from msis.orbits import MOON_GM, MOON_RADIUS


class TestSimulationOptions(TestCase):

    def test_defaults(self):

        options = SimulationOptions()

        self.assertEqual(options.fov, 40.0)
        self.assertEqual((options.width, options.height), (1024, 1024))
        self.assertEqual(options.resolution, 4)
        self.assertEqual((options.grid_h, options.grid_v), (50, 50))
        self.assertEqual(options.body_radius, MOON_RADIUS)
        self.assertEqual(options.gravitational_parameter, MOON_GM)
        self.assertEqual(options.illumination_offset, 1000.0)
        self.assertIsNone(options.output_path)
        self.assertFalse(options.render)
        self.assertFalse(options.ignore_sun)

    def test_invalid(self):

        options = SimulationOptions()

        invalid = {'fov': [0, 180, -10],
                   'width': [0, -5, 1.5],
                   'height': [0],
                   'grid_h': [0],
                   'grid_v': [-50],
                   'resolution': [5, 8],
                   'body_radius': [0],
                   'gravitational_parameter': [-1],
                   'illumination_offset': [0],
                   'kepler_tolerance': [0],
                   'max_kepler_iterations': [0]}

        for name, values in invalid.items():
            for value in values:

                with self.subTest(name=name, value=value):
                    with self.assertRaises(ConfigurationError):
                        replace(options, **{name: value})

        for resolution in SURFACE_RESOLUTIONS:

            with self.subTest(resolution=resolution):
                self.assertEqual(replace(options, resolution=resolution).resolution, resolution)

    def test_annotation_requires_render(self):

        with self.assertRaises(ConfigurationError):
            SimulationOptions(write_annotation=True)

        self.assertTrue(SimulationOptions(write_annotation=True, render=True).write_annotation)

    def test_paths(self):

        options = SimulationOptions(output_path='out', pattern_repository='patterns')

        self.assertEqual(options.output_path, Path('out'))
        self.assertEqual(options.pattern_repository, Path('patterns'))

    def test_check_paths(self):

        with TemporaryDirectory() as directory:

            SimulationOptions(output_path=directory, pattern_repository=directory).check_paths()
            SimulationOptions().check_paths()

            with self.assertRaises(ConfigurationError):
                SimulationOptions(output_path=Path(directory) / 'missing').check_paths()

            with self.assertRaises(ConfigurationError):
                SimulationOptions(pattern_repository=Path(directory) / 'missing').check_paths()

    def test_frozen(self):

        with self.assertRaises(AttributeError):
            SimulationOptions().fov = 10
