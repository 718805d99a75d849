from unittest import TestCase
from unittest import mock

from pathlib import Path
from tempfile import TemporaryDirectory

import numpy as np
from matplotlib.image import imsave

from msis.errors import ConfigurationError
from msis.options import SimulationOptions
from msis.orbits import KeplerOrbit, OrbitalElements
from msis.ray_tracer import PatchSet
from msis.simulation import Simulation, StepResult, compute_step, FILE_STEM
from msis.spacecraft import Spacecraft
from msis.utilities.spice_interface import FixedPosition


SUN = FixedPosition([0, 1.5e11, 0])


class TestComputeStep(TestCase):

    def test_compute_step(self):

        options = SimulationOptions(width=40, height=40, grid_h=20, grid_v=20)

        result = compute_step(Spacecraft(fixed_position=[3e6, 0, 0]), 51544.5, options, SUN)

        self.assertIsInstance(result, StepResult)
        self.assertIsInstance(result.patches, PatchSet)

        self.assertEqual(result.state.time, 51544.5)
        self.assertIn((0, 5, 0, 5), result.patches)
        self.assertEqual(list(result.pixel_information), [(20, 20), (40, 20), (20, 40), (40, 40)])


class TestSimulation(TestCase):

    def setUp(self):

        self.options = SimulationOptions(width=40, height=40, grid_h=20, grid_v=20)

        self.orbit = KeplerOrbit(OrbitalElements(2737150.0, 0.05, 0.5, 1.0, 0.3, 2.0, epoch=51544.5))

        self.spacecraft = Spacecraft(orbit=self.orbit)

    def test_construction(self):

        with self.assertRaises(ConfigurationError):
            Simulation(self.options, SUN)

        with self.assertRaises(ConfigurationError):
            Simulation(self.options, SUN, spacecraft=self.spacecraft, batch=[self.spacecraft])

        # batch members must know their time
        with self.assertRaises(ConfigurationError):
            Simulation.from_batch(self.options, SUN, [Spacecraft(fixed_position=[3e6, 0, 0])])

    def test_steps(self):

        simulation = Simulation(self.options, SUN, spacecraft=self.spacecraft, times=[51544.5, 51544.6])

        self.assertEqual(simulation.steps, [(self.spacecraft, 51544.5), (self.spacecraft, 51544.6)])

        batch = [Spacecraft(fixed_position=[3e6, 0, 0], fixed_time=51600.0),
                 Spacecraft(fixed_position=[0, 3e6, 0], fixed_time=51500.0)]

        simulation = Simulation.from_batch(self.options, SUN, batch)

        self.assertEqual(simulation.steps, [(batch[0], 51600.0), (batch[1], 51500.0)])

    def test_file_stem(self):

        simulation = Simulation(self.options, SUN, spacecraft=self.spacecraft, times=[51544.5])

        self.assertIsNone(simulation.file_stem(0))

        with TemporaryDirectory() as directory:

            options = SimulationOptions(output_path=directory)

            simulation = Simulation(options, SUN, spacecraft=self.spacecraft, times=[51544.5])

            self.assertEqual(simulation.file_stem(3), Path(directory) / 'MoonSurfIllumSim_step_00003')
            self.assertEqual(FILE_STEM.format(12), 'MoonSurfIllumSim_step_00012')

    def test_run(self):

        times = [51544.5, 51544.52, 51544.54]

        simulation = Simulation(self.options, SUN, spacecraft=self.spacecraft, times=times)

        with self.assertLogs('msis.simulation', level='INFO') as logs:
            results = simulation.run()

        self.assertIn('Simulating 3 steps', logs.output[0])

        self.assertEqual([result.state.time for result in results], times)

        for result, time in zip(results, times):

            with self.subTest(time=time):

                np.testing.assert_array_equal(result.state.position, self.orbit.position(time))

                # a nadir pointing camera always sees the Moon in the image center
                self.assertGreater(len(result.patches), 0)
                self.assertGreater(len(result.pixel_information), 0)

    def test_run_batch(self):

        batch = [Spacecraft(fixed_position=[3e6, 0, 0], fixed_time=51600.0),
                 Spacecraft(fixed_position=[1e7, 0, 0], fixed_time=51500.0)]

        results = Simulation.from_batch(self.options, SUN, batch).run()

        self.assertEqual([result.state.time for result in results], [51600.0, 51500.0])
        self.assertIs(results[1].state.spacecraft, batch[1])

        # far away the Moon covers less of the image
        self.assertLess(len(results[1].pixel_information), len(results[0].pixel_information))

    def test_run_parallel(self):

        times = [51544.5, 51544.52, 51544.54]

        sequential = Simulation(self.options, SUN, spacecraft=self.spacecraft, times=times).run()
        parallel = Simulation(self.options, SUN, spacecraft=self.spacecraft, times=times).run(processes=2)

        for first, second in zip(sequential, parallel):

            with self.subTest(time=first.state.time):

                self.assertEqual(first.state.time, second.state.time)
                np.testing.assert_array_equal(first.state.position, second.state.position)
                self.assertEqual(first.patches, second.patches)
                self.assertEqual(first.pixel_information, second.pixel_information)

    def test_write_outputs(self):

        with TemporaryDirectory() as directory:

            options = SimulationOptions(width=40, height=40, grid_h=20, grid_v=20, output_path=directory)

            simulation = Simulation(options, SUN, spacecraft=self.spacecraft, times=[51544.5, 51544.6],
                                    command_line='msis -t 51544.5')

            simulation.run()

            for step in range(2):

                with self.subTest(step=step):

                    stem = FILE_STEM.format(step)

                    self.assertTrue((Path(directory) / (stem + '.pov')).is_file())
                    self.assertTrue((Path(directory) / (stem + '.xml')).is_file())
                    self.assertFalse((Path(directory) / (stem + '.png')).exists())

    def test_missing_output_path(self):

        options = SimulationOptions(output_path='/this/path/does/not/exist/msis')

        with self.assertRaises(ConfigurationError):
            Simulation(options, SUN, spacecraft=self.spacecraft, times=[51544.5]).run()

    def test_render_and_annotate(self):

        def fake_render(scene_path, options):
            image_path = Path(scene_path).with_suffix('.png')
            imsave(str(image_path), np.full((options.height, options.width), 0.5), cmap='gray')
            return image_path

        with TemporaryDirectory() as directory:

            options = SimulationOptions(width=40, height=40, grid_h=20, grid_v=20, output_path=directory,
                                        render=True, write_annotation=True)

            simulation = Simulation(options, SUN, spacecraft=self.spacecraft, times=[51544.5])

            with mock.patch('msis.simulation.render_scene', side_effect=fake_render) as render:
                simulation.run()

            render.assert_called_once()

            stem = Path(directory) / FILE_STEM.format(0)

            self.assertTrue(stem.with_name(stem.name + '.png').is_file())
            self.assertTrue(stem.with_name(stem.name + '.annotated.png').is_file())
