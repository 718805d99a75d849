# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


"""
This module provides the :class:`Simulation` class which drives the geometry engine over a set of simulation steps.

Description
-----------

A simulation step is a spacecraft template evaluated at a time.  For each step :func:`compute_step` creates the
:class:`.SpacecraftState`, selects the visible surface patches (:func:`.select_surface_patches`), and computes the
illumination information on the pixel grid (:func:`.compute_pixel_grid`), returning a :class:`StepResult`.  Steps do
not depend on each other, so they can be computed in parallel across processes.

A simulation is either a time series (a single spacecraft evaluated at a list of times) or a batch (a list of
spacecraft each bound to its own fixed time, see :meth:`Simulation.from_batch`).

When an output directory is configured, each step is written as ``MoonSurfIllumSim_step_<n>.pov`` (the POV-Ray scene,
:func:`.write_scene_file`) and ``MoonSurfIllumSim_step_<n>.xml`` (the metadata, :func:`.write_metadata`), optionally
rendered to ``.png`` (:func:`.render_scene`) and annotated (:func:`.annotate_rendering`).

Use
---

    >>> from msis.options import SimulationOptions
    >>> from msis.simulation import Simulation
    >>> from msis.spacecraft import Spacecraft
    >>> from msis.utilities.spice_interface import FixedPosition
    >>> sim = Simulation(SimulationOptions(width=256, height=256), FixedPosition([1.5e11, 0, 0]),
    ...                  spacecraft=Spacecraft(fixed_position=[3e6, 0, 0]), times=[51544.5])
    >>> results = sim.run()
"""

import logging
from dataclasses import dataclass
from multiprocessing import Pool
from pathlib import Path
from typing import Iterable, Optional, Sequence

from msis._typing import Ephemeris
from msis.annotation import annotate_rendering
from msis.errors import ConfigurationError
from msis.metadata import write_metadata
from msis.options import SimulationOptions
from msis.ray_tracer.illumination import PixelInformation, compute_pixel_grid
from msis.ray_tracer.patches import PatchSet, select_surface_patches
from msis.ray_tracer.sphere import Sphere
from msis.scene import render_scene, write_scene_file
from msis.spacecraft import Spacecraft, SpacecraftState, create_spacecraft_state
from msis.utilities.time import format_utc


_LOGGER: logging.Logger = logging.getLogger(__name__)
"""
The logging utility for reporting progress of the simulation
"""


FILE_STEM: str = 'MoonSurfIllumSim_step_{:05d}'
"""
The format of the file names (without extension) written for each step
"""


@dataclass(frozen=True, eq=False)
class StepResult:
    """
    The complete result of a single simulation step.
    """

    state: SpacecraftState
    """
    The spacecraft state at the step time
    """

    patches: PatchSet
    """
    The surface patches visible in the camera frame
    """

    pixel_information: dict[tuple[int, int], PixelInformation]
    """
    The illumination information of every grid pixel that sees the Moon, keyed by ``(x, y)``
    """


def compute_step(spacecraft: Spacecraft, time: float, options: SimulationOptions, ephemeris: Ephemeris) -> StepResult:
    """
    Compute a single simulation step.

    This is a module level function so that it can be sent to worker processes.

    :param spacecraft: The spacecraft template
    :param time: The simulation time as a Modified Julian Date
    :param options: The simulation options
    :param ephemeris: The ephemeris giving the body centered Sun position in meters
    :return: The result of the step
    :raises KeplerConvergenceError: If the orbit cannot be propagated to ``time``
    """

    state = create_spacecraft_state(spacecraft, time, options, ephemeris)

    sphere = Sphere(options.body_radius)

    patches = select_surface_patches(state.camera, sphere)

    pixel_information = compute_pixel_grid(state.camera, state.sun_position, sphere, grid_h=options.grid_h,
                                           grid_v=options.grid_v, offset=options.illumination_offset)

    return StepResult(state, patches, pixel_information)


class Simulation:
    """
    This class runs the geometry engine for every step of a simulation and writes the outputs.

    The steps are available through :attr:`steps` as ``(spacecraft, time)`` pairs.  Calling :meth:`run` computes all
    of the steps (optionally in parallel) and, if :attr:`.SimulationOptions.output_path` is set, writes the scene and
    metadata files for each step as soon as it is complete.
    """

    def __init__(self, options: SimulationOptions, ephemeris: Ephemeris, spacecraft: Optional[Spacecraft] = None,
                 times: Iterable[float] = (), batch: Optional[Sequence[Spacecraft]] = None,
                 command_line: str = ''):
        """
        :param options: The simulation options
        :param ephemeris: The ephemeris giving the body centered Sun position in meters
        :param spacecraft: The spacecraft template for a time series simulation
        :param times: The simulation times (MJD) for a time series simulation
        :param batch: The spacecraft templates (each with a fixed time) for a batch simulation
        :param command_line: The command line the simulation was started with (recorded in the metadata)
        :raises ConfigurationError: If neither (or both) of ``spacecraft`` and ``batch`` are given, or if a batch
                                    spacecraft has no fixed time
        """

        if (spacecraft is None) == (batch is None):
            raise ConfigurationError('Exactly one of a spacecraft (with times) or a batch of spacecraft is required')

        self.options: SimulationOptions = options
        """
        The settings of the simulation
        """

        self.ephemeris: Ephemeris = ephemeris
        """
        The ephemeris giving the Sun position
        """

        self.command_line: str = command_line
        """
        The command line recorded in the metadata files
        """

        self.steps: list[tuple[Spacecraft, float]] = []
        """
        The ``(spacecraft, time)`` pair for each step in order
        """

        if batch is not None:
            for member in batch:
                if member.fixed_time is None:
                    raise ConfigurationError('Every spacecraft in a batch must have a fixed time')
                self.steps.append((member, member.fixed_time))
        else:
            self.steps.extend((spacecraft, float(time)) for time in times)

    @classmethod
    def from_batch(cls, options: SimulationOptions, ephemeris: Ephemeris, batch: Sequence[Spacecraft],
                   command_line: str = '') -> 'Simulation':
        """
        Create a batch simulation where each spacecraft is evaluated at its own fixed time.

        :param options: The simulation options
        :param ephemeris: The ephemeris giving the body centered Sun position in meters
        :param batch: The spacecraft templates
        :param command_line: The command line recorded in the metadata files
        :return: The simulation
        """

        return cls(options, ephemeris, batch=batch, command_line=command_line)

    def file_stem(self, step: int) -> Optional[Path]:
        """
        The output path (without extension) for a step, or ``None`` if no output directory is set.

        :param step: The index of the step
        :return: The path stem
        """

        if self.options.output_path is None:
            return None

        return self.options.output_path / FILE_STEM.format(step)

    def run(self, processes: Optional[int] = None) -> list[StepResult]:
        """
        Compute (and write) every step of the simulation.

        :param processes: The number of worker processes to use.  If ``None`` or 1 the steps are computed sequentially
                          in this process
        :return: The results of each step in order
        """

        self.options.check_paths()

        _LOGGER.info(f'Simulating {len(self.steps)} steps')

        arguments = [(spacecraft, time, self.options, self.ephemeris) for spacecraft, time in self.steps]

        results = []

        if (processes is not None) and (processes > 1) and (len(arguments) > 1):
            with Pool(processes) as pool:
                for step, result in enumerate(pool.starmap(compute_step, arguments)):
                    self._report(step, result)
                    results.append(result)
        else:
            for step, args in enumerate(arguments):
                result = compute_step(*args)
                self._report(step, result)
                results.append(result)

        return results

    def _report(self, step: int, result: StepResult):
        """
        Log the result of a step and write its outputs
        """

        state = result.state

        _LOGGER.info(f'Step {step:05d}: {state.time} MJD ({format_utc(state.time)} UTC)')
        _LOGGER.info(f'    S/C position: {state.position.tolist()} m')
        _LOGGER.info(f'    S/C orientation: {state.orientation.as_array().tolist()}')
        _LOGGER.info(f'    Sun position: {state.sun_position.tolist()} m')
        _LOGGER.info(f'    {len(result.patches)} surface patches, {len(result.pixel_information)} grid pixels on '
                     f'the surface')
        _LOGGER.debug(f'    patches: {result.patches.keys}')

        stem = self.file_stem(step)

        if stem is None:
            return

        self.write_outputs(result, stem)

    def write_outputs(self, result: StepResult, stem: Path):
        """
        Write the scene and metadata files for a step and render/annotate them if requested.

        :param result: The result of the step
        :param stem: The output path without extension
        """

        scene_path = stem.parent / (stem.name + '.pov')
        write_scene_file(result, self.options, scene_path)
        _LOGGER.info(f'    POV-Ray file written to {scene_path}')

        metadata_path = stem.parent / (stem.name + '.xml')
        write_metadata(result, self.options, metadata_path, command_line=self.command_line)
        _LOGGER.info(f'    Metadata written to {metadata_path}')

        if self.options.render:
            image_path = render_scene(scene_path, self.options)
            _LOGGER.info(f'    Rendering written to {image_path}')

            if self.options.write_annotation:
                annotated_path = stem.parent / (stem.name + '.annotated.png')
                annotate_rendering(image_path, result, self.options, annotated_path)
                _LOGGER.info(f'    Annotated rendering written to {annotated_path}')
