# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


"""
This module provides the :class:`SimulationOptions` dataclass which holds every setting of a simulation run.

The options are immutable and are passed explicitly to each component that needs them (the spacecraft state factory,
the simulation driver, and the output writers).  Invalid values raise a :class:`.ConfigurationError` when the options
are created.  Use :func:`dataclasses.replace` to derive modified options::

    >>> from dataclasses import replace
    >>> from msis.options import SimulationOptions
    >>> options = SimulationOptions(width=512, height=512)
    >>> wide = replace(options, fov=60)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from msis._typing import PATH
from msis.errors import ConfigurationError
from msis.orbits.kepler import MOON_GM, MOON_RADIUS


SURFACE_RESOLUTIONS: tuple[int, ...] = (4, 16, 64)
"""
The resolutions (pixels per degree) the surface pattern repository is available in
"""


@dataclass(frozen=True)
class SimulationOptions:
    """
    The settings of a simulation run.
    """

    fov: float = 40.0
    """
    The horizontal field of view of the camera in degrees, in (0, 180).
    """

    width: int = 1024
    """
    The number of columns in the rendered image.
    """

    height: int = 1024
    """
    The number of rows in the rendered image.
    """

    resolution: int = 4
    """
    The resolution of the surface patterns to include in the scene in pixels per degree (one of 4, 16, or 64).
    """

    grid_h: int = 50
    """
    The horizontal spacing in pixels of the grid the illumination direction is computed on.
    """

    grid_v: int = 50
    """
    The vertical spacing in pixels of the grid the illumination direction is computed on.
    """

    body_radius: float = MOON_RADIUS
    """
    The mean radius of the Moon in meters.
    """

    gravitational_parameter: float = MOON_GM
    """
    The gravitational parameter of the Moon in m**3/s**2.
    """

    illumination_offset: float = 1000.0
    """
    The distance in meters along the local Sun direction used to build the subsurface illumination point.
    """

    output_path: Optional[PATH] = None
    """
    The directory to write the scene, metadata, and images to.  If ``None`` nothing is written.
    """

    pattern_repository: Optional[PATH] = None
    """
    The directory containing the surface pattern include files (``<repository>/<resolution>/pattern_LDEM_...inc``).
    """

    povray_executable: str = 'povray'
    """
    The name of (or path to) the POV-Ray executable used when :attr:`render` is ``True``.
    """

    ignore_sun: bool = False
    """
    Place the light source at the camera instead of at the Sun.
    """

    write_annotation: bool = False
    """
    Draw the illumination directions onto the rendered image (requires :attr:`render`).
    """

    render: bool = False
    """
    Run POV-Ray on each scene file that is written.
    """

    kepler_tolerance: float = 1e-15
    """
    The convergence tolerance of the Kepler equation solver.
    """

    max_kepler_iterations: int = 100
    """
    The iteration limit of the Kepler equation solver.
    """

    def __post_init__(self):

        if not (0 < self.fov < 180):
            raise ConfigurationError('The field of view must be in (0, 180) degrees: {!r}'.format(self.fov))

        for name in ('width', 'height', 'grid_h', 'grid_v', 'max_kepler_iterations'):
            value = getattr(self, name)
            if (int(value) != value) or (value < 1):
                raise ConfigurationError('{} must be a positive integer: {!r}'.format(name, value))

        if self.resolution not in SURFACE_RESOLUTIONS:
            raise ConfigurationError('The surface resolution must be one of {}: {!r}'.format(SURFACE_RESOLUTIONS,
                                                                                           self.resolution))

        for name in ('body_radius', 'gravitational_parameter', 'illumination_offset', 'kepler_tolerance'):
            if not (getattr(self, name) > 0):
                raise ConfigurationError('{} must be positive: {!r}'.format(name, getattr(self, name)))

        if self.write_annotation and not self.render:
            raise ConfigurationError('Annotating the rendering requires rendering to be turned on')

        if self.output_path is not None:
            object.__setattr__(self, 'output_path', Path(self.output_path))

        if self.pattern_repository is not None:
            object.__setattr__(self, 'pattern_repository', Path(self.pattern_repository))

    def check_paths(self):
        """
        Check that the output directory and the pattern repository exist.

        :raises ConfigurationError: If either path is set and is not an existing directory
        """

        if (self.output_path is not None) and not self.output_path.is_dir():
            raise ConfigurationError("Output path doesn't exist: {}".format(self.output_path))

        if (self.pattern_repository is not None) and not self.pattern_repository.is_dir():
            raise ConfigurationError("Pattern repository path doesn't exist: {}".format(self.pattern_repository))
