# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


"""
Run the Moon Surface Illumination Simulation from the command line.

For each simulation time (or each state of a batch) this script computes the spacecraft state and the camera frame,
selects the visible surface patches, computes the local solar illumination directions on a pixel grid, and writes a
POV-Ray scene and an XML metadata file to the output directory.  By default the scene is then rendered with POV-Ray
(``--no-render`` turns this off) and optionally annotated (``--rendering-annotation``).

The spacecraft is specified in one of four ways:

* a set of Kepler elements ``-k {a,e,omega,Omega,i,M0}`` (meters and radians) with an epoch ``-e``
* a set of state vectors ``-s {x,y,z,vx,vy,vz}`` (meters and meters per second) valid at the epoch ``-e``
* a single fixed state ``--fixed-state {t,x,y,z,qx,qy,qz,qs}``
* a batch file ``--batch-file path`` where each line is ``t x y z qx qy qz qs``

Quaternions are given scalar last.  A zero quaternion in a fixed state or batch file means nadir pointing.  Lists may
be given with or without the surrounding braces.

The Sun position comes from spice (``--kernels``, typically a meta kernel) or is given directly with
``--sun-position``.

For example::

    msis -k {1837150,0.01,0,0,0.5,0} -e 51544.5 -tt {51544.5,51544.51} --kernels msis.tm -o out -p patterns
"""

import logging
import re
import shlex
import sys
import warnings
from argparse import ArgumentParser, ArgumentTypeError
from functools import partial
from pathlib import Path
from typing import Callable, Optional

import numpy as np

from msis.errors import ConfigurationError, MSISError
from msis.options import SimulationOptions, SURFACE_RESOLUTIONS
from msis.orbits.kepler import DEFAULT_EPOCH, KeplerOrbit, OrbitalElements
from msis.rotations import Quaternion
from msis.simulation import Simulation
from msis.spacecraft import Spacecraft
from msis.utilities.spice_interface import FixedPosition, SunPosition, load_kernels


_LOGGER: logging.Logger = logging.getLogger(__name__)
"""
The logging utility for reporting errors from the script
"""


_NUMBER = r'[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?'

_BATCH_LINE = re.compile(r'^\s*' + r'\s+'.join(['(' + _NUMBER + ')'] * 8) + r'\s*$')
"""
A batch file line: ``t x y z qx qy qz qs``
"""


def parse_numeric_list(text: str, length: Optional[int] = None) -> list[float]:
    """
    Parse a comma separated list of numbers, optionally surrounded by braces (``{1,2,3}``).

    :param text: The text to parse
    :param length: The required number of values.  If ``None`` any (non-zero) number is accepted
    :return: The values
    :raises ArgumentTypeError: If the text is not a list of numbers of the required length
    """

    stripped = text.strip()

    if stripped.startswith('{') and stripped.endswith('}'):
        stripped = stripped[1:-1]

    try:
        values = [float(value) for value in stripped.split(',')]
    except ValueError:
        raise ArgumentTypeError('{!r} is not a comma separated list of numbers'.format(text))

    if (length is not None) and (len(values) != length):
        raise ArgumentTypeError('{!r} must contain exactly {} values'.format(text, length))

    return values


def _list_type(length: Optional[int] = None) -> Callable[[str], list[float]]:
    parser = partial(parse_numeric_list, length=length)
    # argparse uses the name in its error messages
    parser.__name__ = 'list of {} numbers'.format(length) if length is not None else 'list of numbers'
    return parser


def fixed_state_spacecraft(values: list[float]) -> Spacecraft:
    """
    Create a spacecraft bound to a time from ``[t, x, y, z, qx, qy, qz, qs]``.

    A zero quaternion gives a nadir pointing spacecraft.

    :param values: The 8 values of the state
    :return: The spacecraft
    """

    time = values[0]
    quaternion = Quaternion.from_array(values[4:8])

    if quaternion.norm() == 0:
        warnings.warn('zero orientation quaternion at time {}; pointing the camera at nadir'.format(time))
        quaternion = None

    return Spacecraft(fixed_position=values[1:4], initial_orientation=quaternion, fixed_time=time)


def parse_batch_file(path: Path) -> list[Spacecraft]:
    """
    Read a batch file into a list of spacecraft, one per line.

    Each line holds 8 whitespace separated numbers, ``t x y z qx qy qz qs``, where ``t`` is the time (MJD), ``x y z``
    is the position in meters, and ``qx qy qz qs`` is the scalar last orientation quaternion (all zero for nadir
    pointing).  Blank lines are ignored.

    :param path: The batch file
    :return: The spacecraft in file order
    :raises ConfigurationError: If the file does not exist or a line is invalid
    """

    path = Path(path)

    if not path.is_file():
        raise ConfigurationError('Specified batch file could not be opened: {}'.format(path))

    batch = []

    with path.open('r') as batch_file:
        for number, line in enumerate(batch_file, start=1):

            if not line.strip():
                continue

            match = _BATCH_LINE.match(line)

            if match is None:
                raise ConfigurationError('Batch file {} is invalid at line {}: {!r}'.format(path, number,
                                                                                          line.rstrip('\n')))

            batch.append(fixed_state_spacecraft([float(value) for value in match.groups()]))

    if not batch:
        raise ConfigurationError('Batch file {} does not contain any states'.format(path))

    return batch


def _get_parser() -> ArgumentParser:
    """
    Helper function for the argparse extension

    :return: A setup argument parser
    """

    parser = ArgumentParser(description='Simulate the illumination of the lunar surface seen by a spacecraft camera')

    timing = parser.add_mutually_exclusive_group()
    timing.add_argument('-t', '--time', help='A single simulation time (MJD)', type=float)
    timing.add_argument('-tt', '--times', help='Multiple simulation times (MJD) as {t1,t2,...}', type=_list_type())

    parser.add_argument('-e', '--epoch', help='The epoch (MJD) of the orbit and attitude', type=float,
                        default=DEFAULT_EPOCH)

    orbit = parser.add_mutually_exclusive_group()
    orbit.add_argument('-k', '--kepler-set', help='Kepler elements {a,e,omega,Omega,i,M0} in meters and radians',
                       type=_list_type(6))
    orbit.add_argument('-s', '--state-vectors', help='State vectors {x,y,z,vx,vy,vz} in meters and meters/second',
                       type=_list_type(6))
    orbit.add_argument('--fixed-state', help='A single fixed state {t,x,y,z,qx,qy,qz,qs}', type=_list_type(8))
    orbit.add_argument('--batch-file', help='A file of fixed states, one "t x y z qx qy qz qs" per line', type=Path)

    parser.add_argument('-a', '--attitude', help='The orientation quaternion at the epoch {qx,qy,qz,qs}.  If not '
                                                 'given the camera points at nadir', type=_list_type(4))
    parser.add_argument('-at', '--attitude-transition', help='The attitude transition rates {x,y,z}',
                        type=_list_type(3), default=[0.0, 0.0, 0.0])

    parser.add_argument('-o', '--output-dir', help='The directory to write the results to', type=Path,
                        default=Path('.'))
    parser.add_argument('-p', '--pattern-repos', help='The surface pattern repository', type=Path)
    parser.add_argument('--pov-path', help='The POV-Ray executable (or the directory containing it)',
                        default='povray')
    parser.add_argument('--no-render', help="Don't run POV-Ray on the scene files", action='store_true')
    parser.add_argument('--rendering-annotation', help='Draw the illumination directions onto the renderings',
                        action='store_true')
    parser.add_argument('--ignore-sun', help='Place the light source at the camera', action='store_true')

    parser.add_argument('-f', '--fov', help='The horizontal field of view in degrees', type=float, default=40.0)
    parser.add_argument('-w', '--width', help='The image width in pixels', type=int, default=1024)
    parser.add_argument('-H', '--height', help='The image height in pixels', type=int, default=1024)
    parser.add_argument('-r', '--res', help='The surface resolution in px/deg', type=int, choices=SURFACE_RESOLUTIONS,
                        default=4)
    parser.add_argument('-g', '--grid', help='The grid spacing in pixels (horizontal and vertical)', type=int)
    parser.add_argument('-gH', '--gridH', help='The horizontal grid spacing in pixels', type=int)
    parser.add_argument('-gV', '--gridV', help='The vertical grid spacing in pixels', type=int)

    sun = parser.add_mutually_exclusive_group()
    sun.add_argument('--kernels', help='Spice kernels (or meta kernels) to load for the Sun position', nargs='+',
                     type=Path)
    sun.add_argument('--sun-position', help='A fixed Sun position {x,y,z} in meters', type=_list_type(3))

    parser.add_argument('--processes', help='The number of worker processes to use', type=int)
    parser.add_argument('-v', '--verbose', help='Print debugging information', action='store_true')

    return parser


def _povray_executable(pov_path: str) -> str:
    path = Path(pov_path)

    if path.is_dir():
        return str(path / 'povray')

    return pov_path


def build_options(args) -> SimulationOptions:
    """
    Create the simulation options from parsed command line arguments.

    :param args: The parsed arguments
    :return: The options
    :raises ConfigurationError: If an option is invalid
    """

    grid_h = args.gridH if args.gridH is not None else (args.grid if args.grid is not None else 50)
    grid_v = args.gridV if args.gridV is not None else (args.grid if args.grid is not None else 50)

    options = SimulationOptions(fov=args.fov, width=args.width, height=args.height, resolution=args.res,
                                grid_h=grid_h, grid_v=grid_v, output_path=args.output_dir,
                                pattern_repository=args.pattern_repos,
                                povray_executable=_povray_executable(args.pov_path), ignore_sun=args.ignore_sun,
                                write_annotation=args.rendering_annotation, render=not args.no_render)

    options.check_paths()

    return options


def build_simulation(args, options: SimulationOptions, command_line: str = '') -> Simulation:
    """
    Create the simulation from parsed command line arguments.

    :param args: The parsed arguments
    :param options: The simulation options
    :param command_line: The command line recorded in the metadata
    :return: The simulation
    :raises ConfigurationError: If the spacecraft, times, or Sun position are not given or invalid
    """

    if args.sun_position is not None:
        ephemeris = FixedPosition(args.sun_position)
    elif args.kernels:
        load_kernels(args.kernels)
        ephemeris = SunPosition(kernels=args.kernels)
    else:
        raise ConfigurationError('Either spice kernels (--kernels) or a Sun position (--sun-position) is required')

    if args.batch_file is not None:
        return Simulation.from_batch(options, ephemeris, parse_batch_file(args.batch_file), command_line=command_line)

    if args.fixed_state is not None:
        return Simulation.from_batch(options, ephemeris, [fixed_state_spacecraft(args.fixed_state)],
                                     command_line=command_line)

    if args.kepler_set is not None:
        orbit = KeplerOrbit(OrbitalElements(*args.kepler_set, epoch=args.epoch, body_radius=options.body_radius),
                            gravitational_parameter=options.gravitational_parameter,
                            tolerance=options.kepler_tolerance, max_iterations=options.max_kepler_iterations)
    elif args.state_vectors is not None:
        orbit = KeplerOrbit.from_state_vectors(args.state_vectors[:3], args.state_vectors[3:], epoch=args.epoch,
                                               gravitational_parameter=options.gravitational_parameter,
                                               body_radius=options.body_radius, tolerance=options.kepler_tolerance,
                                               max_iterations=options.max_kepler_iterations)
    else:
        raise ConfigurationError('No orbit shape has been given.  Please enter either a set of Kepler elements or a '
                                 'set of state vectors')

    if args.time is not None:
        times = [args.time]
    elif args.times is not None:
        times = args.times
    else:
        raise ConfigurationError('No simulation time(s) have been given.  Please enter at least one simulation time')

    initial_orientation = None if args.attitude is None else Quaternion.from_array(args.attitude)

    spacecraft = Spacecraft(orbit=orbit, initial_orientation=initial_orientation,
                            orientation_rate=np.array(args.attitude_transition))

    return Simulation(options, ephemeris, spacecraft=spacecraft, times=times, command_line=command_line)


def main(argv: Optional[list[str]] = None):

    parser = _get_parser()

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    command_line = shlex.join(sys.argv[1:] if argv is None else argv)

    try:
        options = build_options(args)
        simulation = build_simulation(args, options, command_line=command_line)
    except ConfigurationError as e:
        parser.error(str(e))

    try:
        simulation.run(processes=args.processes)
    except MSISError as e:
        _LOGGER.error(str(e))
        sys.exit(1)


if __name__ == "__main__":

    main()
