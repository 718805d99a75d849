# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


"""
This module writes the POV-Ray scene file for a simulation step and runs POV-Ray on it.

The scene (POV-Ray 3.7 syntax) contains

* a perspective camera at the spacecraft position (in kilometers) with the ``right``, ``up``, and ``direction`` vectors
  of the :class:`.CameraFrame`
* a white light source at the Sun (or at the camera when :attr:`.SimulationOptions.ignore_sun` is set)
* an ``#include`` of the surface pattern file of every visible surface patch from the pattern repository
  (``<repository>/<resolution>/pattern_LDEM_<resolution>_lat_<start>_<end>_lon_<start>_<end>.inc``)
* a comment block with the step time, position, and orientation

The last line of the file is a comment holding the MD5 hash of everything before it, which can be used to check that
a scene was not modified after it was written.
"""

import hashlib
import logging
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from msis import __version__
from msis.errors import RenderError
from msis.options import SimulationOptions

if TYPE_CHECKING:
    from msis.simulation import StepResult


_LOGGER: logging.Logger = logging.getLogger(__name__)
"""
The logging utility for reporting scene writing and rendering
"""


SCIENTIFIC_FORMAT: str = '{:+.15E}'
"""
The format used for the values written to comment blocks and metadata
"""

METERS_TO_KILOMETERS: float = 1e-3

_HEADER = """#version 3.7;

#declare Orange = rgb <1,0.5,0>;
#declare Red = rgb <1,0,0>;
#declare Yellow = rgb <1,1,0>;
#declare moon = texture
                {
                  pigment { color rgb<0.8, 0.8, 0.8> }
                  finish
                  {
                    ambient 0.0
                    diffuse 0.8
                  }
                }

global_settings
{
   charset utf8
   assumed_gamma 1.0
}
"""

# the visible glow drawn around the Sun
_SUN_LOOKS_LIKE = """  looks_like
  {
    sphere
    {
      0, 1000
      pigment { rgbt 1 }
      hollow
      interior
      {
        media
        {
          emission 1
          density
          {
            spherical
            density_map
            {
              [0 rgb 0]
              [60 Orange]
              [80 Red]
              [100 Yellow]
            }
            scale 1000
          }
        }
      }
    }
  }
"""


def _pov_vector(vector, fmt: str = '{:.7f}') -> str:
    return '<' + ', '.join(fmt.format(component) for component in vector) + '>'


def _scientific_list(vector) -> str:
    return '[' + ','.join(SCIENTIFIC_FORMAT.format(component) for component in vector) + ']'


def include_path(pattern_repository: Path, resolution: int, pattern_name: str) -> str:
    """
    The path of a surface pattern include file as written in the scene.

    :param pattern_repository: The root of the pattern repository
    :param resolution: The surface resolution in pixels per degree
    :param pattern_name: The file stem of the pattern (see :meth:`.SurfacePatch.pattern_name`)
    :return: The path as a POSIX string
    """

    return (Path(pattern_repository) / str(resolution) / (pattern_name + '.inc')).as_posix()


def build_scene(result: 'StepResult', options: SimulationOptions) -> str:
    """
    Build the text of the POV-Ray scene for a step (without the trailing hash line).

    :param result: The result of the step
    :param options: The simulation options
    :return: The scene text
    """

    state = result.state
    camera = state.camera

    lines = [_HEADER,
             'camera',
             '{',
             '  perspective',
             '  location ' + _pov_vector(camera.position * METERS_TO_KILOMETERS, '{:.6f}'),
             '  right ' + _pov_vector(camera.right),
             '  up ' + _pov_vector(camera.up),
             '  direction ' + _pov_vector(camera.direction),
             '}',
             '',
             'light_source',
             '{']

    if options.ignore_sun:
        lines.append('  ' + _pov_vector(camera.position * METERS_TO_KILOMETERS, '{:.6f}'))
        lines.append('  color rgb<1, 1, 1>')
    else:
        lines.append('  ' + _pov_vector(state.sun_position * METERS_TO_KILOMETERS, '{:.6f}'))
        lines.append('  color rgb<1, 1, 1>')
        lines.append(_SUN_LOOKS_LIKE.rstrip('\n'))

    lines.extend(['}', ''])

    repository = options.pattern_repository if options.pattern_repository is not None else Path('.')

    for patch in result.patches:
        lines.append('#include "{}"'.format(include_path(repository, options.resolution,
                                                         patch.pattern_name(options.resolution))))

    lines.extend(['',
                  '//-------------------------DEBUG INFORMATION-------------------------',
                  '// MSIS Version: ' + __version__,
                  '// Config:',
                  '//   SimTime:              ' + SCIENTIFIC_FORMAT.format(state.time),
                  '//   s/c position:         ' + _scientific_list(state.position),
                  '//   s/c orientation:      ' + _scientific_list(state.orientation.as_array()),
                  '//-----------------------END DEBUG INFORMATION-----------------------'])

    return '\n'.join(lines) + '\n'


def write_scene_file(result: 'StepResult', options: SimulationOptions, path: Path) -> str:
    """
    Write the POV-Ray scene file of a step followed by the MD5 hash line.

    :param result: The result of the step
    :param options: The simulation options
    :param path: The file to write
    :return: The MD5 hex digest of the scene (without the hash line)
    """

    text = build_scene(result, options)

    digest = hashlib.md5(text.encode('utf-8')).hexdigest()

    with open(path, 'w', newline='\n', encoding='utf-8') as scene_file:
        scene_file.write(text)
        scene_file.write('// {}\n'.format(digest))

    _LOGGER.debug(f'wrote {len(result.patches)} includes to {path} (md5 {digest})')

    return digest


def render_command(scene_path: Path, image_path: Path, options: SimulationOptions) -> list[str]:
    """
    Build the POV-Ray command line used to render a scene.

    :param scene_path: The scene file
    :param image_path: The PNG file to write
    :param options: The simulation options
    :return: The command as a list of arguments
    """

    return [options.povray_executable,
            '+I{}'.format(scene_path),
            '+O{}'.format(image_path),
            '+W{}'.format(options.width),
            '+H{}'.format(options.height),
            '+FN', '+Q11', '+A0.3', '+R3', '+J0.5', '-D']


def render_scene(scene_path: Path, options: SimulationOptions) -> Path:
    """
    Render a scene file with POV-Ray.

    The image is written next to the scene with the ``.png`` extension.

    :param scene_path: The scene file
    :param options: The simulation options
    :return: The path to the rendered image
    :raises RenderError: If POV-Ray cannot be started or exits with an error
    """

    scene_path = Path(scene_path)
    image_path = scene_path.with_suffix('.png')

    command = render_command(scene_path, image_path, options)

    _LOGGER.debug(f'running {" ".join(command)}')

    try:
        subprocess.run(command, check=True, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise RenderError('The POV-Ray executable could not be found: {}'.format(options.povray_executable)) from e
    except subprocess.CalledProcessError as e:
        raise RenderError('POV-Ray failed to render {} (exit status {}):\n{}'.format(scene_path, e.returncode,
                                                                                   e.stderr)) from e

    return image_path
