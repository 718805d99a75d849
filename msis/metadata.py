# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


"""
This module writes the XML metadata file that accompanies each rendering.

The document has the root ``MSISRendering`` with two children.  ``GeneralInformation`` holds the frame level values
(the simulation time as MJD and UTC, the camera position and orientation, the Sun position, the flight altitude over
the mean Moon radius, the surface resolution, the field of view, the MSIS version, and the command line).
``PixelInformation`` holds one ``Pixel`` element (attributes ``h`` and ``v`` for the column and row) for every grid
pixel that sees the Moon, with its ``SelenographicCoordinates`` and its ``IlluminationDirection`` in degrees.

The document is built with `lxml <https://lxml.de/>`_.
"""

from pathlib import Path
from typing import TYPE_CHECKING

import lxml.etree as etree  # nosec

from msis import __version__
from msis.options import SimulationOptions
from msis.utilities.time import format_utc

if TYPE_CHECKING:
    from msis.simulation import StepResult


SCIENTIFIC_FORMAT: str = '{:+.15E}'
"""
The format used for floating point values in the metadata
"""


def _vector_element(parent: etree._Element, tag: str, vector, unit: str = 'm') -> etree._Element:
    element = etree.SubElement(parent, tag, unit=unit)
    etree.SubElement(element, 'Vector3D', x=SCIENTIFIC_FORMAT.format(vector[0]), y=SCIENTIFIC_FORMAT.format(vector[1]),
                     z=SCIENTIFIC_FORMAT.format(vector[2]))
    return element


def build_metadata(result: 'StepResult', options: SimulationOptions, command_line: str = '') -> etree._Element:
    """
    Build the metadata document for a step.

    :param result: The result of the step
    :param options: The simulation options
    :param command_line: The command line the simulation was started with
    :return: The ``MSISRendering`` root element
    """

    state = result.state

    root = etree.Element('MSISRendering')

    general = etree.SubElement(root, 'GeneralInformation')

    simulation_time = etree.SubElement(general, 'SimulationTime')
    etree.SubElement(simulation_time, 'MJD').text = SCIENTIFIC_FORMAT.format(state.time)
    etree.SubElement(simulation_time, 'UTC').text = format_utc(state.time) + 'Z'

    _vector_element(general, 'CameraPosition', state.position)

    orientation = etree.SubElement(general, 'CameraOrientation')
    etree.SubElement(orientation, 'Quaternion', r=SCIENTIFIC_FORMAT.format(state.orientation.real),
                     x=SCIENTIFIC_FORMAT.format(state.orientation.vector[0]),
                     y=SCIENTIFIC_FORMAT.format(state.orientation.vector[1]),
                     z=SCIENTIFIC_FORMAT.format(state.orientation.vector[2]))

    _vector_element(general, 'SunPosition', state.sun_position)

    etree.SubElement(general, 'FlightAltitude', unit='m').text = SCIENTIFIC_FORMAT.format(
        state.altitude - options.body_radius)
    etree.SubElement(general, 'SurfaceResolution', unit='px/deg').text = str(options.resolution)
    etree.SubElement(general, 'FOV', unit='deg').text = '{:g}'.format(options.fov)
    etree.SubElement(general, 'MSISVersion').text = __version__
    etree.SubElement(general, 'CommandLine').text = command_line

    pixels = etree.SubElement(root, 'PixelInformation')

    for (x, y), information in result.pixel_information.items():
        pixel = etree.SubElement(pixels, 'Pixel', h=str(x), v=str(y))
        etree.SubElement(pixel, 'SelenographicCoordinates', lat=SCIENTIFIC_FORMAT.format(information.lat),
                         lon=SCIENTIFIC_FORMAT.format(information.lon), units='deg')
        etree.SubElement(pixel, 'IlluminationDirection', unit='deg').text = SCIENTIFIC_FORMAT.format(
            information.illumination_angle)

    return root


def write_metadata(result: 'StepResult', options: SimulationOptions, path: Path, command_line: str = ''):
    """
    Write the metadata document for a step to ``path``.

    :param result: The result of the step
    :param options: The simulation options
    :param path: The XML file to write
    :param command_line: The command line the simulation was started with
    """

    tree = etree.ElementTree(build_metadata(result, options, command_line=command_line))

    tree.write(str(path), pretty_print=True, xml_declaration=True, encoding='UTF-8')
