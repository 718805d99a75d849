# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


"""
This module draws the local solar illumination directions and the frame information onto a rendered image.

For every grid pixel that sees the Moon a red line of length ``grid_h/2`` pixels is drawn from the pixel in the
direction of its illumination angle (the angle is measured from the image +y axis toward the +x axis, see
:func:`.rotate_2d`), together with a dot marking the pixel.  The simulation time, spacecraft position and orientation,
Sun position, flight altitude, surface resolution, and field of view are written in the top left corner.

The annotation is done with matplotlib without using pyplot so that no display is needed.
"""

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

from matplotlib.figure import Figure
from matplotlib.image import imread

from msis import __version__
from msis.options import SimulationOptions
from msis.utilities.time import format_utc
from msis.utilities.vectors import rotate_2d

if TYPE_CHECKING:
    from msis.simulation import StepResult


SCIENTIFIC_FORMAT: str = '{:+.15E}'

TEXT_SCALE: float = 0.0095
"""
The height of the annotation text in pixels as a fraction of the image width
"""

LINE_SPACING: float = 1.8
"""
The distance between annotation text lines as a multiple of the text height
"""


def _scientific_list(vector) -> str:
    return '[' + ','.join(SCIENTIFIC_FORMAT.format(component) for component in vector) + ']'


def annotation_text(result: 'StepResult', options: SimulationOptions) -> list[str]:
    """
    The lines of frame information written onto the annotated image.

    :param result: The result of the step
    :param options: The simulation options
    :return: The text lines
    """

    state = result.state

    return ['Simulation Timecode:        {} MJD ({}Z UTC)'.format(SCIENTIFIC_FORMAT.format(state.time),
                                                                 format_utc(state.time)),
            'S/C Position:               {} m'.format(_scientific_list(state.position)),
            'S/C Orientation Quaternion: {}'.format(_scientific_list(state.orientation.as_array())),
            'Sun Position:               {} m'.format(_scientific_list(state.sun_position)),
            'Flight Altitude over MMR:   {} m'.format(SCIENTIFIC_FORMAT.format(state.altitude - options.body_radius)),
            'Surface Mesh Resolution:    {} px/deg'.format(options.resolution),
            'FOV:                        {:g} deg (hor. & vert.), optics: perspective camera'.format(options.fov)]


def illumination_line(x: float, y: float, angle: float, length: float) -> tuple[np.ndarray, np.ndarray]:
    """
    The end points of the illumination direction line drawn for a pixel.

    :param x: The column of the pixel
    :param y: The row of the pixel
    :param angle: The illumination angle in degrees
    :param length: The length of the line in pixels
    :return: The start and end points of the line in image coordinates
    """

    start = np.array([x, y], dtype=np.float64)

    return start, start + rotate_2d([0.0, length], np.radians(angle))


def text_origin(line: int, width: int) -> tuple[float, float]:
    """
    The image location in pixels of the upper left corner of an information line (counted from 1).

    :param line: The number of the line
    :param width: The width of the image in pixels
    :return: The column and row of the text origin
    """

    text_height = width * TEXT_SCALE

    return 2 * text_height, line * LINE_SPACING * text_height


def annotate_rendering(image_path: Path, result: 'StepResult', options: SimulationOptions, output_path: Path):
    """
    Draw the illumination directions and the frame information onto a rendered image and save it.

    :param image_path: The rendered image
    :param result: The result of the step that was rendered
    :param options: The simulation options
    :param output_path: The file to save the annotated image to
    """

    image = imread(str(image_path))

    height, width = image.shape[:2]
    dpi = 100

    figure = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
    axes = figure.add_axes((0, 0, 1, 1))
    axes.set_axis_off()
    axes.imshow(image, cmap='gray', interpolation='nearest')
    axes.set_xlim(-0.5, width - 0.5)
    axes.set_ylim(height - 0.5, -0.5)

    for (x, y), information in result.pixel_information.items():
        # pixel (1, 1) is drawn at array location (0, 0)
        start, end = illumination_line(x - 1, y - 1, information.illumination_angle, options.grid_h / 2)

        axes.plot([start[0], end[0]], [start[1], end[1]], color='red', linewidth=2, solid_capstyle='round')
        axes.plot(start[0], start[1], 'o', color='red', markersize=4)

    # placement is in pixels, matplotlib wants the font size in points
    text_height = width * TEXT_SCALE
    font_size = text_height * 72 / dpi

    for index, line in enumerate(annotation_text(result, options), start=1):
        axes.text(*text_origin(index, width), line, color='white', fontsize=font_size, family='monospace',
                  verticalalignment='top')

    axes.text(2 * text_height, height - 2 * LINE_SPACING * text_height,
              'Moon Surface Illumination Simulation (MSIS), v' + __version__, color='white', fontsize=font_size,
              verticalalignment='top')

    figure.savefig(str(output_path), dpi=dpi)
