# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


r"""
This module provides the pinhole camera frame used to generate the pixel rays of a rendering.

Description
-----------

The camera frame is described by 3 vectors expressed in the body centered frame: the boresight ``direction``, the
``right`` vector (pointing along the image rows toward increasing columns), and the ``up`` vector (pointing along the
image columns toward decreasing rows).  The length of ``right`` is the aspect ratio ``width/height`` and the
``direction`` is scaled so that

.. math::
    \frac{\|\mathbf{r}\|}{\|\mathbf{d}\|} = 2\text{tan}\left(\frac{\text{FOV}}{2}\right)

which makes the image plane :math:`\mathbf{c}+\mathbf{d}+\alpha\mathbf{u}-\beta\mathbf{r}` span the horizontal
field of view for :math:`\alpha,\beta\in[-0.5, 0.5]`.  The (un-normalized) ray through pixel :math:`(x, y)`
(pixel (1, 1) is the top left pixel) of a ``width`` by ``height`` image is then

.. math::
    \mathbf{ray} = \mathbf{d}+\frac{1+h-2y}{2h}\mathbf{u}-\frac{1+w-2x}{2w}\mathbf{r}

Building the frame
------------------

The frame is built from the spacecraft position and orientation by :func:`build_camera_frame`.  The default
(un-rotated) camera looks down the -x axis with ``right`` along +y (:data:`DEFAULT_DIRECTION`,
:func:`default_right`).  When the orientation of the spacecraft is given it is first advanced by
:func:`orientation_transition` and then used to rotate the default vectors.  When it is not given the camera points
at the center of the Moon (nadir) and the orientation is :func:`nadir_orientation`.

    >>> from msis.camera import build_camera_frame, nadir_orientation
    >>> position = [3e6, 0, 0]
    >>> camera = build_camera_frame(position, nadir_orientation(position), 40, 100, 100, nadir=True)
    >>> camera.pixel_ray(50, 50)
"""

from dataclasses import dataclass

import numpy as np

from msis._typing import ARRAY_LIKE, DOUBLE_ARRAY
from msis.rotations import Quaternion, rotation_quaternion
from msis.utilities.spherical_coordinates import spherical_angles
from msis.utilities.vectors import as_vector, cross, norm, unit


DEFAULT_DIRECTION: DOUBLE_ARRAY = as_vector([-1.0, 0.0, 0.0])
"""
The boresight direction of the un-rotated camera
"""

X_AXIS: DOUBLE_ARRAY = as_vector([1.0, 0.0, 0.0])
Y_AXIS: DOUBLE_ARRAY = as_vector([0.0, 1.0, 0.0])
Z_AXIS: DOUBLE_ARRAY = as_vector([0.0, 0.0, 1.0])


def default_right(width: int, height: int) -> DOUBLE_ARRAY:
    """
    The right vector of the un-rotated camera, ``(0, width/height, 0)``.

    :param width: The number of columns in the image
    :param height: The number of rows in the image
    :return: The default right vector
    """

    return np.array([0.0, width / height, 0.0])


def orientation_transition(rate: ARRAY_LIKE, elapsed_seconds: float) -> Quaternion:
    r"""
    Compute the rotation accumulated by a spacecraft turning at a constant ``rate`` over ``elapsed_seconds``.

    The result is the product of three axis rotations

    .. math::
        q = R_z(\omega_z\Delta t)R_y(\omega_y\Delta t)R_x(\omega_x\Delta t)

    where each angle is the rate component multiplied by the elapsed time and used directly as radians.

    :param rate: The rotation rate about the x, y, and z axes
    :param elapsed_seconds: The time since the reference epoch in seconds
    :return: The transition quaternion
    """

    angles = as_vector(rate, 3) * elapsed_seconds

    return (rotation_quaternion(Z_AXIS, angles[2]) *
            rotation_quaternion(Y_AXIS, angles[1]) *
            rotation_quaternion(X_AXIS, angles[0]))


def nadir_orientation(position: ARRAY_LIKE) -> Quaternion:
    r"""
    Compute the orientation that points the default camera from ``position`` toward the center of the Moon.

    .. math::
        q = R_y(\vartheta)R_z(-\varphi)

    where :math:`\varphi` and :math:`\vartheta` are the azimuth and polar angle of the position (see
    :func:`.spherical_angles`).

    :param position: The body centered position of the spacecraft
    :return: The nadir pointing orientation
    """

    azimuth, polar = spherical_angles(position)

    return rotation_quaternion(Y_AXIS, polar) * rotation_quaternion(Z_AXIS, -azimuth)


@dataclass(frozen=True, eq=False)
class CameraFrame:
    """
    The immutable pinhole camera frame of a single rendering.

    All vectors are expressed in the body centered frame.  The position is in meters, the remaining vectors are
    unitless (only their relative lengths matter).
    """

    position: DOUBLE_ARRAY
    """
    The location of the camera in meters
    """

    direction: DOUBLE_ARRAY
    """
    The boresight vector, scaled to ``0.5*|right|/tan(fov/2)``
    """

    right: DOUBLE_ARRAY
    """
    The right vector with length ``width/height``
    """

    up: DOUBLE_ARRAY
    """
    The unit up vector
    """

    fov: float = 40.0
    """
    The horizontal field of view in degrees
    """

    width: int = 1024
    """
    The number of columns in the image
    """

    height: int = 1024
    """
    The number of rows in the image
    """

    def __post_init__(self):
        for name in ('position', 'direction', 'right', 'up'):
            object.__setattr__(self, name, as_vector(getattr(self, name), 3))

    def pixel_ray(self, x: float, y: float) -> DOUBLE_ARRAY:
        """
        The (un-normalized) direction of the ray through pixel ``(x, y)``.

        :param x: The column of the pixel (1 is the left most column)
        :param y: The row of the pixel (1 is the top row)
        :return: The ray direction
        """

        vertical = (1 + self.height - 2 * y) / (2 * self.height)
        horizontal = (1 + self.width - 2 * x) / (2 * self.width)

        return self.direction + vertical * self.up - horizontal * self.right

    def pixel_rays(self, xs: ARRAY_LIKE, ys: ARRAY_LIKE) -> DOUBLE_ARRAY:
        """
        The (un-normalized) directions of the rays through many pixels.

        :param xs: The columns of the pixels
        :param ys: The rows of the pixels
        :return: The ray directions as a 3xn array
        """

        xs = np.asarray(xs, dtype=np.float64).ravel()
        ys = np.asarray(ys, dtype=np.float64).ravel()

        vertical = (1 + self.height - 2 * ys) / (2 * self.height)
        horizontal = (1 + self.width - 2 * xs) / (2 * self.width)

        return (self.direction.reshape(3, 1) + self.up.reshape(3, 1) * vertical -
                self.right.reshape(3, 1) * horizontal)

    def image_plane_point(self, x: float, y: float) -> DOUBLE_ARRAY:
        """
        The point where the ray through pixel ``(x, y)`` pierces the image plane.

        :param x: The column of the pixel
        :param y: The row of the pixel
        :return: The body centered location of the point
        """

        return self.position + self.pixel_ray(x, y)

    def project_direction(self, direction: ARRAY_LIKE) -> tuple[float, float]:
        r"""
        Find the image coordinates where a line of sight from the camera along ``direction`` crosses the image plane.

        This solves

        .. math::
            s\mathbf{l} - \alpha\mathbf{u} + \beta\mathbf{r} = \mathbf{d}

        for :math:`(s, \alpha, \beta)` using Cramer's rule and then inverts the pixel ray formula

        .. math::
            y = \frac{1+h-2h\alpha}{2} \qquad x = \frac{1+w-2w\beta}{2}

        If the line of sight is parallel to the image plane then ``(nan, nan)`` is returned.

        :param direction: The line of sight direction (need not be unit length)
        :return: The (fractional) column and row of the projection
        """

        line_of_sight = np.asarray(direction, dtype=np.float64)

        system = np.column_stack([line_of_sight, -self.up, self.right])

        determinant = np.linalg.det(system)

        # the determinant is the triple product so compare it against the product of the lengths
        scale = norm(line_of_sight) * norm(self.up) * norm(self.right)

        if (scale == 0) or (abs(determinant) <= 1e-12 * scale):
            return np.nan, np.nan

        solution = []
        for column in (1, 2):
            replaced = system.copy()
            replaced[:, column] = self.direction
            solution.append(np.linalg.det(replaced) / determinant)

        alpha, beta = solution

        return (float((1 + self.width - 2 * self.width * beta) / 2),
                float((1 + self.height - 2 * self.height * alpha) / 2))


def build_camera_frame(position: ARRAY_LIKE, orientation: Quaternion, fov: float = 40.0, width: int = 1024,
                       height: int = 1024, nadir: bool = False) -> CameraFrame:
    """
    Build the camera frame for a spacecraft.

    The right vector is the default right vector rotated by ``orientation``.  The direction is the default direction
    rotated by ``orientation`` or, when ``nadir`` is ``True``, the unit vector from ``position`` to the origin.  The
    direction is then scaled to set the field of view and the up vector is the unit vector along ``right x
    direction``.

    :param position: The body centered position of the camera in meters
    :param orientation: The (already transitioned) orientation of the spacecraft
    :param fov: The horizontal field of view in degrees
    :param width: The number of columns in the image
    :param height: The number of rows in the image
    :param nadir: A flag specifying whether to point the boresight at the center of the Moon
    :return: The camera frame
    """

    position = as_vector(position, 3)

    right = orientation.rotate(default_right(width, height))

    if nadir:
        direction = unit(-position)
    else:
        direction = unit(orientation.rotate(DEFAULT_DIRECTION))

    direction = direction * 0.5 * norm(right) / np.tan(np.radians(fov) / 2)

    up = unit(cross(right, direction))

    return CameraFrame(position, direction, right, up, fov=fov, width=width, height=height)
