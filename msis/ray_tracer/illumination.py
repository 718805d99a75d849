# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


r"""
This module computes the local solar illumination direction of surface points as it appears in the image.

Description
-----------

For a pixel that sees the Moon, the direction the Sun light arrives from at the surface point is projected into the
image so that it can be compared with features in the rendering (for instance, to train or check a crater detector).
The steps for a pixel :math:`(x_1, y_1)` with surface hit point :math:`\mathbf{p}` are

#. compute the unit surface normal :math:`\hat{\mathbf{n}}` at :math:`\mathbf{p}` and the unit direction
   :math:`\hat{\mathbf{s}}` from :math:`\mathbf{p}` to the Sun
#. move ``offset`` meters from :math:`\mathbf{p}` along :math:`\hat{\mathbf{s}}` and project the result onto the local
   tangent plane

   .. math::
       \mathbf{p}_l = \mathbf{p} + o\hat{\mathbf{s}} + \lambda\hat{\mathbf{n}} \qquad
       \lambda = -o\hat{\mathbf{s}}^T\hat{\mathbf{n}}

   which gives the subsurface illumination point (:func:`subsurface_illumination_point`)
#. find where the line of sight from the camera to :math:`\mathbf{p}_l` crosses the image plane,
   :math:`(x_2, y_2)` (:meth:`.CameraFrame.project_direction`)
#. measure the angle of :math:`(x_2-x_1, y_2-y_1)` against the reference vector :math:`(0, 1000)`
   (:func:`illumination_angle`)

Since the subsurface point is a direction construction, the angle barely depends on ``offset`` (only through
perspective, which is negligible for offsets much smaller than the camera distance).
"""

from dataclasses import dataclass

import numpy as np

from msis._typing import ARRAY_LIKE, DOUBLE_ARRAY
from msis.camera import CameraFrame
from msis.ray_tracer.rays import Rays
from msis.ray_tracer.sphere import Sphere
from msis.utilities.spherical_coordinates import cartesian_to_selenographic
from msis.utilities.vectors import angle_between, norm, unit


REFERENCE_VECTOR: DOUBLE_ARRAY = np.array([0.0, 1000.0])
"""
The image vector illumination angles are measured from
"""


@dataclass
class PixelInformation:
    """
    The selenographic location and illumination angle seen by a pixel.
    """

    exists: bool = False
    """
    ``True`` if the pixel sees the surface of the Moon.  If ``False`` the other values are NaN.
    """

    lat: float = np.nan
    """
    The selenographic latitude of the surface point in degrees
    """

    lon: float = np.nan
    """
    The selenographic longitude of the surface point in degrees in [0, 360)
    """

    illumination_angle: float = np.nan
    """
    The local solar illumination angle in the image in degrees in [0, 360)
    """


def subsurface_illumination_point(hit: ARRAY_LIKE, normal: ARRAY_LIKE, sun_position: ARRAY_LIKE,
                                  offset: float = 1000.0) -> DOUBLE_ARRAY:
    """
    Compute the point on the local tangent plane at ``hit`` that lies in the direction of the Sun.

    :param hit: The surface point in meters (body centered)
    :param normal: The unit surface normal at ``hit`` (see :meth:`.Sphere.compute_normals`)
    :param sun_position: The position of the Sun in meters (body centered)
    :param offset: The distance to move toward the Sun before projecting onto the tangent plane
    :return: The subsurface illumination point
    """

    hit = np.asarray(hit, dtype=np.float64)
    normal = np.asarray(normal, dtype=np.float64)

    sun_direction = unit(np.asarray(sun_position, dtype=np.float64) - hit)

    lam = -offset * (sun_direction @ normal) / (normal @ normal)

    return hit + offset * sun_direction + lam * normal


def illumination_angle(x1: float, y1: float, x2: float, y2: float) -> float:
    """
    The angle in degrees of the image vector from ``(x1, y1)`` to ``(x2, y2)`` measured from ``(0, 1000)``.

    Vectors with a negative x component get the reflex angle so that the result covers [0, 360).  A zero length
    vector gives NaN.

    :param x1: The column of the start of the vector
    :param y1: The row of the start of the vector
    :param x2: The column of the end of the vector
    :param y2: The row of the end of the vector
    :return: The illumination angle in degrees
    """

    vector = np.array([x2 - x1, y2 - y1], dtype=np.float64)

    length = norm(vector)

    if (length == 0) or not np.isfinite(length):
        return np.nan

    angle = angle_between(REFERENCE_VECTOR, vector)

    if vector[0] < 0:
        angle = 2 * np.pi - angle

    return float(np.degrees(angle))


def _surface_information(camera: CameraFrame, sun_position: ARRAY_LIKE, x: float, y: float, hit: DOUBLE_ARRAY,
                         normal: DOUBLE_ARRAY, sphere: Sphere, offset: float) -> PixelInformation:
    """
    Build the pixel information for pixel ``(x, y)`` given the surface point it sees and the normal there
    """

    lat, lon = cartesian_to_selenographic(hit, sphere.radius)

    local = subsurface_illumination_point(hit, normal, sun_position, offset=offset)

    x2, y2 = camera.project_direction(unit(local - camera.position))

    return PixelInformation(True, lat, lon, illumination_angle(x, y, x2, y2))


def compute_pixel_information(camera: CameraFrame, sun_position: ARRAY_LIKE, x: int, y: int, sphere: Sphere,
                              offset: float = 1000.0) -> PixelInformation:
    """
    Compute the selenographic location and the local solar illumination angle seen by pixel ``(x, y)``.

    :param camera: The camera frame
    :param sun_position: The body centered position of the Sun in meters
    :param x: The column of the pixel
    :param y: The row of the pixel
    :param sphere: The sphere representing the Moon
    :param offset: The offset used to build the subsurface illumination point
    :return: The pixel information (``exists`` is ``False`` if the pixel does not see the Moon)
    """

    intersection = sphere.intersect(camera.position, unit(camera.pixel_ray(x, y)))

    if not intersection.check:
        return PixelInformation()

    return _surface_information(camera, sun_position, x, y, intersection.point,
                                sphere.compute_normals(intersection.point), sphere, offset)


def compute_pixel_grid(camera: CameraFrame, sun_position: ARRAY_LIKE, sphere: Sphere, grid_h: int = 50,
                       grid_v: int = 50, offset: float = 1000.0) -> dict[tuple[int, int], PixelInformation]:
    """
    Compute the pixel information on a regular grid of pixels.

    The grid rows are ``grid_v, 2*grid_v, ...`` up to the image height and the grid columns are ``grid_h, 2*grid_h,
    ...`` up to the image width.  All of the grid pixels are traced at once with :meth:`.Sphere.trace` and only the
    pixels that see the Moon are returned, in row major order.

    :param camera: The camera frame
    :param sun_position: The body centered position of the Sun in meters
    :param sphere: The sphere representing the Moon
    :param grid_h: The spacing between grid columns in pixels
    :param grid_v: The spacing between grid rows in pixels
    :param offset: The offset used to build the subsurface illumination point
    :return: A dictionary mapping ``(x, y)`` to the information for every grid pixel that sees the Moon
    """

    xs, ys = np.meshgrid(np.arange(grid_h, camera.width + 1, grid_h), np.arange(grid_v, camera.height + 1, grid_v))

    xs = xs.ravel()
    ys = ys.ravel()

    grid = {}

    if not xs.size:
        return grid

    results = sphere.trace(Rays(camera.position, camera.pixel_rays(xs, ys)))

    for x, y, result in zip(xs.tolist(), ys.tolist(), results):

        if result['check']:
            grid[(x, y)] = _surface_information(camera, sun_position, x, y, result['intersect'], result['normal'],
                                                sphere, offset)

    return grid
