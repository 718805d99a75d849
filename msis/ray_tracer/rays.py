# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


"""
This module defines a class for representing rays in MSIS, a function to generate them from a camera frame, and the
numpy structured data type used to store the results of a ray trace.

Description
-----------

In MSIS, a :class:`.Rays` is used to intersect pixel lines of sight with the Moon.  It is defined fully by a start and
a direction.  Rays make use of numpy broadcasting so that you can efficiently have a single start (the camera) for
many directions (the pixels).

Use
---

Rays for every pixel of an image (or for any subset of pixels) are created with :func:`compute_pixel_rays` and then
traced with :meth:`.Sphere.trace`, which returns an array with dtype :data:`INTERSECT_DTYPE`.
"""

import numpy as np

from msis._typing import ARRAY_LIKE, DOUBLE_ARRAY
from msis.camera import CameraFrame


INTERSECT_DTYPE: np.dtype = np.dtype([('check', bool), ('distance', np.float64),
                                      ('intersect', np.float64, (3,)), ('normal', np.float64, (3,))])
"""
The numpy datatype returned when rays are traced with a :class:`.Sphere` in MSIS.

For an overview of how structured data types work in numpy, refer to https://numpy.org/doc/stable/user/basics.rec.html

The following table describes the purpose of each field.

================ ================ ======================================================================================
Field            Type             Description
================ ================ ======================================================================================
check            bool             A boolean flag specifying if the ray hit the object
distance         double           The distance between the ray start and the intersect location (if the ray struck the
                                  object)
intersect        3 element double The location that the ray struck the object in the body centered frame (if the ray
                                  struck the object)
normal           3 element double The unit vector that is normal to the surface at the point the ray struck the object
                                  as a 3 element array (if the ray struck the object)
================ ================ ======================================================================================

Anywhere that ``check`` is not ``True`` the other elements are NaN.
"""


class Rays:
    """
    A class to store rays.

    In MSIS a ray is defined by a start and a direction.  The direction does not need to be unit length, but it must
    not be zero for the ray to be able to strike anything.

    When creating rays that share the same :attr:`start` (typically the camera position) or the same
    :attr:`direction`, you can provide just a single value for the shared component and numpy broadcasting will take
    care of the rest without duplicating memory.
    """

    def __init__(self, start: ARRAY_LIKE, direction: ARRAY_LIKE):
        """
        :param start: Where the rays begin at as a length 3 array or a 3xn array
        :param direction: The direction that the rays proceed in as a length 3 array or a 3xn array
        :raises ValueError: If the first axis of either input is not length 3 or the number of starts and directions
                            cannot be broadcast together
        """

        start = _as_ray_array(start)
        direction = _as_ray_array(direction)

        try:
            start, direction = np.broadcast_arrays(start, direction)
        except ValueError:
            raise ValueError("The start and direction arrays must have the same shape.") from None

        self.start: DOUBLE_ARRAY = start
        """
        The beginning location(s) of the ray(s) as a 3xn array.

        If there are multiple directions and only a single start this is a broadcast (read only) view so that memory is
        not duplicated.
        """

        self.direction: DOUBLE_ARRAY = direction
        """
        The direction vector(s) of the ray(s) as a 3xn array.
        """

        self.num_rays: int = start.shape[1]
        """
        The number of rays contained in the object.
        """


def _as_ray_array(val: ARRAY_LIKE) -> DOUBLE_ARRAY:
    """
    Convert a length 3 or 3xn input into a 3xn float64 array
    """

    val_array = np.asarray(val, dtype=np.float64)

    if (val_array.ndim not in (1, 2)) or (val_array.shape[0] != 3):
        raise ValueError("The first axis must have a length of 3")

    return val_array.reshape(3, -1)


def compute_pixel_rays(camera: CameraFrame, xs: ARRAY_LIKE, ys: ARRAY_LIKE) -> tuple[Rays, np.ndarray]:
    """
    Compute rays passing through the given column (x), row (y) pixel pairs of a camera frame.

    The rays start at the camera position and their directions are the (un-normalized) pixel rays of
    :meth:`.CameraFrame.pixel_rays`.  If ``xs`` and ``ys`` each contain exactly 2 elements they are treated as inclusive
    (min, max) pairs and a ray is generated for every pixel between them, in row major order (every column of the first
    row, then every column of the second row, and so on).  The pixel values corresponding to the generated rays are
    returned second as a 2xn integer array of (x, y) pairs.

    :param camera: The camera frame to generate the rays for
    :param xs: The columns to generate rays through (paired with ys), or an inclusive min, max pair
    :param ys: The rows to generate rays through (paired with xs), or an inclusive min, max pair
    :return: The rays and the pixels they pass through
    """

    xs = np.asarray(xs)
    ys = np.asarray(ys)

    if (xs.size == 2) and (ys.size == 2):
        xs, ys = np.meshgrid(np.arange(xs.ravel()[0], xs.ravel()[1] + 1),
                             np.arange(ys.ravel()[0], ys.ravel()[1] + 1))

    pixels = np.vstack([xs.ravel(), ys.ravel()]).astype(np.int64)

    return Rays(camera.position, camera.pixel_rays(pixels[0], pixels[1])), pixels
