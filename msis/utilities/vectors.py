# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


r"""
This module provides the small amount of vector algebra used throughout MSIS.

Vectors in MSIS are plain float64 numpy arrays (length 3 for positions and directions, length 2 for image plane
coordinates).  All of the numpy operators (``+``, ``-``, unary ``-``, scaling by a scalar) already return new arrays,
therefore only the handful of operations that numpy does not spell directly are provided here.  :func:`as_vector`
creates a read only copy of the input so that values stored on the immutable MSIS objects cannot be changed through an
alias.

There are two ways to rotate a 3D vector about an axis in MSIS.  The first is :func:`rotate_about_axis` which uses the
Rodrigues rotation formula

.. math::
    \mathbf{v}' = \mathbf{v}\text{cos}(\theta) + (\hat{\mathbf{k}}\times\mathbf{v})\text{sin}(\theta) +
    \hat{\mathbf{k}}(\hat{\mathbf{k}}^T\mathbf{v})(1-\text{cos}(\theta))

and the second is through a rotation quaternion (:func:`.rotation_quaternion` and :meth:`.Quaternion.rotate`).  Both
give the same result.
"""

from typing import Optional

import numpy as np

from msis._typing import ARRAY_LIKE, DOUBLE_ARRAY


def as_vector(data: ARRAY_LIKE, size: Optional[int] = None) -> DOUBLE_ARRAY:
    """
    Create a new read only float64 vector from array like data.

    :param data: The vector data (any sequence of numbers)
    :param size: The required length of the vector.  If ``None`` any length is accepted
    :return: A flat, read only copy of the data
    :raises ValueError: If ``size`` is given and the data does not contain exactly ``size`` elements
    """

    vector = np.array(data, dtype=np.float64).ravel()

    if (size is not None) and (vector.size != size):
        raise ValueError('The vector must have {} elements but has {}'.format(size, vector.size))

    vector.flags.writeable = False

    return vector


def norm(vector: ARRAY_LIKE) -> float:
    """
    The Euclidean length of a vector.

    :param vector: The vector
    :return: The length of the vector
    """

    return float(np.linalg.norm(vector))


def unit(vector: ARRAY_LIKE) -> DOUBLE_ARRAY:
    """
    Return the vector scaled to unit length.

    A zero length vector results in NaN components.  Callers are responsible for not generating degenerate vectors.

    :param vector: The vector to normalize
    :return: The unit vector in the same direction
    """

    vector = np.asarray(vector, dtype=np.float64)

    with np.errstate(invalid='ignore', divide='ignore'):
        return vector / np.linalg.norm(vector)


def cross(vector_1: ARRAY_LIKE, vector_2: ARRAY_LIKE) -> DOUBLE_ARRAY:
    """
    The cross product of two 3 element vectors.

    :param vector_1: The left vector
    :param vector_2: The right vector
    :return: ``vector_1 x vector_2``
    """

    return np.cross(np.asarray(vector_1, dtype=np.float64), np.asarray(vector_2, dtype=np.float64))


def rotate_2d(vector: ARRAY_LIKE, angle: float) -> DOUBLE_ARRAY:
    r"""
    Rotate a 2 element vector by ``angle`` radians, where the angle increases from the +y axis toward the +x axis.

    This is a standard rotation by :math:`-\phi`:

    .. math::
        \mathbf{v}'=\left[\begin{array}{cc}\text{cos}(-\phi) & -\text{sin}(-\phi)\\
        \text{sin}(-\phi) & \text{cos}(-\phi)\end{array}\right]\mathbf{v}

    which matches the way illumination angles are measured in the image (see :func:`.illumination_angle`).

    :param vector: The 2 element vector to rotate
    :param angle: The rotation angle in radians
    :return: The rotated vector
    """

    x, y = np.asarray(vector, dtype=np.float64)

    return np.array([x * np.cos(-angle) - y * np.sin(-angle),
                     x * np.sin(-angle) + y * np.cos(-angle)])


def rotate_about_axis(vector: ARRAY_LIKE, axis: ARRAY_LIKE, angle: float) -> DOUBLE_ARRAY:
    """
    Rotate a 3 element vector about ``axis`` by ``angle`` radians using the Rodrigues rotation formula.

    :param vector: The vector to rotate
    :param axis: The rotation axis (need not be unit length)
    :param angle: The right handed rotation angle in radians
    :return: The rotated vector
    """

    vector = np.asarray(vector, dtype=np.float64)
    axis = unit(axis)

    cos_angle = np.cos(angle)

    return (vector * cos_angle + np.cross(axis, vector) * np.sin(angle) +
            axis * (axis @ vector) * (1 - cos_angle))


def angle_between(vector_1: ARRAY_LIKE, vector_2: ARRAY_LIKE) -> float:
    """
    The angle between two vectors in radians (in [0, pi]).

    :param vector_1: The first vector
    :param vector_2: The second vector
    :return: The angle between the vectors
    """

    cos_angle = np.dot(unit(vector_1), unit(vector_2))

    return float(np.arccos(np.clip(cos_angle, -1, 1)))
