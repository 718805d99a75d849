# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


r"""
This module defines the :class:`Quaternion` used to express spacecraft orientation in MSIS.

A quaternion is written :math:`q=[r, \mathbf{v}]` where :math:`r` is the real (scalar) part and
:math:`\mathbf{v}=(v_x, v_y, v_z)^T` is the vector part.  The :class:`Quaternion` class represents general
hypercomplex numbers (it supports addition, subtraction, scaling, and the Hamilton product), and, when constructed
through :func:`rotation_quaternion`, a rotation operator

.. math::
    q=\left[\text{cos}\left(\frac{\theta}{2}\right), \text{sin}\left(\frac{\theta}{2}\right)\hat{\mathbf{x}}\right]

where :math:`\hat{\mathbf{x}}` is the unit rotation axis and :math:`\theta` is the right handed rotation angle.
Rotating a vector :math:`\mathbf{y}` by :math:`q` is :math:`q\otimes[0, \mathbf{y}]\otimes q^*` (see
:meth:`Quaternion.rotate`).  Since rotation quaternions are unit length the conjugate is the inverse.

Rotations compose with the product operator: ``(q_2*q_1).rotate(y)`` first rotates by ``q_1`` and then by ``q_2``::

    >>> from msis.rotations import rotation_quaternion
    >>> from numpy import pi
    >>> about_z = rotation_quaternion([0, 0, 1], pi/2)
    >>> about_z.rotate([1, 0, 0])
    array([2.22044605e-16, 1.00000000e+00, 0.00000000e+00])

When a quaternion is output (or read from the command line/batch files) the scalar last order
:math:`[v_x, v_y, v_z, r]` is used, see :meth:`Quaternion.as_array` and :meth:`Quaternion.from_array`.

Quaternions are immutable; every operation returns a new object.
"""

from typing import Union

import numpy as np

from msis._typing import ARRAY_LIKE, DOUBLE_ARRAY
from msis.utilities.vectors import as_vector, unit


class Quaternion:
    """
    An immutable quaternion with a real part and a 3 element vector part.
    """

    __slots__ = ('_real', '_vector')

    def __init__(self, real: float = 0.0, vector: ARRAY_LIKE = (0.0, 0.0, 0.0)):
        """
        :param real: The real (scalar) part of the quaternion
        :param vector: The vector part of the quaternion as a length 3 array like
        """

        self._real: float = float(real)
        self._vector: DOUBLE_ARRAY = as_vector(vector, 3)

    @classmethod
    def from_array(cls, data: ARRAY_LIKE) -> 'Quaternion':
        """
        Create a quaternion from a scalar last 4 element array ``[x, y, z, r]``.

        :param data: The scalar last quaternion data
        :return: The quaternion
        :raises ValueError: If the data does not have 4 elements
        """

        data = np.asarray(data, dtype=np.float64).ravel()

        if data.size != 4:
            raise ValueError('The quaternion must be length 4')

        return cls(data[3], data[:3])

    @property
    def real(self) -> float:
        """
        The real (scalar) part of the quaternion.
        """

        return self._real

    @property
    def vector(self) -> DOUBLE_ARRAY:
        """
        The vector part of the quaternion as a read only length 3 array.
        """

        return self._vector

    def as_array(self) -> DOUBLE_ARRAY:
        """
        The quaternion as a scalar last 4 element array ``[x, y, z, r]``.
        """

        return np.concatenate([self._vector, [self._real]])

    def norm(self) -> float:
        """
        The Euclidean norm of the quaternion (the square root of the sum of squares of all 4 components).
        """

        return float(np.sqrt(self._real ** 2 + self._vector @ self._vector))

    def normalized(self) -> 'Quaternion':
        """
        Return this quaternion scaled to unit norm.
        """

        quaternion_norm = self.norm()

        return Quaternion(self._real / quaternion_norm, self._vector / quaternion_norm)

    def conjugate(self) -> 'Quaternion':
        """
        Return the conjugate of this quaternion (the vector part is negated).

        For a unit (rotation) quaternion the conjugate is also the inverse.
        """

        return Quaternion(self._real, -self._vector)

    def rotate(self, vector: ARRAY_LIKE) -> DOUBLE_ARRAY:
        r"""
        Rotate a 3 element vector by this quaternion.

        The rotation is computed as :math:`q\otimes[0, \mathbf{y}]\otimes q^*` and the vector part of the result is
        returned.  This quaternion should be unit length; otherwise the result is additionally scaled by
        :math:`\|q\|^2`.

        :param vector: The vector to rotate
        :return: The rotated vector
        """

        return (self * Quaternion(0.0, vector) * self.conjugate()).vector.copy()

    def __add__(self, other: 'Quaternion') -> 'Quaternion':

        if isinstance(other, Quaternion):
            return Quaternion(self._real + other.real, self._vector + other.vector)

        return NotImplemented

    def __sub__(self, other: 'Quaternion') -> 'Quaternion':

        if isinstance(other, Quaternion):
            return Quaternion(self._real - other.real, self._vector - other.vector)

        return NotImplemented

    def __neg__(self) -> 'Quaternion':
        return Quaternion(-self._real, -self._vector)

    def __mul__(self, other: Union['Quaternion', float]) -> 'Quaternion':

        if isinstance(other, Quaternion):
            # hamilton product
            r1, v1 = self._real, self._vector
            r2, v2 = other.real, other.vector

            return Quaternion(r1 * r2 - v1 @ v2, r1 * v2 + r2 * v1 + np.cross(v1, v2))

        if isinstance(other, (int, float, np.floating, np.integer)):
            return Quaternion(self._real * other, self._vector * other)

        return NotImplemented

    def __rmul__(self, other: float) -> 'Quaternion':

        if isinstance(other, (int, float, np.floating, np.integer)):
            return Quaternion(self._real * other, self._vector * other)

        return NotImplemented

    def __eq__(self, other) -> bool:

        if not isinstance(other, Quaternion):
            return NotImplemented

        return (self._real == other.real) and bool((self._vector == other.vector).all())

    def __hash__(self) -> int:
        return hash((self._real, tuple(self._vector)))

    def __reduce__(self):
        return self.__class__, (self._real, self._vector.copy())

    def __repr__(self) -> str:
        return 'Quaternion({0!r}, {1!r})'.format(self._real, self._vector)

    def __str__(self) -> str:
        return str(self.as_array())


IDENTITY = Quaternion(1.0, (0.0, 0.0, 0.0))
"""
The identity rotation (no rotation).
"""


def rotation_quaternion(axis: ARRAY_LIKE, angle: float) -> Quaternion:
    r"""
    Create a unit rotation quaternion representing a right handed rotation of ``angle`` radians about ``axis``.

    .. math::
        q=\left[\text{cos}\left(\frac{\theta}{2}\right), \text{sin}\left(\frac{\theta}{2}\right)\hat{\mathbf{x}}\right]

    The axis is normalized before use so that the resulting quaternion is always unit length.

    :param axis: The axis to rotate about as a length 3 array like
    :param angle: The angle to rotate by in radians
    :return: The rotation quaternion
    """

    half_angle = angle / 2

    return Quaternion(np.cos(half_angle), np.sin(half_angle) * unit(as_vector(axis, 3)))
