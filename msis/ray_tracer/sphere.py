# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


r"""
This module implements the spherical model of the Moon that pixel rays are intersected with.

Description
-----------

The Moon is modeled as a sphere of radius :math:`R` centered at the origin of the body centered frame.  For a ray
starting at :math:`\mathbf{c}` with direction :math:`\mathbf{d}`, points along the ray are
:math:`\mathbf{c}+t\mathbf{d}` and substituting into :math:`\|\mathbf{x}\|^2=R^2` gives a quadratic in :math:`t` with
discriminant

.. math::
    \Delta = 4(\mathbf{c}^T\mathbf{d})^2 - 4\|\mathbf{d}\|^2\|\mathbf{c}\|^2 + 4\|\mathbf{d}\|^2R^2

If :math:`\Delta<0` the ray samples deep space.  If :math:`\Delta=0` the ray is tangent to the sphere at
:math:`t=-\mathbf{c}^T\mathbf{d}/\|\mathbf{d}\|^2`.  Otherwise the two roots are

.. math::
    t_{1,2} = \frac{-\mathbf{c}^T\mathbf{d}\pm\sqrt{\Delta}/2}{\|\mathbf{d}\|^2}

and the one closer to the start of the ray is the visible (front facing) surface point.  A root behind the start of
the ray (:math:`t<0`) and a zero length direction are both reported as no encounter.
"""

from typing import NamedTuple, Optional

import numpy as np

from msis._typing import ARRAY_LIKE, DOUBLE_ARRAY
from msis.orbits.kepler import MOON_RADIUS
from msis.ray_tracer.rays import INTERSECT_DTYPE, Rays


class Intersection(NamedTuple):
    """
    The result of intersecting a single ray with a :class:`Sphere`.
    """

    check: bool
    """
    ``True`` if the ray struck the sphere
    """

    t: float
    """
    The ray parameter of the intersection (``start + t*direction``), NaN if there is no encounter
    """

    point: Optional[DOUBLE_ARRAY]
    """
    The body centered intersection point, ``None`` if there is no encounter
    """

    distance: float
    """
    The distance from the start of the ray to the intersection point, NaN if there is no encounter
    """


class Sphere:
    """
    A sphere centered at the origin of the body centered frame.
    """

    def __init__(self, radius: float = MOON_RADIUS):
        """
        :param radius: The radius of the sphere in meters
        """

        if not (radius > 0):
            raise ValueError('The radius must be positive: {!r}'.format(radius))

        self.radius: float = float(radius)
        """
        The radius of the sphere in meters
        """

    def _solve(self, starts: DOUBLE_ARRAY, directions: DOUBLE_ARRAY) -> DOUBLE_ARRAY:
        """
        Find the ray parameter of the visible intersection for 3xn starts/directions, NaN where there is none
        """

        center_projection = (starts * directions).sum(axis=0)
        direction_square = (directions * directions).sum(axis=0)
        start_square = (starts * starts).sum(axis=0)

        discriminant = (4 * center_projection ** 2 - 4 * direction_square * start_square +
                        4 * direction_square * self.radius ** 2)

        t = np.full(direction_square.shape, np.nan)

        valid = (direction_square > 0) & (discriminant >= 0)

        root = np.sqrt(discriminant[valid]) / 2

        first = (-center_projection[valid] + root) / direction_square[valid]
        second = (-center_projection[valid] - root) / direction_square[valid]

        # the root nearer the start of the ray is the visible face (this is also the tangent point when root is 0)
        t[valid] = np.where(np.abs(second) <= np.abs(first), second, first)

        with np.errstate(invalid='ignore'):
            t[t < 0] = np.nan

        return t

    def intersect(self, start: ARRAY_LIKE, direction: ARRAY_LIKE) -> Intersection:
        """
        Intersect a single ray with the sphere.

        :param start: The start of the ray in meters
        :param direction: The direction of the ray (need not be unit length)
        :return: The intersection result
        """

        start = np.asarray(start, dtype=np.float64).reshape(3, 1)
        direction = np.asarray(direction, dtype=np.float64).reshape(3, 1)

        t = float(self._solve(start, direction)[0])

        if np.isnan(t):
            return Intersection(False, np.nan, None, np.nan)

        point = (start + t * direction).ravel()

        return Intersection(True, t, point, float(t * np.linalg.norm(direction)))

    def trace(self, rays: Rays) -> np.ndarray:
        """
        Intersect many rays with the sphere.

        :param rays: The rays to trace
        :return: A length n array with dtype :data:`.INTERSECT_DTYPE`
        """

        starts = rays.start
        directions = rays.direction

        t = self._solve(starts, directions)

        results = np.zeros(t.size, dtype=INTERSECT_DTYPE)

        results['check'] = ~np.isnan(t)
        results['distance'] = t * np.linalg.norm(directions, axis=0)

        points = starts + t * directions
        results['intersect'] = points.T
        results['normal'] = self.compute_normals(points).T

        return results

    def compute_normals(self, locs: ARRAY_LIKE) -> DOUBLE_ARRAY:
        """
        The unit surface normal(s) at point(s) on the sphere.

        :param locs: The surface point(s) as a length 3 array or a 3xn array
        :return: The unit normal vector(s) with the same shape as the input
        """

        locs = np.asarray(locs, dtype=np.float64)

        return locs / np.linalg.norm(locs, axis=0, keepdims=True)

    def __repr__(self) -> str:
        return 'Sphere(radius={!r})'.format(self.radius)
