# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


"""
This module contains helper functions for transforming from/to selenographic (body fixed latitude/longitude)
coordinates.
"""

import numpy as np

from msis._typing import ARRAY_LIKE, DOUBLE_ARRAY, SCALAR_OR_ARRAY, F_SCALAR_OR_ARRAY


def normalize_longitude(longitude: SCALAR_OR_ARRAY) -> F_SCALAR_OR_ARRAY:
    """
    Wrap longitude(s) in degrees into the interval [0, 360).

    :param longitude: The longitude(s) in degrees
    :return: The wrapped longitude(s) in degrees
    """

    wrapped = np.mod(longitude, 360.0)

    # np.mod of a tiny negative number rounds up to exactly 360
    wrapped = np.where(wrapped >= 360.0, wrapped - 360.0, wrapped)

    if np.ndim(wrapped):
        return wrapped

    return float(wrapped)


def cartesian_to_selenographic(points: ARRAY_LIKE, radius: float) -> tuple[float, float] | \
                                                                     tuple[DOUBLE_ARRAY, DOUBLE_ARRAY]:
    r"""
    This function converts body centered cartesian surface point(s) into selenographic latitude and longitude in
    degrees.

    The conversion is given by

    .. math::
        \phi = 90^\circ - \text{cos}^{-1}\left(\frac{z}{R}\right) \\
        \lambda = \text{tan}^{-1}\left(\frac{y}{x}\right)

    where :math:`R` is the mean radius of the body and the longitude :math:`\lambda` is wrapped into [0, 360).  The
    points should lie on the sphere of radius ``radius`` (the z component is clipped to [-R, R] before taking the arc
    cosine to absorb round off).

    This function is vectorized.  Multiple points are specified as the columns of a 3xn array, in which case the output
    is 2 arrays.  For a single point the output is 2 floats.

    :param points: The surface point(s) as a length 3 array or a 3xn array
    :param radius: The radius of the body in the same units as the points
    :return: The latitude(s) and longitude(s) in degrees as a tuple
    """

    points = np.asanyarray(points, dtype=np.float64)

    if np.shape(points)[0] != 3:
        raise ValueError('The length of the first axis must be 3')

    lat = 90.0 - np.degrees(np.arccos(np.clip(points[2] / radius, -1, 1)))
    lon = normalize_longitude(np.degrees(np.arctan2(points[1], points[0])))

    if np.ndim(lat):
        return lat, lon

    return float(lat), float(lon)


def selenographic_to_cartesian(lat: SCALAR_OR_ARRAY, lon: SCALAR_OR_ARRAY, radius: float) -> DOUBLE_ARRAY:
    r"""
    This function converts selenographic latitude/longitude pair(s) in degrees into body centered cartesian point(s) on
    the sphere of radius ``radius``.

    .. math::
        \mathbf{x}=R\left[\begin{array}{c}\text{cos}(\phi)\text{cos}(\lambda)\\
        \text{cos}(\phi)\text{sin}(\lambda)\\
        \text{sin}(\phi)\end{array}\right]

    The inputs are broadcast against each other.  Multiple points are returned as the columns of a 3xn array.

    :param lat: The latitude(s) in degrees
    :param lon: The longitude(s) in degrees
    :param radius: The radius of the sphere
    :return: The cartesian point(s)
    """

    lat, lon = np.broadcast_arrays(np.radians(lat), np.radians(lon))

    lat = lat.ravel()
    lon = lon.ravel()

    return radius * np.vstack([np.cos(lat) * np.cos(lon),
                               np.cos(lat) * np.sin(lon),
                               np.sin(lat)]).squeeze()


def spherical_angles(position: ARRAY_LIKE) -> tuple[float, float]:
    r"""
    Compute the azimuth and the polar angle of a position vector in radians.

    .. math::
        \varphi = \text{tan}^{-1}\left(\frac{y}{x}\right) \\
        \vartheta = \text{cos}^{-1}\left(\frac{z}{r}\right)

    :param position: The position vector
    :return: The azimuth :math:`\varphi` in (-pi, pi] and the polar angle :math:`\vartheta` in [0, pi]
    """

    x, y, z = np.asarray(position, dtype=np.float64)

    r = np.sqrt(x ** 2 + y ** 2 + z ** 2)

    return float(np.arctan2(y, x)), float(np.arccos(z / r))
