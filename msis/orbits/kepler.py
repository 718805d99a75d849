# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


r"""
This module provides unperturbed two body (Kepler) orbit propagation about the Moon.

Description
-----------

An orbit is described by the classical Kepler elements at an epoch (see :class:`OrbitalElements`): the semi-major axis
:math:`a`, the eccentricity :math:`e`, the argument of periapsis :math:`\omega`, the longitude of the ascending node
:math:`\Omega`, the inclination :math:`i`, and the mean anomaly :math:`M_0` at the epoch :math:`t_0`.  Only elliptic
(and circular limit) orbits are supported, so :math:`e\in(0, 1]`.

To get the position at time :math:`t` the mean anomaly is propagated

.. math::
    M = M_0 + \Delta t\sqrt{\frac{\mu}{a^3}}

where :math:`\Delta t` is the time since the epoch in seconds, Kepler's equation :math:`E-e\text{sin}(E)=M` is solved
for the eccentric anomaly :math:`E` (:func:`solve_kepler`), and the orbital plane position

.. math::
    \nu = 2\text{tan}^{-1}\left(\frac{\sqrt{1+e}\text{sin}(E/2)}{\sqrt{1-e}\text{cos}(E/2)}\right) \\
    r = a(1-e\text{cos}(E)) \\
    \mathbf{o} = r\left[\begin{array}{ccc}\text{cos}(\nu) & \text{sin}(\nu) & 0\end{array}\right]^T

is rotated into the reference frame by the 3-1-3 (:math:`\Omega`, :math:`i`, :math:`\omega`) rotation.

Use
---

Create a :class:`KeplerOrbit` either from elements or from a state vector pair::

    >>> from msis.orbits import KeplerOrbit, OrbitalElements
    >>> orbit = KeplerOrbit(OrbitalElements(3737150, 0.1, 0, 0, 0.5, 0, epoch=51544.5))
    >>> orbit.position(51544.6)
    >>> orbit = KeplerOrbit.from_state_vectors([2e6, 0, 0], [0, 1600, 0], epoch=51544.5)
"""

from dataclasses import dataclass

import numpy as np

from msis._typing import ARRAY_LIKE, DOUBLE_ARRAY, F_SCALAR_OR_ARRAY, SCALAR_OR_ARRAY
from msis.errors import ConfigurationError, KeplerConvergenceError
from msis.utilities.time import SECONDS_PER_DAY


MOON_RADIUS: float = 1737150.0
"""
The mean radius of the Moon in meters
"""

MOON_GM: float = 4.90277790e12
"""
The gravitational parameter of the Moon in m**3/s**2
"""

DEFAULT_EPOCH: float = 51544.5
"""
The default epoch (J2000) as a Modified Julian Date
"""

TWO_PI: float = 2 * np.pi


def normalize_angle(angle: SCALAR_OR_ARRAY) -> F_SCALAR_OR_ARRAY:
    """
    Wrap angle(s) in radians into the interval [0, 2*pi).

    :param angle: The angle(s) to wrap
    :return: The wrapped angle(s)
    """

    wrapped = np.mod(angle, TWO_PI)

    # np.mod of a tiny negative number rounds up to exactly 2*pi
    wrapped = np.where(wrapped >= TWO_PI, wrapped - TWO_PI, wrapped)

    if np.ndim(wrapped):
        return wrapped

    return float(wrapped)


def solve_kepler(mean_anomaly: float, eccentricity: float, tolerance: float = 1e-15,
                 max_iterations: int = 100) -> float:
    r"""
    Solve Kepler's equation :math:`E-e\text{sin}(E)=M` for the eccentric anomaly using Newton-Raphson iteration.

    The iteration is

    .. math::
        E_{n+1} = E_n - \frac{E_n-e\text{sin}(E_n)-M}{1-e\text{cos}(E_n)}

    starting at :math:`E_0=M` (or at :math:`E_0=\pi` for :math:`e\ge 0.8`, where starting at :math:`M` is not
    guaranteed to converge).  It stops once the residual of Kepler's equation is at the rounding level of :math:`M`, or
    once :math:`|E_{n+1}-E_n|` is less than ``tolerance`` (or no larger than the floating point resolution of
    :math:`E`).  The residual test is what terminates the iteration near periapsis for :math:`e\approx 1`, where
    :math:`1-e\text{cos}(E)` is tiny and the Newton steps are dominated by rounding.  The result is wrapped into
    [0, 2pi).

    :param mean_anomaly: The mean anomaly in radians
    :param eccentricity: The eccentricity of the orbit in (0, 1]
    :param tolerance: The convergence tolerance on the change in the eccentric anomaly
    :param max_iterations: The maximum number of Newton steps to take
    :return: The eccentric anomaly in radians in [0, 2pi)
    :raises KeplerConvergenceError: If the iteration does not converge within ``max_iterations`` steps
    """

    mean_anomaly = normalize_angle(mean_anomaly)

    if mean_anomaly == 0:
        return 0.0

    previous = np.pi if eccentricity >= 0.8 else mean_anomaly

    for _ in range(max_iterations):

        residual = previous - eccentricity * np.sin(previous) - mean_anomaly

        if abs(residual) <= 4 * np.spacing(max(abs(mean_anomaly), abs(previous), 1.0)):
            return normalize_angle(previous)

        current = previous - residual / (1 - eccentricity * np.cos(previous))

        step = abs(current - previous)

        if (step < tolerance) or (step <= 4 * np.spacing(current)):
            return normalize_angle(current)

        previous = current

    raise KeplerConvergenceError('Kepler equation did not converge after {} iterations for M={!r}, e={!r}'.format(
        max_iterations, mean_anomaly, eccentricity))


def _check_angle(value: float, name: str):
    """
    Raise a configuration error if an angle is outside of [0, 2pi)
    """

    if not (0 <= value < TWO_PI):
        raise ConfigurationError('S/C orbit shape error: {} is not in [0, 2pi): {!r}'.format(name, value))


@dataclass(frozen=True)
class OrbitalElements:
    """
    The classical Kepler elements of an orbit at an epoch.

    The elements are checked when the object is created (including through :func:`dataclasses.replace`) and a
    :class:`.ConfigurationError` is raised for any value outside of its domain.
    """

    semi_major_axis: float
    """
    The semi-major axis in meters.  Must be larger than :attr:`body_radius`.
    """

    eccentricity: float
    """
    The eccentricity in (0, 1].
    """

    argument_of_periapsis: float
    """
    The argument of periapsis in radians in [0, 2pi).
    """

    longitude_of_ascending_node: float
    """
    The longitude of the ascending node in radians in [0, 2pi).
    """

    inclination: float
    """
    The inclination in radians in [0, 2pi).
    """

    mean_anomaly_at_epoch: float
    """
    The mean anomaly at the epoch in radians in [0, 2pi).
    """

    epoch: float = DEFAULT_EPOCH
    """
    The epoch the elements are valid at as a Modified Julian Date (>= 0).
    """

    body_radius: float = MOON_RADIUS
    """
    The radius of the central body in meters, used to check the semi-major axis.
    """

    def __post_init__(self):

        if not (self.semi_major_axis > self.body_radius):
            raise ConfigurationError("S/C orbit shape error: semi-major axis {!r} is not larger than the body "
                                     "radius {!r}".format(self.semi_major_axis, self.body_radius))

        if not (0 < self.eccentricity <= 1):
            raise ConfigurationError('S/C orbit shape error: only elliptic orbits are supported.  Eccentricity {!r} '
                                     'is not in (0, 1]'.format(self.eccentricity))

        _check_angle(self.argument_of_periapsis, 'argument of periapsis')
        _check_angle(self.longitude_of_ascending_node, 'longitude of ascending node')
        _check_angle(self.inclination, 'inclination')
        _check_angle(self.mean_anomaly_at_epoch, 'mean anomaly at epoch')

        if not (self.epoch >= 0):
            raise ConfigurationError('The epoch must not be negative: {!r}'.format(self.epoch))


class KeplerOrbit:
    """
    An unperturbed elliptic two body orbit about the Moon.

    The orbit is immutable.  Positions (and velocities) at any time are computed with :meth:`position` (and
    :meth:`velocity`).  The Kepler solver settings are given at construction (:attr:`tolerance`,
    :attr:`max_iterations`).
    """

    def __init__(self, elements: OrbitalElements, gravitational_parameter: float = MOON_GM,
                 tolerance: float = 1e-15, max_iterations: int = 100):
        """
        :param elements: The orbital elements at the epoch
        :param gravitational_parameter: The gravitational parameter of the central body in m**3/s**2
        :param tolerance: The convergence tolerance for the Kepler solver
        :param max_iterations: The iteration limit for the Kepler solver
        """

        if not isinstance(elements, OrbitalElements):
            raise ConfigurationError('elements must be an OrbitalElements instance')

        if not (gravitational_parameter > 0):
            raise ConfigurationError('The gravitational parameter must be positive: {!r}'.format(
                gravitational_parameter))

        self._elements = elements
        self._gm = float(gravitational_parameter)

        self.tolerance: float = tolerance
        """
        The convergence tolerance passed to :func:`solve_kepler`
        """

        self.max_iterations: int = max_iterations
        """
        The iteration limit passed to :func:`solve_kepler`
        """

    @classmethod
    def from_state_vectors(cls, position: ARRAY_LIKE, velocity: ARRAY_LIKE, epoch: float = DEFAULT_EPOCH,
                           gravitational_parameter: float = MOON_GM, body_radius: float = MOON_RADIUS,
                           tolerance: float = 1e-15, max_iterations: int = 100) -> 'KeplerOrbit':
        r"""
        Create an orbit from a position/velocity pair at the epoch.

        The elements are derived with the standard two body relations

        .. math::
            \mathbf{h} = \mathbf{r}\times\mathbf{v} \\
            \mathbf{e} = \frac{\mathbf{v}\times\mathbf{h}}{\mu}-\frac{\mathbf{r}}{\|\mathbf{r}\|} \\
            \mathbf{n} = \hat{\mathbf{z}}\times\mathbf{h} \\
            a = \left(\frac{2}{\|\mathbf{r}\|}-\frac{\|\mathbf{v}\|^2}{\mu}\right)^{-1}

        with the quadrant of the true anomaly set by the sign of :math:`\mathbf{r}^T\mathbf{v}`, the quadrant of the
        longitude of the ascending node by :math:`n_y`, and the quadrant of the argument of periapsis by :math:`e_z`.
        For equatorial orbits (:math:`\mathbf{n}=\mathbf{0}`) the node is placed on the x axis.

        :param position: The body centered position in meters
        :param velocity: The body centered velocity in meters per second
        :param epoch: The epoch of the state as a Modified Julian Date
        :param gravitational_parameter: The gravitational parameter of the central body in m**3/s**2
        :param body_radius: The radius of the central body in meters
        :param tolerance: The convergence tolerance for the Kepler solver
        :param max_iterations: The iteration limit for the Kepler solver
        :return: The orbit
        :raises ConfigurationError: If the state does not describe a supported (elliptic) orbit
        """

        r = np.asarray(position, dtype=np.float64).ravel()
        v = np.asarray(velocity, dtype=np.float64).ravel()
        gm = gravitational_parameter

        h = np.cross(r, v)
        h_norm = np.linalg.norm(h)

        if h_norm == 0:
            raise ConfigurationError('S/C orbit shape error: the state vectors describe a degenerate (rectilinear) '
                                     'orbit')

        r_norm = np.linalg.norm(r)
        ecc_vector = np.cross(v, h) / gm - r / r_norm
        ecc = np.linalg.norm(ecc_vector)

        if ecc == 0:
            raise ConfigurationError('S/C orbit shape error: the state vectors describe an exactly circular orbit, '
                                     'the eccentricity must be in (0, 1]')

        node = np.cross([0.0, 0.0, 1.0], h)
        node_norm = np.linalg.norm(node)

        true_anomaly = np.arccos(np.clip(ecc_vector @ r / (ecc * r_norm), -1, 1))
        if r @ v < 0:
            true_anomaly = TWO_PI - true_anomaly

        eccentric_anomaly = np.arccos(np.clip((ecc + np.cos(true_anomaly)) / (1 + ecc * np.cos(true_anomaly)), -1, 1))
        if true_anomaly > np.pi:
            eccentric_anomaly = TWO_PI - eccentric_anomaly

        inclination = np.arccos(np.clip(h[2] / h_norm, -1, 1))

        if node_norm == 0:
            longitude_of_ascending_node = 0.0
            argument_of_periapsis = np.arctan2(ecc_vector[1], ecc_vector[0])
            if h[2] < 0:
                argument_of_periapsis = -argument_of_periapsis
        else:
            longitude_of_ascending_node = np.arccos(np.clip(node[0] / node_norm, -1, 1))
            if node[1] < 0:
                longitude_of_ascending_node = TWO_PI - longitude_of_ascending_node

            argument_of_periapsis = np.arccos(np.clip(node @ ecc_vector / (node_norm * ecc), -1, 1))
            if ecc_vector[2] < 0:
                argument_of_periapsis = TWO_PI - argument_of_periapsis

        mean_anomaly = eccentric_anomaly - ecc * np.sin(eccentric_anomaly)
        semi_major_axis = 1 / ((2 / r_norm) - (v @ v) / gm)

        elements = OrbitalElements(float(semi_major_axis), float(ecc),
                                   normalize_angle(argument_of_periapsis),
                                   normalize_angle(longitude_of_ascending_node),
                                   normalize_angle(inclination),
                                   normalize_angle(mean_anomaly),
                                   epoch=epoch, body_radius=body_radius)

        return cls(elements, gravitational_parameter=gm, tolerance=tolerance, max_iterations=max_iterations)

    @property
    def elements(self) -> OrbitalElements:
        """
        The orbital elements at the epoch.
        """

        return self._elements

    @property
    def gravitational_parameter(self) -> float:
        """
        The gravitational parameter of the central body in m**3/s**2.
        """

        return self._gm

    @property
    def epoch(self) -> float:
        """
        The epoch of the orbital elements as a Modified Julian Date.
        """

        return self._elements.epoch

    @property
    def mean_motion(self) -> float:
        """
        The mean motion in radians per second.
        """

        return float(np.sqrt(self._gm / self._elements.semi_major_axis ** 3))

    @property
    def period(self) -> float:
        """
        The orbital period in seconds.
        """

        return TWO_PI / self.mean_motion

    def mean_anomaly(self, time: float) -> float:
        """
        The mean anomaly at ``time`` in radians in [0, 2pi).

        At the epoch the mean anomaly at epoch is returned exactly.

        :param time: The time as a Modified Julian Date
        :return: The mean anomaly
        """

        if time == self._elements.epoch:
            return self._elements.mean_anomaly_at_epoch

        elapsed = SECONDS_PER_DAY * (time - self._elements.epoch)

        return normalize_angle(self._elements.mean_anomaly_at_epoch + elapsed * self.mean_motion)

    def eccentric_anomaly(self, time: float) -> float:
        """
        The eccentric anomaly at ``time`` in radians in [0, 2pi).

        :param time: The time as a Modified Julian Date
        :return: The eccentric anomaly
        :raises KeplerConvergenceError: If Kepler's equation cannot be solved
        """

        return solve_kepler(self.mean_anomaly(time), self._elements.eccentricity,
                            tolerance=self.tolerance, max_iterations=self.max_iterations)

    def _orbital_plane_to_reference(self) -> DOUBLE_ARRAY:
        """
        The closed form 3-1-3 (Omega, i, omega) rotation matrix from the orbital plane to the reference frame
        """

        omega = self._elements.argument_of_periapsis
        node = self._elements.longitude_of_ascending_node
        inc = self._elements.inclination

        co, so = np.cos(omega), np.sin(omega)
        cn, sn = np.cos(node), np.sin(node)
        ci, si = np.cos(inc), np.sin(inc)

        return np.array([[co * cn - so * ci * sn, -so * cn - co * ci * sn, sn * si],
                         [co * sn + so * ci * cn, -so * sn + co * ci * cn, -cn * si],
                         [so * si, co * si, ci]])

    def position(self, time: float) -> DOUBLE_ARRAY:
        """
        The body centered position in meters at ``time``.

        :param time: The time as a Modified Julian Date
        :return: The position vector
        :raises KeplerConvergenceError: If Kepler's equation cannot be solved
        """

        ecc = self._elements.eccentricity
        semi_major_axis = self._elements.semi_major_axis

        eccentric_anomaly = self.eccentric_anomaly(time)

        true_anomaly = 2 * np.arctan2(np.sqrt(1 + ecc) * np.sin(eccentric_anomaly / 2),
                                      np.sqrt(1 - ecc) * np.cos(eccentric_anomaly / 2))

        radius = semi_major_axis * (1 - ecc * np.cos(eccentric_anomaly))

        orbital_plane = radius * np.array([np.cos(true_anomaly), np.sin(true_anomaly), 0.0])

        return self._orbital_plane_to_reference() @ orbital_plane

    def velocity(self, time: float) -> DOUBLE_ARRAY:
        """
        The body centered velocity in meters per second at ``time``.

        :param time: The time as a Modified Julian Date
        :return: The velocity vector
        :raises KeplerConvergenceError: If Kepler's equation cannot be solved
        """

        ecc = self._elements.eccentricity
        semi_major_axis = self._elements.semi_major_axis

        eccentric_anomaly = self.eccentric_anomaly(time)

        radius = semi_major_axis * (1 - ecc * np.cos(eccentric_anomaly))

        orbital_plane = (np.sqrt(self._gm * semi_major_axis) / radius *
                         np.array([-np.sin(eccentric_anomaly),
                                   np.sqrt(1 - ecc ** 2) * np.cos(eccentric_anomaly),
                                   0.0]))

        return self._orbital_plane_to_reference() @ orbital_plane

    def __eq__(self, other) -> bool:

        if not isinstance(other, KeplerOrbit):
            return NotImplemented

        return (self._elements == other.elements) and (self._gm == other.gravitational_parameter)

    def __repr__(self) -> str:
        return 'KeplerOrbit({!r}, gravitational_parameter={!r})'.format(self._elements, self._gm)
