# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


"""
This module defines the spacecraft template and the immutable per time step snapshot derived from it.

A :class:`Spacecraft` describes how the spacecraft moves (a :class:`.KeplerOrbit` or a fixed position) and how it is
oriented (a fixed initial orientation turning at a constant rate, or nadir pointing when no orientation is given).
:func:`create_spacecraft_state` evaluates the template at a time and returns a :class:`SpacecraftState` holding the
position, the Sun position, the orientation, and the camera frame for that time.  The state keeps a reference to the
template it was made from.

    >>> from msis.orbits import KeplerOrbit, OrbitalElements
    >>> from msis.options import SimulationOptions
    >>> from msis.spacecraft import Spacecraft, create_spacecraft_state
    >>> from msis.utilities.spice_interface import FixedPosition
    >>> spacecraft = Spacecraft(orbit=KeplerOrbit(OrbitalElements(3737150, 0.1, 0, 0, 0.5, 0)))
    >>> state = create_spacecraft_state(spacecraft, 51544.6, SimulationOptions(), FixedPosition([1.5e11, 0, 0]))
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from msis._typing import ARRAY_LIKE, DOUBLE_ARRAY, Ephemeris
from msis.camera import CameraFrame, build_camera_frame, nadir_orientation, orientation_transition
from msis.errors import ConfigurationError
from msis.options import SimulationOptions
from msis.orbits.kepler import DEFAULT_EPOCH, KeplerOrbit
from msis.rotations import Quaternion
from msis.utilities.time import SECONDS_PER_DAY
from msis.utilities.vectors import as_vector, norm


class Spacecraft:
    """
    The template describing the motion and the orientation of the spacecraft.

    Exactly how the position is found depends on what is given: if :attr:`fixed_position` is set it is used for every
    time, otherwise the position comes from :attr:`orbit`.  At least one of the two is required.

    The orientation at a time is ``orientation_transition(orientation_rate, elapsed)*initial_orientation`` where
    ``elapsed`` is the number of seconds between the time and :attr:`epoch`.  If :attr:`initial_orientation` is
    ``None`` the camera is pointed at the center of the Moon instead.

    Instances should be treated as immutable.
    """

    def __init__(self, orbit: Optional[KeplerOrbit] = None, fixed_position: Optional[ARRAY_LIKE] = None,
                 initial_orientation: Optional[Quaternion] = None, orientation_rate: ARRAY_LIKE = (0.0, 0.0, 0.0),
                 fixed_time: Optional[float] = None):
        """
        :param orbit: The orbit of the spacecraft
        :param fixed_position: A fixed body centered position in meters that overrides the orbit
        :param initial_orientation: The orientation at the epoch.  ``None`` gives nadir pointing
        :param orientation_rate: The rotation rates about the x, y, and z axes
        :param fixed_time: The simulation time (MJD) the spacecraft is bound to (used for batch input)
        :raises ConfigurationError: If neither an orbit nor a fixed position is given
        """

        if (orbit is None) and (fixed_position is None):
            raise ConfigurationError('The spacecraft needs either an orbit or a fixed position')

        self.orbit: Optional[KeplerOrbit] = orbit
        """
        The orbit the spacecraft is on.
        """

        self.fixed_position: Optional[DOUBLE_ARRAY] = None
        """
        The fixed body centered position of the spacecraft in meters.
        """

        if fixed_position is not None:
            self.fixed_position = as_vector(fixed_position, 3)

        self.initial_orientation: Optional[Quaternion] = None
        """
        The (unit) orientation of the spacecraft at the epoch, or ``None`` for nadir pointing.
        """

        if initial_orientation is not None:
            if initial_orientation.norm() == 0:
                raise ConfigurationError('The initial orientation quaternion must not be zero')
            self.initial_orientation = initial_orientation.normalized()

        self.orientation_rate: DOUBLE_ARRAY = as_vector(orientation_rate, 3)
        """
        The rotation rates about the x, y, and z axes, multiplied by the elapsed seconds to give radians.
        """

        self.fixed_time: Optional[float] = fixed_time
        """
        The simulation time the spacecraft is bound to, if any.
        """

    @property
    def nadir(self) -> bool:
        """
        ``True`` when the camera is pointed at the center of the Moon.
        """

        return self.initial_orientation is None

    @property
    def epoch(self) -> float:
        """
        The reference time (MJD) for the orientation transition.

        This is the orbit epoch, or the fixed time when there is no orbit, or the default epoch.
        """

        if self.orbit is not None:
            return self.orbit.epoch

        if self.fixed_time is not None:
            return self.fixed_time

        return DEFAULT_EPOCH

    def position(self, time: float) -> DOUBLE_ARRAY:
        """
        The body centered position of the spacecraft in meters.

        :param time: The time as a Modified Julian Date
        :return: The position
        """

        if self.fixed_position is not None:
            return self.fixed_position.copy()

        return self.orbit.position(time)

    def orientation(self, time: float, position: ARRAY_LIKE) -> Quaternion:
        """
        The orientation of the spacecraft at ``time``.

        :param time: The time as a Modified Julian Date
        :param position: The position of the spacecraft at ``time`` (used for nadir pointing)
        :return: The orientation quaternion
        """

        if self.nadir:
            return nadir_orientation(position)

        elapsed = SECONDS_PER_DAY * (time - self.epoch)

        return orientation_transition(self.orientation_rate, elapsed) * self.initial_orientation

    def __repr__(self) -> str:
        return ('Spacecraft(orbit={!r}, fixed_position={!r}, initial_orientation={!r}, orientation_rate={!r}, '
                'fixed_time={!r})'.format(self.orbit,
                                          None if self.fixed_position is None else self.fixed_position.tolist(),
                                          self.initial_orientation, self.orientation_rate.tolist(), self.fixed_time))


@dataclass(frozen=True, eq=False)
class SpacecraftState:
    """
    The immutable snapshot of a spacecraft at a single simulation time.
    """

    time: float
    """
    The simulation time as a Modified Julian Date
    """

    position: DOUBLE_ARRAY
    """
    The body centered position of the spacecraft in meters
    """

    sun_position: DOUBLE_ARRAY
    """
    The body centered position of the Sun in meters
    """

    orientation: Quaternion
    """
    The orientation of the spacecraft
    """

    camera: CameraFrame
    """
    The camera frame at this time
    """

    spacecraft: Spacecraft
    """
    The template this state was created from
    """

    @property
    def altitude(self) -> float:
        """
        The distance from the spacecraft to the center of the Moon in meters.
        """

        return norm(self.position)


def create_spacecraft_state(spacecraft: Spacecraft, time: float, options: SimulationOptions,
                            ephemeris: Ephemeris) -> SpacecraftState:
    """
    Evaluate a spacecraft template at a time.

    :param spacecraft: The spacecraft template
    :param time: The simulation time as a Modified Julian Date
    :param options: The simulation options (camera size and field of view)
    :param ephemeris: The ephemeris giving the body centered Sun position in meters
    :return: The snapshot of the spacecraft at ``time``
    :raises KeplerConvergenceError: If the orbit cannot be propagated to ``time``
    """

    position = as_vector(spacecraft.position(time), 3)

    sun_position = as_vector(ephemeris(time), 3)

    orientation = spacecraft.orientation(time, position)

    camera = build_camera_frame(position, orientation, fov=options.fov, width=options.width, height=options.height,
                                nadir=spacecraft.nadir)

    return SpacecraftState(time, position, sun_position, orientation, camera, spacecraft)
