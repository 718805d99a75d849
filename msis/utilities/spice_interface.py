# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


"""
This module provides the ephemerides used by MSIS to locate the illumination source (the Sun).

An ephemeris in MSIS is any callable that accepts a simulation time as a Modified Julian Date and returns a body
centered position vector in meters (see :class:`.Ephemeris`).  Two are provided here.

:class:`SpicePosition` is a wrapper around the NAIF spice function ``spkpos`` through the third party library
`spiceypy <https://spiceypy.readthedocs.io/en/master/>`_.  It stores the "static" inputs to ``spkpos`` (target,
reference frame, corrections, and observer) so that the only remaining input is the time, converts the result from
kilometers to meters, and works with pickle (so it can be sent to worker processes).  :class:`SunPosition` is the
preset used by MSIS, the position of the Sun with respect to the Moon in the Moon mean Earth/polar axis frame.  As is
typical for spice, the appropriate kernels must be loaded before calling them.  For the Sun in the ``MOON_ME`` frame
these are the lunar frame kernels (``moon_080317.tf``, ``moon_assoc_me.tf``), the lunar orientation kernel
(``moon_pa_de421_1900-2050.bpc``), a planetary constants kernel, a leap seconds kernel, and a planetary ephemeris
(``de421.bsp``).  A meta kernel listing these files can be used instead.

The kernels are either loaded up front with :func:`load_kernels` or stored on the instance
(``SunPosition(kernels=...)``) and loaded on the first call in each process.  Storing them is what makes the callables
usable from worker processes started with ``spawn`` or ``forkserver``, which do not inherit the kernel pool of the
parent.  Failures inside spice are reported as an :class:`.EphemerisError`.

For example

    >>> from msis.utilities.spice_interface import SunPosition
    >>> sun = SunPosition(kernels=['/path/to/msis.tm'])
    >>> sun(51544.5)  # meters

:class:`FixedPosition` simply returns a constant vector and is useful when no kernels are available or for testing.
"""

import datetime
from typing import Iterable, cast

import numpy as np

import spiceypy as spice
from spiceypy import SpiceyError

from msis._typing import ARRAY_LIKE, DOUBLE_ARRAY, DatetimeLike, PATH
from msis.errors import ConfigurationError, EphemerisError
from msis.utilities.time import mjd_to_datetime
from msis.utilities.vectors import as_vector


KILOMETERS_TO_METERS: float = 1000.0
"""
The conversion from the kilometers spice returns to the meters MSIS uses
"""


def datetime_to_et(date: DatetimeLike | np.datetime64) -> float:
    """
    This function converts a python datetime object to ephemeris time correcting for leap seconds.

    This is a wrapper around the datetime2et function from spiceypy, therefore a leap seconds kernel must be loaded.

    :param date: The datetime instance to be converted
    :return: The ephemeris time corresponding to date for use in the spice system
    """

    if isinstance(date, np.datetime64):
        return cast(float, spice.datetime2et(cast(datetime.datetime, date.astype(datetime.datetime))))
    else:
        return cast(float, spice.datetime2et(cast(datetime.datetime, date)))


def mjd_to_et(mjd: float) -> float:
    """
    Convert a Modified Julian Date (UTC) into spice ephemeris time.

    :param mjd: The Modified Julian Date
    :return: The ephemeris time in TDB seconds past J2000
    """

    return datetime_to_et(mjd_to_datetime(mjd))


_LOADED_KERNELS: set[str] = set()
"""
The kernels furnished in this process through :func:`load_kernels`.

Each process has its own spice kernel pool, so worker processes start with this empty (unless they were forked from a
process that already loaded kernels).
"""


def load_kernels(kernels: Iterable[PATH]):
    """
    Furnish the given spice kernels (or meta kernels).

    Kernels that have already been furnished in the current process are skipped.

    :param kernels: The paths to the kernels to load
    :raises ConfigurationError: If spice cannot load one of the kernels
    """

    for kernel in map(str, kernels):

        if kernel in _LOADED_KERNELS:
            continue

        try:
            spice.furnsh(kernel)
        except SpiceyError as e:
            raise ConfigurationError('Unable to load spice kernel {}: {}'.format(kernel, e)) from e

        _LOADED_KERNELS.add(kernel)


class SpicePosition:
    """
    This class creates a callable that returns the position (in meters) of one object to another given a Modified
    Julian Date.

    This class works by storing the "static" inputs to the call to the spice function ``spkpos`` (specifically the
    target, reference frame, corrections, and observer).  For more details, refer to the NAIF spice documentation for
    spkpos at https://naif.jpl.nasa.gov/pub/naif/toolkit_docs/FORTRAN/spicelib/spkpos.html.

    The kernels the query needs can be stored in :attr:`kernels`.  They are furnished (through :func:`load_kernels`)
    the first time the instance is called in a process, so a pickled copy sent to a worker process loads them there as
    well.
    """

    def __init__(self, target: str, reference_frame: str, corrections: str, observer: str,
                 kernels: Iterable[PATH] = ()):
        """
        :param target: The name/integer spice id for the object we are computing the position vector to as a string.
        :param reference_frame: The frame we are computing the position vector in as a string
        :param corrections: The corrections to use when computing the position vector
        :param observer: The name/integer spice id for the object we are computing the position vector from as a string.
        :param kernels: The spice kernels (or meta kernels) to furnish before querying spice
        """

        self.kernels: tuple[str, ...] = tuple(map(str, kernels))
        """
        The paths of the kernels furnished before the first query in each process
        """

        self.target: str = target
        """
        The object we are computing the position vector to as a string.

        This is passed to the ``TARG`` input for spkpos.
        """

        self.reference_frame: str = reference_frame
        """
        The frame we are to compute the position vector in as a string.

        For MSIS this should be the body fixed frame of the observed body (``'MOON_ME'``).  This is passed to the
        ``REF`` input for spkpos.
        """

        self.corrections: str = corrections
        """
        The corrections we are to apply when computing the position vector.

        Valid inputs are ``'NONE'`` for no correction, ``'LT'`` for light time only corrections, ``'LT+S'`` for light
        time plus stellar aberration corrections, ``'CN'`` for converged light time only corrections, and ``'CN+S'`` for
        converged light time plus aberration corrections.  This is passed to the ``ABCORR`` input for spkpos.
        """

        self.observer: str = observer
        """
        The object we are computing the position vector from as a string.

        This is passed to the ``OBS`` input for spkpos.
        """

    def __call__(self, time: float) -> DOUBLE_ARRAY:
        """
        Make the call to spkpos given the stored settings at the input time returning the position vector in meters.

        :param time: The time we are querying spice at as a Modified Julian Date (UTC)
        :return: The position vector from :attr:`observer` to :attr:`target` in frame :attr:`reference_frame` using
                 corrections :attr:`corrections` in meters
        :raises ConfigurationError: If one of :attr:`kernels` cannot be loaded
        :raises EphemerisError: If spice cannot compute the position (for instance the loaded kernels do not cover
                                ``time``)
        """

        load_kernels(self.kernels)

        try:
            position, _ = spice.spkpos(self.target, mjd_to_et(time), self.reference_frame, self.corrections,
                                       self.observer)
        except SpiceyError as e:
            raise EphemerisError('Unable to compute the position of {} relative to {} at MJD {}: {}'.format(
                self.target, self.observer, time, e)) from e

        return np.asarray(position, dtype=np.float64) * KILOMETERS_TO_METERS

    def __repr__(self) -> str:
        return '{}({!r}, {!r}, {!r}, {!r}, kernels={!r})'.format(type(self).__name__, self.target,
                                                                 self.reference_frame, self.corrections,
                                                                 self.observer, self.kernels)


class SunPosition(SpicePosition):
    """
    The position of the Sun with respect to the Moon in the Moon mean Earth frame, in meters, without corrections.
    """

    def __init__(self, target: str = 'SUN', reference_frame: str = 'MOON_ME', corrections: str = 'NONE',
                 observer: str = 'MOON', kernels: Iterable[PATH] = ()):
        super().__init__(target, reference_frame, corrections, observer, kernels=kernels)


class FixedPosition:
    """
    An ephemeris that always returns the same position.
    """

    def __init__(self, position: ARRAY_LIKE):
        """
        :param position: The constant position in meters
        """

        self.position: DOUBLE_ARRAY = as_vector(position, 3)
        """
        The position returned for every time
        """

    def __call__(self, time: float) -> DOUBLE_ARRAY:
        return self.position.copy()

    def __repr__(self) -> str:
        return 'FixedPosition({!r})'.format(self.position.tolist())
