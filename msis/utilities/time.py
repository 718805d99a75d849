# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


"""
Conversions between the Modified Julian Dates used for simulation times and python datetimes.

All simulation times and orbit epochs in MSIS are Modified Julian Dates (days since 1858-11-17T00:00:00 UTC).  The
conversions here are purely calendrical; leap seconds only enter when converting to ephemeris time, which is left to
spice (:func:`.datetime_to_et`).
"""

import datetime

import pandas as pd

from msis._typing import DatetimeLike


MJD_EPOCH: datetime.datetime = datetime.datetime(1858, 11, 17)
"""
The zero point of the Modified Julian Date
"""

SECONDS_PER_DAY: float = 86400.0
"""
The number of seconds in a day
"""


def mjd_to_datetime(mjd: float) -> datetime.datetime:
    """
    Convert a Modified Julian Date into a (naive, UTC) python datetime.

    The result is rounded to the nearest microsecond.

    :param mjd: The Modified Julian Date
    :return: The corresponding datetime
    """

    return (pd.Timestamp(MJD_EPOCH) + pd.Timedelta(days=mjd)).round('us').to_pydatetime()


def datetime_to_mjd(date: DatetimeLike) -> float:
    """
    Convert a python datetime (or pandas Timestamp) into a Modified Julian Date.

    Timezone aware inputs are converted to UTC first.

    :param date: The date to convert
    :return: The Modified Julian Date
    """

    stamp = pd.Timestamp(date)

    if stamp.tzinfo is not None:
        stamp = stamp.tz_convert('UTC').tz_localize(None)

    return (stamp - pd.Timestamp(MJD_EPOCH)) / pd.Timedelta(days=1)


def format_utc(mjd: float) -> str:
    """
    Format a Modified Julian Date as an ISO 8601 UTC string with whole seconds (for example
    ``'2000-01-01T12:00:00'``).

    :param mjd: The Modified Julian Date
    :return: The formatted string
    """

    return mjd_to_datetime(mjd).isoformat(timespec='seconds')
