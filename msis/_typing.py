# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


from typing import Union, Protocol, runtime_checkable, Sequence
from datetime import datetime
from pandas import Timestamp
from pathlib import Path

import numpy as np
import numpy.typing as npt

DOUBLE_ARRAY = npt.NDArray[np.float64]
ARRAY_LIKE = npt.ArrayLike
SCALAR_OR_ARRAY = Union[float, npt.ArrayLike]
F_SCALAR_OR_ARRAY = Union[float, DOUBLE_ARRAY]

PATH = Union[Path, str]

DatetimeLike = Union[datetime, Timestamp]

F_ARRAY_LIKE = Sequence[float] | DOUBLE_ARRAY


@runtime_checkable
class Ephemeris(Protocol):
    """
    Anything that returns the body centered position of an object in meters for a time given as a Modified Julian Date
    """

    def __call__(self, time: float, /) -> DOUBLE_ARRAY: ...
