# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


"""
This module defines the exceptions raised by MSIS.

Configuration problems (invalid orbital elements, out of domain angles, missing paths, invalid options) raise
:class:`ConfigurationError` immediately where the invalid value is supplied.  Computational failures raise
:class:`KeplerConvergenceError` (the Kepler solver did not converge), :class:`EphemerisError` (spice could not
locate the Sun) or :class:`RenderError` (the external renderer failed).  Degenerate geometry, such as a ray that
misses the Moon, is never an error.
"""


class MSISError(Exception):
    """
    Base class for all exceptions raised by MSIS.
    """


class ConfigurationError(MSISError, ValueError):
    """
    Raised when a configuration value (orbital element, option, path, command line input) is invalid.
    """


class KeplerConvergenceError(MSISError, ArithmeticError):
    """
    Raised when the Newton-Raphson solution of Kepler's equation fails to converge within the iteration limit.
    """


class RenderError(MSISError, RuntimeError):
    """
    Raised when the external renderer cannot be run or reports a failure.
    """


class EphemerisError(MSISError, RuntimeError):
    """
    Raised when the position of the illumination source cannot be computed (for instance spice has no data for the
    requested time).
    """
