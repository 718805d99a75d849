# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


"""
This package provides the two body orbit propagation used to place the spacecraft.
"""

from msis.orbits.kepler import (KeplerOrbit, OrbitalElements, solve_kepler, normalize_angle, MOON_RADIUS, MOON_GM,
                                DEFAULT_EPOCH)


__all__ = ['KeplerOrbit', 'OrbitalElements', 'solve_kepler', 'normalize_angle', 'MOON_RADIUS', 'MOON_GM',
           'DEFAULT_EPOCH']
