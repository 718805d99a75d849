# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


"""
This package provides the quaternion algebra used to express and compose spacecraft orientations in MSIS.

The :class:`.Quaternion` object is the primary tool.  Unit rotation quaternions are created with
:func:`.rotation_quaternion` from an axis and an angle, composed with the ``*`` operator, and applied to vectors with
:meth:`.Quaternion.rotate`.
"""

from msis.rotations.quaternion import Quaternion, rotation_quaternion, IDENTITY

__all__ = ['Quaternion', 'rotation_quaternion', 'IDENTITY']
