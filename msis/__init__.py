# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


"""
Welcome to MSIS, the Moon Surface Illumination Simulation.

MSIS computes the camera geometry and the per pixel solar illumination direction for a spacecraft observing the Moon.
The geometry engine is split into the following subpackages/modules

* :mod:`.rotations` -- quaternion algebra used for attitude composition
* :mod:`.orbits` -- unperturbed two body (Kepler) orbit propagation
* :mod:`.camera` -- the camera frame (direction, right, up) and the pixel ray/projection geometry
* :mod:`.spacecraft` -- spacecraft templates and the per time step :class:`.SpacecraftState` snapshots
* :mod:`.ray_tracer` -- ray/sphere intersection, the dynamic surface pattern selection algorithm (DSPSA) and the local
  solar illumination angle
* :mod:`.simulation` -- the driver which sweeps every simulation step and hands the results to the writers in
  :mod:`.scene`, :mod:`.metadata`, and :mod:`.annotation`

The command line interface is provided by :mod:`.scripts.simulate` (installed as ``msis``).
"""

__version__ = '2.0.0'
