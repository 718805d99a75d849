# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


"""
This package provides the ray tracing of pixel lines of sight against the Moon, the selection of the visible surface
patches, and the local solar illumination angle computation.
"""

from msis.ray_tracer.rays import Rays, INTERSECT_DTYPE, compute_pixel_rays
from msis.ray_tracer.sphere import Sphere, Intersection
from msis.ray_tracer.patches import SurfacePatch, PatchSet, patch_containing, select_surface_patches, PATCH_SIZE
from msis.ray_tracer.illumination import (PixelInformation, subsurface_illumination_point, illumination_angle,
                                          compute_pixel_information, compute_pixel_grid)


__all__ = ['Rays', 'INTERSECT_DTYPE', 'compute_pixel_rays', 'Sphere', 'Intersection', 'SurfacePatch', 'PatchSet',
           'patch_containing', 'select_surface_patches', 'PATCH_SIZE', 'PixelInformation',
           'subsurface_illumination_point', 'illumination_angle', 'compute_pixel_information', 'compute_pixel_grid']
