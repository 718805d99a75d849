# Copyright 2021 United States Government as represented by the Administrator of the National Aeronautics and Space
# Administration.  No copyright is claimed in the United States under Title 17, U.S. Code. All Other Rights Reserved.


"""
This module implements the dynamic surface pattern selection algorithm (DSPSA), which finds the precomputed surface
patches that are visible in a camera frame.

Description
-----------

The lunar surface model used for rendering is split into 5 degree by 5 degree patches of latitude and longitude, each
stored as a separate POV-Ray include file in the pattern repository.  Only the patches that are actually seen by the
camera need to be included in a scene.  To find them, a ray is traced through every pixel of the image
(:func:`select_surface_patches`), each hit point is converted into selenographic latitude and longitude, and the
enclosing patch (:func:`patch_containing`) is recorded in a :class:`PatchSet`.

Latitude buckets are chosen so that the bucket contains the value: for non-negative latitudes the start of the bucket
is the latitude floored to a multiple of 5, while for negative latitudes the end of the bucket is the latitude ceiled
to a multiple of 5.  Longitudes are first wrapped into [0, 360) and then floored.  The buckets are clamped so that the
poles and the 360 degree wrap never produce a bucket outside of [-90, 90] x [0, 360].
"""

from typing import Iterable, Iterator, NamedTuple, Union

import numpy as np

from msis._typing import SCALAR_OR_ARRAY
from msis.camera import CameraFrame
from msis.ray_tracer.rays import compute_pixel_rays
from msis.ray_tracer.sphere import Sphere
from msis.utilities.spherical_coordinates import cartesian_to_selenographic, normalize_longitude


PATCH_SIZE: int = 5
"""
The size of a surface patch in degrees of latitude and longitude
"""


class SurfacePatch(NamedTuple):
    """
    A surface patch identified by the bounds of the latitude and longitude it covers in degrees.
    """

    lat_start: int
    """
    The southern bound of the patch
    """

    lat_end: int
    """
    The northern bound of the patch
    """

    lon_start: int
    """
    The western bound of the patch
    """

    lon_end: int
    """
    The eastern bound of the patch
    """

    @property
    def key(self) -> str:
        """
        The patch identifier as ``"lat_start,lat_end,lon_start,lon_end"``.
        """

        return '{},{},{},{}'.format(*self)

    def pattern_name(self, resolution: int) -> str:
        """
        The file stem of the pattern include file for this patch at ``resolution`` pixels per degree.

        :param resolution: The surface resolution (4, 16, or 64)
        :return: The file stem, for instance ``'pattern_LDEM_4_lat_0_5_lon_355_360'``
        """

        return 'pattern_LDEM_{}_lat_{}_{}_lon_{}_{}'.format(resolution, *self)


def _bucket_bounds(lat: SCALAR_OR_ARRAY, lon: SCALAR_OR_ARRAY,
                   size: int) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    The clamped integer bounds of the buckets containing lat/lon (degrees) as arrays
    """

    lat = np.asarray(lat, dtype=np.float64)
    lon = np.asarray(normalize_longitude(lon), dtype=np.float64)

    lat_start = np.where(lat >= 0, np.floor(lat / size) * size, np.ceil(lat / size) * size - size)
    lat_start = np.clip(lat_start, -90, 90 - size)

    lon_start = np.clip(np.floor(lon / size) * size, 0, 360 - size)

    lat_start = lat_start.astype(np.int64)
    lon_start = lon_start.astype(np.int64)

    return lat_start, lat_start + size, lon_start, lon_start + size


def patch_containing(lat: float, lon: float, size: int = PATCH_SIZE) -> SurfacePatch:
    """
    Find the surface patch that contains a selenographic location.

    :param lat: The latitude in degrees
    :param lon: The longitude in degrees (any value, it is wrapped into [0, 360))
    :param size: The size of the patches in degrees
    :return: The enclosing patch
    """

    bounds = _bucket_bounds(lat, lon, size)

    return SurfacePatch(*(int(bound) for bound in bounds))


class PatchSet:
    """
    An insertion ordered collection of unique :class:`SurfacePatch` objects.

    Adding a patch that is already in the set does nothing.  Two sets are equal when they contain the same patches,
    regardless of order.
    """

    def __init__(self, patches: Iterable[SurfacePatch] = ()):
        """
        :param patches: The initial patches (duplicates are dropped)
        """

        self._patches: dict[SurfacePatch, None] = {}

        self.update(patches)

    def add(self, patch: SurfacePatch):
        """
        Add a patch to the set if it is not already in it.

        :param patch: The patch to add
        """

        self._patches.setdefault(SurfacePatch(*patch), None)

    def update(self, patches: Iterable[SurfacePatch]):
        """
        Add many patches to the set.

        :param patches: The patches to add
        """

        for patch in patches:
            self.add(patch)

    @property
    def keys(self) -> list[str]:
        """
        The identifiers of the patches in insertion order.
        """

        return [patch.key for patch in self._patches]

    def __iter__(self) -> Iterator[SurfacePatch]:
        return iter(self._patches)

    def __len__(self) -> int:
        return len(self._patches)

    def __contains__(self, patch: Union[SurfacePatch, tuple]) -> bool:
        return tuple(patch) in self._patches

    def __eq__(self, other) -> bool:
        if isinstance(other, PatchSet):
            return set(self._patches) == set(other._patches)

        return NotImplemented

    def __repr__(self) -> str:
        return 'PatchSet({!r})'.format(list(self._patches))


def select_surface_patches(camera: CameraFrame, sphere: Sphere, size: int = PATCH_SIZE) -> PatchSet:
    """
    Find the surface patches seen by every pixel of a camera frame.

    A ray is traced through each of the ``width*height`` pixels.  The patches are returned in the order they are first
    seen when sweeping the image row by row from the top left pixel.

    :param camera: The camera frame
    :param sphere: The sphere representing the Moon
    :param size: The size of the patches in degrees
    :return: The visible patches
    """

    rays, _ = compute_pixel_rays(camera, [1, camera.width], [1, camera.height])

    results = sphere.trace(rays)

    hits = results['intersect'][results['check']].T

    if hits.shape[-1] == 0:
        return PatchSet()

    lat, lon = cartesian_to_selenographic(hits, sphere.radius)

    bounds = np.vstack(_bucket_bounds(lat, lon, size))

    # keep the first occurrence of each patch in sweep order
    _, first = np.unique(bounds, axis=1, return_index=True)

    return PatchSet(SurfacePatch(*(int(bound) for bound in bounds[:, index])) for index in np.sort(first))
