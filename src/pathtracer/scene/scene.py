"""Scene container and ray-scene intersection.

A Scene is an ordered, fixed list of spheres plus the index of the single
emissive sphere acting as the light source. It is built once on the host,
validated, and uploaded into Taichi fields that kernels only read.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.materials import Material
    >>> from src.pathtracer.scene.scene import Scene, SphereInfo
    >>> scene = Scene(
    ...     [
    ...         SphereInfo((0, -1000, 0), 999.0, material=Material.diffuse((0.5, 0.5, 0.5))),
    ...         SphereInfo((0, 5, 0), 1.0, emission=(10, 10, 10),
    ...                    material=Material.diffuse((0, 0, 0))),
    ...     ],
    ...     light_index=1,
    ... )
    >>> # Use scene.nearest_hit(ray) within a Taichi kernel
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np
import taichi as ti

from src.pathtracer.core.ray import Ray
from src.pathtracer.geometry.sphere import NO_HIT, intersect_sphere
from src.pathtracer.materials.brdf import Material

logger = logging.getLogger(__name__)

# Upper bound for hit distances ("infinity")
T_MAX = 1e20


class SceneConfigurationError(ValueError):
    """Raised when scene data violates the scene invariants."""


@dataclass(frozen=True)
class SphereInfo:
    """Description of one sphere in the scene.

    Attributes:
        center: The center of the sphere.
        radius: The radius of the sphere (positive).
        emission: Emitted radiance (RGB, non-negative).
        material: The surface material.
    """

    center: tuple[float, float, float]
    radius: float
    emission: tuple[float, float, float] = (0.0, 0.0, 0.0)
    material: Material = field(default_factory=lambda: Material.diffuse((0.0, 0.0, 0.0)))

    @property
    def is_emissive(self) -> bool:
        return any(c > 0.0 for c in self.emission)


def _validate(spheres: Sequence[SphereInfo], light_index: int) -> None:
    if not spheres:
        raise SceneConfigurationError("A scene needs at least one sphere")
    if not 0 <= light_index < len(spheres):
        raise SceneConfigurationError(
            f"Light index {light_index} out of range for {len(spheres)} spheres"
        )

    for i, sphere in enumerate(spheres):
        values = (*sphere.center, sphere.radius, *sphere.emission, *sphere.material.reflectance)
        if not all(math.isfinite(v) for v in values):
            raise SceneConfigurationError(f"Sphere {i} has non-finite data: {sphere}")
        if sphere.radius <= 0.0:
            raise SceneConfigurationError(f"Sphere {i} has non-positive radius {sphere.radius}")
        if any(c < 0.0 for c in sphere.emission):
            raise SceneConfigurationError(f"Sphere {i} has negative emission {sphere.emission}")
        if i == light_index and not sphere.is_emissive:
            raise SceneConfigurationError(f"Light sphere {i} has no emission")
        if i != light_index and sphere.is_emissive:
            raise SceneConfigurationError(
                f"Sphere {i} is emissive but only sphere {light_index} may emit"
            )


@ti.data_oriented
class Scene:
    """An immutable list of spheres with a designated light.

    Attributes:
        spheres: The host-side sphere descriptions.
        light_index: Index of the emissive sphere.
        num_spheres: Number of spheres.
    """

    def __init__(self, spheres: Sequence[SphereInfo], light_index: int) -> None:
        """Validate and upload the scene.

        Args:
            spheres: The spheres, in order.
            light_index: Index of the single emissive sphere.

        Raises:
            SceneConfigurationError: If the data violates the scene
                invariants (see _validate).
        """
        spheres = tuple(spheres)
        _validate(spheres, light_index)

        self.spheres = spheres
        self.light_index = light_index
        self.num_spheres = len(spheres)

        n = self.num_spheres
        self.centers = ti.Vector.field(3, dtype=ti.f64, shape=n)
        self.radii = ti.field(dtype=ti.f64, shape=n)
        self.emissions = ti.Vector.field(3, dtype=ti.f64, shape=n)
        self.material_kinds = ti.field(dtype=ti.i32, shape=n)
        self.reflectances = ti.Vector.field(3, dtype=ti.f64, shape=n)

        self.centers.from_numpy(np.array([s.center for s in spheres], dtype=np.float64))
        self.radii.from_numpy(np.array([s.radius for s in spheres], dtype=np.float64))
        self.emissions.from_numpy(np.array([s.emission for s in spheres], dtype=np.float64))
        self.material_kinds.from_numpy(
            np.array([int(s.material.kind) for s in spheres], dtype=np.int32)
        )
        self.reflectances.from_numpy(
            np.array([s.material.reflectance for s in spheres], dtype=np.float64)
        )

        logger.debug("Uploaded scene with %d spheres (light=%d)", n, light_index)

    @property
    def light(self) -> SphereInfo:
        """Get the light sphere description."""
        return self.spheres[self.light_index]

    @ti.func
    def nearest_hit(self, ray: Ray):
        """Find the closest sphere hit by ``ray``.

        Args:
            ray: The ray to trace (unit-length direction).

        Returns:
            A tuple (index, t): the index of the closest sphere and the hit
            distance, or (-1, T_MAX) on a miss.
        """
        closest_t = T_MAX
        index = -1
        for i in range(self.num_spheres):
            t = intersect_sphere(ray, self.centers[i], self.radii[i])
            if t != NO_HIT and t < closest_t:
                closest_t = t
                index = i
        return index, closest_t

    def __repr__(self) -> str:
        return f"Scene(num_spheres={self.num_spheres}, light_index={self.light_index})"
