"""Material variants and BRDF dispatch.

The material set is closed: every surface is either DIFFUSE or SPECULAR.
Kernels store the kind as an integer and dispatch with an explicit branch in
``eval_brdf`` / ``sample_brdf``; the host-side ``Material`` dataclass is what
scenes are described with.

Example:
    >>> wall = Material.diffuse((0.75, 0.25, 0.25))
    >>> mirror = Material.specular((0.999, 0.999, 0.999))
    >>> mirror.is_specular
    True
"""

from dataclasses import dataclass
from enum import IntEnum

import taichi as ti

from src.pathtracer.core.ray import vec3
from src.pathtracer.materials.diffuse import eval_diffuse, sample_diffuse
from src.pathtracer.materials.specular import eval_specular, sample_specular


class MaterialKind(IntEnum):
    """Enumeration of supported material kinds."""

    DIFFUSE = 0
    SPECULAR = 1


@dataclass(frozen=True)
class Material:
    """A surface material.

    Attributes:
        kind: DIFFUSE or SPECULAR.
        reflectance: RGB reflectance, each component in [0, 1].
    """

    kind: MaterialKind
    reflectance: tuple[float, float, float]

    def __post_init__(self) -> None:
        if len(self.reflectance) != 3:
            raise ValueError(f"Reflectance must have 3 components, got {self.reflectance}")
        # Validate reflectance for energy conservation
        for i, component in enumerate(self.reflectance):
            if not 0.0 <= component <= 1.0:
                raise ValueError(
                    f"Reflectance component {i} = {component} is outside [0, 1]. "
                    "This would violate energy conservation."
                )

    @classmethod
    def diffuse(cls, reflectance: tuple[float, float, float]) -> "Material":
        """Create an ideal diffuse material."""
        return cls(MaterialKind.DIFFUSE, tuple(float(c) for c in reflectance))

    @classmethod
    def specular(cls, reflectance: tuple[float, float, float]) -> "Material":
        """Create an ideal mirror material."""
        return cls(MaterialKind.SPECULAR, tuple(float(c) for c in reflectance))

    @property
    def is_specular(self) -> bool:
        return self.kind == MaterialKind.SPECULAR


@ti.func
def is_specular(kind: ti.i32) -> ti.i32:
    """1 for mirror surfaces, 0 for diffuse ones."""
    result = 0
    if kind == int(MaterialKind.SPECULAR):
        result = 1
    return result


@ti.func
def eval_brdf(kind: ti.i32, reflectance: vec3, normal: vec3, outgoing: vec3, incoming: vec3) -> vec3:
    """Evaluate the BRDF of a material for a pair of directions."""
    value = vec3(0.0, 0.0, 0.0)
    if kind == int(MaterialKind.SPECULAR):
        value = eval_specular(reflectance, normal, outgoing, incoming)
    else:
        value = eval_diffuse(reflectance)
    return value


@ti.func
def sample_brdf(kind: ti.i32, normal: vec3, outgoing: vec3, streams: ti.template(), stream: ti.i32):
    """Sample an incoming direction for a material.

    Returns:
        A tuple (direction, pdf). Mirror samples are deterministic and do not
        advance the random stream.
    """
    direction = vec3(0.0, 0.0, 0.0)
    pdf = 0.0
    if kind == int(MaterialKind.SPECULAR):
        direction, pdf = sample_specular(normal, outgoing)
    else:
        direction, pdf = sample_diffuse(normal, streams, stream)
    return direction, pdf
