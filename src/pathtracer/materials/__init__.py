"""Materials module for BRDF models.

Components:
    brdf: The closed material variant (diffuse, specular) and its dispatch
    diffuse: Ideal diffuse reflection with cosine-weighted sampling
    specular: Ideal mirror reflection

Each material provides:
    - is_specular(): Whether direct light sampling applies
    - eval(): BRDF value for a pair of directions (no cosine term)
    - sample(): Draw an incoming direction and its pdf

All BRDF computations are Taichi functions for use inside kernels.
"""

from .brdf import Material, MaterialKind, eval_brdf, is_specular, sample_brdf
from .diffuse import eval_diffuse, pdf_diffuse, sample_diffuse
from .specular import MIRROR_TOLERANCE, eval_specular, mirror_direction, sample_specular

__all__ = [
    # Dispatch
    "Material",
    "MaterialKind",
    "is_specular",
    "eval_brdf",
    "sample_brdf",
    # Diffuse
    "eval_diffuse",
    "pdf_diffuse",
    "sample_diffuse",
    # Specular
    "MIRROR_TOLERANCE",
    "mirror_direction",
    "eval_specular",
    "sample_specular",
]
