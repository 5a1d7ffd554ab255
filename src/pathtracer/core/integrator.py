"""Path tracing integrator for Monte Carlo light transport.

This module implements the radiance estimator: unbiased path tracing with
next-event estimation (direct light sampling) on diffuse surfaces, indirect
bounces importance-sampled from the BRDF, and Russian roulette termination.

The estimator is an explicit loop. Each iteration handles one path vertex and
carries the path throughput (the product of ``f * cos / (pdf * p)`` over the
previous bounces), which yields exactly the statistics of the recursive
formulation

    L(x, o) = [Le] + L_direct + f(n, o, i) (n . i) L(y, -i) / (pdf * p)

without unbounded recursion. Emission of a hit surface is counted only on
primary rays and after mirror bounces; after a diffuse bounce it is already
accounted for by the direct-light term of the previous vertex.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.core.integrator import RadianceEstimator
    >>> from src.pathtracer.core.random_stream import RandomStreams
    >>> from src.pathtracer.scene.box import create_box_scene
    >>> scene, camera = create_box_scene()
    >>> estimator = RadianceEstimator(scene, RandomStreams(1000, seed=1))
    >>> samples = estimator.estimate(camera.origin, camera.direction, 1000)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray, make_ray, normalize, normalize_host, ray_at, vec3
from src.pathtracer.geometry.sphere import sphere_normal
from src.pathtracer.materials.brdf import eval_brdf, is_specular, sample_brdf
from src.pathtracer.scene.lights import sample_light, visible

# =============================================================================
# Rendering Constants
# =============================================================================

# Depth of the primary ray segment
PRIMARY_DEPTH = 1

# Paths at this depth or deeper are subject to Russian roulette
RR_START_DEPTH = 5

# Continuation probability once Russian roulette is active
RR_PROBABILITY = 0.9

# Hard cap on path segments; reaching it has probability ~0.9^250
MAX_PATH_DEPTH = 256


@ti.func
def continuation_probability(depth: ti.i32, rr_start_depth: ti.i32, rr_probability: ti.f64) -> ti.f64:
    """Russian roulette survival probability at ``depth``."""
    p = 1.0
    if depth >= rr_start_depth:
        p = rr_probability
    return p


@ti.func
def direct_radiance(
    scene: ti.template(),
    streams: ti.template(),
    stream: ti.i32,
    point: vec3,
    normal: vec3,
    outgoing: vec3,
    kind: ti.i32,
    reflectance: vec3,
) -> vec3:
    """Next-event estimate of the light reflected at ``point`` towards ``outgoing``.

    Samples one point on the light, then evaluates

        Le * f(n, l, o) * V * (n . l) * (n_l . -l) / (dist^2 * pdf_l)

    Back-facing configurations (either cosine non-positive) contribute zero;
    they are occluded anyway.

    Args:
        scene: The scene.
        streams: The RandomStreams to draw from.
        stream: Index of the calling work unit's stream.
        point: The shading point.
        normal: The shading normal (facing ``outgoing``).
        outgoing: Direction towards the previous path vertex.
        kind: Material kind at ``point``.
        reflectance: Material reflectance at ``point``.

    Returns:
        The direct radiance estimate (RGB).
    """
    light_point, light_normal, light_pdf = sample_light(scene, streams, stream)
    to_light = light_point - point
    distance2 = tm.dot(to_light, to_light)

    radiance = vec3(0.0, 0.0, 0.0)
    if distance2 > 0.0 and light_pdf > 0.0:
        light_dir = to_light / ti.sqrt(distance2)
        cos_surface = tm.dot(normal, light_dir)
        cos_light = -tm.dot(light_normal, light_dir)
        if cos_surface > 0.0 and cos_light > 0.0:
            brdf = eval_brdf(kind, reflectance, normal, light_dir, outgoing)
            geometry = cos_surface * cos_light / (distance2 * light_pdf)
            radiance = (
                scene.emissions[scene.light_index]
                * brdf
                * visible(scene, point, light_point)
                * geometry
            )
    return radiance


@ti.func
def estimate_radiance(
    scene: ti.template(),
    streams: ti.template(),
    stream: ti.i32,
    ray: Ray,
    depth: ti.i32,
    include_emission: ti.i32,
    rr_start_depth: ti.i32,
    rr_probability: ti.f64,
) -> vec3:
    """Estimate the radiance arriving along ``ray``.

    Args:
        scene: The scene.
        streams: The RandomStreams to draw from.
        stream: Index of the calling work unit's stream.
        ray: The ray (unit-length direction).
        depth: Depth of ``ray`` (PRIMARY_DEPTH for camera rays).
        include_emission: Whether emission at the first hit is counted.
        rr_start_depth: First depth at which Russian roulette applies.
        rr_probability: Continuation probability from rr_start_depth on.

    Returns:
        A non-negative radiance estimate (RGB).
    """
    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = ray
    current_depth = depth
    count_emission = include_emission

    # Cleared when the path ends; checked once per segment
    active = 1

    for _ in range(MAX_PATH_DEPTH):
        index, t = scene.nearest_hit(current)

        if index < 0:
            active = 0
        else:
            x = ray_at(current, t)
            o = -current.direction
            n = sphere_normal(scene.centers[index], x)
            if tm.dot(n, o) < 0.0:
                n = -n

            kind = scene.material_kinds[index]
            reflectance = scene.reflectances[index]
            specular = is_specular(kind)

            if count_emission == 1:
                radiance += throughput * scene.emissions[index]

            if specular == 0:
                radiance += throughput * direct_radiance(
                    scene, streams, stream, x, n, o, kind, reflectance
                )

            p = continuation_probability(current_depth, rr_start_depth, rr_probability)
            if streams.next_uniform(stream) >= p:
                active = 0
            else:
                i, pdf = sample_brdf(kind, n, o, streams, stream)
                if pdf <= 0.0:
                    # Zero-density sample: no contribution, no NaN
                    active = 0
                else:
                    brdf = eval_brdf(kind, reflectance, n, o, i)
                    throughput *= brdf * (tm.dot(n, i) / (pdf * p))
                    current = make_ray(x, i)
                    current_depth += 1
                    count_emission = specular

        if active == 0:
            break

    return radiance


# =============================================================================
# Host-side estimation
# =============================================================================


@ti.data_oriented
class RadianceEstimator:
    """Runs many independent estimates of a single ray.

    Sample ``k`` draws from stream ``k``, so the number of samples per call
    is limited to the number of streams. Used for testing and debugging; the
    renderer calls ``estimate_radiance`` directly.
    """

    def __init__(self, scene, streams) -> None:
        self.scene = scene
        self.streams = streams

    @ti.kernel
    def _estimate_kernel(
        self,
        out: ti.template(),
        ox: ti.f64,
        oy: ti.f64,
        oz: ti.f64,
        dx: ti.f64,
        dy: ti.f64,
        dz: ti.f64,
        depth: ti.i32,
        include_emission: ti.i32,
        rr_start_depth: ti.i32,
        rr_probability: ti.f64,
    ):
        for k in range(out.shape[0]):
            ray = make_ray(vec3(ox, oy, oz), normalize(vec3(dx, dy, dz)))
            out[k] = estimate_radiance(
                self.scene,
                self.streams,
                k,
                ray,
                depth,
                include_emission,
                rr_start_depth,
                rr_probability,
            )

    def estimate(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        num_samples: int,
        *,
        depth: int = PRIMARY_DEPTH,
        include_emission: bool = True,
        rr_start_depth: int = RR_START_DEPTH,
        rr_probability: float = RR_PROBABILITY,
    ) -> npt.NDArray[np.float64]:
        """Estimate the radiance along one ray ``num_samples`` times.

        Args:
            origin: Ray origin.
            direction: Ray direction (normalized here).
            num_samples: Number of independent estimates.
            depth: Depth assigned to the ray.
            include_emission: Whether emission at the first hit is counted.
            rr_start_depth: First depth at which Russian roulette applies.
            rr_probability: Continuation probability in (0, 1].

        Returns:
            Array of shape (num_samples, 3).

        Raises:
            ValueError: If num_samples exceeds the stream count or
                rr_probability is outside (0, 1].
            DegenerateVectorError: If direction is a zero vector.
        """
        if not 0 < num_samples <= self.streams.count:
            raise ValueError(
                f"num_samples must be in [1, {self.streams.count}], got {num_samples}"
            )
        if not 0.0 < rr_probability <= 1.0:
            raise ValueError(f"rr_probability must be in (0, 1], got {rr_probability}")

        d = normalize_host(direction, "ray direction")
        out = ti.Vector.field(3, dtype=ti.f64, shape=num_samples)
        self._estimate_kernel(
            out,
            float(origin[0]),
            float(origin[1]),
            float(origin[2]),
            float(d[0]),
            float(d[1]),
            float(d[2]),
            depth,
            int(include_emission),
            rr_start_depth,
            rr_probability,
        )
        return out.to_numpy()
