"""Local illumination for the Whitted tracer.

The shading engine computes the direct lighting at a ray-sphere hit:

    color = pigment * ambient * L0
          + sum_{i >= 1, unoccluded} I_i(d) * (pigment * kd * max(0, n . l)
                                               + ks * max(0, v . reflect(l, n))^shininess)

where L0 is the ambient light's color, I_i(d) the attenuated intensity of
light i at distance d, l the unit direction toward the light and v the unit
direction back toward the ray origin. The specular term is a scalar, so
highlights take the light's color rather than the pigment's.

The hit point is pulled back by EPSILON along the ray so that shadow and
reflection rays leaving it do not re-intersect the same surface.

Reflection is not handled here: the shader returns the reflectivity and the
outgoing normal and the tracer (see integrator.py) decides whether and how to
spawn the mirror ray.
"""

import taichi as ti

from whitted.core.vector import (
    EPSILON,
    INF,
    compare,
    dot,
    length,
    make_ray,
    normalize,
    ray_at,
    reflect,
    vec3,
)
from whitted.scene.intersection import SceneFields


@ti.data_oriented
class Shader:
    """Phong-style shading with per-light shadow rays.

    Attributes:
        scene: The device-side scene to shade against.
    """

    def __init__(self, scene: SceneFields) -> None:
        self.scene = scene

    @ti.func
    def surface(self, index: ti.i32, t: ti.f64, origin: vec3, direction: vec3):
        """Hit point and outward-facing normal for a hit on sphere `index`.

        The normal is flipped when the ray starts inside the sphere so that
        spheres can be viewed from within.

        Returns:
            A tuple (point, normal).
        """
        sphere = self.scene.sphere(index)
        center = sphere.center
        point = ray_at(make_ray(origin, direction), t - EPSILON)
        normal = normalize(point - center)

        if length(origin - center) < sphere.radius:
            normal = normal * -1.0

        return point, normal

    @ti.func
    def direct_light(self, index: ti.i32, origin: vec3, point: vec3, normal: vec3) -> vec3:
        """Ambient term plus the diffuse and specular terms of visible lights.

        Args:
            index: The hit sphere.
            origin: Origin of the incoming ray.
            point: The (offset) hit point.
            normal: The surface normal facing the incoming ray.

        Returns:
            The locally reflected radiance (RGB).
        """
        tex = self.scene.sphere_textures[index]
        pigment = self.scene.pigment(index)

        color = pigment * self.scene.texture_ambient[tex] * self.scene.light_colors[0]

        for i in range(1, self.scene.num_lights[None]):
            to_light = self.scene.light_positions[i] - point
            distance = length(to_light)
            light_dir = normalize(to_light)

            tn = self.scene.shadow_distance(point, light_dir, distance)

            if compare(tn, INF) >= 0:
                lambert = ti.max(dot(normal, light_dir), 0.0)
                diffuse = pigment * self.scene.texture_diffuse[tex] * lambert
                view_dir = normalize(origin - point)
                reflect_dir = reflect(light_dir, normal)
                specular = self.scene.texture_specular[tex] * (
                    ti.max(dot(view_dir, reflect_dir), 0.0) ** self.scene.texture_shininess[tex]
                )
                color = color + self.scene.attenuated_intensity(i, distance) * (diffuse + specular)

        return color

    @ti.func
    def shade_local(self, index: ti.i32, t: ti.f64, origin: vec3, direction: vec3):
        """Shade a hit without following reflections.

        Args:
            index: The hit sphere.
            t: Distance along the ray to the hit.
            origin: Ray origin.
            direction: Ray direction (normalized).

        Returns:
            A tuple (color, point, normal, reflectivity) where point and
            normal seed the mirror ray if the tracer spawns one.
        """
        point, normal = self.surface(index, t, origin, direction)
        color = self.direct_light(index, origin, point, normal)
        return color, point, normal, self.scene.reflectivity(index)

