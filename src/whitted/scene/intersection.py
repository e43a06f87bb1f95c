"""Device-side scene storage and scene-level intersection queries.

SceneFields uploads an immutable Scene into Taichi fields (Structure of Arrays
layout) and exposes the queries the shading and tracing stages need:
- nearest_hit: closest sphere along a ray
- shadow_distance: closest occluder between a point and a light
- attenuated_intensity: distance falloff of a light

The fields are written once in the constructor and only read afterwards, so
every pixel of a render can query them concurrently.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64, fast_math=False)
    >>> from whitted.scene.loader import load_scene
    >>> fields = SceneFields(load_scene("scenes/mirrors.txt"))
    >>> fields.query_nearest((0.0, 0.0, 10.0), (0.0, 0.0, -1.0))
    (0, 8.0)
"""

import numpy as np
import taichi as ti

from whitted.camera.view import ViewBasis, derive_view, get_view_ray
from whitted.core.vector import INF, Ray, compare, vec3
from whitted.geometry.sphere import Sphere, hit_sphere, make_sphere
from whitted.scene.model import Scene


def _padded(rows: list, columns: int, dtype=np.float64) -> np.ndarray:
    """Stack rows into an array with at least one row (Taichi fields need shape >= 1)."""
    array = np.zeros((max(len(rows), 1), columns), dtype=dtype)
    if rows:
        array[: len(rows)] = np.asarray(rows, dtype=dtype)
    return array


@ti.data_oriented
class SceneFields:
    """A Scene uploaded to Taichi fields.

    Attributes:
        scene: The source scene.
        view: The derived camera basis.
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, scene: Scene) -> None:
        self.scene = scene
        self.view: ViewBasis = derive_view(scene.camera, scene.aspect)
        self.width = scene.width
        self.height = scene.height

        n_spheres = max(len(scene.spheres), 1)
        n_lights = max(len(scene.lights), 1)
        n_pigments = max(len(scene.pigments), 1)
        n_textures = max(len(scene.textures), 1)

        # Sphere storage
        self.sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=n_spheres)
        self.sphere_radii = ti.field(dtype=ti.f64, shape=n_spheres)
        self.sphere_pigments = ti.field(dtype=ti.i32, shape=n_spheres)
        self.sphere_textures = ti.field(dtype=ti.i32, shape=n_spheres)
        self.num_spheres = ti.field(dtype=ti.i32, shape=())

        # Light storage (index 0 is the ambient light)
        self.light_positions = ti.Vector.field(3, dtype=ti.f64, shape=n_lights)
        self.light_colors = ti.Vector.field(3, dtype=ti.f64, shape=n_lights)
        self.light_attenuations = ti.Vector.field(3, dtype=ti.f64, shape=n_lights)
        self.num_lights = ti.field(dtype=ti.i32, shape=())

        self.pigments = ti.Vector.field(3, dtype=ti.f64, shape=n_pigments)

        # Texture coefficients
        self.texture_ambient = ti.field(dtype=ti.f64, shape=n_textures)
        self.texture_diffuse = ti.field(dtype=ti.f64, shape=n_textures)
        self.texture_specular = ti.field(dtype=ti.f64, shape=n_textures)
        self.texture_shininess = ti.field(dtype=ti.f64, shape=n_textures)
        self.texture_reflectivity = ti.field(dtype=ti.f64, shape=n_textures)

        # Camera frame
        self.eye = ti.Vector.field(3, dtype=ti.f64, shape=())
        self.at = ti.Vector.field(3, dtype=ti.f64, shape=())
        self.left = ti.Vector.field(3, dtype=ti.f64, shape=())
        self.up = ti.Vector.field(3, dtype=ti.f64, shape=())
        self.half_width = ti.field(dtype=ti.f64, shape=())
        self.half_height = ti.field(dtype=ti.f64, shape=())

        # Query results for Python-side callers
        self._query_index = ti.field(dtype=ti.i32, shape=())
        self._query_t = ti.field(dtype=ti.f64, shape=())

        self._upload()

    def _upload(self) -> None:
        """Copy the scene into the device fields."""
        scene = self.scene

        self.sphere_centers.from_numpy(_padded([s.center for s in scene.spheres], 3))
        radii = _padded([[s.radius] for s in scene.spheres], 1)
        self.sphere_radii.from_numpy(np.ascontiguousarray(radii[:, 0]))
        indices = _padded([[s.pigment, s.texture] for s in scene.spheres], 2, dtype=np.int32)
        self.sphere_pigments.from_numpy(np.ascontiguousarray(indices[:, 0]))
        self.sphere_textures.from_numpy(np.ascontiguousarray(indices[:, 1]))
        self.num_spheres[None] = len(scene.spheres)

        self.light_positions.from_numpy(_padded([light.position for light in scene.lights], 3))
        self.light_colors.from_numpy(_padded([light.color for light in scene.lights], 3))
        self.light_attenuations.from_numpy(_padded([light.attenuation for light in scene.lights], 3))
        self.num_lights[None] = len(scene.lights)

        self.pigments.from_numpy(_padded(list(scene.pigments), 3))

        coefficients = _padded(
            [
                [t.ambient, t.diffuse, t.specular, t.shininess, t.reflectivity]
                for t in scene.textures
            ],
            5,
        )
        self.texture_ambient.from_numpy(np.ascontiguousarray(coefficients[:, 0]))
        self.texture_diffuse.from_numpy(np.ascontiguousarray(coefficients[:, 1]))
        self.texture_specular.from_numpy(np.ascontiguousarray(coefficients[:, 2]))
        self.texture_shininess.from_numpy(np.ascontiguousarray(coefficients[:, 3]))
        self.texture_reflectivity.from_numpy(np.ascontiguousarray(coefficients[:, 4]))

        view = self.view
        self.eye[None] = list(view.eye)
        self.at[None] = list(view.at)
        self.left[None] = list(view.left)
        self.up[None] = list(view.up)
        self.half_width[None] = view.half_width
        self.half_height[None] = view.half_height

    # =========================================================================
    # Per-sphere lookups
    # =========================================================================

    @ti.func
    def sphere(self, index: ti.i32) -> Sphere:
        """Geometry of sphere `index`."""
        return make_sphere(self.sphere_centers[index], self.sphere_radii[index])

    @ti.func
    def pigment(self, index: ti.i32) -> vec3:
        """Base color of sphere `index`."""
        return self.pigments[self.sphere_pigments[index]]

    @ti.func
    def reflectivity(self, index: ti.i32) -> ti.f64:
        """Mirror reflectivity of sphere `index`."""
        return self.texture_reflectivity[self.sphere_textures[index]]

    # =========================================================================
    # Intersection queries
    # =========================================================================

    @ti.func
    def nearest_hit(self, origin: vec3, direction: vec3):
        """Find the closest sphere along a ray.

        A sphere replaces the current best only when it is closer by more
        than the comparator tolerance, so ties keep the lowest index.

        Args:
            origin: Ray origin.
            direction: Ray direction (normalized).

        Returns:
            A tuple (index, t). index is -1 and t is INF on a miss.
        """
        index = -1
        t = ti.cast(INF, ti.f64)
        for i in range(self.num_spheres[None]):
            z = hit_sphere(origin, direction, self.sphere(i))
            if compare(z, t) < 0:
                t = z
                index = i
        return index, t

    @ti.func
    def shadow_distance(self, origin: vec3, direction: vec3, distance: ti.f64) -> ti.f64:
        """Distance to the closest occluder nearer than `distance`.

        Args:
            origin: Shadow ray origin (the shaded point).
            direction: Unit direction toward the light.
            distance: Distance from origin to the light.

        Returns:
            The occluder distance, or INF if the light is visible.
        """
        tn = ti.cast(INF, ti.f64)
        for j in range(self.num_spheres[None]):
            z = hit_sphere(origin, direction, self.sphere(j))
            if compare(z, tn) < 0 and compare(z, distance) < 0:
                tn = z
        return tn

    @ti.func
    def attenuated_intensity(self, light: ti.i32, distance: ti.f64) -> vec3:
        """Light color divided by kc + d*kl + d^2*kq."""
        aten = self.light_attenuations[light]
        return self.light_colors[light] / (aten.x + distance * aten.y + distance * distance * aten.z)

    @ti.func
    def view_ray(self, px: ti.i32, py: ti.i32) -> Ray:
        """Primary ray through pixel (px, py)."""
        return get_view_ray(
            self.eye[None],
            self.at[None],
            self.left[None],
            self.up[None],
            self.half_width[None],
            self.half_height[None],
            px,
            py,
            self.width,
            self.height,
        )

    # =========================================================================
    # Python-callable queries (testing and debugging)
    # =========================================================================

    @ti.kernel
    def _nearest_kernel(self, origin: vec3, direction: vec3):
        index, t = self.nearest_hit(origin, direction)
        self._query_index[None] = index
        self._query_t[None] = t

    @ti.kernel
    def _shadow_kernel(self, origin: vec3, direction: vec3, distance: ti.f64):
        self._query_t[None] = self.shadow_distance(origin, direction, distance)

    def query_nearest(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
    ) -> tuple[int, float]:
        """Run nearest_hit for a single ray from Python.

        Args:
            origin: Ray origin.
            direction: Ray direction (normalized by the caller).

        Returns:
            Tuple of (sphere index, distance); (-1, inf) on a miss.
        """
        self._nearest_kernel(vec3(*origin), vec3(*direction))
        return int(self._query_index[None]), float(self._query_t[None])

    def query_shadow(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        distance: float,
    ) -> float:
        """Run shadow_distance for a single ray from Python."""
        self._shadow_kernel(vec3(*origin), vec3(*direction), distance)
        return float(self._query_t[None])

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return int(self.num_spheres[None])

    def get_light_count(self) -> int:
        """Get the number of lights in the scene, ambient light included."""
        return int(self.num_lights[None])
