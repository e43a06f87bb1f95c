"""Immutable scene description consumed by the renderer.

A Scene is built once (usually by the loader) and never mutated afterwards.
Lights, pigments, textures and spheres are ordered tuples and refer to each
other by integer index. By convention the light at index 0 is the ambient
light: it only seeds the ambient term and casts no shadows.

Example:
    >>> scene = Scene(
    ...     output="out.ppm",
    ...     width=64,
    ...     height=48,
    ...     camera=Camera(eye=(0, 0, 5), at=(0, 0, 0), up=(0, 1, 0), fovy=0.8),
    ...     lights=(Light(position=(0, 0, 0), color=(0.2, 0.2, 0.2)),),
    ...     pigments=((1.0, 0.0, 0.0),),
    ...     textures=(Texture(ambient=1.0, diffuse=0.0, specular=0.0),),
    ...     spheres=(Sphere(center=(0, 0, 0), radius=1.0),),
    ... )
    >>> scene.aspect
    1.3333333333333333
"""

from __future__ import annotations

from dataclasses import dataclass, field

Vector = tuple[float, float, float]


@dataclass(frozen=True)
class Camera:
    """Camera placement as given in the scene description.

    Attributes:
        eye: Camera position in world space (x, y, z).
        at: Point the camera is looking at.
        up: Approximate up direction; re-orthogonalized when the view is derived.
        fovy: Vertical field of view in radians.
    """

    eye: Vector
    at: Vector
    up: Vector
    fovy: float


@dataclass(frozen=True)
class Light:
    """A point light.

    Attributes:
        position: Light position in world space.
        color: Radiance (RGB).
        attenuation: (constant, linear, quadratic) falloff coefficients.
    """

    position: Vector
    color: Vector
    attenuation: Vector = (1.0, 0.0, 0.0)


@dataclass(frozen=True)
class Texture:
    """Shading coefficients of a surface (not an image map).

    Attributes:
        ambient: Ambient coefficient.
        diffuse: Diffuse coefficient.
        specular: Specular coefficient.
        shininess: Specular exponent.
        reflectivity: Mirror reflectivity in [0, 1].
    """

    ambient: float
    diffuse: float
    specular: float
    shininess: float = 1.0
    reflectivity: float = 0.0


@dataclass(frozen=True)
class Sphere:
    """A sphere referencing a pigment and a texture by index."""

    center: Vector
    radius: float
    pigment: int = 0
    texture: int = 0


@dataclass(frozen=True)
class Scene:
    """Fully loaded, read-only scene.

    Attributes:
        output: Output image path named by the scene description.
        width: Image width in pixels.
        height: Image height in pixels.
        camera: Camera placement.
        lights: Lights; index 0 is the ambient light.
        pigments: Base colors (RGB) referenced by sphere.pigment.
        textures: Shading coefficients referenced by sphere.texture.
        spheres: Scene geometry.
    """

    output: str
    width: int
    height: int
    camera: Camera
    lights: tuple[Light, ...] = field(default_factory=tuple)
    pigments: tuple[Vector, ...] = field(default_factory=tuple)
    textures: tuple[Texture, ...] = field(default_factory=tuple)
    spheres: tuple[Sphere, ...] = field(default_factory=tuple)

    @property
    def aspect(self) -> float:
        """Width divided by height of the output image."""
        return self.width / self.height
