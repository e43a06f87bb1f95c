"""Textual scene loader.

Scene files are whitespace-separated token streams (line breaks carry no
meaning):

    <output image path>
    <width> <height>
    <eye x y z> <at x y z> <up x y z> <fovy in radians>
    <light count>
        <position x y z> <color r g b> <attenuation constant linear quadratic>
    <pigment count>
        <kind> <r g b>
    <texture count>
        <ambient> <diffuse> <specular> <shininess> <reflectivity>
    <sphere count>
        <pigment index> <texture index> <kind> <center x y z> <radius>

The first light is the ambient light. Pigment and sphere kinds (e.g.
"solid", "sphere") are read and ignored. The loader validates everything the
renderer relies on but does not check itself, most importantly that every
sphere's pigment and texture index is in range.

Example:
    >>> scene = parse_scene(open("scenes/mirrors.txt").read())
    >>> len(scene.spheres)
    4
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from whitted.scene.model import Camera, Light, Scene, Sphere, Texture


class SceneFormatError(ValueError):
    """Raised when a scene description is malformed or inconsistent."""


class _Tokens:
    """Cursor over the tokens of a scene description."""

    def __init__(self, text: str) -> None:
        self._tokens: Iterator[str] = iter(text.split())
        self.position = 0

    def word(self, what: str) -> str:
        try:
            token = next(self._tokens)
        except StopIteration:
            raise SceneFormatError(
                f"Unexpected end of scene description: expected {what} (token {self.position + 1})"
            ) from None
        self.position += 1
        return token

    def number(self, what: str) -> float:
        token = self.word(what)
        try:
            return float(token)
        except ValueError:
            raise SceneFormatError(
                f"Expected a number for {what}, got {token!r} (token {self.position})"
            ) from None

    def integer(self, what: str) -> int:
        token = self.word(what)
        try:
            return int(token)
        except ValueError:
            raise SceneFormatError(
                f"Expected an integer for {what}, got {token!r} (token {self.position})"
            ) from None

    def vector(self, what: str) -> tuple[float, float, float]:
        return (self.number(f"{what}.x"), self.number(f"{what}.y"), self.number(f"{what}.z"))

    def count(self, what: str) -> int:
        n = self.integer(f"{what} count")
        if n < 0:
            raise SceneFormatError(f"{what} count must be non-negative, got {n}")
        return n


def _parse_light(tokens: _Tokens, i: int) -> Light:
    light = Light(
        position=tokens.vector(f"light[{i}].position"),
        color=tokens.vector(f"light[{i}].color"),
        attenuation=tokens.vector(f"light[{i}].attenuation"),
    )
    # The ambient light is never attenuated
    if i > 0 and not any(light.attenuation):
        raise SceneFormatError(
            f"light[{i}] has all-zero attenuation coefficients; intensity is undefined"
        )
    return light


def _parse_texture(tokens: _Tokens, i: int) -> Texture:
    texture = Texture(
        ambient=tokens.number(f"texture[{i}].ambient"),
        diffuse=tokens.number(f"texture[{i}].diffuse"),
        specular=tokens.number(f"texture[{i}].specular"),
        shininess=tokens.number(f"texture[{i}].shininess"),
        reflectivity=tokens.number(f"texture[{i}].reflectivity"),
    )
    if not 0.0 <= texture.reflectivity <= 1.0:
        raise SceneFormatError(
            f"texture[{i}].reflectivity = {texture.reflectivity} is outside [0, 1]"
        )
    return texture


def _parse_sphere(tokens: _Tokens, i: int, n_pigments: int, n_textures: int) -> Sphere:
    pigment = tokens.integer(f"sphere[{i}].pigment")
    texture = tokens.integer(f"sphere[{i}].texture")
    tokens.word(f"sphere[{i}].kind")
    center = tokens.vector(f"sphere[{i}].center")
    radius = tokens.number(f"sphere[{i}].radius")

    if not 0 <= pigment < n_pigments:
        raise SceneFormatError(
            f"sphere[{i}] references pigment {pigment}, but only {n_pigments} are defined"
        )
    if not 0 <= texture < n_textures:
        raise SceneFormatError(
            f"sphere[{i}] references texture {texture}, but only {n_textures} are defined"
        )
    if radius <= 0.0:
        raise SceneFormatError(f"sphere[{i}].radius must be positive, got {radius}")

    return Sphere(center=center, radius=radius, pigment=pigment, texture=texture)


def parse_scene(text: str) -> Scene:
    """Parse a scene description.

    Args:
        text: The full scene description.

    Returns:
        The parsed, validated Scene.

    Raises:
        SceneFormatError: If the description is malformed, truncated or
            internally inconsistent.
    """
    tokens = _Tokens(text)

    output = tokens.word("output image path")
    width = tokens.integer("image width")
    height = tokens.integer("image height")
    if width <= 0 or height <= 0:
        raise SceneFormatError(f"Image dimensions must be positive, got {width}x{height}")

    camera = Camera(
        eye=tokens.vector("camera.eye"),
        at=tokens.vector("camera.at"),
        up=tokens.vector("camera.up"),
        fovy=tokens.number("camera.fovy"),
    )

    lights = tuple(_parse_light(tokens, i) for i in range(tokens.count("light")))
    if not lights:
        raise SceneFormatError("At least one light (the ambient light) is required")

    pigments = []
    for i in range(tokens.count("pigment")):
        tokens.word(f"pigment[{i}].kind")
        pigments.append(tokens.vector(f"pigment[{i}].color"))

    textures = tuple(_parse_texture(tokens, i) for i in range(tokens.count("texture")))

    spheres = tuple(
        _parse_sphere(tokens, i, len(pigments), len(textures))
        for i in range(tokens.count("sphere"))
    )

    return Scene(
        output=output,
        width=width,
        height=height,
        camera=camera,
        lights=lights,
        pigments=tuple(pigments),
        textures=textures,
        spheres=spheres,
    )


def load_scene(path: str | Path) -> Scene:
    """Read and parse a scene file.

    Args:
        path: Path to the scene description.

    Returns:
        The parsed Scene.

    Raises:
        FileNotFoundError: If the file does not exist.
        OSError: If the file cannot be read.
        SceneFormatError: If the description is malformed.
    """
    return parse_scene(Path(path).read_text())
