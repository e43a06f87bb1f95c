"""Scene module: data model, loader and device-side storage.

Components:
    model: Immutable Scene, Camera, Light, Texture and Sphere dataclasses
    loader: Parser for the whitespace-token scene file format
    intersection: SceneFields, the Taichi-side copy of a Scene with
        nearest-hit and shadow queries

Example:
    >>> from whitted.scene import load_scene
    >>> scene = load_scene("scenes/mirrors.txt")
    >>> scene.width, scene.height
    (320, 240)
"""

from .loader import SceneFormatError, load_scene, parse_scene
from .model import Camera, Light, Scene, Sphere, Texture

# Note: intersection is NOT imported here because it allocates Taichi fields.
# Import SceneFields from whitted.scene.intersection after initializing Taichi.

__all__ = [
    "Camera",
    "Light",
    "Scene",
    "Sphere",
    "Texture",
    "SceneFormatError",
    "load_scene",
    "parse_scene",
]
