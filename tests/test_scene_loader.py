"""Unit tests for the scene loader.

Tests cover:
- Parsing a complete scene description
- Layout independence (line breaks carry no meaning)
- Rejection of truncated, malformed and inconsistent descriptions
- Loading from files
"""

from pathlib import Path

import pytest

SCENES_DIR = Path(__file__).parent.parent / "scenes"

VALID_SCENE = """
out.ppm
40 30
0 0 10   0 0 0   0 1 0   0.6
2
0 0 0   0.1 0.1 0.1   1 0 0
5 5 5   1 0.9 0.8     1 0.05 0.001
2
solid 1 0 0
solid 0 0 1
2
0.2 0.7 0.3 12 0
0.1 0.5 0.5 50 0.75
3
0 0 sphere  0 0 0   1
1 1 sphere  2 0 -1  0.5
1 0 sphere  0 -101 0 100
"""


def _with(replacements):
    text = VALID_SCENE
    for old, new in replacements:
        assert old in text
        text = text.replace(old, new, 1)
    return text


class TestParseScene:
    """Tests for parse_scene on well-formed input."""

    def test_header(self):
        from whitted.scene.loader import parse_scene

        scene = parse_scene(VALID_SCENE)

        assert scene.output == "out.ppm"
        assert (scene.width, scene.height) == (40, 30)
        assert scene.aspect == pytest.approx(40 / 30)

    def test_camera(self):
        from whitted.scene.loader import parse_scene

        camera = parse_scene(VALID_SCENE).camera

        assert camera.eye == (0.0, 0.0, 10.0)
        assert camera.at == (0.0, 0.0, 0.0)
        assert camera.up == (0.0, 1.0, 0.0)
        assert camera.fovy == pytest.approx(0.6)

    def test_lights(self):
        from whitted.scene.loader import parse_scene

        lights = parse_scene(VALID_SCENE).lights

        assert len(lights) == 2
        assert lights[0].color == (0.1, 0.1, 0.1)
        assert lights[1].position == (5.0, 5.0, 5.0)
        assert lights[1].attenuation == (1.0, 0.05, 0.001)

    def test_pigments_and_textures(self):
        from whitted.scene.loader import parse_scene

        scene = parse_scene(VALID_SCENE)

        assert scene.pigments == ((1.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert len(scene.textures) == 2
        assert scene.textures[1].shininess == 50.0
        assert scene.textures[1].reflectivity == 0.75

    def test_spheres(self):
        from whitted.scene.loader import parse_scene

        spheres = parse_scene(VALID_SCENE).spheres

        assert len(spheres) == 3
        assert spheres[1].center == (2.0, 0.0, -1.0)
        assert spheres[1].radius == 0.5
        assert (spheres[2].pigment, spheres[2].texture) == (1, 0)

    def test_layout_independent(self):
        """Whitespace of any kind separates tokens."""
        from whitted.scene.loader import parse_scene

        flat = " ".join(VALID_SCENE.split())
        assert parse_scene(flat) == parse_scene(VALID_SCENE)

    def test_unattenuated_ambient_and_quadratic_only_light(self):
        """Light 0 needs no attenuation; point lights need any non-zero term."""
        from whitted.scene.loader import parse_scene

        text = _with(
            [
                ("0 0 0   0.1 0.1 0.1   1 0 0", "0 0 0   0.2 0.2 0.2   0 0 0"),
                ("1 0.05 0.001", "0 0 0.01"),
            ]
        )
        lights = parse_scene(text).lights

        assert lights[0].attenuation == (0.0, 0.0, 0.0)
        assert lights[1].attenuation == (0.0, 0.0, 0.01)

    def test_empty_sphere_list(self):
        from whitted.scene.loader import parse_scene

        text = _with([("3\n0 0 sphere  0 0 0   1\n1 1 sphere  2 0 -1  0.5\n1 0 sphere  0 -101 0 100", "0")])
        assert parse_scene(text).spheres == ()


class TestParseSceneErrors:
    """Tests for malformed descriptions."""

    def test_truncated(self):
        from whitted.scene.loader import SceneFormatError, parse_scene

        text = VALID_SCENE.rsplit("0 -101", 1)[0]
        with pytest.raises(SceneFormatError, match="Unexpected end"):
            parse_scene(text)

    def test_empty(self):
        from whitted.scene.loader import SceneFormatError, parse_scene

        with pytest.raises(SceneFormatError):
            parse_scene("")

    def test_bad_number(self):
        from whitted.scene.loader import SceneFormatError, parse_scene

        with pytest.raises(SceneFormatError, match="camera.fovy"):
            parse_scene(_with([("0.6", "wide")]))

    def test_bad_count(self):
        from whitted.scene.loader import SceneFormatError, parse_scene

        with pytest.raises(SceneFormatError, match="integer"):
            parse_scene(_with([("40 30", "40.5 30")]))

    def test_non_positive_dimensions(self):
        from whitted.scene.loader import SceneFormatError, parse_scene

        with pytest.raises(SceneFormatError, match="dimensions"):
            parse_scene(_with([("40 30", "0 30")]))

    def test_no_lights(self):
        from whitted.scene.loader import SceneFormatError, parse_scene

        text = _with([("2\n0 0 0   0.1 0.1 0.1   1 0 0\n5 5 5   1 0.9 0.8     1 0.05 0.001", "0")])
        with pytest.raises(SceneFormatError, match="ambient light"):
            parse_scene(text)

    def test_all_zero_attenuation_on_point_light(self):
        from whitted.scene.loader import SceneFormatError, parse_scene

        with pytest.raises(SceneFormatError, match=r"light\[1\].*attenuation"):
            parse_scene(_with([("1 0.05 0.001", "0 0 0")]))

    def test_pigment_index_out_of_range(self):
        from whitted.scene.loader import SceneFormatError, parse_scene

        with pytest.raises(SceneFormatError, match="pigment 2"):
            parse_scene(_with([("1 1 sphere", "2 1 sphere")]))

    def test_texture_index_out_of_range(self):
        from whitted.scene.loader import SceneFormatError, parse_scene

        with pytest.raises(SceneFormatError, match="texture -1"):
            parse_scene(_with([("1 1 sphere", "1 -1 sphere")]))

    def test_non_positive_radius(self):
        from whitted.scene.loader import SceneFormatError, parse_scene

        with pytest.raises(SceneFormatError, match="radius"):
            parse_scene(_with([("2 0 -1  0.5", "2 0 -1  0")]))

    def test_reflectivity_out_of_range(self):
        from whitted.scene.loader import SceneFormatError, parse_scene

        with pytest.raises(SceneFormatError, match="reflectivity"):
            parse_scene(_with([("50 0.75", "50 1.5")]))

    def test_format_error_is_value_error(self):
        from whitted.scene.loader import SceneFormatError

        assert issubclass(SceneFormatError, ValueError)


class TestLoadScene:
    """Tests for load_scene."""

    def test_load_from_file(self, tmp_path):
        from whitted.scene.loader import load_scene, parse_scene

        path = tmp_path / "scene.txt"
        path.write_text(VALID_SCENE)

        assert load_scene(path) == parse_scene(VALID_SCENE)
        assert load_scene(str(path)) == parse_scene(VALID_SCENE)

    def test_missing_file(self, tmp_path):
        from whitted.scene.loader import load_scene

        with pytest.raises(FileNotFoundError):
            load_scene(tmp_path / "missing.txt")

    @pytest.mark.parametrize("name", ["single.txt", "mirrors.txt"])
    def test_bundled_scenes_load(self, name):
        from whitted.scene.loader import load_scene

        scene = load_scene(SCENES_DIR / name)

        assert scene.width > 0 and scene.height > 0
        assert len(scene.lights) >= 2
        assert len(scene.spheres) >= 1
