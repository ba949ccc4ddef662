"""Tests for the text and PPM renderers."""

from chatlife.renderer import hue_to_rgb, organism_char, render_ascii, render_ppm
from chatlife.world import Population


class TestRenderAscii:
    def test_grid_dimensions(self, neutral_config, rng):
        world = Population(neutral_config, rng)
        lines = render_ascii(world.snapshot(), columns=40, rows=10).splitlines()
        assert len(lines) == 11
        assert lines[0].startswith("t=0.0s pop=6/20")
        assert all(len(line) == 40 for line in lines[1:])

    def test_predator_marker(self, make_world):
        world = make_world()
        world.spawn_predator(600, 400)
        assert "X" in render_ascii(world.snapshot(), columns=20, rows=10)

    def test_organism_chars(self):
        assert organism_char(True, False, 5) == "X"
        assert organism_char(False, True, 5) == "@"
        assert organism_char(False, False, 12) == "2"


class TestRenderPpm:
    def test_writes_header_and_pixels(self, neutral_config, rng, tmp_path):
        world = Population(neutral_config, rng)
        path = tmp_path / "frame.ppm"
        render_ppm(world.snapshot(), str(path), scale=0.05)
        lines = path.read_text(encoding="ascii").splitlines()
        assert lines[:3] == ["P3", "60 40", "255"]
        assert len(lines) == 3 + 40
        assert len(lines[3].split()) == 60 * 3


def test_hue_to_rgb_primaries():
    assert hue_to_rgb(0, saturation=1.0, lightness=0.5) == (255, 0, 0)
    assert hue_to_rgb(360, saturation=1.0, lightness=0.5) == (255, 0, 0)
