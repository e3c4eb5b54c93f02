"""Tests for sprite strips and the Pillow loader."""

import pytest
from PIL import Image

from shimeji.entities.sprite import (
    AssetLoadError, Direction, NullLoader, SpriteLoader, SpriteStrip,
)


def write_strip(path, frame_count, frame_width=10, height=12):
    path.parent.mkdir(parents=True, exist_ok=True)
    image = Image.new("RGBA", (frame_count * frame_width, height))
    for col in range(frame_count):
        image.putpixel((col * frame_width, 0), (col, 0, 0, 255))
    image.save(path)


def test_direction_opposite():
    assert Direction.LEFT.opposite is Direction.RIGHT
    assert Direction.RIGHT.opposite is Direction.LEFT


def test_from_image_cuts_equal_frames():
    image = Image.new("RGBA", (40, 8))
    strip = SpriteStrip.from_image("idle", image, 4)
    assert len(strip) == 4
    assert strip.frame(0).size == (10, 8)


def test_frame_index_is_clamped():
    image = Image.new("RGBA", (30, 8))
    strip = SpriteStrip.from_image("idle", image, 3)
    assert strip.frame(99) is strip.frames[-1]


def test_headless_strip_has_no_frames():
    strip = NullLoader().load("walking", 8)
    assert strip.state == "walking"
    assert strip.frame(0) is None


class TestSpriteLoader:
    def test_loads_and_caches(self, tmp_path):
        write_strip(tmp_path / "hutao" / "idle.png", 4)
        loader = SpriteLoader(tmp_path, "hutao")
        strip = loader.load("idle", 4)
        assert len(strip) == 4
        assert strip.frame(2).getpixel((0, 0)) == (2, 0, 0, 255)
        assert loader.load("idle", 4) is strip

    def test_missing_file(self, tmp_path):
        loader = SpriteLoader(tmp_path, "hutao")
        with pytest.raises(AssetLoadError):
            loader.load("walking", 8)

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "hutao" / "idle.png"
        path.parent.mkdir(parents=True)
        path.write_bytes(b"not a png")
        with pytest.raises(AssetLoadError):
            SpriteLoader(tmp_path, "hutao").load("idle", 4)

    def test_too_narrow(self, tmp_path):
        write_strip(tmp_path / "hutao" / "idle.png", 2, frame_width=1)
        with pytest.raises(AssetLoadError):
            SpriteLoader(tmp_path, "hutao").load("idle", 4)

    def test_missing_state_falls_back_in_state_machine(self, tmp_path, clock):
        from shimeji.entities.animation import AnimationStateMachine

        write_strip(tmp_path / "hutao" / "idle.png", 4)
        loader = SpriteLoader(tmp_path, "hutao")
        anim = AnimationStateMachine(clock, loader=loader)
        anim.start()
        assert anim.set_state("walking") == "idle"
        assert anim.current_frame() is not None
