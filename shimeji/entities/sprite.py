"""
Per-state sprite strips using PIL

=============================================================================
ONE IMAGE PER STATE
=============================================================================

Each animation state ("idle", "walking", "jumping", ...) has its own image
file, a horizontal strip with one cell per frame:

    +-------+-------+-------+-------+
    | Frame | Frame | Frame | Frame |     idle.png  (frame_count = 4)
    |   0   |   1   |   2   |   3   |
    +-------+-------+-------+-------+

Files live at:

    <asset_dir>/<character_name>/<state>.png

The character only ever faces LEFT or RIGHT. Strips are drawn facing
right; the renderer mirrors the frame when the character faces left.

=============================================================================
LOADING CAN FAIL
=============================================================================

Not every character ships every state. A loader raises AssetLoadError when
a strip is missing or unreadable, and the animation state machine recovers
from it (see animation.py). Loaders never return a partial result.

=============================================================================
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

from PIL import Image, UnidentifiedImageError

log = logging.getLogger(__name__)


class AssetLoadError(Exception):
    """Raised by a loader when the asset for a state can't be loaded."""


class Direction(Enum):
    """
    Character facing direction.

    Unlike a top-down RPG character, a desktop character walks along the
    screen, so only two directions matter. Strips face RIGHT.
    """
    LEFT = "left"
    RIGHT = "right"

    @property
    def opposite(self) -> "Direction":
        return Direction.LEFT if self is Direction.RIGHT else Direction.RIGHT


class SpriteStrip:
    """
    Frames of one animation state.

    Parameters:
    -----------
    state : str
        State name the strip belongs to
    frames : list of PIL.Image
        Pre-cut frames, left to right. May be empty for headless loaders.
    """

    def __init__(self, state: str, frames: Optional[List[Image.Image]] = None):
        self.state = state
        self.frames: List[Image.Image] = frames or []

    @classmethod
    def from_image(cls, state: str, image: Image.Image,
                   frame_count: int) -> "SpriteStrip":
        """
        Cut a horizontal strip into frame_count equal-width frames.

        Cutting once at load time keeps frame() a plain list lookup
        inside the animation tick.
        """
        frame_width = image.width // frame_count
        frames = []
        for col in range(frame_count):
            x = col * frame_width
            frames.append(image.crop((x, 0, x + frame_width, image.height)))
        return cls(state, frames)

    def frame(self, index: int) -> Optional[Image.Image]:
        """Frame at index, clamped to the last frame. None if headless."""
        if not self.frames:
            return None
        return self.frames[min(index, len(self.frames) - 1)]

    def __len__(self) -> int:
        return len(self.frames)


class NullLoader:
    """Loader that always succeeds without touching the disk."""

    def load(self, state: str, frame_count: int) -> SpriteStrip:
        return SpriteStrip(state)


class SpriteLoader:
    """
    Load per-state strips from disk with Pillow.

    Parameters:
    -----------
    asset_dir : str or Path
        Root directory holding one sub-directory per character
    character_name : str
        Sub-directory with this character's strips

    Loaded strips are cached per state: switching back and forth between
    "idle" and "walking" doesn't hit the disk again.
    """

    def __init__(self, asset_dir: Union[str, Path], character_name: str):
        self.root = Path(asset_dir) / character_name
        self._cache: Dict[str, SpriteStrip] = {}

    def path_for(self, state: str) -> Path:
        return self.root / f"{state}.png"

    def load(self, state: str, frame_count: int) -> SpriteStrip:
        if state in self._cache:
            return self._cache[state]

        path = self.path_for(state)
        try:
            # convert() forces the pixel data to load while the file is open
            with Image.open(path) as image:
                rgba = image.convert("RGBA")
        except FileNotFoundError as e:
            raise AssetLoadError(f"no sprite for state {state!r}: {path}") from e
        except (UnidentifiedImageError, OSError) as e:
            raise AssetLoadError(f"unreadable sprite {path}: {e}") from e

        if rgba.width < frame_count:
            raise AssetLoadError(
                f"{path.name} is {rgba.width}px wide, too narrow for "
                f"{frame_count} frames")

        strip = SpriteStrip.from_image(state, rgba, frame_count)
        self._cache[state] = strip
        log.debug("Loaded strip: %s (%d frames)", path.name, frame_count)
        return strip
