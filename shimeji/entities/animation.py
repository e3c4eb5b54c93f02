"""
Animation state machine

=============================================================================
STATES
=============================================================================

The character is always in exactly one named state ("idle", "walking",
"sleeping", ...). Each state has a descriptor:

    frame_count  How many frames the state's strip has
    loops        True:  frame N-1 wraps back to frame 0
                 False: frame N-1 is held (e.g. "jumping" lands and stays)

Frames advance on their own fixed-rate tick (100 ms), independent of the
physics tick and of behavior timers. Changing state always restarts at
frame 0, so frame_index < frame_count holds at all times.

=============================================================================
ASSET FALLBACK CHAIN
=============================================================================

Entering a state loads its strip. Loading may fail (the character simply
doesn't ship that state). Instead of showing nothing, we walk a fallback
chain:

    requested state fails
        │
        ├─► a SIMILAR state exists?      ("jumping" → "jumping2")
        │       yes: enter it (and its own fallback applies)
        │
        ├─► a LAST SUCCESSFUL state?     (whatever rendered last)
        │       yes: enter it
        │
        └─► "idle"
                fails too: stop here, nothing left to try

Every state tried during one set_state() call is remembered and never
tried twice, so "jumping" ↔ "jumping2" can't bounce forever.

=============================================================================
EMOTION OVERLAYS
=============================================================================

show_emotion("happy") switches to "happy" for a fixed time (2 s) and then
goes back to whatever was showing before. A second emotion request during
that window replaces the first one: only the newest request reverts, and
it reverts to the state from BEFORE the first emotion.

Each request gets an identity token. A revert that finds a different
token (or no overlay at all) is stale and does nothing.

=============================================================================
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Set, TYPE_CHECKING

from ..config import AnimationConfig, StateDescriptor
from .sprite import AssetLoadError, Direction, NullLoader, SpriteStrip

if TYPE_CHECKING:
    from ..clock import Clock, TimerHandle
    from PIL import Image

log = logging.getLogger(__name__)

IDLE = "idle"


@dataclass(frozen=True)
class EmotionOverlay:
    """An active emotion request."""
    state: str
    previous: str
    token: int


class AnimationStateMachine:
    """
    Discrete animation state plus frame counter.

    Parameters:
    -----------
    clock : Clock
        Timer source for the frame tick and emotion reverts
    config : AnimationConfig, optional
        Frame rate, emotion duration and the known-states table
    loader : object with load(state, frame_count) -> SpriteStrip
        Asset loader; raises AssetLoadError on failure
    """

    def __init__(self, clock: "Clock", config: Optional[AnimationConfig] = None,
                 loader=None):
        self.clock = clock
        self.config = config or AnimationConfig()
        self.loader = loader or NullLoader()

        # Known-states table; "idle" must always exist
        self.states: Dict[str, StateDescriptor] = dict(self.config.states)
        if IDLE not in self.states:
            self.states[IDLE] = StateDescriptor(1, True)

        self.current_state = IDLE
        self.frame_index = 0
        self.last_successful_state: Optional[str] = None
        self.strip: Optional[SpriteStrip] = None

        # Facing, for the renderer (strips face right)
        self.direction = Direction.RIGHT

        self._emotion: Optional[EmotionOverlay] = None
        self._emotion_timer: Optional["TimerHandle"] = None
        self._emotion_tokens = itertools.count(1)

        self._frame_tick: Optional["TimerHandle"] = None

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self):
        """Load the current state's strip and start the frame tick."""
        self.stop()
        self._enter(self.current_state, set())
        self._frame_tick = self.clock.call_every(self.config.frame_ms,
                                                 self.advance_frame)

    def stop(self):
        if self._frame_tick is not None:
            self._frame_tick.cancel()
            self._frame_tick = None
        self._cancel_emotion_timer()
        self._emotion = None

    # =========================================================================
    # STATE CHANGES
    # =========================================================================

    def set_state(self, name: str) -> str:
        """
        Switch to state name.

        Returns the state actually entered, which differs from name when
        name is unknown (→ "idle") or its asset failed to load (→ the
        fallback chain's pick). Setting the current state again is a
        no-op: no frame reset, no reload.
        """
        if name not in self.states:
            log.warning('State "%s" not found, defaulting to idle', name)
            name = IDLE

        if name == self.current_state:
            return name

        return self._enter(name, set())

    def _enter(self, name: str, tried: Set[str]) -> str:
        tried.add(name)
        self.current_state = name
        self.frame_index = 0

        try:
            self.strip = self.loader.load(name, self.states[name].frame_count)
        except AssetLoadError as e:
            log.warning("Failed to load asset for state %s: %s", name, e)
            self.strip = None
            return self._recover(name, tried)

        self.last_successful_state = name
        log.debug("state -> %s", name)
        return name

    def _recover(self, failed: str, tried: Set[str]) -> str:
        if failed == IDLE:
            log.warning("idle asset unavailable, no further fallback")
            return self.current_state

        similar = self.find_similar_state(failed, exclude=tried)
        if similar is not None:
            log.info("Falling back to similar state: %s", similar)
            return self._enter(similar, tried)

        last = self.last_successful_state
        if last is not None and last not in tried:
            log.info("Falling back to last successful state: %s", last)
            return self._enter(last, tried)

        log.info("Falling back to idle state")
        return self._enter(IDLE, tried)

    def find_similar_state(self, name: str,
                           exclude: Optional[Set[str]] = None) -> Optional[str]:
        """
        A known state sharing a name prefix with name, or None.

        "jumping" matches "jumping2" and "jump" matches "jumping": either
        name may be the prefix of the other.
        """
        exclude = exclude or set()
        for state in self.states:
            if state == name or state in exclude:
                continue
            if state.startswith(name) or name.startswith(state):
                return state
        return None

    # =========================================================================
    # EMOTIONS
    # =========================================================================

    @property
    def emotion(self) -> Optional[str]:
        return self._emotion.state if self._emotion else None

    def show_emotion(self, name: str) -> str:
        """Show an emotion state for emotion_ms, then revert."""
        # A superseding emotion reverts to what was showing before the
        # first one, not to the first emotion itself.
        if self._emotion is not None:
            previous = self._emotion.previous
        else:
            previous = self.current_state

        self._cancel_emotion_timer()
        token = next(self._emotion_tokens)
        resolved = self.set_state(name)
        self._emotion = EmotionOverlay(resolved, previous, token)
        self._emotion_timer = self.clock.call_later(
            self.config.emotion_ms, self._revert_emotion, token)
        return resolved

    def _revert_emotion(self, token: int):
        overlay = self._emotion
        if overlay is None or overlay.token != token:
            return  # superseded

        self._emotion = None
        self._cancel_emotion_timer()
        self.set_state(overlay.previous)

    def _cancel_emotion_timer(self):
        if self._emotion_timer is not None:
            self._emotion_timer.cancel()
            self._emotion_timer = None

    # =========================================================================
    # FRAME TICK
    # =========================================================================

    def advance_frame(self):
        """
        Advance one frame.

        Looping states wrap to 0. Non-looping states hold their last
        frame; if the held state is an emotion overlay, the emotion ends
        now instead of waiting for its timer.
        """
        descriptor = self.states[self.current_state]
        self.frame_index += 1

        if self.frame_index < descriptor.frame_count:
            return

        if descriptor.loops:
            self.frame_index = 0
            return

        self.frame_index = descriptor.frame_count - 1
        overlay = self._emotion
        if overlay is not None and overlay.state == self.current_state:
            self._revert_emotion(overlay.token)

    # =========================================================================
    # RENDER ACCESS
    # =========================================================================

    def orient(self, direction: Direction):
        self.direction = direction

    @property
    def flipped(self) -> bool:
        """True when the strip must be mirrored (facing left)."""
        return self.direction is Direction.LEFT

    @property
    def descriptor(self) -> StateDescriptor:
        return self.states[self.current_state]

    def current_frame(self) -> Optional["Image.Image"]:
        """Current frame image, or None when no strip is loaded."""
        if self.strip is None:
            return None
        return self.strip.frame(self.frame_index)
