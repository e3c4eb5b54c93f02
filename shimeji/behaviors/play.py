"""
Play - bounce around happily.

Two independent repeating timers run while playing:

    "action"   every 2-4 s: one of jump / dance / wave / spin
    "emotion"  every 3-6 s: 50 % chance to flash the "happy" emotion

Actions that take time (dance, wave, spin) run their follow-ups in the
"gesture" slot. Starting a new action replaces an unfinished gesture.

    dance   "happy", then 300 ms later push vx away from current facing
    wave    "waving" for 1.5 s, back to "happy"
    spin    flip facing every 150 ms, 6 times; "surprised" for 1 s;
            back to "happy"
"""

import logging
from enum import Enum
from typing import Optional

from ..entities.sprite import Direction
from .base import Behavior

log = logging.getLogger(__name__)

ACTION_INTERVAL_MS = (2000.0, 4000.0)
EMOTION_INTERVAL_MS = (3000.0, 6000.0)
EMOTION_CHANCE = 0.5

ACTIONS = ("jump", "dance", "wave", "spin")

DANCE_DELAY_MS = 300.0
DANCE_PUSH = 2.0
WAVE_MS = 1500.0
SPIN_STEP_MS = 150.0
SPIN_STEPS = 6
DIZZY_MS = 1000.0


class PlayPhase(Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    DANCING = "dancing"
    WAVING = "waving"
    SPINNING = "spinning"
    DIZZY = "dizzy"


class Play(Behavior):
    name = "play"

    def __init__(self, character):
        super().__init__(character)
        self.phase = PlayPhase.STOPPED
        self._spin_count = 0

    def start(self):
        self.stop()
        self.running = True
        self.phase = PlayPhase.PLAYING
        self.set_state("happy")
        self._arm_every("action", self.uniform(*ACTION_INTERVAL_MS),
                        self.perform_action)
        self._arm_every("emotion", self.uniform(*EMOTION_INTERVAL_MS),
                        self._maybe_show_emotion)

    def stop(self):
        super().stop()
        self.phase = PlayPhase.STOPPED
        self._spin_count = 0

    def _maybe_show_emotion(self):
        if self.rng.random() < EMOTION_CHANCE:
            self.animation.show_emotion("happy")

    # =========================================================================
    # ACTIONS
    # =========================================================================

    def perform_action(self, action: Optional[str] = None):
        if action is None:
            action = self.rng.choice(ACTIONS)
        log.debug("play action: %s", action)
        self._disarm("gesture")

        if action == "jump":
            self.phase = PlayPhase.PLAYING
            self.character.scheduler.perform_jump()
        elif action == "dance":
            self._dance()
        elif action == "wave":
            self._wave()
        elif action == "spin":
            self._spin()
        else:
            log.warning("unknown play action %r", action)

    def _dance(self):
        self.phase = PlayPhase.DANCING
        self.set_state("happy")
        self._arm("gesture", DANCE_DELAY_MS, self._dance_step)

    def _dance_step(self):
        # Step against the way we're facing
        if self.physics.direction is Direction.LEFT:
            self.physics.body.vx = DANCE_PUSH
        else:
            self.physics.body.vx = -DANCE_PUSH
        self.phase = PlayPhase.PLAYING

    def _wave(self):
        self.phase = PlayPhase.WAVING
        self.set_state("waving")
        self.character.show_dialogue("play")
        self._arm("gesture", WAVE_MS, self._back_to_happy)

    def _spin(self):
        self.phase = PlayPhase.SPINNING
        self._spin_count = 0
        self._arm_every("gesture", SPIN_STEP_MS, self._spin_step)

    def _spin_step(self):
        self.physics.direction = self.physics.direction.opposite
        self.animation.orient(self.physics.direction)
        self._spin_count += 1

        if self._spin_count >= SPIN_STEPS:
            # Dizzy after spinning
            self.phase = PlayPhase.DIZZY
            self.set_state("surprised")
            self._arm("gesture", DIZZY_MS, self._back_to_happy)

    def _back_to_happy(self):
        self.phase = PlayPhase.PLAYING
        self.set_state("happy")
