"""
Rest - stand around, then either doze off or think for a while.

    start ──► IDLE ──2 s──► SLEEPING ──5-10 s──► AWAKE   (50 %)
                  └─2 s──► THINKING ──3-5 s───► AWAKE   (50 %)

Only one timer is ever pending ("rest" slot), so stop() always knows what
to cancel. Once AWAKE the behavior just idles until the scheduler moves
on.
"""

import logging
from enum import Enum

from .base import Behavior

log = logging.getLogger(__name__)

SLEEP_CHANCE = 0.5
SETTLE_MS = 2000.0
SLEEP_MS = (5000.0, 10000.0)
THINK_MS = (3000.0, 5000.0)


class RestPhase(Enum):
    STOPPED = "stopped"
    SETTLING = "settling"
    SLEEPING = "sleeping"
    THINKING = "thinking"
    AWAKE = "awake"


class Rest(Behavior):
    name = "rest"

    def __init__(self, character):
        super().__init__(character)
        self.phase = RestPhase.STOPPED

    def start(self):
        self.stop()
        self.running = True
        self.set_state("idle")
        self.phase = RestPhase.SETTLING

        if self.rng.random() < SLEEP_CHANCE:
            self._arm("rest", SETTLE_MS, self._fall_asleep)
        else:
            self._arm("rest", SETTLE_MS, self._start_thinking)

    def stop(self):
        super().stop()
        self.phase = RestPhase.STOPPED

    def _fall_asleep(self):
        self.phase = RestPhase.SLEEPING
        self.set_state("sleeping")
        duration = self.uniform(*SLEEP_MS)
        log.debug("rest: sleeping for %.0f ms", duration)
        self._arm("rest", duration, self._wake_up)

    def _wake_up(self):
        self.phase = RestPhase.AWAKE
        self.set_state("idle")
        self.character.show_dialogue("idle")

    def _start_thinking(self):
        self.phase = RestPhase.THINKING
        self.set_state("thinking")
        duration = self.uniform(*THINK_MS)
        log.debug("rest: thinking for %.0f ms", duration)
        self._arm("rest", duration, self._stop_thinking)

    def _stop_thinking(self):
        self.phase = RestPhase.AWAKE
        self.set_state("idle")
