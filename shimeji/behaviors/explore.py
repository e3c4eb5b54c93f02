"""
Explore - wander to random spots on the screen.

Every 3-5 s (sampled once per run) the character picks a random point in
the viewport and walks to it. One move in five starts with a jump; the
walk then begins 1 s later, once the character is back on its feet.
"""

import logging
from enum import Enum

from .base import Behavior

log = logging.getLogger(__name__)

MOVE_INTERVAL_MS = (3000.0, 5000.0)
JUMP_CHANCE = 0.2
JUMP_LANDING_MS = 1000.0


class ExplorePhase(Enum):
    STOPPED = "stopped"
    WALKING = "walking"
    JUMPING = "jumping"


class Explore(Behavior):
    name = "explore"

    def __init__(self, character):
        super().__init__(character)
        self.phase = ExplorePhase.STOPPED

    def start(self):
        self.stop()
        self.running = True
        self.set_state("walking")
        self.move_randomly()
        self._arm_every("move", self.uniform(*MOVE_INTERVAL_MS),
                        self.move_randomly)

    def stop(self):
        super().stop()
        self.phase = ExplorePhase.STOPPED

    def move_randomly(self):
        viewport = self.character.viewport
        x = self.rng.random() * viewport.max_x
        y = self.rng.random() * viewport.max_y

        if self.rng.random() < JUMP_CHANCE:
            self.phase = ExplorePhase.JUMPING
            self.character.scheduler.perform_jump()
            self._arm("landing", JUMP_LANDING_MS, self._walk_to, x, y)
        else:
            self._walk_to(x, y)

    def _walk_to(self, x: float, y: float):
        self.phase = ExplorePhase.WALKING
        log.debug("explore -> (%.0f, %.0f)", x, y)
        self.physics.set_target(x, y)
        self.set_state("walking")
