"""
Observe - walk up to interesting things on screen and look at them.

=============================================================================
OBSERVATION POINTS
=============================================================================

The host tells us what's on screen through the character's element source:
a callable returning PageElement boxes (links, buttons, inputs, ...). Only
visible boxes count: positive size and a non-negative origin.

If fewer than 3 elements qualify, 5 random viewport points are added so
there's always somewhere to go.

=============================================================================
CYCLE
=============================================================================

    pick a random point ──► WALKING  (target it, state "walking")
                               │ 1 s
                               ▼
                            LOOKING  ("thinking" 70 % / "surprised" 30 %,
                               │      maybe comment on the element)
                               │ 2-5 s
                               ▼
                   drop the point, pick the next one

An empty list is rebuilt. If rebuilding finds nothing (no elements AND no
room in the viewport for random points) the character goes idle and the
cycle ends.

=============================================================================
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .base import Behavior

log = logging.getLogger(__name__)

MIN_ELEMENTS = 3
RANDOM_POINTS = 5
ARRIVAL_MS = 1000.0
LOOK_MS = (2000.0, 5000.0)
THINK_CHANCE = 0.7
COMMENT_CHANCE = 0.3

# Element kind -> dialogue context
COMMENT_CONTEXTS = {
    "a": "link",
    "link": "link",
    "button": "button",
    "input": "input",
    "textarea": "input",
}


@dataclass(frozen=True)
class PageElement:
    """A box on screen the character may look at."""
    x: float
    y: float
    width: float
    height: float
    kind: str = "element"

    @property
    def visible(self) -> bool:
        return (self.width > 0 and self.height > 0
                and self.x >= 0 and self.y >= 0)


@dataclass(frozen=True)
class ObservationPoint:
    x: float
    y: float
    element: Optional[PageElement] = None


class ObservePhase(Enum):
    STOPPED = "stopped"
    WALKING = "walking"
    LOOKING = "looking"
    IDLE = "idle"


class Observe(Behavior):
    name = "observe"

    def __init__(self, character):
        super().__init__(character)
        self.phase = ObservePhase.STOPPED
        self.points: List[ObservationPoint] = []
        self.current: Optional[ObservationPoint] = None

    def start(self):
        self.stop()
        self.running = True
        self.set_state("thinking")
        self.find_observation_points()
        self.observe_random_point()

    def stop(self):
        super().stop()
        self.phase = ObservePhase.STOPPED
        self.current = None

    # =========================================================================
    # POINTS
    # =========================================================================

    def find_observation_points(self) -> List[ObservationPoint]:
        points = [ObservationPoint(e.x, e.y, e)
                  for e in self.character.find_elements() if e.visible]

        viewport = self.character.viewport
        if len(points) < MIN_ELEMENTS and viewport.max_x > 0 and viewport.max_y > 0:
            for _ in range(RANDOM_POINTS):
                points.append(ObservationPoint(
                    self.rng.random() * viewport.max_x,
                    self.rng.random() * viewport.max_y))

        self.points = points
        return points

    # =========================================================================
    # CYCLE
    # =========================================================================

    def observe_random_point(self):
        if not self.points:
            self.find_observation_points()
            if not self.points:
                log.info("nothing to observe, going idle")
                self.phase = ObservePhase.IDLE
                self.current = None
                self.set_state("idle")
                return

        point = self.points[int(self.rng.random() * len(self.points))]
        self.current = point
        self.phase = ObservePhase.WALKING
        self.physics.set_target(point.x, point.y)
        self.set_state("walking")
        self._arm("observe", ARRIVAL_MS, self._look, point)

    def _look(self, point: ObservationPoint):
        self.phase = ObservePhase.LOOKING
        if self.rng.random() < THINK_CHANCE:
            self.set_state("thinking")
        else:
            self.set_state("surprised")

        if point.element is not None and self.rng.random() < COMMENT_CHANCE:
            self.comment_on(point.element)

        self._arm("observe", self.uniform(*LOOK_MS), self._next_point, point)

    def _next_point(self, point: ObservationPoint):
        # Don't look at the same thing again right away
        if point in self.points:
            self.points.remove(point)
        self.observe_random_point()

    def comment_on(self, element: PageElement):
        context = COMMENT_CONTEXTS.get(element.kind.lower(), "observe")
        self.character.show_dialogue(context, element)
