"""
Behavior scheduler

=============================================================================
DECISION CYCLE
=============================================================================

    start()
      │
      ▼
    decide_next() ──► stop active behavior
                      pick a name by weight
                      start it
                      arm "decide" again in 5-15 s ───┐
      ▲                                               │
      └───────────────────────────────────────────────┘

At most one behavior is running. Starting any behavior (from the cycle,
from the idle monitor, or from the host) stops the running one FIRST.

=============================================================================
WEIGHTED SELECTION
=============================================================================

Weights {explore: 40, rest: 20, play: 20, observe: 20} are turned into a
running total [40, 60, 80, 100]. A draw r in [0, 100) picks the first
entry whose running total is >= r. Entries with weight <= 0 never win;
an empty or all-zero table always yields "idle", with no draw at all.

=============================================================================
IDLE MONITOR
=============================================================================

Every recorded interaction (click, drag, host move/jump/crawl) stamps the
interaction clock and re-arms a one-shot idle timer. If the timer fires
and nobody interacted for idle_timeout ms, Rest is forced.

The idle timer and the decision cycle are independent: forced Rest does
not reset the cycle, and the next decide_next() may replace Rest right
away. Both orders are valid outcomes.

=============================================================================
"""

import logging
from concurrent.futures import Future
from typing import Dict, Iterable, Mapping, Optional, TYPE_CHECKING

import numpy as np

from .base import Behavior, Idle

if TYPE_CHECKING:
    from ..clock import TimerHandle
    from ..config import BehaviorConfig
    from ..entities.character import Shimeji

log = logging.getLogger(__name__)

IDLE = "idle"


def select_weighted(weights: Mapping[str, float], rng) -> str:
    """
    Pick a name from weights by cumulative-sum sampling.

    Returns "idle" for an empty table or one whose positive weights sum
    to zero. Never divides, never loops.
    """
    names = [name for name, weight in weights.items() if weight > 0]
    if not names:
        return IDLE

    cumulative = np.cumsum([float(weights[name]) for name in names])
    total = cumulative[-1]
    if total <= 0:
        return IDLE

    r = rng.random() * total
    # First index whose cumulative weight is >= r
    index = int(np.searchsorted(cumulative, r, side="left"))
    return names[min(index, len(names) - 1)]


class BehaviorScheduler:
    """
    Selects, starts and stops behaviors.

    Parameters:
    -----------
    character : Shimeji
        Owner context (clock, physics, animation, rng)
    behaviors : iterable of Behavior
        Behaviors to register; "idle" is always added
    config : BehaviorConfig
        Weights, idle timeout and decision timing
    """

    def __init__(self, character: "Shimeji", behaviors: Iterable[Behavior],
                 config: "BehaviorConfig"):
        self.character = character
        self.config = config
        self.weights: Dict[str, float] = dict(config.weights)

        self.behaviors: Dict[str, Behavior] = {}
        self.register(Idle(character))
        for behavior in behaviors:
            self.register(behavior)

        self.active: Optional[str] = None
        self.last_interaction = character.clock.now()

        self._decision_timer: Optional["TimerHandle"] = None
        self._idle_timer: Optional["TimerHandle"] = None
        self._jump_timer: Optional["TimerHandle"] = None

    def register(self, behavior: Behavior):
        if behavior.name in self.behaviors:
            raise ValueError(f"behavior {behavior.name!r} already registered")
        self.behaviors[behavior.name] = behavior

    @property
    def clock(self):
        return self.character.clock

    @property
    def active_behavior(self) -> Optional[Behavior]:
        if self.active is None:
            return None
        return self.behaviors[self.active]

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self):
        self._cancel_timers()
        self.decide_next()
        if self.config.enable_idle:
            self._reset_idle_timer()

    def stop(self):
        self._cancel_timers()
        self.stop_current_behavior()

    def _cancel_timers(self):
        for handle in (self._decision_timer, self._idle_timer, self._jump_timer):
            if handle is not None:
                handle.cancel()
        self._decision_timer = None
        self._idle_timer = None
        self._jump_timer = None

    def stop_current_behavior(self):
        behavior = self.active_behavior
        if behavior is not None:
            behavior.stop()
        self.active = None

    # =========================================================================
    # DECISIONS
    # =========================================================================

    def select_behavior(self) -> str:
        return select_weighted(self.weights, self.character.rng)

    def next_decision_delay(self) -> float:
        low = self.config.decision_min_ms
        high = self.config.decision_max_ms
        return low + self.character.rng.random() * (high - low)

    def decide_next(self):
        self.stop_current_behavior()
        self.execute_behavior(self.select_behavior())

        if self._decision_timer is not None:
            self._decision_timer.cancel()
        self._decision_timer = self.clock.call_later(
            self.next_decision_delay(), self.decide_next)

    def execute_behavior(self, name: str) -> str:
        if name not in self.behaviors:
            log.warning("Behavior %s not found", name)
            name = IDLE

        self.stop_current_behavior()
        log.info("Executing behavior: %s", name)
        self.active = name
        self.behaviors[name].start()
        return name

    # =========================================================================
    # IDLE MONITOR
    # =========================================================================

    def record_interaction(self):
        self.last_interaction = max(self.last_interaction, self.clock.now())
        self._reset_idle_timer()

    def _reset_idle_timer(self):
        if not self.config.enable_idle:
            return
        if self._idle_timer is not None:
            self._idle_timer.cancel()
        self._idle_timer = self.clock.call_later(self.config.idle_timeout,
                                                 self._on_idle_timeout)

    def _on_idle_timeout(self):
        self._idle_timer = None
        elapsed = self.clock.now() - self.last_interaction
        if elapsed >= self.config.idle_timeout:
            log.info("No interaction for %.0f ms, resting", elapsed)
            self.execute_behavior("rest")

    # =========================================================================
    # HOST CONTROL
    # =========================================================================

    def move_to(self, x: float, y: float, state: str = "walking") -> "Future":
        """
        Walk to (x, y) outside of the decision cycle.

        Returns a Future resolved with the final (x, y) on the physics
        tick that clears is_moving. While the character is being dragged
        the target is ignored and the Future resolves at once; stopping
        the character resolves it where the body stands.
        """
        self.stop_current_behavior()
        physics = self.character.physics
        physics.set_target(x, y)
        self.character.animation.set_state(state)
        self.record_interaction()
        return physics.move_future()

    def perform_jump(self):
        """Jump and show "jumping", returning to "idle" after a moment."""
        self.character.physics.jump()
        jumping = self.character.animation.set_state("jumping")

        if self._jump_timer is not None:
            self._jump_timer.cancel()
        self._jump_timer = self.clock.call_later(
            self.config.jump_revert_ms, self._end_jump, jumping)

    def _end_jump(self, jumping: str):
        self._jump_timer = None
        # Someone else changed the state meanwhile: leave it alone
        if self.character.animation.current_state == jumping:
            self.character.animation.set_state("idle")

    def jump(self):
        self.perform_jump()
        self.record_interaction()

    def crawl(self):
        # Cosmetic only, no physics
        self.character.animation.set_state("crawling")
        self.record_interaction()
