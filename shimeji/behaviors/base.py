"""
Behavior contract

=============================================================================
WHAT A BEHAVIOR IS
=============================================================================

A behavior is a named activity generator ("explore", "rest", ...). The
scheduler only ever calls two methods on it:

    start()  begin producing effects (set states, set targets, arm timers)
    stop()   cancel every timer the behavior armed; safe to call twice

Behaviors are built once when the character is created and then started
and stopped over and over. Nothing carries over from one run to the next.

=============================================================================
TIMER SLOTS
=============================================================================

Instead of hiding timers in nested closures, each behavior arms its timers
through named SLOTS:

    self._arm("wake", 2000, self._fall_asleep)     # one-shot
    self._arm_every("move", 4000, self._move)      # repeating

A slot holds at most one handle. Arming a slot cancels whatever it held
before, and stop() cancels every slot. Looking at the slot table tells you
exactly which callbacks can still fire.

Each behavior also tracks a PHASE (a small Enum) naming where it is in its
own sequence, which makes the state machine visible in logs and tests.

=============================================================================
"""

import abc
from typing import Any, Callable, Dict, TYPE_CHECKING

if TYPE_CHECKING:
    from ..clock import TimerHandle
    from ..entities.character import Shimeji


class Behavior(abc.ABC):
    """
    Base class for all behaviors.

    Subclasses set `name` and implement `start()`. If they keep extra
    per-run state, they reset it in start().
    """

    name: str = ""

    def __init__(self, character: "Shimeji"):
        if not self.name:
            raise ValueError(f"{type(self).__name__} has no name")
        self.character = character
        self.running = False
        self._timers: Dict[str, "TimerHandle"] = {}

    # =========================================================================
    # CONTRACT
    # =========================================================================

    @abc.abstractmethod
    def start(self):
        """Begin producing effects."""

    def stop(self):
        """Cancel every armed timer. Idempotent."""
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()
        self.running = False

    # =========================================================================
    # SHORTCUTS
    # =========================================================================

    @property
    def rng(self):
        return self.character.rng

    @property
    def physics(self):
        return self.character.physics

    @property
    def animation(self):
        return self.character.animation

    def set_state(self, state: str) -> str:
        return self.character.animation.set_state(state)

    def uniform(self, low: float, high: float) -> float:
        """Sample from [low, high)."""
        return low + self.rng.random() * (high - low)

    # =========================================================================
    # TIMER SLOTS
    # =========================================================================

    def _arm(self, slot: str, delay_ms: float,
             callback: Callable[..., Any], *args) -> "TimerHandle":
        self._disarm(slot)
        handle = self.character.clock.call_later(delay_ms, callback, *args)
        self._timers[slot] = handle
        return handle

    def _arm_every(self, slot: str, interval_ms: float,
                   callback: Callable[..., Any], *args) -> "TimerHandle":
        self._disarm(slot)
        handle = self.character.clock.call_every(interval_ms, callback, *args)
        self._timers[slot] = handle
        return handle

    def _disarm(self, slot: str):
        handle = self._timers.pop(slot, None)
        if handle is not None:
            handle.cancel()

    def armed(self, slot: str) -> bool:
        handle = self._timers.get(slot)
        return handle is not None and handle.active

    @property
    def armed_slots(self):
        return sorted(slot for slot, handle in self._timers.items()
                      if handle.active)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r} running={self.running}>"


class Idle(Behavior):
    """Fallback behavior: stand still in the idle state."""

    name = "idle"

    def start(self):
        self.stop()
        self.running = True
        self.set_state("idle")
