"""
Shimeji character - one autonomous on-screen character

=============================================================================
CHARACTER OVERVIEW
=============================================================================

A Shimeji object is the context that owns everything ONE character needs:

    Shimeji
    ├── clock        : Clock                  <- timers + tick source
    ├── physics      : PhysicsIntegrator      <- position, velocity, bounds
    ├── animation    : AnimationStateMachine  <- state, frame, fallbacks
    ├── scheduler    : BehaviorScheduler      <- what to do next
    │     ├── idle / explore / rest / play / observe
    ├── rng          : random.Random          <- every random draw
    ├── dialogue     : hook(context, element) <- speech bubbles (external)
    └── element_source: hook() -> elements    <- what's on screen (external)

Nothing is global. Two characters on the same screen are two Shimeji
objects, each with its own timers and body; they may share a clock
(the host's frame clock) but never a timer.

=============================================================================
THREE CADENCES
=============================================================================

    physics tick     every ~16 ms   physics.update() + orient the sprite
    animation tick   every 100 ms   animation.advance_frame()
    behavior timers  seconds        decision cycle, idle monitor, ...

They run on the same clock but know nothing about each other's timing.

=============================================================================
HOST INPUT
=============================================================================

The host translates pointer input into the on_* hooks below. Dragging
goes straight to the physics integrator; clicks, drags and host commands
count as user interaction for the idle monitor.

=============================================================================
"""

import logging
import random
from typing import Any, Callable, Dict, Iterable, Optional, TYPE_CHECKING

from ..clock import Clock, VirtualClock
from ..config import ShimejiConfig, ViewportConfig
from ..behaviors import BehaviorScheduler, Explore, Observe, Play, Rest
from ..behaviors.observe import PageElement
from .animation import AnimationStateMachine
from .physics import PhysicsIntegrator

if TYPE_CHECKING:
    from concurrent.futures import Future

log = logging.getLogger(__name__)

DialogueHook = Callable[[str, Optional[PageElement]], None]
ElementSource = Callable[[], Iterable[PageElement]]


def _log_dialogue(context: str, element: Optional[PageElement] = None):
    log.info("dialogue requested: %s%s", context,
             f" ({element.kind})" if element is not None else "")


def _no_elements() -> Iterable[PageElement]:
    return ()


class Shimeji:
    """
    One character: physics, animation and behaviors wired together.

    Parameters:
    -----------
    config : ShimejiConfig, optional
        All tunables (defaults if None)
    clock : Clock, optional
        Timer source; a fresh VirtualClock if None
    loader : sprite loader, optional
        load(state, frame_count) -> SpriteStrip; NullLoader if None
    dialogue : callable(context, element), optional
        Called when the character wants to say something
    element_source : callable() -> iterable of PageElement, optional
        What's on screen, for the Observe behavior
    rng : random.Random, optional
        Source of every random draw; seeded from config.seed if None
    """

    def __init__(self, config: Optional[ShimejiConfig] = None,
                 clock: Optional[Clock] = None,
                 loader=None,
                 dialogue: Optional[DialogueHook] = None,
                 element_source: Optional[ElementSource] = None,
                 rng: Optional[random.Random] = None):
        self.config = config or ShimejiConfig()
        self.clock = clock or VirtualClock()
        self.rng = rng or random.Random(self.config.seed)

        self.dialogue = dialogue or _log_dialogue
        self.element_source = element_source or _no_elements

        # -----------------------------------------------------------------
        # COMPONENTS
        # -----------------------------------------------------------------
        self.physics = PhysicsIntegrator(self.config.physics,
                                         self.config.viewport)
        self.animation = AnimationStateMachine(self.clock,
                                               self.config.animation,
                                               loader)
        self.physics.add_update_listener(
            lambda body: self.animation.orient(body.direction))

        self.scheduler = BehaviorScheduler(
            self,
            [Explore(self), Rest(self), Play(self), Observe(self)],
            self.config.behavior,
        )

        # Start on the floor, a bit in from the left edge
        viewport = self.config.viewport
        self.physics.set_position(min(100.0, max(0.0, viewport.max_x)),
                                  max(0.0, viewport.max_y))

        self.running = False

    @property
    def viewport(self) -> ViewportConfig:
        return self.physics.viewport

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self):
        """Start the physics tick, the animation tick and the scheduler."""
        if self.running:
            return
        self.running = True
        self.physics.start(self.clock)
        self.animation.start()
        self.scheduler.start()
        self.show_dialogue("welcome")

    def stop(self):
        """Cancel every timer this character owns. Safe to call twice."""
        self.scheduler.stop()
        self.animation.stop()
        self.physics.stop()
        self.running = False

    def tick(self):
        """One physics step (also run by the physics tick)."""
        return self.physics.update()

    # =========================================================================
    # EXTERNAL HOOKS
    # =========================================================================

    def show_dialogue(self, context: str, element: Optional[PageElement] = None):
        """
        Ask the dialogue layer for a reaction.

        The core never looks at the answer, and a broken dialogue layer
        must not take the character down with it.
        """
        try:
            self.dialogue(context, element)
        except Exception:
            log.exception("dialogue hook failed for context %r", context)

    def find_elements(self) -> Iterable[PageElement]:
        try:
            return list(self.element_source())
        except Exception:
            log.exception("element source failed")
            return []

    # =========================================================================
    # HOST CONTROL
    # =========================================================================

    def move_to(self, x: float, y: float, state: str = "walking") -> "Future":
        return self.scheduler.move_to(x, y, state)

    def jump(self):
        self.scheduler.jump()

    def crawl(self):
        self.scheduler.crawl()

    def show_emotion(self, emotion: str) -> str:
        return self.animation.show_emotion(emotion)

    def record_interaction(self):
        self.scheduler.record_interaction()

    # =========================================================================
    # POINTER INPUT
    # =========================================================================

    def on_click(self):
        self.record_interaction()
        self.show_dialogue("click")

    def on_double_click(self):
        self.jump()

    def on_drag_start(self):
        self.physics.start_drag()
        self.animation.set_state("surprised")
        self.record_interaction()

    def on_drag_move(self, x: float, y: float):
        self.physics.set_position(x, y)

    def on_drag_end(self):
        if not self.physics.is_dragging:
            return
        self.physics.stop_drag()
        self.animation.set_state("idle")
        self.record_interaction()

    def resize(self, width: float, height: float):
        self.viewport.width = width
        self.viewport.height = height

    def contains(self, x: float, y: float) -> bool:
        """True if screen point (x, y) is on the character box."""
        body = self.physics.body
        viewport = self.viewport
        return (body.x <= x <= body.x + viewport.character_width
                and body.y <= y <= body.y + viewport.character_height)

    # =========================================================================
    # RENDER VIEW
    # =========================================================================

    def snapshot(self) -> Dict[str, Any]:
        body = self.physics.body
        return {
            "x": body.x,
            "y": body.y,
            "direction": body.direction.value,
            "is_moving": body.is_moving,
            "is_dragging": body.is_dragging,
            "is_jumping": body.is_jumping,
            "state": self.animation.current_state,
            "frame_index": self.animation.frame_index,
            "behavior": self.scheduler.active,
        }
