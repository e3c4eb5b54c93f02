"""
Physics integrator - position, velocity and screen bounds

=============================================================================
COORDINATE SYSTEM
=============================================================================

The character lives in screen space:
- X: Horizontal position (pixels), increases to the right
- Y: Vertical position (pixels), increases DOWNWARD
- (x, y) is the top-left corner of the character box

The floor is the bottom of the viewport: y = height - character_height.

=============================================================================
PER-TICK UPDATE
=============================================================================

update() runs once per render tick and does NOT scale by delta time: all
constants are "per tick" (gravity 0.8 px/tick², walk speed 1.5 px/tick).

    1. STEER      target set? velocity := walk_speed * unit(target - pos)
                  within arrival_radius? clear target, stop moving
                                                    (skipped while dragging)
    2. GRAVITY    vy += gravity                     (skipped while dragging)
    3. FRICTION   vx *= friction                    (skipped while dragging)
    4. INTEGRATE  pos += velocity                   (skipped while dragging)
    5. CLAMP      keep inside the viewport          (skipped while dragging)
    6. FACING     direction from sign of vx, with a small deadband

Steering sets velocity directly - there is no acceleration curve.

=============================================================================
DRAGGING
=============================================================================

While the user drags the character, the host moves it with set_position()
and the integrator keeps its hands off: no gravity, no friction, no
bounce, no target. set_target() is ignored until the drag ends. When the
drag stops, gravity takes over again and the character falls to the
floor.

=============================================================================
"""

import logging
import math
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, TYPE_CHECKING

from ..config import PhysicsConfig, ViewportConfig
from .sprite import Direction

if TYPE_CHECKING:
    from ..clock import Clock, TimerHandle

log = logging.getLogger(__name__)


@dataclass
class PhysicsBody:
    """
    Physical state of the character.

    Read by the renderer; written only by PhysicsIntegrator (and, through
    it, by drag input and behaviors).
    """
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    target_x: Optional[float] = None
    target_y: Optional[float] = None
    is_moving: bool = False
    is_dragging: bool = False
    is_jumping: bool = False
    direction: Direction = Direction.RIGHT

    @property
    def has_target(self) -> bool:
        return self.target_x is not None and self.target_y is not None

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)


class PhysicsIntegrator:
    """
    Owns the PhysicsBody and advances it one tick at a time.

    Parameters:
    -----------
    config : PhysicsConfig
        Gravity, friction, walk speed, jump impulse, ...
    viewport : ViewportConfig
        Screen size and character box size, used for clamping
    """

    def __init__(self, config: Optional[PhysicsConfig] = None,
                 viewport: Optional[ViewportConfig] = None):
        self.config = config or PhysicsConfig()
        self.viewport = viewport or ViewportConfig()
        self.body = PhysicsBody()

        # Callbacks waiting for is_moving to clear (see when_stopped)
        self._stop_waiters: List[Callable[[Tuple[float, float]], None]] = []

        # Called with the body after every update()
        self._update_listeners: List[Callable[[PhysicsBody], None]] = []

        self._tick: Optional["TimerHandle"] = None

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def x(self) -> float:
        return self.body.x

    @property
    def y(self) -> float:
        return self.body.y

    @property
    def direction(self) -> Direction:
        return self.body.direction

    @direction.setter
    def direction(self, value: Direction):
        self.body.direction = value

    @property
    def is_moving(self) -> bool:
        return self.body.is_moving

    @property
    def is_dragging(self) -> bool:
        return self.body.is_dragging

    @property
    def is_jumping(self) -> bool:
        return self.body.is_jumping

    # =========================================================================
    # TICK SOURCE
    # =========================================================================

    def start(self, clock: "Clock"):
        """Run update() every tick_ms on the given clock."""
        self._cancel_tick()
        self._tick = clock.call_every(self.config.tick_ms, self.update)

    def stop(self):
        """
        Stop the tick and drop any target.

        Pending when_stopped() callbacks fire with the position the body
        stopped at, so a move_to Future never outlives the integrator.
        """
        self._cancel_tick()
        self.clear_target()

    def _cancel_tick(self):
        if self._tick is not None:
            self._tick.cancel()
            self._tick = None

    def add_update_listener(self, listener: Callable[[PhysicsBody], None]):
        self._update_listeners.append(listener)

    # =========================================================================
    # CONTROL
    # =========================================================================

    def set_position(self, x: float, y: float):
        self.body.x = x
        self.body.y = y

    def set_target(self, x: float, y: float):
        """
        Steer toward (x, y) from the next tick on.

        Ignored while dragging: the user holds the character, so there is
        nowhere to walk to.
        """
        if self.body.is_dragging:
            log.debug("target (%.0f, %.0f) ignored while dragging", x, y)
            return
        self.body.target_x = x
        self.body.target_y = y
        self.body.is_moving = True

    def clear_target(self):
        self.body.target_x = None
        self.body.target_y = None
        was_moving = self.body.is_moving
        self.body.is_moving = False
        if was_moving:
            self._notify_stopped()

    def when_stopped(self, callback: Callable[[Tuple[float, float]], None]):
        """
        Call callback((x, y)) the moment is_moving clears.

        Fires on arrival, on drag start and on an explicit clear_target().
        If the body isn't moving, fires immediately.
        """
        if not self.body.is_moving:
            callback(self.body.position)
            return
        self._stop_waiters.append(callback)

    def move_future(self) -> "Future":
        """A Future resolved with the final (x, y) once is_moving clears."""
        future: Future = Future()
        self.when_stopped(future.set_result)
        return future

    def _notify_stopped(self):
        waiters, self._stop_waiters = self._stop_waiters, []
        position = self.body.position
        for callback in waiters:
            try:
                callback(position)
            except Exception:
                log.exception("stop callback failed")

    def start_drag(self):
        self.body.is_dragging = True
        self.clear_target()

    def stop_drag(self):
        self.body.is_dragging = False

    def jump(self) -> bool:
        """
        Apply the jump impulse.

        No double-jump: returns False (and does nothing) while a jump is
        still in the air.
        """
        if self.body.is_jumping:
            return False
        self.body.is_jumping = True
        self.body.vy = self.config.jump_height
        return True

    # =========================================================================
    # MAIN UPDATE
    # =========================================================================

    def update(self) -> PhysicsBody:
        """Advance the body by one tick. Returns the body."""
        body = self.body

        # -----------------------------------------------------------------
        # STEP 1: STEER TOWARD TARGET
        # -----------------------------------------------------------------
        if body.is_moving and body.has_target and not body.is_dragging:
            self._steer()

        if not body.is_dragging:
            # -------------------------------------------------------------
            # STEP 2-4: GRAVITY, FRICTION, INTEGRATION
            # -------------------------------------------------------------
            body.vy += self.config.gravity
            body.vx *= self.config.friction
            body.x += body.vx
            body.y += body.vy

            # -------------------------------------------------------------
            # STEP 5: VIEWPORT BOUNDS
            # -------------------------------------------------------------
            self._clamp_to_viewport()

        # -----------------------------------------------------------------
        # STEP 6: FACING
        # -----------------------------------------------------------------
        # The deadband keeps the character from flickering left/right
        # while friction bleeds off the last bit of velocity.
        deadband = self.config.direction_deadband
        if body.vx > deadband:
            body.direction = Direction.RIGHT
        elif body.vx < -deadband:
            body.direction = Direction.LEFT

        for listener in self._update_listeners:
            listener(body)

        return body

    def _steer(self):
        body = self.body
        dx = body.target_x - body.x
        dy = body.target_y - body.y
        distance = math.sqrt(dx * dx + dy * dy)

        if distance < self.config.arrival_radius:
            self.clear_target()
            return

        speed = self.config.walk_speed
        body.vx = (dx / distance) * speed
        body.vy = (dy / distance) * speed

    def _clamp_to_viewport(self):
        """
        Keep the character box on screen.

        Horizontal walls bounce (velocity reflected, damped); the ceiling
        and the floor just stop vertical motion. Touching the floor ends
        a jump.
        """
        body = self.body
        max_x = self.viewport.max_x
        max_y = self.viewport.max_y
        damping = self.config.bounce_damping

        if body.x < 0:
            body.x = 0.0
            body.vx = abs(body.vx) * damping
        elif body.x > max_x:
            body.x = max_x
            body.vx = -abs(body.vx) * damping

        if body.y < 0:
            body.y = 0.0
            body.vy = 0.0
        elif body.y >= max_y:
            body.y = max_y
            body.vy = 0.0
            body.is_jumping = False
