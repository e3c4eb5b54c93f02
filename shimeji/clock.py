"""
Tick source and timers

=============================================================================
ONE LOOP, MANY TIMERS
=============================================================================

Everything a character does is driven from a single thread:

    - the physics tick         (every ~16 ms, one integration step)
    - the animation tick       (every 100 ms, one frame advance)
    - the decision cycle       (every 5-15 s, pick the next behavior)
    - the idle monitor         (fires once after N ms without interaction)
    - behavior-internal timers (Rest waking up, Play spinning, ...)

There is no parallel execution, so shared state needs no locks. What DOES
need care is ownership: whoever arms a timer keeps its TimerHandle and
cancels it when it stops. A cancelled handle never runs.

=============================================================================
TWO CLOCKS
=============================================================================

    VirtualClock  - time only moves when advance() is called.
                    Used by tests and by the headless simulator.

    GlfwClock     - time comes from glfw.get_time(), the same clock the
                    window host uses for its frames. The host calls
                    run_due() once per frame.

Both share the same queue implementation; they only differ in now().

All times are MILLISECONDS.

=============================================================================
"""

import abc
import heapq
import itertools
import logging
from typing import Any, Callable, List, Optional, Tuple

log = logging.getLogger(__name__)


class TimerHandle:
    """
    A scheduled callback.

    Returned by Clock.call_later() / Clock.call_every(). Keep it if you
    may need to cancel the timer; cancel() is safe to call any number
    of times.
    """

    __slots__ = ("deadline", "interval", "_callback", "_args", "_cancelled")

    def __init__(self, deadline: float, callback: Callable[..., Any],
                 args: Tuple = (), interval: Optional[float] = None):
        self.deadline = deadline
        self.interval = interval
        self._callback = callback
        self._args = args
        self._cancelled = False

    def cancel(self):
        self._cancelled = True
        # Drop references so a cancelled handle can't keep objects alive
        self._callback = None
        self._args = ()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def active(self) -> bool:
        """True while the timer can still fire."""
        return not self._cancelled

    @property
    def repeating(self) -> bool:
        return self.interval is not None

    def _run(self):
        self._callback(*self._args)

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "active"
        return f"<TimerHandle deadline={self.deadline:.1f} {state}>"


class Clock(abc.ABC):
    """
    Single-threaded timer queue.

    Subclasses provide now(). Timers are kept in a heap ordered by
    (deadline, sequence number) so that two timers due at the same
    instant fire in the order they were scheduled.
    """

    def __init__(self):
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()

    # =========================================================================
    # TIME
    # =========================================================================

    @abc.abstractmethod
    def now(self) -> float:
        """Current time in milliseconds."""

    # =========================================================================
    # SCHEDULING
    # =========================================================================

    def call_later(self, delay_ms: float, callback: Callable[..., Any],
                   *args) -> TimerHandle:
        """
        Run callback(*args) once, delay_ms from now.

        Negative delays are treated as zero (run on the next drain).
        """
        handle = TimerHandle(self.now() + max(0.0, delay_ms), callback, args)
        self._push(handle)
        return handle

    def call_every(self, interval_ms: float, callback: Callable[..., Any],
                   *args) -> TimerHandle:
        """
        Run callback(*args) every interval_ms until the handle is cancelled.

        The first call happens one interval from now. Repeats are
        fixed-rate: the next deadline is the previous deadline plus the
        interval, not "now" plus the interval.
        """
        if interval_ms <= 0:
            raise ValueError(f"interval must be positive, got {interval_ms}")
        handle = TimerHandle(self.now() + interval_ms, callback, args,
                             interval=float(interval_ms))
        self._push(handle)
        return handle

    def _push(self, handle: TimerHandle):
        heapq.heappush(self._queue, (handle.deadline, next(self._seq), handle))

    # =========================================================================
    # EXECUTION
    # =========================================================================

    def _pop_due(self, until: float) -> Optional[TimerHandle]:
        """Pop the earliest live timer with deadline <= until."""
        while self._queue:
            deadline, _, handle = self._queue[0]
            if handle.cancelled:
                heapq.heappop(self._queue)
                continue
            if deadline > until:
                return None
            heapq.heappop(self._queue)
            return handle
        return None

    def _fire(self, handle: TimerHandle):
        try:
            handle._run()
        except Exception:
            log.exception("Timer callback failed: %r", handle)

        # The callback may have cancelled its own handle
        if handle.repeating and not handle.cancelled:
            handle.deadline += handle.interval
            self._push(handle)
        elif not handle.repeating:
            handle.cancel()

    def run_due(self) -> int:
        """
        Run every timer that is due at now().

        Timers armed by a callback that are already due run in the same
        drain. Returns the number of callbacks run.
        """
        count = 0
        current = self.now()
        while True:
            handle = self._pop_due(current)
            if handle is None:
                return count
            self._fire(handle)
            count += 1

    @property
    def pending(self) -> int:
        """Number of live timers in the queue."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def next_deadline(self) -> Optional[float]:
        live = [deadline for deadline, _, handle in self._queue
                if not handle.cancelled]
        return min(live) if live else None


class VirtualClock(Clock):
    """
    Manually advanced clock.

    ```python
    clock = VirtualClock()
    clock.call_later(1000, print, "one second")
    clock.advance(999)   # nothing
    clock.advance(1)     # prints
    ```

    While a timer runs, now() reports that timer's deadline, so code
    that reads the clock inside a callback sees the same time it would
    have seen in a real event loop that fired exactly on schedule.
    """

    def __init__(self, start: float = 0.0):
        super().__init__()
        self._now = float(start)

    def now(self) -> float:
        return self._now

    def advance(self, ms: float) -> int:
        """Move time forward by ms, firing timers in deadline order."""
        if ms < 0:
            raise ValueError(f"cannot advance a clock backwards ({ms} ms)")
        target = self._now + ms
        count = 0
        while True:
            handle = self._pop_due(target)
            if handle is None:
                break
            self._now = max(self._now, handle.deadline)
            self._fire(handle)
            count += 1
        self._now = target
        return count

    def advance_in_steps(self, ms: float, step: float) -> int:
        """Advance in step-sized increments (handy for frame-like loops)."""
        count = 0
        elapsed = 0.0
        while elapsed < ms - 1e-9:
            delta = min(step, ms - elapsed)
            count += self.advance(delta)
            elapsed += delta
        return count


class GlfwClock(Clock):
    """
    Clock bound to the GLFW timer.

    glfw.get_time() returns seconds since glfw.init(); the host must
    have initialised GLFW before this clock is read.
    """

    def __init__(self):
        super().__init__()
        import glfw
        self._glfw = glfw

    def now(self) -> float:
        return self._glfw.get_time() * 1000.0
