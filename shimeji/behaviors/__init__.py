"""
Behaviors and the scheduler that picks between them
"""

from .base import Behavior, Idle
from .explore import Explore
from .rest import Rest
from .play import Play
from .observe import Observe, PageElement
from .scheduler import BehaviorScheduler, select_weighted

__all__ = [
    "Behavior",
    "Idle",
    "Explore",
    "Rest",
    "Play",
    "Observe",
    "PageElement",
    "BehaviorScheduler",
    "select_weighted",
]
