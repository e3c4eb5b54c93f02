"""
Shimeji - autonomous desktop character

Requisitos:
    pip install glfw pillow numpy pyyaml
"""

from .clock import Clock, GlfwClock, TimerHandle, VirtualClock
from .config import ShimejiConfig, load_config
from .entities import (
    AnimationStateMachine, AssetLoadError, Direction, NullLoader,
    PhysicsBody, PhysicsIntegrator, Shimeji, SpriteLoader
)
from .behaviors import (
    Behavior, BehaviorScheduler, Explore, Observe, PageElement, Play, Rest
)

__version__ = "1.0.0"
__all__ = [
    "Clock",
    "GlfwClock",
    "TimerHandle",
    "VirtualClock",
    "ShimejiConfig",
    "load_config",
    "AnimationStateMachine",
    "AssetLoadError",
    "Direction",
    "NullLoader",
    "PhysicsBody",
    "PhysicsIntegrator",
    "Shimeji",
    "SpriteLoader",
    "Behavior",
    "BehaviorScheduler",
    "Explore",
    "Observe",
    "PageElement",
    "Play",
    "Rest",
]
