"""
Character entity: physics, sprites and animation
"""

from .sprite import AssetLoadError, Direction, NullLoader, SpriteLoader, SpriteStrip
from .physics import PhysicsBody, PhysicsIntegrator
from .animation import AnimationStateMachine
from .character import Shimeji

__all__ = [
    "AssetLoadError",
    "Direction",
    "NullLoader",
    "SpriteLoader",
    "SpriteStrip",
    "PhysicsBody",
    "PhysicsIntegrator",
    "AnimationStateMachine",
    "Shimeji",
]
