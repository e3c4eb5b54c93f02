"""
Character configuration with defaults, loadable from YAML.

Every tunable number lives here. A YAML file only needs the keys it wants
to change:

```yaml
character_name: hutao
behavior:
  idle_timeout: 15000
  weights: {explore: 10, rest: 50, play: 20, observe: 20}
physics:
  walk_speed: 2.0
animation:
  states:
    jumping2: {frame_count: 6, loops: false}
```

Problems with the file never stop the character from running: they are
logged and the defaults are used instead.
"""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Optional, Union

import yaml

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateDescriptor:
    """Frame metadata for one animation state."""
    frame_count: int
    loops: bool = True


DEFAULT_STATES: Dict[str, StateDescriptor] = {
    "idle": StateDescriptor(4, True),
    "walking": StateDescriptor(8, True),
    "running": StateDescriptor(8, True),
    "jumping": StateDescriptor(6, False),
    "falling": StateDescriptor(4, True),
    "sitting": StateDescriptor(4, True),
    "sleeping": StateDescriptor(4, True),
    "happy": StateDescriptor(4, True),
    "surprised": StateDescriptor(4, True),
    "thinking": StateDescriptor(4, True),
    "waving": StateDescriptor(4, True),
    "crawling": StateDescriptor(8, True),
}

DEFAULT_WEIGHTS: Dict[str, float] = {
    "explore": 40,
    "rest": 20,
    "play": 20,
    "observe": 20,
}


@dataclass
class PhysicsConfig:
    gravity: float = 0.8
    friction: float = 0.8
    walk_speed: float = 1.5
    jump_height: float = -12
    arrival_radius: float = 5.0
    bounce_damping: float = 0.5
    direction_deadband: float = 0.1
    tick_ms: float = 16.0


@dataclass
class AnimationConfig:
    frame_ms: float = 100.0
    emotion_ms: float = 2000.0
    states: Dict[str, StateDescriptor] = field(
        default_factory=lambda: dict(DEFAULT_STATES))


@dataclass
class BehaviorConfig:
    idle_timeout: float = 10000.0
    enable_idle: bool = True
    weights: Dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_WEIGHTS))
    decision_min_ms: float = 5000.0
    decision_max_ms: float = 15000.0
    jump_revert_ms: float = 1000.0


@dataclass
class ViewportConfig:
    width: float = 1280.0
    height: float = 720.0
    character_width: float = 100.0
    character_height: float = 100.0

    @property
    def max_x(self) -> float:
        return self.width - self.character_width

    @property
    def max_y(self) -> float:
        return self.height - self.character_height


@dataclass
class ShimejiConfig:
    character_name: str = "hutao"
    asset_dir: str = "assets/img"
    seed: Optional[int] = None
    physics: PhysicsConfig = field(default_factory=PhysicsConfig)
    animation: AnimationConfig = field(default_factory=AnimationConfig)
    behavior: BehaviorConfig = field(default_factory=BehaviorConfig)
    viewport: ViewportConfig = field(default_factory=ViewportConfig)


_SECTIONS = ("physics", "animation", "behavior", "viewport")
_TOP_LEVEL = ("character_name", "asset_dir", "seed")


def _parse_states(raw: dict) -> Dict[str, StateDescriptor]:
    states = dict(DEFAULT_STATES)
    for name, entry in raw.items():
        if not isinstance(entry, dict) or "frame_count" not in entry:
            log.warning("state %r needs a frame_count, ignoring it", name)
            continue
        frame_count = int(entry["frame_count"])
        if frame_count < 1:
            log.warning("state %r has frame_count %d, ignoring it",
                        name, frame_count)
            continue
        states[str(name)] = StateDescriptor(frame_count,
                                            bool(entry.get("loops", True)))
    return states


def _apply_section(section, raw: dict, section_name: str):
    known = {f.name for f in fields(section)}
    for key, value in raw.items():
        if key not in known:
            log.warning("unknown config key %s.%s, ignoring it",
                        section_name, key)
            continue
        if key == "states":
            value = _parse_states(value or {})
        elif key == "weights":
            value = {str(k): float(v) for k, v in (value or {}).items()}
        setattr(section, key, value)


def config_from_dict(raw: dict) -> ShimejiConfig:
    """Build a ShimejiConfig from a plain mapping (as parsed from YAML)."""
    cfg = ShimejiConfig()
    for key, value in raw.items():
        if key in _TOP_LEVEL:
            setattr(cfg, key, value)
        elif key in _SECTIONS:
            if not isinstance(value, dict):
                log.warning("config section %r must be a mapping, ignoring it",
                            key)
                continue
            _apply_section(getattr(cfg, key), value, key)
        else:
            log.warning("unknown config key %r, ignoring it", key)
    return cfg


def load_config(path: Union[str, Path, None] = None) -> ShimejiConfig:
    """Load config from a YAML file, falling back to defaults."""
    if path is None:
        return ShimejiConfig()

    path = Path(path)
    if not path.exists():
        log.warning("config file not found: %s, using defaults", path)
        return ShimejiConfig()

    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        log.warning("config parse error in %s: %s, using defaults", path, e)
        return ShimejiConfig()

    if not isinstance(raw, dict):
        log.warning("config root in %s must be a mapping, using defaults", path)
        return ShimejiConfig()

    try:
        cfg = config_from_dict(raw)
    except (TypeError, ValueError) as e:
        log.warning("config load error: %s, using defaults", e)
        return ShimejiConfig()

    log.info("config loaded from %s", path)
    return cfg
