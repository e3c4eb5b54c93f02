"""Tests for config defaults and YAML loading."""

import logging

from shimeji.config import (
    DEFAULT_STATES, DEFAULT_WEIGHTS, ShimejiConfig, StateDescriptor,
    config_from_dict, load_config,
)


def write(tmp_path, text):
    path = tmp_path / "shimeji.yaml"
    path.write_text(text)
    return path


class TestDefaults:
    def test_defaults(self):
        cfg = ShimejiConfig()
        assert cfg.character_name == "hutao"
        assert cfg.behavior.idle_timeout == 10000
        assert cfg.behavior.weights == DEFAULT_WEIGHTS
        assert cfg.physics.gravity == 0.8
        assert cfg.physics.jump_height == -12
        assert cfg.animation.frame_ms == 100
        assert cfg.animation.states["jumping"] == StateDescriptor(6, False)
        assert cfg.viewport.max_x == 1180
        assert cfg.viewport.max_y == 620

    def test_instances_do_not_share_tables(self):
        a, b = ShimejiConfig(), ShimejiConfig()
        a.behavior.weights["explore"] = 0
        a.animation.states.pop("idle")
        assert b.behavior.weights["explore"] == 40
        assert "idle" in b.animation.states
        assert "idle" in DEFAULT_STATES

    def test_no_path_means_defaults(self):
        assert load_config(None) == ShimejiConfig()


class TestLoad:
    def test_partial_override(self, tmp_path, caplog):
        path = write(tmp_path, """
character_name: keqing
seed: 5
behavior:
  idle_timeout: 15000
  weights: {explore: 10, rest: 50}
physics:
  walk_speed: 2.0
animation:
  states:
    jumping2: {frame_count: 6, loops: false}
""")
        with caplog.at_level(logging.INFO):
            cfg = load_config(path)
        assert cfg.character_name == "keqing"
        assert cfg.seed == 5
        assert cfg.behavior.idle_timeout == 15000
        assert cfg.behavior.weights == {"explore": 10.0, "rest": 50.0}
        assert cfg.physics.walk_speed == 2.0
        assert cfg.physics.gravity == 0.8
        assert cfg.animation.states["jumping2"] == StateDescriptor(6, False)
        assert cfg.animation.states["idle"] == DEFAULT_STATES["idle"]
        assert "config loaded from" in caplog.text

    def test_empty_file(self, tmp_path):
        assert load_config(write(tmp_path, "")) == ShimejiConfig()

    def test_missing_file(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            cfg = load_config(tmp_path / "nope.yaml")
        assert cfg == ShimejiConfig()
        assert "config file not found" in caplog.text

    def test_bad_yaml(self, tmp_path, caplog):
        path = write(tmp_path, "behavior: [unclosed\n")
        with caplog.at_level(logging.WARNING):
            cfg = load_config(path)
        assert cfg == ShimejiConfig()
        assert "config parse error" in caplog.text

    def test_root_must_be_mapping(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            cfg = load_config(write(tmp_path, "- a\n- b\n"))
        assert cfg == ShimejiConfig()
        assert "must be a mapping" in caplog.text

    def test_bad_value_falls_back_to_defaults(self, tmp_path, caplog):
        path = write(tmp_path, "behavior:\n  weights: {explore: lots}\n")
        with caplog.at_level(logging.WARNING):
            cfg = load_config(path)
        assert cfg == ShimejiConfig()
        assert "config load error" in caplog.text


class TestFromDict:
    def test_unknown_keys_are_ignored(self, caplog):
        with caplog.at_level(logging.WARNING):
            cfg = config_from_dict({
                "colour": "red",
                "physics": {"spin": 3, "friction": 0.5},
            })
        assert cfg.physics.friction == 0.5
        assert "unknown config key 'colour'" in caplog.text
        assert "unknown config key physics.spin" in caplog.text

    def test_section_must_be_mapping(self, caplog):
        with caplog.at_level(logging.WARNING):
            cfg = config_from_dict({"physics": 3})
        assert cfg.physics.gravity == 0.8
        assert "config section 'physics' must be a mapping" in caplog.text

    def test_bad_state_entries_are_skipped(self, caplog):
        with caplog.at_level(logging.WARNING):
            cfg = config_from_dict({"animation": {"states": {
                "waving": {"loops": False},
                "dancing": {"frame_count": 0},
                "spinning": "eight",
                "dizzy": {"frame_count": 3},
            }}})
        states = cfg.animation.states
        assert states["waving"] == DEFAULT_STATES["waving"]
        assert "dancing" not in states
        assert "spinning" not in states
        assert states["dizzy"] == StateDescriptor(3, True)
        assert caplog.text.count("ignoring it") == 3
