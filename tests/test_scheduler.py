"""Tests for weighted selection and the behavior scheduler."""

import logging
import random
from collections import Counter

import pytest

from shimeji.behaviors import Behavior, BehaviorScheduler, select_weighted
from shimeji.config import ShimejiConfig
from shimeji.entities import Shimeji

from helpers import ScriptedRandom


class NoDraw:
    """rng that fails the test if anything draws from it."""

    def random(self):
        raise AssertionError("unexpected random draw")


class Recording(Behavior):
    def __init__(self, character, name, events):
        self.name = name
        super().__init__(character)
        self.events = events

    def start(self):
        self.running = True
        self.events.append(("start", self.name))

    def stop(self):
        super().stop()
        self.events.append(("stop", self.name))


def quiet_config(**weights) -> ShimejiConfig:
    """Config whose decision cycle stays out of the way."""
    config = ShimejiConfig()
    config.behavior.weights = weights or {"explore": 1}
    config.behavior.decision_min_ms = 60000
    config.behavior.decision_max_ms = 60000
    return config


# =============================================================================
# SELECT_WEIGHTED
# =============================================================================


class TestSelectWeighted:
    def test_frequencies_converge(self):
        rng = random.Random(42)
        weights = {"explore": 40, "rest": 20, "play": 20, "observe": 20}
        n = 20000
        counts = Counter(select_weighted(weights, rng) for _ in range(n))
        assert counts["explore"] / n == pytest.approx(0.4, abs=0.02)
        for name in ("rest", "play", "observe"):
            assert counts[name] / n == pytest.approx(0.2, abs=0.02)

    def test_empty_table_is_idle_without_draw(self):
        assert select_weighted({}, NoDraw()) == "idle"

    def test_zero_weights_are_idle_without_draw(self):
        assert select_weighted({"explore": 0, "rest": 0}, NoDraw()) == "idle"

    def test_non_positive_weights_never_win(self):
        rng = random.Random(7)
        weights = {"explore": -5, "rest": 1, "play": 0}
        assert {select_weighted(weights, rng) for _ in range(200)} == {"rest"}

    def test_boundary_goes_to_first_entry(self):
        # r = 0.5 * 2 = 1.0 equals the first running total
        rng = ScriptedRandom([0.5])
        assert select_weighted({"a": 1, "b": 1}, rng) == "a"

    def test_draw_near_one(self):
        rng = ScriptedRandom([0.9999])
        assert select_weighted({"a": 1, "b": 1}, rng) == "b"


# =============================================================================
# REGISTRATION AND EXECUTION
# =============================================================================


class TestExecute:
    def test_stop_previous_before_start_next(self, character):
        events = []
        scheduler = BehaviorScheduler(
            character,
            [Recording(character, "a", events), Recording(character, "b", events)],
            character.config.behavior)

        scheduler.execute_behavior("a")
        scheduler.execute_behavior("b")
        assert events == [("start", "a"), ("stop", "a"), ("start", "b")]
        assert scheduler.active == "b"

    def test_unknown_behavior_runs_idle(self, character, caplog):
        character.animation.set_state("walking")
        with caplog.at_level(logging.WARNING):
            assert character.scheduler.execute_behavior("dance") == "idle"
        assert character.scheduler.active == "idle"
        assert character.animation.current_state == "idle"
        assert "Behavior dance not found" in caplog.text

    def test_duplicate_registration(self, character):
        scheduler = character.scheduler
        with pytest.raises(ValueError):
            scheduler.register(Recording(character, "rest", []))

    def test_behavior_needs_a_name(self, character):
        with pytest.raises(ValueError):
            Recording(character, "", [])

    def test_at_most_one_behavior_running(self, character, clock):
        character.start()
        for _ in range(10):
            clock.advance(15000)
            running = [b.name for b in character.scheduler.behaviors.values()
                       if b.running]
            assert running == [character.scheduler.active]

    def test_decision_delay_range(self, character):
        character.start()
        deadline = character.scheduler._decision_timer.deadline
        assert 5000 <= deadline <= 15000


# =============================================================================
# IDLE MONITOR
# =============================================================================


class TestIdleMonitor:
    def test_forces_rest_after_timeout(self, clock):
        character = Shimeji(quiet_config(), clock=clock)
        character.start()
        assert character.scheduler.active == "explore"

        clock.advance(9999)
        assert character.scheduler.active == "explore"
        clock.advance(1)
        assert character.scheduler.active == "rest"
        character.stop()

    def test_interaction_postpones_rest(self, clock):
        character = Shimeji(quiet_config(), clock=clock)
        character.start()
        clock.advance(5000)
        character.on_click()

        clock.advance(9999)
        assert character.scheduler.active == "explore"
        clock.advance(1)
        assert character.scheduler.active == "rest"
        character.stop()

    def test_disabled(self, clock):
        config = quiet_config()
        config.behavior.enable_idle = False
        character = Shimeji(config, clock=clock)
        character.start()
        clock.advance(50000)
        assert character.scheduler.active == "explore"
        assert character.scheduler._idle_timer is None
        character.stop()

    def test_interaction_clock_never_goes_back(self, character, clock):
        clock.advance(500)
        character.record_interaction()
        character.scheduler.last_interaction = 800
        character.record_interaction()
        assert character.scheduler.last_interaction == 800


# =============================================================================
# HOST CONTROL
# =============================================================================


class TestHostControl:
    def test_jump_reverts_to_idle(self, character, clock):
        clock.advance(500)
        character.jump()
        assert character.animation.current_state == "jumping"
        assert character.scheduler.last_interaction == 500

        clock.advance(1000)
        assert character.animation.current_state == "idle"

    def test_jump_revert_leaves_newer_state_alone(self, character, clock):
        character.jump()
        clock.advance(500)
        character.animation.set_state("happy")
        clock.advance(500)
        assert character.animation.current_state == "happy"

    def test_crawl(self, character, clock):
        clock.advance(250)
        character.crawl()
        assert character.animation.current_state == "crawling"
        assert character.scheduler.last_interaction == 250

    def test_move_to_resolves_on_arrival(self, clock):
        character = Shimeji(quiet_config(rest=1), clock=clock)
        character.start()
        floor = character.viewport.max_y

        future = character.move_to(300, floor)
        assert character.scheduler.active is None
        assert character.animation.current_state == "walking"
        assert not future.done()

        clock.advance(5000)
        assert future.done()
        x, y = future.result()
        assert abs(x - 300) < 5
        assert not character.physics.is_moving
        character.stop()

    def test_stop_cancels_every_timer(self, character, clock):
        character.start()
        character.jump()
        character.show_emotion("happy")
        clock.advance(3000)
        character.stop()
        assert clock.pending == 0
        assert character.scheduler.active is None
