"""
Pytest configuration for the shimeji tests.
"""

import random
import sys
from pathlib import Path

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from shimeji.clock import VirtualClock  # noqa: E402
from shimeji.config import ShimejiConfig  # noqa: E402
from shimeji.entities import Shimeji  # noqa: E402
from helpers import DialogueRecorder  # noqa: E402


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def dialogue():
    return DialogueRecorder()


@pytest.fixture
def config():
    return ShimejiConfig()


@pytest.fixture
def character(config, clock, rng, dialogue):
    shimeji = Shimeji(config, clock=clock, rng=rng, dialogue=dialogue)
    yield shimeji
    shimeji.stop()
