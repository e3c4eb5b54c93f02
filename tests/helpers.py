"""
Test doubles shared by the shimeji tests.
"""

import random

from shimeji.entities.sprite import AssetLoadError, SpriteStrip


class FailingLoader:
    """Loader that fails for a given set of states and records every load."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.loads = []

    def load(self, state, frame_count):
        self.loads.append(state)
        if state in self.failing:
            raise AssetLoadError(f"no asset for {state}")
        return SpriteStrip(state)


class ScriptedRandom(random.Random):
    """random.Random whose random() returns scripted values first."""

    def __init__(self, values, seed=0):
        super().__init__(seed)
        self.values = list(values)

    def random(self):
        if self.values:
            return self.values.pop(0)
        return super().random()

    # Defining getrandbits keeps choice() and randrange() on the base
    # generator instead of routing them through random().
    def getrandbits(self, k):
        return super().getrandbits(k)


class DialogueRecorder:
    def __init__(self):
        self.calls = []

    def __call__(self, context, element=None):
        self.calls.append((context, element))

    @property
    def contexts(self):
        return [context for context, _ in self.calls]
