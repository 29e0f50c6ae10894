from __future__ import annotations

import itertools

import matplotlib

matplotlib.use("Agg")

import pytest

from galaxygen import NumpyRandomSource, RandomSource


class ScriptedRandomSource(RandomSource):
    """Replays fixed fractions of the requested range, cycling forever.

    A fraction ``f`` maps to ``lo + f * (hi - lo)``, so 0.0 is the low bound,
    1.0 the high bound and 0.5 the midpoint.
    """

    def __init__(self, fractions):
        self._fractions = itertools.cycle(fractions)
        self.calls = []

    def next_in_range(self, lo, hi):
        self.calls.append((lo, hi))
        return lo + next(self._fractions) * (hi - lo)


@pytest.fixture
def rng():
    return NumpyRandomSource(seed=1234)


@pytest.fixture
def scripted():
    return ScriptedRandomSource
