"""Sampling decisions for metric events."""

import random

from asyncstatsd.core.ports import RandomSource


class Sampler:
    """Decides whether an event sampled at a given rate is emitted.

    Args:
        random_source: Callable returning a float in [0, 1). Defaults to
            random.random; inject a fixed source for deterministic tests.
    """

    def __init__(self, random_source: RandomSource | None = None) -> None:
        self._random = random_source or random.random

    def should_sample(self, rate: float) -> bool:
        """Return True if an event with this rate should be sent.

        Rates at or below 0 never sample and rates at or above 1 always
        sample without drawing. Otherwise one value is drawn and the event
        is kept if the draw is <= rate.
        """
        if rate <= 0:
            return False
        if rate >= 1:
            return True
        return self._random() <= rate
