"""Enumerate win/draw/loss triples and count the fixture orderings behind them."""

from __future__ import annotations

import math
from typing import List

from scipy.special import gammaln

from .standings import Outcome

# Above this many remaining fixtures probabilities are summed in log space.
LOG_SPACE_THRESHOLD = 20


def enumerate_outcomes(remaining: int) -> List[Outcome]:
    """Return every ``(wins, draws, losses)`` triple summing to ``remaining``.

    Wins ascend in the outer loop and draws in the inner one, giving
    ``(remaining + 1) * (remaining + 2) / 2`` triples.
    """

    if remaining < 0:
        raise ValueError("remaining must be zero or greater")

    outcomes = []
    for wins in range(remaining + 1):
        for draws in range(remaining - wins + 1):
            outcomes.append(Outcome(wins, draws, remaining - wins - draws))
    return outcomes


def ways_to_achieve(outcome: Outcome) -> int:
    """Multinomial coefficient ``n! / (wins! draws! losses!)``.

    Python integers do not overflow, so the count is exact for any ``n``.
    """

    wins, draws, losses = outcome
    if min(wins, draws, losses) < 0:
        raise ValueError("outcome counts must be zero or greater")
    return math.comb(outcome.total, wins) * math.comb(draws + losses, draws)


def log_ways_to_achieve(outcome: Outcome) -> float:
    """Natural log of :func:`ways_to_achieve`."""

    wins, draws, losses = outcome
    if min(wins, draws, losses) < 0:
        raise ValueError("outcome counts must be zero or greater")
    return float(
        gammaln(outcome.total + 1) - gammaln(wins + 1) - gammaln(draws + 1) - gammaln(losses + 1)
    )
