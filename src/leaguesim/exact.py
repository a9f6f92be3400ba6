"""Exact finishing-position probabilities by enumerating outcome triples.

Only the target team's remaining fixtures are varied. Every other team keeps
its current record, so the figure is the true probability only when rivals
have nothing left to play. The denominator is still ``3 ** N`` over all ``N``
remaining fixtures in the league. Keep this to small leagues: the orchestrator
switches to Monte Carlo above :data:`leaguesim.simulator.EXACT_FIXTURE_LIMIT`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Sequence

from scipy.special import logsumexp

from .outcomes import LOG_SPACE_THRESHOLD, enumerate_outcomes, log_ways_to_achieve, ways_to_achieve
from .standings import Fixture, Outcome, Team, advance, rank, remaining_fixtures


@dataclass
class ExactResult:
    """Outcome triples that land the team on the target position."""

    valid_outcomes: List[Outcome] = field(default_factory=list)
    total_possible: int = 1
    total_valid_ways: int = 0
    probability: float = 0.0

    def to_dict(self) -> dict:
        return {
            "valid_outcomes": [o._asdict() for o in self.valid_outcomes],
            "total_possible": self.total_possible,
            "total_valid_ways": self.total_valid_ways,
            "probability": self.probability,
        }


def _lands_on(teams: Sequence[Team], team_name: str, outcome: Outcome, target_position: int) -> bool:
    simulated = [advance(t, outcome) if t.name == team_name else t for t in teams]
    ordered = rank(simulated)
    return [t.name for t in ordered].index(team_name) == target_position - 1


def find_valid_outcomes(
    teams: Sequence[Team],
    fixtures: Sequence[Fixture],
    team_name: str,
    target_position: int,
) -> ExactResult:
    """Return the outcome triples that finish ``team_name`` in ``target_position``.

    ``probability`` is a percentage. An unknown team has no valid outcomes.
    """

    remaining = remaining_fixtures(fixtures)
    total_possible = 3 ** len(remaining)

    if not any(t.name == team_name for t in teams):
        return ExactResult(total_possible=total_possible)

    team_games = sum(1 for f in remaining if f.involves(team_name))
    valid = [
        outcome
        for outcome in enumerate_outcomes(team_games)
        if _lands_on(teams, team_name, outcome, target_position)
    ]
    total_valid_ways = sum(ways_to_achieve(o) for o in valid)

    if not valid:
        probability = 0.0
    elif team_games > LOG_SPACE_THRESHOLD:
        log_valid = logsumexp([log_ways_to_achieve(o) for o in valid])
        probability = 100.0 * math.exp(log_valid - len(remaining) * math.log(3))
    else:
        probability = total_valid_ways / total_possible * 100

    return ExactResult(
        valid_outcomes=valid,
        total_possible=total_possible,
        total_valid_ways=total_valid_ways,
        probability=probability,
    )
