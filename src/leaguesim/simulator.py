"""Entry points used by callers that hold a roster and a fixture list.

``compute_position_probability`` chooses between the exact solver and Monte
Carlo, ``compute_clinch_scenario`` runs the first-place clinch search and
``compute_projected_table`` builds the projected final table.
"""

from __future__ import annotations

import enum
import logging
from typing import List, Optional, Sequence, Union

import numpy as np

from .clinch import ClinchScenario, find_clinch_scenario
from .exact import ExactResult, find_valid_outcomes
from .montecarlo import MonteCarloResult, ProjectedRow, generate_projected_table, simulate_probability
from .standings import Fixture, Team, remaining_fixtures

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

# Largest number of remaining league fixtures the exact solver is used for.
EXACT_FIXTURE_LIMIT = 15

DEFAULT_ITERATIONS = 10000
DEFAULT_TABLE_ITERATIONS = 5000


class SimulationMethod(str, enum.Enum):
    EXACT = "exact"
    MONTE_CARLO = "monte_carlo"


def compute_position_probability(
    teams: Sequence[Team],
    fixtures: Sequence[Fixture],
    team_name: str,
    target_position: int,
    method: Union[SimulationMethod, str] = SimulationMethod.EXACT,
    iterations: int = DEFAULT_ITERATIONS,
    *,
    rng: np.random.Generator | None = None,
    progress: bool = False,
    n_jobs: int = 1,
) -> Union[ExactResult, MonteCarloResult]:
    """Return the chance that ``team_name`` finishes in ``target_position``.

    The exact solver is used only when asked for and when at most
    :data:`EXACT_FIXTURE_LIMIT` fixtures remain; otherwise Monte Carlo runs
    ``iterations`` seasons.
    """

    method = SimulationMethod(method)
    if target_position < 1:
        raise ValueError("target_position must be 1 or greater")

    n_remaining = len(remaining_fixtures(fixtures))
    if method is SimulationMethod.EXACT and n_remaining <= EXACT_FIXTURE_LIMIT:
        logger.debug("Exact solver for %s over %d fixtures", team_name, n_remaining)
        return find_valid_outcomes(teams, fixtures, team_name, target_position)

    if method is SimulationMethod.EXACT:
        logger.info(
            "%d fixtures remain (limit %d); using Monte Carlo instead",
            n_remaining,
            EXACT_FIXTURE_LIMIT,
        )
    return simulate_probability(
        teams,
        fixtures,
        team_name,
        target_position,
        iterations,
        rng=rng,
        progress=progress,
        n_jobs=n_jobs,
    )


def compute_clinch_scenario(
    teams: Sequence[Team],
    fixtures: Sequence[Fixture],
    team_name: str,
    *,
    log: Optional[logging.Logger] = None,
) -> Optional[ClinchScenario]:
    return find_clinch_scenario(teams, fixtures, team_name, log=log)


def compute_projected_table(
    teams: Sequence[Team],
    fixtures: Sequence[Fixture],
    iterations: int = DEFAULT_TABLE_ITERATIONS,
    *,
    rng: np.random.Generator | None = None,
    progress: bool = False,
    n_jobs: int = 1,
) -> List[ProjectedRow]:
    return generate_projected_table(
        teams, fixtures, iterations, rng=rng, progress=progress, n_jobs=n_jobs
    )
