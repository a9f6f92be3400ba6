"""Convenience exports for the league simulation package."""

import logging

from .clinch import ClinchScenario, KeyFixture, RequiredResult, classify_threats, find_clinch_scenario
from .exact import ExactResult, find_valid_outcomes
from .io import load_fixtures, load_teams, reset_results_from
from .montecarlo import (
    DEFAULT_JOBS,
    MonteCarloResult,
    ProjectedRow,
    generate_projected_table,
    position_table,
    simulate_probability,
)
from .outcomes import enumerate_outcomes, ways_to_achieve
from .rounds import RoundKey, group_by_round
from .simulator import (
    DEFAULT_ITERATIONS,
    DEFAULT_TABLE_ITERATIONS,
    EXACT_FIXTURE_LIMIT,
    SimulationMethod,
    compute_clinch_scenario,
    compute_position_probability,
    compute_projected_table,
)
from .standings import Fixture, Outcome, RoundInfo, Team, rank, standings_frame, teams_from_results

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Team",
    "Fixture",
    "RoundInfo",
    "Outcome",
    "RoundKey",
    "rank",
    "standings_frame",
    "teams_from_results",
    "group_by_round",
    "enumerate_outcomes",
    "ways_to_achieve",
    "find_valid_outcomes",
    "simulate_probability",
    "generate_projected_table",
    "position_table",
    "classify_threats",
    "find_clinch_scenario",
    "compute_position_probability",
    "compute_clinch_scenario",
    "compute_projected_table",
    "load_teams",
    "load_fixtures",
    "reset_results_from",
    "SimulationMethod",
    "ExactResult",
    "MonteCarloResult",
    "ProjectedRow",
    "ClinchScenario",
    "RequiredResult",
    "KeyFixture",
    "EXACT_FIXTURE_LIMIT",
    "DEFAULT_ITERATIONS",
    "DEFAULT_TABLE_ITERATIONS",
    "DEFAULT_JOBS",
]
