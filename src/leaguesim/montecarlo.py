"""Monte Carlo simulation of the remaining fixtures.

Every unplayed fixture is settled independently as a home win, draw or away
win, each with probability one third. Iterations run in chunks; each chunk has
its own generator seeded from the caller's ``rng`` so the totals are the same
whether the chunks run serially or through :mod:`joblib`.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from typing import Dict, List, Sequence

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from tqdm import tqdm

from .standings import (
    POINTS_DRAW,
    POINTS_LOSS,
    POINTS_WIN,
    Fixture,
    Team,
    remaining_counts,
    remaining_fixtures,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Default simulation parameters
# ---------------------------------------------------------------------------

# Default number of parallel jobs. Use all available cores.
DEFAULT_JOBS = os.cpu_count() or 1

# Expected points per remaining match used for the projected points column.
EXPECTED_POINTS_PER_MATCH = 1.5

# Iterations simulated together in one vectorised block.
_CHUNK_SIZE = 1000

# Number of chunks handed to joblib per dispatch when ``n_jobs`` is greater
# than one.
_BATCH_SIZE = 16

HOME_WIN, DRAW, AWAY_WIN = 0, 1, 2


@dataclass
class MonteCarloResult:
    probability: float
    success_count: int
    iterations: int

    def to_dict(self) -> dict:
        return {
            "probability": self.probability,
            "success_count": self.success_count,
            "iterations": self.iterations,
        }


@dataclass
class ProjectedRow:
    """One line of the projected final table.

    ``projected_position`` and ``probability`` come from the simulation while
    ``projected_points`` is the current total plus 1.5 points per remaining
    match, derived independently of the simulation.
    """

    team: Team
    current_position: int
    projected_position: int
    projected_points: int
    probability: str

    def to_dict(self) -> dict:
        row = self.team.to_dict()
        row.update(
            {
                "current_position": self.current_position,
                "projected_position": self.projected_position,
                "projected_points": self.projected_points,
                "probability": self.probability,
            }
        )
        return row


# ---------------------------------------------------------------------------
# Simulation helpers
# ---------------------------------------------------------------------------


@dataclass
class _League:
    """Arrays describing the roster and the fixtures left to simulate."""

    names: List[str]
    base_points: np.ndarray
    tiebreak: np.ndarray
    home_idx: np.ndarray
    away_idx: np.ndarray


def _prepare(teams: Sequence[Team], fixtures: Sequence[Fixture]) -> _League:
    names = [t.name for t in teams]
    index = {name: i for i, name in enumerate(names)}
    remaining = [
        f for f in remaining_fixtures(fixtures) if f.home_team in index and f.away_team in index
    ]

    # Goals are not simulated, so goal difference and goals scored give a fixed
    # order that only matters between teams level on points.
    order = sorted(
        range(len(teams)),
        key=lambda i: (-teams[i].goal_difference, -teams[i].goals_for, i),
    )
    tiebreak = np.empty(len(teams), dtype=np.int64)
    tiebreak[order] = np.arange(len(teams))

    return _League(
        names=names,
        base_points=np.array([t.points for t in teams], dtype=np.int64),
        tiebreak=tiebreak,
        home_idx=np.array([index[f.home_team] for f in remaining], dtype=np.intp),
        away_idx=np.array([index[f.away_team] for f in remaining], dtype=np.intp),
    )


def _simulate_chunk(league: _League, seed: int, size: int) -> np.ndarray:
    """Return an ``(n_teams, n_teams)`` histogram of final ranks for ``size`` seasons."""

    rng = np.random.default_rng(seed)
    n_teams = league.base_points.shape[0]
    points = np.tile(league.base_points, (size, 1))

    if league.home_idx.size:
        draws = rng.integers(0, 3, size=(size, league.home_idx.size))
        home_points = np.where(
            draws == HOME_WIN, POINTS_WIN, np.where(draws == DRAW, POINTS_DRAW, POINTS_LOSS)
        )
        away_points = np.where(
            draws == AWAY_WIN, POINTS_WIN, np.where(draws == DRAW, POINTS_DRAW, POINTS_LOSS)
        )
        np.add.at(points, (slice(None), league.home_idx), home_points)
        np.add.at(points, (slice(None), league.away_idx), away_points)

    keys = -points * n_teams + league.tiebreak
    order = np.argsort(keys, axis=1, kind="stable")
    ranks = np.argsort(order, axis=1)

    counts = np.zeros((n_teams, n_teams), dtype=np.int64)
    for team_idx in range(n_teams):
        counts[team_idx] = np.bincount(ranks[:, team_idx], minlength=n_teams)
    return counts


def _iterate_counts(
    league: _League,
    rng: np.random.Generator,
    iterations: int,
    *,
    desc: str,
    progress: bool,
    n_jobs: int,
):
    """Yield rank histograms chunk by chunk.

    Chunk seeds are drawn up front so serial and parallel runs see the same
    random streams in the same order.
    """

    sizes = [_CHUNK_SIZE] * (iterations // _CHUNK_SIZE)
    if iterations % _CHUNK_SIZE:
        sizes.append(iterations % _CHUNK_SIZE)
    seeds = rng.integers(0, 2**32 - 1, size=len(sizes))
    chunks = list(zip(seeds, sizes))

    if n_jobs == 1:
        iterator = chunks
        if progress:
            iterator = tqdm(iterator, desc=desc, unit="chunk")
        for seed, size in iterator:
            yield _simulate_chunk(league, int(seed), size)
    else:
        pbar = None
        if progress:
            pbar = tqdm(total=iterations, desc=desc, unit="sim")

        for start in range(0, len(chunks), _BATCH_SIZE):
            batch = chunks[start : start + _BATCH_SIZE]
            results = Parallel(n_jobs=n_jobs)(
                delayed(_simulate_chunk)(league, int(seed), size) for seed, size in batch
            )
            if pbar is not None:
                pbar.update(sum(size for _, size in batch))
            for counts in results:
                yield counts
        if pbar is not None:
            pbar.close()


def _check_run_args(iterations: int, n_jobs: int) -> None:
    if n_jobs <= 0:
        raise ValueError("n_jobs must be greater than 0")
    if iterations <= 0:
        raise ValueError("iterations must be greater than 0")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ---------------------------------------------------------------------------
# Public simulation API
# ---------------------------------------------------------------------------


def position_counts(
    teams: Sequence[Team],
    fixtures: Sequence[Fixture],
    iterations: int = 1000,
    *,
    rng: np.random.Generator | None = None,
    progress: bool = True,
    n_jobs: int = 1,
    desc: str = "Positions",
) -> np.ndarray:
    """Return how often each team finished in each position.

    Row ``i`` belongs to ``teams[i]``; column ``j`` counts finishes in
    position ``j + 1``.
    """

    _check_run_args(iterations, n_jobs)
    if rng is None:
        rng = np.random.default_rng()

    league = _prepare(teams, fixtures)
    logger.debug(
        "Simulating %d fixtures for %d teams over %d iterations",
        league.home_idx.size,
        len(league.names),
        iterations,
    )

    total = np.zeros((len(league.names), len(league.names)), dtype=np.int64)
    for counts in _iterate_counts(
        league, rng, iterations, desc=desc, progress=progress, n_jobs=n_jobs
    ):
        total += counts
    return total


def simulate_probability(
    teams: Sequence[Team],
    fixtures: Sequence[Fixture],
    team_name: str,
    target_position: int,
    iterations: int = 10000,
    *,
    rng: np.random.Generator | None = None,
    progress: bool = True,
    n_jobs: int = 1,
) -> MonteCarloResult:
    """Estimate the chance (in percent) that ``team_name`` finishes in ``target_position``."""

    _check_run_args(iterations, n_jobs)
    if target_position < 1:
        raise ValueError("target_position must be 1 or greater")

    names = [t.name for t in teams]
    if team_name not in names:
        return MonteCarloResult(probability=0.0, success_count=0, iterations=iterations)

    counts = position_counts(
        teams, fixtures, iterations, rng=rng, progress=progress, n_jobs=n_jobs, desc="Probability"
    )
    row = counts[names.index(team_name)]
    success = int(row[target_position - 1]) if target_position <= len(row) else 0
    return MonteCarloResult(
        probability=success / iterations * 100,
        success_count=success,
        iterations=iterations,
    )


def generate_projected_table(
    teams: Sequence[Team],
    fixtures: Sequence[Fixture],
    iterations: int = 5000,
    *,
    rng: np.random.Generator | None = None,
    progress: bool = True,
    n_jobs: int = 1,
) -> List[ProjectedRow]:
    """Return the most likely final position of every team.

    ``current_position`` is the team's place in the order ``teams`` was given.
    """

    counts = position_counts(
        teams, fixtures, iterations, rng=rng, progress=progress, n_jobs=n_jobs, desc="Final table"
    )
    games_left: Dict[str, int] = remaining_counts(fixtures)

    rows = []
    for idx, team in enumerate(teams):
        mode = int(np.argmax(counts[idx]))
        share = counts[idx, mode] / iterations * 100
        expected = team.points + games_left.get(team.name, 0) * EXPECTED_POINTS_PER_MATCH
        rows.append(
            ProjectedRow(
                team=team,
                current_position=idx + 1,
                projected_position=mode + 1,
                projected_points=_round_half_up(expected),
                probability=f"{share:.1f}",
            )
        )

    rows.sort(key=lambda r: r.projected_position)
    return rows


def position_table(
    teams: Sequence[Team],
    fixtures: Sequence[Fixture],
    iterations: int = 5000,
    *,
    rng: np.random.Generator | None = None,
    progress: bool = True,
    n_jobs: int = 1,
) -> pd.DataFrame:
    """Return each team's full finishing distribution in percent.

    Columns are ``team``, ``expected_position`` and one ``P(pos k)`` column per
    position. Rows are sorted by expected position.
    """

    counts = position_counts(
        teams, fixtures, iterations, rng=rng, progress=progress, n_jobs=n_jobs, desc="Distribution"
    )
    n_teams = len(teams)
    shares = counts / iterations * 100
    positions = np.arange(1, n_teams + 1)

    df = pd.DataFrame(shares, columns=[f"P(pos {k})" for k in positions])
    df.insert(0, "expected_position", counts @ positions / iterations)
    df.insert(0, "team", [t.name for t in teams])
    return df.sort_values("expected_position", kind="stable").reset_index(drop=True)
