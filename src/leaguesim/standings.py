"""Team and fixture records plus the pure functions that move them forward.

Teams are frozen dataclasses. Every simulation step builds new records from
old ones, so a roster handed in by the caller is never touched. A "snapshot"
is a plain ``dict`` mapping team names to :class:`Team` records.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, Iterable, List, NamedTuple, Optional, Union

import pandas as pd

# ---------------------------------------------------------------------------
# Points scheme
# ---------------------------------------------------------------------------

POINTS_WIN = 3
POINTS_DRAW = 1
POINTS_LOSS = 0


class MatchResult(enum.Enum):
    """Result of a fixture from one side's point of view."""

    WIN = "win"
    DRAW = "draw"
    LOSS = "loss"

    @property
    def points(self) -> int:
        return _RESULT_POINTS[self]

    @property
    def reverse(self) -> "MatchResult":
        return _REVERSED[self]


_RESULT_POINTS = {
    MatchResult.WIN: POINTS_WIN,
    MatchResult.DRAW: POINTS_DRAW,
    MatchResult.LOSS: POINTS_LOSS,
}
_REVERSED = {
    MatchResult.WIN: MatchResult.LOSS,
    MatchResult.DRAW: MatchResult.DRAW,
    MatchResult.LOSS: MatchResult.WIN,
}


class Outcome(NamedTuple):
    """How a team's remaining fixtures end, without saying which is which."""

    wins: int
    draws: int
    losses: int

    @property
    def total(self) -> int:
        return self.wins + self.draws + self.losses

    @property
    def points(self) -> int:
        return self.wins * POINTS_WIN + self.draws * POINTS_DRAW


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Team:
    """A row of the league table."""

    name: str
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    points: int = 0

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against

    def clone(self) -> "Team":
        return replace(self)

    def to_dict(self) -> dict:
        return {
            "team": self.name,
            "played": self.played,
            "won": self.won,
            "drawn": self.drawn,
            "lost": self.lost,
            "goals_for": self.goals_for,
            "goals_against": self.goals_against,
            "goal_difference": self.goal_difference,
            "points": self.points,
        }


@dataclass(frozen=True)
class RoundInfo:
    """Round label of a fixture: a matchday number or a date label like ``"Mar 21"``."""

    round: Union[str, int]
    is_date_based: bool = False


@dataclass(frozen=True)
class Fixture:
    """A scheduled pairing. Teams are referenced by name."""

    home_team: str
    away_team: str
    played: bool = False
    home_goals: int = 0
    away_goals: int = 0
    round_info: Optional[RoundInfo] = None
    date: Optional[datetime] = None

    def involves(self, team_name: str) -> bool:
        return team_name in (self.home_team, self.away_team)

    def opponent_of(self, team_name: str) -> str:
        if team_name == self.home_team:
            return self.away_team
        if team_name == self.away_team:
            return self.home_team
        raise ValueError(f"{team_name} does not play in {self.home_team} v {self.away_team}")

    @property
    def pair(self) -> frozenset:
        return frozenset((self.home_team, self.away_team))

    @property
    def round_label(self) -> Optional[Union[str, int]]:
        return self.round_info.round if self.round_info is not None else None

    def to_dict(self) -> dict:
        return {
            "home_team": self.home_team,
            "away_team": self.away_team,
            "played": self.played,
            "home_goals": self.home_goals,
            "away_goals": self.away_goals,
            "round": self.round_label,
            "date": self.date.isoformat() if self.date is not None else None,
        }


Snapshot = Dict[str, Team]


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------


def _sort_key(team: Team) -> tuple[int, int, int]:
    return (-team.points, -team.goal_difference, -team.goals_for)


def rank(teams: Iterable[Team]) -> List[Team]:
    """Order teams by points, then goal difference, then goals scored.

    There is no head-to-head or alphabetical tie-break: teams level on all three
    keep the order they were given in.
    """

    return sorted(teams, key=_sort_key)


def position_of(teams: Iterable[Team], team_name: str) -> Optional[int]:
    """Return the 1-based table position of ``team_name`` or ``None``."""

    for idx, team in enumerate(rank(teams)):
        if team.name == team_name:
            return idx + 1
    return None


def clone(team: Team) -> Team:
    return team.clone()


# ---------------------------------------------------------------------------
# Pure updates
# ---------------------------------------------------------------------------


def apply_result(team: Team, result: MatchResult) -> Team:
    """Return ``team`` with one more game played and ``result`` recorded."""

    return replace(
        team,
        played=team.played + 1,
        won=team.won + (result is MatchResult.WIN),
        drawn=team.drawn + (result is MatchResult.DRAW),
        lost=team.lost + (result is MatchResult.LOSS),
        points=team.points + result.points,
    )


def advance(team: Team, outcome: Outcome) -> Team:
    """Return ``team`` with a whole outcome triple applied."""

    return replace(
        team,
        played=team.played + outcome.total,
        won=team.won + outcome.wins,
        drawn=team.drawn + outcome.draws,
        lost=team.lost + outcome.losses,
        points=team.points + outcome.points,
    )


def resolve_fixture(snapshot: Snapshot, fixture: Fixture, home_result: MatchResult) -> Snapshot:
    """Return a new snapshot with ``fixture`` settled as ``home_result`` for the home side."""

    updated = dict(snapshot)
    if fixture.home_team in updated:
        updated[fixture.home_team] = apply_result(updated[fixture.home_team], home_result)
    if fixture.away_team in updated:
        updated[fixture.away_team] = apply_result(updated[fixture.away_team], home_result.reverse)
    return updated


def make_snapshot(teams: Iterable[Team]) -> Snapshot:
    return {team.name: team for team in teams}


# ---------------------------------------------------------------------------
# Fixture helpers
# ---------------------------------------------------------------------------


def remaining_fixtures(fixtures: Iterable[Fixture]) -> List[Fixture]:
    return [f for f in fixtures if not f.played]


def remaining_counts(fixtures: Iterable[Fixture]) -> Dict[str, int]:
    """Count unplayed fixtures per team name."""

    counts: Dict[str, int] = {}
    for fixture in fixtures:
        if fixture.played:
            continue
        counts[fixture.home_team] = counts.get(fixture.home_team, 0) + 1
        counts[fixture.away_team] = counts.get(fixture.away_team, 0) + 1
    return counts


# ---------------------------------------------------------------------------
# Table computation
# ---------------------------------------------------------------------------


def teams_from_results(matches: pd.DataFrame) -> List[Team]:
    """Build team records from a fixtures frame.

    ``matches`` needs ``home_team``, ``away_team``, ``home_goals`` and
    ``away_goals`` columns; rows with missing goals count as unplayed. Teams
    appear in the order they are first seen.
    """

    teams = pd.unique(matches[["home_team", "away_team"]].values.ravel())
    played = matches.dropna(subset=["home_goals", "away_goals"])

    if played.empty:
        return [Team(name=str(t)) for t in teams]

    home = played[["home_team", "home_goals", "away_goals"]].rename(
        columns={"home_team": "team", "home_goals": "gf", "away_goals": "ga"}
    )
    away = played[["away_team", "away_goals", "home_goals"]].rename(
        columns={"away_team": "team", "away_goals": "gf", "home_goals": "ga"}
    )
    for df_part in (home, away):
        df_part["won"] = (df_part["gf"] > df_part["ga"]).astype(int)
        df_part["drawn"] = (df_part["gf"] == df_part["ga"]).astype(int)
        df_part["lost"] = (df_part["gf"] < df_part["ga"]).astype(int)

    stats = (
        pd.concat([home, away], ignore_index=True)
        .groupby("team", sort=False)
        .agg(
            played=("won", "size"),
            won=("won", "sum"),
            drawn=("drawn", "sum"),
            lost=("lost", "sum"),
            gf=("gf", "sum"),
            ga=("ga", "sum"),
        )
    ).astype(int)
    stats = stats.reindex(teams, fill_value=0)

    records = []
    for name, row in stats.iterrows():
        records.append(
            Team(
                name=str(name),
                played=int(row["played"]),
                won=int(row["won"]),
                drawn=int(row["drawn"]),
                lost=int(row["lost"]),
                goals_for=int(row["gf"]),
                goals_against=int(row["ga"]),
                points=int(row["won"]) * POINTS_WIN + int(row["drawn"]) * POINTS_DRAW,
            )
        )
    return records


def standings_frame(teams: Iterable[Team]) -> pd.DataFrame:
    """Return the ranked table as a DataFrame with a 1-based ``position`` column."""

    rows = [team.to_dict() for team in rank(teams)]
    columns = [
        "team",
        "played",
        "won",
        "drawn",
        "lost",
        "goals_for",
        "goals_against",
        "goal_difference",
        "points",
    ]
    df = pd.DataFrame(rows, columns=columns)
    df.insert(0, "position", range(1, len(df) + 1))
    return df
