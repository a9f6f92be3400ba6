"""Reading teams and fixtures from CSV files.

Teams files have one row per team with ``name, played, won, drawn, lost,
goals_for, goals_against, points``. Fixtures files have ``home_team,
away_team, home_goals, away_goals`` and optional ``round`` and ``date``
columns; blank goals mark a fixture that is still to be played.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .rounds import format_date_label
from .standings import Fixture, RoundInfo, Team

TEAM_COLUMNS = ["name", "played", "won", "drawn", "lost", "goals_for", "goals_against", "points"]
FIXTURE_COLUMNS = ["home_team", "away_team", "home_goals", "away_goals"]


def _require_columns(df: pd.DataFrame, columns: List[str], path: str | Path) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"{path} is missing columns: {', '.join(missing)}")


def read_fixture_frame(path: str | Path) -> pd.DataFrame:
    """Return the fixtures file as a DataFrame with parsed dates."""

    df = pd.read_csv(path)
    _require_columns(df, FIXTURE_COLUMNS, path)
    if "date" in df.columns:
        df["date"] = pd.to_datetime(df["date"])
    for col in ("home_team", "away_team"):
        df[col] = df[col].astype(str).str.strip()
    return df


def load_teams(path: str | Path) -> List[Team]:
    """Return team records in file order."""

    df = pd.read_csv(path)
    _require_columns(df, TEAM_COLUMNS, path)
    if df["name"].duplicated().any():
        raise ValueError(f"{path} lists a team more than once")

    teams = []
    for _, row in df.iterrows():
        teams.append(
            Team(
                name=str(row["name"]).strip(),
                played=int(row["played"]),
                won=int(row["won"]),
                drawn=int(row["drawn"]),
                lost=int(row["lost"]),
                goals_for=int(row["goals_for"]),
                goals_against=int(row["goals_against"]),
                points=int(row["points"]),
            )
        )
    return teams


def _round_info(row: pd.Series, date: Optional[datetime]) -> Optional[RoundInfo]:
    label = row.get("round")
    if label is not None and not pd.isna(label):
        if isinstance(label, float) and label.is_integer():
            return RoundInfo(int(label), is_date_based=False)
        text = str(label).strip()
        return RoundInfo(int(text) if text.isdigit() else text, is_date_based=not text.isdigit())
    if date is not None:
        return RoundInfo(format_date_label(date), is_date_based=True)
    return None


def fixtures_from_frame(df: pd.DataFrame) -> List[Fixture]:
    """Convert a fixtures frame into :class:`Fixture` records."""

    fixtures = []
    for _, row in df.iterrows():
        date = None
        if "date" in df.columns and not pd.isna(row["date"]):
            date = pd.Timestamp(row["date"]).to_pydatetime()
        played = not (pd.isna(row["home_goals"]) or pd.isna(row["away_goals"]))
        fixtures.append(
            Fixture(
                home_team=row["home_team"],
                away_team=row["away_team"],
                played=played,
                home_goals=int(row["home_goals"]) if played else 0,
                away_goals=int(row["away_goals"]) if played else 0,
                round_info=_round_info(row, date),
                date=date,
            )
        )
    return fixtures


def load_fixtures(path: str | Path) -> List[Fixture]:
    """Return fixture records in file order."""

    return fixtures_from_frame(read_fixture_frame(path))


def reset_results_from(matches: pd.DataFrame, start_date: str | pd.Timestamp) -> pd.DataFrame:
    """Return a copy of ``matches`` with results on or after ``start_date`` cleared."""

    if "date" not in matches.columns:
        raise ValueError("matches need a date column to reset results")
    df = matches.copy()
    df["home_goals"] = df["home_goals"].astype(float)
    df["away_goals"] = df["away_goals"].astype(float)
    start = pd.to_datetime(start_date)
    mask = df["date"] >= start
    df.loc[mask, ["home_goals", "away_goals"]] = float("nan")
    return df
