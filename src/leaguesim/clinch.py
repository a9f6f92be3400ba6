"""Earliest round in which a team can mathematically secure first place.

The search walks the remaining rounds in order under the most favourable
assumptions for the target team: it wins every game, each threat loses every
game, and all other fixtures are drawn. After each round a threat is still
alive while ``points + 3 * games_left`` reaches the target's total. The first
round after which no threat is alive is reported.

Which rivals count as threats is decided from the table alone:

* trailing by at most 3 points (or ahead): always;
* by at most 6: if in the top three;
* by at most 9: if in the top two;
* by at most 12: only the highest placed rival;
* further back: never.

A rival that cannot reach the target's current points even by winning every
remaining game is never a threat. With no threats left the highest placed rival
is used so there is always a reference competitor.
"""

from __future__ import annotations

import enum
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from .rounds import Label, Round, group_by_round, next_round
from .standings import (
    POINTS_WIN,
    Fixture,
    MatchResult,
    Snapshot,
    Team,
    make_snapshot,
    rank,
    remaining_counts,
    remaining_fixtures,
    resolve_fixture,
)

logger = logging.getLogger(__name__)

# (largest points gap, table places the rival must be within)
THREAT_BANDS = ((3, None), (6, 3), (9, 2))
LEADER_ONLY_GAP = 12

# A pre-round lead this large over every threat lets the title be sealed in
# the same round.
SAME_ROUND_GAP = POINTS_WIN + 1

MAX_KEY_FIXTURES = 3


class ResultTag(str, enum.Enum):
    HOME_WIN = "home_win"
    AWAY_WIN = "away_win"
    DRAW = "draw"
    HOME_WIN_OR_DRAW = "home_win_or_draw"
    AWAY_WIN_OR_DRAW = "away_win_or_draw"


class Importance(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"


@dataclass
class RequiredResult:
    fixture: Fixture
    result: ResultTag
    explanation: str

    def to_dict(self) -> dict:
        return {
            "fixture": self.fixture.to_dict(),
            "result": self.result.value,
            "explanation": self.explanation,
        }


@dataclass
class KeyFixture:
    fixture: Fixture
    result: ResultTag
    explanation: str
    round: Label
    importance: Importance

    def to_dict(self) -> dict:
        return {
            "fixture": self.fixture.to_dict(),
            "result": self.result.value,
            "explanation": self.explanation,
            "round": self.round,
            "importance": self.importance.value,
        }


@dataclass
class ClinchScenario:
    """How and when ``team`` can secure first place.

    ``round`` is the round after which the title is proven safe and
    ``clinching_round`` the round in which it is actually sealed.

    ``points_needed`` is one more than the best total any threat can still
    reach after ``round``. When ``clinching_round`` is a later round,
    ``required_results`` describe that later round while ``points_needed``
    still refers to ``round``.
    """

    team: str
    round: Label
    clinching_round: Label
    points_needed: int
    current_points: int
    points_to_gain: int
    required_results: List[RequiredResult] = field(default_factory=list)
    key_fixtures: List[KeyFixture] = field(default_factory=list)
    threat_competitors: List[str] = field(default_factory=list)
    can_clinch_in_current_round: bool = False

    def to_dict(self) -> dict:
        return {
            "team": self.team,
            "round": self.round,
            "clinching_round": self.clinching_round,
            "points_needed": self.points_needed,
            "current_points": self.current_points,
            "points_to_gain": self.points_to_gain,
            "required_results": [r.to_dict() for r in self.required_results],
            "key_fixtures": [k.to_dict() for k in self.key_fixtures],
            "threat_competitors": list(self.threat_competitors),
            "can_clinch_in_current_round": self.can_clinch_in_current_round,
        }


@dataclass
class RoundState:
    """Standings before and after one simulated round of the walk."""

    round: Round
    before: Snapshot
    after: Snapshot
    target_points: int
    threat_max_points: Dict[str, int]

    @property
    def clinched(self) -> bool:
        return all(p < self.target_points for p in self.threat_max_points.values())

    def eliminated(self) -> List[str]:
        return [n for n, p in self.threat_max_points.items() if p < self.target_points]


# ---------------------------------------------------------------------------
# Threats
# ---------------------------------------------------------------------------


def classify_threats(snapshot: Snapshot, fixtures: Iterable[Fixture], team_name: str) -> List[str]:
    """Return the rivals, in table order, that could still overtake ``team_name``."""

    target = snapshot[team_name]
    games_left = remaining_counts(fixtures)
    table = [t.name for t in rank(snapshot.values())]
    rivals = [name for name in table if name != team_name]
    if not rivals:
        return []
    leader = rivals[0]

    threats = []
    for name in rivals:
        rival = snapshot[name]
        if rival.points + POINTS_WIN * games_left.get(name, 0) < target.points:
            continue
        gap = target.points - rival.points
        place = table.index(name) + 1
        in_band = any(
            gap <= max_gap and (places is None or place <= places)
            for max_gap, places in THREAT_BANDS
        )
        if in_band or (gap <= LEADER_ONLY_GAP and name == leader):
            threats.append(name)

    if not threats:
        threats = [leader]
    return threats


# ---------------------------------------------------------------------------
# Round walk
# ---------------------------------------------------------------------------


def _best_case_result(fixture: Fixture, team_name: str, threats: frozenset) -> MatchResult:
    """Home side's result in the most favourable world for ``team_name``."""

    if fixture.home_team == team_name:
        return MatchResult.WIN
    if fixture.away_team == team_name:
        return MatchResult.LOSS
    home_threat = fixture.home_team in threats
    away_threat = fixture.away_team in threats
    if home_threat and away_threat:
        return MatchResult.DRAW
    if home_threat:
        return MatchResult.LOSS
    if away_threat:
        return MatchResult.WIN
    return MatchResult.DRAW


def play_best_case(
    snapshot: Snapshot, fixtures: Iterable[Fixture], team_name: str, threats: Iterable[str]
) -> Snapshot:
    threat_set = frozenset(threats)
    for fixture in fixtures:
        snapshot = resolve_fixture(
            snapshot, fixture, _best_case_result(fixture, team_name, threat_set)
        )
    return snapshot


def walk_rounds(
    teams: Sequence[Team],
    rounds: Sequence[Round],
    team_name: str,
    threats: Sequence[str],
) -> Iterator[RoundState]:
    """Yield the state after each round of the best-case walk."""

    snapshot = make_snapshot(teams)
    for idx, rnd in enumerate(rounds):
        before = snapshot
        snapshot = play_best_case(snapshot, rnd.fixtures, team_name, threats)
        games_left = remaining_counts(f for later in rounds[idx + 1 :] for f in later.fixtures)
        yield RoundState(
            round=rnd,
            before=before,
            after=snapshot,
            target_points=snapshot[team_name].points,
            threat_max_points={
                name: snapshot[name].points + POINTS_WIN * games_left.get(name, 0)
                for name in threats
            },
        )


# ---------------------------------------------------------------------------
# Explanations
# ---------------------------------------------------------------------------


def _win_tag(fixture: Fixture, team_name: str) -> ResultTag:
    return ResultTag.HOME_WIN if fixture.home_team == team_name else ResultTag.AWAY_WIN


def _drop_points_tag(fixture: Fixture, threat: str) -> ResultTag:
    # The threat's opponent must avoid defeat.
    return ResultTag.AWAY_WIN_OR_DRAW if fixture.home_team == threat else ResultTag.HOME_WIN_OR_DRAW


def required_results(
    fixtures: Sequence[Fixture], team_name: str, threats: Sequence[str]
) -> List[RequiredResult]:
    """Results needed in the clinching round: the team's own games first."""

    results = [
        RequiredResult(f, _win_tag(f, team_name), f"{team_name} must win to gain 3 points")
        for f in fixtures
        if f.involves(team_name)
    ]
    for f in fixtures:
        if f.involves(team_name):
            continue
        involved = [n for n in (f.home_team, f.away_team) if n in threats]
        if len(involved) == 2:
            results.append(
                RequiredResult(
                    f,
                    ResultTag.DRAW,
                    f"A draw stops both {f.home_team} and {f.away_team} catching {team_name}",
                )
            )
        elif involved:
            threat = involved[0]
            results.append(
                RequiredResult(
                    f,
                    _drop_points_tag(f, threat),
                    f"{f.opponent_of(threat)} must win or draw so {threat} drops points",
                )
            )
    return results


def key_fixtures(
    rounds: Sequence[Round], team_name: str, threats: Sequence[str]
) -> List[KeyFixture]:
    """Earlier-round fixtures that build the lead the clinch relies on.

    One entry per pairing of teams, at most three for ``team_name`` and three
    for each threat.
    """

    keys: List[KeyFixture] = []
    seen = set()
    used: Counter = Counter()

    for rnd in rounds:
        for f in rnd.fixtures:
            if f.pair in seen:
                continue
            if f.involves(team_name):
                if used[team_name] >= MAX_KEY_FIXTURES:
                    continue
                used[team_name] += 1
                keys.append(
                    KeyFixture(
                        f, _win_tag(f, team_name), f"{team_name} must win",
                        rnd.label, Importance.HIGH,
                    )
                )
                seen.add(f.pair)
                continue

            involved = [n for n in (f.home_team, f.away_team) if n in threats]
            if not involved or any(used[n] >= MAX_KEY_FIXTURES for n in involved):
                continue
            used.update(involved)
            if len(involved) == 2:
                keys.append(
                    KeyFixture(
                        f, ResultTag.DRAW,
                        f"{f.home_team} and {f.away_team} must both drop points",
                        rnd.label, Importance.HIGH,
                    )
                )
            else:
                threat = involved[0]
                keys.append(
                    KeyFixture(
                        f, _drop_points_tag(f, threat), f"{threat} must drop points",
                        rnd.label, Importance.MEDIUM,
                    )
                )
            seen.add(f.pair)
    return keys


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


def find_clinch_scenario(
    teams: Sequence[Team],
    fixtures: Sequence[Fixture],
    team_name: str,
    *,
    log: Optional[logging.Logger] = None,
) -> Optional[ClinchScenario]:
    """Return the earliest first-place clinch for ``team_name`` or ``None``.

    ``None`` covers an unknown team, a season with nothing left to play, and a
    team that cannot clinch even when every other result goes its way.
    """

    log = log if log is not None else logger

    snapshot = make_snapshot(teams)
    if team_name not in snapshot:
        log.debug("%s is not in the table", team_name)
        return None

    remaining = remaining_fixtures(fixtures)
    rounds = group_by_round(remaining)
    if not rounds:
        log.debug("No fixtures left to play")
        return None

    threats = classify_threats(snapshot, remaining, team_name)
    current_points = snapshot[team_name].points
    log.debug("Threats to %s: %s", team_name, threats)

    for idx, state in enumerate(walk_rounds(teams, rounds, team_name, threats)):
        log.debug(
            "Round %s: %s on %d, threat maximums %s",
            state.round.label,
            team_name,
            state.target_points,
            state.threat_max_points,
        )
        if not state.clinched:
            continue

        plays = any(f.involves(team_name) for f in state.round.fixtures)
        lead_before = state.before[team_name].points
        safe_gap = all(
            lead_before - state.before[name].points >= SAME_ROUND_GAP for name in threats
        )
        can_clinch_now = plays and safe_gap

        clinching = state.round
        following = next_round(rounds, state.round.label)
        if not can_clinch_now and following is not None:
            clinching = rounds[idx + 1]

        points_needed = max(
            [current_points] + [p + 1 for p in state.threat_max_points.values()]
        )
        earlier = [r for r in rounds if r.key < clinching.key]

        log.debug(
            "%s clinch proven after round %s, sealed in round %s",
            team_name,
            state.round.label,
            clinching.label,
        )
        return ClinchScenario(
            team=team_name,
            round=state.round.label,
            clinching_round=clinching.label,
            points_needed=points_needed,
            current_points=current_points,
            points_to_gain=points_needed - current_points,
            required_results=required_results(clinching.fixtures, team_name, threats),
            key_fixtures=key_fixtures(earlier, team_name, threats),
            threat_competitors=list(threats),
            can_clinch_in_current_round=can_clinch_now,
        )

    log.debug("%s cannot clinch first place in the remaining rounds", team_name)
    return None
