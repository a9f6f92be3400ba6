import sys, os; sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))
import numpy as np
import pandas as pd
import pytest

from leaguesim import Team, Fixture, rank, standings_frame, teams_from_results
from leaguesim.standings import (
    MatchResult,
    Outcome,
    advance,
    apply_result,
    make_snapshot,
    position_of,
    remaining_counts,
    remaining_fixtures,
    resolve_fixture,
)


def test_rank_points_then_goal_difference():
    a = Team("A", points=10, goals_for=5, goals_against=3)
    b = Team("B", points=10, goals_for=4, goals_against=1)
    c = Team("C", points=9, goals_for=9, goals_against=0)
    assert [t.name for t in rank([a, b, c])] == ["B", "A", "C"]


def test_rank_goals_for_breaks_goal_difference_tie():
    a = Team("A", points=7, goals_for=3, goals_against=1)
    b = Team("B", points=7, goals_for=6, goals_against=4)
    assert [t.name for t in rank([a, b])] == ["B", "A"]


def test_rank_keeps_input_order_for_full_ties():
    teams = [Team(name, points=4, goals_for=2, goals_against=2) for name in "ZYX"]
    assert [t.name for t in rank(teams)] == ["Z", "Y", "X"]


def test_position_of_unknown_team():
    assert position_of([Team("A")], "B") is None
    assert position_of([Team("A", points=1), Team("B", points=3)], "A") == 2


def test_clone_is_equal_and_independent():
    team = Team("A", played=3, won=1, drawn=1, lost=1, goals_for=4, goals_against=4, points=4)
    copy = team.clone()
    assert copy == team
    assert copy is not team


def test_apply_result_keeps_played_in_step():
    team = Team("A", played=2, won=1, lost=1, points=3)
    win = apply_result(team, MatchResult.WIN)
    draw = apply_result(team, MatchResult.DRAW)
    loss = apply_result(team, MatchResult.LOSS)
    assert (win.played, win.won, win.points) == (3, 2, 6)
    assert (draw.played, draw.drawn, draw.points) == (3, 1, 4)
    assert (loss.played, loss.lost, loss.points) == (3, 2, 3)
    for t in (win, draw, loss):
        assert t.played == t.won + t.drawn + t.lost
    assert team.played == 2


def test_advance_applies_outcome():
    team = Team("A", played=1, won=1, points=3)
    moved = advance(team, Outcome(2, 1, 3))
    assert moved.points == 3 + 7
    assert moved.played == 7
    assert (moved.won, moved.drawn, moved.lost) == (3, 1, 3)


def test_resolve_fixture_updates_both_sides_without_mutation():
    snapshot = make_snapshot([Team("A"), Team("B")])
    fixture = Fixture("A", "B")
    after = resolve_fixture(snapshot, fixture, MatchResult.LOSS)
    assert after["A"].lost == 1 and after["A"].points == 0
    assert after["B"].won == 1 and after["B"].points == 3
    assert snapshot["A"].played == 0 and snapshot["B"].played == 0


def test_resolve_fixture_skips_unknown_team():
    snapshot = make_snapshot([Team("A")])
    after = resolve_fixture(snapshot, Fixture("A", "Guest"), MatchResult.DRAW)
    assert set(after) == {"A"}
    assert after["A"].points == 1


def test_remaining_helpers():
    fixtures = [
        Fixture("A", "B", played=True, home_goals=1, away_goals=0),
        Fixture("A", "C"),
        Fixture("C", "B"),
    ]
    assert remaining_fixtures(fixtures) == fixtures[1:]
    assert remaining_counts(fixtures) == {"A": 1, "C": 2, "B": 1}


def test_fixture_opponent():
    fixture = Fixture("A", "B")
    assert fixture.opponent_of("A") == "B"
    assert fixture.opponent_of("B") == "A"
    with pytest.raises(ValueError):
        fixture.opponent_of("C")


def test_teams_from_results():
    data = [
        {"home_team": "A", "away_team": "B", "home_goals": 2, "away_goals": 0},
        {"home_team": "B", "away_team": "C", "home_goals": 1, "away_goals": 1},
        {"home_team": "C", "away_team": "A", "home_goals": np.nan, "away_goals": np.nan},
    ]
    teams = {t.name: t for t in teams_from_results(pd.DataFrame(data))}
    assert teams["A"] == Team("A", played=1, won=1, goals_for=2, goals_against=0, points=3)
    assert teams["B"].played == 2 and teams["B"].points == 1 and teams["B"].goal_difference == -2
    assert teams["C"].drawn == 1 and teams["C"].points == 1


def test_teams_from_results_without_played_games():
    data = [{"home_team": "A", "away_team": "B", "home_goals": np.nan, "away_goals": np.nan}]
    teams = teams_from_results(pd.DataFrame(data))
    assert [t.name for t in teams] == ["A", "B"]
    assert all(t.points == 0 for t in teams)


def test_standings_frame_positions():
    teams = [Team("A", points=1), Team("B", points=6), Team("C", points=3)]
    table = standings_frame(teams)
    assert list(table["team"]) == ["B", "C", "A"]
    assert list(table["position"]) == [1, 2, 3]
    assert {"goal_difference", "points"}.issubset(table.columns)
