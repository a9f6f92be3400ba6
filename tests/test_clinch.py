import sys, os; sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))
import logging

from leaguesim import Fixture, RoundInfo, Team, find_clinch_scenario
from leaguesim.clinch import (
    Importance,
    ResultTag,
    classify_threats,
    key_fixtures,
    walk_rounds,
)
from leaguesim.rounds import UNSCHEDULED_LABEL, group_by_round
from leaguesim.standings import make_snapshot


def fixture(home, away, rnd):
    return Fixture(home, away, round_info=RoundInfo(rnd))


def table(**points):
    return [Team(name, points=p) for name, p in points.items()]


def standard_case():
    teams = table(A=40, B=34, C=20, D=20)
    fixtures = [
        fixture("A", "C", 1), fixture("B", "D", 1),
        fixture("A", "D", 2), fixture("B", "C", 2),
        fixture("C", "A", 3), fixture("D", "B", 3),
        fixture("D", "A", 4), fixture("C", "B", 4),
    ]
    return teams, fixtures


def test_standard_clinch():
    teams, fixtures = standard_case()
    scenario = find_clinch_scenario(teams, fixtures, "A")
    assert scenario is not None
    assert scenario.round == 2
    assert scenario.clinching_round == 2
    assert scenario.can_clinch_in_current_round
    assert (scenario.current_points, scenario.points_needed, scenario.points_to_gain) == (40, 41, 1)
    assert scenario.threat_competitors == ["B"]

    required = [(r.fixture.home_team, r.fixture.away_team, r.result) for r in scenario.required_results]
    assert required == [
        ("A", "D", ResultTag.HOME_WIN),
        ("B", "C", ResultTag.AWAY_WIN_OR_DRAW),
    ]
    assert scenario.required_results[0].explanation == "A must win to gain 3 points"
    assert scenario.required_results[1].explanation == "C must win or draw so B drops points"

    keys = [(k.fixture.home_team, k.fixture.away_team, k.result, k.importance, k.round) for k in scenario.key_fixtures]
    assert keys == [
        ("A", "C", ResultTag.HOME_WIN, Importance.HIGH, 1),
        ("B", "D", ResultTag.AWAY_WIN_OR_DRAW, Importance.MEDIUM, 1),
    ]


def test_scenario_to_dict():
    teams, fixtures = standard_case()
    data = find_clinch_scenario(teams, fixtures, "A").to_dict()
    assert data["round"] == 2
    assert data["required_results"][0]["result"] == "home_win"
    assert data["key_fixtures"][1]["importance"] == "medium"
    assert data["threat_competitors"] == ["B"]


def test_clinch_sealed_in_following_round():
    teams = table(A=40, B=38, C=10, D=10)
    fixtures = [
        fixture("B", "C", 1),
        fixture("D", "B", 2), fixture("A", "C", 2),
        fixture("A", "D", 3),
    ]
    scenario = find_clinch_scenario(teams, fixtures, "A")
    assert scenario.round == 2
    assert scenario.clinching_round == 3
    assert not scenario.can_clinch_in_current_round
    assert scenario.points_to_gain == 0
    assert [r.result for r in scenario.required_results] == [ResultTag.HOME_WIN]
    assert [(k.fixture.home_team, k.result) for k in scenario.key_fixtures] == [
        ("B", ResultTag.AWAY_WIN_OR_DRAW),
        ("D", ResultTag.HOME_WIN_OR_DRAW),
        ("A", ResultTag.HOME_WIN),
    ]


def test_already_clear_of_everyone():
    teams = table(A=30, B=12, C=10)
    fixtures = [fixture("A", "B", 1), fixture("B", "C", 2), fixture("C", "A", 3)]
    scenario = find_clinch_scenario(teams, fixtures, "A")
    assert scenario.round == 1
    assert scenario.points_to_gain == 0
    assert scenario.can_clinch_in_current_round
    assert scenario.required_results[0].result == ResultTag.HOME_WIN
    assert scenario.key_fixtures == []
    # Nobody is a real threat so the leader stands in.
    assert scenario.threat_competitors == ["B"]


def test_team_without_rivals():
    scenario = find_clinch_scenario([Team("A", points=5)], [fixture("A", "Guest", 1)], "A")
    assert scenario is not None
    assert scenario.points_to_gain == 0
    assert scenario.threat_competitors == []


def test_cannot_clinch():
    teams = table(A=30, B=45, C=44, D=0, E=0)
    fixtures = [
        fixture("A", "D", 1), fixture("B", "E", 1),
        fixture("E", "A", 2), fixture("C", "D", 2),
        fixture("A", "E", 3), fixture("B", "C", 3),
    ]
    assert find_clinch_scenario(teams, fixtures, "A") is None


def test_unknown_team_or_nothing_left():
    teams, fixtures = standard_case()
    assert find_clinch_scenario(teams, fixtures, "Z") is None
    played = [Fixture("A", "B", played=True, home_goals=1, away_goals=0, round_info=RoundInfo(1))]
    assert find_clinch_scenario(teams, played, "A") is None


def test_result_does_not_depend_on_names():
    teams, fixtures = standard_case()
    names = {"A": "Rovers", "B": "United", "C": "City", "D": "Athletic"}
    renamed_teams = [Team(names[t.name], points=t.points) for t in teams]
    renamed_fixtures = [
        Fixture(names[f.home_team], names[f.away_team], round_info=f.round_info) for f in fixtures
    ]
    original = find_clinch_scenario(teams, fixtures, "A")
    renamed = find_clinch_scenario(renamed_teams, renamed_fixtures, "Rovers")
    assert (renamed.round, renamed.points_needed) == (original.round, original.points_needed)
    assert renamed.threat_competitors == [names[n] for n in original.threat_competitors]
    assert [r.result for r in renamed.required_results] == [r.result for r in original.required_results]


def test_elimination_is_monotonic():
    teams, fixtures = standard_case()
    rounds = group_by_round(fixtures)
    states = list(walk_rounds(teams, rounds, "A", ["B", "C"]))
    assert len(states) == 4
    for earlier, later in zip(states, states[1:]):
        assert set(earlier.eliminated()) <= set(later.eliminated())
    assert not states[0].clinched
    assert states[-1].clinched


def test_threat_bands():
    teams = table(A=50, B=48, C=45, D=42, E=39)
    names = [t.name for t in teams]
    fixtures = [Fixture(h, a) for h in names for a in names if h != a]
    assert classify_threats(make_snapshot(teams), fixtures, "A") == ["B", "C"]


def test_leader_only_band():
    teams = table(A=50, B=40, C=39)
    fixtures = [Fixture(h, a) for h in "ABC" for a in "ABC" if h != a] * 3
    assert classify_threats(make_snapshot(teams), fixtures, "A") == ["B"]


def test_rivals_ahead_are_threats():
    teams = table(A=40, B=45, C=50)
    fixtures = [Fixture("A", "B"), Fixture("B", "C")]
    assert classify_threats(make_snapshot(teams), fixtures, "A") == ["C", "B"]


def test_rival_out_of_reach_is_not_a_threat():
    teams = table(A=50, B=48, C=47, D=0)
    fixtures = [Fixture("A", "C"), Fixture("C", "D")]
    assert classify_threats(make_snapshot(teams), fixtures, "A") == ["C"]


def test_falls_back_to_leader():
    teams = table(A=50, B=30, C=20)
    fixtures = [Fixture("B", "C")] * 10
    assert classify_threats(make_snapshot(teams), fixtures, "A") == ["B"]


def test_key_fixtures_dedupe_and_cap():
    fixtures = [
        fixture("A", "C", 1), fixture("B", "D", 1),
        fixture("C", "A", 2), fixture("A", "E", 2),
        fixture("F", "A", 3), fixture("A", "G", 3),
    ]
    keys = key_fixtures(group_by_round(fixtures), "A", ["B", "D"])
    pairs = [(k.fixture.home_team, k.fixture.away_team) for k in keys]
    assert pairs == [("A", "C"), ("B", "D"), ("A", "E"), ("F", "A")]
    assert keys[1].result == ResultTag.DRAW
    assert keys[1].importance == Importance.HIGH
    assert keys[3].result == ResultTag.AWAY_WIN


def test_date_based_rounds():
    teams, fixtures = standard_case()
    labels = {1: "Mar 2", 2: "Mar 9", 3: "Mar 16", 4: "Mar 23"}
    dated = [
        Fixture(f.home_team, f.away_team, round_info=RoundInfo(labels[f.round_info.round], is_date_based=True))
        for f in fixtures
    ]
    scenario = find_clinch_scenario(teams, dated, "A")
    assert scenario.round == "Mar 9"
    assert [k.round for k in scenario.key_fixtures] == ["Mar 2", "Mar 2"]


def test_injected_logger(caplog):
    log = logging.getLogger("clinch.test")
    caplog.set_level(logging.DEBUG, logger="clinch.test")
    teams, fixtures = standard_case()
    find_clinch_scenario(teams, fixtures, "A", log=log)
    assert any(r.name == "clinch.test" for r in caplog.records)


def test_proven_in_last_round_is_sealed_there():
    teams = table(A=40, B=38, C=10, D=10)
    fixtures = [fixture("A", "C", 1), fixture("B", "D", 1)]
    scenario = find_clinch_scenario(teams, fixtures, "A")
    assert scenario.round == 1
    assert scenario.clinching_round == 1
    assert not scenario.can_clinch_in_current_round
    assert scenario.key_fixtures == []


def test_fixtures_without_rounds_form_one_round():
    teams, fixtures = standard_case()
    unscheduled = [Fixture(f.home_team, f.away_team) for f in fixtures]
    scenario = find_clinch_scenario(teams, unscheduled, "A")
    assert scenario.round == UNSCHEDULED_LABEL
    assert scenario.clinching_round == UNSCHEDULED_LABEL
    assert scenario.can_clinch_in_current_round
    assert scenario.points_to_gain == 0
    assert [r.result for r in scenario.required_results[:4]] == [
        ResultTag.HOME_WIN, ResultTag.HOME_WIN, ResultTag.AWAY_WIN, ResultTag.AWAY_WIN,
    ]
    assert len(scenario.required_results) == 8
