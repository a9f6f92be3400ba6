import sys, os; sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))
from datetime import datetime

import pandas as pd
import pytest

from leaguesim import load_fixtures, load_teams, reset_results_from, teams_from_results
from leaguesim.io import read_fixture_frame

TEAMS_CSV = """name,played,won,drawn,lost,goals_for,goals_against,points
Lions,2,1,1,0,3,1,4
Tigers,2,0,1,1,1,3,1
"""

FIXTURES_CSV = """home_team,away_team,home_goals,away_goals,round,date
Lions,Tigers,2,0,1,2025-03-14
Tigers,Bears,1,1,1,2025-03-14
Bears,Lions,,,2,2025-03-21
Lions,Tigers,,,,2025-03-28
"""


def write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text)
    return path


def test_load_teams(tmp_path):
    teams = load_teams(write(tmp_path, "teams.csv", TEAMS_CSV))
    assert [t.name for t in teams] == ["Lions", "Tigers"]
    assert teams[0].points == 4 and teams[0].goal_difference == 2


def test_load_teams_missing_column(tmp_path):
    path = write(tmp_path, "teams.csv", "name,points\nLions,4\n")
    with pytest.raises(ValueError, match="missing columns"):
        load_teams(path)


def test_load_teams_duplicate(tmp_path):
    path = write(tmp_path, "teams.csv", TEAMS_CSV + "Lions,0,0,0,0,0,0,0\n")
    with pytest.raises(ValueError):
        load_teams(path)


def test_load_fixtures(tmp_path):
    fixtures = load_fixtures(write(tmp_path, "fixtures.csv", FIXTURES_CSV))
    assert [f.played for f in fixtures] == [True, True, False, False]
    assert (fixtures[0].home_goals, fixtures[0].away_goals) == (2, 0)
    assert fixtures[2].round_info.round == 2
    assert not fixtures[2].round_info.is_date_based
    assert fixtures[3].round_info.round == "Mar 28"
    assert fixtures[3].round_info.is_date_based
    assert fixtures[3].date == datetime(2025, 3, 28)


def test_fixtures_without_round_or_date(tmp_path):
    path = write(tmp_path, "fixtures.csv", "home_team,away_team,home_goals,away_goals\nA,B,,\n")
    (fixture,) = load_fixtures(path)
    assert fixture.round_info is None
    assert not fixture.played


def test_table_from_fixture_file(tmp_path):
    df = read_fixture_frame(write(tmp_path, "fixtures.csv", FIXTURES_CSV))
    teams = {t.name: t for t in teams_from_results(df)}
    assert teams["Lions"].points == 3
    assert teams["Tigers"].points == 1 and teams["Tigers"].played == 2
    assert teams["Bears"].played == 1


def test_reset_results_from(tmp_path):
    df = read_fixture_frame(write(tmp_path, "fixtures.csv", FIXTURES_CSV))
    reset = reset_results_from(df, "2025-03-14")
    assert reset["home_goals"].isna().all()
    assert df["home_goals"].notna().sum() == 2
    partial = reset_results_from(df, "2025-03-15")
    assert partial["home_goals"].notna().sum() == 2


def test_reset_needs_dates():
    df = pd.DataFrame({"home_team": ["A"], "away_team": ["B"], "home_goals": [1], "away_goals": [0]})
    with pytest.raises(ValueError):
        reset_results_from(df, "2025-01-01")
