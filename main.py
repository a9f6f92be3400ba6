"""Command-line interface for league position and clinch projections."""

# pylint: disable=wrong-import-position

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "src"))

import argparse
import logging

import numpy as np
import pandas as pd

from leaguesim import (
    DEFAULT_ITERATIONS,
    DEFAULT_JOBS,
    DEFAULT_TABLE_ITERATIONS,
    SimulationMethod,
    compute_clinch_scenario,
    compute_position_probability,
    compute_projected_table,
    standings_frame,
    teams_from_results,
)
from leaguesim.exact import ExactResult
from leaguesim.io import fixtures_from_frame, load_teams, read_fixture_frame


def _print_clinch(scenario) -> None:
    if scenario is None:
        print("No first-place clinch is possible in the remaining rounds.")
        return
    print(
        f"Clinch proven after round {scenario.round}, sealed in round "
        f"{scenario.clinching_round}"
    )
    print(
        f"Points needed {scenario.points_needed} "
        f"(currently {scenario.current_points}, +{scenario.points_to_gain})"
    )
    print(f"Threats: {', '.join(scenario.threat_competitors) or '-'}")
    for req in scenario.required_results:
        f = req.fixture
        print(f"  {f.home_team} v {f.away_team}: {req.result.value} - {req.explanation}")
    if scenario.key_fixtures:
        print("Key fixtures from earlier rounds:")
        for key in scenario.key_fixtures:
            f = key.fixture
            print(
                f"  [{key.round}] {f.home_team} v {f.away_team}: {key.result.value} "
                f"({key.importance.value}) - {key.explanation}"
            )


def main() -> None:
    parser = argparse.ArgumentParser(description="Project league finishing positions")
    parser.add_argument("--fixtures", required=True, help="fixtures CSV path")
    parser.add_argument(
        "--teams",
        default=None,
        help="teams CSV path (default: derive the table from played fixtures)",
    )
    parser.add_argument("--team", required=True, help="team to analyse")
    parser.add_argument("--position", type=int, default=1, help="target final position")
    parser.add_argument(
        "--method",
        choices=[m.value for m in SimulationMethod],
        default=SimulationMethod.EXACT.value,
        help="probability method; exact falls back to Monte Carlo for long schedules",
    )
    parser.add_argument(
        "--simulations",
        type=int,
        default=DEFAULT_ITERATIONS,
        help="number of Monte Carlo runs for the position probability",
    )
    parser.add_argument(
        "--table-simulations",
        type=int,
        default=DEFAULT_TABLE_ITERATIONS,
        help="number of Monte Carlo runs for the projected table",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="random seed for repeatable simulations",
    )
    parser.add_argument(
        "--no-progress",
        action="store_false",
        dest="progress",
        default=True,
        help="disable the progress bar during simulations",
    )
    parser.add_argument(
        "--jobs",
        type=int,
        default=DEFAULT_JOBS,
        help="number of parallel workers",
    )
    parser.add_argument(
        "--html-output",
        default=None,
        help="path to save the projected table as HTML",
    )
    parser.add_argument("--verbose", action="store_true", help="log clinch search details")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        frame = read_fixture_frame(args.fixtures)
        fixtures = fixtures_from_frame(frame)
        teams = load_teams(args.teams) if args.teams else teams_from_results(frame)
    except (OSError, ValueError) as exc:
        parser.error(str(exc))

    if args.team not in {t.name for t in teams}:
        parser.error(f"unknown team: {args.team}")
    if not 1 <= args.position <= len(teams):
        parser.error(f"position must be between 1 and {len(teams)}")

    rng = np.random.default_rng(args.seed) if args.seed is not None else None

    print(standings_frame(teams).to_string(index=False))
    print()

    try:
        result = compute_position_probability(
            teams,
            fixtures,
            args.team,
            args.position,
            method=args.method,
            iterations=args.simulations,
            rng=rng,
            progress=args.progress,
            n_jobs=args.jobs,
        )
        if args.position == 1:
            scenario = compute_clinch_scenario(teams, fixtures, args.team)
        projected = compute_projected_table(
            teams,
            fixtures,
            args.table_simulations,
            rng=rng,
            progress=args.progress,
            n_jobs=args.jobs,
        )
    except ValueError as exc:
        parser.error(str(exc))

    label = "exact" if isinstance(result, ExactResult) else "Monte Carlo"
    print(f"{args.team} finishes {args.position}: {result.probability:.2f}% ({label})")
    if args.position == 1:
        print()
        _print_clinch(scenario)

    table = pd.DataFrame([row.to_dict() for row in projected])
    print()
    print(
        table[
            ["projected_position", "team", "current_position", "projected_points", "probability"]
        ].to_string(index=False)
    )
    if args.html_output:
        table.to_html(args.html_output, index=False)


if __name__ == "__main__":
    main()
