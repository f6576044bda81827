"""
Print a text report for one group: standings, next-round scenarios for a team,
and the season forecast.

    python -m tournament_engine.run_report --data-dir data --group A --team t1
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

from tournament_engine.config import EngineConfig
from tournament_engine.models import StandingRow
from tournament_engine.persistence import load_tournament
from tournament_engine.scenarios.schemas import Scenario
from tournament_engine.services.analysis_service import AnalysisService, GroupNotFoundError, TeamNotFoundError
from tournament_engine.services.forecast import SeasonForecast


def _print_standings(rows: list[StandingRow]) -> None:
    print(f"  {'#':>2}  {'Team':<20} {'P':>2} {'W':>2} {'D':>2} {'L':>2} {'GF':>3} {'GA':>3} {'GD':>4} {'Pts':>4}  Form")
    for i, r in enumerate(rows, start=1):
        form = "".join(o.value for o in r.history[-5:])
        print(
            f"  {i:>2}  {r.name:<20} {r.played:>2} {r.wins:>2} {r.draws:>2} {r.losses:>2} "
            f"{r.goals_for:>3} {r.goals_against:>3} {r.goal_difference:>+4} {r.points:>4}  {form}"
        )


def _print_scenarios(scenarios: list[Scenario]) -> None:
    for s in scenarios:
        print(f"  [{s.probability.value:>6}] {s.title}")
        print(f"           {s.description}")
        for req in s.requirements:
            print(f"           - {req}")
        for note in s.tie_break_notes:
            print(f"           ! {note}")


def _print_forecast(forecast: SeasonForecast) -> None:
    if not forecast.has_data:
        print("  No data.")
        return
    print(f"  {'#':>2}  {'Team':<20} {'Now':>4} {'Proj':>5} {'Max':>4} {'Title %':>8}")
    for i, p in enumerate(forecast.projections, start=1):
        flag = " (out)" if p.eliminated else ""
        print(
            f"  {i:>2}  {p.name:<20} {p.current_points:>4} {p.projected_points:>5} "
            f"{p.max_points:>4} {p.qualification_probability:>7}%{flag}"
        )


def run(
    data_dir: Path,
    group_id: str | None = None,
    team_id: str | None = None,
    gap: int | None = None,
) -> None:
    data = load_tournament(data_dir)
    service = AnalysisService(data, EngineConfig.from_env())
    group_id = group_id or data.default_group_id
    if group_id is None:
        raise SystemExit(f"No groups found in {data_dir}")

    try:
        status = service.group_status(group_id)
        standings = service.standings(group_id)
    except GroupNotFoundError as e:
        raise SystemExit(str(e))

    print()
    print("=" * 60)
    print(f"  GROUP {group_id}  round {status['current_round']}  {'completed' if status['completed'] else 'in progress'}")
    print("=" * 60)
    _print_standings(standings)

    if team_id:
        print()
        print(f"  Next round scenarios for {team_id}:")
        try:
            _print_scenarios(service.scenarios(group_id, team_id, points_gap_limit=gap))
        except TeamNotFoundError as e:
            raise SystemExit(str(e))

    print()
    print("  Season forecast:")
    _print_forecast(service.forecast(group_id))
    print()


def main() -> None:
    parser = argparse.ArgumentParser(description="Standings, scenarios and forecast for one group")
    parser.add_argument("--data-dir", type=Path, default=Path("data"), help="Directory with the tournament JSON files")
    parser.add_argument("--group", type=str, default=None, help="Group id (default: defaultGroup or first group)")
    parser.add_argument("--team", type=str, default=None, help="Team id for next-round scenarios")
    parser.add_argument("--gap", type=int, default=None, help="Points gap limit for relevant teams")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log skipped records and load details")
    args = parser.parse_args()
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if not args.data_dir.is_dir():
        raise SystemExit(f"Data directory not found: {args.data_dir}")
    run(args.data_dir, group_id=args.group, team_id=args.team, gap=args.gap)


if __name__ == "__main__":
    main()
