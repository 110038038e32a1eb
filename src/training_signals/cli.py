#!/usr/bin/env python3
"""
training-signals CLI.

Fitness index, pace zones, lap classification, per-workout signals and
load/fatigue indicators from exported workout data.

Usage:
    training-signals vdot --distance 5k --time 20:00
    training-signals zones --vdot 50 --temp 80 --humidity 70
    training-signals smooth --previous 45 --raw 50 --confidence high
    training-signals laps laps.json
    training-signals signals workouts.json --resting-hr 50 --age 40
    training-signals load workouts.json --as-of 2025-03-30
"""

import argparse
import json
import logging
import sys
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, List, Optional

from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.text import Text

from .analysis.fatigue import IndicatorStatus
from .config import get_settings
from .db.repositories import FitnessSignalRepository, FitnessStateRepository, WorkoutRepository
from .exceptions import TrainingSignalsError
from .metrics.laps import compute_lap_statistics, convert_raw_laps, get_fastest_work_pace
from .metrics.load import LoadStatus
from .metrics.pace import format_pace, format_pace_per_mile
from .metrics.vdot import (
    adjust_pace_zones_for_weather,
    calculate_pace_zones,
    get_pace_zone_descriptions,
    smooth_vdot,
)
from .models.workouts import ConfidenceTier, HeartRateContext, LapType, WorkoutRecord
from .services.fitness_signals import FitnessSignalService
from .services.training_load import TrainingLoadService
from .services.vdot_service import VDOTService

console = Console()


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def get_status_color(status: str) -> str:
    """Get rich color for a load or indicator status."""
    colors = {
        LoadStatus.UNDERTRAINED.value: "blue",
        LoadStatus.OPTIMAL.value: "green",
        LoadStatus.CAUTION.value: "yellow",
        LoadStatus.HIGH_RISK.value: "red",
        IndicatorStatus.GOOD.value: "green",
        IndicatorStatus.OK.value: "white",
        IndicatorStatus.WATCH.value: "yellow",
        IndicatorStatus.WARNING.value: "red",
    }
    return colors.get(status, "white")


def get_lap_color(lap_type: LapType) -> str:
    colors = {
        LapType.WARMUP: "blue",
        LapType.WORK: "red",
        LapType.RECOVERY: "green",
        LapType.COOLDOWN: "cyan",
        LapType.STEADY: "white",
    }
    return colors[lap_type]


def load_json(path: str) -> Any:
    with Path(path).open(encoding="utf-8") as f:
        return json.load(f)


def load_workouts(path: str) -> List[WorkoutRecord]:
    """Read a JSON list of workouts (camelCase or snake_case keys)."""
    data = load_json(path)
    if isinstance(data, dict):
        data = data.get("workouts", [])
    return [WorkoutRecord.model_validate(item) for item in data]


def parse_date_arg(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    return datetime.strptime(value, "%Y-%m-%d").date()


def cmd_vdot(args):
    """Calculate VDOT from a race result."""
    console.print()
    console.print(Panel("[bold]Training Signals - VDOT[/bold]"))
    console.print()

    service = VDOTService(FitnessStateRepository())
    result = service.calculate_vdot_from_race(args.distance, args.time, args.custom_m)

    console.print(
        f"[bold]{result['race_distance']}[/bold] in {result['race_time_formatted']} "
        f"-> VDOT [bold green]{result['vdot']:.1f}[/bold green]"
    )
    console.print()

    table = Table(title="Equivalent Race Times", box=box.ROUNDED)
    table.add_column("Distance", style="cyan")
    table.add_column("Time", justify="right")
    table.add_column("Pace", justify="right")
    for name, prediction in result["race_predictions"].items():
        table.add_row(name, prediction["time_formatted"], prediction["pace_formatted"])
    console.print(table)
    console.print()

    print_zones(calculate_pace_zones(result["vdot"]))


def print_zones(zones) -> None:
    table = Table(title=f"Training Paces (VDOT {zones.vdot:.1f})", box=box.ROUNDED)
    table.add_column("Zone", style="cyan")
    table.add_column("Pace", justify="right", style="bold")
    table.add_column("Effort")
    for description in get_pace_zone_descriptions(zones):
        table.add_row(description.zone, description.pace, description.effort_description)
    console.print(table)
    console.print(
        f"Easy range: {format_pace(zones.easy_range[0])} - "
        f"{format_pace_per_mile(zones.easy_range[1])}"
    )
    console.print()


def cmd_zones(args):
    """Show pace zones for a VDOT, optionally adjusted for weather."""
    console.print()
    console.print(Panel("[bold]Training Signals - Pace Zones[/bold]"))
    console.print()

    zones = calculate_pace_zones(args.vdot)
    if args.temp is not None and args.humidity is not None:
        zones = adjust_pace_zones_for_weather(zones, args.temp, args.humidity, args.dew_point)
        console.print(f"Adjusted for {args.temp:.0f}F / {args.humidity:.0f}% humidity")
    print_zones(zones)


def cmd_smooth(args):
    """Preview the smoothed VDOT for a new estimate."""
    confidence = ConfidenceTier(args.confidence)
    smoothed = smooth_vdot(args.previous, args.raw, confidence)
    if smoothed is None:
        console.print(f"[red]Estimate {args.raw} rejected (outside 15-85)[/red]")
        return
    console.print(
        f"VDOT {args.previous} -> raw {args.raw} ({confidence.value}) "
        f"-> [bold green]{smoothed:.1f}[/bold green]"
    )


def cmd_laps(args):
    """Classify laps from a JSON list of raw lap records."""
    console.print()
    console.print(Panel("[bold]Training Signals - Lap Classification[/bold]"))
    console.print()

    laps = convert_raw_laps(load_json(args.file))
    stats = compute_lap_statistics(laps)
    if stats is None:
        console.print("[yellow]Not enough valid laps to classify (need at least 2).[/yellow]")

    table = Table(title="Laps", box=box.ROUNDED)
    table.add_column("#", justify="right")
    table.add_column("Distance", justify="right")
    table.add_column("Pace", justify="right")
    table.add_column("Avg HR", justify="right")
    table.add_column("Type", style="bold")
    for lap in laps:
        table.add_row(
            str(lap.lap_index + 1),
            f"{lap.distance_miles:.2f} mi",
            format_pace_per_mile(lap.pace_seconds_per_mile),
            f"{lap.avg_heart_rate:.0f}" if lap.avg_heart_rate else "-",
            Text(lap.lap_type.value, style=get_lap_color(lap.lap_type)),
        )
    console.print(table)

    if stats is not None:
        shape = "interval" if stats.is_interval else "continuous"
        console.print(
            f"Shape: [bold]{shape}[/bold]  mean {format_pace(stats.mean_pace)}  "
            f"std {stats.std_dev:.1f}s"
        )
    fastest = get_fastest_work_pace(laps)
    console.print(f"Fastest work pace: {format_pace_per_mile(fastest) if fastest else '-'}")
    console.print()


def cmd_signals(args, settings):
    """Compute fitness signals for every workout in a JSON file."""
    console.print()
    console.print(Panel("[bold]Training Signals - Fitness Signals[/bold]"))
    console.print()

    # Workouts without a profile share the command-line HR context
    workouts = [
        w if w.profile_id is not None else w.model_copy(update={"profile_id": 0})
        for w in load_workouts(args.file)
    ]
    context = HeartRateContext(resting_hr=args.resting_hr, max_hr=args.max_hr, age=args.age)
    repository = WorkoutRepository(workouts)
    signals = FitnessSignalRepository()
    service = FitnessSignalService(
        repository,
        signals,
        hr_contexts={w.profile_id: context for w in workouts},
        settings=settings,
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Computing signals...", total=None)
        summary = service.backfill(force=True)
        progress.update(task, completed=True)

    table = Table(title="Fitness Signals", box=box.ROUNDED)
    table.add_column("Date", style="cyan")
    table.add_column("Type")
    table.add_column("VO2max", justify="right")
    table.add_column("EF", justify="right")
    table.add_column("HRR", justify="right")
    table.add_column("Weather adj.", justify="right")
    table.add_column("Elev adj.", justify="right")

    for workout in repository.list_between():
        record = signals.get(workout.id)
        if record is None:
            continue
        table.add_row(
            workout.date.isoformat(),
            workout.workout_type,
            f"{record.effective_vo2max:.1f}" if record.effective_vo2max is not None else "-",
            f"{record.efficiency_factor:.3f}" if record.efficiency_factor is not None else "-",
            f"{record.hr_reserve_pct:.0%}" if record.hr_reserve_pct is not None else "-",
            format_pace(record.weather_adjusted_pace) if record.weather_adjusted_pace else "-",
            format_pace(record.elevation_adjusted_pace) if record.elevation_adjusted_pace else "-",
        )
    console.print(table)
    console.print(
        f"Processed: {summary.processed}  Skipped: {summary.skipped}  "
        f"Errors: {summary.error_count}"
    )
    console.print()


def cmd_load(args, settings):
    """Show training load, fitness trend and fatigue indicators."""
    console.print()
    console.print(Panel("[bold]Training Signals - Load & Fatigue[/bold]"))
    console.print()

    repository = WorkoutRepository(load_workouts(args.file))
    service = TrainingLoadService(repository, settings=settings)
    as_of = parse_date_arg(args.as_of) or datetime.now(timezone.utc).date()

    window = service.get_load_window(as_of)
    table = Table(title=f"Training Load as of {as_of.isoformat()}", box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Acute load (7d)", f"{window.acute_load:.1f}")
    table.add_row("Previous 7d", f"{window.previous_acute_load:.1f}")
    table.add_row("Chronic load (weekly avg)", f"{window.chronic_load:.1f}")
    table.add_row("ACWR", f"{window.acwr:.2f}")
    table.add_row("Status", Text(window.status.value, style=get_status_color(window.status.value)))
    console.print(table)
    console.print(window.recommendation)
    console.print()

    trend = service.get_fitness_trend(as_of, weeks=args.weeks)
    if trend.has_sufficient_data:
        console.print(
            f"Fitness trend: [bold]{trend.trend}[/bold] "
            f"({trend.change_pct:+.1f}% pace per RPE point over {trend.weeks} weeks)"
        )
        console.print(trend.interpretation)
        if trend.pace_at_similar_effort:
            p = trend.pace_at_similar_effort
            console.print(
                f"Pace at RPE {p.at_rpe}: {format_pace(p.early_avg_pace)} -> "
                f"{format_pace(p.recent_avg_pace)} ({p.change_seconds:+d}s)"
            )
    else:
        console.print(f"[yellow]{trend.message}[/yellow]")
    console.print()

    fatigue = service.get_fatigue_indicators(as_of)
    if not fatigue.has_sufficient_data:
        console.print(f"[yellow]{fatigue.message}[/yellow]")
        console.print()
        return

    table = Table(title=f"Fatigue Indicators (last {fatigue.days} days)", box=box.ROUNDED)
    table.add_column("Indicator", style="cyan")
    table.add_column("Status", style="bold")
    table.add_column("Details")
    for signal in fatigue.signals:
        table.add_row(
            signal.indicator,
            Text(signal.status.value, style=get_status_color(signal.status.value)),
            signal.details,
        )
    console.print(table)
    console.print(f"Overall: [bold]{fatigue.overall_status.value}[/bold]. {fatigue.recommendation}")
    console.print()


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="training-signals - fitness and load signals from workout data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  training-signals vdot --distance half --time 1:45:00
  training-signals zones --vdot 48
  training-signals smooth --previous 45 --raw 50 --confidence high
  training-signals laps laps.json
  training-signals signals workouts.json --age 40
  training-signals load workouts.json --as-of 2025-03-30
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # VDOT command
    vdot_p = subparsers.add_parser("vdot", help="Calculate VDOT from a race result")
    vdot_p.add_argument("--distance", "-d", required=True, help="5k, 10k, 15k, 10mi, half, marathon or custom")
    vdot_p.add_argument("--time", "-t", required=True, help="Race time, e.g. '25:30' or '1:45:00'")
    vdot_p.add_argument("--custom-m", type=float, help="Distance in meters when --distance custom")

    # Zones command
    zones_p = subparsers.add_parser("zones", help="Show training paces for a VDOT")
    zones_p.add_argument("--vdot", type=float, required=True, help="VDOT value (15-85)")
    zones_p.add_argument("--temp", type=float, help="Temperature in F")
    zones_p.add_argument("--humidity", type=float, help="Relative humidity in %%")
    zones_p.add_argument("--dew-point", type=float, help="Dew point in F")

    # Smooth command
    smooth_p = subparsers.add_parser("smooth", help="Preview a smoothed VDOT update")
    smooth_p.add_argument("--previous", type=float, help="Current stored VDOT")
    smooth_p.add_argument("--raw", type=float, required=True, help="New raw estimate")
    smooth_p.add_argument(
        "--confidence",
        choices=[c.value for c in ConfidenceTier],
        default=ConfidenceTier.MEDIUM.value,
    )

    # Laps command
    laps_p = subparsers.add_parser("laps", help="Classify laps from a JSON file")
    laps_p.add_argument("file", help="JSON list of raw laps (distance, moving_time, ...)")

    # Signals command
    signals_p = subparsers.add_parser("signals", help="Compute per-workout fitness signals")
    signals_p.add_argument("file", help="JSON list of workouts")
    signals_p.add_argument("--resting-hr", type=int, help="Resting heart rate")
    signals_p.add_argument("--max-hr", type=int, help="Maximum heart rate")
    signals_p.add_argument("--age", type=int, help="Age in years")

    # Load command
    load_p = subparsers.add_parser("load", help="Show training load and fatigue")
    load_p.add_argument("file", help="JSON list of workouts with assessments")
    load_p.add_argument("--as-of", help="Last day of the window (YYYY-MM-DD), default today")
    load_p.add_argument("--weeks", "-w", type=int, help="Fitness trend window in weeks")

    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        if args.command == "vdot":
            cmd_vdot(args)
        elif args.command == "zones":
            cmd_zones(args)
        elif args.command == "smooth":
            cmd_smooth(args)
        elif args.command == "laps":
            cmd_laps(args)
        elif args.command == "signals":
            cmd_signals(args, settings)
        elif args.command == "load":
            cmd_load(args, settings)
        else:
            parser.print_help()
    except TrainingSignalsError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        sys.exit(1)
    except (OSError, ValueError, ValidationError) as e:
        console.print(f"[red]Error reading input: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
