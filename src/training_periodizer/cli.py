#!/usr/bin/env python3
"""
Training Periodizer CLI.

Expand program definitions and inspect prescriptions from the terminal.

Usage:
    training-periodizer expand --goal hypertrophy --level intermediate --weeks 8 --sessions 4 --cadence 4
    training-periodizer techniques --level advanced --goal strength --category compound
    training-periodizer prescribe --day-type strength --volume 1.1 --intensity 1.05
"""

import argparse
import json
import sys
from typing import List, Optional

from .config import get_settings
from .exceptions import PeriodizerError
from .models.program import ProgressionShape, SplitType, TrainingGoal, TrainingLevel
from .models.exercise import ExerciseCategory
from .models.schedule import DayType, Microcycle, PhaseTag, WeekMultipliers
from .services.prescription import PrescriptionRulesEngine
from .services.program_service import ProgramService


# ANSI color codes
class Colors:
    RED = "\033[91m"
    YELLOW = "\033[93m"
    GREEN = "\033[92m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


def get_phase_color(phase: PhaseTag) -> str:
    """Get color for a phase tag."""
    colors = {
        PhaseTag.ACCUMULATION: Colors.GREEN,
        PhaseTag.INTENSIFICATION: Colors.YELLOW,
        PhaseTag.DELOAD: Colors.BLUE,
        PhaseTag.MAINTENANCE: Colors.CYAN,
    }
    return colors.get(phase, Colors.RESET)


def format_week(microcycle: Microcycle) -> str:
    """One summary line for a week."""
    color = get_phase_color(microcycle.phase)
    days = " ".join(
        "-" if d.is_rest_day else (d.session_label or d.day_type.value)[:4]
        for d in microcycle.days
    )
    return (
        f"  {microcycle.week_index:>2}  {color}{microcycle.phase.value:<15}{Colors.RESET} "
        f"vol {microcycle.volume_multiplier:.3f}  int {microcycle.intensity_multiplier:.3f}  "
        f"{'DELOAD ' if microcycle.is_deload else '       '}{days}"
    )


def cmd_expand(args, service: ProgramService):
    """Expand a program definition and print its weeks."""
    program = service.create_program({
        "goal": args.goal,
        "level": args.level,
        "split": args.split,
        "duration_weeks": args.weeks,
        "sessions_per_week": args.sessions,
        "deload_cadence": args.cadence,
        "progression": args.progression,
        "include_techniques": not args.no_techniques,
    })

    if args.json:
        print(json.dumps(program.to_dict(), indent=2))
        return

    definition = program.definition
    print()
    print(f"{Colors.BOLD}Training Periodizer - Program{Colors.RESET}")
    print("=" * 40)
    print(f"Goal: {definition.goal.value}   Level: {definition.level.value}   Split: {definition.split.value}")
    print(f"Progression: {definition.progression.value}   Deload every: {definition.deload_cadence or 'never'}")
    print()
    for microcycle in program.microcycles:
        print(format_week(microcycle))

    if args.details:
        first = program.microcycles[0]
        print()
        print(f"{Colors.BOLD}Week 1 slots{Colors.RESET}")
        for day in first.training_days:
            print(f"  Day {day.position} ({day.day_type.value}, {day.session_label})")
            for slot in day.slots:
                first_set = slot.sets[0] if slot.sets else None
                target = (
                    f"{slot.set_count} x {first_set.rep_range} @ RIR {first_set.target_rir}, "
                    f"rest {first_set.rest_seconds}s"
                    if first_set else "no sets"
                )
                technique = f"  [{slot.technique}]" if slot.technique else ""
                print(f"    {slot.slot_id}  {slot.exercise_id:<24} {target}{technique}")

    if program.skipped_slots:
        print()
        print(f"{Colors.YELLOW}Skipped {len(program.skipped_slots)} slot(s) with unknown exercises{Colors.RESET}")
    print()


def cmd_techniques(args, service: ProgramService):
    """List techniques suitable for a level, goal and exercise category."""
    techniques = service.recommend_techniques(args.level, args.goal, args.category)

    print()
    print(f"{Colors.BOLD}Techniques for {args.level} / {args.goal} / {args.category}{Colors.RESET}")
    print("=" * 40)
    if not techniques:
        print("No suitable techniques.")
    for technique in techniques:
        low, high = technique.rep_range
        print(
            f"  {technique.name:<22} {technique.category.value:<19} "
            f"{technique.difficulty.value:<13} reps {low}-{high}, "
            f"max {technique.weekly_ceiling}/week"
        )
    print()


def cmd_prescribe(args, engine: PrescriptionRulesEngine):
    """Print the set targets for one day type."""
    sets = engine.prescribe(
        DayType(args.day_type),
        args.deload,
        WeekMultipliers(volume=args.volume, intensity=args.intensity),
    )

    print()
    label = f"{args.day_type}{' (deload)' if args.deload else ''}"
    print(f"{Colors.BOLD}Prescription - {label}{Colors.RESET}")
    print("=" * 40)
    if not sets:
        print("Rest day: no sets.")
    for s in sets:
        print(f"  Set {s.set_number}: {s.rep_range} reps @ RIR {s.target_rir}, rest {s.rest_seconds}s")
    print()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="training-periodizer",
        description="Training Periodizer - periodized programs and set prescriptions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  training-periodizer expand --goal hypertrophy --level intermediate --weeks 8 --sessions 4 --cadence 4 --progression wave
  training-periodizer techniques --level beginner --goal strength --category compound
  training-periodizer prescribe --day-type strength --deload
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Expand command
    expand_p = subparsers.add_parser("expand", help="Expand a program definition")
    expand_p.add_argument("--goal", choices=[g.value for g in TrainingGoal], required=True)
    expand_p.add_argument("--level", choices=[lv.value for lv in TrainingLevel], required=True)
    expand_p.add_argument("--split", choices=[s.value for s in SplitType], default="full_body")
    expand_p.add_argument("--weeks", "-w", type=int, required=True, help="Duration in weeks")
    expand_p.add_argument("--sessions", "-s", type=int, required=True, help="Sessions per week")
    expand_p.add_argument("--cadence", "-c", type=int, default=0, help="Weeks between deloads, 0 for none")
    expand_p.add_argument(
        "--progression",
        choices=[p.value for p in ProgressionShape],
        default="linear",
    )
    expand_p.add_argument("--details", action="store_true", help="Show week 1 exercise slots")
    expand_p.add_argument("--no-techniques", action="store_true", help="Do not annotate techniques")
    expand_p.add_argument("--json", action="store_true", help="Print the full schedule as JSON")

    # Techniques command
    tech_p = subparsers.add_parser("techniques", help="List suitable intensification techniques")
    tech_p.add_argument("--level", choices=[lv.value for lv in TrainingLevel], required=True)
    tech_p.add_argument("--goal", choices=[g.value for g in TrainingGoal], required=True)
    tech_p.add_argument("--category", choices=[c.value for c in ExerciseCategory], default="compound")

    # Prescribe command
    presc_p = subparsers.add_parser("prescribe", help="Show set targets for a day type")
    presc_p.add_argument("--day-type", choices=[d.value for d in DayType], required=True)
    presc_p.add_argument("--deload", action="store_true", help="Apply deload adjustments")
    presc_p.add_argument("--volume", type=float, default=1.0, help="Volume multiplier")
    presc_p.add_argument("--intensity", type=float, default=1.0, help="Intensity multiplier")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "expand":
            cmd_expand(args, ProgramService(settings=get_settings()))
        elif args.command == "techniques":
            cmd_techniques(args, ProgramService(settings=get_settings()))
        elif args.command == "prescribe":
            cmd_prescribe(args, PrescriptionRulesEngine())
        else:
            parser.print_help()
    except PeriodizerError as e:
        print(f"{Colors.RED}Error: {e.message}{Colors.RESET}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
