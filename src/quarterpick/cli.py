"""
QuarterPick CLI

Command-line host for the selection rule engine. Selection state lives in
a JSON file holding the exported engine state; every command that changes
it writes it back.

Usage:
    quarterpick classify 2024-02-05
    quarterpick holidays 2024
    quarterpick check 2024-04-08 --state picks.json
    quarterpick select 2024-02-05 --state picks.json
    quarterpick select 2024-03-12 --kind fine --state picks.json
    quarterpick remove 2024-02-05 --yes --state picks.json
    quarterpick block 2024-07-01 --state picks.json
    quarterpick valid-days --start 2024-01-01 --months 3 --state picks.json
    quarterpick reconcile --state picks.json
    quarterpick validate-pack --pack packs/us_quarterly.yaml

Exit Codes:
    0   OK                     - Command succeeded / date is valid
    2   REJECTED               - Date rejected by the selection rules
    3   CONFIRMATION_REQUIRED  - Removal cascades; rerun with --yes
    4   NOT_FOUND              - Date is not selected
    10  INPUT_INVALID          - Invalid date argument or state file
    11  PACK_ERROR             - Rule pack loading/validation failed
    20  INTERNAL_ERROR         - Unexpected internal error
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import MAXYEAR, MINYEAR, date
from pathlib import Path
from typing import Any, Optional

from . import __version__
from .exceptions import (
    QuarterPickError,
    RulePackLoadError,
    RulePackValidationError,
    RulePackVersionMismatch,
    SelectionNotFoundError,
    StateValidationError,
)
from .calendars import WEEKDAY_NAMES, day_of_week
from .engine import SelectionEngine
from .models import (
    DEFAULT_RULES,
    Mode,
    QuarterlyOnly,
    QuarterlyPlusMonthly,
    SelectionKind,
    parse_calendar_date,
)
from .packs import RulePackLoader

logger = logging.getLogger(__name__)

DEFAULT_STATE_FILE = "quarterpick-state.json"


# ============================================================================
# EXIT CODES
# ============================================================================

class ExitCode:
    """Deterministic exit codes for scripting."""
    OK = 0
    REJECTED = 2               # Rule rejection
    CONFIRMATION_REQUIRED = 3  # Cascading removal needs --yes
    NOT_FOUND = 4              # Date not selected
    INPUT_INVALID = 10         # Bad arguments or state file
    PACK_ERROR = 11            # Rule pack loading/validation failed
    INTERNAL_ERROR = 20        # Unexpected error


# ============================================================================
# OUTPUT FORMATTING
# ============================================================================

class Colors:
    """ANSI color codes for terminal output."""
    CYAN = '\033[96m'
    BLUE = '\033[94m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BOLD = '\033[1m'
    END = '\033[0m'

    @classmethod
    def disable(cls):
        cls.CYAN = ''
        cls.BLUE = ''
        cls.GREEN = ''
        cls.YELLOW = ''
        cls.RED = ''
        cls.BOLD = ''
        cls.END = ''


def print_header(text: str):
    print(f"\n{Colors.BOLD}{Colors.CYAN}{'='*60}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.CYAN}{text}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.CYAN}{'='*60}{Colors.END}")


def print_success(text: str):
    print(f"{Colors.GREEN}[OK] {text}{Colors.END}")


def print_error(text: str):
    print(f"{Colors.RED}[ERROR] {text}{Colors.END}", file=sys.stderr)


def print_warning(text: str):
    print(f"{Colors.YELLOW}[WARN] {text}{Colors.END}")


def print_info(text: str):
    print(f"{Colors.BLUE}[INFO] {text}{Colors.END}")


def print_kv(key: str, value: str, indent: int = 0):
    spaces = "  " * indent
    print(f"{spaces}{Colors.BOLD}{key}:{Colors.END} {value}")


# ============================================================================
# JSON SERIALIZATION
# ============================================================================

class QuarterPickEncoder(json.JSONEncoder):
    """JSON encoder that handles QuarterPick types."""
    def default(self, obj):
        if isinstance(obj, date):
            return obj.isoformat()
        if hasattr(obj, 'to_dict'):
            return obj.to_dict()
        if hasattr(obj, 'value'):  # Enum
            return obj.value
        return super().default(obj)


def json_dumps(obj: Any, indent: int = 2) -> str:
    """Serialize object to JSON string."""
    return json.dumps(obj, cls=QuarterPickEncoder, indent=indent, sort_keys=True)


# ============================================================================
# SESSION HELPERS
# ============================================================================

class CommandError(Exception):
    """Aborts a command with an exit code after printing the message."""
    def __init__(self, message: str, exit_code: int):
        super().__init__(message)
        self.exit_code = exit_code


def _parse_date(value: str) -> date:
    d = parse_calendar_date(value)
    if d is None:
        raise CommandError(f"Invalid date (expected YYYY-MM-DD): {value}", ExitCode.INPUT_INVALID)
    return d


def _load_engine(args) -> SelectionEngine:
    """Build an engine from --pack and load the --state file, if present."""
    rules = DEFAULT_RULES
    if getattr(args, "pack", None):
        rules = RulePackLoader().load(args.pack)

    engine = SelectionEngine(rules=rules)

    state_path = Path(args.state)
    if not state_path.exists():
        logger.debug("No state file at %s, starting empty", state_path)
        return engine

    try:
        data = json.loads(state_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise CommandError(f"Invalid JSON in {state_path}: {e}", ExitCode.INPUT_INVALID) from e

    report = engine.import_state(data)
    if not report.is_clean:
        print_warning(f"State file repaired on load ({report.total_changes} changes)")
        for warning in report.warnings:
            print_warning(warning)
    return engine


def _save_engine(engine: SelectionEngine, args) -> None:
    state_path = Path(args.state)
    state_path.write_text(json_dumps(engine.export_state()) + "\n", encoding="utf-8")
    logger.debug("Saved state to %s", state_path)


def _mode_for(engine: SelectionEngine, kind: Optional[str]) -> Mode:
    """The session mode, with its active kind overridden by --kind."""
    if kind is None:
        return engine.mode
    if kind == SelectionKind.FINE.value:
        return QuarterlyPlusMonthly(active=SelectionKind.FINE)
    if isinstance(engine.mode, QuarterlyPlusMonthly):
        return engine.mode.with_active(SelectionKind.COARSE)
    return QuarterlyOnly()


def _print_decision(d: date, decision) -> None:
    if decision.valid:
        print_success(f"{d} is valid")
    else:
        print_warning(f"{d} rejected: {decision.label}")
        if decision.message:
            print_kv("Reason", decision.message, indent=1)


def _print_report(report) -> None:
    summary = report.to_dict()
    for name, count in summary["changes"].items():
        if count:
            print_kv(name, f"{count} ({', '.join(summary['findings'][name])})", indent=1)
    if report.reindexed:
        print_kv("reindexed", str(report.reindexed), indent=1)
    for warning in report.warnings:
        print_warning(warning)


# ============================================================================
# COMMANDS
# ============================================================================

def cmd_classify(args):
    """Show the attributes of one or more dates."""
    engine = SelectionEngine()
    dates = [_parse_date(v) for v in args.dates]

    if args.json:
        print(json_dumps([engine.classify(d) for d in dates]))
        return ExitCode.OK

    for d in dates:
        metadata = engine.classify(d)
        print(f"{Colors.BOLD}{d}{Colors.END}")
        print_kv("Quarter", str(metadata.quarter_key), indent=1)
        print_kv("Month of quarter", str(metadata.month_of_quarter), indent=1)
        print_kv("Day period", str(metadata.day_period), indent=1)
        print_kv("Day of week", f"{metadata.day_of_week} ({WEEKDAY_NAMES[metadata.day_of_week]})", indent=1)
        if engine.is_holiday(d):
            print_kv("Holiday", engine.calendar.get_holiday_name(d) or "yes", indent=1)
    return ExitCode.OK


def cmd_holidays(args):
    """List the holidays of a year."""
    if not MINYEAR <= args.year <= MAXYEAR:
        raise CommandError(
            f"Year out of range ({MINYEAR}-{MAXYEAR}): {args.year}", ExitCode.INPUT_INVALID
        )
    rules = RulePackLoader().load(args.pack) if args.pack else DEFAULT_RULES
    calendar = rules.build_calendar()

    holidays = calendar.get_holidays_in_range(date(args.year, 1, 1), date(args.year, 12, 31))
    if not holidays:
        print_info(f"No holidays in {args.year} for calendar '{rules.calendar}'")
        return ExitCode.OK

    for d in holidays:
        print(f"{d}  {WEEKDAY_NAMES[day_of_week(d)]}  {calendar.get_holiday_name(d) or ''}".rstrip())
    return ExitCode.OK


def cmd_check(args):
    """Evaluate a date without selecting it."""
    engine = _load_engine(args)
    d = _parse_date(args.date)
    decision = engine.evaluate(d, mode=_mode_for(engine, args.kind))

    if args.json:
        print(json_dumps(decision))
    else:
        _print_decision(d, decision)
    return ExitCode.OK if decision.valid else ExitCode.REJECTED


def cmd_select(args):
    """Select a date, if the rules allow it."""
    engine = _load_engine(args)
    d = _parse_date(args.date)
    if args.kind:
        engine.set_active_kind(SelectionKind(args.kind))

    result = engine.commit(d)
    _print_decision(d, result.decision)
    if not result.accepted:
        return ExitCode.REJECTED

    _save_engine(engine, args)
    print_kv("Selected as", result.change.kind.value, indent=1)
    return ExitCode.OK


def cmd_remove(args):
    """Remove a selection; removing a quarterly date takes its monthly dates along."""
    engine = _load_engine(args)
    d = _parse_date(args.date)

    try:
        plan = engine.remove(d)
    except SelectionNotFoundError as e:
        print_error(e.message)
        return ExitCode.NOT_FOUND

    if plan.requires_confirmation and not args.yes:
        print_warning(
            f"Removing {d} also removes {len(plan.cascade)} monthly selection(s): "
            + ", ".join(str(c) for c in sorted(plan.cascade))
        )
        print_info("Rerun with --yes to confirm")
        return ExitCode.CONFIRMATION_REQUIRED

    change = engine.confirm_removal(plan)
    _save_engine(engine, args)
    print_success("Removed " + ", ".join(str(r) for r in change.removed))
    return ExitCode.OK


def cmd_block(args):
    """Block dates, evicting any selection on them."""
    engine = _load_engine(args)
    dates = [_parse_date(v) for v in args.dates]

    for d in dates:
        change = engine.block(d)
        print_success(f"Blocked {d}")
        if change.removed:
            print_warning("Evicted " + ", ".join(str(r) for r in change.removed))

    _save_engine(engine, args)
    return ExitCode.OK


def cmd_unblock(args):
    """Unblock dates."""
    engine = _load_engine(args)
    dates = [_parse_date(v) for v in args.dates]

    for d in dates:
        if engine.unblock(d):
            print_success(f"Unblocked {d}")
        else:
            print_info(f"{d} was not blocked")

    _save_engine(engine, args)
    return ExitCode.OK


def cmd_valid_days(args):
    """List the dates that could be selected next."""
    engine = _load_engine(args)
    start = _parse_date(args.start) if args.start else date.today()
    if args.kind:
        engine.set_active_kind(SelectionKind(args.kind))

    valid = engine.valid_days(start, months=args.months)
    if args.json:
        print(json_dumps(valid))
    else:
        for d in valid:
            print(f"{d}  {WEEKDAY_NAMES[day_of_week(d)]}")
        print_info(f"{len(valid)} valid day(s)")
    return ExitCode.OK


def cmd_history(args):
    """Show all selections in date order."""
    engine = _load_engine(args)
    records = engine.history()

    if args.json:
        print(json_dumps(records))
        return ExitCode.OK

    if not records:
        print_info("No selections")
    for record in records:
        m = record.metadata
        print(
            f"{record.date}  {record.kind.value:<6}  {m.quarter_key}  "
            f"moq={m.month_of_quarter} period={m.day_period} "
            f"dow={WEEKDAY_NAMES[m.day_of_week]}"
        )
    return ExitCode.OK


def cmd_settings(args):
    """Change the selection mode or holiday avoidance."""
    engine = _load_engine(args)

    if args.mode == "quarterly":
        report = engine.set_mode(QuarterlyOnly())
        _print_report(report)
    elif args.mode == "monthly":
        mode = engine.mode
        if not isinstance(mode, QuarterlyPlusMonthly):
            mode = QuarterlyPlusMonthly(active=SelectionKind.COARSE)
        report = engine.set_mode(mode)
        _print_report(report)

    if args.holidays is not None:
        engine.set_holiday_avoidance(args.holidays == "avoid")

    _save_engine(engine, args)
    print_kv("Mode", engine.mode.name)
    print_kv("Active kind", engine.mode.produces.value)
    print_kv("Avoid holidays", "yes" if engine.avoid_holidays else "no")
    return ExitCode.OK


def cmd_reconcile(args):
    """Repair the state file and report what changed."""
    state_path = Path(args.state)
    if not state_path.exists():
        print_error(f"State file not found: {state_path}")
        return ExitCode.INPUT_INVALID

    engine = SelectionEngine(
        rules=RulePackLoader().load(args.pack) if args.pack else DEFAULT_RULES
    )
    try:
        data = json.loads(state_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        print_error(f"Invalid JSON in {state_path}: {e}")
        return ExitCode.INPUT_INVALID

    report = engine.import_state(data)
    if args.json:
        print(json_dumps(report))
    elif report.total_changes:
        print_warning(f"Repaired {report.total_changes} inconsistencies")
        _print_report(report)
    else:
        print_success("State is consistent")
        for warning in report.warnings:
            print_warning(warning)

    if not args.dry_run:
        _save_engine(engine, args)
    return ExitCode.OK


def cmd_validate_pack(args):
    """Validate a rule pack file."""
    print_header("QuarterPick - Validate Rule Pack")

    pack_path = Path(args.pack)
    if not pack_path.exists():
        print_error(f"Pack file not found: {pack_path}")
        return ExitCode.INPUT_INVALID

    print_info(f"Validating: {pack_path}")

    try:
        rules = RulePackLoader().load(pack_path)
    except RulePackValidationError as e:
        errors = e.details.get("errors", [])
        print_error(f"Validation failed with {len(errors)} error(s):")
        for error in errors:
            location = ".".join(str(part) for part in error.get("loc", ()))
            print(f"  {Colors.RED}[X]{Colors.END} {location}: {error.get('msg')}")
        return ExitCode.PACK_ERROR
    except (RulePackLoadError, RulePackVersionMismatch) as e:
        print_error(f"Loading failed: {e}")
        return ExitCode.PACK_ERROR

    print_success("Rule pack is valid!")
    print()
    print_kv("Pack ID", rules.id)
    print_kv("Name", rules.name)
    print_kv("Version", rules.version)
    print_kv("Calendar", rules.calendar)
    print_kv("Avoid holidays", "yes" if rules.avoid_holidays else "no")
    print_kv("Weekend days", ", ".join(WEEKDAY_NAMES[d] for d in sorted(rules.weekend_days)))
    print_kv("Max run length", str(rules.max_run_length))
    print_kv("Window (quarters)", str(rules.window_quarters))
    print_kv("Coarse attributes", ", ".join(a.value for a in rules.coarse_attributes))
    print_kv("Fine attributes", ", ".join(a.value for a in rules.fine_attributes))
    return ExitCode.OK


# ============================================================================
# ARGUMENT PARSING
# ============================================================================

def _add_session_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--state", "-s", default=DEFAULT_STATE_FILE,
                        help=f"Selection state JSON file (default: {DEFAULT_STATE_FILE})")
    parser.add_argument("--pack", "-p", help="Rule pack YAML/JSON file")


def _add_kind_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--kind", "-k", choices=[k.value for k in SelectionKind],
                        help="Selection kind: coarse (quarterly) or fine (monthly)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quarterpick",
        description="QuarterPick - rule-checked quarterly and monthly date selection",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit Codes:
  0   OK                     Command succeeded / date is valid
  2   REJECTED               Date rejected by the selection rules
  3   CONFIRMATION_REQUIRED  Removal cascades; rerun with --yes
  4   NOT_FOUND              Date is not selected
  10  INPUT_INVALID          Invalid date argument or state file
  11  PACK_ERROR             Rule pack loading/validation failed

Examples:
  quarterpick select 2024-02-05 --state picks.json
  quarterpick select 2024-03-12 --kind fine --state picks.json
  quarterpick remove 2024-02-05 --yes --state picks.json
  quarterpick valid-days --start 2024-04-01 --months 3
        """
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Log engine activity (-v info, -vv debug)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # classify
    classify_parser = subparsers.add_parser("classify", help="Show date attributes")
    classify_parser.add_argument("dates", nargs="+", help="Dates (YYYY-MM-DD)")
    classify_parser.add_argument("--json", action="store_true", help="JSON output")
    classify_parser.set_defaults(func=cmd_classify)

    # holidays
    holidays_parser = subparsers.add_parser("holidays", help="List holidays of a year")
    holidays_parser.add_argument("year", type=int, help="Year")
    holidays_parser.add_argument("--pack", "-p", help="Rule pack YAML/JSON file")
    holidays_parser.set_defaults(func=cmd_holidays)

    # check
    check_parser = subparsers.add_parser("check", help="Evaluate a date without selecting it")
    check_parser.add_argument("date", help="Date (YYYY-MM-DD)")
    check_parser.add_argument("--json", action="store_true", help="JSON output")
    _add_kind_arg(check_parser)
    _add_session_args(check_parser)
    check_parser.set_defaults(func=cmd_check)

    # select
    select_parser = subparsers.add_parser("select", help="Select a date")
    select_parser.add_argument("date", help="Date (YYYY-MM-DD)")
    _add_kind_arg(select_parser)
    _add_session_args(select_parser)
    select_parser.set_defaults(func=cmd_select)

    # remove
    remove_parser = subparsers.add_parser("remove", help="Remove a selection")
    remove_parser.add_argument("date", help="Date (YYYY-MM-DD)")
    remove_parser.add_argument("--yes", "-y", action="store_true",
                               help="Confirm removal of dependent monthly selections")
    _add_session_args(remove_parser)
    remove_parser.set_defaults(func=cmd_remove)

    # block / unblock
    block_parser = subparsers.add_parser("block", help="Block dates")
    block_parser.add_argument("dates", nargs="+", help="Dates (YYYY-MM-DD)")
    _add_session_args(block_parser)
    block_parser.set_defaults(func=cmd_block)

    unblock_parser = subparsers.add_parser("unblock", help="Unblock dates")
    unblock_parser.add_argument("dates", nargs="+", help="Dates (YYYY-MM-DD)")
    _add_session_args(unblock_parser)
    unblock_parser.set_defaults(func=cmd_unblock)

    # valid-days
    valid_parser = subparsers.add_parser("valid-days", help="List selectable dates")
    valid_parser.add_argument("--start", help="Any date in the first month (default: today)")
    valid_parser.add_argument("--months", "-m", type=int, help="Months to scan (default: from rule pack)")
    valid_parser.add_argument("--json", action="store_true", help="JSON output")
    _add_kind_arg(valid_parser)
    _add_session_args(valid_parser)
    valid_parser.set_defaults(func=cmd_valid_days)

    # history
    history_parser = subparsers.add_parser("history", help="Show selections in date order")
    history_parser.add_argument("--json", action="store_true", help="JSON output")
    _add_session_args(history_parser)
    history_parser.set_defaults(func=cmd_history)

    # settings
    settings_parser = subparsers.add_parser("settings", help="Change mode or holiday avoidance")
    settings_parser.add_argument("--mode", choices=["quarterly", "monthly"],
                                 help="quarterly only, or quarterly plus monthly")
    settings_parser.add_argument("--holidays", choices=["avoid", "allow"],
                                 help="Whether holidays are excluded")
    _add_session_args(settings_parser)
    settings_parser.set_defaults(func=cmd_settings)

    # reconcile
    reconcile_parser = subparsers.add_parser("reconcile", help="Repair a state file")
    reconcile_parser.add_argument("--dry-run", action="store_true", help="Report only, do not write")
    reconcile_parser.add_argument("--json", action="store_true", help="JSON output")
    _add_session_args(reconcile_parser)
    reconcile_parser.set_defaults(func=cmd_reconcile)

    # validate-pack
    val_pack_parser = subparsers.add_parser("validate-pack", help="Validate a rule pack file")
    val_pack_parser.add_argument("--pack", "-p", required=True, help="Rule pack YAML/JSON file")
    val_pack_parser.set_defaults(func=cmd_validate_pack)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    if not sys.stdout.isatty():
        Colors.disable()

    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING - 10 * min(args.verbose, 2),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except CommandError as e:
        print_error(str(e))
        return e.exit_code
    except StateValidationError as e:
        print_error(str(e))
        for violation in e.details.get("violations", []):
            print(f"  {Colors.RED}[X]{Colors.END} {violation}", file=sys.stderr)
        return ExitCode.INPUT_INVALID
    except (RulePackLoadError, RulePackValidationError, RulePackVersionMismatch) as e:
        print_error(str(e))
        return ExitCode.PACK_ERROR
    except QuarterPickError as e:
        print_error(str(e))
        return ExitCode.INTERNAL_ERROR
    except OSError as e:
        print_error(f"I/O error: {e}")
        return ExitCode.INPUT_INVALID


if __name__ == "__main__":
    sys.exit(main())
