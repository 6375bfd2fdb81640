"""Command-line interface for the bidmatch roster analysis tool."""

import argparse
import logging
import sys
from datetime import date, timedelta
from typing import Optional

from bidmatch.analysis.batch import metrics_many
from bidmatch.analysis.conflicts import find_conflicts
from bidmatch.analysis.metrics import MetricsEngine
from bidmatch.analysis.mirrors import find_mirrors
from bidmatch.analysis.scoring import ScheduleScorer
from bidmatch.config import EngineConfig
from bidmatch.domain.errors import BidMatchError
from bidmatch.domain.models import (
    BatchFailure,
    BidPeriod,
    CyclePattern,
    PreferenceCriteria,
    Roster,
    ShiftCodeCatalog,
    ShiftCodeDefinition,
    WeekendStance,
    parse_iso_date,
)
from bidmatch.io.loader import RosterDocument, load_document
from bidmatch.output.report_generator import ReportGenerator
from bidmatch.validation.validator import RosterValidator

OFF = "----"


def create_sample_catalog() -> ShiftCodeCatalog:
    """Create a small catalog covering the common shift categories."""
    return ShiftCodeCatalog(
        [
            ShiftCodeDefinition.from_strings("0630", "06:30", "14:30"),
            ShiftCodeDefinition.from_strings("07AJ", "07:00", "15:00"),
            ShiftCodeDefinition.from_strings("0900", "09:00", "17:00"),
            ShiftCodeDefinition.from_strings("1500", "15:00", "23:00"),
            ShiftCodeDefinition.from_strings("2000", "20:00", "06:00"),
        ]
    )


def create_sample_rosters(
    start_date: date = date(2025, 1, 6),
    cycle_repeat_count: int = 3,
) -> list[Roster]:
    """Create sample 56-day rosters with a mix of block and weekend shapes.

    Args:
        start_date: First day of the bid period (a Monday by default).
        cycle_repeat_count: Number of times the cycle repeats.

    Returns:
        List of sample rosters.
    """
    weeks = 8
    patterns = {
        # Monday-Friday days, every weekend off
        ("L1", "OPS"): (["07AJ"] * 5 + [OFF] * 2) * weeks,
        # Four days on, three off
        ("L2", "OPS"): (["07AJ"] * 4 + [OFF] * 3) * weeks,
        # Days and afternoons alternating weekly
        ("L3", "OPS"): (["0630"] * 5 + [OFF] * 2 + ["1500"] * 5 + [OFF] * 2) * (weeks // 2),
        # Four midnights, four off
        ("L4", "MAINT"): (["2000"] * 4 + [OFF] * 4) * 7,
        # Wednesday to Sunday mid days
        ("L5", "MAINT"): ([OFF] * 2 + ["0900"] * 5) * weeks,
    }

    rosters = []
    for i, ((roster_id, group), codes) in enumerate(patterns.items(), 1):
        pattern = CyclePattern.from_codes(codes)
        rosters.append(
            Roster(
                roster_id=roster_id,
                group=group,
                pattern=pattern,
                bid_period=BidPeriod.for_pattern(start_date, pattern, cycle_repeat_count),
                line=str(i),
            )
        )
    return rosters


def create_sample_criteria(start_date: date = date(2025, 1, 6)) -> PreferenceCriteria:
    """Sample preferences: OPS day shifts, few weekends, two days off."""
    return PreferenceCriteria(
        selected_groups={"OPS"},
        selected_shift_categories={"Days"},
        requested_days_off={start_date + timedelta(days=5), start_date + timedelta(days=9)},
        weekend_stance=WeekendStance.FEWER,
    )


def _build_engines(config: EngineConfig, catalog: ShiftCodeCatalog) -> tuple[MetricsEngine, ScheduleScorer]:
    engine = MetricsEngine(
        holiday_provider=config.holiday_provider(),
        jurisdiction=config.jurisdiction,
        catalog=catalog,
        full_period=config.full_period_metrics,
    )
    return engine, ScheduleScorer(catalog=catalog, metrics_engine=engine)


def _print_validation(document: RosterDocument) -> bool:
    result = RosterValidator().validate_many(document.rosters, document.catalog)
    for warning in result.warnings:
        print(f"Warning: {warning}")
    for error in result.errors:
        print(f"Error: {error}", file=sys.stderr)
    return result.is_valid


def _print_failures(failures: list[BatchFailure]) -> None:
    for failure in failures:
        print(f"Error: roster {failure.roster_id}: {failure.message}", file=sys.stderr)


def run_demo(config: EngineConfig, start_date: date, cycle_repeat_count: int) -> None:
    """Run the full analysis on the sample rosters."""
    catalog = create_sample_catalog()
    rosters = create_sample_rosters(start_date, cycle_repeat_count)
    criteria = create_sample_criteria(start_date)
    engine, scorer = _build_engines(config, catalog)
    report = ReportGenerator()

    print(f"Analyzing {len(rosters)} sample rosters from {start_date} "
          f"(56-day cycle x {cycle_repeat_count})...")
    print()
    print(report.metrics_report(rosters[0], engine.metrics_for(rosters[0])))
    print(report.match_report(scorer.rank(rosters, criteria, include_zero=True)))
    print(report.conflict_report(
        find_conflicts(rosters[0], rosters[0].bid_period, criteria.requested_days_off, catalog)
    ))
    print(report.mirror_report(rosters[0], find_mirrors(rosters[0], rosters, catalog=catalog)))


def run_metrics(config: EngineConfig, path: str, output_path: Optional[str] = None) -> int:
    document = load_document(path, config.off_sentinel)
    if not _print_validation(document):
        return 1
    engine, _ = _build_engines(config, document.catalog)
    report = ReportGenerator()

    sections = []
    results = metrics_many(engine, document.rosters, config.max_workers)
    for roster, metrics in zip(document.rosters, results):
        if isinstance(metrics, BatchFailure):
            _print_failures([metrics])
            continue
        sections.append(report.metrics_report(roster, metrics))

    content = "\n".join(sections)
    if output_path:
        report.write(content, output_path)
        print(f"Report written to {output_path}")
    else:
        print(content)
    return 0


def run_score(config: EngineConfig, path: str, include_zero: bool = False) -> int:
    document = load_document(path, config.off_sentinel)
    if not _print_validation(document):
        return 1
    if document.criteria is None:
        print("Error: document has no criteria", file=sys.stderr)
        return 1
    _, scorer = _build_engines(config, document.catalog)
    failures: list[BatchFailure] = []
    results = scorer.rank(
        document.rosters, document.criteria, include_zero=include_zero, failures=failures
    )
    _print_failures(failures)
    print(ReportGenerator().match_report(results))
    return 0


def run_conflicts(config: EngineConfig, path: str, dates: Optional[list[str]] = None) -> int:
    document = load_document(path, config.off_sentinel)
    if not _print_validation(document):
        return 1
    if dates:
        requested = {parse_iso_date(d, "--date") for d in dates}
    else:
        requested = set(document.day_off_requests)
        if not requested and document.criteria is not None:
            requested = set(document.criteria.requested_days_off)

    report = ReportGenerator()
    for roster in document.rosters:
        try:
            result = find_conflicts(roster, roster.bid_period, requested, document.catalog)
        except BidMatchError as e:
            _print_failures([BatchFailure.from_error(roster.roster_id, e)])
            continue
        print(report.conflict_report(result))
    return 0


def run_mirrors(
    config: EngineConfig,
    path: str,
    reference_id: str,
    dates: Optional[list[str]] = None,
    groups: Optional[list[str]] = None,
) -> int:
    document = load_document(path, config.off_sentinel)
    if not _print_validation(document):
        return 1
    reference = document.roster(reference_id)
    off_dates = {parse_iso_date(d, "--date") for d in dates} if dates else None
    failures: list[BatchFailure] = []
    mirrors = find_mirrors(
        reference,
        document.rosters,
        off_dates=off_dates,
        catalog=document.catalog,
        target_groups=groups or None,
        failures=failures,
    )
    _print_failures(failures)
    print(ReportGenerator().mirror_report(reference, mirrors))
    return 0


def run_validate(config: EngineConfig, path: str) -> int:
    document = load_document(path, config.off_sentinel)
    if _print_validation(document):
        print(f"Validation: PASSED ({len(document.rosters)} rosters)")
        return 0
    print("Validation: FAILED")
    return 1


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="bidmatch - Cyclic Roster Analysis and Matching",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s demo                          Analyze the built-in sample rosters
  %(prog)s demo --repeats 1              Sample rosters over a single cycle

  %(prog)s metrics rosters.json          Metrics report for every roster
  %(prog)s score rosters.json            Rank rosters by the document's criteria
  %(prog)s conflicts rosters.json --date 2025-01-11
  %(prog)s mirrors rosters.json --reference L1
  %(prog)s validate rosters.json         Check input only

  %(prog)s --config engine.json -v score rosters.json
        """,
    )
    parser.add_argument("--config", type=str, help="Engine configuration JSON file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Analyze built-in sample rosters")
    demo_parser.add_argument(
        "--start",
        type=str,
        default="2025-01-06",
        help="Bid period start date (default: 2025-01-06)",
    )
    demo_parser.add_argument(
        "--repeats", "-r",
        type=int,
        default=3,
        help="Cycle repeat count (default: 3)",
    )

    metrics_parser = subparsers.add_parser("metrics", help="Report roster metrics")
    metrics_parser.add_argument("file", help="Roster document (JSON)")
    metrics_parser.add_argument("--output", "-o", type=str, help="Write the report to a file")

    score_parser = subparsers.add_parser("score", help="Score rosters against preferences")
    score_parser.add_argument("file", help="Roster document (JSON)")
    score_parser.add_argument(
        "--all", "-a",
        action="store_true",
        help="Include rosters that score 0",
    )

    conflicts_parser = subparsers.add_parser("conflicts", help="Check requested days off")
    conflicts_parser.add_argument("file", help="Roster document (JSON)")
    conflicts_parser.add_argument(
        "--date", "-d",
        action="append",
        help="Requested day off (YYYY-MM-DD); repeatable",
    )

    mirrors_parser = subparsers.add_parser("mirrors", help="Find mirror lines")
    mirrors_parser.add_argument("file", help="Roster document (JSON)")
    mirrors_parser.add_argument("--reference", "-R", required=True, help="Reference roster id")
    mirrors_parser.add_argument(
        "--date", "-d",
        action="append",
        help="Target off-day (YYYY-MM-DD); repeatable, defaults to the reference's off-days",
    )
    mirrors_parser.add_argument(
        "--group", "-g",
        action="append",
        help="Only rank rosters in this group; repeatable",
    )

    validate_parser = subparsers.add_parser("validate", help="Validate a roster document")
    validate_parser.add_argument("file", help="Roster document (JSON)")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = EngineConfig.from_file(args.config) if args.config else EngineConfig()

        if args.command == "demo":
            run_demo(config, parse_iso_date(args.start, "--start"), args.repeats)
            return 0
        elif args.command == "metrics":
            return run_metrics(config, args.file, args.output)
        elif args.command == "score":
            return run_score(config, args.file, args.all)
        elif args.command == "conflicts":
            return run_conflicts(config, args.file, args.date)
        elif args.command == "mirrors":
            return run_mirrors(config, args.file, args.reference, args.date, args.group)
        elif args.command == "validate":
            return run_validate(config, args.file)
        else:
            parser.print_help()
            return 1
    except (BidMatchError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
