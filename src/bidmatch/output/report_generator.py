"""Plain-text reports for roster analysis.

This module renders analysis results as fixed-width text:
- Roster metrics with block length histograms
- Ranked match results with their explanations
- Day-off conflict detail
- Mirror line rankings
"""

from pathlib import Path
from typing import Sequence, Union

from bidmatch.domain.models import (
    BlockHistogram,
    DayOffConflictResult,
    MatchResult,
    MirrorCandidate,
    Roster,
    ScheduleMetrics,
)

WEEKDAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


class ReportGenerator:
    """Generates text reports for analysis results.

    Each ``*_report`` method returns the report as a string; ``write``
    saves any report to a file.
    """

    def write(self, content: str, output_path: Union[str, Path]) -> str:
        """Save a report to a file and return it."""
        Path(output_path).write_text(content)
        return content

    def metrics_report(self, roster: Roster, metrics: ScheduleMetrics) -> str:
        """Render structural metrics for one roster.

        Args:
            roster: The roster the metrics belong to.
            metrics: Metrics to render.

        Returns:
            The report text.
        """
        lines = []
        period = roster.bid_period

        lines.append("=" * 80)
        lines.append(f"ROSTER METRICS - {roster.roster_id} ({roster.group})")
        lines.append("=" * 80)
        lines.append("")
        lines.append(f"Bid Period: {period.start_date} - {period.end_date} "
                     f"({period.cycle_length} days x {period.cycle_repeat_count})")
        lines.append(f"Counts: {metrics.scope.value} (x{metrics.repeat_factor})")
        lines.append(f"Shifts: {metrics.shift_summary}")
        lines.append(f"Days Worked: {metrics.days_worked} / {metrics.total_days} "
                     f"({metrics.days_off} off)")
        lines.append("")

        lines.append("-" * 80)
        lines.append("WEEKENDS")
        lines.append("-" * 80)
        lines.append(f"Full weekends worked: {metrics.weekends_worked} of {metrics.total_weekends}")
        lines.append(f"Saturday only:        {metrics.saturdays_only}")
        lines.append(f"Sunday only:          {metrics.sundays_only}")
        lines.append(f"Weekends off:         {metrics.weekends_off}")
        lines.append(f"Fri-Sat-Sun blocks:   {metrics.friday_weekend_blocks}")
        lines.append(f"Mon-Fri blocks:       {metrics.weekday_blocks}")
        lines.append("")

        lines.append("-" * 80)
        lines.append("WORK BLOCK HISTOGRAM")
        lines.append("-" * 80)
        lines.extend(self._histogram_lines(metrics.work_blocks))
        lines.append(f"Longest stretch: {metrics.longest_work_stretch} days")
        lines.append("")

        lines.append("-" * 80)
        lines.append("OFF BLOCK HISTOGRAM")
        lines.append("-" * 80)
        lines.extend(self._histogram_lines(metrics.off_blocks))
        lines.append(f"Longest off: {metrics.longest_off_stretch} days, "
                     f"shortest off: {metrics.shortest_off_stretch} days")
        lines.append("")

        lines.append("-" * 80)
        lines.append("HOLIDAYS")
        lines.append("-" * 80)
        lines.append(f"Worked: {metrics.holidays_worked}  Off: {metrics.holidays_off}")
        lines.append("")

        lines.append("-" * 80)
        lines.append("WEEKDAYS WORKED")
        lines.append("-" * 80)
        for weekday, name in enumerate(WEEKDAY_NAMES):
            worked = metrics.weekday_worked.get(weekday, 0)
            available = metrics.weekday_available.get(weekday, 0)
            lines.append(f"{name}: {worked:>3} / {available:<3} {'#' * worked}")

        if metrics.unresolved_codes:
            lines.append("")
            lines.append(f"WARNING: unknown shift codes {', '.join(metrics.unresolved_codes)}")

        lines.append("")
        return "\n".join(lines)

    def match_report(self, results: Sequence[MatchResult]) -> str:
        """Render match results, in the order given."""
        lines = []
        lines.append("=" * 80)
        lines.append(f"MATCH RESULTS ({len(results)} rosters)")
        lines.append("=" * 80)
        lines.append(f"{'#':>3} {'Roster':<20} {'Score':>5}  {'Shifts':<20}")
        lines.append("-" * 80)

        for i, result in enumerate(results, 1):
            lines.append(f"{i:>3} {result.roster_id:<20} {result.score:>5}  "
                         f"{result.metrics.shift_summary:<20}")
            for phrase in result.explanation:
                lines.append(f"      - {phrase}")

        lines.append("")
        return "\n".join(lines)

    def conflict_report(self, result: DayOffConflictResult) -> str:
        """Render day-off conflict detail for one roster."""
        lines = []
        lines.append("=" * 80)
        lines.append(f"DAY-OFF CONFLICTS - {result.roster_id}")
        lines.append("=" * 80)

        if not result.has_requests:
            lines.append("No days off requested")
            lines.append("")
            return "\n".join(lines)

        lines.append(f"Match: {result.match_percentage}% "
                     f"({result.matching_count}/{result.total_requested} requested days off)")
        lines.append("-" * 80)
        for detail in result.details:
            day = f"{detail.date} {WEEKDAY_NAMES[detail.date.weekday()]}"
            if not detail.is_conflict:
                lines.append(f"{day}  cycle day {detail.cycle_day_index:>3}  OFF")
                continue
            if detail.begin_time is not None and detail.end_time is not None:
                times = f"{detail.begin_time.strftime('%H:%M')}-{detail.end_time.strftime('%H:%M')}"
            else:
                times = "unknown times"
            lines.append(f"{day}  cycle day {detail.cycle_day_index:>3}  "
                         f"WORKING {detail.code} ({times})")

        lines.append("")
        return "\n".join(lines)

    def mirror_report(self, reference: Roster, mirrors: Sequence[MirrorCandidate]) -> str:
        """Render a mirror line ranking."""
        lines = []
        lines.append("=" * 80)
        lines.append(f"MIRROR LINES FOR {reference.roster_id}")
        lines.append("=" * 80)

        if not mirrors:
            lines.append("No rosters share enough off-days")
            lines.append("")
            return "\n".join(lines)

        lines.append(f"{'#':>3} {'Roster':<20} {'Group':<10} {'Match':>6} {'Days':>9} {'Tie':>4}")
        lines.append("-" * 80)
        for i, mirror in enumerate(mirrors, 1):
            days = f"{mirror.matched_off_day_count}/{mirror.total_requested_off_day_count}"
            lines.append(f"{i:>3} {mirror.roster_id:<20} {mirror.group:<10} "
                         f"{mirror.match_percentage:>5}% {days:>9} {mirror.shared_shift_code_score:>4}")
            if mirror.shift_times:
                times = ", ".join(f"{d.code} {d.time_range}" for d in mirror.shift_times)
                lines.append(f"      {times}")

        lines.append("")
        return "\n".join(lines)

    def _histogram_lines(self, histogram: BlockHistogram) -> list[str]:
        lines = []
        for label, count in histogram.bucketed().items():
            bar = "#" * count
            if count > 0:
                lines.append(f"{label:>3} days: {bar} ({count})")
            else:
                lines.append(f"{label:>3} days: .")
        return lines
