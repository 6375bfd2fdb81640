"""Structural metrics for resolved rosters.

``compute_metrics`` walks a resolved day sequence once and derives the
work/off block histograms, weekend categories, holiday overlap and the
supporting counts. ``MetricsEngine`` decides which sequence to walk for a
roster and applies the single scaling step from one cycle to the full bid
period.
"""

import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import Iterable, Optional

from bidmatch.calendar.holidays import CachingHolidayProvider, HolidayProvider
from bidmatch.calendar.resolver import resolve, resolve_cycle
from bidmatch.domain.errors import HolidaySourceError
from bidmatch.domain.models import (
    SATURDAY,
    SUNDAY,
    BlockHistogram,
    CountScope,
    ResolvedDay,
    Roster,
    ScheduleMetrics,
    ShiftCodeCatalog,
)

logger = logging.getLogger(__name__)

FRIDAY = 4


def summarize_shifts(codes: list[str]) -> str:
    """Display summary of the distinct codes a roster works.

    No codes gives "No shifts", one code the code itself, two or three codes
    joined with "/", anything more "Mixed".
    """
    distinct = list(dict.fromkeys(codes))
    if not distinct:
        return "No shifts"
    if len(distinct) == 1:
        return distinct[0]
    if len(distinct) <= 3:
        return "/".join(distinct)
    return "Mixed"


def _split_runs(days: list[ResolvedDay]) -> tuple[list[list[ResolvedDay]], list[int]]:
    """Split days into work runs and off-run lengths."""
    work_runs: list[list[ResolvedDay]] = []
    off_runs: list[int] = []
    current_work: list[ResolvedDay] = []
    current_off = 0

    for day in days:
        if day.is_working:
            if current_off:
                off_runs.append(current_off)
                current_off = 0
            current_work.append(day)
        else:
            if current_work:
                work_runs.append(current_work)
                current_work = []
            current_off += 1

    # Flush whichever run is open at sequence end
    if current_work:
        work_runs.append(current_work)
    if current_off:
        off_runs.append(current_off)
    return work_runs, off_runs


def _weekend_key(day: ResolvedDay) -> date:
    if day.weekday == SUNDAY:
        return day.date - timedelta(days=1)
    return day.date


def _weekend_categories(days: list[ResolvedDay]) -> dict[str, int]:
    """Count weekend pairs by category, keyed by their Saturday date."""
    weekends: dict[date, list[bool]] = {}
    for day in days:
        if day.weekday in (SATURDAY, SUNDAY):
            pair = weekends.setdefault(_weekend_key(day), [False, False])
            if day.is_working:
                pair[0 if day.weekday == SATURDAY else 1] = True

    counts = {"weekends_worked": 0, "saturdays_only": 0, "sundays_only": 0, "weekends_off": 0}
    for saturday_worked, sunday_worked in weekends.values():
        if saturday_worked and sunday_worked:
            counts["weekends_worked"] += 1
        elif saturday_worked:
            counts["saturdays_only"] += 1
        elif sunday_worked:
            counts["sundays_only"] += 1
        else:
            counts["weekends_off"] += 1
    return counts


def _is_friday_weekend_block(run: list[ResolvedDay]) -> bool:
    for first, second, third in zip(run, run[1:], run[2:]):
        if (first.weekday, second.weekday, third.weekday) == (FRIDAY, SATURDAY, SUNDAY):
            return True
    return False


def _is_weekday_block(run: list[ResolvedDay]) -> bool:
    return [d.weekday for d in run] == [0, 1, 2, 3, 4]


def compute_metrics(
    resolved_days: Iterable[ResolvedDay],
    holiday_dates: Iterable[date],
    scope: CountScope,
    catalog: Optional[ShiftCodeCatalog] = None,
) -> ScheduleMetrics:
    """Compute structural metrics for a resolved day sequence.

    The caller states which span the sequence covers; the function never
    guesses it from the sequence length.

    Weekend pairs are keyed by their Saturday date, so a Sunday pairs with
    the preceding Saturday. A pair whose other day falls outside the
    sequence counts that day as not worked.

    Args:
        resolved_days: Days to analyze, in any order.
        holiday_dates: Holiday dates to check for overlap.
        scope: Span the sequence covers.
        catalog: Optional shift catalog used to report unknown codes.

    Returns:
        ScheduleMetrics with ``repeat_factor`` 1.
    """
    days = sorted(resolved_days, key=lambda d: d.date)
    holidays = frozenset(holiday_dates)

    codes: list[str] = []
    code_counts: dict[str, int] = {}
    weekday_worked = {wd: 0 for wd in range(7)}
    weekday_available = {wd: 0 for wd in range(7)}
    holidays_worked = 0
    holidays_off = 0

    for day in days:
        weekday_available[day.weekday] += 1
        if day.is_working:
            code = day.assignment.code
            codes.append(code)
            code_counts[code] = code_counts.get(code, 0) + 1
            weekday_worked[day.weekday] += 1

        if day.date in holidays:
            if day.is_working:
                holidays_worked += 1
            else:
                holidays_off += 1

    work_runs, off_runs = _split_runs(days)

    unresolved: tuple[str, ...] = ()
    if catalog is not None:
        unresolved = tuple(catalog.unresolved(codes))

    return ScheduleMetrics(
        scope=scope,
        repeat_factor=1,
        total_days=len(days),
        days_worked=len(codes),
        **_weekend_categories(days),
        work_blocks=BlockHistogram.from_lengths(len(run) for run in work_runs),
        off_blocks=BlockHistogram.from_lengths(off_runs),
        holidays_worked=holidays_worked,
        holidays_off=holidays_off,
        shift_summary=summarize_shifts(codes),
        shift_code_counts=code_counts,
        weekday_worked=weekday_worked,
        weekday_available=weekday_available,
        friday_weekend_blocks=sum(1 for run in work_runs if _is_friday_weekend_block(run)),
        weekday_blocks=sum(1 for run in work_runs if _is_weekday_block(run)),
        unresolved_codes=unresolved,
    )


class MetricsEngine:
    """Computes metrics for rosters against their bid periods.

    By default structural metrics are computed on the first cycle and scaled
    to the full period once. Holiday overlap and weekend categories are
    always computed against the full bid period, since holidays do not
    repeat with the cycle and a weekend can straddle a cycle boundary. With
    ``full_period=True`` every metric is computed on the fully tiled period.
    """

    def __init__(
        self,
        holiday_provider: Optional[HolidayProvider] = None,
        jurisdiction: str = "CA",
        catalog: Optional[ShiftCodeCatalog] = None,
        full_period: bool = False,
    ):
        self.holiday_provider = holiday_provider or CachingHolidayProvider()
        self.jurisdiction = jurisdiction
        self.catalog = catalog
        self.full_period = full_period

    def holidays_for(self, roster: Roster) -> frozenset[date]:
        """Holiday dates for a roster's bid period; empty when lookup fails."""
        period = roster.bid_period
        try:
            dates = self.holiday_provider.holidays_for(self.jurisdiction, period.years())
        except HolidaySourceError as e:
            logger.warning(
                "Holiday lookup failed for %s: %s; holidays ignored", roster.roster_id, e
            )
            return frozenset()
        return frozenset(d for d in dates if period.contains(d))

    def metrics_for(self, roster: Roster) -> ScheduleMetrics:
        """Metrics for a roster over its full bid period.

        Raises:
            MalformedInputError: If the pattern does not fit the bid period.
        """
        period = roster.bid_period
        holiday_dates = self.holidays_for(roster)
        full_days = resolve(roster.pattern, period)

        if self.full_period or not full_days:
            metrics = compute_metrics(full_days, holiday_dates, CountScope.FULL_PERIOD, self.catalog)
            logger.debug(
                "Metrics for %s computed over %d days", roster.roster_id, metrics.total_days
            )
            return metrics

        single = compute_metrics(
            resolve_cycle(roster.pattern, period), (), CountScope.SINGLE_CYCLE, self.catalog
        )
        scaled = single.scaled_to_period(period.cycle_repeat_count)

        # Holiday overlap and weekend pairs over the whole period. Holidays do
        # not repeat with the cycle, and a weekend can straddle two cycles.
        worked = sum(1 for d in full_days if d.date in holiday_dates and d.is_working)
        off = sum(1 for d in full_days if d.date in holiday_dates and not d.is_working)
        logger.debug(
            "Metrics for %s scaled x%d; holidays worked=%d off=%d",
            roster.roster_id, period.cycle_repeat_count, worked, off,
        )
        return replace(
            scaled,
            holidays_worked=worked,
            holidays_off=off,
            **_weekend_categories(full_days),
        )

