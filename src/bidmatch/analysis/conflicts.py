"""Day-off conflict detection.

Compares a worker's requested days off against a roster: each requested
date is mapped back to its cycle day and checked for a working shift.
"""

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from bidmatch.calendar.resolver import cycle_day_index, resolve_date
from bidmatch.domain.models import (
    BidPeriod,
    ConflictDetail,
    DayOffConflictResult,
    Roster,
    ShiftCodeCatalog,
)

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percentage(part: int, whole: int) -> int:
    """Rounded percentage of ``part`` in ``whole``; 100 when ``whole`` is 0."""
    if whole <= 0:
        return 100
    return round_half_up(100 * part / whole)


def find_conflicts(
    roster: Roster,
    bid_period: BidPeriod,
    requested_dates: Iterable[date],
    catalog: Optional[ShiftCodeCatalog] = None,
) -> DayOffConflictResult:
    """Check requested days off against a roster.

    Args:
        roster: Roster to check.
        bid_period: Bid period the requested dates are resolved against.
        requested_dates: Dates the worker wants off; duplicates collapse.
        catalog: Shift catalog used to attach begin/end times to conflicts.

    Returns:
        DayOffConflictResult with one detail per distinct requested date,
        in date order. An empty pattern has no working days, so every
        requested date in the period matches.

    Raises:
        DateOutOfRangeError: If a requested date lies outside the bid period.
    """
    requested = sorted(set(requested_dates))
    if not requested:
        return DayOffConflictResult(roster_id=roster.roster_id, match_percentage=100, has_requests=False)

    details: list[ConflictDetail] = []
    for day in requested:
        if not len(roster.pattern):
            # No working days; every in-period date is off
            details.append(
                ConflictDetail(
                    date=day, cycle_day_index=cycle_day_index(day, bid_period), is_conflict=False
                )
            )
            continue

        resolved = resolve_date(roster.pattern, bid_period, day)
        if not resolved.is_working:
            details.append(
                ConflictDetail(date=day, cycle_day_index=resolved.cycle_day_index, is_conflict=False)
            )
            continue

        code = resolved.assignment.code
        definition = catalog.get(code) if catalog is not None else None
        if definition is None:
            logger.debug("Shift code %s on %s has no definition", code, day)
        details.append(
            ConflictDetail(
                date=day,
                cycle_day_index=resolved.cycle_day_index,
                is_conflict=True,
                code=code,
                begin_time=definition.begin_time if definition else None,
                end_time=definition.end_time if definition else None,
                unresolved=definition is None,
            )
        )

    matching = [d.date for d in details if not d.is_conflict]
    conflicts = [d for d in details if d.is_conflict]
    result = DayOffConflictResult(
        roster_id=roster.roster_id,
        matching_dates=matching,
        conflicts=conflicts,
        details=details,
        match_percentage=percentage(len(matching), len(details)),
        has_requests=True,
    )
    logger.debug(
        "Roster %s: %d/%d requested days off match",
        roster.roster_id, len(matching), len(details),
    )
    return result
