"""Calendar resolution for cyclic rosters.

Maps between day offsets in a bid period and 1-based cycle-day indices.
The cycle repeats back to back from the period start, so day offset ``d``
always lands on cycle day ``(d mod cycle_length) + 1``. Weekdays come from
the absolute calendar date; when the cycle length is not a multiple of 7
the weekday of a given cycle day drifts between repeats and that is
expected.
"""

import logging
from datetime import date, timedelta

from bidmatch.domain.errors import DateOutOfRangeError, MalformedInputError
from bidmatch.domain.models import BidPeriod, CyclePattern, ResolvedDay

logger = logging.getLogger(__name__)


def _check_pattern(pattern: CyclePattern, bid_period: BidPeriod) -> None:
    if len(pattern) and len(pattern) != bid_period.cycle_length:
        raise MalformedInputError(
            "pattern",
            len(pattern),
            f"pattern has {len(pattern)} days but the bid period cycle is "
            f"{bid_period.cycle_length} days",
        )


def _resolve_offset(pattern: CyclePattern, bid_period: BidPeriod, offset: int) -> ResolvedDay:
    day = bid_period.start_date + timedelta(days=offset)
    index = offset % bid_period.cycle_length + 1
    return ResolvedDay(
        date=day,
        weekday=day.weekday(),
        cycle_day_index=index,
        assignment=pattern[index],
    )


def resolve(pattern: CyclePattern, bid_period: BidPeriod) -> list[ResolvedDay]:
    """Place a cycle pattern on every day of the bid period.

    Args:
        pattern: Cycle pattern to tile.
        bid_period: Period to tile it across.

    Returns:
        One ResolvedDay per calendar day, in date order. An empty pattern
        resolves to an empty list.

    Raises:
        MalformedInputError: If the pattern length differs from the cycle length.
    """
    if not len(pattern):
        return []
    _check_pattern(pattern, bid_period)
    days = [_resolve_offset(pattern, bid_period, d) for d in range(bid_period.total_days)]
    logger.debug(
        "Resolved %d-day pattern over %d days from %s",
        len(pattern), len(days), bid_period.start_date,
    )
    return days


def resolve_cycle(
    pattern: CyclePattern,
    bid_period: BidPeriod,
    cycle_number: int = 1,
) -> list[ResolvedDay]:
    """Resolve a single repeat of the cycle (1-based cycle number)."""
    if not len(pattern):
        return []
    _check_pattern(pattern, bid_period)
    if not 1 <= cycle_number <= bid_period.cycle_repeat_count:
        raise MalformedInputError(
            "cycle_number",
            cycle_number,
            f"must be between 1 and {bid_period.cycle_repeat_count}",
        )
    first = (cycle_number - 1) * bid_period.cycle_length
    return [
        _resolve_offset(pattern, bid_period, d)
        for d in range(first, first + bid_period.cycle_length)
    ]


def cycle_day_index(day: date, bid_period: BidPeriod) -> int:
    """Map a calendar date to its 1-based cycle-day index.

    Raises:
        DateOutOfRangeError: If the date falls outside the bid period.
    """
    days_since_start = (day - bid_period.start_date).days
    if days_since_start < 0 or days_since_start >= bid_period.total_days:
        raise DateOutOfRangeError(
            "date",
            day,
            f"outside bid period {bid_period.start_date}..{bid_period.end_date}",
        )
    return days_since_start % bid_period.cycle_length + 1


def calendar_date(cycle_day: int, bid_period: BidPeriod, cycle_number: int = 1) -> date:
    """Map a cycle-day index in a given repeat to its calendar date."""
    if not 1 <= cycle_day <= bid_period.cycle_length:
        raise MalformedInputError(
            "cycle_day_index", cycle_day, f"must be between 1 and {bid_period.cycle_length}"
        )
    if not 1 <= cycle_number <= bid_period.cycle_repeat_count:
        raise MalformedInputError(
            "cycle_number",
            cycle_number,
            f"must be between 1 and {bid_period.cycle_repeat_count}",
        )
    offset = (cycle_number - 1) * bid_period.cycle_length + (cycle_day - 1)
    return bid_period.start_date + timedelta(days=offset)


def resolve_date(pattern: CyclePattern, bid_period: BidPeriod, day: date) -> ResolvedDay:
    """Resolve the single calendar date ``day`` against a pattern.

    Raises:
        DateOutOfRangeError: If the date falls outside the bid period.
        MalformedInputError: If the pattern does not fit the bid period.
    """
    _check_pattern(pattern, bid_period)
    if not len(pattern):
        raise MalformedInputError("pattern", 0, "cannot resolve a date against an empty pattern")
    index = cycle_day_index(day, bid_period)
    return ResolvedDay(
        date=day,
        weekday=day.weekday(),
        cycle_day_index=index,
        assignment=pattern[index],
    )
