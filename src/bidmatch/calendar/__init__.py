"""Calendar resolution and holiday lookup."""

from bidmatch.calendar.holidays import (
    CachingHolidayProvider,
    FallbackHolidayProvider,
    HolidayProvider,
    LibraryHolidayProvider,
    StaticHolidayProvider,
)
from bidmatch.calendar.resolver import (
    calendar_date,
    cycle_day_index,
    resolve,
    resolve_cycle,
    resolve_date,
)

__all__ = [
    "CachingHolidayProvider",
    "FallbackHolidayProvider",
    "HolidayProvider",
    "LibraryHolidayProvider",
    "StaticHolidayProvider",
    "calendar_date",
    "cycle_day_index",
    "resolve",
    "resolve_cycle",
    "resolve_date",
]
