"""Holiday lookup for metrics.

Holiday sources return the set of public holiday dates for a jurisdiction
and a range of years. ``CachingHolidayProvider`` is the object engines are
handed: it owns a per-(jurisdiction, year) memo map, retries a primary
source with backoff and falls back to computed federal holidays when the
source cannot answer. It never raises for a lookup failure.

Jurisdictions are ISO codes, either a country ("CA") or a country plus
subdivision ("CA-ON").
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from datetime import date, timedelta
from typing import Callable, Iterable, Optional

import holidays

from bidmatch.domain.errors import HolidaySourceError, UnknownJurisdictionError

logger = logging.getLogger(__name__)


def split_jurisdiction(jurisdiction: str) -> tuple[str, Optional[str]]:
    """Split "CA-ON" into ("CA", "ON"); "CA" gives ("CA", None)."""
    country, _, subdivision = jurisdiction.strip().upper().partition("-")
    return country, subdivision or None


def easter_sunday(year: int) -> date:
    """Western Easter Sunday (anonymous Gregorian algorithm)."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def nth_weekday(year: int, month: int, weekday: int, n: int) -> date:
    """The n-th given weekday (Monday == 0) of a month."""
    first = date(year, month, 1)
    offset = (weekday - first.weekday()) % 7
    return first + timedelta(days=offset + 7 * (n - 1))


class HolidayProvider(ABC):
    """Abstract base class for holiday sources."""

    @abstractmethod
    def holidays_for(self, jurisdiction: str, years: Iterable[int]) -> frozenset[date]:
        """Holiday dates in the given years.

        Args:
            jurisdiction: ISO country or country-subdivision code.
            years: Calendar years to cover.

        Returns:
            Set of holiday dates.

        Raises:
            HolidaySourceError: If the source cannot answer.
        """
        pass


class LibraryHolidayProvider(HolidayProvider):
    """Holidays from the ``holidays`` package calendars."""

    def holidays_for(self, jurisdiction: str, years: Iterable[int]) -> frozenset[date]:
        country, subdivision = split_jurisdiction(jurisdiction)
        years = sorted(set(years))
        if not years:
            return frozenset()
        try:
            calendar = holidays.country_holidays(country, subdiv=subdivision, years=years)
        except NotImplementedError as e:
            raise UnknownJurisdictionError(str(e)) from e
        except (LookupError, ValueError) as e:
            raise HolidaySourceError(f"{jurisdiction}: {e}") from e
        return frozenset(calendar.keys())


class FallbackHolidayProvider(HolidayProvider):
    """Computed Canadian federal statutory holidays.

    Used when the primary source is unavailable. The same dates are
    returned for every jurisdiction.

    Holidays:
    - New Year's Day (Jan 1)
    - Good Friday (Easter - 2)
    - Victoria Day (Monday before May 25)
    - Canada Day (Jul 1)
    - Labour Day (first Monday of September)
    - Thanksgiving (second Monday of October)
    - Remembrance Day (Nov 11)
    - Christmas Day (Dec 25)
    - Boxing Day (Dec 26)
    """

    FIXED_HOLIDAYS = {
        1: [1],  # New Year's Day
        7: [1],  # Canada Day
        11: [11],  # Remembrance Day
        12: [25, 26],  # Christmas, Boxing Day
    }
    MOVABLE_HOLIDAY_OFFSETS = {  # Days relative to Easter
        "good_friday": -2,
    }

    def holidays_for(self, jurisdiction: str, years: Iterable[int]) -> frozenset[date]:
        result = set()
        for year in years:
            for month, days in self.FIXED_HOLIDAYS.items():
                result.update(date(year, month, d) for d in days)

            easter = easter_sunday(year)
            result.update(
                easter + timedelta(days=offset)
                for offset in self.MOVABLE_HOLIDAY_OFFSETS.values()
            )

            may_24 = date(year, 5, 24)
            result.add(may_24 - timedelta(days=may_24.weekday()))  # Victoria Day
            result.add(nth_weekday(year, 9, 0, 1))  # Labour Day
            result.add(nth_weekday(year, 10, 0, 2))  # Thanksgiving
        return frozenset(result)


class StaticHolidayProvider(HolidayProvider):
    """A fixed set of holiday dates, filtered to the requested years."""

    def __init__(self, dates: Iterable[date] = ()):
        self._dates = frozenset(dates)

    def holidays_for(self, jurisdiction: str, years: Iterable[int]) -> frozenset[date]:
        wanted = set(years)
        return frozenset(d for d in self._dates if d.year in wanted)


class CachingHolidayProvider(HolidayProvider):
    """Memoizing holiday provider with retry and fallback.

    Results are cached per (jurisdiction, year). Population is lazy and
    idempotent, so concurrent first lookups may both compute a year but
    only one result is stored.

    Attributes:
        source: Primary holiday source.
        fallback: Source used when the primary fails.
        retry_attempts: Attempts against the primary source per year.
        backoff_seconds: Initial delay between attempts, doubled each retry.
    """

    def __init__(
        self,
        source: Optional[HolidayProvider] = None,
        fallback: Optional[HolidayProvider] = None,
        retry_attempts: int = 3,
        backoff_seconds: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.source = source or LibraryHolidayProvider()
        self.fallback = fallback or FallbackHolidayProvider()
        self.retry_attempts = max(1, retry_attempts)
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep
        self._cache: dict[tuple[str, int], frozenset[date]] = {}
        self._lock = threading.Lock()

    def holidays_for(self, jurisdiction: str, years: Iterable[int]) -> frozenset[date]:
        key_jurisdiction = jurisdiction.strip().upper()
        result: set[date] = set()
        for year in sorted(set(years)):
            key = (key_jurisdiction, year)
            with self._lock:
                cached = self._cache.get(key)
            if cached is None:
                computed = self._load_year(key_jurisdiction, year)
                with self._lock:
                    cached = self._cache.setdefault(key, computed)
            result.update(cached)
        return frozenset(result)

    def clear(self) -> None:
        """Drop every cached year."""
        with self._lock:
            self._cache.clear()

    def cached_keys(self) -> list[tuple[str, int]]:
        with self._lock:
            return sorted(self._cache)

    def _load_year(self, jurisdiction: str, year: int) -> frozenset[date]:
        delay = self.backoff_seconds
        for attempt in range(1, self.retry_attempts + 1):
            try:
                return self._fetch(jurisdiction, year)
            except UnknownJurisdictionError as e:
                logger.warning(
                    "No holiday calendar for %s (%s); using fallback holidays",
                    jurisdiction, e,
                )
                break
            except HolidaySourceError as e:
                if attempt == self.retry_attempts:
                    logger.warning(
                        "Holiday source failed for %s %d after %d attempts (%s); "
                        "using fallback holidays",
                        jurisdiction, year, attempt, e,
                    )
                    break
                logger.debug(
                    "Holiday source attempt %d for %s %d failed: %s",
                    attempt, jurisdiction, year, e,
                )
                self._sleep(delay)
                delay *= 2
        return self.fallback.holidays_for(jurisdiction, [year])

    def _fetch(self, jurisdiction: str, year: int) -> frozenset[date]:
        """One lookup against the primary source.

        I/O and data errors from the source count as source failures, so
        they are retried and fall back like any other.
        """
        try:
            return self.source.holidays_for(jurisdiction, [year])
        except HolidaySourceError:
            raise
        except (OSError, LookupError, ValueError) as e:
            raise HolidaySourceError(f"{type(e).__name__}: {e}") from e
