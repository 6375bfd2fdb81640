"""Exception types raised by the analysis engine.

Malformed input is reported immediately with the offending field and value.
Missing lookups (unknown shift codes, unknown jurisdictions) are not errors;
they degrade and are reported on the result objects instead.
"""

from typing import Any, Optional


class BidMatchError(Exception):
    """Base class for all engine errors."""


class MalformedInputError(BidMatchError, ValueError):
    """Input that cannot be analyzed as given.

    Attributes:
        field: Name or path of the offending field (e.g. "bid_period.cycle_length").
        value: The rejected value.
    """

    def __init__(self, field: str, value: Any, message: Optional[str] = None):
        self.field = field
        self.value = value
        detail = message or "invalid value"
        super().__init__(f"{field}={value!r}: {detail}")


class DateOutOfRangeError(MalformedInputError):
    """A calendar date lies outside the bid period it was resolved against."""


class MetricsScopeError(BidMatchError):
    """Metrics were scaled or combined in a scope they do not support."""


class HolidaySourceError(BidMatchError):
    """A holiday source could not produce holidays for a jurisdiction/year."""


class UnknownJurisdictionError(HolidaySourceError):
    """A holiday source has no calendar for the requested jurisdiction."""
