"""Engine configuration.

Configuration is a plain dataclass with documented defaults. It can be
built from a dict or loaded from a JSON file; unknown keys are rejected so
that typos surface instead of silently falling back to defaults.
"""

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Union

from bidmatch.calendar.holidays import CachingHolidayProvider
from bidmatch.domain.errors import MalformedInputError
from bidmatch.domain.models import DEFAULT_OFF_SENTINEL


@dataclass
class EngineConfig:
    """Configuration for the analysis engines.

    Attributes:
        off_sentinel: Cell value that marks a day off in raw patterns.
        jurisdiction: Holiday jurisdiction, "CA" or "CA-ON" style.
        max_workers: Thread pool size for batch runs.
        full_period_metrics: Compute every metric on the fully tiled period
            instead of scaling one cycle.
        holiday_retry_attempts: Attempts against the holiday source per year.
        holiday_retry_backoff_seconds: Initial delay between attempts.
    """

    off_sentinel: str = DEFAULT_OFF_SENTINEL
    jurisdiction: str = "CA"
    max_workers: int = 4
    full_period_metrics: bool = False
    holiday_retry_attempts: int = 3
    holiday_retry_backoff_seconds: float = 0.5

    def __post_init__(self):
        if not isinstance(self.off_sentinel, str) or not self.off_sentinel.strip():
            raise MalformedInputError("off_sentinel", self.off_sentinel, "must be a non-empty string")
        if not isinstance(self.jurisdiction, str) or not self.jurisdiction.strip():
            raise MalformedInputError("jurisdiction", self.jurisdiction, "must be a non-empty string")
        if not isinstance(self.max_workers, int) or self.max_workers < 1:
            raise MalformedInputError("max_workers", self.max_workers, "must be at least 1")
        if not isinstance(self.full_period_metrics, bool):
            raise MalformedInputError(
                "full_period_metrics", self.full_period_metrics, "must be true or false"
            )
        if not isinstance(self.holiday_retry_attempts, int) or self.holiday_retry_attempts < 1:
            raise MalformedInputError(
                "holiday_retry_attempts", self.holiday_retry_attempts, "must be at least 1"
            )
        if (
            not isinstance(self.holiday_retry_backoff_seconds, (int, float))
            or self.holiday_retry_backoff_seconds < 0
        ):
            raise MalformedInputError(
                "holiday_retry_backoff_seconds",
                self.holiday_retry_backoff_seconds,
                "must not be negative",
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EngineConfig":
        """Build a config from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise MalformedInputError("config", unknown, "unknown configuration keys")
        return cls(**data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "EngineConfig":
        """Load a config from a JSON file."""
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise MalformedInputError("config", str(path), f"invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise MalformedInputError("config", str(path), "expected a JSON object")
        return cls.from_dict(data)

    def holiday_provider(self) -> CachingHolidayProvider:
        """A caching holiday provider using this config's retry settings."""
        return CachingHolidayProvider(
            retry_attempts=self.holiday_retry_attempts,
            backoff_seconds=self.holiday_retry_backoff_seconds,
        )
