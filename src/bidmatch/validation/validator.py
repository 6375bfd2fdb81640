"""Validation of roster input before analysis.

Errors make a roster unusable for analysis; warnings flag input that the
engines will still process, with degraded results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from bidmatch.domain.models import Roster, ShiftCodeCatalog


class ValidationErrorType(Enum):
    """Types of validation errors."""

    EMPTY_PATTERN = "empty_pattern"
    CYCLE_LENGTH_MISMATCH = "cycle_length_mismatch"
    UNKNOWN_SHIFT_CODE = "unknown_shift_code"
    DUPLICATE_ROSTER_ID = "duplicate_roster_id"
    NO_WORKING_DAYS = "no_working_days"


@dataclass
class ValidationError:
    """A single validation error."""

    error_type: ValidationErrorType
    message: str
    roster_id: Optional[str] = None
    cycle_day: Optional[int] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.roster_id:
            parts.append(f"Roster {self.roster_id}:")
        parts.append(self.message)
        if self.cycle_day is not None:
            parts.append(f"(cycle day {self.cycle_day})")
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of validating one or more rosters."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)

    def merge(self, other: "ValidationResult") -> None:
        for error in other.errors:
            self.add_error(error)
        self.warnings.extend(other.warnings)


class RosterValidator:
    """Checks rosters against their bid periods and the shift catalog.

    Example:
        >>> validator = RosterValidator()
        >>> result = validator.validate(roster, catalog)
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error)
    """

    def validate(
        self,
        roster: Roster,
        catalog: Optional[ShiftCodeCatalog] = None,
    ) -> ValidationResult:
        """Validate a single roster.

        Args:
            roster: Roster to check.
            catalog: Shift code definitions; unknown codes are only checked
                when a catalog is given.

        Returns:
            ValidationResult with is_valid flag, errors and warnings.
        """
        result = ValidationResult(is_valid=True)
        pattern = roster.pattern

        if not len(pattern):
            result.add_warning(
                str(
                    ValidationError(
                        error_type=ValidationErrorType.EMPTY_PATTERN,
                        message="Pattern has no days",
                        roster_id=roster.roster_id,
                    )
                )
            )
            return result

        if len(pattern) != roster.bid_period.cycle_length:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.CYCLE_LENGTH_MISMATCH,
                    message=(
                        f"Pattern has {len(pattern)} days but the bid period cycle "
                        f"is {roster.bid_period.cycle_length} days"
                    ),
                    roster_id=roster.roster_id,
                    details={
                        "pattern_length": len(pattern),
                        "cycle_length": roster.bid_period.cycle_length,
                    },
                )
            )

        if pattern.working_day_count() == 0:
            result.add_warning(
                str(
                    ValidationError(
                        error_type=ValidationErrorType.NO_WORKING_DAYS,
                        message="Pattern has no working days",
                        roster_id=roster.roster_id,
                    )
                )
            )

        if catalog is not None:
            self._check_codes(roster, catalog, result)

        return result

    def validate_many(
        self,
        rosters: Iterable[Roster],
        catalog: Optional[ShiftCodeCatalog] = None,
    ) -> ValidationResult:
        """Validate rosters individually and check ids are unique."""
        result = ValidationResult(is_valid=True)
        seen: set[str] = set()
        for roster in rosters:
            if roster.roster_id in seen:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.DUPLICATE_ROSTER_ID,
                        message="Roster id appears more than once",
                        roster_id=roster.roster_id,
                    )
                )
            seen.add(roster.roster_id)
            result.merge(self.validate(roster, catalog))
        return result

    def _check_codes(
        self,
        roster: Roster,
        catalog: ShiftCodeCatalog,
        result: ValidationResult,
    ) -> None:
        """Warn once per unknown code, at its first cycle day."""
        reported: set[str] = set()
        for cycle_day, slot in enumerate(roster.pattern, 1):
            if not slot.is_working or slot.code in catalog or slot.code in reported:
                continue
            reported.add(slot.code)
            result.add_warning(
                str(
                    ValidationError(
                        error_type=ValidationErrorType.UNKNOWN_SHIFT_CODE,
                        message=f"Shift code {slot.code} is not defined; treated as working",
                        roster_id=roster.roster_id,
                        cycle_day=cycle_day,
                    )
                )
            )
