"""Policy definitions for shift classification and preference scoring.

Policies hold the business rules that turn raw shift times and roster
structure into categories and partial scores. They are kept separate from
the engines so each rule can be tested and replaced on its own.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import time

from bidmatch.domain.models import BlockHistogram, ShiftCodeDefinition, WeekendStance


class ShiftClassificationPolicy(ABC):
    """Abstract base class for shift category and length rules."""

    @abstractmethod
    def category_of(self, definition: ShiftCodeDefinition) -> str:
        """Category name for a shift code (e.g. "Days", "Midnights")."""
        pass

    @abstractmethod
    def length_label_of(self, definition: ShiftCodeDefinition) -> str:
        """Display length label for a shift code (e.g. "8 Hour Shift")."""
        pass


class ScoringPolicy(ABC):
    """Abstract base class for the partial-score curves."""

    @abstractmethod
    def weekend_partial(self, stance: WeekendStance, count: int, total_weekends: int) -> float:
        """Partial score in [0, 1] for a weekend-style criterion.

        Args:
            stance: Worker's leaning on weekend work.
            count: Weekends (or Saturdays/Sundays) the roster works.
            total_weekends: Weekend pairs in the analyzed span.

        Returns:
            Partial score, 1.0 being a perfect fit.
        """
        pass

    @abstractmethod
    def block_partial(self, work_blocks: BlockHistogram, length: int) -> float:
        """Partial score in [0, 1] for preferring work blocks of a given length."""
        pass


@dataclass
class DefaultShiftClassificationPolicy(ShiftClassificationPolicy):
    """Default shift classification by begin time.

    Categories by begin time:
    - Days: 06:00-07:00
    - Late Days: 08:30-08:59
    - Mid Days: 09:00-11:30
    - Afternoons: 12:30-15:54
    - Midnights: 18:45-20:45
    - Anything else: Other

    Length labels round the duration to the nearest half hour, so a
    7h50m shift is an "8 Hour Shift" and an 8h30m shift an "8.5 Hour Shift".
    An explicit category on the definition always wins.
    """

    other_category: str = "Other"

    def category_of(self, definition: ShiftCodeDefinition) -> str:
        if definition.category:
            return definition.category

        begin = definition.begin_time
        if begin.hour == 6 or begin == time(7, 0):
            return "Days"
        if begin.hour == 8 and 30 <= begin.minute <= 59:
            return "Late Days"
        if time(9, 0) <= begin <= time(11, 30):
            return "Mid Days"
        if time(12, 30) <= begin <= time(15, 54):
            return "Afternoons"
        if time(18, 45) <= begin <= time(20, 45):
            return "Midnights"
        return self.other_category

    def length_label_of(self, definition: ShiftCodeDefinition) -> str:
        hours = definition.duration_minutes / 60
        whole = round(hours)
        if abs(hours - whole) < 0.25:
            return f"{whole} Hour Shift"
        return f"{int(hours)}.5 Hour Shift"


@dataclass
class DefaultScoringPolicy(ScoringPolicy):
    """Default scoring curves.

    Weekend curves are linear in the share of weekends worked:
    - FEWER: 1 - worked / total
    - MORE: worked / total
    - INDIFFERENT: neutral (1.0)

    A span without weekends is neutral for every stance. The block curve is
    the share of work blocks with exactly the preferred length.
    """

    neutral: float = 1.0

    def weekend_partial(self, stance: WeekendStance, count: int, total_weekends: int) -> float:
        if total_weekends <= 0 or stance is WeekendStance.INDIFFERENT:
            return self.neutral
        share = min(count, total_weekends) / total_weekends
        if stance is WeekendStance.FEWER:
            return 1.0 - share
        return share

    def block_partial(self, work_blocks: BlockHistogram, length: int) -> float:
        total = work_blocks.total_blocks
        if total == 0:
            return 0.0
        return work_blocks.count(length) / total
