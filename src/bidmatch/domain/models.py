"""Domain models for the roster analysis engine.

This module contains all core data structures used throughout the engine:
cyclic duty patterns, bid periods, shift code definitions, worker
preferences, and the derived metrics, match, conflict and mirror results.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Iterable, Iterator, Mapping, Optional, Union

from bidmatch.domain.errors import MalformedInputError, MetricsScopeError

DEFAULT_OFF_SENTINEL = "----"

SATURDAY = 5
SUNDAY = 6


def parse_wall_clock(value: str, field_name: str = "time") -> time:
    """Parse an "HH:MM" (or "HH:MM:SS" / "HHMM") wall-clock string."""
    if isinstance(value, time):
        return value
    text = str(value).strip()
    for fmt in ("%H:%M", "%H:%M:%S", "%H%M"):
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise MalformedInputError(field_name, value, "expected a wall-clock time as HH:MM")


def parse_iso_date(value: Union[str, date], field_name: str = "date") -> date:
    """Parse a "YYYY-MM-DD" calendar date."""
    if isinstance(value, datetime):
        raise MalformedInputError(field_name, value, "expected a date without a time component")
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise MalformedInputError(field_name, value, "expected a calendar date as YYYY-MM-DD")


class SlotKind(Enum):
    """What a single cycle-day slot holds."""

    OFF = "off"
    SHIFT = "shift"


@dataclass(frozen=True)
class SlotAssignment:
    """One cycle day: either an explicit day off or a shift code.

    Attributes:
        kind: Whether the slot is a day off or a working shift.
        code: The shift code for working slots, None for days off.
    """

    kind: SlotKind
    code: Optional[str] = None

    @classmethod
    def off(cls) -> "SlotAssignment":
        return cls(kind=SlotKind.OFF)

    @classmethod
    def shift(cls, code: str) -> "SlotAssignment":
        return cls(kind=SlotKind.SHIFT, code=code)

    @classmethod
    def from_value(
        cls,
        value: Optional[str],
        off_sentinel: str = DEFAULT_OFF_SENTINEL,
    ) -> "SlotAssignment":
        """Build a slot from a raw cell value.

        Empty cells and the off sentinel both mean a day off.
        """
        if value is None:
            return cls.off()
        text = str(value).strip()
        if not text or text == off_sentinel:
            return cls.off()
        return cls.shift(text)

    @property
    def is_off(self) -> bool:
        return self.kind is SlotKind.OFF

    @property
    def is_working(self) -> bool:
        return self.kind is SlotKind.SHIFT

    def __repr__(self) -> str:
        return "Off" if self.is_off else f"Shift({self.code})"


@dataclass(frozen=True)
class CyclePattern:
    """The repeating unit of a roster, one slot per cycle day.

    Slots are addressed with 1-based cycle-day indices, so ``pattern[1]`` is
    the first day of the cycle. The cycle length is the number of slots.

    Attributes:
        slots: Ordered slot assignments for cycle days 1..N.
    """

    slots: tuple[SlotAssignment, ...] = ()

    @classmethod
    def from_codes(
        cls,
        codes: Iterable[Optional[str]],
        off_sentinel: str = DEFAULT_OFF_SENTINEL,
    ) -> "CyclePattern":
        """Create a pattern from raw cell values in cycle order."""
        return cls(tuple(SlotAssignment.from_value(c, off_sentinel) for c in codes))

    @classmethod
    def from_day_columns(
        cls,
        columns: Mapping[Union[str, int], Optional[str]],
        off_sentinel: str = DEFAULT_OFF_SENTINEL,
    ) -> "CyclePattern":
        """Create a pattern from a day-column mapping.

        Keys are either integers or zero-padded column names such as
        ``DAY_001``. Days must run 1..N without gaps.
        """
        by_day: dict[int, Optional[str]] = {}
        for key, value in columns.items():
            if isinstance(key, int):
                day_number = key
            else:
                digits = str(key).upper().removeprefix("DAY_").removeprefix("DAY")
                if not digits.isdigit():
                    continue
                day_number = int(digits)
            by_day[day_number] = value

        expected = list(range(1, len(by_day) + 1))
        if sorted(by_day) != expected:
            raise MalformedInputError(
                "pattern", sorted(by_day), "day columns must run from 1 without gaps"
            )
        return cls.from_codes((by_day[d] for d in expected), off_sentinel)

    @property
    def cycle_length(self) -> int:
        return len(self.slots)

    def __len__(self) -> int:
        return len(self.slots)

    def __iter__(self) -> Iterator[SlotAssignment]:
        return iter(self.slots)

    def __getitem__(self, cycle_day_index: int) -> SlotAssignment:
        if not 1 <= cycle_day_index <= len(self.slots):
            raise IndexError(
                f"cycle day {cycle_day_index} outside 1..{len(self.slots)}"
            )
        return self.slots[cycle_day_index - 1]

    def working_codes(self) -> list[str]:
        """Distinct shift codes in first-seen order."""
        seen: dict[str, None] = {}
        for slot in self.slots:
            if slot.is_working:
                seen.setdefault(slot.code, None)
        return list(seen)

    def code_counts(self) -> dict[str, int]:
        """Number of cycle days worked per shift code."""
        counts: dict[str, int] = {}
        for slot in self.slots:
            if slot.is_working:
                counts[slot.code] = counts.get(slot.code, 0) + 1
        return counts

    def off_day_indices(self) -> list[int]:
        """1-based cycle-day indices that are days off."""
        return [i for i, slot in enumerate(self.slots, 1) if slot.is_off]

    def working_day_count(self) -> int:
        return sum(1 for slot in self.slots if slot.is_working)


@dataclass(frozen=True)
class BidPeriod:
    """The calendar span a roster's cycle is tiled across.

    Attributes:
        start_date: First calendar day of the period (cycle day 1 of cycle 1).
        cycle_length: Days in one cycle.
        cycle_repeat_count: Number of times the cycle repeats.
    """

    start_date: date
    cycle_length: int
    cycle_repeat_count: int = 1

    def __post_init__(self):
        if isinstance(self.start_date, datetime) or not isinstance(self.start_date, date):
            raise MalformedInputError(
                "bid_period.start_date", self.start_date, "expected a calendar date"
            )
        if self.cycle_length <= 0:
            raise MalformedInputError(
                "bid_period.cycle_length", self.cycle_length, "must be a positive integer"
            )
        if self.cycle_repeat_count <= 0:
            raise MalformedInputError(
                "bid_period.cycle_repeat_count",
                self.cycle_repeat_count,
                "must be a positive integer",
            )

    @classmethod
    def for_pattern(
        cls,
        start_date: date,
        pattern: CyclePattern,
        cycle_repeat_count: int = 1,
    ) -> "BidPeriod":
        """Create a bid period whose cycle length matches the pattern."""
        return cls(start_date, len(pattern), cycle_repeat_count)

    @property
    def total_days(self) -> int:
        return self.cycle_length * self.cycle_repeat_count

    @property
    def end_date(self) -> date:
        """Last calendar day of the period (inclusive)."""
        return self.start_date + timedelta(days=self.total_days - 1)

    def contains(self, d: date) -> bool:
        return self.start_date <= d <= self.end_date

    def dates(self) -> list[date]:
        return [self.start_date + timedelta(days=i) for i in range(self.total_days)]

    def years(self) -> list[int]:
        """Calendar years touched by the period."""
        return list(range(self.start_date.year, self.end_date.year + 1))


@dataclass(frozen=True)
class ShiftCodeDefinition:
    """A shift code with its wall-clock begin and end times.

    End before begin means the shift crosses midnight.

    Attributes:
        code: Shift code identifier (e.g. "07AJ").
        begin_time: Wall-clock start.
        end_time: Wall-clock end.
        category: Optional explicit category; derived from begin time when None.
    """

    code: str
    begin_time: time
    end_time: time
    category: Optional[str] = None

    @classmethod
    def from_strings(
        cls,
        code: str,
        begin: str,
        end: str,
        category: Optional[str] = None,
    ) -> "ShiftCodeDefinition":
        return cls(
            code=code,
            begin_time=parse_wall_clock(begin, f"shift_codes[{code}].begin"),
            end_time=parse_wall_clock(end, f"shift_codes[{code}].end"),
            category=category,
        )

    @property
    def crosses_midnight(self) -> bool:
        return self.end_time < self.begin_time

    @property
    def duration_minutes(self) -> int:
        begin = self.begin_time.hour * 60 + self.begin_time.minute
        end = self.end_time.hour * 60 + self.end_time.minute
        if end < begin:
            end += 24 * 60
        return end - begin

    @property
    def time_range(self) -> str:
        return f"{self.begin_time.strftime('%H:%M')}-{self.end_time.strftime('%H:%M')}"


class ShiftCodeCatalog:
    """Read-only lookup of shift code definitions keyed by code."""

    def __init__(self, definitions: Iterable[ShiftCodeDefinition] = ()):
        self._by_code: dict[str, ShiftCodeDefinition] = {}
        for definition in definitions:
            self._by_code[definition.code] = definition

    def get(self, code: Optional[str]) -> Optional[ShiftCodeDefinition]:
        if code is None:
            return None
        return self._by_code.get(code)

    def __contains__(self, code: object) -> bool:
        return code in self._by_code

    def __iter__(self) -> Iterator[ShiftCodeDefinition]:
        return iter(self._by_code.values())

    def __len__(self) -> int:
        return len(self._by_code)

    def unresolved(self, codes: Iterable[str]) -> list[str]:
        """Codes (in input order) that the catalog does not define."""
        return [c for c in dict.fromkeys(codes) if c not in self._by_code]

    def codes_matching(
        self,
        categories: Iterable[str],
        lengths: Iterable[str],
        policy,
    ) -> set[str]:
        """Codes whose category and length label match the selections.

        An empty selection places no constraint on that dimension. Both
        empty matches nothing.

        Args:
            categories: Selected category names.
            lengths: Selected length labels.
            policy: A ShiftClassificationPolicy used to classify each code.

        Returns:
            Set of matching shift codes.
        """
        categories = set(categories)
        lengths = set(lengths)
        if not categories and not lengths:
            return set()
        matched = set()
        for definition in self._by_code.values():
            if categories and policy.category_of(definition) not in categories:
                continue
            if lengths and policy.length_label_of(definition) not in lengths:
                continue
            matched.add(definition.code)
        return matched


@dataclass(frozen=True)
class Roster:
    """A named recurring duty assignment (bid line) a worker can claim.

    Attributes:
        roster_id: Unique identifier.
        group: Operation or group the roster belongs to.
        pattern: The repeating cycle.
        bid_period: The period the cycle is tiled across.
        line: Optional display line number.
    """

    roster_id: str
    group: str
    pattern: CyclePattern
    bid_period: BidPeriod
    line: Optional[str] = None


@dataclass(frozen=True)
class ResolvedDay:
    """A cycle slot placed on the calendar."""

    date: date
    weekday: int  # Monday == 0
    cycle_day_index: int
    assignment: SlotAssignment

    @property
    def is_working(self) -> bool:
        return self.assignment.is_working

    @property
    def is_saturday(self) -> bool:
        return self.weekday == SATURDAY

    @property
    def is_sunday(self) -> bool:
        return self.weekday == SUNDAY


class CountScope(Enum):
    """What span of time a metrics object's counts cover."""

    SINGLE_CYCLE = "single_cycle"
    FULL_PERIOD = "full_period"


@dataclass(frozen=True)
class BlockHistogram:
    """Exact histogram of run lengths (length -> number of runs)."""

    counts: dict[int, int] = field(default_factory=dict)

    @classmethod
    def from_lengths(cls, lengths: Iterable[int]) -> "BlockHistogram":
        counts: dict[int, int] = {}
        for length in lengths:
            counts[length] = counts.get(length, 0) + 1
        return cls(dict(sorted(counts.items())))

    def count(self, length: int) -> int:
        return self.counts.get(length, 0)

    def count_at_least(self, length: int) -> int:
        return sum(n for size, n in self.counts.items() if size >= length)

    @property
    def total_blocks(self) -> int:
        return sum(self.counts.values())

    @property
    def total_days(self) -> int:
        return sum(size * n for size, n in self.counts.items())

    @property
    def longest(self) -> int:
        return max(self.counts, default=0)

    @property
    def shortest(self) -> int:
        return min(self.counts, default=0)

    def bucketed(self, max_bucket: int = 6) -> dict[str, int]:
        """Display buckets 1..max_bucket-1 plus an open "max_bucket+" bucket."""
        buckets = {str(size): self.count(size) for size in range(1, max_bucket)}
        buckets[f"{max_bucket}+"] = self.count_at_least(max_bucket)
        return buckets

    def scaled(self, factor: int) -> "BlockHistogram":
        return BlockHistogram({size: n * factor for size, n in self.counts.items()})


@dataclass(frozen=True)
class ScheduleMetrics:
    """Structural metrics for a resolved roster.

    Counts cover a single cycle or the whole bid period, as recorded in
    ``scope``. Use :meth:`scaled_to_period` to turn single-cycle counts into
    full-period counts in one step.

    Attributes:
        scope: Span the counts cover.
        repeat_factor: Repeat count applied when scaling (1 when unscaled).
        total_days: Days in the analyzed span.
        days_worked: Working days in the span.
        weekends_worked: Saturday/Sunday pairs with both days worked.
        saturdays_only: Pairs with only the Saturday worked.
        sundays_only: Pairs with only the Sunday worked.
        weekends_off: Pairs with neither day worked.
        work_blocks: Histogram of consecutive working-day runs.
        off_blocks: Histogram of consecutive off-day runs.
        holidays_worked: Holiday dates that fall on a working day.
        holidays_off: Holiday dates that fall on a day off.
        shift_summary: Display summary of the distinct codes used.
        shift_code_counts: Days worked per shift code.
        weekday_worked: Days worked per weekday (Monday == 0).
        weekday_available: Days in the span per weekday.
        friday_weekend_blocks: Work blocks covering a Friday-Saturday-Sunday run.
        weekday_blocks: Five-day work blocks running Monday to Friday.
        unresolved_codes: Worked codes missing from the shift catalog.
    """

    scope: CountScope
    repeat_factor: int = 1
    total_days: int = 0
    days_worked: int = 0
    weekends_worked: int = 0
    saturdays_only: int = 0
    sundays_only: int = 0
    weekends_off: int = 0
    work_blocks: BlockHistogram = field(default_factory=BlockHistogram)
    off_blocks: BlockHistogram = field(default_factory=BlockHistogram)
    holidays_worked: int = 0
    holidays_off: int = 0
    shift_summary: str = "No shifts"
    shift_code_counts: dict[str, int] = field(default_factory=dict)
    weekday_worked: dict[int, int] = field(default_factory=dict)
    weekday_available: dict[int, int] = field(default_factory=dict)
    friday_weekend_blocks: int = 0
    weekday_blocks: int = 0
    unresolved_codes: tuple[str, ...] = ()

    @property
    def days_off(self) -> int:
        return self.total_days - self.days_worked

    @property
    def total_weekends(self) -> int:
        return self.weekends_worked + self.saturdays_only + self.sundays_only + self.weekends_off

    @property
    def saturdays_worked(self) -> int:
        return self.weekends_worked + self.saturdays_only

    @property
    def sundays_worked(self) -> int:
        return self.weekends_worked + self.sundays_only

    @property
    def longest_work_stretch(self) -> int:
        return self.work_blocks.longest

    @property
    def longest_off_stretch(self) -> int:
        return self.off_blocks.longest

    @property
    def shortest_off_stretch(self) -> int:
        return self.off_blocks.shortest

    def scaled_to_period(self, repeat_count: int) -> "ScheduleMetrics":
        """Scale single-cycle counts to the full bid period.

        Every count is multiplied uniformly. Stretch lengths are unchanged
        since the histogram keys are run lengths, not counts.

        Raises:
            MetricsScopeError: If these metrics already cover the full period.
        """
        if self.scope is not CountScope.SINGLE_CYCLE:
            raise MetricsScopeError("metrics already cover the full bid period")
        if repeat_count <= 0:
            raise MalformedInputError("cycle_repeat_count", repeat_count, "must be a positive integer")
        k = repeat_count
        return replace(
            self,
            scope=CountScope.FULL_PERIOD,
            repeat_factor=k,
            total_days=self.total_days * k,
            days_worked=self.days_worked * k,
            weekends_worked=self.weekends_worked * k,
            saturdays_only=self.saturdays_only * k,
            sundays_only=self.sundays_only * k,
            weekends_off=self.weekends_off * k,
            work_blocks=self.work_blocks.scaled(k),
            off_blocks=self.off_blocks.scaled(k),
            holidays_worked=self.holidays_worked * k,
            holidays_off=self.holidays_off * k,
            shift_code_counts={c: n * k for c, n in self.shift_code_counts.items()},
            weekday_worked={d: n * k for d, n in self.weekday_worked.items()},
            weekday_available={d: n * k for d, n in self.weekday_available.items()},
            friday_weekend_blocks=self.friday_weekend_blocks * k,
            weekday_blocks=self.weekday_blocks * k,
        )


@dataclass(frozen=True)
class PreferenceWeights:
    """Relative weight of each preference criterion.

    Zero disables a criterion. Block-length criteria are off by default
    since most workers have no opinion on them.
    """

    group: float = 1.0
    days_off: float = 1.0
    shift: float = 1.0
    blocks_4day: float = 0.0
    blocks_5day: float = 0.0
    weekend: float = 1.0
    saturday: float = 1.0
    sunday: float = 1.0

    def __post_init__(self):
        for name in (
            "group", "days_off", "shift", "blocks_4day",
            "blocks_5day", "weekend", "saturday", "sunday",
        ):
            value = getattr(self, name)
            if value < 0:
                raise MalformedInputError(f"weights.{name}", value, "must not be negative")


class Criterion(Enum):
    """Preference criteria in scoring and explanation order."""

    GROUP = "group"
    DAYS_OFF = "days_off"
    SHIFT = "shift"
    BLOCKS_4DAY = "blocks_4day"
    BLOCKS_5DAY = "blocks_5day"
    WEEKEND = "weekend"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    def weight_in(self, weights: PreferenceWeights) -> float:
        return getattr(weights, self.value)


class WeekendStance(Enum):
    """Which direction a worker leans on weekend work."""

    INDIFFERENT = "indifferent"
    FEWER = "fewer"
    MORE = "more"


class CategoryIntent(Enum):
    """How multiple selected shift categories combine.

    ANY accepts any selected category; MIX asks for a roster that rotates
    through at least two of them.
    """

    ANY = "any"
    MIX = "mix"


@dataclass(frozen=True)
class PreferenceCriteria:
    """A worker's weighted roster preferences.

    Attributes:
        selected_groups: Groups the worker wants; empty means any.
        selected_shift_codes: Explicit shift codes.
        selected_shift_categories: Categories such as "Days" or "Midnights".
        selected_shift_lengths: Length labels such as "8 Hour Shift".
        category_intent: How multiple categories combine.
        requested_days_off: Calendar dates the worker wants off.
        weekend_stance: Direction for full-weekend work.
        saturday_stance: Direction for Saturday work.
        sunday_stance: Direction for Sunday work.
        weights: Per-criterion weights.
        mandatory: Criteria treated as hard filters.
    """

    selected_groups: frozenset[str] = frozenset()
    selected_shift_codes: frozenset[str] = frozenset()
    selected_shift_categories: frozenset[str] = frozenset()
    selected_shift_lengths: frozenset[str] = frozenset()
    category_intent: CategoryIntent = CategoryIntent.ANY
    requested_days_off: frozenset[date] = frozenset()
    weekend_stance: WeekendStance = WeekendStance.INDIFFERENT
    saturday_stance: WeekendStance = WeekendStance.INDIFFERENT
    sunday_stance: WeekendStance = WeekendStance.INDIFFERENT
    weights: PreferenceWeights = field(default_factory=PreferenceWeights)
    mandatory: frozenset[Criterion] = frozenset()

    def __post_init__(self):
        # Accept any iterable and normalize to frozensets.
        for name in (
            "selected_groups",
            "selected_shift_codes",
            "selected_shift_categories",
            "selected_shift_lengths",
            "requested_days_off",
            "mandatory",
        ):
            object.__setattr__(self, name, frozenset(getattr(self, name)))

    @property
    def has_shift_selection(self) -> bool:
        return bool(
            self.selected_shift_codes
            or self.selected_shift_categories
            or self.selected_shift_lengths
        )


@dataclass(frozen=True)
class CriterionContribution:
    """How one criterion moved a match score.

    Attributes:
        criterion: The criterion.
        weight: Weight it was scored with.
        partial: Partial score in [0, 1].
        points: Points contributed to the final 0..100 score.
        text: Human-readable phrase.
    """

    criterion: Criterion
    weight: float
    partial: float
    points: float
    text: str


@dataclass(frozen=True)
class MatchResult:
    """Score of one roster against one set of preferences."""

    roster_id: str
    score: int
    metrics: ScheduleMetrics
    explanation: list[str] = field(default_factory=list)
    contributions: list[CriterionContribution] = field(default_factory=list)
    hard_filter_failed: Optional[Criterion] = None
    unresolved_codes: tuple[str, ...] = ()


@dataclass(frozen=True)
class ConflictDetail:
    """Outcome for one requested day off.

    Attributes:
        date: The requested date.
        cycle_day_index: Cycle day the date resolves to.
        is_conflict: True when the roster works that day.
        code: Shift code worked, if any.
        begin_time: Shift begin time, when known.
        end_time: Shift end time, when known.
        unresolved: True when the code is missing from the catalog.
    """

    date: date
    cycle_day_index: int
    is_conflict: bool
    code: Optional[str] = None
    begin_time: Optional[time] = None
    end_time: Optional[time] = None
    unresolved: bool = False


@dataclass(frozen=True)
class DayOffConflictResult:
    """Requested days off compared against one roster."""

    roster_id: str
    matching_dates: list[date] = field(default_factory=list)
    conflicts: list[ConflictDetail] = field(default_factory=list)
    details: list[ConflictDetail] = field(default_factory=list)
    match_percentage: int = 100
    has_requests: bool = False

    @property
    def total_requested(self) -> int:
        return len(self.details)

    @property
    def matching_count(self) -> int:
        return len(self.matching_dates)


@dataclass(frozen=True)
class MirrorCandidate:
    """A roster ranked by how many target off-days it also has off.

    Attributes:
        roster_id: Candidate roster.
        group: Candidate's group.
        matched_off_day_count: Target off-days the candidate has off.
        total_requested_off_day_count: Number of target off-days.
        match_percentage: Rounded share of matched target off-days.
        shared_shift_code_score: Tie-break score (code overlap + group bonus).
        matched_dates: Target off-days the candidate has off.
        is_same_group: True when in the reference roster's group.
        shift_times: Up to three of the candidate's codes with their times.
    """

    roster_id: str
    group: str
    matched_off_day_count: int
    total_requested_off_day_count: int
    match_percentage: int
    shared_shift_code_score: int
    matched_dates: list[date] = field(default_factory=list)
    is_same_group: bool = False
    shift_times: list[ShiftCodeDefinition] = field(default_factory=list)


@dataclass(frozen=True)
class BatchFailure:
    """A roster that could not be processed.

    Attributes:
        roster_id: Roster that failed.
        error_type: Exception class name.
        message: Exception message.
    """

    roster_id: str
    error_type: str
    message: str

    @classmethod
    def from_error(cls, roster_id: str, error: Exception) -> "BatchFailure":
        return cls(roster_id, type(error).__name__, str(error))
