"""Tests for calendar resolution of cyclic patterns."""

from datetime import date, timedelta

import pytest

from bidmatch.calendar.resolver import (
    calendar_date,
    cycle_day_index,
    resolve,
    resolve_cycle,
    resolve_date,
)
from bidmatch.domain.errors import DateOutOfRangeError, MalformedInputError
from bidmatch.domain.models import BidPeriod, CyclePattern, SlotAssignment


class TestCyclePattern:
    """Tests for building cycle patterns from raw cells."""

    def test_off_sentinel_and_blanks_are_off(self):
        """The sentinel, empty strings and None all mean a day off."""
        pattern = CyclePattern.from_codes(["07AJ", "----", "", None, " 0900 "])

        assert pattern[1] == SlotAssignment.shift("07AJ")
        assert pattern[2].is_off
        assert pattern[3].is_off
        assert pattern[4].is_off
        assert pattern[5] == SlotAssignment.shift("0900")

    def test_custom_off_sentinel(self):
        """A configured sentinel replaces the default one."""
        pattern = CyclePattern.from_codes(["OFF", "----"], off_sentinel="OFF")

        assert pattern[1].is_off
        assert pattern[2] == SlotAssignment.shift("----")

    def test_day_columns_in_any_order(self):
        """DAY_nnn columns are ordered by day number."""
        pattern = CyclePattern.from_day_columns(
            {"DAY_003": "0900", "DAY_001": "07AJ", "DAY_002": "----", "GROUP": "OPS"}
        )

        assert len(pattern) == 3
        assert pattern.working_codes() == ["07AJ", "0900"]
        assert pattern.off_day_indices() == [2]

    def test_day_columns_with_gap_rejected(self):
        """Missing day columns are malformed input."""
        with pytest.raises(MalformedInputError):
            CyclePattern.from_day_columns({"DAY_001": "07AJ", "DAY_003": "07AJ"})

    def test_index_is_one_based(self):
        """Cycle day 0 does not exist."""
        pattern = CyclePattern.from_codes(["07AJ"])

        with pytest.raises(IndexError):
            pattern[0]


class TestBidPeriod:
    """Tests for bid period construction."""

    def test_total_days_and_end_date(self):
        """The period spans cycle length times repeat count."""
        period = BidPeriod(date(2025, 1, 6), 56, 3)

        assert period.total_days == 168
        assert period.end_date == date(2025, 1, 6) + timedelta(days=167)

    @pytest.mark.parametrize("length,repeats", [(0, 1), (-7, 1), (56, 0), (56, -1)])
    def test_non_positive_sizes_rejected(self, length, repeats):
        """Zero or negative sizes name the offending field."""
        with pytest.raises(MalformedInputError) as exc_info:
            BidPeriod(date(2025, 1, 6), length, repeats)

        assert exc_info.value.field.startswith("bid_period.")

    def test_years_crossing_new_year(self):
        """Periods spanning December into January touch both years."""
        period = BidPeriod(date(2024, 12, 2), 56, 1)

        assert period.years() == [2024, 2025]


class TestResolve:
    """Tests for tiling a pattern across a bid period."""

    @pytest.fixture
    def pattern(self):
        """A 7-day pattern: five day shifts then two days off."""
        return CyclePattern.from_codes(["07AJ"] * 5 + ["----"] * 2)

    def test_length_matches_period(self, pattern):
        """One resolved day per calendar day."""
        period = BidPeriod.for_pattern(date(2025, 1, 6), pattern, 4)

        days = resolve(pattern, period)

        assert len(days) == 28
        assert days[0].date == date(2025, 1, 6)
        assert days[-1].date == date(2025, 2, 2)

    def test_periodic_tiling(self, pattern):
        """Days a cycle apart carry the same assignment."""
        period = BidPeriod.for_pattern(date(2025, 1, 8), pattern, 3)

        days = resolve(pattern, period)

        for d in range(len(days) - 7):
            assert days[d].assignment == days[d + 7].assignment
            assert days[d].cycle_day_index == days[d + 7].cycle_day_index

    def test_weekday_from_calendar(self):
        """Weekdays follow the calendar and drift against a 10-day cycle."""
        pattern = CyclePattern.from_codes(["07AJ"] * 10)
        period = BidPeriod.for_pattern(date(2025, 1, 6), pattern, 2)

        days = resolve(pattern, period)

        assert days[0].weekday == 0
        assert days[10].cycle_day_index == 1
        assert days[10].weekday == 3

    def test_empty_pattern_resolves_to_nothing(self):
        """An empty pattern gives an empty sequence."""
        assert resolve(CyclePattern(), BidPeriod(date(2025, 1, 6), 56, 1)) == []

    def test_length_mismatch_rejected(self, pattern):
        """A pattern shorter than the cycle is malformed input."""
        with pytest.raises(MalformedInputError):
            resolve(pattern, BidPeriod(date(2025, 1, 6), 56, 1))

    def test_resolve_cycle_picks_one_repeat(self, pattern):
        """The second cycle starts one cycle length after the period start."""
        period = BidPeriod.for_pattern(date(2025, 1, 6), pattern, 3)

        days = resolve_cycle(pattern, period, cycle_number=2)

        assert len(days) == 7
        assert days[0].date == date(2025, 1, 13)
        assert [d.cycle_day_index for d in days] == list(range(1, 8))

    def test_resolve_cycle_out_of_range(self, pattern):
        """Cycle numbers beyond the repeat count are rejected."""
        period = BidPeriod.for_pattern(date(2025, 1, 6), pattern, 2)

        with pytest.raises(MalformedInputError):
            resolve_cycle(pattern, period, cycle_number=3)


class TestInverseMapping:
    """Tests for mapping dates back to cycle days."""

    @pytest.fixture
    def period(self):
        """A 56-day cycle repeated twice."""
        return BidPeriod(date(2025, 1, 6), 56, 2)

    def test_round_trip(self, period):
        """Forward then inverse mapping gives back the cycle day."""
        for cycle_number in (1, 2):
            for cycle_day in range(1, 57):
                day = calendar_date(cycle_day, period, cycle_number)
                assert cycle_day_index(day, period) == cycle_day

    def test_second_cycle_wraps(self, period):
        """The first day of the second cycle is cycle day 1."""
        assert cycle_day_index(date(2025, 3, 3), period) == 1

    def test_before_start_rejected(self, period):
        """Dates before the period start are never clamped."""
        with pytest.raises(DateOutOfRangeError):
            cycle_day_index(date(2025, 1, 5), period)

    def test_after_end_rejected(self, period):
        """The day after the period end is out of range."""
        with pytest.raises(DateOutOfRangeError):
            cycle_day_index(period.end_date + timedelta(days=1), period)

    def test_last_day_accepted(self, period):
        """The period end date is inclusive."""
        assert cycle_day_index(period.end_date, period) == 56

    def test_resolve_date(self):
        """A single date resolves to its slot."""
        pattern = CyclePattern.from_codes(["----", "07AJ", "----"])
        period = BidPeriod.for_pattern(date(2025, 1, 6), pattern, 2)

        day = resolve_date(pattern, period, date(2025, 1, 10))

        assert day.cycle_day_index == 2
        assert day.is_working
        assert day.assignment.code == "07AJ"
