"""Tests for day-off conflict detection."""

from datetime import date, time

import pytest

from bidmatch.analysis.conflicts import find_conflicts, percentage, round_half_up
from bidmatch.domain.errors import DateOutOfRangeError
from bidmatch.domain.models import (
    BidPeriod,
    CyclePattern,
    Roster,
    ShiftCodeCatalog,
    ShiftCodeDefinition,
)

D1 = date(2025, 1, 6)
D2 = date(2025, 1, 7)
D3 = date(2025, 1, 8)


class TestFindConflicts:
    """Tests for find_conflicts."""

    @pytest.fixture
    def catalog(self):
        """Catalog with the 07AJ day shift."""
        return ShiftCodeCatalog([ShiftCodeDefinition.from_strings("07AJ", "07:00", "15:00")])

    @pytest.fixture
    def roster(self):
        """Off, 07AJ, off, then four more 07AJ days."""
        pattern = CyclePattern.from_codes(["----", "07AJ", "----"] + ["07AJ"] * 4)
        return Roster("L1", "OPS", pattern, BidPeriod.for_pattern(D1, pattern, 2))

    def test_one_conflict_of_three(self, roster, catalog):
        """Two matches and one conflict carrying the shift times."""
        result = find_conflicts(roster, roster.bid_period, [D1, D2, D3], catalog)

        assert result.match_percentage == 67
        assert result.has_requests
        assert result.matching_dates == [D1, D3]
        assert len(result.conflicts) == 1
        conflict = result.conflicts[0]
        assert conflict.date == D2
        assert conflict.code == "07AJ"
        assert conflict.begin_time == time(7, 0)
        assert conflict.end_time == time(15, 0)
        assert not conflict.unresolved

    def test_no_requests(self, roster, catalog):
        """No requested dates is a full match without requests."""
        result = find_conflicts(roster, roster.bid_period, [], catalog)

        assert result.match_percentage == 100
        assert not result.has_requests
        assert result.conflicts == []

    def test_all_off(self, roster):
        """Every requested date off gives 100."""
        result = find_conflicts(roster, roster.bid_period, [D1, D3])

        assert result.match_percentage == 100

    def test_all_conflicting(self, roster):
        """Every requested date worked gives 0."""
        result = find_conflicts(roster, roster.bid_period, [D2, date(2025, 1, 9)])

        assert result.match_percentage == 0
        assert len(result.conflicts) == 2

    def test_duplicates_collapse(self, roster):
        """A date requested twice counts once."""
        result = find_conflicts(roster, roster.bid_period, [D1, D1, D2])

        assert result.total_requested == 2
        assert result.match_percentage == 50

    def test_second_cycle_date(self, roster):
        """Dates in later cycles map back through the inverse mapping."""
        result = find_conflicts(roster, roster.bid_period, [date(2025, 1, 13)])

        assert result.details[0].cycle_day_index == 1
        assert result.match_percentage == 100

    def test_unknown_code_conflict(self):
        """A conflict on an undefined code has no times and is flagged."""
        pattern = CyclePattern.from_codes(["ZZZ"])
        roster = Roster("L9", "OPS", pattern, BidPeriod.for_pattern(D1, pattern))

        result = find_conflicts(roster, roster.bid_period, [D1], ShiftCodeCatalog())

        assert result.conflicts[0].unresolved
        assert result.conflicts[0].begin_time is None

    def test_out_of_range_date(self, roster):
        """Dates outside the bid period are a usage error."""
        with pytest.raises(DateOutOfRangeError):
            find_conflicts(roster, roster.bid_period, [date(2024, 12, 31)])

    def test_empty_pattern(self):
        """An empty pattern has no working days, so every date matches."""
        roster = Roster("L0", "OPS", CyclePattern(()), BidPeriod(D1, 7, 1))

        result = find_conflicts(roster, roster.bid_period, [D1, D3])

        assert result.match_percentage == 100
        assert result.conflicts == []
        assert [d.cycle_day_index for d in result.details] == [1, 3]

    def test_empty_pattern_out_of_range(self):
        """Range checks still apply to an empty pattern."""
        roster = Roster("L0", "OPS", CyclePattern(()), BidPeriod(D1, 7, 1))

        with pytest.raises(DateOutOfRangeError):
            find_conflicts(roster, roster.bid_period, [date(2025, 2, 1)])


class TestRounding:
    """Tests for percentage rounding."""

    @pytest.mark.parametrize(
        "value,expected", [(0.5, 1), (1.5, 2), (2.5, 3), (66.666, 67), (33.333, 33)]
    )
    def test_half_up(self, value, expected):
        """Halves always round up."""
        assert round_half_up(value) == expected

    def test_percentage_of_nothing(self):
        """An empty whole is a full match."""
        assert percentage(0, 0) == 100
        assert percentage(1, 8) == 13
