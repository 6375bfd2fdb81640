"""Tests for shift classification and scoring policies."""

from datetime import time

import pytest

from bidmatch.domain.models import (
    BlockHistogram,
    ShiftCodeCatalog,
    ShiftCodeDefinition,
    WeekendStance,
)
from bidmatch.domain.policies import DefaultScoringPolicy, DefaultShiftClassificationPolicy


class TestDefaultShiftClassificationPolicy:
    """Tests for DefaultShiftClassificationPolicy."""

    @pytest.fixture
    def policy(self):
        """Create default classification policy."""
        return DefaultShiftClassificationPolicy()

    @pytest.mark.parametrize(
        "begin,expected",
        [
            ("06:00", "Days"),
            ("06:59", "Days"),
            ("07:00", "Days"),
            ("07:30", "Other"),
            ("08:30", "Late Days"),
            ("08:45", "Late Days"),
            ("09:00", "Mid Days"),
            ("11:30", "Mid Days"),
            ("12:30", "Afternoons"),
            ("15:54", "Afternoons"),
            ("16:00", "Other"),
            ("18:45", "Midnights"),
            ("20:45", "Midnights"),
            ("22:00", "Other"),
        ],
    )
    def test_category_by_begin_time(self, policy, begin, expected):
        """Categories come from the begin time."""
        definition = ShiftCodeDefinition.from_strings("X", begin, "23:59")

        assert policy.category_of(definition) == expected

    def test_explicit_category_wins(self, policy):
        """A category on the definition overrides the begin-time rule."""
        definition = ShiftCodeDefinition("X", time(7, 0), time(15, 0), category="Training")

        assert policy.category_of(definition) == "Training"

    @pytest.mark.parametrize(
        "begin,end,expected",
        [
            ("07:00", "15:00", "8 Hour Shift"),
            ("07:00", "15:30", "8.5 Hour Shift"),
            ("06:50", "14:40", "8 Hour Shift"),
            ("19:00", "07:00", "12 Hour Shift"),
            ("22:00", "06:30", "8.5 Hour Shift"),
        ],
    )
    def test_length_label(self, policy, begin, end, expected):
        """Lengths round to the nearest half hour and wrap past midnight."""
        definition = ShiftCodeDefinition.from_strings("X", begin, end)

        assert policy.length_label_of(definition) == expected

    def test_catalog_matching(self, policy):
        """Category and length selections intersect."""
        catalog = ShiftCodeCatalog(
            [
                ShiftCodeDefinition.from_strings("D8", "07:00", "15:00"),
                ShiftCodeDefinition.from_strings("D12", "07:00", "19:00"),
                ShiftCodeDefinition.from_strings("N12", "19:00", "07:00"),
            ]
        )

        assert catalog.codes_matching({"Days"}, set(), policy) == {"D8", "D12"}
        assert catalog.codes_matching(set(), {"12 Hour Shift"}, policy) == {"D12", "N12"}
        assert catalog.codes_matching({"Days"}, {"12 Hour Shift"}, policy) == {"D12"}
        assert catalog.codes_matching(set(), set(), policy) == set()


class TestDefaultScoringPolicy:
    """Tests for DefaultScoringPolicy."""

    @pytest.fixture
    def policy(self):
        """Create default scoring policy."""
        return DefaultScoringPolicy()

    def test_fewer_weekends(self, policy):
        """Fewer worked weekends score higher."""
        assert policy.weekend_partial(WeekendStance.FEWER, 0, 8) == 1.0
        assert policy.weekend_partial(WeekendStance.FEWER, 2, 8) == 0.75
        assert policy.weekend_partial(WeekendStance.FEWER, 8, 8) == 0.0

    def test_more_weekends(self, policy):
        """More worked weekends score higher."""
        assert policy.weekend_partial(WeekendStance.MORE, 2, 8) == 0.25

    def test_no_weekends_neutral(self, policy):
        """A span without weekends is neutral."""
        assert policy.weekend_partial(WeekendStance.FEWER, 0, 0) == 1.0
        assert policy.weekend_partial(WeekendStance.MORE, 0, 0) == 1.0

    def test_block_share(self, policy):
        """Share of blocks with the exact length."""
        histogram = BlockHistogram.from_lengths([4, 4, 5, 6])

        assert policy.block_partial(histogram, 4) == 0.5
        assert policy.block_partial(histogram, 5) == 0.25
        assert policy.block_partial(BlockHistogram(), 4) == 0.0
