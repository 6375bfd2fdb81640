"""Tests for preference scoring."""

from datetime import date

import pytest

from bidmatch.analysis.metrics import MetricsEngine
from bidmatch.analysis.scoring import ScheduleScorer
from bidmatch.calendar.holidays import StaticHolidayProvider
from bidmatch.domain.errors import MalformedInputError
from bidmatch.domain.models import (
    BidPeriod,
    CategoryIntent,
    Criterion,
    CyclePattern,
    PreferenceCriteria,
    PreferenceWeights,
    Roster,
    ShiftCodeCatalog,
    ShiftCodeDefinition,
    WeekendStance,
)

MONDAY = date(2025, 1, 6)
OFF = "----"


def make_roster(roster_id, group, codes, repeats=1):
    pattern = CyclePattern.from_codes(codes)
    return Roster(roster_id, group, pattern, BidPeriod.for_pattern(MONDAY, pattern, repeats))


@pytest.fixture
def catalog():
    """Day, afternoon and midnight shift codes."""
    return ShiftCodeCatalog(
        [
            ShiftCodeDefinition.from_strings("07AJ", "07:00", "15:00"),
            ShiftCodeDefinition.from_strings("0630", "06:30", "14:30"),
            ShiftCodeDefinition.from_strings("1500", "15:00", "23:00"),
            ShiftCodeDefinition.from_strings("2000", "20:00", "06:30"),
        ]
    )


@pytest.fixture
def scorer(catalog):
    """Scorer with no holidays."""
    engine = MetricsEngine(StaticHolidayProvider(), catalog=catalog)
    return ScheduleScorer(catalog=catalog, metrics_engine=engine)


@pytest.fixture
def weekday_roster():
    """Monday to Friday days, weekends off, two weeks."""
    return make_roster("L1", "OPS", (["07AJ"] * 5 + [OFF] * 2) * 2)


@pytest.fixture
def weekend_roster():
    """Wednesday to Sunday afternoons, two weeks."""
    return make_roster("L2", "MAINT", ([OFF] * 2 + ["1500"] * 5) * 2)


class TestNeutralScoring:
    """Tests for criteria with no selections."""

    def test_all_neutral_scores_100(self, scorer, weekday_roster, weekend_roster):
        """No selections and no requested days off score every roster 100."""
        criteria = PreferenceCriteria()

        for roster in (weekday_roster, weekend_roster):
            result = scorer.score(roster, criteria)
            assert result.score == 100
            assert result.explanation == []
            assert result.hard_filter_failed is None


class TestCriteria:
    """Tests for individual criteria."""

    def test_group_match(self, scorer, weekday_roster, weekend_roster):
        """Group affinity is all or nothing."""
        criteria = PreferenceCriteria(selected_groups={"OPS"})

        assert scorer.score(weekday_roster, criteria).score == 100
        assert scorer.score(weekend_roster, criteria).score == 0

    def test_days_off(self, scorer, weekday_roster):
        """Fraction of requested days that are off."""
        criteria = PreferenceCriteria(
            requested_days_off={date(2025, 1, 11), date(2025, 1, 12), date(2025, 1, 13)}
        )

        result = scorer.score(weekday_roster, criteria)

        assert result.score == 67
        assert "2/3 requested days off are off (67%)" in result.explanation[0]

    def test_explicit_shift_codes(self, scorer):
        """Fraction of distinct codes that were selected."""
        roster = make_roster("L3", "OPS", ["07AJ", "1500", OFF, "2000"])
        criteria = PreferenceCriteria(selected_shift_codes={"07AJ"})

        assert scorer.score(roster, criteria).score == 33

    def test_category_expands_to_codes(self, scorer):
        """Selecting Days covers every day-category code."""
        roster = make_roster("L3", "OPS", ["07AJ", "0630", OFF, "1500"])
        criteria = PreferenceCriteria(selected_shift_categories={"Days"})

        result = scorer.score(roster, criteria)

        assert result.score == 67
        assert scorer.expanded_codes(criteria) == {"07AJ", "0630"}

    def test_length_selection(self, scorer):
        """Length labels expand like categories."""
        criteria = PreferenceCriteria(selected_shift_lengths={"10.5 Hour Shift"})

        assert scorer.expanded_codes(criteria) == {"2000"}

    def test_block_preference(self, scorer, weekday_roster):
        """Share of work blocks with the preferred length."""
        criteria = PreferenceCriteria(weights=PreferenceWeights(blocks_5day=1.0))

        assert scorer.score(weekday_roster, criteria).score == 100

        criteria = PreferenceCriteria(weights=PreferenceWeights(blocks_4day=1.0))

        assert scorer.score(weekday_roster, criteria).score == 0

    def test_fewer_weekends(self, scorer, weekday_roster, weekend_roster):
        """FEWER rewards weekends off."""
        criteria = PreferenceCriteria(weekend_stance=WeekendStance.FEWER)

        assert scorer.score(weekday_roster, criteria).score == 100
        assert scorer.score(weekend_roster, criteria).score == 0

    def test_more_saturdays(self, scorer, weekday_roster, weekend_roster):
        """MORE rewards Saturdays worked."""
        criteria = PreferenceCriteria(saturday_stance=WeekendStance.MORE)

        assert scorer.score(weekday_roster, criteria).score == 0
        assert scorer.score(weekend_roster, criteria).score == 100

    def test_weighted_average(self, scorer, weekend_roster):
        """Partials combine by weight: group 1.0 at weight 3, weekend 0.0 at weight 1."""
        criteria = PreferenceCriteria(
            selected_groups={"MAINT"},
            weekend_stance=WeekendStance.FEWER,
            weights=PreferenceWeights(group=3.0, weekend=1.0),
        )

        result = scorer.score(weekend_roster, criteria)

        assert result.score == 75
        assert [c.criterion for c in result.contributions] == [Criterion.GROUP, Criterion.WEEKEND]
        assert result.contributions[0].points == pytest.approx(75.0)

    def test_zero_weight_disables(self, scorer, weekend_roster):
        """A zero weight drops the criterion."""
        criteria = PreferenceCriteria(
            selected_groups={"OPS"},
            weights=PreferenceWeights(group=0.0),
        )

        assert scorer.score(weekend_roster, criteria).score == 100

    def test_negative_weight_rejected(self):
        """Negative weights are malformed input."""
        with pytest.raises(MalformedInputError):
            PreferenceWeights(weekend=-1.0)


class TestHardFilters:
    """Tests for mandatory criteria and category intent."""

    def test_mandatory_group(self, scorer, weekend_roster):
        """A failed mandatory criterion forces 0."""
        criteria = PreferenceCriteria(
            selected_groups={"OPS"},
            weekend_stance=WeekendStance.MORE,
            mandatory={Criterion.GROUP},
        )

        result = scorer.score(weekend_roster, criteria)

        assert result.score == 0
        assert result.hard_filter_failed is Criterion.GROUP

    def test_mix_requires_two_categories(self, scorer, weekday_roster):
        """MIX rejects rosters with a single selected category."""
        criteria = PreferenceCriteria(
            selected_shift_categories={"Days", "Afternoons"},
            category_intent=CategoryIntent.MIX,
        )

        result = scorer.score(weekday_roster, criteria)

        assert result.score == 0
        assert result.hard_filter_failed is Criterion.SHIFT

    def test_mix_satisfied(self, scorer):
        """A roster rotating through both categories passes MIX."""
        roster = make_roster("L4", "OPS", ["07AJ", "1500", OFF])
        criteria = PreferenceCriteria(
            selected_shift_categories={"Days", "Afternoons"},
            category_intent=CategoryIntent.MIX,
        )

        result = scorer.score(roster, criteria)

        assert result.score == 100
        assert result.hard_filter_failed is None


class TestProperties:
    """Tests for determinism, monotonicity and degraded lookups."""

    def test_deterministic(self, scorer, weekend_roster):
        """Identical inputs give identical results."""
        criteria = PreferenceCriteria(
            selected_groups={"MAINT"},
            selected_shift_codes={"1500"},
            sunday_stance=WeekendStance.FEWER,
        )

        first = scorer.score(weekend_roster, criteria)
        second = scorer.score(weekend_roster, criteria)

        assert first.score == second.score
        assert first.explanation == second.explanation

    @pytest.mark.parametrize("criterion", ["group", "weekend"])
    def test_weight_monotonic(self, scorer, weekend_roster, criterion):
        """Raising a weight never lowers that criterion's contribution."""
        previous = -1.0
        for weight in (0.5, 1.0, 2.0, 5.0):
            weights = {"group": 1.0, "weekend": 1.0, "sunday": 1.0, criterion: weight}
            criteria = PreferenceCriteria(
                selected_groups={"MAINT"},
                weekend_stance=WeekendStance.MORE,
                sunday_stance=WeekendStance.FEWER,
                weights=PreferenceWeights(**weights),
            )
            result = scorer.score(weekend_roster, criteria)
            points = next(c.points for c in result.contributions if c.criterion.value == criterion)
            assert points >= previous
            previous = points

    def test_unknown_codes_reported(self, scorer):
        """Unknown codes are scored as working and reported."""
        roster = make_roster("L5", "OPS", ["ZZZ", OFF])

        result = scorer.score(roster, PreferenceCriteria(selected_shift_codes={"07AJ"}))

        assert result.unresolved_codes == ("ZZZ",)
        assert result.score == 0
        assert result.explanation[-1].startswith("Unknown shift codes")

    def test_rank_orders_and_drops_zero(self, scorer, weekday_roster, weekend_roster):
        """Ranking keeps positive scores, best first."""
        criteria = PreferenceCriteria(weekend_stance=WeekendStance.FEWER)

        ranked = scorer.rank([weekend_roster, weekday_roster], criteria)

        assert [r.roster_id for r in ranked] == ["L1"]
        assert len(scorer.rank([weekend_roster, weekday_roster], criteria, include_zero=True)) == 2

    def test_rank_skips_unscorable_rosters(self, scorer, weekday_roster):
        """A roster whose period misses a requested date is reported, not fatal."""
        pattern = CyclePattern.from_codes(["07AJ"] * 7)
        later = Roster("L9", "OPS", pattern, BidPeriod.for_pattern(date(2025, 2, 5), pattern))
        criteria = PreferenceCriteria(requested_days_off={date(2025, 1, 11)})
        failures = []

        ranked = scorer.rank([later, weekday_roster], criteria, failures=failures)

        assert [r.roster_id for r in ranked] == ["L1"]
        assert ranked[0].score == 100
        assert [f.roster_id for f in failures] == ["L9"]
        assert failures[0].error_type == "DateOutOfRangeError"

    def test_empty_pattern_days_off(self, scorer):
        """An empty pattern has every requested day off."""
        roster = Roster("L0", "OPS", CyclePattern(()), BidPeriod(MONDAY, 7, 1))
        criteria = PreferenceCriteria(requested_days_off={MONDAY})

        result = scorer.score(roster, criteria)

        assert result.score == 100
        assert "1/1 requested days off are off (100%)" in result.explanation[0]
