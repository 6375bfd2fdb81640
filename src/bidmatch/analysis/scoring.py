"""Preference scoring for rosters.

The scorer turns a roster and a worker's weighted preferences into a 0..100
match score with a per-criterion explanation.

Scoring rules:
- A criterion is active when its weight is positive and the worker made a
  selection for it (block criteria need only a positive weight).
- Each active criterion yields a partial score in [0, 1]; partials are
  weighted, summed and renormalized by the total active weight.
- No active criterion scores 100.
- A mandatory criterion with a partial of 0 forces the score to 0, as does
  a MIX category intent the roster cannot satisfy.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from bidmatch.analysis.conflicts import find_conflicts, round_half_up
from bidmatch.analysis.metrics import MetricsEngine
from bidmatch.domain.errors import BidMatchError
from bidmatch.domain.models import (
    BatchFailure,
    CategoryIntent,
    Criterion,
    CriterionContribution,
    MatchResult,
    PreferenceCriteria,
    Roster,
    ScheduleMetrics,
    ShiftCodeCatalog,
    WeekendStance,
)
from bidmatch.domain.policies import (
    DefaultScoringPolicy,
    DefaultShiftClassificationPolicy,
    ScoringPolicy,
    ShiftClassificationPolicy,
)

logger = logging.getLogger(__name__)


@dataclass
class _Evaluation:
    """Partial score and phrase for one criterion with a selection."""

    partial: float
    text: str


class ScheduleScorer:
    """Scores rosters against worker preferences.

    Attributes:
        catalog: Shift code definitions used for category/length expansion.
        scoring_policy: Curves for weekend and block criteria.
        classification_policy: Category and length rules for shift codes.
        metrics_engine: Engine producing the metrics each score is based on.
    """

    def __init__(
        self,
        catalog: Optional[ShiftCodeCatalog] = None,
        scoring_policy: Optional[ScoringPolicy] = None,
        classification_policy: Optional[ShiftClassificationPolicy] = None,
        metrics_engine: Optional[MetricsEngine] = None,
    ):
        self.catalog = catalog or ShiftCodeCatalog()
        self.scoring_policy = scoring_policy or DefaultScoringPolicy()
        self.classification_policy = classification_policy or DefaultShiftClassificationPolicy()
        self.metrics_engine = metrics_engine or MetricsEngine(catalog=self.catalog)

    def score(self, roster: Roster, criteria: PreferenceCriteria) -> MatchResult:
        """Score one roster.

        Args:
            roster: Roster to score.
            criteria: Worker's preferences.

        Returns:
            MatchResult with score, metrics and explanation.

        Raises:
            MalformedInputError: If the roster pattern does not fit its bid period.
            DateOutOfRangeError: If a requested day off lies outside the bid period.
        """
        metrics = self.metrics_engine.metrics_for(roster)
        unresolved = tuple(self.catalog.unresolved(roster.pattern.working_codes()))
        if unresolved:
            logger.warning(
                "Roster %s uses unknown shift codes %s; counted as working",
                roster.roster_id, ", ".join(unresolved),
            )

        evaluations: dict[Criterion, _Evaluation] = {}
        for criterion in Criterion:
            evaluation = self._evaluate(criterion, roster, criteria, metrics)
            if evaluation is not None:
                evaluations[criterion] = evaluation

        active = {
            c: e for c, e in evaluations.items() if c.weight_in(criteria.weights) > 0
        }
        total_weight = sum(c.weight_in(criteria.weights) for c in active)

        contributions = []
        for criterion, evaluation in active.items():
            weight = criterion.weight_in(criteria.weights)
            share = weight / total_weight * 100
            points = evaluation.partial * share
            contributions.append(
                CriterionContribution(
                    criterion=criterion,
                    weight=weight,
                    partial=evaluation.partial,
                    points=points,
                    text=f"{evaluation.text} ({points:.1f}/{share:.1f} pts)",
                )
            )

        if total_weight > 0:
            score = round_half_up(sum(c.points for c in contributions))
        else:
            score = 100

        explanation = [c.text for c in contributions]
        failed = self._hard_filter_failure(roster, criteria, evaluations)
        if failed is not None:
            criterion, reason = failed
            score = 0
            explanation.append(reason)
            logger.debug("Roster %s fails hard filter %s", roster.roster_id, criterion.value)
        else:
            criterion = None

        if unresolved:
            explanation.append(f"Unknown shift codes counted as working: {', '.join(unresolved)}")

        return MatchResult(
            roster_id=roster.roster_id,
            score=score,
            metrics=metrics,
            explanation=explanation,
            contributions=contributions,
            hard_filter_failed=criterion,
            unresolved_codes=unresolved,
        )

    def rank(
        self,
        rosters: Iterable[Roster],
        criteria: PreferenceCriteria,
        include_zero: bool = False,
        failures: Optional[list[BatchFailure]] = None,
    ) -> list[MatchResult]:
        """Score rosters and order them best first.

        Ties keep input order. Rosters scoring 0 are dropped unless
        ``include_zero`` is set. A roster that cannot be scored is skipped
        and, when ``failures`` is given, recorded there.
        """
        results = []
        for roster in rosters:
            try:
                results.append(self.score(roster, criteria))
            except BidMatchError as e:
                logger.warning("Roster %s skipped: %s", roster.roster_id, e)
                if failures is not None:
                    failures.append(BatchFailure.from_error(roster.roster_id, e))
        if not include_zero:
            results = [r for r in results if r.score > 0]
        return sorted(results, key=lambda r: -r.score)

    def expanded_codes(self, criteria: PreferenceCriteria) -> set[str]:
        """Explicit codes plus codes implied by selected categories/lengths."""
        codes = set(criteria.selected_shift_codes)
        codes |= self.catalog.codes_matching(
            criteria.selected_shift_categories,
            criteria.selected_shift_lengths,
            self.classification_policy,
        )
        return codes

    def _evaluate(
        self,
        criterion: Criterion,
        roster: Roster,
        criteria: PreferenceCriteria,
        metrics: ScheduleMetrics,
    ) -> Optional[_Evaluation]:
        weights = criteria.weights

        if criterion is Criterion.GROUP:
            if not criteria.selected_groups:
                return None
            if roster.group in criteria.selected_groups:
                return _Evaluation(1.0, f"Group {roster.group} is selected")
            return _Evaluation(0.0, f"Group {roster.group} is not selected")

        if criterion is Criterion.DAYS_OFF:
            if not criteria.requested_days_off:
                return None
            result = find_conflicts(
                roster, roster.bid_period, criteria.requested_days_off, self.catalog
            )
            partial = result.matching_count / result.total_requested
            return _Evaluation(
                partial,
                f"{result.matching_count}/{result.total_requested} requested days off "
                f"are off ({result.match_percentage}%)",
            )

        if criterion is Criterion.SHIFT:
            if not criteria.has_shift_selection:
                return None
            wanted = self.expanded_codes(criteria)
            worked = roster.pattern.working_codes()
            if not worked:
                return _Evaluation(0.0, "Roster has no shifts")
            matched = [c for c in worked if c in wanted]
            text = f"{len(matched)}/{len(worked)} shift codes match selection"
            if matched:
                text += f" ({', '.join(matched)})"
            return _Evaluation(len(matched) / len(worked), text)

        if criterion in (Criterion.BLOCKS_4DAY, Criterion.BLOCKS_5DAY):
            if criterion.weight_in(weights) <= 0:
                return None
            length = 4 if criterion is Criterion.BLOCKS_4DAY else 5
            blocks = metrics.work_blocks
            return _Evaluation(
                self.scoring_policy.block_partial(blocks, length),
                f"{blocks.count(length)} of {blocks.total_blocks} work blocks are {length} days",
            )

        stance, count, label = {
            Criterion.WEEKEND: (criteria.weekend_stance, metrics.weekends_worked, "full weekends"),
            Criterion.SATURDAY: (criteria.saturday_stance, metrics.saturdays_worked, "Saturdays"),
            Criterion.SUNDAY: (criteria.sunday_stance, metrics.sundays_worked, "Sundays"),
        }[criterion]
        if stance is WeekendStance.INDIFFERENT:
            return None
        total = metrics.total_weekends
        return _Evaluation(
            self.scoring_policy.weekend_partial(stance, count, total),
            f"{count} of {total} {label} worked ({stance.value} preferred)",
        )

    def _hard_filter_failure(
        self,
        roster: Roster,
        criteria: PreferenceCriteria,
        evaluations: dict[Criterion, _Evaluation],
    ) -> Optional[tuple[Criterion, str]]:
        for criterion in Criterion:
            evaluation = evaluations.get(criterion)
            if criterion in criteria.mandatory and evaluation is not None and evaluation.partial <= 0:
                return criterion, f"Required {criterion.value} preference not met"

        categories = criteria.selected_shift_categories
        if criteria.category_intent is CategoryIntent.MIX and len(categories) > 1:
            covered = set()
            for code in roster.pattern.working_codes():
                definition = self.catalog.get(code)
                if definition is not None:
                    covered.add(self.classification_policy.category_of(definition))
            covered &= categories
            if len(covered) < 2:
                return Criterion.SHIFT, "Single shift type (looking for variety)"
        return None
