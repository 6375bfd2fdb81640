"""Mirror line search.

Ranks candidate rosters by how many of a set of target off-days they also
have off. The targets are either a worker's chosen dates or, by default,
every off-day of a reference roster.
"""

import logging
from datetime import date
from typing import Iterable, Optional

from bidmatch.analysis.conflicts import find_conflicts, percentage
from bidmatch.calendar.resolver import resolve
from bidmatch.domain.errors import BidMatchError
from bidmatch.domain.models import (
    BatchFailure,
    MirrorCandidate,
    Roster,
    ShiftCodeCatalog,
    ShiftCodeDefinition,
)

logger = logging.getLogger(__name__)

SHARED_CODE_POINTS = 2
SAME_GROUP_POINTS = 10
MAX_SHIFT_TIMES = 3


def inclusion_threshold(total_targets: int) -> int:
    """Minimum matched off-days for a candidate to be listed."""
    return max(1, total_targets // 2)


def shared_shift_code_score(reference: Roster, candidate: Roster) -> int:
    """Tie-break score: points per shared working code plus a same-group bonus."""
    shared = set(reference.pattern.working_codes()) & set(candidate.pattern.working_codes())
    score = SHARED_CODE_POINTS * len(shared)
    if candidate.group == reference.group:
        score += SAME_GROUP_POINTS
    return score


def _shift_times(roster: Roster, catalog: Optional[ShiftCodeCatalog]) -> list[ShiftCodeDefinition]:
    if catalog is None:
        return []
    counts = roster.pattern.code_counts()
    # Most worked first; ties keep first-seen order
    ordered = sorted(counts, key=lambda code: -counts[code])
    definitions = [catalog.get(code) for code in ordered]
    return [d for d in definitions if d is not None][:MAX_SHIFT_TIMES]


def find_mirrors(
    reference: Roster,
    candidates: Iterable[Roster],
    off_dates: Optional[Iterable[date]] = None,
    catalog: Optional[ShiftCodeCatalog] = None,
    target_groups: Optional[Iterable[str]] = None,
    failures: Optional[list[BatchFailure]] = None,
) -> list[MirrorCandidate]:
    """Rank candidates by shared off-days with a target set.

    Args:
        reference: Reference roster; never returned as its own mirror.
        candidates: Rosters to rank.
        off_dates: Target off-days. Defaults to every off-day of the
            reference across its bid period.
        catalog: Shift catalog used to attach shift times.
        target_groups: If given, only candidates in these groups are ranked.
        failures: If given, candidates that cannot be resolved are recorded
            here; they are skipped either way.

    Returns:
        Candidates meeting the inclusion threshold, ordered by match
        percentage then shared shift code score, both descending. Equal
        keys keep input order.
    """
    if off_dates is None:
        targets = sorted(
            d.date for d in resolve(reference.pattern, reference.bid_period) if not d.is_working
        )
    else:
        targets = sorted(set(off_dates))

    total = len(targets)
    if total == 0:
        logger.debug("No target off-days for %s; no mirrors", reference.roster_id)
        return []

    threshold = inclusion_threshold(total)
    groups = set(target_groups) if target_groups is not None else None

    results: list[MirrorCandidate] = []
    for candidate in candidates:
        if candidate.roster_id == reference.roster_id:
            continue
        if groups is not None and candidate.group not in groups:
            continue

        # Target dates outside the candidate's period cannot match
        in_period = [d for d in targets if candidate.bid_period.contains(d)]
        try:
            matched = find_conflicts(candidate, candidate.bid_period, in_period).matching_dates
        except BidMatchError as e:
            logger.warning("Candidate %s skipped: %s", candidate.roster_id, e)
            if failures is not None:
                failures.append(BatchFailure.from_error(candidate.roster_id, e))
            continue
        if len(matched) < threshold:
            continue

        results.append(
            MirrorCandidate(
                roster_id=candidate.roster_id,
                group=candidate.group,
                matched_off_day_count=len(matched),
                total_requested_off_day_count=total,
                match_percentage=percentage(len(matched), total),
                shared_shift_code_score=shared_shift_code_score(reference, candidate),
                matched_dates=matched,
                is_same_group=candidate.group == reference.group,
                shift_times=_shift_times(candidate, catalog),
            )
        )

    results.sort(key=lambda m: (-m.match_percentage, -m.shared_shift_code_score))
    logger.debug(
        "Found %d mirrors for %s over %d target off-days",
        len(results), reference.roster_id, total,
    )
    return results
