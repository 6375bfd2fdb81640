"""Batch scoring and metrics over many rosters.

Items run on a bounded thread pool. Results come back in input order and a
failure in one roster is recorded instead of aborting the batch.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence, TypeVar, Union

from bidmatch.analysis.metrics import MetricsEngine
from bidmatch.analysis.scoring import ScheduleScorer
from bidmatch.domain.errors import BidMatchError
from bidmatch.domain.models import (
    BatchFailure,
    MatchResult,
    PreferenceCriteria,
    Roster,
    ScheduleMetrics,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _run(
    rosters: Sequence[Roster],
    work: Callable[[Roster], T],
    max_workers: int,
) -> list[Union[T, BatchFailure]]:
    def guarded(roster: Roster) -> Union[T, BatchFailure]:
        try:
            return work(roster)
        except BidMatchError as e:
            logger.warning("Roster %s failed: %s", roster.roster_id, e)
            return BatchFailure.from_error(roster.roster_id, e)

    if not rosters:
        return []
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        # map() yields in submission order
        return list(pool.map(guarded, rosters))


def score_many(
    scorer: ScheduleScorer,
    rosters: Sequence[Roster],
    criteria: PreferenceCriteria,
    max_workers: int = 4,
) -> list[Union[MatchResult, BatchFailure]]:
    """Score every roster against the same criteria."""
    return _run(rosters, lambda roster: scorer.score(roster, criteria), max_workers)


def metrics_many(
    engine: MetricsEngine,
    rosters: Sequence[Roster],
    max_workers: int = 4,
) -> list[Union[ScheduleMetrics, BatchFailure]]:
    """Compute metrics for every roster."""
    return _run(rosters, engine.metrics_for, max_workers)
