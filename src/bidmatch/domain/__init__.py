"""Domain models, errors and business rules for roster analysis."""

from bidmatch.domain.errors import (
    BidMatchError,
    DateOutOfRangeError,
    HolidaySourceError,
    MalformedInputError,
    MetricsScopeError,
    UnknownJurisdictionError,
)
from bidmatch.domain.models import (
    DEFAULT_OFF_SENTINEL,
    BatchFailure,
    BidPeriod,
    BlockHistogram,
    CategoryIntent,
    ConflictDetail,
    CountScope,
    Criterion,
    CriterionContribution,
    CyclePattern,
    DayOffConflictResult,
    MatchResult,
    MirrorCandidate,
    PreferenceCriteria,
    PreferenceWeights,
    ResolvedDay,
    Roster,
    ScheduleMetrics,
    ShiftCodeCatalog,
    ShiftCodeDefinition,
    SlotAssignment,
    SlotKind,
    WeekendStance,
)
from bidmatch.domain.policies import (
    DefaultScoringPolicy,
    DefaultShiftClassificationPolicy,
    ScoringPolicy,
    ShiftClassificationPolicy,
)

__all__ = [
    # Models
    "DEFAULT_OFF_SENTINEL",
    "BatchFailure",
    "BidPeriod",
    "BlockHistogram",
    "CategoryIntent",
    "ConflictDetail",
    "CountScope",
    "Criterion",
    "CriterionContribution",
    "CyclePattern",
    "DayOffConflictResult",
    "MatchResult",
    "MirrorCandidate",
    "PreferenceCriteria",
    "PreferenceWeights",
    "ResolvedDay",
    "Roster",
    "ScheduleMetrics",
    "ShiftCodeCatalog",
    "ShiftCodeDefinition",
    "SlotAssignment",
    "SlotKind",
    "WeekendStance",
    # Errors
    "BidMatchError",
    "DateOutOfRangeError",
    "HolidaySourceError",
    "MalformedInputError",
    "MetricsScopeError",
    "UnknownJurisdictionError",
    # Policies
    "DefaultScoringPolicy",
    "DefaultShiftClassificationPolicy",
    "ScoringPolicy",
    "ShiftClassificationPolicy",
]
