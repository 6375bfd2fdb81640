"""JSON input loading.

Maps a plain JSON document onto the domain model::

    {
        "bid_period": {"start_date": "2025-01-06", "cycle_length": 56,
                       "cycle_repeat_count": 3},
        "shift_codes": [{"code": "07AJ", "begin": "07:00", "end": "15:00"}],
        "rosters": [{"id": "L1", "group": "OPS", "pattern": ["07AJ", "----"]}],
        "criteria": {"groups": ["OPS"], "weekend": "fewer"},
        "day_off_requests": ["2025-01-11"]
    }

``cycle_length`` may be omitted, in which case each roster's cycle length
is its pattern length. A roster may carry its own ``bid_period``. Patterns
are either a list of cells or a ``DAY_001`` column mapping. Every parse
failure raises MalformedInputError naming the field path.
"""

import json
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from bidmatch.domain.errors import MalformedInputError
from bidmatch.domain.models import (
    DEFAULT_OFF_SENTINEL,
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
    parse_iso_date,
)


@dataclass
class RosterDocument:
    """Everything parsed from one input document."""

    rosters: list[Roster] = field(default_factory=list)
    catalog: ShiftCodeCatalog = field(default_factory=ShiftCodeCatalog)
    criteria: Optional[PreferenceCriteria] = None
    day_off_requests: frozenset[date] = frozenset()

    def roster(self, roster_id: str) -> Roster:
        for roster in self.rosters:
            if roster.roster_id == roster_id:
                return roster
        raise MalformedInputError("roster_id", roster_id, "no roster with this id")


def _require(data: Mapping[str, Any], key: str, path: str) -> Any:
    if key not in data:
        raise MalformedInputError(f"{path}.{key}", None, "missing required field")
    return data[key]


def _expect_mapping(value: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise MalformedInputError(path, value, "expected an object")
    return value


def _expect_list(value: Any, path: str) -> list:
    if not isinstance(value, list):
        raise MalformedInputError(path, value, "expected a list")
    return value


def _expect_int(value: Any, path: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedInputError(path, value, "expected an integer")
    return value


def _enum(enum_cls, value: Any, path: str):
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        choices = ", ".join(m.value for m in enum_cls)
        raise MalformedInputError(path, value, f"expected one of: {choices}")


def parse_shift_codes(items: Any, path: str = "shift_codes") -> ShiftCodeCatalog:
    definitions = []
    for i, item in enumerate(_expect_list(items, path)):
        item_path = f"{path}[{i}]"
        item = _expect_mapping(item, item_path)
        definitions.append(
            ShiftCodeDefinition.from_strings(
                code=str(_require(item, "code", item_path)),
                begin=_require(item, "begin", item_path),
                end=_require(item, "end", item_path),
                category=item.get("category"),
            )
        )
    return ShiftCodeCatalog(definitions)


def parse_pattern(value: Any, path: str, off_sentinel: str = DEFAULT_OFF_SENTINEL) -> CyclePattern:
    if isinstance(value, list):
        return CyclePattern.from_codes(value, off_sentinel)
    if isinstance(value, Mapping):
        try:
            return CyclePattern.from_day_columns(value, off_sentinel)
        except MalformedInputError as e:
            raise MalformedInputError(path, e.value, "day columns must run from 1 without gaps") from e
    raise MalformedInputError(path, value, "expected a list of cells or a day column mapping")


def parse_bid_period(
    value: Any,
    path: str,
    pattern: Optional[CyclePattern] = None,
) -> BidPeriod:
    data = _expect_mapping(value, path)
    start = parse_iso_date(_require(data, "start_date", path), f"{path}.start_date")
    repeats = _expect_int(data.get("cycle_repeat_count", 1), f"{path}.cycle_repeat_count")
    if "cycle_length" in data:
        length = _expect_int(data["cycle_length"], f"{path}.cycle_length")
    elif pattern is not None:
        length = len(pattern)
    else:
        raise MalformedInputError(f"{path}.cycle_length", None, "missing required field")

    try:
        return BidPeriod(start, length, repeats)
    except MalformedInputError as e:
        raise MalformedInputError(f"{path}.{e.field.split('.')[-1]}", e.value, "must be a positive integer") from e


def parse_roster(
    item: Any,
    path: str,
    default_period: Optional[Mapping[str, Any]] = None,
    off_sentinel: str = DEFAULT_OFF_SENTINEL,
) -> Roster:
    item = _expect_mapping(item, path)
    pattern = parse_pattern(_require(item, "pattern", path), f"{path}.pattern", off_sentinel)

    if "bid_period" in item:
        period = parse_bid_period(item["bid_period"], f"{path}.bid_period", pattern)
    elif default_period is not None:
        period = parse_bid_period(default_period, "bid_period", pattern)
    else:
        raise MalformedInputError(f"{path}.bid_period", None, "no bid period for roster")

    line = item.get("line")
    return Roster(
        roster_id=str(_require(item, "id", path)),
        group=str(item.get("group", "")),
        pattern=pattern,
        bid_period=period,
        line=str(line) if line is not None else None,
    )


def parse_dates(items: Any, path: str) -> frozenset[date]:
    return frozenset(
        parse_iso_date(v, f"{path}[{i}]") for i, v in enumerate(_expect_list(items, path))
    )


def parse_criteria(value: Any, path: str = "criteria") -> PreferenceCriteria:
    data = _expect_mapping(value, path)

    weights_data = _expect_mapping(data.get("weights", {}), f"{path}.weights")
    known = {c.value for c in Criterion}
    unknown = sorted(set(weights_data) - known)
    if unknown:
        raise MalformedInputError(f"{path}.weights", unknown, "unknown weight names")
    for name, weight in weights_data.items():
        if isinstance(weight, bool) or not isinstance(weight, (int, float)):
            raise MalformedInputError(f"{path}.weights.{name}", weight, "expected a number")

    return PreferenceCriteria(
        selected_groups=_expect_list(data.get("groups", []), f"{path}.groups"),
        selected_shift_codes=_expect_list(data.get("shift_codes", []), f"{path}.shift_codes"),
        selected_shift_categories=_expect_list(
            data.get("shift_categories", []), f"{path}.shift_categories"
        ),
        selected_shift_lengths=_expect_list(
            data.get("shift_lengths", []), f"{path}.shift_lengths"
        ),
        category_intent=_enum(
            CategoryIntent, data.get("category_intent", "any"), f"{path}.category_intent"
        ),
        requested_days_off=parse_dates(data.get("days_off", []), f"{path}.days_off"),
        weekend_stance=_enum(WeekendStance, data.get("weekend", "indifferent"), f"{path}.weekend"),
        saturday_stance=_enum(
            WeekendStance, data.get("saturday", "indifferent"), f"{path}.saturday"
        ),
        sunday_stance=_enum(WeekendStance, data.get("sunday", "indifferent"), f"{path}.sunday"),
        weights=PreferenceWeights(**weights_data),
        mandatory=[
            _enum(Criterion, v, f"{path}.mandatory[{i}]")
            for i, v in enumerate(_expect_list(data.get("mandatory", []), f"{path}.mandatory"))
        ],
    )


def parse_document(data: Any, off_sentinel: str = DEFAULT_OFF_SENTINEL) -> RosterDocument:
    """Parse a decoded JSON document into domain objects."""
    data = _expect_mapping(data, "document")
    default_period = data.get("bid_period")
    if default_period is not None:
        _expect_mapping(default_period, "bid_period")

    rosters = [
        parse_roster(item, f"rosters[{i}]", default_period, off_sentinel)
        for i, item in enumerate(_expect_list(data.get("rosters", []), "rosters"))
    ]
    criteria = parse_criteria(data["criteria"]) if data.get("criteria") is not None else None

    return RosterDocument(
        rosters=rosters,
        catalog=parse_shift_codes(data.get("shift_codes", [])),
        criteria=criteria,
        day_off_requests=parse_dates(data.get("day_off_requests", []), "day_off_requests"),
    )


def load_document(
    path: Union[str, Path],
    off_sentinel: str = DEFAULT_OFF_SENTINEL,
) -> RosterDocument:
    """Read and parse a JSON input file."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise MalformedInputError("document", str(path), f"invalid JSON: {e}") from e
    return parse_document(data, off_sentinel)
