"""Input loading for roster documents."""

from bidmatch.io.loader import (
    RosterDocument,
    load_document,
    parse_criteria,
    parse_document,
    parse_roster,
)

__all__ = [
    "RosterDocument",
    "load_document",
    "parse_criteria",
    "parse_document",
    "parse_roster",
]
