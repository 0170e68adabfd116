"""
Canonicalization - Models.

============================================================
PURPOSE
============================================================
Types shared by the canonicalization dictionary.

- Namespace: which dictionary a rule belongs to
- DictionaryEntry: one compiled pattern -> canonical name rule
- LookupResult: outcome of a lookup, with the "matched" flag
  that drives the needs-review marker in reports

============================================================
"""

import re
from dataclasses import dataclass
from enum import Enum


class Namespace(str, Enum):
    """Independent dictionary namespaces."""
    PD = "pd"
    """Device names from ping-down alerts."""

    SDH = "sdh"
    """Circuit and site names from OSM alerts."""


@dataclass(frozen=True)
class DictionaryEntry:
    """A single ``pattern=canonical_value`` rule."""
    pattern: re.Pattern
    canonical_value: str

    @property
    def pattern_text(self) -> str:
        return self.pattern.pattern

    def matches(self, raw_key: str) -> bool:
        """Whole-string match, never substring search."""
        return self.pattern.fullmatch(raw_key) is not None


@dataclass(frozen=True)
class LookupResult:
    """Canonical value and whether any rule matched."""
    value: str
    matched: bool

    @property
    def needs_review(self) -> bool:
        return not self.matched
