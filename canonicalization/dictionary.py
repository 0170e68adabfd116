"""
Canonicalization - Dictionary.

============================================================
RESPONSIBILITY
============================================================
Maps raw, inconsistently-spelled device and site tokens to
one authoritative display name.

- Parses ``pattern=canonical_value`` text lines
- Orders rules longest pattern text first
- Looks up with whole-string regex matching, first match wins

============================================================
LINE FORMAT
============================================================
    # comment
    sw1=Site A
    ies\\d?-kyiv-core.*=Kyiv Core

Blank lines and lines starting with ``#`` are ignored. Only the
first ``=`` separates pattern from value. A pattern that does not
compile disables that one rule and is logged; it never aborts
the load.

============================================================
"""

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from core.exceptions import DictionaryLoadError

from .models import DictionaryEntry, LookupResult, Namespace


logger = logging.getLogger(__name__)


# ============================================================
# LINE PARSING
# ============================================================

def parse_lines(lines: Iterable[str]) -> List[Tuple[str, str]]:
    """
    Extract ``(pattern, value)`` pairs from dictionary text lines.

    Lines without ``=`` are skipped.
    """
    pairs = []
    for line_no, raw in enumerate(lines, 1):
        line = raw.rstrip("\r\n")
        if not line.strip() or line.startswith("#"):
            continue
        if "=" not in line:
            logger.debug(f"Dictionary line {line_no} has no '=', skipped: {line!r}")
            continue
        pattern_text, value = line.split("=", 1)
        pairs.append((pattern_text.strip(), value.strip()))
    return pairs


# ============================================================
# DICTIONARY
# ============================================================

class CanonicalDictionary:
    """
    Ordered regex table for one namespace.

    Entries are sorted by descending pattern length at build time,
    so a more specific rule wins over a shorter general one no matter
    where it appears in the source.
    """

    def __init__(self, entries: List[DictionaryEntry], namespace: Namespace):
        self._entries = list(entries)
        self._namespace = namespace

    @classmethod
    def build(
        cls,
        lines: Iterable[str],
        namespace: Namespace = Namespace.PD,
    ) -> "CanonicalDictionary":
        """Compile dictionary text lines into an ordered table."""
        pairs = parse_lines(lines)

        # sorted() is stable: equal-length patterns keep file order
        pairs = sorted(pairs, key=lambda pair: len(pair[0]), reverse=True)

        entries = []
        for pattern_text, value in pairs:
            try:
                compiled = re.compile(pattern_text)
            except re.error as e:
                logger.warning(
                    f"Invalid regex pattern in {namespace.value} dictionary: "
                    f"{pattern_text!r}, error: {e}"
                )
                continue
            entries.append(DictionaryEntry(pattern=compiled, canonical_value=value))

        logger.debug(f"Loaded {len(entries)} {namespace.value} dictionary rules")
        return cls(entries, namespace)

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        namespace: Namespace,
    ) -> "CanonicalDictionary":
        """
        Read a UTF-8 dictionary file.

        Raises:
            DictionaryLoadError: file is missing or unreadable
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                lines = f.readlines()
        except (OSError, UnicodeDecodeError) as e:
            raise DictionaryLoadError(str(path), cause=e) from e
        return cls.build(lines, namespace)

    @property
    def namespace(self) -> Namespace:
        return self._namespace

    @property
    def entries(self) -> List[DictionaryEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, raw_key: str) -> LookupResult:
        """
        Canonical name for ``raw_key``.

        Returns the raw key unchanged with ``matched=False`` when no
        rule matches the whole key.
        """
        for entry in self._entries:
            if entry.matches(raw_key):
                return LookupResult(value=entry.canonical_value, matched=True)
        return LookupResult(value=raw_key, matched=False)


# ============================================================
# REGISTRY
# ============================================================

class DictionaryRegistry:
    """
    Both namespaces, read-only after construction.

    Shared by every classification call of a run.
    """

    def __init__(self, dictionaries: Optional[Dict[Namespace, CanonicalDictionary]] = None):
        self._dictionaries: Dict[Namespace, CanonicalDictionary] = {}
        for namespace in Namespace:
            self._dictionaries[namespace] = CanonicalDictionary([], namespace)
        for namespace, dictionary in (dictionaries or {}).items():
            self._dictionaries[namespace] = dictionary

    @classmethod
    def from_files(
        cls,
        pd_path: Union[str, Path],
        sdh_path: Union[str, Path],
    ) -> "DictionaryRegistry":
        """Load both namespaces; any unreadable file is fatal."""
        return cls({
            Namespace.PD: CanonicalDictionary.from_file(pd_path, Namespace.PD),
            Namespace.SDH: CanonicalDictionary.from_file(sdh_path, Namespace.SDH),
        })

    @classmethod
    def from_lines(
        cls,
        pd_lines: Iterable[str] = (),
        sdh_lines: Iterable[str] = (),
    ) -> "DictionaryRegistry":
        return cls({
            Namespace.PD: CanonicalDictionary.build(pd_lines, Namespace.PD),
            Namespace.SDH: CanonicalDictionary.build(sdh_lines, Namespace.SDH),
        })

    def get(self, namespace: Namespace) -> CanonicalDictionary:
        return self._dictionaries[namespace]

    def lookup(self, namespace: Namespace, raw_key: str) -> LookupResult:
        return self._dictionaries[namespace].lookup(raw_key)

    def sizes(self) -> Dict[str, int]:
        return {ns.value: len(d) for ns, d in self._dictionaries.items()}
