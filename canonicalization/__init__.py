"""
Canonicalization Package.

Resolves raw device and site tokens to canonical display names
through ordered regex dictionaries, one per namespace.
"""

from .models import Namespace, DictionaryEntry, LookupResult
from .dictionary import CanonicalDictionary, DictionaryRegistry, parse_lines


__all__ = [
    "Namespace",
    "DictionaryEntry",
    "LookupResult",
    "CanonicalDictionary",
    "DictionaryRegistry",
    "parse_lines",
]
