"""
Aggregation Package.

Merges classified incidents into buckets keyed by
group, device, primary and secondary timestamp.
"""

from .store import IncidentStore, StoreEntry, add, build_store


__all__ = [
    "IncidentStore",
    "StoreEntry",
    "add",
    "build_store",
]
