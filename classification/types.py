"""
Classification - Type Definitions.

============================================================
PURPOSE
============================================================
Input and output records of the alert classifier.

- RawAlert: one message as handed over by the mailbox collector
- ParsedIncident: common shape used by aggregation and rendering
- PingDownIncident / CircuitIncident: the two alert families

============================================================
DESIGN PRINCIPLES
============================================================
- Immutable records
- Both timestamps always kept: ``primary_timestamp`` is the
  receipt time used for window filtering, ``secondary_timestamp``
  is the embedded trap time when the source reported late
- Downstream code reads the common fields only

============================================================
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import ClassVar, Tuple


# =============================================================
# ENUMS
# =============================================================

class AlertFamily(str, Enum):
    """Alert families recognized by subject signature."""
    PD = "PD"
    """Ping-down: device unreachable or restarted (Zabbix)."""

    SDH = "SDH"
    """Circuit loss or power/environment event (OSM)."""


class AlertState(str, Enum):
    """Problem/resolved marker carried in the subject."""
    PROBLEM = "problem"
    RESOLVED = "resolved"
    UNKNOWN = "unknown"


# =============================================================
# INPUT
# =============================================================

@dataclass(frozen=True)
class RawAlert:
    """A message already extracted from the mailbox."""
    subject: str
    body: str
    received_at: datetime


# =============================================================
# OUTPUT
# =============================================================

BucketKey = Tuple[str, str, datetime, datetime]


@dataclass(frozen=True)
class ParsedIncident:
    """Typed, canonicalized incident ready for aggregation."""
    group_key: str
    device_key: str
    primary_timestamp: datetime
    secondary_timestamp: datetime
    message: str
    needs_review: bool = False
    state: AlertState = AlertState.UNKNOWN

    category: ClassVar[AlertFamily]

    @property
    def bucket_key(self) -> BucketKey:
        return (
            self.group_key,
            self.device_key,
            self.primary_timestamp,
            self.secondary_timestamp,
        )


@dataclass(frozen=True)
class PingDownIncident(ParsedIncident):
    """Reachability or restart event of a single device."""
    event_word: str = ""

    category: ClassVar[AlertFamily] = AlertFamily.PD


@dataclass(frozen=True)
class CircuitIncident(ParsedIncident):
    """Circuit loss between two sites, or a power event at one site."""
    circuit_type: str = ""
    group_needs_review: bool = False
    device_needs_review: bool = False

    category: ClassVar[AlertFamily] = AlertFamily.SDH

    @property
    def is_pair(self) -> bool:
        return bool(self.device_key)
