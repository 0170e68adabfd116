"""
Classification Package.

Turns loosely-structured alert subjects and bodies into typed,
canonicalized incidents.

Components:
- classifier: family dispatch and batch statistics
- pd_parser: Zabbix ping-down alerts
- sdh_parser: OSM circuit and power alerts
- trap_payload: embedded event timestamps
- config: organisation-specific matching rules
"""

from .types import (
    AlertFamily,
    AlertState,
    RawAlert,
    ParsedIncident,
    PingDownIncident,
    CircuitIncident,
)
from .config import ClassifierConfig
from .classifier import AlertClassifier, ClassificationStats
from .pd_parser import PingDownParser
from .sdh_parser import CircuitAlertParser
from .trap_payload import decode_body, extract_trap_timestamp
from .phrases import format_event_time


__all__ = [
    # Types
    "AlertFamily",
    "AlertState",
    "RawAlert",
    "ParsedIncident",
    "PingDownIncident",
    "CircuitIncident",
    # Config
    "ClassifierConfig",
    # Classifier
    "AlertClassifier",
    "ClassificationStats",
    "PingDownParser",
    "CircuitAlertParser",
    # Helpers
    "decode_body",
    "extract_trap_timestamp",
    "format_event_time",
]
