"""
Core Module Package.

This package contains the infrastructure components that all
other modules depend on.

Components:
- clock: Time abstraction and duty-shift calendar
- exceptions: Custom exception hierarchy
"""

from .clock import (
    DEFAULT_TIMEZONE,
    ClockProtocol,
    SystemClock,
    MockClock,
    DutyWindow,
    DutySchedule,
)
from .exceptions import (
    Severity,
    NocReportException,
    ConfigurationError,
    DictionaryLoadError,
    AlertParseError,
    CollaboratorError,
    MailboxError,
    TelemetryError,
    ReportDeliveryError,
)


__all__ = [
    # Clock
    "DEFAULT_TIMEZONE",
    "ClockProtocol",
    "SystemClock",
    "MockClock",
    "DutyWindow",
    "DutySchedule",
    # Exceptions
    "Severity",
    "NocReportException",
    "ConfigurationError",
    "DictionaryLoadError",
    "AlertParseError",
    "CollaboratorError",
    "MailboxError",
    "TelemetryError",
    "ReportDeliveryError",
]
