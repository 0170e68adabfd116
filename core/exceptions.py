"""
Core Module - Exceptions.

============================================================
RESPONSIBILITY
============================================================
Defines all custom exceptions for the NOC report system.

- Provides clear exception hierarchy
- Separates fatal startup failures from per-message skips
- Includes context for debugging

============================================================
EXCEPTION HIERARCHY
============================================================
NocReportException (base)
├── ConfigurationError
├── DictionaryLoadError
├── AlertParseError
└── CollaboratorError
    ├── MailboxError
    ├── TelemetryError
    └── ReportDeliveryError

============================================================
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# ============================================================
# SEVERITY LEVELS
# ============================================================

class Severity(Enum):
    """Exception severity levels."""

    LOW = "low"
    """Routine condition, logged in debug mode only."""

    MEDIUM = "medium"
    """Recoverable issue, processing continues."""

    HIGH = "high"
    """Report run cannot complete."""


# ============================================================
# BASE EXCEPTION
# ============================================================

class NocReportException(Exception):
    """
    Base exception for all report system errors.

    All exceptions carry:
    - severity: for log level selection
    - context: for debugging
    - recoverable: whether the run may continue
    - timestamp: when the error occurred
    """

    default_severity: Severity = Severity.MEDIUM
    default_recoverable: bool = True

    def __init__(
        self,
        message: str,
        severity: Optional[Severity] = None,
        context: Optional[Dict[str, Any]] = None,
        recoverable: Optional[bool] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)

        self.message = message
        self.severity = severity or self.default_severity
        self.context = context or {}
        self.recoverable = recoverable if recoverable is not None else self.default_recoverable
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        if cause:
            self.context["cause_type"] = type(cause).__name__
            self.context["cause_message"] = str(cause)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logging."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "severity": self.severity.value,
            "recoverable": self.recoverable,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None,
        }

    def to_log_format(self) -> str:
        """Format exception for structured logging."""
        ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        text = f"[{self.severity.value.upper()}] {type(self).__name__}: {self.message}"
        if ctx_str:
            text += f" | {ctx_str}"
        return text


# ============================================================
# CONFIGURATION ERRORS
# ============================================================

class ConfigurationError(NocReportException):
    """Error in configuration."""

    default_severity = Severity.HIGH
    default_recoverable = False

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        if config_key:
            context["config_key"] = config_key
        super().__init__(message, context=context, **kwargs)


class DictionaryLoadError(NocReportException):
    """A dictionary source could not be read. Fatal before processing."""

    default_severity = Severity.HIGH
    default_recoverable = False

    def __init__(self, path: str, cause: Optional[Exception] = None):
        super().__init__(
            message=f"Failed to load dictionary file: {path}",
            context={"path": path},
            cause=cause,
        )
        self.path = path


# ============================================================
# INPUT ERRORS
# ============================================================

class AlertParseError(NocReportException):
    """A message is malformed and will be skipped."""

    default_severity = Severity.LOW

    def __init__(self, message: str, subject: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        if subject is not None:
            context["subject"] = subject[:120]
        super().__init__(message, context=context, **kwargs)


# ============================================================
# COLLABORATOR ERRORS
# ============================================================

class CollaboratorError(NocReportException):
    """Failure of an external collaborator (mailbox, telemetry, transport)."""

    default_severity = Severity.HIGH
    default_recoverable = False


class MailboxError(CollaboratorError):
    """Mailbox could not be reached or read."""


class TelemetryError(CollaboratorError):
    """Device telemetry could not be queried."""

    default_severity = Severity.MEDIUM
    default_recoverable = True


class ReportDeliveryError(CollaboratorError):
    """Finished report could not be handed to the mail transport."""
