"""
Notifications Package.

Delivery of the finished report.
"""

from .mail import (
    EmailConfig,
    ReportTransport,
    SendmailTransport,
    ConsoleTransport,
    build_message,
)


__all__ = [
    "EmailConfig",
    "ReportTransport",
    "SendmailTransport",
    "ConsoleTransport",
    "build_message",
]
