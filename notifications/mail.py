"""
Mail Report Transport.

============================================================
PURPOSE
============================================================
Hands the finished report to the local MTA.

PRINCIPLES:
- One HTML message per run, UTF-8, base64 transfer encoding
- Debug runs go to the debug recipient only
- Transport failure is reported, never silently dropped

============================================================
"""

import logging
import subprocess
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import List, Optional, TextIO

from core.exceptions import ReportDeliveryError


logger = logging.getLogger(__name__)


# ============================================================
# CONFIG
# ============================================================

@dataclass
class EmailConfig:
    """Envelope of the report mail."""
    sender: Optional[str] = None
    reply_to: Optional[str] = None
    recipients: List[str] = field(default_factory=list)
    debug_recipient: Optional[str] = None
    powered_by: str = "noc-report 1.0.0"
    sendmail_path: str = "/usr/sbin/sendmail"
    timeout_seconds: float = 60.0

    def is_valid(self) -> bool:
        return bool(self.sender and self.reply_to and self.recipients)


# ============================================================
# TRANSPORTS
# ============================================================

class ReportTransport(ABC):
    """Mail-transmission collaborator."""

    @abstractmethod
    def send(self, subject: str, html_body: str) -> None:
        """
        Deliver the report.

        Raises:
            ReportDeliveryError: the report was not accepted
        """
        pass


def build_message(config: EmailConfig, subject: str, html_body: str, debug: bool = False) -> EmailMessage:
    """RFC 5322 message carrying the report as its only HTML part."""
    message = EmailMessage()
    message["From"] = config.sender
    message["Reply-To"] = config.reply_to
    if debug:
        message["To"] = config.debug_recipient
    else:
        message["To"] = ", ".join(config.recipients)
    message["Subject"] = subject
    message["X-PoweredBy"] = config.powered_by
    message.set_content(html_body, subtype="html", charset="utf-8", cte="base64")
    return message


class SendmailTransport(ReportTransport):
    """Pipes the message to ``sendmail -t``."""

    def __init__(self, config: EmailConfig, debug: bool = False) -> None:
        self._config = config
        self._debug = debug

    def send(self, subject: str, html_body: str) -> None:
        if self._debug and not self._config.debug_recipient:
            raise ReportDeliveryError("Debug run without email.to_debug recipient")

        message = build_message(self._config, subject, html_body, debug=self._debug)
        if self._debug:
            logger.debug(f"Subject: {subject}")
            logger.debug(f"Message: {html_body}")

        try:
            completed = subprocess.run(
                [self._config.sendmail_path, "-t"],
                input=message.as_bytes(),
                capture_output=True,
                timeout=self._config.timeout_seconds,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise ReportDeliveryError(f"sendmail could not be run: {e}", cause=e) from e

        if completed.returncode != 0:
            raise ReportDeliveryError(
                f"sendmail failed with exit code: {completed.returncode}",
                context={"stderr": completed.stderr.decode("utf-8", "replace")[:200]},
            )
        logger.info(f"Report sent to {message['To']}")


class ConsoleTransport(ReportTransport):
    """Writes the report to a stream instead of sending it (dry runs)."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream or sys.stdout

    def send(self, subject: str, html_body: str) -> None:
        self._stream.write(f"Subject: {subject}\n\n{html_body}\n")
        self._stream.flush()
