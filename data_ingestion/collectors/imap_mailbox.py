"""
Data Ingestion - IMAP Mailbox Collector.

============================================================
PURPOSE
============================================================
Reads alert mails from the IMAP folder the alerting tools
deliver into, and hands them over as RawAlerts.

- Folder opened read-only, nothing is flagged or moved
- Receipt time comes from the ``Date`` header; ``-0000`` reads as UTC
- Body is the first text/plain part, decoded to text

============================================================
SKIPPED MESSAGES
============================================================
- No ``Date`` header, or one that does not parse
- No ``Subject`` header
- Body that cannot be decoded
- Receipt time outside the retrieval window

============================================================
"""

import email
import imaplib
from datetime import datetime, timedelta, timezone
from email.message import EmailMessage
from email.policy import default as default_policy
from email.utils import parsedate_to_datetime
from typing import List, Optional

from classification.types import RawAlert
from core.exceptions import AlertParseError, MailboxError
from data_ingestion.collectors.base import BaseAlertSource
from data_ingestion.types import IngestionResult, MailboxConfig


_IMAP_ERRORS = (imaplib.IMAP4.error, OSError)

# IMAP dates are locale-independent English month names
_IMAP_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
                "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def imap_date(moment: datetime) -> str:
    """``19-Oct-2026`` for IMAP SEARCH SINCE."""
    return f"{moment.day:02d}-{_IMAP_MONTHS[moment.month - 1]}-{moment.year}"


def extract_text(message: EmailMessage) -> str:
    """First text/plain part, or the whole body of a single-part text mail."""
    if message.is_multipart():
        for part in message.walk():
            if part.get_content_type() == "text/plain":
                return part.get_content()
        return ""
    if message.get_content_maintype() == "text":
        return message.get_content()
    return ""


def parse_message(raw: bytes) -> RawAlert:
    """
    Build a RawAlert from an RFC 822 message.

    Raises:
        AlertParseError: required header missing or body undecodable
    """
    message = email.message_from_bytes(raw, policy=default_policy)

    subject = message.get("Subject")
    date_header = message.get("Date")
    if subject is None or date_header is None:
        raise AlertParseError(
            f"Invalid message data: date={date_header}, subject={subject}",
            subject=str(subject) if subject is not None else None,
        )

    try:
        received_at = parsedate_to_datetime(str(date_header))
    except (TypeError, ValueError) as e:
        raise AlertParseError(f"Failed to parse date: {date_header}", subject=str(subject), cause=e) from e
    if received_at.tzinfo is None:
        # RFC 5322 "-0000": UTC with the sender's local zone unknown
        received_at = received_at.replace(tzinfo=timezone.utc)

    try:
        body = extract_text(message)
    except (LookupError, UnicodeError) as e:
        raise AlertParseError("Failed to get message body", subject=str(subject), cause=e) from e

    return RawAlert(subject=str(subject), body=body, received_at=received_at)


class ImapAlertSource(BaseAlertSource):
    """
    Mailbox collaborator over plain IMAP or IMAPS.

    Example:
        source = ImapAlertSource(MailboxConfig(hostname="mail.example.net", ...))
        alerts = source.fetch(window.start, window.end)
    """

    def __init__(self, config: MailboxConfig) -> None:
        super().__init__("imap")
        self._config = config

    def _connect(self) -> imaplib.IMAP4:
        cfg = self._config
        self._logger.debug(f"Connecting to IMAP server: {cfg.hostname}:{cfg.port}")
        try:
            if cfg.ssl:
                client = imaplib.IMAP4_SSL(cfg.hostname, cfg.port, timeout=cfg.timeout_seconds)
            else:
                client = imaplib.IMAP4(cfg.hostname, cfg.port, timeout=cfg.timeout_seconds)
            client.login(cfg.username, cfg.password)
        except _IMAP_ERRORS as e:
            raise MailboxError(
                f"IMAP error: {e}",
                context={"hostname": cfg.hostname, "port": cfg.port},
                cause=e,
            ) from e
        self._logger.debug("Connected to IMAP server")
        return client

    def _folder_name(self) -> str:
        folder = self._config.folder
        if " " in folder and not folder.startswith('"'):
            return f'"{folder}"'
        return folder

    def fetch(self, since: datetime, until: datetime) -> List[RawAlert]:
        result = IngestionResult(source=self.source_name, started_at=datetime.now(since.tzinfo))
        alerts: List[RawAlert] = []

        client = self._connect()
        try:
            status, _ = client.select(self._folder_name(), readonly=True)
            if status != "OK":
                raise MailboxError(f"Cannot open folder {self._config.folder}")

            # SINCE matches on the server's internal date; one day of slack
            status, data = client.search(None, "SINCE", imap_date(since - timedelta(days=1)))
            if status != "OK":
                raise MailboxError(f"Search failed in folder {self._config.folder}")
            message_ids = data[0].split() if data and data[0] else []
            self._logger.info(f"Processing {len(message_ids)} messages...")

            for message_id in message_ids:
                result.records_fetched += 1
                alert = self._fetch_one(client, message_id, result)
                if alert is None:
                    continue
                if not since <= alert.received_at <= until:
                    result.records_out_of_window += 1
                    continue
                alerts.append(alert)
        except _IMAP_ERRORS as e:
            result.mark_failed(str(e))
            raise MailboxError(f"IMAP error: {e}", cause=e) from e
        finally:
            try:
                client.logout()
            except _IMAP_ERRORS:
                self._logger.debug("IMAP logout failed")
            result.records_accepted = len(alerts)
            result.mark_complete(datetime.now(since.tzinfo))
            self.last_result = result
            self._logger.info(f"Mailbox fetch finished: {result.to_dict()}")

        return alerts

    def _fetch_one(
        self,
        client: imaplib.IMAP4,
        message_id: bytes,
        result: IngestionResult,
    ) -> Optional[RawAlert]:
        status, data = client.fetch(message_id, "(RFC822)")
        if status != "OK" or not data or not isinstance(data[0], tuple):
            result.add_error(f"fetch {message_id!r}: {status}")
            return None
        try:
            return parse_message(data[0][1])
        except AlertParseError as e:
            result.add_error(e.message)
            self._logger.debug(e.to_log_format())
            return None
