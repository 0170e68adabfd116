"""
Data Ingestion - Base Alert Source.

============================================================
PURPOSE
============================================================
Abstract interface of the mail-retrieval collaborator.

============================================================
DESIGN PRINCIPLES
============================================================
- Collection only, no classification
- Returns plain-text RawAlerts in mailbox order
- Malformed messages are skipped and counted, never fatal
- Connection failures raise MailboxError

============================================================
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

from classification.types import RawAlert
from data_ingestion.types import IngestionResult


class BaseAlertSource(ABC):
    """
    Abstract base class for alert sources.

    ============================================================
    LIFECYCLE
    ============================================================
    1. Initialize with configuration
    2. Call fetch(since, until) once per report run
    3. Inspect ``last_result`` for counters
    ============================================================
    """

    def __init__(self, source_name: str) -> None:
        self._source_name = source_name
        self._logger = logging.getLogger(f"collector.{source_name}")
        self.last_result: Optional[IngestionResult] = None

    @property
    def source_name(self) -> str:
        return self._source_name

    @abstractmethod
    def fetch(self, since: datetime, until: datetime) -> List[RawAlert]:
        """
        Alerts received within ``[since, until]``.

        Raises:
            MailboxError: source unreachable or unreadable
        """
        pass


class StaticAlertSource(BaseAlertSource):
    """In-memory alerts, for replaying saved batches and for tests."""

    def __init__(self, alerts: Iterable[RawAlert]) -> None:
        super().__init__("static")
        self._alerts = list(alerts)

    def fetch(self, since: datetime, until: datetime) -> List[RawAlert]:
        result = IngestionResult(source=self.source_name)
        result.records_fetched = len(self._alerts)
        selected = []
        for alert in self._alerts:
            received_at = alert.received_at
            if received_at.tzinfo is None:
                received_at = received_at.replace(tzinfo=since.tzinfo)
            if since <= received_at <= until:
                selected.append(alert)
            else:
                result.records_out_of_window += 1
        result.records_accepted = len(selected)
        self.last_result = result
        return selected
