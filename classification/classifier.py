"""
Classification - Alert Classifier.

============================================================
RESPONSIBILITY
============================================================
Single entry point that turns one RawAlert into a typed
incident, or discards it.

- Dispatches on the subject signature (PD vs SDH)
- Drops unrecognized subjects silently
- Skips malformed messages without aborting the batch

============================================================
DESIGN PRINCIPLES
============================================================
- No I/O; ``stats`` is the only mutable state, one per instance
- Dictionaries are read-only and may be shared across threads
- Returns a fully built incident or nothing, never a partial one

============================================================
"""

import logging
from dataclasses import dataclass, replace
from datetime import tzinfo
from typing import Iterable, List, Optional

from zoneinfo import ZoneInfo

from canonicalization import DictionaryRegistry
from core.clock import DEFAULT_TIMEZONE
from core.exceptions import AlertParseError

from .config import ClassifierConfig
from .pd_parser import PingDownParser
from .sdh_parser import CircuitAlertParser
from .types import AlertFamily, ParsedIncident, RawAlert


logger = logging.getLogger(__name__)


@dataclass
class ClassificationStats:
    """Counters of one classification batch."""
    seen: int = 0
    classified: int = 0
    unrecognized: int = 0
    filtered: int = 0
    malformed: int = 0
    needs_review: int = 0

    def to_dict(self) -> dict:
        return {
            "seen": self.seen,
            "classified": self.classified,
            "unrecognized": self.unrecognized,
            "filtered": self.filtered,
            "malformed": self.malformed,
            "needs_review": self.needs_review,
        }


class AlertClassifier:
    """
    Classifies Zabbix and OSM alert mails.

    Example:
        classifier = AlertClassifier(registry)
        incident = classifier.classify(alert)
        if incident is not None:
            store.add(incident)
    """

    def __init__(
        self,
        dictionaries: DictionaryRegistry,
        config: Optional[ClassifierConfig] = None,
        tz: Optional[tzinfo] = None,
        debug: bool = False,
    ):
        self._config = config or ClassifierConfig()
        self._tz = tz or ZoneInfo(DEFAULT_TIMEZONE)
        self._pd_signature = self._config.signature_pattern("PD")
        self._sdh_signature = self._config.signature_pattern("SDH", debug=debug)
        self._pd_parser = PingDownParser(dictionaries, self._config, self._tz)
        self._sdh_parser = CircuitAlertParser(dictionaries, self._config, self._tz)
        self.stats = ClassificationStats()

    def family_of(self, subject: str) -> Optional[AlertFamily]:
        """PD takes precedence when a subject carries both signatures."""
        if self._pd_signature.search(subject):
            return AlertFamily.PD
        if self._sdh_signature.search(subject):
            return AlertFamily.SDH
        return None

    def classify(self, alert: RawAlert) -> Optional[ParsedIncident]:
        """Typed incident for ``alert``, or None when it is discarded."""
        self.stats.seen += 1

        family = self.family_of(alert.subject)
        if family is None:
            self.stats.unrecognized += 1
            return None

        if alert.received_at.tzinfo is None:
            # Naive receipt time is read as report-zone local time
            alert = replace(alert, received_at=alert.received_at.replace(tzinfo=self._tz))

        parser = self._pd_parser if family == AlertFamily.PD else self._sdh_parser
        try:
            incident = parser.parse(alert)
        except AlertParseError as e:
            self.stats.malformed += 1
            logger.debug(e.to_log_format())
            return None

        if incident is None:
            self.stats.filtered += 1
            return None

        self.stats.classified += 1
        if incident.needs_review:
            self.stats.needs_review += 1
        return incident

    def classify_all(self, alerts: Iterable[RawAlert]) -> List[ParsedIncident]:
        """Classify in arrival order, keeping only the incidents."""
        incidents = []
        for alert in alerts:
            incident = self.classify(alert)
            if incident is not None:
                incidents.append(incident)
        return incidents
