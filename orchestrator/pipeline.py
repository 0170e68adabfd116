"""
Orchestrator - Report Pipeline.

============================================================
RESPONSIBILITY
============================================================
Runs one report in strict order:

1. Compute report and retrieval windows
2. Fetch alerts (retrieval window)
3. Classify each alert
4. Aggregate incidents
5. Render the incident section (report window)
6. Render the temperature section
7. Render the Ramos sensor section
8. Assemble the document

============================================================
DESIGN PRINCIPLES
============================================================
- Synchronous: arrival order within a bucket is preserved
- Collaborators are injected, so runs are replayable in tests
- A malformed message is skipped, a collaborator failure is not

============================================================
"""

import logging
from datetime import datetime
from typing import List, Optional

from aggregation.store import IncidentStore
from classification.classifier import AlertClassifier
from core.clock import ClockProtocol, DutySchedule
from data_ingestion.collectors.base import BaseAlertSource
from data_ingestion.collectors.ramos_sensors import RamosProbe
from data_ingestion.collectors.snmp_temperature import TemperatureProbe
from notifications.mail import ReportTransport
from reporting.document import assemble_document, report_subject
from reporting.incident_report import IncidentReportRenderer
from reporting.ramos_report import render_ramos_section
from reporting.temperature_report import render_temperature_section

from .models import ReportResult


logger = logging.getLogger(__name__)


class ReportPipeline:
    """
    One shift report from mailbox to HTML document.

    Example:
        pipeline = ReportPipeline(schedule, clock, classifier, source=imap)
        result = pipeline.run()
        pipeline.deliver(result, transport)
    """

    def __init__(
        self,
        schedule: DutySchedule,
        clock: ClockProtocol,
        classifier: Optional[AlertClassifier] = None,
        source: Optional[BaseAlertSource] = None,
        probe: Optional[TemperatureProbe] = None,
        renderer: Optional[IncidentReportRenderer] = None,
        ramos_probe: Optional[RamosProbe] = None,
    ):
        if (classifier is None) != (source is None):
            raise ValueError("classifier and source must be given together")
        self._schedule = schedule
        self._clock = clock
        self._classifier = classifier
        self._source = source
        self._probe = probe
        self._renderer = renderer or IncidentReportRenderer()
        self._ramos_probe = ramos_probe

    @property
    def incidents_enabled(self) -> bool:
        return self._source is not None

    def collect(self, now: datetime) -> IncidentStore:
        """Fetch, classify and aggregate the retrieval window."""
        retrieval = self._schedule.retrieval_window(now)
        alerts = self._source.fetch(retrieval.start, retrieval.end)
        logger.info(f"Fetched {len(alerts)} alerts for {retrieval.label()}")

        store = IncidentStore()
        for alert in alerts:
            incident = self._classifier.classify(alert)
            if incident is not None:
                store.add(incident)

        logger.info(f"Classification finished: {self._classifier.stats.to_dict()}")
        for group, count in sorted(store.review_candidates().items()):
            logger.warning(f"Name needs a dictionary rule: {group} ({count} incidents)")
        return store

    def run(self, now: Optional[datetime] = None) -> ReportResult:
        now = now or self._clock.now()
        window = self._schedule.report_window(now)
        result = ReportResult(
            subject=report_subject(window),
            html="",
            window=window,
            started_at=self._clock.now(),
        )

        fragments: List[str] = []
        if self.incidents_enabled:
            store = self.collect(now)
            fragments.append(self._renderer.render_section(store, window.start, window.end))
            stats = self._classifier.stats
            result.alerts_fetched = stats.seen
            result.incidents_stored = len(store)
            result.discarded = stats.seen - stats.classified
            result.needs_review = stats.needs_review
            result.sections.append("incidents")

        if self._probe is not None:
            readings = self._probe.read()
            fragments.append(render_temperature_section(readings, self._clock.now()))
            result.sections.append("temperature")

        if self._ramos_probe is not None:
            sites = self._ramos_probe.read()
            fragments.append(render_ramos_section(sites, self._clock.now()))
            result.sections.append("ramos")

        result.html = assemble_document(fragments)
        result.completed_at = self._clock.now()
        logger.info(f"Report ready: {result.to_dict()}")
        return result

    @staticmethod
    def deliver(result: ReportResult, transport: ReportTransport) -> None:
        transport.send(result.subject, result.html)
