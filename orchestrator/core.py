"""
Orchestrator - Core.

============================================================
RESPONSIBILITY
============================================================
Wires a ReportConfig into a runnable pipeline.

- Sets up logging
- Loads dictionaries (fatal on failure)
- Chooses collaborators for the enabled sections
- Runs the pipeline and hands the report to the transport

============================================================
ARCHITECTURAL POSITION
============================================================
- No parsing or rendering logic lives here
- It ONLY builds components and coordinates one run

============================================================
"""

import json
import logging
import sys
from typing import Optional

from canonicalization.dictionary import DictionaryRegistry
from classification.classifier import AlertClassifier
from core.clock import ClockProtocol, SystemClock
from data_ingestion.collectors.base import BaseAlertSource
from data_ingestion.collectors.imap_mailbox import ImapAlertSource
from data_ingestion.collectors.ramos_sensors import RamosProbe, SnmpWalkProbe
from data_ingestion.collectors.snmp_temperature import SnmpGetProbe, TemperatureProbe
from notifications.mail import ReportTransport, SendmailTransport

from .models import ReportConfig, ReportResult
from .pipeline import ReportPipeline


# ============================================================
# LOGGING SETUP
# ============================================================

def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
) -> logging.Logger:
    """
    Set up structured logging.

    Args:
        level: Log level
        log_format: Output format (json or text)

    Returns:
        Configured logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps({
                "timestamp": "%(asctime)s",
                "level": "%(levelname)s",
                "logger": "%(name)s",
                "message": "%(message)s",
            })
        )
    else:
        formatter = logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")

    # stdout may carry the report itself in dry runs
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    return logging.getLogger("orchestrator")


# ============================================================
# ORCHESTRATOR
# ============================================================

class ReportOrchestrator:
    """
    Builds and runs one shift report.

    Collaborators default to the production ones derived from the
    configuration; any of them can be injected.
    """

    def __init__(
        self,
        config: ReportConfig,
        clock: Optional[ClockProtocol] = None,
        source: Optional[BaseAlertSource] = None,
        probe: Optional[TemperatureProbe] = None,
        transport: Optional[ReportTransport] = None,
        dictionaries: Optional[DictionaryRegistry] = None,
        ramos_probe: Optional[RamosProbe] = None,
    ):
        self._config = config
        self._logger = logging.getLogger("orchestrator")
        tz = config.duty.tz()
        self._schedule = config.duty.schedule()
        self._clock = clock or SystemClock(tz)
        self._source = source
        self._probe = probe
        self._transport = transport
        self._dictionaries = dictionaries
        self._ramos_probe = ramos_probe

    def build_pipeline(self) -> ReportPipeline:
        config = self._config
        classifier = None
        source = None

        if config.incidents_enabled:
            dictionaries = self._dictionaries or DictionaryRegistry.from_files(
                config.dictionary_pd_path,
                config.dictionary_sdh_path,
            )
            self._logger.info(f"Dictionary rules loaded: {dictionaries.sizes()}")
            classifier = AlertClassifier(
                dictionaries,
                config=config.classifier,
                tz=config.duty.tz(),
                debug=config.debug,
            )
            source = self._source or ImapAlertSource(config.mailbox)

        probe = None
        if config.temperature_enabled:
            probe = self._probe or SnmpGetProbe(config.telemetry)

        ramos_probe = None
        if config.ramos_enabled:
            ramos_probe = self._ramos_probe or SnmpWalkProbe(config.ramos)

        return ReportPipeline(
            schedule=self._schedule,
            clock=self._clock,
            classifier=classifier,
            source=source,
            probe=probe,
            ramos_probe=ramos_probe,
        )

    def run(self) -> ReportResult:
        """
        Build, run and deliver one report.

        Raises:
            DictionaryLoadError: dictionary file unreadable
            MailboxError: mailbox unreachable
            ReportDeliveryError: transport rejected the report
        """
        pipeline = self.build_pipeline()
        result = pipeline.run()
        transport = self._transport or SendmailTransport(self._config.email, debug=self._config.debug)
        pipeline.deliver(result, transport)
        return result
