"""
Data Ingestion - Device Temperature Probe.

============================================================
PURPOSE
============================================================
Telemetry collaborator: polls a description and a temperature
OID from each configured device with net-snmp's ``snmpget``.

A device that cannot be polled yields an error reading; one
unreachable host never fails the report.

============================================================
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from core.exceptions import TelemetryError
from data_ingestion.collectors.snmp_cli import clean_value, run_snmp, snmp_command
from data_ingestion.types import ProbeTarget, TelemetryConfig, TemperatureReading


logger = logging.getLogger(__name__)


class TemperatureProbe(ABC):
    """Abstract telemetry source."""

    @abstractmethod
    def read(self) -> List[TemperatureReading]:
        """One reading per configured device, sorted by host."""
        pass


class SnmpGetProbe(TemperatureProbe):
    """SNMP v2c GET through the ``snmpget`` command-line tool."""

    def __init__(self, config: TelemetryConfig) -> None:
        self._config = config

    def command(self, target: ProbeTarget) -> List[str]:
        cfg = self._config
        return snmp_command(
            cfg.snmpget_path,
            cfg.community,
            cfg.timeout_seconds,
            cfg.retries,
            cfg.address_of(target),
            (target.description_oid, target.temperature_oid),
        )

    def read_one(self, target: ProbeTarget) -> TemperatureReading:
        address = self._config.address_of(target)
        # Upper bound for all retries of both OIDs
        deadline = (self._config.retries + 1) * self._config.timeout_seconds * 2 + 5
        try:
            lines = run_snmp(self.command(target), address, deadline)
        except TelemetryError as e:
            logger.debug(e.to_log_format())
            return TemperatureReading(host=target.host, address=address, error=e.message)

        if len(lines) < 2:
            return TemperatureReading(host=target.host, address=address, error="Timeout")

        description, celsius = clean_value(lines[0]), clean_value(lines[1])
        logger.debug(f"{address} -> {target.description_oid} -> {description}")
        logger.debug(f"{address} -> {target.temperature_oid} -> {celsius}")
        return TemperatureReading(
            host=target.host,
            address=address,
            description=description,
            celsius=celsius,
        )

    def read(self) -> List[TemperatureReading]:
        targets = sorted(self._config.targets, key=lambda t: t.name)
        return [self.read_one(target) for target in targets]
