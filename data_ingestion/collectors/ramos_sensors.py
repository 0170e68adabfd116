"""
Data Ingestion - Ramos Sensor Probe.

============================================================
PURPOSE
============================================================
Telemetry collaborator for Ramos environment controllers.
For each configured controller the sensor index column is
walked with ``snmpwalk``, then the description, unit, value
and threshold columns of every index are read with ``snmpget``.

============================================================
FAILURES
============================================================
- Walk fails: the site reading carries the error, no sensors
- Row read fails: the sensors read so far are kept with the
  error, and the walk of that site stops
- One site never fails the others or the report

============================================================
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import fields
from typing import List

from core.exceptions import TelemetryError
from data_ingestion.collectors.snmp_cli import clean_value, run_snmp, snmp_command
from data_ingestion.types import RamosConfig, RamosSensor, RamosSite, RamosSiteReading


logger = logging.getLogger(__name__)

_SENSOR_FIELDS = len(fields(RamosSensor))


class RamosProbe(ABC):
    """Abstract Ramos sensor source."""

    @abstractmethod
    def read(self) -> List[RamosSiteReading]:
        """One reading per configured site, sorted by address."""
        pass


class SnmpWalkProbe(RamosProbe):
    """SNMP v2c walk of the Ramos sensor table through net-snmp tools."""

    def __init__(self, config: RamosConfig) -> None:
        self._config = config

    def _deadline(self, oid_count: int) -> float:
        cfg = self._config
        return (cfg.retries + 1) * cfg.timeout_seconds * oid_count + 5

    def walk_command(self, site: RamosSite) -> List[str]:
        cfg = self._config
        return snmp_command(
            cfg.snmpwalk_path, cfg.community, cfg.timeout_seconds, cfg.retries,
            site.address, (site.index_oid,),
        )

    def row_command(self, site: RamosSite, index: str) -> List[str]:
        cfg = self._config
        return snmp_command(
            cfg.snmpget_path, cfg.community, cfg.timeout_seconds, cfg.retries,
            site.address, site.sensor_oids(index),
        )

    def sensor_indexes(self, site: RamosSite) -> List[str]:
        """
        Values of the index column.

        Raises:
            TelemetryError: walk failed
        """
        # A walk is open-ended; allow a generous number of round trips
        lines = run_snmp(self.walk_command(site), site.address, self._deadline(64))
        return [value for value in (clean_value(line) for line in lines) if value]

    def read_sensor(self, site: RamosSite, index: str) -> RamosSensor:
        """
        One sensor row.

        Raises:
            TelemetryError: row read failed
        """
        lines = run_snmp(self.row_command(site, index), site.address, self._deadline(_SENSOR_FIELDS))
        values = [clean_value(line) for line in lines][:_SENSOR_FIELDS]
        values += [""] * (_SENSOR_FIELDS - len(values))
        sensor = RamosSensor(*values)
        logger.debug(f"{site.address} sensor {index}: {sensor}")
        return sensor

    def read_site(self, site: RamosSite) -> RamosSiteReading:
        try:
            indexes = self.sensor_indexes(site)
        except TelemetryError as e:
            logger.debug(e.to_log_format())
            return RamosSiteReading(address=site.address, name=site.name, error=e.message)

        sensors: List[RamosSensor] = []
        for index in indexes:
            try:
                sensors.append(self.read_sensor(site, index))
            except TelemetryError as e:
                logger.debug(e.to_log_format())
                return RamosSiteReading(
                    address=site.address,
                    name=site.name,
                    sensors=tuple(sensors),
                    error=e.message,
                )

        return RamosSiteReading(address=site.address, name=site.name, sensors=tuple(sensors))

    def read(self) -> List[RamosSiteReading]:
        sites = sorted(self._config.sites, key=lambda s: s.address)
        return [self.read_site(site) for site in sites]
