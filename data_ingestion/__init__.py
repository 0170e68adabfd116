"""
Data Ingestion Package.

This package retrieves the inputs of a report run.
No classification - only data acquisition.

Sub-packages:
- collectors: mailbox and telemetry collaborators
"""

from data_ingestion.collectors import (
    BaseAlertSource,
    StaticAlertSource,
    ImapAlertSource,
    TemperatureProbe,
    SnmpGetProbe,
    RamosProbe,
    SnmpWalkProbe,
)
from data_ingestion.types import (
    IngestionStatus,
    IngestionResult,
    MailboxConfig,
    ProbeTarget,
    TelemetryConfig,
    TemperatureReading,
    RamosSite,
    RamosConfig,
    RamosSensor,
    RamosSiteReading,
)


__all__ = [
    # Collectors
    "BaseAlertSource",
    "StaticAlertSource",
    "ImapAlertSource",
    "TemperatureProbe",
    "SnmpGetProbe",
    "RamosProbe",
    "SnmpWalkProbe",
    # Types
    "IngestionStatus",
    "IngestionResult",
    "MailboxConfig",
    "ProbeTarget",
    "TelemetryConfig",
    "TemperatureReading",
    "RamosSite",
    "RamosConfig",
    "RamosSensor",
    "RamosSiteReading",
]
