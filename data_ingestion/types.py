"""
Data Ingestion - Type Definitions.

============================================================
PURPOSE
============================================================
Shared types for the collaborators that feed a report run.

- Configuration dataclasses (mailbox, telemetry, Ramos)
- Ingestion result type
- Telemetry readings (device temperature, Ramos sensors)

============================================================
DESIGN PRINCIPLES
============================================================
- Immutable configuration
- No business logic
- Serializable for logging

============================================================
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


# =============================================================
# ENUMS
# =============================================================

class IngestionStatus(str, Enum):
    """Status of an ingestion operation."""
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


# =============================================================
# CONFIGURATION TYPES
# =============================================================

@dataclass(frozen=True)
class MailboxConfig:
    """IMAP folder the alerting tool delivers into."""
    hostname: str = ""
    username: str = ""
    password: str = ""
    ssl: bool = False
    folder: str = "INBOX"
    timeout_seconds: float = 5.0

    @property
    def port(self) -> int:
        return 993 if self.ssl else 143


@dataclass(frozen=True)
class ProbeTarget:
    """One device polled for temperature."""
    name: str
    description_oid: str
    temperature_oid: str

    @property
    def host(self) -> str:
        # Config keys may carry a trailing comment after the host name
        return self.name.split(" ")[0]


@dataclass(frozen=True)
class TelemetryConfig:
    """Device temperature polling."""
    community: str = "public"
    hosts_suffix: str = ""
    targets: Tuple[ProbeTarget, ...] = ()
    timeout_seconds: int = 5
    retries: int = 2
    snmpget_path: str = "snmpget"

    def address_of(self, target: ProbeTarget) -> str:
        if self.hosts_suffix:
            return f"{target.host}.{self.hosts_suffix}"
        return target.host


@dataclass(frozen=True)
class RamosSite:
    """
    One Ramos environment controller and its sensor table columns.

    ``index_oid`` is walked for the sensor indexes; every other
    column is read at ``<column>.<index>``.
    """
    address: str
    name: str
    index_oid: str
    description_oid: str
    unit_oid: str
    value_oid: str
    low_warning_oid: str
    high_warning_oid: str
    low_critical_oid: str
    high_critical_oid: str

    def sensor_oids(self, index: str) -> Tuple[str, ...]:
        columns = (
            self.description_oid,
            self.unit_oid,
            self.value_oid,
            self.low_warning_oid,
            self.high_warning_oid,
            self.low_critical_oid,
            self.high_critical_oid,
        )
        return tuple(f"{column}.{index}" for column in columns)


@dataclass(frozen=True)
class RamosConfig:
    """Ramos sensor polling."""
    community: str = "public"
    sites: Tuple[RamosSite, ...] = ()
    timeout_seconds: int = 5
    retries: int = 2
    snmpwalk_path: str = "snmpwalk"
    snmpget_path: str = "snmpget"


# =============================================================
# RESULT TYPES
# =============================================================

@dataclass
class IngestionResult:
    """Result of a single mailbox fetch."""
    source: str = ""
    status: IngestionStatus = IngestionStatus.SUCCESS

    # Counts
    records_fetched: int = 0
    records_accepted: int = 0
    records_out_of_window: int = 0
    records_failed: int = 0

    # Timing
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_seconds: float = 0.0

    # Errors
    errors: List[str] = field(default_factory=list)

    def mark_complete(self, completed_at: datetime) -> None:
        """Mark the ingestion as complete and calculate duration."""
        self.completed_at = completed_at
        if self.started_at:
            delta = completed_at - self.started_at
            self.duration_seconds = delta.total_seconds()

    def add_error(self, error: str) -> None:
        """Add an error message."""
        self.errors.append(error)
        self.records_failed += 1
        if self.status == IngestionStatus.SUCCESS:
            self.status = IngestionStatus.PARTIAL

    def mark_failed(self, error: str) -> None:
        """Mark the ingestion as failed."""
        self.errors.append(error)
        self.status = IngestionStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "source": self.source,
            "status": self.status.value,
            "records_fetched": self.records_fetched,
            "records_accepted": self.records_accepted,
            "records_out_of_window": self.records_out_of_window,
            "records_failed": self.records_failed,
            "duration_seconds": self.duration_seconds,
            "error_count": len(self.errors),
            "errors": self.errors[:5],  # Limit for logging
        }


@dataclass(frozen=True)
class TemperatureReading:
    """Outcome of polling one device."""
    host: str
    address: str
    description: str = ""
    celsius: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class RamosSensor:
    """Values of one Ramos sensor row, as the agent reports them."""
    description: str = ""
    unit: str = ""
    value: str = ""
    low_warning: str = ""
    high_warning: str = ""
    low_critical: str = ""
    high_critical: str = ""


@dataclass(frozen=True)
class RamosSiteReading:
    """
    Outcome of walking one Ramos controller.

    A walk interrupted by an error keeps the sensors read so far.
    """
    address: str
    name: str
    sensors: Tuple[RamosSensor, ...] = ()
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
