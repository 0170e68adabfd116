"""
Orchestrator - Models.

============================================================
RESPONSIBILITY
============================================================
Defines data models for a report run.

- ReportConfig: everything an operator configures
- ReportResult: outcome and counters of one run

============================================================
CONFIGURATION PRECEDENCE (lowest to highest)
============================================================
defaults -> YAML file -> environment (NOCREPORT_*) -> CLI flags

============================================================
"""

import os
from dataclasses import dataclass, field, replace
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Any, Dict, List, Optional

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from classification.config import ClassifierConfig
from core.clock import DEFAULT_TIMEZONE, DutySchedule, DutyWindow
from core.exceptions import ConfigurationError
from data_ingestion.types import MailboxConfig, ProbeTarget, RamosConfig, RamosSite, TelemetryConfig
from notifications.mail import EmailConfig


RESOURCES_DIR = Path(__file__).resolve().parent.parent / "resources"
DEFAULT_PD_DICTIONARY = RESOURCES_DIR / "dictionary_pd.txt"
DEFAULT_SDH_DICTIONARY = RESOURCES_DIR / "dictionary_sdh.txt"

ENV_PREFIX = "NOCREPORT_"


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return [str(item).strip() for item in value]


def _communities(value: Any) -> Dict[str, str]:
    """A single community applies to both probes; a mapping sets each one."""
    if isinstance(value, dict):
        default = "public"
        return {
            "celsius": str(value.get("celsius", default)),
            "ramos": str(value.get("ramos", default)),
        }
    community = "public" if value is None else str(value)
    return {"celsius": community, "ramos": community}


# Config key -> RamosSite field
_RAMOS_COLUMNS = {
    "index": "index_oid",
    "description": "description_oid",
    "unit": "unit_oid",
    "value": "value_oid",
    "low_warning": "low_warning_oid",
    "high_warning": "high_warning_oid",
    "low_critical": "low_critical_oid",
    "high_critical": "high_critical_oid",
}


def _ramos_site(address: str, data: Dict[str, Any]) -> RamosSite:
    missing = [key for key in ("name", *_RAMOS_COLUMNS) if not (data or {}).get(key)]
    if missing:
        raise ConfigurationError(
            f"Ramos site {address} is missing: {', '.join(missing)}",
            config_key=f"snmp.ramos.{address}",
        )
    columns = {attr: str(data[key]) for key, attr in _RAMOS_COLUMNS.items()}
    return RamosSite(address=str(address), name=str(data["name"]), **columns)


# ============================================================
# DUTY CONFIGURATION
# ============================================================

@dataclass
class DutyConfig:
    """Shift boundaries and the timezone they are expressed in."""

    day_start_hour: int = 8
    """Local hour the day shift starts."""

    night_start_hour: int = 20
    """Local hour the night shift starts."""

    timezone: str = DEFAULT_TIMEZONE
    """IANA timezone name of the operations centre."""

    def tz(self) -> tzinfo:
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(
                f"Unknown timezone: {self.timezone}",
                config_key="duty.timezone",
                cause=e,
            ) from e

    def schedule(self) -> DutySchedule:
        try:
            return DutySchedule(self.day_start_hour, self.night_start_hour, self.tz())
        except ValueError as e:
            raise ConfigurationError(str(e), config_key="duty", cause=e) from e


# ============================================================
# REPORT CONFIGURATION
# ============================================================

@dataclass
class ReportConfig:
    """Configuration of the shift report."""

    # Sections
    incidents_enabled: bool = True
    temperature_enabled: bool = True
    ramos_enabled: bool = False

    # Diagnostics
    debug: bool = False
    """Verbose logging, debug recipient, widened STM signature."""

    # Collaborators
    mailbox: MailboxConfig = field(default_factory=MailboxConfig)
    email: EmailConfig = field(default_factory=EmailConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    ramos: RamosConfig = field(default_factory=RamosConfig)

    # Core
    dictionary_pd_path: Path = DEFAULT_PD_DICTIONARY
    dictionary_sdh_path: Path = DEFAULT_SDH_DICTIONARY
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    duty: DutyConfig = field(default_factory=DutyConfig)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ReportConfig":
        """
        Create config from a dictionary (parsed YAML).

        Expected structure:
        {
            "incidents": true, "temperature": true, "ramos": false, "debug": false,
            "mail": {"hostname": ..., "username": ..., "password": ..., "ssl": ..., "folder": ...},
            "email": {"from": ..., "reply_to": ..., "to": [...], "to_debug": ...},
            "snmp": {
                "community": ... or {"celsius": ..., "ramos": ...},
                "hosts_suffix": ..., "hosts": {"name": {"desc": oid, "temp": oid}},
                "ramos": {"address": {"name": ..., "index": oid, "description": oid, "unit": oid,
                                      "value": oid, "low_warning": oid, "high_warning": oid,
                                      "low_critical": oid, "high_critical": oid}}
            },
            "dictionaries": {"pd": path, "sdh": path},
            "duty": {"day_start_hour": 8, "night_start_hour": 20, "timezone": "Europe/Kyiv"},
            "classifier": {...}
        }
        """
        data = data or {}
        config = cls()

        config.incidents_enabled = _as_bool(data.get("incidents", True))
        config.temperature_enabled = _as_bool(data.get("temperature", True))
        config.ramos_enabled = _as_bool(data.get("ramos", False))
        config.debug = _as_bool(data.get("debug", False))

        mail = data.get("mail") or {}
        config.mailbox = MailboxConfig(
            hostname=mail.get("hostname", ""),
            username=mail.get("username", ""),
            password=str(mail.get("password", "")),
            ssl=_as_bool(mail.get("ssl", False)),
            folder=mail.get("folder", "INBOX"),
            timeout_seconds=float(mail.get("timeout_seconds", 5.0)),
        )

        email = data.get("email") or {}
        config.email = EmailConfig(
            sender=email.get("from"),
            reply_to=email.get("reply_to"),
            recipients=_as_list(email.get("to")),
            debug_recipient=email.get("to_debug"),
            powered_by=email.get("powered_by", EmailConfig.powered_by),
            sendmail_path=email.get("sendmail_path", EmailConfig.sendmail_path),
        )

        snmp = data.get("snmp") or {}
        hosts = snmp.get("hosts") or {}
        communities = _communities(snmp.get("community"))
        config.telemetry = TelemetryConfig(
            community=communities["celsius"],
            hosts_suffix=snmp.get("hosts_suffix", ""),
            targets=tuple(
                ProbeTarget(
                    name=name,
                    description_oid=str(oids["desc"]),
                    temperature_oid=str(oids["temp"]),
                )
                for name, oids in hosts.items()
            ),
        )
        ramos_sites = snmp.get("ramos") or {}
        config.ramos = RamosConfig(
            community=communities["ramos"],
            sites=tuple(_ramos_site(address, site) for address, site in ramos_sites.items()),
        )

        dictionaries = data.get("dictionaries") or {}
        if dictionaries.get("pd"):
            config.dictionary_pd_path = Path(dictionaries["pd"])
        if dictionaries.get("sdh"):
            config.dictionary_sdh_path = Path(dictionaries["sdh"])

        duty = data.get("duty") or {}
        config.duty = DutyConfig(
            day_start_hour=int(duty.get("day_start_hour", 8)),
            night_start_hour=int(duty.get("night_start_hour", 20)),
            timezone=duty.get("timezone", DEFAULT_TIMEZONE),
        )

        config.classifier = ClassifierConfig.from_dict(data.get("classifier"))
        return config

    def apply_env(self, environ: Optional[Dict[str, str]] = None) -> "ReportConfig":
        """Override settings from NOCREPORT_* environment variables."""
        env = os.environ if environ is None else environ

        def get(name: str) -> Optional[str]:
            return env.get(ENV_PREFIX + name)

        mailbox = self.mailbox
        self.mailbox = MailboxConfig(
            hostname=get("MAIL_HOSTNAME") or mailbox.hostname,
            username=get("MAIL_USERNAME") or mailbox.username,
            password=get("MAIL_PASSWORD") or mailbox.password,
            ssl=_as_bool(get("MAIL_SSL")) if get("MAIL_SSL") is not None else mailbox.ssl,
            folder=get("MAIL_FOLDER") or mailbox.folder,
            timeout_seconds=mailbox.timeout_seconds,
        )

        if get("EMAIL_FROM"):
            self.email.sender = get("EMAIL_FROM")
        if get("EMAIL_REPLY_TO"):
            self.email.reply_to = get("EMAIL_REPLY_TO")
        if get("EMAIL_TO"):
            self.email.recipients = _as_list(get("EMAIL_TO"))
        if get("EMAIL_TO_DEBUG"):
            self.email.debug_recipient = get("EMAIL_TO_DEBUG")

        celsius_community = get("SNMP_COMMUNITY_CELSIUS") or get("SNMP_COMMUNITY")
        if celsius_community:
            self.telemetry = replace(self.telemetry, community=celsius_community)
        ramos_community = get("SNMP_COMMUNITY_RAMOS") or get("SNMP_COMMUNITY")
        if ramos_community:
            self.ramos = replace(self.ramos, community=ramos_community)

        if get("DICTIONARY_PD"):
            self.dictionary_pd_path = Path(get("DICTIONARY_PD"))
        if get("DICTIONARY_SDH"):
            self.dictionary_sdh_path = Path(get("DICTIONARY_SDH"))
        if get("TIMEZONE"):
            self.duty.timezone = get("TIMEZONE")
        if get("DEBUG") is not None:
            self.debug = _as_bool(get("DEBUG"))
        return self

    @property
    def any_section_enabled(self) -> bool:
        return self.incidents_enabled or self.temperature_enabled or self.ramos_enabled

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if not self.email.is_valid():
            errors.append("email.from, email.reply_to and email.to are required")
        if self.debug and not self.email.debug_recipient:
            errors.append("email.to_debug is required in debug mode")
        if self.incidents_enabled and not self.mailbox.hostname:
            errors.append("mail.hostname is required when incidents are enabled")
        if self.temperature_enabled and not self.telemetry.community:
            errors.append("snmp.community is required when temperature is enabled")
        if self.ramos_enabled and not self.ramos.community:
            errors.append("snmp.community is required when ramos is enabled")
        if not 0 <= self.duty.day_start_hour < self.duty.night_start_hour <= 23:
            errors.append("duty hours must satisfy 0 <= day_start_hour < night_start_hour <= 23")

        return errors


# ============================================================
# RUN RESULT
# ============================================================

@dataclass
class ReportResult:
    """Outcome of one report run."""

    subject: str
    html: str
    window: DutyWindow
    started_at: datetime
    completed_at: Optional[datetime] = None

    alerts_fetched: int = 0
    incidents_stored: int = 0
    discarded: int = 0
    needs_review: int = 0
    sections: List[str] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        if self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "subject": self.subject,
            "window_start": self.window.start.isoformat(),
            "window_end": self.window.end.isoformat(),
            "alerts_fetched": self.alerts_fetched,
            "incidents_stored": self.incidents_stored,
            "discarded": self.discarded,
            "needs_review": self.needs_review,
            "sections": list(self.sections),
            "duration_seconds": self.duration_seconds,
        }
