"""
Data Ingestion - Collectors Package.

Collaborators that feed a report run.

Collectors:
- base: alert source interface and in-memory source
- imap_mailbox: alert mails from an IMAP folder
- snmp_cli: net-snmp command runner shared by the probes
- snmp_temperature: device temperature via snmpget
- ramos_sensors: Ramos sensor table via snmpwalk and snmpget
"""

from data_ingestion.collectors.base import BaseAlertSource, StaticAlertSource
from data_ingestion.collectors.imap_mailbox import ImapAlertSource, parse_message
from data_ingestion.collectors.snmp_temperature import TemperatureProbe, SnmpGetProbe
from data_ingestion.collectors.ramos_sensors import RamosProbe, SnmpWalkProbe


__all__ = [
    "BaseAlertSource",
    "StaticAlertSource",
    "ImapAlertSource",
    "parse_message",
    "TemperatureProbe",
    "SnmpGetProbe",
    "RamosProbe",
    "SnmpWalkProbe",
]
