"""
Reporting Package.

This package renders the shift report.

Modules:
- incident_report: incident list for a duty window
- temperature_report: device temperature section
- ramos_report: Ramos sensor section
- document: mail document wrapper and subject line
"""

from .incident_report import IncidentReportRenderer, render, NO_INCIDENTS
from .temperature_report import render_temperature_section
from .ramos_report import render_ramos_section
from .document import report_subject, assemble_document


__all__ = [
    "IncidentReportRenderer",
    "render",
    "NO_INCIDENTS",
    "render_temperature_section",
    "render_ramos_section",
    "report_subject",
    "assemble_document",
]
