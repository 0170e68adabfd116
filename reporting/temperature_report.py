"""
Reporting - Temperature Section.

Renders device temperature readings gathered by the telemetry
collaborator. Readings arrive already polled; this module only
formats them.
"""

import html
from datetime import datetime
from typing import Iterable

from data_ingestion.types import TemperatureReading


SECTION_OPEN = "<p><ol><h1><small><small>Температура обладнання на виносах, станом на {moment}</small></small></h1>"
SECTION_CLOSE = "</ol><p>"

READING_ITEM = '<li style="margin-left: 75px;"><b>{address}</b> [{description}] — <b>{celsius}</b>°C</li>'
FAILURE_ITEM = "<li style=\"margin-left: 50px;\">{host} - не вдалося отримати доступ у зв'язку з '<b>{error}</b>'</li>"


def format_reading(reading: TemperatureReading) -> str:
    if not reading.ok:
        return FAILURE_ITEM.format(
            host=html.escape(reading.host, quote=False),
            error=html.escape(reading.error or "", quote=False),
        )
    return READING_ITEM.format(
        address=html.escape(reading.address, quote=False),
        description=html.escape(reading.description, quote=False),
        celsius=html.escape(reading.celsius, quote=False),
    )


def render_temperature_section(readings: Iterable[TemperatureReading], taken_at: datetime) -> str:
    body = "".join(format_reading(reading) for reading in readings)
    return SECTION_OPEN.format(moment=taken_at.strftime("%Y-%m-%d %H:%M")) + body + SECTION_CLOSE
