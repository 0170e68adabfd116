"""
Reporting - Ramos Sensor Section.

============================================================
PURPOSE
============================================================
Renders Ramos controller readings: one heading per site, one
line per sensor.

- "hot zone" / "cold zone" in a description are coloured
- The value colour follows the sensor's own thresholds:
  darkgrey inside the warning band, red inside the critical
  band, black otherwise or when a number does not parse

============================================================
"""

import html
import re
from datetime import datetime
from typing import Iterable

from data_ingestion.types import RamosSensor, RamosSiteReading

from .temperature_report import FAILURE_ITEM, SECTION_CLOSE


SECTION_OPEN = "<p><ol><h1><small><small>Температурні показники Ramos, станом на {moment}</small></small></h1>"
SITE_HEADING = '<h2 style="margin-left: 25px;"><small>Майданчик {name}</small></h2>'
SENSOR_ITEM = '<li style="margin-left: 75px;">{description} — <b><font color="{colour}">{value}</font></b>°{unit}</li>'

_HOT_ZONE = re.compile(r"(hot\s*zone)", re.IGNORECASE)
_COLD_ZONE = re.compile(r"(cold\s*zone)", re.IGNORECASE)


def highlight_zones(description: str) -> str:
    text = html.escape(description, quote=False)
    text = _HOT_ZONE.sub(r"<font color=darkred>\1</font>", text)
    return _COLD_ZONE.sub(r"<font color=darkblue>\1</font>", text)


def threshold_colour(sensor: RamosSensor) -> str:
    try:
        value = float(sensor.value)
        low_warning = float(sensor.low_warning)
        high_warning = float(sensor.high_warning)
        low_critical = float(sensor.low_critical)
        high_critical = float(sensor.high_critical)
    except ValueError:
        return "black"

    if low_warning <= value <= high_warning:
        return "darkgrey"
    if low_critical <= value <= high_critical:
        return "red"
    return "black"


def format_sensor(sensor: RamosSensor) -> str:
    return SENSOR_ITEM.format(
        description=highlight_zones(sensor.description),
        colour=threshold_colour(sensor),
        value=html.escape(sensor.value, quote=False),
        unit=html.escape(sensor.unit, quote=False),
    )


def format_site(reading: RamosSiteReading) -> str:
    parts = [SITE_HEADING.format(name=html.escape(reading.name, quote=False))]
    parts.extend(format_sensor(sensor) for sensor in reading.sensors)
    if not reading.ok:
        parts.append(FAILURE_ITEM.format(
            host=html.escape(reading.address, quote=False),
            error=html.escape(reading.error or "", quote=False),
        ))
    return "".join(parts)


def render_ramos_section(readings: Iterable[RamosSiteReading], taken_at: datetime) -> str:
    body = "".join(format_site(reading) for reading in readings)
    return SECTION_OPEN.format(moment=taken_at.strftime("%Y-%m-%d %H:%M")) + body + SECTION_CLOSE
