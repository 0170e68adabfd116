"""
Classification - Report Phrases.

Fixed Ukrainian text fragments the classifier assembles into
report lines, plus the date rendering used as line prefix.
"""

import html
from datetime import datetime, tzinfo


# ============================================================
# PING-DOWN (ZABBIX)
# ============================================================

PD_STATE_PROBLEM = "Zabbix зареєстровано початок інциденту, "
PD_STATE_RESOLVED = "Zabbix зареєстровано кінець інциденту, "
PD_STATE_UNKNOWN = "Zabbix зареєстровано "

PD_EVENT_WORDS = {
    "ICMP": "зникнення зв'язку з обладнанням на",
    "Unavailable": "зникнення підключення",
    "by": "зникнення підключення",
    "been": "перезавантаження обладнання",
}


# ============================================================
# CIRCUIT / POWER (OSM)
# ============================================================

SDH_STATE_PROBLEM = "OSM зареєстровано початок інциденту, "
SDH_STATE_RESOLVED = "OSM зареєстровано кінець інциденту, "

SDH_KIND_POWER = "зникнення живлення на виносі "
SDH_KIND_CIRCUIT = "втрата зв'язності "

SDH_APPENDICES = {
    "Air Conditioning": " (кондиціонер)",
    "Diesel Generator": " (генератор)",
}

# Marker the renderer uses to recognise self-describing circuit lines
OSM_LINE_MARKER = " : OSM "


# ============================================================
# REVIEW MARKER
# ============================================================

REVIEW_PREFIX = " (<i>потребує коригування назви</i>"
REVIEW_JOINER = " та"


def review_suffix(*names: str) -> str:
    """`` (<i>потребує коригування назви</i> '<b>a</b>' та '<b>b</b>')``"""
    quoted = [f" '<b>{html.escape(name, quote=False)}</b>'" for name in names]
    return REVIEW_PREFIX + REVIEW_JOINER.join(quoted) + ")"


# ============================================================
# DATES
# ============================================================

UA_MONTHS = {
    1: "січ", 2: "лют", 3: "бер", 4: "квіт", 5: "трав", 6: "черв",
    7: "лип", 8: "серп", 9: "вер", 10: "жовт", 11: "лист", 12: "груд",
}


def format_event_time(moment: datetime, tz: tzinfo) -> str:
    """``19 жовт 2026 10:15:00`` in the report timezone."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=tz)
    local = moment.astimezone(tz)
    return (
        f"{local.day:02d} {UA_MONTHS[local.month]} {local.year} "
        f"{local.strftime('%H:%M:%S')}"
    )
