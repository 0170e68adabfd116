"""
Reporting - Incident Report.

============================================================
RESPONSIBILITY
============================================================
Renders the aggregated incidents of one duty window as an
HTML fragment.

- Keeps entries whose receipt time is inside the window
  (both boundaries inclusive)
- Sorts by group, device, primary and secondary timestamp
- One heading per group, one list item per message

============================================================
OUTPUT
============================================================
<h2 ...>Зареєстровані інциденти на виносі GROUP</h2>
<li ...>MESSAGE [DEVICE]</li>        (Zabbix lines)
<li ...>MESSAGE</li>                 (OSM lines name both ends)
<br>                                 (after each device)

An empty window renders only the "no incidents" block.

============================================================
"""

import html
import logging
from datetime import datetime
from itertools import groupby
from typing import List

from aggregation.store import IncidentStore, StoreEntry
from classification.phrases import OSM_LINE_MARKER


logger = logging.getLogger(__name__)


DATE_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

GROUP_HEADING = '<h2 style="margin-left: 25px;"><small>Зареєстровані інциденти на виносі {group}</small></h2>'
LINE_ITEM = '<li style="margin-left: 75px;">{text}</li>'
DEVICE_BREAK = "<br>"
NO_INCIDENTS = '<h2 style="margin-left: 50px;"><small>Інцидентів не зареєстровано</small></h2>'

SECTION_OPEN = (
    "<p><ol><h1><small><small>Інциденти, <u>зареєстровані в автоматичному режимі</u> "
    "системами Zabbix та OSM,<br>що відбувалися в період з {start} по {end}"
    "</small></small></h1>"
)
SECTION_CLOSE = "</ol><p>"


def _sort_key(entry: StoreEntry):
    return (entry.group, entry.device, entry.primary_timestamp, entry.secondary_timestamp)


class IncidentReportRenderer:
    """Deterministic rendering of an IncidentStore for a duty window."""

    def select(
        self,
        store: IncidentStore,
        window_start: datetime,
        window_end: datetime,
    ) -> List[StoreEntry]:
        """In-window entries in report order; bucket order is preserved."""
        selected = [
            entry for entry in store.entries()
            if window_start <= entry.primary_timestamp <= window_end
        ]
        selected.sort(key=_sort_key)
        return selected

    @staticmethod
    def format_line(entry: StoreEntry) -> str:
        if OSM_LINE_MARKER in entry.message:
            text = entry.message
        else:
            text = f"{entry.message} [{html.escape(entry.device, quote=False)}]"
        return LINE_ITEM.format(text=text)

    def render(
        self,
        store: IncidentStore,
        window_start: datetime,
        window_end: datetime,
    ) -> str:
        """Incident list markup for ``[window_start, window_end]``."""
        entries = self.select(store, window_start, window_end)
        if not entries:
            logger.info("No incidents registered in the report window")
            return NO_INCIDENTS

        parts: List[str] = []
        for group, group_entries in groupby(entries, key=lambda e: e.group):
            parts.append(GROUP_HEADING.format(group=html.escape(group, quote=False)))
            for _device, device_entries in groupby(group_entries, key=lambda e: e.device):
                parts.extend(self.format_line(entry) for entry in device_entries)
                parts.append(DEVICE_BREAK)

        logger.info(f"Rendered {len(entries)} incident lines")
        return "".join(parts)

    def render_section(
        self,
        store: IncidentStore,
        window_start: datetime,
        window_end: datetime,
    ) -> str:
        """``render`` wrapped in the section heading naming the window."""
        return (
            SECTION_OPEN.format(
                start=window_start.strftime(DATE_TIME_FORMAT),
                end=window_end.strftime(DATE_TIME_FORMAT),
            )
            + self.render(store, window_start, window_end)
            + SECTION_CLOSE
        )


def render(store: IncidentStore, window_start: datetime, window_end: datetime) -> str:
    """Module-level shortcut for ``IncidentReportRenderer().render``."""
    return IncidentReportRenderer().render(store, window_start, window_end)
