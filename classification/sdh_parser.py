"""
Classification - Circuit/Power Parser.

============================================================
SUBJECT LAYOUT
============================================================
    OSM Problem: Alarm kyiv__lviv LOS STM STM-4
    OSM Resolved: Alarm odesa Mains Power failure
     0     1        2       3     4     5

word 3 is the geo token, word 5 the event type. Only ``STM``
events use the ``from__to`` pair form; every other type names
a single site.

============================================================
TIMESTAMPS
============================================================
primary   : mail receipt time (window filtering)
secondary : ``Trap value:`` time from the body when present,
            otherwise the receipt time (ordering, display)

============================================================
"""

import html
import logging
import re
from datetime import tzinfo
from typing import List, Optional, Tuple

from canonicalization import DictionaryRegistry, Namespace
from core.exceptions import AlertParseError

from .config import ClassifierConfig
from .pd_parser import detect_state
from .phrases import (
    SDH_APPENDICES,
    SDH_KIND_CIRCUIT,
    SDH_KIND_POWER,
    SDH_STATE_PROBLEM,
    SDH_STATE_RESOLVED,
    format_event_time,
    review_suffix,
)
from .trap_payload import extract_trap_timestamp
from .types import AlertState, CircuitIncident, RawAlert


logger = logging.getLogger(__name__)


CIRCUIT_TYPE = "STM"
POWER_TYPE = "Power"

_WHITESPACE = re.compile(r"\s+")


class CircuitAlertParser:
    """Turns an OSM circuit or power subject into a CircuitIncident."""

    def __init__(
        self,
        dictionaries: DictionaryRegistry,
        config: ClassifierConfig,
        tz: tzinfo,
    ):
        self._dictionaries = dictionaries
        self._config = config
        self._tz = tz

    @staticmethod
    def appendix(subject: str) -> str:
        for marker, text in SDH_APPENDICES.items():
            if marker in subject:
                return text
        return ""

    def split_geo(self, geo: str, circuit_type: str) -> Tuple[str, str]:
        if circuit_type != CIRCUIT_TYPE:
            return geo, ""
        parts = geo.split(self._config.pair_delimiter)
        return parts[0], parts[1] if len(parts) > 1 else ""

    def parse(self, alert: RawAlert) -> Optional[CircuitIncident]:
        """
        Build the incident.

        Raises:
            AlertParseError: subject carries no geo token
        """
        subject = alert.subject
        words = subject.split()

        geo_index = self._config.sdh_geo_word
        type_index = self._config.sdh_type_word
        geo = words[geo_index] if len(words) > geo_index else ""
        circuit_type = words[type_index] if len(words) > type_index else ""
        if not geo:
            raise AlertParseError("Circuit subject has no geo token", subject=subject)

        raw_from, raw_to = self.split_geo(geo, circuit_type)

        from_result = self._dictionaries.lookup(Namespace.SDH, raw_from)
        site_from = from_result.value
        from_review = from_result.needs_review

        site_to = raw_to
        to_review = False
        if raw_to:
            to_result = self._dictionaries.lookup(Namespace.SDH, raw_to)
            site_to = to_result.value
            to_review = to_result.needs_review

        esc_from = html.escape(site_from, quote=False)
        esc_to = html.escape(site_to, quote=False)
        if circuit_type == CIRCUIT_TYPE:
            geo_text = f"з {esc_from} на {esc_to}" if site_to else f"на {esc_from}"
        else:
            geo_text = esc_from

        kind = SDH_KIND_POWER if circuit_type == POWER_TYPE else SDH_KIND_CIRCUIT
        state = detect_state(subject)
        state_phrase = SDH_STATE_RESOLVED if state == AlertState.RESOLVED else SDH_STATE_PROBLEM

        text = _WHITESPACE.sub(" ", f"{state_phrase}{kind}{geo_text}")

        unresolved: List[str] = []
        if from_review:
            unresolved.append(site_from)
        if to_review:
            unresolved.append(site_to)
        if unresolved:
            text += review_suffix(*unresolved)

        received = alert.received_at
        trap_time = extract_trap_timestamp(alert.body, self._tz)
        if trap_time is not None:
            logger.debug(f"Updated timestamp from Trap value: {trap_time.isoformat()}")
        event_time = trap_time or received

        message = f"{format_event_time(event_time, self._tz)} : {text}{self.appendix(subject)}"

        incident = CircuitIncident(
            group_key=site_from,
            device_key=site_to,
            primary_timestamp=received,
            secondary_timestamp=event_time,
            message=message,
            needs_review=from_review or to_review,
            state=state,
            circuit_type=circuit_type,
            group_needs_review=from_review,
            device_needs_review=to_review,
        )
        logger.debug(
            f"SDH from={site_from} to={site_to} type={circuit_type} "
            f"review={incident.needs_review}"
        )
        return incident
