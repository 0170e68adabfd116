"""
Classification - Ping-Down Parser.

============================================================
SUBJECT LAYOUT
============================================================
    Zabbix Problem: sw1-3: Unavailable by ICMP ping
    Zabbix Resolved: r-core-2: core-2 has been restarted
      0       1        2        3      4   5

word 2 is the device token, word 5 the event word.

============================================================
DEVICE TOKEN HANDLING
============================================================
device key  : token without trailing ':' and without the
              default interface suffix (display form)
lookup key  : token stem before '-<interface>', with role
              prefixes (r-, s-, p-, ies-, alca-) stripped

============================================================
"""

import html
import logging
import re
from datetime import tzinfo
from typing import Optional

from canonicalization import DictionaryRegistry, Namespace
from core.exceptions import AlertParseError

from .config import ClassifierConfig
from .phrases import (
    PD_EVENT_WORDS,
    PD_STATE_PROBLEM,
    PD_STATE_RESOLVED,
    PD_STATE_UNKNOWN,
    format_event_time,
    review_suffix,
)
from .types import AlertState, PingDownIncident, RawAlert


logger = logging.getLogger(__name__)


_INTERFACE_SUFFIX = re.compile(r"-\d+$")
_STEM = re.compile(r"^(.*?)-\d+$")
_RESOLVED = re.compile(r"(?:^|\s)Resolved:")
_PROBLEM = re.compile(r"(?:^|\s)Problem:")
_WHITESPACE = re.compile(r"\s+")


def detect_state(subject: str) -> AlertState:
    if _RESOLVED.search(subject):
        return AlertState.RESOLVED
    if _PROBLEM.search(subject):
        return AlertState.PROBLEM
    return AlertState.UNKNOWN


class PingDownParser:
    """Turns a Zabbix ping-down subject into a PingDownIncident."""

    def __init__(
        self,
        dictionaries: DictionaryRegistry,
        config: ClassifierConfig,
        tz: tzinfo,
    ):
        self._dictionaries = dictionaries
        self._config = config
        self._tz = tz
        self._denylist = config.denylist_pattern()
        self._role_prefix = config.role_prefix_pattern()
        self._default_suffix = f"-{config.default_interface_suffix}"

    # ---------------------------------------------------------
    # Filters
    # ---------------------------------------------------------

    def is_noise(self, subject: str) -> bool:
        """Administrative or test systems that never reach the report."""
        if self._denylist is None or not self._denylist.search(subject):
            return False
        return not any(marker in subject for marker in self._config.pd_denylist_exemptions)

    @staticmethod
    def is_resolved_restart(subject: str) -> bool:
        """A restart has no meaningful end; its resolved notice is dropped."""
        return detect_state(subject) == AlertState.RESOLVED and " been" in subject

    # ---------------------------------------------------------
    # Device token
    # ---------------------------------------------------------

    def device_key(self, token: str) -> str:
        key = token.rstrip(":")
        if key.endswith(self._default_suffix):
            key = key[: -len(self._default_suffix)]
        return key

    def lookup_key(self, token: str) -> str:
        stem = token.rstrip(":")
        if not _INTERFACE_SUFFIX.search(stem):
            stem += self._default_suffix
        match = _STEM.match(stem)
        if match:
            stem = match.group(1)
        if self._role_prefix is not None:
            stem = self._role_prefix.sub("", stem, count=1)
        return stem

    # ---------------------------------------------------------
    # Parsing
    # ---------------------------------------------------------

    def parse(self, alert: RawAlert) -> Optional[PingDownIncident]:
        """
        Build the incident, or return None for filtered noise.

        Raises:
            AlertParseError: subject too short to carry a device token
        """
        subject = alert.subject

        if self.is_noise(subject):
            logger.debug(f"PD noise filtered: {subject}")
            return None
        if self.is_resolved_restart(subject):
            logger.debug(f"PD resolved restart dropped: {subject}")
            return None

        words = subject.split()
        if len(words) < self._config.pd_min_words:
            raise AlertParseError(
                f"Ping-down subject has {len(words)} words, "
                f"expected at least {self._config.pd_min_words}",
                subject=subject,
            )

        token = words[self._config.pd_device_word]
        event_word = words[self._config.pd_event_word]

        device = self.device_key(token)
        result = self._dictionaries.lookup(Namespace.PD, self.lookup_key(token))

        state = detect_state(subject)
        state_phrase = {
            AlertState.PROBLEM: PD_STATE_PROBLEM,
            AlertState.RESOLVED: PD_STATE_RESOLVED,
        }.get(state, PD_STATE_UNKNOWN)
        event_phrase = PD_EVENT_WORDS.get(event_word, event_word)

        text = f"{state_phrase}{event_phrase} {html.escape(result.value, quote=False)}"
        if result.needs_review:
            text += review_suffix(result.value)
        text = _WHITESPACE.sub(" ", text)

        moment = alert.received_at
        incident = PingDownIncident(
            group_key=result.value,
            device_key=device,
            primary_timestamp=moment,
            secondary_timestamp=moment,
            message=f"{format_event_time(moment, self._tz)} : {text}",
            needs_review=result.needs_review,
            state=state,
            event_word=event_word,
        )
        logger.debug(
            f"PD device={device} group={incident.group_key} "
            f"review={incident.needs_review} ts={moment.isoformat()}"
        )
        return incident
