"""
Classification - Configuration.

============================================================
PURPOSE
============================================================
Organisation-specific matching rules of the classifier.

The family signatures, the noise denylist and the role prefixes
are tuned to one network's naming conventions and change more
often than the parsing logic, so they live here as data.

Configuration can be loaded from:
- Default values
- A dictionary (the ``classifier`` section of the report YAML)
- A standalone YAML file

============================================================
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Pattern, Union

import yaml


logger = logging.getLogger(__name__)


DEFAULT_PD_DENYLIST = [
    r"IVR",
    r"TELEVIEV",
    r"Z-SQL",
    r"UVPN",
    r"SDH-OSM",
    r"astashov",
    r"console",
    r"ramb-\d+",
    r"[dm]: NS\d?",
    r": [ap][^:]+: [ap][^:]+ has",
]


@dataclass
class ClassifierConfig:
    """
    Matching rules for both alert families.
    """
    # Family signatures, searched anywhere in the subject
    pd_signature: str = r"Unavailable by ICMP ping|has been restarted"
    sdh_signature: str = r"[Pp][Oo][Ww][Ee][Rr]|STM [Ss][Tt][Mm].?[2-9][0-9]*"
    sdh_debug_signature: str = r"[Pp][Oo][Ww][Ee][Rr]|STM [Ss][Tt][Mm].?[1-9][0-9]*"

    # Ping-down noise filter
    pd_denylist: List[str] = field(default_factory=lambda: list(DEFAULT_PD_DENYLIST))
    pd_denylist_exemptions: List[str] = field(default_factory=lambda: ["alca"])

    # Role markers stripped from device tokens before lookup
    role_prefixes: List[str] = field(default_factory=lambda: [r"[rsp]", r"ies\d?", r"alca"])

    # Interface suffix assumed when a device token carries none
    default_interface_suffix: str = "65535"

    # Separator of the from/to sites in circuit geo tokens
    pair_delimiter: str = "__"

    # Word positions (0-based) in whitespace-split subjects
    pd_device_word: int = 2
    pd_event_word: int = 5
    pd_min_words: int = 6
    sdh_geo_word: int = 3
    sdh_type_word: int = 5

    def signature_pattern(self, family: str, debug: bool = False) -> Pattern:
        if family == "PD":
            return re.compile(self.pd_signature)
        return re.compile(self.sdh_debug_signature if debug else self.sdh_signature)

    def denylist_pattern(self) -> Optional[Pattern]:
        if not self.pd_denylist:
            return None
        return re.compile("|".join(f"(?:{p})" for p in self.pd_denylist))

    def role_prefix_pattern(self) -> Optional[Pattern]:
        if not self.role_prefixes:
            return None
        return re.compile("^(?:" + "|".join(self.role_prefixes) + ")-")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ClassifierConfig":
        """
        Create config from a dictionary (parsed YAML).

        Unknown keys are ignored with a warning.
        """
        config = cls()
        for key, value in (data or {}).items():
            if not hasattr(config, key):
                logger.warning(f"Unknown classifier setting '{key}' ignored")
                continue
            setattr(config, key, value)
        config.validate()
        return config

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "ClassifierConfig":
        """Load configuration from a YAML file."""
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data.get("classifier", data))

    def validate(self) -> None:
        """Compile every pattern once so a typo fails at startup."""
        for pattern in (self.pd_signature, self.sdh_signature, self.sdh_debug_signature):
            re.compile(pattern)
        self.denylist_pattern()
        self.role_prefix_pattern()
        if not self.pair_delimiter:
            raise ValueError("pair_delimiter must not be empty")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pd_signature": self.pd_signature,
            "sdh_signature": self.sdh_signature,
            "sdh_debug_signature": self.sdh_debug_signature,
            "pd_denylist": list(self.pd_denylist),
            "pd_denylist_exemptions": list(self.pd_denylist_exemptions),
            "role_prefixes": list(self.role_prefixes),
            "default_interface_suffix": self.default_interface_suffix,
            "pair_delimiter": self.pair_delimiter,
        }
