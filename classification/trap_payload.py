"""
Classification - Trap Payload.

OSM circuit mails may carry their body base64-encoded. The decoded
text contains a ``Trap value:`` line whose ISO timestamp is the
moment the hardware event actually happened.
"""

import base64
import binascii
import logging
import re
from datetime import datetime, tzinfo
from typing import Optional


logger = logging.getLogger(__name__)


TRAP_LINE_PATTERN = re.compile(
    r"^Trap value:.*?(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})",
    re.MULTILINE,
)


def decode_body(body: str) -> str:
    """Base64-decode ``body`` if it is valid base64 UTF-8, else return it as is."""
    compact = "".join(body.split())
    if not compact:
        return body
    try:
        return base64.b64decode(compact, validate=True).decode("utf-8")
    except (binascii.Error, ValueError, UnicodeDecodeError):
        return body


def extract_trap_timestamp(body: str, tz: tzinfo) -> Optional[datetime]:
    """
    Timestamp of the first parseable ``Trap value:`` line.

    The trap carries local wall-clock time without offset; it is
    interpreted in ``tz``.
    """
    text = decode_body(body)
    for match in TRAP_LINE_PATTERN.finditer(text):
        raw = match.group(1)
        try:
            return datetime.strptime(raw, "%Y-%m-%dT%H:%M:%S").replace(tzinfo=tz)
        except ValueError:
            logger.debug(f"Failed to parse Trap value date: {raw}")
    return None
