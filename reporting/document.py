"""
Reporting - Document Assembly.

Joins the report fragments into the mail document and builds
the subject line naming the duty window.
"""

from typing import Iterable

from core.clock import DutyWindow


DOCUMENT_OPEN = '<html><head><meta http-equiv="content-type" content="text/html; charset=UTF-8"></head><body>'
DOCUMENT_CLOSE = "</body></html>"


def report_subject(window: DutyWindow) -> str:
    return f"Автоматизований звіт за період {window.label()}"


def assemble_document(fragments: Iterable[str]) -> str:
    return DOCUMENT_OPEN + "".join(fragments) + DOCUMENT_CLOSE
