"""
Data Ingestion - net-snmp Command Runner.

Invocation shared by the telemetry probes. Values are requested
value-only (``-Oqv``), so each output line is one value in the
order the OIDs were given.
"""

import subprocess
from typing import List, Sequence

from core.exceptions import TelemetryError


# Printed by net-snmp in place of an absent object
_MISSING_MARKERS = ("No Such Object", "No Such Instance", "No more variables")


def snmp_command(
    tool: str,
    community: str,
    timeout_seconds: int,
    retries: int,
    address: str,
    oids: Sequence[str],
) -> List[str]:
    return [
        tool,
        "-v2c",
        "-c", community,
        "-t", str(timeout_seconds),
        "-r", str(retries),
        "-Oqv",
        address,
        *oids,
    ]


def clean_value(line: str) -> str:
    """Value without surrounding quotes; an absent object reads as empty."""
    value = line.strip()
    if value.startswith(_MISSING_MARKERS):
        return ""
    return value.strip('"')


def run_snmp(command: Sequence[str], address: str, deadline: float) -> List[str]:
    """
    Non-empty output lines of one net-snmp tool run.

    Raises:
        TelemetryError: tool missing, timed out, or exited non-zero
    """
    try:
        completed = subprocess.run(
            list(command),
            capture_output=True,
            text=True,
            timeout=deadline,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise TelemetryError(
            str(e) or "Timeout",
            context={"address": address, "tool": command[0]},
            cause=e,
        ) from e

    if completed.returncode != 0:
        raise TelemetryError(
            completed.stderr.strip() or f"{command[0]} exit code {completed.returncode}",
            context={"address": address, "tool": command[0], "returncode": completed.returncode},
        )

    return [line for line in completed.stdout.splitlines() if line.strip()]
