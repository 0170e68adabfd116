"""
Orchestrator Package - Report Coordination Layer.

============================================================
PACKAGE OVERVIEW
============================================================
This package is the SINGLE ENTRYPOINT of the shift report. It loads
configuration, wires collaborators and runs one report.

============================================================
CORE PRINCIPLES
============================================================
1. The orchestrator has NO parsing or rendering logic
2. Collaborators are injected, production ones by default
3. Fatal errors map to exit codes, malformed mail never does

============================================================
ARCHITECTURE
============================================================

    +-----------------------------------------------------+
    |                  ReportOrchestrator                 |
    |-----------------------------------------------------|
    |  ReportConfig   |  YAML -> env -> CLI              |
    |  DutySchedule   |  report and retrieval windows    |
    |  ReportPipeline |  fetch, classify, aggregate,     |
    |                 |  render, assemble                |
    |  CLI            |  Command-line interface          |
    +-----------------------------------------------------+

============================================================
QUICK START
============================================================
Command line usage::

    noc-report --config config/noc_report.yaml
    noc-report --no-temperature --dry-run

Programmatic usage::

    from orchestrator import ReportOrchestrator, load_config

    config = load_config("config/noc_report.yaml")
    result = ReportOrchestrator(config).run()

============================================================
EXPORTS
============================================================
"""

# ============================================================
# Models
# ============================================================
from orchestrator.models import (
    DutyConfig,
    ReportConfig,
    ReportResult,
)

# ============================================================
# Configuration
# ============================================================
from orchestrator.config import (
    load_config,
    read_yaml,
)

# ============================================================
# Pipeline
# ============================================================
from orchestrator.pipeline import ReportPipeline

# ============================================================
# Core
# ============================================================
from orchestrator.core import (
    ReportOrchestrator,
    setup_logging,
)

# ============================================================
# CLI
# ============================================================
from orchestrator.cli import (
    create_parser,
    validate_args,
    build_config,
    main,
)

# ============================================================
# Package metadata
# ============================================================
__version__ = "1.0.0"

__all__ = [
    # Models
    "DutyConfig",
    "ReportConfig",
    "ReportResult",

    # Configuration
    "load_config",
    "read_yaml",

    # Pipeline
    "ReportPipeline",

    # Core
    "ReportOrchestrator",
    "setup_logging",

    # CLI
    "create_parser",
    "validate_args",
    "build_config",
    "main",
]
