"""
Orchestrator - CLI.

============================================================
RESPONSIBILITY
============================================================
Command-line interface for the shift report.

- Provides argparse-based CLI
- Merges CLI flags over file and environment configuration
- Maps failures to exit codes
- Entry point for the application

============================================================
USAGE
============================================================
python -m orchestrator.cli --config config/noc_report.yaml
python -m orchestrator.cli --no-temperature --dry-run
noc-report --debug --log-format text

============================================================
EXIT CODES
============================================================
0 - report sent (or nothing to do)
1 - configuration or fatal error
2 - mailbox unreachable

============================================================
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from core.exceptions import MailboxError, NocReportException
from notifications.mail import ConsoleTransport

from .config import load_config
from .core import ReportOrchestrator, setup_logging
from .models import ReportConfig


EXIT_OK = 0
EXIT_FATAL = 1
EXIT_MAILBOX = 2


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="noc-report",
        description="Shift incident and temperature report for the NOC",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Sections:
  incidents    - Zabbix ping-down and OSM SDH alerts from the mailbox
  temperature  - SNMP temperature readings of the equipment rooms
  ramos        - Ramos controller sensors with threshold colouring (off by default)

Examples:
  %(prog)s                                  # Full report, sent by mail
  %(prog)s --no-temperature --dry-run       # Print incidents only
  %(prog)s --debug                          # Send to the debug recipient
  %(prog)s --no-incidents --ramos           # Telemetry sections only
        """
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        metavar="PATH",
        help="YAML configuration file (default: config/noc_report.yaml)",
    )

    # --------------------------------------------------------
    # Dictionaries
    # --------------------------------------------------------
    dictionary_group = parser.add_argument_group("Dictionary Options")

    dictionary_group.add_argument(
        "--dictionary-pd",
        type=str,
        metavar="PATH",
        help="Ping-down dictionary file",
    )

    dictionary_group.add_argument(
        "--dictionary-sdh",
        type=str,
        metavar="PATH",
        help="SDH dictionary file",
    )

    # --------------------------------------------------------
    # Sections
    # --------------------------------------------------------
    section_group = parser.add_argument_group("Report Sections")

    section_group.add_argument(
        "--incidents",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Include the incident section",
    )

    section_group.add_argument(
        "--temperature",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Include the temperature section",
    )

    section_group.add_argument(
        "--ramos",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Include the Ramos sensor section",
    )

    # --------------------------------------------------------
    # Execution Options
    # --------------------------------------------------------
    execution_group = parser.add_argument_group("Execution Options")

    execution_group.add_argument(
        "--debug",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Debug mode: verbose log, debug recipient only",
    )

    execution_group.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the report instead of sending it",
    )

    # --------------------------------------------------------
    # Logging Options
    # --------------------------------------------------------
    logging_group = parser.add_argument_group("Logging Options")

    logging_group.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    logging_group.add_argument(
        "--log-format",
        type=str,
        choices=["json", "text"],
        default="json",
        help="Logging format (default: json)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version="%(prog)s 1.0.0",
    )

    return parser


# ============================================================
# CLI VALIDATION
# ============================================================

def validate_args(args: argparse.Namespace) -> List[str]:
    """
    Validate CLI arguments.

    Returns:
        List of validation errors
    """
    errors = []

    if args.config and not Path(args.config).is_file():
        errors.append(f"--config file not found: {args.config}")
    if args.dictionary_pd and not Path(args.dictionary_pd).is_file():
        errors.append(f"--dictionary-pd file not found: {args.dictionary_pd}")
    if args.dictionary_sdh and not Path(args.dictionary_sdh).is_file():
        errors.append(f"--dictionary-sdh file not found: {args.dictionary_sdh}")

    return errors


# ============================================================
# CLI CONFIGURATION BUILDER
# ============================================================

def build_config(args: argparse.Namespace, environ=None) -> ReportConfig:
    """
    Load file and environment configuration, then apply CLI flags.

    Raises:
        ConfigurationError: unreadable or invalid configuration
    """
    config = load_config(args.config, environ=environ)

    if args.incidents is not None:
        config.incidents_enabled = args.incidents
    if args.temperature is not None:
        config.temperature_enabled = args.temperature
    if args.ramos is not None:
        config.ramos_enabled = args.ramos
    if args.debug is not None:
        config.debug = args.debug
    if args.dictionary_pd:
        config.dictionary_pd_path = Path(args.dictionary_pd)
    if args.dictionary_sdh:
        config.dictionary_sdh_path = Path(args.dictionary_sdh)

    return config


# ============================================================
# MAIN ENTRY POINT
# ============================================================

def run(config: ReportConfig, dry_run: bool = False) -> int:
    """
    Run one report with a loaded configuration.

    Returns:
        Exit code
    """
    logger = logging.getLogger("orchestrator")

    if not config.any_section_enabled:
        logger.info("All report sections are disabled, nothing to do")
        return EXIT_OK

    transport = ConsoleTransport(sys.stdout) if dry_run else None

    try:
        orchestrator = ReportOrchestrator(config, transport=transport)
        result = orchestrator.run()
    except MailboxError as e:
        logger.error(e.to_log_format())
        return EXIT_MAILBOX
    except NocReportException as e:
        logger.error(e.to_log_format())
        return EXIT_FATAL

    logger.info(f"Report finished in {result.duration_seconds:.2f}s: {result.subject}")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    errors = validate_args(args)
    if errors:
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        return EXIT_FATAL

    setup_logging(args.log_level, args.log_format)

    try:
        config = build_config(args)
    except NocReportException as e:
        logging.getLogger("orchestrator").error(e.to_log_format())
        return EXIT_FATAL

    if config.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    errors = config.validate()
    if errors:
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        return EXIT_FATAL

    return run(config, dry_run=args.dry_run)


# ============================================================
# MODULE EXECUTION
# ============================================================

if __name__ == "__main__":
    sys.exit(main())
