"""
Orchestrator - Configuration Loading.

Reads the operator YAML file, applies environment overrides
(``.env`` is honoured through python-dotenv) and returns a
validated-on-demand ReportConfig.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Optional, Union

import yaml
from dotenv import load_dotenv

from core.exceptions import ConfigurationError

from .models import ReportConfig


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "noc_report.yaml"


def read_yaml(path: Union[str, Path]) -> dict:
    """
    Parse a YAML config file.

    Raises:
        ConfigurationError: missing file or invalid YAML
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationError(f"Failed to load configuration file: {path}", cause=e) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {path}", cause=e) from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")
    return data


def load_config(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Dict[str, str]] = None,
    use_dotenv: bool = True,
) -> ReportConfig:
    """
    Build the report configuration.

    Args:
        path: YAML file; the bundled default is used when omitted
        environ: environment mapping (defaults to os.environ)
        use_dotenv: load a ``.env`` file into the environment first
    """
    if use_dotenv and environ is None:
        load_dotenv()

    if path is None:
        path = DEFAULT_CONFIG_PATH
        logger.debug(f"No configuration file given, using {path}")

    data = read_yaml(path)
    try:
        config = ReportConfig.from_dict(data)
    except (KeyError, TypeError, ValueError, re.error) as e:
        raise ConfigurationError(f"Invalid configuration in {path}: {e}", cause=e) from e

    return config.apply_env(environ)
