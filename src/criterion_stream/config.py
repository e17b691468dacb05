"""
Configuration management for criterion-stream.
"""

import logging
import os
import shlex
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

# Module-level lock for thread-safe config loading
_config_lock = threading.Lock()

REPORT_FORMATS = ["minimal", "verbose", "json", "junit"]


class ConfigurationError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""

    pass


@dataclass
class RunnerConfig:
    """Configuration for running Criterion tests through meson.

    Example config YAML::

        builddir: build
        meson_command: meson
        additional_args:
          - --verbose
        report_format: minimal
        compile_first: true
    """

    builddir: str = "build"
    meson_command: str = "meson"
    additional_args: List[str] = field(default_factory=list)
    report_format: str = "minimal"
    compile_first: bool = True

    def __post_init__(self) -> None:
        """Accept a single string of additional arguments."""
        if isinstance(self.additional_args, str):
            self.additional_args = shlex.split(self.additional_args)


def _parse_env_bool(var_name: str) -> Optional[bool]:
    """
    Parse a boolean from an environment variable.

    Args:
        var_name: Name of the environment variable

    Returns:
        Parsed value, or None if the variable is not set

    Raises:
        ConfigurationError: If the value is not a recognised boolean
    """
    value = os.environ.get(var_name)
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"Environment variable {var_name} must be a boolean, got: '{value}'")


def load_config(config_file: Optional[str] = None) -> RunnerConfig:
    """
    Load configuration from file and environment variables.

    Configuration precedence (highest to lowest):
    1. Environment variables
    2. Configuration file
    3. Default values

    Args:
        config_file: Path to YAML configuration file (optional)

    Returns:
        RunnerConfig object with merged configuration

    Raises:
        FileNotFoundError: If config_file is specified but doesn't exist
        ConfigurationError: If config file has invalid YAML or env vars are invalid
    """
    with _config_lock:
        config_data: Dict[str, Any] = {}

        if config_file:
            logger.info("Loading configuration from %s", config_file)
            try:
                with open(config_file, "r") as f:
                    file_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in config file '{config_file}': {e}")
            except FileNotFoundError:
                raise FileNotFoundError(f"Configuration file not found: {config_file}")
            except PermissionError:
                raise ConfigurationError(f"Permission denied reading config file '{config_file}'")
            except OSError as e:
                raise ConfigurationError(f"Unable to read config file '{config_file}': {e}")
            if not isinstance(file_config, dict):
                raise ConfigurationError(
                    f"Config file '{config_file}' must contain a mapping at top level"
                )
            config_data.update(file_config)

        env_overrides = _load_from_env()
        config_data.update(env_overrides)
        if env_overrides:
            logger.debug("Applied environment variable overrides: %s", list(env_overrides.keys()))

        try:
            return RunnerConfig(**config_data)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")


def _load_from_env() -> Dict[str, Any]:
    """
    Load configuration from environment variables.

    Supported environment variables:
    - CRITERION_BUILDDIR: Meson build directory
    - CRITERION_MESON: Meson executable
    - CRITERION_ADDITIONAL_ARGS: Extra test arguments (shell syntax)
    - CRITERION_REPORT_FORMAT: Report format (minimal, verbose, json, junit)
    - CRITERION_COMPILE_FIRST: Compile before running tests (true/false)

    Returns:
        Dictionary of configuration values from environment

    Raises:
        ConfigurationError: If environment variable values are invalid
    """
    env_config: Dict[str, Any] = {}

    if "CRITERION_BUILDDIR" in os.environ:
        env_config["builddir"] = os.environ["CRITERION_BUILDDIR"]

    if "CRITERION_MESON" in os.environ:
        env_config["meson_command"] = os.environ["CRITERION_MESON"]

    if "CRITERION_ADDITIONAL_ARGS" in os.environ:
        try:
            env_config["additional_args"] = shlex.split(os.environ["CRITERION_ADDITIONAL_ARGS"])
        except ValueError as e:
            raise ConfigurationError(f"Environment variable CRITERION_ADDITIONAL_ARGS is invalid: {e}")

    if "CRITERION_REPORT_FORMAT" in os.environ:
        env_config["report_format"] = os.environ["CRITERION_REPORT_FORMAT"]

    compile_first = _parse_env_bool("CRITERION_COMPILE_FIRST")
    if compile_first is not None:
        env_config["compile_first"] = compile_first

    return env_config


def validate_config(config: RunnerConfig) -> List[str]:
    """
    Validate configuration and return list of errors.

    Args:
        config: RunnerConfig to validate

    Returns:
        List of error messages (empty if valid)
    """
    errors: List[str] = []

    if not config.builddir:
        errors.append("builddir is required")

    if not config.meson_command:
        errors.append("meson_command is required")

    if config.report_format not in REPORT_FORMATS:
        errors.append(f"report_format must be one of {REPORT_FORMATS}: {config.report_format}")

    if not isinstance(config.additional_args, list) or not all(
        isinstance(arg, str) for arg in config.additional_args
    ):
        errors.append("additional_args must be a list of strings")

    return errors
