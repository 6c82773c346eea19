"""Shared startup helpers for CLI commands.

Everything that touches the process environment lives here: settings are
read once, checked by the environment guard and handed to the command as
plain values.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from tfstate_bootstrap.core import config_loader
from tfstate_bootstrap.core.environment_guard import enforce_required_environment
from tfstate_bootstrap.errors import (
    BootstrapError,
    ConfigError,
    ConfigErrorKind,
    StepError,
)
from tfstate_bootstrap.models.config import ProvisioningConfig
from tfstate_bootstrap.settings import BootstrapSettings

logger = logging.getLogger("tfstate_bootstrap")


def configure_logging(level: str) -> None:
    """Route log records to stderr through Rich; safe to call more than once."""
    root = logging.getLogger()
    root.setLevel(level.upper())
    if not _has_rich_handler(root):
        root.addHandler(RichHandler(console=Console(stderr=True), show_path=False))


def _has_rich_handler(log: logging.Logger) -> bool:
    return any(isinstance(h, RichHandler) for h in log.handlers)


def load_settings() -> BootstrapSettings:
    """Read settings from the environment and enforce the mandatory inputs."""
    try:
        settings = BootstrapSettings()
    except ValidationError as e:
        raise ConfigError(
            ConfigErrorKind.ENVIRONMENT,
            [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()],
        ) from e
    configure_logging(settings.log_level)
    enforce_required_environment(settings)
    return settings


def load_config(settings: BootstrapSettings, config_path: Path | None) -> ProvisioningConfig:
    return config_loader.load(config_path or settings.config_path)


def phase_label(error: BootstrapError) -> str:
    if isinstance(error, StepError):
        return f"{error.phase}:{error.step_id}"
    return error.phase


def fail(error: BootstrapError) -> typer.Exit:
    """Log one fatal line for *error* and return the exit to raise."""
    if not _has_rich_handler(logging.getLogger()):
        configure_logging("INFO")
    logger.critical("%s failed: %s", phase_label(error), error)
    return typer.Exit(code=1)
