"""Environment guard — enforces mandatory process inputs at startup.

The guard runs once, before the config file is read or any remote call is
made, and fails hard (raises ``ConfigError`` of kind ``environment``) if a
mandatory input is missing. All violations are collected and reported at
once.

This module is the single enforcement point for required environment
inputs. Other code receives already-validated values and never consults the
process environment itself.
"""

from __future__ import annotations

import logging

from tfstate_bootstrap.errors import ConfigError, ConfigErrorKind
from tfstate_bootstrap.settings import BootstrapSettings

logger = logging.getLogger(__name__)

# Settings field name -> environment variable the operator must set.
REQUIRED_ENVIRONMENT: dict[str, str] = {
    "yc_token": "YC_TOKEN",
    "tf_dir": "TF_DIR",
}


def enforce_required_environment(settings: BootstrapSettings) -> None:
    """Validate that every mandatory environment input is non-empty.

    Raises
    ------
    ConfigError
        Of kind ``environment``, listing every missing variable.
    """
    violations: list[str] = []

    for field_name, env_name in REQUIRED_ENVIRONMENT.items():
        value = getattr(settings, field_name, "")
        if not value or not str(value).strip():
            violations.append(f'ENV "{env_name}" must be set.')

    if violations:
        raise ConfigError(ConfigErrorKind.ENVIRONMENT, violations)

    logger.debug("Environment guard passed.")
