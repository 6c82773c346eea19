"""Configuration loader — reads ``config.yaml`` into a ProvisioningConfig.

The file is a flat YAML mapping with two scalar fields::

    name: demo
    folderId: b1g0000000000000000

Validation collects every problem before failing so the operator can fix
all of them in one pass.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from tfstate_bootstrap.errors import ConfigError, ConfigErrorKind
from tfstate_bootstrap.models.config import ProvisioningConfig

logger = logging.getLogger(__name__)

# YAML key -> human-facing message when missing or empty.
REQUIRED_FIELDS: dict[str, str] = {
    "name": "\"name\" field in a config can't be empty",
    "folderId": "\"folderId\" field in a config can't be empty",
}


def load(path: Path) -> ProvisioningConfig:
    """Load and validate the provisioning configuration.

    Raises:
        ConfigError: ``read`` if the file cannot be read, ``parse`` if it is
            not a YAML mapping or a field holds a sequence or mapping,
            ``validation`` listing all empty fields.
    """
    logger.debug("Loading provisioning config from %s", path)

    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(ConfigErrorKind.READ, [f"Cannot read {path}: {e}"]) from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(ConfigErrorKind.PARSE, [f"Invalid YAML in {path}: {e}"]) from e

    # Empty file: report the missing fields, not a parse error
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(
            ConfigErrorKind.PARSE,
            [f"Expected a YAML mapping in {path}, got {type(data).__name__}"],
        )

    non_scalar = [
        f"\"{key}\" field in a config must be a string, got {type(data[key]).__name__}"
        for key in REQUIRED_FIELDS
        if isinstance(data.get(key), (list, dict))
    ]
    if non_scalar:
        raise ConfigError(ConfigErrorKind.PARSE, non_scalar)

    values = {key: _scalar(data.get(key)) for key in REQUIRED_FIELDS}
    errors = [message for key, message in REQUIRED_FIELDS.items() if not values[key]]
    if errors:
        raise ConfigError(ConfigErrorKind.VALIDATION, errors)

    config = ProvisioningConfig(name=values["name"], folder_id=values["folderId"])
    logger.info("Loaded config: name=%s folderId=%s", config.name, config.folder_id)
    return config


def _scalar(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()
