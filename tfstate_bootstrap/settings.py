"""Process settings — env-driven, read once at the program's entry boundary.

Centralized settings using pydantic-settings. The two mandatory inputs keep
their historical unprefixed names (``YC_TOKEN``, ``TF_DIR``); everything else
is optional tuning under the ``TFSTATE_*`` prefix.

Business logic never reads the environment directly: the CLI builds a
``BootstrapSettings`` instance, checks it with
``core.environment_guard.enforce_required_environment`` and threads the
values into the provisioner and output writer.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STEP_TIMEOUT_SECONDS = 10.0
CONFIG_FILE_NAME = "config.yaml"


class BootstrapSettings(BaseSettings):
    """Runtime settings with environment variable overrides.

    Examples
    --------
    Minimal environment::

        export YC_TOKEN=$(yc iam create-token)
        export TF_DIR=./infra

    Tuning::

        export TFSTATE_STEP_TIMEOUT_SECONDS=30
        export TFSTATE_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TFSTATE_",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Mandatory; empty means "not set", enforced by the environment guard
    yc_token: str = Field(
        default="", validation_alias=AliasChoices("YC_TOKEN", "yc_token")
    )
    tf_dir: str = Field(
        default="", validation_alias=AliasChoices("TF_DIR", "tf_dir")
    )

    # Logging
    log_level: str = "INFO"

    # Provisioning
    step_timeout_seconds: float = Field(default=DEFAULT_STEP_TIMEOUT_SECONDS, gt=0)
    operation_poll_interval_seconds: float = Field(default=0.5, gt=0)

    # Yandex Cloud REST endpoints
    storage_endpoint: str = "https://storage.api.cloud.yandex.net"
    iam_endpoint: str = "https://iam.api.cloud.yandex.net"
    resource_manager_endpoint: str = "https://resource-manager.api.cloud.yandex.net"
    lockbox_endpoint: str = "https://lockbox.api.cloud.yandex.net"
    operation_endpoint: str = "https://operation.api.cloud.yandex.net"

    @property
    def work_dir(self) -> Path:
        """The working directory holding the config and receiving outputs."""
        return Path(self.tf_dir)

    @property
    def config_path(self) -> Path:
        """Default location of the operator config file."""
        return self.work_dir / CONFIG_FILE_NAME
