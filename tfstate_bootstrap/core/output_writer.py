"""Output writer — persists the two artifacts of a completed run.

Layout under the working directory:

    state.yaml        stateBucket, saId, lockboxSecretId, secretKeys (key names)
    access-key.yaml   accessKeyId, secretAccessKey (literal values, mode 0600)

Each file is rendered in memory, written to a temp file in the target
directory and renamed into place, so a failed write never leaves a
half-written artifact behind. ``access-key.yaml`` is the only place outside
Lockbox where the secret value persists.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict
from rich.console import Console

from tfstate_bootstrap.errors import OutputError
from tfstate_bootstrap.models.resources import (
    CredentialPair,
    ProvisioningOutcome,
    SecretKeys,
)

logger = logging.getLogger(__name__)

STATE_FILE_NAME = "state.yaml"
ACCESS_KEY_FILE_NAME = "access-key.yaml"

STATE_FILE_MODE = 0o644
ACCESS_KEY_FILE_MODE = 0o600


class OutputPaths(BaseModel):
    model_config = ConfigDict(frozen=True)

    state_file: Path
    access_key_file: Path


class OutputWriter:
    """Writes the state descriptor and access-key file into *output_dir*.

    Parameters
    ----------
    output_dir:
        Target directory; created if absent.
    console:
        Where the credential pair is echoed for manual capture.
    """

    def __init__(self, output_dir: Path | str, console: Console | None = None) -> None:
        self._dir = Path(output_dir)
        self._console = console or Console()

    @property
    def state_file(self) -> Path:
        return self._dir / STATE_FILE_NAME

    @property
    def access_key_file(self) -> Path:
        return self._dir / ACCESS_KEY_FILE_NAME

    def write(self, outcome: ProvisioningOutcome, credentials: CredentialPair) -> OutputPaths:
        """Write both artifacts and echo the credentials.

        Raises
        ------
        OutputError
            If either file cannot be written. The error carries *outcome* so
            the created identifiers are not lost.
        """
        descriptor = outcome.to_state_descriptor().model_dump(by_alias=True)
        self._write_yaml(self.state_file, descriptor, STATE_FILE_MODE, outcome)
        logger.info("Wrote Terraform state descriptor to %s", self.state_file)

        secret_value = credentials.secret_access_key.get_secret_value()
        self._echo(f"AccessKeyId: {credentials.access_key_id}")
        self._echo(f"SecretAccessKey: {secret_value}")

        document = SecretKeys(
            access_key_id=credentials.access_key_id,
            secret_access_key=secret_value,
        ).model_dump(by_alias=True)
        self._write_yaml(self.access_key_file, document, ACCESS_KEY_FILE_MODE, outcome)
        logger.info("Wrote access key to %s", self.access_key_file)

        return OutputPaths(state_file=self.state_file, access_key_file=self.access_key_file)

    def _echo(self, line: str) -> None:
        self._console.print(line, markup=False, highlight=False, soft_wrap=True)

    def _write_yaml(
        self,
        target: Path,
        data: dict,
        mode: int,
        outcome: ProvisioningOutcome,
    ) -> None:
        tmp_path: str | None = None
        try:
            text = yaml.safe_dump(data, sort_keys=False, default_flow_style=False)
            self._dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self._dir, prefix=f".{target.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
                fh.flush()
                os.fsync(fh.fileno())
            os.chmod(tmp_path, mode)
            os.replace(tmp_path, target)
            tmp_path = None
        except (OSError, yaml.YAMLError) as exc:
            raise OutputError(target, exc, outcome) from exc
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
