"""Error taxonomy for a provisioning run.

Every error is terminal for the process. The CLI maps each class to a single
fatal log line naming the phase that failed:

- ``ConfigError``  — startup inputs are missing or invalid; nothing remote
  has been touched yet.
- ``StepError``    — a remote provisioning step failed; resources created by
  earlier steps are left in place.
- ``OutputError``  — provisioning succeeded but a local artifact could not be
  written; the created identifiers are carried in the message.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tfstate_bootstrap.models.resources import ProvisioningOutcome


class BootstrapError(RuntimeError):
    """Base class for all fatal provisioning-run errors."""

    phase: str = "bootstrap"


class ConfigErrorKind(str, Enum):
    ENVIRONMENT = "environment"
    READ = "read"
    PARSE = "parse"
    VALIDATION = "validation"


class ConfigError(BootstrapError):
    """Startup configuration is missing or invalid.

    ``messages`` lists every problem found, not only the first one.
    """

    phase = "config"

    def __init__(self, kind: ConfigErrorKind, messages: list[str]) -> None:
        self.kind = kind
        self.messages = list(messages)
        super().__init__(f"{kind.value} error: " + "; ".join(self.messages))


class StepError(BootstrapError):
    """A provisioning step failed; later steps were not invoked."""

    phase = "provision"

    def __init__(
        self,
        step_id: str,
        cause: Exception,
        *,
        detail: str = "",
        created_so_far: dict[str, str] | None = None,
    ) -> None:
        self.step_id = step_id
        self.cause = cause
        self.created_so_far = dict(created_so_far or {})
        message = f"step {step_id!r} failed"
        if detail:
            message += f": {detail}"
        message += f": {cause}"
        super().__init__(message)


class OutputError(BootstrapError):
    """Writing a local artifact failed after remote provisioning succeeded."""

    phase = "output"

    def __init__(
        self,
        path: Path,
        cause: Exception,
        outcome: ProvisioningOutcome | None = None,
    ) -> None:
        self.path = path
        self.cause = cause
        self.outcome = outcome
        message = f"failed to write {path}: {cause}"
        if outcome is not None:
            message += (
                " (remote resources exist: "
                f"stateBucket={outcome.bucket.bucket_name} "
                f"saId={outcome.service_identity.service_account_id} "
                f"lockboxSecretId={outcome.secret.lockbox_secret_id})"
            )
        super().__init__(message)
