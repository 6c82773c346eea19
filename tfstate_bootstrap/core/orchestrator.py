"""Provisioning orchestrator — runs the five-step creation chain.

The Provisioner wires a ``CloudAPI`` implementation, a validated
``ProvisioningConfig`` and a ``StepMachine`` into one fail-fast sequence:

    create_bucket -> create_service_account -> grant_roles
        -> mint_access_key -> store_secret

Each step's output feeds the next step's input. The first failure raises
``StepError``; later steps are never invoked and nothing created so far is
deleted.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict

from tfstate_bootstrap.cloud.base import AccessBindingDelta, CloudAPI
from tfstate_bootstrap.core import identifiers
from tfstate_bootstrap.core.step_machine import StepMachine
from tfstate_bootstrap.errors import StepError
from tfstate_bootstrap.models.config import ProvisioningConfig
from tfstate_bootstrap.models.resources import (
    SERVICE_ACCOUNT_SUBJECT_TYPE,
    STORAGE_ROLES,
    BucketResult,
    CredentialPair,
    ProvisioningOutcome,
    SecretRecord,
    ServiceIdentity,
    created_by_labels,
)
from tfstate_bootstrap.models.steps import (
    CREATE_BUCKET,
    CREATE_SERVICE_ACCOUNT,
    DEFAULT_STEP_DEFINITIONS,
    GRANT_ROLES,
    MINT_ACCESS_KEY,
    STORE_SECRET,
    StepState,
)
from tfstate_bootstrap.settings import DEFAULT_STEP_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ProvisioningResult(BaseModel):
    """A completed run: the non-secret outcome plus the minted credentials."""

    model_config = ConfigDict(frozen=True)

    outcome: ProvisioningOutcome
    credentials: CredentialPair


class Provisioner:
    """Executes the provisioning chain against a cloud API.

    Parameters
    ----------
    cloud:
        Remote API implementation.
    config:
        Validated operator configuration.
    step_timeout:
        Deadline in seconds applied to each step's remote call.
    """

    def __init__(
        self,
        cloud: CloudAPI,
        config: ProvisioningConfig,
        *,
        step_timeout: float = DEFAULT_STEP_TIMEOUT_SECONDS,
    ) -> None:
        if step_timeout <= 0:
            raise ValueError("step_timeout must be positive")
        self._cloud = cloud
        self.config = config
        self.step_timeout = step_timeout
        self.step_machine = StepMachine(DEFAULT_STEP_DEFINITIONS)
        # Identifiers of resources created so far, for failure reports
        self.created: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    def run(self) -> ProvisioningResult:
        """Run all five steps in order and return what was created."""
        logger.info(
            "Provisioning Terraform state backend: name=%s folderId=%s",
            self.config.name,
            self.config.folder_id,
        )

        bucket = self._execute(CREATE_BUCKET, self.create_bucket)
        identity = self._execute(CREATE_SERVICE_ACCOUNT, self.create_service_account)
        self._execute(GRANT_ROLES, lambda: self.grant_roles(identity))
        credentials = self._execute(MINT_ACCESS_KEY, lambda: self.mint_access_key(identity))
        secret = self._execute(STORE_SECRET, lambda: self.store_secret(credentials))

        outcome = ProvisioningOutcome(
            bucket=bucket, service_identity=identity, secret=secret
        )
        return ProvisioningResult(outcome=outcome, credentials=credentials)

    def _execute(self, step_id: str, action: Callable[[], T]) -> T:
        """Run one step under the state machine; wrap any failure in StepError."""
        self.step_machine.transition(step_id, StepState.RUNNING)
        try:
            result = action()
        except Exception as exc:
            detail = self._failure_detail(step_id)
            self.step_machine.transition(step_id, StepState.FAILED, error=str(exc))
            if self.created:
                logger.warning(
                    "Run stopped at %s; resources left in place: %s",
                    step_id,
                    ", ".join(f"{k}={v}" for k, v in self.created.items()),
                )
            raise StepError(
                step_id, exc, detail=detail, created_so_far=self.created
            ) from exc
        self.step_machine.transition(step_id, StepState.PASSED)
        return result

    def _failure_detail(self, step_id: str) -> str:
        sa_name = identifiers.service_account_name(self.config.name)
        details: dict[str, str] = {
            CREATE_BUCKET: "failed to create state bucket",
            CREATE_SERVICE_ACCOUNT: f'failed to create service account "{sa_name}"',
            GRANT_ROLES: (
                f'failed to assign "storage.{{viewer,uploader}}" roles to '
                f'service account "{sa_name}"'
            ),
            MINT_ACCESS_KEY: f'failed to create access key for service account "{sa_name}"',
            STORE_SECRET: "failed to create lockbox secret",
        }
        return details.get(step_id, "")

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def create_bucket(self) -> BucketResult:
        name = self._cloud.create_bucket(
            identifiers.bucket_name(self.config.name),
            self.config.folder_id,
            created_by_labels(),
            timeout=self.step_timeout,
        )
        self.created["stateBucket"] = name
        logger.info("Created bucket: name=%s", name)
        return BucketResult(bucket_name=name)

    def create_service_account(self) -> ServiceIdentity:
        sa_name = identifiers.service_account_name(self.config.name)
        sa_id = self._cloud.create_service_account(
            self.config.folder_id,
            sa_name,
            f'"{self.config.name}" SA created for uploading terraform state to bucket',
            created_by_labels(),
            timeout=self.step_timeout,
        )
        self.created["saId"] = sa_id
        logger.info(
            'Created service account for Terraform state bucket management: id="%s", name="%s"',
            sa_id,
            sa_name,
        )
        return ServiceIdentity(service_account_id=sa_id, name=sa_name)

    def grant_roles(self, identity: ServiceIdentity) -> None:
        deltas = [
            AccessBindingDelta(
                action="ADD",
                role_id=role,
                subject_id=identity.service_account_id,
                subject_type=SERVICE_ACCOUNT_SUBJECT_TYPE,
            )
            for role in STORAGE_ROLES
        ]
        self._cloud.update_access_bindings(
            self.config.folder_id, deltas, timeout=self.step_timeout
        )
        logger.info(
            'Assigned "storage.{viewer,uploader}" roles to service account "%s" on folder "%s"',
            identity.name,
            self.config.folder_id,
        )

    def mint_access_key(self, identity: ServiceIdentity) -> CredentialPair:
        credentials = self._cloud.create_access_key(
            identity.service_account_id,
            f'access key for sa "{identity.name}" to manage Terraform state bucket',
            timeout=self.step_timeout,
        )
        self.created["accessKeyId"] = credentials.access_key_id
        logger.info("Created access key for sa: accessKeyId=%s", credentials.access_key_id)
        return credentials

    def store_secret(self, credentials: CredentialPair) -> SecretRecord:
        sa_name = identifiers.service_account_name(self.config.name)
        secret_id = self._cloud.create_secret(
            self.config.folder_id,
            identifiers.lockbox_secret_name(self.config.name),
            f"{sa_name} service account AWS access key",
            created_by_labels(),
            credentials.as_payload_entries(),
            timeout=self.step_timeout,
        )
        self.created["lockboxSecretId"] = secret_id
        logger.info("Created lockbox secret for sa access key: id=%s", secret_id)
        return SecretRecord(lockbox_secret_id=secret_id)


def planned_names(config: ProvisioningConfig) -> dict[str, Any]:
    """Names a run with *config* would use, without contacting the cloud."""
    return {
        "bucket": f"{config.name}-tf-state-<random>",
        "serviceAccount": identifiers.service_account_name(config.name),
        "lockboxSecret": identifiers.lockbox_secret_name(config.name),
        "roles": list(STORAGE_ROLES),
        "folderId": config.folder_id,
    }
