"""Remote API boundary — the five cloud calls the provisioner consumes.

``CloudAPI`` is a structural Protocol: the REST client in
``tfstate_bootstrap.cloud.yandex`` implements it, and tests substitute an
in-memory fake. Every call takes a ``timeout`` (seconds) bounding the whole
call, including any wait for a long-running operation to finish.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from tfstate_bootstrap.models.resources import CredentialPair


# ── Exception hierarchy ─────────────────────────────────────────


class CloudAPIError(Exception):
    """Base exception for remote API errors."""

    def __init__(
        self,
        status_code: int,
        message: str = "",
        *,
        response_body: str = "",
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.response_body = response_body
        super().__init__(f"cloud API error {status_code}: {message}")


class CloudTimeoutError(CloudAPIError):
    """The call did not complete within its deadline."""

    def __init__(self, message: str = "deadline exceeded") -> None:
        super().__init__(0, message)


class CloudTransportError(CloudAPIError):
    """The request never produced an HTTP response."""

    def __init__(self, message: str = "transport failure") -> None:
        super().__init__(0, message)


class OperationFailedError(CloudAPIError):
    """A long-running operation finished with an error status."""

    def __init__(self, operation_id: str, code: int, message: str) -> None:
        self.operation_id = operation_id
        super().__init__(code, f"operation {operation_id} failed: {message}")


# ── Request models ───────────────────────────────────────────────


class AccessBindingDelta(BaseModel):
    """One ADD/REMOVE change to a resource's access bindings."""

    model_config = ConfigDict(frozen=True)

    action: str
    role_id: str
    subject_id: str
    subject_type: str

    def to_api(self) -> dict[str, Any]:
        return {
            "action": self.action,
            "accessBinding": {
                "roleId": self.role_id,
                "subject": {"id": self.subject_id, "type": self.subject_type},
            },
        }


# ── Protocol ─────────────────────────────────────────────────────


@runtime_checkable
class CloudAPI(Protocol):
    """Resource-management calls used by a provisioning run."""

    def create_bucket(
        self, name: str, folder_id: str, labels: dict[str, str], *, timeout: float
    ) -> str:
        """Create a storage bucket and return its name."""
        ...

    def create_service_account(
        self,
        folder_id: str,
        name: str,
        description: str,
        labels: dict[str, str],
        *,
        timeout: float,
    ) -> str:
        """Create a service account and return its id."""
        ...

    def update_access_bindings(
        self, resource_id: str, deltas: list[AccessBindingDelta], *, timeout: float
    ) -> None:
        """Apply access-binding deltas to a folder."""
        ...

    def create_access_key(
        self, service_account_id: str, description: str, *, timeout: float
    ) -> CredentialPair:
        """Mint a static access key for a service account."""
        ...

    def create_secret(
        self,
        folder_id: str,
        name: str,
        description: str,
        labels: dict[str, str],
        entries: dict[str, str],
        *,
        timeout: float,
    ) -> str:
        """Create a managed secret with text payload entries; return its id."""
        ...
