"""Synchronous HTTP client for the Yandex Cloud REST APIs.

Covers exactly the calls a provisioning run needs: Object Storage buckets,
IAM service accounts and static access keys, Resource Manager folder access
bindings, and Lockbox secrets. Auth uses an IAM token as a bearer token.

Mutating calls return long-running Operations; the client polls the
Operation service until ``done`` or until the per-call deadline expires.
No request is ever retried.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from tfstate_bootstrap.cloud.base import (
    AccessBindingDelta,
    CloudAPIError,
    CloudTimeoutError,
    CloudTransportError,
    OperationFailedError,
)
from tfstate_bootstrap.models.resources import CredentialPair
from tfstate_bootstrap.settings import BootstrapSettings

logger = logging.getLogger(__name__)

_DEFAULT_POLL_INTERVAL = 0.5  # seconds


class YandexCloudClient:
    """REST client implementing ``CloudAPI``.

    Use as a context manager; the underlying ``httpx.Client`` is closed on
    exit unless it was supplied by the caller.
    """

    def __init__(
        self,
        *,
        iam_token: str,
        storage_endpoint: str = "https://storage.api.cloud.yandex.net",
        iam_endpoint: str = "https://iam.api.cloud.yandex.net",
        resource_manager_endpoint: str = "https://resource-manager.api.cloud.yandex.net",
        lockbox_endpoint: str = "https://lockbox.api.cloud.yandex.net",
        operation_endpoint: str = "https://operation.api.cloud.yandex.net",
        http_client: httpx.Client | None = None,
        poll_interval: float = _DEFAULT_POLL_INTERVAL,
    ) -> None:
        if not iam_token:
            raise ValueError("iam_token is required")

        self._iam_token = iam_token
        self._storage = storage_endpoint.rstrip("/")
        self._iam = iam_endpoint.rstrip("/")
        self._resource_manager = resource_manager_endpoint.rstrip("/")
        self._lockbox = lockbox_endpoint.rstrip("/")
        self._operation = operation_endpoint.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client()
        self._poll_interval = poll_interval

    @classmethod
    def from_settings(
        cls, settings: BootstrapSettings, *, http_client: httpx.Client | None = None
    ) -> YandexCloudClient:
        return cls(
            iam_token=settings.yc_token,
            storage_endpoint=settings.storage_endpoint,
            iam_endpoint=settings.iam_endpoint,
            resource_manager_endpoint=settings.resource_manager_endpoint,
            lockbox_endpoint=settings.lockbox_endpoint,
            operation_endpoint=settings.operation_endpoint,
            http_client=http_client,
            poll_interval=settings.operation_poll_interval_seconds,
        )

    def __enter__(self) -> YandexCloudClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    # ── Transport helpers ────────────────────────────────────────

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._iam_token}"}

    def _raise_for_status(self, resp: httpx.Response) -> None:
        if resp.status_code < 400:
            return

        body = resp.text
        message = body[:200] if body else f"HTTP {resp.status_code}"

        try:
            payload = resp.json()
            if isinstance(payload, dict):
                message = payload.get("message", message)
        except ValueError:
            pass

        raise CloudAPIError(
            status_code=resp.status_code,
            message=message,
            response_body=body,
        )

    def _request(
        self,
        method: str,
        url: str,
        deadline: float,
        *,
        json: Any | None = None,
    ) -> dict[str, Any]:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise CloudTimeoutError(f"deadline exceeded before {method} {url}")

        try:
            resp = self._client.request(
                method,
                url,
                headers=self._auth_headers(),
                json=json,
                timeout=remaining,
            )
        except httpx.TimeoutException as e:
            raise CloudTimeoutError(f"{method} {url} timed out: {e}") from e
        except httpx.TransportError as e:
            raise CloudTransportError(f"{method} {url}: {e}") from e

        # httpx timeouts are per phase; a slow trickle can still overrun the step
        if time.monotonic() > deadline:
            raise CloudTimeoutError(f"{method} {url} finished after the deadline")

        self._raise_for_status(resp)
        try:
            return resp.json()
        except ValueError as e:
            raise CloudAPIError(
                resp.status_code, "response is not valid JSON", response_body=resp.text
            ) from e

    def _wait_operation(self, operation: dict[str, Any], deadline: float) -> dict[str, Any]:
        """Poll *operation* until done; raise if it finished with an error."""
        op = operation
        final_poll = False
        while not op.get("done"):
            remaining = deadline - time.monotonic()
            if final_poll or remaining <= 0:
                raise CloudTimeoutError(
                    f"operation {op.get('id', '?')} not done before deadline"
                )
            if remaining <= self._poll_interval:
                # last poll, leaving half the remaining time for the request
                final_poll = True
                time.sleep(remaining / 2)
            else:
                time.sleep(self._poll_interval)
            op = self._request("GET", f"{self._operation}/operations/{op['id']}", deadline)

        error = op.get("error")
        if error:
            raise OperationFailedError(
                op.get("id", "?"), int(error.get("code", 0)), error.get("message", "")
            )
        return op

    def _run_operation(
        self, url: str, body: dict[str, Any], timeout: float
    ) -> dict[str, Any]:
        deadline = time.monotonic() + timeout
        op = self._request("POST", url, deadline, json=body)
        return self._wait_operation(op, deadline)

    # ── Public API ───────────────────────────────────────────────

    def create_bucket(
        self, name: str, folder_id: str, labels: dict[str, str], *, timeout: float
    ) -> str:
        body = {
            "name": name,
            "folderId": folder_id,
            "tags": [{"key": k, "value": v} for k, v in labels.items()],
        }
        op = self._run_operation(f"{self._storage}/storage/v1/buckets", body, timeout)
        created = op.get("response", {}).get("name") or op.get("metadata", {}).get("name")
        return created or name

    def create_service_account(
        self,
        folder_id: str,
        name: str,
        description: str,
        labels: dict[str, str],
        *,
        timeout: float,
    ) -> str:
        body = {
            "folderId": folder_id,
            "name": name,
            "description": description,
            "labels": dict(labels),
        }
        op = self._run_operation(f"{self._iam}/iam/v1/serviceAccounts", body, timeout)
        sa_id = op.get("metadata", {}).get("serviceAccountId") or op.get(
            "response", {}
        ).get("id")
        if not sa_id:
            raise CloudAPIError(0, "service account operation carried no id")
        return sa_id

    def update_access_bindings(
        self, resource_id: str, deltas: list[AccessBindingDelta], *, timeout: float
    ) -> None:
        body = {"accessBindingDeltas": [d.to_api() for d in deltas]}
        self._run_operation(
            f"{self._resource_manager}/resource-manager/v1/folders/"
            f"{resource_id}:updateAccessBindings",
            body,
            timeout,
        )

    def create_access_key(
        self, service_account_id: str, description: str, *, timeout: float
    ) -> CredentialPair:
        deadline = time.monotonic() + timeout
        payload = self._request(
            "POST",
            f"{self._iam}/iam/aws-compatibility/v1/accessKeys",
            deadline,
            json={"serviceAccountId": service_account_id, "description": description},
        )
        key_id = payload.get("accessKey", {}).get("keyId")
        secret = payload.get("secret")
        if not key_id or not secret:
            raise CloudAPIError(0, "access key response is missing keyId or secret")
        return CredentialPair(access_key_id=key_id, secret_access_key=secret)

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
        body = {
            "folderId": folder_id,
            "name": name,
            "description": description,
            "labels": dict(labels),
            "versionPayloadEntries": [
                {"key": key, "textValue": value} for key, value in entries.items()
            ],
        }
        op = self._run_operation(f"{self._lockbox}/lockbox/v1/secrets", body, timeout)
        secret_id = op.get("metadata", {}).get("secretId") or op.get("response", {}).get(
            "id"
        )
        if not secret_id:
            raise CloudAPIError(0, "secret operation carried no id")
        return secret_id
