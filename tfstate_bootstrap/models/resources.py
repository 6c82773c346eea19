"""Provisioned resource models and the two output documents.

``CredentialPair.secret_access_key`` is a ``SecretStr``: the value is returned
exactly once by the remote API and must not leak through ``repr`` or logs.
Only the Lockbox request body and the access-key document unwrap it.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretStr

LOCKBOX_SECRET_KEY_ACCESS_KEY_ID = "access_key_id"
LOCKBOX_SECRET_KEY_SECRET_ACCESS_KEY = "secret_access_key"

CREATED_BY_LABEL_KEY = "created_by"
CREATED_BY_LABEL_VALUE = "yc-terraform-templater"

STORAGE_ROLES: tuple[str, ...] = ("storage.viewer", "storage.uploader")
SERVICE_ACCOUNT_SUBJECT_TYPE = "serviceAccount"


def created_by_labels() -> dict[str, str]:
    """Labels attached to every resource this tool creates."""
    return {CREATED_BY_LABEL_KEY: CREATED_BY_LABEL_VALUE}


class BucketResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    bucket_name: str


class ServiceIdentity(BaseModel):
    model_config = ConfigDict(frozen=True)

    service_account_id: str
    name: str


class CredentialPair(BaseModel):
    """Static access key minted for the service account."""

    model_config = ConfigDict(frozen=True)

    access_key_id: str
    secret_access_key: SecretStr

    def as_payload_entries(self) -> dict[str, str]:
        """Key/value entries stored in the Lockbox secret."""
        return {
            LOCKBOX_SECRET_KEY_ACCESS_KEY_ID: self.access_key_id,
            LOCKBOX_SECRET_KEY_SECRET_ACCESS_KEY: self.secret_access_key.get_secret_value(),
        }


class SecretRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    lockbox_secret_id: str


class SecretKeys(BaseModel):
    """A pair of access-key fields, serialized with camelCase keys.

    In the state descriptor the values are the Lockbox entry *names*; in the
    access-key document they are the literal credential values.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    access_key_id: str = Field(alias="accessKeyId")
    secret_access_key: str = Field(alias="secretAccessKey")


class StateDescriptor(BaseModel):
    """Non-secret description of what was provisioned (``state.yaml``)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # State bucket name
    state_bucket: str = Field(alias="stateBucket")
    # Bucket viewer/uploader service account id
    sa_id: str = Field(alias="saId")
    # Id of the Lockbox secret holding the bucket credentials
    lockbox_secret_id: str = Field(alias="lockboxSecretId")
    secret_keys: SecretKeys = Field(alias="secretKeys")


class ProvisioningOutcome(BaseModel):
    """Everything created by a completed provisioning run, minus secrets."""

    model_config = ConfigDict(frozen=True)

    bucket: BucketResult
    service_identity: ServiceIdentity
    secret: SecretRecord

    def to_state_descriptor(self) -> StateDescriptor:
        return StateDescriptor(
            state_bucket=self.bucket.bucket_name,
            sa_id=self.service_identity.service_account_id,
            lockbox_secret_id=self.secret.lockbox_secret_id,
            secret_keys=SecretKeys(
                access_key_id=LOCKBOX_SECRET_KEY_ACCESS_KEY_ID,
                secret_access_key=LOCKBOX_SECRET_KEY_SECRET_ACCESS_KEY,
            ),
        )
