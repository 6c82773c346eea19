"""Operator-supplied provisioning configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ProvisioningConfig(BaseModel):
    """Validated contents of ``config.yaml``.

    Immutable once loaded; both fields are guaranteed non-empty by
    ``core.config_loader.load``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Provisioned Terraform resources name
    name: str
    # Cloud folder id
    folder_id: str = Field(alias="folderId")
