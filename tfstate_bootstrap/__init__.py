"""tfstate-bootstrap: one-shot provisioning of a Terraform remote-state backend.

Creates, in order, on Yandex Cloud:
  - an Object Storage bucket for the state
  - a dedicated service account
  - ``storage.viewer`` and ``storage.uploader`` bindings on the folder
  - a static access key for the service account
  - a Lockbox secret holding that key

and writes ``state.yaml`` (non-secret) and ``access-key.yaml`` (secret).
"""

__version__ = "0.1.0"

from tfstate_bootstrap.core.orchestrator import Provisioner, ProvisioningResult
from tfstate_bootstrap.cli.app import app as cli

__all__ = ["Provisioner", "ProvisioningResult", "cli", "__version__"]
