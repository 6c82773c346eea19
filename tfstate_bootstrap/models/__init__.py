"""tfstate-bootstrap data models — all Pydantic v2, all frozen (immutable)."""

from tfstate_bootstrap.models.config import ProvisioningConfig
from tfstate_bootstrap.models.resources import (
    BucketResult,
    CredentialPair,
    ProvisioningOutcome,
    SecretKeys,
    SecretRecord,
    ServiceIdentity,
    StateDescriptor,
)
from tfstate_bootstrap.models.steps import (
    DEFAULT_STEP_DEFINITIONS,
    VALID_TRANSITIONS,
    RunState,
    StepDefinition,
    StepState,
    StepTransition,
)

__all__ = [
    # config
    "ProvisioningConfig",
    # resources
    "BucketResult",
    "ServiceIdentity",
    "CredentialPair",
    "SecretRecord",
    "SecretKeys",
    "StateDescriptor",
    "ProvisioningOutcome",
    # steps
    "StepState",
    "RunState",
    "StepDefinition",
    "StepTransition",
    "VALID_TRANSITIONS",
    "DEFAULT_STEP_DEFINITIONS",
]
