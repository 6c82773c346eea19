"""Provisioning step state machine models — strictly linear transitions."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class StepState(str, Enum):
    """State of a single provisioning step."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"


class RunState(str, Enum):
    """State of the whole provisioning run."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


# No retry edge: FAILED and PASSED are both terminal.
VALID_TRANSITIONS: dict[StepState, set[StepState]] = {
    StepState.NOT_STARTED: {StepState.RUNNING},
    StepState.RUNNING: {StepState.PASSED, StepState.FAILED},
    StepState.PASSED: set(),
    StepState.FAILED: set(),
}


class StepDefinition(BaseModel):
    """A provisioning step and its position in the chain."""

    model_config = ConfigDict(frozen=True)

    step_id: str
    display_name: str
    ordinal: int


class StepTransition(BaseModel):
    """Records a single state transition for the run's audit trail."""

    model_config = ConfigDict(frozen=True)

    step_id: str
    from_state: StepState
    to_state: StepState
    error: str | None = None  # populated when entering FAILED


CREATE_BUCKET = "create_bucket"
CREATE_SERVICE_ACCOUNT = "create_service_account"
GRANT_ROLES = "grant_roles"
MINT_ACCESS_KEY = "mint_access_key"
STORE_SECRET = "store_secret"

# The provisioning chain, in execution order.
DEFAULT_STEP_DEFINITIONS: list[StepDefinition] = [
    StepDefinition(step_id=CREATE_BUCKET, display_name="Create state bucket", ordinal=1),
    StepDefinition(
        step_id=CREATE_SERVICE_ACCOUNT, display_name="Create service account", ordinal=2
    ),
    StepDefinition(step_id=GRANT_ROLES, display_name="Grant storage roles", ordinal=3),
    StepDefinition(step_id=MINT_ACCESS_KEY, display_name="Mint static access key", ordinal=4),
    StepDefinition(step_id=STORE_SECRET, display_name="Store Lockbox secret", ordinal=5),
]
