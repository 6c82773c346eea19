"""Linear provisioning state machine.

Enforces:
- Valid state transitions only (VALID_TRANSITIONS table)
- A step may enter RUNNING only once its predecessor has PASSED
- No retry: FAILED is terminal and fails the whole run
- Every transition recorded in an in-memory audit trail
"""

from __future__ import annotations

import logging

from tfstate_bootstrap.models.steps import (
    VALID_TRANSITIONS,
    RunState,
    StepDefinition,
    StepState,
    StepTransition,
)

logger = logging.getLogger(__name__)


class InvalidTransitionError(RuntimeError):
    """Raised when a requested state transition is not valid."""


class StepMachine:
    """Tracks step and run state for a single provisioning run.

    Parameters
    ----------
    definitions:
        The ordered step chain. Each step's only prerequisite is the step
        immediately before it.
    """

    def __init__(self, definitions: list[StepDefinition]) -> None:
        self._definitions = sorted(definitions, key=lambda d: d.ordinal)
        self._order = [d.step_id for d in self._definitions]
        self._states: dict[str, StepState] = {
            sid: StepState.NOT_STARTED for sid in self._order
        }
        self._history: list[StepTransition] = []
        self.run_state = RunState.NOT_STARTED

    # ------------------------------------------------------------------
    # State inspection
    # ------------------------------------------------------------------

    @property
    def step_ids(self) -> list[str]:
        return list(self._order)

    @property
    def history(self) -> list[StepTransition]:
        return list(self._history)

    def definition(self, step_id: str) -> StepDefinition:
        for d in self._definitions:
            if d.step_id == step_id:
                return d
        raise KeyError(step_id)

    def get_state(self, step_id: str) -> StepState:
        if step_id not in self._states:
            raise KeyError(step_id)
        return self._states[step_id]

    def get_all_states(self) -> dict[str, StepState]:
        return dict(self._states)

    def failed_step(self) -> str | None:
        """Return the id of the step the run failed at, if any."""
        for sid in self._order:
            if self._states[sid] == StepState.FAILED:
                return sid
        return None

    def can_start(self, step_id: str) -> tuple[bool, str]:
        """Check whether *step_id* may enter RUNNING.

        Returns (can_start, blocking_reason).
        """
        if self.run_state in (RunState.COMPLETED, RunState.FAILED):
            return False, f"run is {self.run_state.value}"

        current = self.get_state(step_id)
        if current != StepState.NOT_STARTED:
            return False, f"{step_id} is {current.value}, not not_started"

        index = self._order.index(step_id)
        if index > 0:
            previous = self._order[index - 1]
            if self._states[previous] != StepState.PASSED:
                return False, f"{previous} is {self._states[previous].value}"

        return True, ""

    # ------------------------------------------------------------------
    # Transition logic
    # ------------------------------------------------------------------

    def transition(
        self,
        step_id: str,
        target_state: StepState,
        *,
        error: str | None = None,
    ) -> StepTransition:
        """Move *step_id* to *target_state* and update the run state.

        Validates:
        1. The transition is allowed by VALID_TRANSITIONS.
        2. If target is RUNNING, the previous step has PASSED.
        """
        current = self.get_state(step_id)

        allowed = VALID_TRANSITIONS.get(current, set())
        if target_state not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition {step_id} from {current.value} to {target_state.value}. "
                f"Allowed: {[s.value for s in allowed]}"
            )

        if target_state == StepState.RUNNING:
            ok, reason = self.can_start(step_id)
            if not ok:
                raise InvalidTransitionError(f"Cannot start {step_id}: {reason}")

        record = StepTransition(
            step_id=step_id,
            from_state=current,
            to_state=target_state,
            error=error,
        )
        self._history.append(record)
        self._states[step_id] = target_state

        if target_state == StepState.RUNNING:
            self.run_state = RunState.RUNNING
        elif target_state == StepState.FAILED:
            self.run_state = RunState.FAILED
        elif target_state == StepState.PASSED and step_id == self._order[-1]:
            self.run_state = RunState.COMPLETED

        logger.debug("%s: %s -> %s", step_id, current.value, target_state.value)
        return record
