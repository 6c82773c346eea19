"""Tests for the StepMachine — linear transitions, predecessor enforcement, run state."""

from __future__ import annotations

import pytest

from tfstate_bootstrap.core.step_machine import InvalidTransitionError, StepMachine
from tfstate_bootstrap.models.steps import RunState, StepState


class TestStepMachine:
    def test_initial_state(self, step_machine: StepMachine):
        states = step_machine.get_all_states()
        assert len(states) == 5
        assert all(s == StepState.NOT_STARTED for s in states.values())
        assert step_machine.run_state == RunState.NOT_STARTED

    def test_step_order(self, step_machine: StepMachine):
        assert step_machine.step_ids == [
            "create_bucket",
            "create_service_account",
            "grant_roles",
            "mint_access_key",
            "store_secret",
        ]

    def test_transition_to_running(self, step_machine: StepMachine):
        record = step_machine.transition("create_bucket", StepState.RUNNING)
        assert record.from_state == StepState.NOT_STARTED
        assert record.to_state == StepState.RUNNING
        assert step_machine.run_state == RunState.RUNNING

    def test_cannot_skip_ahead(self, step_machine: StepMachine):
        with pytest.raises(InvalidTransitionError):
            step_machine.transition("grant_roles", StepState.RUNNING)

    def test_cannot_pass_without_running(self, step_machine: StepMachine):
        with pytest.raises(InvalidTransitionError):
            step_machine.transition("create_bucket", StepState.PASSED)

    def test_next_step_startable_after_pass(self, step_machine: StepMachine):
        step_machine.transition("create_bucket", StepState.RUNNING)
        step_machine.transition("create_bucket", StepState.PASSED)
        ok, reason = step_machine.can_start("create_service_account")
        assert ok is True
        assert reason == ""

    def test_failure_is_terminal(self, step_machine: StepMachine):
        step_machine.transition("create_bucket", StepState.RUNNING)
        step_machine.transition("create_bucket", StepState.FAILED, error="boom")
        assert step_machine.run_state == RunState.FAILED
        assert step_machine.failed_step() == "create_bucket"
        with pytest.raises(InvalidTransitionError):
            step_machine.transition("create_bucket", StepState.RUNNING)
        with pytest.raises(InvalidTransitionError):
            step_machine.transition("create_service_account", StepState.RUNNING)

    def test_completed_after_last_step(self, step_machine: StepMachine):
        for sid in step_machine.step_ids:
            step_machine.transition(sid, StepState.RUNNING)
            step_machine.transition(sid, StepState.PASSED)
        assert step_machine.run_state == RunState.COMPLETED
        assert step_machine.failed_step() is None

    def test_history_records_every_transition(self, step_machine: StepMachine):
        step_machine.transition("create_bucket", StepState.RUNNING)
        step_machine.transition("create_bucket", StepState.FAILED, error="denied")
        history = step_machine.history
        assert [(h.step_id, h.to_state) for h in history] == [
            ("create_bucket", StepState.RUNNING),
            ("create_bucket", StepState.FAILED),
        ]
        assert history[-1].error == "denied"

    def test_unknown_step_rejected(self, step_machine: StepMachine):
        with pytest.raises(KeyError):
            step_machine.get_state("delete_everything")
