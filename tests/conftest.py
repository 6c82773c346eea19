"""Shared test fixtures for tfstate-bootstrap."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from tests.fakes import TEST_TOKEN, FakeCloud
from tfstate_bootstrap.core.step_machine import StepMachine
from tfstate_bootstrap.models.config import ProvisioningConfig
from tfstate_bootstrap.models.steps import DEFAULT_STEP_DEFINITIONS


@pytest.fixture
def fake_cloud() -> FakeCloud:
    """Provide a fresh, always-succeeding fake cloud."""
    return FakeCloud()


@pytest.fixture
def make_fake_cloud() -> Callable[..., FakeCloud]:
    """Factory fixture: build a FakeCloud that fails at the given methods."""

    def _factory(**fail_at: Exception) -> FakeCloud:
        return FakeCloud(fail_at=fail_at)

    return _factory


@pytest.fixture
def provisioning_config() -> ProvisioningConfig:
    """The reference config used throughout: name=demo, folderId=fld-1."""
    return ProvisioningConfig(name="demo", folder_id="fld-1")


@pytest.fixture
def step_machine() -> StepMachine:
    """Provide a StepMachine over the default five-step chain."""
    return StepMachine(DEFAULT_STEP_DEFINITIONS)


@pytest.fixture
def tf_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A working directory with config.yaml and the mandatory env set."""
    work = tmp_path / "tf"
    work.mkdir()
    (work / "config.yaml").write_text("name: demo\nfolderId: fld-1\n", encoding="utf-8")
    monkeypatch.setenv("YC_TOKEN", TEST_TOKEN)
    monkeypatch.setenv("TF_DIR", str(work))
    monkeypatch.delenv("TFSTATE_STEP_TIMEOUT_SECONDS", raising=False)
    monkeypatch.delenv("TFSTATE_LOG_LEVEL", raising=False)
    return work
