"""Unit tests for the CLI — command registration, exit codes, failure phases.

The remote API is replaced with the in-memory FakeCloud by patching
``build_cloud_client`` in the provision command module.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from tests.fakes import TEST_ACCESS_KEY_ID, TEST_SECRET_ACCESS_KEY, FakeCloud
from tfstate_bootstrap.cli.app import app
from tfstate_bootstrap.cli.commands import provision as provision_module
from tfstate_bootstrap.cloud.base import CloudAPIError

runner = CliRunner()


@pytest.fixture
def use_cloud(monkeypatch: pytest.MonkeyPatch):
    """Route the provision command to the given fake cloud."""

    def _use(cloud: FakeCloud) -> FakeCloud:
        monkeypatch.setattr(provision_module, "build_cloud_client", lambda settings: cloud)
        return cloud

    return _use


# ---------------------------------------------------------------------------
# Test: CLI help and registration
# ---------------------------------------------------------------------------


class TestCliApp:
    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        # Typer's no_args_is_help may exit with 0 or 2 depending on version
        assert result.exit_code in (0, 2)
        assert "usage" in result.output.lower()

    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "provision" in result.output
        assert "plan" in result.output
        assert "check-config" in result.output

    @pytest.mark.parametrize("command", ["provision", "plan", "check-config"])
    def test_command_exists(self, command):
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0


# ---------------------------------------------------------------------------
# Test: provision
# ---------------------------------------------------------------------------


class TestProvisionCommand:
    def test_success_writes_both_files(self, tf_dir: Path, fake_cloud, use_cloud):
        use_cloud(fake_cloud)
        result = runner.invoke(app, ["provision"])
        assert result.exit_code == 0, result.output
        assert (tf_dir / "state.yaml").is_file()
        assert (tf_dir / "access-key.yaml").is_file()
        assert f"AccessKeyId: {TEST_ACCESS_KEY_ID}" in result.stdout
        assert f"SecretAccessKey: {TEST_SECRET_ACCESS_KEY}" in result.stdout
        assert fake_cloud.closed is True

    def test_output_dir_option(self, tf_dir: Path, tmp_path: Path, fake_cloud, use_cloud):
        use_cloud(fake_cloud)
        out = tmp_path / "elsewhere"
        result = runner.invoke(app, ["provision", "--output-dir", str(out)])
        assert result.exit_code == 0, result.output
        assert (out / "state.yaml").is_file()
        assert not (tf_dir / "state.yaml").exists()

    def test_config_option(self, tf_dir: Path, tmp_path: Path, fake_cloud, use_cloud):
        use_cloud(fake_cloud)
        other = tmp_path / "other.yaml"
        other.write_text("name: prod\nfolderId: fld-9\n", encoding="utf-8")
        result = runner.invoke(app, ["provision", "--config", str(other)])
        assert result.exit_code == 0, result.output
        assert [sa["name"] for sa in fake_cloud.service_accounts.values()] == [
            "prod-tf-state-manager"
        ]

    def test_step_timeout_option(self, tf_dir: Path, fake_cloud, use_cloud):
        use_cloud(fake_cloud)
        result = runner.invoke(app, ["provision", "--step-timeout", "2.5"])
        assert result.exit_code == 0, result.output
        assert fake_cloud.timeouts == [2.5] * 5

    def test_step_timeout_from_environment(
        self, tf_dir: Path, fake_cloud, use_cloud, monkeypatch: pytest.MonkeyPatch
    ):
        use_cloud(fake_cloud)
        monkeypatch.setenv("TFSTATE_STEP_TIMEOUT_SECONDS", "7")
        result = runner.invoke(app, ["provision"])
        assert result.exit_code == 0, result.output
        assert set(fake_cloud.timeouts) == {7.0}

    def test_missing_environment_fails_before_remote_calls(
        self, tf_dir: Path, fake_cloud, use_cloud, monkeypatch: pytest.MonkeyPatch
    ):
        use_cloud(fake_cloud)
        monkeypatch.delenv("YC_TOKEN")
        result = runner.invoke(app, ["provision"])
        assert result.exit_code == 1
        assert fake_cloud.calls == []

    def test_invalid_config_fails_before_remote_calls(
        self, tf_dir: Path, fake_cloud, use_cloud, caplog: pytest.LogCaptureFixture
    ):
        use_cloud(fake_cloud)
        (tf_dir / "config.yaml").write_text("other: 1\n", encoding="utf-8")
        with caplog.at_level(logging.INFO):
            result = runner.invoke(app, ["provision"])
        assert result.exit_code == 1
        assert fake_cloud.calls == []
        fatal = [r for r in caplog.records if r.levelno == logging.CRITICAL]
        assert len(fatal) == 1
        assert "config failed" in fatal[0].getMessage()
        assert "name" in fatal[0].getMessage() and "folderId" in fatal[0].getMessage()

    def test_step_failure_exits_non_zero_without_outputs(
        self, tf_dir: Path, make_fake_cloud, use_cloud, caplog: pytest.LogCaptureFixture
    ):
        cloud = use_cloud(
            make_fake_cloud(update_access_bindings=CloudAPIError(403, "denied"))
        )
        with caplog.at_level(logging.INFO):
            result = runner.invoke(app, ["provision"])
        assert result.exit_code == 1
        assert not (tf_dir / "state.yaml").exists()
        assert not (tf_dir / "access-key.yaml").exists()
        assert cloud.calls == [
            "create_bucket",
            "create_service_account",
            "update_access_bindings",
        ]
        fatal = [r for r in caplog.records if r.levelno == logging.CRITICAL]
        assert len(fatal) == 1
        assert "provision:grant_roles" in fatal[0].getMessage()

    def test_output_failure_is_reported_as_output_phase(
        self, tf_dir: Path, fake_cloud, use_cloud, caplog: pytest.LogCaptureFixture
    ):
        use_cloud(fake_cloud)
        (tf_dir / "access-key.yaml").mkdir()
        with caplog.at_level(logging.INFO):
            result = runner.invoke(app, ["provision"])
        assert result.exit_code == 1
        fatal = [r for r in caplog.records if r.levelno == logging.CRITICAL]
        assert len(fatal) == 1
        message = fatal[0].getMessage()
        assert message.startswith("output failed")
        sa_id = next(iter(fake_cloud.service_accounts))
        assert sa_id in message
        assert TEST_SECRET_ACCESS_KEY not in message


# ---------------------------------------------------------------------------
# Test: check-config and plan
# ---------------------------------------------------------------------------


class TestCheckConfigCommand:
    def test_valid(self, tf_dir: Path):
        result = runner.invoke(app, ["check-config"])
        assert result.exit_code == 0, result.output
        assert "fld-1" in result.stdout

    def test_invalid(self, tf_dir: Path):
        (tf_dir / "config.yaml").write_text("name: demo\n", encoding="utf-8")
        result = runner.invoke(app, ["check-config"])
        assert result.exit_code == 1


class TestPlanCommand:
    def test_lists_resource_names(self, tf_dir: Path):
        result = runner.invoke(app, ["plan"])
        assert result.exit_code == 0, result.output
        assert "demo-tf-state-manager" in result.stdout
        assert "Create state bucket" in result.stdout

    def test_missing_tf_dir(self, tf_dir: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("TF_DIR")
        result = runner.invoke(app, ["plan"])
        assert result.exit_code == 1
