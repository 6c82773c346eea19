"""``tfstate-bootstrap provision`` — create the Terraform state backend.

Runs the full chain: environment guard, config load, five remote steps,
then writes ``state.yaml`` and ``access-key.yaml`` into the output
directory. Any failure exits with status 1 and leaves already-created
remote resources in place.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from tfstate_bootstrap.cli.commands._common import fail, load_config, load_settings
from tfstate_bootstrap.cloud.yandex import YandexCloudClient
from tfstate_bootstrap.core.orchestrator import Provisioner
from tfstate_bootstrap.core.output_writer import OutputWriter
from tfstate_bootstrap.errors import BootstrapError
from tfstate_bootstrap.settings import BootstrapSettings

console = Console()


def build_cloud_client(settings: BootstrapSettings) -> YandexCloudClient:
    """Construct the remote API client for one run."""
    return YandexCloudClient.from_settings(settings)


def provision_cmd(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config.yaml. Defaults to $TF_DIR/config.yaml.",
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Where state.yaml and access-key.yaml are written. Defaults to $TF_DIR.",
    ),
    step_timeout: Optional[float] = typer.Option(
        None,
        "--step-timeout",
        min=0.001,
        help="Per-step deadline in seconds. Defaults to $TFSTATE_STEP_TIMEOUT_SECONDS or 10.",
    ),
) -> None:
    """Provision the state bucket, service account, access key and Lockbox secret."""
    try:
        settings = load_settings()
        config = load_config(settings, config_path)

        with build_cloud_client(settings) as cloud:
            provisioner = Provisioner(
                cloud,
                config,
                step_timeout=step_timeout or settings.step_timeout_seconds,
            )
            result = provisioner.run()

        writer = OutputWriter(output_dir or settings.work_dir, console=console)
        paths = writer.write(result.outcome, result.credentials)
    except BootstrapError as e:
        raise fail(e) from e

    console.print(
        f"[bold green]Terraform state backend ready.[/bold green] "
        f"State: [cyan]{paths.state_file}[/cyan]  Access key: [cyan]{paths.access_key_file}[/cyan]"
    )
