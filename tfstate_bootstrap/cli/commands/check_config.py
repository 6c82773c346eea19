"""``tfstate-bootstrap check-config`` — validate inputs without touching the cloud."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from tfstate_bootstrap.cli.commands._common import fail, load_config, load_settings
from tfstate_bootstrap.errors import BootstrapError

console = Console()


def check_config_cmd(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config.yaml. Defaults to $TF_DIR/config.yaml.",
    ),
) -> None:
    """Run the environment guard and config validation, then report."""
    try:
        settings = load_settings()
        config = load_config(settings, config_path)
    except BootstrapError as e:
        raise fail(e) from e

    console.print(
        Panel(
            "\n".join([
                "[bold green]Configuration is valid.[/bold green]",
                "",
                f"[bold]Name:[/bold]      {config.name}",
                f"[bold]Folder ID:[/bold] {config.folder_id}",
                f"[bold]TF_DIR:[/bold]    {settings.work_dir}",
                f"[bold]Timeout:[/bold]   {settings.step_timeout_seconds:g}s per step",
            ]),
            title="[bold]tfstate-bootstrap[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )
