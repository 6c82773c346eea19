"""``tfstate-bootstrap plan`` — show the resources a run would create.

No remote calls are made. The bucket suffix is drawn at provision time, so
the plan shows a placeholder for it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from tfstate_bootstrap.cli.commands._common import fail, load_config, load_settings
from tfstate_bootstrap.core.orchestrator import planned_names
from tfstate_bootstrap.errors import BootstrapError
from tfstate_bootstrap.models.steps import DEFAULT_STEP_DEFINITIONS

console = Console()


def plan_cmd(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config.yaml. Defaults to $TF_DIR/config.yaml.",
    ),
) -> None:
    """List the provisioning steps and the resource names they will use."""
    try:
        settings = load_settings()
        config = load_config(settings, config_path)
    except BootstrapError as e:
        raise fail(e) from e

    names = planned_names(config)
    targets = {
        "create_bucket": names["bucket"],
        "create_service_account": names["serviceAccount"],
        "grant_roles": f"{', '.join(names['roles'])} on {names['folderId']}",
        "mint_access_key": f"static key for {names['serviceAccount']}",
        "store_secret": names["lockboxSecret"],
    }

    table = Table(title=f"Provisioning plan for {config.name!r}")
    table.add_column("#", justify="right")
    table.add_column("Step", style="cyan")
    table.add_column("Target", style="green")
    for definition in DEFAULT_STEP_DEFINITIONS:
        table.add_row(
            str(definition.ordinal),
            definition.display_name,
            targets[definition.step_id],
        )
    console.print(table)
    console.print(f"[dim]Outputs: {settings.work_dir}/state.yaml, access-key.yaml[/dim]")
