"""Main Typer application — imports and registers all CLI commands.

Entry point: ``tfstate-bootstrap`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import typer

from tfstate_bootstrap.cli.commands.check_config import check_config_cmd
from tfstate_bootstrap.cli.commands.plan import plan_cmd
from tfstate_bootstrap.cli.commands.provision import provision_cmd

app = typer.Typer(
    name="tfstate-bootstrap",
    help="Bootstrap a Yandex Cloud remote-state backend for Terraform.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="provision", help="Create the state bucket, service account, key and secret.")(
    provision_cmd
)
app.command(name="plan", help="Show what provision would create.")(plan_cmd)
app.command(name="check-config", help="Validate environment and config.yaml.")(check_config_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
