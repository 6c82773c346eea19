"""tfstate-bootstrap CLI — Typer-based command-line interface.

Provides the ``tfstate-bootstrap`` command with subcommands for provisioning
the backend, previewing the resource names, and validating inputs.

All console output uses Rich; logs go to stderr.
"""
