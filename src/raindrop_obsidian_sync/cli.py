"""Command-line interface for the sync service."""

from __future__ import annotations

import typer

from .cli_commands import sync_commands

app = typer.Typer(
    name="raindrop-obsidian-sync",
    help="Two-way sync between Raindrop.io bookmarks and an Obsidian vault.",
    no_args_is_help=True,
)

sync_commands.register(app)


def cli() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()
