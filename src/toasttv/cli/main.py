"""
Main CLI application using Typer.

Commands:
- run: start the playback daemon against a running mpv/VLC instance
- preview: build a session queue from the catalog without a player
"""

from __future__ import annotations

import typer

from .commands import playback, preview

app = typer.Typer(help="ToastTV playback core CLI", no_args_is_help=True)

app.command("run")(playback.run)
app.command("preview")(preview.preview)


def cli() -> None:
    app()


if __name__ == "__main__":
    cli()
