"""
Playback daemon command.

Starts the ToastTV daemon: connects to the configured player, runs the
polling loop and blocks until SIGINT/SIGTERM.
"""

import signal
import threading

import typer

from toasttv.infra.exceptions import PlayerConnectionError
from toasttv.infra.logging import configure_logging, get_logger
from toasttv.infra.settings import settings
from toasttv.runtime.daemon import ToastTVDaemon


def run(
    player: str = typer.Option(None, "--player", "-p", help="Player protocol: mpv or vlc (overrides TOASTTV_PLAYER)"),
    config_file: str = typer.Option(None, "--config", "-c", help="Path to runtime config.json"),
    catalog_file: str = typer.Option(None, "--catalog", help="Path to media catalog.json"),
    start_session: bool = typer.Option(False, "--start-session", help="Start a viewing session immediately"),
    log_level: str = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
):
    """Run the playback daemon until interrupted."""
    configure_logging(level=log_level)
    logger = get_logger("toasttv.cli")

    overrides = {}
    if player:
        if player not in ("mpv", "vlc"):
            typer.echo(f"Error: Unknown player '{player}' (expected mpv or vlc)", err=True)
            raise typer.Exit(1)
        overrides["player_kind"] = player
    if config_file:
        overrides["config_path"] = config_file
    if catalog_file:
        overrides["catalog_path"] = catalog_file
    effective = settings.model_copy(update=overrides) if overrides else settings

    daemon = ToastTVDaemon(effective)
    try:
        daemon.start()
    except PlayerConnectionError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if start_session:
        daemon.orchestrator.start_session()

    shutdown = threading.Event()

    def _handle_signal(signum, frame):
        logger.info("signal_received", signal=signum)
        shutdown.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    typer.echo(f"ToastTV running ({effective.player_kind}). Press Ctrl+C to stop.")
    while not shutdown.wait(timeout=1.0):
        pass

    daemon.stop()
    typer.echo("ToastTV stopped.")
