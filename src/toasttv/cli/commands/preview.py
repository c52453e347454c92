"""
Queue preview command.

Operator verification tool: builds one viewing session from the media
catalog and runtime config exactly as the daemon would, without touching a
player, and prints the resulting play order.
"""

import json
import random
from datetime import datetime

import typer

from toasttv.catalog.static_media_catalog import StaticMediaCatalog
from toasttv.infra.exceptions import ValidationError
from toasttv.infra.settings import settings
from toasttv.runtime.clock import SteppedClock
from toasttv.runtime.config import ConfigService
from toasttv.runtime.providers.file_config_provider import (
    InMemoryRuntimeConfigStore,
    JsonRuntimeConfigStore,
)
from toasttv.runtime.queue_scheduler import QueueScheduler
from toasttv.runtime.session_clock import SessionClock


def _mmss(seconds: float) -> str:
    total = int(seconds)
    return f"{total // 60:02d}:{total % 60:02d}"


def preview(
    config_file: str = typer.Option(None, "--config", "-c", help="Path to runtime config.json"),
    catalog_file: str = typer.Option(None, "--catalog", help="Path to media catalog.json"),
    limit_minutes: int = typer.Option(None, "--limit-minutes", help="Override session.limit_minutes"),
    count: int = typer.Option(20, "--count", "-n", help="Maximum items to print (unlimited sessions never end)"),
    seed: int = typer.Option(None, "--seed", help="Random seed for a reproducible order"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Print the play order of one session without a player."""
    catalog = StaticMediaCatalog(catalog_file or settings.catalog_path)
    # Work on an in-memory copy so previewing never rewrites config.json.
    file_store = JsonRuntimeConfigStore(config_file or settings.config_path)
    store = InMemoryRuntimeConfigStore(file_store.get())
    service = ConfigService(store)
    service.discover_special_media(catalog)

    if limit_minutes is not None:
        try:
            service.set_session_limit(limit_minutes)
        except ValidationError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)

    clock = SteppedClock(datetime.now().replace(microsecond=0))
    session = SessionClock(clock)
    scheduler = QueueScheduler(
        store,
        catalog,
        session,
        clock,
        rng=random.Random(seed) if seed is not None else None,
    )

    items = []
    item = scheduler.start_session()
    while item is not None and len(items) < count:
        items.append(item)
        clock.advance(item.duration_seconds)
        item = scheduler.get_next_video()

    if json_output:
        typer.echo(json.dumps([i.to_dict() for i in items], indent=2))
        return

    if not items:
        typer.echo("Nothing to play: the catalog has no schedulable media.")
        return

    typer.echo(f"{'#':>3}  {'TYPE':<10} {'DUR':>5}  FILENAME")
    for index, media in enumerate(items, start=1):
        typer.echo(f"{index:>3}  {media.media_type.value:<10} {_mmss(media.duration_seconds):>5}  {media.filename}")
    total = sum(m.duration_seconds for m in items)
    typer.echo(f"\n{len(items)} items, {_mmss(total)} total")
