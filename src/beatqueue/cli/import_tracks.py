import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn

from beatqueue.config import find_config
from beatqueue.models import Track
from beatqueue.persistence.store import SnapshotStore
from beatqueue.playback.store import PlayerStore

console = Console()
logger = logging.getLogger(__name__)


@click.command()
@click.argument('tracks_json', type=click.Path(exists=True, dir_okay=False))
@click.option('--target', type=click.Choice(['uploads', 'favorites']), default='uploads',
              help='Collection to import into')
@click.option('--config', 'config_path', type=click.Path(), help='Path to configuration file')
@click.option('--verbose', is_flag=True, help='Enable verbose logging')
@click.option('--dry-run', is_flag=True, help='Show what would be done without making changes')
def import_tracks(tracks_json: str, target: str, config_path: Optional[str], verbose: bool, dry_run: bool):
    """Import a JSON list of tracks into the saved uploads or favorites."""

    # Configure logging
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    logger.info(f"Importing {tracks_json} into {target}")

    try:
        config = find_config(Path(config_path) if config_path else None)
        snapshot_store = SnapshotStore(config.storage_path, config.storage_key)
        snapshot = asyncio.run(snapshot_store.load())
        player = PlayerStore(config=config, snapshot=snapshot)

        with open(tracks_json) as f:
            entries = json.load(f)
        if not isinstance(entries, list):
            raise click.ClickException(f"{tracks_json} must contain a JSON list of tracks")

        imported = 0
        skipped = 0
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("({task.completed}/{task.total})"),
            console=console
        ) as progress:
            task = progress.add_task(f"Importing into {target}...", total=len(entries))

            for entry in entries:
                try:
                    track = Track.from_dict(entry, uploaded=True if target == 'uploads' else None)
                except (ValueError, AttributeError) as e:
                    logger.warning(f"Skipping entry: {e}")
                    skipped += 1
                    progress.update(task, advance=1)
                    continue

                if dry_run:
                    logger.info(f"Would import: {track.title} ({track.id})")
                    imported += 1
                elif target == 'uploads':
                    player.add_upload(track)
                    imported += 1
                else:
                    state = player.add_favorite(track)
                    if state.error:
                        logger.debug(f"{track.id}: {state.error}")
                        player.clear_error()
                        skipped += 1
                    else:
                        imported += 1
                logger.debug(f"Processed {track.id}")
                progress.update(task, advance=1)

            progress.update(task, description=f"Import complete! Imported: {imported}, Skipped: {skipped}")

        if not dry_run:
            asyncio.run(snapshot_store.save(player.snapshot()))
            logger.info(f"Saved library to {config.storage_path}")

    except click.ClickException:
        raise
    except Exception as e:
        logger.error(f"Fatal error during import: {str(e)}")
        raise click.ClickException(str(e))


if __name__ == '__main__':
    import_tracks()
