"""Entry point for the terminal task board.

Loads settings, sets up logging, restores the last snapshot and starts the
command loop. Every change is saved as it happens, so there is nothing to
flush on exit.
"""
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from board import Board
from cli import CLI
from config import Settings
from models import CorruptState, LoadReport, PersistenceFailure
from render import BoardView
from storage import Storage
from theme import Theme

logger = logging.getLogger("taskboard")

LOG_FORMAT = "%(asctime)s [taskboard] %(levelname)s: %(message)s"


def setup_logging(settings: Settings) -> None:
    if settings.log_file is not None:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(settings.log_file, encoding='utf-8')
    else:
        handler = logging.StreamHandler(sys.stderr)
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT, handlers=[handler], force=True)


def open_board(storage: Storage) -> Tuple[Board, LoadReport]:
    """Build a board backed by ``storage`` from its last snapshot.

    Returns ``(board, report)``. A corrupt or unreadable slot yields an empty
    board; the report says so, and nothing is raised. An unreadable slot is
    moved aside first; if even that fails the board gets no storage, so the
    session never overwrites tasks it could not read.
    """
    board = Board(storage=storage)
    try:
        records = storage.load()
    except CorruptState as e:
        logger.error("%s; starting with an empty board.", e)
        return board, LoadReport(corrupt=True)
    except PersistenceFailure as e:
        logger.warning("%s; starting with an empty board.", e)
        try:
            kept = storage.set_aside()
        except PersistenceFailure as aside_error:
            logger.warning("%s; changes in this session will not be saved.", aside_error)
            return Board(), LoadReport(unreadable=True)
        return board, LoadReport(unreadable=True, set_aside=str(kept))
    if records is None:
        return board, LoadReport()
    return board, board.load_snapshot(records)


@click.command()
@click.option('--data-dir', type=click.Path(file_okay=False, path_type=Path),
              help='Directory holding kanbanTasks.json (overrides TASKBOARD_DATA_DIR).')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Logging level (overrides TASKBOARD_LOG_LEVEL).')
@click.option('--no-alt-screen', is_flag=True, help='Draw in the normal screen buffer.')
def main(data_dir: Optional[Path], log_level: Optional[str], no_alt_screen: bool) -> None:
    """Interactive three-column task board."""
    settings = Settings.load()
    overrides = {}
    if data_dir is not None:
        overrides['data_dir'] = data_dir
    if log_level is not None:
        overrides['log_level'] = log_level.upper()
    if no_alt_screen:
        overrides['alt_screen'] = False
    settings = dataclasses.replace(settings, **overrides)
    setup_logging(settings)

    board, report = open_board(Storage(settings.data_dir))
    if report.corrupt:
        click.echo("Saved tasks were unreadable and have been cleared.", err=True)
    elif report.unreadable and report.set_aside:
        click.echo(f"Warning: saved tasks could not be read; the file was kept as {report.set_aside}.",
                   err=True)
    elif report.unreadable:
        click.echo("Warning: saved tasks could not be read; changes in this session will not be saved.",
                   err=True)
    elif report.skipped:
        click.echo(f"Skipped {report.skipped} malformed saved task(s).", err=True)

    view = BoardView(board, Theme.from_settings(settings))
    CLI(board, view, alt_screen=settings.alt_screen).run()


if __name__ == "__main__":
    main()
