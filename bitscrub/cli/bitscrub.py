#!/usr/bin/env python3
import logging
import sys
from typing import List, Optional

import click

from bitscrub.hash import ALGORITHMS, FileReadError
from bitscrub.scrub import Scrubber
from bitscrub.state import CorruptState
from bitscrub.state_dir import (
    DEFAULT_STATE_DIR,
    StateDirectoryError,
    get_state_dir,
    load_state,
    save_state,
    state_file_name,
)
from bitscrub.utils import PathResolutionError, resolve_root

logger = logging.getLogger("bitscrub")


def _setup_logging(verbose: bool):
    logging.basicConfig(format="%(levelname)s: %(message)s")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _fail(message: str):
    click.secho(message, fg="red", err=True)
    sys.exit(1)


@click.command()
@click.version_option(prog_name="bitscrub")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose mode")
@click.option(
    "--state-dir",
    type=click.Path(),
    default=str(DEFAULT_STATE_DIR),
    envvar="BITSCRUB_STATE_DIR",
    show_default=True,
    help="Directory holding one state file per scanned root",
)
@click.option(
    "--algorithm",
    type=click.Choice(sorted(ALGORITHMS)),
    default=None,
    help="Checksum algorithm for a new state (defaults to md5, must match an existing state)",
)
@click.option(
    "--exclude",
    multiple=True,
    metavar="PATTERN",
    help="Skip files and directories matching this shell-style pattern (can be repeated)",
)
@click.argument("root", nargs=1, type=click.Path(exists=True, file_okay=False, dir_okay=True))
def cli(verbose: bool, state_dir: str, algorithm: Optional[str], exclude: List[str], root: str):
    """
    bitscrub

    Detect silent data corruption below ROOT. Files whose checksum changed
    while their size, mode and modification time stayed the same are reported.
    """
    _setup_logging(verbose)

    try:
        root = resolve_root(root)
        state_file = get_state_dir(state_dir) / state_file_name(root)
        logger.info(f"Using state file {state_file}")
        state = load_state(state_file, root, algorithm, log=logger)
    except (PathResolutionError, StateDirectoryError, CorruptState) as err:
        _fail(str(err))

    scrubber = Scrubber(exclude=exclude, log=logger.getChild("scrub"))
    try:
        scrubber.compare(state)
    except FileReadError as err:
        _fail(f"Scrub aborted, state not saved: {err}")

    stats = scrubber.stats
    logger.info(
        f"{stats.new} new, {stats.updated} updated, {stats.unchanged} unchanged, "
        f"{stats.mismatched} mismatched, {stats.skipped} skipped, {stats.excluded} excluded, "
        f"{stats.stale} missing on disk"
    )

    try:
        save_state(state_file, state, log=logger)
    except StateDirectoryError as err:
        _fail(str(err))


if __name__ == "__main__":
    cli()  # pragma: no cover
