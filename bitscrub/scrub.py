import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator, Set, Tuple

import click

from bitscrub.file_info import FileRecord, mtime_from_stat
from bitscrub.hash import get_hash
from bitscrub.state import DirectoryState
from bitscrub.utils import is_excluded

logger = logging.getLogger(__name__)


@dataclass
class MismatchReport:
    """
    A file whose checksum changed while size, mode and modification time stayed the same
    """

    path: str
    algorithm: str
    stored: bytes
    current: bytes

    def __str__(self):
        return f"[{self.algorithm.upper()} mismatch] {self.path} ({self.stored.hex()} -> {self.current.hex()})"


@dataclass
class ScrubStats:
    new: int = 0
    updated: int = 0
    unchanged: int = 0
    mismatched: int = 0
    skipped: int = 0
    excluded: int = 0
    stale: int = 0


def print_report(report: MismatchReport):
    click.echo(str(report))


class Scrubber:
    """
    Compares all files below the root of a DirectoryState to the files on disk.

    New files are added to the state and files with changed metadata replace their entry.
    Files with the exact same metadata but a different checksum are reported.
    """

    def __init__(
        self,
        exclude: Iterable[str] = (),
        report: Callable[[MismatchReport], None] = print_report,
        log: logging.Logger = logger,
    ):
        self.exclude = list(exclude)
        self.report = report
        self.log = log
        self.stats = ScrubStats()

    def compare(self, state: DirectoryState):
        self.stats = ScrubStats()
        seen: Set[str] = set()

        for path, st in self._walk(state.root):
            seen.add(path)
            self.compare_file(state, path, st)

        # Entries of deleted files are kept
        for path in state.entries:
            if path not in seen and not is_excluded(path, state.root, self.exclude):
                self.stats.stale += 1
                self.log.debug(f"[Missing] {path}")

    def compare_file(self, state: DirectoryState, path: str, st: os.stat_result):
        digest = get_hash(Path(path), state.algorithm)
        current = FileRecord(size=st.st_size, mode=st.st_mode, mtime=mtime_from_stat(st), digest=digest)
        stored = state.entries.get(path)

        if stored is None:
            self.log.debug(f"[New] {path} ({digest.hex()})")
            state.entries[path] = current
            self.stats.new += 1
        elif not stored.same_metadata(current):
            self.log.debug(f"[Metadata changes] {path} ({digest.hex()})")
            state.entries[path] = current
            self.stats.updated += 1
        else:
            self.log.debug(f"[No metadata changes] {path} ({digest.hex()})")
            if stored.digest == digest:
                self.stats.unchanged += 1
            else:
                self.stats.mismatched += 1
                self.report(MismatchReport(path, state.algorithm, stored.digest, digest))

    def _skip(self, err: OSError):
        self.stats.skipped += 1
        self.log.debug(f"[Skipped] {err.filename}: {err.strerror or err}")

    def _walk(self, root: str) -> Iterator[Tuple[str, os.stat_result]]:
        """
        Yields path and lstat result of all regular files below root in a stable order
        """
        for dirpath, dirnames, filenames in os.walk(root, onerror=self._skip):
            kept_dirs = []
            for dirname in sorted(dirnames):
                if is_excluded(os.path.join(dirpath, dirname), root, self.exclude):
                    self.stats.excluded += 1
                else:
                    kept_dirs.append(dirname)
            dirnames[:] = kept_dirs

            for filename in sorted(filenames):
                path = os.path.join(dirpath, filename)
                if is_excluded(path, root, self.exclude):
                    self.stats.excluded += 1
                    continue

                try:
                    st = os.lstat(path)
                except OSError as why:
                    self._skip(why)
                    continue

                if stat.S_ISREG(st.st_mode):
                    yield path, st
