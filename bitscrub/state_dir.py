import hashlib
import logging
import os
import stat
from pathlib import Path
from typing import Optional

from bitscrub.state import DirectoryState, deserialize, serialize, CorruptState

DEFAULT_STATE_DIR = Path("~/.bitscrub")
STATE_DIR_MODE = 0o700
STATE_FILE_MODE = 0o600

logger = logging.getLogger(__name__)


class StateDirectoryError(OSError):
    """
    Raised if the state directory or a state file in it is not usable
    """

    pass


def get_state_dir(path: Path = DEFAULT_STATE_DIR) -> Path:
    """
    Returns the directory holding the state files. The directory is created if it doesn't exist yet.
    """
    path = Path(path).expanduser()

    try:
        st = path.stat()
    except FileNotFoundError:
        try:
            path.mkdir(mode=STATE_DIR_MODE, parents=True)
        except OSError as why:
            raise StateDirectoryError(f"Unable to create state directory {path}: {why}") from why
        return path
    except OSError as why:
        raise StateDirectoryError(f"Unable to stat state directory {path}: {why}") from why

    if not stat.S_ISDIR(st.st_mode):
        raise StateDirectoryError(f"A non-directory named {path} already exists.")

    return path


def state_file_name(root: str) -> str:
    return f"bitscrub_{hashlib.md5(os.fsencode(root)).hexdigest()}.db"


def load_state(
    state_file: Path, root: str, algorithm: Optional[str] = None, log: logging.Logger = logger
) -> DirectoryState:
    """
    Loads the state for root from state_file.

    A missing state file is a first run and results in an empty state.
    A state file which exists but can't be decoded raises CorruptState.
    """
    try:
        data = state_file.read_bytes()
    except FileNotFoundError:
        log.info(f"No state found in {state_file}, starting with an empty state")
        return DirectoryState(root=root, algorithm=algorithm or "md5")
    except OSError as why:
        raise StateDirectoryError(f"Unable to read state file {state_file}: {why}") from why

    try:
        state = deserialize(data)
    except CorruptState as err:
        raise CorruptState(f"{state_file}: {err}") from err

    if state.root != root:
        raise CorruptState(f"{state_file} holds the state for {state.root}, not {root}")
    if algorithm and state.algorithm != algorithm:
        raise CorruptState(f"{state_file} was created with {state.algorithm}, not {algorithm}")

    log.info("Loaded %d entries from %s", len(state.entries), state_file)
    return state


def save_state(state_file: Path, state: DirectoryState, log: logging.Logger = logger):
    """
    Writes the state to a temporary file next to state_file and renames it into place
    """
    tmp = state_file.with_name(state_file.name + ".save_in_progress")
    try:
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, STATE_FILE_MODE)
        with open(fd, "wb") as f:
            f.write(serialize(state))
        os.replace(tmp, state_file)
    except OSError as why:
        try:
            tmp.unlink()
        except FileNotFoundError:
            pass
        raise StateDirectoryError(f"Unable to write state file {state_file}: {why}") from why

    log.info("Saved %d entries to %s", len(state.entries), state_file)
