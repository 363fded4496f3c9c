import hashlib
from pathlib import Path

import xxhash

DEFAULT_ALGORITHM = "md5"

ALGORITHMS = {
    "md5": hashlib.md5,
    "xxh128": xxhash.xxh3_128,
}

DIGEST_SIZES = {name: algorithm().digest_size for name, algorithm in ALGORITHMS.items()}


class FileReadError(OSError):
    """
    Raised if the content of a file could not be read completely
    """

    pass


def get_hash(file_path: Path, algorithm: str = DEFAULT_ALGORITHM, chunk_size: int = 1024 * 1024) -> bytes:
    try:
        x = ALGORITHMS[algorithm]()
    except KeyError as err:
        raise ValueError(f"Unknown hash algorithm: {algorithm}") from err

    try:
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(chunk_size), b""):
                x.update(chunk)
    except OSError as why:
        raise FileReadError(f"Could not read {file_path}: {why}") from why

    return x.digest()
