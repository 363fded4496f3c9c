import os
from pathlib import Path

import pytest


@pytest.fixture
def tree(tmpdir):
    root = Path(tmpdir) / "data"
    for card_number in range(1, 3):
        card = root / f"A00{card_number}XXXX"
        card.mkdir(parents=True)

        for clip_number in range(1, 4):
            (card / f"A00{card_number}C00{clip_number}_XXXX_XXXX.mov").write_bytes(clip_number * 100 * b"X")

    (root / "a.txt").write_text("hello")

    return root


@pytest.fixture
def state_dir(tmpdir):
    return Path(tmpdir) / "state"


@pytest.fixture
def corrupt():
    def overwrite_in_place(path: Path, data: bytes):
        """
        Changes the content of a file without changing its size or modification time
        """
        st = path.stat()
        with open(path, "r+b") as f:
            f.write(data)
        os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns))

    return overwrite_in_place
