import os
import tempfile
from pathlib import Path

from bitscrub.scrub import Scrubber
from bitscrub.state_dir import get_state_dir, load_state, save_state, state_file_name


def simple_example():
    # For the sake of this example we will create temporary directories.
    # You will not be doing this in your code.
    with tempfile.TemporaryDirectory() as tmp:
        tmp = Path(tmp)

        # Define the directory to scrub and where its state is stored
        root = tmp / "data"
        state_file = get_state_dir(tmp / "state") / state_file_name(str(root))

        # Create some test content
        root.mkdir(parents=True, exist_ok=True)
        test_file = root / "testfile"
        test_file.write_text("Some test content")

        # The first run records all files
        state = load_state(state_file, str(root))
        Scrubber().compare(state)
        save_state(state_file, state)

        # Flip some bytes without touching size or modification time
        st = test_file.stat()
        with open(test_file, "r+b") as f:
            f.write(b"Some best")
        os.utime(test_file, ns=(st.st_atime_ns, st.st_mtime_ns))

        # The second run prints a mismatch for testfile
        state = load_state(state_file, str(root))
        Scrubber().compare(state)
        save_state(state_file, state)


if __name__ == "__main__":
    simple_example()
