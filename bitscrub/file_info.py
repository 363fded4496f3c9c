import datetime
import os
from dataclasses import dataclass


@dataclass
class FileRecord:
    size: int
    mode: int
    mtime: datetime.datetime
    digest: bytes

    def same_metadata(self, other: "FileRecord") -> bool:
        return self.size == other.size and self.mode == other.mode and self.mtime == other.mtime


def mtime_from_stat(stat: os.stat_result) -> datetime.datetime:
    """
    Converts st_mtime_ns to an aware UTC datetime, truncated to microseconds
    """
    seconds, nanoseconds = divmod(stat.st_mtime_ns, 1_000_000_000)
    mtime = datetime.datetime.fromtimestamp(seconds, tz=datetime.timezone.utc)
    return mtime.replace(microsecond=nanoseconds // 1000)
