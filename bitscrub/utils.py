import fnmatch
from pathlib import Path, PurePath
from typing import Iterable


class PathResolutionError(OSError):
    """
    Raised if a root directory can not be made absolute and canonical
    """

    pass


def resolve_root(path: str) -> str:
    try:
        return str(Path(path).expanduser().resolve(strict=True))
    except (OSError, RuntimeError) as why:
        raise PathResolutionError(f'Unable to convert root directory "{path}" to an absolute path: {why}') from why


def is_excluded(path: str, root: str, patterns: Iterable[str]) -> bool:
    """
    Checks path and all of its parents below root against shell-style patterns.
    A pattern matches either the basename or the root relative posix path.
    """
    patterns = list(patterns)
    if not patterns:
        return False

    relative = PurePath(path).relative_to(root)
    for candidate in [relative, *list(relative.parents)[:-1]]:
        for pattern in patterns:
            if fnmatch.fnmatchcase(candidate.name, pattern) or fnmatch.fnmatchcase(candidate.as_posix(), pattern):
                return True

    return False
