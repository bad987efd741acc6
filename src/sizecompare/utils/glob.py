"""Resolution of user-supplied glob patterns into file paths."""

import glob
import os
import stat
from pathlib import Path
from typing import Iterable


def split_patterns(patterns: str | Iterable[str]) -> list[str]:
    """Normalize patterns given as a multi-line string or a list of lines.

    Blank lines and lines starting with '#' are dropped, surrounding whitespace is removed.
    """
    if isinstance(patterns, str):
        lines = patterns.splitlines()
    else:
        lines = list(patterns)

    result = []
    for line in lines:
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        result.append(line)
    return result


def _with_descendants(paths: set[Path]) -> set[Path]:
    # A matched directory stands for everything beneath it
    result = set(paths)
    for path in paths:
        if path.is_dir():
            for dirpath, _, filenames in os.walk(path):
                result.update(Path(dirpath) / filename for filename in filenames)
    return result


def _expand(root: Path, pattern: str) -> set[Path]:
    if os.path.isabs(pattern):
        matches = glob.glob(pattern, recursive=True, include_hidden=True)
        return _with_descendants({Path(os.path.normpath(m)) for m in matches})

    matches = glob.glob(pattern, root_dir=root, recursive=True, include_hidden=True)
    return _with_descendants({Path(os.path.normpath(root / m)) for m in matches})


def resolve_patterns(root: Path, patterns: str | Iterable[str]) -> list[Path]:
    """Resolve glob patterns to the regular files they match.

    Args:
        root: Directory that relative patterns are evaluated against
        patterns: Glob patterns; '**' matches any number of directories and a leading '!'
                  excludes whatever the rest of the line matches

    Returns:
        Sorted list of absolute paths to regular files. A pattern matching a directory selects
        (or, after '!', excludes) every file beneath it; directories themselves are never returned.
    """
    root = Path(os.path.abspath(root))
    included: set[Path] = set()
    excluded: set[Path] = set()

    for pattern in split_patterns(patterns):
        if pattern.startswith('!'):
            excluded |= _expand(root, pattern[1:].strip())
        else:
            included |= _expand(root, pattern)

    files = []
    for path in included - excluded:
        try:
            st = path.stat()
        except FileNotFoundError:
            continue
        if stat.S_ISREG(st.st_mode):
            files.append(path)

    return sorted(files)
