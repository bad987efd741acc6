"""Correlation keys for matching renamed or content-hashed files across commits."""

import logging
import re

from .record import Snapshot
from ..errors import InvalidKeyPattern

logger = logging.getLogger(__name__)


class KeyPattern:
    """Validated regular expression that derives a correlation key from a file path.

    Build tools often emit content-hashed names such as ``chunk.3f9a1c.js``. A pattern like
    ``([^/]+)\\.[0-9a-f]+\\.js$`` captures the stable part, so the same logical artifact is
    matched across two commits even though its literal name changed.

    The key is the concatenation of all capture groups. Groups that did not participate in
    the match contribute an empty string.

    Example:
        pattern = KeyPattern(r'(.*)\\.[0-9a-f]{6}(\\.js)$')
        pattern.extract('/work/dist/chunk.abc123.js')  # -> '/work/dist/chunk.js'
    """

    def __init__(self, pattern: str):
        if not isinstance(pattern, str) or not pattern:
            raise InvalidKeyPattern("Key pattern must be a non-empty string")

        try:
            compiled = re.compile(pattern)
        except re.error as e:
            raise InvalidKeyPattern(f"Invalid key pattern {pattern!r}: {e}") from e

        if compiled.groups < 1:
            raise InvalidKeyPattern(f"Key pattern {pattern!r} must contain at least one capture group")

        self._pattern = compiled

    def __repr__(self) -> str:
        return f"KeyPattern({self._pattern.pattern!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyPattern):
            return False
        return self._pattern.pattern == other._pattern.pattern

    def __hash__(self) -> int:
        return hash(self._pattern.pattern)

    @property
    def pattern(self) -> str:
        return self._pattern.pattern

    def extract(self, path: str) -> str | None:
        match = self._pattern.search(path)
        if match is None:
            return None
        return ''.join(group or '' for group in match.groups())


def annotate(snapshot: Snapshot, pattern: KeyPattern | None) -> Snapshot:
    """Return a copy of the snapshot with every record's key derived from its full path.

    Without a pattern every key is None, so records are matched by name alone.
    """
    if pattern is None:
        return Snapshot(record.with_key(None) for record in snapshot)

    records = []
    for record in snapshot:
        key = pattern.extract(record.full)
        if key is None:
            logger.debug(f"Key pattern did not match: {record.full}")
        records.append(record.with_key(key))
    return Snapshot(records)
