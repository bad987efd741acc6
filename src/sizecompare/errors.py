"""Exception hierarchy for sizecompare."""


class SizeCompareError(Exception):
    """Base class for all errors raised by sizecompare."""


class ConfigurationError(SizeCompareError):
    """Required configuration (token, repository, commit) is missing or malformed."""


class InvalidKeyPattern(SizeCompareError, ValueError):
    """The correlation key pattern does not compile or has no capture group."""


class SnapshotNotFound(SizeCompareError, LookupError):
    """No snapshot was ever stored for the requested commit."""

    def __init__(self, sha: str):
        super().__init__(f"No snapshot found for commit: {sha}")
        self.sha = sha


class SnapshotExpired(SizeCompareError):
    """A snapshot was stored for the commit but is past its retention period."""

    def __init__(self, sha: str):
        super().__init__(f"Snapshot for commit {sha} has expired")
        self.sha = sha


class SnapshotExists(SizeCompareError):
    """A different snapshot is already stored for the commit."""

    def __init__(self, sha: str):
        super().__init__(f"A different snapshot is already stored for commit: {sha}")
        self.sha = sha


class RefNotFound(SizeCompareError, LookupError):
    """A branch or other ref has no commits to compare."""

    def __init__(self, ref: str):
        super().__init__(f"No commits found on ref: {ref}")
        self.ref = ref
