"""Exceptions raised by api-trace."""


class ApiTraceError(Exception):
    """Base class for errors that abort a trace run."""


class RootDirectoryError(ApiTraceError):
    """The root directory to scan does not exist or cannot be listed."""

    def __init__(self, root: str, reason: str):
        self.root = root
        self.reason = reason
        super().__init__(f"Cannot scan root directory {root}: {reason}")


class GraphFrozenError(ApiTraceError):
    """An edge was added after the caller graph was frozen for resolution."""
