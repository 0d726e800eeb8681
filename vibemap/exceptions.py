"""Errors raised by the clustering index."""


class VibemapError(Exception):
    """Base class for vibemap errors."""


class InvalidHandle(VibemapError, LookupError):
    """
    A cluster handle does not belong to the current index build.

    Raised when a handle outlives a rebuild, or names a node the index does
    not hold. Recoverable: query the current index again for fresh handles.
    """

    def __init__(self, handle, reason: str = "handle does not belong to this index build"):
        self.handle = handle
        self.reason = reason
        super().__init__(f"{reason}: {handle!r}")
