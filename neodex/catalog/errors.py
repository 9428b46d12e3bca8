"""
Error types raised by the catalogue layers.

``UpstreamFetchError`` and ``NotFoundError`` reach the API surface and are
turned into HTTP responses there.  ``AuxiliaryDataUnavailable`` never leaves
the aggregation cache: species and evolution data are optional, so the cache
logs it and hands back ``None``.
"""

from typing import Optional


class NeoDexError(Exception):
    """Base class for every error raised by this package."""


class UpstreamFetchError(NeoDexError):
    """The data source could not deliver the document for ``key``."""

    def __init__(self, key: str, message: Optional[str] = None, status_code: Optional[int] = None):
        self.key = key
        self.status_code = status_code
        super().__init__(message or f"Failed to fetch: {key}")


class NotFoundError(UpstreamFetchError):
    """The data source answered 404 for ``key``."""

    def __init__(self, key: str, message: Optional[str] = None):
        super().__init__(key, message or f"Not found: {key}", status_code=404)


class AuxiliaryDataUnavailable(NeoDexError):
    """Species or evolution data could not be resolved."""

    def __init__(self, key: str, cause: Optional[BaseException] = None):
        self.key = key
        self.cause = cause
        super().__init__(f"Auxiliary data unavailable for {key}: {cause}")
