"""
Domain errors for the cookie jar data layer.

Every error carries a stable `code` so that structured results
(`{success: false, error: ...}`) and HTTP responses can report the
failure kind without leaking internals.
"""


class CookieJarError(Exception):
    """Base class for all data-layer errors."""

    code = "Error"


class ValidationError(CookieJarError):
    """A required field is missing or empty (e.g. a blank project name)."""

    code = "ValidationError"


class DuplicateName(CookieJarError):
    """Another project already uses the requested name."""

    code = "DuplicateName"


class NotFound(CookieJarError):
    """The target id of an update/status-change/delete does not exist."""

    code = "NotFound"


class InvalidData(CookieJarError):
    """An import payload is absent or malformed."""

    code = "InvalidData"


class IOFailure(CookieJarError):
    """The durable store could not be read or written.

    The message carries the underlying driver error.
    """

    code = "IOFailure"
