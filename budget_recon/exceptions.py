"""
Request-level errors raised by the entry points.
"""


class ReconciliationError(Exception):
    """Base class for errors that end a summary request."""


class MissingParameterError(ReconciliationError):
    """A required request parameter is missing or blank."""


class UpstreamReadError(ReconciliationError):
    """A required upstream read failed. The message is the upstream one, verbatim."""
