"""querykit exception hierarchy.

Shared by the parser, the sort codec and the helper facade so callers can
catch one base type.
"""


class QueryKitError(Exception):
    """Base for all querykit-specific errors."""


class MalformedQueryStringError(QueryKitError, ValueError):
    """Raised when a non-empty query string violates the ``key=value`` grammar.

    Only parsing raises this. Edits on an already-parsed ``QueryString``
    never do: a missing key or index is a no-op.
    """

    def __init__(self, query_string: str, segment: str, reason: str) -> None:
        self.query_string = query_string
        self.segment = segment
        self.reason = reason
        super().__init__(f"Malformed query string {query_string!r}: segment {segment!r} {reason}")


class IllegalArgumentError(QueryKitError, ValueError):
    """Raised when a caller breaks an argument contract.

    Examples: asking for the ``NONE`` sort direction explicitly, or building
    a URL without a path.
    """
