"""Query parameter escaping.

The model never encodes values itself. Serialization goes through an
``Escaper``, and ``QueryParamEscaper`` is the default one.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable
from urllib.parse import quote, unquote_plus

# RFC 3986 query characters minus the ones that delimit pairs (& = + #).
# Letters, digits and "_.-~" are always safe for quote().
QUERY_PARAM_SAFE = "!$'()*,;:@/?"


@runtime_checkable
class Escaper(Protocol):
    """Anything that can percent-encode a single query parameter value."""

    def escape(self, value: str) -> str: ...


@dataclass(frozen=True, slots=True)
class QueryParamEscaper:
    """Percent-encode a value for use after ``key=`` in a query string.

    Existing escapes are decoded first, so a value that arrived encoded
    (``san%20francisco``) and one that did not (``san francisco``) both
    serialize to ``san%20francisco``. ``+`` is read as a space, following
    form encoding.
    """

    safe: str = QUERY_PARAM_SAFE

    def escape(self, value: str) -> str:
        return quote(unquote_plus(value), safe=self.safe)


DEFAULT_ESCAPER = QueryParamEscaper()


def escape_query_param(value: str) -> str:
    """Escape *value* with the default escaper."""
    return DEFAULT_ESCAPER.escape(value)
