"""querykit — derive new URLs from the current query string.

Parses query strings into an ordered, duplicate-aware model, edits them by
key and relative index (replace, remove, add, numeric adjustment, sort
toggling) and serializes them back with correct escaping. Built for template
call sites such as pagination and column-sort links.

Basic usage::

    from querykit import QueryStringHelper

    qs = QueryStringHelper()
    qs.increment_page("city=dallas&page=0")           # "city=dallas&page=1"
    qs.remove_n("name=john&age=30&name=joseph", "name", 1)  # "age=30&name=joseph"

Model usage::

    from querykit import parse_query

    query = parse_query("region=AU&region=NZ").replace_nth({"region": {1: "New Zealand"}})
    str(query)                                         # "region=AU&region=New%20Zealand"

Templates (kida)::

    from querykit.templating.integration import create_environment

    env = create_environment()
    env.from_string("{{ query | increment_page }}").render({"query": "page=2"})
"""

__version__ = "0.1.0"
__all__ = [
    "Escaper",
    "IllegalArgumentError",
    "MalformedQueryStringError",
    "ParseResult",
    "QueryConfig",
    "QueryKitError",
    "QueryParam",
    "QueryParamEscaper",
    "QueryString",
    "QueryStringHelper",
    "SortDirection",
    "SortField",
    "parse_query",
    "try_parse_query",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import querykit`` fast while providing a clean top-level API.
    """
    if name == "QueryStringHelper":
        from querykit.helper import QueryStringHelper

        return QueryStringHelper

    if name == "QueryConfig":
        from querykit.config import QueryConfig

        return QueryConfig

    if name in ("QueryParam", "QueryString", "ParseResult", "parse_query", "try_parse_query"):
        from querykit import query as _query

        return getattr(_query, name)

    if name in ("SortDirection", "SortField"):
        from querykit import sorting as _sorting

        return getattr(_sorting, name)

    if name in ("Escaper", "QueryParamEscaper"):
        from querykit import escaping as _escaping

        return getattr(_escaping, name)

    if name in ("QueryKitError", "MalformedQueryStringError", "IllegalArgumentError"):
        from querykit import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
