"""Helper configuration.

QueryConfig names the keys that carry the page number and the sort fields,
and the escaper used when a helper serializes its result. One instance is
shared by every call on a ``QueryStringHelper``.
"""

from dataclasses import dataclass

from querykit.escaping import DEFAULT_ESCAPER, Escaper


@dataclass(frozen=True, slots=True)
class QueryConfig:
    """Conventions the helper applies. Immutable after creation.

    The defaults match Spring-style paging repositories. Override what you need::

        config = QueryConfig(page_key="p", sort_key="order")
    """

    # Paging
    page_key: str = "page"

    # Sorting: values are "field" or "field,direction"
    sort_key: str = "sort"

    # Serialization
    escaper: Escaper = DEFAULT_ESCAPER
