"""Read-side contract for query models with repeated keys.

``QueryString`` satisfies it, and so does any framework object that exposes
a request's query as first-value lookups plus ``get_list``. The sort lookups
in ``querykit.sorting`` are typed against it.
"""

from collections.abc import Iterator
from typing import Protocol, runtime_checkable


@runtime_checkable
class MultiValueMapping(Protocol):
    """Keys map to one or more string values, kept in arrival order.

    Indexing and ``get`` see the first value only; ``get_list`` sees all of
    them. Iteration and ``len`` count each key once.
    """

    def __getitem__(self, key: str) -> str: ...
    def __contains__(self, key: object) -> bool: ...
    def __iter__(self) -> Iterator[str]: ...
    def __len__(self) -> int: ...
    def get(self, key: str, default: str | None = None) -> str | None: ...
    def get_list(self, key: str) -> list[str]: ...
