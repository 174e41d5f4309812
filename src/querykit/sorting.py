"""Sort-field codec layered on the ``sort`` key.

A ``sort`` value is ``field`` or ``field,direction``. Without a direction
the sort is *implicit*, and only resolves once a caller supplies a default
(the order a paging repository applies when none is given)::

    sort=country,asc&sort=city        # city has an implicit direction

Directions other than ``asc``/``desc`` are kept as opaque text. They never
raise, they just never match.

Edits go through ``QueryString`` and return a new model; there is no
separate sort storage. The read-only lookups (``current_direction``,
``is_field_sorted``) only need ``get_list``, so they also accept any other
``MultiValueMapping``, such as a web framework's parsed request query.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum

from querykit._internal.multimap import MultiValueMapping
from querykit.errors import IllegalArgumentError
from querykit.query import QueryString

SORT_KEY = "sort"
SORT_SEPARATOR = ","


class SortDirection(StrEnum):
    """Explicit sort directions. ``NONE`` is the "no direction" sentinel."""

    ASC = "asc"
    DESC = "desc"
    NONE = ""

    @property
    def opposite(self) -> SortDirection:
        match self:
            case SortDirection.ASC:
                return SortDirection.DESC
            case SortDirection.DESC:
                return SortDirection.ASC
            case _:
                return SortDirection.NONE


@dataclass(frozen=True, slots=True)
class SortField:
    """A decoded ``sort`` value. ``direction`` is ``None`` when implicit."""

    field: str
    direction: str | None = None

    @property
    def is_implicit(self) -> bool:
        return self.direction is None

    def resolve(self, default: SortDirection) -> str | None:
        """The explicit direction, else *default* (``None`` for ``NONE``)."""
        if self.direction is not None:
            return self.direction
        return default.value or None

    def encode(self) -> str:
        if self.direction is None:
            return self.field
        return f"{self.field}{SORT_SEPARATOR}{self.direction}"


def decode_sort(value: str) -> SortField:
    """Split a ``sort`` value on its first comma.

    ``"city,desc"`` -> ``SortField("city", "desc")``;
    ``"city"`` and ``"city,"`` -> ``SortField("city", None)``.
    """
    name, _, direction = value.partition(SORT_SEPARATOR)
    return SortField(name, direction or None)


def coerce_direction(direction: SortDirection | str) -> SortDirection:
    """Accept ``"asc"``/``"desc"``/``""`` or a member; raise ``IllegalArgumentError`` otherwise."""
    try:
        return SortDirection(direction)
    except ValueError:
        msg = f"Invalid sort direction {direction!r}, expected 'asc' or 'desc'"
        raise IllegalArgumentError(msg) from None


def _sort_fields(query: MultiValueMapping, key: str) -> Iterator[tuple[int, SortField]]:
    for index, value in enumerate(query.get_list(key)):
        yield index, decode_sort(value)


def _first_match(query: MultiValueMapping, field: str, key: str) -> tuple[int, SortField] | None:
    for index, sort in _sort_fields(query, key):
        if sort.field == field:
            return index, sort
    return None


def current_direction(
    query: MultiValueMapping,
    field: str,
    default: SortDirection | str,
    *,
    key: str = SORT_KEY,
) -> str | None:
    """Direction of the first ``sort`` occurrence for *field*.

    An implicit direction resolves to *default*. Returns ``None`` when
    *field* is not sorted.
    """
    found = _first_match(query, field, key)
    if found is None:
        return None
    return found[1].resolve(coerce_direction(default))


def is_field_sorted(query: MultiValueMapping, field: str, *, key: str = SORT_KEY) -> bool:
    return _first_match(query, field, key) is not None


def set_direction(
    query: QueryString,
    field: str,
    direction: SortDirection | str,
    *,
    key: str = SORT_KEY,
) -> QueryString:
    """Rewrite the first ``sort`` occurrence for *field* to ``field,direction``.

    Raises ``IllegalArgumentError`` for ``SortDirection.NONE``: only ``asc``
    and ``desc`` can be set explicitly. No-op when *field* is not sorted.
    """
    direction = coerce_direction(direction)
    if direction is SortDirection.NONE:
        msg = f"Invalid sort direction {direction!r}, expected 'asc' or 'desc'"
        raise IllegalArgumentError(msg)
    found = _first_match(query, field, key)
    if found is None:
        return query
    index, _ = found
    return query.replace_nth({key: {index: SortField(field, direction.value).encode()}})


def toggle_direction(
    query: QueryString,
    field: str,
    default: SortDirection | str,
    *,
    key: str = SORT_KEY,
) -> QueryString:
    """Flip the direction of *field* (``asc`` <-> ``desc``).

    An implicit direction counts as *default* before flipping, so
    ``sort=city`` with default ``asc`` becomes ``sort=city,desc``. An opaque
    direction is replaced with *default*.
    """
    default = coerce_direction(default)
    found = _first_match(query, field, key)
    if found is None:
        return query
    resolved = found[1].resolve(default)
    if resolved in (SortDirection.ASC, SortDirection.DESC):
        target = SortDirection(resolved).opposite
    else:
        target = default
    if target is SortDirection.NONE:
        return query
    return set_direction(query, field, target, key=key)


def keep_only(query: QueryString, field: str, *, key: str = SORT_KEY) -> QueryString:
    """Drop every ``sort`` occurrence whose field is not *field*.

    When nothing sorts by *field*, every ``sort`` occurrence goes.
    """
    others = [index for index, sort in _sort_fields(query, key) if sort.field != field]
    return query.remove_many_nth(key, others)
