"""Immutable, order-preserving query string model.

Implements the ``MultiValueMapping`` protocol on top of an ordered tuple of
``QueryParam`` pairs. Duplicate keys are kept as separate occurrences, and
each occurrence is addressed by its *relative index*: its position among
the occurrences of the same key, counted left to right.

Every edit returns a new ``QueryString``. The original is never mutated::

    query = parse_query("name=john&age=30&name=joseph")
    query.remove_nth("name", 1).add("city", "san francisco").serialize()
    # "name=john&age=30&city=san%20francisco"

Edits that reference a missing key or index are no-ops, so edits can be
chained without existence checks. Only parsing fails.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Collection, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field, replace

from querykit.errors import IllegalArgumentError, MalformedQueryStringError
from querykit.escaping import DEFAULT_ESCAPER, Escaper

PAIR_SEPARATOR = "&"
KEY_VALUE_SEPARATOR = "="

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def _always(current: int) -> bool:
    return True


@dataclass(frozen=True, slots=True)
class QueryParam:
    """A single ``key=value`` occurrence. The value is stored as received."""

    key: str
    value: str

    def with_value(self, value: str) -> QueryParam:
        return replace(self, value=value)


@dataclass(frozen=True, slots=True)
class QueryString:
    """Ordered, duplicate-aware query string.

    ``__getitem__`` returns the first value for a key.
    ``get_list`` returns all values for a key.
    Iteration yields distinct keys in order of first appearance;
    ``params`` holds every occurrence.
    """

    params: tuple[QueryParam, ...] = ()

    @classmethod
    def from_pairs(cls, pairs: Iterable[Sequence[str]]) -> QueryString:
        """Build a query string from ``(key, value)`` pairs, keeping duplicates."""
        return cls(tuple(QueryParam(key, value) for key, value in coerce_pairs(pairs)))

    # ── Reading ──────────────────────────────────────────────────────────

    def first_value(self, key: str) -> str | None:
        """Value of the first occurrence of *key*, or ``None``."""
        for param in self.params:
            if param.key == key:
                return param.value
        return None

    def all_values(self, key: str) -> list[str]:
        """Values of every occurrence of *key*, in source order."""
        return [param.value for param in self.params if param.key == key]

    def is_key_present(self, key: str) -> bool:
        return any(param.key == key for param in self.params)

    def __getitem__(self, key: str) -> str:
        value = self.first_value(key)
        if value is None:
            raise KeyError(key)
        return value

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.is_key_present(key)

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(param.key for param in self.params))

    def __len__(self) -> int:
        return len({param.key for param in self.params})

    def __str__(self) -> str:
        return self.serialize()

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return the first value for *key*, or *default* if missing."""
        value = self.first_value(key)
        return default if value is None else value

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return self.all_values(key)

    # ── Replacing ────────────────────────────────────────────────────────

    def replace_first(self, key: str, value: str) -> QueryString:
        """Rewrite the value at relative index 0 of *key*."""
        return self._rewrite(lambda index, param: value if param.key == key and index == 0 else None)

    def replace_nth(self, instructions: Mapping[str, Mapping[int, str]]) -> QueryString:
        """Rewrite values by key and relative index.

        ::

            query.replace_nth({"region": {1: "Auckland", 2: "AUKL"}})

        Keys or indexes that do not exist are skipped.
        """

        def rewrite(index: int, param: QueryParam) -> str | None:
            replacements = instructions.get(param.key)
            if not replacements:
                return None
            return replacements.get(index)

        return self._rewrite(rewrite)

    def replace_n(self, key: str, values: Sequence[str]) -> QueryString:
        """Rewrite the first ``len(values)`` occurrences of *key*, in order.

        Extra values are ignored; extra occurrences keep their value.
        """
        values = list(values)
        return self._rewrite(
            lambda index, param: values[index] if param.key == key and index < len(values) else None
        )

    # ── Removing ─────────────────────────────────────────────────────────

    def remove_first(self, key: str) -> QueryString:
        return self.remove_nth(key, 0)

    def remove_all(self, keys: Collection[str]) -> QueryString:
        """Drop every occurrence of every key in *keys*."""
        targets = frozenset((keys,) if isinstance(keys, str) else keys)
        return self._drop(lambda index, param: param.key in targets)

    def remove_n(self, key: str, n: int) -> QueryString:
        """Drop the first *n* occurrences of *key* (``dropN``).

        ``n <= 0`` removes nothing; ``n`` past the last occurrence removes all.
        """
        if n <= 0:
            return self
        return self._drop(lambda index, param: param.key == key and index < n)

    def remove_nth(self, key: str, index: int) -> QueryString:
        return self.remove_many_nth(key, (index,))

    def remove_many_nth(self, key: str, indexes: Iterable[int]) -> QueryString:
        """Drop the occurrences of *key* whose relative index is in *indexes*."""
        targets = frozenset(indexes)
        return self._drop(lambda index, param: param.key == key and index in targets)

    def remove_key_matching_value(self, key: str, value: str) -> QueryString:
        """Drop occurrences of *key* whose value equals *value* (case-sensitive)."""
        return self._drop(lambda index, param: param.key == key and param.value == value)

    def remove_any_key_matching_value(self, value: str) -> QueryString:
        """Drop every occurrence whose value equals *value*, whatever its key."""
        return self._drop(lambda index, param: param.value == value)

    # ── Adding ───────────────────────────────────────────────────────────

    def add(self, key: str, value: str) -> QueryString:
        """Append ``key=value`` unless exactly that pair is already present."""
        param = QueryParam(key, value)
        if param in self.params:
            return self
        return replace(self, params=(*self.params, param))

    def add_all(self, pairs: Iterable[Sequence[str]]) -> QueryString:
        """``add`` each pair in order; repeated pairs collapse to one."""
        query = self
        for key, value in coerce_pairs(pairs):
            query = query.add(key, value)
        return query

    # ── Numeric ──────────────────────────────────────────────────────────

    def adjust_numeric_value_by(
        self,
        key: str,
        indexes: Iterable[int],
        delta: int,
        predicate: Callable[[int], bool] = _always,
    ) -> QueryString:
        """Add *delta* to integer values of *key* at the given relative indexes.

        Values that are not integers, or for which ``predicate(current)`` is
        false, are left as they are.
        """
        targets = frozenset(indexes)

        def rewrite(index: int, param: QueryParam) -> str | None:
            if param.key != key or index not in targets:
                return None
            if not _INTEGER_RE.fullmatch(param.value):
                return None
            current = int(param.value)
            if not predicate(current):
                return None
            return str(current + delta)

        return self._rewrite(rewrite)

    # ── Serialization ────────────────────────────────────────────────────

    def serialize(self, escaper: Escaper = DEFAULT_ESCAPER) -> str:
        """Join pairs as ``key=escaped-value`` with ``&``. Keys are emitted as-is."""
        return PAIR_SEPARATOR.join(
            f"{param.key}{KEY_VALUE_SEPARATOR}{escaper.escape(param.value)}" for param in self.params
        )

    # ── Internals ────────────────────────────────────────────────────────

    def _relative(self) -> Iterator[tuple[int, QueryParam]]:
        """Yield ``(relative_index, param)`` for every occurrence."""
        seen: dict[str, int] = {}
        for param in self.params:
            index = seen.get(param.key, 0)
            seen[param.key] = index + 1
            yield index, param

    def _drop(self, predicate: Callable[[int, QueryParam], bool]) -> QueryString:
        kept = tuple(param for index, param in self._relative() if not predicate(index, param))
        if len(kept) == len(self.params):
            return self
        return replace(self, params=kept)

    def _rewrite(self, rewrite: Callable[[int, QueryParam], str | None]) -> QueryString:
        # rewrite() returns the new value, or None to keep the occurrence as is
        params: list[QueryParam] = []
        changed = False
        for index, param in self._relative():
            value = rewrite(index, param)
            if value is None or value == param.value:
                params.append(param)
            else:
                params.append(param.with_value(value))
                changed = True
        if not changed:
            return self
        return replace(self, params=tuple(params))


EMPTY = QueryString()


@dataclass(frozen=True, slots=True)
class ParseResult:
    """The outcome of parsing a raw query string.

    Falsy when parsing failed, so callers can branch on it::

        result = try_parse_query(raw)
        if not result:
            raise result.error
        query = result.query

    ``query`` is the empty model when ``error`` is set.
    """

    query: QueryString = field(default=EMPTY)
    error: MalformedQueryStringError | None = None

    @property
    def is_valid(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.is_valid


def _segment_problem(segment: str, key: str, separator: str) -> str | None:
    if not segment:
        return "is empty"
    if not separator:
        return f"has no {KEY_VALUE_SEPARATOR!r}"
    if not key:
        return "has an empty key"
    return None


def try_parse_query(raw: str | None) -> ParseResult:
    """Parse *raw* without raising. See ``parse_query`` for the grammar."""
    if not raw:
        return ParseResult()
    params: list[QueryParam] = []
    for segment in raw.split(PAIR_SEPARATOR):
        key, separator, value = segment.partition(KEY_VALUE_SEPARATOR)
        problem = _segment_problem(segment, key, separator)
        if problem is not None:
            return ParseResult(error=MalformedQueryStringError(raw, segment, problem))
        params.append(QueryParam(key, value))
    return ParseResult(query=QueryString(tuple(params)))


def parse_query(raw: str | None) -> QueryString:
    """Parse a raw query string (no leading ``?``).

    ``None`` and ``""`` give the empty model. Otherwise *raw* must be
    ``key=value`` segments joined by ``&``; each segment is split on its
    first ``=``. Empty values are allowed (``flag=``).

    Raises ``MalformedQueryStringError`` for an empty segment, a segment
    without ``=``, or an empty key.
    """
    result = try_parse_query(raw)
    if result.error is not None:
        raise result.error
    return result.query


def coerce_pairs(pairs: Iterable[Sequence[str]]) -> list[tuple[str, str]]:
    """Normalize ``[[key, value], ...]`` into a list of string tuples.

    Template callers pass lists, and page numbers often arrive as ints,
    so both members go through ``str()``.
    """
    normalized: list[tuple[str, str]] = []
    for pair in pairs:
        if isinstance(pair, str) or len(pair) != 2:
            msg = f"Expected a (key, value) pair, got {pair!r}"
            raise IllegalArgumentError(msg)
        key, value = pair
        normalized.append((str(key), str(value)))
    return normalized
