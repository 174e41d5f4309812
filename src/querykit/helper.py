"""Query string helper for template call sites.

Every method takes the current request's raw query string and returns a new
one, so templates can build pagination and column-sort links without
re-implementing parsing, ordering or escaping::

    from querykit import QueryStringHelper

    qs = QueryStringHelper()
    qs.increment_page("city=dallas&page=0")       # "city=dallas&page=1"
    qs.field_sorter_asc("sort=city")("city")      # "sort=city,desc"
    qs.url("/hotels", qs.reset_page_number(None)) # "/hotels?page=0"

A ``None`` or empty query string is a normal input: edits give ``""``,
reads give ``None``/``[]``/``False``, and operations that add something
give just the added pairs.

Each call parses a fresh ``QueryString``, applies its edits in memory and
serializes once. Nothing is shared between calls.
"""

import logging
from collections.abc import Callable, Collection, Iterable, Mapping, Sequence
from functools import partial

from querykit.config import QueryConfig
from querykit.errors import IllegalArgumentError
from querykit.query import QueryString, try_parse_query
from querykit.sorting import (
    SortDirection,
    SortField,
    coerce_direction,
    current_direction,
    is_field_sorted,
    keep_only,
    set_direction,
    toggle_direction,
)

logger = logging.getLogger("querykit.helper")


class QueryStringHelper:
    """String-in, string-out query string operations.

    Raises ``MalformedQueryStringError`` when a non-empty query string does
    not follow ``key=value&key=value``.
    """

    __slots__ = ("config",)

    def __init__(self, config: QueryConfig | None = None) -> None:
        self.config = config or QueryConfig()

    def _emit(self, query: QueryString) -> str:
        return query.serialize(self.config.escaper)

    def _parse(self, query_string: str | None) -> QueryString:
        result = try_parse_query(query_string)
        if not result:
            logger.debug("Rejecting query string: %s", result.error)
            raise result.error
        return result.query

    # ── Replacing ────────────────────────────────────────────────────────

    def replace_first(self, query_string: str | None, key: str, value: str) -> str:
        """Replace the first value of *key*, keeping the original order.

        ::

            replace_first("suburb=west&region=AU&postcode=494849", "region", "Australia")
            → "suburb=west&region=Australia&postcode=494849"
        """
        return self._emit(self._parse(query_string).replace_first(key, str(value)))

    def replace_nth(self, query_string: str | None, instructions: Mapping[str, Mapping[int, str]]) -> str:
        """Replace values by key and relative index.

        ::

            replace_nth("region=AU&suburb=west&region=Australia&postcode=494849&region=AUS",
                        {"region": {1: "Auckland", 2: "AUKL"}})
            → "region=AU&suburb=west&region=Auckland&postcode=494849&region=AUKL"
        """
        coerced = {key: {index: str(value) for index, value in values.items()} for key, values in instructions.items()}
        return self._emit(self._parse(query_string).replace_nth(coerced))

    def replace_n(self, query_string: str | None, key: str, values: Sequence[str]) -> str:
        """Replace the first ``len(values)`` values of *key*, in order.

        ::

            replace_n("name=john&age=30&name=joseph&month=march&name=smith", "name", ["mary", "rose"])
            → "name=mary&age=30&name=rose&month=march&name=smith"
        """
        return self._emit(self._parse(query_string).replace_n(key, [str(value) for value in values]))

    # ── Removing ─────────────────────────────────────────────────────────

    def remove_first(self, query_string: str | None, key: str) -> str:
        return self._emit(self._parse(query_string).remove_first(key))

    def remove_all(self, query_string: str | None, keys: Collection[str]) -> str:
        """Remove every occurrence of each key in *keys*.

        ::

            remove_all("region=AU&suburb=west&region=Australia&postcode=494849&region=AUS&language=en",
                       ["region", "postcode"])
            → "suburb=west&language=en"
        """
        return self._emit(self._parse(query_string).remove_all(keys))

    def remove_n(self, query_string: str | None, key: str, n: int) -> str:
        """Remove the first *n* occurrences of *key*."""
        return self._emit(self._parse(query_string).remove_n(key, n))

    def remove_nth(self, query_string: str | None, key: str, index: int) -> str:
        return self._emit(self._parse(query_string).remove_nth(key, index))

    def remove_many_nth(self, query_string: str | None, key: str, indexes: Iterable[int]) -> str:
        """Remove several relative indexes of *key* at once.

        ::

            remove_many_nth("name=john&age=30&name=joseph&month=march&name=smith", "name", [0, 2])
            → "age=30&name=joseph&month=march"
        """
        return self._emit(self._parse(query_string).remove_many_nth(key, indexes))

    def remove_key_matching_value(self, query_string: str | None, key: str, value: str) -> str:
        return self._emit(self._parse(query_string).remove_key_matching_value(key, value))

    def remove_any_key_matching_value(self, query_string: str | None, value: str) -> str:
        return self._emit(self._parse(query_string).remove_any_key_matching_value(value))

    # ── Reading ──────────────────────────────────────────────────────────

    def get_first_value(self, query_string: str | None, key: str) -> str | None:
        return self._parse(query_string).first_value(key)

    def get_all_values(self, query_string: str | None, key: str) -> list[str]:
        return self._parse(query_string).all_values(key)

    # ── Adding ───────────────────────────────────────────────────────────

    def add(self, query_string: str | None, key: str, value: str) -> str:
        """Append ``key=value`` unless that exact pair already exists.

        ::

            add("name=john&age=30", "city", "san francisco")
            → "name=john&age=30&city=san%20francisco"
            add("name=john&age=30", "name", "john")
            → "name=john&age=30"
        """
        return self._emit(self._parse(query_string).add(key, str(value)))

    def add_all(self, query_string: str | None, pairs: Iterable[Sequence[str]]) -> str:
        return self._emit(self._parse(query_string).add_all(pairs))

    def remove_all_and_add(
        self,
        query_string: str | None,
        remove_keys: Collection[str],
        add_pairs: Iterable[Sequence[str]],
    ) -> str:
        """Remove every occurrence of *remove_keys*, then ``add_all(add_pairs)``.

        ::

            remove_all_and_add("sort=country,asc&sort=city,desc&location=AU&region=north&postcode=4931495",
                               ["postcode", "sort"], [["sort", "city,desc"]])
            → "location=AU&region=north&sort=city,desc"
        """
        return self._emit(self._parse(query_string).remove_all(remove_keys).add_all(add_pairs))

    def remove_nth_and_add(
        self,
        query_string: str | None,
        remove_instructions: Mapping[str, Iterable[int]],
        add_pairs: Iterable[Sequence[str]],
    ) -> str:
        """``remove_many_nth`` for every key in *remove_instructions*, then add.

        ::

            remove_nth_and_add("sort=country,asc&sort=city,desc&location=AU&region=north&region=upper&region=border",
                               {"sort": [0], "region": [1, 2]}, [["postcode", "39481"], ["locale", "AU"]])
            → "sort=city,desc&location=AU&region=north&postcode=39481&locale=AU"

        Relative indexes are scoped to their key, so the removals do not
        affect each other.
        """
        query = self._parse(query_string)
        for key, indexes in remove_instructions.items():
            query = query.remove_many_nth(key, indexes)
        return self._emit(query.add_all(add_pairs))

    # ── Numeric ──────────────────────────────────────────────────────────

    def adjust_numeric_value_by(
        self,
        query_string: str | None,
        key: str,
        indexes: Iterable[int],
        delta: int,
    ) -> str:
        """Add *delta* to the numeric values of *key* at the given relative indexes.

        ::

            adjust_numeric_value_by("policy=10&sort=country&policy=20&location=AU&border=north&policy=30",
                                    "policy", [1, 2], 5)
            → "policy=10&sort=country&policy=25&location=AU&border=north&policy=35"

        Non-numeric values are left alone. Use a negative *delta* to decrement.
        """
        return self._emit(self._parse(query_string).adjust_numeric_value_by(key, indexes, delta))

    def adjust_first_numeric_value_by(self, query_string: str | None, key: str, delta: int) -> str:
        return self.adjust_numeric_value_by(query_string, key, (0,), delta)

    # ── Paging ───────────────────────────────────────────────────────────

    def increment_page(self, query_string: str | None, max_bound: int | None = None) -> str:
        """Add 1 to the page number.

        A missing page means an implicit page 0, so ``page=1`` is appended.
        With *max_bound* (usually ``total_pages - 1``) the page only moves
        while it is below the bound.
        """
        page_key = self.config.page_key
        query = self._parse(query_string)
        if query.first_value(page_key) is None:
            if max_bound is None or max_bound > 0:
                query = query.add(page_key, "1")
            return self._emit(query)
        if max_bound is None:
            return self._emit(query.adjust_numeric_value_by(page_key, (0,), 1))
        bound = max_bound
        return self._emit(query.adjust_numeric_value_by(page_key, (0,), 1, lambda current: current < bound))

    def decrement_page(self, query_string: str | None) -> str:
        """Subtract 1 from the page number, never going below 0.

        A missing page becomes ``page=0``.
        """
        page_key = self.config.page_key
        query = self._parse(query_string)
        if query.first_value(page_key) is None:
            return self._emit(query.add(page_key, "0"))
        return self._emit(query.adjust_numeric_value_by(page_key, (0,), -1, lambda current: current > 0))

    def reset_page_number(self, query_string: str | None) -> str:
        return self.set_page_number(query_string, 0)

    def set_page_number(self, query_string: str | None, number: int | str) -> str:
        page_key = self.config.page_key
        query = self._parse(query_string)
        if query.first_value(page_key) is None:
            return self._emit(query.add(page_key, str(number)))
        return self._emit(query.replace_first(page_key, str(number)))

    def get_page_number(self, query_string: str | None) -> str | None:
        return self.get_first_value(query_string, self.config.page_key)

    # ── Sorting ──────────────────────────────────────────────────────────

    def set_sort_direction_asc(self, query_string: str | None, field: str) -> str:
        return self._set_sort_direction(query_string, field, SortDirection.ASC)

    def set_sort_direction_desc(self, query_string: str | None, field: str) -> str:
        return self._set_sort_direction(query_string, field, SortDirection.DESC)

    def _set_sort_direction(self, query_string: str | None, field: str, direction: SortDirection) -> str:
        query = self._parse(query_string)
        return self._emit(set_direction(query, field, direction, key=self.config.sort_key))

    def toggle_sort_default_asc(self, query_string: str | None, field: str) -> str:
        """Flip *field*'s direction, reading an implicit direction as ``asc``.

        ::

            toggle_sort_default_asc("city=dallas&sort=country&page=1", "country")
            → "city=dallas&sort=country,desc&page=1"
        """
        return self._toggle(query_string, field, SortDirection.ASC)

    def toggle_sort_default_desc(self, query_string: str | None, field: str) -> str:
        """Flip *field*'s direction, reading an implicit direction as ``desc``."""
        return self._toggle(query_string, field, SortDirection.DESC)

    def _toggle(self, query_string: str | None, field: str, default: SortDirection) -> str:
        query = self._parse(query_string)
        return self._emit(toggle_direction(query, field, default, key=self.config.sort_key))

    def keep_sort_field(self, query_string: str | None, field: str) -> str:
        """Remove every sort key except those sorting by *field*.

        ::

            keep_sort_field("city=melbourne&sort=country,asc&sort=city,desc&sort=postcode", "city")
            → "city=melbourne&sort=city,desc"
        """
        return self._emit(keep_only(self._parse(query_string), field, key=self.config.sort_key))

    def is_field_sorted(self, query_string: str | None, field: str) -> bool:
        return is_field_sorted(self._parse(query_string), field, key=self.config.sort_key)

    def get_current_sort_direction_asc(self, query_string: str | None, field: str) -> str | None:
        return self._current_direction(query_string, field, SortDirection.ASC)

    def get_current_sort_direction_desc(self, query_string: str | None, field: str) -> str | None:
        return self._current_direction(query_string, field, SortDirection.DESC)

    def _current_direction(self, query_string: str | None, field: str, default: SortDirection) -> str | None:
        query = self._parse(query_string)
        return current_direction(query, field, default, key=self.config.sort_key)

    def field_sorter(
        self,
        query_string: str | None,
        field: str,
        default: SortDirection | str = SortDirection.ASC,
    ) -> str:
        """Build the link for clicking a sortable column header.

        If *field* is already sorted, it is toggled (an implicit direction
        counts as *default*) and every other sort key is dropped. Otherwise
        all sort keys are dropped and ``sort=field,default`` is appended.

        ::

            field_sorter("city=melbourne&sort=country,asc&sort=city", "city")
            → "city=melbourne&sort=city,desc"
            field_sorter("city=melbourne&sort=country,asc&sort=city", "location")
            → "city=melbourne&sort=location,asc"
        """
        default = coerce_direction(default)
        if default is SortDirection.NONE:
            msg = "field_sorter needs an explicit default direction, 'asc' or 'desc'"
            raise IllegalArgumentError(msg)
        sort_key = self.config.sort_key
        new_sort = SortField(field, default.value).encode()
        if query_string is None or not query_string.strip():
            return self._emit(QueryString().add(sort_key, new_sort))

        query = keep_only(self._parse(query_string), field, key=sort_key)
        if is_field_sorted(query, field, key=sort_key):
            return self._emit(toggle_direction(query, field, default, key=sort_key))
        return self._emit(query.remove_all((sort_key,)).add(sort_key, new_sort))

    def field_sorter_asc(self, query_string: str | None) -> Callable[[str], str]:
        """``field_sorter`` bound to *query_string* with default ``asc``.

        Bind once per table, then call per column::

            sorter = qs.field_sorter_asc(request_query)
            name_link = sorter("name")
            stars_link = sorter("stars")
        """
        return partial(self.field_sorter, query_string, default=SortDirection.ASC)

    def field_sorter_desc(self, query_string: str | None) -> Callable[[str], str]:
        return partial(self.field_sorter, query_string, default=SortDirection.DESC)

    def value_when_matches_sort_asc(
        self,
        query_string: str | None,
        missing: str,
        matching: str,
        non_matching: str,
    ) -> Callable[[str], str]:
        """Pick a value (a CSS class, a title) by a field's sort state.

        The returned function gives *missing* when the field is not sorted,
        *matching* when its direction (implicit counts as ``asc``) is
        ``asc``, and *non_matching* otherwise::

            value_when_matches_sort_asc("sort=city", "", "sorted-asc", "sorted-desc")("city")
            → "sorted-asc"
        """
        return self._value_when_matches(query_string, missing, matching, non_matching, SortDirection.ASC)

    def value_when_matches_sort_desc(
        self,
        query_string: str | None,
        missing: str,
        matching: str,
        non_matching: str,
    ) -> Callable[[str], str]:
        return self._value_when_matches(query_string, missing, matching, non_matching, SortDirection.DESC)

    def _value_when_matches(
        self,
        query_string: str | None,
        missing: str,
        matching: str,
        non_matching: str,
        direction: SortDirection,
    ) -> Callable[[str], str]:
        query = self._parse(query_string)
        sort_key = self.config.sort_key

        def pick(field: str) -> str:
            current = current_direction(query, field, direction, key=sort_key)
            if current is None:
                return missing
            return matching if current == direction else non_matching

        return pick

    def create_new_sort(self, query_string: str | None, field_and_directions: Iterable[str]) -> str:
        """Replace all sort keys with new ones appended at the end.

        ::

            create_new_sort("city=melbourne&page=0&sort=stars,desc&sort=name", ["city,desc", "suburb"])
            → "city=melbourne&page=0&sort=city,desc&sort=suburb"
        """
        sort_key = self.config.sort_key
        pairs = [(sort_key, value) for value in field_and_directions]
        return self.remove_all_and_add(query_string, (sort_key,), pairs)

    # ── URLs ─────────────────────────────────────────────────────────────

    def url(self, path: str, query_string: str | None) -> str:
        """Join a request path and query string.

        Raises ``IllegalArgumentError`` when *path* is empty.
        """
        if not path:
            msg = "URL path cannot be None or empty"
            raise IllegalArgumentError(msg)
        if not query_string:
            return path
        return f"{path}?{query_string}"

    def url_builder(self, path: str) -> Callable[[str | None], str]:
        """``url`` bound to *path*, for templates that build many links."""
        return partial(self.url, path)
