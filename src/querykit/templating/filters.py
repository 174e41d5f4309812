"""querykit template filters and globals.

Every helper operation that takes the query string first is exposed as a
filter, so templates read left to right from the current query::

    <a href="{{ path | url(query | increment_page) }}">Next</a>
    <a href="{{ path | url(query | remove_all_and_add(["sort"], [["sort", "city,desc"]])) }}">City</a>

Operations that return functions (``field_sorter_asc``, ``url_builder``,
``value_when_matches_sort_asc``...) are reached through the ``qs`` global.
"""

from collections.abc import Callable
from typing import Any

from querykit.helper import QueryStringHelper

FILTER_NAMES: tuple[str, ...] = (
    "add",
    "add_all",
    "adjust_first_numeric_value_by",
    "adjust_numeric_value_by",
    "create_new_sort",
    "decrement_page",
    "field_sorter",
    "get_all_values",
    "get_current_sort_direction_asc",
    "get_current_sort_direction_desc",
    "get_first_value",
    "get_page_number",
    "increment_page",
    "is_field_sorted",
    "keep_sort_field",
    "remove_all",
    "remove_all_and_add",
    "remove_any_key_matching_value",
    "remove_first",
    "remove_key_matching_value",
    "remove_many_nth",
    "remove_n",
    "remove_nth",
    "remove_nth_and_add",
    "replace_first",
    "replace_n",
    "replace_nth",
    "reset_page_number",
    "set_page_number",
    "set_sort_direction_asc",
    "set_sort_direction_desc",
    "toggle_sort_default_asc",
    "toggle_sort_default_desc",
    "url",
)


def build_filters(helper: QueryStringHelper) -> dict[str, Callable[..., Any]]:
    """Bind every filter to *helper* (and so to its ``QueryConfig``)."""
    return {name: getattr(helper, name) for name in FILTER_NAMES}


def build_globals(helper: QueryStringHelper) -> dict[str, Any]:
    return {
        "qs": helper,
        "url_builder": helper.url_builder,
    }


DEFAULT_HELPER = QueryStringHelper()

# Filters and globals bound to the default configuration.
BUILTIN_FILTERS: dict[str, Callable[..., Any]] = build_filters(DEFAULT_HELPER)
BUILTIN_GLOBALS: dict[str, Any] = build_globals(DEFAULT_HELPER)
