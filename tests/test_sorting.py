"""Tests for querykit.sorting — sort-field codec."""

from collections.abc import Iterator

import pytest

from querykit._internal.multimap import MultiValueMapping
from querykit.errors import IllegalArgumentError
from querykit.query import parse_query
from querykit.sorting import (
    SortDirection,
    SortField,
    coerce_direction,
    current_direction,
    decode_sort,
    is_field_sorted,
    keep_only,
    set_direction,
    toggle_direction,
)


class TestSortDirection:
    def test_values(self) -> None:
        assert SortDirection.ASC == "asc"
        assert SortDirection.DESC == "desc"
        assert SortDirection.NONE == ""

    def test_opposite(self) -> None:
        assert SortDirection.ASC.opposite is SortDirection.DESC
        assert SortDirection.DESC.opposite is SortDirection.ASC
        assert SortDirection.NONE.opposite is SortDirection.NONE

    def test_coerce_accepts_strings(self) -> None:
        assert coerce_direction("desc") is SortDirection.DESC

    def test_coerce_rejects_unknown(self) -> None:
        with pytest.raises(IllegalArgumentError):
            coerce_direction("sideways")


class TestDecode:
    def test_field_only(self) -> None:
        assert decode_sort("city") == SortField("city", None)
        assert decode_sort("city").is_implicit

    def test_field_and_direction(self) -> None:
        assert decode_sort("city,desc") == SortField("city", "desc")

    def test_trailing_comma_is_implicit(self) -> None:
        assert decode_sort("city,") == SortField("city", None)

    def test_split_on_first_comma(self) -> None:
        assert decode_sort("city,asc,extra") == SortField("city", "asc,extra")

    def test_nested_field_name(self) -> None:
        assert decode_sort("address.suburb,desc").field == "address.suburb"

    def test_encode(self) -> None:
        assert SortField("city").encode() == "city"
        assert SortField("city", "asc").encode() == "city,asc"

    def test_resolve(self) -> None:
        assert SortField("city").resolve(SortDirection.DESC) == "desc"
        assert SortField("city", "asc").resolve(SortDirection.DESC) == "asc"
        assert SortField("city").resolve(SortDirection.NONE) is None


class TestCurrentDirection:
    def test_implicit_uses_default(self) -> None:
        q = parse_query("city=melbourne&postcode=3000&sort=suburb")
        assert current_direction(q, "suburb", SortDirection.ASC) == "asc"
        assert current_direction(q, "suburb", SortDirection.DESC) == "desc"

    def test_explicit(self) -> None:
        q = parse_query("city=melbourne&postcode=3000&sort=suburb,desc")
        assert current_direction(q, "suburb", SortDirection.ASC) == "desc"

    def test_missing_field(self) -> None:
        q = parse_query("sort=suburb")
        assert current_direction(q, "country", SortDirection.ASC) is None

    def test_first_match_wins(self) -> None:
        q = parse_query("sort=city,desc&sort=city,asc")
        assert current_direction(q, "city", SortDirection.ASC) == "desc"

    def test_opaque_direction_returned_as_is(self) -> None:
        q = parse_query("sort=city,up")
        assert current_direction(q, "city", SortDirection.ASC) == "up"

    def test_custom_key(self) -> None:
        q = parse_query("order=city,desc")
        assert current_direction(q, "city", SortDirection.ASC, key="order") == "desc"


class TestIsFieldSorted:
    def test_sorted(self) -> None:
        q = parse_query("city=melbourne&postcode=3000&page=0&sort=city,desc")
        assert is_field_sorted(q, "city")

    def test_not_sorted(self) -> None:
        q = parse_query("city=melbourne&sort=country")
        assert not is_field_sorted(q, "city")

    def test_empty(self) -> None:
        assert not is_field_sorted(parse_query(None), "city")


class RequestQuery:
    """Minimal framework-style query mapping backed by a dict of lists."""

    def __init__(self, data: dict[str, list[str]]) -> None:
        self._data = data

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: str, default: str | None = None) -> str | None:
        values = self._data.get(key)
        return values[0] if values else default

    def get_list(self, key: str) -> list[str]:
        return list(self._data.get(key, []))


class TestOtherMappings:
    def test_request_query_satisfies_protocol(self) -> None:
        assert isinstance(RequestQuery({}), MultiValueMapping)

    def test_current_direction_reads_any_mapping(self) -> None:
        query = RequestQuery({"sort": ["country,asc", "city"]})
        assert current_direction(query, "city", SortDirection.DESC) == "desc"
        assert current_direction(query, "country", SortDirection.DESC) == "asc"

    def test_is_field_sorted_reads_any_mapping(self) -> None:
        query = RequestQuery({"order": ["city,desc"]})
        assert is_field_sorted(query, "city", key="order")
        assert not is_field_sorted(query, "city")


class TestSetDirection:
    def test_implicit_to_explicit(self) -> None:
        q = parse_query("city=dallas&country=US&sort=country&page=1")
        assert str(set_direction(q, "country", SortDirection.ASC)) == "city=dallas&country=US&sort=country,asc&page=1"

    def test_only_first_match(self) -> None:
        q = parse_query("sort=city,asc&sort=city,asc")
        assert str(set_direction(q, "city", "desc")) == "sort=city,desc&sort=city,asc"

    def test_missing_field_is_noop(self) -> None:
        q = parse_query("sort=city")
        assert set_direction(q, "country", SortDirection.DESC) == q

    def test_none_direction_raises(self) -> None:
        with pytest.raises(IllegalArgumentError):
            set_direction(parse_query("sort=city"), "city", SortDirection.NONE)

    def test_none_direction_raises_even_when_empty(self) -> None:
        with pytest.raises(IllegalArgumentError):
            set_direction(parse_query(None), "city", SortDirection.NONE)


class TestToggleDirection:
    def test_implicit_default_asc(self) -> None:
        q = parse_query("city=dallas&country=US&sort=country&page=1")
        result = toggle_direction(q, "country", SortDirection.ASC)
        assert str(result) == "city=dallas&country=US&sort=country,desc&page=1"

    def test_implicit_default_desc(self) -> None:
        q = parse_query("city=dallas&country=US&sort=country&page=1")
        result = toggle_direction(q, "country", SortDirection.DESC)
        assert str(result) == "city=dallas&country=US&sort=country,asc&page=1"

    def test_explicit_flips(self) -> None:
        q = parse_query("sort=country,desc")
        assert str(toggle_direction(q, "country", SortDirection.ASC)) == "sort=country,asc"
        q = parse_query("sort=country,asc")
        assert str(toggle_direction(q, "country", SortDirection.DESC)) == "sort=country,desc"

    def test_opaque_becomes_default(self) -> None:
        q = parse_query("sort=country,up")
        assert str(toggle_direction(q, "country", SortDirection.DESC)) == "sort=country,desc"

    def test_missing_field_is_noop(self) -> None:
        q = parse_query("sort=city")
        assert toggle_direction(q, "country", SortDirection.ASC) == q


class TestKeepOnly:
    QUERY = "city=melbourne&country=aus&state=victoria&sort=country,asc&sort=city,desc&sort=postcode"

    def test_keeps_matching_field(self) -> None:
        result = keep_only(parse_query(self.QUERY), "city")
        assert str(result) == "city=melbourne&country=aus&state=victoria&sort=city,desc"

    def test_no_match_removes_all_sorts(self) -> None:
        result = keep_only(parse_query(self.QUERY), "state")
        assert str(result) == "city=melbourne&country=aus&state=victoria"

    def test_non_sort_keys_untouched(self) -> None:
        q = parse_query("city=x&sort=city&page=2")
        assert keep_only(q, "city") == q
