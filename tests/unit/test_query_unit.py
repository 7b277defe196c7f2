from datetime import datetime, timezone

import pytest

from paginantic.conditions import Attr
from paginantic.query import MemoryQuery, Query, sort_records


class TestMemoryQueryBuilder:
    """Test MemoryQuery builder methods."""

    def test_satisfies_query_protocol(self):
        """Test MemoryQuery is usable wherever a Query is expected."""
        assert isinstance(MemoryQuery([]), Query)

    def test_builder_methods_return_self(self, users):
        """Test every builder method returns the query for chaining."""
        query = MemoryQuery(users)

        assert query.add_ordering("id") is query
        assert query.add_predicate(Attr("id") > 1) is query
        assert query.limit(2) is query
        assert query.offset(1) is query

    def test_default_column_is_field_name(self):
        assert MemoryQuery([]).default_column("created_at") == "created_at"

    @pytest.mark.parametrize("value", [-1, 1.5, True, "3"])
    def test_limit_rejects_invalid_values(self, value):
        with pytest.raises(ValueError):
            MemoryQuery([]).limit(value)

    @pytest.mark.parametrize("value", [-1, None])
    def test_offset_rejects_invalid_values(self, value):
        with pytest.raises(ValueError):
            MemoryQuery([]).offset(value)

    def test_clone_is_independent(self, users):
        """Test changes to a clone never leak into the original."""
        query = MemoryQuery(users).add_predicate(Attr("name") == "a")
        clone = query.clone()

        clone.add_predicate(Attr("id") > 1).add_ordering("id", False).limit(1).offset(0)

        assert len(query.conditions) == 1
        assert query.orderings == []
        assert query.limit_val is None
        assert clone.records is query.records


class TestMemoryQueryExecution:
    """Test fetch() and count() on MemoryQuery."""

    def test_fetch_without_ordering_keeps_input_order(self, users):
        assert [u.id for u in MemoryQuery(users).fetch()] == [1, 2, 3, 4, 5, 6]

    def test_fetch_filters_and_orders(self, users):
        query = MemoryQuery(users).add_predicate(Attr("name") != "c").add_ordering("id", False)
        assert [u.id for u in query.fetch()] == [5, 3, 2, 1]

    def test_predicates_are_conjoined(self, users):
        query = MemoryQuery(users).add_predicate(Attr("name") == "a").add_predicate(Attr("id") > 1)
        assert [u.id for u in query.fetch()] == [3]

    def test_multiple_orderings_compose_major_to_minor(self, users):
        """Test (name asc, id desc) ordering."""
        query = MemoryQuery(users).add_ordering("name", True).add_ordering("id", False)
        assert [u.id for u in query.fetch()] == [3, 1, 5, 2, 6, 4]

    def test_limit_and_offset(self, users):
        query = MemoryQuery(users).add_ordering("id").offset(2).limit(3)
        assert [u.id for u in query.fetch()] == [3, 4, 5]

    def test_limit_zero(self, users):
        assert MemoryQuery(users).limit(0).fetch() == []

    def test_count_ignores_limit_and_offset(self, users):
        """Test count() reports all matching rows."""
        query = MemoryQuery(users).add_predicate(Attr("name") == "b").limit(1).offset(1)
        assert query.count() == 2

    def test_mapping_records(self, user_records):
        query = MemoryQuery(user_records).add_ordering("created_at", False).limit(2)
        assert [r["id"] for r in query.fetch()] == [6, 5]


class TestSortRecords:
    """Test the multi-key stable sort used by collaborators."""

    def test_missing_and_none_sort_first_ascending(self):
        records = [{"id": 1, "v": 2}, {"id": 2}, {"id": 3, "v": None}, {"id": 4, "v": 1}]
        result = sort_records(records, [("v", True), ("id", True)])
        assert [r["id"] for r in result] == [2, 3, 4, 1]

    def test_missing_sort_last_descending(self):
        records = [{"id": 1, "v": 2}, {"id": 2}, {"id": 3, "v": 1}]
        result = sort_records(records, [("v", False)])
        assert [r["id"] for r in result] == [1, 3, 2]

    def test_mixed_types_sort_by_type_band(self):
        """Test a column mixing numbers and strings sorts instead of raising."""
        records = [
            {"id": 1, "v": "b"},
            {"id": 2, "v": 10},
            {"id": 3, "v": "a"},
            {"id": 4, "v": 2.5},
        ]

        ascending = sort_records(records, [("v", True)])
        descending = sort_records(records, [("v", False)])

        assert [r["id"] for r in ascending] == [4, 2, 3, 1]
        assert [r["id"] for r in descending] == [1, 3, 2, 4]

    def test_datetimes_and_iso_text_sort_together(self):
        records = [
            {"id": 1, "at": datetime(2024, 1, 2, tzinfo=timezone.utc)},
            {"id": 2, "at": "2024-01-01T00:00:00Z"},
        ]
        assert [r["id"] for r in sort_records(records, [("at", True)])] == [2, 1]

    def test_no_orderings_returns_copy(self):
        records = [{"id": 2}, {"id": 1}]
        result = sort_records(records, [])
        assert result == records
        assert result is not records
