"""
Testes do parser de descritores de consulta.
"""

import pytest

from dex_data.shared.errors import QueryDescriptorError
from dex_data.shared.models.enums import SortDirection
from dex_data.storage.query import (
    And,
    Compare,
    Contains,
    Equals,
    InList,
    IsNull,
    Or,
    OrderTerm,
    QueryDescriptor,
    parse_descriptor,
    parse_order_by,
    parse_where,
)


class TestParseWhere:
    def test_empty_where_matches_everything(self):
        assert parse_where(None) == And()
        assert parse_where({}) == And()

    def test_literal_is_equality_and_none_is_null(self):
        where = parse_where({"symbol": "USDT", "pairAddress": None})

        assert where.children == (Equals("symbol", "USDT"), IsNull("pairAddress"))

    def test_operators_follow_fixed_order(self):
        where = parse_where(
            {"timestamp": {"lt": 10, "gte": 1, "in": [1, 2], "equals": 5}}
        )

        assert where.children == (
            Equals("timestamp", 5),
            Compare("timestamp", ">=", 1),
            Compare("timestamp", "<", 10),
            InList("timestamp", (1, 2)),
        )

    def test_contains_insensitive_modes(self):
        first = parse_where({"name": {"contains": "koi", "mode": "insensitive"}})
        second = parse_where({"name": {"contains": "koi", "caseInsensitive": True}})
        plain = parse_where({"name": {"contains": "koi"}})

        assert first.children == (Contains("name", "koi", case_insensitive=True),)
        assert second.children == first.children
        assert plain.children == (Contains("name", "koi", case_insensitive=False),)

    def test_not_in(self):
        where = parse_where({"symbol": {"notIn": ["DAI"]}})

        assert where.children == (InList("symbol", ("DAI",), negated=True),)

    def test_or_branches(self):
        where = parse_where({"OR": [{"symbol": "USDT"}, {"symbol": "USDC"}]})

        assert where.children == (
            Or((And((Equals("symbol", "USDT"),)), And((Equals("symbol", "USDC"),)))),
        )

    def test_or_requires_list(self):
        with pytest.raises(QueryDescriptorError):
            parse_where({"OR": "symbol"})

    def test_or_rejects_single_mapping(self):
        with pytest.raises(QueryDescriptorError, match="OR"):
            parse_descriptor({"where": {"OR": {"symbol": "USDT"}}})

    def test_unknown_operator_raises(self):
        with pytest.raises(QueryDescriptorError, match="startsWith"):
            parse_where({"symbol": {"startsWith": "U"}})

    def test_in_requires_list(self):
        with pytest.raises(QueryDescriptorError):
            parse_where({"symbol": {"in": "USDT"}})


class TestParseOrderBy:
    def test_single_mapping(self):
        assert parse_order_by({"timestamp": "desc"}) == (
            OrderTerm("timestamp", SortDirection.DESC),
        )

    def test_list_keeps_tie_break_order(self):
        terms = parse_order_by([{"volumeUSD24h": "DESC"}, {"symbol": "asc"}])

        assert [t.field for t in terms] == ["volumeUSD24h", "symbol"]
        assert terms[0].direction is SortDirection.DESC

    def test_field_direction_pair(self):
        assert parse_order_by({"field": "id", "direction": "desc"}) == (
            OrderTerm("id", SortDirection.DESC),
        )

    def test_bad_direction_raises(self):
        with pytest.raises(QueryDescriptorError):
            parse_order_by({"id": "sideways"})


class TestParseDescriptor:
    def test_full_descriptor(self):
        descriptor = parse_descriptor(
            {
                "where": {"symbol": "KOI"},
                "select": {"id": True, "symbol": True, "name": False},
                "orderBy": {"id": "asc"},
                "take": 10,
                "skip": 5,
                "cursor": {"id": "s2"},
                "include": {"pair": True, "token0": False},
            },
            cursor_field="id",
        )

        assert descriptor.select == ("id", "symbol")
        assert descriptor.take == 10
        assert descriptor.skip == 5
        assert descriptor.cursor == "s2"
        assert descriptor.include == ("pair",)

    def test_negative_take_raises(self):
        with pytest.raises(QueryDescriptorError):
            parse_descriptor({"take": -1})

    def test_cursor_without_cursor_field_raises(self):
        with pytest.raises(QueryDescriptorError):
            parse_descriptor({"cursor": {"id": "x"}}, cursor_field=None)

    def test_parsed_descriptor_passes_through(self):
        descriptor = QueryDescriptor(take=1)

        assert parse_descriptor(descriptor) is descriptor
