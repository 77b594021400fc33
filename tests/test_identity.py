"""Tests for row identity."""

from cartledger.identity import canonical_options, compute_row_id


class TestComputeRowId:
    def test_deterministic(self) -> None:
        assert compute_row_id("sku1", {"size": "L"}) == compute_row_id("sku1", {"size": "L"})

    def test_option_order_does_not_matter(self) -> None:
        a = compute_row_id("sku1", {"size": "L", "color": "red"})
        b = compute_row_id("sku1", {"color": "red", "size": "L"})
        assert a == b

    def test_different_options_differ(self) -> None:
        assert compute_row_id("sku1", {"size": "L"}) != compute_row_id("sku1", {"size": "M"})

    def test_different_identifiers_differ(self) -> None:
        assert compute_row_id("sku1") != compute_row_id("sku2")

    def test_identifier_type_participates(self) -> None:
        assert compute_row_id(1) != compute_row_id("1")

    def test_none_and_empty_options_equal(self) -> None:
        assert compute_row_id("sku1", None) == compute_row_id("sku1", {})

    def test_hex_key(self) -> None:
        row_id = compute_row_id("sku1", {"size": "L"})
        assert len(row_id) == 32
        int(row_id, 16)

    def test_unencodable_values_use_str(self) -> None:
        from datetime import date

        row_id = compute_row_id("sku1", {"day": date(2024, 1, 2)})
        assert row_id == compute_row_id("sku1", {"day": "2024-01-02"})


class TestCanonicalOptions:
    def test_sorted_compact(self) -> None:
        assert canonical_options({"b": 1, "a": 2}) == '{"a":2,"b":1}'
