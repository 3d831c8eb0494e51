"""Tests for result flattening (fields and tables)."""

from typing import Any

from app.analysis.models import NormalizedDocument, NormalizedField
from app.analysis.normalizer import flatten_field, flatten_table, normalize_result


class TestFlattenTable:
    def test_places_cells_and_fills_gaps_with_empty_strings(self) -> None:
        table = flatten_table({
            "rowCount": 2,
            "columnCount": 3,
            "cells": [
                {"rowIndex": 0, "columnIndex": 0, "content": "A"},
                {"rowIndex": 0, "columnIndex": 1, "content": "B"},
                {"rowIndex": 1, "columnIndex": 2, "content": "Z"},
            ],
        })
        assert table.grid == [["A", "B", ""], ["", "", "Z"]]
        assert table.row_count == 2
        assert table.column_count == 3

    def test_drops_out_of_bounds_cells(self) -> None:
        table = flatten_table({
            "rowCount": 2,
            "columnCount": 3,
            "cells": [
                {"rowIndex": 0, "columnIndex": 0, "content": "A"},
                {"rowIndex": 5, "columnIndex": 0, "content": "lost"},
                {"rowIndex": 0, "columnIndex": 3, "content": "lost"},
                {"rowIndex": -1, "columnIndex": 0, "content": "lost"},
            ],
        })
        assert table.grid == [["A", "", ""], ["", "", ""]]

    def test_ignores_cells_without_coordinates(self) -> None:
        table = flatten_table({
            "rowCount": 1,
            "columnCount": 1,
            "cells": [{"content": "no position"}, "garbage"],
        })
        assert table.grid == [[""]]

    def test_caption_object_uses_content(self) -> None:
        table = flatten_table({"rowCount": 0, "columnCount": 0, "caption": {"content": "Items"}})
        assert table.caption == "Items"
        assert table.grid == []

    def test_caption_string_and_missing(self) -> None:
        assert flatten_table({"rowCount": 1, "columnCount": 1, "caption": "Tbl"}).caption == "Tbl"
        assert flatten_table({"rowCount": 1, "columnCount": 1}).caption is None


class TestFlattenField:
    def test_string_prefers_typed_value(self) -> None:
        field = flatten_field(
            {"type": "string", "valueString": "ACME", "content": "ACME.", "confidence": 0.9}
        )
        assert field == NormalizedField(value="ACME", confidence=0.9, type="string")

    def test_scalar_falls_back_to_content(self) -> None:
        assert flatten_field({"type": "date", "content": "05/01/2024"}).value == "05/01/2024"
        assert flatten_field({"type": "number", "content": "12"}).value == "12"

    def test_number_and_date_typed_values(self) -> None:
        assert flatten_field({"type": "number", "valueNumber": 12.5}).value == 12.5
        assert flatten_field({"type": "date", "valueDate": "2024-01-05"}).value == "2024-01-05"

    def test_array_of_objects_flattens_to_plain_mappings(self) -> None:
        field = flatten_field({
            "type": "array",
            "valueArray": [
                {"type": "object", "valueObject": {"name": {"type": "string", "valueString": "x"}}},
                {"type": "object", "valueObject": {"name": {"type": "string", "content": "y"}}},
            ],
        })
        assert field.value == [{"name": "x"}, {"name": "y"}]
        assert field.type == "array"

    def test_array_of_scalars(self) -> None:
        field = flatten_field({
            "type": "array",
            "valueArray": [
                {"type": "string", "valueString": "a"},
                {"type": "number", "valueNumber": 2},
            ],
        })
        assert field.value == ["a", 2]

    def test_object_flattens_to_single_mapping(self) -> None:
        field = flatten_field({
            "type": "object",
            "valueObject": {
                "Street": {"type": "string", "valueString": "Main 1"},
                "Zip": {"type": "string", "content": "01000"},
            },
            "confidence": 0.5,
        })
        assert field.value == {"Street": "Main 1", "Zip": "01000"}
        assert field.confidence == 0.5

    def test_nested_objects_recurse_only_one_level(self) -> None:
        field = flatten_field({
            "type": "object",
            "valueObject": {
                "Inner": {
                    "type": "object",
                    "valueObject": {"deep": {"type": "string", "valueString": "d"}},
                    "content": "inner text",
                },
            },
        })
        assert field.value == {"Inner": {"deep": {"type": "string", "valueString": "d"}}}

    def test_unrecognized_tag_falls_back_to_content(self) -> None:
        field = flatten_field({"type": "signature", "content": "J. Doe"})
        assert field.value == "J. Doe"
        assert field.type == "signature"

    def test_unrecognized_tag_uses_typed_value_when_present(self) -> None:
        field = flatten_field({
            "type": "currency",
            "valueCurrency": {"amount": 10.0, "currencySymbol": "$"},
            "content": "$10.00",
        })
        assert field.value == {"amount": 10.0, "currencySymbol": "$"}

    def test_missing_value_and_content_is_none(self) -> None:
        field = flatten_field({"type": "string"})
        assert field.value is None
        assert field.confidence is None


class TestNormalizeResult:
    def test_builds_fields_and_tables(self, analyze_result: dict[str, Any]) -> None:
        document = normalize_result(analyze_result)
        assert document.doc_type == "invoice"
        assert document.confidence == 0.93
        assert document.fields["Vendor"].value == "ACME S.A."
        assert document.fields["Total"].value == 1160.0
        assert document.fields["Items"].value == [{"name": "x"}]
        assert document.tables[0].grid == [["H1", "H2"], ["1", "2"]]

    def test_empty_result_yields_empty_document(self) -> None:
        document = normalize_result({})
        assert document.fields == {}
        assert document.tables == []
        assert document.doc_type is None

    def test_to_dict_round_trips_through_from_dict(self, analyze_result: dict[str, Any]) -> None:
        document = normalize_result(analyze_result)
        assert NormalizedDocument.from_dict(document.to_dict()) == document
