"""Flattens the service's field-tagged result document into a NormalizedDocument."""

from typing import Any

from app.analysis.models import FieldValue, NormalizedDocument, NormalizedField, NormalizedTable

_SCALAR_TYPES = frozenset({"string", "date", "number"})


def normalize_result(analyze_result: dict[str, Any]) -> NormalizedDocument:
    """Build a NormalizedDocument from an ``analyzeResult`` payload.

    Fields come from the first entry of ``documents``; tables come from the
    top-level ``tables`` list. Missing sections produce empty collections.
    """
    documents = analyze_result.get("documents") or []
    primary = documents[0] if documents and isinstance(documents[0], dict) else {}
    raw_fields = primary.get("fields") or {}
    fields = {
        name: flatten_field(raw)
        for name, raw in raw_fields.items()
        if isinstance(raw, dict)
    }
    tables = [
        flatten_table(raw)
        for raw in analyze_result.get("tables") or []
        if isinstance(raw, dict)
    ]
    return NormalizedDocument(
        fields=fields,
        tables=tables,
        doc_type=primary.get("docType"),
        confidence=_confidence(primary),
    )


def flatten_field(raw: dict[str, Any]) -> NormalizedField:
    """Flatten one tagged field, keeping its confidence and type tag."""
    tag = raw.get("type") or ""
    value: FieldValue
    if tag in _SCALAR_TYPES:
        value = _scalar_value(raw)
    elif tag == "array":
        value = [_flatten_element(item) for item in raw.get("valueArray") or []]
    elif tag == "object":
        value = _flatten_object(raw.get("valueObject") or {})
    else:
        value = _scalar_value(raw)
    return NormalizedField(value=value, confidence=_confidence(raw), type=tag)


def flatten_table(raw: dict[str, Any]) -> NormalizedTable:
    """Place each cell's text into a row_count x column_count grid.

    Cells whose coordinates fall outside the declared bounds are dropped.
    """
    row_count = _non_negative_int(raw.get("rowCount"))
    column_count = _non_negative_int(raw.get("columnCount"))
    grid = [["" for _ in range(column_count)] for _ in range(row_count)]
    for cell in raw.get("cells") or []:
        if not isinstance(cell, dict):
            continue
        row = cell.get("rowIndex")
        col = cell.get("columnIndex")
        if not isinstance(row, int) or not isinstance(col, int):
            continue
        if 0 <= row < row_count and 0 <= col < column_count:
            grid[row][col] = str(cell.get("content") or "")
    return NormalizedTable(
        row_count=row_count,
        column_count=column_count,
        grid=grid,
        caption=_caption(raw.get("caption")),
    )


def _typed_value_key(tag: str) -> str:
    # "number" -> "valueNumber", "phoneNumber" -> "valuePhoneNumber"
    return "value" + tag[:1].upper() + tag[1:]


def _scalar_value(raw: dict[str, Any]) -> FieldValue:
    tag = raw.get("type") or ""
    if tag:
        typed = raw.get(_typed_value_key(tag))
        if typed is not None:
            return typed
    return raw.get("content")


def _flatten_element(raw: Any) -> FieldValue:
    if not isinstance(raw, dict):
        return raw
    if isinstance(raw.get("valueObject"), dict):
        return _flatten_object(raw["valueObject"])
    return _scalar_value(raw)


def _flatten_object(value_object: dict[str, Any]) -> dict[str, object]:
    # One level only: nested fields are reduced to their scalar value.
    return {
        name: _scalar_value(raw) if isinstance(raw, dict) else raw
        for name, raw in value_object.items()
    }


def _confidence(raw: dict[str, Any]) -> float | None:
    confidence = raw.get("confidence")
    if isinstance(confidence, (int, float)) and not isinstance(confidence, bool):
        return float(confidence)
    return None


def _caption(raw: Any) -> str | None:
    if isinstance(raw, dict):
        raw = raw.get("content")
    if isinstance(raw, str) and raw:
        return raw
    return None


def _non_negative_int(raw: Any) -> int:
    if isinstance(raw, int) and not isinstance(raw, bool) and raw > 0:
        return raw
    return 0
