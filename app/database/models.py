import json
from dataclasses import dataclass, field
from datetime import datetime

from app.analysis.models import NormalizedDocument

Scalar = str | int | float | bool | None


def serialize_table(table: list[list[str]] | None) -> str | None:
    """Encode a 2-D table as a JSON string for storage."""
    if table is None:
        return None
    return json.dumps(table, ensure_ascii=False)


def deserialize_table(raw: str | None) -> list[list[str]] | None:
    """Decode a stored table back into a 2-D list of strings."""
    if raw is None or raw == "":
        return None
    parsed = json.loads(raw)
    if not isinstance(parsed, list) or not all(isinstance(row, list) for row in parsed):
        raise ValueError("Stored table must be a list of rows")
    return [[str(cell) for cell in row] for row in parsed]


@dataclass
class SavedRecord:
    """Represents a row from the saved_records table."""

    id: int | None
    data: dict[str, Scalar] = field(default_factory=dict)
    table: list[list[str]] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_document(cls, document: NormalizedDocument) -> "SavedRecord":
        """Build an unsaved record from a reviewed NormalizedDocument.

        Composite field values are JSON-encoded so every stored value is a scalar.
        The first table, if any, becomes the record's table.
        """
        data: dict[str, Scalar] = {}
        for name, normalized in document.fields.items():
            value = normalized.value
            if isinstance(value, (list, dict)):
                data[name] = json.dumps(value, ensure_ascii=False)
            else:
                data[name] = value
        table = [list(row) for row in document.tables[0].grid] if document.tables else None
        return cls(id=None, data=data, table=table)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "data": self.data,
            "table": self.table,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
