from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from app.database.connection import get_connection
from app.database.exceptions import RecordNotFoundError, StoreError
from app.database.models import SavedRecord, Scalar, deserialize_table, serialize_table
from app.logging.logger import Log

_COLUMNS = "id, data, table_data, created_at, updated_at"


@contextmanager
def _store_operation(action: str) -> Generator[None, None, None]:
    """Translate driver errors into StoreError."""
    try:
        yield
    except psycopg.Error as exc:
        Log.error(f"Record store failed to {action}: {exc}")
        raise StoreError(f"Failed to {action}: {exc}") from exc


class SavedRecordsRepository:
    """Database operations for the saved_records table."""

    def list_all(self) -> list[SavedRecord]:
        """Return every saved record, newest first."""
        with _store_operation("list records"), get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM saved_records ORDER BY created_at DESC"
                )
                rows = cur.fetchall()
        return [self._to_record(row) for row in rows]

    def find_by_id(self, record_id: int) -> SavedRecord:
        """Find a saved record by ID.

        Raises:
            RecordNotFoundError: if no record with this ID exists.
        """
        with _store_operation(f"read record {record_id}"), get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM saved_records WHERE id = %s",
                    (record_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise RecordNotFoundError(f"Record {record_id} not found")
        return self._to_record(row)

    def find_by_field(self, field_name: str, value: Scalar) -> list[SavedRecord]:
        """Return records whose data[field_name] equals value, newest first."""
        with _store_operation(f"search records by {field_name}"), get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM saved_records
                    WHERE data ->> %s = %s
                    ORDER BY created_at DESC
                    """,
                    (field_name, _as_json_text(value)),
                )
                rows = cur.fetchall()
        return [self._to_record(row) for row in rows]

    def create(
        self,
        data: dict[str, Scalar],
        table: list[list[str]] | None = None,
    ) -> SavedRecord:
        """Insert a new record; the database assigns both timestamps."""
        with _store_operation("create record"), get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO saved_records (data, table_data)
                    VALUES (%s, %s)
                    RETURNING {_COLUMNS}
                    """,
                    (Jsonb(data), serialize_table(table)),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise StoreError("Insert returned no row")
        record = self._to_record(row)
        Log.info(f"Created record {record.id}")
        return record

    def update(
        self,
        record_id: int,
        data: dict[str, Scalar],
        table: list[list[str]] | None = None,
    ) -> SavedRecord:
        """Merge data into an existing record and refresh updated_at.

        The table is replaced only when one is given.

        Raises:
            RecordNotFoundError: if no record with this ID exists.
        """
        with _store_operation(f"update record {record_id}"), get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    "SELECT id FROM saved_records WHERE id = %s FOR UPDATE",
                    (record_id,),
                )
                if cur.fetchone() is None:
                    conn.rollback()
                    raise RecordNotFoundError(f"Record {record_id} not found")
                cur.execute(
                    f"""
                    UPDATE saved_records
                    SET data = data || %s,
                        table_data = COALESCE(%s, table_data),
                        updated_at = NOW()
                    WHERE id = %s
                    RETURNING {_COLUMNS}
                    """,
                    (Jsonb(data), serialize_table(table), record_id),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RecordNotFoundError(f"Record {record_id} not found")
        Log.info(f"Updated record {record_id}")
        return self._to_record(row)

    def delete(self, record_id: int) -> None:
        """Delete a record by ID.

        Raises:
            RecordNotFoundError: if no record with this ID exists.
        """
        with _store_operation(f"delete record {record_id}"), get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM saved_records WHERE id = %s", (record_id,))
                if cur.rowcount == 0:
                    raise RecordNotFoundError(f"Record {record_id} not found")
            conn.commit()
        Log.info(f"Deleted record {record_id}")

    @staticmethod
    def _to_record(row: dict[str, Any]) -> SavedRecord:
        try:
            table = deserialize_table(row["table_data"])
        except ValueError as exc:
            raise StoreError(f"Record {row['id']} has a corrupt table: {exc}") from exc
        return SavedRecord(
            id=row["id"],
            data=dict(row["data"] or {}),
            table=table,
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


def _as_json_text(value: Scalar) -> str | None:
    # ->> renders JSON booleans as true/false
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return None
    return str(value)
