from dataclasses import dataclass, field
from enum import Enum
from typing import Any

FieldValue = str | int | float | bool | list[object] | dict[str, object] | None


class JobStatus(str, Enum):
    NOT_STARTED = "notStarted"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class SubmissionJob:
    """A single document moving through submit -> poll -> terminal state."""

    source_bytes: bytes
    content_type: str
    job_handle: str | None = None
    status: JobStatus = JobStatus.NOT_STARTED
    attempts_made: int = 0
    result: dict[str, object] | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in (JobStatus.SUCCEEDED, JobStatus.FAILED, JobStatus.CANCELLED)


@dataclass(frozen=True)
class AnalysisConfig:
    """Everything the client needs to talk to the analysis service."""

    endpoint_base_urls: list[str]
    model_id: str
    api_key: str
    api_version: str = "2024-02-29"
    poll_interval_ms: int = 1000
    max_poll_attempts: int = 10
    max_file_size_bytes: int = 4 * 1024 * 1024
    allowed_content_types: list[str] = field(
        default_factory=lambda: [
            "image/jpeg",
            "image/png",
            "image/gif",
            "image/bmp",
            "image/tiff",
            "application/pdf",
        ]
    )
    max_pdf_pages: int | None = None
    request_timeout_seconds: int = 30

    def __post_init__(self) -> None:
        if self.max_poll_attempts < 1:
            raise ValueError("max_poll_attempts must be at least 1")
        if self.poll_interval_ms < 0:
            raise ValueError("poll_interval_ms must not be negative")


@dataclass(frozen=True)
class NormalizedField:
    """One flattened field: its value, confidence and original type tag."""

    value: FieldValue
    confidence: float | None = None
    type: str = "string"


@dataclass(frozen=True)
class NormalizedTable:
    """A table laid out as a row_count x column_count grid of cell text."""

    row_count: int
    column_count: int
    grid: list[list[str]]
    caption: str | None = None


@dataclass(frozen=True)
class NormalizedDocument:
    """Output of normalization: flat fields plus tables."""

    fields: dict[str, NormalizedField] = field(default_factory=dict)
    tables: list[NormalizedTable] = field(default_factory=list)
    doc_type: str | None = None
    confidence: float | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "doc_type": self.doc_type,
            "confidence": self.confidence,
            "fields": {
                name: {"value": f.value, "confidence": f.confidence, "type": f.type}
                for name, f in self.fields.items()
            },
            "tables": [
                {
                    "row_count": t.row_count,
                    "column_count": t.column_count,
                    "grid": t.grid,
                    "caption": t.caption,
                }
                for t in self.tables
            ],
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "NormalizedDocument":
        """Rebuild a document from the shape produced by ``to_dict``."""
        fields = {
            name: NormalizedField(
                value=raw.get("value"),
                confidence=raw.get("confidence"),
                type=raw.get("type") or "string",
            )
            for name, raw in (payload.get("fields") or {}).items()
            if isinstance(raw, dict)
        }
        tables = [
            NormalizedTable(
                row_count=raw.get("row_count", len(raw.get("grid") or [])),
                column_count=raw.get("column_count", 0),
                grid=[[str(cell) for cell in row] for row in raw.get("grid") or []],
                caption=raw.get("caption"),
            )
            for raw in payload.get("tables") or []
            if isinstance(raw, dict)
        ]
        return cls(
            fields=fields,
            tables=tables,
            doc_type=payload.get("doc_type"),
            confidence=payload.get("confidence"),
        )
