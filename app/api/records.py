from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Response, status
from pydantic import BaseModel, Field

from app.analysis.models import NormalizedDocument
from app.api.deps import get_records_repository, require_user
from app.database.models import SavedRecord, Scalar
from app.database.repositories.saved_records_repository import SavedRecordsRepository

router = APIRouter(
    prefix="/api/records",
    tags=["records"],
    dependencies=[Depends(require_user)],
)

Repository = Annotated[SavedRecordsRepository, Depends(get_records_repository)]


class RecordCreate(BaseModel):
    data: dict[str, Scalar] = Field(default_factory=dict)
    table: list[list[str]] | None = None


class RecordUpdate(BaseModel):
    """Partial update: given fields are merged, the table is replaced only if sent."""

    data: dict[str, Scalar] | None = None
    table: list[list[str]] | None = None


@router.get("", summary="List saved records, newest first")
def list_records(repo: Repository) -> list[dict[str, object]]:
    return [record.to_dict() for record in repo.list_all()]


@router.get("/search", summary="Find records whose field equals a value")
def search_records(
    repo: Repository,
    field: Annotated[str, Query(min_length=1)],
    value: Annotated[str, Query()],
) -> list[dict[str, object]]:
    return [record.to_dict() for record in repo.find_by_field(field, value)]


@router.get("/{record_id}", summary="Read one record")
def read_record(record_id: int, repo: Repository) -> dict[str, object]:
    return repo.find_by_id(record_id).to_dict()


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a record")
def create_record(payload: RecordCreate, repo: Repository) -> dict[str, object]:
    return repo.create(payload.data, payload.table).to_dict()


@router.post(
    "/from-analysis",
    status_code=status.HTTP_201_CREATED,
    summary="Create a record from an analysis result",
)
def create_record_from_analysis(
    document: Annotated[dict[str, Any], Body()],
    repo: Repository,
) -> dict[str, object]:
    draft = SavedRecord.from_document(NormalizedDocument.from_dict(document))
    return repo.create(draft.data, draft.table).to_dict()


@router.put("/{record_id}", summary="Update a record")
def update_record(
    record_id: int,
    payload: RecordUpdate,
    repo: Repository,
) -> dict[str, object]:
    return repo.update(record_id, payload.data or {}, payload.table).to_dict()


@router.delete(
    "/{record_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a record",
)
def delete_record(record_id: int, repo: Repository) -> Response:
    repo.delete(record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
