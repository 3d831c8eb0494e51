import threading
from typing import Annotated

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile, status

from app.analysis.base import BaseAnalysisClient
from app.analysis.models import JobStatus, SubmissionJob
from app.api.cancellation import run_cancellable
from app.api.deps import get_analysis_client, get_shutdown_event
from app.api.errors import ApiError
from app.logging.logger import Log

router = APIRouter(prefix="/api/analyze", tags=["analyze"])

_DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _upload_limit(client: BaseAnalysisClient) -> int:
    # one byte past the limit is enough for validation to reject the document
    return client.config.max_file_size_bytes + 1


def _require_file(file: UploadFile | None) -> UploadFile:
    if file is None:
        raise ApiError(400, "No file uploaded")
    return file


def _log_upload(file: UploadFile, source_bytes: bytes, content_type: str) -> None:
    Log.info(f"Received upload '{file.filename}' ({len(source_bytes)} bytes read, {content_type})")


@router.post("", summary="Analyze a document and wait for the result")
async def analyze_document(
    request: Request,
    client: Annotated[BaseAnalysisClient, Depends(get_analysis_client)],
    shutdown_event: Annotated[threading.Event, Depends(get_shutdown_event)],
    file: Annotated[UploadFile | None, File()] = None,
) -> dict[str, object]:
    upload = _require_file(file)
    source_bytes = await upload.read(_upload_limit(client))
    content_type = upload.content_type or _DEFAULT_CONTENT_TYPE
    _log_upload(upload, source_bytes, content_type)

    document = await run_cancellable(
        request,
        shutdown_event,
        lambda cancel_event: client.submit_and_await(
            source_bytes, content_type, cancel_event=cancel_event
        ),
    )
    return document.to_dict()


@router.api_route(
    "",
    methods=["GET", "HEAD", "OPTIONS", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
def analyze_method_not_allowed() -> None:
    raise ApiError(405, "Method not allowed")


@router.post(
    "/jobs",
    status_code=status.HTTP_202_ACCEPTED,
    summary="Submit a document without waiting for the result",
)
def submit_document(
    client: Annotated[BaseAnalysisClient, Depends(get_analysis_client)],
    file: Annotated[UploadFile | None, File()] = None,
) -> dict[str, object]:
    upload = _require_file(file)
    source_bytes = upload.file.read(_upload_limit(client))
    content_type = upload.content_type or _DEFAULT_CONTENT_TYPE
    _log_upload(upload, source_bytes, content_type)

    job = client.submit(source_bytes, content_type)
    return {"operation_location": job.job_handle, "status": job.status.value}


@router.get("/jobs", summary="Check a submitted document once")
def read_job_status(
    client: Annotated[BaseAnalysisClient, Depends(get_analysis_client)],
    operation_location: Annotated[str, Query(min_length=1)],
) -> dict[str, object]:
    if not client.owns_handle(operation_location):
        raise ApiError(400, "Unknown operation location")
    job = SubmissionJob(
        source_bytes=b"",
        content_type="",
        job_handle=operation_location,
        status=JobStatus.RUNNING,
    )
    job = client.check_status(job)
    if job.status is JobStatus.SUCCEEDED:
        return {"status": job.status.value, "result": client.normalize(job).to_dict()}
    return {"status": job.status.value}
