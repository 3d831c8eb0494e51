import httpx

from app.analysis.base import BaseAnalysisClient
from app.analysis.exceptions import (
    PollingError,
    ProtocolError,
    RemoteAnalysisError,
    SubmissionError,
)
from app.analysis.models import AnalysisConfig, JobStatus, SubmissionJob
from app.analysis.validator import validate_document
from app.logging.logger import Log
from app.pdf.base import BasePdfInspector

API_KEY_HEADER = "Ocp-Apim-Subscription-Key"
JOB_HANDLE_HEADER = "Operation-Location"


class DocumentIntelligenceClient(BaseAnalysisClient):
    """Analysis client for a Document Intelligence style long-running REST API."""

    def __init__(
        self,
        *,
        config: AnalysisConfig,
        pdf_inspector: BasePdfInspector | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__(config)
        if not config.endpoint_base_urls:
            raise ValueError("At least one analysis endpoint base URL is required")
        self._pdf_inspector = pdf_inspector
        self._http = httpx.Client(
            timeout=config.request_timeout_seconds,
            transport=transport,
        )

    def submit(self, source_bytes: bytes, content_type: str) -> SubmissionJob:
        validate_document(source_bytes, content_type, self._config, self._pdf_inspector)
        job = SubmissionJob(source_bytes=source_bytes, content_type=content_type)

        response = self._post_document(job)
        if response.status_code != 202:
            Log.error(f"Submission rejected with HTTP {response.status_code}")
            raise SubmissionError(
                f"Submission rejected with HTTP {response.status_code}",
                detail=response.text,
                status_code=response.status_code,
            )

        job_handle = response.headers.get(JOB_HANDLE_HEADER)
        if not job_handle:
            raise ProtocolError(
                "Service accepted the document but returned no job handle",
                detail=f"missing {JOB_HANDLE_HEADER} header",
            )

        job.job_handle = job_handle
        job.status = JobStatus.RUNNING
        Log.info(f"Submitted {len(source_bytes)} bytes, job handle {job_handle}")
        return job

    def check_status(self, job: SubmissionJob) -> SubmissionJob:
        if job.job_handle is None:
            raise ProtocolError("Job has no job handle to check")
        job.attempts_made += 1
        try:
            response = self._http.get(job.job_handle, headers=self._auth_headers())
        except httpx.HTTPError as exc:
            raise PollingError(f"Status request failed: {exc}") from exc

        if not response.is_success:
            raise PollingError(
                f"Status request returned HTTP {response.status_code}",
                detail=response.text,
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise PollingError("Status response is not valid JSON", detail=response.text) from exc
        if not isinstance(payload, dict):
            raise PollingError("Status response must be a JSON object", detail=response.text)

        status = payload.get("status")
        Log.debug(f"Job {job.job_handle} poll {job.attempts_made}: status={status!r}")
        if status == JobStatus.SUCCEEDED.value:
            job.status = JobStatus.SUCCEEDED
            result = payload.get("analyzeResult")
            job.result = result if isinstance(result, dict) else {}
            Log.info(f"Job {job.job_handle} succeeded after {job.attempts_made} polls")
        elif status == JobStatus.FAILED.value:
            job.status = JobStatus.FAILED
            error = payload.get("error")
            message = error.get("message") if isinstance(error, dict) else None
            Log.error(f"Job {job.job_handle} failed remotely: {message}")
            raise RemoteAnalysisError(
                "Analysis service reported failure",
                detail=message or response.text,
                result_document=payload,
            )
        else:
            job.status = JobStatus.RUNNING
        return job

    def close(self) -> None:
        self._http.close()

    def _post_document(self, job: SubmissionJob) -> httpx.Response:
        """POST the document, moving to the next base URL only on HTTP 404."""
        *fallbacks, last = self._config.endpoint_base_urls
        for base_url in fallbacks:
            response = self._post_to(base_url, job)
            if response.status_code != 404:
                return response
            Log.warning(f"Endpoint {base_url} returned 404, trying next candidate")
        return self._post_to(last, job)

    def _post_to(self, base_url: str, job: SubmissionJob) -> httpx.Response:
        headers = self._auth_headers()
        headers["Content-Type"] = job.content_type or "application/octet-stream"
        url = f"{base_url.rstrip('/')}/documentModels/{self._config.model_id}:analyze"
        try:
            return self._http.post(
                url,
                params={"api-version": self._config.api_version},
                content=job.source_bytes,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            raise SubmissionError(f"Could not reach analysis service: {exc}") from exc

    def _auth_headers(self) -> dict[str, str]:
        return {API_KEY_HEADER: self._config.api_key}
