import threading
from abc import ABC, abstractmethod

from app.analysis.exceptions import AnalysisCancelled, AnalysisTimeoutError, ProtocolError
from app.analysis.models import AnalysisConfig, JobStatus, NormalizedDocument, SubmissionJob
from app.analysis.normalizer import normalize_result
from app.logging.logger import Log


class BaseAnalysisClient(ABC):
    """Contract for all document analysis adapters.

    Adapters implement ``submit`` and ``check_status``; the fixed-interval
    poll loop and normalization are shared.
    """

    def __init__(self, config: AnalysisConfig) -> None:
        self._config = config

    @property
    def config(self) -> AnalysisConfig:
        return self._config

    @abstractmethod
    def submit(self, source_bytes: bytes, content_type: str) -> SubmissionJob:
        """Validate the document locally and submit it for analysis.

        Returns:
            A RUNNING SubmissionJob carrying the job handle.

        Raises:
            AnalysisValidationError: if the input fails local checks.
            SubmissionError: if the service rejects the submission.
            ProtocolError: if the service accepts without a job handle.
        """

    @abstractmethod
    def check_status(self, job: SubmissionJob) -> SubmissionJob:
        """Issue exactly one status request for a running job, without waiting.

        Raises:
            PollingError: if the status request fails.
            RemoteAnalysisError: if the service reports the analysis failed.
        """

    def poll(
        self,
        job: SubmissionJob,
        cancel_event: threading.Event | None = None,
    ) -> SubmissionJob:
        """Wait and poll until the job reaches a terminal state.

        Raises:
            AnalysisTimeoutError: after max_poll_attempts non-terminal responses.
            AnalysisCancelled: if cancel_event is set during a wait.
        """
        if job.job_handle is None:
            raise ProtocolError("Job has no job handle to poll")
        if cancel_event is None:
            cancel_event = threading.Event()
        interval_seconds = self._config.poll_interval_ms / 1000

        while not job.is_terminal:
            if job.attempts_made >= self._config.max_poll_attempts:
                Log.error(
                    f"Job {job.job_handle} still {job.status.value} "
                    f"after {job.attempts_made} polls"
                )
                raise AnalysisTimeoutError(
                    f"Analysis did not finish after {job.attempts_made} status checks",
                    detail=f"last status: {job.status.value}",
                )
            if cancel_event.wait(interval_seconds):
                job.status = JobStatus.CANCELLED
                Log.warning(f"Job {job.job_handle} cancelled after {job.attempts_made} polls")
                raise AnalysisCancelled(f"Analysis of {job.job_handle} was cancelled")
            job = self.check_status(job)
        return job

    def owns_handle(self, job_handle: str) -> bool:
        """Whether a job handle points at one of the configured endpoints."""
        return any(
            job_handle.startswith(base_url.rstrip("/") + "/")
            for base_url in self._config.endpoint_base_urls
        )

    def normalize(self, job: SubmissionJob) -> NormalizedDocument:
        """Normalize the result of a SUCCEEDED job."""
        if job.status is not JobStatus.SUCCEEDED or job.result is None:
            raise ValueError(f"Cannot normalize a job in status {job.status.value}")
        document = normalize_result(job.result)
        Log.info(
            f"Normalized result: {len(document.fields)} fields, "
            f"{len(document.tables)} tables"
        )
        return document

    def submit_and_await(
        self,
        source_bytes: bytes,
        content_type: str,
        cancel_event: threading.Event | None = None,
    ) -> NormalizedDocument:
        """Drive a document through submit -> poll -> normalize.

        Raises:
            AnalysisError: on any terminal failure.
            AnalysisCancelled: if cancel_event is set while waiting.
        """
        job = self.submit(source_bytes, content_type)
        job = self.poll(job, cancel_event)
        return self.normalize(job)

    def close(self) -> None:
        """Release transport resources held by the adapter."""

    def __enter__(self) -> "BaseAnalysisClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
