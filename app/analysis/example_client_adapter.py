"""Example analysis client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseAnalysisClient and register the provider in AnalysisClientFactory.
"""

import uuid
from typing import ClassVar

from app.analysis.base import BaseAnalysisClient
from app.analysis.models import AnalysisConfig, JobStatus, SubmissionJob
from app.analysis.validator import validate_document
from app.pdf.base import BasePdfInspector

HANDLE_PREFIX = "example://operations/"


class ExampleAnalysisClient(BaseAnalysisClient):
    """Example adapter that reports a fixed result after a set number of polls.

    No network calls. Useful for local development and tests.
    """

    DEFAULT_RESULT: ClassVar[dict[str, object]] = {
        "documents": [
            {
                "docType": "example",
                "confidence": 1.0,
                "fields": {
                    "Title": {
                        "type": "string",
                        "valueString": "Example document",
                        "content": "Example document",
                        "confidence": 1.0,
                    },
                },
            }
        ],
        "tables": [],
    }

    def __init__(
        self,
        config: AnalysisConfig,
        *,
        polls_until_done: int = 1,
        pdf_inspector: BasePdfInspector | None = None,
    ) -> None:
        super().__init__(config)
        self._polls_until_done = polls_until_done
        self._pdf_inspector = pdf_inspector

    def submit(self, source_bytes: bytes, content_type: str) -> SubmissionJob:
        validate_document(source_bytes, content_type, self._config, self._pdf_inspector)
        return SubmissionJob(
            source_bytes=source_bytes,
            content_type=content_type,
            job_handle=f"{HANDLE_PREFIX}{uuid.uuid4().hex}",
            status=JobStatus.RUNNING,
        )

    def owns_handle(self, job_handle: str) -> bool:
        return job_handle.startswith(HANDLE_PREFIX)

    def check_status(self, job: SubmissionJob) -> SubmissionJob:
        job.attempts_made += 1
        if job.attempts_made >= self._polls_until_done:
            job.status = JobStatus.SUCCEEDED
            job.result = dict(self.DEFAULT_RESULT)
        return job
