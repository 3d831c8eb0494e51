class AnalysisError(Exception):
    """Base exception for every terminal analysis failure."""

    category = "AnalysisError"

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.detail = detail


class AnalysisValidationError(AnalysisError):
    """Raised locally, before any network call, when the input is unacceptable."""

    category = "ValidationError"


class SubmissionError(AnalysisError):
    """Raised when the service rejects the submission or cannot be reached."""

    category = "SubmissionError"

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, detail)
        self.status_code = status_code


class ProtocolError(AnalysisError):
    """Raised when the service accepts a submission but omits the job handle."""

    category = "ProtocolError"


class PollingError(AnalysisError):
    """Raised when a status request fails at the transport or HTTP level."""

    category = "PollingError"

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, detail)
        self.status_code = status_code


class RemoteAnalysisError(AnalysisError):
    """Raised when the service reports that the analysis itself failed."""

    category = "RemoteAnalysisError"

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        result_document: dict[str, object] | None = None,
    ) -> None:
        super().__init__(message, detail)
        self.result_document = result_document or {}


class AnalysisTimeoutError(AnalysisError):
    """Raised when the job is still running after the last allowed poll."""

    category = "TimeoutError"


class AnalysisCancelled(Exception):
    """Raised when the caller cancels a job while it waits between polls.

    Deliberately not an AnalysisError: cancellation is neither success nor failure.
    """


class AnalysisConfigurationError(AnalysisError, ValueError):
    """Raised when the analysis client cannot be built from the settings."""

    category = "ConfigurationError"
