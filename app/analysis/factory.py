from typing import ClassVar

from app.analysis.base import BaseAnalysisClient
from app.analysis.document_intelligence_adapter import DocumentIntelligenceClient
from app.analysis.example_client_adapter import ExampleAnalysisClient
from app.analysis.exceptions import AnalysisConfigurationError
from app.analysis.models import AnalysisConfig
from app.config.settings import Settings
from app.pdf.base import BasePdfInspector
from app.pdf.factory import PdfInspectorFactory


class AnalysisClientFactory:
    """Creates the configured analysis client adapter."""

    PROVIDERS: ClassVar[tuple[str, ...]] = ("document_intelligence", "example")

    @classmethod
    def create(cls, settings: Settings) -> BaseAnalysisClient:
        """Create a configured analysis client from application settings.

        Raises:
            AnalysisConfigurationError: for an unknown provider or missing settings.
        """
        provider = settings.analysis_provider.lower()
        if provider not in cls.PROVIDERS:
            raise AnalysisConfigurationError(
                f"Unknown analysis provider '{provider}'. Choose from: {list(cls.PROVIDERS)}",
                detail="check ANALYSIS_PROVIDER",
            )
        config = cls.build_config(settings, require_endpoint=provider != "example")
        pdf_inspector = cls._resolve_pdf_inspector(settings)
        if provider == "example":
            return ExampleAnalysisClient(config, pdf_inspector=pdf_inspector)
        return DocumentIntelligenceClient(config=config, pdf_inspector=pdf_inspector)

    @classmethod
    def build_config(cls, settings: Settings, *, require_endpoint: bool = True) -> AnalysisConfig:
        endpoint = settings.analysis_endpoint.strip()
        if require_endpoint:
            missing = [
                name
                for name, value in (
                    ("analysis_endpoint", endpoint),
                    ("analysis_model_id", settings.analysis_model_id),
                    ("analysis_api_key", settings.analysis_api_key),
                )
                if not value
            ]
            if missing:
                raise AnalysisConfigurationError(
                    f"Analysis service is not configured: {', '.join(missing)} is required",
                    detail="set " + ", ".join(name.upper() for name in missing),
                )
        base_urls = [endpoint] if endpoint else []
        base_urls.extend(u for u in settings.analysis_fallback_endpoints if u not in base_urls)
        return AnalysisConfig(
            endpoint_base_urls=base_urls,
            model_id=settings.analysis_model_id,
            api_key=settings.analysis_api_key,
            api_version=settings.analysis_api_version,
            poll_interval_ms=settings.analysis_poll_interval_ms,
            max_poll_attempts=settings.analysis_max_poll_attempts,
            max_file_size_bytes=settings.max_upload_size_bytes,
            allowed_content_types=list(settings.allowed_content_types),
            max_pdf_pages=settings.max_pdf_pages,
            request_timeout_seconds=settings.analysis_timeout_seconds,
        )

    @classmethod
    def _resolve_pdf_inspector(cls, settings: Settings) -> BasePdfInspector | None:
        if settings.max_pdf_pages is None:
            return None
        try:
            return PdfInspectorFactory.create(settings)
        except ValueError as exc:
            raise AnalysisConfigurationError(str(exc), detail="check PDF_ENGINE") from exc
