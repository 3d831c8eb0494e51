"""Local checks applied to a document before it is sent anywhere."""

from app.analysis.exceptions import AnalysisValidationError
from app.analysis.models import AnalysisConfig
from app.pdf.base import BasePdfInspector
from app.pdf.exceptions import PdfInspectionError

_PDF_MEDIA_TYPE = "application/pdf"


def media_type(content_type: str) -> str:
    """Strip parameters and case from a Content-Type value."""
    return content_type.split(";", 1)[0].strip().lower()


def validate_document(
    source_bytes: bytes,
    content_type: str,
    config: AnalysisConfig,
    pdf_inspector: BasePdfInspector | None = None,
) -> None:
    """Reject empty, oversized or unsupported documents.

    Raises:
        AnalysisValidationError: on the first failed check.
    """
    if not source_bytes:
        raise AnalysisValidationError("Document is empty")

    size = len(source_bytes)
    if size > config.max_file_size_bytes:
        raise AnalysisValidationError(
            f"Document is {size} bytes; the limit is {config.max_file_size_bytes} bytes"
        )

    kind = media_type(content_type)
    allowed = {media_type(t) for t in config.allowed_content_types}
    if kind not in allowed:
        raise AnalysisValidationError(
            f"Content type '{content_type}' is not accepted",
            detail=f"accepted types: {sorted(allowed)}",
        )

    if kind == _PDF_MEDIA_TYPE and config.max_pdf_pages is not None:
        _check_page_count(source_bytes, config.max_pdf_pages, pdf_inspector)


def _check_page_count(
    source_bytes: bytes,
    max_pages: int,
    pdf_inspector: BasePdfInspector | None,
) -> None:
    if pdf_inspector is None:
        raise ValueError("max_pdf_pages is set but no PDF inspector was provided")
    try:
        pages = pdf_inspector.page_count(source_bytes)
    except PdfInspectionError as exc:
        raise AnalysisValidationError("PDF could not be read", detail=str(exc)) from exc
    if pages > max_pages:
        raise AnalysisValidationError(
            f"PDF has {pages} pages; the limit is {max_pages}"
        )
