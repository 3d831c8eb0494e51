import io
from typing import Any

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from app.analysis.models import AnalysisConfig

ENDPOINT = "https://analysis.example.test/documentintelligence"
OPERATION_LOCATION = f"{ENDPOINT}/documentModels/invoice-model/analyzeResults/op-1"


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def analysis_config() -> AnalysisConfig:
    return AnalysisConfig(
        endpoint_base_urls=[ENDPOINT],
        model_id="invoice-model",
        api_key="test-key",
        poll_interval_ms=250,
        max_poll_attempts=5,
        max_file_size_bytes=1024,
    )


@pytest.fixture()
def analyze_result() -> dict[str, Any]:
    """A succeeded analyzeResult with one document and one table."""
    return {
        "documents": [
            {
                "docType": "invoice",
                "confidence": 0.93,
                "fields": {
                    "Vendor": {
                        "type": "string",
                        "valueString": "ACME S.A.",
                        "content": "ACME S.A.",
                        "confidence": 0.98,
                    },
                    "Total": {
                        "type": "number",
                        "valueNumber": 1160.0,
                        "content": "$1,160.00",
                        "confidence": 0.87,
                    },
                    "Items": {
                        "type": "array",
                        "valueArray": [
                            {
                                "type": "object",
                                "valueObject": {
                                    "name": {"type": "string", "valueString": "x", "content": "x"},
                                },
                            },
                        ],
                    },
                },
            }
        ],
        "tables": [
            {
                "rowCount": 2,
                "columnCount": 2,
                "cells": [
                    {"rowIndex": 0, "columnIndex": 0, "content": "H1"},
                    {"rowIndex": 0, "columnIndex": 1, "content": "H2"},
                    {"rowIndex": 1, "columnIndex": 0, "content": "1"},
                    {"rowIndex": 1, "columnIndex": 1, "content": "2"},
                ],
            }
        ],
    }
