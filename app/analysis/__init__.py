from app.analysis.base import BaseAnalysisClient
from app.analysis.factory import AnalysisClientFactory
from app.analysis.models import NormalizedDocument, SubmissionJob

__all__ = [
    "AnalysisClientFactory",
    "BaseAnalysisClient",
    "NormalizedDocument",
    "SubmissionJob",
]
