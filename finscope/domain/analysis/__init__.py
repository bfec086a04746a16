"""Financial health analysis: metrics, AI aggregation and monthly persistence."""

from .metrics import FinancialMetrics, compute_metrics
from .schemas import AnalysisRequest, CompleteAnalysis, PartialAnalysis

__all__ = [
    "AnalysisRequest",
    "CompleteAnalysis",
    "FinancialMetrics",
    "PartialAnalysis",
    "compute_metrics",
]
