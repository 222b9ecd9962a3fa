"""pipeline.comparison

Validate, compare and rank the final documents of several backends.
"""

from .engine import ComparisonEngine, recommendations
from .features import compare_features, lower_is_better
from .inspect import PdfInspector
from .model import (
    ComparisonResult,
    FeatureRow,
    PageDiff,
    PairVisualDiff,
    PdfInfo,
    Ranking,
    ValidationCheck,
    ValidationResult,
    VisualDiffSummary,
)
from .ranking import rank, score
from .validate import run_checks, validate_document
from .visual import VisualComparer, diff_pages

__all__ = [
    "ComparisonEngine",
    "ComparisonResult",
    "FeatureRow",
    "PageDiff",
    "PairVisualDiff",
    "PdfInfo",
    "PdfInspector",
    "Ranking",
    "ValidationCheck",
    "ValidationResult",
    "VisualComparer",
    "VisualDiffSummary",
    "compare_features",
    "diff_pages",
    "lower_is_better",
    "rank",
    "recommendations",
    "run_checks",
    "score",
    "validate_document",
]
