"""
SVG quality judgement for vectorcheck.

This package scores vectorized output against per-category structural
thresholds and folds the results of a run into a report.
"""

from .profiles import DEFAULT_PROFILE, PROFILES, QualityProfile, resolve_profile
from .validator import ComplexityTier, QualityValidator, TestResult, ValidationMetrics
from .report import Report, build_report, write_report
from .analysis import SvgAnalysis, analyze_svg, method_recommendations

__all__ = [
    "QualityProfile",
    "PROFILES",
    "DEFAULT_PROFILE",
    "resolve_profile",
    "ComplexityTier",
    "QualityValidator",
    "TestResult",
    "ValidationMetrics",
    "Report",
    "build_report",
    "write_report",
    "SvgAnalysis",
    "analyze_svg",
    "method_recommendations",
]
