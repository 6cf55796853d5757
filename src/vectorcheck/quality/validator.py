"""
Structural validation of vectorized output.

The checks are deliberately textual: an SVG is "valid" if ``<svg`` appears
anywhere in it and paths are counted by literal ``<path`` occurrences. Nothing
is parsed as XML, so malformed markup that contains those markers still
passes. Judgements must stay stable for existing fixtures; do not swap in a
real parser here.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List

from .profiles import QualityProfile, resolve_profile


logger = logging.getLogger(__name__)

SVG_MARKER = "<svg"
PATH_MARKER = "<path"

MIN_CONTENT_SIZE = 100
SUSPICIOUS_SIZE = 50


class ComplexityTier(str, Enum):
    """Coarse bucketing of an SVG's path count."""

    EMPTY = "empty"
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"
    VERY_COMPLEX = "very-complex"

    @classmethod
    def from_path_count(cls, path_count: int) -> "ComplexityTier":
        if path_count <= 0:
            return cls.EMPTY
        if path_count < 10:
            return cls.SIMPLE
        if path_count < 100:
            return cls.MODERATE
        if path_count < 1000:
            return cls.COMPLEX
        return cls.VERY_COMPLEX


@dataclass
class ValidationMetrics:
    """Structural facts about one SVG document."""

    is_valid: bool = False
    has_content: bool = False
    has_paths: bool = False
    path_count: int = 0
    has_view_box: bool = False
    file_size: int = 0
    complexity_tier: ComplexityTier = ComplexityTier.EMPTY
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "hasContent": self.has_content,
            "hasPaths": self.has_paths,
            "pathCount": self.path_count,
            "hasViewBox": self.has_view_box,
            "fileSize": self.file_size,
            "complexity": self.complexity_tier.value,
            "errors": list(self.errors),
        }


@dataclass(frozen=True)
class TestResult:
    """Judgement of one (image, method) execution."""

    __test__ = False  # not a pytest class

    test_name: str
    method: str
    edge_case: str
    timestamp: str
    passed: bool
    metrics: ValidationMetrics
    requirements: QualityProfile
    issues: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "testName": self.test_name,
            "method": self.method,
            "edgeCase": self.edge_case,
            "timestamp": self.timestamp,
            "passed": self.passed,
            "metrics": self.metrics.to_dict(),
            "requirements": self.requirements.to_dict(),
            "issues": list(self.issues),
        }


def judge(metrics: ValidationMetrics, issues: List[str]) -> bool:
    """The pass rule: valid, has paths, and nothing else went wrong."""
    return metrics.is_valid and metrics.has_paths and not issues


class QualityValidator:
    """
    Validates SVG output and accumulates the results of a run.

    ``validate`` is stateless. ``run_test`` appends to ``results`` and is the
    only place a pass/fail decision is made.
    """

    def __init__(self):
        self.results: List[TestResult] = []

    def validate(self, content: Any) -> ValidationMetrics:
        """
        Compute structural metrics for SVG content.

        Never raises; problems are recorded in ``errors``.
        """
        metrics = ValidationMetrics()

        if not content or not isinstance(content, str):
            metrics.errors.append("SVG content is empty or invalid type")
            return metrics

        if SVG_MARKER not in content:
            metrics.errors.append("Content does not appear to be valid SVG")
            return metrics

        metrics.is_valid = True
        metrics.file_size = len(content.encode("utf-8", errors="surrogatepass"))
        metrics.has_content = metrics.file_size > MIN_CONTENT_SIZE

        metrics.path_count = content.count(PATH_MARKER)
        metrics.has_paths = metrics.path_count > 0
        metrics.has_view_box = "viewBox" in content
        metrics.complexity_tier = ComplexityTier.from_path_count(metrics.path_count)

        if metrics.file_size < SUSPICIOUS_SIZE:
            metrics.errors.append("SVG file size is suspiciously small")

        if not metrics.has_paths:
            metrics.errors.append("SVG has no path elements")

        return metrics

    def resolve_profile(self, edge_case: str) -> QualityProfile:
        """Get the thresholds for an edge case (general profile if unknown)."""
        return resolve_profile(edge_case)

    def run_test(
        self,
        content: Any,
        test_name: str,
        method: str,
        edge_case: str = "general",
    ) -> TestResult:
        """
        Validate content against an edge-case profile and record the result.

        Args:
            content: SVG text returned by the service
            test_name: Usually the input image file name
            method: Vectorization method that produced the content
            edge_case: Quality profile name

        Returns:
            The recorded TestResult
        """
        metrics = self.validate(content)
        requirements = self.resolve_profile(edge_case)

        issues = []
        if not metrics.is_valid:
            issues.append("SVG is not valid")

        if metrics.path_count < requirements.min_paths:
            issues.append(
                f"Path count {metrics.path_count} is below minimum {requirements.min_paths}"
            )

        if metrics.path_count > requirements.max_paths:
            issues.append(
                f"Path count {metrics.path_count} exceeds maximum {requirements.max_paths}"
            )

        if metrics.file_size < requirements.min_file_size:
            issues.append(
                f"File size {metrics.file_size} is below minimum {requirements.min_file_size}"
            )

        issues.extend(metrics.errors)

        result = TestResult(
            test_name=test_name,
            method=method,
            edge_case=edge_case,
            timestamp=datetime.now(timezone.utc).isoformat(),
            passed=judge(metrics, issues),
            metrics=metrics,
            requirements=requirements,
            issues=issues,
        )

        self.results.append(result)
        logger.debug(
            f"{test_name} [{method}/{edge_case}]: "
            f"{'passed' if result.passed else 'failed'} ({len(issues)} issues)"
        )
        return result

    def generate_report(self):
        """Summarize every result recorded so far."""
        from .report import build_report

        return build_report(self.results)
