"""
Aggregation of validation results into a run report.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

from .validator import TestResult
from ..config import AI_METHOD, FALLBACK_METHOD


logger = logging.getLogger(__name__)

AI_RECOMMENDATION = "AI vectorization has high failure rate - check API configuration"
FALLBACK_RECOMMENDATION = (
    "Potrace fallback needs tuning - consider adjusting threshold parameters"
)


@dataclass
class MethodSummary:
    """Pass/fail counts for one vectorization method."""

    total: int = 0
    passed: int = 0
    failed: int = 0

    def add(self, passed: bool) -> None:
        self.total += 1
        if passed:
            self.passed += 1
        else:
            self.failed += 1

    def to_dict(self) -> Dict[str, int]:
        return {"total": self.total, "passed": self.passed, "failed": self.failed}


@dataclass
class Report:
    """Read-only summary of a validation run."""

    total: int
    passed: int
    failed: int
    by_method: Dict[str, MethodSummary]
    tests: List[TestResult]
    recommendations: List[str] = field(default_factory=list)

    @property
    def pass_rate(self) -> str:
        """Percentage of passed tests with two decimals, or N/A without tests."""
        if self.total == 0:
            return "N/A"
        return f"{self.passed / self.total * 100:.2f}%"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": {
                "total": self.total,
                "passed": self.passed,
                "failed": self.failed,
                "passRate": self.pass_rate,
            },
            "byMethod": {
                method: summary.to_dict() for method, summary in self.by_method.items()
            },
            "tests": [test.to_dict() for test in self.tests],
            "recommendations": list(self.recommendations),
        }


def build_report(results: Sequence[TestResult]) -> Report:
    """
    Fold validation results into summary counts and recommendations.

    The AI and fallback buckets are always present; any other method gets a
    bucket the first time it appears. Recommendations are emitted in a fixed
    order: AI first, then fallback.
    """
    by_method: Dict[str, MethodSummary] = {
        AI_METHOD: MethodSummary(),
        FALLBACK_METHOD: MethodSummary(),
    }
    passed = 0
    for result in results:
        by_method.setdefault(result.method, MethodSummary()).add(result.passed)
        if result.passed:
            passed += 1

    recommendations = []
    ai = by_method[AI_METHOD]
    if ai.failed > ai.passed:
        recommendations.append(AI_RECOMMENDATION)

    fallback = by_method[FALLBACK_METHOD]
    if fallback.failed > fallback.passed:
        recommendations.append(FALLBACK_RECOMMENDATION)

    return Report(
        total=len(results),
        passed=passed,
        failed=len(results) - passed,
        by_method=by_method,
        tests=list(results),
        recommendations=recommendations,
    )


def write_report(report: Report, path: Union[str, Path]) -> Path:
    """Serialize a report as indented JSON, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(report.to_dict(), indent=2), encoding="utf-8")
    logger.info(f"Report written to {path}")
    return path
