"""
Extended SVG analysis.

Scores how much of a "true vector" an SVG is: whether it smuggles a raster
image, how many drawing elements it has, whether it scales, and whether it
carries colour. The score is informational and never affects pass/fail.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from ..config import AI_METHOD, FALLBACK_METHOD


VECTOR_ELEMENT_PATTERNS = [
    re.compile(r"<path"),
    re.compile(r"<circle"),
    re.compile(r"<rect"),
    re.compile(r"<polygon"),
    re.compile(r"<polyline"),
    re.compile(r"<ellipse"),
    re.compile(r"<line"),
]

IMAGE_TAG = re.compile(r"<image\s")
BASE64_RASTER = re.compile(r"data:image/(png|jpg|jpeg|gif|webp);base64,")
COLOR_PATTERNS = [
    re.compile(r"""fill\s*=\s*["'](?!none)([^"']+)["']"""),
    re.compile(r"""stroke\s*=\s*["'](?!none)([^"']+)["']"""),
]

ONE_MB = 1024 * 1024


@dataclass
class SvgAnalysis:
    """Extended quality facts about one SVG."""

    is_valid: bool = False
    is_true_vector: bool = False
    has_embedded_raster: bool = False
    vector_elements: int = 0
    path_count: int = 0
    has_view_box: bool = False
    colors: List[str] = field(default_factory=list)
    file_size: int = 0
    score: int = 0
    grade: str = "unknown"
    warnings: List[str] = field(default_factory=list)

    @property
    def color_count(self) -> int:
        return len(self.colors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "isTrueVector": self.is_true_vector,
            "hasEmbeddedRaster": self.has_embedded_raster,
            "vectorElements": self.vector_elements,
            "pathCount": self.path_count,
            "hasViewBox": self.has_view_box,
            "colorCount": self.color_count,
            "fileSize": self.file_size,
            "score": self.score,
            "quality": self.grade,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class SizeComparison:
    """Byte sizes of a source raster and the SVG traced from it."""

    original_size: int
    vector_size: int

    @property
    def compression_ratio(self) -> float:
        if self.vector_size == 0:
            return 0.0
        return round(self.original_size / self.vector_size, 2)


def analyze_svg(content: Any) -> SvgAnalysis:
    """Analyze SVG content and score it from 0 to 100."""
    analysis = SvgAnalysis()

    if not content or not isinstance(content, str):
        analysis.warnings.append("Invalid SVG content")
        return analysis

    if "<svg" not in content:
        analysis.warnings.append("Content is not valid SVG format")
        return analysis

    analysis.is_valid = True
    analysis.file_size = len(content.encode("utf-8", errors="surrogatepass"))

    if IMAGE_TAG.search(content) or BASE64_RASTER.search(content):
        analysis.has_embedded_raster = True
        analysis.warnings.append("Contains embedded raster image - not a true vector")
    else:
        analysis.is_true_vector = True

    analysis.vector_elements = sum(
        len(pattern.findall(content)) for pattern in VECTOR_ELEMENT_PATTERNS
    )
    analysis.path_count = content.count("<path")

    analysis.has_view_box = "viewBox" in content
    if not analysis.has_view_box:
        analysis.warnings.append("Missing viewBox - may not scale properly")

    if analysis.vector_elements == 0 and not analysis.has_embedded_raster:
        analysis.warnings.append("No vector elements found - SVG may be empty")
        analysis.is_true_vector = False

    colors = []
    for pattern in COLOR_PATTERNS:
        for match in pattern.finditer(content):
            if match.group(1) not in colors:
                colors.append(match.group(1))
    analysis.colors = colors

    analysis.score = _score(analysis)
    analysis.grade = _grade(analysis)

    if analysis.file_size > ONE_MB:
        analysis.warnings.append("File size is very large (>1MB)")
    if analysis.path_count > 5000:
        analysis.warnings.append("Very high path count may indicate over-tracing")
    if not colors:
        analysis.warnings.append("No colors detected (may be monochrome)")

    return analysis


def _score(analysis: SvgAnalysis) -> int:
    score = 0
    if analysis.is_true_vector:
        score += 30
    if analysis.is_valid:
        score += 15
    if analysis.vector_elements > 0:
        score += 25
    if analysis.has_view_box:
        score += 15
    if 100 < analysis.file_size < ONE_MB:
        score += 5
    if 3 <= analysis.vector_elements <= 5000:
        score += 5
    if analysis.colors:
        score += 5
    return score


def _grade(analysis: SvgAnalysis) -> str:
    if analysis.has_embedded_raster:
        return "poor"
    if analysis.score >= 90:
        return "excellent"
    if analysis.score >= 70:
        return "good"
    if analysis.score >= 50:
        return "fair"
    return "poor"


def method_recommendations(method: str, analysis: SvgAnalysis) -> List[str]:
    """Advice on whether the method suited the image it traced."""
    recommendations = []

    if method == FALLBACK_METHOD:
        if analysis.color_count > 1:
            recommendations.append(
                "Potrace may not preserve colors - consider using AI method"
            )
        if analysis.path_count >= 100:
            recommendations.append("Complex images work better with AI vectorization")
        recommendations.append("Potrace is best for simple black & white graphics")

    elif method == AI_METHOD:
        if analysis.grade == "excellent":
            recommendations.append("Excellent quality - ready for production use")
        if analysis.file_size > 500 * 1024:
            recommendations.append("Consider optimizing SVG for web use")

    return recommendations


def compare_sizes(source_path: Union[str, Path], svg_content: str) -> SizeComparison:
    """Compare the byte size of a source image with its SVG."""
    return SizeComparison(
        original_size=Path(source_path).stat().st_size,
        vector_size=len(svg_content.encode("utf-8", errors="surrogatepass")),
    )
