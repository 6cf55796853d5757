"""
Unit tests for quality profiles and SVG validation.
"""

import json

import pytest

from vectorcheck.quality.profiles import DEFAULT_PROFILE, PROFILES, resolve_profile
from vectorcheck.quality.validator import (
    ComplexityTier,
    QualityValidator,
    ValidationMetrics,
    judge,
)


TWO_PATH_ICON = '<svg viewBox="0 0 10 10"><path d="M0 0"/><path d="M1 1"/></svg>'


class TestProfiles:
    """Test the edge-case profile table."""

    def test_all_profiles_present(self):
        """Test that every documented category has a profile."""
        assert set(PROFILES) == {
            "simple-logo",
            "complex-illustration",
            "line-art",
            "photograph",
            "icon",
            "high-contrast",
            "low-contrast",
            "transparent-bg",
        }

    @pytest.mark.parametrize(
        "name,min_paths,max_paths,min_file_size",
        [
            ("simple-logo", 3, 50, 500),
            ("complex-illustration", 50, 5000, 5000),
            ("line-art", 5, 200, 1000),
            ("photograph", 100, 10000, 10000),
            ("icon", 1, 30, 300),
            ("high-contrast", 5, 500, 1000),
            ("low-contrast", 10, 1000, 2000),
            ("transparent-bg", 3, 500, 500),
        ],
    )
    def test_thresholds(self, name, min_paths, max_paths, min_file_size):
        """Test the thresholds of each profile."""
        profile = PROFILES[name]
        assert (profile.min_paths, profile.max_paths, profile.min_file_size) == (
            min_paths,
            max_paths,
            min_file_size,
        )

    def test_profiles_are_well_formed(self):
        """Test that every profile has a usable range."""
        for profile in list(PROFILES.values()) + [DEFAULT_PROFILE]:
            assert 0 <= profile.min_paths <= profile.max_paths
            assert profile.min_file_size >= 0

    def test_default_profile(self):
        """Test the general fallback thresholds."""
        assert (DEFAULT_PROFILE.min_paths, DEFAULT_PROFILE.max_paths, DEFAULT_PROFILE.min_file_size) == (1, 10000, 100)
        assert DEFAULT_PROFILE.description == "General test case"

    @pytest.mark.parametrize("name", ["general", "", "Simple-Logo", "does-not-exist"])
    def test_unknown_names_fall_back(self, name):
        """Test that lookup is exact and total."""
        assert resolve_profile(name) is DEFAULT_PROFILE

    def test_to_dict_keys(self):
        """Test the report representation of a profile."""
        assert PROFILES["icon"].to_dict() == {
            "minPaths": 1,
            "maxPaths": 30,
            "minFileSize": 300,
            "description": "Icons should be simple and minimal",
        }


class TestComplexityTier:
    """Test path-count bucketing."""

    @pytest.mark.parametrize(
        "count,tier",
        [
            (0, ComplexityTier.EMPTY),
            (1, ComplexityTier.SIMPLE),
            (9, ComplexityTier.SIMPLE),
            (10, ComplexityTier.MODERATE),
            (99, ComplexityTier.MODERATE),
            (100, ComplexityTier.COMPLEX),
            (999, ComplexityTier.COMPLEX),
            (1000, ComplexityTier.VERY_COMPLEX),
        ],
    )
    def test_boundaries(self, count, tier):
        """Test the tier boundaries."""
        assert ComplexityTier.from_path_count(count) == tier

    def test_string_values(self):
        """Test the serialized tier names."""
        assert ComplexityTier.VERY_COMPLEX.value == "very-complex"
        assert ComplexityTier.EMPTY.value == "empty"


class TestValidate:
    """Test structural metrics."""

    def setup_method(self):
        self.validator = QualityValidator()

    @pytest.mark.parametrize("content", ["", None, 42, b"<svg></svg>"])
    def test_empty_or_wrong_type(self, content):
        """Test that missing content is invalid with zeroed metrics."""
        metrics = self.validator.validate(content)

        assert not metrics.is_valid
        assert metrics.path_count == 0
        assert metrics.file_size == 0
        assert metrics.complexity_tier == ComplexityTier.EMPTY
        assert metrics.errors == ["SVG content is empty or invalid type"]

    def test_not_svg(self):
        """Test that text without an svg tag is invalid."""
        metrics = self.validator.validate("<html><body>nope</body></html>")

        assert not metrics.is_valid
        assert metrics.errors == ["Content does not appear to be valid SVG"]

    def test_two_path_icon(self):
        """Test metrics of a tiny two-path SVG."""
        metrics = self.validator.validate(TWO_PATH_ICON)

        assert metrics.is_valid
        assert metrics.path_count == 2
        assert metrics.has_paths
        assert metrics.has_view_box
        assert metrics.file_size == len(TWO_PATH_ICON.encode("utf-8"))
        assert not metrics.has_content
        assert metrics.complexity_tier == ComplexityTier.SIMPLE
        assert metrics.errors == []

    def test_size_counts_utf8_bytes(self):
        """Test that file size is measured in encoded bytes."""
        content = '<svg><path d="M0 0"/><text>ü€</text></svg>'
        metrics = self.validator.validate(content)

        assert metrics.file_size == len(content.encode("utf-8"))
        assert metrics.file_size > len(content)

    def test_lone_surrogate_is_measured(self):
        """Test that an unpaired surrogate from a JSON body does not break sizing."""
        content = json.loads('"<svg viewBox=\\"0 0 1 1\\"><path d=\\"M0 0\\"/>\\ud800</svg>"')
        metrics = self.validator.validate(content)

        assert metrics.is_valid
        assert metrics.path_count == 1
        assert metrics.file_size == len(content.encode("utf-8", errors="surrogatepass"))
        assert metrics.file_size == len(content) + 2

    @pytest.mark.parametrize(
        "content",
        ["", None, TWO_PATH_ICON, "<svg <path <path unclosed", "<html></html>"],
    )
    def test_repeated_validation_is_identical(self, content):
        """Test that validating the same content twice gives equal metrics."""
        assert self.validator.validate(content) == self.validator.validate(content)

    @pytest.mark.parametrize("path_count", [0, 5, 40])
    def test_repeated_validation_of_generated_svg(self, svg_factory, path_count):
        content = svg_factory(path_count)
        first = self.validator.validate(content)

        assert self.validator.validate(content) == first
        assert self.validator.validate(content).to_dict() == first.to_dict()

    def test_suspiciously_small(self):
        """Test the soft error for tiny documents."""
        metrics = self.validator.validate("<svg><path/></svg>")

        assert metrics.is_valid
        assert "SVG file size is suspiciously small" in metrics.errors

    def test_no_paths(self, svg_factory):
        """Test the soft error for documents without paths."""
        metrics = self.validator.validate(svg_factory(0))

        assert metrics.is_valid
        assert not metrics.has_paths
        assert metrics.complexity_tier == ComplexityTier.EMPTY
        assert "SVG has no path elements" in metrics.errors

    def test_content_threshold(self, svg_factory):
        """Test that has_content means more than 100 bytes."""
        assert self.validator.validate(svg_factory(5)).has_content

    def test_marker_anywhere_is_valid(self):
        """Test that the svg marker is not required at the start."""
        metrics = self.validator.validate('<?xml version="1.0"?>\n<svg><path d="M0 0"/></svg>')
        assert metrics.is_valid

    def test_malformed_markup_with_marker_is_valid(self):
        """Test that markup is not parsed, only scanned for markers."""
        metrics = self.validator.validate("<svg <path <path unclosed")

        assert metrics.is_valid
        assert metrics.path_count == 2

    def test_path_prefix_is_counted(self):
        """Test that path counting is textual."""
        metrics = self.validator.validate("<svg><pathology/><path/></svg>")
        assert metrics.path_count == 2

    def test_validate_does_not_record(self):
        """Test that validate leaves the result list alone."""
        self.validator.validate(TWO_PATH_ICON)
        assert self.validator.results == []

    def test_metrics_to_dict(self):
        """Test the report representation of metrics."""
        data = self.validator.validate(TWO_PATH_ICON).to_dict()

        assert data["isValid"] is True
        assert data["pathCount"] == 2
        assert data["complexity"] == "simple"
        assert set(data) == {
            "isValid",
            "hasContent",
            "hasPaths",
            "pathCount",
            "hasViewBox",
            "fileSize",
            "complexity",
            "errors",
        }


class TestRunTest:
    """Test judging content against a profile."""

    def setup_method(self):
        self.validator = QualityValidator()

    def test_small_icon_fails_on_size(self):
        """Test that a tiny icon fails only the file-size threshold."""
        result = self.validator.run_test(TWO_PATH_ICON, "icon.png", "ai", "icon")
        size = len(TWO_PATH_ICON.encode("utf-8"))

        assert not result.passed
        assert result.issues == [f"File size {size} is below minimum 300"]
        assert result.requirements is PROFILES["icon"]
        assert result.metrics.path_count == 2

    def test_empty_content(self):
        """Test the issues recorded for empty content."""
        result = self.validator.run_test("", "x.png", "ai", "general")

        assert not result.passed
        assert result.issues == [
            "SVG is not valid",
            "Path count 0 is below minimum 1",
            "File size 0 is below minimum 100",
            "SVG content is empty or invalid type",
        ]

    def test_passing_simple_logo(self, simple_logo_svg):
        """Test content inside every simple-logo threshold."""
        result = self.validator.run_test(simple_logo_svg, "logo.png", "potrace", "simple-logo")

        assert result.passed
        assert result.issues == []
        assert result.metrics.complexity_tier == ComplexityTier.MODERATE

    def test_too_many_paths(self, svg_factory):
        """Test the maximum path threshold."""
        result = self.validator.run_test(svg_factory(31), "icon.png", "ai", "icon")

        assert not result.passed
        assert "Path count 31 exceeds maximum 30" in result.issues

    def test_too_few_paths(self, svg_factory):
        """Test the minimum path threshold."""
        result = self.validator.run_test(svg_factory(10), "photo.png", "ai", "photograph")

        assert "Path count 10 is below minimum 100" in result.issues

    def test_unknown_edge_case_uses_general(self, svg_factory):
        """Test that unknown categories are judged by the general profile."""
        result = self.validator.run_test(svg_factory(5), "x.png", "ai", "mystery")

        assert result.passed
        assert result.edge_case == "mystery"
        assert result.requirements is DEFAULT_PROFILE

    def test_results_accumulate_in_order(self, svg_factory):
        """Test that each run appends one result."""
        first = self.validator.run_test(svg_factory(5), "a.png", "ai")
        second = self.validator.run_test("", "b.png", "potrace")

        assert self.validator.results == [first, second]

    def test_passed_implies_valid_with_paths(self, svg_factory):
        """Test the pass rule across a range of inputs."""
        inputs = ["", "plain", "<svg></svg>", TWO_PATH_ICON, svg_factory(0), svg_factory(3), svg_factory(40)]
        for content in inputs:
            for edge_case in ["general", "icon", "simple-logo"]:
                result = self.validator.run_test(content, "x.png", "ai", edge_case)
                if result.passed:
                    assert result.metrics.is_valid
                    assert result.metrics.has_paths
                    assert result.issues == []
                else:
                    assert result.issues

    def test_result_to_dict(self):
        """Test the report representation of a result."""
        data = self.validator.run_test(TWO_PATH_ICON, "icon.png", "ai", "icon").to_dict()

        assert data["testName"] == "icon.png"
        assert data["method"] == "ai"
        assert data["edgeCase"] == "icon"
        assert data["passed"] is False
        assert data["requirements"]["minFileSize"] == 300
        assert data["metrics"]["pathCount"] == 2
        assert data["timestamp"].endswith("+00:00")


class TestJudge:
    """Test the pass rule directly."""

    def test_requires_validity(self):
        assert not judge(ValidationMetrics(is_valid=False, has_paths=True), [])

    def test_requires_paths(self):
        assert not judge(ValidationMetrics(is_valid=True, has_paths=False), [])

    def test_requires_no_issues(self):
        assert not judge(ValidationMetrics(is_valid=True, has_paths=True), ["x"])

    def test_passes(self):
        assert judge(ValidationMetrics(is_valid=True, has_paths=True), [])
