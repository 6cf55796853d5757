"""
Pytest configuration and shared fixtures for vectorcheck tests.
"""

import io
from pathlib import Path
from typing import Callable, Dict, Any

import pytest
from rich.console import Console

from vectorcheck.config import HarnessConfig


BASE_URL = "http://vectorizer.test"

# Smallest useful PNG header; the service under test never decodes it
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 56


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def images_dir(tmp_path) -> Path:
    """Directory holding the input images of a suite run."""
    path = tmp_path / "images"
    path.mkdir()
    (path / "logo.png").write_bytes(PNG_BYTES)
    return path


@pytest.fixture
def test_image(images_dir) -> Path:
    """Image uploaded by the stress checks."""
    return images_dir / "logo.png"


@pytest.fixture
def harness_config(tmp_path, images_dir, test_image) -> HarnessConfig:
    """Configuration pointing at a fake service with one two-method case."""
    return HarnessConfig(
        service={"base_url": BASE_URL},
        suite={
            "images_dir": str(images_dir),
            "output_dir": str(tmp_path / "output"),
            "delay": 0,
            "test_cases": [
                {"input_file": "logo.png", "edge_case": "simple-logo"},
            ],
        },
        stress={"test_image": str(test_image)},
    )


@pytest.fixture
def quiet_console() -> Console:
    """Console writing into a buffer instead of the terminal."""
    return Console(file=io.StringIO(), width=120)


# ============================================================================
# SVG Fixtures
# ============================================================================

def make_svg(path_count: int, view_box: bool = True, fill: str = "#112233") -> str:
    """Build an SVG with the given number of filled paths."""
    attributes = ' viewBox="0 0 100 100"' if view_box else ""
    paths = "".join(
        f'<path d="M{i} 0 L{i} 100 L{i + 5} 100 Z" fill="{fill}"/>'
        for i in range(path_count)
    )
    return f'<svg xmlns="http://www.w3.org/2000/svg"{attributes}>{paths}</svg>'


@pytest.fixture
def svg_factory() -> Callable[..., str]:
    """Fixture providing make_svg."""
    return make_svg


@pytest.fixture
def simple_logo_svg() -> str:
    """SVG that satisfies the simple-logo profile."""
    return make_svg(20)


# ============================================================================
# Service Response Fixtures
# ============================================================================

@pytest.fixture
def service_responses(simple_logo_svg) -> Dict[str, Dict[str, Any]]:
    """Canned bodies of a healthy vectorization service."""
    return {
        "health": {"status": "ok", "message": "running", "aiEngineReady": True},
        "login": {"accessToken": "test-token"},
        "me": {"user": {"email": "demo@example.com"}},
        "models": {"models": [{"id": "fast"}]},
        "methods": {"methods": [{"id": "ai"}, {"id": "potrace"}]},
        "vectorize": {"success": True, "method": "ai", "svgContent": simple_logo_svg},
    }
