"""
Edge-case quality profiles.

Each profile bounds the structure expected from an SVG traced from one
category of image. Lookup is total: unknown names get the general profile.
"""

import logging
from dataclasses import dataclass
from typing import Dict


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QualityProfile:
    """Structural acceptance thresholds for one image category."""

    min_paths: int
    max_paths: int
    min_file_size: int
    description: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "minPaths": self.min_paths,
            "maxPaths": self.max_paths,
            "minFileSize": self.min_file_size,
            "description": self.description,
        }


DEFAULT_PROFILE = QualityProfile(
    min_paths=1,
    max_paths=10000,
    min_file_size=100,
    description="General test case",
)

PROFILES: Dict[str, QualityProfile] = {
    "simple-logo": QualityProfile(
        3, 50, 500, "Simple logo should have moderate path count"
    ),
    "complex-illustration": QualityProfile(
        50, 5000, 5000, "Complex illustration should have many paths"
    ),
    "line-art": QualityProfile(
        5, 200, 1000, "Line art should have clean, simple paths"
    ),
    "photograph": QualityProfile(
        100, 10000, 10000, "Photographs should be highly detailed"
    ),
    "icon": QualityProfile(
        1, 30, 300, "Icons should be simple and minimal"
    ),
    "high-contrast": QualityProfile(
        5, 500, 1000, "High contrast images should vectorize cleanly"
    ),
    "low-contrast": QualityProfile(
        10, 1000, 2000, "Low contrast may need more detail"
    ),
    "transparent-bg": QualityProfile(
        3, 500, 500, "Transparent backgrounds should be preserved"
    ),
}


def resolve_profile(edge_case: str) -> QualityProfile:
    """Look up a profile by exact name, substituting the default for unknown names."""
    profile = PROFILES.get(edge_case)
    if profile is None:
        logger.debug(f"Unknown edge case '{edge_case}', using general profile")
        return DEFAULT_PROFILE
    return profile
