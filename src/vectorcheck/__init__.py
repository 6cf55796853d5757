"""
vectorcheck: Quality validation and stress testing for raster-to-vector services.

vectorcheck drives an image vectorization API with real uploads, judges the SVG it
returns against per-category structural thresholds, and hammers the upload path
with authenticated concurrent requests to catch protocol regressions.
"""

__version__ = "0.1.0"
__author__ = "vectorcheck Contributors"

from .config import HarnessConfig
from .exceptions import (
    AuthError,
    CheckFailedError,
    ConfigurationError,
    TransportError,
    VectorCheckError,
)

__all__ = [
    "__version__",
    "HarnessConfig",
    "VectorCheckError",
    "ConfigurationError",
    "TransportError",
    "AuthError",
    "CheckFailedError",
]
