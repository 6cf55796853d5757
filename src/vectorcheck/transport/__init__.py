"""
HTTP transport for vectorcheck.

This package issues single JSON or multipart requests against the vectorization
service and manages the bearer token attached to authorized calls.
"""

from .client import TransportClient, TransportResponse
from .multipart import EncodedMultipart, encode_multipart
from .session import SessionManager

__all__ = [
    "TransportClient",
    "TransportResponse",
    "EncodedMultipart",
    "encode_multipart",
    "SessionManager",
]
