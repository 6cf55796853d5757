"""
multipart/form-data encoding for image uploads.

Bodies are built by hand with a fixed part layout: scalar fields first, the
file part last, CRLF line endings throughout.
"""

import mimetypes
import uuid
from typing import Mapping, NamedTuple, Optional


BOUNDARY_PREFIX = "----FormBoundary"
DEFAULT_CONTENT_TYPE = "image/png"
CRLF = "\r\n"


class EncodedMultipart(NamedTuple):
    """An encoded multipart body and the boundary that delimits it."""

    body: bytes
    boundary: str

    @property
    def content_type(self) -> str:
        """Value for the request's Content-Type header."""
        return f"multipart/form-data; boundary={self.boundary}"


def generate_boundary() -> str:
    """Return a fresh, unpredictable boundary token."""
    return BOUNDARY_PREFIX + uuid.uuid4().hex


def guess_content_type(file_name: str) -> str:
    """Guess an image content type from a file name, falling back to PNG."""
    guessed, _ = mimetypes.guess_type(file_name)
    return guessed or DEFAULT_CONTENT_TYPE


def encode_multipart(
    fields: Mapping[str, object],
    file_name: str,
    file_bytes: bytes,
    file_field: str = "image",
    content_type: Optional[str] = None,
    boundary: Optional[str] = None,
) -> EncodedMultipart:
    """
    Encode scalar fields plus one binary attachment as multipart/form-data.

    Field values are written with ``str()`` and are not validated or escaped.
    The attachment bytes are copied verbatim. Apart from the boundary, the
    output depends only on the arguments.

    Args:
        fields: Field name to scalar value, encoded in iteration order
        file_name: File name reported for the attachment
        file_bytes: Raw attachment content
        file_field: Form field name of the attachment
        content_type: Attachment content type (guessed from file_name if omitted)
        boundary: Boundary token (a random one is generated if omitted)

    Returns:
        The encoded body and its boundary
    """
    boundary = boundary or generate_boundary()
    content_type = content_type or guess_content_type(file_name)

    parts = []
    for name, value in fields.items():
        parts.append(
            f"--{boundary}{CRLF}"
            f'Content-Disposition: form-data; name="{name}"{CRLF}{CRLF}'
            f"{value}{CRLF}"
        )

    parts.append(
        f"--{boundary}{CRLF}"
        f'Content-Disposition: form-data; name="{file_field}"; filename="{file_name}"{CRLF}'
        f"Content-Type: {content_type}{CRLF}{CRLF}"
    )

    head = "".join(parts).encode("utf-8")
    tail = f"{CRLF}--{boundary}--{CRLF}".encode("utf-8")

    return EncodedMultipart(body=head + bytes(file_bytes) + tail, boundary=boundary)
