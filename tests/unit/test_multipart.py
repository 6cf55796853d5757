"""
Unit tests for multipart/form-data encoding.
"""

import pytest

from vectorcheck.transport.multipart import (
    BOUNDARY_PREFIX,
    encode_multipart,
    generate_boundary,
    guess_content_type,
)


class TestBoundary:
    """Test boundary generation."""

    def test_boundary_has_prefix(self):
        """Test that boundaries carry the form boundary prefix."""
        assert generate_boundary().startswith(BOUNDARY_PREFIX)

    def test_boundaries_are_unique(self):
        """Test that two calls never share a boundary."""
        assert len({generate_boundary() for _ in range(50)}) == 50


class TestContentType:
    """Test attachment content type guessing."""

    @pytest.mark.parametrize(
        "file_name,expected",
        [
            ("logo.png", "image/png"),
            ("photo.jpg", "image/jpeg"),
            ("drawing.gif", "image/gif"),
        ],
    )
    def test_known_extensions(self, file_name, expected):
        """Test that common image extensions map to their types."""
        assert guess_content_type(file_name) == expected

    def test_unknown_extension_falls_back_to_png(self):
        """Test that unknown names are uploaded as PNG."""
        assert guess_content_type("upload") == "image/png"


class TestEncodeMultipart:
    """Test the multipart body layout."""

    def test_exact_layout(self):
        """Test fields first, file part last, CRLF line endings."""
        encoded = encode_multipart(
            {"method": "ai"}, "x.png", b"\x89PNG", boundary="B"
        )

        assert encoded.body == (
            b"--B\r\n"
            b'Content-Disposition: form-data; name="method"\r\n\r\n'
            b"ai\r\n"
            b"--B\r\n"
            b'Content-Disposition: form-data; name="image"; filename="x.png"\r\n'
            b"Content-Type: image/png\r\n\r\n"
            b"\x89PNG"
            b"\r\n--B--\r\n"
        )
        assert encoded.content_type == "multipart/form-data; boundary=B"

    def test_fields_keep_insertion_order(self):
        """Test that fields are encoded in iteration order."""
        encoded = encode_multipart(
            {"method": "potrace", "optimize": "true", "removeBackground": "false"},
            "a.png",
            b"",
            boundary="B",
        )

        body = encoded.body
        assert body.index(b'name="method"') < body.index(b'name="optimize"')
        assert body.index(b'name="optimize"') < body.index(b'name="removeBackground"')
        assert body.index(b'name="removeBackground"') < body.index(b'name="image"')

    def test_binary_payload_is_verbatim(self):
        """Test that every byte value survives unchanged."""
        payload = bytes(range(256)) * 4
        encoded = encode_multipart({}, "blob.png", payload, boundary="B")

        head, _, rest = encoded.body.partition(b"Content-Type: image/png\r\n\r\n")
        assert rest[: len(payload)] == payload
        assert rest[len(payload):] == b"\r\n--B--\r\n"
        assert head.count(b"--B\r\n") == 1

    def test_non_string_values_use_str(self):
        """Test that scalar values are written with str()."""
        encoded = encode_multipart({"threshold": 128, "flag": True}, "a.png", b"", boundary="B")

        assert b"\r\n\r\n128\r\n" in encoded.body
        assert b"\r\n\r\nTrue\r\n" in encoded.body

    def test_custom_file_field_and_content_type(self):
        """Test overriding the attachment field name and type."""
        encoded = encode_multipart(
            {}, "scan", b"data", file_field="file", content_type="image/webp", boundary="B"
        )

        assert b'name="file"; filename="scan"' in encoded.body
        assert b"Content-Type: image/webp" in encoded.body

    def test_deterministic_given_boundary(self):
        """Test that the same arguments give the same body."""
        first = encode_multipart({"a": "1"}, "f.png", b"xyz", boundary="fixed")
        second = encode_multipart({"a": "1"}, "f.png", b"xyz", boundary="fixed")

        assert first == second

    def test_generated_boundary_terminates_body(self):
        """Test that a generated boundary is used for every delimiter."""
        encoded = encode_multipart({"method": "ai"}, "f.png", b"xyz")

        assert encoded.boundary.startswith(BOUNDARY_PREFIX)
        assert encoded.body.startswith(f"--{encoded.boundary}\r\n".encode())
        assert encoded.body.endswith(f"\r\n--{encoded.boundary}--\r\n".encode())
