#!/usr/bin/env python3
"""Mock vectorization service for running vectorcheck without the real backend."""

import json
import logging
import re
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "demo123"
DEMO_TOKEN = "mock-access-token"

NAME_PATTERN = re.compile(rb'name="([^"]*)"')
FILENAME_PATTERN = re.compile(rb'filename="([^"]*)"')


def parse_multipart(content_type, body):
    """Split a multipart body into ({field: value}, {file field: bytes})."""
    match = re.search(r"boundary=([^;]+)", content_type or "")
    if not match:
        return {}, {}

    delimiter = b"--" + match.group(1).strip().encode()
    fields, files = {}, {}
    for part in body.split(delimiter)[1:]:
        if part.startswith(b"--"):
            break
        head, _, content = part.partition(b"\r\n\r\n")
        content = content[:-2] if content.endswith(b"\r\n") else content
        name = NAME_PATTERN.search(head)
        if not name:
            continue
        if FILENAME_PATTERN.search(head):
            files[name.group(1).decode()] = content
        else:
            fields[name.group(1).decode()] = content.decode("utf-8", errors="replace")
    return fields, files


def generate_mock_svg(image_bytes, path_count):
    """Generate a deterministic SVG with the requested number of paths."""
    seed = sum(image_bytes[:64]) % 97
    paths = "".join(
        f'<path d="M{i} {seed} L{i + 10} {seed + i} Z" fill="#{(i * 40503) % 0xFFFFFF:06x}"/>'
        for i in range(path_count)
    )
    return (
        '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 512 512" '
        f'width="512" height="512">{paths}</svg>'
    )


class MockVectorizerHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the mock vectorization API."""

    def _send_json(self, status, payload):
        body = json.dumps(payload).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _read_body(self):
        length = int(self.headers.get("Content-Length") or 0)
        return self.rfile.read(length) if length else b""

    def _authorized(self):
        return self.headers.get("Authorization") == f"Bearer {DEMO_TOKEN}"

    def do_GET(self):
        """Handle GET requests."""
        if self.path == "/api/health":
            self._send_json(200, {
                "status": "ok",
                "message": "mock vectorizer",
                "aiEngineReady": self.server.ai_ready,
            })
        elif self.path == "/api/auth/me":
            if not self._authorized():
                self._send_json(401, {"success": False, "message": "Authentication required"})
            else:
                self._send_json(200, {"user": {"email": DEMO_EMAIL, "name": "Demo"}})
        elif self.path == "/api/background-removal-models":
            self._send_json(200, {"models": [{"id": "fast"}, {"id": "quality"}]})
        elif self.path == "/api/methods":
            self._send_json(200, {"methods": [{"id": "ai"}, {"id": "potrace"}]})
        else:
            self._send_json(404, {"success": False, "message": "Not found"})

    def do_POST(self):
        """Handle POST requests."""
        body = self._read_body()

        if self.path == "/api/auth/login":
            try:
                credentials = json.loads(body or b"{}")
            except ValueError:
                credentials = {}
            if (
                credentials.get("email") == DEMO_EMAIL
                and credentials.get("password") == DEMO_PASSWORD
            ):
                self._send_json(200, {"accessToken": DEMO_TOKEN})
            else:
                self._send_json(401, {"success": False, "message": "Invalid credentials"})
            return

        if self.path not in ("/api/remove-background", "/api/vectorize"):
            self._send_json(404, {"success": False, "message": "Not found"})
            return

        if not self._authorized():
            self._send_json(401, {"success": False, "message": "Authentication required"})
            return

        fields, files = parse_multipart(self.headers.get("Content-Type"), body)
        image = files.get("image")
        if not image:
            self._send_json(400, {"success": False, "error": "No image file provided"})
            return

        if self.path == "/api/remove-background":
            self._send_json(200, {"success": True, "message": "Background removed"})
            return

        method = fields.get("method", "ai")
        if method == "ai" and not self.server.ai_ready:
            self._send_json(500, {"success": False, "message": "AI engine not configured"})
            return

        self._send_json(200, {
            "success": True,
            "method": method,
            "svgContent": generate_mock_svg(image, self.server.path_count),
        })

    def log_message(self, format, *args):
        """Override to use logger instead of stderr."""
        logger.info(f"{self.client_address[0]} - {format % args}")


def create_server(host="", port=3000, ai_ready=True, path_count=12):
    """Create (but do not start) a mock server; port 0 picks a free port."""
    httpd = ThreadingHTTPServer((host, port), MockVectorizerHandler)
    httpd.ai_ready = ai_ready
    httpd.path_count = path_count
    return httpd


def start_in_thread(**kwargs):
    """Start a mock server on a daemon thread and return it."""
    httpd = create_server(**kwargs)
    threading.Thread(target=httpd.serve_forever, daemon=True).start()
    return httpd


def run_server(port=3000):
    """Run the mock vectorization server."""
    httpd = create_server(port=port)
    logger.info(f"Mock vectorizer listening on port {port}")
    httpd.serve_forever()

if __name__ == '__main__':
    run_server()
