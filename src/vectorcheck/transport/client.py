"""
Single-shot HTTP transport for the vectorization service.

Every call returns the status and body of exactly one request. There are no
retries; a non-2xx status is returned as data and only a failure to get any
response raises.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import aiohttp

from .multipart import encode_multipart
from ..exceptions import TransportError


logger = logging.getLogger(__name__)

USER_AGENT = "vectorcheck/0.1"


@dataclass(frozen=True)
class TransportResponse:
    """Normalized result of one request."""

    status: int
    data: Any

    @property
    def ok(self) -> bool:
        """Check if the status is 2xx."""
        return 200 <= self.status < 300

    def field(self, name: str, default: Any = None) -> Any:
        """Get a top-level field from a JSON object body."""
        if isinstance(self.data, dict):
            return self.data.get(name, default)
        return default

    @property
    def message(self) -> Optional[str]:
        """Server-supplied message or error text, if any."""
        return self.field("message") or self.field("error")


def parse_body(raw: bytes) -> Any:
    """Parse a response body as JSON, falling back to the raw text."""
    text = raw.decode("utf-8", errors="replace")
    try:
        return json.loads(text)
    except ValueError:
        return text


class TransportClient:
    """
    Thin aiohttp wrapper issuing JSON and multipart requests.

    One ``ClientSession`` is created lazily and reused until ``close()``.
    The client can be used as an async context manager.
    """

    def __init__(self, timeout: Optional[float] = None):
        """
        Initialize the transport.

        Args:
            timeout: Total timeout per request in seconds; None never times out
        """
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={"User-Agent": USER_AGENT},
            )
        return self._session

    async def send_json(
        self,
        url: str,
        method: str = "GET",
        body: Optional[Any] = None,
        token: Optional[str] = None,
    ) -> TransportResponse:
        """
        Issue a request with an optional JSON body.

        Args:
            url: Absolute request URL
            method: HTTP method
            body: JSON-serializable payload, omitted when None
            token: Bearer token for the Authorization header

        Returns:
            Status and parsed body

        Raises:
            TransportError: If no response could be obtained
        """
        payload = json.dumps(body).encode("utf-8") if body is not None else b""
        headers = {
            "Content-Type": "application/json",
            "Content-Length": str(len(payload)),
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        return await self._request(method, url, payload or None, headers)

    async def send_multipart(
        self,
        url: str,
        token: Optional[str],
        file_path: Union[str, Path],
        fields: Mapping[str, object],
        file_field: str = "image",
    ) -> TransportResponse:
        """
        Upload a file plus scalar fields as multipart/form-data via POST.

        Raises:
            TransportError: If the file cannot be read or no response arrives
        """
        path = Path(file_path)
        try:
            file_bytes = path.read_bytes()
        except OSError as e:
            raise TransportError(f"Cannot read upload file {path}", url=url, cause=e) from e

        encoded = encode_multipart(fields, path.name, file_bytes, file_field=file_field)
        headers = {
            "Content-Type": encoded.content_type,
            "Content-Length": str(len(encoded.body)),
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        logger.debug(
            f"Uploading {path.name} ({len(file_bytes)} bytes) to {url} "
            f"with fields {sorted(fields)}"
        )
        return await self._request("POST", url, encoded.body, headers)

    async def _request(
        self,
        method: str,
        url: str,
        data: Optional[bytes],
        headers: Dict[str, str],
    ) -> TransportResponse:
        session = await self._get_session()
        try:
            async with session.request(method, url, data=data, headers=headers) as response:
                raw = await response.read()
                result = TransportResponse(status=response.status, data=parse_body(raw))
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            raise TransportError(f"{method} request failed", url=url, cause=e) from e

        logger.debug(f"{method} {url} -> {result.status}")
        return result

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
