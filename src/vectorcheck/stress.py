"""
Stress checks against a live vectorization service.

The driver runs a fixed sequence of numbered checks: health, login, auth
enforcement, listing endpoints, both multipart upload endpoints, and a burst of
concurrent vectorize uploads. It judges HTTP availability, not SVG quality, so
a 500 from the vectorizer is acceptable as long as the upload was parsed.

Usage:
    vectorcheck stress --config vectorcheck.yaml
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, FrozenSet, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.markup import escape

from .config import AI_METHOD, HarnessConfig
from .exceptions import CheckFailedError, ConfigurationError, TransportError, VectorCheckError
from .transport.client import TransportClient, TransportResponse
from .transport.session import SessionManager


logger = logging.getLogger(__name__)

HEALTH_PATH = "/api/health"
ME_PATH = "/api/auth/me"
MODELS_PATH = "/api/background-removal-models"
METHODS_PATH = "/api/methods"
REMOVE_BACKGROUND_PATH = "/api/remove-background"
VECTORIZE_PATH = "/api/vectorize"

BURST_SIZE = 3
BURST_ACCEPTED_STATUSES: FrozenSet[int] = frozenset({200, 429, 500})
REMOVE_BACKGROUND_ACCEPTED_STATUSES: FrozenSet[int] = frozenset({200, 500, 503})
VECTORIZE_ACCEPTED_STATUSES: FrozenSet[int] = frozenset({200, 500})

# Error text the service returns when the multipart body had no readable file part
PARSE_FAILURE_MARKER = "No image file provided"

LOGIN_CHECK = "Login with configured credentials"
AUTHORIZED_CHECKS = [
    "Unauthorized request without token returns 401",
    "Authorized request with token returns user",
    "Background removal models endpoint",
    "Methods endpoint returns methods",
    "Remove background endpoint accepts file",
    "Vectorize endpoint accepts file",
    f"Handle {BURST_SIZE} concurrent vectorization requests",
]


@dataclass
class StressRunStats:
    """Counters for one stress run, owned by whoever starts the run."""

    total_tests: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    start_time: float = field(default_factory=time.time)
    failures: List[str] = field(default_factory=list)

    def record_pass(self) -> None:
        self.total_tests += 1
        self.passed += 1

    def record_failure(self, name: str, error: str) -> None:
        self.total_tests += 1
        self.failed += 1
        self.failures.append(f"{name}: {error}")

    def record_skip(self) -> None:
        self.skipped += 1

    @property
    def elapsed(self) -> float:
        return time.time() - self.start_time

    @property
    def succeeded(self) -> bool:
        return self.failed == 0


@dataclass(frozen=True)
class BurstVerdict:
    """Joint outcome of a concurrent burst. ``None`` marks a request with no response."""

    statuses: Tuple[Optional[int], ...]
    accepted: int

    @property
    def acceptable(self) -> bool:
        return self.accepted > 0


def classify_burst(
    statuses: Sequence[Optional[int]],
    accepted_statuses: FrozenSet[int] = BURST_ACCEPTED_STATUSES,
) -> BurstVerdict:
    """A burst is acceptable when at least one request got an accepted status."""
    accepted = sum(1 for status in statuses if status in accepted_statuses)
    return BurstVerdict(statuses=tuple(statuses), accepted=accepted)


def ensure_upload_parsed(response: TransportResponse) -> None:
    """
    Fail if the service could not find the file part of an upload.

    Raises:
        CheckFailedError: On a 400 naming the missing file
    """
    if response.status == 400 and PARSE_FAILURE_MARKER in str(response.message or ""):
        raise CheckFailedError(
            "File was not parsed correctly - multipart boundary issue may persist"
        )


class StressDriver:
    """Runs the numbered stress checks and tallies them into StressRunStats."""

    def __init__(
        self,
        config: HarnessConfig,
        transport: TransportClient,
        console: Optional[Console] = None,
    ):
        self.config = config
        self.transport = transport
        self.console = console or Console()
        self.image_path = Path(config.stress.test_image)

    def _url(self, path: str) -> str:
        return self.config.service.url(path)

    def _log(self, message: str) -> None:
        self.console.print(f"→ {escape(message)}")

    async def check(
        self,
        stats: StressRunStats,
        name: str,
        check_fn: Callable[[], Awaitable[None]],
    ) -> bool:
        """Run one check in isolation and record its outcome."""
        try:
            await check_fn()
        except VectorCheckError as e:
            stats.record_failure(name, str(e))
            self.console.print(f"[red]✗ {escape(name)}: {escape(str(e))}[/red]")
            logger.debug(f"Check '{name}' failed", exc_info=True)
            return False

        stats.record_pass()
        self.console.print(f"[green]✓ {escape(name)}[/green]")
        return True

    async def run(self, stats: Optional[StressRunStats] = None) -> StressRunStats:
        """
        Run every check and print a summary.

        Args:
            stats: Run context to record into; a fresh one is created if omitted

        Returns:
            The populated run statistics

        Raises:
            ConfigurationError: If the test image does not exist
        """
        if stats is None:
            stats = StressRunStats()
        if not self.image_path.is_file():
            raise ConfigurationError(f"Test image not found: {self.image_path}")

        session = SessionManager(self.transport, self.config.service)

        self.console.print("\n" + "=" * 40)
        self.console.print("  [bold]Vectorizer Stress Test[/bold]")
        self.console.print("=" * 40 + "\n")
        self._log(f"Using test image: {self.image_path}")
        self._log(f"Target: {self.config.service.base_url}")

        await self.check(stats, "Health endpoint returns OK", self.check_health)
        await self.check(stats, LOGIN_CHECK, lambda: self.check_login(session))

        if not session.is_authenticated:
            self.console.print("[red]✗ Cannot continue without access token[/red]")
            for _ in AUTHORIZED_CHECKS:
                stats.record_skip()
            self.print_summary(stats)
            return stats

        token = session.require_token()
        (
            unauthorized,
            authorized,
            models,
            methods,
            remove_background,
            vectorize,
            burst,
        ) = AUTHORIZED_CHECKS

        await self.check(stats, unauthorized, self.check_unauthorized)
        await self.check(stats, authorized, lambda: self.check_authorized(token))
        await self.check(stats, models, self.check_models)
        await self.check(stats, methods, self.check_methods)

        self.console.print("\n--- File Upload Tests ---")
        await self.check(stats, remove_background, lambda: self.check_remove_background(token))
        await self.check(stats, vectorize, lambda: self.check_vectorize(token))

        self.console.print("\n--- Concurrency Test ---")
        await self.check(stats, burst, lambda: self.check_burst(token))

        self.print_summary(stats)
        return stats

    async def check_health(self) -> None:
        response = await self.transport.send_json(self._url(HEALTH_PATH), "GET")
        if response.status != 200:
            raise CheckFailedError(f"Status {response.status}")
        if not response.field("aiEngineReady"):
            raise CheckFailedError("AI engine not ready")

    async def check_login(self, session: SessionManager) -> None:
        await session.login(self.config.credentials)

    async def check_unauthorized(self) -> None:
        response = await self.transport.send_json(self._url(ME_PATH), "GET")
        if response.status != 401:
            raise CheckFailedError(f"Expected 401, got {response.status}")

    async def check_authorized(self, token: str) -> None:
        response = await self.transport.send_json(self._url(ME_PATH), "GET", token=token)
        if response.status != 200:
            raise CheckFailedError(f"Status {response.status}")
        if not response.field("user"):
            raise CheckFailedError("No user returned")

    async def check_models(self) -> None:
        response = await self.transport.send_json(self._url(MODELS_PATH), "GET")
        if response.status != 200:
            raise CheckFailedError(f"Status {response.status}")
        if not response.field("models"):
            raise CheckFailedError("No models returned")

    async def check_methods(self) -> None:
        response = await self.transport.send_json(self._url(METHODS_PATH), "GET")
        if response.status != 200:
            raise CheckFailedError(f"Status {response.status}")
        if not response.field("methods"):
            raise CheckFailedError("No methods returned")

    async def check_remove_background(self, token: str) -> None:
        self._log("  Uploading file for background removal...")
        response = await self.transport.send_multipart(
            self._url(REMOVE_BACKGROUND_PATH),
            token,
            self.image_path,
            {"quality": self.config.stress.background_quality},
        )
        ensure_upload_parsed(response)
        if response.status not in REMOVE_BACKGROUND_ACCEPTED_STATUSES:
            raise CheckFailedError(f"Unexpected status {response.status}: {response.data}")

        self._log(f"  Response status: {response.status}")
        if response.status == 200:
            self._log("  Background removal successful!")
        else:
            self._log(
                f"  Request accepted but processing failed: {response.message or 'unknown error'}"
            )

    async def check_vectorize(self, token: str) -> None:
        self._log("  Uploading file for vectorization...")
        response = await self.transport.send_multipart(
            self._url(VECTORIZE_PATH),
            token,
            self.image_path,
            {"method": AI_METHOD, "optimize": "true", "removeBackground": "false"},
        )
        ensure_upload_parsed(response)
        if response.status not in VECTORIZE_ACCEPTED_STATUSES:
            raise CheckFailedError(f"Unexpected status {response.status}: {response.data}")

        self._log(f"  Response status: {response.status}")
        if response.status == 200:
            self._log("  Vectorization successful!")
            svg_content = response.field("svgContent")
            if isinstance(svg_content, str):
                self._log(f"  SVG generated: {len(svg_content)} characters")
        else:
            self._log(
                f"  Request accepted but processing failed: {response.message or 'unknown error'}"
            )

    async def check_burst(self, token: str) -> None:
        self._log(f"  Sending {BURST_SIZE} concurrent requests...")
        verdict = classify_burst(await self.fire_burst(token))
        self._log(f"  {verdict.accepted}/{BURST_SIZE} requests processed")
        if not verdict.acceptable:
            raise CheckFailedError("No requests were accepted - possible parsing issue")

    async def fire_burst(self, token: str) -> List[Optional[int]]:
        """
        Send BURST_SIZE vectorize uploads at once and wait for all of them.

        Returns:
            One status per request, in request order; None where no response arrived

        Raises:
            CheckFailedError: If a request failed with anything but a TransportError
        """

        async def upload(number: int) -> int:
            response = await self.transport.send_multipart(
                self._url(VECTORIZE_PATH),
                token,
                self.image_path,
                {"method": AI_METHOD, "optimize": "true"},
            )
            self._log(f"  Request {number} completed: status {response.status}")
            return response.status

        tasks = [asyncio.create_task(upload(n)) for n in range(1, BURST_SIZE + 1)]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        statuses: List[Optional[int]] = []
        for number, result in enumerate(results, start=1):
            if isinstance(result, TransportError):
                self._log(f"  Request {number} failed: {result}")
                statuses.append(None)
            elif isinstance(result, Exception):
                raise CheckFailedError(
                    f"Request {number} raised {type(result).__name__}: {result}", cause=result
                ) from result
            elif isinstance(result, BaseException):
                raise result
            else:
                statuses.append(result)
        return statuses

    def print_summary(self, stats: StressRunStats) -> None:
        self.console.print("\n" + "=" * 40)
        self.console.print("  Test Summary")
        self.console.print("=" * 40)
        self.console.print(f"  Total:   {stats.total_tests}")
        self.console.print(f"  Passed:  {stats.passed}")
        self.console.print(f"  Failed:  {stats.failed}")
        if stats.skipped:
            self.console.print(f"  Skipped: {stats.skipped}")
        self.console.print(f"  Time:    {stats.elapsed:.2f}s")
        self.console.print("=" * 40 + "\n")

        if stats.failed > 0:
            self.console.print(
                "[yellow]⚠️  Some tests failed. Check the output above for details.[/yellow]\n"
            )
        else:
            self.console.print("[green]✅ All tests passed! The API is working correctly.[/green]\n")
