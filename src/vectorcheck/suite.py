"""
Validation suite for a running vectorization service.

For every configured (image, method) pair the suite uploads the image, saves
the returned SVG for manual inspection and judges it with the quality
validator. Pairs run strictly one after another with a fixed pause between
them; the accumulated results become ``test-report.json``.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape

from .config import AI_METHOD, HarnessConfig, TestCase
from .exceptions import AuthError, TransportError
from .quality.analysis import compare_sizes
from .quality.report import Report, write_report
from .quality.validator import QualityValidator, TestResult
from .transport.client import TransportClient
from .transport.session import SessionManager


logger = logging.getLogger(__name__)

HEALTH_PATH = "/api/health"
VECTORIZE_PATH = "/api/vectorize"
REPORT_FILE = "test-report.json"


class CaseState(str, Enum):
    """Lifecycle of one (image, method) execution."""

    PENDING = "pending"
    REQUESTED = "requested"
    SUCCEEDED = "succeeded"
    REQUEST_FAILED = "request-failed"
    VALIDATED = "validated"
    SKIPPED = "skipped"


@dataclass
class CaseOutcome:
    """What happened to one (image, method) pair."""

    input_file: str
    method: str
    edge_case: str
    state: CaseState = CaseState.PENDING
    message: Optional[str] = None
    output_path: Optional[Path] = None
    result: Optional[TestResult] = None


@dataclass
class SuiteOutcome:
    """Everything a suite run produced."""

    health: Optional[Dict[str, Any]] = None
    outcomes: List[CaseOutcome] = field(default_factory=list)
    report: Optional[Report] = None
    report_path: Optional[Path] = None
    aborted: Optional[str] = None

    def count(self, state: CaseState) -> int:
        return sum(1 for outcome in self.outcomes if outcome.state == state)


class SuiteRunner:
    """Drives the configured test cases through the service and the validator."""

    def __init__(
        self,
        config: HarnessConfig,
        transport: TransportClient,
        validator: Optional[QualityValidator] = None,
        console: Optional[Console] = None,
    ):
        self.config = config
        self.transport = transport
        self.session = SessionManager(transport, config.service)
        self.validator = validator or QualityValidator()
        self.console = console or Console()

        self.images_dir = Path(config.suite.images_dir)
        self.output_dir = Path(config.suite.output_dir)

    async def check_server(self) -> Optional[Dict[str, Any]]:
        """Return the health body if the service reports ``status: ok``."""
        try:
            response = await self.transport.send_json(
                self.config.service.url(HEALTH_PATH), "GET"
            )
        except TransportError as e:
            logger.error(f"Health check failed: {e}")
            return None

        if response.field("status") != "ok":
            logger.error(f"Service unhealthy (HTTP {response.status}): {response.data}")
            return None
        return response.data

    def discover_cases(self) -> List[TestCase]:
        """Keep the test cases whose input image exists."""
        available = []
        for case in self.config.suite.test_cases:
            if (self.images_dir / case.input_file).is_file():
                available.append(case)
                self.console.print(f"   ✓ Found: {case.input_file}")
            else:
                self.console.print(f"   [yellow]⚠ Missing: {case.input_file}[/yellow]")
        return available

    def output_path_for(self, case: TestCase, method: str) -> Path:
        """Location of the saved SVG for one (image, method) pair."""
        return self.output_dir / f"{Path(case.input_file).stem}_{method}.svg"

    def request_fields(self, case: TestCase, method: str) -> Dict[str, str]:
        fields = {"method": method}
        fields.update(self.config.suite.default_fields)
        fields.update(case.fields.get(method, {}))
        return fields

    async def run_case(
        self, case: TestCase, method: str, ai_ready: bool = True
    ) -> CaseOutcome:
        """
        Vectorize one image with one method and validate the output.

        A TestResult is only produced when the service reports success; request
        level failures are recorded on the outcome and logged.
        """
        outcome = CaseOutcome(case.input_file, method, case.edge_case)

        if method == AI_METHOD and not ai_ready:
            outcome.state = CaseState.SKIPPED
            outcome.message = "AI engine not configured"
            self.console.print(
                f"\n[yellow]⚠ Skipping AI test for {case.input_file} "
                f"(AI engine not configured)[/yellow]"
            )
            return outcome

        self.console.print(
            f"\n🧪 Testing: {case.input_file} (Method: {method}, Case: {case.edge_case})"
        )

        image_path = self.images_dir / case.input_file
        outcome.state = CaseState.REQUESTED
        try:
            response = await self.transport.send_multipart(
                self.config.service.url(VECTORIZE_PATH),
                self.session.token,
                image_path,
                self.request_fields(case, method),
            )
        except TransportError as e:
            return self._request_failed(outcome, str(e))

        if not response.ok or response.field("success") is not True:
            return self._request_failed(
                outcome, response.message or f"HTTP {response.status}"
            )

        outcome.state = CaseState.SUCCEEDED
        svg_content = response.field("svgContent")
        self.console.print(f"   ✓ Vectorized with {response.field('method', method)}")

        outcome.output_path = self.output_path_for(case, method)
        try:
            outcome.output_path.write_text(
                svg_content if isinstance(svg_content, str) else "",
                encoding="utf-8",
                errors="surrogatepass",
            )
            self.console.print(f"   ✓ Saved to: {outcome.output_path.name}")

            if isinstance(svg_content, str):
                sizes = compare_sizes(image_path, svg_content)
                logger.info(
                    f"{case.input_file} [{method}]: {sizes.original_size} B raster -> "
                    f"{sizes.vector_size} B SVG (ratio {sizes.compression_ratio})"
                )

            result = self.validator.run_test(
                svg_content, case.input_file, method, case.edge_case
            )
        except (OSError, ValueError) as e:
            return self._request_failed(outcome, f"Could not process output: {e}")

        outcome.result = result
        outcome.state = CaseState.VALIDATED
        self._print_result(result)
        return outcome

    def _request_failed(self, outcome: CaseOutcome, message: str) -> CaseOutcome:
        outcome.state = CaseState.REQUEST_FAILED
        outcome.message = message
        self.console.print(f"   [red]❌ Failed: {escape(message)}[/red]")
        logger.warning(f"{outcome.input_file} [{outcome.method}] request failed: {message}")
        return outcome

    def _print_result(self, result: TestResult) -> None:
        metrics = result.metrics
        self.console.print("   📊 Metrics:")
        self.console.print(f"      - Valid SVG: {'✓' if metrics.is_valid else '✗'}")
        self.console.print(f"      - Path Count: {metrics.path_count}")
        self.console.print(f"      - Complexity: {metrics.complexity_tier.value}")
        self.console.print(f"      - File Size: {metrics.file_size / 1024:.2f} KB")

        if result.passed:
            self.console.print("   [green]✅ TEST PASSED[/green]")
        else:
            self.console.print("   [red]❌ TEST FAILED[/red]")
            for issue in result.issues:
                self.console.print(f"      - {issue}")

    async def run(self) -> SuiteOutcome:
        """Run every available test case and write the report."""
        started = time.time()
        suite = SuiteOutcome()

        self.console.print("[bold blue]🚀 Vectorizer Validation Suite[/bold blue]\n")
        self.console.print("🔍 Checking server status...")

        suite.health = await self.check_server()
        if suite.health is None:
            suite.aborted = "Server is not running"
            self.console.print(f"[red]❌ {suite.aborted} at {self.config.service.base_url}[/red]")
            return suite

        ai_ready = bool(suite.health.get("aiEngineReady"))
        self.console.print("✅ Server is running")
        self.console.print(f"   - AI Engine: {'✓ Ready' if ai_ready else '✗ Not configured'}")

        try:
            await self.session.login(self.config.credentials)
        except (AuthError, TransportError) as e:
            suite.aborted = f"Login failed: {e}"
            self.console.print(f"[red]❌ {escape(suite.aborted)}[/red]")
            return suite

        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.console.print("\n📁 Checking for test images...")
        cases = self.discover_cases()
        if not cases:
            suite.aborted = f"No test images found in {self.images_dir}"
            self.console.print(f"\n[yellow]⚠ {escape(suite.aborted)}[/yellow]")
            return suite

        self.console.print("\n🚀 Running tests...")
        self.console.print("═" * 60)

        pending = [(case, method) for case in cases for method in case.methods]
        for index, (case, method) in enumerate(pending):
            outcome = await self.run_case(case, method, ai_ready)
            suite.outcomes.append(outcome)

            if outcome.state != CaseState.SKIPPED and index < len(pending) - 1:
                await asyncio.sleep(self.config.suite.delay)

        suite.report = self.validator.generate_report()
        suite.report_path = write_report(suite.report, self.output_dir / REPORT_FILE)
        self.print_report(suite)

        logger.info(f"Suite finished in {time.time() - started:.2f}s")
        return suite

    def print_report(self, suite: SuiteOutcome) -> None:
        report = suite.report
        self.console.print("\n" + "═" * 60)
        self.console.print("\n[bold]📊 TEST REPORT[/bold]")
        self.console.print("═" * 60)

        self.console.print("\n📈 Summary:")
        self.console.print(f"   Total Tests: {report.total}")
        self.console.print(f"   Passed: {report.passed} ✅")
        self.console.print(f"   Failed: {report.failed} ❌")
        self.console.print(f"   Pass Rate: {report.pass_rate}")

        skipped = suite.count(CaseState.SKIPPED)
        request_failed = suite.count(CaseState.REQUEST_FAILED)
        if skipped:
            self.console.print(f"   Skipped: {skipped} ⚠")
        if request_failed:
            self.console.print(f"   Request failures (no result): {request_failed}")

        for method, summary in report.by_method.items():
            self.console.print(f"\n🔧 {method}:")
            self.console.print(f"   Total: {summary.total}")
            self.console.print(f"   Passed: {summary.passed} ✅")
            self.console.print(f"   Failed: {summary.failed} ❌")

        if report.recommendations:
            self.console.print("\n💡 Recommendations:")
            for recommendation in report.recommendations:
                self.console.print(f"   - {recommendation}")

        self.console.print(f"\n📄 Detailed report saved to: {suite.report_path}")
        self.console.print("\n✨ Testing complete!\n")
