"""
Command-line interface for vectorcheck.
"""

import asyncio
import logging
import sys
from functools import wraps
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import HarnessConfig, LoggingConfig, ServiceConfig
from .exceptions import ConfigurationError, VectorCheckError


console = Console()


def handle_errors(func):
    """Decorator to handle errors gracefully in CLI commands."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except VectorCheckError as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            sys.exit(1)
        except KeyboardInterrupt:
            console.print("\n[yellow]Interrupted by user[/yellow]")
            sys.exit(0)
        except Exception as e:
            console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
            if "--debug" in sys.argv:
                import traceback
                traceback.print_exc()
            sys.exit(1)
    return wrapper


def _setup_logging(logging_config: LoggingConfig, debug: bool = False) -> None:
    """Configure the root logger from the logging section of the config."""
    handlers = [logging.StreamHandler()]
    if logging_config.file:
        handlers.append(
            RotatingFileHandler(
                logging_config.file,
                maxBytes=logging_config.max_size,
                backupCount=logging_config.backup_count,
                encoding="utf-8",
            )
        )

    logging.basicConfig(
        level=logging.DEBUG if debug else logging_config.level,
        format=logging_config.format,
        handlers=handlers,
        force=True,
    )


def _load_config(path: Optional[str], base_url: Optional[str] = None) -> HarnessConfig:
    """Load configuration from YAML (or defaults) and apply a base URL override."""
    config = HarnessConfig.from_yaml(path) if path else HarnessConfig()
    if base_url:
        config.service = ServiceConfig(base_url=base_url, timeout=config.service.timeout)
    return config


@click.group()
@click.version_option(__version__)
@click.option(
    "--debug", is_flag=True, help="Enable debug mode"
)
@click.pass_context
def main(ctx, debug):
    """vectorcheck: Quality validation and stress testing for vectorization services."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@main.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default="vectorcheck.yaml",
    help="Output configuration file path",
)
@handle_errors
def init(output: str):
    """Write a default vectorcheck configuration file."""
    if Path(output).exists():
        if not click.confirm(f"Configuration file {output} already exists. Overwrite?"):
            return

    HarnessConfig().to_yaml(output)
    console.print(f"[green]✓[/green] Configuration file created: {output}")
    console.print("\n[yellow]Next steps:[/yellow]")
    console.print("1. Point service.base_url at your vectorization service")
    console.print("2. Put test images in suite.images_dir")
    console.print("3. Run: vectorcheck validate-config -c " + output)
    console.print("4. Run: vectorcheck suite -c " + output)


@main.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    required=True,
    help="Configuration file path",
)
@handle_errors
def validate_config(config: str):
    """Validate configuration file."""
    console.print(f"Validating configuration: {config}")

    try:
        harness_config = HarnessConfig.from_yaml(config)
        warnings = harness_config.validate_config()
    except ConfigurationError as e:
        console.print(f"[red]✗[/red] Configuration error: {escape(str(e))}")
        sys.exit(1)

    console.print("[green]✓[/green] Configuration is valid")
    for warning in warnings:
        console.print(f"[yellow]⚠[/yellow] {escape(warning)}")

    _display_config_summary(harness_config)


@main.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="Configuration file path (defaults are used if omitted)",
)
@click.option("--base-url", help="Service base URL (overrides config)")
@click.option("--images-dir", type=click.Path(), help="Input image directory (overrides config)")
@click.option("--output-dir", type=click.Path(), help="Output directory (overrides config)")
@click.pass_context
@handle_errors
def suite(
    ctx,
    config: Optional[str],
    base_url: Optional[str],
    images_dir: Optional[str],
    output_dir: Optional[str],
):
    """Vectorize the test images and judge every SVG. Failures do not change the exit code."""
    harness_config = _load_config(config, base_url)
    if images_dir:
        harness_config.suite.images_dir = images_dir
    if output_dir:
        harness_config.suite.output_dir = output_dir
    _setup_logging(harness_config.logging, ctx.obj.get("debug", False))

    from .suite import SuiteRunner
    from .transport.client import TransportClient

    async def run_suite():
        async with TransportClient(harness_config.service.timeout) as transport:
            runner = SuiteRunner(harness_config, transport, console=console)
            return await runner.run()

    asyncio.run(run_suite())


@main.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="Configuration file path (defaults are used if omitted)",
)
@click.option("--base-url", help="Service base URL (overrides config)")
@click.option("--image", type=click.Path(), help="Image to upload (overrides config)")
@click.pass_context
@handle_errors
def stress(ctx, config: Optional[str], base_url: Optional[str], image: Optional[str]):
    """Run the numbered stress checks. Exits 1 if any check failed."""
    harness_config = _load_config(config, base_url)
    if image:
        harness_config.stress.test_image = image
    _setup_logging(harness_config.logging, ctx.obj.get("debug", False))

    from .stress import StressDriver, StressRunStats
    from .transport.client import TransportClient

    stats = StressRunStats()

    async def run_stress():
        async with TransportClient(harness_config.service.timeout) as transport:
            driver = StressDriver(harness_config, transport, console=console)
            await driver.run(stats)

    asyncio.run(run_stress())
    sys.exit(0 if stats.succeeded else 1)


@main.command()
@click.argument("svg_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--profile", "-p", default="general", help="Edge-case profile name")
@click.option("--method", "-m", default="ai", help="Method that produced the SVG")
@handle_errors
def inspect(svg_file: str, profile: str, method: str):
    """Judge a local SVG file without a server. Exits 1 if it fails its profile."""
    from .quality import PROFILES, QualityValidator, analyze_svg, method_recommendations

    content = Path(svg_file).read_text(encoding="utf-8", errors="replace")
    validator = QualityValidator()
    result = validator.run_test(content, Path(svg_file).name, method, profile)
    analysis = analyze_svg(content)

    if profile != "general" and profile not in PROFILES:
        console.print(f"[yellow]⚠[/yellow] Unknown profile '{escape(profile)}', using general profile")

    table = Table(title=f"{Path(svg_file).name} ({method}, {profile})")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Valid SVG", "✓" if result.metrics.is_valid else "✗")
    table.add_row("Path Count", str(result.metrics.path_count))
    table.add_row("Complexity", result.metrics.complexity_tier.value)
    table.add_row("File Size", f"{result.metrics.file_size} B")
    table.add_row("viewBox", "✓" if result.metrics.has_view_box else "✗")
    table.add_row("Vector Elements", str(analysis.vector_elements))
    table.add_row("Colors", str(analysis.color_count))
    table.add_row("Embedded Raster", "✓" if analysis.has_embedded_raster else "✗")
    table.add_row("Score", f"{analysis.score}/100 ({analysis.grade})")
    console.print(table)

    for warning in analysis.warnings:
        console.print(f"[yellow]⚠[/yellow] {escape(warning)}")
    for recommendation in method_recommendations(method, analysis):
        console.print(f"💡 {escape(recommendation)}")

    if result.passed:
        console.print("[green]✅ PASSED[/green]")
    else:
        console.print("[red]❌ FAILED[/red]")
        for issue in result.issues:
            console.print(f"   - {escape(issue)}")
        sys.exit(1)


def _display_config_summary(config: HarnessConfig):
    """Display a summary of the configuration."""
    console.print("\n[blue]Configuration Summary[/blue]")

    service_table = Table(title="Service")
    service_table.add_column("Base URL", style="cyan")
    service_table.add_column("Timeout", style="magenta")
    service_table.add_column("Login", style="green")
    service_table.add_row(
        config.service.base_url,
        f"{config.service.timeout}s" if config.service.timeout else "none",
        config.credentials.email,
    )
    console.print(service_table)

    case_table = Table(title="Test Cases")
    case_table.add_column("Image", style="cyan")
    case_table.add_column("Edge Case", style="magenta")
    case_table.add_column("Methods", style="green")
    case_table.add_column("Present", style="yellow")

    images_dir = Path(config.suite.images_dir)
    for case in config.suite.test_cases:
        case_table.add_row(
            case.input_file,
            case.edge_case,
            ", ".join(case.methods),
            "✓" if (images_dir / case.input_file).is_file() else "✗",
        )
    console.print(case_table)


if __name__ == "__main__":
    main()
