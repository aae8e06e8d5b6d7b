"""
apexlens CLI

Usage:
    apexlens scan <file.cls>                 # Scan one Apex class or trigger
    apexlens scan <file.cls> --json          # Emit the scan result as JSON
    apexlens version                         # Show version information

Runtime telemetry is used when APEXLENS_INSTANCE_URL, APEXLENS_ACCESS_TOKEN
and APEXLENS_ORG_ID are configured; otherwise the scan is static only.
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from apexlens import __version__
from apexlens.application.scanner import ApexScanner, ScanOutcome
from apexlens.reports.scan_report import format_scan_report, to_display_json
from apexlens.runtime.services.connection import HttpxConnection
from apexlens.shared.infrastructure.config import settings
from apexlens.shared.infrastructure.logging import configure_logging, get_logger

app = typer.Typer(
    name="apexlens",
    help="apexlens - Apex performance antipattern scanner",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()
logger = get_logger(__name__)


@app.callback()
def _setup():
    """apexlens - Apex performance antipattern scanner"""
    configure_logging()


def _read_source(path: Path) -> str:
    if not path.exists():
        console.print(f"[red]Error: File does not exist: {path}[/red]")
        raise typer.Exit(1)
    if path.is_dir():
        console.print(f"[red]Error: Path is a directory, not a file: {path}[/red]")
        raise typer.Exit(1)
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error reading file '{path}': {e}[/red]")
        raise typer.Exit(1)


def _resolve_connection() -> Optional[HttpxConnection]:
    if not settings.has_org_connection:
        return None
    return HttpxConnection(
        instance_url=settings.instance_url,
        access_token=settings.access_token,
        timeout_seconds=settings.runtime_timeout_seconds,
    )


def _print_summary(outcome: ScanOutcome) -> None:
    table = Table(title=f"Findings in {outcome.unit_name}")
    table.add_column("Type", style="cyan")
    table.add_column("Line", justify="right")
    table.add_column("Member")
    table.add_column("Severity")

    for result in outcome.scan_result.antipattern_results:
        for instance in result.detected_instances:
            severity = instance.severity.value
            if instance.is_runtime_severity:
                severity = f"[bold]{severity}[/bold] (runtime)"
            table.add_row(
                result.antipattern_type.value,
                str(instance.line_number),
                instance.member_name or "-",
                severity,
            )
    console.print(table)


@app.command()
def scan(
    path: Path = typer.Argument(..., help="Apex class (.cls) or trigger (.trigger) file"),
    class_name: Optional[str] = typer.Option(
        None, "--class-name", "-c", help="Compilation unit name (default: file name without extension)"
    ),
    output_json: bool = typer.Option(False, "--json", help="Print the scan result as JSON"),
):
    """Scan an Apex file for performance antipatterns"""
    source = _read_source(path)
    unit_name = class_name or path.stem

    scanner = ApexScanner()
    try:
        outcome = asyncio.run(
            scanner.scan_with_runtime(
                unit_name,
                source,
                connection=_resolve_connection(),
                org_id=settings.org_id,
                user_id=settings.user_id,
            )
        )
    except Exception as e:
        logger.error("scan_failed", unit_name=unit_name, error=str(e))
        console.print(f"[red]Error scanning class '{unit_name}': {e}[/red]")
        raise typer.Exit(1)

    if output_json:
        typer.echo(json.dumps(to_display_json(outcome.scan_result), indent=2, ensure_ascii=False))
        return

    if outcome.scan_result.total_instances:
        _print_summary(outcome)
    console.print(Markdown(format_scan_report(unit_name, outcome.scan_result, outcome.runtime_used)))


@app.command()
def version():
    """Show apexlens version information"""
    console.print(Panel.fit(
        "[bold cyan]apexlens[/bold cyan]\n"
        f"[dim]Version:[/dim] {__version__}\n"
        "[dim]Apex antipattern detection with runtime enrichment[/dim]\n",
        title="About apexlens",
        border_style="cyan",
    ))


def main():
    """Main entry point"""
    app()


if __name__ == "__main__":
    main()
