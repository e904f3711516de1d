# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/aidocs/cli/main.py

"""
Command line entry point.

    aidocs run --parse src --output docs --pattern "*.py -folder" \\
        --prompt file:documentation.txt --command "llm -m gpt-4o"
    aidocs ledger docs --index-name .123456.index.json
"""

# Standard library imports
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Optional

# Third-party imports
import typer
from rich.console import Console

# Local imports
from aidocs.config.manager import build_run_config
from aidocs.core.operations import run
from aidocs.core.transform import CommandTransformer
from aidocs.data.ledger import Ledger
from aidocs.data.registry import DEFAULT_INDEX_NAME
from aidocs.system.display import (
    display_record,
    display_run_header,
    display_run_summary,
    ledger_to_table,
)
from aidocs.system.exceptions import AidocsError
from aidocs.system.logging_setup import setup_logging

app = typer.Typer(
    help="""aidocs - generate documents from source trees with an AI command, skipping unchanged inputs

[bold green]Core Operations:[/bold green] run
[bold magenta]Inspection:[/bold magenta] ledger
""",
    rich_markup_mode="rich"
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        try:
            pkg_version = version("aidocs")
        except PackageNotFoundError:
            pkg_version = "unknown"
        console.print(f"aidocs version {pkg_version}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None, "--version", callback=version_callback, is_eager=True,
        help="Show version and exit"
    ),
) -> None:
    """aidocs - incremental AI document generation."""
    pass


@app.command(name="run")
def run_command(
    parse: list[Path] = typer.Option([], "--parse", help="Source folder (repeatable)"),
    files: list[Path] = typer.Option([], "--file", help="Explicit source file, one-shot mode (repeatable)"),
    output: Path = typer.Option(..., "--output", help="Target folder, or target file for one-shot mode"),
    pattern: Optional[str] = typer.Option(
        None, "--pattern",
        help="Glob for source files plus optional mode: '*.cs' (file by file), '*.cs -folder' (by folder), '*.cs -all' (one shot)"),
    name: Optional[str] = typer.Option(None, "--name", help="Suffix of generated files (default .md)"),
    prompt: Optional[str] = typer.Option(None, "--prompt", help="Prompt text, or 'file:<name>' to read it from the prompts folder"),
    command: Optional[str] = typer.Option(None, "--command", help="Command receiving the payload on stdin"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Seconds allowed per document"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print the summary"),
) -> None:
    """[bold green]Core Operations[/bold green]: Generate target documents, skipping unchanged ones."""
    setup_logging(debug=debug, target=output)

    try:
        config = build_run_config(
            sources=parse, target=output, files=files, prompt=prompt,
            pattern=pattern, out_name=name, command=command, timeout=timeout,
        )
        transformer = CommandTransformer(config.command, timeout=config.timeout)
    except (AidocsError, ValueError) as e:
        console.print(f"[red]✗[/red] Configuration error: {e}")
        raise typer.Exit(1)

    if not quiet:
        display_run_header(console, config)

    try:
        result = run(config, transformer,
                     on_record=None if quiet else lambda record: display_record(console, record))
    except AidocsError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted, ledgers saved[/yellow]")
        raise typer.Exit(130)

    display_run_summary(console, result)
    if result.failed:
        raise typer.Exit(2)


def _find_sidecar(folder: Path, index_name: Optional[str]) -> tuple[Optional[Path], list[str]]:
    """Sidecar to show, and the ledger file names present in folder.

    Without an explicit name, .index.json wins, else the only ledger present.
    """
    candidates = sorted(p.name for p in folder.glob(".*index.json")) if folder.is_dir() else []
    if index_name is not None:
        sidecar = folder / index_name
        return (sidecar if sidecar.is_file() else None), candidates
    if DEFAULT_INDEX_NAME in candidates:
        return folder / DEFAULT_INDEX_NAME, candidates
    if len(candidates) == 1:
        return folder / candidates[0], candidates
    return None, candidates


@app.command(name="ledger")
def ledger_command(
    folder: Path = typer.Argument(..., help="Target folder holding the ledger"),
    index_name: Optional[str] = typer.Option(
        None, "--index-name",
        help="Ledger file name (default: .index.json, or the only ledger in the folder)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show sizes in bytes"),
) -> None:
    """[bold magenta]Inspection[/bold magenta]: Show the ledger of a target folder."""
    sidecar, candidates = _find_sidecar(folder, index_name)
    if sidecar is None:
        console.print(f"[red]✗[/red] No ledger at {folder / (index_name or DEFAULT_INDEX_NAME)}")
        if candidates:
            console.print("Ledgers in this folder: " + ", ".join(candidates))
        raise typer.Exit(1)

    try:
        ledger = Ledger.load(sidecar)
    except AidocsError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)

    console.print(ledger_to_table(ledger, verbose=verbose))
    console.print(f"{len(ledger)} entries")


def cli_main() -> None:
    app()


if __name__ == "__main__":
    cli_main()
