# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/aidocs/system/display.py

# Third-party imports
import humanize
from rich.console import Console
from rich.table import Table

# Local imports
from aidocs.config.manager import RunConfig
from aidocs.core.gate import GateOutcome
from aidocs.core.operations import DocumentRecord, RunResult
from aidocs.data.ledger import Ledger

OUTCOME_STYLES = {
    GateOutcome.SUCCEEDED: "[green]✓[/green]",
    GateOutcome.SKIPPED: "[dim]-[/dim]",
    GateOutcome.FAILED: "[red]✗[/red]",
}


def ledger_to_table(ledger: Ledger, verbose: bool = False) -> Table:
    """Convert a ledger to a rich Table for display.

    Args:
        ledger: The ledger to show
        verbose: Also show the raw sizes in bytes

    Returns:
        Rich Table object ready for display
    """
    table = Table(title=str(ledger.file) if ledger.file else None)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Hash", style="yellow", no_wrap=True)
    table.add_column("Size", justify="right")
    if verbose:
        table.add_column("Bytes", justify="right")

    for entry in ledger:
        if entry.hash == 0:
            hash_str = "[dim]never run[/dim]"
        else:
            hash_str = f"{entry.hash:08x}"
        size_str = humanize.naturalsize(entry.length) if entry.length is not None else "N/A"
        row = [entry.name or "N/A", hash_str, size_str]
        if verbose:
            row.append(str(entry.length) if entry.length is not None else "N/A")
        table.add_row(*row)

    return table


def display_run_header(console: Console, config: RunConfig) -> None:
    sources = ", ".join(str(s) for s in config.sources) or "(files only)"
    console.print(f"[green]Parse and analyze {config.pattern} ({config.strategy}) from {sources}[/green]")
    target = config.target_file or config.target_root
    console.print(f"[green]Generate {config.out_name} to '{target}'[/green]")
    console.print(f"[yellow]Use '{config.command}'[/yellow]")


def display_record(console: Console, record: DocumentRecord) -> None:
    """One line per processed document."""
    mark = OUTCOME_STYLES[record.outcome]
    line = f"{mark} {record.target} ({record.sources} source(s), {humanize.naturalsize(record.size)})"
    if record.outcome == GateOutcome.SKIPPED:
        line += " [dim]unchanged since last run[/dim]"
    else:
        line += f" in {record.elapsed:.1f}s"
    if record.error:
        line += f"\n  [red]{record.error}[/red]"
    console.print(line)


def display_run_summary(console: Console, result: RunResult) -> None:
    table = Table(title="Run summary")
    table.add_column("Outcome")
    table.add_column("Documents", justify="right")
    table.add_row("[green]saved[/green]", str(result.succeeded))
    table.add_row("[dim]skipped (unchanged)[/dim]", str(result.skipped))
    table.add_row("[red]not saved[/red]", str(result.failed))
    console.print(table)

    if result.failed:
        console.print(f"[yellow]{result.failed} document(s) will be retried on the next run[/yellow]")
