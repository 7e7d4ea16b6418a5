"""Rich rendering of scan events and the final campaign summary."""
from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..scanner.campaign import CampaignReport
from ..scanner.events import (
    CampaignFinished,
    HostProgress,
    PhaseFinished,
    PhaseStarted,
    ScanEvent,
    SubnetBatchFinished,
    SubnetFinished,
    SubnetStarted,
)


def build_summary_table(report: CampaignReport) -> Table:
    """Return a table with one row per phase plus the campaign totals."""

    table = Table(title="Sweep summary", expand=False)
    table.add_column("Phase")
    table.add_column("Subnets", justify="right")
    table.add_column("Hosts", justify="right")
    table.add_column("Responders", justify="right")
    table.add_column("Time", justify="right")
    for phase in report.phases:
        label = phase.label + (" (cancelled)" if phase.cancelled else "")
        table.add_row(
            label,
            str(phase.counters.subnets_scanned),
            f"{phase.counters.hosts_scanned:,}",
            str(phase.counters.responders),
            f"{phase.elapsed:.1f}s",
        )
    table.add_section()
    table.add_row(
        "[bold]Total[/bold]",
        str(report.totals.subnets_scanned),
        f"{report.totals.hosts_scanned:,}",
        f"[bold green]{report.totals.responders}[/bold green]",
        f"{report.elapsed:.1f}s",
    )
    return table


class ConsoleReporter:
    """Scan listener that prints progress with rich.

    ``verbose`` adds per-subnet start lines and host progress updates.
    """

    def __init__(self, console: Console | None = None, *, verbose: bool = False) -> None:
        self.console = console or Console()
        self.verbose = verbose

    def __call__(self, event: ScanEvent) -> None:
        if isinstance(event, PhaseStarted):
            self.console.rule(f"[bold]{event.label}")
            self.console.print(
                f"[*] {event.subnet_count} subnets, up to {event.subnet_concurrency} "
                f"at once with {event.host_concurrency} probes each"
            )
        elif isinstance(event, SubnetStarted):
            if self.verbose:
                self.console.print(
                    f"[dim][*] Scanning {event.prefix}.{event.start}-{event.end} "
                    f"({event.concurrency} workers)[/dim]"
                )
        elif isinstance(event, HostProgress):
            if self.verbose:
                self.console.print(
                    f"[dim]    {event.prefix}: {event.completed}/{event.total} hosts probed[/dim]"
                )
        elif isinstance(event, SubnetFinished):
            self._subnet_finished(event)
        elif isinstance(event, SubnetBatchFinished):
            self.console.print(
                f"[*] {event.label}: batch {event.batch}/{event.batch_count} complete "
                f"({event.subnets_done}/{event.subnet_total} subnets)"
            )
        elif isinstance(event, PhaseFinished):
            counters = event.counters
            note = " [yellow](cancelled)[/yellow]" if event.cancelled else ""
            self.console.print(
                f"[*] {event.label}: {counters.responders} responders in "
                f"{counters.hosts_scanned:,} hosts across {counters.subnets_scanned} "
                f"subnets ({event.elapsed:.1f}s){note}"
            )
        elif isinstance(event, CampaignFinished):
            self.print_summary(event.report)

    def _subnet_finished(self, event: SubnetFinished) -> None:
        for address in event.responders:
            self.console.print(f"[green][+] Host alive: {address}[/green]")
        if event.error is not None:
            self.console.print(f"[red][!] {event.prefix}.0/24 failed: {escape(event.error)}[/red]")
        elif event.responder_count == 0:
            if self.verbose:
                self.console.print(f"[dim]    {event.prefix}.0/24: no responders[/dim]")
        else:
            self.console.print(
                f"[bold]    {event.prefix}.0/24: {event.responder_count} "
                f"responder{'s' if event.responder_count != 1 else ''}[/bold]"
            )

    def print_summary(self, report: CampaignReport) -> None:
        self.console.print()
        self.console.print(build_summary_table(report))
        self.console.print(
            f"Elapsed {report.elapsed:.2f}s, "
            f"{report.hosts_per_second:.1f} hosts/second"
        )
        if report.failed_subnets:
            failed = ", ".join(f"{s.prefix}.0/24" for s in report.failed_subnets)
            self.console.print(f"[red]Subnets with errors: {failed}[/red]")
        if report.cancelled:
            self.console.print("[yellow][!] Sweep was interrupted; totals are partial[/yellow]")


__all__ = ["ConsoleReporter", "build_summary_table"]
