"""Rich terminal output for ipprobe."""

from __future__ import annotations

from typing import Iterable, Optional

from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from ipprobe.config import FAST_THRESHOLD_MS, MEDIUM_THRESHOLD_MS, SPEED_TEST_NOTE
from ipprobe.models import GeoRecord, LatencyTier, ProbeResult, Resolution, Target

console = Console()
err_console = Console(stderr=True)

TIER_COLORS = {
    LatencyTier.FAST: "green",
    LatencyTier.MEDIUM: "orange1",
    LatencyTier.SLOW: "red",
    LatencyTier.FAILED: "red",
}


def classify(result: ProbeResult) -> LatencyTier:
    """Map a settled probe onto a latency tier.

    A failed settlement is FAILED whatever its duration.
    """
    if not result.success:
        return LatencyTier.FAILED
    if result.duration_ms < FAST_THRESHOLD_MS:
        return LatencyTier.FAST
    if result.duration_ms < MEDIUM_THRESHOLD_MS:
        return LatencyTier.MEDIUM
    return LatencyTier.SLOW


def format_latency(result: ProbeResult) -> Text:
    """Latency cell text, colored by tier."""
    tier = classify(result)
    if tier is LatencyTier.FAILED:
        return Text("Access failed", style=TIER_COLORS[tier])
    return Text(f"{result.duration_ms:.2f} ms", style=TIER_COLORS[tier])


# ── Lookup results ────────────────────────────────────────────────────


def render_resolution(resolution: Resolution, verbose: bool = False) -> None:
    """Display a resolved domain."""
    console.print(f"Domain [bold]{escape(resolution.domain)}[/bold] resolved successfully")
    console.print(f"IP: [bold]{escape(resolution.address)}[/bold]")

    if verbose and len(resolution.answers) > 1:
        table = Table(show_header=True, border_style="bright_black", header_style="bold")
        table.add_column("Name")
        table.add_column("Type")
        table.add_column("TTL", justify="right")
        table.add_column("Data")
        for answer in resolution.answers:
            table.add_row(Text(answer.name), answer.type_name, str(answer.ttl), Text(answer.data))
        console.print(table)


def render_ip(ip: str, source: str) -> None:
    console.print(f"[bold]Your IP:[/bold] {escape(ip)} [dim]({escape(source)})[/dim]")


def build_geo_table(record: GeoRecord) -> Table:
    """Build the key/value table for a geolocation record."""
    table = Table(
        show_header=True,
        border_style="bright_black",
        expand=False,
        header_style="bold",
        title=f"[bold]{escape(record.ip)}[/bold] [dim]via {escape(record.source)}[/dim]",
        title_style="",
    )
    table.add_column("Information", style="bold")
    table.add_column("Value")

    for key, value in record.rows():
        text = str(value) if value else "-"
        # Values are remote data, never markup.
        table.add_row(Text(str(key)), Text(text))

    return table


def render_geo(record: GeoRecord) -> None:
    """Display a geolocation record verbatim."""
    console.print(build_geo_table(record))


# ── Speed test ────────────────────────────────────────────────────────


class SpeedTestTracker:
    """Live speed test table, one row per target.

    Rows are located by target name.  A result whose name matches no row,
    or whose row already settled, is ignored.
    """

    def __init__(self, targets: Iterable[Target], live: bool = True):
        self.targets = list(targets)
        self.results: dict[str, Optional[ProbeResult]] = {t.key: None for t in self.targets}
        self.live: Optional[Live] = None
        self._use_live = live

    def build_table(self) -> Table:
        table = Table(show_header=True, expand=False, border_style="dim")
        table.add_column("Website", style="bold")
        table.add_column("Latency", justify="right", min_width=14)

        for target in self.targets:
            result = self.results[target.key]
            if result is None:
                cell = Text("Testing...", style="dim")
            else:
                cell = format_latency(result)
            table.add_row(target.name, cell)

        return table

    def start(self) -> None:
        if self._use_live:
            self.live = Live(self.build_table(), console=console, refresh_per_second=8)
            self.live.start()

    def update(self, result: ProbeResult) -> bool:
        """Record *result*. Returns False when it was dropped."""
        key = result.key
        if key not in self.results or self.results[key] is not None:
            return False
        self.results[key] = result
        if self.live:
            self.live.update(self.build_table())
        return True

    @property
    def settled(self) -> list[ProbeResult]:
        return [r for r in self.results.values() if r is not None]

    def finish(self) -> None:
        if self.live:
            self.live.stop()
        else:
            console.print(self.build_table())
        console.print(f"[dim]{SPEED_TEST_NOTE}[/dim]")


def render_error(message: str) -> None:
    """Display an error message."""
    err_console.print(f"[bold red]Error:[/bold red] {escape(message)}")


def render_warning(message: str) -> None:
    """Display a warning message."""
    err_console.print(f"[yellow]Warning:[/yellow] {escape(message)}")
