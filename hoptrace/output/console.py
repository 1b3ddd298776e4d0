"""
Rich console output for hoptrace - one line per hop as it completes
"""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .. import __version__
from ..config import Config
from ..enrichment import PTRResolver
from ..models import HopRow, NO_RESPONDER, NO_RESPONSE_MARK
from ..sequence import ResultSequence


class ConsoleOutput:
    """
    Console output for traceroute results.

    Each row is printed as soon as it is pulled from the sequence:

         3  core1.example.net (192.0.2.1) 10.2ms 11.7ms  *

    Responder buckets appear in the order their first outcome arrived.
    """

    def __init__(self, resolver: Optional[PTRResolver] = None,
                 console: Optional[Console] = None):
        self.resolver = resolver
        self.console = console or Console(highlight=False)

    def print_header(self, target: str, config: Config):
        """Print trace header"""
        content = Text()
        content.append("hoptrace", style="bold cyan")
        content.append(f" v{__version__}\n", style="dim")
        content.append("Target: ", style="dim")
        content.append(target, style="bold")
        if target != config.dst_addr:
            content.append(f" ({config.dst_addr})", style="dim")
        content.append("\n")
        content.append(
            f"UDP:{config.dst_port}  |  Probes: {config.num_probes} x "
            f"{config.max_ttl} hops  |  Parallel: {config.parallelism}",
            style="dim"
        )

        self.console.print(Panel(content, border_style="cyan", padding=(0, 1)))

    def format_row(self, row: HopRow) -> Text:
        """Render one hop the way classic traceroute prints it"""
        line = Text()
        line.append(f" {row.ttl}  ", style="dim")

        for ip, outcomes in row.responses_per_ip.items():
            if ip != NO_RESPONDER:
                host = self.resolver.display_name(ip) if self.resolver else ip
                line.append(f"{host} ({ip}) ", style="bold")
            for i, outcome in enumerate(outcomes):
                if i:
                    line.append(" ")
                line.append(outcome, style="yellow" if outcome == NO_RESPONSE_MARK else "")
            line.append("  ")

        return line

    def print_row(self, row: HopRow):
        self.console.print(self.format_row(row))

    def print_rows(self, sequence: ResultSequence) -> list[HopRow]:
        """Drain the sequence, printing rows as they arrive"""
        rows = []
        for row in sequence:
            self.print_row(row)
            rows.append(row)
        return rows

    def print_error(self, message: str):
        """Print error message"""
        self.console.print(f"[bold red]Error:[/] {message}")

    def print_warning(self, message: str):
        """Print warning message"""
        self.console.print(f"[yellow]Warning:[/] {message}")
