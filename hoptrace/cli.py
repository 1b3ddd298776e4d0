import logging
import os
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config import Config
from .enrichment import PTRResolver
from .errors import ConfigError, TraceError
from .output import ConsoleOutput, JsonExporter
from .probe import Tracer
from .resolve import resolve_source, resolve_target


err_console = Console(stderr=True)
reporter = ConsoleOutput(console=err_console)

LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


def setup_logging(verbose: int):
    """Route log records to stderr through rich"""
    level = LOG_LEVELS[min(verbose, len(LOG_LEVELS) - 1)]
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=err_console,
                rich_tracebacks=True,
                show_time=verbose > 1,
                show_path=False,
            )
        ],
        force=True,
    )


def is_admin() -> bool:
    """Raw ICMP sockets need root"""
    return hasattr(os, 'geteuid') and os.geteuid() == 0


@click.command()
@click.argument('host')
@click.option('-p', '--port', default=33434, type=int,
              help='Base destination UDP port (default: 33434)')
@click.option('-q', '--probes', default=3, type=int,
              help='Probes per hop (default: 3)')
@click.option('-w', '--timeout', default=5.0, type=float,
              help='Timeout per probe in seconds (default: 5)')
@click.option('-n', '--parallelism', default=16, type=int,
              help='Probes in flight at once (default: 16)')
@click.option('-m', '--max-hops', default=30, type=int,
              help='Maximum hops (default: 30)')
@click.option('-s', '--source', default='0.0.0.0',
              help='Source IPv4 address (default: 0.0.0.0)')
@click.option('-j', '--json', 'as_json', is_flag=True,
              help='Print results as JSON')
@click.option('-o', '--output', 'json_path', type=click.Path(dir_okay=False),
              help='Write JSON results to a file instead of stdout')
@click.option('--dns/--no-dns', default=True,
              help='Enable/disable PTR lookups (default: enabled)')
@click.option('-v', '--verbose', count=True,
              help='More logging (-v info, -vv debug)')
@click.version_option(version=__version__)
def main(host: str, port: int, probes: int, timeout: float, parallelism: int,
         max_hops: int, source: str, as_json: bool, json_path: Optional[str],
         dns: bool, verbose: int):
    """
    hoptrace - parallel UDP traceroute.

    Trace the route to HOST (IPv4 address or hostname), sending every
    hop's probes concurrently and printing hops in order as they complete.

    Examples:

        hoptrace 8.8.8.8

        hoptrace example.com -q 5 -n 32

        hoptrace 1.1.1.1 --json
    """
    setup_logging(verbose)

    try:
        config = Config(
            dst_addr=resolve_target(host),
            dst_port=port,
            num_probes=probes,
            timeout=timeout,
            max_ttl=max_hops,
            src_addr=resolve_source(source),
            parallelism=parallelism,
        )
    except ConfigError as e:
        reporter.print_error(f"invalid arguments: {e}")
        sys.exit(2)

    if not is_admin():
        reporter.print_error("Root privileges required.\n[dim]Please run with sudo.[/]")
        sys.exit(1)

    tracer = Tracer(config)

    try:
        if as_json or json_path:
            exporter = JsonExporter(indent=2 if json_path else None)
            exporter.export(
                tracer.run(),
                output_path=Path(json_path) if json_path else None,
                stream=sys.stdout,
            )
        else:
            output = ConsoleOutput(resolver=PTRResolver() if dns else None)
            output.print_header(host, config)
            output.print_rows(tracer.run())
    except TraceError as e:
        reporter.print_error(f"error executing traceroute: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        reporter.print_warning("interrupted")
        sys.exit(130)


if __name__ == '__main__':
    main()
