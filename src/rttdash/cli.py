"""
rttdash CLI - RTT Channel Dashboard

Command-line interface using Click.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Callable, Optional

import click

from . import PACKAGE_LOGGER, __version__
from .config import (
    DashConfig,
    default_session_name,
    load_config_file,
    parse_int,
    prepare_log_dir,
)
from .detect import list_probes, format_probe_table
from .errors import RttDashError
from .rtt import Dashboard, StructuredLogAdapter, build_decoders, load_frame_decoder
from .transport import get_backend

_stderr_handler: Optional[logging.Handler] = None
_file_handler: Optional[logging.Handler] = None


def configure_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """
    Set up the rttdash loggers.

    Diagnostics go to stderr outside the TUI and optionally to `log_file`
    for the whole session.
    """
    global _stderr_handler, _file_handler

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    if _stderr_handler is not None:
        package_logger.removeHandler(_stderr_handler)
    _stderr_handler = logging.StreamHandler(sys.stderr)
    _stderr_handler.setLevel(logging.INFO if verbose else logging.WARNING)
    _stderr_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    package_logger.addHandler(_stderr_handler)

    if _file_handler is not None:
        package_logger.removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None
    if log_file:
        _file_handler = logging.FileHandler(log_file)
        _file_handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s: %(message)s"))
        package_logger.addHandler(_file_handler)


# --------------------------------------------------------------------------
# CLI Group
# --------------------------------------------------------------------------

@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.option('-v', '--verbose', is_flag=True, help='Verbose output')
@click.option('--log-file', type=click.Path(dir_okay=False), help='Write diagnostics to a file')
@click.pass_context
def cli(ctx, verbose, log_file):
    """rttdash - RTT Channel Dashboard

    A terminal dashboard for SEGGER RTT channels on an embedded target.

    Run without arguments to attach with default settings.
    """
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    configure_logging(verbose, log_file)

    # Attach if no subcommand provided
    if ctx.invoked_subcommand is None:
        ctx.invoke(attach)


# --------------------------------------------------------------------------
# Shared options
# --------------------------------------------------------------------------

def target_options(func: Callable) -> Callable:
    """Options selecting the probe, target and control block"""
    options = [
        click.option('-c', '--config', 'config_file', type=click.Path(exists=True, dir_okay=False),
                     help='Python config file'),
        click.option('-p', '--probe', help='Probe unique ID'),
        click.option('-t', '--target', help='Target chip name (pyocd target type)'),
        click.option('-a', '--address', help='RTT control block address (hex)'),
        click.option('--scan-size', help='Bytes of RAM to scan for the control block'),
        click.option('--timeout', type=float, help='Seconds to wait for the control block'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def resolve_config(
    config_file: Optional[str] = None,
    probe: Optional[str] = None,
    target: Optional[str] = None,
    address: Optional[str] = None,
    scan_size: Optional[str] = None,
    timeout: Optional[float] = None,
    **overrides,
) -> DashConfig:
    """Load the config file (if any) and apply command-line overrides"""
    config = load_config_file(config_file) if config_file else DashConfig()

    if probe:
        config.probe.unique_id = probe
    if target:
        config.probe.target = target
    if address:
        config.rtt.address = parse_int(address)
    if scan_size:
        config.rtt.scan_size = parse_int(scan_size)
    if timeout is not None:
        config.rtt.timeout = timeout

    for key, value in overrides.items():
        if value is not None:
            setattr(config.rtt, key, value)

    return config


def make_structured_factory(config: DashConfig) -> Optional[Callable[[], StructuredLogAdapter]]:
    """Load the frame decoder tables once; each structured tab gets its own adapter"""
    if not config.rtt.frame_decoder:
        return None

    factory = load_frame_decoder(config.rtt.frame_decoder)
    try:
        tables = factory(config.rtt.elf)
    except RttDashError:
        raise
    except Exception as e:
        raise RttDashError(f"Frame decoder failed to load tables: {e}") from e

    return lambda: StructuredLogAdapter(tables)


def _open_backend(config: DashConfig):
    backend = get_backend(config.probe.transport, config.probe, config.rtt)
    if backend is None:
        raise RttDashError(f"Unknown transport '{config.probe.transport}'")
    return backend


# --------------------------------------------------------------------------
# Dashboard
# --------------------------------------------------------------------------

@cli.command()
@target_options
@click.option('--timestamps/--no-timestamps', default=None, help='Prefix text lines with the receive time')
@click.option('--log/--no-log', 'log_enabled', default=None, help='Save channel output on exit')
@click.option('--log-dir', 'log_path', type=click.Path(file_okay=False, path_type=Path),
              help='Directory for channel logs')
@click.option('--session', help='Log file name prefix (default: target and start time)')
@click.option('--elf', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='Firmware image for the structured-log decoder')
@click.option('--frame-decoder', help="Structured-log decoder factory as 'module:factory'")
@click.pass_context
def attach(ctx, config_file, probe, target, address, scan_size, timeout,
           timestamps, log_enabled, log_path, session, elf, frame_decoder):
    """Attach to the target and open the dashboard."""
    from .tui.app import run_tui

    try:
        config = resolve_config(
            config_file, probe, target, address, scan_size, timeout,
            show_timestamps=timestamps,
            log_enabled=log_enabled,
            log_path=log_path,
            elf=elf,
            frame_decoder=frame_decoder,
        )
        structured_factory = make_structured_factory(config)
        log_dir = prepare_log_dir(config.rtt)
        session = session or default_session_name(config.probe.target)

        with _open_backend(config) as backend:
            tabs = build_decoders(
                backend.up_channels(),
                backend.down_channels(),
                config.rtt.channels,
                show_timestamps=config.rtt.show_timestamps,
                structured_factory=structured_factory,
            )
            dashboard = Dashboard(tabs, log_dir=log_dir, session_name=session)

            # The TUI owns the terminal; diagnostics go to notifications meanwhile
            package_logger = logging.getLogger(PACKAGE_LOGGER)
            if _stderr_handler is not None:
                package_logger.removeHandler(_stderr_handler)
            try:
                run_tui(dashboard, poll_interval=config.rtt.poll_interval)
            finally:
                if _stderr_handler is not None:
                    package_logger.addHandler(_stderr_handler)
                written = dashboard.shutdown()

        for path in written:
            click.echo(f"Saved {path}")

    except RttDashError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


# --------------------------------------------------------------------------
# Discovery
# --------------------------------------------------------------------------

@cli.command()
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON')
def probes(as_json):
    """List connected debug probes."""
    found = list_probes()

    if as_json:
        output = [
            {
                "unique_id": p.unique_id,
                "description": p.description,
                "vendor": p.vendor,
                "product": p.product,
            }
            for p in found
        ]
        click.echo(json.dumps(output, indent=2))
    else:
        for line in format_probe_table(found):
            click.echo(line)


@cli.command()
@target_options
@click.pass_context
def channels(ctx, config_file, probe, target, address, scan_size, timeout):
    """List the RTT channels of the attached target."""
    try:
        config = resolve_config(config_file, probe, target, address, scan_size, timeout)

        with _open_backend(config) as backend:
            for key, value in backend.get_info().items():
                click.echo(f"{key}: {value}")
            click.echo()

            click.echo(f"{'Dir':<5} {'#':<3} {'Name'}")
            click.echo("-" * 40)
            for endpoint in backend.up_channels():
                click.echo(f"{'up':<5} {endpoint.number:<3} {endpoint.name or '-'}")
            for endpoint in backend.down_channels():
                click.echo(f"{'down':<5} {endpoint.number:<3} {endpoint.name or '-'}")

    except RttDashError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


# --------------------------------------------------------------------------
# Entry Point
# --------------------------------------------------------------------------

def main():
    """Main entry point."""
    cli()


if __name__ == '__main__':
    main()
