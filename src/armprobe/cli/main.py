"""armprobe CLI - Main entry point."""

import json
import logging
import logging.handlers
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from armprobe.config.loader import ConfigError, load_probe_config
from armprobe.hardware.errors import DetectionError
from armprobe.hardware.inventory import Inventory

console = Console()
logger = logging.getLogger(__name__)

# Log rotation: 5 MB per file, keep 3 backups
_LOG_MAX_BYTES = 5 * 1024 * 1024
_LOG_BACKUP_COUNT = 3
_LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"

_installed_handlers: list[logging.Handler] = []


def _setup_logging(level: str, log_file: Path | None = None) -> None:
    """Configure console and optional rotating file logging."""
    root_logger = logging.getLogger()
    for handler in _installed_handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    root_logger.setLevel(level)

    stderr = logging.StreamHandler()
    stderr.setFormatter(logging.Formatter(_LOG_FORMAT))
    _installed_handlers.append(stderr)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=_LOG_MAX_BYTES,
            backupCount=_LOG_BACKUP_COUNT,
        )
        file_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        _installed_handlers.append(file_handler)

    for handler in _installed_handlers:
        root_logger.addHandler(handler)


def _fail(message: str) -> None:
    console.print(f"[red]{message}[/red]")
    raise SystemExit(1)


def _detect(ctx: click.Context):
    """Run one detection pass, turning detection failures into exit 1."""
    inventory = ctx.obj["inventory"]
    try:
        return inventory.detect()
    except DetectionError as e:
        logger.error("Detection failed: %s", e)
        _fail(f"Detection failed: {e}")


@click.group()
@click.version_option(version="0.3.0", prog_name="armprobe")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Config file (default: ~/.armprobe/config.yaml if present)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Override the configured log level",
)
@click.pass_context
def cli(ctx, config_path, log_level):
    """armprobe - hardware inventory for Rockchip ARM boards.

    Detects CPU, GPU, memory, network and storage, and tells the boot
    device apart from disks that are safe to install to.
    """
    try:
        config = load_probe_config(config_path)
    except ConfigError as e:
        _fail(str(e))

    _setup_logging((log_level or config.logging.level).upper(), config.logging.file)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["inventory"] = Inventory.from_config(config, logger=logging.getLogger("armprobe"))


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print the snapshot as JSON")
@click.option("--verbose", is_flag=True, help="Show filesystems and network details")
@click.pass_context
def detect(ctx, as_json, verbose):
    """Detect hardware and show a system overview."""
    info = _detect(ctx)

    if as_json:
        from armprobe.reporters.json_reporter import snapshot_to_dict

        click.echo(json.dumps(snapshot_to_dict(info), indent=2))
        return

    cpu = info.cpu
    console.print()
    console.print(f"[bold]{info.device_name}[/bold]")
    console.print(f"  Kernel: {info.kernel_version} ({info.architecture})")
    console.print(
        f"  CPU: {cpu.model} ({cpu.cores} cores) "
        f"{cpu.current_governor} @ {cpu.current_frequency_mhz}/{cpu.max_frequency_mhz} MHz, "
        f"{cpu.temperature_c:.1f}°C"
    )
    console.print(
        f"  GPU: {info.gpu.model} - {info.gpu.driver_type.value} ({info.gpu.driver_version})"
    )
    console.print(
        f"  Memory: {info.memory.total_gb}GB {info.memory.memory_type}, "
        f"{info.memory.available_gb}GB available, {info.memory.swap_gb}GB swap"
    )
    console.print(f"  Network: {len(info.network_interfaces)} interface(s)")
    if verbose:
        for iface in info.network_interfaces:
            state = "[green]up[/green]" if iface.is_connected else "[yellow]down[/yellow]"
            console.print(
                f"    {iface.name} ({iface.interface_type.value}) {state} "
                f"{iface.mac_address} {iface.ip_address or ''}"
            )

    console.print("  Storage:")
    for device in info.storage_devices:
        marker = ""
        if device.is_boot_device:
            marker = " [bold red]BOOT[/bold red]"
        elif device.device_path in info.target_devices:
            marker = " [green]target[/green]"
        console.print(
            f"    {device.device_path} {device.device_name} "
            f"{device.device_type.value} {device.size_gb}GB{marker}"
        )
        if verbose:
            for fs in device.filesystems:
                console.print(
                    f"      {fs.partition} {fs.filesystem_type or '-'} "
                    f"{fs.size_gb}GB {fs.mount_point or ''}"
                )


@cli.command()
@click.pass_context
def targets(ctx):
    """List devices eligible as installation targets."""
    info = _detect(ctx)

    console.print(f"Boot device: [bold red]{info.boot_device}[/bold red] (never offered as a target)")
    devices = info.get_target_devices()
    if not devices:
        console.print("[yellow]No eligible target devices found.[/yellow]")
        return

    table = Table(title="Eligible Target Devices")
    table.add_column("Device", style="cyan")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Size", justify="right")
    table.add_column("Removable")
    for device in devices:
        table.add_row(
            device.device_path,
            device.device_name,
            device.device_type.value,
            f"{device.size_gb}GB",
            "yes" if device.is_removable else "no",
        )
    console.print(table)


@cli.command("check-target")
@click.argument("device")
@click.pass_context
def check_target(ctx, device):
    """Exit 0 if DEVICE may be overwritten, 1 otherwise."""
    info = _detect(ctx)
    try:
        target = info.ensure_safe_target(device)
    except DetectionError as e:
        _fail(f"Unsafe target: {e}")
    console.print(
        f"[green]{target.device_path} ({target.device_type.value}, {target.size_gb}GB) "
        f"is an eligible target.[/green]"
    )


@cli.command()
@click.pass_context
def modules(ctx):
    """List loaded kernel modules."""
    names = ctx.obj["inventory"].kernel_modules()
    if not names:
        console.print("[yellow]No kernel modules reported (lsmod unavailable?)[/yellow]")
        return
    for name in names:
        click.echo(name)


@cli.command()
@click.option("--output", "-o", type=click.Path(path_type=Path), required=True, help="Report file")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["markdown", "json"]),
    default="markdown",
    help="Report format",
)
@click.pass_context
def report(ctx, output, fmt):
    """Export a system report."""
    info = _detect(ctx)
    if fmt == "json":
        from armprobe.reporters.json_reporter import save_json_report

        path = save_json_report(info, output)
    else:
        from armprobe.reporters.markdown import save_markdown_report

        path = save_markdown_report(info, output)
    console.print(f"[green]System report exported to {path}[/green]")


if __name__ == "__main__":
    cli()
