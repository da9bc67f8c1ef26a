"""Markdown system report generation."""

from datetime import datetime
from pathlib import Path

from armprobe.hardware.models import SystemInfo


def generate_summary(info: SystemInfo) -> str:
    """Generate a markdown report of a snapshot.

    Args:
        info: Snapshot to describe.

    Returns:
        Markdown-formatted report string.
    """
    cpu = info.cpu
    gpu = info.gpu
    mem = info.memory

    lines = []
    lines.append(f"# {info.device_name} System Report")
    lines.append("")
    lines.append(f"**Generated**: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    lines.append(f"**Kernel**: {info.kernel_version}")
    lines.append(f"**Architecture**: {info.architecture}")
    load = " ".join(f"{v:.2f}" for v in info.load_average)
    lines.append(f"**Load Average**: {load}")
    lines.append("")

    lines.append("## Processor")
    lines.append("")
    lines.append(f"- **Model**: {cpu.model} ({cpu.cores} cores)")
    lines.append(
        f"- **Governor**: {cpu.current_governor} "
        f"(available: {', '.join(cpu.available_governors)})"
    )
    lines.append(
        f"- **Frequency (cpu0)**: {cpu.current_frequency_mhz} MHz / {cpu.max_frequency_mhz} MHz max"
    )
    lines.append(f"- **Temperature**: {cpu.temperature_c:.1f}°C")
    lines.append("")

    lines.append("## Graphics")
    lines.append("")
    lines.append(f"- **GPU**: {gpu.model}")
    lines.append(f"- **Driver**: {gpu.driver_type.value} ({gpu.driver_version})")
    if gpu.memory_size_mb == 0:
        lines.append("- **Memory**: shared with system")
    else:
        lines.append(f"- **Memory**: {gpu.memory_size_mb} MB")
    if gpu.supported_apis:
        lines.append(f"- **APIs**: {', '.join(gpu.supported_apis)}")
    lines.append("")

    lines.append("## Memory")
    lines.append("")
    lines.append(f"- **Total**: {mem.total_gb}GB {mem.memory_type}")
    lines.append(f"- **Available**: {mem.available_gb}GB")
    lines.append(f"- **Swap**: {mem.swap_gb}GB")
    lines.append("")

    lines.append("## Storage")
    lines.append("")
    lines.append("| Device | Name | Type | Size | Role |")
    lines.append("|--------|------|------|------|------|")
    for device in info.storage_devices:
        if device.is_boot_device:
            role = "BOOT"
        elif device.device_path in info.target_devices:
            role = "target"
        else:
            role = "-"
        lines.append(
            f"| {device.device_path} | {device.device_name} | {device.device_type.value} "
            f"| {device.size_gb}GB | {role} |"
        )
    lines.append("")

    for device in info.storage_devices:
        if not device.filesystems:
            continue
        lines.append(f"### {device.device_path}")
        lines.append("")
        for fs in device.filesystems:
            mount = fs.mount_point or "not mounted"
            fstype = fs.filesystem_type or "unknown"
            lines.append(f"- `{fs.partition}` {fstype} {fs.size_gb}GB at {mount}")
        lines.append("")

    lines.append("## Network")
    lines.append("")
    if not info.network_interfaces:
        lines.append("No interfaces detected.")
    for iface in info.network_interfaces:
        state = "up" if iface.is_connected else "down"
        details = [iface.interface_type.value, state, iface.mac_address]
        if iface.ip_address:
            details.append(iface.ip_address)
        if iface.speed_mbps:
            details.append(f"{iface.speed_mbps} Mb/s")
        lines.append(f"- **{iface.name}**: {', '.join(details)}")
    lines.append("")

    return "\n".join(lines)


def save_markdown_report(info: SystemInfo, output_path: Path) -> Path:
    """Write :func:`generate_summary` output to a file."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(generate_summary(info), encoding="utf-8")
    return output_path
