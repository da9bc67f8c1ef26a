"""Per-facet hardware detectors with fallbacks.

Each detector takes a :class:`SourceReader` and always returns a complete
record. Missing or malformed sources degrade single fields to documented
defaults instead of failing the detector.
"""

import os
from dataclasses import dataclass
from typing import Optional

from .models import (
    UNKNOWN_MAC,
    CpuInfo,
    DriverType,
    GpuInfo,
    MemoryInfo,
    NetworkInterface,
    StorageDevice,
    StorageType,
)
from .parsing import (
    BYTES_PER_GB,
    KB_PER_GB,
    interface_type_for,
    lsblk_filesystems,
    parse_int,
    parse_ip_json,
    parse_ip_text,
    parse_loadavg,
    parse_lsblk_json,
    parse_lsblk_rows,
    parse_lsmod,
    parse_meminfo,
    parse_size_to_gb,
)
from .sources import SourceReader

BOARD_NAME = "Orange Pi 5 Plus"
DEFAULT_CPU_MODEL = "Rockchip RK3588S"
DEFAULT_ARCHITECTURE = "aarch64"
DEFAULT_GOVERNORS = ("performance", "powersave")
# RK3588 lowest and highest big-core operating points
DEFAULT_CUR_FREQ_MHZ = 408
DEFAULT_MAX_FREQ_MHZ = 2400
DEFAULT_TEMPERATURE_C = 45.0

GPU_MODEL = "Mali-G610 MP4"
GPU_ACCELERATION_FEATURES = (
    "Hardware Video Decode",
    "Hardware Video Encode",
    "OpenGL ES 3.2",
    "Vulkan 1.1",
)
GPU_SUPPORTED_APIS = ("OpenGL ES 3.2", "EGL 1.5", "Vulkan 1.1", "OpenCL 2.0")

_CPUFREQ = "/sys/devices/system/cpu/cpu0/cpufreq"
_CPU_MODEL_KEYS = ("Hardware", "model name")

# First existing node decides the driver stack.
_GPU_DRIVER_NODES = (
    ("/dev/mali0", DriverType.PROPRIETARY),
    ("/sys/kernel/debug/dri/0", DriverType.OPEN_SOURCE),
)


@dataclass(frozen=True)
class StorageCandidate:
    device_path: str
    device_name: str
    device_type: StorageType
    is_removable: bool = False


STORAGE_CANDIDATES = (
    StorageCandidate("/dev/mmcblk0", "eMMC Storage", StorageType.EMMC),
    StorageCandidate("/dev/mmcblk1", "MicroSD Card", StorageType.MICRO_SD, is_removable=True),
    StorageCandidate("/dev/nvme0n1", "NVMe SSD", StorageType.NVME),
)


def _first_line(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    lines = text.replace("\x00", "").strip().splitlines()
    return lines[0].strip() if lines else None


# --- identity ---


def detect_device_name(sources: SourceReader) -> str:
    """Board name from the device tree, falling back to cpuinfo hints."""
    model = _first_line(sources.read("/proc/device-tree/model"))
    if model:
        if "orange pi 5 plus" in model.lower():
            return BOARD_NAME
        return model

    cpuinfo = sources.read("/proc/cpuinfo") or ""
    if "rk3588" in cpuinfo.lower():
        return f"{BOARD_NAME} (RK3588S)"

    return BOARD_NAME


def detect_kernel_version(sources: SourceReader) -> str:
    return _first_line(sources.run(["uname", "-r"])) or "Unknown"


def detect_architecture(sources: SourceReader) -> str:
    return _first_line(sources.run(["uname", "-m"])) or DEFAULT_ARCHITECTURE


# --- CPU ---


def detect_cpu(sources: SourceReader, architecture: str = DEFAULT_ARCHITECTURE) -> CpuInfo:
    """CPU model, core count and core 0 frequency/governor/temperature.

    Core 0 is sampled as the representative core; per-cluster differences
    on big.LITTLE parts are not reflected.
    """
    cpuinfo = sources.read("/proc/cpuinfo")
    if cpuinfo is None:
        sources.logger.debug("cpuinfo unavailable, using os.cpu_count()")
        cores = os.cpu_count() or 1
        model = DEFAULT_CPU_MODEL
    else:
        cores = 0
        model = None
        for line in cpuinfo.splitlines():
            key, sep, value = line.partition(":")
            key = key.strip()
            if key == "processor":
                cores += 1
            elif sep and model is None and key in _CPU_MODEL_KEYS and value.strip():
                model = value.strip()
        cores = cores or os.cpu_count() or 1
        model = model or DEFAULT_CPU_MODEL

    governor = _first_line(sources.read(f"{_CPUFREQ}/scaling_governor")) or "unknown"
    governors_raw = sources.read(f"{_CPUFREQ}/scaling_available_governors")
    available = tuple((governors_raw or "").split()) or DEFAULT_GOVERNORS

    cur_khz = parse_int(sources.read(f"{_CPUFREQ}/scaling_cur_freq"), DEFAULT_CUR_FREQ_MHZ * 1000)
    max_khz = parse_int(sources.read(f"{_CPUFREQ}/cpuinfo_max_freq"), DEFAULT_MAX_FREQ_MHZ * 1000)
    millideg = parse_int(
        sources.read("/sys/class/thermal/thermal_zone0/temp"),
        int(DEFAULT_TEMPERATURE_C * 1000),
    )

    return CpuInfo(
        model=model,
        cores=cores,
        architecture=architecture,
        current_governor=governor,
        available_governors=available,
        current_frequency_mhz=cur_khz // 1000,
        max_frequency_mhz=max_khz // 1000,
        temperature_c=millideg / 1000.0,
    )


# --- GPU ---


def _mali_package_version(sources: SourceReader) -> Optional[str]:
    output = sources.run(["dpkg", "-l", "libmali*"])
    for line in (output or "").splitlines():
        if "libmali" in line and "g610" in line:
            parts = line.split()
            if len(parts) > 2:
                return parts[2]
    return None


def detect_gpu(sources: SourceReader) -> GpuInfo:
    """Mali GPU driver stack, chosen by the first driver node present."""
    driver_type = DriverType.NONE
    for node, kind in _GPU_DRIVER_NODES:
        if sources.exists(node):
            driver_type = kind
            break

    if driver_type is DriverType.NONE:
        sources.logger.debug("No GPU driver node found")
        return GpuInfo(model=GPU_MODEL, driver_type=driver_type, driver_version="Unknown")

    if driver_type is DriverType.PROPRIETARY:
        version = _mali_package_version(sources) or "Unknown"
    else:
        version = "Mesa"

    return GpuInfo(
        model=GPU_MODEL,
        driver_type=driver_type,
        driver_version=version,
        acceleration_features=GPU_ACCELERATION_FEATURES,
        supported_apis=GPU_SUPPORTED_APIS,
    )


# --- storage ---


def _device_size_gb(sources: SourceReader, device_path: str) -> Optional[int]:
    raw = sources.run(["blockdev", "--getsize64", device_path])
    size = parse_int(raw, -1)
    if size < 0:
        return None
    return size // BYTES_PER_GB


def detect_storage(sources: SourceReader) -> list[StorageDevice]:
    """Well-known storage devices that exist on this board.

    ``is_boot_device`` is left False here; the classifier owns it.
    """
    tree = parse_lsblk_json(
        sources.run(["lsblk", "-J", "-o", "NAME,SIZE,TYPE,MOUNTPOINT,FSTYPE,MODEL"])
    )
    if tree is None:
        sources.logger.debug("lsblk JSON unavailable, falling back to per-device text")

    devices = []
    for candidate in STORAGE_CANDIDATES:
        if not sources.exists(candidate.device_path):
            continue

        kernel_name = candidate.device_path.rsplit("/", 1)[-1]
        node = (tree or {}).get(kernel_name)
        name = candidate.device_name
        if node is not None:
            filesystems = lsblk_filesystems(node)
            if node.get("model"):
                name = f"{name} ({str(node['model']).strip()})"
        else:
            filesystems = parse_lsblk_rows(
                sources.run(["lsblk", "-n", "-o", "NAME,SIZE,FSTYPE,MOUNTPOINT", candidate.device_path])
            )

        size_gb = _device_size_gb(sources, candidate.device_path)
        if size_gb is None:
            size_gb = parse_size_to_gb(node.get("size")) if node is not None else 0

        devices.append(
            StorageDevice(
                device_path=candidate.device_path,
                device_name=name,
                size_gb=size_gb,
                device_type=candidate.device_type,
                is_removable=candidate.is_removable,
                filesystems=tuple(filesystems),
            )
        )
        sources.logger.debug(
            "Storage %s: %s %dGB, %d filesystem(s)",
            candidate.device_path,
            candidate.device_type.value,
            size_gb,
            len(filesystems),
        )
    return devices


# --- memory ---


def detect_memory(sources: SourceReader) -> MemoryInfo:
    values = parse_meminfo(sources.read("/proc/meminfo"))
    return MemoryInfo(
        total_gb=values.get("MemTotal", 0) // KB_PER_GB,
        available_gb=values.get("MemAvailable", 0) // KB_PER_GB,
        swap_gb=values.get("SwapTotal", 0) // KB_PER_GB,
    )


# --- network ---


def _link_speed(sources: SourceReader, name: str) -> Optional[int]:
    speed = parse_int(sources.read(f"/sys/class/net/{name}/speed"), -1)
    return speed if speed > 0 else None


def detect_network(sources: SourceReader) -> list[NetworkInterface]:
    """Non-loopback interfaces that report an UP or DOWN state."""
    links = parse_ip_json(sources.run(["ip", "-j", "addr", "show"]))
    if links is None:
        links = parse_ip_text(sources.run(["ip", "addr", "show"]))

    interfaces = []
    for link in links:
        name = link["name"]
        if name == "lo" or link["state"] not in ("UP", "DOWN"):
            continue
        interfaces.append(
            NetworkInterface(
                name=name,
                interface_type=interface_type_for(name),
                mac_address=link["mac"] or UNKNOWN_MAC,
                is_connected=link["state"] == "UP",
                ip_address=link["ip"],
                speed_mbps=_link_speed(sources, name),
            )
        )
    return interfaces


# --- misc ---


def detect_load_average(sources: SourceReader) -> tuple[float, float, float]:
    return parse_loadavg(sources.read("/proc/loadavg"))


def detect_kernel_modules(sources: SourceReader) -> list[str]:
    return parse_lsmod(sources.run(["lsmod"]))


def read_boot_parameters(sources: SourceReader) -> Optional[str]:
    cmdline = sources.read("/proc/cmdline")
    return cmdline.strip() if cmdline is not None else None
