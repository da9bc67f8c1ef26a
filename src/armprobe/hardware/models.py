"""Immutable hardware inventory records."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import UnsafeTargetError

UNKNOWN_MAC = "00:00:00:00:00:00"


class StorageType(str, Enum):
    """Physical kind of a block device."""

    SD = "SD"
    MICRO_SD = "MicroSD"
    EMMC = "eMMC"
    NVME = "NVMe"
    SATA = "SATA"
    USB = "USB"
    UNKNOWN = "Unknown"


class DriverType(str, Enum):
    """GPU driver stack in use."""

    PROPRIETARY = "Mali Proprietary"
    OPEN_SOURCE = "Panfrost (Open Source)"
    NONE = "Unknown"


class InterfaceType(str, Enum):
    ETHERNET = "Ethernet"
    WIFI = "Wi-Fi"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class CpuInfo:
    """CPU state sampled from core 0 (representative core, not all cores)."""

    model: str
    cores: int
    architecture: str
    current_governor: str
    available_governors: tuple[str, ...]
    current_frequency_mhz: int
    max_frequency_mhz: int
    temperature_c: float


@dataclass(frozen=True)
class GpuInfo:
    model: str
    driver_type: DriverType
    driver_version: str
    # 0 means shared with system memory
    memory_size_mb: int = 0
    acceleration_features: tuple[str, ...] = ()
    supported_apis: tuple[str, ...] = ()


@dataclass(frozen=True)
class Filesystem:
    partition: str
    filesystem_type: str
    size_gb: int
    used_gb: int = 0
    mount_point: Optional[str] = None

    @property
    def is_boot_partition(self) -> bool:
        return self.mount_point in ("/boot", "/")


@dataclass(frozen=True)
class StorageDevice:
    device_path: str
    device_name: str
    size_gb: int
    device_type: StorageType
    is_removable: bool = False
    is_boot_device: bool = False
    filesystems: tuple[Filesystem, ...] = ()
    health_status: str = "Good"

    @property
    def has_root_filesystem(self) -> bool:
        return any(fs.mount_point == "/" for fs in self.filesystems)


@dataclass(frozen=True)
class MemoryInfo:
    total_gb: int
    available_gb: int
    swap_gb: int
    memory_type: str = "LPDDR5"


@dataclass(frozen=True)
class NetworkInterface:
    name: str
    interface_type: InterfaceType
    mac_address: str = UNKNOWN_MAC
    is_connected: bool = False
    ip_address: Optional[str] = None
    speed_mbps: Optional[int] = None


@dataclass(frozen=True)
class SystemInfo:
    """One detection pass over the running board.

    ``boot_device`` and ``target_devices`` are keys into
    ``storage_devices``; they are filled in by the storage classifier.
    """

    device_name: str
    kernel_version: str
    architecture: str
    cpu: CpuInfo
    gpu: GpuInfo
    storage_devices: tuple[StorageDevice, ...]
    memory: MemoryInfo
    network_interfaces: tuple[NetworkInterface, ...]
    boot_device: str
    target_devices: tuple[str, ...] = ()
    load_average: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def get_device(self, device_path: str) -> Optional[StorageDevice]:
        for device in self.storage_devices:
            if device.device_path == device_path:
                return device
        return None

    def get_target_devices(self) -> list[StorageDevice]:
        """Storage devices that may be offered as installation targets."""
        return [
            device
            for device in self.storage_devices
            if device.device_path in self.target_devices and not device.is_boot_device
        ]

    def ensure_safe_target(self, device_path: str) -> StorageDevice:
        """Validate an operator-chosen write target before anything destructive.

        Raises:
            UnsafeTargetError: If the path is the boot device, unknown, or
                not one of the eligible targets.
        """
        if device_path == self.boot_device:
            raise UnsafeTargetError(
                f"{device_path} is the boot device and cannot be used as a target"
            )
        device = self.get_device(device_path)
        if device is None:
            raise UnsafeTargetError(f"Unknown storage device: {device_path}")
        if device.device_path not in self.target_devices or device.is_boot_device:
            raise UnsafeTargetError(
                f"{device_path} ({device.device_type.value}) is not an eligible target. "
                f"Eligible: {', '.join(self.target_devices) or 'none'}"
            )
        return device
