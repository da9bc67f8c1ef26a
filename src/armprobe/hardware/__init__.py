"""Hardware detection and storage classification for ARM SBCs."""

from .classifier import DEFAULT_TARGET_TYPES, classify_storage, verify_snapshot
from .errors import DetectionError, NoBootDeviceFound, SnapshotInvariantError, UnsafeTargetError
from .inventory import Inventory
from .models import (
    CpuInfo,
    DriverType,
    Filesystem,
    GpuInfo,
    InterfaceType,
    MemoryInfo,
    NetworkInterface,
    StorageDevice,
    StorageType,
    SystemInfo,
)
from .sources import SourceReader

__all__ = [
    "CpuInfo",
    "DEFAULT_TARGET_TYPES",
    "DetectionError",
    "DriverType",
    "Filesystem",
    "GpuInfo",
    "InterfaceType",
    "Inventory",
    "MemoryInfo",
    "NetworkInterface",
    "NoBootDeviceFound",
    "SnapshotInvariantError",
    "SourceReader",
    "StorageDevice",
    "StorageType",
    "SystemInfo",
    "UnsafeTargetError",
    "classify_storage",
    "verify_snapshot",
]
