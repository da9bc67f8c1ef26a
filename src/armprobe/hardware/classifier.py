"""Boot and target device classification.

This decides which disk must never be written to, so it fails loudly
instead of guessing when the boot device cannot be identified.
"""

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Sequence

from .errors import NoBootDeviceFound, SnapshotInvariantError
from .models import StorageDevice, StorageType, SystemInfo

logger = logging.getLogger(__name__)

# Fixed, non-removable media only.
DEFAULT_TARGET_TYPES = frozenset({StorageType.EMMC, StorageType.NVME})


@dataclass(frozen=True)
class StorageClassification:
    boot_device: str
    target_devices: tuple[str, ...]
    devices: tuple[StorageDevice, ...]


def find_boot_device(devices: Sequence[StorageDevice], log: Optional[logging.Logger] = None) -> str:
    """Return the path of the device serving ``/``.

    Falls back to the first MicroSD card when no filesystem reports a
    ``/`` mount point.

    Raises:
        NoBootDeviceFound: If neither rule matches.
    """
    log = log or logger
    for device in devices:
        if device.has_root_filesystem:
            return device.device_path

    for device in devices:
        if device.device_type is StorageType.MICRO_SD:
            log.warning(
                "No filesystem mounted at /; assuming MicroSD %s is the boot device",
                device.device_path,
            )
            return device.device_path

    raise NoBootDeviceFound(
        f"Could not determine boot device among {len(devices)} storage device(s): "
        "no root mount and no MicroSD card"
    )


def find_target_devices(
    devices: Sequence[StorageDevice],
    boot_device: str,
    allowed_types: Iterable[StorageType] = DEFAULT_TARGET_TYPES,
) -> tuple[str, ...]:
    """Paths of non-boot devices whose type is in ``allowed_types``."""
    allowed = frozenset(allowed_types)
    targets: list[str] = []
    for device in devices:
        if device.device_path == boot_device or device.device_path in targets:
            continue
        if device.device_type in allowed:
            targets.append(device.device_path)
    return tuple(targets)


def classify_storage(
    devices: Sequence[StorageDevice],
    allowed_types: Iterable[StorageType] = DEFAULT_TARGET_TYPES,
    log: Optional[logging.Logger] = None,
) -> StorageClassification:
    """Pick the boot device and eligible targets, marking ``is_boot_device``."""
    log = log or logger
    boot_device = find_boot_device(devices, log)
    targets = find_target_devices(devices, boot_device, allowed_types)
    marked = tuple(
        replace(device, is_boot_device=device.device_path == boot_device) for device in devices
    )
    log.info("Boot device: %s; targets: %s", boot_device, ", ".join(targets) or "none")
    return StorageClassification(boot_device=boot_device, target_devices=targets, devices=marked)


def verify_snapshot(info: SystemInfo) -> None:
    """Check the boot/target post-condition on an assembled snapshot.

    Raises:
        SnapshotInvariantError: If any device flag or reference disagrees.
    """
    paths = [d.device_path for d in info.storage_devices]
    boot_flags = [d.device_path for d in info.storage_devices if d.is_boot_device]

    if len(boot_flags) != 1:
        raise SnapshotInvariantError(
            f"Expected exactly one boot device, found {len(boot_flags)}: {boot_flags}"
        )
    if boot_flags[0] != info.boot_device or info.boot_device not in paths:
        raise SnapshotInvariantError(
            f"Boot device {info.boot_device!r} does not match flagged device {boot_flags[0]!r}"
        )
    if info.boot_device in info.target_devices:
        raise SnapshotInvariantError(f"Boot device {info.boot_device} listed as a target")
    unknown = [t for t in info.target_devices if t not in paths]
    if unknown:
        raise SnapshotInvariantError(f"Targets not among storage devices: {unknown}")
