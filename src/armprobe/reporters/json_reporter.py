"""JSON snapshot output."""

import json
from dataclasses import asdict
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from armprobe.hardware.models import SystemInfo

REPORT_VERSION = "1.0"


def _default_serializer(obj: Any) -> Any:
    """JSON serializer for objects not serializable by default."""
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, Path):
        return str(obj)
    raise TypeError(f"Type {type(obj)} not serializable")


def snapshot_to_dict(info: SystemInfo) -> dict[str, Any]:
    """Convert a snapshot to a JSON-serializable dict.

    Derived flags (``is_boot_partition``) are included alongside fields.
    """
    data = json.loads(json.dumps(asdict(info), default=_default_serializer))
    for device_data, device in zip(data["storage_devices"], info.storage_devices):
        for fs_data, fs in zip(device_data["filesystems"], device.filesystems):
            fs_data["is_boot_partition"] = fs.is_boot_partition
    return data


def save_json_report(info: SystemInfo, output_path: Path) -> Path:
    """Write a snapshot as JSON.

    Args:
        info: Snapshot to write.
        output_path: Destination file; parent directories are created.

    Returns:
        Path to the created JSON file.
    """
    data = {
        "report_version": REPORT_VERSION,
        "generated": datetime.now().isoformat(timespec="seconds"),
        "system_info": snapshot_to_dict(info),
    }
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)
    return output_path
