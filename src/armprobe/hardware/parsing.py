"""Parsing helpers shared by the detectors.

All functions are total: malformed input yields a default or is skipped,
never an exception.
"""

import json
import logging
import re
from decimal import Decimal
from typing import Any, Optional

from .models import Filesystem, InterfaceType

logger = logging.getLogger(__name__)

BYTES_PER_GB = 1_000_000_000
KB_PER_GB = 1_000_000

# lsblk tree prefixes, both unicode (default) and ascii (-i)
_TREE_PREFIX = re.compile(r"^[\s│├└─|`-]+")
_SIZE = re.compile(r"^(\d+(?:[.,]\d+)?)([BKMGTP]?)(?:I?B)?$")
_SIZE_BYTES = {
    "": 1,
    "B": 1,
    "K": 10**3,
    "M": 10**6,
    "G": 10**9,
    "T": 10**12,
    "P": 10**15,
}
_IP_LINK = re.compile(r"^\d+:\s+([^:@\s]+)(?:@\S*)?:")

_INTERFACE_PREFIXES = (
    ("eth", InterfaceType.ETHERNET),
    ("wlan", InterfaceType.WIFI),
)


def parse_int(text: Optional[str], default: int) -> int:
    """Parse the first token of a sysfs value as an int."""
    if not text:
        return default
    try:
        return int(text.split()[0])
    except (ValueError, IndexError):
        return default


def parse_size_to_gb(size: Any) -> int:
    """Convert an lsblk size (``"29.1G"``, ``"512M"`` or raw bytes) to whole GB."""
    if isinstance(size, int):
        return max(size, 0) // BYTES_PER_GB
    if not isinstance(size, str):
        return 0
    match = _SIZE.match(size.strip().upper())
    if not match:
        return 0
    number = Decimal(match.group(1).replace(",", "."))
    return int(number * _SIZE_BYTES[match.group(2)]) // BYTES_PER_GB


def strip_tree_prefix(name: str) -> str:
    return _TREE_PREFIX.sub("", name)


def interface_type_for(name: str) -> InterfaceType:
    for prefix, kind in _INTERFACE_PREFIXES:
        if name.startswith(prefix):
            return kind
    return InterfaceType.UNKNOWN


def parse_meminfo(text: Optional[str]) -> dict[str, int]:
    """Return ``/proc/meminfo`` values in kB keyed by field name (no colon)."""
    values: dict[str, int] = {}
    for line in (text or "").splitlines():
        key, sep, rest = line.partition(":")
        if not sep:
            continue
        try:
            values[key.strip()] = int(rest.split()[0])
        except (ValueError, IndexError):
            continue
    return values


def parse_loadavg(text: Optional[str]) -> tuple[float, float, float]:
    try:
        one, five, fifteen = (float(v) for v in (text or "").split()[:3])
    except ValueError:
        return (0.0, 0.0, 0.0)
    return (one, five, fifteen)


def parse_lsmod(text: Optional[str]) -> list[str]:
    """Module names from ``lsmod`` output, header skipped."""
    modules = []
    for line in (text or "").splitlines()[1:]:
        parts = line.split()
        if parts:
            modules.append(parts[0])
    return modules


# --- lsblk ---


def parse_lsblk_json(text: Optional[str]) -> Optional[dict[str, dict[str, Any]]]:
    """Index ``lsblk -J`` top-level block devices by kernel name.

    Returns None when the output is missing or not the expected JSON shape.
    """
    if not text:
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug("Unparseable lsblk JSON: %s", e)
        return None
    devices = data.get("blockdevices") if isinstance(data, dict) else None
    if not isinstance(devices, list):
        return None
    return {
        node["name"]: node
        for node in devices
        if isinstance(node, dict) and isinstance(node.get("name"), str)
    }


def _mount_point(node: dict[str, Any]) -> Optional[str]:
    if node.get("mountpoint"):
        return node["mountpoint"]
    for mp in node.get("mountpoints") or []:
        if mp:
            return mp
    return None


def lsblk_filesystems(node: dict[str, Any]) -> list[Filesystem]:
    """Filesystems below one ``lsblk -J`` disk node, depth first.

    A disk without children that carries a filesystem itself counts as one.
    """
    children = node.get("children") or []
    if not children:
        if node.get("fstype") or _mount_point(node):
            return [_node_filesystem(node)]
        return []

    filesystems: list[Filesystem] = []
    for child in children:
        if not isinstance(child, dict) or not child.get("name"):
            continue
        filesystems.append(_node_filesystem(child))
        if child.get("children"):
            filesystems.extend(lsblk_filesystems(child))
    return filesystems


def _node_filesystem(node: dict[str, Any]) -> Filesystem:
    return Filesystem(
        partition=f"/dev/{strip_tree_prefix(node['name'])}",
        filesystem_type=node.get("fstype") or "",
        size_gb=parse_size_to_gb(node.get("size")),
        mount_point=_mount_point(node),
    )


def parse_lsblk_rows(text: Optional[str], min_columns: int = 3) -> list[Filesystem]:
    """Parse ``lsblk -n -o NAME,SIZE,FSTYPE,MOUNTPOINT`` text output.

    Rows with fewer than ``min_columns`` fields are skipped.
    """
    filesystems = []
    for line in (text or "").splitlines():
        parts = strip_tree_prefix(line).split()
        if len(parts) < min_columns:
            continue
        filesystems.append(
            Filesystem(
                partition=f"/dev/{parts[0]}",
                filesystem_type=parts[2],
                size_gb=parse_size_to_gb(parts[1]),
                mount_point=parts[3] if len(parts) > 3 else None,
            )
        )
    return filesystems


# --- ip ---


def parse_ip_json(text: Optional[str]) -> Optional[list[dict[str, Any]]]:
    """Interfaces from ``ip -j addr show`` as plain dicts.

    Each dict has ``name``, ``state``, ``mac`` and ``ip`` (first IPv4 or None).
    Returns None when the output is missing or not JSON.
    """
    if not text:
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug("Unparseable ip JSON: %s", e)
        return None
    if not isinstance(data, list):
        return None

    links = []
    for entry in data:
        if not isinstance(entry, dict) or not entry.get("ifname"):
            continue
        ipv4 = next(
            (
                addr.get("local")
                for addr in entry.get("addr_info") or []
                if isinstance(addr, dict) and addr.get("family") == "inet"
            ),
            None,
        )
        links.append(
            {
                "name": entry["ifname"],
                "state": str(entry.get("operstate") or "UNKNOWN").upper(),
                "mac": entry.get("address"),
                "ip": ipv4,
            }
        )
    return links


def parse_ip_text(text: Optional[str]) -> list[dict[str, Any]]:
    """Interfaces from plain ``ip addr show`` output.

    An interface starts at a line carrying ``state UP`` or ``state DOWN``;
    following ``link/ether`` and ``inet`` lines are attributed to it.
    """
    links: list[dict[str, Any]] = []
    current: Optional[dict[str, Any]] = None
    for line in (text or "").splitlines():
        if "state UP" in line or "state DOWN" in line:
            match = _IP_LINK.match(line.strip())
            if match:
                current = {
                    "name": match.group(1),
                    "state": "UP" if "state UP" in line else "DOWN",
                    "mac": None,
                    "ip": None,
                }
                links.append(current)
                continue
        if _IP_LINK.match(line.strip()):
            # interface we are not reporting (e.g. state UNKNOWN)
            current = None
            continue
        if current is None:
            continue
        parts = line.split()
        if len(parts) >= 2 and parts[0] == "link/ether" and current["mac"] is None:
            current["mac"] = parts[1]
        elif len(parts) >= 2 and parts[0] == "inet" and current["ip"] is None:
            current["ip"] = parts[1].split("/")[0]
    return links
