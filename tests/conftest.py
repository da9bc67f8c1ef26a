"""Shared fixtures: a source reader backed by a temp tree and canned commands."""

import json
from pathlib import Path
from typing import Optional, Sequence

import pytest

from armprobe.hardware.models import (
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
from armprobe.hardware.sources import SourceReader


class FakeSources(SourceReader):
    """SourceReader whose files live under ``root`` and whose commands are canned."""

    def __init__(self, root: Path, commands: Optional[dict] = None) -> None:
        super().__init__(root=root, timeout=1.0)
        self.commands: dict[tuple[str, ...], str] = dict(commands or {})
        self.calls: list[tuple[str, ...]] = []

    def write(self, path: str, content: str = "") -> None:
        target = self.resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)

    def command(self, argv: Sequence[str], output: str) -> None:
        self.commands[tuple(argv)] = output

    def run(self, argv: Sequence[str]) -> Optional[str]:
        self.calls.append(tuple(argv))
        return self.commands.get(tuple(argv))


LSBLK_JSON_ARGV = ("lsblk", "-J", "-o", "NAME,SIZE,TYPE,MOUNTPOINT,FSTYPE,MODEL")

EMMC_ROOT_NVME_EMPTY = {
    "blockdevices": [
        {
            "name": "mmcblk0",
            "size": "29.1G",
            "type": "disk",
            "mountpoint": None,
            "fstype": None,
            "model": None,
            "children": [
                {"name": "mmcblk0p1", "size": "512M", "type": "part",
                 "mountpoint": "/boot", "fstype": "vfat", "model": None},
                {"name": "mmcblk0p2", "size": "28.6G", "type": "part",
                 "mountpoint": "/", "fstype": "ext4", "model": None},
            ],
        },
        {
            "name": "nvme0n1",
            "size": "476.9G",
            "type": "disk",
            "mountpoint": None,
            "fstype": None,
            "model": "Samsung SSD 980 PRO 512GB",
        },
    ]
}


@pytest.fixture
def fake_sources(tmp_path):
    return FakeSources(tmp_path)


@pytest.fixture
def emmc_nvme_board(fake_sources):
    """eMMC holding / and /boot plus an empty NVMe disk."""
    fake_sources.write("/dev/mmcblk0")
    fake_sources.write("/dev/nvme0n1")
    fake_sources.command(LSBLK_JSON_ARGV, json.dumps(EMMC_ROOT_NVME_EMPTY))
    fake_sources.command(["blockdev", "--getsize64", "/dev/mmcblk0"], "32000000000\n")
    fake_sources.command(["blockdev", "--getsize64", "/dev/nvme0n1"], "512110190592\n")
    return fake_sources


def make_device(path, device_type, mount_points=(), **kwargs) -> StorageDevice:
    """Build a StorageDevice with one partition per mount point."""
    filesystems = tuple(
        Filesystem(partition=f"{path}p{i}", filesystem_type="ext4", size_gb=1, mount_point=mp)
        for i, mp in enumerate(mount_points, start=1)
    )
    return StorageDevice(
        device_path=path,
        device_name=kwargs.pop("device_name", device_type.value),
        size_gb=kwargs.pop("size_gb", 32),
        device_type=device_type,
        filesystems=filesystems,
        **kwargs,
    )


@pytest.fixture
def sample_info() -> SystemInfo:
    """Snapshot of a board booted from MicroSD with eMMC and NVMe targets."""
    sd = make_device(
        "/dev/mmcblk1", StorageType.MICRO_SD, ("/boot", "/"),
        device_name="MicroSD Card", is_removable=True, is_boot_device=True,
    )
    emmc = make_device("/dev/mmcblk0", StorageType.EMMC, device_name="eMMC Storage", size_gb=64)
    nvme = make_device("/dev/nvme0n1", StorageType.NVME, device_name="NVMe SSD", size_gb=512)
    return SystemInfo(
        device_name="Orange Pi 5 Plus",
        kernel_version="6.1.43-rockchip-rk3588",
        architecture="aarch64",
        cpu=CpuInfo(
            model="Rockchip RK3588S",
            cores=8,
            architecture="aarch64",
            current_governor="schedutil",
            available_governors=("performance", "powersave", "schedutil"),
            current_frequency_mhz=1800,
            max_frequency_mhz=2400,
            temperature_c=41.5,
        ),
        gpu=GpuInfo(
            model="Mali-G610 MP4",
            driver_type=DriverType.OPEN_SOURCE,
            driver_version="Mesa",
            supported_apis=("OpenGL ES 3.2",),
        ),
        storage_devices=(sd, emmc, nvme),
        memory=MemoryInfo(total_gb=16, available_gb=12, swap_gb=0),
        network_interfaces=(
            NetworkInterface(
                name="eth0",
                interface_type=InterfaceType.ETHERNET,
                mac_address="c0:74:2b:fe:41:08",
                is_connected=True,
                ip_address="192.168.1.50",
                speed_mbps=1000,
            ),
        ),
        boot_device="/dev/mmcblk1",
        target_devices=("/dev/mmcblk0", "/dev/nvme0n1"),
        load_average=(0.42, 0.30, 0.25),
    )
