"""Hardware inventory for the running board."""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Optional

from .classifier import DEFAULT_TARGET_TYPES, classify_storage, verify_snapshot
from .detector import (
    detect_architecture,
    detect_cpu,
    detect_device_name,
    detect_gpu,
    detect_kernel_modules,
    detect_kernel_version,
    detect_load_average,
    detect_memory,
    detect_network,
    detect_storage,
    read_boot_parameters,
)
from .models import StorageType, SystemInfo
from .sources import DEFAULT_TIMEOUT_S, SourceReader


class Inventory:
    """Builds :class:`SystemInfo` snapshots.

    Every :meth:`detect` call reads the system afresh; nothing is cached.

    Args:
        sources: Source reader to use. Built from ``root``/``timeout`` when
            omitted.
        target_types: Storage types eligible as installation targets.
        parallel: Run the CPU, GPU, memory and network detectors in a
            thread pool.
        logger: Logger for this inventory and the readers it creates.
    """

    def __init__(
        self,
        sources: Optional[SourceReader] = None,
        *,
        root: Path = Path("/"),
        timeout: float = DEFAULT_TIMEOUT_S,
        target_types: Iterable[StorageType] = DEFAULT_TARGET_TYPES,
        parallel: bool = False,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.sources = sources or SourceReader(root=root, timeout=timeout, logger=self.logger)
        self.target_types = frozenset(target_types)
        self.parallel = parallel

    @classmethod
    def from_config(cls, config, logger: Optional[logging.Logger] = None) -> "Inventory":
        """Build an inventory from a :class:`~armprobe.config.models.ProbeConfig`."""
        return cls(
            root=config.root,
            timeout=config.command_timeout_s,
            target_types=config.target_types,
            parallel=config.parallel,
            logger=logger,
        )

    def detect(self) -> SystemInfo:
        """Detect all hardware and classify storage.

        Raises:
            NoBootDeviceFound: If no boot device can be identified.
            SnapshotInvariantError: If the assembled snapshot is inconsistent.
        """
        src = self.sources
        self.logger.info("Starting hardware detection (root=%s)", src.root)

        device_name = detect_device_name(src)
        kernel_version = detect_kernel_version(src)
        architecture = detect_architecture(src)

        if self.parallel:
            with ThreadPoolExecutor(max_workers=4, thread_name_prefix="armprobe") as pool:
                cpu_f = pool.submit(detect_cpu, src, architecture)
                gpu_f = pool.submit(detect_gpu, src)
                memory_f = pool.submit(detect_memory, src)
                network_f = pool.submit(detect_network, src)
                storage = detect_storage(src)
                cpu, gpu = cpu_f.result(), gpu_f.result()
                memory, network = memory_f.result(), network_f.result()
        else:
            cpu = detect_cpu(src, architecture)
            gpu = detect_gpu(src)
            storage = detect_storage(src)
            memory = detect_memory(src)
            network = detect_network(src)

        classification = classify_storage(storage, self.target_types, self.logger)

        info = SystemInfo(
            device_name=device_name,
            kernel_version=kernel_version,
            architecture=architecture,
            cpu=cpu,
            gpu=gpu,
            storage_devices=classification.devices,
            memory=memory,
            network_interfaces=tuple(network),
            boot_device=classification.boot_device,
            target_devices=classification.target_devices,
            load_average=detect_load_average(src),
        )
        verify_snapshot(info)

        self.logger.info(
            "Detected %s: kernel=%s cpu=%s (%dc) storage=%d net=%d",
            info.device_name,
            info.kernel_version,
            info.cpu.model,
            info.cpu.cores,
            len(info.storage_devices),
            len(info.network_interfaces),
        )
        return info

    def kernel_modules(self) -> list[str]:
        """Names of currently loaded kernel modules (empty if lsmod fails)."""
        return detect_kernel_modules(self.sources)

    def boot_parameters(self) -> Optional[str]:
        """Kernel command line, or None if unreadable."""
        return read_boot_parameters(self.sources)
