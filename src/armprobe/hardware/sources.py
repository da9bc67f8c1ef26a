"""Source readers: raw access to one file or one command at a time.

Nothing here interprets what it reads. Every failure (missing file,
permission denied, command not found, non-zero exit, timeout) comes back
as ``None`` so the detectors can fall back to their defaults.
"""

import logging
import shlex
import subprocess
from pathlib import Path
from typing import Optional, Sequence

DEFAULT_TIMEOUT_S = 5.0


class SourceReader:
    """Reads procfs/sysfs/devfs nodes and runs fixed-argv commands.

    Args:
        root: Filesystem prefix for absolute paths. ``/`` on a live board;
            a captured tree in tests or offline analysis.
        timeout: Upper bound in seconds for every command.
        logger: Logger to report through. Defaults to this module's logger.
    """

    def __init__(
        self,
        root: Path = Path("/"),
        timeout: float = DEFAULT_TIMEOUT_S,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.root = Path(root)
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

    def resolve(self, path: str) -> Path:
        """Map an absolute system path under ``root``."""
        return self.root / path.lstrip("/")

    def exists(self, path: str) -> bool:
        try:
            return self.resolve(path).exists()
        except OSError:
            return False

    def read(self, path: str) -> Optional[str]:
        """Return the contents of a text node, or None if unreadable."""
        target = self.resolve(path)
        self.logger.debug("READ %s", target)
        try:
            return target.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            self.logger.debug("Source unavailable: %s (%s)", target, e)
            return None

    def run(self, argv: Sequence[str]) -> Optional[str]:
        """Run a command and return its stdout, or None on any failure."""
        argv_list = list(argv)
        cmd = " ".join(shlex.quote(a) for a in argv_list)
        self.logger.debug("CMD %s", cmd)
        try:
            result = subprocess.run(
                argv_list,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            self.logger.debug("Command timed out after %ss: %s", self.timeout, cmd)
            return None
        except OSError as e:
            self.logger.debug("Command unavailable: %s (%s)", cmd, e)
            return None

        if result.returncode != 0:
            stderr = result.stderr.strip() if result.stderr else ""
            self.logger.debug("Command failed (%d): %s %s", result.returncode, cmd, stderr)
            return None
        return result.stdout
