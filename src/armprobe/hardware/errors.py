"""Detection errors surfaced to callers.

Missing files, failed commands and unparseable lines never show up here;
they are absorbed by the detectors as default values.
"""


class DetectionError(Exception):
    """Raised when a snapshot cannot be produced."""


class NoBootDeviceFound(DetectionError):
    """No storage device could be identified as the boot device."""


class SnapshotInvariantError(DetectionError):
    """An assembled snapshot violates the boot/target post-condition."""


class UnsafeTargetError(DetectionError):
    """A requested write target is the boot device or not eligible."""
