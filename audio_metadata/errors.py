"""Exceptions raised by the audio metadata tool."""

from pathlib import Path


class AudioMetadataError(Exception):
    """Base class for all tool errors."""


class FileOperationError(AudioMetadataError):
    """A filesystem operation (read dir, copy, mkdir) failed."""


class UnsupportedFormatError(AudioMetadataError):
    """The file extension is not supported for the requested operation."""

    def __init__(self, path: Path, operation: str = "tag editing") -> None:
        self.path = path
        extension = path.suffix.lstrip(".") or "<none>"
        super().__init__(f"Unsupported file format for {operation}: {extension} ({path})")


class ToolInvocationError(AudioMetadataError):
    """An external program could not be run or exited with a non-zero status."""

    def __init__(self, tool: str, message: str, returncode: int | None = None) -> None:
        self.tool = tool
        self.returncode = returncode
        super().__init__(f"{tool} command failed: {message}")


class InferenceError(AudioMetadataError):
    """A tag value could not be derived from the file name."""


class RestoreError(AudioMetadataError):
    """Restoring a backup after a failed mutation did not complete.

    The original file may be left half-written. The backup copy is still
    available at ``backup_path``.
    """

    def __init__(self, path: Path, backup_path: Path, reason: str) -> None:
        self.path = path
        self.backup_path = backup_path
        super().__init__(
            f"Failed to restore {path} from backup {backup_path}: {reason}"
        )
