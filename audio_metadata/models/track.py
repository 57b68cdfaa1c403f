"""Audio file and edit request models."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class AudioFormat(Enum):
    """Container format inferred from a file extension."""

    FLAC = "flac"
    MP3 = "mp3"
    UNSUPPORTED = "unsupported"

    @classmethod
    def from_path(cls, path: Path) -> "AudioFormat":
        """Derive the format from the extension, case-insensitively."""
        ext = path.suffix.lstrip(".").lower()
        if ext == "flac":
            return cls.FLAC
        if ext == "mp3":
            return cls.MP3
        return cls.UNSUPPORTED


@dataclass(frozen=True)
class AudioFile:
    """An audio file identified by its path."""

    path: Path

    @property
    def format(self) -> AudioFormat:
        return AudioFormat.from_path(self.path)

    @property
    def is_supported(self) -> bool:
        return self.format is not AudioFormat.UNSUPPORTED


@dataclass
class MetadataEdit:
    """Set of tag changes to apply to a file or every file in a directory.

    Fields left as None are skipped. An explicit title wins over
    ``infer_title`` and an inferred order wins over an explicit ``track``.
    """

    cover: Path | None = None
    album: str | None = None
    artist: str | None = None
    title: str | None = None
    track: int | None = None
    infer_title: bool = False
    infer_order: bool = False

    @property
    def is_empty(self) -> bool:
        """True when applying this edit would change nothing."""
        return (
            self.cover is None
            and self.album is None
            and self.artist is None
            and self.title is None
            and self.track is None
            and not self.infer_title
            and not self.infer_order
        )
