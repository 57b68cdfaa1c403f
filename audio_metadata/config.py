"""Configuration management for the audio metadata tool."""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


# Supported audio formats
TAG_FORMATS = {".mp3", ".flac"}
CONVERT_FORMATS = {".flac"}  # Formats that can be converted to mp3

DEFAULT_BITRATE = 320  # kbps


@dataclass
class ToolConfig:
    """External program configuration."""

    metaflac: str = "metaflac"
    id3v2: str = "id3v2"
    ffmpeg: str = "ffmpeg"
    timeout: int | None = None  # seconds; None waits for the tool to finish

    def validate(self) -> None:
        """Validate tool settings."""
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"Tool timeout must be positive, got {self.timeout}")


@dataclass
class BackupConfig:
    """Backup directory configuration."""

    root: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))
    prefix: str = "audio-metadata"

    def validate(self) -> None:
        """Validate that the backup root is usable."""
        if self.root.exists() and not self.root.is_dir():
            raise ValueError(f"Backup root is not a directory: {self.root}")


@dataclass
class Config:
    """Main configuration container."""

    tools: ToolConfig = field(default_factory=ToolConfig)
    backup: BackupConfig = field(default_factory=BackupConfig)
    bitrate: int = DEFAULT_BITRATE

    @classmethod
    def from_environment(cls, env_path: Path | None = None) -> "Config":
        """Load configuration from environment variables."""
        if env_path:
            load_dotenv(env_path)
        else:
            load_dotenv()

        backup_dir = os.getenv("AUDIO_METADATA_BACKUP_DIR")

        return cls(
            tools=ToolConfig(
                metaflac=os.getenv("AUDIO_METADATA_METAFLAC", "metaflac"),
                id3v2=os.getenv("AUDIO_METADATA_ID3V2", "id3v2"),
                ffmpeg=os.getenv("AUDIO_METADATA_FFMPEG", "ffmpeg"),
                timeout=_int_from_env("AUDIO_METADATA_TOOL_TIMEOUT"),
            ),
            backup=BackupConfig(
                root=Path(backup_dir).expanduser() if backup_dir else Path(tempfile.gettempdir()),
            ),
            bitrate=_int_from_env("AUDIO_METADATA_BITRATE", DEFAULT_BITRATE),
        )

    def validate(self) -> None:
        """Validate the configuration."""
        self.tools.validate()
        self.backup.validate()
        if self.bitrate <= 0:
            raise ValueError(f"Bitrate must be positive, got {self.bitrate}")


def _int_from_env(name: str, default: int | None = None) -> int | None:
    """Read an integer environment variable, falling back to a default."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def configure_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
