"""Backup, conversion and batch result models."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class BackupEntry:
    """A pre-mutation copy of a file stored in the session directory."""

    original: Path
    backup: Path


@dataclass(frozen=True)
class ConversionJob:
    """A FLAC to MP3 conversion request."""

    source: Path
    output: Path
    bitrate: int = 320  # kbps

    @classmethod
    def for_source(
        cls, source: Path, output_dir: Path | None = None, bitrate: int = 320
    ) -> "ConversionJob":
        """Resolve the output path for a source file.

        With an output directory the result is ``<output_dir>/<stem>.mp3``,
        otherwise the source path with its extension swapped to ``.mp3``.
        """
        if output_dir is not None:
            output = output_dir / f"{source.stem}.mp3"
        else:
            output = source.with_suffix(".mp3")
        return cls(source=source, output=output, bitrate=bitrate)


@dataclass
class BatchResult:
    """Outcome of processing every supported file in a directory."""

    processed: int = 0
    errors: int = 0
    failed: list[Path] = field(default_factory=list)

    def record_success(self) -> None:
        self.processed += 1

    def record_failure(self, path: Path) -> None:
        self.processed += 1
        self.errors += 1
        self.failed.append(path)

    @property
    def ok(self) -> bool:
        return self.errors == 0
