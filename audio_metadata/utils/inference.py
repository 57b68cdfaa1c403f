"""Tag inference from file names and directory order."""

import logging
import re
from pathlib import Path

from ..config import TAG_FORMATS
from ..errors import FileOperationError, InferenceError

logger = logging.getLogger(__name__)

# Leading track-number patterns, tried in order. The first match wins.
TRACK_PREFIX_PATTERNS = [
    re.compile(r"^\d+\s*[-–—]\s*"),  # "03 - Song", "03–Song"
    re.compile(r"^\d+\.\s*"),  # "01. Song"
    re.compile(r"^\d+_\s*"),  # "01_Song"
    re.compile(r"^\d+\s+"),  # "10 Song"
]


def infer_title(path: Path) -> str:
    """Derive a song title from a file name.

    Strips at most one leading track-number prefix from the stem and trims
    the result. A stem without a prefix is returned unchanged.

    Raises:
        InferenceError: if nothing is left once the prefix is removed.
    """
    stem = Path(path).stem

    for pattern in TRACK_PREFIX_PATTERNS:
        match = pattern.match(stem)
        if match:
            title = stem[match.end():].strip()
            if not title:
                raise InferenceError(f"Could not infer title from file name: {Path(path).name}")
            return title

    return stem


def list_audio_files(directory: Path, formats: set[str] = TAG_FORMATS) -> list[Path]:
    """List regular files directly inside a directory with a matching extension.

    The result is sorted by full path in codepoint order so it does not
    depend on the filesystem's enumeration order or the current locale.

    Raises:
        FileOperationError: if the directory cannot be read.
    """
    try:
        entries = list(Path(directory).iterdir())
    except OSError as e:
        raise FileOperationError(f"Failed to read directory: {directory}: {e}") from e

    files = [
        entry
        for entry in entries
        if entry.suffix.lower() in formats and entry.is_file()
    ]
    return sorted(files, key=str)


def number_tracks(files: list[Path]) -> dict[Path, int]:
    """Map each file to its 1-based position in codepoint-sorted path order."""
    return {
        path: position
        for position, path in enumerate(sorted(files, key=str), start=1)
    }


def infer_track_numbers(directory: Path) -> dict[Path, int]:
    """Assign 1-based track numbers by sorted position in a directory."""
    numbers = number_tracks(list_audio_files(directory))
    logger.debug(f"Inferred track order for {len(numbers)} files in {directory}")
    return numbers
