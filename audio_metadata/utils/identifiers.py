"""Identifier utilities for backup naming."""

import hashlib
import time
from pathlib import Path

DIGEST_LENGTH = 12


def path_digest(path: Path, length: int = DIGEST_LENGTH) -> str:
    """Return a short stable hex digest of a file's absolute path.

    Example: "/music/a/01.mp3" and "/music/b/01.mp3" give different digests.
    """
    absolute = str(Path(path).expanduser().absolute())
    return hashlib.sha1(absolute.encode("utf-8", "surrogateescape")).hexdigest()[:length]


def backup_file_name(path: Path) -> str:
    """Name under which a file is stored in the backup directory.

    The original file name is kept at the end so the extension survives
    and the operator can still recognise the file:
        "/music/album/01 Intro.flac" -> "3f2a9c0d1b7e-01 Intro.flac"
    """
    return f"{path_digest(path)}-{Path(path).name}"


def session_prefix(prefix: str, timestamp: float | None = None) -> str:
    """Prefix for a session directory, e.g. "audio-metadata-1700000000-".

    The random suffix that makes the name unique is appended by the caller.
    """
    if timestamp is None:
        timestamp = time.time()
    return f"{prefix}-{int(timestamp)}-"
