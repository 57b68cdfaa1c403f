"""Session backups and restore-on-failure for destructive edits."""

import logging
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ..config import BackupConfig
from ..errors import FileOperationError, RestoreError
from ..models.jobs import BackupEntry
from ..utils.identifiers import backup_file_name, session_prefix

logger = logging.getLogger(__name__)


class BackupSession:
    """Backup directory shared by every file touched in one invocation.

    The directory and its contents are never deleted by the tool; the
    operator removes them once satisfied with the changes.
    """

    def __init__(self, directory: Path) -> None:
        self._directory = directory
        self._entries: dict[Path, BackupEntry] = {}

    @classmethod
    def create(cls, config: BackupConfig) -> "BackupSession":
        """Create a uniquely named session directory under the backup root."""
        try:
            config.root.mkdir(parents=True, exist_ok=True)
            directory = tempfile.mkdtemp(prefix=session_prefix(config.prefix), dir=config.root)
        except OSError as e:
            raise FileOperationError(
                f"Failed to create temp directory under {config.root}: {e}"
            ) from e

        logger.info(f"Backing up original files to {directory}")
        return cls(Path(directory))

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def entries(self) -> list[BackupEntry]:
        """Backups taken so far, in the order they were first made."""
        return list(self._entries.values())

    def backup(self, path: Path) -> BackupEntry:
        """Copy a file's current bytes into the session directory."""
        backup_path = self._directory / backup_file_name(path)
        try:
            shutil.copy2(path, backup_path)
        except OSError as e:
            raise FileOperationError(f"Error backing up {path}: {e}") from e

        entry = BackupEntry(original=Path(path), backup=backup_path)
        self._entries[entry.original] = entry
        logger.debug(f"Original file backed up to: {backup_path}")
        return entry

    def restore(self, entry: BackupEntry) -> None:
        """Copy a backup over its original path."""
        try:
            shutil.copy2(entry.backup, entry.original)
        except OSError as e:
            raise RestoreError(entry.original, entry.backup, str(e)) from e
        logger.info(f"Restored {entry.original} from backup")

    @contextmanager
    def guard(self, path: Path, allow_missing: bool = False) -> Iterator[BackupEntry | None]:
        """Back up ``path``, run the body, and put the original back if it raises.

        The original exception propagates after a successful restore. If the
        restore itself fails a RestoreError chained to the original error is
        raised instead.

        With ``allow_missing`` a path that does not exist yet is accepted: no
        backup is taken (None is yielded) and anything the body wrote there is
        removed on failure.
        """
        path = Path(path)
        entry = None
        if not (allow_missing and not path.exists()):
            entry = self.backup(path)

        try:
            yield entry
        except BaseException as e:
            if entry is not None:
                logger.warning(f"Edit failed for {path.name}, restoring original file")
                try:
                    self.restore(entry)
                except RestoreError as restore_error:
                    raise restore_error from e
            else:
                self._discard_partial(path, e)
            raise

    def _discard_partial(self, path: Path, cause: BaseException) -> None:
        """Remove a file a failed operation created where none existed."""
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise FileOperationError(
                f"Failed to remove partial output {path}: {e}"
            ) from cause
