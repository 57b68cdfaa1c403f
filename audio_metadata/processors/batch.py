"""Per-file edits and directory batch processing."""

import logging
from pathlib import Path

from tqdm import tqdm

from ..config import CONVERT_FORMATS, TAG_FORMATS
from ..errors import AudioMetadataError, RestoreError, UnsupportedFormatError
from ..models.jobs import BatchResult, ConversionJob
from ..models.track import AudioFile, MetadataEdit
from ..utils.inference import infer_title, infer_track_numbers, list_audio_files, number_tracks
from .backup import BackupSession
from .tools import ExternalTools

logger = logging.getLogger(__name__)


class BatchProcessor:
    """Applies edits and conversions to single files or whole directories.

    Every mutation runs inside the session's backup guard, so a failed file
    is put back exactly as it was before the call.
    """

    def __init__(self, tools: ExternalTools, session: BackupSession) -> None:
        self._tools = tools
        self._session = session

    def process_file(self, file_path: Path, edit: MetadataEdit) -> None:
        """Apply an edit to one file, resolving order inference from its folder."""
        track_number = None
        if edit.infer_order:
            track_number = infer_track_numbers(file_path.parent).get(file_path)
        self.apply_edit(file_path, edit, track_number)

    def apply_edit(
        self, file_path: Path, edit: MetadataEdit, track_number: int | None = None
    ) -> None:
        """Apply every field of an edit to one file as a single atomic change.

        Fields run in a fixed order: cover art, album, artist, title, track.
        ``track_number`` is the inferred position and takes precedence over
        ``edit.track``.
        """
        audio = AudioFile(file_path)
        if not audio.is_supported:
            raise UnsupportedFormatError(file_path)

        # Resolve inferred values before touching the file
        title = edit.title
        if title is None and edit.infer_title:
            title = infer_title(file_path)
        track = track_number if track_number is not None else edit.track

        with self._session.guard(file_path) as entry:
            if edit.cover is not None:
                # The backup still holds the current bytes since cover art runs first
                self._tools.embed_cover(entry.backup, edit.cover, file_path)
                logger.info(f"Updated cover art for {file_path.name}")

            if edit.album is not None:
                self._tools.set_album(file_path, edit.album)
                logger.info(f"Set album for {file_path.name}: {edit.album}")

            if edit.artist is not None:
                self._tools.set_artist(file_path, edit.artist)
                logger.info(f"Set artist for {file_path.name}: {edit.artist}")

            if title is not None:
                self._tools.set_title(file_path, title)
                logger.info(f"Set title for {file_path.name}: {title}")

            if track is not None:
                self._tools.set_track_number(file_path, track)
                logger.info(f"Set track number for {file_path.name}: {track}")

    def process_directory(self, directory: Path, edit: MetadataEdit) -> BatchResult:
        """Apply an edit to every mp3/flac file directly inside a directory.

        A failing file is logged, counted and skipped. Only a failure to read
        the directory itself aborts the batch.
        """
        files = list_audio_files(directory, TAG_FORMATS)
        track_numbers = number_tracks(files) if edit.infer_order else {}

        result = BatchResult()
        for file_path in tqdm(files, desc="Tagging", unit="file"):
            try:
                self.apply_edit(file_path, edit, track_numbers.get(file_path))
            except AudioMetadataError as e:
                self._report_failure(file_path, e)
                result.record_failure(file_path)
            else:
                result.record_success()

        self._report_summary(result)
        return result

    def convert_file(self, job: ConversionJob) -> None:
        """Convert one FLAC file to MP3.

        An existing output file is backed up and restored if the conversion
        fails; a new output file is removed instead. The source is never
        modified.
        """
        if job.source.suffix.lower() not in CONVERT_FORMATS:
            raise UnsupportedFormatError(job.source, "conversion")

        with self._session.guard(job.output, allow_missing=True):
            self._tools.convert_to_mp3(job)
        logger.info(f"Converted {job.source.name} to {job.output}")

    def process_directory_conversion(
        self, directory: Path, output_dir: Path | None = None, bitrate: int = 320
    ) -> BatchResult:
        """Convert every FLAC file directly inside a directory."""
        files = list_audio_files(directory, CONVERT_FORMATS)

        result = BatchResult()
        for file_path in tqdm(files, desc="Converting", unit="file"):
            job = ConversionJob.for_source(file_path, output_dir, bitrate)
            try:
                self.convert_file(job)
            except AudioMetadataError as e:
                self._report_failure(file_path, e)
                result.record_failure(file_path)
            else:
                result.record_success()

        self._report_summary(result)
        return result

    def _report_failure(self, file_path: Path, error: AudioMetadataError) -> None:
        """Log a per-file failure, singling out files that could not be restored."""
        if isinstance(error, RestoreError):
            logger.critical(
                f"{error}. {file_path} may be corrupted; "
                f"the original is kept at {error.backup_path}"
            )
        else:
            logger.error(f"Error processing {file_path}: {error}")

    @staticmethod
    def _report_summary(result: BatchResult) -> None:
        if result.errors:
            print(
                f"\nCompleted with {result.errors} errors. "
                "Check the messages above for details."
            )
