"""Utility modules for identifiers and file name inference."""

from .identifiers import backup_file_name, path_digest
from .inference import infer_title, infer_track_numbers, list_audio_files, number_tracks

__all__ = [
    "backup_file_name",
    "path_digest",
    "infer_title",
    "infer_track_numbers",
    "list_audio_files",
    "number_tracks",
]
