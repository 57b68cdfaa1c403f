"""Data models for audio files, edits and jobs."""

from .track import AudioFile, AudioFormat, MetadataEdit
from .jobs import BackupEntry, BatchResult, ConversionJob

__all__ = [
    "AudioFile",
    "AudioFormat",
    "MetadataEdit",
    "BackupEntry",
    "BatchResult",
    "ConversionJob",
]
