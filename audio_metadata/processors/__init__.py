"""Processor modules for backups, external tools and batches."""

from .backup import BackupSession
from .batch import BatchProcessor
from .tools import ExternalTools

__all__ = ["BackupSession", "BatchProcessor", "ExternalTools"]
