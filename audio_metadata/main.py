#!/usr/bin/env python3
"""
Audio Metadata Tool

Sets artist, album, title, track number and cover art on FLAC/MP3 files
and converts FLAC to MP3, for a single file or every file in a directory.
Originals are backed up to a session directory before they are changed.
"""

import argparse
import logging
from pathlib import Path

from .config import CONVERT_FORMATS, Config, configure_logging
from .errors import AudioMetadataError, FileOperationError, RestoreError, UnsupportedFormatError
from .models.jobs import BatchResult, ConversionJob
from .models.track import AudioFile, MetadataEdit
from .processors.backup import BackupSession
from .processors.batch import BatchProcessor
from .processors.tools import ExternalTools

logger = logging.getLogger(__name__)


class MetadataRunner:
    """Entry point for the set and convert operations.

    Each call creates its own backup session, available afterwards through
    ``session``.
    """

    def __init__(self, config: Config) -> None:
        self._config = config
        self._tools = ExternalTools(config.tools)
        self.session: BackupSession | None = None

    def set(self, path: Path, edit: MetadataEdit) -> BatchResult | None:
        """Apply a metadata edit to a file or to every file in a directory.

        Returns the BatchResult for a directory and None for a single file,
        whose failures are raised.
        """
        if path.is_dir():
            processor = self._start_session()
            return processor.process_directory(path, edit)

        if not path.is_file():
            raise FileOperationError(f"File not found: {path}")
        if not AudioFile(path).is_supported:
            raise UnsupportedFormatError(path)

        processor = self._start_session()
        processor.process_file(path, edit)
        return None

    def convert(
        self, path: Path, output_dir: Path | None = None, bitrate: int | None = None
    ) -> BatchResult | None:
        """Convert a FLAC file, or every FLAC file in a directory, to MP3."""
        if bitrate is None:
            bitrate = self._config.bitrate

        if not path.is_dir():
            if not path.is_file():
                raise FileOperationError(f"File not found: {path}")
            if path.suffix.lower() not in CONVERT_FORMATS:
                raise UnsupportedFormatError(path, "conversion")

        if output_dir is not None:
            try:
                output_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise FileOperationError(f"Failed to create output directory {output_dir}: {e}") from e

        processor = self._start_session()
        if path.is_dir():
            return processor.process_directory_conversion(path, output_dir, bitrate)

        processor.convert_file(ConversionJob.for_source(path, output_dir, bitrate))
        return None

    def _start_session(self) -> BatchProcessor:
        self.session = BackupSession.create(self._config.backup)
        return BatchProcessor(self._tools, self.session)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Edit audio tags and convert FLAC to MP3"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Read configuration from this .env file",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    set_parser = subparsers.add_parser(
        "set", help="Set metadata for an audio file or directory"
    )
    set_parser.add_argument(
        "-f", "--file", type=Path, required=True, help="Path to the audio file or directory"
    )
    set_parser.add_argument("-c", "--cover", type=Path, help="Path to cover art image")
    set_parser.add_argument("-a", "--album", help="Album title to set")
    set_parser.add_argument("-r", "--artist", help="Artist name to set")
    title_group = set_parser.add_mutually_exclusive_group()
    title_group.add_argument("-t", "--title", help="Song title to set")
    title_group.add_argument(
        "--infer-track",
        dest="infer_title",
        action="store_true",
        help="Infer song title from filename (removes track numbers and file extension)",
    )
    set_parser.add_argument("-n", "--track", type=int, help="Track number to set")
    set_parser.add_argument(
        "--infer-order",
        action="store_true",
        help="Number tracks by their sorted position in the directory",
    )

    convert_parser = subparsers.add_parser("convert", help="Convert FLAC files to MP3")
    convert_parser.add_argument(
        "-f", "--file", type=Path, required=True, help="Path to the FLAC file or directory"
    )
    convert_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output directory (defaults to same directory as input)",
    )
    convert_parser.add_argument(
        "-b",
        "--bitrate",
        type=int,
        default=None,
        help="MP3 bitrate in kbps (default: 320)",
    )

    args = parser.parse_args(argv)

    if args.command == "set":
        if args.track is not None and args.track <= 0:
            parser.error("--track must be a positive number")
        if edit_from_args(args).is_empty:
            parser.error("nothing to set; pass at least one metadata option")
        if args.cover is not None and not args.cover.is_file():
            parser.error(f"cover art not found: {args.cover}")
    elif args.bitrate is not None and args.bitrate <= 0:
        parser.error("--bitrate must be a positive number")

    return args


def edit_from_args(args: argparse.Namespace) -> MetadataEdit:
    """Build the MetadataEdit described by the set options."""
    return MetadataEdit(
        cover=args.cover,
        album=args.album,
        artist=args.artist,
        title=args.title,
        track=args.track,
        infer_title=args.infer_title,
        infer_order=args.infer_order,
    )


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)

    configure_logging(verbose=args.verbose)

    try:
        config = Config.from_environment(args.env_file)
        config.validate()
    except ValueError as e:
        print(f"Error: {e}")
        raise SystemExit(1)

    runner = MetadataRunner(config)
    try:
        if args.command == "set":
            result = runner.set(args.file, edit_from_args(args))
        else:
            result = runner.convert(args.file, args.output, args.bitrate)
    except RestoreError as e:
        logger.critical(f"{e}. The original is kept at {e.backup_path}")
        _print_backup_location(runner.session)
        raise SystemExit(1)
    except AudioMetadataError as e:
        print(f"Error: {e}")
        _print_backup_location(runner.session)
        raise SystemExit(1)

    if result is not None:
        print("\nAll files have been processed.")
    _print_backup_location(runner.session)

    if result is not None and not result.ok:
        raise SystemExit(1)


def _print_backup_location(session: BackupSession | None) -> None:
    if session is None or not session.entries:
        return
    print(f"Original files are backed up in: {session.directory}")
    print("You can safely delete the backup directory when you're satisfied with the changes.")


if __name__ == "__main__":
    main()
