"""External program invocation (metaflac, id3v2, ffmpeg)."""

import logging
import shlex
import subprocess
from pathlib import Path

from ..config import ToolConfig
from ..errors import ToolInvocationError, UnsupportedFormatError
from ..models.jobs import ConversionJob
from ..models.track import AudioFormat

logger = logging.getLogger(__name__)

COVER_TAG = "Cover (front)"

# Vorbis comment name and id3v2 flag for each editable field
FLAC_TAGS = {
    "artist": "ARTIST",
    "album": "ALBUM",
    "title": "TITLE",
    "track": "TRACKNUMBER",
}
MP3_FLAGS = {
    "artist": "--artist",
    "album": "--album",
    "title": "--song",
    "track": "--track",
}


class ExternalTools:
    """Runs the external tag editors and transcoder.

    Every method raises ToolInvocationError when the program cannot be
    started, times out, or exits with a non-zero status. The programs'
    stderr is left attached to ours so their diagnostics reach the operator.
    """

    def __init__(self, config: ToolConfig) -> None:
        self._metaflac = config.metaflac
        self._id3v2 = config.id3v2
        self._ffmpeg = config.ffmpeg
        self._timeout = config.timeout

    def set_artist(self, file_path: Path, artist: str) -> None:
        """Set the artist tag."""
        self._set_tag(file_path, "artist", artist)

    def set_album(self, file_path: Path, album: str) -> None:
        """Set the album title tag."""
        self._set_tag(file_path, "album", album)

    def set_title(self, file_path: Path, title: str) -> None:
        """Set the song title tag."""
        self._set_tag(file_path, "title", title)

    def set_track_number(self, file_path: Path, track: int) -> None:
        """Set the track number tag."""
        self._set_tag(file_path, "track", str(track))

    def embed_cover(self, source: Path, cover: Path, destination: Path) -> None:
        """Re-mux ``source`` with ``cover`` as an attached picture into ``destination``.

        The audio stream is copied without re-encoding. ``source`` is normally
        the backup copy and ``destination`` the original path, so ffmpeg never
        reads and writes the same file.
        """
        audio_format = AudioFormat.from_path(destination)
        if audio_format is AudioFormat.UNSUPPORTED:
            raise UnsupportedFormatError(destination, "cover art")

        args = [
            "-y",
            "-loglevel", "error",
            "-i", str(source),
            "-i", str(cover),
            "-map", "0:a",
            "-map", "1:v",
            "-c:a", "copy",  # Keep the audio bit-exact
            "-c:v", "copy",
            "-disposition:v", "attached_pic",
        ]
        if audio_format is AudioFormat.MP3:
            # Muxer option only understood by the mp3 muxer
            args += ["-id3v2_version", "3"]
        args += [
            "-metadata:s:v", f"title={COVER_TAG}",
            "-metadata:s:v", f"comment={COVER_TAG}",
            str(destination),
        ]
        self._run(self._ffmpeg, args, "embedding cover art")

    def convert_to_mp3(self, job: ConversionJob) -> None:
        """Transcode a FLAC file to MP3, carrying over all container metadata."""
        args = [
            "-y",
            "-loglevel", "error",
            "-i", str(job.source),
            "-map", "0:a",  # Ignore embedded artwork streams
            "-codec:a", "libmp3lame",
            "-b:a", f"{job.bitrate}k",
            "-map_metadata", "0",  # Preserve metadata
            "-id3v2_version", "3",
            str(job.output),
        ]
        self._run(self._ffmpeg, args, "converting to mp3")

    def _set_tag(self, file_path: Path, field: str, value: str) -> None:
        """Dispatch a tag edit to the tool for the file's format."""
        audio_format = AudioFormat.from_path(file_path)

        if audio_format is AudioFormat.FLAC:
            tag = FLAC_TAGS[field]
            # metaflac appends duplicate tags, so clear the old value first
            self._run(
                self._metaflac,
                ["--remove-tag", tag, str(file_path)],
                "removing existing tag",
            )
            self._run(
                self._metaflac,
                ["--set-tag", f"{tag}={value}", str(file_path)],
                "setting new tag",
            )
        elif audio_format is AudioFormat.MP3:
            self._run(self._id3v2, [MP3_FLAGS[field], value, str(file_path)], f"setting {field}")
        else:
            raise UnsupportedFormatError(file_path)

    def _run(self, executable: str, args: list[str], action: str) -> None:
        """Run a program and raise ToolInvocationError unless it exits cleanly."""
        cmd = [executable, *args]
        logger.debug(f"Running: {shlex.join(cmd)}")

        # Without a configured timeout the call runs until the tool exits
        run_kwargs = {"stdout": subprocess.DEVNULL}
        if self._timeout is not None:
            run_kwargs["timeout"] = self._timeout

        try:
            result = subprocess.run(cmd, **run_kwargs)
        except subprocess.TimeoutExpired:
            raise ToolInvocationError(
                executable, f"timed out after {self._timeout}s while {action}"
            ) from None
        except FileNotFoundError:
            raise ToolInvocationError(
                executable, f"{executable} not found. Please install it."
            ) from None
        except OSError as e:
            raise ToolInvocationError(executable, f"could not execute: {e}") from e

        if result.returncode != 0:
            raise ToolInvocationError(
                executable,
                f"exited with status {result.returncode} while {action}",
                result.returncode,
            )
