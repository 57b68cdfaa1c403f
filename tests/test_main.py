"""Tests for the command line surface and MetadataRunner."""

import logging

import pytest

from audio_metadata.config import BackupConfig, Config
from audio_metadata.errors import FileOperationError, UnsupportedFormatError
from audio_metadata.main import MetadataRunner, edit_from_args, main, parse_args
from audio_metadata.models.track import MetadataEdit


@pytest.fixture
def config(tmp_path):
    return Config(backup=BackupConfig(root=tmp_path / "backups"))


@pytest.fixture
def runner(config):
    return MetadataRunner(config)


class TestParseArgs:
    """Tests for parse_args()."""

    def test_set_arguments(self, tmp_path):
        """Set options map onto the namespace."""
        args = parse_args(["set", "-f", "album", "-r", "Santana", "-a", "Abraxas", "--infer-track"])
        assert args.command == "set"
        assert str(args.file) == "album"
        assert args.artist == "Santana"
        assert args.album == "Abraxas"
        assert args.infer_title is True
        assert args.infer_order is False

    def test_set_requires_an_option(self):
        """A set with nothing to change is a usage error."""
        with pytest.raises(SystemExit) as excinfo:
            parse_args(["set", "-f", "song.mp3"])
        assert excinfo.value.code == 2

    def test_edit_from_args(self):
        """The set options become the MetadataEdit that is applied."""
        args = parse_args(["set", "-f", "song.mp3", "-a", "Abraxas", "-n", "3", "--infer-order"])
        assert edit_from_args(args) == MetadataEdit(album="Abraxas", track=3, infer_order=True)

    def test_title_and_infer_exclusive(self):
        """An explicit title cannot be combined with title inference."""
        with pytest.raises(SystemExit):
            parse_args(["set", "-f", "song.mp3", "-t", "X", "--infer-track"])

    def test_missing_cover_rejected(self, tmp_path):
        """A cover image that does not exist is a usage error."""
        with pytest.raises(SystemExit):
            parse_args(["set", "-f", "song.mp3", "-c", str(tmp_path / "none.jpg")])

    def test_convert_defaults(self):
        """Convert has no output dir and leaves bitrate to the config."""
        args = parse_args(["convert", "-f", "song.flac"])
        assert args.output is None
        assert args.bitrate is None

    def test_convert_bad_bitrate(self):
        """Bitrate must be positive."""
        with pytest.raises(SystemExit):
            parse_args(["convert", "-f", "song.flac", "-b", "0"])


class TestMetadataRunner:
    """Tests for MetadataRunner."""

    def test_unsupported_single_file(self, runner, fake_run, tmp_path):
        """An unsupported file fails before a backup session exists."""
        song = tmp_path / "song.wav"
        song.write_bytes(b"RIFF")

        with pytest.raises(UnsupportedFormatError):
            runner.set(song, MetadataEdit(artist="Santana"))

        assert runner.session is None
        assert not (tmp_path / "backups").exists()
        assert song.read_bytes() == b"RIFF"

    def test_missing_file(self, runner, tmp_path):
        """A path that does not exist is a FileOperationError."""
        with pytest.raises(FileOperationError):
            runner.set(tmp_path / "missing.mp3", MetadataEdit(artist="X"))

    def test_single_file(self, runner, fake_run, tmp_path):
        """A single file is edited and backed up."""
        song = tmp_path / "song.mp3"
        song.write_bytes(b"ID3")

        assert runner.set(song, MetadataEdit(artist="Santana")) is None

        assert fake_run.calls == [["id3v2", "--artist", "Santana", str(song)]]
        assert len(runner.session.entries) == 1

    def test_directory_returns_result(self, runner, fake_run, music_dir):
        """A directory returns its BatchResult."""
        result = runner.set(music_dir, MetadataEdit(album="Abraxas"))
        assert result.processed == 3

    def test_convert_uses_config_bitrate(self, tmp_path, fake_run):
        """Without an explicit bitrate the configured one is used."""
        runner = MetadataRunner(Config(backup=BackupConfig(root=tmp_path / "bk"), bitrate=128))
        source = tmp_path / "song.flac"
        source.write_bytes(b"fLaC")

        runner.convert(source)

        assert "128k" in fake_run.calls[0]

    def test_convert_creates_output_dir(self, runner, fake_run, tmp_path):
        """A missing output directory is created."""
        source = tmp_path / "song.flac"
        source.write_bytes(b"fLaC")
        output_dir = tmp_path / "out" / "mp3"

        runner.convert(source, output_dir, 320)

        assert output_dir.is_dir()
        assert fake_run.calls[0][-1] == str(output_dir / "song.mp3")

    def test_convert_rejects_mp3(self, runner, tmp_path):
        """Converting a non-flac file is an UnsupportedFormatError."""
        song = tmp_path / "song.mp3"
        song.write_bytes(b"ID3")
        with pytest.raises(UnsupportedFormatError):
            runner.convert(song)


class TestMain:
    """End-to-end runs of main() with the tools faked."""

    @pytest.fixture(autouse=True)
    def env(self, monkeypatch, tmp_path):
        monkeypatch.setattr("audio_metadata.config.load_dotenv", lambda *args, **kwargs: None)
        monkeypatch.setenv("AUDIO_METADATA_BACKUP_DIR", str(tmp_path / "backups"))
        for name in ["AUDIO_METADATA_BITRATE", "AUDIO_METADATA_TOOL_TIMEOUT"]:
            monkeypatch.delenv(name, raising=False)

    def test_directory_run(self, fake_run, music_dir, capsys):
        """A successful batch prints where the backups are."""
        main(["set", "-f", str(music_dir), "-r", "Santana"])

        out = capsys.readouterr().out
        assert "All files have been processed." in out
        assert "Original files are backed up in:" in out

    def test_batch_errors_exit_non_zero(self, fake_run, music_dir):
        """A batch with errors exits with status 1."""
        fake_run.fail_for("c.mp3")
        with pytest.raises(SystemExit) as excinfo:
            main(["set", "-f", str(music_dir), "-r", "Santana"])
        assert excinfo.value.code == 1

    def test_single_file_error(self, fake_run, tmp_path, capsys):
        """A failing single file prints the error and exits with status 1."""
        song = tmp_path / "song.wav"
        song.write_bytes(b"RIFF")
        with pytest.raises(SystemExit) as excinfo:
            main(["set", "-f", str(song), "-r", "Santana"])
        assert excinfo.value.code == 1
        assert "Unsupported file format" in capsys.readouterr().out

    def test_single_file_restore_error(self, fake_run, tmp_path, capsys, caplog):
        """A failed restore exits with status 1, logs CRITICAL and shows the backups."""
        song = tmp_path / "song.mp3"
        song.write_bytes(b"ID3")
        fake_run.fail_for("song.mp3")

        def lose_backup(cmd):
            for backup in (tmp_path / "backups").glob("*/*-song.mp3"):
                backup.unlink()

        fake_run.on_fail = lose_backup

        with pytest.raises(SystemExit) as excinfo:
            main(["set", "-f", str(song), "-r", "Santana"])

        assert excinfo.value.code == 1
        critical = [r for r in caplog.records if r.levelno == logging.CRITICAL]
        assert len(critical) == 1
        assert "Failed to restore" in critical[0].getMessage()
        assert "Original files are backed up in:" in capsys.readouterr().out


class TestMetadataEdit:
    """Tests for MetadataEdit.is_empty."""

    def test_empty(self):
        """A default edit changes nothing."""
        assert MetadataEdit().is_empty

    def test_flags_count(self):
        """Inference flags alone make an edit non-empty."""
        assert not MetadataEdit(infer_order=True).is_empty
        assert not MetadataEdit(track=1).is_empty
