"""Shared fixtures for the audio_metadata tests."""

import subprocess
import sys
from pathlib import Path

import pytest

# Add parent dir to path so audio_metadata is importable as a package
sys.path.insert(0, str(Path(__file__).parent.parent))

from audio_metadata.config import BackupConfig, ToolConfig
from audio_metadata.processors.backup import BackupSession
from audio_metadata.processors.batch import BatchProcessor
from audio_metadata.processors.tools import ExternalTools


class FakeRun:
    """Stand-in for subprocess.run that records commands instead of running them.

    ``fail_on`` is a predicate over the command list; a matching command
    exits with status 1. ``on_fail`` runs first so a test can mimic a tool
    that half-writes its target before failing.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.fail_on = None
        self.on_fail = None

    def __call__(self, cmd, **kwargs):
        cmd = list(cmd)
        self.calls.append(cmd)
        if self.fail_on is not None and self.fail_on(cmd):
            if self.on_fail is not None:
                self.on_fail(cmd)
            return subprocess.CompletedProcess(cmd, 1)
        return subprocess.CompletedProcess(cmd, 0)

    def fail_for(self, name: str) -> None:
        """Fail every command whose target file is called ``name``."""
        self.fail_on = lambda cmd: Path(cmd[-1]).name == name

    def calls_for(self, name: str) -> list[list[str]]:
        return [cmd for cmd in self.calls if Path(cmd[-1]).name == name]


@pytest.fixture
def fake_run(monkeypatch):
    """Replace subprocess.run in the tool adapter."""
    runner = FakeRun()
    monkeypatch.setattr("audio_metadata.processors.tools.subprocess.run", runner)
    return runner


@pytest.fixture
def tools():
    return ExternalTools(ToolConfig())


@pytest.fixture
def session(tmp_path):
    """A backup session rooted in the test's temp directory."""
    return BackupSession.create(BackupConfig(root=tmp_path / "backups"))


@pytest.fixture
def processor(tools, session):
    return BatchProcessor(tools, session)


@pytest.fixture
def music_dir(tmp_path):
    """A folder with three supported files and some entries to ignore."""
    directory = tmp_path / "album"
    directory.mkdir()
    for name in ["b.mp3", "a.flac", "c.mp3"]:
        (directory / name).write_bytes(f"original {name}".encode())
    (directory / "notes.txt").write_text("not audio")
    (directory / "track.wav").write_bytes(b"RIFF")
    (directory / "nested.mp3").mkdir()
    return directory
