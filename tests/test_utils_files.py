"""Tests for file utility functions."""

from __future__ import annotations

import io
import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from audiotally.utils.files import is_audio_path, iter_audio_paths, resolve_root, stream_size


class TestIterAudioPaths:
    """Test iter_audio_paths function."""

    def test_single_audio_file(self, tmp_path: Path) -> None:
        """Should yield a single audio file."""
        track = tmp_path / "track.mp3"
        track.write_bytes(b"")

        assert list(iter_audio_paths([track])) == [track]

    def test_filters_by_extension(self, tmp_path: Path) -> None:
        """Should only yield recognized audio extensions."""
        for name in ("a.mp3", "b.wav", "c.ogg", "d.flac", "e.m4a", "notes.txt", "cover.jpg"):
            (tmp_path / name).write_bytes(b"")

        names = [p.name for p in iter_audio_paths([tmp_path])]

        assert names == ["a.mp3", "b.wav", "c.ogg", "d.flac", "e.m4a"]

    def test_case_insensitive_extension(self, tmp_path: Path) -> None:
        """Should match extensions regardless of case."""
        (tmp_path / "one.MP3").write_bytes(b"")
        (tmp_path / "two.Wav").write_bytes(b"")

        paths = list(iter_audio_paths([tmp_path]))

        assert {p.name for p in paths} == {"one.MP3", "two.Wav"}

    def test_nested_directories_sorted(self, tmp_path: Path) -> None:
        """Files and subdirectories should share one lexical ordering."""
        (tmp_path / "b").mkdir()
        (tmp_path / "a").mkdir()
        (tmp_path / "b" / "2.mp3").write_bytes(b"")
        (tmp_path / "a" / "1.mp3").write_bytes(b"")
        (tmp_path / "root.wav").write_bytes(b"")
        (tmp_path / "0.wav").write_bytes(b"")
        (tmp_path / "a.mp3").write_bytes(b"")

        paths = [p.relative_to(tmp_path).as_posix() for p in iter_audio_paths([tmp_path])]

        assert paths == ["0.wav", "a/1.mp3", "a.mp3", "b/2.mp3", "root.wav"]

    def test_unreadable_directory_is_skipped(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        """Should warn about a directory it cannot list and keep going."""
        (tmp_path / "locked").mkdir()
        (tmp_path / "locked" / "hidden.mp3").write_bytes(b"")
        (tmp_path / "open.mp3").write_bytes(b"")
        real_scandir = os.scandir

        def scandir(path):
            if Path(path).name == "locked":
                raise PermissionError(13, "Permission denied", str(path))
            return real_scandir(path)

        with patch("audiotally.utils.files.os.scandir", side_effect=scandir):
            with caplog.at_level(logging.WARNING, logger="audiotally.utils.files"):
                paths = list(iter_audio_paths([tmp_path]))

        assert [p.name for p in paths] == ["open.mp3"]
        assert "locked" in caplog.text

    def test_custom_extensions(self, tmp_path: Path) -> None:
        """Should honor a restricted extension set."""
        (tmp_path / "a.mp3").write_bytes(b"")
        (tmp_path / "b.wav").write_bytes(b"")

        names = [p.name for p in iter_audio_paths([tmp_path], extensions=(".wav",))]

        assert names == ["b.wav"]

    def test_directory_named_like_audio(self, tmp_path: Path) -> None:
        """Directories with audio suffixes are not files."""
        (tmp_path / "album.mp3").mkdir()

        assert list(iter_audio_paths([tmp_path])) == []

    def test_empty_directory(self, tmp_path: Path) -> None:
        assert list(iter_audio_paths([tmp_path])) == []

    def test_nonexistent_file(self, tmp_path: Path) -> None:
        assert list(iter_audio_paths([tmp_path / "missing.mp3"])) == []


class TestIsAudioPath:
    def test_recognized(self) -> None:
        assert is_audio_path(Path("x.FLAC"))
        assert not is_audio_path(Path("x.aac"))


class TestResolveRoot:
    """Test resolve_root function."""

    def test_resolves_directory(self, tmp_path: Path) -> None:
        assert resolve_root(tmp_path) == tmp_path.resolve()

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_follows_symlink(self, tmp_path: Path) -> None:
        target = tmp_path / "real"
        target.mkdir()
        link = tmp_path / "link"
        try:
            link.symlink_to(target, target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlinks")

        assert resolve_root(link) == target.resolve()

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            resolve_root(tmp_path / "nope")

    def test_file_is_not_a_directory(self, tmp_path: Path) -> None:
        track = tmp_path / "a.mp3"
        track.write_bytes(b"")

        with pytest.raises(NotADirectoryError):
            resolve_root(track)


class TestStreamSize:
    def test_keeps_position(self) -> None:
        handle = io.BytesIO(b"0123456789")
        handle.seek(4)

        assert stream_size(handle) == 10
        assert handle.tell() == 4
