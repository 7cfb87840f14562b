"""Utility helpers for working with files."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator

from audiotally.formats import AUDIO_EXTENSIONS

LOGGER = logging.getLogger(__name__)


def resolve_root(path: Path) -> Path:
    """Resolve symlinks in ``path`` and check that it names a directory."""
    resolved = Path(path).expanduser().resolve(strict=True)
    if not resolved.is_dir():
        raise NotADirectoryError(f"Not a directory: {resolved}")
    return resolved


def is_audio_path(path: Path, extensions: Iterable[str] = AUDIO_EXTENSIONS) -> bool:
    return path.suffix.lower() in extensions


def _walk_error(exc: OSError) -> None:
    LOGGER.warning("Skipping %s: %s", exc.filename, exc.strerror or exc)


def _walk_sorted(directory: Path) -> Iterator[Path]:
    """Yield non-directory entries below ``directory`` in lexical path order.

    Files and subdirectories share one ordering by name, and a subdirectory's
    contents come out where its name sorts. Symlinked directories are not
    followed.
    """
    try:
        with os.scandir(directory) as listing:
            entries = sorted(listing, key=lambda entry: entry.name)
    except OSError as exc:
        _walk_error(exc)
        return
    for entry in entries:
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError:
            is_dir = False
        if is_dir:
            yield from _walk_sorted(Path(entry.path))
        else:
            yield Path(entry.path)


def iter_audio_paths(
    inputs: Iterable[Path], extensions: Iterable[str] = AUDIO_EXTENSIONS
) -> Iterator[Path]:
    """Yield audio file paths from input paths, descending into directories.

    Entries are visited in lexical order of their names, files and
    subdirectories alike, so discovery order is stable across runs.
    Unreadable directories are skipped with a warning.
    """
    wanted = frozenset(ext.lower() for ext in extensions)
    for item in inputs:
        item = Path(item)
        if item.is_dir():
            for candidate in _walk_sorted(item):
                if candidate.is_file() and is_audio_path(candidate, wanted):
                    yield candidate
        elif item.is_file() and is_audio_path(item, wanted):
            yield item


def stream_size(handle: BinaryIO) -> int:
    """Size in bytes of a seekable binary stream, keeping its position."""
    position = handle.tell()
    size = handle.seek(0, os.SEEK_END)
    handle.seek(position)
    return size
