"""Route a file to the duration parser for its extension."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Callable, Dict

from audiotally.errors import FormatNotImplementedError, UnsupportedFormatError
from audiotally.formats import UNIMPLEMENTED_FORMATS, normalize_extension
from audiotally.models import DurationOutcome
from audiotally.parsers.m4a import parse_m4a
from audiotally.parsers.mp3 import parse_mp3
from audiotally.parsers.wav import parse_wav

LOGGER = logging.getLogger(__name__)

Resolver = Callable[[Path], DurationOutcome]


def _mp3_outcome(handle: BinaryIO) -> DurationOutcome:
    scan = parse_mp3(handle)
    return DurationOutcome(scan.seconds, stopped_early=scan.stopped_early)


def _wav_outcome(handle: BinaryIO) -> DurationOutcome:
    return DurationOutcome(parse_wav(handle))


def _m4a_outcome(handle: BinaryIO) -> DurationOutcome:
    return DurationOutcome(parse_m4a(handle))


PARSERS: Dict[str, Callable[[BinaryIO], DurationOutcome]] = {
    ".mp3": _mp3_outcome,
    ".wav": _wav_outcome,
    ".m4a": _m4a_outcome,
}


def resolve_duration(path: Path) -> DurationOutcome:
    """Measure ``path`` with the parser registered for its extension.

    Raises ``FormatNotImplementedError`` for ogg/flac, ``UnsupportedFormatError``
    for anything else without a parser, ``OSError`` when the file cannot be
    read, and ``MalformedFileError`` from the parsers themselves.
    """
    path = Path(path)
    extension = normalize_extension(path.suffix)
    if extension in UNIMPLEMENTED_FORMATS:
        raise FormatNotImplementedError(extension)

    parser = PARSERS.get(extension)
    if parser is None:
        raise UnsupportedFormatError(extension or path.name)

    with path.open("rb") as handle:
        outcome = parser(handle)
    LOGGER.debug("%s: %.3fs", path, outcome.seconds)
    return outcome
