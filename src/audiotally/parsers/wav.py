"""RIFF/WAVE header reader."""

from __future__ import annotations

import struct
from typing import BinaryIO

from audiotally.errors import MalformedFileError
from audiotally.utils.files import stream_size

RIFF_HEADER = struct.Struct("<4sI4s")
CHUNK_HEADER = struct.Struct("<4sI")
# audio_format, channels, sample_rate, byte_rate, block_align
FMT_FIELDS = struct.Struct("<HHIIH")


def parse_wav(handle: BinaryIO) -> float:
    """Return the duration declared by the ``fmt `` and ``data`` chunks.

    The duration is ``data_bytes / (sample_rate * block_align)``; samples are
    never read.
    """
    header = handle.read(RIFF_HEADER.size)
    if len(header) < RIFF_HEADER.size:
        raise MalformedFileError("invalid WAV file")
    riff, _, wave = RIFF_HEADER.unpack(header)
    if riff != b"RIFF" or wave != b"WAVE":
        raise MalformedFileError("invalid WAV file")

    file_size = stream_size(handle)
    sample_rate = block_align = None
    data_bytes = None

    while data_bytes is None or sample_rate is None:
        chunk = handle.read(CHUNK_HEADER.size)
        if len(chunk) < CHUNK_HEADER.size:
            break
        chunk_id, chunk_size = CHUNK_HEADER.unpack(chunk)
        body_start = handle.tell()

        if chunk_id == b"fmt ":
            fields = handle.read(FMT_FIELDS.size)
            if chunk_size < FMT_FIELDS.size or len(fields) < FMT_FIELDS.size:
                raise MalformedFileError("truncated fmt chunk")
            _, _, sample_rate, _, block_align = FMT_FIELDS.unpack(fields)
        elif chunk_id == b"data":
            # Writers that never finalised the header leave a placeholder size.
            data_bytes = min(chunk_size, max(file_size - body_start, 0))

        handle.seek(body_start + chunk_size + (chunk_size & 1))

    if sample_rate is None:
        raise MalformedFileError("missing fmt chunk")
    if data_bytes is None:
        raise MalformedFileError("missing data chunk")
    if sample_rate == 0 or block_align == 0:
        raise MalformedFileError(
            f"cannot derive duration (sample_rate={sample_rate}, block_align={block_align})"
        )
    return data_bytes / (sample_rate * block_align)
