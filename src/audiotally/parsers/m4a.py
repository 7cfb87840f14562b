"""MP4/M4A box walker that reads the movie header duration."""

from __future__ import annotations

import logging
import struct
from typing import BinaryIO, List

from audiotally.errors import MalformedFileError
from audiotally.utils.files import stream_size

LOGGER = logging.getLogger(__name__)

BOX_HEADER = struct.Struct(">I4s")
LARGE_SIZE = struct.Struct(">Q")

# Boxes whose body is a plain sequence of child boxes.
CONTAINER_BOXES = frozenset(
    {b"moov", b"trak", b"mdia", b"minf", b"stbl", b"edts", b"dinf", b"udta", b"moof", b"traf", b"mvex"}
)


def mvhd_seconds(body: bytes) -> float:
    """Duration in seconds from an ``mvhd`` body, 0.0 when it cannot be derived."""
    if not body:
        return 0.0
    version = body[0]
    if version == 0 and len(body) >= 20:
        time_scale, units = struct.unpack_from(">II", body, 12)
    elif version == 1 and len(body) >= 32:
        (time_scale,) = struct.unpack_from(">I", body, 20)
        (units,) = LARGE_SIZE.unpack_from(body, 24)
    else:
        return 0.0
    if time_scale > 0:
        return units / time_scale
    return 0.0


def parse_m4a(handle: BinaryIO) -> float:
    """Walk the box tree until the first ``mvhd`` and return its duration.

    Container boxes are descended into; every other box body is skipped
    without being read. The walk stops at the first ``mvhd`` whatever it
    holds, at a zero-sized box, or once the position reaches the end of file.
    """
    file_size = stream_size(handle)
    position = handle.tell()
    parent_ends: List[int] = []
    duration = 0.0

    while position < file_size:
        while parent_ends and position >= parent_ends[-1]:
            parent_ends.pop()

        header = handle.read(BOX_HEADER.size)
        if len(header) < BOX_HEADER.size:
            break
        size, box_type = BOX_HEADER.unpack(header)
        header_size = BOX_HEADER.size

        if size == 1:
            extended = handle.read(LARGE_SIZE.size)
            if len(extended) < LARGE_SIZE.size:
                break
            (size,) = LARGE_SIZE.unpack(extended)
            header_size += LARGE_SIZE.size

        if size == 0:
            break
        if size < header_size:
            LOGGER.debug("Box %r declares size %d below its header", box_type, size)
            break
        if parent_ends and position + size > parent_ends[-1]:
            LOGGER.debug("Box %r overflows its parent at offset %d", box_type, position)
            break

        if box_type == b"mvhd":
            duration = mvhd_seconds(handle.read(size - header_size))
            break

        if box_type in CONTAINER_BOXES:
            parent_ends.append(position + size)
            position += header_size
        else:
            position += size
            handle.seek(position)

    if duration == 0:
        raise MalformedFileError("could not parse M4A duration")
    return duration
