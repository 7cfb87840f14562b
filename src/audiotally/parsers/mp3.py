"""MPEG audio frame walker.

Duration is the sum of per-frame durations (``samples / sample_rate``) over
every frame that decodes cleanly. Bytes that do not start a frame (padding
after an ID3v2 tag, junk between frames) are skipped up to the next sync
word. Decoding ends at end of stream, at a 128-byte ID3v1 trailer, or at a
frame cut short by the end of the file.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO, NamedTuple

LOGGER = logging.getLogger(__name__)

ID3V2_HEADER_SIZE = 10
ID3V1_TAG_SIZE = 128
SYNC_CHUNK_SIZE = 4096

MPEG1 = 3
MPEG2 = 2
MPEG25 = 0

LAYER1 = 3
LAYER2 = 2
LAYER3 = 1

# kbps, indexed by the 4-bit bitrate field; 0 is free format.
_BITRATES = {
    (MPEG1, LAYER1): (0, 32, 64, 96, 128, 160, 192, 224, 256, 288, 320, 352, 384, 416, 448),
    (MPEG1, LAYER2): (0, 32, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320, 384),
    (MPEG1, LAYER3): (0, 32, 40, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320),
    (MPEG2, LAYER1): (0, 32, 48, 56, 64, 80, 96, 112, 128, 144, 160, 176, 192, 224, 256),
    (MPEG2, LAYER2): (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160),
    (MPEG2, LAYER3): (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160),
}

_SAMPLE_RATES = {
    MPEG1: (44100, 48000, 32000),
    MPEG2: (22050, 24000, 16000),
    MPEG25: (11025, 12000, 8000),
}


class FrameHeader(NamedTuple):
    version: int
    layer: int
    bitrate: int
    sample_rate: int
    padding: int

    @property
    def samples(self) -> int:
        if self.layer == LAYER1:
            return 384
        if self.layer == LAYER3 and self.version != MPEG1:
            return 576
        return 1152

    @property
    def length(self) -> int:
        """Frame length in bytes, header included."""
        if self.layer == LAYER1:
            return (12 * self.bitrate * 1000 // self.sample_rate + self.padding) * 4
        return self.samples // 8 * self.bitrate * 1000 // self.sample_rate + self.padding

    @property
    def duration(self) -> float:
        return self.samples / self.sample_rate


@dataclass(slots=True)
class Mp3Scan:
    seconds: float = 0.0
    frames: int = 0
    skipped: int = 0
    stopped_early: bool = False


def parse_frame_header(data: bytes) -> FrameHeader | None:
    """Decode a 4-byte frame header, returning None when it is not a valid frame."""
    if len(data) < 4:
        return None
    (word,) = struct.unpack(">I", data[:4])
    if (word >> 21) & 0x7FF != 0x7FF:
        return None

    version = (word >> 19) & 0x3
    layer = (word >> 17) & 0x3
    bitrate_index = (word >> 12) & 0xF
    rate_index = (word >> 10) & 0x3
    padding = (word >> 9) & 0x1

    if version == 1 or layer == 0 or rate_index == 3:
        return None
    # Free-format frames carry no length in the header.
    if bitrate_index in (0, 15):
        return None

    table_version = MPEG1 if version == MPEG1 else MPEG2
    bitrate = _BITRATES[(table_version, layer)][bitrate_index]
    sample_rate = _SAMPLE_RATES[version][rate_index]
    return FrameHeader(version, layer, bitrate, sample_rate, padding)


def _skip_id3v2(handle: BinaryIO) -> None:
    start = handle.tell()
    header = handle.read(ID3V2_HEADER_SIZE)
    if len(header) == ID3V2_HEADER_SIZE and header[:3] == b"ID3":
        size_bytes = header[6:10]
        if all(b < 0x80 for b in size_bytes):
            size = 0
            for b in size_bytes:
                size = (size << 7) | b
            if header[5] & 0x10:
                size += ID3V2_HEADER_SIZE
            handle.seek(start + ID3V2_HEADER_SIZE + size)
            return
    handle.seek(start)


def _is_id3v1_trailer(head: bytes, handle: BinaryIO) -> bool:
    if head[:3] != b"TAG":
        return False
    rest = handle.read(ID3V1_TAG_SIZE - len(head) + 1)
    return len(rest) == ID3V1_TAG_SIZE - len(head)


def _at_id3v1_trailer(head: bytes, handle: BinaryIO) -> bool:
    """True when ``head`` starts a TAG block that runs exactly to end of stream."""
    start = handle.tell()
    if _is_id3v1_trailer(head, handle):
        return True
    handle.seek(start)
    return False


def _resync(handle: BinaryIO, start: int) -> int | None:
    """Find the next valid frame header after ``start``.

    Leaves the handle on that header and returns its offset, or None when the
    stream ends first.
    """
    position = start + 1
    while True:
        handle.seek(position)
        chunk = handle.read(SYNC_CHUNK_SIZE)
        if len(chunk) < 4:
            return None
        offset = chunk.find(b"\xff")
        while 0 <= offset <= len(chunk) - 4:
            if parse_frame_header(chunk[offset : offset + 4]) is not None:
                handle.seek(position + offset)
                return position + offset
            offset = chunk.find(b"\xff", offset + 1)
        position += len(chunk) - 3


def parse_mp3(handle: BinaryIO) -> Mp3Scan:
    """Sum frame durations, skipping non-frame bytes between frames."""
    scan = Mp3Scan()
    _skip_id3v2(handle)

    while True:
        start = handle.tell()
        head = handle.read(4)
        if not head:
            break

        header = parse_frame_header(head)
        if header is None:
            if _at_id3v1_trailer(head, handle):
                break
            found = _resync(handle, start)
            if found is None:
                scan.skipped += handle.seek(0, 2) - start
                break
            scan.skipped += found - start
            continue

        body_length = header.length - 4
        body = handle.read(body_length)
        if len(body) < body_length:
            scan.stopped_early = True
            break

        scan.seconds += header.duration
        scan.frames += 1

    if scan.skipped:
        scan.stopped_early = True
    if scan.stopped_early:
        LOGGER.debug(
            "MP3 decoding skipped %d bytes over %d frames", scan.skipped, scan.frames
        )
    return scan
