"""Error types raised while measuring audio files."""

from __future__ import annotations


class AudioDurationError(Exception):
    """Base class for per-file duration failures."""


class UnsupportedFormatError(AudioDurationError):
    """Raised when a file extension is not a recognized audio format."""

    def __init__(self, extension: str, message: str | None = None) -> None:
        self.extension = extension
        super().__init__(message or f"unsupported format: {extension}")


class FormatNotImplementedError(UnsupportedFormatError):
    """Raised for recognized formats that have no duration parser (ogg, flac)."""

    def __init__(self, extension: str) -> None:
        super().__init__(extension, f"format recognized but not implemented: {extension}")


class MalformedFileError(AudioDurationError):
    """Raised when a header or box structure does not match the expected layout."""


class JobTimeoutError(AudioDurationError):
    """Raised when resolving a single file exceeds the configured timeout."""

    def __init__(self, path: object, timeout: float) -> None:
        self.path = path
        self.timeout = timeout
        super().__init__(f"timed out after {timeout:g}s: {path}")


class NoAudioFilesError(Exception):
    """Raised when a run is started without any candidate files."""


class ChannelClosedError(Exception):
    """Raised when sending on a channel that has already been closed."""


class IncompleteRunError(Exception):
    """Raised when the pool delivers fewer results than jobs were submitted."""

    def __init__(self, expected: int, received: int) -> None:
        self.expected = expected
        self.received = received
        super().__init__(f"expected {expected} results, received {received}")
