"""Recognized audio file extensions."""

from __future__ import annotations

SUPPORTED_FORMATS = (".mp3", ".wav", ".m4a")
# Recognized during discovery but without a duration parser.
UNIMPLEMENTED_FORMATS = (".ogg", ".flac")

AUDIO_EXTENSIONS = SUPPORTED_FORMATS + UNIMPLEMENTED_FORMATS


def normalize_extension(extension: str) -> str:
    """Lower-case an extension and make sure it starts with a dot."""
    extension = extension.strip().lower()
    if extension and not extension.startswith("."):
        extension = "." + extension
    return extension
