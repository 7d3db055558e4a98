"""Helpers shared by the credential and node implementations."""

import logging
from typing import Optional

logger = logging.getLogger(__name__)

# Output format -> (mime type, file extension)
OUTPUT_FORMATS = {
    "mp3": ("audio/mpeg", "mp3"),
    "aac": ("audio/aac", "aac"),
    "flac": ("audio/flac", "flac"),
    "wav": ("audio/wav", "wav"),
    "pcm": ("audio/pcm", "pcm"),
    "opus": ("audio/opus", "opus"),
}
DEFAULT_OUTPUT_FORMAT = "mp3"

# Known audio mime types -> file extension
MIME_EXTENSIONS = {
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
    "audio/aac": "aac",
    "audio/flac": "flac",
    "audio/x-flac": "flac",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/wave": "wav",
    "audio/pcm": "pcm",
    "audio/opus": "opus",
    "audio/ogg": "ogg",
}


def join_url(base_url: str, path: str) -> str:
    """Join a base URL and a path with exactly one slash between them.

    Args:
        base_url: Base URL, trailing slashes are ignored
        path: Endpoint path, leading slashes are ignored

    Returns:
        str: The joined URL
    """
    base = base_url.rstrip("/")
    if not path:
        return base
    return f"{base}/{path.lstrip('/')}"


def mime_to_extension(mime_type: Optional[str]) -> Optional[str]:
    """Look up the file extension for a mime type.

    Parameters such as ``; codecs=opus`` are ignored. Unknown mime types
    return None so callers can leave the file name without extension.
    """
    if not mime_type:
        return None
    base_type = mime_type.split(";", 1)[0].strip().lower()
    return MIME_EXTENSIONS.get(base_type)


def output_format_mime(output_format: str) -> str:
    """Return the mime type for a TTS output format, falling back to mp3."""
    mime_type, _ = OUTPUT_FORMATS.get(
        output_format, OUTPUT_FORMATS[DEFAULT_OUTPUT_FORMAT]
    )
    return mime_type


def build_file_name(stem: str, mime_type: Optional[str]) -> str:
    """Build an output file name from a stem and a mime type."""
    extension = mime_to_extension(mime_type)
    if extension is None:
        logger.debug(f"No extension known for mime type: {mime_type}")
        return stem
    return f"{stem}.{extension}"
