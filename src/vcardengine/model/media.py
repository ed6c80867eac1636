"""Content types of binary properties.

vCard 2.1 and 3.0 name a payload's format with a short TYPE value
("JPEG"), vCard 4.0 with a media type ("image/jpeg"), and a URL often
only reveals it through its file extension. A ``MediaType`` ties the
three spellings together; each binary property kind has its own table.

Python 3.13+.
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "IMAGE_TYPES",
    "KEY_TYPES",
    "SOUND_TYPES",
    "MediaType",
    "MediaTypeTable",
    "file_extension",
]


@dataclass(frozen=True, slots=True)
class MediaType:
    """One content type in its three spellings.

    Attributes:
        value: TYPE parameter value used by 2.1/3.0 (e.g. "JPEG")
        media_type: MIME type used by 4.0 (e.g. "image/jpeg")
        extension: File extension without the dot (e.g. "jpg")
    """

    value: str | None
    media_type: str | None = None
    extension: str | None = None


@dataclass(frozen=True, slots=True)
class MediaTypeTable:
    """Known content types of one binary property kind."""

    entries: tuple[MediaType, ...]

    def from_type_parameter(self, value: str) -> MediaType:
        """Resolve a 2.1/3.0 TYPE value.

        Some writers put a media type in TYPE; that spelling is accepted too.
        """
        if "/" in value:
            return self.from_media_type(value)
        for entry in self.entries:
            if entry.value is not None and entry.value.lower() == value.lower():
                return entry
        return MediaType(value=value)

    def from_media_type(self, media_type: str) -> MediaType:
        """Resolve a 4.0 MEDIATYPE value or a data-URI content type."""
        for entry in self.entries:
            if entry.media_type is not None and entry.media_type.lower() == media_type.lower():
                return entry
        return MediaType(value=None, media_type=media_type)

    def from_extension(self, extension: str) -> MediaType:
        """Resolve a file extension."""
        for entry in self.entries:
            if entry.extension is not None and entry.extension.lower() == extension.lower():
                return entry
        return MediaType(value=None, extension=extension)


IMAGE_TYPES = MediaTypeTable(
    entries=(
        MediaType("JPEG", "image/jpeg", "jpg"),
        MediaType("GIF", "image/gif", "gif"),
        MediaType("PNG", "image/png", "png"),
        MediaType("BMP", "image/bmp", "bmp"),
        MediaType("TIFF", "image/tiff", "tiff"),
    )
)

SOUND_TYPES = MediaTypeTable(
    entries=(
        MediaType("WAVE", "audio/wav", "wav"),
        MediaType("MP3", "audio/mp3", "mp3"),
        MediaType("OGG", "audio/ogg", "ogg"),
        MediaType("AAC", "audio/aac", "aac"),
        MediaType("MIDI", "audio/midi", "mid"),
    )
)

KEY_TYPES = MediaTypeTable(
    entries=(
        MediaType("PGP", "application/pgp-keys", "pgp"),
        MediaType("GPG", "application/gpg", "gpg"),
        MediaType("X509", "application/x509", None),
    )
)


def file_extension(url: str) -> str | None:
    """Extract the file extension from a URL path.

    Returns:
        Extension without the dot, or None if the last path segment has none

    Example:
        >>> file_extension("http://example.com/me.jpg")
        'jpg'
    """
    slash = url.rfind("/")
    dot = url.rfind(".")
    if dot < 0 or dot < slash or dot == len(url) - 1:
        return None
    return url[dot + 1 :]
