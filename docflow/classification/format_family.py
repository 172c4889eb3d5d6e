"""Maps a declared media type and file name to the format family that decides
which extraction strategy runs.

Pure functions only: no I/O and no exceptions for any input.
"""

from enum import Enum
from pathlib import PurePosixPath


class FormatFamily(str, Enum):
    TEXT = "text"
    LEGACY_WORD = "legacy_word"
    WORD = "word"
    PDF = "pdf"
    IMAGE = "image"
    AUDIO = "audio"


class TextFlavor(str, Enum):
    MARKDOWN = "markdown"
    HTML = "html"
    PLAIN = "plain"


GENERIC_MEDIA_TYPE = "application/octet-stream"

_EXTENSION_FAMILIES: dict[str, FormatFamily] = {
    ".pdf": FormatFamily.PDF,
    ".docx": FormatFamily.WORD,
    ".doc": FormatFamily.LEGACY_WORD,
    ".jpg": FormatFamily.IMAGE,
    ".jpeg": FormatFamily.IMAGE,
    ".png": FormatFamily.IMAGE,
    ".gif": FormatFamily.IMAGE,
    ".webp": FormatFamily.IMAGE,
    ".mp3": FormatFamily.AUDIO,
    ".wav": FormatFamily.AUDIO,
    ".webm": FormatFamily.AUDIO,
    ".ogg": FormatFamily.AUDIO,
    ".m4a": FormatFamily.AUDIO,
    ".mp4": FormatFamily.AUDIO,
    ".flac": FormatFamily.AUDIO,
    ".txt": FormatFamily.TEXT,
    ".md": FormatFamily.TEXT,
    ".markdown": FormatFamily.TEXT,
    ".html": FormatFamily.TEXT,
    ".htm": FormatFamily.TEXT,
    ".json": FormatFamily.TEXT,
    ".xml": FormatFamily.TEXT,
    ".csv": FormatFamily.TEXT,
}

# Checked in order; the first matching substring wins.
_MEDIA_TYPE_RULES: tuple[tuple[str, FormatFamily], ...] = (
    ("pdf", FormatFamily.PDF),
    ("wordprocessingml", FormatFamily.WORD),
    ("msword", FormatFamily.LEGACY_WORD),
    ("audio/", FormatFamily.AUDIO),
    ("image/", FormatFamily.IMAGE),
    ("markdown", FormatFamily.TEXT),
    ("html", FormatFamily.TEXT),
    ("json", FormatFamily.TEXT),
    ("xml", FormatFamily.TEXT),
    ("text", FormatFamily.TEXT),
)

_AUDIO_MEDIA_TYPES: dict[str, str] = {
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".webm": "audio/webm",
    ".m4a": "audio/mp4",
    ".mp4": "audio/mp4",
    ".ogg": "audio/ogg",
    ".flac": "audio/flac",
}

_RESTRUCTURED_FAMILIES = frozenset(
    {
        FormatFamily.PDF,
        FormatFamily.WORD,
        FormatFamily.LEGACY_WORD,
        FormatFamily.AUDIO,
        FormatFamily.IMAGE,
    }
)


def file_extension(file_name: str) -> str:
    """Lowercased extension including the dot, or '' when there is none."""
    return PurePosixPath((file_name or "").strip().lower()).suffix


def strip_extension(file_name: str) -> str:
    """File name without its last extension ('report.v2.pdf' -> 'report.v2')."""
    name = (file_name or "").strip()
    dot = name.rfind(".")
    if dot <= 0:
        return name
    return name[:dot]


def classify(media_type: str | None, file_name: str | None) -> FormatFamily:
    """Pick the format family for a file.

    An absent or generic media type defers to the extension; an explicit media
    type is matched by substring first. Anything unrecognized is treated as a
    plain text container.
    """
    normalized = (media_type or "").strip().lower()
    by_extension = _EXTENSION_FAMILIES.get(file_extension(file_name or ""))

    if not normalized or normalized == GENERIC_MEDIA_TYPE:
        return by_extension or FormatFamily.TEXT

    for needle, family in _MEDIA_TYPE_RULES:
        if needle in normalized:
            return family
    return by_extension or FormatFamily.TEXT


def text_flavor(media_type: str | None, file_name: str | None) -> TextFlavor:
    normalized = (media_type or "").strip().lower()
    extension = file_extension(file_name or "")
    if "markdown" in normalized or extension in (".md", ".markdown"):
        return TextFlavor.MARKDOWN
    if "html" in normalized or extension in (".html", ".htm"):
        return TextFlavor.HTML
    return TextFlavor.PLAIN


def benefits_from_restructuring(family: FormatFamily) -> bool:
    """Whether AI structuring is worth attempting for this family."""
    return family in _RESTRUCTURED_FAMILIES


def infer_audio_media_type(file_name: str, declared: str | None = None) -> str:
    """Media type sent with audio to transcription: extension first, then an
    explicit ``audio/*`` declaration, else ``audio/mpeg``."""
    by_extension = _AUDIO_MEDIA_TYPES.get(file_extension(file_name))
    if by_extension:
        return by_extension
    normalized = (declared or "").strip().lower()
    if normalized.startswith("audio/"):
        return normalized
    return "audio/mpeg"
