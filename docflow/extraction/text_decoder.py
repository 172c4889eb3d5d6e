import html
import re

from docflow.classification.format_family import TextFlavor, text_flavor
from docflow.extraction.base import BaseExtractor, ProgressCallback
from docflow.extraction.models import ExtractionMethod, ExtractionResult, SourceFile

_HEADING_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^### (.+)$", re.MULTILINE), r"<h3>\1</h3>"),
    (re.compile(r"^## (.+)$", re.MULTILINE), r"<h2>\1</h2>"),
    (re.compile(r"^# (.+)$", re.MULTILINE), r"<h1>\1</h1>"),
)
_BOLD = re.compile(r"\*\*(.+?)\*\*|__(.+?)__")
_ITALIC = re.compile(r"\*(.+?)\*|(?<!\w)_(.+?)_(?!\w)")
_HEADING_LINE_END = re.compile(r"(</h[1-3]>)\n")
_BLANK_LINES = re.compile(r"\n\s*\n")


def _first_group(match: re.Match[str]) -> str:
    return match.group(1) if match.group(1) is not None else match.group(2)


def markdown_to_html(text: str) -> str:
    """Naive markdown conversion: headings, bold, italic and line breaks only."""
    converted = html.escape(text, quote=False)
    for pattern, replacement in _HEADING_RULES:
        converted = pattern.sub(replacement, converted)
    converted = _BOLD.sub(lambda m: f"<strong>{_first_group(m)}</strong>", converted)
    converted = _ITALIC.sub(lambda m: f"<em>{_first_group(m)}</em>", converted)
    converted = _HEADING_LINE_END.sub(r"\1", converted)
    return converted.replace("\n", "<br>")


def paragraphs_to_html(text: str) -> str:
    """Wrap blank-line separated groups of lines in <p> elements."""
    parts = []
    for group in _BLANK_LINES.split(text.strip()):
        if not group.strip():
            continue
        escaped = html.escape(group.strip(), quote=False)
        parts.append("<p>" + escaped.replace("\n", "<br>") + "</p>")
    return "".join(parts)


def decode_text(data: bytes) -> tuple[str, list[str]]:
    """Decode bytes as UTF-8, falling back to their raw latin-1 view."""
    try:
        text = data.decode("utf-8-sig")
        warnings: list[str] = []
    except UnicodeDecodeError:
        text = data.decode("latin-1")
        warnings = ["text is not valid UTF-8; decoded byte-for-byte as latin-1"]
    return text.replace("\r\n", "\n"), warnings


class TextDecoder(BaseExtractor):
    """Plain, markdown, HTML and other text-like containers."""

    async def extract(
        self,
        source: SourceFile,
        progress: ProgressCallback | None = None,
    ) -> ExtractionResult:
        text, warnings = decode_text(source.data)
        flavor = text_flavor(source.media_type, source.file_name)
        if flavor is TextFlavor.MARKDOWN:
            markup = markdown_to_html(text)
        elif flavor is TextFlavor.HTML:
            markup = text
        else:
            markup = paragraphs_to_html(text)
        return ExtractionResult(
            text=text,
            markup=markup,
            method=ExtractionMethod.PASSTHROUGH,
            warnings=warnings,
        )
