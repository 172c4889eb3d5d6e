"""Word-processor containers (.docx, best effort for legacy .doc)."""

import asyncio
import html
import io
import re

import anyio
import docx
from docx.document import Document as DocxDocument
from docx.table import Table
from docx.text.paragraph import Paragraph

from docflow.extraction.base import BaseExtractor, ProgressCallback
from docflow.extraction.exceptions import DocxExtractionError
from docflow.extraction.models import ExtractionMethod, ExtractionResult, SourceFile
from docflow.logging.logger import Log

_NON_PRINTABLE = re.compile(r"[^\x20-\x7E\n\r\t]")
_MAX_HEADING_LEVEL = 3


def _open(data: bytes) -> DocxDocument:
    try:
        return docx.Document(io.BytesIO(data))
    except Exception as exc:
        raise DocxExtractionError(f"not a readable word-processor document: {exc}") from exc


def _heading_level(style_name: str) -> int | None:
    if style_name == "Title":
        return 1
    if not style_name.startswith("Heading"):
        return None
    suffix = style_name.removeprefix("Heading").strip()
    level = int(suffix) if suffix.isdigit() else 1
    return max(1, min(_MAX_HEADING_LEVEL, level))


def _style_name(paragraph: Paragraph) -> str:
    style = paragraph.style
    return style.name if style is not None and style.name else ""


def _runs_html(paragraph: Paragraph) -> str:
    parts: list[str] = []
    for run in paragraph.runs:
        if not run.text:
            continue
        fragment = html.escape(run.text, quote=False)
        if run.italic:
            fragment = f"<em>{fragment}</em>"
        if run.bold:
            fragment = f"<strong>{fragment}</strong>"
        parts.append(fragment)
    if not parts:
        # Hyperlink-only paragraphs have no direct runs.
        return html.escape(paragraph.text, quote=False)
    return "".join(parts)


def _table_rows(table: Table) -> list[list[str]]:
    return [[cell.text.strip() for cell in row.cells] for row in table.rows]


def _table_html(table: Table) -> str:
    rows = "".join(
        "<tr>" + "".join(f"<td>{html.escape(cell, quote=False)}</td>" for cell in row) + "</tr>"
        for row in _table_rows(table)
    )
    return f"<table>{rows}</table>"


def docx_to_text(data: bytes) -> str:
    """Raw text: one block per paragraph or table row, blank line between blocks."""
    try:
        document = _open(data)
        blocks: list[str] = []
        for block in document.iter_inner_content():
            if isinstance(block, Table):
                blocks.extend("\t".join(row) for row in _table_rows(block))
            elif block.text.strip():
                blocks.append(block.text)
        return "\n\n".join(blocks)
    except DocxExtractionError:
        raise
    except Exception as exc:
        raise DocxExtractionError(f"text conversion failed: {exc}") from exc


def docx_to_html(data: bytes) -> str:
    """HTML markup: headings, bullet lists, bold/italic runs and tables."""
    try:
        document = _open(data)
        parts: list[str] = []
        in_list = False
        for block in document.iter_inner_content():
            if isinstance(block, Table):
                if in_list:
                    parts.append("</ul>")
                    in_list = False
                parts.append(_table_html(block))
                continue
            style_name = _style_name(block)
            if style_name.startswith("List"):
                if not in_list:
                    parts.append("<ul>")
                    in_list = True
                parts.append(f"<li>{_runs_html(block)}</li>")
                continue
            if in_list:
                parts.append("</ul>")
                in_list = False
            if not block.text.strip():
                continue
            level = _heading_level(style_name)
            if level is not None:
                parts.append(f"<h{level}>{_runs_html(block)}</h{level}>")
            else:
                parts.append(f"<p>{_runs_html(block)}</p>")
        if in_list:
            parts.append("</ul>")
        return "\n".join(parts)
    except DocxExtractionError:
        raise
    except Exception as exc:
        raise DocxExtractionError(f"markup conversion failed: {exc}") from exc


def strip_non_printable(data: bytes) -> str:
    """Byte-for-byte decode with everything but printable ASCII and whitespace blanked."""
    return _NON_PRINTABLE.sub(" ", data.decode("latin-1")).strip()


class WordDocumentExtractor(BaseExtractor):
    """Structural extraction of text and markup from word-processor files.

    Legacy files go through the same converter first; when it cannot read
    them the printable characters of the raw bytes are kept instead.
    """

    def __init__(self, *, legacy: bool = False) -> None:
        self._legacy = legacy

    async def extract(
        self,
        source: SourceFile,
        progress: ProgressCallback | None = None,
    ) -> ExtractionResult:
        try:
            text, markup = await self._convert(source.data)
        except DocxExtractionError as exc:
            return await self._fallback(source, exc)
        Log.info(f"Converted {source.file_name}: {len(text)} chars")
        return ExtractionResult(
            text=text,
            markup=markup or None,
            method=ExtractionMethod.CONTAINER_EXTRACTION,
        )

    @staticmethod
    async def _convert(data: bytes) -> tuple[str, str]:
        # Both conversions read the same immutable buffer.
        text, markup = await asyncio.gather(
            anyio.to_thread.run_sync(docx_to_text, data),
            anyio.to_thread.run_sync(docx_to_html, data),
        )
        return text, markup

    async def _fallback(self, source: SourceFile, exc: DocxExtractionError) -> ExtractionResult:
        warning = f"word-processor conversion failed: {exc}"
        if not self._legacy:
            Log.warning(f"Could not convert {source.file_name}: {exc}")
            return ExtractionResult(
                text="",
                method=ExtractionMethod.CONTAINER_EXTRACTION,
                warnings=[warning],
            )
        Log.info(f"Legacy document {source.file_name} decoded as plain text: {exc}")
        text = await anyio.to_thread.run_sync(strip_non_printable, source.data)
        return ExtractionResult(
            text=text,
            method=ExtractionMethod.PASSTHROUGH,
            warnings=[warning, "legacy document decoded as plain text"],
        )
