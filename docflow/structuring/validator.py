"""Validates parsed model output against the document node schema."""

from typing import Any

from docflow.structuring.exceptions import StructuringValidationError
from docflow.structuring.models import BlockNode, BulletList, DocumentNode, Heading, Paragraph

_MIN_HEADING_LEVEL = 1
_MAX_HEADING_LEVEL = 3


def build_document(data: dict[str, Any]) -> DocumentNode:
    """Build a DocumentNode from the rich-editor JSON form.

    Only heading, paragraph and bulletList blocks are accepted. Heading
    levels outside 1..3 are clamped.

    Raises:
        StructuringValidationError: on any schema violation.
    """
    if data.get("type") != "doc":
        raise StructuringValidationError(f"Root 'type' must be 'doc', got {data.get('type')!r}")
    content = data.get("content")
    if not isinstance(content, list):
        raise StructuringValidationError("Root 'content' must be a list")
    if not content:
        raise StructuringValidationError("Root 'content' must not be empty")
    return DocumentNode(children=[_build_block(node, i) for i, node in enumerate(content)])


def _build_block(raw: Any, index: int) -> BlockNode:
    if not isinstance(raw, dict):
        raise StructuringValidationError(f"Node at index {index} must be an object")
    node_type = raw.get("type")
    if node_type == "heading":
        return Heading(level=_heading_level(raw, index), text=_inline_text(raw, index))
    if node_type == "paragraph":
        return Paragraph(text=_inline_text(raw, index))
    if node_type == "bulletList":
        return _build_bullet_list(raw, index)
    raise StructuringValidationError(f"Node at index {index}: unsupported type {node_type!r}")


def _heading_level(raw: dict[str, Any], index: int) -> int:
    attrs = raw.get("attrs") or {}
    if not isinstance(attrs, dict):
        raise StructuringValidationError(f"Heading at index {index}: 'attrs' must be an object")
    level = attrs.get("level", _MIN_HEADING_LEVEL)
    if isinstance(level, bool) or not isinstance(level, int):
        raise StructuringValidationError(f"Heading at index {index}: 'level' must be an integer")
    return max(_MIN_HEADING_LEVEL, min(_MAX_HEADING_LEVEL, level))


def _inline_text(raw: dict[str, Any], index: int) -> str:
    content = raw.get("content", [])
    if not isinstance(content, list):
        raise StructuringValidationError(f"Node at index {index}: 'content' must be a list")
    parts: list[str] = []
    for leaf in content:
        if not isinstance(leaf, dict):
            raise StructuringValidationError(f"Node at index {index}: inline nodes must be objects")
        if leaf.get("type") == "hardBreak":
            parts.append("\n")
            continue
        if leaf.get("type") != "text" or not isinstance(leaf.get("text"), str):
            raise StructuringValidationError(
                f"Node at index {index}: inline nodes must be text with a string 'text'"
            )
        parts.append(leaf["text"])
    return "".join(parts)


def _build_bullet_list(raw: dict[str, Any], index: int) -> BulletList:
    content = raw.get("content")
    if not isinstance(content, list):
        raise StructuringValidationError(f"Bullet list at index {index}: 'content' must be a list")
    items: list[Paragraph] = []
    for item in content:
        if not isinstance(item, dict) or item.get("type") != "listItem":
            raise StructuringValidationError(
                f"Bullet list at index {index}: children must be listItem nodes"
            )
        paragraphs = item.get("content", [])
        if not isinstance(paragraphs, list):
            raise StructuringValidationError(
                f"Bullet list at index {index}: listItem 'content' must be a list"
            )
        texts = []
        for paragraph in paragraphs:
            if not isinstance(paragraph, dict) or paragraph.get("type") != "paragraph":
                raise StructuringValidationError(
                    f"Bullet list at index {index}: listItem may only contain paragraphs"
                )
            texts.append(_inline_text(paragraph, index))
        items.append(Paragraph(text="\n".join(texts)))
    return BulletList(items=items)
