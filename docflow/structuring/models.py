from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class StructuringMethod(str, Enum):
    AI = "ai"
    HEURISTIC = "heuristic"


def _inline(text: str) -> list[dict[str, Any]]:
    # Text leaves may not be empty in the editor schema.
    return [{"type": "text", "text": text}] if text else []


@dataclass(frozen=True)
class Heading:
    level: int
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "heading",
            "attrs": {"level": self.level},
            "content": _inline(self.text),
        }


@dataclass(frozen=True)
class Paragraph:
    text: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"type": "paragraph", "content": _inline(self.text)}


@dataclass(frozen=True)
class BulletList:
    items: list[Paragraph] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "bulletList",
            "content": [
                {"type": "listItem", "content": [item.to_dict()]} for item in self.items
            ],
        }


BlockNode = Heading | Paragraph | BulletList


@dataclass(frozen=True)
class DocumentNode:
    """Root of the structured rich-document tree."""

    children: list[BlockNode] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the rich-editor JSON document format."""
        return {"type": "doc", "content": [child.to_dict() for child in self.children]}

    def plain_text(self) -> str:
        """All node text in document order, one line per block or list item."""
        lines: list[str] = []
        for child in self.children:
            if isinstance(child, BulletList):
                lines.extend(item.text for item in child.items)
            else:
                lines.append(child.text)
        return "\n".join(lines)

    def extended(self, children: list[BlockNode]) -> "DocumentNode":
        return DocumentNode(children=[*self.children, *children])


def placeholder_document() -> DocumentNode:
    """One empty paragraph; stored while structuring is still running."""
    return DocumentNode(children=[Paragraph("")])


@dataclass(frozen=True)
class Structured:
    document: DocumentNode


@dataclass(frozen=True)
class StructuringFailure:
    """Why the AI strategy could not produce a tree.

    ``reason`` is one of ``service_error``, ``invalid_json``,
    ``schema_mismatch`` or ``content_loss``.
    """

    reason: str
    detail: str = ""


StructuringResult = Structured | StructuringFailure


@dataclass(frozen=True)
class StructuringOutcome:
    document: DocumentNode
    method: StructuringMethod
    failure: StructuringFailure | None = None
