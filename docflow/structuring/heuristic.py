from docflow.classification.format_family import strip_extension
from docflow.structuring.models import DocumentNode, Heading, Paragraph


def line_paragraphs(text: str) -> list[Paragraph]:
    """One paragraph per line that is not blank, text kept as-is."""
    paragraphs = []
    for line in text.split("\n"):
        line = line.rstrip("\r")
        if line.strip():
            paragraphs.append(Paragraph(line))
    return paragraphs


class HeuristicStructurer:
    """Deterministic structuring: a title heading followed by the lines of the text."""

    def structure(self, text: str, file_name: str) -> DocumentNode:
        title = Heading(level=1, text=strip_extension(file_name))
        return DocumentNode(children=[title, *line_paragraphs(text)])
