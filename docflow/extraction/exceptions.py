class ExtractionError(Exception):
    """Base exception for extraction failures inside a strategy."""


class PdfExtractionError(ExtractionError):
    """Raised by a PDF engine when a document cannot be opened or read."""


class DocxExtractionError(ExtractionError):
    """Raised when a word-processor container cannot be converted."""
