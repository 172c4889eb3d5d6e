class StructuringError(Exception):
    """Raised when a language-model response cannot be turned into a document tree."""


class StructuringValidationError(StructuringError):
    """Raised when parsed JSON does not match the document node schema."""
