class PipelineError(Exception):
    """Base exception for all pipeline-related errors."""


class SourceDocumentNotFoundError(PipelineError):
    """Raised when a source document cannot be found in the database."""


class EditorDocumentNotFoundError(PipelineError):
    """Raised when an editor document to update no longer exists."""


class OpenInEditorError(PipelineError):
    """Raised when no editor document could be produced for the upload.

    ``str(exc)`` is the single message shown to the user.
    """
