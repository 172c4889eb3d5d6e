from pathlib import Path

from docflow.structuring.exceptions import StructuringError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_system_prompt(path: Path | None = None) -> str:
    """Load the structuring system prompt from a file.

    Args:
        path: Path to the prompt file.
              Defaults to the bundled structuring_prompt.txt.

    Raises:
        StructuringError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "structuring_prompt.txt"
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise StructuringError(f"Failed to load structuring prompt: {exc}") from exc
