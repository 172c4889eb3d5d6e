"""Best-effort recovery of a JSON object from a free-form model response.

Models wrap JSON in code fences, lead with prose ("Here is the document:")
or trail it with explanations. The steps below undo all three before
handing the candidate to ``json.loads``.
"""

import json
import re
from typing import Any

from docflow.structuring.exceptions import StructuringError

_CODE_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_DOC_SIGNATURE = re.compile(r'\{\s*"type"\s*:\s*"doc"')


def extract_json_object(raw: str) -> dict[str, Any]:
    """Return the first complete JSON object found in ``raw``.

    Raises:
        StructuringError: if no balanced object can be found or it does not parse.
    """
    candidate = _strip_code_fence(raw.strip())
    candidate = _slice_from_object_start(candidate)
    candidate = _cut_at_matching_brace(candidate)
    try:
        parsed = json.loads(candidate)
    except (ValueError, RecursionError) as exc:
        # JSONDecodeError is a ValueError; pathological nesting exhausts the stack.
        raise StructuringError(f"Invalid JSON response: {exc}") from exc
    if not isinstance(parsed, dict):
        raise StructuringError("JSON response must be an object")
    return parsed


def _strip_code_fence(text: str) -> str:
    match = _CODE_BLOCK.search(text)
    return match.group(1).strip() if match else text


def _slice_from_object_start(text: str) -> str:
    if text.startswith("{"):
        return text
    signature = _DOC_SIGNATURE.search(text)
    if signature is not None:
        return text[signature.start():]
    start = text.find("{")
    if start == -1:
        raise StructuringError("No JSON object found in response")
    return text[start:]


def _cut_at_matching_brace(text: str) -> str:
    depth = 0
    in_string = False
    escaped = False
    for index, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[: index + 1]
    raise StructuringError("Unterminated JSON object in response")
