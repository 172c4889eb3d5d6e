import pytest

from docflow.structuring.exceptions import StructuringError
from docflow.structuring.json_repair import extract_json_object

DOC = '{"type":"doc","content":[{"type":"paragraph","content":[{"type":"text","text":"Hi"}]}]}'


class TestExtractJsonObject:
    def test_plain_json(self) -> None:
        assert extract_json_object(DOC)["type"] == "doc"

    def test_code_fence_with_trailing_prose(self) -> None:
        raw = f"```json\n{DOC}\n```\nLet me know if you need anything else!"
        assert extract_json_object(raw) == extract_json_object(DOC)

    def test_fence_without_language(self) -> None:
        assert extract_json_object(f"```\n{DOC}\n```")["type"] == "doc"

    def test_leading_prose(self) -> None:
        raw = f"Here is the document: {DOC}"
        assert extract_json_object(raw) == extract_json_object(DOC)

    def test_signature_with_whitespace(self) -> None:
        raw = 'Sure. { "type" : "doc", "content": []} Done.'
        assert extract_json_object(raw) == {"type": "doc", "content": []}

    def test_trailing_prose_without_fence(self) -> None:
        raw = DOC + "\n\nI kept every line of the original."
        assert extract_json_object(raw) == extract_json_object(DOC)

    def test_braces_inside_strings(self) -> None:
        raw = '{"type":"doc","content":[{"type":"paragraph","content":[{"type":"text","text":"a } b { c \\" }"}]}]} tail'
        parsed = extract_json_object(raw)
        assert parsed["content"][0]["content"][0]["text"] == 'a } b { c " }'

    def test_no_object_raises(self) -> None:
        with pytest.raises(StructuringError, match="No JSON object"):
            extract_json_object("I cannot help with that.")

    def test_unterminated_object_raises(self) -> None:
        with pytest.raises(StructuringError, match="Unterminated"):
            extract_json_object('{"type":"doc","content":[')

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(StructuringError, match="Invalid JSON"):
            extract_json_object("{type: doc}")

    def test_excessive_nesting_raises(self) -> None:
        raw = '{"type": "doc", "content": ' + "[" * 100000 + "]" * 100000 + "}"
        with pytest.raises(StructuringError, match="Invalid JSON"):
            extract_json_object(raw)
