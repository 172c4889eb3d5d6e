import pytest

from docflow.classification.format_family import (
    FormatFamily,
    TextFlavor,
    benefits_from_restructuring,
    classify,
    file_extension,
    infer_audio_media_type,
    strip_extension,
    text_flavor,
)


class TestClassifyByMediaType:
    @pytest.mark.parametrize(
        ("media_type", "expected"),
        [
            ("application/pdf", FormatFamily.PDF),
            (
                "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
                FormatFamily.WORD,
            ),
            ("application/msword", FormatFamily.LEGACY_WORD),
            ("audio/mpeg", FormatFamily.AUDIO),
            ("image/png", FormatFamily.IMAGE),
            ("text/markdown", FormatFamily.TEXT),
            ("text/html", FormatFamily.TEXT),
            ("application/json", FormatFamily.TEXT),
            ("text/plain", FormatFamily.TEXT),
        ],
    )
    def test_media_type_rules(self, media_type: str, expected: FormatFamily) -> None:
        assert classify(media_type, "upload") is expected

    def test_media_type_is_case_insensitive(self) -> None:
        assert classify("Application/PDF", "scan") is FormatFamily.PDF

    def test_media_type_wins_over_extension(self) -> None:
        assert classify("audio/ogg", "notes.txt") is FormatFamily.AUDIO


class TestClassifyByExtension:
    @pytest.mark.parametrize(
        ("file_name", "expected"),
        [
            ("report.pdf", FormatFamily.PDF),
            ("brief.docx", FormatFamily.WORD),
            ("old.doc", FormatFamily.LEGACY_WORD),
            ("photo.JPG", FormatFamily.IMAGE),
            ("memo.m4a", FormatFamily.AUDIO),
            ("readme.md", FormatFamily.TEXT),
        ],
    )
    def test_generic_media_type_uses_extension(self, file_name: str, expected: FormatFamily) -> None:
        assert classify("application/octet-stream", file_name) is expected

    def test_missing_media_type_uses_extension(self) -> None:
        assert classify(None, "report.pdf") is FormatFamily.PDF
        assert classify("", "memo.mp3") is FormatFamily.AUDIO

    def test_unknown_media_type_falls_back_to_extension(self) -> None:
        assert classify("application/x-custom", "deck.pdf") is FormatFamily.PDF

    def test_unknown_everything_is_text(self) -> None:
        assert classify("application/x-custom", "data.bin") is FormatFamily.TEXT
        assert classify(None, None) is FormatFamily.TEXT


class TestFileNames:
    def test_file_extension(self) -> None:
        assert file_extension("Report.PDF") == ".pdf"
        assert file_extension("noext") == ""

    def test_strip_extension_removes_last_suffix_only(self) -> None:
        assert strip_extension("report.v2.pdf") == "report.v2"
        assert strip_extension("notes.txt") == "notes"

    def test_strip_extension_keeps_dotfiles_and_plain_names(self) -> None:
        assert strip_extension(".env") == ".env"
        assert strip_extension("README") == "README"
        assert strip_extension("") == ""


class TestTextFlavor:
    def test_markdown(self) -> None:
        assert text_flavor("text/markdown", "x") is TextFlavor.MARKDOWN
        assert text_flavor("text/plain", "notes.md") is TextFlavor.MARKDOWN

    def test_html(self) -> None:
        assert text_flavor("text/html", "x") is TextFlavor.HTML

    def test_plain(self) -> None:
        assert text_flavor("text/plain", "notes.txt") is TextFlavor.PLAIN


class TestRestructuring:
    def test_rich_families_benefit(self) -> None:
        for family in (
            FormatFamily.PDF,
            FormatFamily.WORD,
            FormatFamily.LEGACY_WORD,
            FormatFamily.AUDIO,
            FormatFamily.IMAGE,
        ):
            assert benefits_from_restructuring(family)

    def test_text_does_not(self) -> None:
        assert not benefits_from_restructuring(FormatFamily.TEXT)


class TestInferAudioMediaType:
    def test_extension_map(self) -> None:
        assert infer_audio_media_type("memo.mp3") == "audio/mpeg"
        assert infer_audio_media_type("memo.m4a") == "audio/mp4"
        assert infer_audio_media_type("memo.flac") == "audio/flac"

    def test_declared_audio_type_when_extension_unknown(self) -> None:
        assert infer_audio_media_type("memo", "audio/aac") == "audio/aac"

    def test_defaults_to_mpeg(self) -> None:
        assert infer_audio_media_type("memo", "application/octet-stream") == "audio/mpeg"
