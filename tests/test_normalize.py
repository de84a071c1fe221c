"""
Unit tests for text normalization and document framing.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

FOOTER = (
    "---\n\n"
    "File converted using pdf2txt\n"
    "https://github.com/SPACESODA/pdf2txt\n\n"
)


class TestHyphenation:
    """Test hyphenated line-break repair."""

    def test_merge(self):
        """Test a word split across lines is rejoined."""
        from pdf2txt.utils.normalize import merge_hyphenation

        assert merge_hyphenation("exam-\nple") == "example"

    def test_chained_breaks(self):
        """Test consecutive breaks merge in one pass."""
        from pdf2txt.utils.normalize import merge_hyphenation

        assert merge_hyphenation("a-\nb-\nc") == "abc"

    def test_idempotent(self):
        """Test merging twice equals merging once."""
        from pdf2txt.utils.normalize import merge_hyphenation

        text = "co-\noperation and re-\nentry, x-\n- item, well-known"
        once = merge_hyphenation(text)
        assert merge_hyphenation(once) == once

    def test_non_word_neighbours_kept(self):
        """Test dashes next to punctuation or list markers stay."""
        from pdf2txt.utils.normalize import merge_hyphenation

        assert merge_hyphenation("done -\nnext") == "done -\nnext"
        assert merge_hyphenation("word-\n- item") == "word-\n- item"

    def test_unicode_letters(self):
        """Test non-Latin letters are merged too."""
        from pdf2txt.utils.normalize import merge_hyphenation

        assert merge_hyphenation("Stra-\nße") == "Straße"


class TestHardWraps:
    """Test wrapped line merging."""

    def test_wrapped_sentence_merged(self):
        """Test a sentence broken by page width is rejoined."""
        from pdf2txt.utils.normalize import merge_hard_wraps

        text = "This sentence was\nwrapped by the page\nwidth."
        assert merge_hard_wraps(text) == "This sentence was wrapped by the page width."

    def test_never_across_blank(self):
        """Test blank lines keep paragraphs apart."""
        from pdf2txt.utils.normalize import merge_hard_wraps

        assert merge_hard_wraps("first para\n\nsecond para") == "first para\n\nsecond para"

    def test_never_across_heading(self):
        """Test headings stay on their own line."""
        from pdf2txt.utils.normalize import merge_hard_wraps

        assert merge_hard_wraps("## Title\nbody text") == "## Title\nbody text"
        assert merge_hard_wraps("body text\n### Next") == "body text\n### Next"

    def test_never_across_list_items(self):
        """Test list items are not merged with neighbours."""
        from pdf2txt.utils.normalize import merge_hard_wraps

        text = "intro\n- one\n- two\ncontinued"
        assert merge_hard_wraps(text) == text
        assert merge_hard_wraps("1. first\n2. second") == "1. first\n2. second"

    def test_sentence_end_flushes(self):
        """Test terminal punctuation ends the paragraph line."""
        from pdf2txt.utils.normalize import merge_hard_wraps

        assert merge_hard_wraps("Done.\nNext line") == "Done.\nNext line"
        assert merge_hard_wraps("終わり。\n次") == "終わり。\n次"

    def test_trailing_dash_continues(self):
        """Test a line ending in a dash is continued."""
        from pdf2txt.utils.normalize import merge_hard_wraps

        assert merge_hard_wraps("and then —\nmore") == "and then — more"

    def test_cancelled(self):
        """Test a cancelled token stops the merge."""
        from pdf2txt.utils.normalize import merge_hard_wraps
        from pdf2txt.utils.cancel import CANCELLED, CancellationToken

        token = CancellationToken()
        token.cancel()
        text = "\n".join(["line"] * 10)

        assert merge_hard_wraps(text, token, check_interval=2) is CANCELLED


class TestJoinWrappedLines:
    """Test the continuation joiner."""

    def test_plain_join(self):
        """Test plain continuations join with a space."""
        from pdf2txt.utils.normalize import join_wrapped_lines

        assert join_wrapped_lines("plain", "text") == "plain text"

    def test_list_continuation(self):
        """Test list items continue with a single space."""
        from pdf2txt.utils.normalize import join_wrapped_lines

        assert join_wrapped_lines("- item", "  more") == "- item more"

    def test_list_continuation_cjk(self):
        """Test CJK list continuations join without a space."""
        from pdf2txt.utils.normalize import join_wrapped_lines

        assert join_wrapped_lines("- 東京", "大学") == "- 東京大学"


class TestCollapse:
    """Test blank line collapse."""

    def test_collapse(self):
        """Test blank runs become one separator."""
        from pdf2txt.utils.normalize import collapse_blank_lines

        assert collapse_blank_lines("a\n\n\n\nb") == "a\n\nb"
        assert collapse_blank_lines("a\n\nb") == "a\n\nb"

    def test_idempotent(self):
        """Test collapsing twice equals collapsing once."""
        from pdf2txt.utils.normalize import collapse_blank_lines

        text = "a\n\n\n\n\nb\n\n\nc\n"
        once = collapse_blank_lines(text)
        assert collapse_blank_lines(once) == once


class TestNormalizeText:
    """Test the full normalization sequence."""

    def test_chapter_body(self):
        """Test headings, blank lines and body text survive."""
        from pdf2txt.utils.normalize import normalize_text

        lines = ["## Chapter 1", "", "This is body text."]
        assert normalize_text(lines) == "## Chapter 1\n\nThis is body text."

    def test_hyphen_then_wrap(self):
        """Test hyphen repair runs before the wrap merge."""
        from pdf2txt.utils.normalize import normalize_text

        lines = ["The exam-", "ple shows a", "wrapped line.", "", "", "", "Next."]
        assert normalize_text(lines) == "The example shows a wrapped line.\n\nNext."

    def test_pre_cancelled(self):
        """Test a cancelled token returns the cancelled variant."""
        from pdf2txt.utils.normalize import normalize_text
        from pdf2txt.utils.cancel import CANCELLED, CancellationToken

        token = CancellationToken()
        token.cancel()
        assert normalize_text(["a"], token) is CANCELLED


class TestFraming:
    """Test title and footer framing."""

    def test_title_from_name(self):
        """Test only the last extension is stripped."""
        from pdf2txt.utils.normalize import title_from_name

        assert title_from_name("scan.pdf") == "scan"
        assert title_from_name("archive.v2.pdf") == "archive.v2"
        assert title_from_name("/tmp/docs/report.pdf") == "report"
        assert title_from_name("README") == "README"

    def test_frame_document(self):
        """Test the title, separator and footer layout."""
        from pdf2txt.utils.normalize import frame_document

        text = frame_document("## Chapter 1\n\nThis is body text.", "test")
        assert text == "# test\n\n## Chapter 1\n\nThis is body text.\n\n" + FOOTER

    def test_frame_keeps_single_separator(self):
        """Test a body already ending in a blank line is not padded."""
        from pdf2txt.utils.normalize import frame_document

        assert frame_document("Body.\n\n", "t") == "# t\n\nBody.\n\n" + FOOTER

    def test_empty_document(self):
        """Test the placeholder for documents without text."""
        from pdf2txt.utils.normalize import empty_document

        assert empty_document("scan") == (
            "# scan\n\n[No text detected. This may be an image-only PDF.]"
        )

    def test_custom_footer(self):
        """Test the footer comes from the output configuration."""
        from pdf2txt.config import OutputConfig
        from pdf2txt.utils.normalize import frame_document

        config = OutputConfig(footer_lines=["Converted"])
        assert frame_document("Body.", "t", config) == "# t\n\nBody.\n\n---\n\nConverted\n\n"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
