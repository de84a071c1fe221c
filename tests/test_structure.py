"""
Unit tests for structure classification and page furniture detection.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def make_stats(body=12.0, page_count=1, page_height=792.0):
    from pdf2txt.utils.stats import DocumentStatistics

    return DocumentStatistics(
        body_height=body,
        header_threshold=body * 1.15,
        sub_header_threshold=body * 1.4,
        line_tolerance=max(2.0, body * 0.25),
        page_count=page_count,
        page_heights={p: page_height for p in range(1, page_count + 1)}
    )


def record(text, y, height=12.0, page=1):
    from pdf2txt.utils.lines import LineRecord

    return LineRecord(page=page, y=y, text=text, max_fragment_height=height)


class TestClassifyLine:
    """Test per-line heading and list classification."""

    def test_heading_levels(self):
        """Test size thresholds map to ## and ###."""
        from pdf2txt.utils.structure import classify_line

        stats = make_stats()

        assert classify_line("Title", 24, stats).render() == "## Title"
        assert classify_line("Title", 16.8, stats).render() == "## Title"
        assert classify_line("Section", 14, stats).render() == "### Section"
        assert classify_line("Body", 13, stats).render() == "Body"

    def test_bullets_normalized(self):
        """Test bullet glyphs become a dash marker."""
        from pdf2txt.utils.structure import classify_line

        stats = make_stats()

        for text in ("• item", "●item", "-item", "- item"):
            line = classify_line(text, 12, stats)
            assert line.text == "- item"
            assert line.is_list

    def test_list_overrides_heading(self):
        """Test a large list line is never a heading."""
        from pdf2txt.utils.structure import classify_line

        stats = make_stats()

        ordered = classify_line("1. Introduction", 24, stats)
        assert ordered.level == 0
        assert ordered.is_list
        assert ordered.render() == "1. Introduction"

        bullet = classify_line("• Big bullet", 24, stats)
        assert not bullet.is_heading
        assert bullet.render() == "- Big bullet"

    def test_plain_body(self):
        """Test ordinary text is neither heading nor list."""
        from pdf2txt.utils.structure import classify_line

        line = classify_line("Just text", 12, make_stats())
        assert not line.is_list
        assert not line.is_heading
        assert line.prefix == ""


class TestPageMarkerSignature:
    """Test the furniture signature normalization."""

    def test_numbers_collapse(self):
        """Test different page numbers share one signature."""
        from pdf2txt.utils.structure import normalize_page_marker

        assert normalize_page_marker("9") == normalize_page_marker("10") == "0"
        assert normalize_page_marker("Page 9 of 12") == normalize_page_marker("Page 10 of 12")

    def test_punctuation_and_case(self):
        """Test punctuation, symbols, case and whitespace are ignored."""
        from pdf2txt.utils.structure import normalize_page_marker

        assert normalize_page_marker("- 3 -") == "0"
        assert normalize_page_marker("ACME Report | 2024") == normalize_page_marker("acme report  2025")

    def test_symbols_only(self):
        """Test a line of symbols has an empty signature."""
        from pdf2txt.utils.structure import normalize_page_marker

        assert normalize_page_marker("— * —") == ""


class TestPageFurniture:
    """Test cross-page furniture detection."""

    @pytest.fixture
    def ten_page_records(self):
        """Body text mid-page plus a small page number in the bottom band."""
        records = []
        for page in range(1, 11):
            records.append(record(f"Body paragraph on page {page}.", 100, page=page))
            records.append(record("More body text here.", 116, page=page))
            records.append(record(str(page), 760, height=9, page=page))
        return records

    def test_page_numbers_detected(self, ten_page_records):
        """Test every page number line is flagged and nothing else."""
        from pdf2txt.utils.structure import detect_page_furniture

        furniture = detect_page_furniture(ten_page_records, make_stats(page_count=10))

        flagged = {ten_page_records[i].text for i in furniture}
        assert len(furniture) == 10
        assert flagged == {str(p) for p in range(1, 11)}

    def test_running_header_detected(self):
        """Test a recurring small top-band header is furniture."""
        from pdf2txt.utils.structure import detect_page_furniture

        records = []
        for page in range(1, 4):
            records.append(record("Annual Report 2024", 30, height=9, page=page))
            records.append(record("Body.", 200, page=page))

        furniture = detect_page_furniture(records, make_stats(page_count=3))
        assert furniture == {0, 2, 4}

    def test_body_size_lines_kept(self):
        """Test lines at body size are never furniture."""
        from pdf2txt.utils.structure import detect_page_furniture

        records = [record(str(p), 760, height=12, page=p) for p in range(1, 5)]
        assert detect_page_furniture(records, make_stats(page_count=4)) == set()

    def test_single_occurrence_kept(self):
        """Test a line on one page only is not furniture."""
        from pdf2txt.utils.structure import detect_page_furniture

        records = [record("Footnote", 760, height=9, page=1), record("Body", 300, page=2)]
        assert detect_page_furniture(records, make_stats(page_count=2)) == set()

    def test_minimum_repeat_scales_with_pages(self):
        """Test a line on 3 of 10 pages is below the 40% threshold."""
        from pdf2txt.utils.structure import detect_page_furniture

        records = [record(str(p), 760, height=9, page=p) for p in (1, 2, 3)]
        assert detect_page_furniture(records, make_stats(page_count=10)) == set()

    def test_small_drift_tolerated(self):
        """Test slight vertical drift stays in the same bucket."""
        from pdf2txt.utils.structure import detect_page_furniture

        records = [
            record("1", 760.0, height=9, page=1),
            record("2", 761.5, height=9, page=2),
        ]
        assert detect_page_furniture(records, make_stats(page_count=2)) == {0, 1}


class TestStructureClassifier:
    """Test document-level assembly of output lines."""

    def test_chapter_scenario(self):
        """Test a large heading followed by body text."""
        from pdf2txt.utils.structure import StructureClassifier

        records = [record("Chapter 1", 100, height=24), record("This is body text.", 140)]
        result = StructureClassifier(make_stats()).classify(records)

        assert result.lines == ["## Chapter 1", "", "This is body text."]
        assert result.headings == {2: 1}
        assert result.paragraph_breaks == 1
        assert result.rules == 0

    def test_no_break_for_normal_spacing(self):
        """Test line spacing below 1.5x body does not break paragraphs."""
        from pdf2txt.utils.structure import StructureClassifier

        records = [record("first line", 100), record("second line", 114)]
        result = StructureClassifier(make_stats()).classify(records)

        assert result.lines == ["first line", "second line"]

    def test_rule_before_distant_heading(self):
        """Test a section rule precedes a heading after a large gap."""
        from pdf2txt.utils.structure import StructureClassifier

        records = [record("Intro text.", 100), record("Section", 140, height=24)]
        result = StructureClassifier(make_stats()).classify(records)

        assert result.lines == ["Intro text.", "", "---", "", "## Section"]
        assert result.rules == 1

    def test_no_rule_for_first_line(self):
        """Test no rule is emitted before any output."""
        from pdf2txt.utils.structure import StructureClassifier

        result = StructureClassifier(make_stats()).classify([record("Title", 100, height=24)])
        assert result.lines == ["## Title"]

    def test_no_rule_across_pages(self):
        """Test gaps are not measured across a page boundary."""
        from pdf2txt.utils.structure import StructureClassifier

        records = [record("End of page.", 700, page=1), record("Heading", 80, height=24, page=2)]
        result = StructureClassifier(make_stats(page_count=2)).classify(records)

        assert result.lines == ["End of page.", "## Heading"]

    def test_no_rule_for_distant_body_text(self):
        """Test rules are only inserted before headings."""
        from pdf2txt.utils.structure import StructureClassifier

        records = [record("One.", 100), record("Two.", 160)]
        result = StructureClassifier(make_stats()).classify(records)

        assert result.lines == ["One.", "", "Two."]
        assert result.rules == 0

    def test_rule_gap_resets_dense_run(self):
        """Test tight lines before a distant heading do not block its rule."""
        from pdf2txt.utils.structure import StructureClassifier

        records = [record("a", 100), record("b", 110), record("c", 120), record("Head", 145, height=24)]
        result = StructureClassifier(make_stats()).classify(records)

        assert result.lines == ["a", "b", "c", "", "---", "", "## Head"]

    def test_dense_run_cutoff(self):
        """Test a dense run of three blocks the rule when dense gaps reach rule gaps."""
        from pdf2txt.config import StructureConfig
        from pdf2txt.utils.structure import StructureClassifier

        records = [record("a", 100), record("b", 110), record("c", 120), record("Head", 145, height=24)]
        config = StructureConfig(dense_gap_ratio=2.5)
        result = StructureClassifier(make_stats(), config).classify(records)

        assert result.lines == ["a", "b", "c", "", "## Head"]
        assert result.rules == 0

    def test_list_items_counted(self):
        """Test list lines are normalized and counted."""
        from pdf2txt.utils.structure import StructureClassifier

        records = [record("• first", 100), record("• second", 110), record("3. third", 120)]
        result = StructureClassifier(make_stats()).classify(records)

        assert result.lines == ["- first", "- second", "3. third"]
        assert result.list_items == 3

    def test_empty_lines_skipped(self):
        """Test empty line text produces no output line."""
        from pdf2txt.utils.structure import StructureClassifier

        records = [record("a", 100), record("", 110), record("b", 120)]
        result = StructureClassifier(make_stats()).classify(records)

        assert result.lines == ["a", "b"]

    def test_furniture_removed(self):
        """Test page numbers never reach the output."""
        from pdf2txt.utils.structure import StructureClassifier

        records = []
        for page in range(1, 11):
            records.append(record(f"Body paragraph on page {page}.", 100, page=page))
            records.append(record(str(page), 760, height=9, page=page))

        result = StructureClassifier(make_stats(page_count=10)).classify(records)

        assert len(result.furniture) == 10
        assert result.lines == [f"Body paragraph on page {p}." for p in range(1, 11)]
        assert result.to_dict()["suppressed_lines"] == 10


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
