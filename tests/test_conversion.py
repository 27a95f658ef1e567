"""Tests for HTML to Markdown conversion and readability extraction."""

from unittest.mock import MagicMock, patch

import pytest
from webmd.conversion.extractor import ContentExtractor
from webmd.conversion.markdown import HtmlToMarkdown
from webmd.conversion.postprocess import strip_junk_links
from webmd.conversion.preview import render_preview
from webmd.errors import ConversionError
from webmd.models.results import ExtractionReason

ARTICLE_HTML = """
<html>
<head><title>Understanding Widgets - Example Blog</title></head>
<body>
  <div class="sidebar"><a href="/">Home</a> <a href="/about">About</a></div>
  <div class="post">
    <h1>Understanding Widgets</h1>
    <p>Widgets are small components that do one thing well. This paragraph is long enough
    for the content scorer to treat it as real prose, with commas, clauses, and detail.</p>
    <p>A second paragraph explains how widgets are combined into larger systems, why the
    boundaries between them matter, and how to test each one on its own.</p>
    <p>The third paragraph closes the argument, noting that good widgets are boring,
    predictable, and easy to replace when requirements change.</p>
  </div>
</body>
</html>
"""


class TestHtmlToMarkdown:
    """Tests for HtmlToMarkdown."""

    def test_converts_headings(self):
        """Test heading conversion."""
        md = HtmlToMarkdown().convert("<h1>Title</h1><h2>Subtitle</h2>")
        assert "# Title" in md
        assert "## Subtitle" in md

    def test_converts_paragraphs(self):
        """Test paragraph conversion."""
        md = HtmlToMarkdown().convert("<p>First paragraph.</p><p>Second paragraph.</p>")
        assert "First paragraph." in md
        assert "Second paragraph." in md

    def test_converts_links_inline(self):
        """Test links are inline and not wrapped."""
        md = HtmlToMarkdown().convert('<p><a href="https://example.com">Example</a></p>')
        assert "[Example](https://example.com)" in md

    def test_resolves_relative_links(self):
        """Test relative links become absolute."""
        md = HtmlToMarkdown().convert('<p><a href="/docs">Docs</a></p>', "https://example.com/a/")
        assert "(https://example.com/docs)" in md

    def test_empty_href_stays_empty(self):
        """Test a link with no target is not resolved to the page URL."""
        md = HtmlToMarkdown().convert('<p><a href="">Home</a></p>', "https://example.com/page")
        assert "[Home]()" in md
        assert "https://example.com/page" not in md

    def test_no_line_wrapping(self):
        """Test long paragraphs stay on one line."""
        text = " ".join(["word"] * 100)
        md = HtmlToMarkdown().convert(f"<p>{text}</p>")
        assert text in md

    def test_cleans_excessive_whitespace(self):
        """Test blank line runs collapse and output ends with one newline."""
        md = HtmlToMarkdown().convert("<p>A</p><br><br><br><br><p>B</p>")
        assert "\n\n\n" not in md
        assert md.endswith("\n")
        assert not md.endswith("\n\n")

    def test_empty_document(self):
        """Test empty output is empty, not a lone newline."""
        assert HtmlToMarkdown().convert("") == ""

    def test_converter_failure_raises(self):
        """Test html2text failures surface as ConversionError."""
        with patch("html2text.HTML2Text.handle", side_effect=RuntimeError("bad markup")):
            with pytest.raises(ConversionError, match="bad markup"):
                HtmlToMarkdown().convert("<p>x</p>")


class TestContentExtractor:
    """Tests for ContentExtractor."""

    @pytest.fixture
    def fake_document(self):
        """Patch readability's Document with a configurable mock."""
        with patch("webmd.conversion.extractor.Document") as document_cls:
            document = MagicMock()
            document.short_title.return_value = "Title"
            document.author.return_value = "[no-author]"
            document.summary.return_value = "<div><p>Body text</p></div>"
            document_cls.return_value = document
            yield document_cls, document

    def test_empty_input_short_circuits(self):
        """Test empty HTML gives empty markdown without converting."""
        converter = MagicMock()
        extractor = ContentExtractor(converter=converter)

        for article in (False, True):
            outcome = extractor.extract("  \n", article=article)
            assert outcome.markdown == ""
            assert outcome.reason == ExtractionReason.EMPTY_INPUT
        converter.convert.assert_not_called()

    def test_full_page(self):
        """Test full-page mode converts the whole document."""
        outcome = ContentExtractor().extract("<h1>T</h1><p>B</p>")
        assert outcome.reason == ExtractionReason.FULL_PAGE
        assert outcome.markdown.startswith("# T")

    def test_dead_links_become_text(self):
        """Test empty and anchor targets end up as bare text while real links resolve."""
        html = '<p><a href="">Home</a> and <a href="#top">Top</a> <a href="/x">X</a></p>'
        md = strip_junk_links(ContentExtractor().full(html, url="https://example.com/page"))
        assert md == "Home and Top [X](https://example.com/x)\n"

    def test_article_composition(self, fake_document):
        """Test title, body and trailing newline."""
        outcome = ContentExtractor().extract("<html>...</html>", article=True)
        assert outcome.reason == ExtractionReason.ARTICLE
        assert outcome.markdown == "# Title\n\nBody text\n"

    def test_article_with_byline(self, fake_document):
        """Test the byline goes between title and body."""
        _, document = fake_document
        document.author.return_value = "Jane Doe"
        outcome = ContentExtractor().extract("<html>...</html>", article=True)
        assert outcome.markdown == "# Title\n\n*Jane Doe*\n\nBody text\n"

    def test_article_without_title(self, fake_document):
        """Test missing metadata is left out."""
        _, document = fake_document
        document.short_title.return_value = "[no-title]"
        outcome = ContentExtractor().extract("<html>...</html>", article=True)
        assert outcome.markdown == "Body text\n"

    def test_passes_url_to_readability(self, fake_document):
        """Test readability sees the source URL."""
        document_cls, _ = fake_document
        ContentExtractor().extract("<p>x</p>", url="https://example.com/post", article=True)
        document_cls.assert_called_once_with("<p>x</p>", url="https://example.com/post")

    def test_fallback_on_extraction_failure(self, fake_document):
        """Test a readability exception falls back to the full page."""
        document_cls, _ = fake_document
        document_cls.side_effect = ValueError("Document is empty")
        html = "<h1>Heading</h1><p>Text</p>"

        outcome = ContentExtractor().extract(html, article=True)
        assert outcome.reason == ExtractionReason.FALLBACK_EXTRACTION_FAILED
        assert outcome.markdown == ContentExtractor().full(html)

    def test_fallback_on_empty_root(self, fake_document):
        """Test an empty summary falls back to the full page."""
        _, document = fake_document
        document.summary.return_value = "   "
        html = "<h1>Heading</h1><p>Text</p>"

        outcome = ContentExtractor().extract(html, article=True)
        assert outcome.reason == ExtractionReason.FALLBACK_EMPTY_ROOT
        assert outcome.markdown == ContentExtractor().full(html)

    def test_fallback_on_empty_body(self, fake_document):
        """Test a summary that converts to nothing falls back to the full page."""
        _, document = fake_document
        document.summary.return_value = "<div><span></span></div>"
        html = "<h1>Heading</h1><p>Text</p>"

        outcome = ContentExtractor().extract(html, article=True)
        assert outcome.reason == ExtractionReason.FALLBACK_EMPTY_BODY
        assert outcome.markdown == ContentExtractor().full(html)

    def test_readability_returns_markdown(self, fake_document):
        """Test the string-returning readability() helper."""
        assert ContentExtractor().readability("<html>...</html>") == "# Title\n\nBody text\n"

    def test_real_article(self):
        """Test readability on a realistic page keeps the prose."""
        outcome = ContentExtractor().extract(ARTICLE_HTML, url="https://blog.example.com/widgets", article=True)
        assert "Widgets are small components" in outcome.markdown
        assert outcome.markdown.endswith("\n")

    def test_unstructured_input_matches_full(self):
        """Test readability finding no article gives exactly the full-page output."""
        html = "<div><p>a</p><div>b</div>"
        outcome = ContentExtractor().extract(html, article=True)
        assert outcome.reason.is_fallback
        assert outcome.markdown == ContentExtractor().full(html)
        assert outcome.markdown == "a\n\nb\n"


class TestPreview:
    """Tests for the HTML preview renderer."""

    def test_wraps_in_page(self):
        """Test the output is a full HTML document."""
        page = render_preview("# Hi\n")
        assert page.startswith("<!DOCTYPE html>")
        assert "<h1>Hi</h1>" in page
        assert page.endswith("</body></html>\n")

    def test_light_and_dark_styles(self):
        """Test the embedded stylesheet follows the color scheme preference."""
        page = render_preview("text")
        assert "<style>" in page
        assert "prefers-color-scheme: dark" in page

    def test_renders_tables(self):
        """Test GFM-style tables are rendered."""
        page = render_preview("| a | b |\n|---|---|\n| 1 | 2 |\n")
        assert "<table>" in page

    def test_escapes_raw_text(self):
        """Test inline code is escaped."""
        page = render_preview("`<script>`")
        assert "<code>&lt;script&gt;</code>" in page
