"""Unit tests for text normalization."""

from casegraph.services.normalization.text_normalizer import normalize_text


class TestNormalizeText:
    """Whitespace, quote and OCR clean-up."""

    def test_empty_and_none_return_empty_string(self):
        """Test that missing text normalizes to an empty string."""
        assert normalize_text(None) == ""
        assert normalize_text("") == ""

    def test_line_endings_unified(self):
        """Test CRLF and CR line endings become LF."""
        assert normalize_text("one\r\ntwo\rthree") == "one\ntwo\nthree"

    def test_blank_line_runs_collapsed(self):
        """Test that three or more newlines collapse to one blank line."""
        assert normalize_text("first\n\n\n\n\nsecond") == "first\n\nsecond"

    def test_horizontal_whitespace_collapsed_and_trailing_removed(self):
        """Test runs of spaces and tabs collapse and trailing spaces go."""
        assert normalize_text("a  \t b   \nc") == "a b\nc"

    def test_typographic_quotes_replaced(self):
        """Test curly quotes become straight quotes."""
        assert normalize_text("“Hi,” she said. It’s late.") == "\"Hi,\" she said. It's late."

    def test_ocr_digit_confusions_fixed(self):
        """Test common OCR confusions between letters and digits."""
        assert normalize_text("Call 555o1234") == "Call 555-1234"
        assert normalize_text("Room l23") == "Room 123"
        assert normalize_text("Unit 20l") == "Unit 201"

    def test_words_with_o_and_l_untouched(self):
        """Test that ordinary words are not rewritten."""
        text = "Hello world, all good."
        assert normalize_text(text) == text

    def test_outer_whitespace_stripped(self):
        """Test leading and trailing whitespace is removed."""
        assert normalize_text("  \n\ntext\n\n  ") == "text"
