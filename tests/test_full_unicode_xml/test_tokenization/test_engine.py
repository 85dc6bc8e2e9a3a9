"""Tests for the mode-stack transform engine."""

import io
import logging

import pytest

from full_unicode_xml.tokenization.engine import (
    TransformEngine,
    character_reference,
    decode_code_point,
)
from full_unicode_xml.tokenization.grammar import (
    Grammar,
    ParseMode,
    push,
    stop,
)

EMOJI = "\U0001F602"
EMOJI_PAIR = "\ud83d\ude02"
EMOJI_REF = "&#128514;"
OTHER_EMOJI = "\U0001F603"


def run_engine(text: str, chunk_size: int = 4096, grammar=None) -> str:
    """Transform text completely and return the output."""
    source = io.StringIO(text)
    if grammar is None:
        engine = TransformEngine(source.read, chunk_size=chunk_size)
    else:
        engine = TransformEngine(source.read, grammar=grammar, chunk_size=chunk_size)
    return engine.read(len(text) * 10 + 10)


class TestDecodeCodePoint:
    """Test code point decoding from character units."""

    def test_bmp_character(self):
        """Test a BMP character occupies one unit."""
        assert decode_code_point("ab") == (ord("a"), 1)

    def test_native_supplementary_character(self):
        """Test a Python supplementary character occupies one unit."""
        assert decode_code_point(EMOJI + "x") == (0x1F602, 1)

    def test_surrogate_pair(self):
        """Test a surrogate pair is combined into one code point."""
        assert decode_code_point(EMOJI_PAIR) == (0x1F602, 2)

    def test_lone_high_surrogate_at_end(self):
        """Test a high surrogate without successor decodes to itself."""
        assert decode_code_point("\ud83d") == (0xD83D, 1)

    def test_high_surrogate_followed_by_bmp(self):
        """Test a high surrogate followed by a non-surrogate stays single."""
        assert decode_code_point("\ud83dx") == (0xD83D, 1)

    def test_lone_low_surrogate(self):
        """Test a low surrogate decodes to itself."""
        assert decode_code_point("\ude02\ud83d") == (0xDE02, 1)

    def test_character_reference_format(self):
        """Test decimal reference formatting without leading zeros."""
        assert character_reference(0x10000) == "&#65536;"
        assert character_reference(0x1F602) == EMOJI_REF


class TestAttributeEscaping:
    """Test escaping inside attribute values."""

    @pytest.mark.parametrize("source,expected", [
        (f"<elem attr='{EMOJI}'/>", f"<elem attr='{EMOJI_REF}'/>"),
        (f'<elem attr="{EMOJI}"/>', f'<elem attr="{EMOJI_REF}"/>'),
        (f"<elem attr='{EMOJI_PAIR}'/>", f"<elem attr='{EMOJI_REF}'/>"),
        (
            f"<elem a='x{EMOJI}y{EMOJI}' b=\"{OTHER_EMOJI}\"/>",
            f"<elem a='x{EMOJI_REF}y{EMOJI_REF}' b=\"&#128515;\"/>",
        ),
    ])
    def test_supplementary_in_attribute_is_escaped(self, source, expected):
        """Test supplementary characters in quoted values become references."""
        assert run_engine(source) == expected

    def test_double_quote_inside_single_quoted_value(self):
        """Test the other quote character does not end an attribute value."""
        source = f"<e a='\"{EMOJI}\"'/>"
        assert run_engine(source) == f"<e a='\"{EMOJI_REF}\"'/>"

    def test_bmp_characters_in_attribute_are_unchanged(self):
        """Test non-supplementary characters in attributes pass through."""
        source = "<e a='\u00c4\u20ac\uffff'/>"
        assert run_engine(source) == source

    def test_lone_high_surrogate_in_attribute(self):
        """Test an unpaired high surrogate passes through unescaped."""
        source = '<elem attr="\ud83d"/>'
        assert run_engine(source) == source

    def test_lone_low_surrogate_in_attribute(self):
        """Test an unpaired low surrogate passes through unescaped."""
        source = '<elem attr="\ude02"/>'
        assert run_engine(source) == source

    def test_attlist_default_is_escaped(self):
        """Test attribute list defaults are treated as attribute values."""
        source = f"<!DOCTYPE name [<!ATTLIST name CDATA '{EMOJI}'>]><elem/>"
        expected = f"<!DOCTYPE name [<!ATTLIST name CDATA '{EMOJI_REF}'>]><elem/>"
        assert run_engine(source) == expected

    def test_attlist_default_with_double_quotes_is_escaped(self):
        """Test double-quoted attribute list defaults are escaped."""
        source = f'<!DOCTYPE name [<!ATTLIST name CDATA "{EMOJI}">]><elem/>'
        expected = f'<!DOCTYPE name [<!ATTLIST name CDATA "{EMOJI_REF}">]><elem/>'
        assert run_engine(source) == expected


class TestPassThrough:
    """Test constructs in which supplementary characters are kept."""

    @pytest.mark.parametrize("source", [
        f"<?{EMOJI}?><elem/>",
        f"<!--{EMOJI}--><elem/>",
        f"<!DOCTYPE {EMOJI}><elem/>",
        f"<!DOCTYPE <?{EMOJI}?>><elem/>",
        f"<!DOCTYPE <!--{EMOJI}-->><elem/>",
        f"<!DOCTYPE name [<!ELEMENT {EMOJI} EMPTY>]><elem/>",
        f"<!DOCTYPE name SYSTEM '{EMOJI}'><elem/>",
        f'<!DOCTYPE name SYSTEM "{EMOJI}"><elem/>',
        f"<elem>{EMOJI}</elem>",
        f"<elem>&{EMOJI};</elem>",
        f"<elem><![CDATA[{EMOJI}]]></elem>",
        f"<elem{EMOJI} attr='value'/>",
        f"<elem attr{EMOJI}='value'/>",
        f"<elem>{EMOJI_PAIR}</elem>",
    ])
    def test_supplementary_outside_attribute_is_unchanged(self, source):
        """Test supplementary characters outside attribute values pass through."""
        assert run_engine(source) == source

    def test_quotes_in_character_data_do_not_open_attributes(self):
        """Test quotes in text content are plain characters."""
        source = f"<e>it's {EMOJI}</e>"
        assert run_engine(source) == source

    def test_quotes_in_comment_do_not_open_attributes(self):
        """Test quotes inside comments are plain characters."""
        source = f"<!-- ' {EMOJI} ' --><e a='{EMOJI}'/>"
        assert run_engine(source) == f"<!-- ' {EMOJI} ' --><e a='{EMOJI_REF}'/>"

    def test_cdata_containing_markup(self):
        """Test markup-like text inside CDATA does not change the mode."""
        source = f"<e><![CDATA[<x a='{EMOJI}'>]]></e>"
        assert run_engine(source) == source

    def test_empty_input(self):
        """Test empty input produces empty output."""
        assert run_engine("") == ""

    def test_ascii_document_is_identity(self):
        """Test an ASCII document is returned unchanged."""
        source = (
            "<?xml version='1.0'?><!DOCTYPE r [<!ENTITY e 'v'>]>"
            "<r a=\"1\" b='2'><!-- c --><![CDATA[<d>]]>&e;text</r>"
        )
        assert run_engine(source) == source


class TestCombinedDocument:
    """Test a document combining every construct."""

    def test_combined(self):
        """Test escaping decisions across nested contexts."""
        e, f = EMOJI, OTHER_EMOJI
        source = (
            f"<?{e}?>"
            f"<!DOCTYPE {e} SYSTEM '{e}' ["
            f"<!ATTLIST {e} CDATA \"{e}\">"
            f"<?{e}?>"
            f"<!--{e}-->"
            f"<!ELEMENT {e} EMPTY>"
            "]>"
            f"<!--{e}-->"
            f"<{e} {e}=\"{e}\" {f}='{e}'>"
            f"&{e};"
            f"{e}"
            f"<![CDATA[{e}]]>"
            f"<{e} {f}='{e}' {e}=\"{e}\"/>"
            f"</{e}>"
        )
        expected = (
            f"<?{e}?>"
            f"<!DOCTYPE {e} SYSTEM '{e}' ["
            f"<!ATTLIST {e} CDATA \"{EMOJI_REF}\">"
            f"<?{e}?>"
            f"<!--{e}-->"
            f"<!ELEMENT {e} EMPTY>"
            "]>"
            f"<!--{e}-->"
            f"<{e} {e}=\"{EMOJI_REF}\" {f}='{EMOJI_REF}'>"
            f"&{e};"
            f"{e}"
            f"<![CDATA[{e}]]>"
            f"<{e} {f}='{EMOJI_REF}' {e}=\"{EMOJI_REF}\"/>"
            f"</{e}>"
        )
        assert run_engine(source) == expected

    @pytest.mark.parametrize("chunk_size", [1, 2, 3, 7, 4096])
    def test_chunk_size_does_not_change_output(self, chunk_size):
        """Test refill granularity is invisible in the output."""
        source = f"<!DOCTYPE r [<!ATTLIST r a CDATA '{EMOJI_PAIR}'>]><r a=\"{EMOJI_PAIR}\">{EMOJI_PAIR}</r>"
        expected = f"<!DOCTYPE r [<!ATTLIST r a CDATA '{EMOJI_REF}'>]><r a=\"{EMOJI_REF}\">{EMOJI_PAIR}</r>"
        assert run_engine(source, chunk_size=chunk_size) == expected


class TestModeStack:
    """Test mode stack bookkeeping."""

    def test_initial_stack(self):
        """Test the stack starts with only the top-level mode."""
        engine = TransformEngine(io.StringIO("").read)

        assert engine.modes == (ParseMode.TOP_LEVEL,)
        assert engine.depth == 1

    def test_stack_inside_attribute(self):
        """Test the stack while positioned inside an attribute value."""
        # Arrange
        engine = TransformEngine(io.StringIO("<a b='c'/>").read)

        # Act
        for _ in range(5):
            engine.transform_next()
        engine.transform_next()

        # Assert
        assert engine.modes == (
            ParseMode.TOP_LEVEL, ParseMode.TAG, ParseMode.SINGLE_QUOTE_ATTRIBUTE
        )
        assert engine.mode is ParseMode.SINGLE_QUOTE_ATTRIBUTE

    def test_stack_returns_to_top_level(self):
        """Test every opened unit is closed after a balanced document."""
        engine = TransformEngine(io.StringIO("<!DOCTYPE r [<!ATTLIST r a CDATA 'x'>]><r a='1'/>").read)

        engine.read(1000)

        assert engine.modes == (ParseMode.TOP_LEVEL,)
        assert engine.statistics.max_depth == 4

    def test_transform_next_at_end(self):
        """Test transform_next reports exhaustion."""
        engine = TransformEngine(io.StringIO("a").read)

        assert engine.transform_next() is True
        assert engine.transform_next() is False
        assert engine.read_char() == "a"
        assert engine.read_char() is None

    def test_read_char_sequence(self):
        """Test read_char delivers an escape sequence one character at a time."""
        engine = TransformEngine(io.StringIO(f"<a b='{EMOJI}'/>").read)

        chars = []
        char = engine.read_char()
        while char is not None:
            chars.append(char)
            char = engine.read_char()

        assert "".join(chars) == f"<a b='{EMOJI_REF}'/>"

    def test_unclosed_units_are_not_an_error(self):
        """Test truncated input ends the stream without failing."""
        source = f"<a b='{EMOJI}"
        engine = TransformEngine(io.StringIO(source).read)

        assert engine.read(100) == f"<a b='{EMOJI_REF}"
        assert engine.mode is ParseMode.SINGLE_QUOTE_ATTRIBUTE

    def test_partial_indicator_at_end(self):
        """Test a truncated indicator is emitted as plain characters."""
        assert run_engine("<!-") == "<!-"
        assert run_engine("<![CDA") == "<![CDA"


class TestStatistics:
    """Test engine statistics."""

    def test_counts(self):
        """Test counters after a small document."""
        source = f"<a b='{EMOJI}'>{EMOJI}</a>"
        engine = TransformEngine(io.StringIO(source).read)

        output = engine.read(100)
        stats = engine.statistics

        assert stats.characters_read == len(source)
        assert stats.characters_emitted == len(output)
        assert stats.code_points_escaped == 1
        assert stats.transitions_matched == 6
        assert stats.ignored_pops == 0


class TestUnbalancedGrammar:
    """Test the ignored-pop policy with a grammar that can underflow."""

    def make_grammar(self) -> Grammar:
        return Grammar(
            initial=ParseMode.TOP_LEVEL,
            transitions={
                ParseMode.TOP_LEVEL: [push("<", ParseMode.TAG), stop(">")],
                ParseMode.TAG: [stop(">")],
            },
        )

    def test_extra_pop_is_ignored(self, caplog):
        """Test a stop indicator at top level is emitted and ignored."""
        # Arrange
        engine = TransformEngine(io.StringIO("<a>>b").read, grammar=self.make_grammar())

        # Act
        with caplog.at_level(logging.WARNING):
            output = engine.read(100)

        # Assert
        assert output == "<a>>b"
        assert engine.modes == (ParseMode.TOP_LEVEL,)
        assert engine.statistics.ignored_pops == 1
        assert "Ignoring stop indicator" in caplog.text
