from __future__ import annotations

import pytest

from protoschema import Location, ParseError
from protoschema.reader import SyntaxReader, parse_int


def _reader(src: str) -> SyntaxReader:
    return SyntaxReader(src, Location(file="r.proto"))


@pytest.mark.parametrize(
    ("text", "value"),
    [("0", 0), ("42", 42), ("-7", -7), ("0x1F", 31), ("0X10", 16), ("010", 8), ("-0x10", -16)],
)
def test_parse_int(text: str, value: int) -> None:
    assert parse_int(text) == value


@pytest.mark.parametrize("text", ["", "abc", "1_000", "0x", "09", "--5", "-+5", "0x-5", "0x+1", "0-7", " 5"])
def test_parse_int_rejects(text: str) -> None:
    with pytest.raises(ValueError):
        parse_int(text)


def test_words_names_and_ints() -> None:
    r = _reader("  foo.bar_1 (custom.opt) [ext.name] 0x20 ")
    assert r.read_word() == "foo.bar_1"
    assert r.read_name() == "custom.opt"
    assert r.read_name() == "ext.name"
    assert r.read_int() == 32
    r.read_documentation()
    assert r.exhausted()


def test_form_feed_and_vertical_tab_are_whitespace() -> None:
    r = _reader("a\f\vb\x0c")
    assert r.read_word() == "a"
    assert r.read_word() == "b"
    r.read_documentation()
    assert r.exhausted()


def test_read_int_error_has_location() -> None:
    r = _reader("\n   nope")
    with pytest.raises(ParseError) as e:
        r.read_int()
    assert (e.value.location.line, e.value.location.column) == (2, 4)
    assert e.value.message == "expected an integer but was nope"


def test_read_word_requires_a_word() -> None:
    with pytest.raises(ParseError) as e:
        _reader("  ;").read_word()
    assert e.value.message == "expected a word"


def test_quoted_strings() -> None:
    r = _reader(r'''"a\"b"; 'it\'s'; "\x41\101\n\t"; "con" 'cat'; ""''')
    assert r.read_quoted_string() == 'a"b'
    r.require(";")
    assert r.read_quoted_string() == "it's"
    r.require(";")
    assert r.read_quoted_string() == "AA\n\t"
    r.require(";")
    # Adjacent literals are concatenated.
    assert r.read_quoted_string() == "concat"
    r.require(";")
    assert r.read_string() == ""


def test_read_string_accepts_bare_word() -> None:
    assert _reader("  public ").read_string() == "public"


@pytest.mark.parametrize("src", ['"abc', '"abc\n"', '"abc\\'])
def test_unterminated_string(src: str) -> None:
    with pytest.raises(ParseError) as e:
        _reader(src).read_quoted_string()
    assert "unterminated string" in str(e.value)


def test_chars() -> None:
    r = _reader(" { /* skipped */ ; ")
    assert r.peek_char() == "{"
    assert r.accept("{")
    assert not r.accept("}")
    assert r.read_char() == ";"
    r.push_back(";")
    r.require(";")
    with pytest.raises(ParseError) as e:
        r.peek_char()
    assert e.value.message == "unexpected end of file"


def test_require_reports_found_char() -> None:
    with pytest.raises(ParseError) as e:
        _reader("x").require(";")
    assert e.value.message == "expected ';' but was 'x'"


def test_data_types() -> None:
    r = _reader("int32 map < string , .foo.Bar > map<int32, map<string, bytes>>")
    assert r.read_data_type() == "int32"
    assert r.read_data_type() == "map<string, .foo.Bar>"
    word = r.read_word()
    assert r.read_data_type(word) == "map<int32, map<string, bytes>>"


def test_map_without_angle_is_plain_type() -> None:
    assert _reader("map value").read_data_type() == "map"


def test_documentation_line_and_block_comments() -> None:
    r = _reader(
        """
        // First line.
        //   indented
        /*
         * Block body.
         */
        /* inline */
        message
        """
    )
    assert r.read_documentation() == "First line.\n  indented\nBlock body.\ninline"
    assert r.read_word() == "message"


def test_documentation_empty() -> None:
    r = _reader("   word")
    assert r.read_documentation() == ""
    assert r.location().column == 4


def test_unterminated_comment() -> None:
    with pytest.raises(ParseError) as e:
        _reader("/* never closed").read_documentation()
    assert "unterminated comment" in str(e.value)


def test_lone_slash() -> None:
    with pytest.raises(ParseError) as e:
        _reader("/ x").read_documentation()
    assert "unexpected '/'" in str(e.value)


def test_trailing_documentation() -> None:
    r = _reader("; // trailing  \nnext")
    r.require(";")
    assert r.try_append_trailing_documentation("lead") == "lead\ntrailing"
    assert r.location().line == 2
    assert r.read_word() == "next"


def test_trailing_documentation_star() -> None:
    r = _reader(";   /* star */   \nnext")
    r.require(";")
    assert r.try_append_trailing_documentation("") == "star"
    assert r.read_word() == "next"


def test_trailing_documentation_absent() -> None:
    r = _reader(";\n// not trailing\nnext")
    r.require(";")
    assert r.try_append_trailing_documentation("doc") == "doc"
    assert r.read_documentation() == "not trailing"


def test_trailing_documentation_at_eof() -> None:
    r = _reader(";")
    r.require(";")
    assert r.try_append_trailing_documentation("doc") == "doc"


def test_nothing_may_follow_trailing_star_comment() -> None:
    r = _reader("; /* star */ int32 x = 1;")
    r.require(";")
    with pytest.raises(ParseError) as e:
        r.try_append_trailing_documentation("")
    assert "no syntax may follow trailing comment" in str(e.value)


def test_location_tracks_lines_and_columns() -> None:
    r = _reader("a\n  b\n\n    c")
    r.read_word()
    r.read_word()
    r.peek_char()
    loc = r.location()
    assert (loc.file, loc.line, loc.column) == ("r.proto", 4, 5)
    assert loc.format() == "r.proto:4:5"
