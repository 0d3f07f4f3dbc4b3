from __future__ import annotations

import string
from dataclasses import dataclass

from .errors import ParseError
from .location import Location


_WORD_CHARS = frozenset(string.ascii_letters + string.digits + "_-.")
_QUOTES = "\"'"
_DIGITS = {8: "01234567", 10: string.digits, 16: string.hexdigits}
_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
}


def parse_int(text: str) -> int:
    """Parse a decimal, `0x` hex or leading-zero octal integer, optionally negative."""
    sign, digits = (-1, text[1:]) if text.startswith("-") else (1, text)
    if digits[:2] in ("0x", "0X"):
        radix, digits = 16, digits[2:]
    elif len(digits) > 1 and digits.startswith("0"):
        radix, digits = 8, digits[1:]
    else:
        radix = 10
    # int() would also take a second sign, underscores and padding.
    if not digits or any(c not in _DIGITS[radix] for c in digits):
        raise ValueError(f"invalid integer: {text!r}")
    return sign * int(digits, radix)


@dataclass(slots=True)
class SyntaxReader:
    """Character-level reader over a whole schema source.

    Whitespace and comments are skipped before every token; comments that
    precede a declaration are collected separately by `read_documentation()`.
    Lines and columns are tracked for diagnostics.
    """

    src: str
    origin: Location
    pos: int = 0
    line: int = 0
    line_start: int = 0

    def exhausted(self) -> bool:
        return self.pos == len(self.src)

    def location(self) -> Location:
        return self.origin.at(self.line + 1, self.pos - self.line_start + 1)

    def expect(self, condition: bool, location: Location | None, message: str) -> None:
        if not condition:
            raise self.unexpected(message, location)

    def unexpected(self, message: str, location: Location | None = None) -> ParseError:
        return ParseError(location=location or self.location(), message=message)

    # -- characters ---------------------------------------------------------

    def peek_char(self) -> str:
        """Return the next significant character without consuming it."""
        self._skip_whitespace(skip_comments=True)
        self.expect(self.pos < len(self.src), None, "unexpected end of file")
        return self.src[self.pos]

    def accept(self, c: str) -> bool:
        """Consume the next significant character if it is `c`."""
        if self.peek_char() == c:
            self.pos += 1
            return True
        return False

    def read_char(self) -> str:
        c = self.peek_char()
        self.pos += 1
        return c

    def require(self, c: str) -> None:
        found = self.peek_char()
        if found != c:
            raise self.unexpected(f"expected '{c}' but was '{found}'")
        self.pos += 1

    def push_back(self, c: str) -> None:
        if self.pos == 0 or self.src[self.pos - 1] != c:
            raise ValueError(f"cannot push back {c!r}")
        self.pos -= 1

    # -- tokens -------------------------------------------------------------

    def read_word(self) -> str:
        """Read an identifier, keyword, number or dotted name."""
        self._skip_whitespace(skip_comments=True)
        start = self.pos
        while self.pos < len(self.src) and self.src[self.pos] in _WORD_CHARS:
            self.pos += 1
        self.expect(start < self.pos, None, "expected a word")
        return self.src[start : self.pos]

    def read_name(self) -> str:
        """Read a naked, (paren-wrapped) or [square-wrapped] symbol name."""
        c = self.peek_char()
        if c in "([":
            self.pos += 1
            name = self.read_word()
            self.require(")" if c == "(" else "]")
            return name
        return self.read_word()

    def read_int(self) -> int:
        self._skip_whitespace(skip_comments=True)
        location = self.location()
        word = self.read_word()
        try:
            return parse_int(word)
        except ValueError:
            raise self.unexpected(f"expected an integer but was {word}", location) from None

    def read_string(self) -> str:
        """Read a quoted string, or a bare word where the grammar allows one."""
        if self.peek_char() in _QUOTES:
            return self.read_quoted_string()
        return self.read_word()

    def read_quoted_string(self) -> str:
        quote = self.peek_char()
        self.expect(quote in _QUOTES, None, "expected a quoted string")
        start = self.location()
        self.pos += 1
        buf: list[str] = []
        while self.pos < len(self.src):
            c = self.src[self.pos]
            self.pos += 1
            if c == quote:
                # Adjacent string literals are concatenated.
                self._skip_whitespace(skip_comments=True)
                if self.pos < len(self.src) and self.src[self.pos] in _QUOTES:
                    quote = self.src[self.pos]
                    self.pos += 1
                    continue
                return "".join(buf)
            if c == "\n":
                break
            if c == "\\":
                self.expect(self.pos < len(self.src), start, "unterminated string")
                c = self.src[self.pos]
                self.pos += 1
                if c in "xX":
                    c = self._read_numeric_escape(16, 2)
                elif c in _DIGITS[8]:
                    self.pos -= 1
                    c = self._read_numeric_escape(8, 3)
                else:
                    c = _ESCAPES.get(c, c)
            buf.append(c)
        raise self.unexpected("unterminated string", start)

    def _read_numeric_escape(self, radix: int, length: int) -> str:
        end = min(self.pos + length, len(self.src))
        start = self.pos
        while self.pos < end and self.src[self.pos] in _DIGITS[radix]:
            self.pos += 1
        self.expect(start < self.pos, None, "expected a digit after \\x or \\X")
        return chr(int(self.src[start : self.pos], radix))

    def read_data_type(self, name: str | None = None) -> str:
        """Read a type name, or `map<K, V>` when `name` is the word `map`."""
        if name is None:
            name = self.read_word()
        if name != "map" or self.peek_char() != "<":
            return name
        self.require("<")
        key_type = self.read_data_type()
        self.require(",")
        value_type = self.read_data_type()
        self.require(">")
        return f"map<{key_type}, {value_type}>"

    # -- comments -----------------------------------------------------------

    def read_documentation(self) -> str:
        """Skip whitespace and return the text of any comments read on the way."""
        parts: list[str] = []
        while True:
            self._skip_whitespace(skip_comments=False)
            if self.pos == len(self.src) or self.src[self.pos] != "/":
                return "\n".join(parts)
            parts.append(self._read_comment())

    def try_append_trailing_documentation(self, documentation: str) -> str:
        """Append a comment that follows on the same line, as in `int32 a = 1; // a`."""
        while self.pos < len(self.src):
            c = self.src[self.pos]
            if c in " \t\f\v":
                self.pos += 1
            elif c == "/":
                self.pos += 1
                break
            else:
                return documentation
        else:
            return documentation

        if self.pos == len(self.src) or self.src[self.pos] not in "/*":
            self.pos -= 1
            raise self.unexpected("expected '//' or '/*'")
        is_star = self.src[self.pos] == "*"
        self.pos += 1
        if self.pos < len(self.src) and self.src[self.pos] == " ":
            self.pos += 1

        start = self.pos
        if is_star:
            while True:
                self.expect(self.pos < len(self.src), None, "trailing comment must be closed")
                if self.src.startswith("*/", self.pos):
                    end = self.pos
                    self.pos += 2
                    break
                self.pos += 1
                if self.src[self.pos - 1] == "\n":
                    self._newline()
            while self.pos < len(self.src):
                c = self.src[self.pos]
                self.pos += 1
                if c == "\n":
                    self._newline()
                    break
                self.expect(c in " \t\r\f\v", None, "no syntax may follow trailing comment")
        else:
            while self.pos < len(self.src) and self.src[self.pos] != "\n":
                self.pos += 1
            end = self.pos
            if self.pos < len(self.src):
                self.pos += 1
                self._newline()

        trailing = self.src[start:end].rstrip()
        if not trailing:
            return documentation
        if not documentation:
            return trailing
        return f"{documentation}\n{trailing}"

    def _read_comment(self) -> str:
        start = self.location()
        self.expect(self.pos + 1 < len(self.src), None, "unexpected end of file")
        kind = self.src[self.pos + 1]

        if kind == "/":
            self.pos += 2
            if self.pos < len(self.src) and self.src[self.pos] == " ":
                self.pos += 1
            begin = self.pos
            while self.pos < len(self.src) and self.src[self.pos] != "\n":
                self.pos += 1
            text = self.src[begin : self.pos].rstrip()
            if self.pos < len(self.src):
                self.pos += 1
                self._newline()
            return text

        if kind == "*":
            self.pos += 2
            buf: list[str] = []
            start_of_line = True
            while self.pos + 1 < len(self.src):
                c = self.src[self.pos]
                if c == "*" and self.src[self.pos + 1] == "/":
                    self.pos += 2
                    return "".join(buf).strip()
                self.pos += 1
                if c == "\n":
                    buf.append(c)
                    self._newline()
                    start_of_line = True
                elif not start_of_line:
                    buf.append(c)
                elif c == "*":
                    # Drop the `*` gutter and a single space after it.
                    if self.src[self.pos] == " ":
                        self.pos += 1
                    start_of_line = False
                elif not c.isspace():
                    buf.append(c)
                    start_of_line = False
            raise self.unexpected("unterminated comment", start)

        raise self.unexpected("unexpected '/'")

    def _skip_whitespace(self, *, skip_comments: bool) -> None:
        while self.pos < len(self.src):
            c = self.src[self.pos]
            if c in " \t\r\n\f\v":
                self.pos += 1
                if c == "\n":
                    self._newline()
            elif skip_comments and c == "/":
                self._read_comment()
            else:
                return

    def _newline(self) -> None:
        self.line += 1
        self.line_start = self.pos
