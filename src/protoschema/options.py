from __future__ import annotations

from dataclasses import dataclass

from .ast import OptionElement, OptionKind
from .reader import SyntaxReader


@dataclass(slots=True)
class OptionReader:
    """Reads option values: `option x = y;` statements and `[a = b, ...]` suffixes.

    Aggregate values use protobuf text format, e.g.
    `option (my.opt) = { name: "x" tags: [1, 2] nested { on: true } };`
    """

    reader: SyntaxReader

    def read_options(self) -> tuple[OptionElement, ...]:
        """Read options enclosed in '[' and ']', or return () when none follow."""
        if not self.reader.accept("["):
            return ()
        result: list[OptionElement] = []
        while True:
            result.append(self.read_option("="))
            if self.reader.accept("]"):
                break
            self.reader.expect(self.reader.accept(","), None, "expected ',' or ']'")
        return tuple(result)

    def read_option(self, separator: str) -> OptionElement:
        """Read a name, `separator` and a value."""
        first = self.reader.peek_char()
        is_extension = first == "["
        is_parenthesized = first == "("
        name = self.reader.read_name()
        if is_extension:
            name = f"[{name}]"

        sub_names: list[str] = []
        c = self.reader.read_char()
        if c == ".":
            # Nested field of a custom option, e.g. `(foo).bar.baz = 1`.
            sub_names = self.reader.read_name().split(".")
            c = self.reader.read_char()
        if separator == ":" and c == "{":
            # Text format lets message values omit the ':'.
            self.reader.push_back("{")
        else:
            self.reader.expect(c == separator, None, f"expected '{separator}' in option")

        kind, value = self._read_kind_and_value()
        for sub_name in reversed(sub_names):
            value = OptionElement(name=sub_name, kind=kind, value=value)
            kind = OptionKind.OPTION
        return OptionElement(name=name, kind=kind, value=value, is_parenthesized=is_parenthesized)

    def _read_kind_and_value(self) -> tuple[OptionKind, object]:
        peeked = self.reader.peek_char()
        if peeked == "{":
            return OptionKind.MAP, self._read_map("{", "}", ":")
        if peeked == "[":
            return OptionKind.LIST, self._read_list()
        if peeked in "\"'":
            return OptionKind.STRING, self.reader.read_string()
        if peeked.isdigit() or peeked == "-":
            return OptionKind.NUMBER, self.reader.read_word()
        word = self.reader.read_word()
        if word in ("true", "false"):
            return OptionKind.BOOLEAN, word
        return OptionKind.ENUM, word

    def _read_map(self, open_brace: str, close_brace: str, separator: str) -> dict[str, object]:
        self.reader.require(open_brace)
        result: dict[str, object] = {}
        while True:
            # Handles both `{}` and a trailing separator before the close.
            if self.reader.accept(close_brace):
                return result

            option = self.read_option(separator)
            if isinstance(option.value, OptionElement):
                nested = result.get(option.name)
                if not isinstance(nested, dict):
                    nested = {}
                    result[option.name] = nested
                nested[option.value.name] = option.value.value
            else:
                # Repeated keys collect into a list.
                previous = result.get(option.name)
                if previous is None:
                    result[option.name] = option.value
                elif isinstance(previous, list):
                    _add_to_list(previous, option.value)
                else:
                    values = [previous]
                    _add_to_list(values, option.value)
                    result[option.name] = values

            if not self.reader.accept(","):
                self.reader.accept(";")

    def _read_list(self) -> list[object]:
        self.reader.require("[")
        result: list[object] = []
        while True:
            if self.reader.accept("]"):
                return result
            result.append(self._read_kind_and_value()[1])
            if self.reader.accept(","):
                continue
            self.reader.expect(self.reader.peek_char() == "]", None, "expected ',' or ']'")


def _add_to_list(values: list[object], value: object) -> None:
    if isinstance(value, list):
        values.extend(value)
    else:
        values.append(value)
