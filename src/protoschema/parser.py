from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from .ast import (
    MAX_TAG_VALUE,
    Declaration,
    EnumConstantElement,
    EnumElement,
    ExtendElement,
    ExtensionsElement,
    FieldElement,
    FieldLabel,
    GroupElement,
    ImportDeclaration,
    MessageElement,
    OneOfElement,
    OptionElement,
    PackageDeclaration,
    ProtoFileElement,
    ReservedElement,
    RpcElement,
    ServiceElement,
    Syntax,
    SyntaxDeclaration,
    TagRange,
    TypeElement,
)
from .context import Context
from .location import Location
from .options import OptionReader
from .reader import SyntaxReader, parse_int


def _partition_default(
    options: tuple[OptionElement, ...],
) -> tuple[tuple[OptionElement, ...], str | None]:
    """Split the `default` pseudo-option out of a field's options.

    Defaults aren't options. All `default` entries are dropped from the list;
    the first one supplies the value.
    """
    remaining: list[OptionElement] = []
    default: str | None = None
    for option in options:
        if option.name != "default" or option.is_parenthesized:
            remaining.append(option)
        elif default is None:
            default = option.value_text()
    return tuple(remaining), default


@dataclass(slots=True)
class ProtoParser:
    """Recursive-descent parser for one `.proto` source.

    An instance holds the running state of a single parse and is discarded
    afterwards; use `ProtoParser.parse()`.
    """

    location: Location
    reader: SyntaxReader
    imports: list[str] = field(default_factory=list)
    public_imports: list[str] = field(default_factory=list)
    nested_types: list[TypeElement] = field(default_factory=list)
    services: list[ServiceElement] = field(default_factory=list)
    extends: list[ExtendElement] = field(default_factory=list)
    options: list[OptionElement] = field(default_factory=list)

    # Number of declarations read so far, across all nesting levels.
    declaration_count: int = 0
    syntax: Syntax | None = None
    package_name: str | None = None
    # Package name plus enclosing message names, each followed by a dot.
    prefix: str = ""

    @classmethod
    def parse(cls, location: Location, data: str) -> ProtoFileElement:
        return cls(location=location, reader=SyntaxReader(data, location)).read_proto_file()

    def read_proto_file(self) -> ProtoFileElement:
        while True:
            documentation = self.reader.read_documentation()
            if self.reader.exhausted():
                return ProtoFileElement(
                    location=self.location,
                    package_name=self.package_name,
                    syntax=self.syntax,
                    imports=tuple(self.imports),
                    public_imports=tuple(self.public_imports),
                    types=tuple(self.nested_types),
                    services=tuple(self.services),
                    extend_declarations=tuple(self.extends),
                    options=tuple(self.options),
                )

            declaration = self._read_declaration(documentation, Context.FILE)
            if isinstance(declaration, (MessageElement, EnumElement)):
                self.nested_types.append(declaration)
            elif isinstance(declaration, ServiceElement):
                self.services.append(declaration)
            elif isinstance(declaration, OptionElement):
                self.options.append(declaration)
            elif isinstance(declaration, ExtendElement):
                self.extends.append(declaration)
            elif isinstance(declaration, ImportDeclaration):
                if declaration.public:
                    self.public_imports.append(declaration.path)
                else:
                    self.imports.append(declaration.path)

    def _read_declaration(self, documentation: str, context: Context) -> Declaration | None:
        index = self.declaration_count
        self.declaration_count += 1

        # Skip unnecessary semicolons, occasionally used after a nested message declaration.
        if self.reader.accept(";"):
            return None

        location = self.reader.location()
        label = self.reader.read_word()

        if label == "package":
            self.reader.expect(context.permits_package(), location, f"'package' in {context.name}")
            self.reader.expect(self.package_name is None, location, "too many package names")
            self.package_name = self.reader.read_name()
            self.prefix = f"{self.package_name}."
            self.reader.require(";")
            return PackageDeclaration(location=location, name=self.package_name)

        if label == "import":
            self.reader.expect(context.permits_import(), location, f"'import' in {context.name}")
            return self._read_import(location)

        if label == "syntax":
            self.reader.expect(context.permits_syntax(), location, f"'syntax' in {context.name}")
            self.reader.require("=")
            self.reader.expect(
                index == 0, location, "'syntax' element must be the first declaration in a file"
            )
            syntax_string = self.reader.read_quoted_string()
            try:
                self.syntax = Syntax.get(syntax_string)
            except ValueError as e:
                raise self.reader.unexpected(str(e), location) from None
            self.reader.require(";")
            return SyntaxDeclaration(location=location, syntax=self.syntax)

        if label == "option":
            option = OptionReader(self.reader).read_option("=")
            self.reader.require(";")
            return option

        if label == "reserved":
            return self._read_reserved(location, documentation)
        if label == "message":
            return self._read_message(location, documentation)
        if label == "enum":
            return self._read_enum(location, documentation)
        if label == "service":
            return self._read_service(location, documentation)
        if label == "extend":
            return self._read_extend(location, documentation)

        if label == "rpc":
            self.reader.expect(context.permits_rpc(), location, f"'rpc' in {context.name}")
            return self._read_rpc(location, documentation)

        if label == "oneof":
            self.reader.expect(context.permits_one_of(), location, "'oneof' must be nested in message")
            return self._read_one_of(documentation)

        if label == "extensions":
            self.reader.expect(context.permits_extensions(), location, "'extensions' must be nested")
            return self._read_extensions(location, documentation)

        if context in (Context.MESSAGE, Context.EXTEND):
            return self._read_field(documentation, location, label)
        if context is Context.ENUM:
            return self._read_enum_constant(documentation, location, label)
        raise self.reader.unexpected(f"unexpected label: {label}", location)

    def _read_import(self, location: Location) -> ImportDeclaration:
        # `public` marks a public import whether quoted or not; `weak` only as a bare word.
        quoted = self.reader.peek_char() in "\"'"
        path = self.reader.read_string()
        public = path == "public"
        if public or (not quoted and path == "weak"):
            path = self.reader.read_quoted_string()
        else:
            self.reader.expect(quoted, location, f"unexpected import modifier: {path}")
        self.reader.require(";")
        return ImportDeclaration(location=location, path=path, public=public)

    @contextmanager
    def _nested_prefix(self, name: str) -> Iterator[None]:
        previous = self.prefix
        self.prefix = f"{previous}{name}."
        try:
            yield
        finally:
            self.prefix = previous

    def _read_message(self, location: Location, documentation: str) -> MessageElement:
        name = self.reader.read_name()
        qualified_name = f"{self.prefix}{name}"
        fields: list[FieldElement] = []
        one_ofs: list[OneOfElement] = []
        nested_types: list[TypeElement] = []
        extensions: list[ExtensionsElement] = []
        options: list[OptionElement] = []
        reserveds: list[ReservedElement] = []
        groups: list[GroupElement] = []

        with self._nested_prefix(name):
            self.reader.require("{")
            while True:
                nested_documentation = self.reader.read_documentation()
                if self.reader.accept("}"):
                    break

                declared = self._read_declaration(nested_documentation, Context.MESSAGE)
                if isinstance(declared, FieldElement):
                    fields.append(declared)
                elif isinstance(declared, OneOfElement):
                    one_ofs.append(declared)
                elif isinstance(declared, GroupElement):
                    groups.append(declared)
                elif isinstance(declared, (MessageElement, EnumElement)):
                    nested_types.append(declared)
                elif isinstance(declared, ExtensionsElement):
                    extensions.append(declared)
                elif isinstance(declared, OptionElement):
                    options.append(declared)
                elif isinstance(declared, ExtendElement):
                    # Extensions apply globally regardless of where they are declared.
                    self.extends.append(declared)
                elif isinstance(declared, ReservedElement):
                    reserveds.append(declared)

        return MessageElement(
            location=location,
            name=name,
            qualified_name=qualified_name,
            documentation=documentation,
            nested_types=tuple(nested_types),
            options=tuple(options),
            reserveds=tuple(reserveds),
            fields=tuple(fields),
            one_ofs=tuple(one_ofs),
            extensions=tuple(extensions),
            groups=tuple(groups),
        )

    def _read_extend(self, location: Location, documentation: str) -> ExtendElement:
        name = self.reader.read_name()
        fields: list[FieldElement] = []

        self.reader.require("{")
        while True:
            nested_documentation = self.reader.read_documentation()
            if self.reader.accept("}"):
                break

            declared = self._read_declaration(nested_documentation, Context.EXTEND)
            if isinstance(declared, FieldElement):
                fields.append(declared)

        return ExtendElement(
            location=location,
            name=name,
            documentation=documentation,
            fields=tuple(fields),
        )

    def _read_service(self, location: Location, documentation: str) -> ServiceElement:
        name = self.reader.read_name()
        rpcs: list[RpcElement] = []
        options: list[OptionElement] = []

        self.reader.require("{")
        while True:
            rpc_documentation = self.reader.read_documentation()
            if self.reader.accept("}"):
                break

            declared = self._read_declaration(rpc_documentation, Context.SERVICE)
            if isinstance(declared, RpcElement):
                rpcs.append(declared)
            elif isinstance(declared, OptionElement):
                options.append(declared)

        return ServiceElement(
            location=location,
            name=name,
            documentation=documentation,
            rpcs=tuple(rpcs),
            options=tuple(options),
        )

    def _read_enum(self, location: Location, documentation: str) -> EnumElement:
        name = self.reader.read_name()
        constants: list[EnumConstantElement] = []
        options: list[OptionElement] = []

        self.reader.require("{")
        while True:
            value_documentation = self.reader.read_documentation()
            if self.reader.accept("}"):
                break

            declared = self._read_declaration(value_documentation, Context.ENUM)
            if isinstance(declared, EnumConstantElement):
                constants.append(declared)
            elif isinstance(declared, OptionElement):
                options.append(declared)

        return EnumElement(
            location=location,
            name=name,
            qualified_name=f"{self.prefix}{name}",
            documentation=documentation,
            options=tuple(options),
            constants=tuple(constants),
        )

    def _read_field(
        self, documentation: str, location: Location, word: str
    ) -> FieldElement | GroupElement:
        """Read a field whose first word (usually its label) was already consumed."""
        label: FieldLabel | None
        if word in ("required", "optional"):
            self.reader.expect(
                self.syntax is not Syntax.PROTO_3,
                location,
                f"'{word}' label forbidden in proto3 field declarations",
            )
            label = FieldLabel(word)
            data_type = self.reader.read_data_type()
        elif word == "repeated":
            label = FieldLabel.REPEATED
            data_type = self.reader.read_data_type()
        else:
            self.reader.expect(
                self.syntax is Syntax.PROTO_3 or (word == "map" and self.reader.peek_char() == "<"),
                location,
                f"unexpected label: {word}",
            )
            label = None
            data_type = self.reader.read_data_type(word)

        self.reader.expect(
            not data_type.startswith("map<") or label is None, location, "'map' type cannot have label"
        )

        if data_type == "group":
            return self._read_group(location, documentation, label)
        return self._read_field_element(location, documentation, label, data_type)

    def _read_field_element(
        self,
        location: Location,
        documentation: str,
        label: FieldLabel | None,
        data_type: str,
    ) -> FieldElement:
        name = self.reader.read_name()
        self.reader.require("=")
        tag = self.reader.read_int()

        options, default_value = _partition_default(OptionReader(self.reader).read_options())
        self.reader.require(";")

        documentation = self.reader.try_append_trailing_documentation(documentation)

        return FieldElement(
            location=location,
            label=label,
            type=data_type,
            name=name,
            tag=tag,
            default_value=default_value,
            documentation=documentation,
            options=options,
        )

    def _read_one_of(self, documentation: str) -> OneOfElement:
        name = self.reader.read_name()
        fields: list[FieldElement] = []
        groups: list[GroupElement] = []

        self.reader.require("{")
        while True:
            nested_documentation = self.reader.read_documentation()
            if self.reader.accept("}"):
                break

            location = self.reader.location()
            data_type = self.reader.read_data_type()
            if data_type == "group":
                groups.append(self._read_group(location, nested_documentation, None))
            else:
                fields.append(self._read_field_element(location, nested_documentation, None, data_type))

        return OneOfElement(
            name=name,
            documentation=documentation,
            fields=tuple(fields),
            groups=tuple(groups),
        )

    def _read_group(
        self, location: Location, documentation: str, label: FieldLabel | None
    ) -> GroupElement:
        name = self.reader.read_word()
        self.reader.require("=")
        tag = self.reader.read_int()
        fields: list[FieldElement] = []

        self.reader.require("{")
        while True:
            nested_documentation = self.reader.read_documentation()
            if self.reader.accept("}"):
                break

            field_location = self.reader.location()
            field_label = self.reader.read_word()
            declared = self._read_field(nested_documentation, field_location, field_label)
            if not isinstance(declared, FieldElement):
                raise self.reader.unexpected(f"expected field declaration, was {declared}")
            fields.append(declared)

        return GroupElement(
            location=location,
            label=label,
            name=name,
            tag=tag,
            documentation=documentation,
            fields=tuple(fields),
        )

    def _read_tag_bound(self) -> int:
        """Read the end of a tag range: an integer or `max`."""
        self.reader.peek_char()
        location = self.reader.location()
        word = self.reader.read_word()
        if word == "max":
            return MAX_TAG_VALUE
        try:
            return parse_int(word)
        except ValueError:
            raise self.reader.unexpected(f"expected an integer but was {word}", location) from None

    def _read_reserved(self, location: Location, documentation: str) -> ReservedElement:
        """Read a reserved tags and names list like `reserved 10, 12 to 14, "foo";`."""
        self.reader.expect(
            self.reader.peek_char() != ";",
            location,
            "'reserved' must have at least one field name or tag",
        )
        values: list[str | int | TagRange] = []
        while True:
            if self.reader.peek_char() in "\"'":
                values.append(self.reader.read_quoted_string())
            else:
                tag_start = self.reader.read_int()
                if self.reader.peek_char() in ",;":
                    values.append(tag_start)
                else:
                    self.reader.expect(
                        self.reader.read_word() == "to", location, "expected ',', ';', or 'to'"
                    )
                    tag_end = self._read_tag_bound()
                    values.append(TagRange(tag_start, tag_end))

            c = self.reader.read_char()
            if c == ";":
                break
            if c != ",":
                raise self.reader.unexpected("expected ',' or ';'")

        return ReservedElement(location=location, values=tuple(values), documentation=documentation)

    def _read_extensions(self, location: Location, documentation: str) -> ExtensionsElement:
        """Read extensions like `extensions 101;` or `extensions 101 to max;`."""
        start = self.reader.read_int()
        end = start
        if self.reader.peek_char() != ";":
            self.reader.expect(self.reader.read_word() == "to", location, "expected ';' or 'to'")
            end = self._read_tag_bound()
        self.reader.require(";")

        return ExtensionsElement(location=location, start=start, end=end, documentation=documentation)

    def _read_enum_constant(
        self, documentation: str, location: Location, label: str
    ) -> EnumConstantElement:
        """Read an enum constant like `ROCK = 0;`. The label is the constant name."""
        self.reader.require("=")
        tag = self.reader.read_int()

        options = OptionReader(self.reader).read_options()
        self.reader.require(";")

        documentation = self.reader.try_append_trailing_documentation(documentation)

        return EnumConstantElement(
            location=location,
            name=label,
            tag=tag,
            documentation=documentation,
            options=options,
        )

    def _read_rpc(self, location: Location, documentation: str) -> RpcElement:
        name = self.reader.read_name()

        request_streaming, request_type = self._read_rpc_type()
        self.reader.expect(self.reader.read_word() == "returns", location, "expected 'returns'")
        response_streaming, response_type = self._read_rpc_type()

        options: list[OptionElement] = []
        if self.reader.accept("{"):
            while True:
                rpc_documentation = self.reader.read_documentation()
                if self.reader.accept("}"):
                    break

                declared = self._read_declaration(rpc_documentation, Context.RPC)
                if isinstance(declared, OptionElement):
                    options.append(declared)
        else:
            self.reader.require(";")

        return RpcElement(
            location=location,
            name=name,
            documentation=documentation,
            request_type=request_type,
            response_type=response_type,
            request_streaming=request_streaming,
            response_streaming=response_streaming,
            options=tuple(options),
        )

    def _read_rpc_type(self) -> tuple[bool, str]:
        """Read `(Type)` or `(stream Type)`."""
        self.reader.require("(")
        word = self.reader.read_word()
        if word == "stream":
            streaming, data_type = True, self.reader.read_data_type()
        else:
            streaming, data_type = False, self.reader.read_data_type(word)
        self.reader.require(")")
        return streaming, data_type
