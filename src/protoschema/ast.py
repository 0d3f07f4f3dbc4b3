from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .location import Location


# Tags are 29-bit on the wire; `extensions N to max` expands to this value.
MAX_TAG_VALUE = (1 << 29) - 1


class Syntax(str, Enum):
    PROTO_2 = "proto2"
    PROTO_3 = "proto3"

    @classmethod
    def get(cls, text: str) -> Syntax:
        for s in cls:
            if s.value == text:
                return s
        raise ValueError(f"unexpected syntax: {text}")


class FieldLabel(str, Enum):
    OPTIONAL = "optional"
    REQUIRED = "required"
    REPEATED = "repeated"


class OptionKind(str, Enum):
    STRING = "string"
    BOOLEAN = "boolean"
    NUMBER = "number"
    ENUM = "enum"
    MAP = "map"
    LIST = "list"
    OPTION = "option"


@dataclass(frozen=True, slots=True)
class OptionElement:
    """A single `name = value` option.

    Examples:
      - option java_package = "com.example";
      - [default = 5]
      - option (my.custom).sub = true;

    For `(custom).sub` style names the outer element is named `custom` and
    its value is a nested OptionElement (kind OPTION) named `sub`.
    """

    name: str
    kind: OptionKind
    value: object
    is_parenthesized: bool = False

    def value_text(self) -> str:
        if self.kind == OptionKind.OPTION and isinstance(self.value, OptionElement):
            return f"{self.value.name}={self.value.value_text()}"
        return str(self.value)


@dataclass(frozen=True, slots=True)
class SyntaxDeclaration:
    location: Location
    syntax: Syntax


@dataclass(frozen=True, slots=True)
class PackageDeclaration:
    location: Location
    name: str


@dataclass(frozen=True, slots=True)
class ImportDeclaration:
    location: Location
    path: str
    public: bool = False


@dataclass(frozen=True, slots=True)
class FieldElement:
    """A field declaration.

    Examples:
      - optional int32 id = 1 [default = 5];
      - repeated string tags = 2;
      - map<string, Project> projects = 3;
    """

    location: Location
    type: str
    name: str
    tag: int
    label: FieldLabel | None = None
    default_value: str | None = None
    documentation: str = ""
    options: tuple[OptionElement, ...] = ()


@dataclass(frozen=True, slots=True)
class GroupElement:
    """A legacy proto2 group: an inline message type plus the field holding it."""

    location: Location
    name: str
    tag: int
    label: FieldLabel | None = None
    documentation: str = ""
    fields: tuple[FieldElement, ...] = ()


@dataclass(frozen=True, slots=True)
class OneOfElement:
    name: str
    documentation: str = ""
    fields: tuple[FieldElement, ...] = ()
    groups: tuple[GroupElement, ...] = ()


@dataclass(frozen=True, slots=True)
class ExtensionsElement:
    """Extension range; both bounds inclusive."""

    location: Location
    start: int
    end: int
    documentation: str = ""


@dataclass(frozen=True, slots=True)
class TagRange:
    """Inclusive tag range from `reserved lo to hi`, kept as written."""

    start: int
    end: int

    def __contains__(self, tag: object) -> bool:
        return isinstance(tag, int) and self.start <= tag <= self.end


@dataclass(frozen=True, slots=True)
class ReservedElement:
    """Reserved names and tags.

    Each value is a field name (str), a single tag (int) or a `TagRange`.
    """

    location: Location
    values: tuple[str | int | TagRange, ...]
    documentation: str = ""


@dataclass(frozen=True, slots=True)
class EnumConstantElement:
    location: Location
    name: str
    tag: int
    documentation: str = ""
    options: tuple[OptionElement, ...] = ()


@dataclass(frozen=True, slots=True)
class EnumElement:
    location: Location
    name: str
    qualified_name: str
    documentation: str = ""
    options: tuple[OptionElement, ...] = ()
    constants: tuple[EnumConstantElement, ...] = ()


@dataclass(frozen=True, slots=True)
class MessageElement:
    location: Location
    name: str
    qualified_name: str
    documentation: str = ""
    nested_types: tuple[TypeElement, ...] = ()
    options: tuple[OptionElement, ...] = ()
    reserveds: tuple[ReservedElement, ...] = ()
    fields: tuple[FieldElement, ...] = ()
    one_ofs: tuple[OneOfElement, ...] = ()
    extensions: tuple[ExtensionsElement, ...] = ()
    groups: tuple[GroupElement, ...] = ()


@dataclass(frozen=True, slots=True)
class ExtendElement:
    """Fields added to a message declared elsewhere.

    Always collected at file level, wherever the block appears.
    """

    location: Location
    name: str
    documentation: str = ""
    fields: tuple[FieldElement, ...] = ()


@dataclass(frozen=True, slots=True)
class RpcElement:
    location: Location
    name: str
    request_type: str
    response_type: str
    documentation: str = ""
    request_streaming: bool = False
    response_streaming: bool = False
    options: tuple[OptionElement, ...] = ()


@dataclass(frozen=True, slots=True)
class ServiceElement:
    location: Location
    name: str
    documentation: str = ""
    rpcs: tuple[RpcElement, ...] = ()
    options: tuple[OptionElement, ...] = ()


TypeElement = MessageElement | EnumElement

# Everything a single declaration can produce; a stray ';' produces None.
Declaration = (
    PackageDeclaration
    | ImportDeclaration
    | SyntaxDeclaration
    | OptionElement
    | FieldElement
    | GroupElement
    | MessageElement
    | EnumElement
    | ServiceElement
    | ExtendElement
    | RpcElement
    | OneOfElement
    | ExtensionsElement
    | ReservedElement
    | EnumConstantElement
)


@dataclass(frozen=True, slots=True)
class ProtoFileElement:
    location: Location
    package_name: str | None = None
    syntax: Syntax | None = None
    imports: tuple[str, ...] = ()
    public_imports: tuple[str, ...] = ()
    types: tuple[TypeElement, ...] = ()
    services: tuple[ServiceElement, ...] = ()
    extend_declarations: tuple[ExtendElement, ...] = ()
    options: tuple[OptionElement, ...] = ()
