"""Declarations produced by the translator and RPC styles.

Declarations are plain data. Each one names the template that renders it, so
styles can introduce their own declaration kinds without touching the
renderer.
"""

from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import ClassVar

from .types import FieldType

# Protobuf wire types
WIRE_VARINT = 0
WIRE_FIXED64 = 1
WIRE_LENGTH_DELIMITED = 2
WIRE_START_GROUP = 3
WIRE_FIXED32 = 5

WIRE_TYPES = {
    FieldType.DOUBLE: WIRE_FIXED64,
    FieldType.FLOAT: WIRE_FIXED32,
    FieldType.INT64: WIRE_VARINT,
    FieldType.UINT64: WIRE_VARINT,
    FieldType.INT32: WIRE_VARINT,
    FieldType.FIXED64: WIRE_FIXED64,
    FieldType.FIXED32: WIRE_FIXED32,
    FieldType.BOOL: WIRE_VARINT,
    FieldType.STRING: WIRE_LENGTH_DELIMITED,
    FieldType.GROUP: WIRE_START_GROUP,
    FieldType.MESSAGE: WIRE_LENGTH_DELIMITED,
    FieldType.BYTES: WIRE_LENGTH_DELIMITED,
    FieldType.UINT32: WIRE_VARINT,
    FieldType.ENUM: WIRE_VARINT,
    FieldType.SFIXED32: WIRE_FIXED32,
    FieldType.SFIXED64: WIRE_FIXED64,
    FieldType.SINT32: WIRE_VARINT,
    FieldType.SINT64: WIRE_VARINT,
}


class Declaration:
    """Base class for anything that renders to a block of TypeScript."""

    template: ClassVar[str]


@dataclass
class Import:
    """`import * as alias from "module"`."""

    alias: str
    module: str


@dataclass
class EnumMember:
    name: str
    value: int


@dataclass
class EnumDeclaration(Declaration):
    template: ClassVar[str] = "enum.ts.j2"

    name: str
    members: list[EnumMember]


@dataclass
class FieldDeclaration:
    """A message field as it appears in generated code.

    type_ref is the element type (e.g. `number`, `dependency_1.Color`);
    ts_type is the full property type (`number[]`, `Map<string, number>`).
    """

    name: str
    number: int
    kind: FieldType
    type_ref: str
    default: str
    repeated: bool = False
    packed: bool = False
    presence: bool = False  # Has a `has_<name>` getter
    key: "FieldDeclaration | None" = None  # Set for map fields
    value: "FieldDeclaration | None" = None
    oneof: str | None = None
    oneof_group: int | None = None  # Index into MessageDeclaration.oneofs

    @property
    def is_map(self) -> bool:
        return self.value is not None

    @property
    def is_message(self) -> bool:
        return self.kind in (FieldType.MESSAGE, FieldType.GROUP)

    @property
    def wire_type(self) -> int:
        if self.is_map or self.packed:
            return WIRE_LENGTH_DELIMITED
        return WIRE_TYPES[self.kind]

    @property
    def ts_type(self) -> str:
        if self.key is not None and self.value is not None:
            return f"Map<{self.key.type_ref}, {self.value.type_ref}>"
        if self.repeated:
            return f"{self.type_ref}[]"
        return self.type_ref


@dataclass(frozen=True)
class FieldMetadata:
    """Serialization metadata for one field, copied verbatim from the descriptor."""

    number: int
    name: str
    kind: FieldType
    wire_type: int
    repeated: bool
    map: bool
    packed: bool


@dataclass
class OneofDeclaration:
    """A oneof group: exactly one alternative is set at a time."""

    name: str
    alternatives: list[FieldDeclaration]

    @property
    def numbers(self) -> list[int]:
        return [alt.number for alt in self.alternatives]


@dataclass
class MessageDeclaration(Declaration):
    template: ClassVar[str] = "message.ts.j2"

    name: str
    full_name: str
    runtime_alias: str
    members: list[FieldDeclaration] = field(default_factory=list)  # Declaration order
    oneofs: list[OneofDeclaration] = field(default_factory=list)

    @property
    def fields(self) -> list[FieldDeclaration]:
        """Fields that are not part of a oneof."""
        return [m for m in self.members if m.oneof is None]

    @property
    def field_table(self) -> list[FieldMetadata]:
        return [
            FieldMetadata(
                number=m.number,
                name=m.name,
                kind=m.kind,
                wire_type=m.wire_type,
                repeated=m.repeated,
                map=m.is_map,
                packed=m.packed,
            )
            for m in self.members
        ]

    @property
    def repeated_numbers(self) -> list[int]:
        return [m.number for m in self.members if m.repeated and not m.is_map]

    @property
    def oneof_groups(self) -> list[list[int]]:
        return [o.numbers for o in self.oneofs]


@dataclass
class NamespaceDeclaration(Declaration):
    template: ClassVar[str] = "namespace.ts.j2"

    name: str
    body: list[Declaration]


@dataclass
class AliasDeclaration(Declaration):
    """Second name for a top-level type, for code that cannot see the original."""

    template: ClassVar[str] = "alias.ts.j2"

    name: str
    target: str


class MethodShape(StrEnum):
    """Streaming shape of an RPC method."""

    UNARY = auto()
    SERVER_STREAMING = auto()
    CLIENT_STREAMING = auto()
    BIDI_STREAMING = auto()


@dataclass
class MethodDeclaration:
    name: str
    path: str  # /package.Service/Method
    input_type: str
    output_type: str
    client_streaming: bool = False
    server_streaming: bool = False

    @property
    def shape(self) -> MethodShape:
        if self.client_streaming and self.server_streaming:
            return MethodShape.BIDI_STREAMING
        if self.client_streaming:
            return MethodShape.CLIENT_STREAMING
        if self.server_streaming:
            return MethodShape.SERVER_STREAMING
        return MethodShape.UNARY


@dataclass
class ServiceDeclaration(Declaration):
    """Base for service-level declarations emitted by RPC styles."""

    name: str
    service_name: str
    rpc_alias: str
    methods: list[MethodDeclaration]


@dataclass
class GeneratedSource:
    """A fully assembled output file, ready to render."""

    source: str
    compiler_version: str
    imports: list[Import]
    body: list[Declaration]
