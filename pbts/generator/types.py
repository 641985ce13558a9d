"""Type definitions for schema descriptors consumed by the generator."""

from dataclasses import dataclass, field
from enum import StrEnum, auto

from dataclasses_json import DataClassJsonMixin


class FieldType(StrEnum):
    """Protobuf field kinds."""

    DOUBLE = auto()
    FLOAT = auto()
    INT64 = auto()
    UINT64 = auto()
    INT32 = auto()
    FIXED64 = auto()
    FIXED32 = auto()
    BOOL = auto()
    STRING = auto()
    GROUP = auto()
    MESSAGE = auto()
    BYTES = auto()
    UINT32 = auto()
    ENUM = auto()
    SFIXED32 = auto()
    SFIXED64 = auto()
    SINT32 = auto()
    SINT64 = auto()


class Cardinality(StrEnum):
    """How many values a field holds."""

    SINGULAR = auto()
    REPEATED = auto()
    ONEOF = auto()  # Member of a (non-synthetic) oneof group


@dataclass
class FieldDescriptor(DataClassJsonMixin):
    """Represents a field of a message.

    For map fields:
    - map_key/map_value: key and value fields of the synthetic entry message
    - both None: not a map field
    """

    name: str
    number: int
    cardinality: Cardinality
    type: FieldType
    type_name: str | None = None  # Fully qualified with leading dot
    oneof_index: int | None = None
    json_name: str | None = None
    packed: bool = False
    optional: bool = False  # proto3 `optional`
    explicit_presence: bool = False  # Tracks whether a singular scalar was set
    default_value: str | None = None
    map_key: "FieldDescriptor | None" = None
    map_value: "FieldDescriptor | None" = None

    @property
    def is_map(self) -> bool:
        return self.map_key is not None

    @property
    def repeated(self) -> bool:
        return self.cardinality == Cardinality.REPEATED


@dataclass
class OneofDescriptor(DataClassJsonMixin):
    """Represents a oneof group.

    Synthetic oneofs wrap a single proto3 `optional` field and are not variants.
    """

    name: str
    synthetic: bool = False


@dataclass
class EnumValue(DataClassJsonMixin):
    """Represents a single enum constant."""

    name: str
    number: int


@dataclass
class EnumDescriptor(DataClassJsonMixin):
    """Represents an enum type definition. The first value is the default."""

    name: str
    values: list[EnumValue]


@dataclass
class MessageDescriptor(DataClassJsonMixin):
    """Represents a message type definition."""

    name: str
    fields: list[FieldDescriptor] = field(default_factory=list)
    nested_messages: list["MessageDescriptor"] = field(default_factory=list)
    nested_enums: list[EnumDescriptor] = field(default_factory=list)
    oneofs: list[OneofDescriptor] = field(default_factory=list)
    map_entry: bool = False


@dataclass
class MethodDescriptor(DataClassJsonMixin):
    """Represents an RPC method."""

    name: str
    input_type: str
    output_type: str
    client_streaming: bool = False
    server_streaming: bool = False


@dataclass
class ServiceDescriptor(DataClassJsonMixin):
    """Represents an RPC service."""

    name: str
    methods: list[MethodDescriptor] = field(default_factory=list)


@dataclass
class SchemaFile(DataClassJsonMixin):
    """Represents one compilation unit (a .proto file)."""

    name: str
    package: str | None = None
    dependencies: list[str] = field(default_factory=list)
    public_dependencies: list[int] = field(default_factory=list)
    enums: list[EnumDescriptor] = field(default_factory=list)
    messages: list[MessageDescriptor] = field(default_factory=list)
    services: list[ServiceDescriptor] = field(default_factory=list)
    syntax: str = "proto2"

    @property
    def scope(self) -> str:
        """Fully-qualified name prefix for top-level types."""
        return f".{self.package}" if self.package else ""


@dataclass
class CompilerVersion(DataClassJsonMixin):
    """Version of the protoc that produced the request."""

    major: int = 0
    minor: int = 0
    patch: int = 0
    suffix: str = ""

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass
class CompileRequest(DataClassJsonMixin):
    """Everything one generator run needs."""

    files: list[SchemaFile]
    parameter: str = ""
    compiler_version: CompilerVersion = field(default_factory=CompilerVersion)
    files_to_generate: list[str] = field(default_factory=list)


SCALAR_TYPES = frozenset(
    t for t in FieldType if t not in (FieldType.MESSAGE, FieldType.GROUP, FieldType.ENUM)
)

# Kinds that may use packed encoding when repeated
PACKABLE_TYPES = frozenset(t for t in SCALAR_TYPES if t not in (FieldType.STRING, FieldType.BYTES))
