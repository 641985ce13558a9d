"""Conversion between protobuf wire descriptors and generator types."""

import logging

from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2
from google.protobuf.message import DecodeError

from .errors import SchemaError
from .types import (
    PACKABLE_TYPES,
    Cardinality,
    CompileRequest,
    CompilerVersion,
    EnumDescriptor,
    EnumValue,
    FieldDescriptor,
    FieldType,
    MessageDescriptor,
    MethodDescriptor,
    OneofDescriptor,
    SchemaFile,
    ServiceDescriptor,
)

logger = logging.getLogger(__name__)

_FieldProto = descriptor_pb2.FieldDescriptorProto
_Features = descriptor_pb2.FeatureSet

# Defaults for files using editions syntax
EDITION_DEFAULTS = _Features(
    field_presence=_Features.EXPLICIT,
    repeated_field_encoding=_Features.PACKED,
)


def _field_type(value: int) -> FieldType:
    # TYPE_INT32 -> int32
    return FieldType(_FieldProto.Type.Name(value).removeprefix("TYPE_").lower())


def _resolve_features(options, inherited: _Features) -> _Features:
    """Features set on options, layered over those of the enclosing scope."""
    if not options.HasField("features"):
        return inherited
    resolved = _Features()
    resolved.CopyFrom(inherited)
    resolved.MergeFrom(options.features)
    return resolved


def _is_packed(
    proto: _FieldProto, kind: FieldType, syntax: str, features: _Features | None = None
) -> bool:
    if proto.label != _FieldProto.LABEL_REPEATED or kind not in PACKABLE_TYPES:
        return False
    if features is not None:
        return features.repeated_field_encoding == _Features.PACKED
    if proto.options.HasField("packed"):
        return proto.options.packed
    return syntax != "proto2"


def load_field(
    proto: _FieldProto, syntax: str = "proto3", features: _Features | None = None
) -> FieldDescriptor:
    """Convert a single field descriptor.

    features are the editions features inherited from the enclosing message;
    they are ignored for proto2 and proto3 files.
    """
    kind = _field_type(proto.type)
    optional = proto.proto3_optional

    if syntax == "editions":
        features = _resolve_features(proto.options, features if features is not None else EDITION_DEFAULTS)
        explicit = optional or features.field_presence != _Features.IMPLICIT
    else:
        features = None
        explicit = optional or syntax == "proto2"

    if proto.label == _FieldProto.LABEL_REPEATED:
        cardinality = Cardinality.REPEATED
    elif proto.HasField("oneof_index") and not optional:
        cardinality = Cardinality.ONEOF
    else:
        cardinality = Cardinality.SINGULAR

    return FieldDescriptor(
        name=proto.name,
        number=proto.number,
        cardinality=cardinality,
        type=kind,
        type_name=proto.type_name or None,
        # Fields wrapped in a synthetic oneof are plain optional fields
        oneof_index=proto.oneof_index if proto.HasField("oneof_index") and not optional else None,
        json_name=proto.json_name or None,
        packed=_is_packed(proto, kind, syntax, features),
        optional=optional,
        explicit_presence=explicit and proto.label != _FieldProto.LABEL_REPEATED,
        default_value=proto.default_value if proto.HasField("default_value") else None,
    )


def load_enum(proto: descriptor_pb2.EnumDescriptorProto) -> EnumDescriptor:
    """Convert an enum descriptor."""
    return EnumDescriptor(
        name=proto.name,
        values=[EnumValue(name=v.name, number=v.number) for v in proto.value],
    )


def load_message(
    proto: descriptor_pb2.DescriptorProto,
    scope: str,
    syntax: str = "proto3",
    features: _Features | None = None,
) -> MessageDescriptor:
    """Convert a message descriptor and everything nested in it.

    Args:
        proto: The message descriptor
        scope: Fully-qualified name of the enclosing scope (leading dot)
        syntax: Syntax of the file the message belongs to
        features: Editions features inherited from the enclosing scope
    """
    full_name = f"{scope}.{proto.name}"
    if syntax == "editions":
        features = _resolve_features(proto.options, features if features is not None else EDITION_DEFAULTS)
    entries = {
        f"{full_name}.{nested.name}": nested
        for nested in proto.nested_type
        if nested.options.map_entry
    }

    fields: list[FieldDescriptor] = []
    for field_proto in proto.field:
        loaded = load_field(field_proto, syntax, features)
        entry = entries.get(field_proto.type_name)
        if entry is not None:
            if len(entry.field) != 2:
                raise SchemaError(f"Map entry {field_proto.type_name} must have exactly two fields")
            key, value = sorted(entry.field, key=lambda f: f.number)
            if (key.number, value.number) != (1, 2):
                raise SchemaError(f"Map entry {field_proto.type_name} must number key=1, value=2")
            loaded.map_key = load_field(key, syntax, features)
            loaded.map_value = load_field(value, syntax, features)
        fields.append(loaded)

    oneofs = []
    for index, oneof in enumerate(proto.oneof_decl):
        members = [f for f in proto.field if f.HasField("oneof_index") and f.oneof_index == index]
        synthetic = bool(members) and all(f.proto3_optional for f in members)
        oneofs.append(OneofDescriptor(name=oneof.name, synthetic=synthetic))

    return MessageDescriptor(
        name=proto.name,
        fields=fields,
        nested_messages=[load_message(m, full_name, syntax, features) for m in proto.nested_type],
        nested_enums=[load_enum(e) for e in proto.enum_type],
        oneofs=oneofs,
        map_entry=proto.options.map_entry,
    )


def load_service(proto: descriptor_pb2.ServiceDescriptorProto) -> ServiceDescriptor:
    """Convert a service descriptor."""
    return ServiceDescriptor(
        name=proto.name,
        methods=[
            MethodDescriptor(
                name=m.name,
                input_type=m.input_type,
                output_type=m.output_type,
                client_streaming=m.client_streaming,
                server_streaming=m.server_streaming,
            )
            for m in proto.method
        ],
    )


def load_file(proto: descriptor_pb2.FileDescriptorProto) -> SchemaFile:
    """Convert a file descriptor."""
    syntax = proto.syntax or "proto2"
    package = proto.package or None
    scope = f".{package}" if package else ""
    features = None
    if syntax == "editions":
        features = _resolve_features(proto.options, EDITION_DEFAULTS)

    return SchemaFile(
        name=proto.name,
        package=package,
        dependencies=list(proto.dependency),
        public_dependencies=list(proto.public_dependency),
        enums=[load_enum(e) for e in proto.enum_type],
        messages=[load_message(m, scope, syntax, features) for m in proto.message_type],
        services=[load_service(s) for s in proto.service],
        syntax=syntax,
    )


def load_request(data: bytes) -> CompileRequest:
    """Decode a serialized CodeGeneratorRequest."""
    try:
        request = plugin_pb2.CodeGeneratorRequest.FromString(data)
    except DecodeError as e:
        raise SchemaError(f"Could not decode CodeGeneratorRequest: {e}") from e

    version = CompilerVersion()
    if request.HasField("compiler_version"):
        v = request.compiler_version
        version = CompilerVersion(major=v.major, minor=v.minor, patch=v.patch, suffix=v.suffix)

    files = [load_file(f) for f in request.proto_file]
    logger.debug("Loaded %d schema files from request", len(files))

    return CompileRequest(
        files=files,
        parameter=request.parameter,
        compiler_version=version,
        files_to_generate=list(request.file_to_generate),
    )


def load_descriptor_set(data: bytes) -> list[SchemaFile]:
    """Decode a serialized FileDescriptorSet (protoc --descriptor_set_out)."""
    try:
        descriptor_set = descriptor_pb2.FileDescriptorSet.FromString(data)
    except DecodeError as e:
        raise SchemaError(f"Could not decode FileDescriptorSet: {e}") from e
    return [load_file(f) for f in descriptor_set.file]


def encode_response(files: list[tuple[str, str]]) -> bytes:
    """Encode generated (name, content) pairs as a CodeGeneratorResponse."""
    response = plugin_pb2.CodeGeneratorResponse(
        supported_features=plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL,
    )
    for name, content in files:
        response.file.add(name=name, content=content)
    return response.SerializeToString(deterministic=True)
