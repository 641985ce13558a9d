"""Translation of enum and message descriptors into declarations."""

import json
import logging

from .declarations import (
    Declaration,
    EnumDeclaration,
    EnumMember,
    FieldDeclaration,
    MessageDeclaration,
    NamespaceDeclaration,
    OneofDeclaration,
)
from .errors import SchemaError
from .naming import member_name
from .resolver import FileContext
from .types import Cardinality, EnumDescriptor, FieldDescriptor, FieldType, MessageDescriptor

logger = logging.getLogger(__name__)

# Map protobuf kinds to TypeScript types (google-protobuf uses number for 64-bit ints)
PRIMITIVE_TYPE_MAP = {
    FieldType.DOUBLE: "number",
    FieldType.FLOAT: "number",
    FieldType.INT64: "number",
    FieldType.UINT64: "number",
    FieldType.INT32: "number",
    FieldType.FIXED64: "number",
    FieldType.FIXED32: "number",
    FieldType.BOOL: "boolean",
    FieldType.STRING: "string",
    FieldType.BYTES: "Uint8Array",
    FieldType.UINT32: "number",
    FieldType.SFIXED32: "number",
    FieldType.SFIXED64: "number",
    FieldType.SINT32: "number",
    FieldType.SINT64: "number",
}

DEFAULT_VALUES = {
    "number": "0",
    "boolean": "false",
    "string": '""',
    "Uint8Array": "new Uint8Array(0)",
}


def _scalar_default(kind: FieldType, type_ref: str, explicit: str | None) -> str:
    if explicit is None:
        return DEFAULT_VALUES[type_ref]
    if kind == FieldType.STRING:
        return json.dumps(explicit)
    if kind == FieldType.BYTES:
        return f"new Uint8Array({json.dumps(list(explicit.encode('latin-1', 'replace')))})"
    if kind == FieldType.BOOL:
        return "true" if explicit == "true" else "false"
    if explicit in ("inf", "-inf", "nan"):
        return {"inf": "Infinity", "-inf": "-Infinity", "nan": "NaN"}[explicit]
    return explicit


def _has_presence(f: FieldDescriptor) -> bool:
    if f.repeated:
        return False
    if f.type in (FieldType.MESSAGE, FieldType.GROUP):
        return True
    return f.cardinality == Cardinality.ONEOF or f.optional or f.explicit_presence


def translate_field(f: FieldDescriptor, context: FileContext, scope: str = "") -> FieldDeclaration:
    """Translate a field, rewriting map-entry references into Map fields.

    scope is the message namespace the field's class is declared in.
    """
    if f.map_key is not None and f.map_value is not None:
        # A value that is itself a map entry fails in context.qualify
        key = translate_field(f.map_key, context, scope)
        value = translate_field(f.map_value, context, scope)
        return FieldDeclaration(
            name=member_name(f.name),
            number=f.number,
            kind=f.type,
            type_ref=value.type_ref,
            default="new Map()",
            repeated=True,
            key=key,
            value=value,
        )

    if f.type in PRIMITIVE_TYPE_MAP:
        type_ref = PRIMITIVE_TYPE_MAP[f.type]
        default = _scalar_default(f.type, type_ref, f.default_value)
    elif f.type_name is None:
        raise SchemaError(f"Field {f.name} of kind {f.type} has no type reference")
    else:
        type_ref = context.qualify(f.type_name, scope)
        default = "undefined"
        if f.type == FieldType.ENUM:
            symbol = context.symbol(f.type_name)
            member = f.default_value or symbol.default_member
            default = f"{type_ref}.{member}" if member else "0"

    return FieldDeclaration(
        name=member_name(f.name),
        number=f.number,
        kind=f.type,
        type_ref=type_ref,
        default="[]" if f.repeated else default,
        repeated=f.repeated,
        packed=f.packed,
        presence=_has_presence(f),
    )


def translate_enum(enum: EnumDescriptor, context: FileContext, scope: str) -> EnumDeclaration:
    """Translate an enum; constants keep their order and values."""
    symbol = context.symbol(f"{scope}.{enum.name}")
    return EnumDeclaration(
        name=symbol.local_path.rsplit(".", 1)[-1],
        members=[EnumMember(name=v.name, value=v.number) for v in enum.values],
    )


def translate_message(
    message: MessageDescriptor, context: FileContext, scope: str
) -> list[Declaration]:
    """Translate a message and its nested types.

    Returns the message class followed by a namespace holding the nested
    declarations, if any. Map entries translate to nothing.
    """
    if message.map_entry:
        return []

    full_name = f"{scope}.{message.name}"
    symbol = context.symbol(full_name)
    name = symbol.local_path.rsplit(".", 1)[-1]

    nested: list[Declaration] = [translate_enum(e, context, full_name) for e in message.nested_enums]
    for nested_message in message.nested_messages:
        nested.extend(translate_message(nested_message, context, full_name))

    # Synthetic oneofs (proto3 optional) are not variants
    groups: dict[int, OneofDeclaration] = {}
    for index, oneof in enumerate(message.oneofs):
        if not oneof.synthetic:
            groups[index] = OneofDeclaration(name=member_name(oneof.name), alternatives=[])
    group_index = {index: position for position, index in enumerate(groups)}

    members: list[FieldDeclaration] = []
    for f in message.fields:
        declaration = translate_field(f, context, scope)
        if f.oneof_index is not None:
            if f.oneof_index < 0 or f.oneof_index >= len(message.oneofs):
                raise SchemaError(
                    f"Field {full_name}.{f.name} references oneof {f.oneof_index}, "
                    f"but the message declares {len(message.oneofs)}"
                )
            if f.oneof_index in groups:
                group = groups[f.oneof_index]
                declaration.oneof = group.name
                declaration.oneof_group = group_index[f.oneof_index]
                group.alternatives.append(declaration)
        members.append(declaration)

    declaration = MessageDeclaration(
        name=name,
        full_name=full_name,
        runtime_alias=context.runtime_alias,
        members=members,
        oneofs=list(groups.values()),
    )
    logger.debug(
        "Translated %s: %d fields, %d oneofs, %d nested",
        full_name,
        len(members),
        len(declaration.oneofs),
        len(nested),
    )

    if nested:
        return [declaration, NamespaceDeclaration(name=name, body=nested)]
    return [declaration]
