"""Rendering of declarations into TypeScript source."""

import json
from typing import Any

from jinja2 import Environment, PackageLoader

from .declarations import Declaration, FieldDeclaration, GeneratedSource, MessageDeclaration
from .types import PACKABLE_TYPES, FieldType

env = Environment(
    loader=PackageLoader("pbts.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

GENERATOR_NAME = "pbts"


def _literal(value: Any) -> str:
    """TypeScript literal for a Python value."""
    return json.dumps(value)


def _method_suffix(kind: FieldType) -> str:
    """BinaryWriter/BinaryReader method suffix (writeInt32, readSfixed64, ...)."""
    return kind.value.capitalize()


def _object_type(f: FieldDeclaration) -> str:
    """Type of a field in the plain-object form used by fromObject/toObject."""
    if f.key is not None and f.value is not None:
        index = "number" if f.key.type_ref == "number" else "string"
        return f"{{ [key: {index}]: {_object_type(f.value)} }}"
    element = f.type_ref
    if f.is_message:
        element = f"ReturnType<typeof {f.type_ref}.prototype.toObject>"
    return f"{element}[]" if f.repeated else element


def _object_shape(decl: MessageDeclaration) -> str:
    """Object literal type listing every field as optional."""
    if not decl.members:
        return "{}"
    lines = ["{"]
    lines.extend(f"    {m.name}?: {_object_type(m)};" for m in decl.members)
    lines.append("}")
    return "\n".join(lines)


def _data_shape(decl: MessageDeclaration) -> str:
    """Constructor argument type; each oneof becomes a union of exclusive shapes."""
    lines = ["{"]
    lines.extend(f"    {m.name}?: {m.ts_type};" for m in decl.fields)
    lines.append("}")
    shape = "\n".join(lines) if decl.fields else "{}"
    if not decl.oneofs:
        return shape

    variants = []
    for oneof in decl.oneofs:
        alternatives = []
        for alt in oneof.alternatives:
            body = ["{"]
            for other in oneof.alternatives:
                other_type = other.ts_type if other is alt else "never"
                body.append(f"    {other.name}?: {other_type};")
            body.append("}")
            alternatives.append("\n".join(body))
        variants.append("(" + " | ".join(alternatives) + ")")
    return f"({shape} & ({' & '.join(variants)}))"


def _getter(f: FieldDeclaration, pb: str) -> str:
    if f.is_map:
        return f"{pb}.Message.getField(this, {f.number}) as any as {f.ts_type}"
    if f.is_message and f.repeated:
        return f"{pb}.Message.getRepeatedWrapperField(this, {f.type_ref}, {f.number}) as {f.ts_type}"
    if f.is_message:
        return f"{pb}.Message.getWrapperField(this, {f.type_ref}, {f.number}) as {f.ts_type}"
    return f"{pb}.Message.getFieldWithDefault(this, {f.number}, {f.default}) as {f.ts_type}"


def _setter(f: FieldDeclaration, pb: str) -> str:
    if f.is_map:
        return f"{pb}.Message.setField(this, {f.number}, value as any)"
    if f.oneof_group is not None:
        setter = "setOneofWrapperField" if f.is_message else "setOneofField"
        return f"{pb}.Message.{setter}(this, {f.number}, this.#one_of_decls[{f.oneof_group}], value)"
    if f.is_message and f.repeated:
        return f"{pb}.Message.setRepeatedWrapperField(this, {f.number}, value)"
    if f.is_message:
        return f"{pb}.Message.setWrapperField(this, {f.number}, value)"
    return f"{pb}.Message.setField(this, {f.number}, value)"


def _presence_check(f: FieldDeclaration) -> str:
    if f.presence:
        return f"this.has_{f.name}"
    if f.kind in (FieldType.STRING, FieldType.BYTES):
        return f"this.{f.name}.length"
    if f.kind == FieldType.BOOL:
        return f"this.{f.name} != false"
    if f.kind == FieldType.ENUM:
        return f"this.{f.name} != {f.default}"
    return f"this.{f.name} != 0"


def _write_entry_part(f: FieldDeclaration, number: int, value: str) -> str:
    if f.is_message:
        return f"writer.writeMessage({number}, {value}, () => {value}.serialize(writer));"
    return f"writer.write{_method_suffix(f.kind)}({number}, {value});"


def _write_field(f: FieldDeclaration) -> str:
    """Serialization statement(s) for a field."""
    name = f"this.{f.name}"
    if f.key is not None and f.value is not None:
        return "\n".join(
            [
                f"for (const [key, value] of {name}) {{",
                f"    writer.writeMessage({f.number}, {name}, () => {{",
                f"        {_write_entry_part(f.key, 1, 'key')}",
                f"        {_write_entry_part(f.value, 2, 'value')}",
                "    });",
                "}",
            ]
        )
    if f.kind == FieldType.GROUP:
        call = f"writer.writeGroup({f.number}, {name}, () => {name}.serialize(writer))"
        if f.repeated:
            call = (
                f"{name}.forEach((item: {f.type_ref}) => "
                f"writer.writeGroup({f.number}, item, () => item.serialize(writer)))"
            )
    elif f.is_message and f.repeated:
        call = (
            f"writer.writeRepeatedMessage({f.number}, {name}, "
            f"(item: {f.type_ref}) => item.serialize(writer))"
        )
    elif f.is_message:
        call = f"writer.writeMessage({f.number}, {name}, () => {name}.serialize(writer))"
    elif f.packed:
        call = f"writer.writePacked{_method_suffix(f.kind)}({f.number}, {name})"
    elif f.repeated:
        call = f"writer.writeRepeated{_method_suffix(f.kind)}({f.number}, {name})"
    else:
        call = f"writer.write{_method_suffix(f.kind)}({f.number}, {name})"

    check = f"{name}.length" if f.repeated else _presence_check(f)
    return f"if ({check})\n    {call};"


def _read_entry_part(f: FieldDeclaration) -> str:
    if f.is_message:
        return (
            "() => {\n"
            "    let value;\n"
            f"    reader.readMessage(message, () => value = {f.type_ref}.deserialize(reader));\n"
            "    return value;\n"
            "}"
        )
    return f"reader.read{_method_suffix(f.kind)}"


def _read_field(f: FieldDeclaration, pb: str) -> str:
    """Deserialization statement(s) for a field."""
    name = f"message.{f.name}"
    if f.key is not None and f.value is not None:
        return (
            f"reader.readMessage(message, () => {pb}.Map.deserializeBinary({name} as any, reader, "
            f"{_read_entry_part(f.key)}, {_read_entry_part(f.value)}));"
        )
    if f.kind == FieldType.GROUP:
        if f.repeated:
            return (
                f"reader.readGroup({f.number}, message, () => {pb}.Message.addToRepeatedWrapperField("
                f"message, {f.number}, {f.type_ref}.deserialize(reader), {f.type_ref}));"
            )
        return f"reader.readGroup({f.number}, {name}, () => {name} = {f.type_ref}.deserialize(reader));"
    if f.is_message and f.repeated:
        return (
            f"reader.readMessage({name}, () => {pb}.Message.addToRepeatedWrapperField("
            f"message, {f.number}, {f.type_ref}.deserialize(reader), {f.type_ref}));"
        )
    if f.is_message:
        return f"reader.readMessage({name}, () => {name} = {f.type_ref}.deserialize(reader));"

    suffix = _method_suffix(f.kind)
    if f.repeated and f.kind in PACKABLE_TYPES | {FieldType.ENUM}:
        # Accept both packed and unpacked encodings
        return "\n".join(
            [
                "if (reader.isDelimited())",
                f"    {name}.push(...reader.readPacked{suffix}());",
                "else",
                f"    {pb}.Message.addToRepeatedField(message, {f.number}, reader.read{suffix}());",
            ]
        )
    if f.repeated:
        return f"{pb}.Message.addToRepeatedField(message, {f.number}, reader.read{suffix}());"
    return f"{name} = reader.read{suffix}();"


def _from_object(f: FieldDeclaration) -> str:
    source = f"data.{f.name}"
    if f.key is not None and f.value is not None:
        entries = f"Object.entries({source})"
        if f.value.is_message:
            entries += f".map(([key, value]) => [key, {f.value.type_ref}.fromObject(value as any)])"
        return (
            f"if (typeof {source} == \"object\") {{\n"
            f"    message.{f.name} = new Map({entries} as any);\n"
            "}"
        )
    value = source
    if f.is_message and f.repeated:
        value = f"{source}.map(item => {f.type_ref}.fromObject(item))"
    elif f.is_message:
        value = f"{f.type_ref}.fromObject({source})"
    return f"if ({source} != null) {{\n    message.{f.name} = {value};\n}}"


def _to_object(f: FieldDeclaration) -> str:
    source = f"this.{f.name}"
    if f.key is not None and f.value is not None:
        value = f"Object.fromEntries({source})"
        if f.value.is_message:
            value = (
                f"Object.fromEntries(Array.from({source}).map("
                "([key, value]) => [key, value.toObject()]))"
            )
    elif f.is_message and f.repeated:
        value = f"{source}.map((item: {f.type_ref}) => item.toObject())"
    elif f.is_message:
        value = f"{source}.toObject()"
    else:
        value = source
    return f"if ({source} != null) {{\n    data.{f.name} = {value};\n}}"


def render_declaration(decl: Declaration) -> str:
    """Render one declaration, without a trailing newline."""
    template = env.get_template(decl.template)
    return template.render(decl=decl).rstrip("\n")


def render_all(declarations: list[Declaration]) -> str:
    return "\n".join(render_declaration(d) for d in declarations)


def render_source(source: GeneratedSource) -> str:
    """Render a complete generated file."""
    return env.get_template("file.ts.j2").render(
        source=source,
        generator=GENERATOR_NAME,
    )


env.filters["literal"] = _literal
env.globals.update(
    render_all=render_all,
    object_shape=_object_shape,
    data_shape=_data_shape,
    getter=_getter,
    setter=_setter,
    write_field=_write_field,
    read_field=_read_field,
    from_object=_from_object,
    to_object=_to_object,
)
