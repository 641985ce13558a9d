"""Per-file statistics for schema files."""

from dataclasses import dataclass

from dataclasses_json import DataClassJsonMixin

from .naming import output_name
from .types import MessageDescriptor, SchemaFile


@dataclass(frozen=True)
class FileSummary(DataClassJsonMixin):
    """Counts for one schema file (nested types included, map entries excluded)."""

    name: str
    output: str
    package: str | None
    syntax: str
    dependencies: int
    enums: int
    messages: int
    fields: int
    maps: int
    oneofs: int
    services: int
    methods: int


def _walk(messages: list[MessageDescriptor]) -> list[MessageDescriptor]:
    found = []
    for message in messages:
        if message.map_entry:
            continue
        found.append(message)
        found.extend(_walk(message.nested_messages))
    return found


def summarize_file(schema: SchemaFile) -> FileSummary:
    messages = _walk(schema.messages)
    return FileSummary(
        name=schema.name,
        output=output_name(schema.name),
        package=schema.package,
        syntax=schema.syntax,
        dependencies=len(schema.dependencies),
        enums=len(schema.enums) + sum(len(m.nested_enums) for m in messages),
        messages=len(messages),
        fields=sum(len(m.fields) for m in messages),
        maps=sum(1 for m in messages for f in m.fields if f.is_map),
        oneofs=sum(1 for m in messages for o in m.oneofs if not o.synthetic),
        services=len(schema.services),
        methods=sum(len(s.methods) for s in schema.services),
    )


def summarize(files: list[SchemaFile]) -> list[FileSummary]:
    """Summaries for every file, in input order."""
    return [summarize_file(f) for f in files]
