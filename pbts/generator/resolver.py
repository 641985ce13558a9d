"""Symbol and dependency resolution across the schema graph."""

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import StrEnum, auto

from .errors import SchemaError
from .naming import UniqueNames, legalize, namespace_path
from .types import EnumDescriptor, FieldDescriptor, MessageDescriptor, SchemaFile

logger = logging.getLogger(__name__)

RUNTIME_ALIAS_BASE = "pb"
RPC_ALIAS_BASE = "grpc"
DEPENDENCY_ALIAS_BASE = "dependency"


class SymbolKind(StrEnum):
    MESSAGE = auto()
    ENUM = auto()


@dataclass(frozen=True)
class Symbol:
    """Where a fully-qualified type lives and what it is called there."""

    full_name: str  # .package.Outer.Inner
    file_name: str
    local_path: str  # Outer.Inner, legalized
    kind: SymbolKind
    map_entry: bool = False
    default_member: str | None = None  # First enum constant


class SymbolTable:
    """Index of every type declared anywhere in the schema graph.

    Built once per run before any file is translated; read-only afterwards.
    """

    def __init__(self, files: list[SchemaFile]):
        self.files = {f.name: f for f in files}
        self._symbols: dict[str, Symbol] = {}
        self._top_level: dict[str, set[str]] = {}
        self._nested: dict[str, set[str]] = {}  # file -> names declared below the top level
        self._children: dict[str, set[str]] = {}  # message full name -> nested names

        for schema in files:
            names = UniqueNames()
            self._nested[schema.name] = set()
            for enum in schema.enums:
                self._add_enum(schema, schema.scope, "", enum, names)
            for message in schema.messages:
                self._add_message(schema, schema.scope, "", message, names)
            self._top_level[schema.name] = set(
                self._symbols[f"{schema.scope}.{d.name}"].local_path
                for d in [*schema.enums, *schema.messages]
            )

        logger.debug("Indexed %d symbols across %d files", len(self._symbols), len(files))

    def _add_enum(
        self,
        schema: SchemaFile,
        scope: str,
        parent_path: str,
        enum: EnumDescriptor,
        names: UniqueNames,
    ) -> str:
        local = names.claim(enum.name)
        self._symbols[f"{scope}.{enum.name}"] = Symbol(
            full_name=f"{scope}.{enum.name}",
            file_name=schema.name,
            local_path=f"{parent_path}.{local}" if parent_path else local,
            kind=SymbolKind.ENUM,
            default_member=enum.values[0].name if enum.values else None,
        )
        return local

    def _add_message(
        self,
        schema: SchemaFile,
        scope: str,
        parent_path: str,
        message: MessageDescriptor,
        names: UniqueNames,
    ) -> str | None:
        full_name = f"{scope}.{message.name}"
        if message.map_entry:
            # Never declared, but recorded so references to it can be detected
            self._symbols[full_name] = Symbol(
                full_name=full_name,
                file_name=schema.name,
                local_path="",
                kind=SymbolKind.MESSAGE,
                map_entry=True,
            )
            return None

        local = names.claim(message.name)
        path = f"{parent_path}.{local}" if parent_path else local
        self._symbols[full_name] = Symbol(
            full_name=full_name,
            file_name=schema.name,
            local_path=path,
            kind=SymbolKind.MESSAGE,
        )

        # Nested enums and messages share the message's namespace
        nested_names = UniqueNames()
        children = set()
        for enum in message.nested_enums:
            children.add(self._add_enum(schema, full_name, path, enum, nested_names))
        for nested in message.nested_messages:
            children.add(self._add_message(schema, full_name, path, nested, nested_names))
        children.discard(None)

        self._children[full_name] = children
        self._nested[schema.name] |= children
        return local

    def __contains__(self, full_name: str) -> bool:
        return full_name in self._symbols

    def lookup(self, full_name: str) -> Symbol:
        """Find a symbol by fully-qualified name."""
        try:
            return self._symbols[full_name]
        except KeyError:
            raise SchemaError(f"Unresolved type reference {full_name}") from None

    def top_level_names(self, file_name: str) -> set[str]:
        """Declaration names at the top of a file's output."""
        return self._top_level.get(file_name, set())

    def nested_names(self, file_name: str) -> set[str]:
        """Declaration names inside message namespaces of a file."""
        return self._nested.get(file_name, set())

    def children(self, full_name: str) -> set[str]:
        """Names declared directly inside a message's namespace."""
        return self._children.get(full_name, set())


@dataclass
class DependencyMap:
    """Identifiers allocated for one generated file.

    names holds every identifier taken at the top of the file, so declarations
    added later (RPC classes) cannot collide with types or import aliases.
    """

    file_name: str
    runtime_alias: str
    rpc_alias: str
    aliases: dict[str, str] = field(default_factory=dict)  # dependency file -> alias
    root_aliases: dict[str, str] = field(default_factory=dict)  # top-level name -> alias
    names: UniqueNames = field(default_factory=UniqueNames, repr=False, compare=False)

    def alias_for(self, file_name: str) -> str:
        try:
            return self.aliases[file_name]
        except KeyError:
            raise SchemaError(f"{self.file_name} references {file_name} without importing it") from None


def _field_types(fields: list[FieldDescriptor]) -> Iterator[str]:
    for f in fields:
        if f.map_value is not None:
            if f.map_value.type_name:
                yield f.map_value.type_name
        elif f.type_name:
            yield f.type_name


def _message_types(message: MessageDescriptor) -> Iterator[str]:
    if message.map_entry:
        return
    yield from _field_types(message.fields)
    for nested in message.nested_messages:
        yield from _message_types(nested)


def referenced_types(schema: SchemaFile) -> Iterator[str]:
    """Every type name a file refers to, in declaration order."""
    for message in schema.messages:
        yield from _message_types(message)
    for service in schema.services:
        for method in service.methods:
            yield method.input_type
            yield method.output_type


def resolve(symbols: SymbolTable, schema: SchemaFile) -> DependencyMap:
    """Allocate import aliases for one file.

    Declared dependencies get aliases in declaration order. Types reachable only
    through a public import of a dependency get an extra alias afterwards, in
    first-reference order. Top-level types whose name is reused inside a message
    namespace get a root alias last, so nested code can still reach them.

    Aliases avoid every declaration name in the file, nested ones included,
    since aliases are referenced from inside message namespaces.
    """
    top_level = symbols.top_level_names(schema.name)
    nested = symbols.nested_names(schema.name)
    reserved = top_level | nested
    if schema.package:
        reserved.add(legalize(schema.package.split(".")[0]))
    names = UniqueNames(reserved)

    deps = DependencyMap(
        file_name=schema.name,
        runtime_alias=names.allocate(RUNTIME_ALIAS_BASE),
        rpc_alias=names.allocate(RPC_ALIAS_BASE),
        names=names,
    )

    for dependency in schema.dependencies:
        if dependency not in deps.aliases:
            deps.aliases[dependency] = names.allocate(DEPENDENCY_ALIAS_BASE)

    for type_name in referenced_types(schema):
        symbol = symbols.lookup(type_name)
        if symbol.file_name != schema.name and symbol.file_name not in deps.aliases:
            logger.debug("%s reaches %s through a public import", schema.name, symbol.file_name)
            deps.aliases[symbol.file_name] = names.allocate(DEPENDENCY_ALIAS_BASE)

    for name in sorted(top_level & nested):
        deps.root_aliases[name] = names.allocate(name)

    return deps


@dataclass
class FileContext:
    """Per-file state threaded through translation and RPC generation."""

    schema: SchemaFile
    symbols: SymbolTable
    dependencies: DependencyMap
    wraps_in_namespace: Callable[[SchemaFile], bool] = lambda _schema: False
    used_root_aliases: dict[str, str] = field(default_factory=dict)  # alias -> top-level name
    _declared: dict[str, str] = field(default_factory=dict, repr=False)

    @property
    def runtime_alias(self) -> str:
        return self.dependencies.runtime_alias

    @property
    def rpc_alias(self) -> str:
        return self.dependencies.rpc_alias

    def declare(self, name: str, key: str | None = None) -> str:
        """Reserve a top-level identifier, suffixing `_N` if it is taken.

        The same key always yields the same identifier within one file.
        """
        key = key or name
        if key not in self._declared:
            self._declared[key] = self.dependencies.names.claim(name)
        return self._declared[key]

    def symbol(self, type_name: str) -> Symbol:
        symbol = self.symbols.lookup(type_name)
        if symbol.map_entry:
            raise SchemaError(f"{type_name} is a map entry and cannot be referenced directly")
        return symbol

    def _shadowed(self, name: str, scope: str) -> bool:
        # Walk the enclosing message namespaces up to the file scope
        while scope and scope != self.schema.scope:
            if name in self.symbols.children(scope):
                return True
            scope = scope.rsplit(".", 1)[0]
        return False

    def qualify(self, type_name: str, scope: str = "") -> str:
        """Render a reference to a type from inside the current file.

        scope is the fully-qualified name of the message namespace the
        reference appears in; empty for the top of the file.
        """
        symbol = self.symbol(type_name)
        if symbol.file_name == self.schema.name:
            root, _, rest = symbol.local_path.partition(".")
            if not self._shadowed(root, scope):
                return symbol.local_path
            alias = self.dependencies.root_aliases[root]
            self.used_root_aliases[alias] = root
            return f"{alias}.{rest}" if rest else alias

        alias = self.dependencies.alias_for(symbol.file_name)
        dependency = self.symbols.files.get(symbol.file_name)
        if dependency is not None and dependency.package and self.wraps_in_namespace(dependency):
            return f"{alias}.{namespace_path(dependency.package)}.{symbol.local_path}"
        return f"{alias}.{symbol.local_path}"
