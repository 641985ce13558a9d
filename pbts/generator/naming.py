"""Identifier legalization, unique names and output paths."""

import posixpath
import re

# Reserved words that cannot be used as TypeScript declaration names
RESERVED_WORDS = frozenset(
    [
        "break",
        "case",
        "catch",
        "class",
        "const",
        "continue",
        "debugger",
        "default",
        "delete",
        "do",
        "else",
        "enum",
        "export",
        "extends",
        "false",
        "finally",
        "for",
        "function",
        "if",
        "implements",
        "import",
        "in",
        "instanceof",
        "interface",
        "let",
        "new",
        "null",
        "package",
        "private",
        "protected",
        "public",
        "return",
        "static",
        "super",
        "switch",
        "this",
        "throw",
        "true",
        "try",
        "typeof",
        "var",
        "void",
        "while",
        "with",
        "yield",
    ]
)

# Globals referenced by generated code; shadowing them breaks the output
GENERATED_GLOBALS = frozenset(
    [
        "Array",
        "Buffer",
        "Map",
        "Object",
        "Promise",
        "ReturnType",
        "Uint8Array",
    ]
)

# Members of generated message classes; fields may not take these names
MESSAGE_MEMBERS = frozenset(
    [
        "clone",
        "cloneMessage",
        "constructor",
        "getExtension",
        "getJsPbMessageId",
        "serialize",
        "serializeBinary",
        "setExtension",
        "toArray",
        "toObject",
        "toString",
    ]
)

OUTPUT_EXTENSION = ".ts"

_EXTENSION = re.compile(r"\.[^/.]+$")


def legalize(name: str) -> str:
    """Turn a schema name into a usable TypeScript identifier."""
    if name in RESERVED_WORDS or name in GENERATED_GLOBALS:
        return f"{name}_"
    return name


def member_name(name: str) -> str:
    """Field name as a class member, clear of generated methods."""
    if name in MESSAGE_MEMBERS:
        return f"{name}_"
    return name


def namespace_path(package: str) -> str:
    """Legalize each segment of a dotted package name."""
    return ".".join(legalize(segment) for segment in package.split("."))


class UniqueNames:
    """Allocates identifiers that are unique within one scope.

    Allocation is deterministic: the same sequence of requests always yields the
    same names.
    """

    def __init__(self, reserved: frozenset[str] | set[str] = frozenset()) -> None:
        self._taken: set[str] = set(reserved)
        self._counters: dict[str, int] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._taken

    def allocate(self, base: str) -> str:
        """Return a fresh `base_N` name (N starting at 1)."""
        counter = self._counters.get(base, 0)
        while True:
            counter += 1
            candidate = f"{base}_{counter}"
            if candidate not in self._taken:
                break
        self._counters[base] = counter
        self._taken.add(candidate)
        return candidate

    def claim(self, name: str) -> str:
        """Claim a legalized form of name, suffixing `_N` on collision."""
        candidate = legalize(name)
        if candidate in self._taken:
            candidate = self.allocate(candidate)
        self._taken.add(candidate)
        return candidate


def replace_extension(filename: str, extension: str = OUTPUT_EXTENSION) -> str:
    """Replace the last extension of filename (a.proto -> a.ts)."""
    return _EXTENSION.sub(extension, filename)


def output_name(filename: str) -> str:
    """Name of the generated file for a schema file."""
    if _EXTENSION.search(filename):
        return replace_extension(filename)
    return filename + OUTPUT_EXTENSION


def import_path(from_file: str, to_file: str) -> str:
    """Module specifier used by from_file to import the output of to_file."""
    start = posixpath.dirname(from_file) or "."
    target = replace_extension(to_file, "")
    return "./" + posixpath.relpath(target, start)
