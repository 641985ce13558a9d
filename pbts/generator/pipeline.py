"""Compilation of a whole request into generated files."""

import logging
from dataclasses import dataclass

from dataclasses_json import DataClassJsonMixin

from .declarations import (
    AliasDeclaration,
    Declaration,
    GeneratedSource,
    Import,
    NamespaceDeclaration,
)
from .loader import encode_response, load_request
from .naming import import_path, namespace_path, output_name
from .options import Options, parse_options
from .render import render_source
from .resolver import DependencyMap, FileContext, SymbolTable, resolve
from .styles import RpcStyle, load_style
from .translator import translate_enum, translate_message
from .types import CompileRequest, SchemaFile

logger = logging.getLogger(__name__)


@dataclass
class GeneratedFile(DataClassJsonMixin):
    """One output file: its name and full text."""

    name: str
    content: str


def _imports(
    schema: SchemaFile, dependencies: DependencyMap, style: RpcStyle, options: Options
) -> list[Import]:
    imports = [
        Import(alias=alias, module=import_path(schema.name, file_name))
        for file_name, alias in dependencies.aliases.items()
    ]
    imports.append(Import(alias=dependencies.runtime_alias, module=options.runtime_package))
    imports.append(Import(alias=dependencies.rpc_alias, module=style.grpc_package(options)))
    return imports


class Compiler:
    """Drives one compilation pass over a request.

    Options, style and symbol table are set up before any file is compiled, so
    configuration and linking errors surface before any output exists.
    """

    def __init__(self, request: CompileRequest):
        self.request = request
        self.options = parse_options(request.parameter)
        self.style = load_style(self.options.style)
        self.symbols = SymbolTable(request.files)

    def compile_file(self, schema: SchemaFile) -> GeneratedFile:
        """Generate the output for a single schema file."""
        dependencies = resolve(self.symbols, schema)
        context = FileContext(
            schema=schema,
            symbols=self.symbols,
            dependencies=dependencies,
            wraps_in_namespace=self.style.wraps_output_in_namespace,
        )
        logger.debug(
            "%s: runtime=%s rpc=%s dependencies=%s",
            schema.name,
            dependencies.runtime_alias,
            dependencies.rpc_alias,
            dependencies.aliases,
        )

        body: list[Declaration] = [translate_enum(e, context, schema.scope) for e in schema.enums]
        for message in schema.messages:
            body.extend(translate_message(message, context, schema.scope))

        body.extend(self.style.create_shared_interface_types(context))
        for service in schema.services:
            server = self.style.create_unimplemented_server(schema, service, context)
            client = self.style.create_service_client(schema, service, context, self.options)
            body.extend(d for d in (server, client) if d is not None)

        # Nested code reaches shadowed top-level types through these
        body.extend(
            AliasDeclaration(name=alias, target=target)
            for alias, target in sorted(context.used_root_aliases.items())
        )

        if schema.package and self.style.wraps_output_in_namespace(schema):
            body = [NamespaceDeclaration(name=namespace_path(schema.package), body=body)]

        source = GeneratedSource(
            source=schema.name,
            compiler_version=str(self.request.compiler_version),
            imports=_imports(schema, dependencies, self.style, self.options),
            body=body,
        )
        name = output_name(schema.name)
        logger.debug("%s -> %s (%d declarations)", schema.name, name, len(body))
        return GeneratedFile(name=name, content=render_source(source))

    def compile(self) -> list[GeneratedFile]:
        """Generate one file per schema file, in request order."""
        return [self.compile_file(schema) for schema in self.request.files]


def compile_request(request: CompileRequest) -> list[GeneratedFile]:
    return Compiler(request).compile()


def run_plugin(data: bytes) -> bytes:
    """Run as a protoc plugin: CodeGeneratorRequest in, CodeGeneratorResponse out."""
    files = compile_request(load_request(data))
    return encode_response([(f.name, f.content) for f in files])
