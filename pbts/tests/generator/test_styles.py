"""Tests for RPC style selection and declarations."""

import logging

import pytest

from pbts.generator.declarations import MethodShape
from pbts.generator.errors import ConfigurationError
from pbts.generator.options import parse_options
from pbts.generator.resolver import FileContext, SymbolTable, resolve
from pbts.generator.styles import OPERATIONS, STYLES, capabilities, load_style, service_path
from pbts.generator.styles.grpc_js import (
    CallInterfaceDeclaration,
    ClientDeclaration,
    GrpcJsStyle,
    UnimplementedServerDeclaration,
)
from pbts.generator.styles.grpc_web import GrpcWebStyle, WebClientDeclaration
from pbts.generator.styles.none import NoRpcStyle

CLASHING = """
name: "clash.proto"
syntax: "proto3"
message_type { name: "EchoClient" }
message_type { name: "UnimplementedEchoService" }
message_type { name: "GrpcUnaryServiceInterface" }
service {
  name: "Echo"
  method { name: "Say" input_type: ".EchoClient" output_type: ".EchoClient" }
}
"""

def _context(files):
    symbols = SymbolTable(files)
    return FileContext(schema=files[-1], symbols=symbols, dependencies=resolve(symbols, files[-1]))


def describe_load_style():
    def finds_registered_styles(expect):
        expect(isinstance(load_style("grpc-js"), GrpcJsStyle)) == True
        expect(isinstance(load_style("grpc-web"), GrpcWebStyle)) == True
        expect(isinstance(load_style("none"), NoRpcStyle)) == True
        expect(sorted(STYLES)) == ["grpc-js", "grpc-web", "none"]

    def rejects_unknown_styles(expect):
        with pytest.raises(ConfigurationError) as exc:
            load_style("thrift")
        expect(str(exc.value)).includes("Unknown style 'thrift'")
        expect(str(exc.value)).includes("grpc-js, grpc-web, none")

    def rejects_missing_style(expect):
        with pytest.raises(ConfigurationError):
            load_style("")


def describe_capabilities():
    def lists_overridden_operations(expect):
        expect(capabilities(GrpcJsStyle())) == list(OPERATIONS)
        expect(capabilities(GrpcWebStyle())) == ["create_service_client"]
        expect(capabilities(NoRpcStyle())) == []

    def reports_not_supported_by_default(expect, schemas, protos):
        files = schemas(protos["service"])
        context = _context(files)
        style = NoRpcStyle()
        service = files[0].services[0]
        options = parse_options("style=none")
        expect(style.create_service_client(files[0], service, context, options)) == None
        expect(style.create_unimplemented_server(files[0], service, context)) == None
        expect(style.create_shared_interface_types(context)) == []
        expect(style.wraps_output_in_namespace(files[0])) == False


def describe_grpc_js():
    def builds_server_and_client(expect, schemas, protos):
        files = schemas(protos["service"])
        context = _context(files)
        service = files[0].services[0]
        style = GrpcJsStyle()

        server = style.create_unimplemented_server(files[0], service, context)
        client = style.create_service_client(files[0], service, context, parse_options("style=grpc-js"))
        expect(isinstance(server, UnimplementedServerDeclaration)) == True
        expect(server.name) == "UnimplementedEchoService"
        expect(isinstance(client, ClientDeclaration)) == True
        expect(client.name) == "EchoClient"
        expect(client.server_name) == "UnimplementedEchoService"
        expect([m.shape.value for m in client.methods]) == [
            "unary",
            "server_streaming",
            "client_streaming",
            "bidi_streaming",
        ]

    def emits_one_interface_per_call_shape(expect, schemas, protos):
        context = _context(schemas(protos["service"]))
        interfaces = GrpcJsStyle().create_shared_interface_types(context)
        expect(all(isinstance(i, CallInterfaceDeclaration) for i in interfaces)) == True
        expect([i.name for i in interfaces]) == [
            "GrpcUnaryServiceInterface",
            "GrpcStreamServiceInterface",
            "GrpcWritableServiceInterface",
            "GrpcChunkServiceInterface",
        ]

    def wraps_only_packaged_files(expect, schemas, protos):
        a, b = schemas(protos["a"], protos["b"])
        expect(GrpcJsStyle().wraps_output_in_namespace(a)) == True
        expect(GrpcJsStyle().wraps_output_in_namespace(b)) == False

    def uses_the_package_in_method_paths(expect, schemas, protos):
        files = schemas(protos["service"])
        expect(service_path(files[0], files[0].services[0])) == "demo.Echo"
        server = GrpcJsStyle().create_unimplemented_server(
            files[0], files[0].services[0], _context(files)
        )
        expect(server.methods[0].path) == "/demo.Echo/Say"
        expect(server.methods[0].input_type) == "Req"

    def prefers_configured_grpc_package(expect):
        style = GrpcJsStyle()
        expect(style.grpc_package(parse_options("style=grpc-js"))) == "@grpc/grpc-js"
        expect(style.grpc_package(parse_options("style=grpc-js,grpc_package=x"))) == "x"

    def suffixes_names_taken_by_messages(expect, schemas):
        files = schemas(CLASHING)
        context = _context(files)
        service = files[0].services[0]
        style = GrpcJsStyle()
        options = parse_options("style=grpc-js")

        interfaces = style.create_shared_interface_types(context)
        expect(interfaces[0].name) == "GrpcUnaryServiceInterface_1"
        expect(interfaces[1].name) == "GrpcStreamServiceInterface"

        server = style.create_unimplemented_server(files[0], service, context)
        client = style.create_service_client(files[0], service, context, options)
        expect(server.name) == "UnimplementedEchoService_1"
        expect(client.name) == "EchoClient_1"
        expect(client.server_name) == "UnimplementedEchoService_1"
        expect(client.interfaces[MethodShape.UNARY]) == "GrpcUnaryServiceInterface_1"

        # Asking again yields the same names
        expect(style.create_service_client(files[0], service, context, options).name) == "EchoClient_1"

def describe_grpc_web():
    def skips_client_and_bidi_streaming(expect, schemas, protos, caplog):
        files = schemas(protos["service"])
        with caplog.at_level(logging.WARNING):
            client = GrpcWebStyle().create_service_client(
                files[0], files[0].services[0], _context(files), parse_options("style=grpc-web")
            )
        expect(isinstance(client, WebClientDeclaration)) == True
        expect([m.name for m in client.methods]) == ["Say", "Watch"]
        expect(caplog.text).includes("/demo.Echo/Upload")
        expect(caplog.text).includes("/demo.Echo/Chat")

    def suffixes_client_names_taken_by_messages(expect, schemas):
        files = schemas(CLASHING)
        client = GrpcWebStyle().create_service_client(
            files[0], files[0].services[0], _context(files), parse_options("style=grpc-web")
        )
        expect(client.name) == "EchoClient_1"
