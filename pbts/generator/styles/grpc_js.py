"""RPC style for @grpc/grpc-js."""

from dataclasses import dataclass, field
from typing import ClassVar

from ..declarations import Declaration, MethodShape, ServiceDeclaration
from ..options import Options
from ..resolver import FileContext
from ..types import SchemaFile, ServiceDescriptor
from .base import RpcStyle, method_declarations

# Client call signature interface per streaming shape
CALL_INTERFACES = {
    MethodShape.UNARY: "GrpcUnaryServiceInterface",
    MethodShape.SERVER_STREAMING: "GrpcStreamServiceInterface",
    MethodShape.CLIENT_STREAMING: "GrpcWritableServiceInterface",
    MethodShape.BIDI_STREAMING: "GrpcChunkServiceInterface",
}


@dataclass
class CallInterfaceDeclaration(Declaration):
    template: ClassVar[str] = "grpc_js/interface.ts.j2"

    name: str
    shape: MethodShape
    rpc_alias: str


@dataclass
class UnimplementedServerDeclaration(ServiceDeclaration):
    template: ClassVar[str] = "grpc_js/server.ts.j2"


@dataclass
class ClientDeclaration(ServiceDeclaration):
    template: ClassVar[str] = "grpc_js/client.ts.j2"

    server_name: str = ""
    interfaces: dict[MethodShape, str] = field(default_factory=lambda: dict(CALL_INTERFACES))


def _interface_names(context: FileContext) -> dict[MethodShape, str]:
    return {shape: context.declare(name) for shape, name in CALL_INTERFACES.items()}


def _server_name(service: ServiceDescriptor, context: FileContext) -> str:
    return context.declare(f"Unimplemented{service.name}Service", key=f"server:{service.name}")


def _client_name(service: ServiceDescriptor, context: FileContext) -> str:
    return context.declare(f"{service.name}Client", key=f"client:{service.name}")


class GrpcJsStyle(RpcStyle):
    name = "grpc-js"
    description = "Client and abstract server for @grpc/grpc-js"
    default_grpc_package = "@grpc/grpc-js"

    def create_service_client(
        self,
        schema: SchemaFile,
        service: ServiceDescriptor,
        context: FileContext,
        options: Options,
    ) -> Declaration:
        return ClientDeclaration(
            name=_client_name(service, context),
            service_name=service.name,
            rpc_alias=context.rpc_alias,
            methods=method_declarations(schema, service, context),
            server_name=_server_name(service, context),
            interfaces=_interface_names(context),
        )

    def create_unimplemented_server(
        self, schema: SchemaFile, service: ServiceDescriptor, context: FileContext
    ) -> Declaration:
        return UnimplementedServerDeclaration(
            name=_server_name(service, context),
            service_name=service.name,
            rpc_alias=context.rpc_alias,
            methods=method_declarations(schema, service, context),
        )

    def create_shared_interface_types(self, context: FileContext) -> list[Declaration]:
        return [
            CallInterfaceDeclaration(name=name, shape=shape, rpc_alias=context.rpc_alias)
            for shape, name in _interface_names(context).items()
        ]

    def wraps_output_in_namespace(self, schema: SchemaFile) -> bool:
        return bool(schema.package)
