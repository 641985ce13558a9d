"""Base class for RPC code generation styles."""

from ..declarations import Declaration, MethodDeclaration
from ..options import Options
from ..resolver import FileContext
from ..types import SchemaFile, ServiceDescriptor


def service_path(schema: SchemaFile, service: ServiceDescriptor) -> str:
    """Fully-qualified service name as used in RPC paths (package.Service)."""
    return f"{schema.package}.{service.name}" if schema.package else service.name


def method_declarations(
    schema: SchemaFile, service: ServiceDescriptor, context: FileContext
) -> list[MethodDeclaration]:
    """Translate the methods of a service, qualifying input and output types."""
    path = service_path(schema, service)
    return [
        MethodDeclaration(
            name=method.name,
            path=f"/{path}/{method.name}",
            input_type=context.qualify(method.input_type),
            output_type=context.qualify(method.output_type),
            client_streaming=method.client_streaming,
            server_streaming=method.server_streaming,
        )
        for method in service.methods
    ]


class RpcStyle:
    """Generates the RPC layer for one target framework.

    Every operation is optional. The defaults report "not supported" (None, an
    empty list or False) and the pipeline emits nothing for that concern.
    """

    name = ""
    description = ""
    default_grpc_package = ""

    def create_service_client(
        self,
        schema: SchemaFile,
        service: ServiceDescriptor,
        context: FileContext,
        options: Options,
    ) -> Declaration | None:
        """Client class with one member per RPC method."""
        return None

    def create_unimplemented_server(
        self, schema: SchemaFile, service: ServiceDescriptor, context: FileContext
    ) -> Declaration | None:
        """Abstract server class with one handler slot per RPC method."""
        return None

    def create_shared_interface_types(self, context: FileContext) -> list[Declaration]:
        """Types emitted once per file regardless of the number of services."""
        return []

    def wraps_output_in_namespace(self, schema: SchemaFile) -> bool:
        """Whether the file's declarations nest inside a namespace named by its package."""
        return False

    def grpc_package(self, options: Options) -> str:
        return options.grpc_package or self.default_grpc_package
