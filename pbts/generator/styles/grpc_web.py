"""RPC style for grpc-web."""

import logging
from dataclasses import dataclass
from typing import ClassVar

from ..declarations import Declaration, MethodShape, ServiceDeclaration
from ..options import Options
from ..resolver import FileContext
from ..types import SchemaFile, ServiceDescriptor
from .base import RpcStyle, method_declarations

logger = logging.getLogger(__name__)

SUPPORTED_SHAPES = frozenset([MethodShape.UNARY, MethodShape.SERVER_STREAMING])


@dataclass
class WebClientDeclaration(ServiceDeclaration):
    template: ClassVar[str] = "grpc_web/client.ts.j2"


class GrpcWebStyle(RpcStyle):
    """Promise-based clients; grpc-web has no client or bidi streaming."""

    name = "grpc-web"
    description = "Promise and stream client for grpc-web"
    default_grpc_package = "grpc-web"

    def create_service_client(
        self,
        schema: SchemaFile,
        service: ServiceDescriptor,
        context: FileContext,
        options: Options,
    ) -> Declaration:
        methods = []
        for method in method_declarations(schema, service, context):
            if method.shape not in SUPPORTED_SHAPES:
                logger.warning(
                    "Skipping %s: grpc-web does not support %s methods",
                    method.path,
                    method.shape.replace("_", " "),
                )
                continue
            methods.append(method)

        return WebClientDeclaration(
            name=context.declare(f"{service.name}Client", key=f"client:{service.name}"),
            service_name=service.name,
            rpc_alias=context.rpc_alias,
            methods=methods,
        )
