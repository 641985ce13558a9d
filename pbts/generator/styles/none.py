"""Style without any RPC output: messages and enums only."""

from .base import RpcStyle


class NoRpcStyle(RpcStyle):
    name = "none"
    description = "Messages and enums only"
    default_grpc_package = "@grpc/grpc-js"
