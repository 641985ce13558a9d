"""RPC code generation styles."""

import logging

from ..errors import ConfigurationError
from .base import RpcStyle as RpcStyle
from .base import method_declarations as method_declarations
from .base import service_path as service_path
from .grpc_js import GrpcJsStyle
from .grpc_web import GrpcWebStyle
from .none import NoRpcStyle

logger = logging.getLogger(__name__)

STYLES: dict[str, type[RpcStyle]] = {
    style.name: style for style in (GrpcJsStyle, GrpcWebStyle, NoRpcStyle)
}

OPERATIONS = (
    "create_service_client",
    "create_unimplemented_server",
    "create_shared_interface_types",
    "wraps_output_in_namespace",
)


def load_style(name: str | None) -> RpcStyle:
    """Instantiate the style registered under name."""
    if not name:
        raise ConfigurationError("No style selected")
    try:
        style = STYLES[name]()
    except KeyError:
        known = ", ".join(sorted(STYLES))
        raise ConfigurationError(f"Unknown style {name!r} (known styles: {known})") from None

    logger.debug("Using style %s (%s)", name, ", ".join(capabilities(style)) or "no rpc output")
    return style


def capabilities(style: RpcStyle) -> list[str]:
    """Operations a style implements itself."""
    return [op for op in OPERATIONS if getattr(type(style), op) is not getattr(RpcStyle, op)]
