"""Plugin parameter parsing using Lark."""

import logging
import os
from dataclasses import dataclass, field
from typing import Any

from dataclasses_json import DataClassJsonMixin
from lark import Lark, Token
from lark.exceptions import LarkError
from lark.visitors import Transformer

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

_g_parser: Lark | None = None

KNOWN_OPTIONS = frozenset(["style", "grpc_package", "runtime_package"])

DEFAULT_RUNTIME_PACKAGE = "google-protobuf"


@dataclass
class Options(DataClassJsonMixin):
    """Generator options parsed from the plugin parameter string."""

    style: str
    grpc_package: str | None = None  # None = use the style's default
    runtime_package: str = DEFAULT_RUNTIME_PACKAGE
    extra: dict[str, str] = field(default_factory=dict)


class OptionTransformer(Transformer):
    """Transform the parse tree into a dict of option values."""

    def option(self, args: list[Any]) -> tuple[str, str]:
        key = args[0]
        value = args[1] if len(args) > 1 else None
        return str(key), str(value) if isinstance(value, Token) else ""

    def start(self, args: list[Any]) -> dict[str, str]:
        return dict(args)


def _parser() -> Lark:
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/options.lark", encoding="utf-8") as f:
            grammar = f.read()
        _g_parser = Lark(grammar, parser="lalr")
    return _g_parser


def parse_parameter(text: str) -> dict[str, str]:
    """Parse a `key=value,...` parameter string into a dict.

    Later occurrences of a key override earlier ones. Keys without a value map
    to an empty string.
    """
    if not text.strip():
        return {}

    try:
        tree = _parser().parse(text)
    except LarkError as e:
        raise ConfigurationError(f"Malformed parameter string {text!r}: {e}") from e
    return OptionTransformer().transform(tree)


def parse_options(text: str) -> Options:
    """Parse the plugin parameter string into Options."""
    values = parse_parameter(text)

    style = values.get("style")
    if not style:
        raise ConfigurationError("Missing required option 'style'")

    extra = {k: v for k, v in values.items() if k not in KNOWN_OPTIONS}
    for key in extra:
        logger.debug("Ignoring unknown option %r", key)

    return Options(
        style=style,
        grpc_package=values.get("grpc_package") or None,
        runtime_package=values.get("runtime_package") or DEFAULT_RUNTIME_PACKAGE,
        extra=extra,
    )
