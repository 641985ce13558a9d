"""pbts - TypeScript code generator for protocol buffer schemas."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pbts")
except PackageNotFoundError:
    __version__ = "(local)"
