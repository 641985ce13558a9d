"""Errors raised while generating code."""


class GeneratorError(RuntimeError):
    """Base class for fatal code generation errors."""


class ConfigurationError(GeneratorError):
    """Raised when the plugin parameters or style selection are invalid."""


class SchemaError(GeneratorError):
    """Raised when the descriptor set is malformed or not fully linked."""
