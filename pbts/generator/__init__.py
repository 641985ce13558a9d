"""pbts protocol buffer to TypeScript code generator."""

from .errors import ConfigurationError as ConfigurationError
from .errors import GeneratorError as GeneratorError
from .errors import SchemaError as SchemaError
from .loader import load_descriptor_set as load_descriptor_set
from .loader import load_request as load_request
from .options import Options as Options
from .options import parse_options as parse_options
from .pipeline import Compiler as Compiler
from .pipeline import GeneratedFile as GeneratedFile
from .pipeline import compile_request as compile_request
from .pipeline import run_plugin as run_plugin
from .summary import FileSummary as FileSummary
from .summary import summarize as summarize
from .types import *
