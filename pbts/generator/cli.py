"""Command-line interface for pbts code generation."""

import json
import logging
import re
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from pbts import __version__
from pbts.generator.errors import GeneratorError
from pbts.generator.loader import load_descriptor_set
from pbts.generator.pipeline import compile_request, run_plugin
from pbts.generator.styles import OPERATIONS, STYLES, capabilities
from pbts.generator.summary import FileSummary, summarize
from pbts.generator.types import CompileRequest, CompilerVersion

LOG_LEVELS = ["debug", "info", "warning", "error"]

_VERSION = re.compile(r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:-(.+))?$")


def configure_logging(level: str) -> None:
    """Send logs to stderr; stdout carries the plugin response."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _fail(message: str) -> None:
    click.echo(f"error: {message}", err=True)
    sys.exit(1)


def _parse_version(text: str) -> CompilerVersion:
    match = _VERSION.match(text)
    if not match:
        raise click.BadParameter(f"expected MAJOR.MINOR.PATCH, got {text!r}")
    major, minor, patch, suffix = match.groups()
    return CompilerVersion(
        major=int(major), minor=int(minor or 0), patch=int(patch or 0), suffix=suffix or ""
    )


def _read_descriptor_set(input_file: str) -> CompileRequest:
    with open(input_file, "rb") as f:
        return CompileRequest(files=load_descriptor_set(f.read()))


@click.group()
@click.version_option(__version__, prog_name="pbts")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="warning",
    envvar="PBTS_LOG_LEVEL",
    show_default=True,
    help="Logging verbosity (also PBTS_LOG_LEVEL)",
)
def cli(log_level: str) -> None:
    """TypeScript code generator for protocol buffer schemas."""
    configure_logging(log_level)


@cli.command()
def plugin() -> None:
    """Run as a protoc plugin (CodeGeneratorRequest on stdin)."""
    stdin = click.get_binary_stream("stdin")
    if stdin.isatty():
        click.echo(
            "This is a protoc plugin. Use it through protoc:\n"
            "  protoc --plugin=protoc-gen-pbts --pbts_out=style=grpc-js:OUT_DIR file.proto",
            err=True,
        )
        sys.exit(1)

    try:
        response = run_plugin(stdin.read())
    except GeneratorError as e:
        _fail(str(e))
        return

    stdout = click.get_binary_stream("stdout")
    stdout.write(response)
    stdout.flush()


@cli.command()
@click.option(
    "--input",
    "-i",
    "input_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="FileDescriptorSet (protoc --descriptor_set_out)",
)
@click.option("--output", "-o", "output_path", default=".", help="Output directory")
@click.option("--parameter", "-p", default="style=grpc-js", show_default=True, help="Generator options")
@click.option("--compiler-version", default="0.0.0", help="Compiler version shown in file headers")
def gen(input_file: str, output_path: str, parameter: str, compiler_version: str) -> None:
    """Generate TypeScript from a descriptor set."""
    version = _parse_version(compiler_version)
    try:
        request = _read_descriptor_set(input_file)
        request.parameter = parameter
        request.compiler_version = version
        files = compile_request(request)
    except GeneratorError as e:
        _fail(str(e))
        return

    for generated in files:
        target = Path(output_path) / generated.name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(generated.content, encoding="utf-8")
        click.echo(f"Generated {target}")


@cli.command()
@click.option(
    "--input",
    "-i",
    "input_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="FileDescriptorSet (protoc --descriptor_set_out)",
)
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_file: str, output_json: bool) -> None:
    """Display a summary of every file in a descriptor set."""
    try:
        request = _read_descriptor_set(input_file)
    except GeneratorError as e:
        _fail(str(e))
        return

    summaries = summarize(request.files)
    if output_json:
        print(json.dumps([s.to_dict() for s in summaries], indent=2))
    else:
        _output_plain(summaries)


def _output_plain(summaries: list[FileSummary]) -> None:
    """Output file summaries using rich text formatting."""
    console = Console()
    console.print("[bold cyan]Files[/bold cyan]")

    table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    table.add_column("File", style="white")
    table.add_column("Output", style="dim")
    table.add_column("Package", style="green")
    table.add_column("Enums", style="yellow", justify="right")
    table.add_column("Messages", style="yellow", justify="right")
    table.add_column("Fields", style="yellow", justify="right")
    table.add_column("Services", style="yellow", justify="right")
    table.add_column("Methods", style="yellow", justify="right")

    for s in summaries:
        table.add_row(
            s.name,
            s.output,
            s.package or "",
            str(s.enums),
            str(s.messages),
            str(s.fields),
            str(s.services),
            str(s.methods),
        )

    console.print(table)


@cli.command()
def styles() -> None:
    """List the available RPC styles."""
    console = Console()
    table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    table.add_column("Style", style="bold white")
    table.add_column("Description", style="white")
    table.add_column("RPC package", style="green")
    for op in OPERATIONS:
        table.add_column(op.removeprefix("create_"), justify="center")

    for name, style_class in STYLES.items():
        style = style_class()
        implemented = capabilities(style)
        table.add_row(
            name,
            style.description,
            style.default_grpc_package,
            *("yes" if op in implemented else "-" for op in OPERATIONS),
        )

    console.print(table)


def main() -> None:
    """Main entry point."""
    cli()


def plugin_main() -> None:
    """Entry point for protoc-gen-pbts."""
    cli(args=["plugin"], prog_name="protoc-gen-pbts")


if __name__ == "__main__":
    main()
