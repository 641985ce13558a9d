"""Tests for CLI interface."""

import json

from click.testing import CliRunner
from google.protobuf.compiler import plugin_pb2

from pbts.generator.cli import cli

WIDE = {"COLUMNS": "200"}


def describe_plugin_command():
    def answers_requests_on_stdout(expect, plugin_request, protos):
        runner = CliRunner()
        result = runner.invoke(cli, ["plugin"], input=plugin_request(protos["a"], protos["b"]))
        expect(result.exit_code) == 0
        response = plugin_pb2.CodeGeneratorResponse.FromString(result.stdout_bytes)
        expect([f.name for f in response.file]) == ["a.ts", "b.ts"]

    def fails_without_a_style(expect, plugin_request, protos):
        runner = CliRunner()
        result = runner.invoke(cli, ["plugin"], input=plugin_request(protos["a"], parameter=""))
        expect(result.exit_code) == 1
        expect(result.output).includes("error: Missing required option 'style'")

    def fails_on_undecodable_input(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["plugin"], input=b"\xff\xff\xff")
        expect(result.exit_code) == 1
        expect(result.output).includes("error: Could not decode CodeGeneratorRequest")


def describe_gen_command():
    def writes_generated_files(expect, tmp_path, descriptor_set, protos):
        input_file = tmp_path / "set.pb"
        input_file.write_bytes(descriptor_set(protos["a"], protos["b"]))
        out = tmp_path / "out"

        runner = CliRunner()
        result = runner.invoke(
            cli,
            [
                "gen",
                "-i",
                str(input_file),
                "-o",
                str(out),
                "-p",
                "style=none",
                "--compiler-version",
                "4.25.1",
            ],
        )
        expect(result.exit_code) == 0
        expect(sorted(p.name for p in out.iterdir())) == ["a.ts", "b.ts"]
        expect((out / "a.ts").read_text()).includes(" * compiler version: 4.25.1\n")

    def fails_with_unknown_style(expect, tmp_path, descriptor_set, protos):
        input_file = tmp_path / "set.pb"
        input_file.write_bytes(descriptor_set(protos["a"]))

        runner = CliRunner()
        result = runner.invoke(
            cli, ["gen", "-i", str(input_file), "-o", str(tmp_path), "-p", "style=thrift"]
        )
        expect(result.exit_code) == 1
        expect(result.output).includes("Unknown style 'thrift'")
        expect((tmp_path / "a.ts").exists()) == False

    def rejects_bad_compiler_versions(expect, tmp_path, descriptor_set, protos):
        input_file = tmp_path / "set.pb"
        input_file.write_bytes(descriptor_set(protos["a"]))

        runner = CliRunner()
        result = runner.invoke(
            cli, ["gen", "-i", str(input_file), "-o", str(tmp_path), "--compiler-version", "x"]
        )
        expect(result.exit_code) == 2


def describe_info_command():
    def outputs_json(expect, tmp_path, descriptor_set, protos):
        input_file = tmp_path / "set.pb"
        input_file.write_bytes(descriptor_set(protos["maps"], protos["service"]))

        runner = CliRunner()
        result = runner.invoke(cli, ["info", "-i", str(input_file), "--json"])
        expect(result.exit_code) == 0
        data = json.loads(result.output)
        expect([d["name"] for d in data]) == ["maps.proto", "echo.proto"]
        expect(data[0]["maps"]) == 1
        expect(data[1]["methods"]) == 4

    def outputs_a_table(expect, tmp_path, descriptor_set, protos):
        input_file = tmp_path / "set.pb"
        input_file.write_bytes(descriptor_set(protos["service"]))

        runner = CliRunner()
        result = runner.invoke(cli, ["info", "-i", str(input_file)], env=WIDE)
        expect(result.exit_code) == 0
        expect(result.output).includes("echo.proto")
        expect(result.output).includes("echo.ts")


def describe_styles_command():
    def lists_registered_styles(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["styles"], env=WIDE)
        expect(result.exit_code) == 0
        for name in ("grpc-js", "grpc-web", "none"):
            expect(result.output).includes(name)


def describe_log_level():
    def rejects_unknown_levels(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["--log-level", "loud", "styles"])
        expect(result.exit_code) == 2
