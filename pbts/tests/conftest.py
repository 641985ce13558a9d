"""Unit tests configuration file."""

import pytest
from google.protobuf import descriptor_pb2, text_format
from google.protobuf.compiler import plugin_pb2

from pbts.generator.loader import load_file

A_PROTO = """
name: "a.proto"
package: "x.y"
syntax: "proto3"
enum_type {
  name: "Color"
  value { name: "RED" number: 0 }
  value { name: "GREEN" number: 1 }
}
"""

B_PROTO = """
name: "b.proto"
syntax: "proto3"
dependency: "a.proto"
message_type {
  name: "M"
  field { name: "c" number: 1 label: LABEL_OPTIONAL type: TYPE_ENUM type_name: ".x.y.Color" }
}
"""

MAP_PROTO = """
name: "maps.proto"
syntax: "proto3"
message_type {
  name: "M"
  field { name: "kv" number: 1 label: LABEL_REPEATED type: TYPE_MESSAGE type_name: ".M.KvEntry" }
  nested_type {
    name: "KvEntry"
    field { name: "key" number: 1 label: LABEL_OPTIONAL type: TYPE_STRING }
    field { name: "value" number: 2 label: LABEL_OPTIONAL type: TYPE_INT32 }
    options { map_entry: true }
  }
}
"""

ONEOF_PROTO = """
name: "shapes.proto"
package: "geo"
syntax: "proto3"
message_type {
  name: "Shape"
  field { name: "circle" number: 1 label: LABEL_OPTIONAL type: TYPE_DOUBLE oneof_index: 0 }
  field { name: "square" number: 2 label: LABEL_OPTIONAL type: TYPE_DOUBLE oneof_index: 0 }
  field {
    name: "label" number: 3 label: LABEL_OPTIONAL type: TYPE_STRING
    oneof_index: 1 proto3_optional: true
  }
  field { name: "tags" number: 4 label: LABEL_REPEATED type: TYPE_INT32 }
  oneof_decl { name: "kind" }
  oneof_decl { name: "_label" }
}
"""

SERVICE_PROTO = """
name: "echo.proto"
package: "demo"
syntax: "proto3"
message_type {
  name: "Req"
  field { name: "id" number: 1 label: LABEL_OPTIONAL type: TYPE_INT64 }
}
message_type { name: "Res" }
service {
  name: "Echo"
  method { name: "Say" input_type: ".demo.Req" output_type: ".demo.Res" }
  method { name: "Watch" input_type: ".demo.Req" output_type: ".demo.Res" server_streaming: true }
  method { name: "Upload" input_type: ".demo.Req" output_type: ".demo.Res" client_streaming: true }
  method {
    name: "Chat" input_type: ".demo.Req" output_type: ".demo.Res"
    client_streaming: true server_streaming: true
  }
}
"""


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


def parse_file(text: str) -> descriptor_pb2.FileDescriptorProto:
    return text_format.Parse(text, descriptor_pb2.FileDescriptorProto())


@pytest.fixture
def schemas():
    """Load text-format FileDescriptorProtos into schema files."""

    def build(*texts):
        return [load_file(parse_file(text)) for text in texts]

    return build


@pytest.fixture
def plugin_request():
    """Serialize text-format FileDescriptorProtos into a CodeGeneratorRequest."""

    def build(*texts, parameter="style=grpc-js", version=(3, 21, 12)):
        request = plugin_pb2.CodeGeneratorRequest(parameter=parameter)
        for text in texts:
            proto = request.proto_file.add()
            proto.CopyFrom(parse_file(text))
            request.file_to_generate.append(proto.name)
        if version is not None:
            major, minor, patch = version
            request.compiler_version.major = major
            request.compiler_version.minor = minor
            request.compiler_version.patch = patch
        return request.SerializeToString()

    return build


@pytest.fixture
def descriptor_set():
    """Serialize text-format FileDescriptorProtos into a FileDescriptorSet."""

    def build(*texts):
        return descriptor_pb2.FileDescriptorSet(file=[parse_file(t) for t in texts]).SerializeToString()

    return build


@pytest.fixture
def protos():
    """Shared text-format schema files, by short name."""
    return {
        "a": A_PROTO,
        "b": B_PROTO,
        "maps": MAP_PROTO,
        "oneof": ONEOF_PROTO,
        "service": SERVICE_PROTO,
    }
