"""Tests for schema summaries."""

from pbts.generator.summary import summarize


def describe_summarize():
    def counts_without_map_entries(expect, schemas, protos):
        (summary,) = summarize(schemas(protos["maps"]))
        expect(summary.output) == "maps.ts"
        expect(summary.messages) == 1
        expect(summary.fields) == 1
        expect(summary.maps) == 1

    def ignores_synthetic_oneofs(expect, schemas, protos):
        (summary,) = summarize(schemas(protos["oneof"]))
        expect(summary.oneofs) == 1
        expect(summary.package) == "geo"

    def counts_services_and_methods(expect, schemas, protos):
        (summary,) = summarize(schemas(protos["service"]))
        expect(summary.services) == 1
        expect(summary.methods) == 4
        expect(summary.messages) == 2

    def keeps_input_order(expect, schemas, protos):
        summaries = summarize(schemas(protos["a"], protos["b"]))
        expect([s.name for s in summaries]) == ["a.proto", "b.proto"]
        expect(summaries[1].dependencies) == 1
        expect(summaries[0].to_dict()["enums"]) == 1
