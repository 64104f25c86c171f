"""Tests for yarn classic and yarn berry listings."""

import json

import pytest

from sbomgraph._extraction import ExtractionContext, ExtractorKind, extract
from sbomgraph._extraction.yarn import normalize_locator, split_name_version
from sbomgraph.coordinate import npm_coordinate
from sbomgraph.exceptions import MalformedInputError

ROOT = npm_coordinate("web", "1.0.0")


def classic_output(trees: list) -> str:
    lines = [
        {"type": "info", "data": "Visit https://yarnpkg.com/en/docs/cli/list for documentation."},
        {"type": "tree", "data": {"type": "list", "trees": trees}},
    ]
    return "\n".join(json.dumps(line) for line in lines)


CLASSIC_TREES = [
    {
        "name": "express@4.18.2",
        "children": [
            {"name": "debug@2.6.9", "color": "dim", "shadow": True},
            {"name": "cookie@0.5.0", "children": []},
        ],
    },
    {"name": "debug@2.6.9", "children": [{"name": "ms@2.0.0", "color": "dim", "shadow": True}]},
    {"name": "ms@2.0.0", "children": []},
    {"name": "left-pad@1.3.0", "children": []},
]


class TestYarnClassic:
    """Tests for yarn list --json output."""

    def context(self, **kwargs) -> ExtractionContext:
        return ExtractionContext(root=ROOT, direct_dependencies=("express", "left-pad"), **kwargs)

    def test_direct_dependencies_come_from_manifest(self):
        tree = extract(ExtractorKind.YARN_CLASSIC_JSON, classic_output(CLASSIC_TREES), self.context())
        assert tree.direct_dependencies == [npm_coordinate("express", "4.18.2"), npm_coordinate("left-pad", "1.3.0")]

    def test_shadow_entries_resolve_to_hoisted_package(self):
        graph = extract(ExtractorKind.YARN_CLASSIC_JSON, classic_output(CLASSIC_TREES), self.context()).to_graph()
        express = npm_coordinate("express", "4.18.2")
        debug = npm_coordinate("debug", "2.6.9")
        assert set(graph.children(express)) == {debug, npm_coordinate("cookie", "0.5.0")}
        assert graph.children(debug) == [npm_coordinate("ms", "2.0.0")]
        assert [c for c in graph.coordinates if c.name == "debug"] == [debug]

    def test_hoisted_transitive_packages_are_not_direct(self):
        graph = extract(ExtractorKind.YARN_CLASSIC_JSON, classic_output(CLASSIC_TREES), self.context()).to_graph()
        assert not graph.has_direct_dependency_named(ROOT, "debug")

    def test_direct_only(self):
        tree = extract(
            ExtractorKind.YARN_CLASSIC_JSON, classic_output(CLASSIC_TREES), self.context(direct_only=True)
        )
        assert all(edge.source == ROOT for edge in tree.edges)
        assert len(tree.edges) == 2

    def test_shadow_without_hoisted_entry_is_dropped(self):
        trees = [{"name": "a@1.0.0", "children": [{"name": "ghost@1.0.0", "shadow": True}]}]
        context = ExtractionContext(root=ROOT, direct_dependencies=("a",))
        tree = extract(ExtractorKind.YARN_CLASSIC_JSON, classic_output(trees), context)
        assert {e.target.name for e in tree.edges} == {"a"}

    def test_output_without_tree(self):
        with pytest.raises(MalformedInputError):
            extract(ExtractorKind.YARN_CLASSIC_JSON, json.dumps({"type": "info"}), self.context())

    def test_requires_root(self):
        with pytest.raises(MalformedInputError):
            extract(ExtractorKind.YARN_CLASSIC_JSON, classic_output(CLASSIC_TREES))

    def test_split_scoped_name(self):
        assert split_name_version("@babel/core@7.23.0") == ("@babel/core", "7.23.0")
        with pytest.raises(MalformedInputError):
            split_name_version("no-version")


BERRY_OUTPUT = "\n".join(
    json.dumps(entry)
    for entry in [
        {
            "value": "web@workspace:.",
            "children": {
                "Version": "0.0.0-use.local",
                "Dependencies": [
                    {"descriptor": "left-pad@npm:^1.3.0", "locator": "left-pad@npm:1.3.0"},
                    {"descriptor": "react-dom@npm:^18.2.0", "locator": "react-dom@virtual:abcd1234#npm:18.2.0"},
                ],
            },
        },
        {"value": "left-pad@npm:1.3.0", "children": {"Version": "1.3.0"}},
        {
            "value": "react-dom@virtual:abcd1234#npm:18.2.0",
            "children": {
                "Version": "18.2.0",
                "Dependencies": [{"descriptor": "loose-envify@npm:^1.1.0", "locator": "loose-envify@npm:1.4.0"}],
            },
        },
        {"value": "loose-envify@npm:1.4.0", "children": {"Version": "1.4.0"}},
    ]
)


class TestYarnBerry:
    """Tests for yarn info --json output."""

    def test_virtual_and_npm_locators_normalize_identically(self):
        virtual = normalize_locator("left-pad@virtual:abcd1234#npm:1.3.0")
        plain = normalize_locator("left-pad@npm:1.3.0")
        assert virtual == plain == ("left-pad", "1.3.0")
        assert npm_coordinate(*virtual) == npm_coordinate(*plain)

    def test_scoped_locators(self):
        assert normalize_locator("@types/node@npm:20.8.0") == ("@types/node", "20.8.0")
        assert normalize_locator("@types/react@virtual:0123abcd#npm:18.2.0") == ("@types/react", "18.2.0")

    def test_non_registry_locators(self):
        assert normalize_locator("web@workspace:.") is None
        assert normalize_locator("patched@patch:patched@npm%3A1.0.0#./fix.patch::locator=web%40workspace%3A.") is None

    def test_graph(self):
        graph = extract(ExtractorKind.YARN_BERRY_JSON, BERRY_OUTPUT, ExtractionContext(root=ROOT)).to_graph()
        react_dom = npm_coordinate("react-dom", "18.2.0")
        assert set(graph.children(ROOT)) == {npm_coordinate("left-pad", "1.3.0"), react_dom}
        assert graph.children(react_dom) == [npm_coordinate("loose-envify", "1.4.0")]
        assert len(graph) == 4

    def test_direct_only(self):
        tree = extract(ExtractorKind.YARN_BERRY_JSON, BERRY_OUTPUT, ExtractionContext(root=ROOT, direct_only=True))
        assert all(edge.source == ROOT for edge in tree.edges)
        assert len(tree.edges) == 2

    def test_garbage_output(self):
        with pytest.raises(MalformedInputError):
            extract(ExtractorKind.YARN_BERRY_JSON, "{not json", ExtractionContext(root=ROOT))
