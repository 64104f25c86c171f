"""Yarn dependency listings.

Yarn classic (v1) prints ``yarn list --json`` as a nested tree in which
hoisted packages appear once at the top level and are referenced elsewhere
by ``shadow`` entries. Yarn berry (v2+) prints ``yarn info --json`` as a
stream of flat objects keyed by locator.
"""

import json
import re
from typing import Any, Iterator, Optional

from ..coordinate import PackageCoordinate, npm_coordinate
from ..exceptions import MalformedInputError
from .models import DependencyTree, ExtractionContext

_NPM_LOCATOR = re.compile(r"^(@?[^@]+(?:/[^@]+)?)@npm:(.+)$")
_VIRTUAL_LOCATOR = re.compile(r"^(@?[^@]+(?:/[^@]+)?)@virtual:[^#]+#npm:(.+)$")

WORKSPACE_ROOT_SUFFIX = "@workspace:."


def split_name_version(value: str) -> tuple[str, str]:
    """Split ``name@version`` at the last ``@`` (names may be scoped)."""
    name, at, version = value.rpartition("@")
    if not at or not name:
        raise MalformedInputError(f"Invalid yarn package reference '{value}'")
    return name, version


# -- classic --------------------------------------------------------------


def _classic_trees(output: str) -> list[dict]:
    for line in output.splitlines():
        if not line.strip():
            continue
        try:
            message = json.loads(line)
        except json.JSONDecodeError as e:
            raise MalformedInputError(f"yarn produced a line that is not valid JSON: {line[:200]!r}") from e
        if isinstance(message, dict) and message.get("type") == "tree":
            return message.get("data", {}).get("trees") or []
    raise MalformedInputError("yarn list output contains no dependency tree")


def extract_yarn_classic_tree(output: str, context: ExtractionContext) -> DependencyTree:
    """Build edges from a yarn classic listing in two passes.

    The first pass records the canonical coordinate of every top-level
    package by name. The second pass emits edges, resolving each shadow
    entry against that table so a shared package is never duplicated.
    """
    if context.root is None:
        raise MalformedInputError("Yarn extraction requires the root project coordinate")
    trees = _classic_trees(output)

    canonical: dict[str, PackageCoordinate] = {}
    for node in trees:
        name, version = split_name_version(node["name"])
        canonical.setdefault(name, npm_coordinate(name, version))

    def resolve(node: dict) -> Optional[PackageCoordinate]:
        name, version = split_name_version(node["name"])
        if node.get("shadow"):
            return canonical.get(name)
        return npm_coordinate(name, version)

    tree = DependencyTree(context.root)
    for name in context.direct_dependencies:
        if name in canonical:
            tree.add(context.root, canonical[name])
    if context.direct_only:
        return tree

    pending = [(resolve(node), node) for node in reversed(trees)]
    while pending:
        parent, node = pending.pop()
        for child in node.get("children") or []:
            coordinate = resolve(child)
            if coordinate is None:
                continue
            tree.add(parent, coordinate)
            if not child.get("shadow"):
                pending.append((coordinate, child))
    return tree


# -- berry ----------------------------------------------------------------


def normalize_locator(locator: str) -> Optional[tuple[str, str]]:
    """Return (name, version) for an npm locator.

    ``left-pad@npm:1.3.0`` and ``left-pad@virtual:abcd1234#npm:1.3.0``
    both give ``("left-pad", "1.3.0")``. Workspace, patch and other
    non-registry locators give None.
    """
    match = _VIRTUAL_LOCATOR.match(locator) or _NPM_LOCATOR.match(locator)
    if match is None:
        return None
    return match.group(1), match.group(2)


def _iter_json_objects(output: str) -> Iterator[Any]:
    decoder = json.JSONDecoder()
    index = 0
    while True:
        while index < len(output) and output[index].isspace():
            index += 1
        if index >= len(output):
            return
        try:
            value, index = decoder.raw_decode(output, index)
        except json.JSONDecodeError as e:
            raise MalformedInputError(f"yarn info output is not a stream of JSON objects: {e}") from e
        yield value


def extract_yarn_berry_tree(output: str, context: ExtractionContext) -> DependencyTree:
    if context.root is None:
        raise MalformedInputError("Yarn extraction requires the root project coordinate")
    root = context.root
    tree = DependencyTree(root)

    for entry in _iter_json_objects(output):
        value = entry.get("value", "") if isinstance(entry, dict) else ""
        if value.endswith(WORKSPACE_ROOT_SUFFIX):
            source = root
        elif context.direct_only:
            continue
        else:
            locator = normalize_locator(value)
            if locator is None:
                continue
            source = npm_coordinate(*locator)

        for dependency in (entry.get("children") or {}).get("Dependencies") or []:
            locator = normalize_locator(dependency.get("locator", ""))
            if locator is not None:
                tree.add(source, npm_coordinate(*locator))
    return tree
