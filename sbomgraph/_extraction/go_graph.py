"""Go module graph (``go mod graph``) extraction."""

from typing import Mapping, Optional

from ..coordinate import PackageCoordinate, golang_coordinate
from ..exceptions import MalformedInputError
from .models import DependencyTree, ExtractionContext

# Pseudo-modules that go mod graph reports for the toolchain requirement
_TOOLCHAIN_MODULES = {"go", "toolchain"}


def parse_module_graph(output: str) -> tuple[str, dict[str, list[str]]]:
    """Group ``parent child`` lines by parent.

    Returns:
        (root module reference, parent -> children in input order). The root
        is the parent on the first line.
    """
    root: Optional[str] = None
    adjacency: dict[str, list[str]] = {}
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        parts = line.split()
        if len(parts) != 2:
            raise MalformedInputError(f"Unexpected line in go mod graph output: {line!r}")
        parent, child = parts
        if root is None:
            root = parent
        if child.partition("@")[0] in _TOOLCHAIN_MODULES or parent.partition("@")[0] in _TOOLCHAIN_MODULES:
            continue
        adjacency.setdefault(parent, []).append(child)

    if root is None:
        raise MalformedInputError("go mod graph output is empty")
    adjacency.setdefault(root, [])
    return root, adjacency


def parse_selected_versions(output: str) -> dict[str, str]:
    """Parse ``go list -m all`` into module path -> selected version.

    The main module line carries no version and is left out; replaced
    modules keep the version on the left of ``=>``.
    """
    selected = {}
    for line in output.splitlines():
        parts = line.split()
        if len(parts) >= 2 and parts[1] != "=>":
            selected[parts[0]] = parts[1]
    return selected


def rewrite_version(reference: str, selected_versions: Mapping[str, str]) -> str:
    path, at, version = reference.partition("@")
    if not at:
        return reference
    return f"{path}@{selected_versions.get(path, version)}"


def extract_go_graph(output: str, context: ExtractionContext) -> DependencyTree:
    root_reference, adjacency = parse_module_graph(output)

    def to_coordinate(reference: str) -> PackageCoordinate:
        if context.selected_versions is not None:
            reference = rewrite_version(reference, context.selected_versions)
        return golang_coordinate(reference, context.main_module_version, context.qualifiers)

    root = to_coordinate(root_reference)
    tree = DependencyTree(root)
    parents = [root_reference] if context.direct_only else list(adjacency)
    for parent in parents:
        source = to_coordinate(parent)
        for child in adjacency[parent]:
            target = to_coordinate(child)
            if target != source:
                tree.add(source, target)
    return tree
