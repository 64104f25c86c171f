"""npm and pnpm ``ls --json`` extraction."""

import json
from typing import Any

from ..coordinate import PackageCoordinate, npm_coordinate
from ..exceptions import MalformedInputError
from .models import DependencyTree, ExtractionContext


def load_json_listing(output: str, tool: str) -> Any:
    try:
        return json.loads(output)
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"{tool} produced output that is not valid JSON: {e}") from e


def _walk(tree: DependencyTree, parent: PackageCoordinate, dependencies: dict, recursive: bool) -> None:
    for name, entry in dependencies.items():
        version = entry.get("version") if isinstance(entry, dict) else None
        # optional dependencies that were not installed have no version
        if not version:
            continue
        child = npm_coordinate(name, version)
        tree.add(parent, child)
        if recursive:
            _walk(tree, child, entry.get("dependencies") or {}, recursive)


def _extract(listing: Any, context: ExtractionContext, tool: str) -> DependencyTree:
    if not isinstance(listing, dict):
        raise MalformedInputError(f"{tool} listing is not a JSON object")
    name = listing.get("name")
    if not name and context.root is None:
        raise MalformedInputError(f"{tool} listing has no project name")
    root = context.root or npm_coordinate(name, listing.get("version"))

    tree = DependencyTree(root)
    _walk(tree, root, listing.get("dependencies") or {}, recursive=not context.direct_only)
    return tree


def extract_npm_tree(output: str, context: ExtractionContext) -> DependencyTree:
    """Read ``npm ls --json`` output."""
    return _extract(load_json_listing(output, "npm"), context, "npm")


def extract_pnpm_tree(output: str, context: ExtractionContext) -> DependencyTree:
    """Read ``pnpm ls --json`` output, a list with one entry per project."""
    listing = load_json_listing(output, "pnpm")
    if not isinstance(listing, list) or not listing:
        raise MalformedInputError("pnpm listing is not a non-empty JSON array")
    return _extract(listing[0], context, "pnpm")
