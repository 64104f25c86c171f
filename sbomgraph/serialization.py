"""
CycloneDX serialization of dependency graphs.

The graph root is ``metadata.component`` and is also listed in
``components``; every node (root included) gets one entry in
``dependencies``. A component's ``purl`` is its full Package URL, while
its bom-ref is the Package URL without qualifiers. Two graphs with the
same nodes and edges produce the same document apart from the metadata
timestamp.
"""

import uuid
from typing import TYPE_CHECKING, Dict, Optional, Type

from cyclonedx.model.bom import Bom
from cyclonedx.model.component import Component, ComponentScope, ComponentType
from cyclonedx.model.dependency import Dependency

from .exceptions import SerializationError
from .logging_config import logger

if TYPE_CHECKING:
    from .coordinate import PackageCoordinate
    from .graph import DependencyGraph, GraphNode

# Outputter class names, resolved lazily from cyclonedx.output.json
_CYCLONEDX_OUTPUTTERS: Dict[str, str] = {
    "1.4": "JsonV1Dot4",
    "1.5": "JsonV1Dot5",
    "1.6": "JsonV1Dot6",
}

DEFAULT_CYCLONEDX_VERSION = "1.4"

CYCLONEDX_MEDIA_TYPE = "application/vnd.cyclonedx+json"

_SCOPES = {
    "required": ComponentScope.REQUIRED,
    "optional": ComponentScope.OPTIONAL,
    "runtime": ComponentScope.REQUIRED,
    "test": ComponentScope.EXCLUDED,
}


def get_supported_cyclonedx_versions() -> list[str]:
    return sorted(_CYCLONEDX_OUTPUTTERS)


def _get_cyclonedx_outputter(spec_version: str) -> Type:
    """
    Get the CycloneDX JSON outputter class for a spec version.

    Args:
        spec_version: CycloneDX spec version (e.g., "1.4", "1.6")

    Returns:
        Outputter class for the specified version

    Raises:
        SerializationError: If the version is not supported
    """
    major_minor = ".".join(spec_version.split(".")[:2]) if spec_version else DEFAULT_CYCLONEDX_VERSION
    class_name = _CYCLONEDX_OUTPUTTERS.get(major_minor)
    if class_name is None:
        raise SerializationError(
            f"Unsupported CycloneDX version: {spec_version}. "
            f"Supported versions: {', '.join(get_supported_cyclonedx_versions())}"
        )

    from cyclonedx.output import json as cyclonedx_json

    return getattr(cyclonedx_json, class_name)


def serialize_cyclonedx_bom(bom: Bom, spec_version: Optional[str] = None) -> str:
    """
    Serialize a CycloneDX BOM to a JSON string.

    Args:
        bom: The CycloneDX BOM object to serialize
        spec_version: CycloneDX spec version, DEFAULT_CYCLONEDX_VERSION when None

    Returns:
        JSON string representation of the BOM
    """
    spec_version = spec_version or DEFAULT_CYCLONEDX_VERSION
    outputter_class = _get_cyclonedx_outputter(spec_version)

    logger.debug(f"Serializing CycloneDX BOM using version {spec_version}")
    outputter = outputter_class(bom)
    return outputter.output_as_string(indent=2)


def _to_component(node: "GraphNode", is_root: bool, bom_ref: str) -> Component:
    coordinate = node.coordinate
    return Component(
        name=coordinate.name,
        group=coordinate.namespace,
        version=coordinate.version,
        purl=coordinate.to_purl(),
        bom_ref=bom_ref,
        type=ComponentType.APPLICATION if is_root else ComponentType.LIBRARY,
        scope=_SCOPES[node.scope.value] if node.scope is not None else None,
    )


def _bom_ref(coordinate: "PackageCoordinate", used_refs: set) -> str:
    # Coordinates differing only in qualifiers keep their full purl as the ref
    ref = coordinate.without_qualifiers().to_string()
    if ref in used_refs:
        ref = coordinate.to_string()
    used_refs.add(ref)
    return ref


def graph_to_bom(graph: "DependencyGraph") -> Bom:
    """Convert a dependency graph into a CycloneDX BOM object."""
    root = graph.root
    seed = root.to_string() if root is not None else "sbomgraph:detached"
    bom = Bom(serial_number=uuid.uuid5(uuid.NAMESPACE_URL, seed))

    components: dict = {}
    used_refs: set[str] = set()
    for node in graph.nodes:
        is_root = node.coordinate == root
        component = _to_component(node, is_root, _bom_ref(node.coordinate, used_refs))
        components[node.coordinate] = component
        if is_root:
            bom.metadata.component = component
        bom.components.add(component)

    bom.dependencies = [
        Dependency(
            ref=components[coordinate].bom_ref,
            dependencies=[Dependency(ref=components[child].bom_ref) for child in graph.children(coordinate)],
        )
        for coordinate in graph.coordinates
    ]
    return bom


def serialize_graph(graph: "DependencyGraph", spec_version: Optional[str] = None) -> str:
    return serialize_cyclonedx_bom(graph_to_bom(graph), spec_version)
