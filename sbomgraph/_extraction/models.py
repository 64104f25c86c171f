"""Data models shared by the tree extractors."""

from dataclasses import dataclass, field
from typing import Mapping, Optional

from ..coordinate import DEFAULT_MAIN_MODULE_VERSION, PackageCoordinate
from ..graph import DependencyGraph, IgnoreMethod, MatchPolicy, NodeScope


@dataclass(frozen=True)
class Edge:
    source: PackageCoordinate
    target: PackageCoordinate
    scope: Optional[NodeScope] = None


@dataclass
class DependencyTree:
    """Root identity plus the ordered edges an extractor found.

    Attributes:
        root: Coordinate of the scanned project
        edges: Parent -> child edges in the order they were read
    """

    root: PackageCoordinate
    edges: list[Edge] = field(default_factory=list)

    def add(self, source: PackageCoordinate, target: PackageCoordinate, scope: Optional[NodeScope] = None) -> None:
        self.edges.append(Edge(source, target, scope))

    @property
    def direct_dependencies(self) -> list[PackageCoordinate]:
        seen: dict[PackageCoordinate, None] = {}
        for edge in self.edges:
            if edge.source == self.root:
                seen[edge.target] = None
        return list(seen)

    def populate(self, graph: DependencyGraph) -> DependencyGraph:
        graph.add_root(self.root)
        for edge in self.edges:
            graph.add_dependency(edge.source, edge.target, edge.scope)
        return graph

    def to_graph(
        self,
        ignore_method: IgnoreMethod = IgnoreMethod.INSENSITIVE,
        match_policy: MatchPolicy = MatchPolicy.NAME,
    ) -> DependencyGraph:
        return self.populate(DependencyGraph(ignore_method, match_policy))


@dataclass(frozen=True)
class ExtractionContext:
    """Inputs an extractor needs besides the raw tool output.

    Attributes:
        root: Project coordinate when the tool output does not carry it
            (Gradle, Yarn, pip)
        direct_dependencies: Names declared in the manifest (Yarn classic, pip)
        direct_only: Keep only the root's direct dependencies
        main_module_version: Version for Go modules without one
        qualifiers: Qualifiers attached to every Go coordinate
        selected_versions: Go module path -> version chosen by the build
    """

    root: Optional[PackageCoordinate] = None
    direct_dependencies: tuple[str, ...] = ()
    direct_only: bool = False
    main_module_version: str = DEFAULT_MAIN_MODULE_VERSION
    qualifiers: Mapping[str, str] = field(default_factory=dict)
    selected_versions: Optional[Mapping[str, str]] = None
