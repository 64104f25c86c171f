"""Canonical dependency graph (the SBOM) and its ignore-filtering rules."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional, Union

from .coordinate import PackageCoordinate
from .exceptions import ConfigurationError, SerializationError
from .logging_config import logger


class NodeScope(str, Enum):
    """Scope tag attached to a node when it is first created."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    RUNTIME = "runtime"
    TEST = "test"


class IgnoreMethod(str, Enum):
    """How far an ignore match reaches into the graph.

    INSENSITIVE removes a matched node and everything reachable from it.
    SENSITIVE removes only the matched node.
    """

    INSENSITIVE = "insensitive"
    SENSITIVE = "sensitive"

    @classmethod
    def from_value(cls, value: str) -> "IgnoreMethod":
        try:
            return cls(value.strip().lower())
        except ValueError:
            allowed = ", ".join(m.value for m in cls)
            raise ConfigurationError(f"Invalid ignore method '{value}'. Expected one of: {allowed}")


class MatchPolicy(str, Enum):
    """Predicate used to decide whether a node belongs to an ignore list."""

    NAME = "name"
    COORDINATE = "coordinate"


@dataclass
class GraphNode:
    coordinate: PackageCoordinate
    scope: Optional[NodeScope] = None


IgnoreItem = Union[str, PackageCoordinate]


class DependencyGraph:
    """Node/edge store for one analysis.

    Nodes are unique per coordinate and every edge endpoint exists as a
    node. Edges are kept in insertion order and identical edges are stored
    once. The root node is never removed by filtering.

    Example:
        graph = DependencyGraph()
        graph.add_root(root)
        graph.add_dependency(root, child)
        graph.set_match_policy(MatchPolicy.COORDINATE)
        graph.filter_ignored([ignored_coordinate])
        document = graph.to_json()
    """

    def __init__(
        self,
        ignore_method: IgnoreMethod = IgnoreMethod.INSENSITIVE,
        match_policy: MatchPolicy = MatchPolicy.NAME,
    ) -> None:
        self.ignore_method = ignore_method
        self.match_policy = match_policy
        self._root: Optional[PackageCoordinate] = None
        self._nodes: dict[PackageCoordinate, GraphNode] = {}
        self._edges: dict[PackageCoordinate, dict[PackageCoordinate, None]] = {}

    # -- construction -----------------------------------------------------

    def add_root(self, coordinate: PackageCoordinate) -> "DependencyGraph":
        self._root = coordinate
        self._ensure_node(coordinate, None)
        return self

    def add_dependency(
        self,
        source: PackageCoordinate,
        target: PackageCoordinate,
        scope: Optional[NodeScope] = None,
    ) -> "DependencyGraph":
        """Add the edge source -> target, creating missing nodes.

        A node created here for ``target`` receives ``scope``; an existing
        node keeps the scope it was created with.
        """
        self._ensure_node(source, None)
        self._ensure_node(target, scope)
        self._edges[source][target] = None
        return self

    def _ensure_node(self, coordinate: PackageCoordinate, scope: Optional[NodeScope]) -> None:
        if coordinate not in self._nodes:
            self._nodes[coordinate] = GraphNode(coordinate, scope)
            self._edges[coordinate] = {}

    # -- queries ------------------------------------------------------------

    @property
    def root(self) -> Optional[PackageCoordinate]:
        return self._root

    @property
    def nodes(self) -> list[GraphNode]:
        return list(self._nodes.values())

    @property
    def coordinates(self) -> list[PackageCoordinate]:
        return list(self._nodes)

    @property
    def edges(self) -> list[tuple[PackageCoordinate, PackageCoordinate]]:
        return [(source, target) for source, targets in self._edges.items() for target in targets]

    def node(self, coordinate: PackageCoordinate) -> Optional[GraphNode]:
        return self._nodes.get(coordinate)

    def children(self, coordinate: PackageCoordinate) -> list[PackageCoordinate]:
        return list(self._edges.get(coordinate, ()))

    def has_direct_dependency_named(self, coordinate: PackageCoordinate, name: str) -> bool:
        """True iff some direct child of ``coordinate`` is called ``name``."""
        return any(child.name == name for child in self._edges.get(coordinate, ()))

    def __contains__(self, coordinate: object) -> bool:
        return coordinate in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[GraphNode]:
        return iter(self.nodes)

    # -- filtering ----------------------------------------------------------

    def set_match_policy(self, policy: MatchPolicy) -> "DependencyGraph":
        self.match_policy = policy
        return self

    def filter_ignored(self, matches: Iterable[IgnoreItem]) -> set[PackageCoordinate]:
        """Remove ignored nodes according to the match policy and ignore method.

        Args:
            matches: Names (NAME policy) or coordinates / Package URL strings
                (COORDINATE policy)

        Returns:
            The coordinates that were removed.

        Raises:
            MalformedInputError: If a Package URL string cannot be parsed
        """
        predicate = self._build_predicate(matches)
        matched = {c for c in self._nodes if c != self._root and predicate(c)}
        if not matched:
            return set()

        if self.ignore_method is IgnoreMethod.INSENSITIVE:
            doomed = self._reachable_from(matched)
        else:
            doomed = matched
        doomed.discard(self._root)

        for coordinate in doomed:
            del self._nodes[coordinate]
            del self._edges[coordinate]
        for targets in self._edges.values():
            for coordinate in [t for t in targets if t in doomed]:
                del targets[coordinate]

        logger.debug(
            f"Ignore filter ({self.ignore_method.value}, {self.match_policy.value}) "
            f"matched {len(matched)} and removed {len(doomed)} node(s)"
        )
        return doomed

    def _build_predicate(self, matches: Iterable[IgnoreItem]):
        if self.match_policy is MatchPolicy.NAME:
            names = {m.name if isinstance(m, PackageCoordinate) else str(m) for m in matches}
            return lambda coordinate: coordinate.name in names
        coordinates = {m if isinstance(m, PackageCoordinate) else PackageCoordinate.from_purl(m) for m in matches}
        return lambda coordinate: coordinate in coordinates

    def _reachable_from(self, start: set[PackageCoordinate]) -> set[PackageCoordinate]:
        seen = set(start)
        pending = list(start)
        while pending:
            for child in self._edges.get(pending.pop(), ()):
                if child not in seen:
                    seen.add(child)
                    pending.append(child)
        return seen

    # -- root / output ------------------------------------------------------

    def remove_root(self) -> Optional[PackageCoordinate]:
        """Detach the root node and its outgoing edges."""
        root = self._root
        if root is None:
            return None
        self._nodes.pop(root, None)
        self._edges.pop(root, None)
        for targets in self._edges.values():
            targets.pop(root, None)
        self._root = None
        return root

    def to_json(self, spec_version: Optional[str] = None) -> str:
        """Serialize the graph as a CycloneDX JSON document.

        Raises:
            SerializationError: If the document cannot be produced
        """
        from .serialization import serialize_graph

        try:
            return serialize_graph(self, spec_version)
        except SerializationError:
            raise
        except Exception as e:
            raise SerializationError(f"Unable to generate JSON from SBOM: {e}") from e
