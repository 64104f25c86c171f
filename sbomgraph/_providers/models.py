"""Data models for ecosystem providers."""

from dataclasses import dataclass, field

from .._ignore import IgnoreDirectives
from ..config import Settings
from ..graph import DependencyGraph, MatchPolicy
from ..serialization import CYCLONEDX_MEDIA_TYPE


@dataclass
class AnalysisResult:
    """Outcome of one manifest analysis.

    Attributes:
        ecosystem: Package URL type of the analyzed project
        sbom: Serialized CycloneDX document
        ignored: Ignore-coordinate list (Package URLs and bare names)
        graph: The filtered graph the document was produced from
        media_type: Media type of ``sbom``
    """

    ecosystem: str
    sbom: str
    ignored: list[str] = field(default_factory=list)
    graph: DependencyGraph | None = None
    media_type: str = CYCLONEDX_MEDIA_TYPE

    @property
    def component_count(self) -> int:
        return len(self.graph) if self.graph is not None else 0

    @property
    def dependency_count(self) -> int:
        return len(self.graph.edges) if self.graph is not None else 0


def build_result(
    ecosystem: str, graph: DependencyGraph, directives: IgnoreDirectives, settings: Settings
) -> AnalysisResult:
    return AnalysisResult(
        ecosystem=ecosystem,
        sbom=graph.to_json(settings.cyclonedx_version),
        ignored=directives.as_strings(),
        graph=graph,
    )


def apply_coordinate_directives(graph: DependencyGraph, directives: IgnoreDirectives) -> None:
    """Filter Maven-style graphs whose nodes carry no qualifiers.

    Versioned directives match by coordinate; directives without a version
    (managed versions) match by name.
    """
    versioned = [c.without_qualifiers() for c in directives.coordinates if c.version]
    versionless = [c.name for c in directives.coordinates if not c.version]
    if versioned:
        graph.set_match_policy(MatchPolicy.COORDINATE).filter_ignored(versioned)
    if versionless:
        graph.set_match_policy(MatchPolicy.NAME).filter_ignored(versionless)


def apply_name_directives(graph: DependencyGraph, directives: IgnoreDirectives) -> None:
    names = list(directives.names) + [c.name for c in directives.coordinates]
    if names:
        graph.set_match_policy(MatchPolicy.NAME).filter_ignored(names)
