"""Go modules provider for ``go.mod`` projects."""

import json
from pathlib import Path

from .._extraction import ExtractionContext, ExtractorKind, extract
from .._extraction.go_graph import parse_module_graph, parse_selected_versions
from .._ignore import IgnoreDirectives, scan_go_mod
from .._ignore.golang import parse_requirements
from ..config import Settings
from ..coordinate import GOLANG
from ..exceptions import MalformedInputError, VersionMismatchError
from ..graph import DependencyGraph, IgnoreMethod, MatchPolicy
from ..logging_config import logger
from ..tools import ToolRunner
from ..vcs import GitRepository, determine_main_module_version
from .models import AnalysisResult, build_result


def check_manifest_versions(graph_output: str, go_mod_text: str) -> None:
    """Compare the main module's requirements in the graph with go.mod.

    Raises:
        VersionMismatchError: On the first disagreeing module
    """
    declared = parse_requirements(go_mod_text)
    root, adjacency = parse_module_graph(graph_output)
    for child in adjacency[root]:
        path, _, version = child.partition("@")
        manifest_version = declared.get(path)
        if manifest_version is not None and version and manifest_version != version:
            raise VersionMismatchError(path, manifest_version, version)


def apply_go_directives(graph: DependencyGraph, directives: IgnoreDirectives) -> None:
    """Coordinate match first, then by name for modules the root requires.

    The name pass catches ignored modules whose version was rewritten by
    minimal version selection.
    """
    if not directives.coordinates:
        return
    graph.set_match_policy(MatchPolicy.COORDINATE).filter_ignored(directives.coordinates)
    root = graph.root
    names = [c.name for c in directives.coordinates if root is not None and graph.has_direct_dependency_named(root, c.name)]
    if names:
        graph.set_match_policy(MatchPolicy.NAME).filter_ignored(names)


class GoModulesProvider:
    """Reads ``go mod graph`` and versions the main module from git."""

    default_ignore_method = IgnoreMethod.SENSITIVE

    def __init__(self, settings: Settings, runner: ToolRunner):
        self.settings = settings
        self.runner = runner

    @property
    def name(self) -> str:
        return "go-modules"

    @property
    def ecosystem(self) -> str:
        return GOLANG

    def _go(self, project_dir: Path, *args: str) -> str:
        return self.runner.output([self.settings.executable("go"), *args], "go", cwd=project_dir)

    def host_qualifiers(self, project_dir: Path) -> dict[str, str]:
        try:
            values = json.loads(self._go(project_dir, "env", "-json", "GOHOSTOS", "GOHOSTARCH"))
        except json.JSONDecodeError as e:
            raise MalformedInputError(f"go env produced output that is not valid JSON: {e}") from e
        return {"goos": values.get("GOHOSTOS", ""), "goarch": values.get("GOHOSTARCH", "")}

    def ignored(self, manifest: Path, qualifiers: dict[str, str] | None = None) -> IgnoreDirectives:
        return scan_go_mod(Path(manifest).read_text(encoding="utf-8"), qualifiers or {"type": "module"})

    def _provide(self, manifest: Path, direct_only: bool) -> AnalysisResult:
        manifest = Path(manifest)
        project_dir = manifest.parent
        go_mod_text = manifest.read_text(encoding="utf-8")

        graph_output = self._go(project_dir, "mod", "graph")
        if self.settings.match_manifest_versions:
            check_manifest_versions(graph_output, go_mod_text)

        qualifiers = {"type": "module"}
        if not direct_only:
            qualifiers.update(self.host_qualifiers(project_dir))

        selected_versions = None
        if self.settings.go_mvs_logic_enabled:
            selected_versions = parse_selected_versions(self._go(project_dir, "list", "-m", "all"))

        repository = GitRepository(project_dir, self.runner, self.settings.executable("git"))
        context = ExtractionContext(
            direct_only=direct_only,
            main_module_version=determine_main_module_version(repository),
            qualifiers=qualifiers,
            selected_versions=selected_versions,
        )
        ignore_method = self.settings.effective_ignore_method(self.default_ignore_method)
        graph = extract(ExtractorKind.GO_GRAPH, graph_output, context).to_graph(ignore_method)

        directives = scan_go_mod(go_mod_text, qualifiers)
        apply_go_directives(graph, directives)
        logger.info(f"Go modules graph for {manifest.name}: {len(graph)} components")
        return build_result(self.ecosystem, graph, directives, self.settings)

    def provide_stack(self, manifest: Path) -> AnalysisResult:
        return self._provide(manifest, direct_only=False)

    def provide_component(self, manifest: Path) -> AnalysisResult:
        return self._provide(manifest, direct_only=True)
