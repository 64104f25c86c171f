"""pip provider for ``requirements.txt`` projects.

The dependency graph is read from the active Python environment, either
with ``pip freeze`` + ``pip show`` or, when enabled, with pipdeptree.
"""

from pathlib import Path

from .._extraction import DependencyTree, ExtractionContext, ExtractorKind, extract
from .._extraction.pip_tree import Requirement, parse_pip_freeze, parse_requirements
from .._ignore import IgnoreDirectives, scan_requirements
from ..config import Settings
from ..coordinate import PYPI, canonical_python_name
from ..exceptions import VersionMismatchError
from ..graph import IgnoreMethod
from ..logging_config import logger
from ..tools import ToolRunner
from .models import AnalysisResult, apply_name_directives, build_result


def check_pinned_versions(requirements: list[Requirement], tree: DependencyTree) -> None:
    """Fail when an ``==`` pin differs from the installed version.

    Raises:
        VersionMismatchError: On the first disagreeing requirement
    """
    installed = {c.name: c.version for c in tree.direct_dependencies}
    for requirement in requirements:
        if requirement.pinned_version is None:
            continue
        version = installed.get(canonical_python_name(requirement.name))
        if version is not None and version != requirement.pinned_version:
            raise VersionMismatchError(requirement.name, requirement.pinned_version, version)


class PipProvider:
    """Reads installed distributions for the packages in requirements.txt."""

    default_ignore_method = IgnoreMethod.INSENSITIVE

    def __init__(self, settings: Settings, runner: ToolRunner):
        self.settings = settings
        self.runner = runner

    @property
    def name(self) -> str:
        return "pip"

    @property
    def ecosystem(self) -> str:
        return PYPI

    def ignored(self, manifest: Path) -> IgnoreDirectives:
        return scan_requirements(Path(manifest).read_text(encoding="utf-8"))

    def _environment_listing(self, project_dir: Path) -> tuple[ExtractorKind, str]:
        if self.settings.pip_use_dep_tree:
            cmd = [self.settings.executable("pipdeptree"), "--json", "--warn", "silence"]
            return ExtractorKind.PIPDEPTREE_JSON, self.runner.output(cmd, "pipdeptree", cwd=project_dir)

        pip = self.settings.executable("pip")
        names = parse_pip_freeze(self.runner.output([pip, "freeze", "--all"], "pip", cwd=project_dir))
        if not names:
            return ExtractorKind.PIP_SHOW, ""
        return ExtractorKind.PIP_SHOW, self.runner.output([pip, "show", *names], "pip", cwd=project_dir)

    def _provide(self, manifest: Path, direct_only: bool) -> AnalysisResult:
        manifest = Path(manifest)
        text = manifest.read_text(encoding="utf-8")
        requirements = parse_requirements(text)

        kind, output = self._environment_listing(manifest.parent)
        context = ExtractionContext(
            direct_dependencies=tuple(r.name for r in requirements),
            direct_only=direct_only,
        )
        tree = extract(kind, output, context)
        if self.settings.match_manifest_versions:
            check_pinned_versions(requirements, tree)

        ignore_method = self.settings.effective_ignore_method(self.default_ignore_method)
        graph = tree.to_graph(ignore_method)
        directives = scan_requirements(text)
        apply_name_directives(graph, directives)
        logger.info(f"pip graph for {manifest.name}: {len(graph)} components")
        return build_result(self.ecosystem, graph, directives, self.settings)

    def provide_stack(self, manifest: Path) -> AnalysisResult:
        return self._provide(manifest, direct_only=False)

    def provide_component(self, manifest: Path) -> AnalysisResult:
        return self._provide(manifest, direct_only=True)
