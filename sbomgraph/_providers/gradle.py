"""Gradle provider for ``build.gradle`` and ``build.gradle.kts`` projects."""

from pathlib import Path

from .._extraction import ExtractionContext, ExtractorKind, extract
from .._extraction.text_tree import gradle_root
from .._ignore import IgnoreDirectives, scan_gradle
from ..config import Settings
from ..coordinate import MAVEN
from ..graph import IgnoreMethod
from ..logging_config import logger
from ..tools import ToolRunner
from .models import AnalysisResult, apply_coordinate_directives, build_result


class GradleProvider:
    """Reads ``gradle dependencies`` for the runtime and compile classpaths."""

    default_ignore_method = IgnoreMethod.SENSITIVE

    def __init__(self, settings: Settings, runner: ToolRunner):
        self.settings = settings
        self.runner = runner

    @property
    def name(self) -> str:
        return "gradle"

    @property
    def ecosystem(self) -> str:
        return MAVEN

    def _gradle_command(self, project_dir: Path) -> str:
        if "gradle" in self.settings.executables:
            return self.settings.executable("gradle")
        wrapper = project_dir / "gradlew"
        return str(wrapper) if wrapper.exists() else "gradle"

    def ignored(self, manifest: Path) -> IgnoreDirectives:
        return scan_gradle(Path(manifest))

    def _provide(self, manifest: Path, direct_only: bool) -> AnalysisResult:
        manifest = Path(manifest)
        project_dir = manifest.parent
        gradle = self._gradle_command(project_dir)

        dependencies = self.runner.output([gradle, "dependencies"], "gradle", cwd=project_dir)
        properties = self.runner.output([gradle, "properties"], "gradle", cwd=project_dir)
        context = ExtractionContext(root=gradle_root(properties, dependencies), direct_only=direct_only)

        ignore_method = self.settings.effective_ignore_method(self.default_ignore_method)
        graph = extract(ExtractorKind.GRADLE_TEXT, dependencies, context).to_graph(ignore_method)
        directives = self.ignored(manifest)
        apply_coordinate_directives(graph, directives)
        logger.info(f"Gradle graph for {manifest.name}: {len(graph)} components")
        return build_result(self.ecosystem, graph, directives, self.settings)

    def provide_stack(self, manifest: Path) -> AnalysisResult:
        return self._provide(manifest, direct_only=False)

    def provide_component(self, manifest: Path) -> AnalysisResult:
        return self._provide(manifest, direct_only=True)
