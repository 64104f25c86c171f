"""Maven provider for ``pom.xml`` projects."""

import os
import tempfile
from pathlib import Path
from typing import Optional

from .._extraction import ExtractorKind, extract
from .._ignore import IgnoreDirectives, scan_pom
from .._ignore.maven import child_text, local_name, parse_pom
from ..config import Settings
from ..coordinate import MAVEN, PackageCoordinate, maven_coordinate
from ..exceptions import CommandExecutionError, MalformedInputError
from ..graph import DependencyGraph, IgnoreMethod
from ..logging_config import logger
from ..tools import ToolRunner
from .models import AnalysisResult, apply_coordinate_directives, build_result

DEPENDENCY_TREE_GOAL = "org.apache.maven.plugins:maven-dependency-plugin:3.6.0:tree"
MAVEN_WRAPPER = "mvnw"


def find_maven_wrapper(start_dir: Path, stop_dir: Optional[Path] = None) -> Optional[Path]:
    """Nearest executable ``mvnw`` in start_dir or its parents, not searching above stop_dir."""
    directory = Path(start_dir).resolve()
    stop = Path(stop_dir).resolve() if stop_dir is not None else None
    while True:
        candidate = directory / MAVEN_WRAPPER
        if candidate.is_file() and os.access(candidate, os.X_OK):
            return candidate
        if directory == stop or directory.parent == directory:
            return None
        directory = directory.parent

def parse_effective_pom(text: str) -> tuple[PackageCoordinate, list[tuple[PackageCoordinate, str]]]:
    """Project coordinate and direct (coordinate, scope) pairs of an effective POM."""
    document = parse_pom(text)
    project = document if local_name(document.tag) == "project" else None
    if project is None:
        project = next((e for e in document.iter() if local_name(e.tag) == "project"), None)
    if project is None:
        raise MalformedInputError("Effective POM contains no <project>")

    parent = next((e for e in project if local_name(e.tag) == "parent"), None)
    group_id = child_text(project, "groupId") or (child_text(parent, "groupId") if parent is not None else None)
    version = child_text(project, "version") or (child_text(parent, "version") if parent is not None else None)
    artifact_id = child_text(project, "artifactId")
    if not group_id or not artifact_id:
        raise MalformedInputError("Effective POM is missing the project groupId or artifactId")
    root = maven_coordinate(group_id, artifact_id, version)

    dependencies = []
    for section in project:
        if local_name(section.tag) != "dependencies":
            continue
        for dependency in section:
            if local_name(dependency.tag) != "dependency":
                continue
            coordinate = maven_coordinate(
                child_text(dependency, "groupId"), child_text(dependency, "artifactId"), child_text(dependency, "version")
            )
            dependencies.append((coordinate, child_text(dependency, "scope") or "compile"))
    return root, dependencies


class MavenProvider:
    """Runs the Maven dependency plugin and reads its text tree."""

    default_ignore_method = IgnoreMethod.SENSITIVE

    def __init__(self, settings: Settings, runner: ToolRunner):
        self.settings = settings
        self.runner = runner

    @property
    def name(self) -> str:
        return "maven"

    @property
    def ecosystem(self) -> str:
        return MAVEN

    def _environment(self) -> Optional[dict[str, str]]:
        return {"JAVA_HOME": self.settings.java_home} if self.settings.java_home else None

    def _git_root(self, directory: Path) -> Optional[Path]:
        cmd = [self.settings.executable("git"), "rev-parse", "--show-toplevel"]
        try:
            result = self.runner.run(cmd, "git", cwd=directory, check=False)
        except CommandExecutionError:
            return None
        top_level = result.stdout.strip() if result.returncode == 0 else ""
        return Path(top_level) if top_level else None

    def select_executable(self, manifest: Path) -> str:
        """The Maven wrapper when preferred and usable, else the configured mvn."""
        if self.settings.prefer_mvnw:
            project_dir = Path(manifest).parent
            wrapper = find_maven_wrapper(project_dir, self._git_root(project_dir))
            if wrapper is not None:
                try:
                    self.runner.run([str(wrapper), "--version"], "mvnw", cwd=project_dir, env=self._environment())
                    logger.debug(f"Using Maven wrapper {wrapper}")
                    return str(wrapper)
                except CommandExecutionError as e:
                    logger.warning(f"Maven wrapper {wrapper} is not usable, falling back to mvn: {e}")
        return self.settings.executable("mvn")

    def build_command(self, mvn: str, manifest: Path, *args: str) -> list[str]:
        cmd = [mvn, *args, "-f", str(manifest), "--batch-mode", "-q"]
        if self.settings.mvn_user_settings_file:
            cmd.extend(["-s", self.settings.mvn_user_settings_file])
        if self.settings.mvn_local_repository:
            cmd.append(f"-Dmaven.repo.local={self.settings.mvn_local_repository}")
        return cmd

    def _mvn(self, mvn: str, manifest: Path, *args: str) -> None:
        cmd = self.build_command(mvn, manifest, *args)
        self.runner.run(cmd, "mvn", cwd=manifest.parent, env=self._environment())

    def ignored(self, manifest: Path) -> IgnoreDirectives:
        return scan_pom(Path(manifest).read_text(encoding="utf-8"))

    def provide_stack(self, manifest: Path) -> AnalysisResult:
        manifest = Path(manifest)
        with tempfile.TemporaryDirectory() as tmp:
            output_file = Path(tmp) / "dependency-tree.txt"
            mvn = self.select_executable(manifest)
            self._mvn(mvn, manifest, "clean")
            self._mvn(
                mvn, manifest, DEPENDENCY_TREE_GOAL, "-Dverbose", "-DoutputType=text", f"-DoutputFile={output_file}"
            )
            tree_text = output_file.read_text(encoding="utf-8")

        ignore_method = self.settings.effective_ignore_method(self.default_ignore_method)
        graph = extract(ExtractorKind.MAVEN_TEXT, tree_text).to_graph(ignore_method)
        return self._finish(manifest, graph)

    def provide_component(self, manifest: Path) -> AnalysisResult:
        manifest = Path(manifest)
        with tempfile.TemporaryDirectory() as tmp:
            output_file = Path(tmp) / "effective-pom.xml"
            mvn = self.select_executable(manifest)
            self._mvn(mvn, manifest, "clean", "help:effective-pom", f"-Doutput={output_file}")
            root, dependencies = parse_effective_pom(output_file.read_text(encoding="utf-8"))

        graph = DependencyGraph(self.settings.effective_ignore_method(self.default_ignore_method)).add_root(root)
        for coordinate, scope in dependencies:
            if scope != "test":
                graph.add_dependency(root, coordinate)
        return self._finish(manifest, graph)

    def _finish(self, manifest: Path, graph: DependencyGraph) -> AnalysisResult:
        directives = self.ignored(manifest)
        apply_coordinate_directives(graph, directives)
        logger.info(f"Maven graph for {manifest.name}: {len(graph)} components")
        return build_result(self.ecosystem, graph, directives, self.settings)
