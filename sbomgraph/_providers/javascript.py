"""JavaScript providers for ``package.json`` projects.

The package manager is chosen from the lock file next to the manifest and,
for yarn, from the major version of the installed yarn. Each package
manager is one JavaScriptVariant; the provider itself is shared.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Any

from .._extraction import ExtractionContext, ExtractorKind, extract
from .._ignore import IgnoreDirectives, scan_package_json
from ..config import Settings
from ..coordinate import NPM, npm_coordinate
from ..exceptions import CommandExecutionError, MalformedInputError, UnsupportedManifestError
from ..graph import IgnoreMethod
from ..logging_config import logger
from ..tools import ToolRunner
from .models import AnalysisResult, apply_name_directives, build_result


class JavaScriptVariant(str, Enum):
    NPM = "npm"
    PNPM = "pnpm"
    YARN_CLASSIC = "yarn-classic"
    YARN_BERRY = "yarn-berry"

    @property
    def tool(self) -> str:
        return "yarn" if self in (JavaScriptVariant.YARN_CLASSIC, JavaScriptVariant.YARN_BERRY) else self.value

    @property
    def extractor(self) -> ExtractorKind:
        return {
            JavaScriptVariant.NPM: ExtractorKind.NPM_JSON,
            JavaScriptVariant.PNPM: ExtractorKind.PNPM_JSON,
            JavaScriptVariant.YARN_CLASSIC: ExtractorKind.YARN_CLASSIC_JSON,
            JavaScriptVariant.YARN_BERRY: ExtractorKind.YARN_BERRY_JSON,
        }[self]

    def list_arguments(self, project_dir: Path, direct_only: bool) -> list[str]:
        """Arguments (after the executable) that print the dependency listing."""
        directory = str(project_dir)
        if self is JavaScriptVariant.NPM:
            depth = "--depth=0" if direct_only else "--all"
            return ["ls", depth, "--omit=dev", "--package-lock-only", "--json", "--prefix", directory]
        if self is JavaScriptVariant.PNPM:
            depth = "0" if direct_only else "Infinity"
            return ["ls", "--dir", directory, f"--depth={depth}", "--prod", "--json"]
        if self is JavaScriptVariant.YARN_CLASSIC:
            depth = "0" if direct_only else "Infinity"
            return ["--cwd", directory, "list", f"--depth={depth}", "--prod", "--frozen-lockfile", "--json"]
        return ["--cwd", directory, "info", "--all" if direct_only else "--recursive", "--json"]


# Lock file -> package manager, in lookup order
LOCK_FILES = (
    ("package-lock.json", "npm"),
    ("yarn.lock", "yarn"),
    ("pnpm-lock.yaml", "pnpm"),
)


def load_package_json(manifest: Path) -> dict[str, Any]:
    try:
        data = json.loads(Path(manifest).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"Unable to parse {manifest}: {e}") from e
    if not isinstance(data, dict):
        raise MalformedInputError(f"{manifest} is not a JSON object")
    return data


def detect_variant(manifest: Path, settings: Settings, runner: ToolRunner) -> JavaScriptVariant:
    """Pick the package manager from the lock file beside the manifest.

    Raises:
        UnsupportedManifestError: If no known lock file exists
    """
    project_dir = Path(manifest).parent
    for lock_file, tool in LOCK_FILES:
        if not (project_dir / lock_file).exists():
            continue
        if tool == "npm":
            return JavaScriptVariant.NPM
        if tool == "pnpm":
            return JavaScriptVariant.PNPM
        version = runner.output([settings.executable("yarn"), "-v"], "yarn", cwd=project_dir).strip()
        logger.debug(f"Detected yarn {version}")
        return JavaScriptVariant.YARN_CLASSIC if version.startswith("1.") else JavaScriptVariant.YARN_BERRY

    expected = ", ".join(name for name, _ in LOCK_FILES)
    raise UnsupportedManifestError(
        f"No known lock file found for {manifest}. Expected one of: {expected}. "
        "Run the package manager's install command first."
    )


class JavaScriptProvider:
    """Reads the package manager's JSON dependency listing."""

    default_ignore_method = IgnoreMethod.INSENSITIVE

    def __init__(self, settings: Settings, runner: ToolRunner, variant: JavaScriptVariant):
        self.settings = settings
        self.runner = runner
        self.variant = variant

    @property
    def name(self) -> str:
        return self.variant.value

    @property
    def ecosystem(self) -> str:
        return NPM

    def ignored(self, manifest: Path) -> IgnoreDirectives:
        return scan_package_json(load_package_json(manifest))

    def _provide(self, manifest: Path, direct_only: bool) -> AnalysisResult:
        manifest = Path(manifest)
        package_json = load_package_json(manifest)
        project_dir = manifest.parent

        cmd = [self.settings.executable(self.variant.tool), *self.variant.list_arguments(project_dir, direct_only)]
        # ls exits non-zero on peer or extraneous warnings but still prints the listing
        result = self.runner.run(cmd, self.variant.tool, cwd=project_dir, check=False)
        if result.returncode != 0 and not result.stdout.strip():
            raise CommandExecutionError(
                f"{self.variant.tool} failed with return code {result.returncode}: {result.stderr.strip()}",
                stderr=result.stderr,
            )
        output = result.stdout

        root = None
        if self.variant in (JavaScriptVariant.YARN_CLASSIC, JavaScriptVariant.YARN_BERRY):
            if not package_json.get("name"):
                raise MalformedInputError(f"{manifest} has no package name")
            root = npm_coordinate(package_json["name"], package_json.get("version"))
        context = ExtractionContext(
            root=root,
            direct_dependencies=tuple(package_json.get("dependencies") or {}),
            direct_only=direct_only,
        )
        ignore_method = self.settings.effective_ignore_method(self.default_ignore_method)
        graph = extract(self.variant.extractor, output, context).to_graph(ignore_method)

        directives = scan_package_json(package_json)
        apply_name_directives(graph, directives)
        logger.info(f"{self.variant.value} graph for {manifest.name}: {len(graph)} components")
        return build_result(self.ecosystem, graph, directives, self.settings)

    def provide_stack(self, manifest: Path) -> AnalysisResult:
        return self._provide(manifest, direct_only=False)

    def provide_component(self, manifest: Path) -> AnalysisResult:
        return self._provide(manifest, direct_only=True)


def create_javascript_provider(manifest: Path, settings: Settings, runner: ToolRunner) -> JavaScriptProvider:
    return JavaScriptProvider(settings, runner, detect_variant(manifest, settings, runner))
