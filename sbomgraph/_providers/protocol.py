"""Protocol definition for ecosystem providers."""

from pathlib import Path
from typing import Protocol

from .._ignore import IgnoreDirectives
from ..graph import IgnoreMethod
from .models import AnalysisResult


class EcosystemProvider(Protocol):
    """Protocol for ecosystem providers.

    A provider turns one manifest into an SBOM: it invokes the ecosystem's
    tools through a ToolRunner, hands their output to a tree extractor,
    builds the dependency graph and applies the manifest's ignore
    directives. Providers are created per manifest by the factories in
    ProviderRegistry.

    Example:
        class GoModulesProvider:
            name = "go-modules"
            ecosystem = "golang"

            def provide_stack(self, manifest: Path) -> AnalysisResult:
                # go mod graph -> full transitive SBOM
                ...

            def provide_component(self, manifest: Path) -> AnalysisResult:
                # direct requirements only
                ...

            def ignored(self, manifest: Path) -> IgnoreDirectives:
                # // exhortignore comments in go.mod
                ...
    """

    @property
    def name(self) -> str:
        """Human-readable name of this provider.

        Used for logging. Examples: "maven", "yarn-berry"
        """
        ...

    @property
    def ecosystem(self) -> str:
        """Package URL type of the coordinates this provider produces.

        Examples: "maven", "npm", "golang", "pypi"
        """
        ...

    @property
    def default_ignore_method(self) -> IgnoreMethod:
        """Ignore method used when SBOMGRAPH_IGNORE_METHOD is unset.

        SENSITIVE for the JVM and Go providers, INSENSITIVE for npm and pip.
        """
        ...

    def provide_stack(self, manifest: Path) -> AnalysisResult:
        """Build the SBOM of the full transitive dependency graph.

        Args:
            manifest: Path to the manifest file

        Returns:
            AnalysisResult with the serialized SBOM.

        Raises:
            CommandExecutionError: If an ecosystem tool fails
            MalformedInputError: If tool output cannot be parsed
            VersionMismatchError: If manifest and resolved versions disagree
        """
        ...

    def provide_component(self, manifest: Path) -> AnalysisResult:
        """Build the SBOM of the project's direct dependencies only.

        Args:
            manifest: Path to the manifest file

        Returns:
            AnalysisResult with the serialized SBOM.
        """
        ...

    def ignored(self, manifest: Path) -> IgnoreDirectives:
        """Read the ignore directives embedded in the manifest.

        Args:
            manifest: Path to the manifest file

        Returns:
            The manifest's ignore directives, possibly empty.
        """
        ...
