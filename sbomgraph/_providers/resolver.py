"""Entry point that turns a manifest path into an analysis result."""

from pathlib import Path
from typing import Optional

from .._ignore import IgnoreDirectives
from ..config import Settings
from ..exceptions import UnsupportedManifestError
from ..logging_config import logger
from ..tools import ToolRunner
from .models import AnalysisResult
from .registry import ProviderRegistry


class ManifestResolver:
    """Runs the provider registered for a manifest.

    The registry, settings and tool runner are supplied by the caller, so
    several resolvers with different tables can coexist.
    """

    def __init__(self, registry: ProviderRegistry, settings: Settings, runner: Optional[ToolRunner] = None):
        self.registry = registry
        self.settings = settings
        self.runner = runner or ToolRunner()

    def _provider(self, manifest: Path):
        manifest = Path(manifest)
        if not manifest.is_file():
            raise UnsupportedManifestError(f"Manifest not found: {manifest}")
        provider = self.registry.provider_for(manifest, self.settings, self.runner)
        logger.debug(f"Using {provider.name} provider for {manifest}")
        return provider

    def stack(self, manifest: Path) -> AnalysisResult:
        """SBOM of the full transitive dependency graph."""
        return self._provider(manifest).provide_stack(Path(manifest))

    def component(self, manifest: Path) -> AnalysisResult:
        """SBOM of the direct dependencies only."""
        return self._provider(manifest).provide_component(Path(manifest))

    def ignored(self, manifest: Path) -> IgnoreDirectives:
        return self._provider(manifest).ignored(Path(manifest))
