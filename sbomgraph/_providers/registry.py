"""Manifest file name -> provider table."""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from ..config import Settings
from ..exceptions import UnsupportedManifestError
from ..logging_config import logger
from ..tools import ToolRunner
from .golang import GoModulesProvider
from .gradle import GradleProvider
from .javascript import create_javascript_provider
from .maven import MavenProvider
from .protocol import EcosystemProvider
from .python_pip import PipProvider

ProviderFactory = Callable[[Path, Settings, ToolRunner], EcosystemProvider]


@dataclass(frozen=True)
class ProviderEntry:
    """One row of the registry.

    Attributes:
        manifest_names: File names this entry handles
        ecosystem: Package URL type of the produced coordinates
        factory: Builds the provider for a concrete manifest
    """

    manifest_names: tuple[str, ...]
    ecosystem: str
    factory: ProviderFactory


class ProviderRegistry:
    """Immutable lookup table from manifest file name to provider factory.

    Example:
        registry = create_default_registry()
        provider = registry.provider_for(Path("go.mod"), settings, ToolRunner())
        result = provider.provide_stack(Path("go.mod"))
    """

    def __init__(self, entries: tuple[ProviderEntry, ...]) -> None:
        self._entries = tuple(entries)
        for entry in self._entries:
            logger.debug(f"Registered provider for {', '.join(entry.manifest_names)} ({entry.ecosystem})")

    @property
    def entries(self) -> tuple[ProviderEntry, ...]:
        return self._entries

    @property
    def supported_manifests(self) -> list[str]:
        return [name for entry in self._entries for name in entry.manifest_names]

    def entry_for(self, manifest: Path) -> ProviderEntry:
        """
        Raises:
            UnsupportedManifestError: If no entry handles the file name
        """
        name = Path(manifest).name
        for entry in self._entries:
            if name in entry.manifest_names:
                return entry
        raise UnsupportedManifestError(
            f"Unsupported manifest '{name}'. Supported manifests: {', '.join(self.supported_manifests)}"
        )

    def provider_for(self, manifest: Path, settings: Settings, runner: ToolRunner) -> EcosystemProvider:
        return self.entry_for(manifest).factory(Path(manifest), settings, runner)


def create_default_registry() -> ProviderRegistry:
    return ProviderRegistry(
        (
            ProviderEntry(("pom.xml",), "maven", lambda _, settings, runner: MavenProvider(settings, runner)),
            ProviderEntry(
                ("build.gradle", "build.gradle.kts"), "maven", lambda _, settings, runner: GradleProvider(settings, runner)
            ),
            ProviderEntry(("go.mod",), "golang", lambda _, settings, runner: GoModulesProvider(settings, runner)),
            ProviderEntry(("package.json",), "npm", create_javascript_provider),
            ProviderEntry(("requirements.txt",), "pypi", lambda _, settings, runner: PipProvider(settings, runner)),
        )
    )
