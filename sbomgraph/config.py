"""Process-wide settings loaded from the environment.

Settings are read once, validated, and passed explicitly to providers.
Nothing below the CLI reads environment variables on its own.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional
from urllib.parse import urlparse

from .exceptions import ConfigurationError
from .graph import IgnoreMethod
from .serialization import DEFAULT_CYCLONEDX_VERSION, get_supported_cyclonedx_versions

ENV_PREFIX = "SBOMGRAPH_"

# Tools whose executable can be overridden with SBOMGRAPH_<TOOL>_PATH
KNOWN_TOOLS = ("mvn", "gradle", "go", "git", "npm", "pnpm", "yarn", "pip", "pipdeptree")


def evaluate_boolean(value: str) -> bool:
    """
    Evaluate string values as boolean.

    Args:
        value: String value to evaluate

    Returns:
        Boolean result
    """
    return value.lower() in ["true", "yes", "yeah", "1"]


@dataclass(frozen=True)
class Settings:
    """Read-only configuration for one process."""

    match_manifest_versions: bool = True
    ignore_method: Optional[IgnoreMethod] = None
    go_mvs_logic_enabled: bool = False
    pip_use_dep_tree: bool = False
    cyclonedx_version: str = DEFAULT_CYCLONEDX_VERSION
    backend_url: Optional[str] = None
    prefer_mvnw: bool = False
    mvn_user_settings_file: Optional[str] = None
    mvn_local_repository: Optional[str] = None
    java_home: Optional[str] = None
    executables: Mapping[str, str] = field(default_factory=dict)

    def executable(self, tool: str) -> str:
        """Return the configured executable for a tool, or the tool name itself."""
        return self.executables.get(tool, tool)

    def effective_ignore_method(self, default: IgnoreMethod) -> IgnoreMethod:
        """Return the configured ignore method, or a provider's own default when unset."""
        return default if self.ignore_method is None else self.ignore_method

    def validate(self) -> None:
        """
        Validate configuration settings.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self.ignore_method is not None and not isinstance(self.ignore_method, IgnoreMethod):
            raise ConfigurationError(f"Invalid ignore method: {self.ignore_method!r}")

        if self.cyclonedx_version not in get_supported_cyclonedx_versions():
            raise ConfigurationError(
                f"Unsupported CycloneDX version: {self.cyclonedx_version}. "
                f"Supported versions: {', '.join(get_supported_cyclonedx_versions())}"
            )

        if self.backend_url:
            parsed = urlparse(self.backend_url)
            if parsed.scheme not in ("http", "https"):
                raise ConfigurationError("Backend URL must start with http:// or https://")
            if not parsed.netloc:
                raise ConfigurationError("Backend URL must include a valid hostname")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Load settings from environment variables.

    Args:
        environ: Mapping to read instead of os.environ

    Returns:
        Validated Settings

    Raises:
        ConfigurationError: If a value is invalid
    """
    env = os.environ if environ is None else environ

    def flag(name: str, default: bool) -> bool:
        value = env.get(f"{ENV_PREFIX}{name}")
        return default if value is None or value == "" else evaluate_boolean(value)

    ignore_method = env.get(f"{ENV_PREFIX}IGNORE_METHOD")

    executables = {}
    for tool in KNOWN_TOOLS:
        path = env.get(f"{ENV_PREFIX}{tool.upper()}_PATH")
        if path:
            executables[tool] = path

    settings = Settings(
        match_manifest_versions=flag("MATCH_MANIFEST_VERSIONS", True),
        ignore_method=IgnoreMethod.from_value(ignore_method) if ignore_method else None,
        go_mvs_logic_enabled=flag("GO_MVS_LOGIC_ENABLED", False),
        pip_use_dep_tree=flag("PIP_USE_DEP_TREE", False),
        cyclonedx_version=env.get(f"{ENV_PREFIX}CYCLONEDX_VERSION") or DEFAULT_CYCLONEDX_VERSION,
        backend_url=env.get(f"{ENV_PREFIX}BACKEND_URL") or None,
        prefer_mvnw=flag("PREFER_MVNW", False),
        mvn_user_settings_file=env.get(f"{ENV_PREFIX}MVN_USER_SETTINGS_FILE", "").strip() or None,
        mvn_local_repository=env.get(f"{ENV_PREFIX}MVN_LOCAL_REPOSITORY", "").strip() or None,
        java_home=env.get("JAVA_HOME") or None,
        executables=executables,
    )
    settings.validate()
    return settings
