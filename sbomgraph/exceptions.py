"""Custom exceptions for sbomgraph."""


class SbomgraphError(Exception):
    """Base exception for all sbomgraph operations."""


class ConfigurationError(SbomgraphError):
    """Raised when configuration validation fails."""


class MalformedInputError(SbomgraphError):
    """Raised when tool output or a manifest cannot be parsed."""


class PackageNotInstalledError(MalformedInputError):
    """Raised when a declared Python requirement is not installed."""


class VersionMismatchError(SbomgraphError):
    """Raised when a manifest version disagrees with the resolved version."""

    def __init__(self, name: str, manifest_version: str, installed_version: str):
        self.name = name
        self.manifest_version = manifest_version
        self.installed_version = installed_version
        super().__init__(
            f"Can't continue with analysis - versions mismatch for dependency name={name}, "
            f"manifest version={manifest_version}, installed version={installed_version}. "
            "If you want to allow version mismatch for analysis between installed and requested packages, "
            "set environment variable/setting SBOMGRAPH_MATCH_MANIFEST_VERSIONS=false"
        )


class SerializationError(SbomgraphError):
    """Raised when an SBOM cannot be serialized."""


class UnsupportedManifestError(SbomgraphError):
    """Raised when no provider can handle a manifest."""


class CommandExecutionError(SbomgraphError):
    """Raised when external command execution fails."""

    def __init__(self, message: str, stderr: str = ""):
        self.stderr = stderr
        super().__init__(message)


class BackendError(SbomgraphError):
    """Raised when the analysis backend rejects or fails a request."""
