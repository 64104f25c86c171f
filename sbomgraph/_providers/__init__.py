"""Ecosystem providers: manifest -> tool output -> filtered dependency graph."""

from .models import AnalysisResult
from .protocol import EcosystemProvider
from .registry import ProviderEntry, ProviderRegistry, create_default_registry
from .resolver import ManifestResolver

__all__ = [
    "AnalysisResult",
    "EcosystemProvider",
    "ManifestResolver",
    "ProviderEntry",
    "ProviderRegistry",
    "create_default_registry",
]
