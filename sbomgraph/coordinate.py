"""Package coordinates and the per-ecosystem rules for building them.

A coordinate is the canonical identity of a dependency inside a
:class:`~sbomgraph.graph.DependencyGraph`. It maps one to one onto a
Package URL (https://github.com/package-url/purl-spec), which is also the
bom-ref used when the graph is serialized.
"""

import dataclasses
import re
from dataclasses import dataclass
from typing import Mapping, Optional, Union

from packageurl import PackageURL

from .exceptions import MalformedInputError

MAVEN = "maven"
NPM = "npm"
GOLANG = "golang"
PYPI = "pypi"

# Version used for Go modules when version control gives nothing better
DEFAULT_MAIN_MODULE_VERSION = "v0.0.0"


@dataclass(frozen=True)
class PackageCoordinate:
    """Immutable dependency identifier.

    Attributes:
        ecosystem: Package URL type (maven, npm, golang, pypi)
        name: Package name
        version: Package version, None when the source does not declare one
        namespace: Group, scope or module path prefix
        qualifiers: Sorted (key, value) pairs
    """

    ecosystem: str
    name: str
    version: Optional[str] = None
    namespace: Optional[str] = None
    qualifiers: tuple[tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        if not self.ecosystem:
            raise MalformedInputError("Package coordinate requires an ecosystem")
        if not self.name:
            raise MalformedInputError(f"Package coordinate in {self.ecosystem} requires a name")
        qualifiers = self.qualifiers
        if isinstance(qualifiers, Mapping):
            qualifiers = qualifiers.items()
        object.__setattr__(self, "qualifiers", tuple(sorted((str(k), str(v)) for k, v in qualifiers)))
        if self.namespace == "":
            object.__setattr__(self, "namespace", None)

    @classmethod
    def from_purl(cls, value: Union[str, PackageURL]) -> "PackageCoordinate":
        """Build a coordinate from a Package URL string or object.

        Raises:
            MalformedInputError: If the string is not a valid Package URL
        """
        if isinstance(value, PackageURL):
            purl = value
        else:
            try:
                purl = PackageURL.from_string(value)
            except ValueError as e:
                raise MalformedInputError(f"Invalid package coordinate '{value}': {e}") from e
        return cls(
            ecosystem=purl.type,
            namespace=purl.namespace,
            name=purl.name,
            version=purl.version,
            qualifiers=tuple((purl.qualifiers or {}).items()),
        )

    @property
    def qualifier_map(self) -> dict[str, str]:
        return dict(self.qualifiers)

    def name_equals(self, other: "PackageCoordinate") -> bool:
        """True iff only the names are compared and they match."""
        return self.name == other.name

    def without_qualifiers(self) -> "PackageCoordinate":
        return dataclasses.replace(self, qualifiers=())

    def to_purl(self) -> PackageURL:
        return PackageURL(
            type=self.ecosystem,
            namespace=self.namespace,
            name=self.name,
            version=self.version,
            qualifiers=dict(self.qualifiers) or None,
        )

    def to_string(self) -> str:
        return self.to_purl().to_string()

    def __str__(self) -> str:
        return self.to_string()


def maven_coordinate(
    group_id: str, artifact_id: str, version: Optional[str], scope: Optional[str] = None
) -> PackageCoordinate:
    """Maven and Gradle: namespace is the groupId, name the artifactId."""
    qualifiers = (("scope", scope),) if scope else ()
    return PackageCoordinate(MAVEN, artifact_id, version, group_id, qualifiers)


def npm_coordinate(name: str, version: Optional[str]) -> PackageCoordinate:
    """npm, pnpm and yarn: ``@scope/pkg`` splits into namespace and name."""
    if name.startswith("@") and "/" in name:
        namespace, package = name.split("/", 1)
        return PackageCoordinate(NPM, package, version, namespace)
    return PackageCoordinate(NPM, name, version)


def golang_coordinate(
    dependency: str,
    main_module_version: str = DEFAULT_MAIN_MODULE_VERSION,
    qualifiers: Optional[Mapping[str, str]] = None,
) -> PackageCoordinate:
    """Build a Go module coordinate from ``module/path@version``.

    The namespace is the module path up to its last slash and the name the
    final segment. A missing version (the main module, or a require line
    without one) falls back to ``main_module_version``.
    """
    path, _, version = dependency.strip().partition("@")
    if not path:
        raise MalformedInputError(f"Invalid Go module reference '{dependency}'")
    namespace, _, name = path.rpartition("/")
    return PackageCoordinate(
        GOLANG,
        name,
        version or main_module_version,
        namespace or None,
        tuple((qualifiers or {}).items()),
    )


def canonical_python_name(name: str) -> str:
    """Normalize a Python distribution name per PEP 503."""
    return re.sub(r"[-_.]+", "-", name).lower()


def pypi_coordinate(name: str, version: Optional[str]) -> PackageCoordinate:
    return PackageCoordinate(PYPI, canonical_python_name(name), version)
