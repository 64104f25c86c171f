"""Data models for ignore directives."""

from dataclasses import dataclass, field

from ..coordinate import PackageCoordinate

# Token that marks a manifest dependency as excluded from analysis
IGNORE_MARKER = "exhortignore"


@dataclass
class IgnoreDirectives:
    """Dependencies a manifest asks to leave out.

    Attributes:
        coordinates: Dependencies identified by full coordinate
        names: Dependencies identified by package name only
    """

    coordinates: list[PackageCoordinate] = field(default_factory=list)
    names: list[str] = field(default_factory=list)

    def as_strings(self) -> list[str]:
        """The ignore-coordinate list: Package URLs first, then bare names."""
        return [c.to_string() for c in self.coordinates] + list(self.names)

    def __bool__(self) -> bool:
        return bool(self.coordinates or self.names)

    def __len__(self) -> int:
        return len(self.coordinates) + len(self.names)
