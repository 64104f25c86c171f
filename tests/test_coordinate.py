"""Tests for package coordinates and the per-ecosystem builders."""

import pytest

from sbomgraph.coordinate import (
    DEFAULT_MAIN_MODULE_VERSION,
    PackageCoordinate,
    canonical_python_name,
    golang_coordinate,
    maven_coordinate,
    npm_coordinate,
    pypi_coordinate,
)
from sbomgraph.exceptions import MalformedInputError


class TestPackageCoordinate:
    """Tests for the PackageCoordinate value type."""

    def test_requires_ecosystem_and_name(self):
        with pytest.raises(MalformedInputError):
            PackageCoordinate("", "name")
        with pytest.raises(MalformedInputError):
            PackageCoordinate("npm", "")

    def test_equal_coordinates_hash_equal(self):
        a = PackageCoordinate("npm", "left-pad", "1.3.0")
        b = PackageCoordinate("npm", "left-pad", "1.3.0")
        assert a == b
        assert len({a, b}) == 1

    def test_qualifier_order_does_not_matter(self):
        a = PackageCoordinate("golang", "uuid", "v1.1.2", "github.com/google", (("type", "module"), ("goos", "linux")))
        b = PackageCoordinate("golang", "uuid", "v1.1.2", "github.com/google", {"goos": "linux", "type": "module"})
        assert a == b
        assert a.qualifiers == (("goos", "linux"), ("type", "module"))

    def test_empty_namespace_is_none(self):
        assert PackageCoordinate("npm", "a", "1.0.0", "").namespace is None

    def test_to_string(self):
        coordinate = maven_coordinate("org.slf4j", "slf4j-api", "2.0.9")
        assert coordinate.to_string() == "pkg:maven/org.slf4j/slf4j-api@2.0.9"
        assert str(coordinate) == coordinate.to_string()

    def test_from_purl_parses_back(self):
        coordinate = PackageCoordinate.from_purl("pkg:golang/github.com/google/uuid@v1.1.2?type=module")
        assert coordinate.ecosystem == "golang"
        assert coordinate.namespace == "github.com/google"
        assert coordinate.name == "uuid"
        assert coordinate.version == "v1.1.2"
        assert coordinate.qualifier_map == {"type": "module"}

    def test_from_purl_rejects_garbage(self):
        with pytest.raises(MalformedInputError):
            PackageCoordinate.from_purl("not a purl")

    def test_without_qualifiers(self):
        coordinate = maven_coordinate("log4j", "log4j", "1.2.17", scope="test")
        assert coordinate.qualifier_map == {"scope": "test"}
        assert coordinate.without_qualifiers() == maven_coordinate("log4j", "log4j", "1.2.17")

    def test_name_equals_ignores_version_and_namespace(self):
        assert maven_coordinate("a", "lib", "1").name_equals(maven_coordinate("b", "lib", "2"))
        assert not maven_coordinate("a", "lib", "1").name_equals(maven_coordinate("a", "other", "1"))


class TestEcosystemBuilders:
    """Tests for the coordinate rules of each ecosystem."""

    def test_maven(self):
        coordinate = maven_coordinate("com.google.guava", "guava", "32.1.2-jre")
        assert coordinate.ecosystem == "maven"
        assert coordinate.namespace == "com.google.guava"
        assert coordinate.name == "guava"
        assert coordinate.qualifiers == ()

    def test_npm_unscoped(self):
        coordinate = npm_coordinate("left-pad", "1.3.0")
        assert coordinate.namespace is None
        assert coordinate.name == "left-pad"

    def test_npm_scoped(self):
        coordinate = npm_coordinate("@babel/core", "7.23.0")
        assert coordinate.namespace == "@babel"
        assert coordinate.name == "core"
        assert coordinate.version == "7.23.0"

    def test_golang_splits_at_last_slash(self):
        coordinate = golang_coordinate("github.com/google/uuid@v1.1.2", qualifiers={"type": "module"})
        assert coordinate.namespace == "github.com/google"
        assert coordinate.name == "uuid"
        assert coordinate.version == "v1.1.2"
        assert coordinate.to_string() == "pkg:golang/github.com/google/uuid@v1.1.2?type=module"

    def test_golang_missing_version_uses_main_module_version(self):
        assert golang_coordinate("example.com/app").version == DEFAULT_MAIN_MODULE_VERSION
        assert golang_coordinate("example.com/app", "v1.2.0").version == "v1.2.0"

    def test_golang_single_segment_path(self):
        coordinate = golang_coordinate("app@v1.0.0")
        assert coordinate.namespace is None
        assert coordinate.name == "app"

    def test_golang_rejects_empty_path(self):
        with pytest.raises(MalformedInputError):
            golang_coordinate("@v1.0.0")

    def test_python_names_are_canonical(self):
        assert canonical_python_name("Zope.Interface") == "zope-interface"
        assert canonical_python_name("typing_extensions") == "typing-extensions"
        assert pypi_coordinate("PyYAML", "6.0.1") == PackageCoordinate("pypi", "pyyaml", "6.0.1")
