"""Tests for the manifest ignore-directive scanners."""

import pytest

from sbomgraph._ignore import (
    IgnoreDirectives,
    scan_go_mod,
    scan_gradle,
    scan_gradle_text,
    scan_package_json,
    scan_pom,
    scan_requirements,
)
from sbomgraph._ignore.golang import parse_requirements
from sbomgraph._ignore.gradle import resolve_catalog_alias
from sbomgraph.coordinate import golang_coordinate, maven_coordinate
from sbomgraph.exceptions import MalformedInputError

POM = """\
<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <modelVersion>4.0.0</modelVersion>
  <groupId>com.acme</groupId>
  <artifactId>app</artifactId>
  <version>1.0.0</version>
  <dependencies>
    <dependency>
      <!--exhortignore-->
      <groupId>log4j</groupId>
      <artifactId>log4j</artifactId>
      <version>1.2.17</version>
    </dependency>
    <dependency>
      <groupId>org.slf4j</groupId>
      <artifactId>slf4j-api</artifactId>
      <version>2.0.9</version>
    </dependency>
    <dependency>
      <!-- exhortignore -->
      <groupId>junit</groupId>
      <artifactId>junit</artifactId>
      <scope>test</scope>
    </dependency>
  </dependencies>
</project>
"""


class TestMavenScanner:
    """Tests for pom.xml comments."""

    def test_marked_dependencies(self):
        directives = scan_pom(POM)
        assert directives.coordinates == [
            maven_coordinate("log4j", "log4j", "1.2.17"),
            maven_coordinate("junit", "junit", None, scope="test"),
        ]

    def test_comment_outside_dependency_is_ignored(self):
        text = POM.replace("<modelVersion>", "<!--exhortignore--><modelVersion>").replace(
            "<!--exhortignore-->\n      <groupId>log4j", "<groupId>log4j"
        )
        assert [c.name for c in scan_pom(text).coordinates] == ["junit"]

    def test_invalid_xml(self):
        with pytest.raises(MalformedInputError):
            scan_pom("<project><dependencies>")


CATALOG = {
    "versions": {"log4j": "1.2.17", "guava": {"strictly": "32.1.2-jre"}},
    "libraries": {
        "log4j-core": {"module": "log4j:log4j", "version": {"ref": "log4j"}},
        "guava": {"group": "com.google.guava", "name": "guava", "version": {"ref": "guava"}},
        "netty": "io.netty:netty-all:4.1.100.Final",
    },
}


class TestGradleScanner:
    """Tests for build.gradle trailing comments."""

    def test_string_notation(self):
        text = 'implementation "log4j:log4j:1.2.17" // exhortignore\nimplementation "a:b:1.0"\n'
        assert scan_gradle_text(text).coordinates == [maven_coordinate("log4j", "log4j", "1.2.17")]

    def test_kotlin_and_single_quotes(self):
        text = "implementation('org.slf4j:slf4j-api:2.0.9') // exhortignore\n"
        assert scan_gradle_text(text).coordinates == [maven_coordinate("org.slf4j", "slf4j-api", "2.0.9")]

    def test_map_notation(self):
        text = 'implementation group: "log4j", name: "log4j", version: "1.2.17" // exhortignore\n'
        assert scan_gradle_text(text).coordinates == [maven_coordinate("log4j", "log4j", "1.2.17")]

    def test_catalog_aliases(self):
        text = (
            "implementation libs.guava // exhortignore\n"
            "implementation(libs.netty) // exhortignore\n"
            "implementation libs.unknown // exhortignore\n"
        )
        assert scan_gradle_text(text, CATALOG).coordinates == [
            maven_coordinate("com.google.guava", "guava", "32.1.2-jre"),
            maven_coordinate("io.netty", "netty-all", "4.1.100.Final"),
        ]

    def test_alias_separators_are_equivalent(self):
        assert resolve_catalog_alias("log4j.core", CATALOG) == maven_coordinate("log4j", "log4j", "1.2.17")

    def test_scan_reads_version_catalog(self, tmp_path):
        (tmp_path / "gradle").mkdir()
        (tmp_path / "gradle" / "libs.versions.toml").write_text(
            '[versions]\nguava = "32.1.2-jre"\n\n[libraries]\nguava = { module = "com.google.guava:guava", version.ref = "guava" }\n'
        )
        build = tmp_path / "build.gradle"
        build.write_text("dependencies {\n    implementation libs.guava // exhortignore\n}\n")
        assert scan_gradle(build).coordinates == [maven_coordinate("com.google.guava", "guava", "32.1.2-jre")]


GO_MOD = """\
module example.com/app

go 1.21

require (
\tgithub.com/google/uuid v1.1.2 // exhortignore
\tgolang.org/x/text v0.3.0
\tgolang.org/x/sys v0.6.0 // indirect //exhortignore
)

require github.com/pkg/errors v0.9.1 // exhortignore

replace github.com/pkg/errors => ../errors // exhortignore
"""


class TestGoScanner:
    """Tests for go.mod trailing comments."""

    def test_marked_requirements(self):
        directives = scan_go_mod(GO_MOD, {"type": "module"})
        assert directives.coordinates == [
            golang_coordinate("github.com/google/uuid@v1.1.2", qualifiers={"type": "module"}),
            golang_coordinate("golang.org/x/sys@v0.6.0", qualifiers={"type": "module"}),
            golang_coordinate("github.com/pkg/errors@v0.9.1", qualifiers={"type": "module"}),
        ]

    def test_marker_must_be_in_comment(self):
        assert not scan_go_mod("require example.com/exhortignore v1.0.0\n")

    def test_parse_requirements(self):
        assert parse_requirements(GO_MOD) == {
            "github.com/google/uuid": "v1.1.2",
            "golang.org/x/text": "v0.3.0",
            "golang.org/x/sys": "v0.6.0",
            "github.com/pkg/errors": "v0.9.1",
        }


class TestNpmScanner:
    """Tests for the package.json marker array."""

    def test_names(self):
        directives = scan_package_json({"name": "web", "exhortignore": ["jsonwebtoken", "@types/node"]})
        assert directives.names == ["jsonwebtoken", "@types/node"]
        assert directives.as_strings() == ["jsonwebtoken", "@types/node"]

    def test_absent(self):
        assert not scan_package_json({"name": "web"})

    def test_wrong_type(self):
        with pytest.raises(MalformedInputError):
            scan_package_json({"exhortignore": "jsonwebtoken"})


class TestPipScanner:
    """Tests for requirements.txt comments."""

    def test_names(self):
        text = "requests==2.31.0  # exhortignore\nFlask==3.0.0\nPyYAML>=6 #exhortignore\n# exhortignore\n"
        assert scan_requirements(text).names == ["requests", "pyyaml"]


class TestIgnoreDirectives:
    """Tests for the directive container."""

    def test_as_strings_puts_coordinates_first(self):
        directives = IgnoreDirectives([maven_coordinate("log4j", "log4j", "1.2.17")], ["left-pad"])
        assert directives.as_strings() == ["pkg:maven/log4j/log4j@1.2.17", "left-pad"]
        assert len(directives) == 2
        assert directives
