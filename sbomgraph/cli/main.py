"""Command-line interface for sbomgraph.

Every option can also be given through its SBOMGRAPH_* environment
variable; command-line values take precedence.
"""

import dataclasses
import json
import sys
from pathlib import Path
from typing import Optional

import click

from .. import __version__
from .._providers import AnalysisResult, ManifestResolver, create_default_registry
from ..backend import submit_sbom
from ..config import Settings, load_settings
from ..console import print_analysis_summary, print_error
from ..exceptions import ConfigurationError, SbomgraphError
from ..graph import IgnoreMethod
from ..logging_config import logger, set_log_level
from ..serialization import get_supported_cyclonedx_versions

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def build_settings(
    ignore_method: Optional[str] = None,
    match_manifest_versions: Optional[bool] = None,
    cyclonedx_version: Optional[str] = None,
    backend_url: Optional[str] = None,
) -> Settings:
    """
    Load settings from the environment and apply command-line overrides.

    Raises:
        ConfigurationError: If the resulting settings are invalid
    """
    settings = load_settings()
    overrides = {}
    if ignore_method is not None:
        overrides["ignore_method"] = IgnoreMethod.from_value(ignore_method)
    if match_manifest_versions is not None:
        overrides["match_manifest_versions"] = match_manifest_versions
    if cyclonedx_version is not None:
        overrides["cyclonedx_version"] = cyclonedx_version
    if backend_url is not None:
        overrides["backend_url"] = backend_url
    settings = dataclasses.replace(settings, **overrides)
    settings.validate()
    return settings


def run_analysis(settings: Settings, manifest: Path, component: bool) -> AnalysisResult:
    """Analyze one manifest with the default provider table."""
    resolver = ManifestResolver(create_default_registry(), settings)
    return resolver.component(manifest) if component else resolver.stack(manifest)


def _analysis_options(func):
    options = [
        click.argument("manifest", type=click.Path(exists=True, dir_okay=False, path_type=Path)),
        click.option(
            "-o",
            "--output",
            type=click.Path(dir_okay=False, path_type=Path),
            help="Write the SBOM to this file instead of stdout.",
        ),
        click.option(
            "--ignore-method",
            type=click.Choice([m.value for m in IgnoreMethod], case_sensitive=False),
            default=None,
            help="insensitive removes ignored packages with their whole subtree, sensitive only the package. "
            "Defaults to sensitive for Maven, Gradle and Go and insensitive for JavaScript and pip. "
            "[env: SBOMGRAPH_IGNORE_METHOD]",
        ),
        click.option(
            "--match-manifest-versions/--no-match-manifest-versions",
            default=None,
            help="Fail when manifest and resolved versions differ. [env: SBOMGRAPH_MATCH_MANIFEST_VERSIONS]",
        ),
        click.option(
            "--cyclonedx-version",
            type=click.Choice(get_supported_cyclonedx_versions()),
            default=None,
            help="CycloneDX spec version of the output. [env: SBOMGRAPH_CYCLONEDX_VERSION]",
        ),
        click.option("--submit", is_flag=True, default=False, help="Send the SBOM to the analysis backend."),
        click.option(
            "--backend-url",
            envvar="SBOMGRAPH_BACKEND_URL",
            default=None,
            help="Analysis backend base URL. [env: SBOMGRAPH_BACKEND_URL]",
        ),
        click.option("--summary/--no-summary", default=True, help="Print a summary table to stderr."),
        click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _execute(component: bool, manifest: Path, output: Optional[Path], summary: bool, submit: bool, **overrides) -> None:
    try:
        settings = build_settings(**overrides)
        if submit and not settings.backend_url:
            raise ConfigurationError("--submit requires --backend-url or SBOMGRAPH_BACKEND_URL")

        result = run_analysis(settings, manifest, component)

        if output is not None:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(result.sbom, encoding="utf-8")
            logger.info(f"SBOM written to {output}")
        elif not submit:
            click.echo(result.sbom)

        if summary:
            provider = result.ecosystem
            print_analysis_summary(
                manifest.name, provider, result.component_count, result.dependency_count, len(result.ignored)
            )

        if submit:
            response = submit_sbom(settings.backend_url, result.sbom, result.media_type)
            click.echo(json.dumps(response, indent=2))
    except SbomgraphError as e:
        print_error(str(e), title=type(e).__name__)
        sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "--version", prog_name="sbomgraph")
def cli() -> None:
    """Build CycloneDX SBOMs from Maven, Gradle, Go, npm/pnpm/yarn and pip projects."""


@cli.command()
@_analysis_options
def stack(manifest, output, ignore_method, match_manifest_versions, cyclonedx_version, submit, backend_url, summary, verbose):
    """SBOM of the full transitive dependency graph of MANIFEST."""
    if verbose:
        set_log_level("DEBUG")
    _execute(
        False,
        manifest,
        output,
        summary,
        submit,
        ignore_method=ignore_method,
        match_manifest_versions=match_manifest_versions,
        cyclonedx_version=cyclonedx_version,
        backend_url=backend_url,
    )


@cli.command()
@_analysis_options
def component(
    manifest, output, ignore_method, match_manifest_versions, cyclonedx_version, submit, backend_url, summary, verbose
):
    """SBOM of the direct dependencies of MANIFEST."""
    if verbose:
        set_log_level("DEBUG")
    _execute(
        True,
        manifest,
        output,
        summary,
        submit,
        ignore_method=ignore_method,
        match_manifest_versions=match_manifest_versions,
        cyclonedx_version=cyclonedx_version,
        backend_url=backend_url,
    )


@cli.command()
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def ignored(manifest: Path) -> None:
    """Print the ignore directives found in MANIFEST, one per line."""
    try:
        resolver = ManifestResolver(create_default_registry(), build_settings())
        for entry in resolver.ignored(manifest).as_strings():
            click.echo(entry)
    except SbomgraphError as e:
        print_error(str(e), title=type(e).__name__)
        sys.exit(1)


def main() -> None:
    cli()
