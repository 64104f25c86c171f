"""sbomgraph: canonical dependency graphs (SBOMs) from package-manager output."""


def _get_version() -> str:
    """Get package version with fallback mechanisms."""
    try:
        from importlib.metadata import PackageNotFoundError, version

        return version("sbomgraph")
    except PackageNotFoundError:
        pass

    # Source checkout without installation
    from pathlib import Path

    import tomllib

    pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
    if pyproject_path.exists():
        with open(pyproject_path, "rb") as f:
            return tomllib.load(f).get("project", {}).get("version", "unknown")
    return "unknown"


__version__ = _get_version()
