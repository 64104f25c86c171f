"""CLI module for sbomgraph.

Commands accept command-line options with SBOMGRAPH_* environment
variables as fallbacks.
"""

from .main import build_settings, cli, main, run_analysis

__all__ = [
    "cli",
    "main",
    "build_settings",
    "run_analysis",
]
