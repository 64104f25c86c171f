"""Rich console utilities for sbomgraph.

The console writes to stderr; stdout is reserved for SBOM documents.
"""

import os
from typing import Any, List, Optional, Tuple

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

IS_GITHUB_ACTIONS = os.getenv("GITHUB_ACTIONS") == "true"

custom_theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "highlight": "magenta",
    }
)

# Shared console instance
console = Console(
    theme=custom_theme,
    stderr=True,
    force_terminal=IS_GITHUB_ACTIONS or None,
    color_system="auto",
)


def print_summary_table(
    title: str,
    data: List[Tuple[str, Any]],
    show_if_empty: bool = False,
) -> None:
    """
    Print a summary table.

    Args:
        title: Table title
        data: List of (label, value) tuples
        show_if_empty: Whether to show the table if all values are 0/empty
    """
    if not show_if_empty:
        data = [(label, value) for label, value in data if value]

    if not data:
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    for label, value in data:
        table.add_row(label, str(value))

    console.print(table)


def print_analysis_summary(manifest: str, provider: str, components: int, dependencies: int, ignored: int) -> None:
    print_summary_table(
        f"SBOM for {manifest}",
        [
            ("Provider", provider),
            ("Components", components),
            ("Dependency edges", dependencies),
            ("Ignore directives", ignored),
        ],
        show_if_empty=True,
    )


def print_error(message: str, title: Optional[str] = None) -> None:
    """
    Print an error; in GitHub Actions also emit an error annotation.

    Args:
        message: Error message
        title: Optional title for the error
    """
    if IS_GITHUB_ACTIONS:
        print(f"::error title={title}::{message}" if title else f"::error::{message}")
    prefix = f"Error ({title}):" if title else "Error:"
    console.print(f"[error]{prefix}[/error] {escape(message)}", highlight=False)
