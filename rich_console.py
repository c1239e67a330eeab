"""
Rich console configuration for the .cube LUT generator.

Provides terminal output with progress bars, panels, and styled logging.
"""

import logging
import os
from typing import Dict, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.theme import Theme
from rich.panel import Panel
from rich.table import Table
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    TaskProgressColumn,
    TimeElapsedColumn,
    MofNCompleteColumn,
)

from constants import THEME_STYLES

LUT_THEME = Theme(THEME_STYLES)

# Global console instance
console = Console(theme=LUT_THEME)


def setup_rich_logging(verbose: bool = False) -> None:
    """
    Configure logging to use Rich handler.

    Args:
        verbose: Enable DEBUG level logging with full details
    """
    level = logging.DEBUG if verbose else logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=console,
                show_time=verbose,
                show_path=verbose,
                rich_tracebacks=True,
                tracebacks_show_locals=verbose,
                markup=False,
            )
        ],
        force=True,  # Override any existing configuration
    )


def create_progress() -> Progress:
    """
    Create a progress bar for sampling the LUT grid (one tick per blue slab).

    Returns:
        Configured Progress instance
    """
    return Progress(
        SpinnerColumn("dots"),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(bar_width=40, style="cyan", complete_style="green"),
        TaskProgressColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def print_config_summary(
    preset_name: str,
    title: str,
    step_names: list,
    output_file: str,
    strength: float,
    size: int,
    workers: int = 1,
) -> None:
    """
    Print a styled generation summary panel.

    Args:
        preset_name: Catalog key of the preset
        title: Preset title
        step_names: Pipeline step types in order
        output_file: Output .cube path
        strength: Global strength
        size: Grid points per axis
        workers: Sampling processes
    """
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Preset", f"[preset]{preset_name}[/]")
    table.add_row("Title", escape(title))
    table.add_row("Pipeline", " -> ".join(step_names))
    table.add_row("Output", f"[green]{output_file}[/]")
    table.add_row("Strength", f"[value]{strength:.2f}[/]")
    table.add_row("Grid", f"{size}x{size}x{size} ({size ** 3:,} points)")
    if workers > 1:
        table.add_row("Workers", str(workers))

    panel = Panel(
        table,
        title="[bold]LUT Generation[/]",
        border_style="cyan",
        padding=(1, 2),
    )
    console.print(panel)


def print_completion_summary(
    output_file: str,
    size: int,
    strength: float,
    reference_result: Optional[str] = None,
) -> None:
    """
    Print a styled completion summary with usage hints.

    Args:
        output_file: Path to the generated .cube
        size: Grid points per axis
        strength: Global strength
        reference_result: Regression comparison summary (optional)
    """
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold green")

    table.add_row("Generated", os.path.basename(output_file))
    table.add_row("LUT size", f"{size}x{size}x{size}")
    table.add_row("Strength", f"{strength}")
    if reference_result:
        table.add_row("Reference", reference_result)

    panel = Panel(
        table,
        title="[bold green]Complete[/]",
        border_style="green",
        padding=(1, 2),
    )
    console.print(panel)
    console.print("[muted]DaVinci Resolve: add a node AFTER the conversion LUT, "
                  "right-click -> LUT -> Browse[/]")
    console.print("[muted]Premiere Pro: Lumetri Color -> Creative -> Look -> Browse[/]")


def print_preset_table(presets: Dict) -> None:
    """
    Print available presets with their titles and pipelines.

    Args:
        presets: Preset name -> Preset
    """
    table = Table(title="Available LUT presets", header_style="bold cyan")
    table.add_column("Preset", style="preset")
    table.add_column("Title")
    table.add_column("Pipeline", style="dim")

    for name, preset in presets.items():
        table.add_row(name, escape(preset.title), " -> ".join(step.step for step in preset.pipeline))
    console.print(table)


def print_error(message: str, hint: Optional[str] = None) -> None:
    """
    Print a styled error message.

    Args:
        message: Error message
        hint: Optional hint for resolution
    """
    console.print(f"\n[error]Error:[/] {escape(message)}", highlight=False)
    if hint:
        console.print(f"[muted]Hint: {escape(hint)}[/]")
