#!/usr/bin/env python3
"""
Generate 3D .cube LUT files for color correction.

Works with both DaVinci Resolve and Adobe Premiere Pro. Apply AFTER a
LogC -> Rec.709 conversion LUT in your node/effect chain.

Usage:
    python generate_lut.py <preset> <output_path> [--strength=N] [--size=N]

Examples:
    python generate_lut.py yellow_fix /mnt/h/yellow_cast_fix.cube
    python generate_lut.py overexposure_fix /mnt/h/mild.cube --strength=0.5
    python generate_lut.py --list
"""

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError

from constants import DEFAULT_LUT_SIZE, DEFAULT_STRENGTH, MIN_LUT_SIZE
from lut_engine.cube import compare_tables, read_cube
from lut_engine.errors import ConfigurationError, LutEngineError
from lut_engine.generator import generate_preset_lut
from lut_engine.presets import load_preset, load_presets
from rich_console import (
    console,
    create_progress,
    print_completion_summary,
    print_config_summary,
    print_error,
    print_preset_table,
    setup_rich_logging,
)

logger = logging.getLogger(__name__)


class GenerateConfig(BaseModel):
    preset: str
    output_path: str
    strength: float = DEFAULT_STRENGTH
    size: int = Field(default=DEFAULT_LUT_SIZE, ge=MIN_LUT_SIZE)
    workers: int = Field(default=1, ge=1)
    presets_file: Optional[str] = None
    reference: Optional[str] = None
    verbose: bool = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a 3D .cube LUT from a named color-correction preset.",
        epilog="Apply the LUT AFTER your LogC -> Rec.709 conversion.",
    )
    parser.add_argument("preset", nargs="?", help="Preset name (see --list)")
    parser.add_argument("output_path", nargs="?", help="Path to output .cube file")
    parser.add_argument("--strength", type=float, default=DEFAULT_STRENGTH,
                        help="Overall strength 0.0-1.0 (default: %(default)s)")
    parser.add_argument("--size", type=int, default=DEFAULT_LUT_SIZE,
                        help="LUT grid size (default: %(default)s)")
    parser.add_argument("--workers", type=int, default=1,
                        help="Processes used to sample the grid (default: %(default)s)")
    parser.add_argument("--presets", dest="presets_file", default=None,
                        help="Preset catalog YAML (default: bundled presets.yml)")
    parser.add_argument("--reference", default=None,
                        help="Compare the result against a previously generated .cube")
    parser.add_argument("--list", action="store_true", help="List available presets and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> Optional[GenerateConfig]:
    """
    Parse command-line arguments.

    Returns:
        GenerateConfig, or None when only the preset list was requested
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_rich_logging(args.verbose)

    if args.list:
        print_preset_table(load_presets(args.presets_file))
        return None

    if not args.preset or not args.output_path:
        parser.error("preset and output_path are required (use --list to see presets)")

    try:
        return GenerateConfig(
            preset=args.preset,
            output_path=args.output_path,
            strength=args.strength,
            size=args.size,
            workers=args.workers,
            presets_file=args.presets_file,
            reference=args.reference,
            verbose=args.verbose,
        )
    except ValidationError as e:
        problems = "; ".join(f"--{err['loc'][0]}: {err['msg']}" for err in e.errors())
        parser.error(problems)


def run(config: GenerateConfig) -> int:
    """Generate the LUT described by config. Returns a process exit code."""
    logger.debug(f"Generate config: {config}")
    preset = load_preset(config.preset, config.presets_file)

    print_config_summary(
        preset_name=preset.name,
        title=preset.title,
        step_names=[step.step for step in preset.pipeline],
        output_file=config.output_path,
        strength=config.strength,
        size=config.size,
        workers=config.workers,
    )

    with create_progress() as progress:
        task = progress.add_task("Sampling grid", total=config.size)

        def on_progress(done: int, total: int) -> None:
            progress.update(task, completed=done)

        artifact = generate_preset_lut(
            preset,
            config.output_path,
            strength=config.strength,
            size=config.size,
            workers=config.workers,
            progress_callback=on_progress,
        )

    reference_result = None
    exit_code = 0
    if config.reference:
        reference = read_cube(config.reference)
        if reference.size != artifact.size:
            reference_result = f"[error]size mismatch: reference is {reference.size}^3[/]"
            exit_code = 1
        else:
            diff = compare_tables(artifact.table, reference.table)
            if diff.matches:
                reference_result = "[success]matches[/]"
            else:
                reference_result = f"[error]{diff.diff_count} values differ, max_diff={diff.max_diff:.2e}[/]"
                exit_code = 1

    print_completion_summary(config.output_path, config.size, config.strength, reference_result)
    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    try:
        config = parse_args(argv)
        if config is None:
            return 0
        return run(config)
    except ConfigurationError as e:
        print_error(str(e), hint="Check the preset definition in presets.yml")
        return 1
    except LutEngineError as e:
        print_error(str(e))
        return 1
    except OSError as e:
        print_error(str(e))
        return 1
    except KeyboardInterrupt:
        console.print("\n[warning]Interrupted[/]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
