#!/usr/bin/env python3
"""
Generate Markdown reference pages from the preset catalog.

Writes:
    <docs_dir>/lut-types.md        one section per preset with its pipeline
    <docs_dir>/presets-config.md   catalog format and every step type

Step descriptions and parameter docs come from the step records in
lut_engine.steps, so the pages stay in sync with what the engine accepts.
"""

import argparse
import logging
import os
import sys
from typing import Dict, List, Optional, TextIO

from constants import DEFAULT_LUT_SIZE
from lut_engine.errors import LutEngineError
from lut_engine.presets import Preset, load_presets
from lut_engine.steps import STEP_TYPES, describe_step
from rich_console import console, print_error, setup_rich_logging

logger = logging.getLogger(__name__)

DEFAULT_DOCS_DIR = os.path.join("docs", "reference")


def write_lut_types(presets: Dict[str, Preset], out: TextIO) -> None:
    out.write(
        "---\n"
        "title: LUT Types\n"
        "description: Reference for all available LUT presets\n"
        "---\n"
        "\n"
        "All LUTs are generated with `generate_lut.py` and support these options:\n"
        "\n"
        "- `--strength=N`: effect intensity from 0.0 (no change) to 1.0 (full). Default: 1.0\n"
        f"- `--size=N`: LUT grid resolution. Default: {DEFAULT_LUT_SIZE} "
        f"({DEFAULT_LUT_SIZE}x{DEFAULT_LUT_SIZE}x{DEFAULT_LUT_SIZE} = {DEFAULT_LUT_SIZE ** 3:,} sample points)\n"
        "\n"
        "Presets are defined in `presets.yml`. Add new LUT types by editing the YAML.\n"
    )

    for name, preset in presets.items():
        out.write(f"\n## {name}\n\n**{preset.title}**\n\n")
        if preset.comments:
            for comment in preset.comments:
                out.write(f"> {comment}\n")
            out.write("\n")

        out.write(f"```bash\npython generate_lut.py {name} output.cube\n```\n\n### Pipeline\n\n")
        for i, step in enumerate(preset.pipeline, start=1):
            out.write(f"{i}. **{step.step}**: {type(step).summary}\n")
            params = describe_step(step)
            if params:
                out.write("\n   | Parameter | Value |\n   |-----------|-------|\n")
                for key, value in params.items():
                    out.write(f"   | {key} | {value} |\n")
                out.write("\n")


def write_presets_config(out: TextIO) -> None:
    out.write(
        "---\n"
        "title: Preset Configuration\n"
        "description: How to create and customize LUT presets\n"
        "---\n"
        "\n"
        "Each preset in `presets.yml` is a named pipeline of ordered processing steps.\n"
        "Adding a new LUT type means adding a YAML entry, no code changes needed.\n"
        "\n"
        "## YAML Format\n"
        "\n"
        "```yaml\n"
        "my_custom_lut:\n"
        "  title: \"My Custom LUT\"\n"
        "  comments:\n"
        "    - \"Description line 1\"\n"
        "  pipeline:\n"
        "    - step: exposure\n"
        "      gamma: 0.80\n"
        "      shadow_lift: 0.02\n"
        "    - step: black_crush\n"
        "      black_threshold: 0.10\n"
        "      crush_gamma: 2.0\n"
        "      transition_end: 0.22\n"
        "```\n"
        "\n"
        "| Field | Description |\n"
        "|-------|-------------|\n"
        "| `title` | Human-readable name (written to the .cube TITLE line) |\n"
        "| `comments` | List of description lines (written as .cube comments) |\n"
        "| `pipeline` | Ordered list of processing steps (must not be empty) |\n"
        "\n"
        "Each step needs a `step` field naming its type plus that type's required parameters.\n"
        "Unknown step types, missing parameters and misspelled parameters are rejected.\n"
        "\n"
        "## Strength Interpolation\n"
        "\n"
        "Parameters are the values at full strength (1.0). Lower strengths interpolate toward neutral:\n"
        "\n"
        "- Gamma and gains: `actual = 1.0 + (target - 1.0) * strength`\n"
        "- Additive values: `actual = target * strength`\n"
        "\n"
        "At `--strength=0` every preset is an identity LUT, except that `highlight_protect`\n"
        "is a fixed safety clamp and still compresses highlights.\n"
        "\n"
        "## Available Step Types\n"
    )

    for step_name, cls in STEP_TYPES.items():
        out.write(f"\n### {step_name}\n\n{cls.summary}\n\n")
        out.write("| Parameter | Default | Description |\n|-----------|---------|-------------|\n")
        for field_name, info in cls.model_fields.items():
            if field_name == "step":
                continue
            default = "required" if info.is_required() else f"`{info.default}`"
            out.write(f"| `{field_name}` | {default} | {info.description or ''} |\n")

    out.write(
        "\n## Tips\n"
        "\n"
        "- Steps execute in order. Put RGB rebalancing first, exposure next, then refinements.\n"
        "- `skin_correction` and `shadow_sat_boost` test their luminance windows against the\n"
        "  original luminance, so an earlier exposure step cannot push pixels in or out of them.\n"
        "- Test with `--strength=0.5` first, then adjust parameters.\n"
    )


def generate_docs(docs_dir: str = DEFAULT_DOCS_DIR, presets_file: Optional[str] = None) -> List[str]:
    """
    Write both reference pages.

    Returns:
        Paths of the generated files
    """
    presets = load_presets(presets_file)
    os.makedirs(docs_dir, exist_ok=True)

    lut_types_path = os.path.join(docs_dir, "lut-types.md")
    with open(lut_types_path, "w", encoding="utf-8") as f:
        write_lut_types(presets, f)

    config_path = os.path.join(docs_dir, "presets-config.md")
    with open(config_path, "w", encoding="utf-8") as f:
        write_presets_config(f)

    logger.debug(f"Documented {len(presets)} presets and {len(STEP_TYPES)} step types")
    return [lut_types_path, config_path]


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Generate Markdown docs from the preset catalog.")
    parser.add_argument("--docs-dir", default=DEFAULT_DOCS_DIR, help="Output directory (default: %(default)s)")
    parser.add_argument("--presets", dest="presets_file", default=None, help="Preset catalog YAML")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    setup_rich_logging(args.verbose)

    try:
        paths = generate_docs(args.docs_dir, args.presets_file)
    except (LutEngineError, OSError) as e:
        print_error(str(e))
        return 1

    for path in paths:
        console.print(f"[success]Generated:[/] {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
