"""
Config-driven 3D LUT engine.

Turns an ordered pipeline of color-correction steps into a .cube lookup
table for DaVinci Resolve / Adobe Premiere Pro.
"""

from lut_engine.color_space import hsl_to_rgb, rgb_to_hsl
from lut_engine.cube import CubeArtifact, TableDiff, compare_tables, read_cube, save_cube, write_cube
from lut_engine.engine import PipelineState, apply_pipeline
from lut_engine.errors import ConfigurationError, CubeFormatError, LutEngineError
from lut_engine.generator import build_artifact, generate_lut, generate_preset_lut
from lut_engine.presets import Preset, load_preset, load_presets
from lut_engine.steps import STEP_TYPES, parse_pipeline
from lut_engine.table import build_lut_table

__all__ = [
    "rgb_to_hsl",
    "hsl_to_rgb",
    "CubeArtifact",
    "TableDiff",
    "compare_tables",
    "read_cube",
    "save_cube",
    "write_cube",
    "PipelineState",
    "apply_pipeline",
    "ConfigurationError",
    "CubeFormatError",
    "LutEngineError",
    "build_artifact",
    "generate_lut",
    "generate_preset_lut",
    "Preset",
    "load_preset",
    "load_presets",
    "STEP_TYPES",
    "parse_pipeline",
    "build_lut_table",
]
