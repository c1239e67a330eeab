"""
End-to-end LUT generation: pipeline -> table -> .cube artifact -> file.
"""

import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

from constants import DEFAULT_LUT_SIZE, DEFAULT_STRENGTH
from lut_engine.cube import CubeArtifact, save_cube
from lut_engine.errors import ConfigurationError
from lut_engine.presets import Preset
from lut_engine.steps import StepBase, ensure_pipeline
from lut_engine.table import ProgressCallback, build_lut_table, validate_size

logger = logging.getLogger(__name__)


def build_artifact(
    pipeline: Sequence[Union[StepBase, Mapping[str, Any]]],
    title: str,
    comments: Sequence[str] = (),
    strength: float = DEFAULT_STRENGTH,
    size: int = DEFAULT_LUT_SIZE,
    workers: int = 1,
    progress_callback: Optional[ProgressCallback] = None,
) -> CubeArtifact:
    """
    Validate inputs, sample the pipeline and wrap the result for writing.

    All configuration checks run before any grid point is evaluated.
    """
    if not title or not title.strip():
        raise ConfigurationError("LUT title must not be empty")
    validate_size(size)
    steps = ensure_pipeline(pipeline)

    table = build_lut_table(steps, strength=strength, size=size, workers=workers,
                            progress_callback=progress_callback)
    artifact = CubeArtifact(title=title, size=size, table=table, comments=list(comments))
    artifact.validate()
    return artifact


def generate_lut(
    pipeline: Sequence[Union[StepBase, Mapping[str, Any]]],
    output_path: str,
    title: str,
    comments: Sequence[str] = (),
    strength: float = DEFAULT_STRENGTH,
    size: int = DEFAULT_LUT_SIZE,
    workers: int = 1,
    progress_callback: Optional[ProgressCallback] = None,
) -> CubeArtifact:
    """
    Generate a .cube file from a pipeline.

    Args:
        pipeline: Ordered step records or raw step descriptors
        output_path: Destination .cube path
        title: TITLE line text
        comments: Comment lines written before the header
        strength: Global strength (default 1.0; values outside [0, 1] extrapolate)
        size: Grid points per axis (default 33, >= 2)
        workers: Processes used for sampling
        progress_callback: Optional callable(slabs_done, total_slabs)

    Returns:
        The artifact that was written

    Raises:
        ConfigurationError: Invalid pipeline, title or size (nothing written)
        OSError: Output path not writable
    """
    artifact = build_artifact(pipeline, title, comments, strength, size, workers, progress_callback)
    save_cube(artifact, output_path)
    logger.info(f"Generated {output_path} ({size}x{size}x{size}, strength={strength})")
    return artifact


def preset_comments(preset: Preset, strength: float) -> List[str]:
    """Preset comment lines plus the strength the LUT was generated at."""
    return list(preset.comments) + [f"Strength: {strength}"]


def generate_preset_lut(
    preset: Preset,
    output_path: str,
    strength: float = DEFAULT_STRENGTH,
    size: int = DEFAULT_LUT_SIZE,
    workers: int = 1,
    progress_callback: Optional[ProgressCallback] = None,
) -> CubeArtifact:
    """Generate a .cube file for a catalog preset."""
    return generate_lut(
        preset.pipeline,
        output_path,
        title=preset.title,
        comments=preset_comments(preset, strength),
        strength=strength,
        size=size,
        workers=workers,
        progress_callback=progress_callback,
    )
