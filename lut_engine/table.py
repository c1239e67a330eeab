"""
Grid sampler: turns a step pipeline into a 3D LUT table.

Rows follow the .cube order: blue is the outer loop, then green, with red
varying fastest. Every grid point is independent, so blue slabs can be
farmed out to a process pool; slabs are reassembled by index, never by
completion order.
"""

import logging
import multiprocessing
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from constants import DEFAULT_LUT_SIZE, DEFAULT_STRENGTH, MIN_LUT_SIZE
from lut_engine.engine import apply_pipeline
from lut_engine.errors import ConfigurationError
from lut_engine.steps import StepBase, ensure_pipeline

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def grid_axis(size: int) -> List[float]:
    """
    Input values along one grid axis.

    ``index / (size - 1)`` keeps both 0.0 and 1.0 exact at the ends.
    """
    validate_size(size)
    return [i / (size - 1) for i in range(size)]


def validate_size(size: int) -> None:
    if isinstance(size, bool) or not isinstance(size, int) or size < MIN_LUT_SIZE:
        raise ConfigurationError(f"LUT size must be an integer >= {MIN_LUT_SIZE}, got {size!r}")


def _evaluate_slab(args: Tuple[int, Sequence[StepBase], float, int]) -> np.ndarray:
    """Evaluate every (green, red) point for one blue index. Module level for pickling."""
    bi, pipeline, strength, size = args
    axis = [i / (size - 1) for i in range(size)]
    b = axis[bi]

    slab = np.empty((size * size, 3), dtype=np.float64)
    row = 0
    for g in axis:
        for r in axis:
            slab[row] = apply_pipeline((r, g, b), pipeline, strength)
            row += 1
    return np.clip(slab, 0.0, 1.0, out=slab)


def build_lut_table(
    pipeline: Sequence[StepBase],
    strength: float = DEFAULT_STRENGTH,
    size: int = DEFAULT_LUT_SIZE,
    workers: int = 1,
    progress_callback: Optional[ProgressCallback] = None,
) -> np.ndarray:
    """
    Sample the pipeline on a size x size x size grid.

    Args:
        pipeline: Step records, or raw step descriptors to be validated
        strength: Global strength (0.0 = identity for strength-scaled steps)
        size: Grid points per axis (>= 2)
        workers: Processes to use; 1 evaluates in this process
        progress_callback: Optional callable(slabs_done, total_slabs)

    Returns:
        float64 array of shape (size**3, 3), each channel clamped to [0, 1]

    Raises:
        ConfigurationError: Invalid size, empty pipeline, or invalid step
    """
    validate_size(size)
    steps = ensure_pipeline(pipeline)
    if workers < 1:
        raise ConfigurationError(f"workers must be >= 1, got {workers}")

    tasks = [(bi, steps, strength, size) for bi in range(size)]
    table = np.empty((size ** 3, 3), dtype=np.float64)
    slab_rows = size * size

    logger.debug(f"Sampling {size}^3 grid with {len(steps)} steps, strength={strength}, workers={workers}")

    def store(bi: int, slab: np.ndarray) -> None:
        table[bi * slab_rows:(bi + 1) * slab_rows] = slab
        if progress_callback:
            progress_callback(bi + 1, size)

    if workers == 1:
        for task in tasks:
            store(task[0], _evaluate_slab(task))
    else:
        with multiprocessing.Pool(processes=min(workers, size)) as pool:
            # imap yields in submission order, so slab index == blue index
            for bi, slab in enumerate(pool.imap(_evaluate_slab, tasks)):
                store(bi, slab)

    return table


def identity_table(size: int = DEFAULT_LUT_SIZE) -> np.ndarray:
    """Grid input coordinates in table order, for comparing against a built table."""
    axis = np.array(grid_axis(size), dtype=np.float64)
    b, g, r = np.meshgrid(axis, axis, axis, indexing="ij")
    return np.stack([r.ravel(), g.ravel(), b.ravel()], axis=1)
