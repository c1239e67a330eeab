"""
.cube LUT serializer and reader.

Writes the layout understood by DaVinci Resolve and Adobe Premiere Pro::

    # comment lines
    TITLE "<title>"
    LUT_3D_SIZE <N>
    <blank line>
    N^3 rows of "R G B" with 6 decimals, red varying fastest

Output is byte-stable for a fixed table so generated LUTs can be compared
against reference files.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, NamedTuple, TextIO

import numpy as np

from constants import (
    CUBE_COMMENT_PREFIX,
    CUBE_DOMAIN_MAX_KEYWORD,
    CUBE_DOMAIN_MIN_KEYWORD,
    CUBE_ROW_FORMAT,
    CUBE_SIZE_KEYWORD,
    CUBE_TITLE_KEYWORD,
    MIN_LUT_SIZE,
    REFERENCE_TOLERANCE,
)
from lut_engine.errors import ConfigurationError, CubeFormatError

logger = logging.getLogger(__name__)


@dataclass
class CubeArtifact:
    """Everything that determines a serialized .cube file.

    Attributes:
        title: Written to the TITLE line
        comments: Lines written before the header, without the '#' prefix
        size: Grid points per axis
        table: (size**3, 3) array in .cube row order
    """
    title: str
    size: int
    table: np.ndarray
    comments: List[str] = field(default_factory=list)

    def validate(self) -> None:
        """Check the artifact is writable as-is.

        Raises:
            ConfigurationError: Empty title, bad size, or wrong table shape
        """
        if not self.title or not self.title.strip():
            raise ConfigurationError("LUT title must not be empty")
        if '"' in self.title or "\n" in self.title:
            raise ConfigurationError(f"LUT title may not contain quotes or newlines: {self.title!r}")
        if self.size < MIN_LUT_SIZE:
            raise ConfigurationError(f"LUT size must be >= {MIN_LUT_SIZE}, got {self.size}")
        expected = (self.size ** 3, 3)
        if self.table.shape != expected:
            raise ConfigurationError(f"LUT table has shape {self.table.shape}, expected {expected}")
        for comment in self.comments:
            if "\n" in comment:
                raise ConfigurationError(f"LUT comment may not contain newlines: {comment!r}")


def write_cube(artifact: CubeArtifact, output: TextIO) -> None:
    """
    Serialize an artifact to a text stream.

    Args:
        artifact: Validated title, comments, size and table
        output: File-like object to write to
    """
    artifact.validate()

    for comment in artifact.comments:
        output.write(f"{CUBE_COMMENT_PREFIX} {comment}\n")
    output.write(f'{CUBE_TITLE_KEYWORD} "{artifact.title}"\n')
    output.write(f"{CUBE_SIZE_KEYWORD} {artifact.size}\n")
    output.write("\n")

    # + 0.0 turns any -0.0 into 0.0 so rows never start with '-'
    rows = artifact.table + 0.0
    for r, g, b in rows:
        output.write(CUBE_ROW_FORMAT % (r, g, b) + "\n")


def save_cube(artifact: CubeArtifact, path: str) -> None:
    """
    Write an artifact to disk.

    The artifact is validated before the file is opened, so a configuration
    problem never leaves a partial file behind. OS errors propagate as-is.
    """
    artifact.validate()
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        write_cube(artifact, f)
    logger.debug(f"Wrote {artifact.size}^3 LUT to {path}")


def read_cube(path: str) -> CubeArtifact:
    """
    Load a .cube file.

    Args:
        path: Path to .cube file

    Returns:
        CubeArtifact with the table normalized from DOMAIN_MIN/MAX to [0, 1]

    Raises:
        FileNotFoundError: If the file does not exist
        CubeFormatError: If the header or data rows are malformed
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"LUT file not found: {path}")

    title = ""
    comments: List[str] = []
    size = None
    data_lines = []
    domain_min = [0.0, 0.0, 0.0]
    domain_max = [1.0, 1.0, 1.0]

    with open(path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()

            if not line:
                continue
            if line.startswith(CUBE_COMMENT_PREFIX):
                comments.append(line[len(CUBE_COMMENT_PREFIX):].strip())
                continue

            keyword = line.split()[0]
            try:
                if keyword == CUBE_TITLE_KEYWORD:
                    title = line[len(CUBE_TITLE_KEYWORD):].strip().strip('"')
                elif keyword == CUBE_DOMAIN_MIN_KEYWORD:
                    domain_min = [float(x) for x in line.split()[1:4]]
                elif keyword == CUBE_DOMAIN_MAX_KEYWORD:
                    domain_max = [float(x) for x in line.split()[1:4]]
                elif keyword == CUBE_SIZE_KEYWORD:
                    size = int(line.split()[1])
                elif keyword[0].isalpha():
                    # LUT_1D_SIZE, LUT_3D_INPUT_RANGE etc. are not used here
                    logger.debug(f"Ignoring .cube keyword {keyword} in {path}")
                else:
                    values = [float(x) for x in line.split()]
                    if len(values) != 3:
                        raise ValueError(f"expected 3 values, got {len(values)}")
                    data_lines.append(values)
            except (ValueError, IndexError) as e:
                raise CubeFormatError(f"{path}:{line_no}: {e}") from e

    if size is None:
        raise CubeFormatError(f"LUT file missing {CUBE_SIZE_KEYWORD}: {path}")
    if len(domain_min) != 3 or len(domain_max) != 3:
        raise CubeFormatError(f"DOMAIN_MIN/DOMAIN_MAX need 3 values: {path}")

    expected_entries = size ** 3
    if len(data_lines) != expected_entries:
        raise CubeFormatError(f"LUT file has {len(data_lines)} entries, expected {expected_entries}: {path}")

    table = np.array(data_lines, dtype=np.float64)
    for i in range(3):
        if domain_max[i] != domain_min[i] and (domain_min[i] != 0.0 or domain_max[i] != 1.0):
            table[:, i] = (table[:, i] - domain_min[i]) / (domain_max[i] - domain_min[i])

    logger.debug(f"Loaded LUT: {path} ({size}^3)")
    return CubeArtifact(title=title, size=size, table=table, comments=comments)


class TableDiff(NamedTuple):
    """Result of comparing two LUT tables value by value."""
    max_diff: float
    diff_count: int

    @property
    def matches(self) -> bool:
        return self.diff_count == 0


def compare_tables(actual: np.ndarray, reference: np.ndarray, tolerance: float = REFERENCE_TOLERANCE) -> TableDiff:
    """
    Count values that differ from a reference table by more than tolerance.

    Raises:
        ValueError: If the tables have different shapes
    """
    if actual.shape != reference.shape:
        raise ValueError(f"table shapes differ: {actual.shape} vs {reference.shape}")

    diff = np.abs(actual - reference)
    over = diff > tolerance
    max_diff = float(diff[over].max()) if over.any() else 0.0
    return TableDiff(max_diff=max_diff, diff_count=int(over.sum()))
