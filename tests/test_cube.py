"""
Tests for .cube serialization, reading and table comparison.
"""

import io
import os

import numpy as np
import pytest
from numpy.testing import assert_allclose

from lut_engine.cube import CubeArtifact, compare_tables, read_cube, save_cube, write_cube
from lut_engine.errors import ConfigurationError, CubeFormatError
from lut_engine.generator import build_artifact, generate_lut
from lut_engine.table import identity_table


def make_artifact(size=2, title="Test LUT", comments=None, table=None):
    return CubeArtifact(
        title=title,
        size=size,
        table=identity_table(size) if table is None else table,
        comments=["First line", "Second line"] if comments is None else comments,
    )


class TestWriteCube:
    """Tests for write_cube."""

    def test_layout(self):
        out = io.StringIO()
        write_cube(make_artifact(), out)
        lines = out.getvalue().split("\n")

        assert lines[0] == "# First line"
        assert lines[1] == "# Second line"
        assert lines[2] == 'TITLE "Test LUT"'
        assert lines[3] == "LUT_3D_SIZE 2"
        assert lines[4] == ""
        assert lines[5] == "0.000000 0.000000 0.000000"
        assert lines[6] == "1.000000 0.000000 0.000000"
        assert lines[7] == "0.000000 1.000000 0.000000"
        assert lines[12] == "1.000000 1.000000 1.000000"
        # trailing newline after the last row
        assert lines[13] == ""
        assert len(lines) == 14

    def test_no_comments(self):
        out = io.StringIO()
        write_cube(make_artifact(comments=[]), out)
        assert out.getvalue().startswith('TITLE "Test LUT"\n')

    def test_six_decimals(self):
        table = np.full((8, 3), 1.0 / 3.0)
        out = io.StringIO()
        write_cube(make_artifact(table=table), out)
        assert "0.333333 0.333333 0.333333" in out.getvalue()

    def test_negative_zero_normalized(self):
        table = np.zeros((8, 3))
        table[0] = [-0.0, -0.0, -0.0]
        out = io.StringIO()
        write_cube(make_artifact(table=table), out)
        assert "-" not in out.getvalue().split("\n\n", 1)[1]


class TestArtifactValidation:
    """Tests for CubeArtifact.validate."""

    def test_empty_title(self):
        with pytest.raises(ConfigurationError, match="title"):
            make_artifact(title="  ").validate()

    def test_title_with_quote(self):
        with pytest.raises(ConfigurationError, match="quotes"):
            make_artifact(title='Say "hi"').validate()

    def test_wrong_table_shape(self):
        with pytest.raises(ConfigurationError, match="shape"):
            make_artifact(table=np.zeros((7, 3))).validate()

    def test_comment_with_newline(self):
        with pytest.raises(ConfigurationError, match="newlines"):
            make_artifact(comments=["two\nlines"]).validate()


class TestSaveAndRead:
    """Tests for save_cube and read_cube."""

    def test_save_then_read(self, temp_cube_path):
        artifact = make_artifact(size=3)
        save_cube(artifact, temp_cube_path)
        loaded = read_cube(temp_cube_path)

        assert loaded.title == "Test LUT"
        assert loaded.size == 3
        assert loaded.comments == ["First line", "Second line"]
        assert_allclose(loaded.table, artifact.table, atol=1e-6)

    def test_unix_line_endings(self, temp_cube_path):
        save_cube(make_artifact(), temp_cube_path)
        with open(temp_cube_path, "rb") as f:
            assert b"\r" not in f.read()

    def test_byte_identical_output(self, tmp_path, mixed_pipeline):
        first = str(tmp_path / "first.cube")
        second = str(tmp_path / "second.cube")
        generate_lut(mixed_pipeline, first, title="Mixed", comments=["c"], size=5)
        generate_lut(mixed_pipeline, second, title="Mixed", comments=["c"], size=5)
        with open(first, "rb") as a, open(second, "rb") as b:
            assert a.read() == b.read()

    def test_invalid_artifact_leaves_no_file(self, temp_cube_path):
        with pytest.raises(ConfigurationError):
            save_cube(make_artifact(title=""), temp_cube_path)
        assert not os.path.exists(temp_cube_path)

    def test_unwritable_path(self, tmp_path):
        with pytest.raises(OSError):
            save_cube(make_artifact(), str(tmp_path / "missing_dir" / "out.cube"))

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_cube(str(tmp_path / "nope.cube"))

    def test_read_missing_size(self, tmp_path):
        path = tmp_path / "bad.cube"
        path.write_text('TITLE "x"\n0 0 0\n')
        with pytest.raises(CubeFormatError, match="LUT_3D_SIZE"):
            read_cube(str(path))

    def test_read_wrong_entry_count(self, tmp_path):
        path = tmp_path / "short.cube"
        path.write_text("LUT_3D_SIZE 2\n0 0 0\n1 1 1\n")
        with pytest.raises(CubeFormatError, match="expected 8"):
            read_cube(str(path))

    def test_read_malformed_row(self, tmp_path):
        path = tmp_path / "malformed.cube"
        path.write_text("LUT_3D_SIZE 2\n0 0\n")
        with pytest.raises(CubeFormatError, match="malformed.cube:2"):
            read_cube(str(path))

    def test_read_normalizes_domain(self, tmp_path):
        rows = "\n".join(" ".join(str(v * 2.0) for v in row) for row in identity_table(2))
        path = tmp_path / "domain.cube"
        path.write_text(f"LUT_3D_SIZE 2\nDOMAIN_MIN 0 0 0\nDOMAIN_MAX 2 2 2\n{rows}\n")
        assert_allclose(read_cube(str(path)).table, identity_table(2))


class TestCompareTables:
    """Tests for compare_tables."""

    def test_identical(self):
        diff = compare_tables(identity_table(3), identity_table(3))
        assert diff.matches
        assert diff.max_diff == 0.0

    def test_within_tolerance(self):
        diff = compare_tables(identity_table(3) + 5e-7, identity_table(3))
        assert diff.matches

    def test_counts_differences(self):
        reference = identity_table(3)
        actual = reference.copy()
        actual[4] += [0.01, 0.0, 0.02]
        diff = compare_tables(actual, reference)
        assert not diff.matches
        assert diff.diff_count == 2
        assert diff.max_diff == pytest.approx(0.02)

    def test_shape_mismatch(self):
        with pytest.raises(ValueError):
            compare_tables(identity_table(2), identity_table(3))


class TestBuildArtifact:
    """Tests for generator.build_artifact."""

    def test_validation_before_sampling(self, exposure_pipeline):
        calls = []
        with pytest.raises(ConfigurationError):
            build_artifact(exposure_pipeline, title="", size=3, progress_callback=lambda d, t: calls.append(d))
        assert calls == []

    def test_invalid_size_rejected(self, exposure_pipeline, temp_cube_path):
        with pytest.raises(ConfigurationError):
            generate_lut(exposure_pipeline, temp_cube_path, title="Bad", size=1)
        assert not os.path.exists(temp_cube_path)

    def test_empty_pipeline_rejected(self, temp_cube_path):
        with pytest.raises(ConfigurationError):
            generate_lut([], temp_cube_path, title="Empty", size=3)
        assert not os.path.exists(temp_cube_path)
