"""
Tests for the LUT grid sampler.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from lut_engine.engine import apply_pipeline
from lut_engine.errors import ConfigurationError
from lut_engine.steps import ExposureStep, RgbRebalanceStep
from lut_engine.table import build_lut_table, grid_axis, identity_table, validate_size


class TestGridAxis:
    """Tests for grid_axis and validate_size."""

    def test_endpoints_exact(self):
        axis = grid_axis(33)
        assert axis[0] == 0.0
        assert axis[-1] == 1.0
        assert len(axis) == 33

    def test_size_two(self):
        assert grid_axis(2) == [0.0, 1.0]

    @pytest.mark.parametrize("size", [0, 1, -5, 2.5, "33", True])
    def test_invalid_sizes(self, size):
        with pytest.raises(ConfigurationError):
            validate_size(size)


class TestBuildLutTable:
    """Tests for build_lut_table."""

    def test_shape_and_dtype(self, exposure_pipeline):
        table = build_lut_table(exposure_pipeline, size=5)
        assert table.shape == (125, 3)
        assert table.dtype == np.float64

    def test_values_clamped(self):
        boost = [RgbRebalanceStep(r_gain=2.0, g_gain=1.0, b_gain=0.5, gain_ramp=0.1)]
        table = build_lut_table(boost, size=5)
        assert table.min() >= 0.0
        assert table.max() <= 1.0
        assert table[-1, 0] == 1.0

    def test_row_order_red_fastest(self, exposure_pipeline):
        """Row index = r + g*N + b*N*N."""
        size = 4
        table = build_lut_table(exposure_pipeline, size=size)
        axis = grid_axis(size)
        for bi, gi, ri in [(0, 0, 1), (0, 1, 0), (1, 0, 0), (2, 3, 1)]:
            row = ri + gi * size + bi * size * size
            expected = apply_pipeline((axis[ri], axis[gi], axis[bi]), exposure_pipeline)
            assert_allclose(table[row], np.clip(expected, 0.0, 1.0))

    def test_zero_strength_is_identity(self, mixed_pipeline):
        table = build_lut_table(mixed_pipeline, strength=0.0, size=5)
        assert_allclose(table, identity_table(5), atol=1e-10)

    def test_accepts_raw_descriptors(self, exposure_descriptor):
        table = build_lut_table([exposure_descriptor], size=3)
        assert table.shape == (27, 3)

    def test_empty_pipeline(self):
        with pytest.raises(ConfigurationError):
            build_lut_table([], size=3)

    def test_invalid_size(self, exposure_pipeline):
        with pytest.raises(ConfigurationError):
            build_lut_table(exposure_pipeline, size=1)

    def test_invalid_workers(self, exposure_pipeline):
        with pytest.raises(ConfigurationError):
            build_lut_table(exposure_pipeline, size=3, workers=0)

    def test_progress_callback(self, exposure_pipeline):
        calls = []
        build_lut_table(exposure_pipeline, size=4, progress_callback=lambda done, total: calls.append((done, total)))
        assert calls == [(1, 4), (2, 4), (3, 4), (4, 4)]

    def test_deterministic(self, mixed_pipeline):
        first = build_lut_table(mixed_pipeline, size=5)
        second = build_lut_table(mixed_pipeline, size=5)
        assert_array_equal(first, second)

    def test_parallel_matches_serial(self, mixed_pipeline):
        serial = build_lut_table(mixed_pipeline, size=6)
        parallel = build_lut_table(mixed_pipeline, size=6, workers=2)
        assert_array_equal(serial, parallel)


class TestIdentityTable:
    """Tests for identity_table."""

    def test_corners(self):
        table = identity_table(3)
        assert_array_equal(table[0], [0.0, 0.0, 0.0])
        assert_array_equal(table[1], [0.5, 0.0, 0.0])
        assert_array_equal(table[3], [0.0, 0.5, 0.0])
        assert_array_equal(table[9], [0.0, 0.0, 0.5])
        assert_array_equal(table[-1], [1.0, 1.0, 1.0])

    def test_identity_pipeline_reproduces_grid(self):
        table = build_lut_table([ExposureStep(gamma=1.0)], size=4)
        assert_allclose(table, identity_table(4), atol=1e-12)
