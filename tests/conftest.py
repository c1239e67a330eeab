"""
Pytest configuration and fixtures for .cube LUT generator tests.

Provides reusable step descriptors, parsed pipelines, reference colors and
temporary output paths.
"""

import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lut_engine.steps import parse_pipeline


GRAY = (0.5, 0.5, 0.5)
PURE_BLUE = (0.0, 0.0, 1.0)
# H=20, S=0.5, L=0.5: warm skin tone
SKIN_TONE = (0.75, 0.4166666666666667, 0.25)


@pytest.fixture
def gray():
    """Fixture providing mid gray."""
    return GRAY


@pytest.fixture
def pure_blue():
    """Fixture providing pure blue (hue 240)."""
    return PURE_BLUE


@pytest.fixture
def skin_tone():
    """Fixture providing a mid-luminance warm skin tone (hue 20)."""
    return SKIN_TONE


@pytest.fixture
def exposure_descriptor():
    """Fixture providing a raw exposure step descriptor."""
    return {"step": "exposure", "gamma": 1.35, "shadow_lift": 0.0}


@pytest.fixture
def skin_correction_descriptor():
    """Fixture providing a raw skin_correction step descriptor."""
    return {
        "step": "skin_correction",
        "hue_center": 12.0,
        "hue_width": 18.0,
        "hue_soft": 6.0,
        "hue_shift": 15.0,
        "sat_reduce": 0.85,
        "lum_low": 0.22,
        "lum_high": 0.78,
        "lum_soft": 0.08,
        "sat_low": 0.06,
        "sat_high": 0.48,
        "sat_soft": 0.06,
    }


@pytest.fixture
def black_crush_descriptor():
    """Fixture providing a raw black_crush step descriptor."""
    return {"step": "black_crush", "black_threshold": 0.12, "crush_gamma": 2.5, "transition_end": 0.25}


@pytest.fixture
def exposure_pipeline(exposure_descriptor):
    """Fixture providing a parsed single-step exposure pipeline."""
    return parse_pipeline([exposure_descriptor])


@pytest.fixture
def mixed_pipeline(exposure_descriptor, skin_correction_descriptor, black_crush_descriptor):
    """Fixture providing a parsed multi-step pipeline touching luminance and hue."""
    return parse_pipeline([exposure_descriptor, skin_correction_descriptor, black_crush_descriptor])


@pytest.fixture
def temp_cube_path(tmp_path):
    """Fixture providing a temporary path for .cube output."""
    return str(tmp_path / "test_output.cube")


@pytest.fixture
def presets_file(tmp_path):
    """Fixture providing a small valid preset catalog on disk."""
    path = tmp_path / "presets.yml"
    path.write_text(
        "crush_only:\n"
        "  title: \"Crush Only\"\n"
        "  comments:\n"
        "    - \"Test preset\"\n"
        "  pipeline:\n"
        "    - step: black_crush\n"
        "      black_threshold: 0.12\n"
        "      crush_gamma: 2.5\n"
        "      transition_end: 0.25\n"
        "darken:\n"
        "  title: \"Darken\"\n"
        "  pipeline:\n"
        "    - step: exposure\n"
        "      gamma: 1.35\n",
        encoding="utf-8",
    )
    return str(path)
