"""
Tests for Rich console configuration and output helpers.

Tests the console setup, progress bar creation, and styled output functions.
"""

import logging

from lut_engine.presets import load_presets
from rich_console import (
    console,
    LUT_THEME,
    setup_rich_logging,
    create_progress,
    print_config_summary,
    print_completion_summary,
    print_preset_table,
    print_error,
)


class TestConsoleSetup:
    """Tests for console initialization."""

    def test_console_exists(self):
        """Console should be initialized."""
        assert console is not None

    def test_theme_has_required_styles(self):
        """Theme should have required style definitions."""
        required_styles = ["info", "warning", "error", "success", "muted", "preset", "value"]
        for style in required_styles:
            assert style in LUT_THEME.styles, f"Missing style: {style}"


class TestLogging:
    """Tests for Rich logging setup."""

    def test_setup_creates_logger(self):
        """Setup should configure root logger with WARNING level by default."""
        setup_rich_logging(verbose=False)
        logger = logging.getLogger()
        assert logger.level == logging.WARNING

    def test_verbose_sets_debug(self):
        """Verbose flag should set DEBUG level."""
        setup_rich_logging(verbose=True)
        logger = logging.getLogger()
        assert logger.level == logging.DEBUG


class TestProgressBars:
    """Tests for progress bar creation."""

    def test_create_progress(self):
        """Create progress should return Progress instance."""
        progress = create_progress()
        assert progress is not None

    def test_progress_tracks_slabs(self):
        """Progress should accept absolute slab counts."""
        progress = create_progress()
        with progress:
            task_id = progress.add_task("Sampling grid", total=33)
            progress.update(task_id, completed=10)
            assert progress.tasks[0].completed == 10


class TestOutputFunctions:
    """Tests for styled output functions."""

    def test_print_config_summary_no_error(self):
        """Print config summary should not raise errors."""
        print_config_summary(
            preset_name="yellow_fix",
            title="Yellow Cast Fix",
            step_names=["hue_desat"],
            output_file="output.cube",
            strength=0.5,
            size=33,
            workers=4,
        )

    def test_print_config_summary_title_with_markup(self):
        """Bracketed titles must not be parsed as markup."""
        print_config_summary(
            preset_name="custom",
            title="[bold]Not a tag[/bold",
            step_names=["exposure"],
            output_file="output.cube",
            strength=1.0,
            size=17,
        )

    def test_print_completion_summary_no_error(self):
        """Print completion summary should not raise errors."""
        print_completion_summary(
            output_file="output.cube",
            size=33,
            strength=1.0,
            reference_result="[success]matches[/]",
        )

    def test_print_completion_summary_optional_args(self):
        """Completion summary should work without optional args."""
        print_completion_summary(output_file="output.cube", size=33, strength=1.0)

    def test_print_preset_table_no_error(self):
        """Preset table should render the bundled catalog."""
        print_preset_table(load_presets())

    def test_print_error_no_error(self):
        """Print error should not raise errors."""
        print_error("Test error message")

    def test_print_error_with_hint(self):
        """Print error with hint should not raise errors."""
        print_error("Test error", hint="Try this instead")
