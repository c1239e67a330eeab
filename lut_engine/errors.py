"""
Exception hierarchy for the LUT engine.

Every error here is fatal: LUT generation is deterministic, so a run either
has well-formed inputs or fails outright. Nothing is retried.
"""

from typing import Optional


class LutEngineError(Exception):
    """Base exception for all LUT engine errors."""


class ConfigurationError(LutEngineError):
    """Invalid preset or pipeline configuration.

    Raised for unknown step types, missing or out-of-domain parameters,
    empty pipelines, unknown preset names and invalid grid sizes. Always
    raised before any output file is opened.
    """

    def __init__(self, message: str, preset: Optional[str] = None):
        if preset:
            message = f"preset '{preset}': {message}"
        super().__init__(message)
        self.preset = preset


class CubeFormatError(LutEngineError):
    """A .cube file could not be parsed."""
