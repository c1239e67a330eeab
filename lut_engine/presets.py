"""
Preset catalog.

Presets live in a YAML file (``presets.yml`` next to this module by
default). Each entry has a title, a list of comment lines and an ordered
pipeline of step descriptors; everything is validated on load so a bad
preset fails before any LUT is sampled.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

from lut_engine.errors import ConfigurationError
from lut_engine.steps import Step, parse_pipeline

logger = logging.getLogger(__name__)

DEFAULT_PRESETS_PATH = Path(__file__).parent / "presets.yml"


class Preset(BaseModel):
    """A named, validated LUT recipe."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Catalog key, e.g. 'yellow_fix'")
    title: str = Field(min_length=1, description="Written to the .cube TITLE line")
    comments: List[str] = Field(default_factory=list, description="Written as .cube comment lines")
    pipeline: List[Step] = Field(min_length=1, description="Ordered processing steps")

    @property
    def has_highlight_protect(self) -> bool:
        """Whether the pipeline contains the fixed (non-strength-scaled) highlight clamp."""
        return any(step.step == "highlight_protect" for step in self.pipeline)

    @classmethod
    def from_mapping(cls, name: str, cfg: Any) -> "Preset":
        """
        Build a preset from one parsed catalog entry.

        Raises:
            ConfigurationError: Missing/empty title, non-list comments, or
                an invalid pipeline
        """
        if not isinstance(cfg, Mapping):
            raise ConfigurationError("entry must be a mapping with title, comments and pipeline", preset=name)

        title = cfg.get("title")
        if not isinstance(title, str) or not title.strip():
            raise ConfigurationError("missing or empty 'title'", preset=name)

        comments = cfg.get("comments") or []
        if not isinstance(comments, list):
            raise ConfigurationError("'comments' must be a list of strings", preset=name)

        pipeline = cfg.get("pipeline")
        if pipeline is not None and not isinstance(pipeline, list):
            raise ConfigurationError("'pipeline' must be a list of steps", preset=name)

        steps = parse_pipeline(pipeline or [], preset=name)
        return cls(name=name, title=title, comments=[str(c) for c in comments], pipeline=steps)


@lru_cache(maxsize=8)
def _load_catalog(path: str, mtime_ns: int, size: int) -> Dict[str, Preset]:
    # mtime_ns and size are unused here; they key the cache so a rewritten file reloads
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"presets file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"presets file is not valid YAML: {path}: {e}") from e

    if not isinstance(raw, dict) or not raw:
        raise ConfigurationError(f"presets file must map preset names to definitions: {path}")

    presets = {str(name): Preset.from_mapping(str(name), cfg) for name, cfg in raw.items()}
    logger.debug(f"Loaded {len(presets)} presets from {path}")
    return presets


def load_presets(path: Optional[str] = None) -> Dict[str, Preset]:
    """
    Load and validate every preset in a catalog file.

    Catalogs are cached per path and reloaded when the file changes.

    Args:
        path: YAML catalog path (default: bundled presets.yml)

    Returns:
        Preset name -> Preset, in file order

    Raises:
        ConfigurationError: Unreadable file or any invalid preset
    """
    resolved = str(Path(path).resolve()) if path else str(DEFAULT_PRESETS_PATH)
    try:
        stat = os.stat(resolved)
    except FileNotFoundError as e:
        raise ConfigurationError(f"presets file not found: {resolved}") from e
    return dict(_load_catalog(resolved, stat.st_mtime_ns, stat.st_size))


def load_preset(name: str, path: Optional[str] = None) -> Preset:
    """
    Look up a single preset by name.

    Raises:
        ConfigurationError: Unknown preset name or invalid catalog
    """
    presets = load_presets(path)
    if name not in presets:
        raise ConfigurationError(f"Unknown LUT type: {name} (available: {', '.join(presets)})")
    return presets[name]
