"""
IR Remote Codec - Pipeline Configuration

Default thresholds and windows of the decode pipeline, and a loader for
overriding them from a YAML file:

    pipeline:
      required_frames: 2
      verify_window_ms: 800
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Union

import yaml

# Signal conditioning
NOISE_THRESHOLD_US = 100        # Shorter marks/spaces are glitches
MAX_GAP_US = 50000              # Longer marks/spaces are idle time

# Time windows
NEC_REPEAT_WINDOW_MS = 200      # Repeat frame -> last NEC code
VERIFY_WINDOW_MS = 500          # Learning: max time between matching frames

# Learning
DEFAULT_REQUIRED_FRAMES = 3
VALID_REQUIRED_FRAMES = (2, 3)

# Raw fallback
RAW_TOLERANCE_PCT = 10          # RAW frames compare symbol by symbol
RAW_MIN_SYMBOLS = 10
RAW_MAX_SYMBOLS = 256


@dataclass
class PipelineConfig:
    """Settings of a DecodePipeline."""
    noise_threshold_us: int = NOISE_THRESHOLD_US
    max_gap_us: int = MAX_GAP_US
    nec_repeat_window_ms: int = NEC_REPEAT_WINDOW_MS
    verify_window_ms: int = VERIFY_WINDOW_MS
    required_frames: int = DEFAULT_REQUIRED_FRAMES
    raw_tolerance_pct: int = RAW_TOLERANCE_PCT
    raw_min_symbols: int = RAW_MIN_SYMBOLS
    raw_max_symbols: int = RAW_MAX_SYMBOLS

    def __post_init__(self):
        if self.required_frames not in VALID_REQUIRED_FRAMES:
            raise ValueError(f"required_frames must be 2 or 3, got {self.required_frames}")
        if self.raw_min_symbols > self.raw_max_symbols:
            raise ValueError("raw_min_symbols is larger than raw_max_symbols")


def load_config(path: Union[str, Path]) -> PipelineConfig:
    """
    Load pipeline settings from a YAML file.

    The file may hold the settings at top level or under a ``pipeline:``
    key. Missing settings keep their defaults.

    Args:
        path: YAML file path

    Returns:
        PipelineConfig

    Raises:
        ValueError: If the file holds unknown keys or invalid values
    """
    with open(path, 'r') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping")
    if "pipeline" in data:
        data = data["pipeline"] or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: 'pipeline' must be a mapping")

    known = {f.name for f in fields(PipelineConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"{path}: unknown settings {', '.join(unknown)}")

    return PipelineConfig(**{key: int(value) for key, value in data.items()})
