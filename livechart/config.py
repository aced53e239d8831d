"""Configuration for livechart.

Settings live in the ``[chart]`` table of ``~/.config/livechart/config.toml``.
Every key is optional; anything missing falls back to the defaults below.

Example:
    [chart]
    capacity = 200
    realtime_window_ms = 1500
    volume_policy = "zero"
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

import toml
from pydantic import BaseModel, Field

from livechart.models.scene import ChartStyle

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "livechart" / "config.toml"


class VolumePolicy(str, Enum):
    """What to put in place of a missing or malformed volume."""

    UNKNOWN = "unknown"
    ZERO = "zero"
    RANDOM = "random"


class ChartSettings(BaseModel):
    """Tunables for normalization, merging and geometry."""

    capacity: int = Field(default=100, gt=0, description="Max candles kept in the live buffer")
    realtime_window_ms: int = Field(
        default=2000, ge=0, description="Deliveries closer than this merge incrementally"
    )
    missing_time_step_ms: int = Field(
        default=60 * 60 * 1000, gt=0, description="Spacing of synthesized candle times"
    )
    body_width_fraction: float = Field(
        default=0.7, gt=0, le=1, description="Share of each slot used by the candle body"
    )
    min_body_height: float = Field(default=4.0, ge=0, description="Minimum body height in pixels")
    price_width: int = Field(default=800, gt=0)
    price_height: int = Field(default=400, gt=0)
    volume_width: int = Field(default=800, gt=0)
    volume_height: int = Field(default=200, gt=0)
    volume_policy: VolumePolicy = Field(default=VolumePolicy.UNKNOWN)
    dedupe_by_time: bool = Field(
        default=True, description="Keep only the latest record for each candle time"
    )
    default_style: ChartStyle = Field(default=ChartStyle.LINE)

    model_config = {"frozen": True}


def _read_config(path: Path) -> Optional[dict]:
    """Read a TOML config file, returning None if it is missing or unreadable."""
    if not path.exists():
        return None

    try:
        return toml.load(path)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return None


def load_settings(path: Optional[Path] = None) -> ChartSettings:
    """Load chart settings from the config file.

    Args:
        path: Config file to read. Defaults to ~/.config/livechart/config.toml.

    Returns:
        ChartSettings built from the [chart] table, or the defaults.

    Raises:
        pydantic.ValidationError: If a configured value is out of range.
    """
    config = _read_config(path or DEFAULT_CONFIG_PATH)
    if config is None:
        return ChartSettings()

    return ChartSettings(**config.get("chart", {}))
