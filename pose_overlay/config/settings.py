"""Overlay pipeline configuration.

All thresholds, ratios and drawing parameters are centralised here so that
tuning the overlay never requires touching pipeline code. Sections can be
overridden from a JSON file whose top-level keys match the field names of
``OverlayConfig``:

    {
        "sampler": {"min_interval_s": 0.1},
        "style": {"color": [40, 20, 10]},
        "loop": {"keep_stale_anchor": true}
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from ..errors import ConfigError
from .keypoints import KEYPOINT_NAMES, LEFT_HIP, RIGHT_HIP


# =====================================================================
# Pipeline
# =====================================================================

@dataclass(frozen=True)
class SamplerConfig:
    """Pose sampling rate limit."""

    min_interval_s: float = 0.2   # 200 ms between pose estimates


@dataclass(frozen=True)
class AnchorConfig:
    """Thresholds and proportions for deriving the anchor region."""

    min_pose_score: float = 0.5       # overall pose must exceed this
    min_keypoint_score: float = 0.2   # each anchor keypoint must exceed this
    left_keypoint: str = LEFT_HIP
    right_keypoint: str = RIGHT_HIP

    # Region geometry relative to the hip span
    vertical_offset_ratio: float = 1.0 / 3.0   # centre drops by span / 3
    width_ratio: float = 0.8                   # width = span * 0.8
    aspect_ratio: float = 1.2                  # height = width * 1.2


@dataclass(frozen=True)
class StyleConfig:
    """Fill/stroke style for templates and the texture pass."""

    color: Tuple[int, int, int] = (0, 0, 0)   # BGR
    line_width: int = 2

    texture_strokes: int = 50
    texture_jitter: float = 5.0    # max end-point offset per axis (px)
    texture_alpha: float = 0.6
    texture_line_width: int = 1


@dataclass(frozen=True)
class LoopConfig:
    # Keep drawing the last accepted anchor when a sample is rejected.
    keep_stale_anchor: bool = False


# =====================================================================
# Collaborators
# =====================================================================

@dataclass(frozen=True)
class CameraConfig:
    source: str = "0"   # camera index or video file path
    width: int = 640
    height: int = 480


@dataclass(frozen=True)
class ModelConfig:
    name: str = "yolo11n-pose.pt"
    device: str = "auto"
    conf: float = 0.25


@dataclass(frozen=True)
class DisplayConfig:
    window_name: str = "Pose Overlay"
    fps: float = 30.0
    show_status: bool = True


@dataclass(frozen=True)
class OverlayConfig:
    """Complete configuration."""

    sampler: SamplerConfig = field(default_factory=SamplerConfig)
    anchor: AnchorConfig = field(default_factory=AnchorConfig)
    style: StyleConfig = field(default_factory=StyleConfig)
    loop: LoopConfig = field(default_factory=LoopConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)


DEFAULT_CONFIG = OverlayConfig()


def _coerce(section: str, name: str, value: Any, default: Any) -> Any:
    """Coerce a JSON value to the type of the field default."""
    where = f"{section}.{name}"
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise ConfigError(f"{where}: expected a boolean, got {value!r}")
        return value
    if isinstance(default, (int, float)):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"{where}: expected a number, got {value!r}")
        if isinstance(default, int) and not float(value).is_integer():
            raise ConfigError(f"{where}: expected an integer, got {value!r}")
        return type(default)(value)
    if isinstance(default, tuple):
        if not isinstance(value, list) or len(value) != len(default):
            raise ConfigError(f"{where}: expected a list of {len(default)} values, got {value!r}")
        try:
            if not all(float(v).is_integer() for v in value):
                raise ValueError("values must be integers")
            return tuple(int(v) for v in value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{where}: {e}") from e
    return str(value)


def _merge_section(section: str, current: Any, raw: Any) -> Any:
    if not isinstance(raw, dict):
        raise ConfigError(f"{section}: expected an object, got {type(raw).__name__}")
    updates: Dict[str, Any] = {}
    for f in fields(current):
        if f.name in raw:
            updates[f.name] = _coerce(section, f.name, raw[f.name], getattr(current, f.name))
    return replace(current, **updates)


def _require(ok: bool, where: str, rule: str, value: Any):
    if not ok:
        raise ConfigError(f"{where}: must be {rule}, got {value!r}")


def validate_config(config: OverlayConfig) -> OverlayConfig:
    """
    Check value ranges across all sections.

    Returns:
        The same configuration

    Raises:
        ConfigError: On the first out-of-range value.
    """
    def unit(where, v):
        _require(0.0 <= v <= 1.0, where, "in [0, 1]", v)

    def at_least(where, v, low):
        _require(v >= low, where, f">= {low}", v)

    at_least("sampler.min_interval_s", config.sampler.min_interval_s, 0)

    anchor = config.anchor
    unit("anchor.min_pose_score", anchor.min_pose_score)
    unit("anchor.min_keypoint_score", anchor.min_keypoint_score)
    for name in ("left_keypoint", "right_keypoint"):
        value = getattr(anchor, name)
        _require(value in KEYPOINT_NAMES, f"anchor.{name}", "a COCO keypoint name", value)
    at_least("anchor.width_ratio", anchor.width_ratio, 0)
    at_least("anchor.aspect_ratio", anchor.aspect_ratio, 0)

    style = config.style
    _require(all(0 <= c <= 255 for c in style.color), "style.color", "three values in [0, 255]", style.color)
    at_least("style.line_width", style.line_width, 1)
    at_least("style.texture_line_width", style.texture_line_width, 1)
    at_least("style.texture_strokes", style.texture_strokes, 0)
    at_least("style.texture_jitter", style.texture_jitter, 0)
    unit("style.texture_alpha", style.texture_alpha)

    at_least("camera.width", config.camera.width, 1)
    at_least("camera.height", config.camera.height, 1)
    unit("model.conf", config.model.conf)
    _require(config.display.fps > 0, "display.fps", "> 0", config.display.fps)
    return config


def load_config(
    path: Optional[Union[str, Path]] = None,
    base: OverlayConfig = DEFAULT_CONFIG,
) -> OverlayConfig:
    """
    Load configuration from a JSON file on top of ``base``.

    Args:
        path: JSON file path. ``None`` yields ``base``.
        base: Configuration the file values are merged into.

    Returns:
        Merged configuration

    Raises:
        ConfigError: If the file is missing, is not valid JSON, or holds
            wrong types or out-of-range values.
    """
    if path is None:
        return base
    p = Path(path).expanduser()
    if not p.is_file():
        raise ConfigError(f"Config file not found: {p}")

    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read config {p}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Config {p} must contain a JSON object")

    updates = {}
    for f in fields(base):
        if f.name in raw:
            updates[f.name] = _merge_section(f.name, getattr(base, f.name), raw[f.name])
    return validate_config(replace(base, **updates))
