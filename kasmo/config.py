"""Configuration loader for the Kasmo explorer engine."""
from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from typing_extensions import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

LOGGER = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_ENV_FILE = REPO_ROOT / ".env"

DATASET_ENV_VAR = "KASMO_DATASET"
LANGUAGE_ENV_VAR = "KASMO_LANG"


class ConfigError(RuntimeError):
    """Raised when configuration cannot be loaded."""


class _FrozenModel(BaseModel):
    """Base model enforcing immutability for config sections."""

    model_config = ConfigDict(frozen=True)


def _validate_range(value: Tuple[float, float]) -> Tuple[float, float]:
    low, high = value
    if low > high:
        msg = f"range lower bound {low} exceeds upper bound {high}"
        raise ValueError(msg)
    return value


class DatasetConfig(_FrozenModel):
    """Where the graph dataset is fetched from."""

    location: str = Field(..., min_length=1)
    timeout_seconds: float = Field(10.0, gt=0)


class LanguageConfig(_FrozenModel):
    """Display language defaults."""

    default: Literal["so", "en"] = "so"

    @field_validator("default", mode="before")
    @classmethod
    def _normalise_default(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class ScaleConfig(_FrozenModel):
    """Visual ranges for the degree and weight driven scales."""

    radius_range: Tuple[float, float] = (4.0, 14.0)
    edge_width_range: Tuple[float, float] = (0.6, 2.8)
    label_font_range: Tuple[float, float] = (10.0, 22.0)
    label_quantile: float = Field(0.75, ge=0.0, le=1.0)
    label_threshold_fallback: float = Field(2.0, gt=0)

    @field_validator("radius_range", "edge_width_range", "label_font_range")
    @classmethod
    def _ordered(cls, value: Tuple[float, float]) -> Tuple[float, float]:
        return _validate_range(value)


class ForceConfig(_FrozenModel):
    """Parameters of the force-directed simulation."""

    link_distance: float = Field(60.0, gt=0)
    link_strength: float = Field(0.15, gt=0, le=1.0)
    charge_strength: float = -220.0
    collide_margin: float = Field(3.0, ge=0)
    alpha_min: float = Field(0.001, gt=0, lt=1.0)
    velocity_decay: float = Field(0.4, ge=0.0, le=1.0)
    drag_alpha_target: float = Field(0.3, ge=0.0, le=1.0)
    initial_radius: float = Field(10.0, gt=0)

    @property
    def alpha_decay(self) -> float:
        """Per-tick decay so alpha reaches ``alpha_min`` in roughly 300 ticks."""

        return 1.0 - self.alpha_min ** (1.0 / 300.0)


class PaletteConfig(_FrozenModel):
    """Fill and stroke colours."""

    node_fill: str = "#f4b183"
    node_stroke: str = "#8b2d2b"
    link_stroke: str = "#c0504d"
    link_highlight: str = "#a12d2a"
    muted_fill: str = "#efefef"
    muted_stroke: str = "#bdbdbd"


class RenderConfig(_FrozenModel):
    """Static styling for the rendered marks."""

    curvature: float = 18.0
    label_offset: float = Field(3.0, ge=0)
    font_family: str = Field("system-ui, sans-serif", min_length=1)
    label_color: str = "#222"
    halo_stroke_width: float = Field(3.0, ge=0)
    strong_font_weight: int = Field(700, ge=100, le=900)
    regular_font_weight: int = Field(500, ge=100, le=900)
    node_stroke_width: float = Field(1.2, ge=0)
    edge_opacity: float = Field(0.25, ge=0.0, le=1.0)
    aria_label: str = "Kasmo interactive network"
    palette: PaletteConfig = Field(default_factory=PaletteConfig)


class EmphasisConfig(_FrozenModel):
    """Selection highlight and dimming values."""

    visible_neighbor_labels: int = Field(12, ge=0)
    related_limit: int = Field(3, ge=0)
    dimmed_node_opacity: float = Field(0.25, ge=0.0, le=1.0)
    dimmed_label_opacity: float = Field(0.05, ge=0.0, le=1.0)
    highlight_edge_opacity: float = Field(0.45, ge=0.0, le=1.0)
    dimmed_edge_opacity: float = Field(0.12, ge=0.0, le=1.0)
    selected_stroke_width: float = Field(3.0, ge=0)
    neighbor_stroke_width: float = Field(1.0, ge=0)
    highlight_edge_min_width: float = Field(1.5, ge=0)
    highlight_edge_extra_width: float = Field(0.6, ge=0)


class SearchConfig(_FrozenModel):
    """Dimming applied while a search query is active."""

    node_opacity: float = Field(0.15, ge=0.0, le=1.0)
    label_opacity: float = Field(0.05, ge=0.0, le=1.0)
    edge_opacity: float = Field(0.07, ge=0.0, le=1.0)


class ViewportConfig(_FrozenModel):
    """Drawing-surface sizing and zoom behaviour."""

    min_width: int = Field(320, ge=1)
    min_height: int = Field(320, ge=1)
    zoom_min: float = Field(0.3, gt=0)
    zoom_max: float = Field(6.0, gt=0)
    reset_duration_ms: float = Field(500.0, ge=0)
    reheat_alpha: float = Field(0.15, gt=0, le=1.0)
    panel_poll_seconds: float = Field(0.03, gt=0)

    @field_validator("zoom_max")
    @classmethod
    def _zoom_extent(cls, value: float, info: ValidationInfo) -> float:
        low = info.data.get("zoom_min", 0.0)
        if value < low:
            raise ValueError("viewport.zoom_max cannot be smaller than viewport.zoom_min")
        return value


class AppConfig(_FrozenModel):
    """Top-level application configuration composed from config.yaml."""

    dataset: DatasetConfig
    language: LanguageConfig = Field(default_factory=LanguageConfig)
    scales: ScaleConfig = Field(default_factory=ScaleConfig)
    force: ForceConfig = Field(default_factory=ForceConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    emphasis: EmphasisConfig = Field(default_factory=EmphasisConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)

    @staticmethod
    def default_path() -> Path:
        """Return the default location of the configuration file.

        Returns:
            Path: Absolute path to config.yaml at the repository root.
        """
        return REPO_ROOT / "config.yaml"


_OVERRIDES: Tuple[Tuple[str, str, str], ...] = (
    (DATASET_ENV_VAR, "dataset", "location"),
    (LANGUAGE_ENV_VAR, "language", "default"),
)


def _env_file_values(path: Path) -> Dict[str, str]:
    """Return the ``KASMO_*`` assignments found in a ``.env`` file.

    Only the override variables are read; ``export`` prefixes and matching
    quotes are stripped. ``os.environ`` is left untouched.
    """

    wanted = {name for name, _, _ in _OVERRIDES}
    values: Dict[str, str] = {}
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError:
        LOGGER.warning("Unable to read environment file at %s", path)
        return values
    for line in lines:
        key, sep, value = line.strip().removeprefix("export ").partition("=")
        key = key.strip()
        if not sep or key not in wanted:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        values[key] = value
    return values


def _env_file_path() -> Optional[Path]:
    override = os.getenv("KASMO_ENV_FILE")
    candidate = Path(override).expanduser() if override else DEFAULT_ENV_FILE
    if candidate.is_file():
        return candidate
    if override:
        LOGGER.warning("Configured environment file override does not exist: %s", candidate)
    return None


def _apply_environment_overrides(raw_content: Dict[str, Any]) -> Dict[str, Any]:
    """Apply ``KASMO_DATASET``/``KASMO_LANG`` to the raw mapping before validation.

    Non-empty process environment values win over the ``.env`` file.
    """

    env_file = _env_file_path()
    file_values = _env_file_values(env_file) if env_file is not None else {}
    for name, section, key in _OVERRIDES:
        value = (os.getenv(name, "").strip() or file_values.get(name, "")).strip()
        if not value:
            continue
        raw_content.setdefault(section, {})[key] = value
        LOGGER.info("Config %s.%s overridden from %s: %s", section, key, name, value)
    return raw_content


def _read_yaml(path: Path) -> Dict[str, Any]:
    """Parse ``path`` as a YAML mapping, raising :class:`ConfigError` otherwise."""

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        LOGGER.error("Configuration file missing at %s", path)
        raise ConfigError("Configuration file not found") from exc
    except OSError as exc:
        LOGGER.error("Configuration file unreadable at %s", path)
        raise ConfigError("Configuration file could not be read") from exc
    except yaml.YAMLError as exc:
        LOGGER.error("Invalid YAML syntax in %s", path)
        raise ConfigError("Invalid YAML syntax") from exc
    if not isinstance(data, dict):
        LOGGER.error("Configuration root must be a mapping: %s", path)
        raise ConfigError("Configuration root must be a mapping")
    return data


@lru_cache(maxsize=1)
def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load application configuration from YAML.

    Args:
        path: Optional override path to the YAML file.

    Returns:
        AppConfig: Parsed configuration object.

    Raises:
        ConfigError: If the configuration cannot be loaded or validated.
    """
    config_path = path or AppConfig.default_path()
    raw_content = _read_yaml(config_path)
    raw_content = _apply_environment_overrides(raw_content)
    try:
        return AppConfig(**raw_content)
    except ValidationError as exc:
        LOGGER.error("Invalid configuration values: %s", exc)
        raise ConfigError("Configuration validation failed") from exc
