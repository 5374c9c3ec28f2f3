"""Centralized configuration management for the supplier scorer."""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, model_validator


class ClampRange(BaseModel):
    """Bounds applied to a single score component."""
    min: float
    max: float

    @model_validator(mode="after")
    def _check_order(self) -> "ClampRange":
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) must not exceed max ({self.max})")
        return self

    def clamp(self, value: float) -> float:
        return max(self.min, min(self.max, value))


class PriceConfig(BaseModel):
    """How a supplier's relative price position maps to score points."""
    points_per_percent: float = Field(
        0.5,
        description="Points per percent cheaper than the reference (20% cheaper = +10)"
    )
    comparison: str = Field(
        "market_average",
        description="Price comparison strategy: market_average, best_price, price_range"
    )
    range: ClampRange = Field(default_factory=lambda: ClampRange(min=-10, max=10))


class RateComponentConfig(BaseModel):
    """A component proportional to a rate's distance from a reference rate."""
    reference_pct: float = Field(
        80.0,
        description="Acceptable baseline rate (percent) that scores zero"
    )
    points_per_percent: float = Field(
        1.0,
        description="Points per percentage point above/below the reference"
    )
    range: ClampRange = Field(default_factory=lambda: ClampRange(min=-20, max=20))


class CourierConfig(RateComponentConfig):
    """Courier confirmation carries less weight than promise-keeping."""
    points_per_percent: float = Field(
        0.75,
        description="Points per percentage point above/below the reference"
    )
    range: ClampRange = Field(default_factory=lambda: ClampRange(min=-15, max=15))


class EarlyConfig(BaseModel):
    """Bonus for finishing ahead of the promised date."""
    points_per_percent: float = Field(
        0.2,
        description="Points per percent of jobs finished early"
    )
    range: ClampRange = Field(default_factory=lambda: ClampRange(min=0, max=8))


class WorkloadConfig(BaseModel):
    """Penalty for suppliers with many open jobs."""
    free_allowance: int = Field(
        2,
        ge=0,
        description="Open jobs a supplier can carry without penalty"
    )
    penalty_per_job: float = Field(
        1.0,
        ge=0,
        description="Points deducted per open job beyond the allowance"
    )
    range: ClampRange = Field(default_factory=lambda: ClampRange(min=-10, max=0))


class QualityThresholdsConfig(BaseModel):
    """Total score thresholds for the display tiers."""
    excellent: float = Field(110.0, description="Minimum total for 'excellent'")
    good: float = Field(100.0, description="Minimum total for 'good'")
    fair: float = Field(90.0, description="Minimum total for 'fair'")


class RankingConfig(BaseModel):
    """Defaults for the recommendation list."""
    default_top_k: Optional[int] = Field(
        None,
        description="Default list length (None returns every eligible supplier)"
    )
    per_item_top_k: int = Field(5, ge=1, description="List length for per-item recommendations")


class ScorerConfig(BaseModel):
    """Complete configuration for the supplier scorer."""
    base_score: float = Field(70.0, description="Neutral starting score for any active supplier")
    price: PriceConfig = Field(default_factory=PriceConfig)
    promise: RateComponentConfig = Field(default_factory=RateComponentConfig)
    courier: CourierConfig = Field(default_factory=CourierConfig)
    early: EarlyConfig = Field(default_factory=EarlyConfig)
    workload: WorkloadConfig = Field(default_factory=WorkloadConfig)
    quality_thresholds: QualityThresholdsConfig = Field(default_factory=QualityThresholdsConfig)
    ranking: RankingConfig = Field(default_factory=RankingConfig)


# Global config instance
_config: Optional[ScorerConfig] = None


def get_config() -> ScorerConfig:
    """Get the current configuration.

    Returns the global config, initializing with defaults if not yet loaded.
    """
    global _config
    if _config is None:
        _config = ScorerConfig()
    return _config


def load_config(path: Path) -> ScorerConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        The loaded ScorerConfig.
    """
    global _config

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    _config = ScorerConfig.model_validate(data or {})
    return _config


def reset_config() -> None:
    """Reset configuration to defaults."""
    global _config
    _config = ScorerConfig()


def find_config_file() -> Optional[Path]:
    """Find a scorer configuration file.

    Looks in (order of priority):
    1. SUPPLIER_SCORER_CONFIG environment variable
    2. ./scorer-config.yaml
    3. ./scorer-config.yml
    4. ~/.config/supplier-scorer/config.yaml
    """
    env_path = os.environ.get("SUPPLIER_SCORER_CONFIG")
    if env_path:
        path = Path(env_path)
        if path.exists():
            return path

    for name in ["scorer-config.yaml", "scorer-config.yml"]:
        path = Path(name)
        if path.exists():
            return path

    user_config = Path.home() / ".config" / "supplier-scorer" / "config.yaml"
    if user_config.exists():
        return user_config

    return None


def save_default_config(path: Path) -> None:
    """Save the default configuration to a YAML file.

    Args:
        path: Path where to save the configuration.
    """
    data = ScorerConfig().model_dump()

    yaml_content = """# Supplier Scorer Configuration
# =============================
#
# This file configures the base score, the coefficient and clamp range of
# each score component, and the quality tier thresholds.
#
# Copy this file to one of these locations:
#   - ./scorer-config.yaml (current directory)
#   - ~/.config/supplier-scorer/config.yaml (user config)
#
# Or set the SUPPLIER_SCORER_CONFIG environment variable.

"""
    yaml_content += yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(yaml_content)
