"""
Engine settings: cleaning and analytics thresholds.

Defaults are the literal constants of the reference inventory workload.
Any of them can be overridden from a YAML file:

```yaml
cleaner:
  unit_threshold: 1000
  outlier_mrp: 10000

analytics:
  top_n: 10
  mrp_threshold: 200
  stock_threshold: 20
```
"""

from decimal import Decimal
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

DEFAULT_RULES_PATH = "config/validation_rules.yaml"


class CleanerConfig(BaseModel):
    """
    Thresholds used by the cleaning steps.

    Attributes:
        unit_threshold: Records with mrp above this are treated as priced in paise
        unit_divisor: Divisor applied to both prices when rescaling
        outlier_mrp: Records with mrp above this are flagged for manual review
    """

    unit_threshold: Decimal = Field(Decimal("1000"), ge=0)
    unit_divisor: Decimal = Field(Decimal("100"), gt=0)
    outlier_mrp: Decimal = Field(Decimal("10000"), ge=0)


class AnalyticsConfig(BaseModel):
    """
    Parameters of the analytics query catalog.

    Attributes:
        top_n: Row limit of the top-N queries (discount, price gap, low stock)
        mrp_threshold: Minimum mrp for the out-of-stock high-MRP query
        premium_mrp: Minimum mrp for the premium low-discount query
        low_discount: Maximum discount percent for the premium low-discount query
        top_categories: Row limit of the average-discount category ranking
        min_weight_gms: Minimum weight for the price-per-gram query
        low_weight_gms: Upper bound (exclusive) of the Low weight class
        medium_weight_gms: Upper bound (exclusive) of the Medium weight class
        high_discount: Lower bound (inclusive) of the High discount band
        medium_discount: Lower bound (inclusive) of the Medium discount band
        stock_threshold: Upper bound (exclusive) of available quantity for low-stock items
        per_category_n: Rows kept per category by the per-category ranking
    """

    top_n: int = Field(10, ge=1)
    mrp_threshold: Decimal = Decimal("200")
    premium_mrp: Decimal = Decimal("500")
    low_discount: Decimal = Decimal("10")
    top_categories: int = Field(5, ge=1)
    min_weight_gms: int = Field(100, ge=1)
    low_weight_gms: int = 1000
    medium_weight_gms: int = 5000
    high_discount: Decimal = Decimal("30")
    medium_discount: Decimal = Decimal("15")
    stock_threshold: int = 20
    per_category_n: int = Field(3, ge=1)


class Settings(BaseModel):
    """Top-level engine settings."""

    cleaner: CleanerConfig = Field(default_factory=CleanerConfig)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    rules_path: str | None = None


def load_settings(config_path: str | Path | None = None) -> Settings:
    """
    Load settings from a YAML file, falling back to defaults.

    Args:
        config_path: Path to the settings YAML (None for defaults)

    Returns:
        Settings instance

    Raises:
        FileNotFoundError: If a path is given but does not exist
        ValueError: If the file is not a mapping or holds invalid values
    """
    if config_path is None:
        return Settings()

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {config_path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Settings file {config_path} must contain a mapping")

    return Settings.model_validate(raw)
