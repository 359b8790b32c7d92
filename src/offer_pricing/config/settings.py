"""
Centralized settings and path configuration for offer pricing.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


ADD_PERSON_MODES = ('surcharge', 'discount')

# Seed offers ship inside the package
DEFAULT_OFFERS_CSV = Path(__file__).resolve().parent.parent / 'data' / 'offers.csv'


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    # Walk up from this file to find the project root
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 4 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass(frozen=True)
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Offer store
    offers_csv: Path

    # Display
    currency_symbol: str = "₹"

    # Pricing conventions
    add_person_mode: str = "surcharge"  # "surcharge" or "discount"
    no_stag_discount: Decimal = Decimal("0")  # per ticket

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    def __post_init__(self):
        if self.add_person_mode not in ADD_PERSON_MODES:
            raise ValueError(
                f"add_person_mode must be one of {ADD_PERSON_MODES}, got '{self.add_person_mode}'"
            )
        if self.no_stag_discount < 0:
            raise ValueError("no_stag_discount cannot be negative")

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and OFFER_PRICING_* env vars."""
        root = project_root or get_project_root()
        env = os.environ

        offers_csv = env.get('OFFER_PRICING_OFFERS_CSV')

        return cls(
            project_root=root,
            offers_csv=Path(offers_csv) if offers_csv else DEFAULT_OFFERS_CSV,
            currency_symbol=env.get('OFFER_PRICING_CURRENCY', '₹'),
            add_person_mode=env.get('OFFER_PRICING_ADD_PERSON_MODE', 'surcharge').strip().lower(),
            no_stag_discount=Decimal(env.get('OFFER_PRICING_NO_STAG_DISCOUNT', '0')),
            log_level=env.get('OFFER_PRICING_LOG_LEVEL', 'INFO'),
            log_json=env.get('OFFER_PRICING_LOG_JSON', 'false').lower() in ('true', '1', 'yes', 'on'),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
