"""
Shared API state - one offer store and one pricing engine per process.
"""
from typing import Optional

from ..config.settings import get_settings
from ..engine import PricingEngine
from ..services.offers_service import OffersService

_offers_service: Optional[OffersService] = None
_engine: Optional[PricingEngine] = None


def get_offers_service() -> OffersService:
    """Get the offer store for the configured CSV."""
    global _offers_service
    if _offers_service is None:
        _offers_service = OffersService(get_settings().offers_csv)
    return _offers_service


def get_engine() -> PricingEngine:
    """Get the pricing engine configured from settings."""
    global _engine
    if _engine is None:
        _engine = PricingEngine.from_settings(get_settings())
    return _engine
