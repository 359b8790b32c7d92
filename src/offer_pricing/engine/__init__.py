"""Engine subpackage - offer eligibility and pricing logic."""
from .pricing_engine import PricingEngine, compute_pricing
from .offer_matcher import (
    get_best_offer_combination,
    get_eligible_offers,
    ineligibility_reason,
    is_eligible,
)
from .display import get_offer_display_text, get_price_display
from .models import Adjustment, BookingContext, Offer, OfferType, PricingResult

__all__ = [
    'PricingEngine', 'compute_pricing',
    'is_eligible', 'ineligibility_reason', 'get_eligible_offers', 'get_best_offer_combination',
    'get_offer_display_text', 'get_price_display',
    'Offer', 'OfferType', 'BookingContext', 'PricingResult', 'Adjustment',
]
