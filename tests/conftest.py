import sys
import os
from datetime import datetime, timezone
from decimal import Decimal

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from offer_pricing.engine.models import Offer, OfferType

# A Friday
NOW = datetime(2026, 1, 16, 12, 0, tzinfo=timezone.utc)


def make_offer(offer_type, price, **kwargs) -> Offer:
    """Build a valid offer with sensible defaults for tests."""
    offer_type = OfferType(offer_type)
    defaults = {
        'id': f"{offer_type.value}-{price}",
        'title': offer_type.value.replace('_', ' ').title(),
        'valid_from': datetime(2025, 1, 1, tzinfo=timezone.utc),
    }
    defaults.update(kwargs)
    return Offer(offer_type=offer_type, price_adjustment=Decimal(str(price)), **defaults)


@pytest.fixture
def now():
    return NOW
