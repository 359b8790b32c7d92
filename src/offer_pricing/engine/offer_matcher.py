"""
Offer Matcher - Decides which offers a booking is eligible for.

Used by the pricing engine before any offer is allowed to touch the price,
and by callers that want to show why an offer is greyed out.
"""
from datetime import datetime, timezone
from typing import Iterable, Optional

from .models import BookingContext, Offer, OfferType


def _check_type_rule(offer: Offer, context: BookingContext) -> Optional[str]:
    """Offer-type-specific predicate. Returns a reason when it fails."""
    qty = context.quantity

    if offer.offer_type == OfferType.STUDENT_DISCOUNT:
        if not (context.is_student and context.has_student_id):
            return "Student ID verification required"

    elif offer.offer_type == OfferType.WOMEN_FLASH_SALE:
        if not context.is_women:
            return "Women-only offer"
        if context.booking_day != "friday":
            return "Only available on Fridays"
        if qty != 1:
            return "Single ticket only"

    elif offer.offer_type == OfferType.NO_STAG:
        if qty <= 1:
            return "Group booking required"

    elif offer.offer_type in (OfferType.ADD_PERSON, OfferType.GROUP_DISCOUNT):
        if qty < offer.group_size:
            return f"Requires at least {offer.group_size} tickets"

    return None


def ineligibility_reason(
    offer: Offer,
    context: BookingContext,
    now: Optional[datetime] = None
) -> Optional[str]:
    """
    Explain why an offer cannot be applied to this booking.

    Conditions are checked in order and the first failure is returned;
    None means the offer is eligible.
    """
    if not isinstance(offer, Offer):
        return "Malformed offer"

    qty = context.quantity

    if not offer.is_active:
        return "Offer is currently inactive"

    # Quantity range
    if qty < offer.min_quantity:
        return f"Requires at least {offer.min_quantity} tickets"

    if offer.max_quantity is not None and qty > offer.max_quantity:
        return f"Limited to {offer.max_quantity} tickets"

    # Generic group threshold
    if offer.group_size > 1 and qty < offer.group_size:
        return f"Requires at least {offer.group_size} tickets"

    # Validity window (inclusive on both ends)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    if offer.valid_from and now < offer.valid_from:
        return "Offer has not started yet"

    if offer.valid_until and now > offer.valid_until:
        return "Offer has expired"

    return _check_type_rule(offer, context)


def is_eligible(offer: Offer, context: BookingContext, now: Optional[datetime] = None) -> bool:
    """True if every eligibility condition holds for this booking."""
    return ineligibility_reason(offer, context, now) is None


def get_eligible_offers(
    offers: Optional[Iterable[Offer]],
    context: BookingContext,
    now: Optional[datetime] = None
) -> list[Offer]:
    """Filter offers down to the eligible ones, keeping input order."""
    now = now or datetime.now(timezone.utc)
    return [offer for offer in offers or () if is_eligible(offer, context, now)]


def get_best_offer_combination(
    offers: Optional[Iterable[Offer]],
    context: BookingContext,
    now: Optional[datetime] = None
) -> list[Offer]:
    """
    Offers to pre-select for a booking.

    All eligible offers stack, so the best combination is every eligible offer.
    """
    return get_eligible_offers(offers, context, now)
