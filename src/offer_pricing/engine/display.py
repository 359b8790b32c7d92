"""
Display helpers for offers.

Presentation strings only; nothing here affects pricing.
"""
from decimal import Decimal
from typing import Optional

from .models import BookingContext, Offer, OfferType
from .offer_matcher import ineligibility_reason


OFFER_TYPE_LABELS = {
    OfferType.RAZORPAY_ABOVE: "Transaction of Razorpay over and Above",
    OfferType.ADD_PERSON: "Add Person (+1, +3, etc.)",
    OfferType.GROUP_DISCOUNT: "Group Discount",
    OfferType.NO_STAG: "No STAG",
    OfferType.STUDENT_DISCOUNT: "Student Discount",
    OfferType.FLAT_RATE: "Flat Rate",
    OfferType.WOMEN_FLASH_SALE: "Women Flash Sale",
    OfferType.CUSTOM: "Custom Offer",
}


def format_amount(amount: Decimal) -> str:
    """Whole amounts without decimals, everything else to the paisa."""
    if amount == amount.to_integral_value():
        return str(int(amount))
    return f"{amount:.2f}"


def get_offer_type_label(offer_type: OfferType) -> str:
    """Admin-facing label for an offer type."""
    return OFFER_TYPE_LABELS.get(offer_type, offer_type.value)


def get_offer_display_text(offer: Offer, currency: str = "₹") -> str:
    """Short purchaser-facing description of what the offer does."""
    p = f"{currency}{format_amount(offer.price_adjustment)}"

    if offer.offer_type == OfferType.FLAT_RATE:
        return f"Flat rate: {p}"
    if offer.offer_type == OfferType.ADD_PERSON:
        return f"+{p} per additional person"
    if offer.offer_type == OfferType.GROUP_DISCOUNT:
        return f"{p} for groups of {offer.group_size}+"
    if offer.offer_type == OfferType.STUDENT_DISCOUNT:
        return f"Student price: {p}"
    if offer.offer_type == OfferType.WOMEN_FLASH_SALE:
        return f"Women special: {p}"
    if offer.offer_type == OfferType.NO_STAG:
        return "Group booking required"
    if offer.offer_type == OfferType.RAZORPAY_ABOVE:
        return f"+{p} payment fee"
    return "Special offer"


def get_price_display(offer: Offer, currency: str = "₹") -> str:
    """Signed price column used in the admin offer list."""
    if offer.offer_type == OfferType.FLAT_RATE:
        return f"{currency}{format_amount(offer.price_adjustment)}"
    if offer.price_adjustment > 0:
        return f"+{currency}{format_amount(offer.price_adjustment)}"
    return f"-{currency}{format_amount(abs(offer.price_adjustment))}"


def get_eligibility_hint(offer: Offer, context: BookingContext, now=None) -> Optional[str]:
    """Warning shown next to an offer the purchaser cannot use yet."""
    return ineligibility_reason(offer, context, now)
