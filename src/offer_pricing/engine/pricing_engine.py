"""
Offer Pricing Engine - Applies event offers to a ticket booking.

Pipeline:
1. Start from base price × quantity
2. Order offers: flat_rate first (it replaces the base), then listed order
3. Skip offers that are ineligible or, when a selection is given, unselected
4. Apply each remaining offer's effect to the running total and record
   a signed adjustment
5. Clamp the total at zero, derive per-ticket price and savings

The engine holds only immutable pricing conventions; every call is
independent and never mutates its inputs.
"""
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Collection, Iterable, Optional

from ..config.settings import ADD_PERSON_MODES, Settings, get_settings
from .models import BookingContext, Offer, OfferType, PricingResult
from .offer_matcher import ineligibility_reason

ZERO = Decimal("0")
CENTS = Decimal("0.01")


def to_amount(value: Any) -> Decimal:
    """Coerce a caller-supplied price to Decimal without float artefacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class PricingEngine:
    """
    Computes booking totals from a base ticket price and a set of offers.

    Two conventions vary between venues and are configured per engine:
    - add_person_mode: "surcharge" adds P per additional person,
      "discount" subtracts it
    - no_stag_discount: per-ticket discount for no_stag offers (0 = no effect)
    """

    def __init__(
        self,
        add_person_mode: str = "surcharge",
        no_stag_discount: Decimal = ZERO,
        currency_symbol: str = "₹",
    ):
        if add_person_mode not in ADD_PERSON_MODES:
            raise ValueError(f"add_person_mode must be one of {ADD_PERSON_MODES}")
        self.add_person_mode = add_person_mode
        self.no_stag_discount = to_amount(no_stag_discount)
        self.currency_symbol = currency_symbol

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> 'PricingEngine':
        """Build an engine from application settings."""
        settings = settings or get_settings()
        return cls(
            add_person_mode=settings.add_person_mode,
            no_stag_discount=settings.no_stag_discount,
            currency_symbol=settings.currency_symbol,
        )

    def _fmt(self, amount: Decimal) -> str:
        return f"{self.currency_symbol}{amount:.2f}"

    def calculate(
        self,
        base_price: Any,
        quantity: int,
        offers: Optional[Iterable[Offer]] = (),
        context: Optional[BookingContext] = None,
        selected_offer_ids: Optional[Collection[str]] = None,
        now: Optional[datetime] = None,
    ) -> PricingResult:
        """
        Price a booking.

        Args:
            base_price: Unit ticket price (>= 0)
            quantity: Number of tickets (>= 1); overrides context.quantity
            offers: Candidate offers for the event
            context: Purchaser attributes; defaults to an anonymous booking
            selected_offer_ids: If given, only these eligible offers apply
            now: Point in time for validity windows (defaults to current UTC)

        Returns:
            PricingResult with total, per-ticket price, savings and adjustments
        """
        base = to_amount(base_price)
        if not base.is_finite() or base < 0:
            raise ValueError(f"base_price must be a non-negative amount, got {base_price!r}")

        if context is None:
            context = BookingContext(quantity=quantity)
        elif context.quantity != quantity:
            context = BookingContext(
                quantity=quantity,
                is_student=context.is_student,
                has_student_id=context.has_student_id,
                is_women=context.is_women,
                is_group_booking=context.is_group_booking,
                booking_day=context.booking_day,
                booking_time=context.booking_time,
            )
        qty = context.quantity

        now = now or datetime.now(timezone.utc)
        selected = set(selected_offer_ids) if selected_offer_ids is not None else None

        total = base * qty
        result = PricingResult(base_price=base, quantity=qty, total_price=total)
        result.add_trace("Base Price", f"Quantity {qty} × {self._fmt(base)}", self._fmt(total))

        # flat_rate replaces the base before anything else adjusts it
        ordered = sorted(
            list(offers or ()),
            key=lambda o: not (isinstance(o, Offer) and o.offer_type == OfferType.FLAT_RATE)
        )

        for offer in ordered:
            reason = ineligibility_reason(offer, context, now)
            if reason is not None:
                label = f"{offer.title} ({offer.id})" if isinstance(offer, Offer) else repr(offer)
                result.add_trace("Offer Skipped", label, reason)
                continue

            if selected is not None and offer.id not in selected:
                result.add_trace("Offer Skipped", f"{offer.title} ({offer.id})", "not selected")
                continue

            description, cost = self._apply_offer(offer, base, qty, total)
            cost = cost if cost else ZERO  # no "-0" in the breakdown
            total += cost
            result.add_adjustment(offer, description, cost)
            result.add_trace("Offer Applied", f"{offer.title} ({offer.id}): {description}", self._fmt(total))

        if total < 0:
            result.add_trace("Clamp", "Total below zero, clamped", self._fmt(ZERO))
            total = ZERO

        result.total_price = total
        result.adjusted_price = max(ZERO, (total / qty).quantize(CENTS, rounding=ROUND_HALF_UP))
        result.savings = sum((-adj.cost for adj in result.adjustments if adj.cost < 0), ZERO)
        result.add_trace("Total", f"Per ticket {self._fmt(result.adjusted_price)}", self._fmt(total))

        return result

    def _apply_offer(self, offer: Offer, base: Decimal, qty: int, total: Decimal) -> tuple[str, Decimal]:
        """
        Compute one offer's effect on the running total.

        Returns (description, cost) where cost is the signed change to the total.
        """
        p = offer.price_adjustment

        if offer.offer_type == OfferType.FLAT_RATE:
            return "Flat rate price", p * qty - total

        if offer.offer_type == OfferType.ADD_PERSON:
            additional = qty - offer.group_size + 1
            amount = p * additional
            if self.add_person_mode == "discount":
                return f"{additional} additional person(s) discount", -amount
            return f"{additional} additional person(s) charge", amount

        if offer.offer_type == OfferType.GROUP_DISCOUNT:
            return f"Group discount ({offer.group_size}+ people)", -(base - p) * qty

        if offer.offer_type == OfferType.STUDENT_DISCOUNT:
            return "Student discount", -(base - p) * qty

        if offer.offer_type == OfferType.WOMEN_FLASH_SALE:
            return "Women special discount", -(base - p) * qty

        if offer.offer_type == OfferType.NO_STAG:
            return "Group booking discount", -self.no_stag_discount * qty

        if offer.offer_type == OfferType.RAZORPAY_ABOVE:
            return "Payment processing fee", p * qty

        # Generic rule: positive adjustment is the offer price, otherwise a fee
        if p > 0:
            return f"{offer.title} discount", -(base - p) * qty
        return offer.title, abs(p) * qty


def compute_pricing(
    base_price: Any,
    quantity: int,
    offers: Optional[Iterable[Offer]] = (),
    context: Optional[BookingContext] = None,
    selected_offer_ids: Optional[Collection[str]] = None,
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> PricingResult:
    """Price a booking with an engine configured from settings."""
    engine = PricingEngine.from_settings(settings)
    return engine.calculate(
        base_price,
        quantity,
        offers,
        context=context,
        selected_offer_ids=selected_offer_ids,
        now=now,
    )
