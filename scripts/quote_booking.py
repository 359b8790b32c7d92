#!/usr/bin/env python
"""
Quote a booking from the command line using the stored offers.

Usage:
    python scripts/quote_booking.py demo-event 1000 --quantity 4
    python scripts/quote_booking.py demo-event 1000 -q 1 --women --day friday --trace
    python scripts/quote_booking.py demo-event 1000 -q 2 --select demo-gateway-fee
"""
import argparse
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from offer_pricing.config.settings import get_settings
from offer_pricing.engine import BookingContext, PricingEngine, get_offer_display_text
from offer_pricing.engine.display import get_eligibility_hint
from offer_pricing.services.offers_service import OffersService


def main():
    parser = argparse.ArgumentParser(description="Quote a ticket booking")
    parser.add_argument("event_id")
    parser.add_argument("base_price")
    parser.add_argument("-q", "--quantity", type=int, default=1)
    parser.add_argument("--student", action="store_true", help="Purchaser is a student with ID")
    parser.add_argument("--women", action="store_true")
    parser.add_argument("--day", help="Booking day, e.g. friday")
    parser.add_argument("--select", nargs="*", help="Only apply these offer ids")
    parser.add_argument("--trace", action="store_true", help="Print the resolution trace")
    args = parser.parse_args()

    settings = get_settings()
    service = OffersService(settings.offers_csv)
    engine = PricingEngine.from_settings(settings)

    offers, errors = service.load_offers()
    offers = [o for o in offers if o.event_id == args.event_id]
    for err in errors:
        print(f"  ⚠️ skipped {err}")

    try:
        context = BookingContext(
            quantity=args.quantity,
            is_student=args.student,
            has_student_id=args.student,
            is_women=args.women,
            booking_day=args.day,
        )
        result = engine.calculate(args.base_price, args.quantity, offers, context, selected_offer_ids=args.select)
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(1)

    cur = settings.currency_symbol
    print(f"Event {args.event_id}: {len(offers)} offers")
    for offer in offers:
        hint = get_eligibility_hint(offer, context)
        status = "✅" if hint is None else f"– {hint}"
        print(f"  [{offer.id}] {offer.title}: {get_offer_display_text(offer, cur)} {status}")

    print()
    for adj in result.adjustments:
        print(f"  {adj.description:<40} {adj.cost:>10.2f}")
    print(f"  {'Total':<40} {cur}{result.total_price:.2f}")
    print(f"  {'Per ticket':<40} {cur}{result.adjusted_price:.2f}")
    if result.savings:
        print(f"  {'You save':<40} {cur}{result.savings:.2f}")

    if args.trace:
        print()
        print(result.get_trace_text())


if __name__ == "__main__":
    main()
