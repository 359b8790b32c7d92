"""
Boundary parsing tests: raw storage records either become valid Offers
or are rejected with InvalidOfferError.
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from conftest import make_offer
from offer_pricing.engine.models import BookingContext, Offer, OfferType
from offer_pricing.errors import InvalidOfferError


def csv_row(**overrides):
    row = {
        'id': 'o1',
        'event_id': 'evt-1',
        'offer_type': 'group_discount',
        'title': 'Group of 4',
        'description': '',
        'price_adjustment': '500',
        'min_quantity': '4',
        'max_quantity': '',
        'group_size': '4',
        'is_active': 'true',
        'valid_from': '2025-01-01T00:00:00+00:00',
        'valid_until': '',
    }
    row.update(overrides)
    return row


def test_from_record_parses_csv_row():
    offer = Offer.from_record(csv_row())

    assert offer.id == 'o1'
    assert offer.event_id == 'evt-1'
    assert offer.offer_type == OfferType.GROUP_DISCOUNT
    assert offer.price_adjustment == Decimal('500')
    assert offer.min_quantity == 4
    assert offer.max_quantity is None
    assert offer.group_size == 4
    assert offer.is_active is True
    assert offer.valid_from == datetime(2025, 1, 1, tzinfo=timezone.utc)
    assert offer.valid_until is None
    assert offer.description is None


def test_from_record_defaults():
    offer = Offer.from_record({'id': 'x', 'offer_type': 'razorpay_above', 'price_adjustment': 20})

    assert offer.title == 'x'
    assert offer.min_quantity == 1
    assert offer.group_size == 1
    assert offer.is_active is True
    assert offer.valid_from is None


def test_offer_type_is_case_insensitive():
    assert Offer.from_record(csv_row(offer_type='Flat_Rate')).offer_type == OfferType.FLAT_RATE


def test_naive_timestamps_are_utc():
    offer = Offer.from_record(csv_row(valid_until='2026-03-01'))
    assert offer.valid_until == datetime(2026, 3, 1, tzinfo=timezone.utc)


def test_zulu_timestamps():
    offer = Offer.from_record(csv_row(valid_from='2025-06-01T10:00:00Z'))
    assert offer.valid_from == datetime(2025, 6, 1, 10, tzinfo=timezone.utc)


@pytest.mark.parametrize("overrides,message", [
    ({'id': ''}, "id is required"),
    ({'offer_type': 'bogo'}, "invalid offer_type 'bogo'"),
    ({'offer_type': ''}, "offer_type is required"),
    ({'price_adjustment': ''}, "price_adjustment is required"),
    ({'price_adjustment': 'free'}, "price_adjustment must be a number"),
    ({'price_adjustment': 'NaN'}, "price_adjustment must be finite"),
    ({'min_quantity': 'two'}, "min_quantity must be an integer"),
    ({'group_size': '1.5'}, "group_size must be an integer"),
    ({'group_size': '0'}, "group_size must be at least 1"),
    ({'min_quantity': '-1'}, "min_quantity cannot be negative"),
    ({'min_quantity': '4', 'max_quantity': '2'}, "max_quantity (2) is below min_quantity (4)"),
    ({'valid_from': 'next week'}, "valid_from must be an ISO date"),
    ({'valid_from': '2026-02-01', 'valid_until': '2026-01-01'}, "valid_until is before valid_from"),
])
def test_malformed_records_are_rejected(overrides, message):
    with pytest.raises(InvalidOfferError) as excinfo:
        Offer.from_record(csv_row(**overrides))
    assert message in str(excinfo.value)


def test_invalid_offer_error_is_a_value_error():
    with pytest.raises(ValueError):
        Offer.from_record(csv_row(offer_type='bogo'))


def test_direct_construction_validates():
    with pytest.raises(InvalidOfferError):
        Offer(id='x', offer_type='flat_rate', title='x', price_adjustment=Decimal('10'))
    with pytest.raises(InvalidOfferError):
        Offer(id='x', offer_type=OfferType.FLAT_RATE, title='x', price_adjustment=10)


def test_to_record_is_storage_format():
    offer = make_offer('flat_rate', 499, id='f', max_quantity=3, is_active=False)
    record = offer.to_record()

    assert record['offer_type'] == 'flat_rate'
    assert record['price_adjustment'] == '499'
    assert record['max_quantity'] == '3'
    assert record['is_active'] == 'false'
    assert record['valid_until'] == ''
    assert Offer.from_record(record) == offer


def test_offers_are_immutable():
    offer = make_offer('flat_rate', 499)
    with pytest.raises(AttributeError):
        offer.price_adjustment = Decimal('1')


@pytest.mark.parametrize("qty", [0, -1, 1.5, True])
def test_booking_context_rejects_bad_quantity(qty):
    with pytest.raises(ValueError):
        BookingContext(quantity=qty)


def test_booking_day_is_normalised():
    assert BookingContext(quantity=1, booking_day=' Friday ').booking_day == 'friday'


def test_naive_window_is_stored_as_utc():
    offer = make_offer('razorpay_above', 20, valid_from=datetime(2025, 1, 1))
    assert offer.valid_from == datetime(2025, 1, 1, tzinfo=timezone.utc)


def test_mixed_naive_and_aware_window():
    offer = make_offer(
        'razorpay_above', 20,
        valid_from=datetime(2025, 1, 1),
        valid_until=datetime(2025, 6, 1, tzinfo=timezone.utc),
    )
    assert offer.valid_from.tzinfo is not None

    with pytest.raises(InvalidOfferError):
        make_offer(
            'razorpay_above', 20,
            valid_from=datetime(2025, 6, 1),
            valid_until=datetime(2025, 1, 1, tzinfo=timezone.utc),
        )


@pytest.mark.parametrize("kwargs", [
    {'min_quantity': None},
    {'min_quantity': '2'},
    {'max_quantity': 2.5},
    {'group_size': True},
    {'valid_from': '2025-01-01'},
])
def test_direct_construction_checks_field_types(kwargs):
    with pytest.raises(InvalidOfferError):
        make_offer('razorpay_above', 20, **kwargs)
