"""
Data models for the offer pricing engine.

Offers and booking contexts are frozen dataclasses validated at construction,
so an Offer that exists is always well-formed. Raw storage records become
Offers through Offer.from_record, which is the only place parsing happens.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, Optional

from ..errors import InvalidOfferError


class OfferType(str, Enum):
    """Closed set of offer kinds. The value is the stored token."""
    FLAT_RATE = "flat_rate"
    ADD_PERSON = "add_person"
    GROUP_DISCOUNT = "group_discount"
    STUDENT_DISCOUNT = "student_discount"
    WOMEN_FLASH_SALE = "women_flash_sale"
    NO_STAG = "no_stag"
    RAZORPAY_ABOVE = "razorpay_above"
    CUSTOM = "custom"  # priced by the generic discount/surcharge rule


def parse_bool(value: Any) -> bool:
    """Parse a boolean from a stored value."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('true', '1', 'yes', 'on')


def parse_decimal(value: Any, field_name: str) -> Decimal:
    """Parse a finite decimal amount."""
    if isinstance(value, bool):
        raise InvalidOfferError(f"{field_name} must be a number")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidOfferError(f"{field_name} must be a number, got '{value}'")
    if not amount.is_finite():
        raise InvalidOfferError(f"{field_name} must be finite")
    return amount


def parse_optional_int(value: Any, field_name: str) -> Optional[int]:
    """Parse an optional integer (empty = None)."""
    if value is None or str(value).strip() in ('', 'None', 'nan'):
        return None
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidOfferError(f"{field_name} must be an integer, got '{value}'")
    if not number.is_finite() or number != number.to_integral_value():
        raise InvalidOfferError(f"{field_name} must be an integer, got '{value}'")
    return int(number)


def parse_optional_datetime(value: Any, field_name: str) -> Optional[datetime]:
    """Parse an ISO timestamp; naive values are taken as UTC."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text in ('', 'None', 'nan'):
            return None
        try:
            parsed = datetime.fromisoformat(text.replace('Z', '+00:00'))
        except ValueError:
            raise InvalidOfferError(f"{field_name} must be an ISO date or timestamp, got '{value}'")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_optional_str(value: Any) -> Optional[str]:
    """Parse optional string (empty = None)."""
    if value is None:
        return None
    text = str(value).strip()
    if text in ('', 'None', 'nan'):
        return None
    return text


@dataclass(frozen=True)
class Offer:
    """A pricing rule attached to an event."""
    id: str
    offer_type: OfferType
    title: str
    price_adjustment: Decimal
    min_quantity: int = 1
    max_quantity: Optional[int] = None
    group_size: int = 1
    is_active: bool = True
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    description: Optional[str] = None
    event_id: Optional[str] = None
    conditions: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        if not self.id:
            raise InvalidOfferError("id is required")
        if not isinstance(self.offer_type, OfferType):
            raise InvalidOfferError(f"offer_type must be an OfferType, got {self.offer_type!r}")
        if not isinstance(self.price_adjustment, Decimal) or not self.price_adjustment.is_finite():
            raise InvalidOfferError("price_adjustment must be a finite Decimal")
        for name in ('min_quantity', 'max_quantity', 'group_size'):
            value = getattr(self, name)
            if value is None and name == 'max_quantity':
                continue
            if not isinstance(value, int) or isinstance(value, bool):
                raise InvalidOfferError(f"{name} must be an integer, got {value!r}")
        for name in ('valid_from', 'valid_until'):
            value = getattr(self, name)
            if value is None:
                continue
            if not isinstance(value, datetime):
                raise InvalidOfferError(f"{name} must be a datetime, got {value!r}")
            if value.tzinfo is None:
                object.__setattr__(self, name, value.replace(tzinfo=timezone.utc))
        if self.min_quantity < 0:
            raise InvalidOfferError("min_quantity cannot be negative")
        if self.max_quantity is not None and self.max_quantity < self.min_quantity:
            raise InvalidOfferError(
                f"max_quantity ({self.max_quantity}) is below min_quantity ({self.min_quantity})"
            )
        if self.group_size < 1:
            raise InvalidOfferError("group_size must be at least 1")
        if self.valid_from and self.valid_until and self.valid_until < self.valid_from:
            raise InvalidOfferError("valid_until is before valid_from")

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'Offer':
        """
        Build an Offer from a loosely typed storage record (CSV row, JSON body).

        Raises InvalidOfferError if the record cannot describe a valid offer.
        """
        offer_id = parse_optional_str(record.get('id'))
        if not offer_id:
            raise InvalidOfferError("id is required")

        raw_type = record.get('offer_type')
        if isinstance(raw_type, OfferType):
            offer_type = raw_type
        else:
            raw_type = parse_optional_str(raw_type)
            if not raw_type:
                raise InvalidOfferError(f"Offer {offer_id}: offer_type is required")
            try:
                offer_type = OfferType(raw_type.lower())
            except ValueError:
                valid = ", ".join(t.value for t in OfferType)
                raise InvalidOfferError(
                    f"Offer {offer_id}: invalid offer_type '{raw_type}', must be one of: {valid}"
                )

        if record.get('price_adjustment') in (None, ''):
            raise InvalidOfferError(f"Offer {offer_id}: price_adjustment is required")

        try:
            min_quantity = parse_optional_int(record.get('min_quantity'), 'min_quantity')
            group_size = parse_optional_int(record.get('group_size'), 'group_size')
            is_active = record.get('is_active')
            return cls(
                id=offer_id,
                offer_type=offer_type,
                title=parse_optional_str(record.get('title')) or offer_id,
                description=parse_optional_str(record.get('description')),
                event_id=parse_optional_str(record.get('event_id')),
                price_adjustment=parse_decimal(record.get('price_adjustment'), 'price_adjustment'),
                min_quantity=1 if min_quantity is None else min_quantity,
                max_quantity=parse_optional_int(record.get('max_quantity'), 'max_quantity'),
                group_size=1 if group_size is None else group_size,
                is_active=True if is_active in (None, '') else parse_bool(is_active),
                valid_from=parse_optional_datetime(record.get('valid_from'), 'valid_from'),
                valid_until=parse_optional_datetime(record.get('valid_until'), 'valid_until'),
                conditions=dict(record.get('conditions') or {}),
            )
        except InvalidOfferError as e:
            if str(e).startswith(f"Offer {offer_id}"):
                raise
            raise InvalidOfferError(f"Offer {offer_id}: {e}") from e

    def to_record(self) -> dict:
        """Convert to a flat storage record (strings, empty = unset)."""
        return {
            'id': self.id,
            'event_id': self.event_id or '',
            'offer_type': self.offer_type.value,
            'title': self.title,
            'description': self.description or '',
            'price_adjustment': str(self.price_adjustment),
            'min_quantity': str(self.min_quantity),
            'max_quantity': '' if self.max_quantity is None else str(self.max_quantity),
            'group_size': str(self.group_size),
            'is_active': 'true' if self.is_active else 'false',
            'valid_from': self.valid_from.isoformat() if self.valid_from else '',
            'valid_until': self.valid_until.isoformat() if self.valid_until else '',
        }


@dataclass(frozen=True)
class BookingContext:
    """Who is booking, how many tickets, and when."""
    quantity: int = 1
    is_student: bool = False
    has_student_id: bool = False
    is_women: bool = False
    is_group_booking: bool = False  # informational
    booking_day: Optional[str] = None  # lower-case day name, e.g. "friday"
    booking_time: Optional[str] = None  # "HH:MM", informational

    def __post_init__(self):
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValueError(f"quantity must be an integer, got {self.quantity!r}")
        if self.quantity < 1:
            raise ValueError(f"quantity must be at least 1, got {self.quantity}")
        if self.booking_day is not None:
            object.__setattr__(self, 'booking_day', self.booking_day.strip().lower())


@dataclass(frozen=True)
class TraceStep:
    """A single step in the pricing resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass(frozen=True)
class Adjustment:
    """One signed change to the total. Negative cost = discount."""
    type: str
    description: str
    cost: Decimal
    offer_id: Optional[str] = None


@dataclass
class PricingResult:
    """Complete result of a pricing calculation."""
    base_price: Decimal
    quantity: int
    total_price: Decimal
    adjusted_price: Decimal = Decimal("0")
    savings: Decimal = Decimal("0")
    applied_offers: list[Offer] = field(default_factory=list)
    adjustments: list[Adjustment] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_adjustment(self, offer: Offer, description: str, cost: Decimal):
        """Record an applied offer and its signed effect."""
        self.applied_offers.append(offer)
        self.adjustments.append(Adjustment(
            type=offer.offer_type.value,
            description=description,
            cost=cost,
            offer_id=offer.id,
        ))

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Plain dict for JSON responses (amounts as strings)."""
        return {
            "base_price": str(self.base_price),
            "quantity": self.quantity,
            "total_price": str(self.total_price),
            "adjusted_price": str(self.adjusted_price),
            "savings": str(self.savings),
            "applied_offers": [offer.id for offer in self.applied_offers],
            "adjustments": [
                {
                    "type": adj.type,
                    "description": adj.description,
                    "cost": str(adj.cost),
                    "offer_id": adj.offer_id,
                }
                for adj in self.adjustments
            ],
            "trace": [
                {"step": t.step, "description": t.description, "value": t.value}
                for t in self.trace
            ],
        }
