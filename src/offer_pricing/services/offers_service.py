"""
Offers Service - CRUD operations for event offers.
Reads and writes offers.csv; every row is parsed into an Offer on the way in.
"""
import csv
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from ..engine.models import Offer, OfferType
from ..errors import DuplicateOfferError, InvalidOfferError, OfferNotFoundError
from ..logging import get_logger

logger = get_logger(__name__)


@dataclass
class ValidationResult:
    """Result of offer validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class OffersService:
    """Service for managing event offers."""

    CSV_COLUMNS = [
        'id', 'event_id', 'offer_type', 'title', 'description', 'price_adjustment',
        'min_quantity', 'max_quantity', 'group_size', 'is_active', 'valid_from', 'valid_until'
    ]

    def __init__(self, offers_csv_path: Path):
        self.offers_csv_path = Path(offers_csv_path)

    def _load_records(self) -> list[dict]:
        """Read raw rows from the CSV as strings."""
        if not self.offers_csv_path.exists():
            return []
        try:
            df = pd.read_csv(self.offers_csv_path, dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError:
            return []
        df.columns = [c.strip() for c in df.columns]
        for col in df.columns:
            df[col] = df[col].astype(str).str.strip()
        return df.to_dict(orient='records')

    def load_offers(self) -> tuple[list[Offer], list[str]]:
        """
        Parse every stored row.

        Returns (offers, errors). Malformed rows are reported in errors and
        left out of offers so pricing never sees them.
        """
        offers = []
        errors = []
        for line_num, record in enumerate(self._load_records(), start=2):  # +2 for header row
            if not record.get('id'):
                continue
            try:
                offers.append(Offer.from_record(record))
            except InvalidOfferError as e:
                errors.append(f"Line {line_num}: {e}")
                logger.warning("offer_row_rejected", line=line_num, path=str(self.offers_csv_path), error=str(e))
        return offers, errors

    def list_offers(self, event_id: Optional[str] = None, include_inactive: bool = True) -> list[Offer]:
        """List offers, optionally for one event."""
        offers, _ = self.load_offers()
        return [
            offer for offer in offers
            if (event_id is None or offer.event_id == event_id)
            and (include_inactive or offer.is_active)
        ]

    def get_offer(self, offer_id: str) -> Optional[Offer]:
        """Get a single offer by ID."""
        for offer in self.list_offers():
            if offer.id == offer_id:
                return offer
        return None

    def get_offers_by_type(self, event_id: str, offer_type: OfferType) -> list[Offer]:
        """Active offers of one type for an event."""
        return [
            offer for offer in self.list_offers(event_id=event_id, include_inactive=False)
            if offer.offer_type == offer_type
        ]

    def create_offer(self, offer: Offer) -> Offer:
        """Create a new offer."""
        records = self._load_records()
        if any(r.get('id') == offer.id for r in records):
            raise DuplicateOfferError(offer.id)

        records.append(offer.to_record())
        self._write_records(records)
        logger.info("offer_created", offer_id=offer.id, event_id=offer.event_id, offer_type=offer.offer_type.value)
        return offer

    def create_offer_from_record(self, record: dict) -> Offer:
        """Create an offer from a raw record, generating an id when missing."""
        record = dict(record)
        if not record.get('id'):
            record['id'] = self.generate_offer_id()
        return self.create_offer(Offer.from_record(record))

    def update_offer(self, offer_id: str, updates: dict[str, Any]) -> Offer:
        """Update an existing offer. The result must pass the same validation as a new offer."""
        records = self._load_records()

        for i, record in enumerate(records):
            if record.get('id') == offer_id:
                record = dict(record)
                for key, value in updates.items():
                    if key in self.CSV_COLUMNS and key != 'id':
                        record[key] = '' if value is None else value
                updated = Offer.from_record(record)
                records[i] = updated.to_record()
                break
        else:
            raise OfferNotFoundError(offer_id)

        # Same checks as a new offer
        validation = self.validate_offer(updated)
        if not validation.valid:
            raise InvalidOfferError(f"Offer {offer_id}: " + "; ".join(validation.errors))

        self._write_records(records)
        logger.info("offer_updated", offer_id=offer_id, fields=sorted(updates))
        return updated

    def delete_offer(self, offer_id: str) -> bool:
        """Delete an offer."""
        records = self._load_records()
        remaining = [r for r in records if r.get('id') != offer_id]

        if len(remaining) == len(records):
            raise OfferNotFoundError(offer_id)

        self._write_records(remaining)
        logger.info("offer_deleted", offer_id=offer_id)
        return True

    def toggle_offer_status(self, offer_id: str, is_active: bool) -> Offer:
        """Switch an offer on or off."""
        return self.update_offer(offer_id, {'is_active': 'true' if is_active else 'false'})

    def validate_offer(self, offer: Offer, now: Optional[datetime] = None) -> ValidationResult:
        """Check an offer for mistakes an admin probably did not intend."""
        result = ValidationResult(valid=True)
        now = now or datetime.now(timezone.utc)

        if not offer.title or offer.title == offer.id:
            result.warnings.append("Offer has no title")

        if offer.offer_type in (OfferType.GROUP_DISCOUNT, OfferType.ADD_PERSON) and offer.group_size < 2:
            result.errors.append(f"{offer.offer_type.value} offers need a group size of at least 2")
            result.valid = False

        if offer.offer_type == OfferType.FLAT_RATE and offer.price_adjustment <= 0:
            result.errors.append("Flat rate must be a positive price")
            result.valid = False

        if offer.offer_type == OfferType.WOMEN_FLASH_SALE and offer.max_quantity not in (None, 1):
            result.warnings.append("Women flash sale only ever applies to single tickets")

        if offer.price_adjustment < 0 and offer.offer_type in (
            OfferType.GROUP_DISCOUNT, OfferType.STUDENT_DISCOUNT, OfferType.WOMEN_FLASH_SALE
        ):
            result.warnings.append("Negative offer price will discount more than the ticket costs")

        if offer.valid_until and offer.valid_until < now:
            result.warnings.append("Offer has expired (valid_until is in the past)")

        # Check for duplicate offers on the same event
        if result.valid:
            result.warnings.extend(self._check_conflicts(offer))

        return result

    def validate_record(self, record: dict) -> ValidationResult:
        """Validate a raw record: parse errors first, then offer checks."""
        record = dict(record)
        if not record.get('id'):
            record['id'] = 'new'
        try:
            offer = Offer.from_record(record)
        except InvalidOfferError as e:
            return ValidationResult(valid=False, errors=[str(e)])
        return self.validate_offer(offer)

    def _check_conflicts(self, offer: Offer) -> list[str]:
        """Warn about active offers of the same type on the same event."""
        warnings = []
        if not offer.event_id:
            return warnings

        for existing in self.list_offers(event_id=offer.event_id, include_inactive=False):
            if existing.id == offer.id:
                continue
            if existing.offer_type == offer.offer_type == OfferType.FLAT_RATE:
                warnings.append(
                    f"Event already has flat rate '{existing.id}'; the later one in the list wins"
                )
            elif existing.offer_type == offer.offer_type:
                warnings.append(
                    f"Another active {offer.offer_type.value} offer exists ('{existing.id}'); both will stack"
                )

        return warnings

    def generate_offer_id(self) -> str:
        """Generate a unique offer ID."""
        existing_ids = {o.id for o in self.list_offers()}
        while True:
            candidate = str(uuid.uuid4())
            if candidate not in existing_ids:
                return candidate

    def _write_records(self, records: list[dict]):
        """Write rows back to CSV. Rejected rows are written back untouched."""
        self.offers_csv_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.offers_csv_path, 'w', encoding='utf-8', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=self.CSV_COLUMNS, restval='', extrasaction='ignore')
            writer.writeheader()
            for record in records:
                writer.writerow(record)

    def get_stats(self, now: Optional[datetime] = None) -> dict:
        """Get statistics about stored offers."""
        offers, errors = self.load_offers()
        now = now or datetime.now(timezone.utc)

        active = [o for o in offers if o.is_active]
        expired = [o for o in offers if o.valid_until and o.valid_until < now]
        by_type = {}
        by_event = {}
        for o in offers:
            by_type[o.offer_type.value] = by_type.get(o.offer_type.value, 0) + 1
            event = o.event_id or 'Unassigned'
            by_event[event] = by_event.get(event, 0) + 1

        return {
            'total': len(offers),
            'active': len(active),
            'inactive': len(offers) - len(active),
            'expired': len(expired),
            'invalid_rows': len(errors),
            'by_type': by_type,
            'by_event': by_event,
        }


# Quick-start templates offered by the admin form
OFFER_TEMPLATES = [
    {
        'title': 'Add 450 for +1',
        'offer_type': 'add_person',
        'price_adjustment': '450',
        'min_quantity': 1,
        'group_size': 2,
        'description': 'Add one additional person for ₹450',
    },
    {
        'title': 'Add 400 for +3',
        'offer_type': 'add_person',
        'price_adjustment': '400',
        'min_quantity': 3,
        'group_size': 4,
        'description': 'Add three additional persons for ₹400 each',
    },
    {
        'title': 'Add 750 for +1',
        'offer_type': 'add_person',
        'price_adjustment': '750',
        'min_quantity': 1,
        'group_size': 2,
        'description': 'Premium add one person for ₹750',
    },
    {
        'title': 'Group of 4 - ₹500 each',
        'offer_type': 'group_discount',
        'price_adjustment': '500',
        'min_quantity': 4,
        'group_size': 4,
        'description': 'Special rate for groups of 4 people',
    },
    {
        'title': 'Student Flat Rate - ₹499',
        'offer_type': 'flat_rate',
        'price_adjustment': '499',
        'min_quantity': 1,
        'group_size': 1,
        'description': 'Special student pricing with ID verification',
    },
    {
        'title': 'Women Flash Sale - Friday 2 Hours',
        'offer_type': 'women_flash_sale',
        'price_adjustment': '0',
        'min_quantity': 1,
        'max_quantity': 1,
        'group_size': 1,
        'description': 'Special flash sale for women every Friday for 2 hours. Single ticket only.',
    },
]
