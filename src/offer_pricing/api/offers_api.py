"""
Offers API - FastAPI router for offer management.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ..config.settings import get_settings
from ..engine.display import get_offer_display_text, get_offer_type_label, get_price_display
from ..engine.models import Offer, OfferType
from ..errors import DuplicateOfferError, InvalidOfferError, OfferNotFoundError
from ..services.offers_service import OFFER_TEMPLATES
from .state import get_offers_service

router = APIRouter(prefix="/api/offers", tags=["offers"])


# Pydantic models for API
class OfferCreate(BaseModel):
    """Request model for creating an offer."""
    id: Optional[str] = None
    event_id: Optional[str] = None
    offer_type: OfferType
    title: str
    description: Optional[str] = None
    price_adjustment: Decimal
    min_quantity: int = 1
    max_quantity: Optional[int] = None
    group_size: int = 1
    is_active: bool = True
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None


class OfferUpdate(BaseModel):
    """Request model for updating an offer."""
    event_id: Optional[str] = None
    offer_type: Optional[OfferType] = None
    title: Optional[str] = None
    description: Optional[str] = None
    price_adjustment: Optional[Decimal] = None
    min_quantity: Optional[int] = None
    max_quantity: Optional[int] = None
    group_size: Optional[int] = None
    is_active: Optional[bool] = None
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None


class ToggleRequest(BaseModel):
    """Request model for switching an offer on or off."""
    is_active: bool


class OfferResponse(BaseModel):
    """Response model for an offer."""
    id: str
    event_id: Optional[str]
    offer_type: OfferType
    type_label: str
    title: str
    description: Optional[str]
    price_adjustment: Decimal
    price_display: str
    display_text: str
    min_quantity: int
    max_quantity: Optional[int]
    group_size: int
    is_active: bool
    valid_from: Optional[datetime]
    valid_until: Optional[datetime]

    @classmethod
    def from_offer(cls, offer: Offer) -> 'OfferResponse':
        currency = get_settings().currency_symbol
        return cls(
            id=offer.id,
            event_id=offer.event_id,
            offer_type=offer.offer_type,
            type_label=get_offer_type_label(offer.offer_type),
            title=offer.title,
            description=offer.description,
            price_adjustment=offer.price_adjustment,
            price_display=get_price_display(offer, currency),
            display_text=get_offer_display_text(offer, currency),
            min_quantity=offer.min_quantity,
            max_quantity=offer.max_quantity,
            group_size=offer.group_size,
            is_active=offer.is_active,
            valid_from=offer.valid_from,
            valid_until=offer.valid_until,
        )


class ValidationResponse(BaseModel):
    """Response model for validation."""
    valid: bool
    errors: list[str]
    warnings: list[str]


# Endpoints

@router.get("", response_model=list[OfferResponse])
async def list_offers(event_id: Optional[str] = None, include_inactive: bool = True):
    """List offers, optionally for one event."""
    offers = get_offers_service().list_offers(event_id=event_id, include_inactive=include_inactive)
    return [OfferResponse.from_offer(offer) for offer in offers]


@router.get("/stats")
async def get_stats():
    """Get offer statistics."""
    return get_offers_service().get_stats()


@router.get("/templates")
async def get_templates():
    """Quick-start templates for the offer form."""
    return OFFER_TEMPLATES


@router.get("/{offer_id}", response_model=OfferResponse)
async def get_offer(offer_id: str):
    """Get a single offer by ID."""
    offer = get_offers_service().get_offer(offer_id)
    if not offer:
        raise HTTPException(status_code=404, detail=f"Offer '{offer_id}' not found")
    return OfferResponse.from_offer(offer)


@router.post("", response_model=OfferResponse)
async def create_offer(offer_data: OfferCreate):
    """Create a new offer."""
    service = get_offers_service()
    record = offer_data.model_dump(mode="json")

    # Validate first
    validation = service.validate_record(record)
    if not validation.valid:
        raise HTTPException(status_code=400, detail={"errors": validation.errors})

    try:
        created = service.create_offer_from_record(record)
        return OfferResponse.from_offer(created)
    except (InvalidOfferError, DuplicateOfferError) as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/{offer_id}", response_model=OfferResponse)
async def update_offer(offer_id: str, updates: OfferUpdate):
    """Update an existing offer."""
    # Only fields present in the request body, including explicit nulls
    update_dict = updates.model_dump(exclude_unset=True, mode="json")

    try:
        updated = get_offers_service().update_offer(offer_id, update_dict)
        return OfferResponse.from_offer(updated)
    except OfferNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidOfferError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{offer_id}/toggle", response_model=OfferResponse)
async def toggle_offer(offer_id: str, request: ToggleRequest):
    """Switch an offer on or off."""
    try:
        toggled = get_offers_service().toggle_offer_status(offer_id, request.is_active)
        return OfferResponse.from_offer(toggled)
    except OfferNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidOfferError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{offer_id}")
async def delete_offer(offer_id: str):
    """Delete an offer."""
    try:
        get_offers_service().delete_offer(offer_id)
        return {"success": True, "message": f"Offer '{offer_id}' deleted"}
    except OfferNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/validate", response_model=ValidationResponse)
async def validate_offer(offer_data: OfferCreate):
    """Validate an offer without saving."""
    result = get_offers_service().validate_record(offer_data.model_dump(mode="json"))
    return ValidationResponse(
        valid=result.valid,
        errors=result.errors,
        warnings=result.warnings,
    )
