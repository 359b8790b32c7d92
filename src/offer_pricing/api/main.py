from decimal import Decimal
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from offer_pricing import __version__
from offer_pricing.api.offers_api import OfferCreate, OfferResponse, router as offers_router
from offer_pricing.api.state import get_engine, get_offers_service
from offer_pricing.config.settings import get_settings
from offer_pricing.engine import BookingContext, Offer, get_eligible_offers
from offer_pricing.errors import InvalidOfferError
from offer_pricing.logging import get_logger, setup_logging

settings = get_settings()
setup_logging(json_output=settings.log_json, log_level=settings.log_level)
logger = get_logger(__name__)

app = FastAPI(
    title="Offer Pricing API",
    description="Ticket pricing and offer management for event bookings",
    version=__version__
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Offer management API
app.include_router(offers_router)


class BookingContextModel(BaseModel):
    is_student: bool = False
    has_student_id: bool = False
    is_women: bool = False
    is_group_booking: bool = False
    booking_day: Optional[str] = None
    booking_time: Optional[str] = None


class CalcRequest(BaseModel):
    base_price: Decimal = Field(ge=0)
    quantity: int = Field(ge=1)
    event_id: Optional[str] = None
    offers: Optional[list[OfferCreate]] = None  # inline offers win over event_id
    context: BookingContextModel = Field(default_factory=BookingContextModel)
    selected_offer_ids: Optional[list[str]] = None


def _inline_offers(offers: list[OfferCreate]) -> list[Offer]:
    parsed = []
    for i, offer_data in enumerate(offers):
        record = offer_data.model_dump(mode="json")
        if not record.get("id"):
            record["id"] = f"inline-{i}"
        parsed.append(Offer.from_record(record))
    return parsed


@app.get("/")
async def root():
    return {"status": "online", "message": "Offer Pricing API Active"}


@app.post("/calculate")
async def calculate_pricing(req: CalcRequest):
    try:
        if req.offers is not None:
            offers = _inline_offers(req.offers)
        elif req.event_id:
            offers = get_offers_service().list_offers(event_id=req.event_id)
        else:
            offers = []

        context = BookingContext(quantity=req.quantity, **req.context.model_dump())
        result = get_engine().calculate(
            req.base_price,
            req.quantity,
            offers,
            context=context,
            selected_offer_ids=req.selected_offer_ids,
        )
    except (InvalidOfferError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(
        "booking_priced",
        event_id=req.event_id,
        quantity=req.quantity,
        total_price=str(result.total_price),
        applied=[o.id for o in result.applied_offers],
    )
    return jsonable_encoder(result.to_dict())


@app.get("/events/{event_id}/offers/eligible", response_model=list[OfferResponse])
async def get_eligible(
    event_id: str,
    quantity: int = 1,
    is_student: bool = False,
    has_student_id: bool = False,
    is_women: bool = False,
    booking_day: Optional[str] = None,
):
    try:
        context = BookingContext(
            quantity=quantity,
            is_student=is_student,
            has_student_id=has_student_id,
            is_women=is_women,
            booking_day=booking_day,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    offers = get_offers_service().list_offers(event_id=event_id, include_inactive=False)
    eligible = get_eligible_offers(offers, context)
    return [OfferResponse.from_offer(offer) for offer in eligible]


@app.get("/system/status")
async def get_status():
    stats = get_offers_service().get_stats()
    return {
        "engine_active": True,
        "offers_file": str(settings.offers_csv),
        "offers_count": stats["total"],
        "active_offers": stats["active"],
        "invalid_rows": stats["invalid_rows"],
        "add_person_mode": settings.add_person_mode,
    }
