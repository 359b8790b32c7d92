"""Error hierarchy for offer records and the offer store."""


class OfferError(Exception):
    """Base exception for all offer errors."""

    pass


class InvalidOfferError(OfferError, ValueError):
    """An offer record failed validation.

    Raised at the storage boundary when a row cannot become an Offer,
    e.g. unknown offer_type, non-numeric price_adjustment, inverted window.
    """

    pass


class OfferNotFoundError(OfferError, LookupError):
    """No offer exists with the requested id."""

    def __init__(self, offer_id: str):
        super().__init__(f"Offer with ID '{offer_id}' not found")
        self.offer_id = offer_id


class DuplicateOfferError(OfferError, ValueError):
    """An offer with the same id already exists."""

    def __init__(self, offer_id: str):
        super().__init__(f"Offer with ID '{offer_id}' already exists")
        self.offer_id = offer_id
