"""Services subpackage - offer storage and management."""
from .offers_service import OFFER_TEMPLATES, OffersService, ValidationResult

__all__ = ['OffersService', 'ValidationResult', 'OFFER_TEMPLATES']
