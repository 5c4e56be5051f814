"""
Offer-related exceptions.
"""

from enums.offer_rejection_reason import OfferRejectionReason
from .base import RestaurantException


class InvalidOfferException(RestaurantException):
    """Raised at checkout when an explicitly supplied offer code does not apply."""

    code = "OFFER_INVALID"

    def __init__(self, offer_code: str, reason: OfferRejectionReason):
        super().__init__(
            reason.describe(),
            details={'offer_code': offer_code, 'reason': reason.value}
        )
        self.offer_code = offer_code
        self.reason = reason
