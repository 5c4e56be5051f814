from decimal import Decimal

from pydantic import BaseModel

from enums.offer_rejection_reason import OfferRejectionReason
from models.cart import EnrichedCartLineDTO, RejectedCartLineDTO
from models.offer import OfferDTO

ZERO = Decimal("0.00")


class OfferEvaluationDTO(BaseModel):
    valid: bool
    discount_amount: Decimal = ZERO
    free_delivery: bool = False
    reason: OfferRejectionReason | None = None
    offer: OfferDTO | None = None

    @property
    def message(self) -> str | None:
        return self.reason.describe() if self.reason else None


class PriceBreakdownDTO(BaseModel):
    subtotal: Decimal = ZERO
    tax_amount: Decimal = ZERO
    delivery_charge: Decimal = ZERO
    discount_amount: Decimal = ZERO
    grand_total: Decimal = ZERO
    currency: str


class QuoteDTO(BaseModel):
    valid_lines: list[EnrichedCartLineDTO] = []
    rejected_lines: list[RejectedCartLineDTO] = []
    breakdown: PriceBreakdownDTO
    offer_code: str | None = None
    offer_applied: bool = False
    offer_rejection: OfferRejectionReason | None = None
    offer_rejection_message: str | None = None
