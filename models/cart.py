# The client cart only carries identifiers and quantities.
# Prices are always resolved server-side from the catalog, on every validation pass.
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from enums.cart_rejection_reason import CartRejectionReason
from utils.money import to_money


class CartLineDTO(BaseModel):
    item_id: int
    size_id: int
    add_on_ids: list[int] = []
    quantity: int = Field(..., ge=1)

    @field_validator('add_on_ids', mode='before')
    @classmethod
    def dedupe_add_on_ids(cls, v):
        # add-ons form a set; keep first-seen order for stable snapshots
        if v is None:
            return []
        return list(dict.fromkeys(v))


class EnrichedAddOnDTO(BaseModel):
    id: int
    name: str
    price: Decimal


class EnrichedCartLineDTO(BaseModel):
    line: CartLineDTO
    item_id: int
    item_name: str
    image_url: str | None = None
    size_id: int
    size_name: str
    size_price: Decimal
    add_ons: list[EnrichedAddOnDTO] = []
    category_id: int
    category_name: str | None = None
    tax_rate: Decimal
    is_available: bool = True

    @property
    def quantity(self) -> int:
        return self.line.quantity

    @property
    def unit_price(self) -> Decimal:
        return to_money(self.size_price + sum((add_on.price for add_on in self.add_ons), Decimal("0")))

    @property
    def line_subtotal(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)


class RejectedCartLineDTO(BaseModel):
    line: CartLineDTO
    reason: CartRejectionReason
    message: str


class CartValidationResultDTO(BaseModel):
    valid_lines: list[EnrichedCartLineDTO] = []
    rejected_lines: list[RejectedCartLineDTO] = []

    @property
    def is_valid(self) -> bool:
        return len(self.rejected_lines) == 0


class QuoteRequestDTO(BaseModel):
    items: list[CartLineDTO]
    address_id: int | None = None
    offer_code: str | None = None


class CreateOrderRequestDTO(BaseModel):
    items: list[CartLineDTO]
    address_id: int
    offer_code: str | None = None
    special_instructions: str | None = Field(default=None, max_length=500)
    # Client-side estimate, shown in the app before checkout. Logged on mismatch, never stored.
    client_total: Decimal | None = None
