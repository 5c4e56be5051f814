"""
Integration Tests for OrderService.quote(), the cart display path.
"""

from decimal import Decimal

import pytest
from sqlalchemy import func, select

from db import get_db_session
from enums.cart_rejection_reason import CartRejectionReason
from enums.offer_rejection_reason import OfferRejectionReason
from exceptions.order import AddressNotFoundException
from models.cart import CartLineDTO, QuoteRequestDTO
from models.order import Order
from services.order import OrderService


class TestQuote:

    @pytest.mark.asyncio
    async def test_rejected_lines_excluded_from_total(self, seeded, paneer_line):
        request = QuoteRequestDTO(items=[paneer_line, CartLineDTO(item_id=1, size_id=12, quantity=3)],
                                  address_id=seeded.home_address_id)

        async with get_db_session() as session:
            quote = await OrderService.quote(request, seeded.customer_id, session)

        assert len(quote.valid_lines) == 1
        assert quote.rejected_lines[0].reason == CartRejectionReason.SIZE_UNAVAILABLE
        assert quote.breakdown.subtotal == Decimal("638.00")
        assert quote.breakdown.grand_total == Decimal("709.90")

    @pytest.mark.asyncio
    async def test_invalid_offer_is_reported_not_raised(self, seeded, paneer_line):
        request = QuoteRequestDTO(items=[paneer_line], address_id=seeded.home_address_id, offer_code="COFFEE20")

        async with get_db_session() as session:
            quote = await OrderService.quote(request, seeded.customer_id, session)

        assert not quote.offer_applied
        assert quote.offer_rejection == OfferRejectionReason.OFFER_NOT_APPLICABLE
        assert quote.offer_rejection_message == "This offer is not applicable to items in your cart"
        assert quote.breakdown.discount_amount == Decimal("0.00")
        assert quote.breakdown.grand_total == Decimal("709.90")

    @pytest.mark.asyncio
    async def test_valid_offer_applied(self, seeded, paneer_line):
        request = QuoteRequestDTO(items=[paneer_line], address_id=seeded.home_address_id, offer_code="SAVE10")

        async with get_db_session() as session:
            quote = await OrderService.quote(request, seeded.customer_id, session)

        assert quote.offer_applied
        assert quote.offer_rejection is None
        assert quote.breakdown.discount_amount == Decimal("50.00")
        assert quote.breakdown.grand_total == Decimal("659.90")

    @pytest.mark.asyncio
    async def test_quote_without_address_uses_default_fee(self, seeded, paneer_line):
        request = QuoteRequestDTO(items=[paneer_line])

        async with get_db_session() as session:
            quote = await OrderService.quote(request, None, session)

        assert quote.breakdown.delivery_charge == Decimal("25.00")

    @pytest.mark.asyncio
    async def test_foreign_address_rejected(self, seeded, paneer_line):
        request = QuoteRequestDTO(items=[paneer_line], address_id=seeded.other_address_id)

        async with get_db_session() as session:
            with pytest.raises(AddressNotFoundException):
                await OrderService.quote(request, seeded.customer_id, session)

    @pytest.mark.asyncio
    async def test_quote_never_writes(self, seeded, paneer_line):
        request = QuoteRequestDTO(items=[paneer_line], address_id=seeded.home_address_id, offer_code="FLAT100")

        async with get_db_session() as session:
            await OrderService.quote(request, seeded.customer_id, session)
            count = (await session.execute(select(func.count()).select_from(Order))).scalar_one()

        assert count == 0
