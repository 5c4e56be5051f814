"""
Integration Tests for OrderService.create_order()

Runs against the seeded sqlite database. Notification dispatch is patched
so no background tasks outlive a test.
"""

from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from db import get_db_session
from enums.cart_rejection_reason import CartRejectionReason
from enums.offer_rejection_reason import OfferRejectionReason
from enums.order_event import OrderEventType
from enums.order_status import OrderStatus
from enums.transition_actor import TransitionActor
from exceptions.cart import EmptyCartException, InvalidCartException
from exceptions.offer import InvalidOfferException
from exceptions.order import (
    AddressNotFoundException,
    DeliveryZoneUnavailableException,
    RestaurantClosedException,
)
from models.cart import CartLineDTO, CreateOrderRequestDTO
from models.order import Order
from models.orderItem import OrderItem, OrderItemAddOn
from models.restaurant import RestaurantStatusDTO
from services.order import OrderService
from services.order_status import OrderStatusService


def request_for(items, address_id=1, offer_code=None, client_total=None):
    return CreateOrderRequestDTO(items=items, address_id=address_id, offer_code=offer_code,
                                 client_total=client_total, special_instructions="Less spicy")


async def count_rows(session, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


class TestCreateOrder:

    @pytest.mark.asyncio
    async def test_order_priced_and_snapshotted(self, seeded, paneer_line, session):
        with patch('services.order.NotificationService.emit'):
            order = await OrderService.create_order(request_for([paneer_line]), seeded.customer_id)

        assert order.status == OrderStatus.PENDING_PAYMENT
        assert order.subtotal == Decimal("638.00")
        assert order.tax_amount == Decimal("31.90")
        assert order.delivery_charge == Decimal("40.00")
        assert order.discount_amount == Decimal("0.00")
        assert order.total_price == Decimal("709.90")
        assert order.currency == "INR"
        assert order.special_instructions == "Less spicy"
        assert "12 MG Road" in order.delivery_address
        assert order.status_label == "Pending Payment"
        assert order.next_statuses == [OrderStatus.CANCELLED]

        item = order.items[0]
        assert item.category_name == "Mains"
        assert item.item_name == "Paneer Tikka"
        assert item.size == "Full"
        assert item.base_price == Decimal("299.00")
        assert item.quantity == 2
        assert item.tax_rate == Decimal("5.00")
        assert item.tax_amount == Decimal("31.90")
        assert item.line_total == Decimal("638.00")
        assert [(add_on.add_on_name, add_on.add_on_price) for add_on in item.add_ons] == [
            ("Extra Cheese", Decimal("20.00"))]

        assert await count_rows(session, Order) == 1
        assert await count_rows(session, OrderItemAddOn) == 1

    @pytest.mark.asyncio
    async def test_client_total_is_ignored(self, seeded, paneer_line):
        tampered = request_for([paneer_line], client_total=Decimal("1.00"))

        with patch('services.order.NotificationService.emit'):
            order = await OrderService.create_order(tampered, seeded.customer_id)

        assert order.total_price == Decimal("709.90")
        assert order.total_price != Decimal("1.00")

    @pytest.mark.asyncio
    async def test_category_add_on_and_mixed_tax(self, seeded):
        items = [
            CartLineDTO(item_id=1, size_id=10, add_on_ids=[4], quantity=1),   # 314.00 @ 5%  -> 15.70
            CartLineDTO(item_id=2, size_id=20, quantity=2),                   # 300.00 @ 18% -> 54.00
            CartLineDTO(item_id=3, size_id=30, quantity=1),                   # 80.00 @ default 5% -> 4.00
        ]

        with patch('services.order.NotificationService.emit'):
            order = await OrderService.create_order(request_for(items), seeded.customer_id)

        assert order.subtotal == Decimal("694.00")
        assert order.tax_amount == Decimal("73.70")
        assert order.total_price == Decimal("807.70")
        assert [item.tax_amount for item in order.items] == [Decimal("15.70"), Decimal("54.00"), Decimal("4.00")]

    @pytest.mark.asyncio
    async def test_flat_offer_applied(self, seeded, paneer_line):
        with patch('services.order.NotificationService.emit'):
            order = await OrderService.create_order(request_for([paneer_line], offer_code="flat100"),
                                                    seeded.customer_id)

        assert order.offer_code == "FLAT100"
        assert order.offer_id == 1
        assert order.discount_amount == Decimal("100.00")
        assert order.total_price == Decimal("609.90")

    @pytest.mark.asyncio
    async def test_free_delivery_offer_applied(self, seeded, paneer_line):
        with patch('services.order.NotificationService.emit'):
            order = await OrderService.create_order(request_for([paneer_line], offer_code="FREEDEL"),
                                                    seeded.customer_id)

        assert order.delivery_charge == Decimal("0.00")
        assert order.total_price == Decimal("669.90")

    @pytest.mark.asyncio
    async def test_address_without_zone_uses_default_fee(self, seeded, paneer_line):
        with patch('services.order.NotificationService.emit'):
            order = await OrderService.create_order(
                request_for([paneer_line], address_id=seeded.no_zone_address_id), seeded.customer_id)

        assert order.delivery_charge == Decimal("25.00")

    @pytest.mark.asyncio
    async def test_guest_checkout(self, seeded, paneer_line):
        with patch('services.order.NotificationService.emit'):
            order = await OrderService.create_order(
                request_for([paneer_line], address_id=seeded.guest_address_id), None)

        assert order.user_id is None
        assert order.total_price == Decimal("709.90")


class TestCreateOrderEvents:

    @pytest.mark.asyncio
    async def test_order_created_emitted_once_after_commit(self, seeded, paneer_line, session):
        with patch('services.order.NotificationService.emit') as mock_emit:
            order = await OrderService.create_order(request_for([paneer_line]), seeded.customer_id)

        mock_emit.assert_called_once()
        event = mock_emit.call_args.args[0]
        assert event.event_type == OrderEventType.ORDER_CREATED
        assert event.order_id == order.id
        assert event.user_id == seeded.customer_id
        # visible from an independent session, i.e. committed
        assert await count_rows(session, Order) == 1

    @pytest.mark.asyncio
    async def test_no_event_when_creation_fails(self, seeded):
        items = [CartLineDTO(item_id=5, size_id=50, quantity=1)]

        with patch('services.order.NotificationService.emit') as mock_emit:
            with pytest.raises(InvalidCartException):
                await OrderService.create_order(request_for(items), seeded.customer_id)

        mock_emit.assert_not_called()


class TestCreateOrderFailures:

    @pytest.mark.asyncio
    async def test_empty_cart(self, seeded):
        with pytest.raises(EmptyCartException) as exc_info:
            await OrderService.create_order(request_for([]), seeded.customer_id)

        assert exc_info.value.code == "CART_EMPTY"

    @pytest.mark.asyncio
    async def test_any_invalid_line_fails_checkout(self, seeded, paneer_line, session):
        items = [paneer_line, CartLineDTO(item_id=1, size_id=11, quantity=1)]

        with pytest.raises(InvalidCartException) as exc_info:
            await OrderService.create_order(request_for(items), seeded.customer_id)

        rejected = exc_info.value.details['rejected_lines']
        assert rejected == [{
            'item_id': 1,
            'size_id': 11,
            'add_on_ids': [],
            'reason': CartRejectionReason.SIZE_UNAVAILABLE.value,
            'message': CartRejectionReason.SIZE_UNAVAILABLE.describe(),
        }]
        assert await count_rows(session, Order) == 0

    @pytest.mark.asyncio
    async def test_item_in_disabled_category_rejected(self, seeded):
        items = [CartLineDTO(item_id=4, size_id=40, quantity=1)]

        with pytest.raises(InvalidCartException) as exc_info:
            await OrderService.create_order(request_for(items), seeded.customer_id)

        assert exc_info.value.details['rejected_lines'][0]['reason'] == "ITEM_UNAVAILABLE"

    @pytest.mark.asyncio
    async def test_restaurant_closed(self, seeded, paneer_line, session):
        closed = RestaurantStatusDTO(is_open=False, reason="Closed for Diwali")

        with patch('services.order.RestaurantStatusService.is_open', return_value=closed):
            with pytest.raises(RestaurantClosedException) as exc_info:
                await OrderService.create_order(request_for([paneer_line]), seeded.customer_id)

        assert exc_info.value.reason == "Closed for Diwali"
        assert await count_rows(session, Order) == 0

    @pytest.mark.asyncio
    async def test_address_of_another_customer(self, seeded, paneer_line):
        with pytest.raises(AddressNotFoundException):
            await OrderService.create_order(request_for([paneer_line], address_id=seeded.other_address_id),
                                            seeded.customer_id)

    @pytest.mark.asyncio
    async def test_guest_cannot_use_customer_address(self, seeded, paneer_line):
        with pytest.raises(AddressNotFoundException):
            await OrderService.create_order(request_for([paneer_line], address_id=seeded.home_address_id), None)

    @pytest.mark.asyncio
    async def test_zone_not_served(self, seeded, paneer_line):
        with pytest.raises(DeliveryZoneUnavailableException):
            await OrderService.create_order(
                request_for([paneer_line], address_id=seeded.closed_zone_address_id), seeded.customer_id)

    @pytest.mark.asyncio
    async def test_invalid_offer_fails_whole_order(self, seeded, paneer_line, session):
        with pytest.raises(InvalidOfferException) as exc_info:
            await OrderService.create_order(request_for([paneer_line], offer_code="OLDDEAL"), seeded.customer_id)

        assert exc_info.value.reason == OfferRejectionReason.OFFER_EXPIRED
        assert await count_rows(session, Order) == 0
        assert await count_rows(session, OrderItem) == 0

    @pytest.mark.asyncio
    async def test_unknown_offer_code(self, seeded, paneer_line):
        with pytest.raises(InvalidOfferException) as exc_info:
            await OrderService.create_order(request_for([paneer_line], offer_code="NOPE"), seeded.customer_id)

        assert exc_info.value.reason == OfferRejectionReason.OFFER_NOT_FOUND

    @pytest.mark.asyncio
    async def test_rollback_when_insert_fails(self, seeded, paneer_line, session):
        with patch('services.order.OrderRepository.get_details', side_effect=RuntimeError("disk full")):
            with pytest.raises(RuntimeError):
                await OrderService.create_order(request_for([paneer_line]), seeded.customer_id)

        assert await count_rows(session, Order) == 0
        assert await count_rows(session, OrderItem) == 0


class TestOfferHistory:

    @pytest.mark.asyncio
    async def test_first_order_offer_only_once(self, seeded, create_order):
        first = await create_order(offer_code="WELCOME")
        assert first.discount_amount == Decimal("127.60")

        with pytest.raises(InvalidOfferException) as exc_info:
            await create_order(offer_code="WELCOME")

        assert exc_info.value.reason == OfferRejectionReason.FIRST_ORDER_ONLY

    @pytest.mark.asyncio
    async def test_cancelled_orders_do_not_count_as_use(self, seeded, create_order):
        first = await create_order(offer_code="ONCE")
        async with get_db_session() as cancel_session:
            with patch('services.order_status.NotificationService.emit'):
                await OrderStatusService.transition(first.id, OrderStatus.CANCELLED, TransitionActor.CUSTOMER,
                                                    cancel_session, actor_user_id=seeded.customer_id)

        second = await create_order(offer_code="ONCE")
        assert second.discount_amount == Decimal("30.00")

        with pytest.raises(InvalidOfferException) as exc_info:
            await create_order(offer_code="ONCE")
        assert exc_info.value.reason == OfferRejectionReason.USAGE_LIMIT_REACHED

    @pytest.mark.asyncio
    async def test_guest_cannot_use_first_order_offer(self, seeded, create_order):
        with pytest.raises(InvalidOfferException) as exc_info:
            await create_order(user_id=None, address_id=seeded.guest_address_id, offer_code="WELCOME")

        assert exc_info.value.reason == OfferRejectionReason.OFFER_REQUIRES_ACCOUNT
