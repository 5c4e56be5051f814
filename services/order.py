import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from enums.order_event import OrderEventType
from enums.order_status import OrderStatus
from enums.transition_actor import TransitionActor
from exceptions.cart import EmptyCartException, InvalidCartException
from exceptions.offer import InvalidOfferException
from exceptions.order import (
    AddressNotFoundException,
    DeliveryZoneUnavailableException,
    OrderNotFoundException,
    OrderOwnershipException,
    RestaurantClosedException,
)
from models.address import AddressDTO
from models.cart import CartLineDTO, CartValidationResultDTO, CreateOrderRequestDTO, QuoteRequestDTO
from models.order import OrderDTO, OrderDetailsDTO
from models.order_event import OrderEventDTO
from models.orderItem import OrderItemAddOnDTO, OrderItemDTO
from models.pricing import PriceBreakdownDTO, QuoteDTO
from repositories.address import AddressRepository
from repositories.catalog import CatalogRepository
from repositories.order import OrderRepository
from services.cart import CartService
from services.notification import NotificationService
from services.offer import OfferService
from services.order_status import OrderStatusService
from services.pricing import PricingService
from services.restaurant import RestaurantStatusService
from utils.order_state_machine import get_next_valid_statuses, get_status_color, get_status_label
from utils.transaction_manager import TransactionManager


class OrderService:

    @staticmethod
    async def validate_cart(cart_lines: list[CartLineDTO], session: Session | AsyncSession) -> CartValidationResultDTO:
        catalog = await CatalogRepository.get_snapshot([line.item_id for line in cart_lines], session)
        return CartService.validate(cart_lines, catalog)

    @staticmethod
    async def resolve_delivery_charge(address: AddressDTO | None, session: Session | AsyncSession) -> Decimal:
        """
        Delivery charge of the address's zone, or the restaurant default when the address has no zone.

        Raises:
            DeliveryZoneUnavailableException: If the zone is currently not served
        """
        if address is not None and address.delivery_zone is not None:
            zone = address.delivery_zone
            if not zone.is_available:
                raise DeliveryZoneUnavailableException(zone.id, zone.name)
            return zone.delivery_charge
        return await RestaurantStatusService.get_default_delivery_fee(session)

    @staticmethod
    async def quote(request: QuoteRequestDTO, user_id: int | None, session: Session | AsyncSession) -> QuoteDTO:
        """
        Cart display pricing.

        Unlike checkout, rejected lines are reported and left out of the total,
        and an invalid offer code only means no discount.
        """
        validation = await OrderService.validate_cart(request.items, session)

        address = None
        if request.address_id is not None:
            address = await AddressRepository.get_owned(request.address_id, user_id, session)
            if address is None:
                raise AddressNotFoundException(request.address_id)
        delivery_charge = await OrderService.resolve_delivery_charge(address, session)

        evaluation = None
        if request.offer_code and validation.valid_lines:
            subtotal = PricingService.calculate_subtotal(validation.valid_lines)
            evaluation = await OfferService.evaluate_code(request.offer_code, validation.valid_lines, subtotal,
                                                          user_id, session)

        breakdown = PricingService.price(validation.valid_lines, delivery_charge, evaluation)
        return QuoteDTO(
            valid_lines=validation.valid_lines,
            rejected_lines=validation.rejected_lines,
            breakdown=breakdown,
            offer_code=request.offer_code,
            offer_applied=evaluation is not None and evaluation.valid,
            offer_rejection=evaluation.reason if evaluation is not None else None,
            offer_rejection_message=evaluation.message if evaluation is not None else None,
        )

    @staticmethod
    async def create_order(request: CreateOrderRequestDTO, user_id: int | None) -> OrderDetailsDTO:
        """
        Order Builder.

        Everything runs in one transaction: cart re-validation, restaurant
        open check, address ownership, offer re-evaluation, pricing from
        catalog data, and the order/item/add-on inserts. Any failure rolls
        the whole thing back. ORDER_CREATED is emitted only after commit.

        Args:
            request: Cart lines (identifiers only), address, optional offer code
            user_id: Customer id, None for guest checkout

        Returns:
            The persisted order in pending_payment, with item snapshots

        Raises:
            EmptyCartException, InvalidCartException, RestaurantClosedException,
            AddressNotFoundException, DeliveryZoneUnavailableException, InvalidOfferException
        """
        if not request.items:
            raise EmptyCartException()

        async with TransactionManager.atomic_transaction() as session:
            # 1. Checkout is strict: any rejected line fails the order
            validation = await OrderService.validate_cart(request.items, session)
            if not validation.is_valid:
                raise InvalidCartException(validation.rejected_lines)

            # 2. Restaurant must be accepting orders
            restaurant_status = await RestaurantStatusService.is_open(session)
            if not restaurant_status.is_open:
                raise RestaurantClosedException(restaurant_status.reason, restaurant_status.next_open_time)

            # 3. Address must exist and belong to the caller
            address = await AddressRepository.get_owned(request.address_id, user_id, session)
            if address is None:
                raise AddressNotFoundException(request.address_id)
            delivery_charge = await OrderService.resolve_delivery_charge(address, session)

            # 4. An explicitly supplied offer code must apply
            lines = validation.valid_lines
            evaluation = None
            if request.offer_code:
                subtotal = PricingService.calculate_subtotal(lines)
                evaluation = await OfferService.evaluate_code(request.offer_code, lines, subtotal, user_id, session)
                if not evaluation.valid:
                    raise InvalidOfferException(request.offer_code, evaluation.reason)

            # 5. Server-side price is the only price
            breakdown = PricingService.price(lines, delivery_charge, evaluation)
            OrderService._log_client_estimate(request.client_total, breakdown, user_id)

            # 6. + 7. Order row and snapshots
            order_dto = OrderDTO(
                user_id=user_id,
                address_id=address.id,
                offer_id=evaluation.offer.id if evaluation is not None else None,
                offer_code=evaluation.offer.code if evaluation is not None else None,
                status=OrderStatus.PENDING_PAYMENT,
                subtotal=breakdown.subtotal,
                tax_amount=breakdown.tax_amount,
                delivery_charge=breakdown.delivery_charge,
                discount_amount=breakdown.discount_amount,
                total_price=breakdown.grand_total,
                currency=breakdown.currency,
                delivery_address=address.format_for_delivery(),
                special_instructions=request.special_instructions,
            )
            order_items = [
                OrderItemDTO(
                    item_id=line.item_id,
                    size_id=line.size_id,
                    category_name=line.category_name,
                    item_name=line.item_name,
                    size=line.size_name,
                    base_price=line.size_price,
                    quantity=line.quantity,
                    tax_rate=line.tax_rate,
                    tax_amount=PricingService.calculate_line_tax(line),
                    line_total=line.line_subtotal,
                    add_ons=[OrderItemAddOnDTO(add_on_id=add_on.id,
                                               add_on_name=add_on.name,
                                               add_on_price=add_on.price,
                                               quantity=1)
                             for add_on in line.add_ons],
                )
                for line in lines
            ]
            order_id = await OrderRepository.create(order_dto, order_items, session)
            order = await OrderRepository.get_details(order_id, session)
            # 8. commit on leaving the block

        logging.info(f"✅ Order {order_id} created for user {user_id} "
                     f"(Status: PENDING_PAYMENT, Total: {breakdown.currency} {breakdown.grand_total}, "
                     f"Items: {len(order_items)})")
        NotificationService.emit(OrderEventDTO(
            event_type=OrderEventType.ORDER_CREATED,
            order_id=order_id,
            user_id=user_id,
            to_status=OrderStatus.PENDING_PAYMENT,
            total_price=breakdown.grand_total,
            currency=breakdown.currency,
        ))
        return OrderService.decorate(order, TransitionActor.CUSTOMER)

    @staticmethod
    def _log_client_estimate(client_total: Decimal | None, breakdown: PriceBreakdownDTO, user_id: int | None):
        if client_total is None:
            return
        if client_total != breakdown.grand_total:
            logging.warning(f"Client total {client_total} differs from server total {breakdown.grand_total} "
                            f"for user {user_id}; using server total")

    @staticmethod
    def decorate(order: OrderDetailsDTO, actor: TransitionActor) -> OrderDetailsDTO:
        order.status_label = get_status_label(order.status)
        order.status_color = get_status_color(order.status)
        order.next_statuses = get_next_valid_statuses(order.status, actor)
        return order

    @staticmethod
    async def get_order(order_id: int, user_id: int | None, session: Session | AsyncSession) -> OrderDetailsDTO:
        """Customer view of an order: only the owner can see it."""
        order = await OrderRepository.get_details(order_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        if user_id is None or order.user_id != user_id:
            raise OrderOwnershipException(order_id, user_id)
        return OrderService.decorate(order, TransitionActor.CUSTOMER)

    @staticmethod
    async def get_order_for_staff(order_id: int, session: Session | AsyncSession) -> OrderDetailsDTO:
        order = await OrderRepository.get_details(order_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        return OrderService.decorate(order, TransitionActor.STAFF)

    @staticmethod
    async def get_orders(user_id: int, limit: int, offset: int, session: Session | AsyncSession) -> list[OrderDTO]:
        return await OrderRepository.get_by_user_id(user_id, limit, offset, session)

    @staticmethod
    async def get_all_orders(status: OrderStatus | None, limit: int, offset: int,
                             session: Session | AsyncSession) -> list[OrderDTO]:
        return await OrderRepository.get_all(status, limit, offset, session)

    @staticmethod
    async def cancel_order(order_id: int, user_id: int | None, reason: str | None,
                           session: Session | AsyncSession) -> OrderDTO:
        """Customer cancellation; only legal while the order is still pending payment."""
        return await OrderStatusService.transition(order_id, OrderStatus.CANCELLED, TransitionActor.CUSTOMER,
                                                   session, actor_user_id=user_id, reason=reason)

    @staticmethod
    async def update_status_by_staff(order_id: int, to_status: OrderStatus, session: Session | AsyncSession,
                                     expected_status: OrderStatus | None = None,
                                     staff_user_id: int | None = None,
                                     reason: str | None = None) -> OrderDTO:
        return await OrderStatusService.transition(order_id, to_status, TransitionActor.STAFF, session,
                                                   expected_status=expected_status,
                                                   actor_user_id=staff_user_id,
                                                   reason=reason)
