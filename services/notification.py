import asyncio
import logging

import aiohttp
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

import config
from bot_instance import get_bot
from db import get_db_session, session_commit
from enums.notification_template import NotificationTemplate
from enums.order_event import OrderEventType
from enums.order_status import OrderStatus
from enums.transition_actor import TransitionActor
from models.notification import NotificationDTO
from models.order_event import OrderEventDTO
from repositories.notification import NotificationRepository
from utils.html_escape import safe_html

logger = logging.getLogger(__name__)

# template -> (title, message); message is formatted with the event fields
TEMPLATES: dict[NotificationTemplate, tuple[str, str]] = {
    NotificationTemplate.ORDER_CREATED: (
        "Order Placed",
        "Your order #{order_id} has been placed. Complete the payment to confirm it."),
    NotificationTemplate.NEW_ORDER: (
        "New Order",
        "New order #{order_id} received ({total})."),
    NotificationTemplate.PAYMENT_COMPLETED: (
        "Payment Successful",
        "Payment for order #{order_id} was received."),
    NotificationTemplate.PAYMENT_FAILED: (
        "Payment Failed",
        "Payment for order #{order_id} failed and the order was cancelled."),
    NotificationTemplate.ORDER_CONFIRMED: (
        "Order Confirmed",
        "Your order #{order_id} is confirmed."),
    NotificationTemplate.ORDER_PREPARING: (
        "Being Prepared",
        "Your order #{order_id} is being prepared."),
    NotificationTemplate.ORDER_READY: (
        "Order Ready",
        "Your order #{order_id} is ready and will be picked up by our delivery partner soon."),
    NotificationTemplate.ORDER_OUT_FOR_DELIVERY: (
        "Out for Delivery",
        "Your order #{order_id} is on the way."),
    NotificationTemplate.ORDER_COMPLETED: (
        "Order Delivered",
        "Your order #{order_id} has been delivered. Enjoy your meal!"),
    NotificationTemplate.ORDER_CANCELLED: (
        "Order Cancelled",
        "Your order #{order_id} has been cancelled.{reason_suffix}"),
    NotificationTemplate.ORDER_CANCELLED_BY_CLIENT: (
        "Order Cancelled by Customer",
        "Order #{order_id} was cancelled by the customer."),
}

_STATUS_TEMPLATES: dict[OrderStatus, NotificationTemplate] = {
    OrderStatus.CONFIRMED: NotificationTemplate.ORDER_CONFIRMED,
    OrderStatus.PREPARING: NotificationTemplate.ORDER_PREPARING,
    OrderStatus.READY: NotificationTemplate.ORDER_READY,
    OrderStatus.OUT_FOR_DELIVERY: NotificationTemplate.ORDER_OUT_FOR_DELIVERY,
    OrderStatus.COMPLETED: NotificationTemplate.ORDER_COMPLETED,
}


class NotificationService:
    """
    Notification Dispatcher.

    Best-effort: every channel failure is logged and swallowed. Order
    creation and status transitions never wait for or depend on delivery.
    """

    _background_tasks: set[asyncio.Task] = set()

    @staticmethod
    def emit(event: OrderEventDTO) -> asyncio.Task:
        """
        Schedule dispatch of an event. Call only after the triggering transaction committed.
        """
        logger.info(f"Event {event.event_type.value} for order {event.order_id}: "
                    f"{event.from_status.value if event.from_status else '-'} -> "
                    f"{event.to_status.value if event.to_status else '-'}")
        task = asyncio.create_task(NotificationService.dispatch(event))
        # keep a strong reference until the task finishes
        NotificationService._background_tasks.add(task)
        task.add_done_callback(NotificationService._background_tasks.discard)
        return task

    @staticmethod
    def resolve_templates(event: OrderEventDTO) -> tuple[list[NotificationTemplate], list[NotificationTemplate]]:
        """
        Templates to send for an event.

        Returns:
            (user templates, staff templates)
        """
        if event.event_type == OrderEventType.ORDER_CREATED:
            return [NotificationTemplate.ORDER_CREATED], [NotificationTemplate.NEW_ORDER]

        match event.to_status:
            case OrderStatus.CONFIRMED if event.actor == TransitionActor.PAYMENT_GATEWAY:
                return ([NotificationTemplate.PAYMENT_COMPLETED, NotificationTemplate.ORDER_CONFIRMED],
                        [NotificationTemplate.PAYMENT_COMPLETED])
            case OrderStatus.CANCELLED if event.actor == TransitionActor.PAYMENT_GATEWAY:
                return [NotificationTemplate.PAYMENT_FAILED], [NotificationTemplate.PAYMENT_FAILED]
            case OrderStatus.CANCELLED if event.actor == TransitionActor.CUSTOMER:
                return [NotificationTemplate.ORDER_CANCELLED], [NotificationTemplate.ORDER_CANCELLED_BY_CLIENT]
            case OrderStatus.CANCELLED:
                return [NotificationTemplate.ORDER_CANCELLED], []
            case _:
                template = _STATUS_TEMPLATES.get(event.to_status)
                return ([template] if template else []), []

    @staticmethod
    def render(template: NotificationTemplate, event: OrderEventDTO) -> tuple[str, str]:
        title, message = TEMPLATES[template]
        total = f"{event.currency or config.CURRENCY} {event.total_price}" if event.total_price is not None else "-"
        return title, message.format(
            order_id=event.order_id,
            total=total,
            reason_suffix=f" Reason: {event.reason}" if event.reason else "",
        )

    @staticmethod
    def build_notifications(event: OrderEventDTO) -> list[NotificationDTO]:
        user_templates, staff_templates = NotificationService.resolve_templates(event)
        notifications = []
        data = {"order_id": event.order_id, "status": event.to_status.value if event.to_status else None}
        if event.user_id is not None:
            for template in user_templates:
                title, message = NotificationService.render(template, event)
                notifications.append(NotificationDTO(user_id=event.user_id, order_id=event.order_id,
                                                     template=template, title=title, message=message, data=data))
        for template in staff_templates:
            title, message = NotificationService.render(template, event)
            notifications.append(NotificationDTO(user_id=None, order_id=event.order_id,
                                                 template=template, title=title, message=message, data=data))
        return notifications

    @staticmethod
    async def dispatch(event: OrderEventDTO):
        try:
            notifications = NotificationService.build_notifications(event)
        except Exception as e:
            logger.error(f"Failed to build notifications for order {event.order_id}: {e}")
            return
        if not notifications:
            return

        push_token = None
        try:
            async with get_db_session() as session:
                await NotificationRepository.create_many(notifications, session)
                if event.user_id is not None:
                    push_token = await NotificationRepository.get_push_token(event.user_id, session)
                await session_commit(session)
        except Exception as e:
            logger.error(f"Failed to store notifications for order {event.order_id}: {e}")

        for notification in notifications:
            if notification.user_id is not None and push_token:
                await NotificationService.send_push(push_token, notification.title, notification.message,
                                                    notification.data)
            elif notification.user_id is None:
                await NotificationService.send_to_staff(f"<b>{safe_html(notification.title)}</b>\n"
                                                        f"{safe_html(notification.message)}")

    @staticmethod
    async def send_push(push_token: str, title: str, body: str, data: dict | None = None):
        if not config.PUSH_NOTIFICATIONS_ENABLED:
            return
        if not push_token.startswith("ExponentPushToken[") and not push_token.startswith("ExpoPushToken["):
            logger.warning("Skipping push: token is not an Expo push token")
            return
        payload = {"to": push_token, "title": title, "body": body, "data": data or {}, "sound": "default"}
        try:
            timeout = aiohttp.ClientTimeout(total=10)
            async with aiohttp.ClientSession(timeout=timeout) as http_session:
                async with http_session.post(config.EXPO_PUSH_URL, json=payload,
                                             headers={"Accept": "application/json"}) as response:
                    if response.status != 200:
                        logger.error(f"Expo push failed with HTTP {response.status}: {await response.text()}")
        except Exception as e:
            logger.error(f"Expo push failed: {e}")

    @staticmethod
    async def send_to_staff(message: str):
        if not config.STAFF_TELEGRAM_ALERTS_ENABLED:
            return
        bot = get_bot()
        for admin_id in config.ADMIN_ID_LIST:
            try:
                await bot.send_message(admin_id, message)
            except Exception as e:
                logger.error(f"Staff alert to {admin_id} failed: {e}")

    @staticmethod
    async def get_notifications(user_id: int | None, limit: int, offset: int,
                                session: Session | AsyncSession) -> list[NotificationDTO]:
        return await NotificationRepository.get_by_user_id(user_id, limit, offset, session)
