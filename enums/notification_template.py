from enum import Enum


class NotificationTemplate(str, Enum):
    ORDER_CREATED = "ORDER_CREATED"
    NEW_ORDER = "NEW_ORDER"
    PAYMENT_COMPLETED = "PAYMENT_COMPLETED"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    ORDER_CONFIRMED = "ORDER_CONFIRMED"
    ORDER_PREPARING = "ORDER_PREPARING"
    ORDER_READY = "ORDER_READY"
    ORDER_OUT_FOR_DELIVERY = "ORDER_OUT_FOR_DELIVERY"
    ORDER_COMPLETED = "ORDER_COMPLETED"
    ORDER_CANCELLED = "ORDER_CANCELLED"
    ORDER_CANCELLED_BY_CLIENT = "ORDER_CANCELLED_BY_CLIENT"
