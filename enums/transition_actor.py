from enum import Enum


class TransitionActor(str, Enum):
    CUSTOMER = "customer"
    STAFF = "staff"
    PAYMENT_GATEWAY = "payment_gateway"
