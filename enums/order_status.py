from enum import Enum


class OrderStatus(str, Enum):
    PENDING_PAYMENT = "pending_payment"      # Created, waiting for payment (or manual confirmation)
    CONFIRMED = "confirmed"                  # Paid / accepted by staff
    PREPARING = "preparing"                  # Kitchen is working on it
    READY = "ready"                          # Packed, waiting for rider
    OUT_FOR_DELIVERY = "out_for_delivery"    # Rider on the way
    COMPLETED = "completed"                  # Delivered (terminal)
    CANCELLED = "cancelled"                  # Cancelled by customer, staff or failed payment (terminal)
