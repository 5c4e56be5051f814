from enum import Enum


class PaymentTransactionStatus(str, Enum):
    PENDING = "pending"          # Intent created at gateway, waiting for callback
    COMPLETED = "completed"      # Gateway reported success
    FAILED = "failed"            # Gateway reported failure
    REFUNDED = "refunded"        # Refunded manually by staff

    @property
    def is_terminal(self) -> bool:
        return self != PaymentTransactionStatus.PENDING
