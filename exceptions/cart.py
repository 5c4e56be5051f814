"""
Cart-related exceptions.
"""

from .base import RestaurantException


class CartException(RestaurantException):
    """Base exception for cart-related errors."""
    pass


class EmptyCartException(CartException):
    """Raised when checkout is attempted with no cart lines."""

    code = "CART_EMPTY"

    def __init__(self):
        super().__init__("Your cart is empty")


class InvalidCartException(CartException):
    """
    Raised at checkout when one or more cart lines failed validation.

    Carries the itemized rejections so the client can prune its cart.
    """

    code = "CART_INVALID"

    def __init__(self, rejected_lines: list):
        self.rejected_lines = rejected_lines
        super().__init__(
            f"{len(rejected_lines)} item(s) in your cart are no longer available",
            details={
                'rejected_lines': [
                    {
                        'item_id': rejected.line.item_id,
                        'size_id': rejected.line.size_id,
                        'add_on_ids': rejected.line.add_on_ids,
                        'reason': rejected.reason.value,
                        'message': rejected.message,
                    }
                    for rejected in rejected_lines
                ]
            }
        )
