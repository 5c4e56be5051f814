from enum import Enum


class CartRejectionReason(str, Enum):
    """
    Why a cart line could not be priced.

    A line is rejected as a whole; partial add-on substitution is not supported.
    """

    ITEM_UNAVAILABLE = "ITEM_UNAVAILABLE"
    SIZE_UNAVAILABLE = "SIZE_UNAVAILABLE"
    ADDON_UNAVAILABLE = "ADDON_UNAVAILABLE"

    def describe(self) -> str:
        return {
            CartRejectionReason.ITEM_UNAVAILABLE: "This item is currently unavailable",
            CartRejectionReason.SIZE_UNAVAILABLE: "The selected size is no longer available",
            CartRejectionReason.ADDON_UNAVAILABLE: "One or more selected add-ons are no longer available",
        }[self]
