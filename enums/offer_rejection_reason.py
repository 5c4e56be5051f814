from enum import Enum


class OfferRejectionReason(str, Enum):
    OFFER_NOT_FOUND = "OFFER_NOT_FOUND"
    OFFER_INACTIVE = "OFFER_INACTIVE"
    OFFER_NOT_STARTED = "OFFER_NOT_STARTED"
    OFFER_EXPIRED = "OFFER_EXPIRED"
    MIN_ORDER_NOT_MET = "MIN_ORDER_NOT_MET"
    OFFER_NOT_APPLICABLE = "OFFER_NOT_APPLICABLE"
    OFFER_REQUIRES_ACCOUNT = "OFFER_REQUIRES_ACCOUNT"
    FIRST_ORDER_ONLY = "FIRST_ORDER_ONLY"
    USAGE_LIMIT_REACHED = "USAGE_LIMIT_REACHED"

    def describe(self) -> str:
        return {
            OfferRejectionReason.OFFER_NOT_FOUND: "Invalid offer code",
            OfferRejectionReason.OFFER_INACTIVE: "This offer is no longer active",
            OfferRejectionReason.OFFER_NOT_STARTED: "This offer is not yet valid",
            OfferRejectionReason.OFFER_EXPIRED: "This offer has expired",
            OfferRejectionReason.MIN_ORDER_NOT_MET: "Minimum order value not reached for this offer",
            OfferRejectionReason.OFFER_NOT_APPLICABLE: "This offer is not applicable to items in your cart",
            OfferRejectionReason.OFFER_REQUIRES_ACCOUNT: "Please sign in to use this offer",
            OfferRejectionReason.FIRST_ORDER_ONLY: "This offer is only valid for first-time orders",
            OfferRejectionReason.USAGE_LIMIT_REACHED: "You have already used this offer the maximum number of times",
        }[self]
