import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from enums.discount_type import DiscountType
from enums.offer_rejection_reason import OfferRejectionReason
from models.cart import EnrichedCartLineDTO
from models.offer import OfferDTO, OfferUsageDTO
from models.pricing import OfferEvaluationDTO
from repositories.offer import OfferRepository
from utils.money import ZERO, percent_of, to_money


class OfferService:
    """Offer Evaluator."""

    @staticmethod
    def evaluate(offer: OfferDTO | None,
                 subtotal: Decimal,
                 category_ids: set[int],
                 item_ids: set[int],
                 usage: OfferUsageDTO,
                 now: datetime | None = None) -> OfferEvaluationDTO:
        """
        Check an offer against the cart and the user's order history.

        Checks short-circuit in this order: active, validity window, minimum
        order value, category/item scope, first-order-only, per-user usage cap.
        A failed check is reported in the result, it does not raise.

        Args:
            offer: Offer looked up by code, None if the code does not exist
            subtotal: Cart subtotal before tax and delivery
            category_ids: Categories present in the cart
            item_ids: Items present in the cart
            usage: Non-cancelled order history of the user
            now: Evaluation time (naive UTC), defaults to utcnow

        Returns:
            OfferEvaluationDTO with discount amount or rejection reason
        """
        if offer is None:
            return OfferEvaluationDTO(valid=False, reason=OfferRejectionReason.OFFER_NOT_FOUND)

        def reject(reason: OfferRejectionReason) -> OfferEvaluationDTO:
            return OfferEvaluationDTO(valid=False, reason=reason, offer=offer)

        now = now or datetime.utcnow()
        if not offer.is_active:
            return reject(OfferRejectionReason.OFFER_INACTIVE)
        if offer.valid_from is not None and now < offer.valid_from:
            return reject(OfferRejectionReason.OFFER_NOT_STARTED)
        if offer.valid_to is not None and now > offer.valid_to:
            return reject(OfferRejectionReason.OFFER_EXPIRED)
        if offer.min_order_value is not None and subtotal < offer.min_order_value:
            return reject(OfferRejectionReason.MIN_ORDER_NOT_MET)

        if offer.applicable_category_id is not None or offer.applicable_item_id is not None:
            in_scope = (offer.applicable_category_id in category_ids
                        or offer.applicable_item_id in item_ids)
            if not in_scope:
                return reject(OfferRejectionReason.OFFER_NOT_APPLICABLE)

        if (offer.first_order_only or offer.max_uses_per_user is not None) and usage.user_id is None:
            return reject(OfferRejectionReason.OFFER_REQUIRES_ACCOUNT)
        if offer.first_order_only and usage.prior_order_count > 0:
            return reject(OfferRejectionReason.FIRST_ORDER_ONLY)
        if offer.max_uses_per_user is not None and usage.offer_use_count >= offer.max_uses_per_user:
            return reject(OfferRejectionReason.USAGE_LIMIT_REACHED)

        return OfferEvaluationDTO(
            valid=True,
            discount_amount=OfferService.calculate_discount(offer, subtotal),
            free_delivery=offer.discount_type == DiscountType.FREE_DELIVERY,
            offer=offer,
        )

    @staticmethod
    def calculate_discount(offer: OfferDTO, subtotal: Decimal) -> Decimal:
        value = offer.discount_value or ZERO
        match offer.discount_type:
            case DiscountType.PERCENTAGE:
                discount = percent_of(subtotal, value)
                if offer.max_discount_amount is not None:
                    discount = min(discount, to_money(offer.max_discount_amount))
                return discount
            case DiscountType.FLAT:
                return to_money(min(value, subtotal))
            case _:
                # free delivery zeroes the delivery charge instead
                return ZERO

    @staticmethod
    async def evaluate_code(offer_code: str,
                            lines: list[EnrichedCartLineDTO],
                            subtotal: Decimal,
                            user_id: int | None,
                            session: Session | AsyncSession) -> OfferEvaluationDTO:
        offer = await OfferRepository.get_by_code(offer_code, session)
        usage = await OfferRepository.get_usage(user_id, offer.id if offer else None, session)
        evaluation = OfferService.evaluate(
            offer,
            subtotal,
            category_ids={line.category_id for line in lines},
            item_ids={line.item_id for line in lines},
            usage=usage,
        )
        if evaluation.valid:
            logging.info(f"Offer {offer_code} applied for user {user_id}: discount={evaluation.discount_amount}, "
                         f"free_delivery={evaluation.free_delivery}")
        else:
            logging.info(f"Offer {offer_code} rejected for user {user_id}: {evaluation.reason.value}")
        return evaluation
