from decimal import Decimal

import config
from models.cart import EnrichedCartLineDTO
from models.pricing import OfferEvaluationDTO, PriceBreakdownDTO
from utils.money import ZERO, percent_of, to_money


class PricingService:
    """Price Calculator: pure arithmetic over already validated cart lines."""

    @staticmethod
    def calculate_subtotal(lines: list[EnrichedCartLineDTO]) -> Decimal:
        return to_money(sum((line.line_subtotal for line in lines), ZERO))

    @staticmethod
    def calculate_line_tax(line: EnrichedCartLineDTO) -> Decimal:
        """
        GST for one line at its category's rate, rounded half-up to 2 places.

        Lines are rounded individually before summing, matching the per-item
        GST shown to customers. Mixed-rate carts are never blended.
        """
        return percent_of(line.line_subtotal, line.tax_rate)

    @staticmethod
    def calculate_tax(lines: list[EnrichedCartLineDTO]) -> Decimal:
        return to_money(sum((PricingService.calculate_line_tax(line) for line in lines), ZERO))

    @staticmethod
    def price(lines: list[EnrichedCartLineDTO],
              delivery_charge: Decimal,
              offer_evaluation: OfferEvaluationDTO | None = None,
              currency: str | None = None) -> PriceBreakdownDTO:
        """
        Build the full price breakdown.

        Args:
            lines: Valid enriched cart lines only
            delivery_charge: Charge of the selected delivery zone
            offer_evaluation: Result of OfferService.evaluate; ignored unless valid
            currency: Defaults to config.CURRENCY

        Returns:
            PriceBreakdownDTO where grand_total == subtotal + tax + delivery - discount and grand_total >= 0
        """
        subtotal = PricingService.calculate_subtotal(lines)
        tax_amount = PricingService.calculate_tax(lines)
        delivery = to_money(delivery_charge)

        discount = ZERO
        if offer_evaluation is not None and offer_evaluation.valid:
            if offer_evaluation.free_delivery:
                delivery = ZERO
            discount = to_money(offer_evaluation.discount_amount)

        gross = subtotal + tax_amount + delivery
        if discount > gross:
            discount = gross
        if discount < ZERO:
            discount = ZERO

        return PriceBreakdownDTO(
            subtotal=subtotal,
            tax_amount=tax_amount,
            delivery_charge=delivery,
            discount_amount=discount,
            grand_total=to_money(gross - discount),
            currency=currency or config.CURRENCY,
        )
