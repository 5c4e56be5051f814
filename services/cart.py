import logging
from typing import Protocol

from enums.cart_rejection_reason import CartRejectionReason
from models.cart import (
    CartLineDTO,
    CartValidationResultDTO,
    EnrichedAddOnDTO,
    EnrichedCartLineDTO,
    RejectedCartLineDTO,
)
from models.catalog import CatalogItemDTO


class CatalogReader(Protocol):
    def get_item(self, item_id: int) -> CatalogItemDTO | None:
        ...


class CartService:
    """
    Cart Validator.

    Resolves client cart lines (identifiers only) against the catalog and
    splits them into priced lines and rejected lines. Pure: no I/O, never
    mutates the cart, safe to run repeatedly against the same catalog.
    """

    @staticmethod
    def validate(cart_lines: list[CartLineDTO], catalog: CatalogReader) -> CartValidationResultDTO:
        result = CartValidationResultDTO()
        for line in cart_lines:
            enriched, reason = CartService._resolve_line(line, catalog)
            if reason is not None:
                logging.info(f"Cart line rejected: item={line.item_id} size={line.size_id} "
                             f"add_ons={line.add_on_ids} reason={reason.value}")
                result.rejected_lines.append(RejectedCartLineDTO(line=line, reason=reason, message=reason.describe()))
            else:
                result.valid_lines.append(enriched)
        return result

    @staticmethod
    def _resolve_line(line: CartLineDTO,
                      catalog: CatalogReader) -> tuple[EnrichedCartLineDTO | None, CartRejectionReason | None]:
        item = catalog.get_item(line.item_id)
        if item is None or not item.is_available:
            return None, CartRejectionReason.ITEM_UNAVAILABLE

        size = item.get_size(line.size_id)
        if size is None or not size.is_available:
            return None, CartRejectionReason.SIZE_UNAVAILABLE

        # All-or-nothing: one missing add-on rejects the whole line
        add_ons = []
        for add_on_id in line.add_on_ids:
            add_on = item.get_add_on(add_on_id)
            if add_on is None or not add_on.is_available:
                return None, CartRejectionReason.ADDON_UNAVAILABLE
            add_ons.append(EnrichedAddOnDTO(id=add_on.id, name=add_on.name, price=add_on.price))

        return EnrichedCartLineDTO(
            line=line,
            item_id=item.id,
            item_name=item.name,
            image_url=item.image_url,
            size_id=size.id,
            size_name=size.name,
            size_price=size.price,
            add_ons=add_ons,
            category_id=item.category.id,
            category_name=item.category.name,
            tax_rate=item.category.tax_rate,
            is_available=True,
        ), None
