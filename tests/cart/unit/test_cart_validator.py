"""
Unit Tests for CartService.validate()

The validator is pure: it only reads the catalog snapshot it is given.
"""

from decimal import Decimal

from enums.cart_rejection_reason import CartRejectionReason
from models.cart import CartLineDTO
from models.catalog import (
    CatalogAddOnDTO,
    CatalogCategoryDTO,
    CatalogItemDTO,
    CatalogSizeDTO,
    CatalogSnapshot,
)
from services.cart import CartService


def make_catalog(**overrides) -> CatalogSnapshot:
    paneer = CatalogItemDTO(
        id=1,
        name="Paneer Tikka",
        category=CatalogCategoryDTO(id=1, name="Mains", tax_rate=Decimal("5.00")),
        sizes=[
            CatalogSizeDTO(id=10, name="Full", price=Decimal("299.00")),
            CatalogSizeDTO(id=11, name="Half", price=Decimal("179.00"), is_available=False),
        ],
        add_ons=[
            CatalogAddOnDTO(id=3, name="Extra Cheese", price=Decimal("20.00")),
            CatalogAddOnDTO(id=4, name="Mint Chutney", price=Decimal("15.00")),
            CatalogAddOnDTO(id=5, name="Truffle Oil", price=Decimal("50.00"), is_available=False),
        ],
    )
    coffee = CatalogItemDTO(
        id=2,
        name="Cold Coffee",
        is_available=overrides.get("coffee_available", True),
        category=CatalogCategoryDTO(id=2, name="Beverages", tax_rate=Decimal("18.00")),
        sizes=[CatalogSizeDTO(id=20, name="Regular", price=Decimal("150.00"))],
    )
    return CatalogSnapshot([paneer, coffee])


class TestCartValidation:

    def test_valid_line_is_enriched_with_catalog_data(self):
        line = CartLineDTO(item_id=1, size_id=10, add_on_ids=[3], quantity=2)

        result = CartService.validate([line], make_catalog())

        assert result.is_valid
        enriched = result.valid_lines[0]
        assert enriched.item_name == "Paneer Tikka"
        assert enriched.size_name == "Full"
        assert enriched.size_price == Decimal("299.00")
        assert [add_on.name for add_on in enriched.add_ons] == ["Extra Cheese"]
        assert enriched.category_id == 1
        assert enriched.tax_rate == Decimal("5.00")
        assert enriched.unit_price == Decimal("319.00")
        assert enriched.line_subtotal == Decimal("638.00")

    def test_unknown_item_rejected(self):
        line = CartLineDTO(item_id=99, size_id=10, quantity=1)

        result = CartService.validate([line], make_catalog())

        assert result.valid_lines == []
        assert result.rejected_lines[0].reason == CartRejectionReason.ITEM_UNAVAILABLE

    def test_unavailable_item_rejected(self):
        line = CartLineDTO(item_id=2, size_id=20, quantity=1)

        result = CartService.validate([line], make_catalog(coffee_available=False))

        assert result.rejected_lines[0].reason == CartRejectionReason.ITEM_UNAVAILABLE

    def test_deleted_size_rejected_and_not_priced(self):
        """A size removed after it was added client-side is rejected, never priced at 0."""
        lines = [
            CartLineDTO(item_id=1, size_id=12, quantity=1),
            CartLineDTO(item_id=2, size_id=20, quantity=1),
        ]

        result = CartService.validate(lines, make_catalog())

        assert len(result.rejected_lines) == 1
        assert result.rejected_lines[0].reason == CartRejectionReason.SIZE_UNAVAILABLE
        assert result.rejected_lines[0].line.size_id == 12
        assert [line.item_id for line in result.valid_lines] == [2]

    def test_unavailable_size_rejected(self):
        line = CartLineDTO(item_id=1, size_id=11, quantity=1)

        result = CartService.validate([line], make_catalog())

        assert result.rejected_lines[0].reason == CartRejectionReason.SIZE_UNAVAILABLE

    def test_size_of_another_item_rejected(self):
        line = CartLineDTO(item_id=1, size_id=20, quantity=1)

        result = CartService.validate([line], make_catalog())

        assert result.rejected_lines[0].reason == CartRejectionReason.SIZE_UNAVAILABLE

    def test_one_bad_add_on_rejects_whole_line(self):
        line = CartLineDTO(item_id=1, size_id=10, add_on_ids=[3, 5], quantity=1)

        result = CartService.validate([line], make_catalog())

        assert result.valid_lines == []
        assert result.rejected_lines[0].reason == CartRejectionReason.ADDON_UNAVAILABLE

    def test_add_on_not_linked_to_item_rejected(self):
        line = CartLineDTO(item_id=2, size_id=20, add_on_ids=[3], quantity=1)

        result = CartService.validate([line], make_catalog())

        assert result.rejected_lines[0].reason == CartRejectionReason.ADDON_UNAVAILABLE

    def test_rejection_carries_readable_message(self):
        line = CartLineDTO(item_id=1, size_id=11, quantity=1)

        result = CartService.validate([line], make_catalog())

        assert result.rejected_lines[0].message == CartRejectionReason.SIZE_UNAVAILABLE.describe()

    def test_revalidation_is_idempotent(self):
        lines = [
            CartLineDTO(item_id=1, size_id=10, add_on_ids=[3, 4], quantity=2),
            CartLineDTO(item_id=1, size_id=11, quantity=1),
            CartLineDTO(item_id=2, size_id=20, quantity=3),
        ]
        catalog = make_catalog()

        first = CartService.validate(lines, catalog)
        second = CartService.validate(lines, catalog)

        assert first.model_dump() == second.model_dump()

    def test_input_cart_not_mutated(self):
        lines = [CartLineDTO(item_id=1, size_id=10, add_on_ids=[5], quantity=1)]
        before = [line.model_dump() for line in lines]

        CartService.validate(lines, make_catalog())

        assert [line.model_dump() for line in lines] == before

    def test_duplicate_add_on_ids_collapse(self):
        line = CartLineDTO(item_id=1, size_id=10, add_on_ids=[3, 3, 4], quantity=1)

        assert line.add_on_ids == [3, 4]

        result = CartService.validate([line], make_catalog())
        assert result.valid_lines[0].unit_price == Decimal("334.00")
