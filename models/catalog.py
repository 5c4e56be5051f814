# Read-only snapshot of the catalog as seen by the cart validator.
# Built by CatalogRepository from the live tables; never persisted.
from decimal import Decimal

from pydantic import BaseModel


class CatalogSizeDTO(BaseModel):
    id: int
    name: str
    price: Decimal
    is_available: bool = True


class CatalogAddOnDTO(BaseModel):
    id: int
    name: str
    price: Decimal
    is_available: bool = True


class CatalogCategoryDTO(BaseModel):
    id: int
    name: str | None = None
    tax_rate: Decimal


class CatalogItemDTO(BaseModel):
    id: int
    name: str
    image_url: str | None = None
    is_available: bool = True
    category: CatalogCategoryDTO
    sizes: list[CatalogSizeDTO] = []
    # Item-level and category-level add-on links, merged
    add_ons: list[CatalogAddOnDTO] = []

    def get_size(self, size_id: int) -> CatalogSizeDTO | None:
        return next((size for size in self.sizes if size.id == size_id), None)

    def get_add_on(self, add_on_id: int) -> CatalogAddOnDTO | None:
        return next((add_on for add_on in self.add_ons if add_on.id == add_on_id), None)


class CatalogSnapshot:
    """In-memory catalog lookup keyed by item id."""

    def __init__(self, items: list[CatalogItemDTO]):
        self._items = {item.id: item for item in items}

    def get_item(self, item_id: int) -> CatalogItemDTO | None:
        return self._items.get(item_id)
