from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session, selectinload

import config
from db import session_execute
from models.add_on import AddOn, ItemAddOn, CategoryAddOn
from models.catalog import CatalogSnapshot, CatalogItemDTO, CatalogSizeDTO, CatalogAddOnDTO, CatalogCategoryDTO
from models.item import Item


class CatalogRepository:

    @staticmethod
    async def get_snapshot(item_ids: list[int], session: Session | AsyncSession) -> CatalogSnapshot:
        """
        Load the catalog rows needed to validate a cart.

        Three queries regardless of cart size: items (+ sizes, category),
        add-ons linked directly to those items, add-ons linked to their categories.
        Unknown ids are simply absent from the snapshot.
        """
        item_ids = list(set(item_ids))
        if not item_ids:
            return CatalogSnapshot([])

        stmt = (select(Item)
                .where(Item.id.in_(item_ids))
                .options(selectinload(Item.sizes)))
        items = (await session_execute(stmt, session)).unique().scalars().all()
        if not items:
            return CatalogSnapshot([])

        item_add_on_stmt = (select(ItemAddOn.item_id, AddOn)
                            .join(AddOn, AddOn.id == ItemAddOn.add_on_id)
                            .where(ItemAddOn.item_id.in_([item.id for item in items])))
        item_add_ons: dict[int, list[AddOn]] = {}
        for item_id, add_on in (await session_execute(item_add_on_stmt, session)).all():
            item_add_ons.setdefault(item_id, []).append(add_on)

        category_ids = list({item.category_id for item in items})
        category_add_on_stmt = (select(CategoryAddOn.category_id, AddOn)
                                .join(AddOn, AddOn.id == CategoryAddOn.add_on_id)
                                .where(CategoryAddOn.category_id.in_(category_ids)))
        category_add_ons: dict[int, list[AddOn]] = {}
        for category_id, add_on in (await session_execute(category_add_on_stmt, session)).all():
            category_add_ons.setdefault(category_id, []).append(add_on)

        snapshot_items = []
        for item in items:
            linked: dict[int, AddOn] = {}
            for add_on in item_add_ons.get(item.id, []) + category_add_ons.get(item.category_id, []):
                linked.setdefault(add_on.id, add_on)

            tax_rate = item.category.tax_rate if item.category.tax_rate is not None else config.DEFAULT_TAX_RATE
            snapshot_items.append(CatalogItemDTO(
                id=item.id,
                name=item.name,
                image_url=item.image_url,
                # an item in a disabled category cannot be ordered either
                is_available=item.is_available and item.category.is_available,
                category=CatalogCategoryDTO(id=item.category.id,
                                            name=item.category.name,
                                            tax_rate=Decimal(tax_rate)),
                sizes=[CatalogSizeDTO.model_validate(size, from_attributes=True) for size in item.sizes],
                add_ons=[CatalogAddOnDTO.model_validate(add_on, from_attributes=True) for add_on in linked.values()],
            ))
        return CatalogSnapshot(snapshot_items)
