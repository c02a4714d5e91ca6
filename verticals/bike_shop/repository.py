"""Bike shop repositories — SQL implementations of the catalog and inventory stores.

Extends BaseRepository with the batch lookups the configuration engine
needs. All id lists are bound through `in_()`; no query text is assembled
by hand. Failures surface as DataAccessError.
"""

from typing import Collection

from fastapi import Depends
from sqlalchemy import case, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.database import get_session
from patterns.repository import BaseRepository
from verticals.bike_shop.errors import DataAccessError
from verticals.bike_shop.models import domain
from verticals.bike_shop.models.db_models import (
    IncompatibilityRule,
    Inventory,
    PartOption,
    PartType,
    PricingRule,
    PricingRuleCondition,
    Product,
    ProductPartType,
    RuleCondition,
)


# ---------------------------------------------------------------------------
# Catalog store
# ---------------------------------------------------------------------------

class SqlCatalogStore(BaseRepository[PartOption]):
    """Catalog reads: products, part types, options, incompatibility and pricing rules."""

    model = PartOption
    error_class = DataAccessError

    async def get_product(self, product_id: int) -> domain.Product | None:
        stmt = (
            select(Product)
            .where(Product.id == product_id, Product.active.is_(True))
            .options(selectinload(Product.part_type_links))
        )
        row = await self.fetch_one(stmt)
        return row.to_domain() if row else None

    async def part_types_for_product(self, product_id: int) -> list[domain.PartType]:
        stmt = (
            select(PartType)
            .join(ProductPartType, ProductPartType.part_type_id == PartType.id)
            .where(ProductPartType.product_id == product_id)
            .order_by(ProductPartType.display_order, PartType.id)
        )
        return [row.to_domain() for row in await self.fetch_all(stmt)]

    async def required_part_types(self, product_id: int) -> list[domain.PartType]:
        stmt = (
            select(PartType)
            .join(ProductPartType, ProductPartType.part_type_id == PartType.id)
            .where(
                ProductPartType.product_id == product_id,
                PartType.required.is_(True),
            )
            .order_by(ProductPartType.display_order, PartType.id)
        )
        return [row.to_domain() for row in await self.fetch_all(stmt)]

    async def options_for_part_type(self, part_type_id: int) -> list[domain.PartOption]:
        stmt = (
            select(PartOption)
            .where(
                PartOption.part_type_id == part_type_id,
                PartOption.active.is_(True),
            )
            .order_by(PartOption.id)
        )
        return [row.to_domain() for row in await self.fetch_all(stmt)]

    async def get_options(self, option_ids: Collection[int]) -> list[domain.PartOption]:
        rows = await self.get_many(option_ids, PartOption.active.is_(True))
        return [row.to_domain() for row in rows]

    async def incompatibility_edges(
        self, option_ids: Collection[int]
    ) -> list[domain.IncompatibilityEdge]:
        """Edges of active rules touching any of `option_ids`, from either side."""
        if not option_ids:
            return []
        ids = list(option_ids)
        stmt = (
            select(RuleCondition)
            .join(IncompatibilityRule, IncompatibilityRule.id == RuleCondition.rule_id)
            .where(
                IncompatibilityRule.active.is_(True),
                or_(
                    RuleCondition.part_option_id.in_(ids),
                    RuleCondition.incompatible_with_part_option_id.in_(ids),
                ),
            )
            .order_by(RuleCondition.rule_id, RuleCondition.id)
        )
        return [row.to_domain() for row in await self.fetch_all(stmt)]

    async def pricing_rules(self, option_ids: Collection[int]) -> list[domain.PricingRule]:
        """Active rules whose every condition option is in `option_ids`, id ascending.

        A rule matches when the number of its conditions equals the number of
        its conditions found in `option_ids`. Rules without conditions have no
        rows to group and never match.
        """
        if not option_ids:
            return []
        ids = list(option_ids)
        satisfied = (
            select(PricingRuleCondition.rule_id)
            .group_by(PricingRuleCondition.rule_id)
            .having(
                func.count(PricingRuleCondition.id)
                == func.sum(
                    case((PricingRuleCondition.part_option_id.in_(ids), 1), else_=0)
                )
            )
        )
        stmt = (
            select(PricingRule)
            .where(PricingRule.active.is_(True), PricingRule.id.in_(satisfied))
            .options(selectinload(PricingRule.conditions))
            .order_by(PricingRule.id)
        )
        return [row.to_domain() for row in await self.fetch_all(stmt)]


# ---------------------------------------------------------------------------
# Inventory store
# ---------------------------------------------------------------------------

class SqlInventoryStore(BaseRepository[Inventory]):
    """Stock reads and conditional decrements."""

    model = Inventory
    error_class = DataAccessError

    async def get(self, option_ids: Collection[int]) -> list[domain.InventoryRecord]:
        if not option_ids:
            return []
        stmt = (
            select(Inventory)
            .where(Inventory.part_option_id.in_(list(option_ids)))
            .order_by(Inventory.part_option_id)
            .execution_options(populate_existing=True)
        )
        return [row.to_domain() for row in await self.fetch_all(stmt)]

    async def decrement(self, option_id: int, quantity: int) -> domain.DecrementOutcome:
        """Conditional UPDATE: only succeeds while `quantity` units remain."""
        if quantity <= 0:
            raise ValueError(f"Decrement quantity must be positive, got {quantity}")
        stmt = (
            update(Inventory)
            .where(
                Inventory.part_option_id == option_id,
                Inventory.quantity >= quantity,
            )
            .values(quantity=Inventory.quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        result = await self.execute(stmt)
        if result.rowcount == 1:
            return domain.DecrementOutcome.OK
        return domain.DecrementOutcome.INSUFFICIENT


# ---------------------------------------------------------------------------
# FastAPI dependency factories
# ---------------------------------------------------------------------------

def get_catalog_store(
    session: AsyncSession = Depends(get_session),
) -> SqlCatalogStore:
    """FastAPI dependency for SqlCatalogStore."""
    return SqlCatalogStore(session)


def get_inventory_store(
    session: AsyncSession = Depends(get_session),
) -> SqlInventoryStore:
    """FastAPI dependency for SqlInventoryStore."""
    return SqlInventoryStore(session)
