"""Store interfaces the configuration engine reads from.

Engine components receive these as constructor arguments; any object with
matching async methods works (SQL stores, in-memory fakes, remote clients).
Implementations raise DataAccessError when the backing store fails.
"""

from typing import Collection, Protocol, runtime_checkable

from verticals.bike_shop.models.domain import (
    DecrementOutcome,
    IncompatibilityEdge,
    InventoryRecord,
    PartOption,
    PartType,
    PricingRule,
    Product,
)


@runtime_checkable
class CatalogStore(Protocol):
    """Read-only access to products, part types, options and rules."""

    async def get_product(self, product_id: int) -> Product | None:
        """Return an active product with its ordered part type ids."""
        ...

    async def part_types_for_product(self, product_id: int) -> list[PartType]:
        """Return the product's part types in display order."""
        ...

    async def required_part_types(self, product_id: int) -> list[PartType]:
        """Return the product's part types flagged as required."""
        ...

    async def options_for_part_type(self, part_type_id: int) -> list[PartOption]:
        """Return active options of a part type, id ascending."""
        ...

    async def get_options(self, option_ids: Collection[int]) -> list[PartOption]:
        """Return the active options among `option_ids`."""
        ...

    async def incompatibility_edges(
        self, option_ids: Collection[int]
    ) -> list[IncompatibilityEdge]:
        """Return edges of active rules with either endpoint in `option_ids`."""
        ...

    async def pricing_rules(self, option_ids: Collection[int]) -> list[PricingRule]:
        """Return active rules whose whole condition set is within `option_ids`.

        Ordered by rule id ascending. Rules are applied in this order, so the
        order is part of the contract.
        """
        ...


@runtime_checkable
class InventoryStore(Protocol):
    """Stock levels per part option."""

    async def get(self, option_ids: Collection[int]) -> list[InventoryRecord]:
        """Return the inventory records that exist for `option_ids`."""
        ...

    async def decrement(self, option_id: int, quantity: int) -> DecrementOutcome:
        """Take `quantity` units if at least that many remain.

        Must be a single conditional write so that two concurrent callers
        cannot both take the last unit.
        """
        ...
