"""Selection loading, compatibility resolution and inventory annotation.

All three are thin async shells: they load what they need from the
injected store in one batch call, then defer to the pure rules.
"""

import logging
from typing import Collection, Sequence

from verticals.bike_shop.errors import NotFoundError
from verticals.bike_shop.models.domain import InventoryRecord, PartOption, Product
from verticals.bike_shop.rules import excluded_option_ids
from verticals.bike_shop.stores import CatalogStore, InventoryStore

logger = logging.getLogger(__name__)


async def load_selection(
    catalog: CatalogStore,
    product_id: int,
    option_ids: Sequence[int],
) -> tuple[Product, list[PartOption]]:
    """Product and selected options, checked against each other.

    Raises NotFoundError for an unknown product, for unknown or inactive
    options, and for options whose part type is not on the product.
    """
    product = await catalog.get_product(product_id)
    if product is None:
        raise NotFoundError("Product", [product_id])

    options = await catalog.get_options(option_ids)
    found = {o.id for o in options}
    unknown = [i for i in option_ids if i not in found]
    if unknown:
        raise NotFoundError("PartOption", unknown)

    foreign = [o.id for o in options if o.part_type_id not in product.part_type_ids]
    if foreign:
        raise NotFoundError("PartOption", foreign)
    return product, options


class CompatibilityResolver:
    """Filters candidate options down to those no selection excludes."""

    def __init__(self, catalog: CatalogStore):
        self.catalog = catalog

    async def resolve_compatible(
        self,
        candidate_options: Sequence[PartOption],
        selected_option_ids: Collection[int],
    ) -> list[PartOption]:
        """Drop every candidate joined to a selected option by an incompatibility edge.

        With nothing selected the candidates come back unchanged and the
        catalog is not queried. Candidate order is preserved.
        """
        if not selected_option_ids or not candidate_options:
            return list(candidate_options)

        lookup_ids = set(selected_option_ids) | {o.id for o in candidate_options}
        edges = await self.catalog.incompatibility_edges(lookup_ids)
        excluded = excluded_option_ids(edges, selected_option_ids)

        compatible = [o for o in candidate_options if o.id not in excluded]
        logger.debug(
            "Resolved %d/%d candidates compatible with selections %s",
            len(compatible),
            len(candidate_options),
            sorted(selected_option_ids),
        )
        return compatible


class InventoryGate:
    """Attaches stock status to options."""

    def __init__(self, inventory: InventoryStore):
        self.inventory = inventory

    async def availability(self, option_ids: Collection[int]) -> dict[int, InventoryRecord]:
        """Inventory record per option id; ids without a row get an empty record."""
        if not option_ids:
            return {}
        records = {r.part_option_id: r for r in await self.inventory.get(option_ids)}
        return {
            option_id: records.get(option_id) or InventoryRecord.missing(option_id)
            for option_id in option_ids
        }

    async def annotate_inventory(
        self, options: Sequence[PartOption]
    ) -> list[tuple[PartOption, InventoryRecord]]:
        """Pair each option with its inventory record.

        A missing record means nothing in stock, never unlimited stock.
        """
        if not options:
            return []
        records = await self.availability([o.id for o in options])
        return [(option, records[option.id]) for option in options]
