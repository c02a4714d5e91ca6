"""Configuration service — the entry points the rest of the shop calls.

While a customer configures:   get_available_options (Resolver -> Gate -> Pricing)
At add-to-cart / checkout:     calculate_total_price, validate_configuration
"""

import logging
from typing import Sequence

from fastapi import Depends

from verticals.bike_shop.config import ConfiguratorConfig, config as default_config
from verticals.bike_shop.errors import NotFoundError
from verticals.bike_shop.models.domain import (
    AvailableOption,
    PriceBreakdown,
    ValidationResult,
)
from verticals.bike_shop.pricing import PricingEngine
from verticals.bike_shop.repository import get_catalog_store, get_inventory_store
from verticals.bike_shop.resolver import CompatibilityResolver, InventoryGate
from verticals.bike_shop.stores import CatalogStore, InventoryStore
from verticals.bike_shop.validator import ConfigurationValidator

logger = logging.getLogger(__name__)


class ConfigurationService:
    """Façade over the resolver, inventory gate, pricing engine and validator."""

    def __init__(
        self,
        catalog: CatalogStore,
        inventory: InventoryStore,
        config: ConfiguratorConfig | None = None,
    ):
        self.catalog = catalog
        self.config = config or ConfiguratorConfig.default()
        self.resolver = CompatibilityResolver(catalog)
        self.gate = InventoryGate(inventory)
        self.pricing = PricingEngine(catalog, self.config)
        self.validator = ConfigurationValidator(catalog, inventory)

    def normalize_selections(self, selections: Sequence[int]) -> list[int]:
        """De-duplicate, keeping first occurrence order. Rejects oversized selections."""
        unique = list(dict.fromkeys(selections))
        if len(unique) > self.config.max_selections:
            raise ValueError(
                f"Too many selections: {len(unique)} (max {self.config.max_selections})"
            )
        return unique

    async def get_available_options(
        self,
        product_id: int,
        part_type_id: int,
        selections: Sequence[int] = (),
    ) -> list[AvailableOption]:
        """Options of one part type still choosable given `selections`.

        Each comes with stock status and its live price. Out-of-stock
        options stay in the list (flagged) unless the config hides them.
        """
        selected = self.normalize_selections(selections)

        product = await self.catalog.get_product(product_id)
        if product is None:
            raise NotFoundError("Product", [product_id])
        if part_type_id not in product.part_type_ids:
            raise NotFoundError("PartType", [part_type_id])

        candidates = await self.catalog.options_for_part_type(part_type_id)
        if not candidates:
            return []

        compatible = await self.resolver.resolve_compatible(candidates, selected)
        annotated = await self.gate.annotate_inventory(compatible)
        if self.config.inventory.hide_out_of_stock:
            annotated = [(o, inv) for o, inv in annotated if inv.in_stock]

        prices = await self.pricing.price_options(
            [option for option, _ in annotated], product_id, selected
        )
        available = [
            AvailableOption(option=option, inventory=inventory, price=price)
            for (option, inventory), price in zip(annotated, prices)
        ]
        logger.debug(
            "Product %s part type %s: %d of %d option(s) available",
            product_id, part_type_id, len(available), len(candidates),
        )
        return available

    async def calculate_total_price(
        self, product_id: int, selections: Sequence[int]
    ) -> PriceBreakdown:
        return await self.pricing.price_configuration(
            product_id, self.normalize_selections(selections)
        )

    async def validate_configuration(
        self, product_id: int, selections: Sequence[int]
    ) -> ValidationResult:
        return await self.validator.validate(
            product_id, self.normalize_selections(selections)
        )


# ---------------------------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------------------------

def get_configuration_service(
    catalog: CatalogStore = Depends(get_catalog_store),
    inventory: InventoryStore = Depends(get_inventory_store),
) -> ConfigurationService:
    """FastAPI dependency wiring the SQL stores into the service."""
    return ConfigurationService(catalog, inventory, default_config)
