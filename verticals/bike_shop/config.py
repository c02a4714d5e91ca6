"""Bike shop configurator settings.

Thresholds, rounding and feature flags as frozen dataclasses:
- Defaults work out of the box
- frozen=True prevents accidental mutation while a request is running
- from_env() applies overrides from CONFIGURATOR_* environment variables
"""

import os
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal


# ---------------------------------------------------------------------------
# Nested config sections
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PricingConfig:
    """How computed prices are rounded."""

    currency_step: Decimal = Decimal("0.01")
    rounding: str = ROUND_HALF_UP

    def quantize(self, amount: Decimal) -> Decimal:
        return amount.quantize(self.currency_step, rounding=self.rounding)


@dataclass(frozen=True)
class InventoryConfig:
    """Stock handling while configuring and reserving."""

    hide_out_of_stock: bool = False  # False: list them, flagged in_stock=False
    reservation_quantity: int = 1


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConfiguratorConfig:
    """Complete configuration for the configurator engine.

    Usage::

        config = ConfiguratorConfig.from_env()
        total = config.pricing.quantize(running_total)
    """

    pricing: PricingConfig = field(default_factory=PricingConfig)
    inventory: InventoryConfig = field(default_factory=InventoryConfig)
    max_selections: int = 50

    @classmethod
    def default(cls) -> "ConfiguratorConfig":
        """Create config with all defaults."""
        return cls()

    @classmethod
    def from_env(cls, prefix: str = "CONFIGURATOR_") -> "ConfiguratorConfig":
        """Create config from environment variables.

        Example: CONFIGURATOR_HIDE_OUT_OF_STOCK=true
        """
        overrides = {}
        max_selections = os.getenv(f"{prefix}MAX_SELECTIONS")
        if max_selections:
            overrides["max_selections"] = int(max_selections)

        inventory = {}
        hide = os.getenv(f"{prefix}HIDE_OUT_OF_STOCK")
        if hide:
            inventory["hide_out_of_stock"] = hide.lower() == "true"
        reservation_qty = os.getenv(f"{prefix}RESERVATION_QUANTITY")
        if reservation_qty:
            inventory["reservation_quantity"] = int(reservation_qty)
        if inventory:
            overrides["inventory"] = InventoryConfig(**inventory)

        step = os.getenv(f"{prefix}CURRENCY_STEP")
        if step:
            overrides["pricing"] = PricingConfig(currency_step=Decimal(step))

        return cls(**overrides)


# Default configuration instance
config = ConfiguratorConfig.from_env()
