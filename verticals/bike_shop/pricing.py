"""Pricing engine.

Two entry points over the same compounding pass:
- price_option: live price of one candidate option given what is already
  selected (the configurator UI shows these next to each choice)
- price_configuration: one authoritative total for a full selection set
  (used at add-to-cart and checkout)

Rules come from the catalog ordered by id and are applied in that order,
each to the running total left by the previous one.
"""

import logging
from decimal import Decimal
from typing import Sequence

from verticals.bike_shop.config import ConfiguratorConfig
from verticals.bike_shop.models.domain import (
    OptionPrice,
    PartOption,
    PriceBreakdown,
    PricingRule,
)
from verticals.bike_shop.resolver import load_selection
from verticals.bike_shop.rules import apply_adjustments, rule_matches
from verticals.bike_shop.stores import CatalogStore

logger = logging.getLogger(__name__)


class PricingEngine:
    """Computes option and configuration prices with stacked pricing rules."""

    def __init__(self, catalog: CatalogStore, config: ConfiguratorConfig | None = None):
        self.catalog = catalog
        self.config = config or ConfiguratorConfig.default()

    async def _matching_rules(self, selection_ids: Sequence[int]) -> list[PricingRule]:
        """Rules fully satisfied by `selection_ids`, id ascending.

        A rule needs at least two selected options to be relevant, so empty
        and single selections never reach the catalog.
        """
        unique_ids = set(selection_ids)
        if len(unique_ids) <= 1:
            return []
        rules = await self.catalog.pricing_rules(unique_ids)
        # Store order is not relied on: rules apply in id order.
        return sorted(
            (rule for rule in rules if rule_matches(rule, unique_ids)),
            key=lambda rule: rule.id,
        )

    async def price_option(
        self,
        option: PartOption,
        product_id: int,
        prior_selections: Sequence[int] = (),
    ) -> OptionPrice:
        """Price of adding `option` to `prior_selections`.

        Only rules that involve this option are applied; rules already
        satisfied by the prior selections alone belong to those options.
        """
        rules = await self._matching_rules([*prior_selections, option.id])
        return self._price_with(option, product_id, prior_selections, rules)

    async def price_options(
        self,
        options: Sequence[PartOption],
        product_id: int,
        prior_selections: Sequence[int] = (),
    ) -> list[OptionPrice]:
        """price_option for every candidate, with a single rule lookup."""
        if not options:
            return []
        rules: Sequence[PricingRule] = ()
        if prior_selections:
            rules = await self._matching_rules(
                [*prior_selections, *(option.id for option in options)]
            )
        return [
            self._price_with(option, product_id, prior_selections, rules)
            for option in options
        ]

    def _price_with(
        self,
        option: PartOption,
        product_id: int,
        prior_selections: Sequence[int],
        rules: Sequence[PricingRule],
    ) -> OptionPrice:
        candidate_ids = {*prior_selections, option.id}
        if len(candidate_ids) <= 1:
            rules = ()
        relevant = [
            rule
            for rule in rules
            if option.id in rule.condition_option_ids and rule_matches(rule, candidate_ids)
        ]
        final, applied = apply_adjustments(option.base_price, relevant)
        if applied:
            logger.debug(
                "Option %s on product %s: %d adjustment(s), %s -> %s",
                option.id, product_id, len(applied), option.base_price, final,
            )
        return OptionPrice(
            base_price=option.base_price,
            final_price=self.config.pricing.quantize(final),
            applied_adjustments=applied,
        )

    async def price_configuration(
        self,
        product_id: int,
        full_selections: Sequence[int],
    ) -> PriceBreakdown:
        """Total for a full configuration.

        product base + sum of option bases, then one adjustment pass over the
        whole selection set. Raises NotFoundError for an unknown product, or
        for options that are unknown, inactive or not offered on the product.
        """
        product, options = await load_selection(self.catalog, product_id, full_selections)

        option_sum = sum((o.base_price for o in options), Decimal(0))
        rules = await self._matching_rules(full_selections)
        total, applied = apply_adjustments(product.base_price + option_sum, rules)

        logger.debug(
            "Priced product %s with %d option(s): base=%s options=%s rules=%s total=%s",
            product_id, len(options), product.base_price, option_sum,
            [a.rule_id for a in applied], total,
        )
        return PriceBreakdown(
            base_price=product.base_price,
            option_price_sum=option_sum,
            adjustments=applied,
            total_price=self.config.pricing.quantize(total),
        )
