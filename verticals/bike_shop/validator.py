"""Configuration validator.

Runs three gates in order and stops at the first failure:

    completeness -> compatibility -> availability -> valid

Each gate loads its own data only when reached. The outcome is a value,
never an exception, so callers can render it; unknown ids and store
failures still raise. Validation only reads, so a checkout collaborator can
run it and the stock decrement inside one transaction.
"""

import logging
from typing import Sequence

from patterns.rules_engine import RuleResult, first_failure, passed
from verticals.bike_shop.models.domain import (
    PartOption,
    ValidationReason,
    ValidationResult,
)
from verticals.bike_shop.resolver import InventoryGate, load_selection
from verticals.bike_shop.rules import (
    check_availability,
    check_compatibility,
    check_completeness,
)
from verticals.bike_shop.stores import CatalogStore, InventoryStore

logger = logging.getLogger(__name__)

VALID_MESSAGE = "Configuration is valid"


class ConfigurationValidator:
    """Decides whether a full selection set is purchasable."""

    def __init__(self, catalog: CatalogStore, inventory: InventoryStore):
        self.catalog = catalog
        self.gate = InventoryGate(inventory)

    async def validate(self, product_id: int, selections: Sequence[int]) -> ValidationResult:
        option_ids = list(dict.fromkeys(selections))
        _, options = await load_selection(self.catalog, product_id, option_ids)

        failure, evaluated = await first_failure([
            lambda: self._completeness(product_id, options),
            lambda: self._compatibility(option_ids),
            lambda: self._availability(option_ids),
        ])

        if failure is None:
            logger.info("Product %s configuration %s is valid", product_id, option_ids)
            return ValidationResult(valid=True, message=VALID_MESSAGE)

        logger.info(
            "Product %s configuration %s rejected after %d gate(s): %s",
            product_id, option_ids, len(evaluated), failure.rule_name,
        )
        return _to_validation_result(failure)

    # -- Gates --

    async def _completeness(
        self, product_id: int, options: Sequence[PartOption]
    ) -> RuleResult:
        part_types = await self.catalog.part_types_for_product(product_id)
        return check_completeness(part_types, options)

    async def _compatibility(self, option_ids: Sequence[int]) -> RuleResult:
        if len(option_ids) < 2:
            return passed(ValidationReason.INCOMPATIBLE_COMBINATION.value, "Nothing to compare")
        edges = await self.catalog.incompatibility_edges(option_ids)
        return check_compatibility(edges, option_ids)

    async def _availability(self, option_ids: Sequence[int]) -> RuleResult:
        records = await self.gate.availability(option_ids)
        return check_availability(option_ids, records)


def _to_validation_result(failure: RuleResult) -> ValidationResult:
    details = failure.details
    return ValidationResult(
        valid=False,
        message=failure.message,
        reason=ValidationReason(failure.rule_name),
        missing_part_types=tuple(details.get("missing_part_types", ())),
        duplicated_part_types=tuple(details.get("duplicated_part_types", ())),
        incompatibilities=tuple(tuple(pair) for pair in details.get("incompatibilities", ())),
        unavailable_options=tuple(details.get("unavailable_options", ())),
    )
