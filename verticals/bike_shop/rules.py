"""Bike shop business rules — pure functions.

Compatibility exclusion, pricing-rule matching and compounding, and the
three validation gates. Callers load the data; these functions only
decide. Gates return RuleResult values from the rules engine pattern.
"""

from collections import Counter
from decimal import Decimal
from typing import Iterable, Mapping, Sequence

from patterns.rules_engine import RuleResult, failed, passed
from verticals.bike_shop.models.domain import (
    AppliedAdjustment,
    IncompatibilityEdge,
    InventoryRecord,
    PartOption,
    PartType,
    PricingRule,
    ValidationReason,
)

HUNDRED = Decimal(100)


# ---------------------------------------------------------------------------
# Compatibility
# ---------------------------------------------------------------------------

def excluded_option_ids(
    edges: Iterable[IncompatibilityEdge],
    selected_ids: Iterable[int],
) -> set[int]:
    """Options ruled out by the current selections.

    Edges are stored one way but exclude both ways: an edge (a, b) rules out
    b when a is selected and a when b is selected.
    """
    selected = set(selected_ids)
    excluded: set[int] = set()
    for edge in edges:
        if edge.from_option_id in selected:
            excluded.add(edge.to_option_id)
        if edge.to_option_id in selected:
            excluded.add(edge.from_option_id)
    return excluded


def find_conflicts(
    edges: Iterable[IncompatibilityEdge],
    selected_ids: Iterable[int],
) -> list[tuple[int, int]]:
    """Unordered pairs of selected options joined by an edge, as sorted (low, high) tuples."""
    selected = set(selected_ids)
    pairs = {
        (min(edge.from_option_id, edge.to_option_id), max(edge.from_option_id, edge.to_option_id))
        for edge in edges
        if edge.from_option_id != edge.to_option_id
        and edge.from_option_id in selected
        and edge.to_option_id in selected
    }
    return sorted(pairs)


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------

def rule_matches(rule: PricingRule, selection_ids: Iterable[int]) -> bool:
    """AND semantics: every condition option must be selected. Empty conditions never match."""
    return bool(rule.condition_option_ids) and rule.condition_option_ids <= set(selection_ids)


def apply_adjustments(
    start: Decimal,
    rules: Sequence[PricingRule],
) -> tuple[Decimal, tuple[AppliedAdjustment, ...]]:
    """Apply rules one after another, each to the total the previous one produced.

    Fixed rules add their value; percentage rules multiply by (1 + value/100).
    Order matters: +10 then +10% on 150 gives 176, the reverse gives 175.
    """
    running = start
    applied: list[AppliedAdjustment] = []
    for rule in rules:
        if rule.is_percentage:
            new_total = running * (1 + rule.adjustment / HUNDRED)
        else:
            new_total = running + rule.adjustment
        applied.append(
            AppliedAdjustment(
                rule_id=rule.id,
                name=rule.name,
                value=rule.adjustment,
                is_percentage=rule.is_percentage,
                amount=new_total - running,
                running_total=new_total,
            )
        )
        running = new_total
    return running, tuple(applied)


# ---------------------------------------------------------------------------
# Validation gates
# ---------------------------------------------------------------------------

def check_completeness(
    part_types: Sequence[PartType],
    selected_options: Sequence[PartOption],
) -> RuleResult:
    """Every required part type needs a selection; no part type may have two."""
    counts = Counter(option.part_type_id for option in selected_options)
    missing = [pt.name for pt in part_types if pt.required and counts[pt.id] == 0]
    duplicated = [pt.name for pt in part_types if counts[pt.id] > 1]

    if not missing and not duplicated:
        return passed(ValidationReason.MISSING_REQUIRED.value, "All required part types selected")

    reasons = []
    if missing:
        reasons.append(f"Missing required selections: {', '.join(missing)}")
    if duplicated:
        reasons.append(f"More than one selection for: {', '.join(duplicated)}")
    return failed(
        ValidationReason.MISSING_REQUIRED.value,
        "; ".join(reasons),
        missing_part_types=missing,
        duplicated_part_types=duplicated,
    )


def check_compatibility(
    edges: Iterable[IncompatibilityEdge],
    selected_ids: Sequence[int],
) -> RuleResult:
    """No two selected options may be joined by an incompatibility edge."""
    conflicts = find_conflicts(edges, selected_ids)
    if not conflicts:
        return passed(ValidationReason.INCOMPATIBLE_COMBINATION.value, "No incompatible combinations")
    listed = ", ".join(f"{a}-{b}" for a, b in conflicts)
    return failed(
        ValidationReason.INCOMPATIBLE_COMBINATION.value,
        f"Configuration contains incompatible combinations: {listed}",
        incompatibilities=conflicts,
    )


def check_availability(
    selected_ids: Sequence[int],
    records: Mapping[int, InventoryRecord],
) -> RuleResult:
    """Every selected option must have a record that is in stock with quantity > 0."""
    unavailable = [
        option_id
        for option_id in selected_ids
        if not _available(records.get(option_id))
    ]
    if not unavailable:
        return passed(ValidationReason.OUT_OF_STOCK.value, "All selected options in stock")
    return failed(
        ValidationReason.OUT_OF_STOCK.value,
        f"Some selected options are out of stock: {unavailable}",
        unavailable_options=unavailable,
    )


def _available(record: InventoryRecord | None) -> bool:
    return record is not None and record.in_stock and record.quantity > 0
