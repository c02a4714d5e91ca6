"""Value types consumed and produced by the configuration engine.

Catalog facts are frozen dataclasses; stores build them from rows and the
engine never mutates them. Money is Decimal everywhere.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Catalog facts
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Product:
    id: int
    name: str
    base_price: Decimal
    part_type_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class PartType:
    id: int
    name: str
    required: bool = True


@dataclass(frozen=True)
class PartOption:
    id: int
    part_type_id: int
    name: str
    base_price: Decimal
    description: str | None = None
    active: bool = True


@dataclass(frozen=True)
class InventoryRecord:
    """Stock for one option. `in_stock` is derived, never stored."""

    part_option_id: int
    quantity: int = 0
    expected_restock_date: date | None = None

    @property
    def in_stock(self) -> bool:
        return self.quantity > 0

    @classmethod
    def missing(cls, part_option_id: int) -> "InventoryRecord":
        """Record used when an option has no inventory row: nothing in stock."""
        return cls(part_option_id=part_option_id, quantity=0)


@dataclass(frozen=True)
class IncompatibilityEdge:
    """Selecting `from_option_id` excludes `to_option_id` (checked both ways)."""

    rule_id: int
    from_option_id: int
    to_option_id: int


@dataclass(frozen=True)
class PricingRule:
    id: int
    name: str
    adjustment: Decimal
    is_percentage: bool
    condition_option_ids: frozenset[int]


class DecrementOutcome(str, Enum):
    OK = "ok"
    INSUFFICIENT = "insufficient"


# ---------------------------------------------------------------------------
# Engine results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AppliedAdjustment:
    """One step of the sequential adjustment pass."""

    rule_id: int
    name: str
    value: Decimal
    is_percentage: bool
    amount: Decimal
    running_total: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "name": self.name,
            "value": self.value,
            "is_percentage": self.is_percentage,
            "amount": self.amount,
            "running_total": self.running_total,
        }


@dataclass(frozen=True)
class OptionPrice:
    base_price: Decimal
    final_price: Decimal
    applied_adjustments: tuple[AppliedAdjustment, ...] = ()


@dataclass(frozen=True)
class AvailableOption:
    """A still-choosable option with its stock status and live price."""

    option: PartOption
    inventory: InventoryRecord
    price: OptionPrice

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.option.id,
            "part_type_id": self.option.part_type_id,
            "name": self.option.name,
            "description": self.option.description,
            "base_price": self.price.base_price,
            "final_price": self.price.final_price,
            "price_adjustments": [a.to_dict() for a in self.price.applied_adjustments],
            "inventory": {
                "quantity": self.inventory.quantity,
                "in_stock": self.inventory.in_stock,
                "expected_restock_date": self.inventory.expected_restock_date,
            },
        }


@dataclass(frozen=True)
class PriceBreakdown:
    base_price: Decimal
    option_price_sum: Decimal
    adjustments: tuple[AppliedAdjustment, ...]
    total_price: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "base_price": self.base_price,
            "option_price_sum": self.option_price_sum,
            "adjustments": [a.to_dict() for a in self.adjustments],
            "total_price": self.total_price,
        }


class ValidationReason(str, Enum):
    MISSING_REQUIRED = "missing-required"
    INCOMPATIBLE_COMBINATION = "incompatible-combination"
    OUT_OF_STOCK = "out-of-stock"


@dataclass(frozen=True)
class ValidationResult:
    """Binary outcome of validating a full selection set."""

    valid: bool
    message: str
    reason: ValidationReason | None = None
    missing_part_types: tuple[str, ...] = ()
    duplicated_part_types: tuple[str, ...] = ()
    incompatibilities: tuple[tuple[int, int], ...] = ()
    unavailable_options: tuple[int, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "message": self.message,
            "reason": self.reason.value if self.reason else None,
            "missing_part_types": list(self.missing_part_types),
            "duplicated_part_types": list(self.duplicated_part_types),
            "incompatibilities": [list(pair) for pair in self.incompatibilities],
            "unavailable_options": list(self.unavailable_options),
        }


@dataclass(frozen=True)
class ReservationResult:
    """Outcome of validate-then-decrement for one configuration."""

    validation: ValidationResult
    reserved_option_ids: tuple[int, ...] = ()
    quantity: int = 0
    price: PriceBreakdown | None = None

    @property
    def reserved(self) -> bool:
        return self.validation.valid
