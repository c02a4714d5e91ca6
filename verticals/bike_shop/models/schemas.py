"""Pydantic schemas for API request/response validation."""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class SelectionRequest(BaseModel):
    selections: list[int] = Field(default_factory=list)


class ReservationRequest(SelectionRequest):
    quantity: Optional[int] = Field(None, ge=1)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class AdjustmentResponse(BaseModel):
    rule_id: int
    name: str
    value: Decimal
    is_percentage: bool
    amount: Decimal
    running_total: Decimal


class InventoryResponse(BaseModel):
    quantity: int
    in_stock: bool
    expected_restock_date: Optional[date] = None


class OptionResponse(BaseModel):
    id: int
    part_type_id: int
    name: str
    description: Optional[str] = None
    base_price: Decimal
    final_price: Decimal
    price_adjustments: list[AdjustmentResponse] = []
    inventory: InventoryResponse


class OptionListResponse(BaseModel):
    data: list[OptionResponse]
    count: int


class PriceResponse(BaseModel):
    base_price: Decimal
    option_price_sum: Decimal
    adjustments: list[AdjustmentResponse] = []
    total_price: Decimal


class ValidationResponse(BaseModel):
    valid: bool
    message: str
    reason: Optional[str] = None
    missing_part_types: list[str] = []
    duplicated_part_types: list[str] = []
    incompatibilities: list[list[int]] = []
    unavailable_options: list[int] = []


class ReservationResponse(BaseModel):
    reserved: bool
    reserved_option_ids: list[int] = []
    quantity: int = 0
    price: Optional[PriceResponse] = None
    validation: ValidationResponse
