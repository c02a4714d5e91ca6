"""Bike shop API router — configurator endpoints.

Standard router pattern:
- Live option lists while a customer configures a product
- Price and validation of a full configuration
- Stock reservation for checkout
- Services injected via FastAPI Depends

NotFoundError and DataAccessError are mapped to HTTP responses by the
application's exception handlers.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from verticals.bike_shop.errors import InsufficientStockError
from verticals.bike_shop.models.schemas import (
    OptionListResponse,
    PriceResponse,
    ReservationRequest,
    ReservationResponse,
    SelectionRequest,
    ValidationResponse,
)
from verticals.bike_shop.reservation import ReservationService, get_reservation_service
from verticals.bike_shop.service import ConfigurationService, get_configuration_service

router = APIRouter()


# ============================================================================
# Configuration Endpoints
# ============================================================================

@router.get(
    "/products/{product_id}/part-types/{part_type_id}/options",
    response_model=OptionListResponse,
)
async def list_available_options(
    product_id: int,
    part_type_id: int,
    selected: list[int] = Query(default=[]),
    service: ConfigurationService = Depends(get_configuration_service),
):
    """Options of a part type still choosable given the current selections."""
    options = await service.get_available_options(product_id, part_type_id, selected)
    data = [option.to_dict() for option in options]
    return {"data": data, "count": len(data)}


@router.post("/products/{product_id}/price", response_model=PriceResponse)
async def price_configuration(
    product_id: int,
    request: SelectionRequest,
    service: ConfigurationService = Depends(get_configuration_service),
):
    """Total price of a configuration with every pricing rule applied."""
    breakdown = await service.calculate_total_price(product_id, request.selections)
    return breakdown.to_dict()


@router.post("/products/{product_id}/validate", response_model=ValidationResponse)
async def validate_configuration(
    product_id: int,
    request: SelectionRequest,
    service: ConfigurationService = Depends(get_configuration_service),
):
    """Validate a full configuration. Invalid configurations are still a 200."""
    result = await service.validate_configuration(product_id, request.selections)
    return result.to_dict()


# ============================================================================
# Reservation Endpoint
# ============================================================================

@router.post(
    "/products/{product_id}/reservations",
    response_model=ReservationResponse,
    status_code=201,
)
async def reserve_configuration(
    product_id: int,
    request: ReservationRequest,
    response: Response,
    service: ReservationService = Depends(get_reservation_service),
):
    """Validate a configuration and reserve stock for it in one transaction."""
    try:
        result = await service.reserve(product_id, request.selections, request.quantity)
    except InsufficientStockError as exc:
        raise HTTPException(
            status_code=409,
            detail={"message": str(exc), "option_ids": exc.option_ids},
        ) from exc

    if not result.reserved:
        response.status_code = 422

    return {
        "reserved": result.reserved,
        "reserved_option_ids": list(result.reserved_option_ids),
        "quantity": result.quantity,
        "price": result.price.to_dict() if result.price else None,
        "validation": result.validation.to_dict(),
    }
