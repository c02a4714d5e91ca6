"""Reservation — validate a configuration and take its stock as one unit.

The engine itself only reads. This collaborator owns the transaction:
validation, pricing and every conditional decrement run in a single
session transaction, so either all selected options are reserved or none.
"""

import logging
from typing import Sequence

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.database import get_session_factory
from verticals.bike_shop.config import ConfiguratorConfig, config as default_config
from verticals.bike_shop.errors import InsufficientStockError
from verticals.bike_shop.models.domain import DecrementOutcome, ReservationResult
from verticals.bike_shop.repository import SqlCatalogStore, SqlInventoryStore
from verticals.bike_shop.service import ConfigurationService

logger = logging.getLogger(__name__)


class ReservationService:
    """Checkout-side unit of work around validation + stock decrement."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        config: ConfiguratorConfig | None = None,
    ):
        self.session_factory = session_factory
        self.config = config or ConfiguratorConfig.default()

    async def reserve(
        self,
        product_id: int,
        selections: Sequence[int],
        quantity: int | None = None,
    ) -> ReservationResult:
        """Reserve `quantity` units of every selected option.

        Returns an unreserved result carrying the ValidationResult when the
        configuration is invalid. Raises InsufficientStockError (after rolling
        back every decrement) when stock ran out between validation and the
        decrement.
        """
        qty = quantity if quantity is not None else self.config.inventory.reservation_quantity
        if qty <= 0:
            raise ValueError(f"Reservation quantity must be positive, got {qty}")

        async with self.session_factory() as session, session.begin():
            inventory = SqlInventoryStore(session)
            service = ConfigurationService(SqlCatalogStore(session), inventory, self.config)
            option_ids = service.normalize_selections(selections)

            validation = await service.validate_configuration(product_id, option_ids)
            if not validation.valid:
                return ReservationResult(validation=validation)

            price = await service.calculate_total_price(product_id, option_ids)

            short = [
                option_id
                for option_id in option_ids
                if await inventory.decrement(option_id, qty) is DecrementOutcome.INSUFFICIENT
            ]
            if short:
                logger.warning(
                    "Reservation for product %s rolled back, insufficient stock for %s",
                    product_id, short,
                )
                # Raising inside session.begin() rolls back the decrements above.
                raise InsufficientStockError(short)

        logger.info(
            "Reserved %d x %s for product %s (total %s)",
            qty, option_ids, product_id, price.total_price,
        )
        return ReservationResult(
            validation=validation,
            reserved_option_ids=tuple(option_ids),
            quantity=qty,
            price=price,
        )


# ---------------------------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------------------------

def get_reservation_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> ReservationService:
    """FastAPI dependency for ReservationService."""
    return ReservationService(session_factory, default_config)
