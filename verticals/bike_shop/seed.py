"""Example catalogue for the bike shop.

Two bicycles sharing five part types, thirteen options, stock levels (the
fat bike wheels are sold out), two incompatibility rules and the finish
surcharges that depend on the chosen frame.

Run ``python -m verticals.bike_shop.seed`` to rebuild the tables in
DATABASE_URL and load this data.
"""

import asyncio
import logging
from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from core.observability.logging_setup import setup_logging
from verticals.bike_shop.models.db_models import (
    Category,
    IncompatibilityRule,
    Inventory,
    PartOption,
    PartType,
    PricingRule,
    PricingRuleCondition,
    Product,
    ProductPartType,
    RuleCondition,
)

logger = logging.getLogger(__name__)

CATEGORIES = [
    {"id": 1, "name": "Bicycles", "description": "All types of bicycles available for customization"},
    {"id": 2, "name": "Skis", "description": "Winter sports equipment"},
]

PRODUCTS = [
    {"id": 1, "category_id": 1, "name": "Adventure Bike",
     "description": "Perfect for trail and mountain riding", "base_price": Decimal("120.00")},
    {"id": 2, "category_id": 1, "name": "City Cruiser",
     "description": "Comfortable ride for urban environments", "base_price": Decimal("100.00")},
]

PART_TYPES = [
    {"id": 1, "name": "Frame Type", "description": "The main structure of the bicycle"},
    {"id": 2, "name": "Frame Finish", "description": "Surface treatment and color of the frame"},
    {"id": 3, "name": "Wheels", "description": "Type of wheels that determine the riding surface"},
    {"id": 4, "name": "Rim Color", "description": "Color of the wheel rims"},
    {"id": 5, "name": "Chain", "description": "Type of chain that affects gearing"},
]

PART_OPTIONS = [
    # Frame types
    {"id": 1, "part_type_id": 1, "name": "Full-suspension",
     "description": "Front and rear shock absorbers for rough terrain", "base_price": Decimal("130.00")},
    {"id": 2, "part_type_id": 1, "name": "Diamond",
     "description": "Traditional frame design with improved stability", "base_price": Decimal("100.00")},
    {"id": 3, "part_type_id": 1, "name": "Step-through",
     "description": "Low top tube for easy mounting and dismounting", "base_price": Decimal("110.00")},
    # Frame finishes (matte is priced by the frame it goes on, see PRICING_RULES)
    {"id": 4, "part_type_id": 2, "name": "Matte",
     "description": "Non-reflective finish", "base_price": Decimal("0.00")},
    {"id": 5, "part_type_id": 2, "name": "Shiny",
     "description": "Glossy reflective finish", "base_price": Decimal("30.00")},
    # Wheels
    {"id": 6, "part_type_id": 3, "name": "Road Wheels",
     "description": "Thin, fast wheels for paved surfaces", "base_price": Decimal("80.00")},
    {"id": 7, "part_type_id": 3, "name": "Mountain Wheels",
     "description": "Sturdy wheels with good traction for trails", "base_price": Decimal("95.00")},
    {"id": 8, "part_type_id": 3, "name": "Fat Bike Wheels",
     "description": "Extra wide wheels for sand and snow", "base_price": Decimal("120.00")},
    # Rim colors
    {"id": 9, "part_type_id": 4, "name": "Red",
     "description": "Bright red color", "base_price": Decimal("20.00")},
    {"id": 10, "part_type_id": 4, "name": "Black",
     "description": "Classic black color", "base_price": Decimal("15.00")},
    {"id": 11, "part_type_id": 4, "name": "Blue",
     "description": "Deep blue color", "base_price": Decimal("20.00")},
    # Chains
    {"id": 12, "part_type_id": 5, "name": "Single-speed Chain",
     "description": "Simple chain for bikes without gears", "base_price": Decimal("43.00")},
    {"id": 13, "part_type_id": 5, "name": "8-speed Chain",
     "description": "Chain compatible with 8-speed gear systems", "base_price": Decimal("55.00")},
]

INVENTORY = [
    {"part_option_id": 1, "quantity": 15},
    {"part_option_id": 2, "quantity": 20},
    {"part_option_id": 3, "quantity": 18},
    {"part_option_id": 4, "quantity": 50},
    {"part_option_id": 5, "quantity": 40},
    {"part_option_id": 6, "quantity": 25},
    {"part_option_id": 7, "quantity": 10},
    {"part_option_id": 8, "quantity": 0, "expected_restock_date": date(2025, 6, 15)},
    {"part_option_id": 9, "quantity": 30},
    {"part_option_id": 10, "quantity": 35},
    {"part_option_id": 11, "quantity": 15},
    {"part_option_id": 12, "quantity": 45},
    {"part_option_id": 13, "quantity": 40},
]

INCOMPATIBILITY_RULES = [
    {"id": 1, "name": "Mountain wheels require full-suspension",
     "description": "Mountain wheels can only be used with full-suspension frames",
     "edges": [(7, 2), (7, 3)]},
    {"id": 2, "name": "Fat wheels with rim colors",
     "description": "Red rim color unavailable with fat bike wheels",
     "edges": [(8, 9)]},
]

PRICING_RULES = [
    {"id": 1, "name": "Matte finish on full-suspension frame",
     "price_adjustment": Decimal("50.00"), "is_percentage": False, "conditions": [1, 4]},
    {"id": 2, "name": "Matte finish on diamond frame",
     "price_adjustment": Decimal("35.00"), "is_percentage": False, "conditions": [2, 4]},
    {"id": 3, "name": "Matte finish on step-through frame",
     "price_adjustment": Decimal("40.00"), "is_percentage": False, "conditions": [3, 4]},
    {"id": 4, "name": "Shiny finish with red rims",
     "price_adjustment": Decimal("10.00"), "is_percentage": True, "conditions": [5, 9]},
]


async def seed_catalog(session: AsyncSession) -> None:
    """Insert the example catalogue. Expects empty tables."""
    session.add_all(Category(**row) for row in CATEGORIES)
    session.add_all(PartType(**row) for row in PART_TYPES)
    await session.flush()

    session.add_all(Product(**row) for row in PRODUCTS)
    session.add_all(PartOption(**row) for row in PART_OPTIONS)
    await session.flush()

    for product in PRODUCTS:
        session.add_all(
            ProductPartType(product_id=product["id"], part_type_id=pt["id"], display_order=order)
            for order, pt in enumerate(PART_TYPES, start=1)
        )
    session.add_all(Inventory(**row) for row in INVENTORY)

    for rule in INCOMPATIBILITY_RULES:
        session.add(
            IncompatibilityRule(
                id=rule["id"],
                name=rule["name"],
                description=rule["description"],
                conditions=[
                    RuleCondition(part_option_id=a, incompatible_with_part_option_id=b)
                    for a, b in rule["edges"]
                ],
            )
        )

    for rule in PRICING_RULES:
        session.add(
            PricingRule(
                id=rule["id"],
                name=rule["name"],
                price_adjustment=rule["price_adjustment"],
                is_percentage=rule["is_percentage"],
                conditions=[PricingRuleCondition(part_option_id=i) for i in rule["conditions"]],
            )
        )
    await session.flush()
    logger.info(
        "Seeded %d products, %d part options, %d incompatibility and %d pricing rules",
        len(PRODUCTS), len(PART_OPTIONS), len(INCOMPATIBILITY_RULES), len(PRICING_RULES),
    )


async def main() -> None:
    from core.database import close_db, get_session_context, init_db

    await init_db(drop_existing=True)
    async with get_session_context() as session:
        await seed_catalog(session)
    await close_db()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main())
