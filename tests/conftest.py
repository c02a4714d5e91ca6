"""Shared fixtures: in-memory store fakes and a seeded SQLite database."""
from collections import Counter
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from core.models.base import Base
from verticals.bike_shop.errors import DataAccessError
from verticals.bike_shop.models.domain import (
    DecrementOutcome,
    IncompatibilityEdge,
    InventoryRecord,
    PartOption,
    PartType,
    PricingRule,
    Product,
)
from verticals.bike_shop.seed import seed_catalog


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeCatalogStore:
    """CatalogStore over plain lists, counting calls per method."""

    def __init__(self, products, part_types, options, edges=(), pricing_rules=(),
                 reverse_rules=False):
        self.products = {p.id: p for p in products}
        self.part_types = {pt.id: pt for pt in part_types}
        self.options = {o.id: o for o in options}
        self.edges = list(edges)
        self.rules = list(pricing_rules)
        self.reverse_rules = reverse_rules
        self.calls = Counter()

    async def get_product(self, product_id):
        self.calls["get_product"] += 1
        return self.products.get(product_id)

    async def part_types_for_product(self, product_id):
        self.calls["part_types_for_product"] += 1
        product = self.products[product_id]
        return [self.part_types[i] for i in product.part_type_ids]

    async def required_part_types(self, product_id):
        self.calls["required_part_types"] += 1
        return [pt for pt in await self.part_types_for_product(product_id) if pt.required]

    async def options_for_part_type(self, part_type_id):
        self.calls["options_for_part_type"] += 1
        return sorted(
            (o for o in self.options.values() if o.part_type_id == part_type_id and o.active),
            key=lambda o: o.id,
        )

    async def get_options(self, option_ids):
        self.calls["get_options"] += 1
        return [self.options[i] for i in sorted(set(option_ids))
                if i in self.options and self.options[i].active]

    async def incompatibility_edges(self, option_ids):
        self.calls["incompatibility_edges"] += 1
        ids = set(option_ids)
        return [e for e in self.edges if e.from_option_id in ids or e.to_option_id in ids]

    async def pricing_rules(self, option_ids):
        self.calls["pricing_rules"] += 1
        ids = set(option_ids)
        rules = [r for r in sorted(self.rules, key=lambda r: r.id)
                 if r.condition_option_ids and r.condition_option_ids <= ids]
        return list(reversed(rules)) if self.reverse_rules else rules


class FakeInventoryStore:
    """InventoryStore over a dict of quantities. `fail=True` simulates an outage."""

    def __init__(self, records=(), fail=False):
        self.records = {r.part_option_id: r for r in records}
        self.fail = fail
        self.calls = Counter()

    async def get(self, option_ids):
        self.calls["get"] += 1
        if self.fail:
            raise DataAccessError("inventory backend unavailable")
        return [self.records[i] for i in option_ids if i in self.records]

    async def decrement(self, option_id, quantity):
        self.calls["decrement"] += 1
        record = self.records.get(option_id)
        if record is None or record.quantity < quantity:
            return DecrementOutcome.INSUFFICIENT
        self.records[option_id] = InventoryRecord(
            option_id, record.quantity - quantity, record.expected_restock_date
        )
        return DecrementOutcome.OK


# ---------------------------------------------------------------------------
# Small catalogue for component tests
#
#   product 1 (base 100): Frame (required), Wheels (required), Bell (optional)
#   options: 10 Frame A 20, 11 Frame B 25, 20 Wheel X 30, 21 Wheel Y 40,
#            30 Bell 5, 31 Brass bell 8
#   part type 9 (option 90) belongs to another product
#   edge: 21 -> 10; rules: #1 +10 and #2 +10% on {10, 20}
#   stock: 21 sold out, 30 has no inventory row
# ---------------------------------------------------------------------------

FRAME, WHEELS, BELL = 1, 2, 3
SKI_BINDING = 9


def small_catalog(**kwargs) -> FakeCatalogStore:
    return FakeCatalogStore(
        products=[Product(1, "Test Bike", Decimal("100.00"), (FRAME, WHEELS, BELL))],
        part_types=[
            PartType(FRAME, "Frame"),
            PartType(WHEELS, "Wheels"),
            PartType(BELL, "Bell", required=False),
            PartType(SKI_BINDING, "Ski Binding"),
        ],
        options=[
            PartOption(10, FRAME, "Frame A", Decimal("20.00")),
            PartOption(11, FRAME, "Frame B", Decimal("25.00")),
            PartOption(12, FRAME, "Retired frame", Decimal("10.00"), active=False),
            PartOption(20, WHEELS, "Wheel X", Decimal("30.00")),
            PartOption(21, WHEELS, "Wheel Y", Decimal("40.00")),
            PartOption(30, BELL, "Bell", Decimal("5.00")),
            PartOption(31, BELL, "Brass bell", Decimal("8.00")),
            PartOption(90, SKI_BINDING, "Touring binding", Decimal("40.00")),
        ],
        edges=[IncompatibilityEdge(rule_id=1, from_option_id=21, to_option_id=10)],
        pricing_rules=[
            PricingRule(1, "Combo fixed", Decimal("10"), False, frozenset({10, 20})),
            PricingRule(2, "Combo percent", Decimal("10"), True, frozenset({10, 20})),
        ],
        **kwargs,
    )


def small_inventory(**kwargs) -> FakeInventoryStore:
    return FakeInventoryStore(
        records=[
            InventoryRecord(10, 5),
            InventoryRecord(11, 3),
            InventoryRecord(20, 2),
            InventoryRecord(21, 0, date(2025, 6, 15)),
        ],
        **kwargs,
    )


@pytest.fixture
def catalog():
    return small_catalog()


@pytest.fixture
def inventory():
    return small_inventory()


# ---------------------------------------------------------------------------
# Seeded SQLite database
# ---------------------------------------------------------------------------

@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as session:
        await seed_catalog(session)
        await session.commit()
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session
