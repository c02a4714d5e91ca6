"""Test the configuration service façade and its settings."""
from decimal import Decimal

import pytest

from verticals.bike_shop.config import ConfiguratorConfig, InventoryConfig
from verticals.bike_shop.errors import NotFoundError
from verticals.bike_shop.service import ConfigurationService

from conftest import BELL, FRAME, WHEELS


@pytest.mark.asyncio
async def test_available_options_carry_stock_and_live_price(catalog, inventory):
    service = ConfigurationService(catalog, inventory)
    options = await service.get_available_options(1, WHEELS, [10])

    # wheel 21 is incompatible with frame 10
    assert [o.option.id for o in options] == [20]
    wheel = options[0].to_dict()
    assert wheel["final_price"] == Decimal("44.00")
    assert wheel["inventory"] == {"quantity": 2, "in_stock": True, "expected_restock_date": None}
    assert [a["rule_id"] for a in wheel["price_adjustments"]] == [1, 2]


@pytest.mark.asyncio
async def test_out_of_stock_options_are_listed_by_default(catalog, inventory):
    service = ConfigurationService(catalog, inventory)
    options = await service.get_available_options(1, WHEELS)

    stock = {o.option.id: o.inventory.in_stock for o in options}
    assert stock == {20: True, 21: False}


@pytest.mark.asyncio
async def test_hide_out_of_stock(catalog, inventory):
    config = ConfiguratorConfig(inventory=InventoryConfig(hide_out_of_stock=True))
    service = ConfigurationService(catalog, inventory, config)

    options = await service.get_available_options(1, WHEELS)
    assert [o.option.id for o in options] == [20]
    assert await service.get_available_options(1, BELL) == []


@pytest.mark.asyncio
async def test_inactive_options_are_never_offered(catalog, inventory):
    options = await ConfigurationService(catalog, inventory).get_available_options(1, FRAME)
    assert [o.option.id for o in options] == [10, 11]


@pytest.mark.asyncio
async def test_unknown_product_or_part_type(catalog, inventory):
    service = ConfigurationService(catalog, inventory)
    with pytest.raises(NotFoundError) as exc_info:
        await service.get_available_options(7, WHEELS)
    assert exc_info.value.entity == "Product"

    with pytest.raises(NotFoundError) as exc_info:
        await service.get_available_options(1, 99)
    assert exc_info.value.entity == "PartType"


@pytest.mark.asyncio
async def test_duplicate_selections_are_collapsed(catalog, inventory):
    service = ConfigurationService(catalog, inventory)
    breakdown = await service.calculate_total_price(1, [10, 20, 10])
    assert breakdown.total_price == Decimal("176.00")

    result = await service.validate_configuration(1, [10, 20, 20])
    assert result.valid


@pytest.mark.asyncio
async def test_selection_limit(catalog, inventory):
    config = ConfiguratorConfig(max_selections=2)
    service = ConfigurationService(catalog, inventory, config)
    with pytest.raises(ValueError, match="Too many selections"):
        await service.validate_configuration(1, [10, 20, 30])


def test_normalize_keeps_first_occurrence_order(catalog, inventory):
    service = ConfigurationService(catalog, inventory)
    assert service.normalize_selections([3, 1, 3, 2, 1]) == [3, 1, 2]


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("CONFIGURATOR_MAX_SELECTIONS", "5")
    monkeypatch.setenv("CONFIGURATOR_HIDE_OUT_OF_STOCK", "true")
    monkeypatch.setenv("CONFIGURATOR_CURRENCY_STEP", "1")

    config = ConfiguratorConfig.from_env()
    assert config.max_selections == 5
    assert config.inventory.hide_out_of_stock is True
    assert config.pricing.quantize(Decimal("10.5")) == Decimal("11")


def test_config_defaults(monkeypatch):
    monkeypatch.delenv("CONFIGURATOR_MAX_SELECTIONS", raising=False)
    config = ConfiguratorConfig.default()
    assert config.max_selections == 50
    assert config.inventory.hide_out_of_stock is False
    assert config.inventory.reservation_quantity == 1
