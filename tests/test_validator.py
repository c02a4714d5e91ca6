"""Test configuration validation gates and their ordering."""
import pytest

from verticals.bike_shop.errors import DataAccessError, NotFoundError
from verticals.bike_shop.models.domain import ValidationReason
from verticals.bike_shop.validator import VALID_MESSAGE, ConfigurationValidator

from conftest import small_inventory


@pytest.mark.asyncio
async def test_valid_configuration(catalog, inventory):
    result = await ConfigurationValidator(catalog, inventory).validate(1, [10, 20])
    assert result.valid
    assert result.reason is None
    assert result.message == VALID_MESSAGE


@pytest.mark.asyncio
async def test_optional_part_type_may_be_left_out(catalog, inventory):
    result = await ConfigurationValidator(catalog, inventory).validate(1, [11, 20])
    assert result.valid


@pytest.mark.asyncio
async def test_missing_required_names_the_part_types(catalog, inventory):
    result = await ConfigurationValidator(catalog, inventory).validate(1, [30])
    assert not result.valid
    assert result.reason is ValidationReason.MISSING_REQUIRED
    assert result.missing_part_types == ("Frame", "Wheels")
    assert inventory.calls["get"] == 0


@pytest.mark.asyncio
async def test_two_options_of_one_type_fail_completeness(catalog, inventory):
    result = await ConfigurationValidator(catalog, inventory).validate(1, [10, 11, 20])
    assert result.reason is ValidationReason.MISSING_REQUIRED
    assert result.duplicated_part_types == ("Frame",)
    assert result.missing_part_types == ()


@pytest.mark.asyncio
async def test_incompatible_pair_stops_before_stock_check(catalog, inventory):
    result = await ConfigurationValidator(catalog, inventory).validate(1, [10, 21])
    assert result.reason is ValidationReason.INCOMPATIBLE_COMBINATION
    assert result.incompatibilities == ((10, 21),)
    assert inventory.calls["get"] == 0


@pytest.mark.asyncio
async def test_out_of_stock_lists_only_unavailable_options(catalog, inventory):
    result = await ConfigurationValidator(catalog, inventory).validate(1, [11, 21])
    assert result.reason is ValidationReason.OUT_OF_STOCK
    assert result.unavailable_options == (21,)


@pytest.mark.asyncio
async def test_option_without_inventory_row_is_out_of_stock(catalog, inventory):
    result = await ConfigurationValidator(catalog, inventory).validate(1, [11, 20, 30])
    assert result.reason is ValidationReason.OUT_OF_STOCK
    assert result.unavailable_options == (30,)


@pytest.mark.asyncio
async def test_validation_is_repeatable(catalog, inventory):
    validator = ConfigurationValidator(catalog, inventory)
    first = await validator.validate(1, [11, 21])
    second = await validator.validate(1, [21, 11])
    assert first.to_dict() == second.to_dict()


@pytest.mark.asyncio
async def test_result_serialises_reason_code(catalog, inventory):
    result = await ConfigurationValidator(catalog, inventory).validate(1, [10, 21])
    payload = result.to_dict()
    assert payload["valid"] is False
    assert payload["reason"] == "incompatible-combination"


@pytest.mark.asyncio
async def test_unknown_product_raises(catalog, inventory):
    with pytest.raises(NotFoundError):
        await ConfigurationValidator(catalog, inventory).validate(42, [10, 20])


@pytest.mark.asyncio
async def test_unknown_option_raises(catalog, inventory):
    with pytest.raises(NotFoundError) as exc_info:
        await ConfigurationValidator(catalog, inventory).validate(1, [10, 20, 555])
    assert exc_info.value.ids == [555]


@pytest.mark.asyncio
async def test_store_failure_propagates(catalog):
    validator = ConfigurationValidator(catalog, small_inventory(fail=True))
    with pytest.raises(DataAccessError):
        await validator.validate(1, [10, 20])


@pytest.mark.asyncio
async def test_two_options_of_an_optional_type_fail_completeness(catalog, inventory):
    result = await ConfigurationValidator(catalog, inventory).validate(1, [10, 20, 30, 31])
    assert not result.valid
    assert result.reason is ValidationReason.MISSING_REQUIRED
    assert result.duplicated_part_types == ("Bell",)
    assert result.missing_part_types == ()
    assert result.message == "More than one selection for: Bell"


@pytest.mark.asyncio
async def test_option_from_another_product_raises(catalog, inventory):
    with pytest.raises(NotFoundError) as exc_info:
        await ConfigurationValidator(catalog, inventory).validate(1, [10, 20, 90])
    assert exc_info.value.entity == "PartOption"
    assert exc_info.value.ids == [90]
    assert inventory.calls["get"] == 0
