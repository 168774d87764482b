import pytest
from unittest.mock import AsyncMock, MagicMock

from shopsavvy.core.client import ShopSavvyClient
from shopsavvy.core.command_handler import EXIT_FAILURE, EXIT_OK, CommandHandler
from shopsavvy.domain.errors import BatchConfigurationError, NotFoundError, RateLimitError
from shopsavvy.domain.interfaces.user_interface import UserInterface
from shopsavvy.domain.models.common import MonitoringFrequency
from shopsavvy.domain.models.products import (
    ApiResponse,
    ProductDetails,
    ProductSearchResult,
    RemoveResponse,
    ScheduleBatchResponse,
)
from shopsavvy.domain.models.results import BatchResult, Outcome


@pytest.fixture
def mock_client():
    client = MagicMock(spec=ShopSavvyClient)
    for name in (
        "search_products", "get_product_details", "get_product_details_batch", "get_product_details_many",
        "get_current_offers", "get_current_offers_many", "get_price_history", "schedule_product_monitoring",
        "schedule_product_monitoring_batch", "get_scheduled_products", "remove_product_from_schedule",
        "remove_products_from_schedule", "get_usage", "aclose",
    ):
        setattr(client, name, AsyncMock())
    return client


@pytest.fixture
def mock_ui():
    return MagicMock(spec=UserInterface)


@pytest.fixture
def command_handler(mock_client, mock_ui):
    """Fixture to create CommandHandler with a mocked client and UI."""
    return CommandHandler(client=mock_client, ui=mock_ui)


def products_response(*titles):
    return ApiResponse(success=True, data=[ProductDetails(title=t, shopsavvy=f"ss_{t}") for t in titles])


async def test_handle_product_single(command_handler, mock_client, mock_ui):
    mock_client.get_product_details.return_value = products_response("Echo")

    assert await command_handler.handle_product(["0123"]) == EXIT_OK

    mock_client.get_product_details.assert_awaited_once_with("0123")
    mock_ui.display_products.assert_called_once()


async def test_handle_product_several_uses_batch_endpoint(command_handler, mock_client):
    mock_client.get_product_details_batch.return_value = products_response("A", "B")
    await command_handler.handle_product(["a", "b"])
    mock_client.get_product_details_batch.assert_awaited_once_with(["a", "b"])


async def test_api_error_is_displayed(command_handler, mock_client, mock_ui):
    mock_client.get_product_details.side_effect = NotFoundError("Product not found")

    assert await command_handler.handle_product(["0123"]) == EXIT_FAILURE

    mock_ui.display_error.assert_called_once_with("Product not found (not_found)")
    mock_ui.display_products.assert_not_called()


async def test_configuration_error_is_displayed(command_handler, mock_client, mock_ui):
    mock_client.get_product_details_many.side_effect = BatchConfigurationError("identifier 1 must be a non-empty string")
    assert await command_handler.handle_batch(["a", ""]) == EXIT_FAILURE
    mock_ui.display_error.assert_called_once_with("identifier 1 must be a non-empty string")


async def test_handle_search_shows_pagination(command_handler, mock_client, mock_ui):
    mock_client.search_products.return_value = ProductSearchResult.from_dict({
        "success": True,
        "data": [{"title": "Echo", "shopsavvy": "ss_1"}],
        "pagination": {"total": 30, "limit": 1, "offset": 0, "returned": 1},
    })

    assert await command_handler.handle_search("echo", limit=1) == EXIT_OK

    mock_client.search_products.assert_awaited_once_with("echo", limit=1, offset=None)
    mock_ui.display_info.assert_any_call("Showing 1 of 30 (offset 0)")


async def test_handle_history_defaults_to_last_30_days(command_handler, mock_client):
    mock_client.get_price_history.return_value = ApiResponse(success=True, data=[])
    await command_handler.handle_history("0123", end_date="2024-03-31")
    mock_client.get_price_history.assert_awaited_once_with("0123", "2024-03-01", "2024-03-31", retailer=None)


async def test_handle_history_rejects_bad_date(command_handler, mock_client, mock_ui):
    assert await command_handler.handle_history("0123", end_date="31/03/2024") == EXIT_FAILURE
    mock_client.get_price_history.assert_not_awaited()
    mock_ui.display_error.assert_called_once()


async def test_handle_batch_partial_failure(command_handler, mock_client, mock_ui):
    result = BatchResult([
        Outcome(value=products_response("A"), attempts=1),
        Outcome(error=RateLimitError(), attempts=3),
    ])
    mock_client.get_product_details_many.return_value = result

    assert await command_handler.handle_batch(["a", "b"], concurrency_limit=2) == EXIT_FAILURE

    mock_client.get_product_details_many.assert_awaited_once_with(["a", "b"], concurrency_limit=2)
    mock_ui.display_batch.assert_called_once_with(["a", "b"], result, title="Products")
    mock_ui.display_warning.assert_called_once_with("1 of 2 lookups failed.")


async def test_handle_batch_offers(command_handler, mock_client):
    mock_client.get_current_offers_many.return_value = BatchResult([Outcome(value=ApiResponse(success=True, data=[]), attempts=1)])
    assert await command_handler.handle_batch(["a"], offers=True, retailer="amazon") == EXIT_OK
    mock_client.get_current_offers_many.assert_awaited_once_with(["a"], retailer="amazon", concurrency_limit=None)


async def test_handle_schedule_many(command_handler, mock_client, mock_ui):
    mock_client.schedule_product_monitoring_batch.return_value = ApiResponse(success=True, data=[
        ScheduleBatchResponse(identifier="a", scheduled=True, product_id="ss_a"),
        ScheduleBatchResponse(identifier="b", scheduled=False, product_id=""),
    ])

    await command_handler.handle_schedule(["a", "b"], MonitoringFrequency.WEEKLY)

    mock_ui.display_info.assert_any_call("a: scheduled (weekly)")
    mock_ui.display_info.assert_any_call("b: not scheduled (weekly)")


async def test_handle_unschedule_single(command_handler, mock_client, mock_ui):
    mock_client.remove_product_from_schedule.return_value = ApiResponse(success=True, data=RemoveResponse(removed=True))
    assert await command_handler.handle_unschedule(["a"]) == EXIT_OK
    mock_ui.display_info.assert_called_once_with("a: removed")


async def test_close_releases_client(command_handler, mock_client):
    await command_handler.close()
    mock_client.aclose.assert_awaited_once()
