import pytest

from shopsavvy.domain.errors import NetworkError, NotFoundError
from shopsavvy.domain.models.common import MonitoringFrequency, OutputFormat
from shopsavvy.domain.models.products import (
    ApiResponse,
    Offer,
    ProductDetails,
    ProductWithOffers,
    ScheduledProduct,
    UsageInfo,
)
from shopsavvy.domain.models.results import BatchResult, Outcome


def test_product_details_legacy_accessors():
    product = ProductDetails.from_dict({
        "title": "Echo Dot",
        "shopsavvy": "ss_1",
        "amazon": "B07XJ8C8F5",
        "images": ["https://img/1.jpg", "https://img/2.jpg"],
    })
    assert product.name == "Echo Dot"
    assert product.product_id == "ss_1"
    assert product.asin == "B07XJ8C8F5"
    assert product.image_url == "https://img/1.jpg"
    assert product.barcode is None


def test_offer_reads_uppercase_url_and_history():
    offer = Offer.from_dict({
        "id": "o1",
        "retailer": "target",
        "URL": "https://target.com/p",
        "timestamp": "2024-01-01T00:00:00Z",
        "history": [{"date": "2023-12-31", "price": 19.99, "availability": "in_stock"}],
    })
    assert offer.offer_url == "https://target.com/p"
    assert offer.last_updated == "2024-01-01T00:00:00Z"
    assert offer.history[0].price == 19.99


def test_product_with_offers_keeps_product_fields():
    product = ProductWithOffers.from_dict({"title": "Kindle", "shopsavvy": "ss_2", "offers": [{"id": "o1"}, {"id": "o2"}]})
    assert product.title == "Kindle"
    assert [offer.id for offer in product.offers] == ["o1", "o2"]


def test_envelope_reads_nested_meta():
    response = ApiResponse.from_dict(
        {"success": True, "data": {"a": 1}, "meta": {"credits_used": 2, "credits_remaining": 8}},
        lambda data: data,
    )
    assert response.data == {"a": 1}
    assert (response.credits_used, response.credits_remaining) == (2, 8)


def test_envelope_falls_back_to_top_level_credits():
    response = ApiResponse.from_dict({"success": True, "data": [], "credits_used": 3, "credits_remaining": 7}, list)
    assert response.meta is not None
    assert response.credits_used == 3


def test_envelope_without_meta_reports_zero_credits():
    response = ApiResponse.from_dict({"success": False, "data": None, "message": "nope"}, lambda data: data)
    assert response.meta is None
    assert response.credits_used == 0
    assert response.message == "nope"


def test_scheduled_product_optional_fields():
    item = ScheduledProduct.from_dict({"product_id": "ss_1", "identifier": "0123", "frequency": "hourly", "created_at": "2024-01-01"})
    assert item.retailer is None
    assert item.last_refreshed is None


def test_usage_info_legacy_accessors():
    usage = UsageInfo.from_dict({
        "current_period": {
            "start_date": "2024-02-01", "end_date": "2024-02-29",
            "credits_used": 10, "credits_limit": 50, "credits_remaining": 40, "requests_made": 12,
        },
        "usage_percentage": 20,
    })
    assert usage.usage_percentage == 20.0
    assert usage.credits_remaining == 40
    assert (usage.billing_period_start, usage.billing_period_end) == ("2024-02-01", "2024-02-29")


def test_enums_render_wire_values():
    assert str(MonitoringFrequency.WEEKLY) == "weekly"
    assert str(OutputFormat.CSV) == "csv"
    assert MonitoringFrequency("daily") is MonitoringFrequency.DAILY


def test_outcome_unwrap():
    assert Outcome(value=5, attempts=1).unwrap() == 5
    with pytest.raises(NotFoundError):
        Outcome(error=NotFoundError(), attempts=1).unwrap()


def test_batch_result_views():
    result = BatchResult([
        Outcome(value="a", attempts=1),
        Outcome(error=NetworkError(), attempts=3),
        Outcome(value="c", attempts=2),
    ])
    assert len(result) == 3
    assert result.succeeded == [0, 2]
    assert result.failed == [1]
    assert not result.all_succeeded
    assert result.values() == ["a", None, "c"]
    assert [type(error) for error in result.errors()] == [type(None), NetworkError, type(None)]
    assert [outcome.attempts for outcome in result[0:2]] == [1, 3]
