"""Domain models for ShopSavvy Data API payloads.

Each model is a plain dataclass with a `from_dict` constructor that maps the
JSON wire format onto Python attributes. Optional fields default to None
when the server omits them.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")

JsonDict = Dict[str, Any]


def _list_of(items: Optional[List[JsonDict]], parser: Callable[[JsonDict], T]) -> List[T]:
    return [parser(item) for item in items or []]


# --- Envelope ---

@dataclass
class ApiMeta:
    """API response metadata containing credit usage info."""
    credits_used: int = 0
    credits_remaining: int = 0
    rate_limit_remaining: Optional[int] = None

    @classmethod
    def from_dict(cls, data: JsonDict) -> "ApiMeta":
        return cls(
            credits_used=int(data.get("credits_used", 0)),
            credits_remaining=int(data.get("credits_remaining", 0)),
            rate_limit_remaining=data.get("rate_limit_remaining"),
        )


@dataclass
class ApiResponse(Generic[T]):
    """Standard API response wrapper."""
    success: bool
    data: T
    message: Optional[str] = None
    meta: Optional[ApiMeta] = None

    @classmethod
    def from_dict(cls, payload: JsonDict, parse_data: Callable[[Any], T]) -> "ApiResponse[T]":
        meta = payload.get("meta")
        if meta is None and "credits_used" in payload:
            # Older envelopes report credits at the top level.
            meta = {
                "credits_used": payload.get("credits_used", 0),
                "credits_remaining": payload.get("credits_remaining", 0),
            }
        return cls(
            success=bool(payload.get("success", False)),
            data=parse_data(payload.get("data")),
            message=payload.get("message"),
            meta=ApiMeta.from_dict(meta) if meta else None,
        )

    @property
    def credits_used(self) -> int:
        return self.meta.credits_used if self.meta else 0

    @property
    def credits_remaining(self) -> int:
        return self.meta.credits_remaining if self.meta else 0


# --- Products ---

@dataclass
class ProductDetails:
    """Product details information."""
    title: str
    shopsavvy: str
    brand: Optional[str] = None
    category: Optional[str] = None
    images: Optional[List[str]] = None
    barcode: Optional[str] = None
    amazon: Optional[str] = None
    model: Optional[str] = None
    mpn: Optional[str] = None
    color: Optional[str] = None

    @classmethod
    def from_dict(cls, data: JsonDict) -> "ProductDetails":
        return cls(
            title=data.get("title", ""),
            shopsavvy=data.get("shopsavvy", ""),
            brand=data.get("brand"),
            category=data.get("category"),
            images=data.get("images"),
            barcode=data.get("barcode"),
            amazon=data.get("amazon"),
            model=data.get("model"),
            mpn=data.get("mpn"),
            color=data.get("color"),
        )

    # Legacy accessors
    @property
    def name(self) -> str:
        return self.title

    @property
    def product_id(self) -> str:
        return self.shopsavvy

    @property
    def asin(self) -> Optional[str]:
        return self.amazon

    @property
    def image_url(self) -> Optional[str]:
        return self.images[0] if self.images else None


@dataclass
class PriceHistoryEntry:
    """Single price point in history."""
    date: str
    price: float
    availability: str

    @classmethod
    def from_dict(cls, data: JsonDict) -> "PriceHistoryEntry":
        return cls(
            date=data.get("date", ""),
            price=float(data.get("price", 0.0)),
            availability=data.get("availability", ""),
        )


@dataclass
class Offer:
    """Product offer from a retailer."""
    id: str
    retailer: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    availability: Optional[str] = None
    condition: Optional[str] = None
    url: Optional[str] = None
    seller: Optional[str] = None
    timestamp: Optional[str] = None
    history: Optional[List[PriceHistoryEntry]] = None

    @classmethod
    def from_dict(cls, data: JsonDict) -> "Offer":
        history = data.get("history")
        return cls(
            id=data.get("id", ""),
            retailer=data.get("retailer"),
            price=data.get("price"),
            currency=data.get("currency"),
            availability=data.get("availability"),
            condition=data.get("condition"),
            url=data.get("URL", data.get("url")),
            seller=data.get("seller"),
            timestamp=data.get("timestamp"),
            history=_list_of(history, PriceHistoryEntry.from_dict) if history is not None else None,
        )

    # Legacy accessors
    @property
    def offer_id(self) -> str:
        return self.id

    @property
    def offer_url(self) -> Optional[str]:
        return self.url

    @property
    def last_updated(self) -> Optional[str]:
        return self.timestamp


@dataclass
class ProductWithOffers(ProductDetails):
    """Product with nested offers (returned by the offers endpoint)."""
    offers: List[Offer] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: JsonDict) -> "ProductWithOffers":
        product = ProductDetails.from_dict(data)
        return cls(**vars(product), offers=_list_of(data.get("offers"), Offer.from_dict))


@dataclass
class OfferWithHistory:
    """Offer with historical price data."""
    id: str
    retailer: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    availability: Optional[str] = None
    condition: Optional[str] = None
    url: Optional[str] = None
    seller: Optional[str] = None
    timestamp: Optional[str] = None
    price_history: List[PriceHistoryEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: JsonDict) -> "OfferWithHistory":
        return cls(
            id=data.get("id", ""),
            retailer=data.get("retailer"),
            price=data.get("price"),
            currency=data.get("currency"),
            availability=data.get("availability"),
            condition=data.get("condition"),
            url=data.get("URL", data.get("url")),
            seller=data.get("seller"),
            timestamp=data.get("timestamp"),
            price_history=_list_of(data.get("price_history"), PriceHistoryEntry.from_dict),
        )


@dataclass
class PaginationInfo:
    """Pagination info for search results."""
    total: int
    limit: int
    offset: int
    returned: int

    @classmethod
    def from_dict(cls, data: JsonDict) -> "PaginationInfo":
        return cls(
            total=int(data.get("total", 0)),
            limit=int(data.get("limit", 0)),
            offset=int(data.get("offset", 0)),
            returned=int(data.get("returned", 0)),
        )


@dataclass
class ProductSearchResult:
    """Product search result with pagination."""
    success: bool
    data: List[ProductDetails]
    pagination: Optional[PaginationInfo] = None
    meta: Optional[ApiMeta] = None

    @classmethod
    def from_dict(cls, payload: JsonDict) -> "ProductSearchResult":
        pagination = payload.get("pagination")
        meta = payload.get("meta")
        return cls(
            success=bool(payload.get("success", False)),
            data=_list_of(payload.get("data"), ProductDetails.from_dict),
            pagination=PaginationInfo.from_dict(pagination) if pagination else None,
            meta=ApiMeta.from_dict(meta) if meta else None,
        )

    @property
    def credits_used(self) -> int:
        return self.meta.credits_used if self.meta else 0

    @property
    def credits_remaining(self) -> int:
        return self.meta.credits_remaining if self.meta else 0


# --- Monitoring ---

@dataclass
class ScheduledProduct:
    """Scheduled product monitoring information."""
    product_id: str
    identifier: str
    frequency: str
    created_at: str
    retailer: Optional[str] = None
    last_refreshed: Optional[str] = None

    @classmethod
    def from_dict(cls, data: JsonDict) -> "ScheduledProduct":
        return cls(
            product_id=data.get("product_id", ""),
            identifier=data.get("identifier", ""),
            frequency=data.get("frequency", ""),
            created_at=data.get("created_at", ""),
            retailer=data.get("retailer"),
            last_refreshed=data.get("last_refreshed"),
        )


@dataclass
class ScheduleResponse:
    scheduled: bool
    product_id: str

    @classmethod
    def from_dict(cls, data: JsonDict) -> "ScheduleResponse":
        return cls(scheduled=bool(data.get("scheduled", False)), product_id=data.get("product_id", ""))


@dataclass
class ScheduleBatchResponse:
    identifier: str
    scheduled: bool
    product_id: str

    @classmethod
    def from_dict(cls, data: JsonDict) -> "ScheduleBatchResponse":
        return cls(
            identifier=data.get("identifier", ""),
            scheduled=bool(data.get("scheduled", False)),
            product_id=data.get("product_id", ""),
        )


@dataclass
class RemoveResponse:
    removed: bool

    @classmethod
    def from_dict(cls, data: JsonDict) -> "RemoveResponse":
        return cls(removed=bool(data.get("removed", False)))


@dataclass
class RemoveBatchResponse:
    identifier: str
    removed: bool

    @classmethod
    def from_dict(cls, data: JsonDict) -> "RemoveBatchResponse":
        return cls(identifier=data.get("identifier", ""), removed=bool(data.get("removed", False)))


# --- Usage ---

@dataclass
class UsagePeriod:
    """Current billing period details."""
    start_date: str
    end_date: str
    credits_used: int
    credits_limit: int
    credits_remaining: int
    requests_made: int

    @classmethod
    def from_dict(cls, data: JsonDict) -> "UsagePeriod":
        return cls(
            start_date=data.get("start_date", ""),
            end_date=data.get("end_date", ""),
            credits_used=int(data.get("credits_used", 0)),
            credits_limit=int(data.get("credits_limit", 0)),
            credits_remaining=int(data.get("credits_remaining", 0)),
            requests_made=int(data.get("requests_made", 0)),
        )


@dataclass
class UsageInfo:
    """API usage and credit information."""
    current_period: UsagePeriod
    usage_percentage: float

    @classmethod
    def from_dict(cls, data: JsonDict) -> "UsageInfo":
        return cls(
            current_period=UsagePeriod.from_dict(data.get("current_period") or {}),
            usage_percentage=float(data.get("usage_percentage", 0.0)),
        )

    # Legacy accessors
    @property
    def credits_used(self) -> int:
        return self.current_period.credits_used

    @property
    def credits_remaining(self) -> int:
        return self.current_period.credits_remaining

    @property
    def credits_total(self) -> int:
        return self.current_period.credits_limit

    @property
    def billing_period_start(self) -> str:
        return self.current_period.start_date

    @property
    def billing_period_end(self) -> str:
        return self.current_period.end_date
