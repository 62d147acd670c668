from typing import Optional

from imobi.schemas.listing import QueryFilters
from imobi.schemas.search import RequestDescriptor
from imobi.services.locators import ContainerCascade, Locator
from imobi.services.normalization import AmountProfile

from .markup import ExtractionProfile, MarkupConnector, search_params

GENERIC_CONTAINERS = ContainerCascade(
    primary=(
        ".property-card",
        ".card",
        ".item",
        ".listing",
        ".property",
        '[data-type="property"]',
        ".result-item",
        ".search-result",
        ".ad-item",
        ".product-card",
    ),
    generic=(
        "article",
        'div[class*="card"]',
        'div[class*="item"]',
        'div[class*="property"]',
        'div[class*="listing"]',
    ),
)

GENERIC_FIELDS = {
    "title": (
        Locator(".title"),
        Locator(".name"),
        Locator(".card-title"),
        Locator("h2"),
        Locator("h3"),
        Locator("h4"),
        Locator('[class*="title"]'),
        Locator('[class*="name"]'),
    ),
    "price": (
        Locator(".price"),
        Locator(".value"),
        Locator(".cost"),
        Locator('[class*="price"]'),
        Locator('[class*="value"]'),
        Locator('[class*="cost"]'),
    ),
    "image": (
        Locator("img[src]", attribute="src"),
        Locator("img[data-src]", attribute="data-src"),
        Locator("img[data-lazy]", attribute="data-lazy"),
        Locator('[class*="image"] img', attribute="src"),
        Locator('[class*="photo"] img', attribute="src"),
    ),
    "link": (Locator("a", attribute="href"),),
    "location": (
        Locator(".location"),
        Locator(".address"),
        Locator(".neighborhood"),
        Locator('[class*="location"]'),
        Locator('[class*="address"]'),
        Locator('[class*="neighborhood"]'),
    ),
    "area": (Locator(".area"), Locator(".size"), Locator('[class*="area"]'), Locator('[class*="size"]')),
    "bedrooms": (
        Locator(".bedrooms"),
        Locator(".rooms"),
        Locator('[class*="bedroom"]'),
        Locator('[class*="room"]'),
    ),
    "bathrooms": (
        Locator(".bathrooms"),
        Locator(".baths"),
        Locator('[class*="bathroom"]'),
        Locator('[class*="bath"]'),
    ),
}


def generic_profile(base_url: str) -> ExtractionProfile:
    return ExtractionProfile(
        base_url=base_url.rstrip("/"),
        containers=GENERIC_CONTAINERS,
        fields=GENERIC_FIELDS,
        amount_profile=AmountProfile.DECIMAL_POINT,
        category_fields=("title", "location"),
    )


class GenericConnector(MarkupConnector):
    """Best-effort connector for any listing site exposing a ``/busca/?q=`` search page."""

    def __init__(self, base_url: str, name: str, min_generic_count: Optional[int] = None, **kwargs) -> None:
        self.name = name
        self.profile = generic_profile(base_url)
        super().__init__(min_generic_count=min_generic_count, **kwargs)

    def build_request(self, query: str, filters: QueryFilters) -> RequestDescriptor:
        return RequestDescriptor(
            url=f"{self.profile.base_url}/busca/",
            params=search_params(query, filters),
            timeout_seconds=self.timeout_seconds,
        )
