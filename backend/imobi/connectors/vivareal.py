import re
import unicodedata
from typing import List, Optional, Tuple

from imobi.schemas.listing import PropertyCategory, QueryFilters
from imobi.schemas.search import RequestDescriptor
from imobi.services.locators import ContainerCascade, Locator
from imobi.services.normalization import AmountProfile

from .markup import ExtractionProfile, MarkupConnector, number_param, search_params

BASE_URL = "https://www.vivareal.com.br"

VIVAREAL_PROFILE = ExtractionProfile(
    base_url=BASE_URL,
    containers=ContainerCascade(
        primary=(
            '[data-type="property"]',
            ".property-card",
            ".card-container",
            ".result-card",
            ".property-item",
            ".js-card-selector",
        ),
        generic=('[class*="property"]', '[class*="card"]', "article", ".item"),
    ),
    fields={
        "title": (
            Locator('[data-type="card-title"]'),
            Locator(".property-card__title"),
            Locator("h2"),
            Locator("h3"),
            Locator(".title"),
            Locator('[class*="title"]'),
        ),
        "price": (
            Locator('[data-type="price"]'),
            Locator(".property-card__price"),
            Locator(".price"),
            Locator('[class*="price"]'),
            Locator('[class*="value"]'),
        ),
        "image": (
            Locator("img", attribute="src"),
            Locator("img", attribute="data-src"),
            Locator("img", attribute="data-lazy-src"),
        ),
        "link": (Locator("a", attribute="href"),),
        "location": (
            Locator('[data-type="address"]'),
            Locator(".property-card__address"),
            Locator(".address"),
            Locator('[class*="address"]'),
            Locator('[class*="location"]'),
        ),
        "area": (
            Locator('[data-type="area"]'),
            Locator(".property-card__area"),
            Locator(".area"),
            Locator('[class*="area"]'),
        ),
        "bedrooms": (
            Locator('[data-type="bedrooms"]'),
            Locator(".property-card__bedrooms"),
            Locator(".bedrooms"),
            Locator('[class*="bedroom"]'),
        ),
        "bathrooms": (
            Locator('[data-type="bathrooms"]'),
            Locator(".property-card__bathrooms"),
            Locator(".bathrooms"),
            Locator('[class*="bathroom"]'),
        ),
        "parking": (
            Locator('[data-type="parking"]'),
            Locator(".property-card__detail-garage"),
            Locator('[class*="garage"]'),
        ),
    },
    amount_profile=AmountProfile.DIGITS_ONLY,
    area_profile=AmountProfile.DECIMAL_POINT,
)

ENHANCED_ADDRESS = (
    Locator(".property-card__address.js-property-card-address.js-see-on-map"),
    Locator(".property-card__address"),
    Locator('[data-type="address"]'),
    Locator(".address"),
)

VIVAREAL_ENHANCED_PROFILE = ExtractionProfile(
    base_url=BASE_URL,
    containers=ContainerCascade(
        primary=(
            ".property-card__main-content",
            '[data-type="property"]',
            ".property-card",
            ".js-property-card",
        ),
    ),
    fields={
        # Cards on this layout have no headline; the street address doubles as the title.
        "title": ENHANCED_ADDRESS
        + (Locator("h2"), Locator("h3"), Locator(".title"), Locator('[data-type="title"]')),
        "location": ENHANCED_ADDRESS,
        "price": (
            Locator(".property-card__price.js-property-card-prices"),
            Locator(".property-card__price"),
            Locator('[data-type="price"]'),
            Locator(".price"),
        ),
        "area": (
            Locator(".property-card__detail-area"),
            Locator('[data-type="area"]'),
            Locator(".area"),
        ),
        "bedrooms": (
            Locator(".property-card__detail-room"),
            Locator('[data-type="bedrooms"]'),
            Locator(".bedrooms"),
        ),
        "bathrooms": (
            Locator(".property-card__detail-bathroom"),
            Locator('[data-type="bathrooms"]'),
            Locator(".bathrooms"),
        ),
        "parking": (
            Locator(".property-card__detail-garage"),
            Locator('[data-type="parking"]'),
        ),
        "link": (Locator("a", attribute="href"),),
        "image": (Locator("img", attribute="src"), Locator("img", attribute="data-src")),
    },
    amount_profile=AmountProfile.THOUSANDS_POINT,
    area_profile=AmountProfile.THOUSANDS_POINT,
    with_neighborhood=True,
)

ENHANCED_CATEGORY_TYPES = {
    PropertyCategory.HOUSE: "casa_residencial",
    PropertyCategory.APARTMENT: "apartamento_residencial",
    PropertyCategory.LAND: "terreno_residencial",
    PropertyCategory.COMMERCIAL: "comercial",
}


def location_slug(text: str) -> str:
    """Turn "São Paulo, SP" into "sao-paulo"."""
    city = text.split(",", 1)[0].strip().lower()
    ascii_city = unicodedata.normalize("NFKD", city).encode("ascii", "ignore").decode("ascii")
    return re.sub(r"\s+", "-", ascii_city)


class VivaRealConnector(MarkupConnector):
    name = "VivaReal"
    profile = VIVAREAL_PROFILE

    def build_request(self, query: str, filters: QueryFilters) -> RequestDescriptor:
        return RequestDescriptor(
            url=f"{BASE_URL}/venda/",
            params=search_params(query, filters),
            timeout_seconds=self.timeout_seconds,
        )


class VivaRealBrowserConnector(VivaRealConnector):
    """Same cards as VivaRealConnector, but the results page is rendered in headless Chromium."""

    name = "VivaReal (Browser)"

    def __init__(self, settle_ms: int = 2000, timeout_seconds: float = 30.0, **kwargs) -> None:
        super().__init__(timeout_seconds=timeout_seconds, **kwargs)
        self.settle_ms = settle_ms

    def build_request(self, query: str, filters: QueryFilters) -> RequestDescriptor:
        params = search_params(query, filters)
        if filters.min_bedrooms:
            params += (("quartos", str(filters.min_bedrooms)),)
        return RequestDescriptor(
            url=f"{BASE_URL}/venda/",
            params=params,
            render=True,
            wait_for_selector='[data-type="property"]',
            settle_ms=self.settle_ms,
            timeout_seconds=self.timeout_seconds,
        )


class VivaRealEnhancedConnector(MarkupConnector):
    name = "VivaReal Enhanced"
    profile = VIVAREAL_ENHANCED_PROFILE

    def build_request(self, query: str, filters: QueryFilters) -> RequestDescriptor:
        url = f"{BASE_URL}/venda/"
        place: Optional[str] = filters.location or query
        if place and location_slug(place):
            url += f"{location_slug(place)}/"

        params: List[Tuple[str, str]] = []
        if filters.category:
            params.append(("tipos", ENHANCED_CATEGORY_TYPES.get(filters.category, "apartamento_residencial")))
        if filters.min_price:
            params.append(("precoMin", number_param(filters.min_price)))
        if filters.max_price:
            params.append(("precoMax", number_param(filters.max_price)))
        if filters.min_bedrooms:
            params.append(("quartos", str(filters.min_bedrooms)))
        if filters.min_area:
            params.append(("areaMin", number_param(filters.min_area)))
        if filters.neighborhoods:
            params.append(("bairros", ",".join(filters.neighborhoods)))
        return RequestDescriptor(url=url, params=tuple(params), timeout_seconds=self.timeout_seconds)
