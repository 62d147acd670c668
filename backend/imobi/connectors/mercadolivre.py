from imobi.schemas.listing import QueryFilters
from imobi.schemas.search import RequestDescriptor
from imobi.services.locators import ContainerCascade, Locator
from imobi.services.normalization import AmountProfile

from .markup import ExtractionProfile, MarkupConnector, search_params

BASE_URL = "https://imoveis.mercadolivre.com.br"

# Attribute rows hold "3 quartos | 2 banheiros | 120 m²" in whatever order the site picks.
ATTRIBUTE_ROWS = (
    ".ui-search-item__group__element",
    ".ui-search-card-attributes__attribute",
    ".poly-attributes-list__item",
)


def _attribute(pattern: str) -> tuple:
    return tuple(Locator(selector, pattern=pattern) for selector in ATTRIBUTE_ROWS)


MERCADOLIVRE_PROFILE = ExtractionProfile(
    base_url=BASE_URL,
    id_prefix="mercadolivre",
    containers=ContainerCascade(
        primary=(".ui-search-result__content", ".ui-search-result__wrapper", ".poly-card"),
    ),
    fields={
        "title": (
            Locator(".ui-search-item__title"),
            Locator(".poly-component__title"),
            Locator("h2"),
        ),
        "price": (
            Locator(".andes-money-amount__fraction"),
            Locator(".price-tag-fraction"),
        ),
        "image": (Locator("img", attribute="src"), Locator("img", attribute="data-src")),
        "link": (Locator("a", attribute="href"),),
        "location": (
            Locator(".ui-search-item__location"),
            Locator(".poly-component__location"),
            Locator(".ui-search-item__group__element"),
        ),
        "area": _attribute(r"([\d.,]+)\s*m²"),
        "bedrooms": _attribute(r"(\d+)\s*quarto"),
        "bathrooms": _attribute(r"(\d+)\s*banheiro"),
        "parking": _attribute(r"(\d+)\s*vaga"),
    },
    amount_profile=AmountProfile.THOUSANDS_POINT,
    area_profile=AmountProfile.THOUSANDS_POINT,
    price_display_prefix="R$ ",
)


class MercadoLivreConnector(MarkupConnector):
    name = "Mercado Livre Imóveis"
    profile = MERCADOLIVRE_PROFILE

    def build_request(self, query: str, filters: QueryFilters) -> RequestDescriptor:
        return RequestDescriptor(
            url=f"{BASE_URL}/busca/",
            params=search_params(query, filters),
            timeout_seconds=self.timeout_seconds,
        )
