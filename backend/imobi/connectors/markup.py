import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Mapping, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, Tag

from imobi.schemas.listing import LOCATION_NOT_INFORMED, ListingRecord, PropertyCategory, QueryFilters
from imobi.services.locators import ContainerCascade, Locator, absolute_url, locate, locate_container
from imobi.services.normalization import (
    AmountProfile,
    derive_neighborhood,
    format_brl,
    infer_category_from,
    parse_amount,
    parse_area,
    parse_count,
    source_prefix,
    stable_listing_id,
)

from .base import BaseConnector

logger = logging.getLogger(__name__)

CATEGORY_SLUGS = {
    PropertyCategory.HOUSE: "casa",
    PropertyCategory.APARTMENT: "apartamento",
    PropertyCategory.LAND: "terreno",
    PropertyCategory.COMMERCIAL: "comercial",
    PropertyCategory.OTHER: "outro",
}


@dataclass(frozen=True)
class ExtractionProfile:
    """Everything a markup source needs, as data: where cards live and where each field hides."""

    base_url: str
    containers: ContainerCascade
    # Empty means the prefix is derived from the connector name.
    id_prefix: str = ""
    fields: Mapping[str, Sequence[Locator]] = field(default_factory=dict)
    amount_profile: AmountProfile = AmountProfile.DECIMAL_POINT
    area_profile: AmountProfile = AmountProfile.DECIMAL_POINT
    category_fields: Sequence[str] = ("title",)
    default_location: str = LOCATION_NOT_INFORMED
    price_display_prefix: str = ""
    with_neighborhood: bool = False

    def locators(self, name: str) -> Sequence[Locator]:
        return self.fields.get(name, ())


def number_param(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def search_params(query: str, filters: QueryFilters) -> Tuple[Tuple[str, str], ...]:
    params: List[Tuple[str, str]] = [("q", query)]
    if filters.category:
        params.append(("tipo", CATEGORY_SLUGS[filters.category]))
    if filters.min_price:
        params.append(("precoMin", number_param(filters.min_price)))
    if filters.max_price:
        params.append(("precoMax", number_param(filters.max_price)))
    if filters.location:
        params.append(("localizacao", filters.location))
    return tuple(params)


class MarkupConnector(BaseConnector):
    profile: ExtractionProfile

    def __init__(
        self,
        limit: Optional[int] = None,
        max_pages: int = 1,
        request_delay: float = 0.0,
        timeout_seconds: float = 5.0,
        min_generic_count: Optional[int] = None,
    ) -> None:
        self.limit = limit
        self.max_pages = max_pages
        self.request_delay = max(request_delay, 0)
        self.timeout_seconds = timeout_seconds
        if min_generic_count is not None:
            containers = dataclasses.replace(self.profile.containers, min_generic_count=min_generic_count)
            self.profile = dataclasses.replace(self.profile, containers=containers)

    def extract(self, document: Optional[BeautifulSoup]) -> List[ListingRecord]:
        if document is None:
            return []
        cards = locate_container(document, self.profile.containers)
        if not cards:
            logger.info("[%s] no listing cards found", self.name)
            return []
        logger.info("[%s] found %s listing cards", self.name, len(cards))
        if self.limit:
            cards = cards[: self.limit]

        created_at = datetime.now(timezone.utc)
        records: List[ListingRecord] = []
        for index, card in enumerate(cards):
            try:
                record = self.parse_card(card, created_at)
            except Exception:
                logger.exception("[%s] error parsing listing card %s", self.name, index)
                continue
            if record is not None:
                records.append(record)
        return records

    def parse_card(self, card: Tag, created_at: datetime) -> Optional[ListingRecord]:
        profile = self.profile
        text = {name: locate(card, locators) for name, locators in profile.fields.items()}

        title = text.get("title", "")
        price_text = text.get("price", "")
        price = parse_amount(price_text, profile.amount_profile)
        if not title or price <= 0:
            return None

        link = absolute_url(profile.base_url, text.get("link"))
        location = text.get("location", "")
        neighborhood = derive_neighborhood(location) if profile.with_neighborhood else ""

        return ListingRecord(
            id=stable_listing_id(profile.id_prefix or source_prefix(self.name), link or title),
            title=title,
            price_amount=price,
            price_display=self._price_display(price_text, price),
            description=text.get("description") or title,
            image_url=absolute_url(profile.base_url, text.get("image")),
            source_url=link,
            source_name=self.name,
            location_text=location or profile.default_location,
            bedroom_count=parse_count(text.get("bedrooms")) or None,
            bathroom_count=parse_count(text.get("bathrooms")) or None,
            parking_count=parse_count(text.get("parking")) or None,
            area_square_meters=parse_area(text.get("area"), profile.area_profile) or None,
            category=infer_category_from([text.get(name, "") for name in profile.category_fields]),
            neighborhood=neighborhood or None,
            created_at=created_at,
        )

    def _price_display(self, price_text: str, price: float) -> str:
        if price_text:
            return f"{self.profile.price_display_prefix}{price_text}"
        return format_brl(price)
