from datetime import datetime, timezone
from typing import Iterable, List, Mapping, Optional, Sequence

from bs4 import BeautifulSoup

from imobi.schemas.listing import ListingRecord, PropertyCategory, QueryFilters
from imobi.schemas.search import RequestDescriptor
from imobi.services.fetcher import Fetcher
from imobi.services.normalization import derive_neighborhood, format_brl, source_prefix, stable_listing_id

from .base import BaseConnector

CATALOG_TIMESTAMP = datetime(2024, 1, 1, tzinfo=timezone.utc)

# Offline catalog for local development and tests; never fetched from anywhere.
CURITIBA_CATALOG: Sequence[Mapping] = (
    {
        "id": "mock_1",
        "title": "Casa em Curitiba - Atuba",
        "description": "Linda casa com 3 quartos, 2 banheiros, garagem para 2 carros. "
        "Localizada em bairro tranquilo com fácil acesso ao centro.",
        "price_amount": 850000,
        "location_text": "Atuba, Curitiba - PR",
        "image_url": "https://images.unsplash.com/photo-1564013799919-ab600027ffc6?w=400&h=300&fit=crop",
        "source_url": "https://example.com/property1",
        "category": PropertyCategory.HOUSE,
        "bedroom_count": 3,
        "bathroom_count": 2,
        "parking_count": 2,
        "area_square_meters": 180,
    },
    {
        "id": "mock_2",
        "title": "Apartamento no Bacacheri",
        "description": "Apartamento moderno com 2 quartos, sala ampla, cozinha americana. "
        "Prédio com portaria 24h e academia.",
        "price_amount": 420000,
        "location_text": "Bacacheri, Curitiba - PR",
        "image_url": "https://images.unsplash.com/photo-1545324418-cc1a3fa10c00?w=400&h=300&fit=crop",
        "source_url": "https://example.com/property2",
        "category": PropertyCategory.APARTMENT,
        "bedroom_count": 2,
        "bathroom_count": 1,
        "area_square_meters": 75,
    },
    {
        "id": "mock_3",
        "title": "Casa em Boa Vista",
        "description": "Casa espaçosa com 4 quartos, 3 banheiros, quintal grande. Ideal para família.",
        "price_amount": 1200000,
        "location_text": "Boa Vista, Curitiba - PR",
        "image_url": "https://images.unsplash.com/photo-1512917774080-9991f1c4c750?w=400&h=300&fit=crop",
        "source_url": "https://example.com/property3",
        "category": PropertyCategory.HOUSE,
        "bedroom_count": 4,
        "bathroom_count": 3,
        "area_square_meters": 250,
    },
    {
        "id": "mock_4",
        "title": "Apartamento no Jardim Social",
        "description": "Apartamento de luxo com 3 quartos, 2 banheiros, varanda gourmet. Vista para o parque.",
        "price_amount": 680000,
        "location_text": "Jardim Social, Curitiba - PR",
        "image_url": "https://images.unsplash.com/photo-1502672260266-1c1ef2d93688?w=400&h=300&fit=crop",
        "source_url": "https://example.com/property4",
        "category": PropertyCategory.APARTMENT,
        "bedroom_count": 3,
        "bathroom_count": 2,
        "area_square_meters": 120,
    },
    {
        "id": "mock_5",
        "title": "Casa em Juvevê",
        "description": "Casa charmosa com 3 quartos, 2 banheiros, jardim. Bairro tradicional de Curitiba.",
        "price_amount": 750000,
        "location_text": "Juvevê, Curitiba - PR",
        "image_url": "https://images.unsplash.com/photo-1570129477492-45c003edd2be?w=400&h=300&fit=crop",
        "source_url": "https://example.com/property5",
        "category": PropertyCategory.HOUSE,
        "bedroom_count": 3,
        "bathroom_count": 2,
        "area_square_meters": 160,
    },
)


def matches_filters(record: ListingRecord, filters: QueryFilters) -> bool:
    if filters.category and record.category != filters.category:
        return False
    if filters.min_price and record.price_amount < filters.min_price:
        return False
    if filters.max_price and record.price_amount > filters.max_price:
        return False
    # Unknown bedroom counts and areas are not held against a listing.
    if filters.min_bedrooms and record.bedroom_count is not None and record.bedroom_count < filters.min_bedrooms:
        return False
    if filters.min_area and record.area_square_meters is not None and record.area_square_meters < filters.min_area:
        return False
    return True


class SyntheticConnector(BaseConnector):
    """Network-free connector over a fixed catalog; applies every filter exactly."""

    base_url = "https://mock.example.com"

    def __init__(self, name: str = "Mock Data", catalog: Optional[Iterable[Mapping]] = None) -> None:
        self.name = name
        entries = CURITIBA_CATALOG if catalog is None else list(catalog)
        self._records = tuple(self._to_record(entry) for entry in entries)

    def _to_record(self, entry: Mapping) -> ListingRecord:
        data = dict(entry)
        data["source_name"] = self.name
        if not data.get("id"):
            data["id"] = stable_listing_id(source_prefix(self.name), data.get("source_url") or data.get("title", ""))
        data.setdefault("created_at", CATALOG_TIMESTAMP)
        data.setdefault("price_display", format_brl(data.get("price_amount") or 0))
        data.setdefault("neighborhood", derive_neighborhood(data.get("location_text")) or None)
        return ListingRecord(**data)

    def build_request(self, query: str, filters: QueryFilters) -> RequestDescriptor:
        return RequestDescriptor(url=f"{self.base_url}/search", params=(("q", query),))

    def fetch(self, request: RequestDescriptor, fetcher: Fetcher) -> Optional[BeautifulSoup]:
        return None

    def extract(self, document: Optional[BeautifulSoup]) -> List[ListingRecord]:
        return list(self._records)

    def refine(self, records: Sequence[ListingRecord], filters: QueryFilters) -> List[ListingRecord]:
        return [record for record in records if matches_filters(record, filters)]
