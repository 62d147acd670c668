from pathlib import Path

from bs4 import BeautifulSoup

from imobi.connectors.mercadolivre import MercadoLivreConnector
from imobi.schemas.listing import PropertyCategory, QueryFilters
from imobi.services.normalization import stable_listing_id

FIXTURES = Path(__file__).parent / "fixtures"


def _read_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


def test_extract_reads_attribute_rows_in_any_order():
    document = BeautifulSoup(_read_fixture("mercadolivre_search.html"), "html.parser")
    records = MercadoLivreConnector().extract(document)

    assert len(records) == 2
    house, apartment = records

    link = "https://casa.mercadolivre.com.br/MLB-1111111111-casa-3-quartos-bacacheri-_JM"
    assert house.id == stable_listing_id("mercadolivre", link)
    assert house.title == "Casa 3 quartos à venda no Bacacheri"
    assert house.price_amount == 890000
    assert house.price_display == "R$ 890.000"
    assert house.image_url == "https://http2.mlstatic.com/casa-1.webp"
    assert house.location_text == "Bacacheri, Curitiba"
    assert house.area_square_meters == 180
    assert (house.bedroom_count, house.bathroom_count, house.parking_count) == (3, 2, None)
    assert house.category == PropertyCategory.HOUSE
    assert house.source_name == "Mercado Livre Imóveis"

    assert apartment.title == "Apartamento 2 quartos no Centro"
    assert apartment.price_amount == 455000
    assert apartment.area_square_meters == 65.5
    assert (apartment.bedroom_count, apartment.parking_count) == (2, 1)
    assert apartment.category == PropertyCategory.APARTMENT


def test_build_request_targets_search_page():
    filters = QueryFilters(query="apartamento curitiba", category=PropertyCategory.APARTMENT, max_price=600000)
    request = MercadoLivreConnector().build_request("apartamento curitiba", filters)

    assert request.url == "https://imoveis.mercadolivre.com.br/busca/"
    assert request.params == (("q", "apartamento curitiba"), ("tipo", "apartamento"), ("precoMax", "600000"))
    assert request.full_url == (
        "https://imoveis.mercadolivre.com.br/busca/?q=apartamento+curitiba&tipo=apartamento&precoMax=600000"
    )
