import logging

import pytest

from imobi.connectors.generic import GenericConnector
from imobi.connectors.mercadolivre import MercadoLivreConnector
from imobi.connectors.registry import build_connectors, build_orchestrator, get_connector_config
from imobi.connectors.synthetic import SyntheticConnector
from imobi.connectors.vivareal import VivaRealBrowserConnector, VivaRealConnector, VivaRealEnhancedConnector
from imobi.core.config import Settings
from imobi.core.errors import ConnectorNotFoundError


class NullFetcher:
    def fetch(self, request):
        raise AssertionError("no network in registry tests")


def test_connector_registry_returns_vivareal():
    settings = Settings(listing_limit=4, max_pages=2, page_delay_seconds=0)
    config = get_connector_config("vivareal")
    connector = config.factory(settings)

    assert config.base_url == "https://www.vivareal.com.br"
    assert isinstance(connector, VivaRealConnector)
    assert connector.limit == 4
    assert connector.max_pages == 2


def test_connector_registry_returns_mercado_livre():
    config = get_connector_config("mercadolivre")

    assert config.base_url == "https://imoveis.mercadolivre.com.br"
    assert isinstance(config.factory(Settings()), MercadoLivreConnector)


def test_connector_registry_browser_variant_uses_browser_settings():
    settings = Settings(browser_timeout_seconds=12, browser_settle_ms=500)
    connector = get_connector_config("vivareal_browser").factory(settings)

    assert isinstance(connector, VivaRealBrowserConnector)
    assert connector.timeout_seconds == 12
    assert connector.settle_ms == 500


def test_connector_registry_rejects_unknown_keys():
    with pytest.raises(ConnectorNotFoundError):
        get_connector_config("olx")


def test_build_connectors_defaults_to_synthetic_data():
    connectors = build_connectors(Settings(use_live_connectors=False))

    assert len(connectors) == 1
    assert isinstance(connectors[0], SyntheticConnector)


def test_build_connectors_live_set_and_generic_sources():
    settings = Settings(
        use_live_connectors=True,
        live_connectors=["vivareal_enhanced", "mercadolivre"],
        generic_sources={"Example Imoveis": "https://imoveis.example.com"},
        generic_container_min_count=4,
    )
    connectors = build_connectors(settings)

    assert [type(connector) for connector in connectors] == [
        VivaRealEnhancedConnector,
        MercadoLivreConnector,
        GenericConnector,
    ]
    generic = connectors[-1]
    assert generic.name == "Example Imoveis"
    assert generic.profile.base_url == "https://imoveis.example.com"
    assert generic.profile.containers.min_generic_count == 4


def test_build_connectors_live_flag_overrides_settings():
    connectors = build_connectors(Settings(use_live_connectors=True), live=False)
    assert [connector.name for connector in connectors] == ["Mock Data"]


def test_build_orchestrator_wires_connectors_and_fetcher():
    fetcher = NullFetcher()
    orchestrator = build_orchestrator(Settings(max_workers=2), live=True, fetcher=fetcher)

    assert orchestrator.source_names == ["VivaReal", "Mercado Livre Imóveis"]
    assert orchestrator.fetcher is fetcher
    assert orchestrator.max_workers == 2


def test_build_orchestrator_synthetic_search_end_to_end():
    orchestrator = build_orchestrator(Settings(), live=False, fetcher=NullFetcher())
    result = orchestrator.search_all("Curitiba")

    assert result.total_count == 5
    assert [record.price_amount for record in result.records] == sorted(r.price_amount for r in result.records)
    assert result.succeeded_sources == ["Mock Data"]


def test_build_orchestrator_logs_the_active_set(caplog):
    with caplog.at_level(logging.INFO, logger="imobi"):
        build_orchestrator(Settings(app_name="imobi-test"), live=False, fetcher=NullFetcher())

    assert "imobi-test using synthetic data: Mock Data" in caplog.text
