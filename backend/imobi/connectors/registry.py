import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from imobi.core.config import Settings, get_settings
from imobi.core.errors import ConnectorNotFoundError
from imobi.core.logging_config import setup_logging
from imobi.services.fetcher import Fetcher, PageFetcher
from imobi.services.orchestrator import SearchOrchestrator

from . import mercadolivre, vivareal
from .base import BaseConnector
from .generic import GenericConnector
from .mercadolivre import MercadoLivreConnector
from .synthetic import SyntheticConnector
from .vivareal import VivaRealBrowserConnector, VivaRealConnector, VivaRealEnhancedConnector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectorConfig:
    key: str
    base_url: str
    factory: Callable[[Settings], BaseConnector]


def _markup_options(settings: Settings) -> Dict[str, Any]:
    return {
        "limit": settings.listing_limit,
        "max_pages": settings.max_pages,
        "request_delay": settings.page_delay_seconds,
        "timeout_seconds": settings.request_timeout_seconds,
        "min_generic_count": settings.generic_container_min_count,
    }


def _browser_options(settings: Settings) -> Dict[str, Any]:
    options = _markup_options(settings)
    options["timeout_seconds"] = settings.browser_timeout_seconds
    options["settle_ms"] = settings.browser_settle_ms
    return options


CONNECTOR_CONFIGS: Dict[str, ConnectorConfig] = {
    "synthetic": ConnectorConfig(
        key="synthetic",
        base_url=SyntheticConnector.base_url,
        factory=lambda settings: SyntheticConnector(),
    ),
    "vivareal": ConnectorConfig(
        key="vivareal",
        base_url=vivareal.BASE_URL,
        factory=lambda settings: VivaRealConnector(**_markup_options(settings)),
    ),
    "vivareal_enhanced": ConnectorConfig(
        key="vivareal_enhanced",
        base_url=vivareal.BASE_URL,
        factory=lambda settings: VivaRealEnhancedConnector(**_markup_options(settings)),
    ),
    "vivareal_browser": ConnectorConfig(
        key="vivareal_browser",
        base_url=vivareal.BASE_URL,
        factory=lambda settings: VivaRealBrowserConnector(**_browser_options(settings)),
    ),
    "mercadolivre": ConnectorConfig(
        key="mercadolivre",
        base_url=mercadolivre.BASE_URL,
        factory=lambda settings: MercadoLivreConnector(**_markup_options(settings)),
    ),
}


def get_connector_config(key: str) -> ConnectorConfig:
    config = CONNECTOR_CONFIGS.get(key)
    if config is None:
        raise ConnectorNotFoundError(key)
    return config


def build_connectors(settings: Optional[Settings] = None, live: Optional[bool] = None) -> List[BaseConnector]:
    """Build the active connector set: the synthetic catalog, or the configured live sources."""
    settings = settings or get_settings()
    use_live = settings.use_live_connectors if live is None else live
    if not use_live:
        return [get_connector_config("synthetic").factory(settings)]

    connectors = [get_connector_config(key).factory(settings) for key in settings.live_connectors]
    for name, base_url in settings.generic_sources.items():
        connectors.append(GenericConnector(base_url, name, **_markup_options(settings)))
    return connectors


def build_orchestrator(
    settings: Optional[Settings] = None,
    live: Optional[bool] = None,
    fetcher: Optional[Fetcher] = None,
) -> SearchOrchestrator:
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    use_live = settings.use_live_connectors if live is None else live
    connectors = build_connectors(settings, live=use_live)
    logger.info(
        "%s using %s: %s",
        settings.app_name,
        "live connectors" if use_live else "synthetic data",
        ", ".join(connector.name for connector in connectors),
    )
    return SearchOrchestrator(
        connectors,
        fetcher or PageFetcher(settings=settings),
        max_workers=settings.max_workers,
    )
