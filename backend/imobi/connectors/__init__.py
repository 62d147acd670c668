from .base import BaseConnector
from .generic import GenericConnector
from .markup import ExtractionProfile, MarkupConnector
from .mercadolivre import MercadoLivreConnector
from .registry import build_connectors, build_orchestrator, get_connector_config
from .synthetic import SyntheticConnector
from .vivareal import VivaRealBrowserConnector, VivaRealConnector, VivaRealEnhancedConnector

__all__ = [
    "BaseConnector",
    "ExtractionProfile",
    "GenericConnector",
    "MarkupConnector",
    "MercadoLivreConnector",
    "SyntheticConnector",
    "VivaRealBrowserConnector",
    "VivaRealConnector",
    "VivaRealEnhancedConnector",
    "build_connectors",
    "build_orchestrator",
    "get_connector_config",
]
