import logging
import time
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup

from imobi.core.errors import FetchTimeout
from imobi.schemas.listing import ListingRecord, QueryFilters
from imobi.schemas.search import ConnectorFailure, ConnectorOutcome, ConnectorSuccess, RequestDescriptor
from imobi.services.fetcher import Fetcher

logger = logging.getLogger(__name__)


class BaseConnector(ABC):
    name: str
    max_pages: int = 1
    page_param: str = "pagina"
    request_delay: float = 0.0

    @abstractmethod
    def build_request(self, query: str, filters: QueryFilters) -> RequestDescriptor:  # pragma: no cover - interface
        """Describe the search page to fetch; identical inputs give identical requests."""

    @abstractmethod
    def extract(self, document: Optional[BeautifulSoup]) -> List[ListingRecord]:  # pragma: no cover - interface
        """Parse listing records out of a fetched page."""

    def refine(self, records: Sequence[ListingRecord], filters: QueryFilters) -> List[ListingRecord]:
        return list(records)

    def fetch(self, request: RequestDescriptor, fetcher: Fetcher) -> Optional[BeautifulSoup]:
        return fetcher.fetch(request)

    def _sleep(self) -> None:
        if self.request_delay:
            time.sleep(self.request_delay)

    def _page_records(self, request: RequestDescriptor, fetcher: Fetcher) -> List[ListingRecord]:
        document = self.fetch(request, fetcher)
        return [record for record in self.extract(document) if record.is_valid]

    def collect(self, query: str, filters: QueryFilters, fetcher: Fetcher) -> List[ListingRecord]:
        request = self.build_request(query, filters)
        records: List[ListingRecord] = []
        seen_ids: set[str] = set()
        for page in range(1, max(self.max_pages, 1) + 1):
            if page > 1:
                self._sleep()
            page_request = request.with_page(page, self.page_param)
            logger.info("[%s] searching %s", self.name, page_request.full_url)
            if page == 1:
                page_records = self._page_records(page_request, fetcher)
            else:
                try:
                    page_records = self._page_records(page_request, fetcher)
                except Exception as exc:
                    logger.warning("[%s] page %s failed, keeping %s listings: %s", self.name, page, len(records), exc)
                    break
            if not page_records:
                logger.info("[%s] no listings on page %s, stopping", self.name, page)
                break
            for record in page_records:
                if record.id in seen_ids:
                    continue
                seen_ids.add(record.id)
                records.append(record)
        return self.refine(records, filters)

    def search(self, query: str, filters: QueryFilters, fetcher: Fetcher) -> ConnectorOutcome:
        """Run one search; every error stays inside and comes back as a ConnectorFailure."""
        try:
            records = self.collect(query, filters, fetcher)
        except FetchTimeout:
            logger.warning("[%s] timed out", self.name)
            return ConnectorFailure(source=self.name, message="timeout")
        except Exception as exc:
            logger.exception("[%s] search failed", self.name)
            return ConnectorFailure(source=self.name, message=str(exc) or exc.__class__.__name__)
        logger.info("[%s] found %s listings", self.name, len(records))
        return ConnectorSuccess(source=self.name, records=records)
