import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from imobi.core.errors import ConnectorNotFoundError
from imobi.schemas.listing import ListingRecord, QueryFilters
from imobi.schemas.search import AggregatedResult, ConnectorFailure, ConnectorOutcome, ConnectorSuccess
from imobi.services.fetcher import Fetcher

if TYPE_CHECKING:
    from imobi.connectors.base import BaseConnector

logger = logging.getLogger(__name__)


def merge_outcomes(outcomes: Sequence[ConnectorOutcome]) -> Tuple[List[ListingRecord], List[str], List[str]]:
    """Merge per-connector outcomes given in fan-out order.

    Records are ordered by price, then by the connector's fan-out position, then by id,
    so completion order never leaks into the result.
    """
    ranked: List[Tuple[float, int, str, ListingRecord]] = []
    succeeded: List[str] = []
    errors: List[str] = []
    for position, outcome in enumerate(outcomes):
        if isinstance(outcome, ConnectorFailure):
            errors.append(f"{outcome.source}: {outcome.message}")
            logger.warning("[%s] failed: %s", outcome.source, outcome.message)
            continue
        if not outcome.records:
            logger.info("[%s] returned no listings", outcome.source)
            continue
        succeeded.append(outcome.source)
        logger.info("[%s] returned %s listings", outcome.source, len(outcome.records))
        ranked.extend((record.price_amount, position, record.id, record) for record in outcome.records)

    ranked.sort(key=lambda item: item[:3])
    return [item[3] for item in ranked], succeeded, errors


class SearchOrchestrator:
    def __init__(
        self,
        connectors: Sequence["BaseConnector"],
        fetcher: Fetcher,
        max_workers: Optional[int] = None,
    ) -> None:
        self.connectors = tuple(connectors)
        self.fetcher = fetcher
        self.max_workers = max_workers

    @property
    def source_names(self) -> List[str]:
        return [connector.name for connector in self.connectors]

    def close(self) -> None:
        """Release the fetcher's transport, if it holds one."""
        close = getattr(self.fetcher, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> "SearchOrchestrator":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _run(self, connector: "BaseConnector", query: str, filters: QueryFilters) -> ConnectorOutcome:
        return connector.search(query, filters, self.fetcher)

    def search_all(self, query: str, filters: Optional[QueryFilters] = None) -> AggregatedResult:
        filters = filters or QueryFilters(query=query)
        started = time.perf_counter()
        logger.info("Searching %r across %s sources: %s", query, len(self.connectors), ", ".join(self.source_names))

        outcomes: List[ConnectorOutcome] = []
        if self.connectors:
            workers = self.max_workers or len(self.connectors)
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="connector") as executor:
                futures = [executor.submit(self._run, connector, query, filters) for connector in self.connectors]
                # Connectors never raise; anything surfacing here is a defect and propagates.
                outcomes = [future.result() for future in futures]

        records, succeeded, errors = merge_outcomes(outcomes)
        elapsed_millis = int((time.perf_counter() - started) * 1000)
        logger.info(
            "Search finished in %sms: %s listings from %s sources, %s failures",
            elapsed_millis,
            len(records),
            len(succeeded),
            len(errors),
        )
        return AggregatedResult(
            records=records,
            total_count=len(records),
            succeeded_sources=succeeded,
            elapsed_millis=elapsed_millis,
            error_messages=errors or None,
        )

    def search_single(
        self, source_name: str, query: str, filters: Optional[QueryFilters] = None
    ) -> List[ListingRecord]:
        connector = next((c for c in self.connectors if c.name == source_name), None)
        if connector is None:
            raise ConnectorNotFoundError(source_name)
        outcome = self._run(connector, query, filters or QueryFilters(query=query))
        if isinstance(outcome, ConnectorSuccess):
            return list(outcome.records)
        logger.warning("[%s] failed: %s", outcome.source, outcome.message)
        return []
