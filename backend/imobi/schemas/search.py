from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field

from .listing import ListingRecord


class RequestDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    params: Tuple[Tuple[str, str], ...] = ()
    render: bool = False
    wait_for_selector: Optional[str] = None
    settle_ms: int = 0
    timeout_seconds: float = 5.0

    @property
    def full_url(self) -> str:
        if not self.params:
            return self.url
        separator = "&" if "?" in self.url else "?"
        return f"{self.url}{separator}{urlencode(self.params)}"

    def with_page(self, page: int, param: str = "pagina") -> "RequestDescriptor":
        if page <= 1:
            return self
        params = tuple((key, value) for key, value in self.params if key != param)
        return self.model_copy(update={"params": params + ((param, str(page)),)})


class ConnectorSuccess(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    source: str
    records: List[ListingRecord] = []


class ConnectorFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["failure"] = "failure"
    source: str
    message: str


ConnectorOutcome = Annotated[Union[ConnectorSuccess, ConnectorFailure], Field(discriminator="kind")]


class AggregatedResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    records: List[ListingRecord]
    total_count: int
    succeeded_sources: List[str]
    elapsed_millis: int
    error_messages: Optional[List[str]] = None

    def to_payload(self) -> Dict[str, Any]:
        payload = self.model_dump(mode="json")
        if self.error_messages is None:
            payload.pop("error_messages")
        return payload
