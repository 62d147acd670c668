from typing import Optional


class ImobiError(Exception):
    """Base class for errors raised by the search core."""


class FetchError(ImobiError):
    def __init__(self, url: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.message = message
        self.status_code = status_code


class FetchTimeout(FetchError):
    def __init__(self, url: str, message: str = "timeout") -> None:
        super().__init__(url, message)


class ConnectorNotFoundError(ImobiError, LookupError):
    def __init__(self, source_name: str) -> None:
        super().__init__(f"Connector not found: {source_name}")
        self.source_name = source_name
