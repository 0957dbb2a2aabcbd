"""Domain-specific exceptions."""


class SearchError(Exception):
    pass


class ValidationError(SearchError):
    """The user input was rejected before any request was made."""


class TransportError(SearchError):
    """The request failed or the backend answered with a non-2xx status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(SearchError):
    """The backend answered with a body we cannot interpret."""
