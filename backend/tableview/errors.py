# backend/tableview/errors.py
from fastapi import HTTPException


class TableViewError(Exception):
    """Base class for errors surfaced to the user as a recoverable state."""


class ParseError(TableViewError):
    """Source bytes are empty, malformed, or in an unsupported format."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class EmptyDatasetError(TableViewError):
    """Source decoded fine but holds no rows at all."""


class FetchError(TableViewError):
    """A remote page request failed (transport, status, or payload)."""


def api_error(status: int, code: str, detail: str) -> HTTPException:
    # Raise with a dict so the client always sees {code, detail}
    return HTTPException(status_code=status, detail={"code": code, "detail": detail})
