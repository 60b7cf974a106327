"""Error kinds raised while serving link requests.

Each error knows the HTTP status it maps to. Client errors carry a short fixed
message; server errors carry the text of the underlying failure.
"""

from fastapi import status


class LinkAPIError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Internal error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidPayload(LinkAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request body"


class InvalidIdentifier(LinkAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid link ID"


class MissingIdentifier(LinkAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Missing link ID"


class UnsupportedRenderType(LinkAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Unsupported data type for HTML fragment generation"


class LinkNotFound(LinkAPIError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Link not found"


class StoreError(LinkAPIError):
    """Any failure reported by the link store."""


class RenderError(LinkAPIError):
    """A template or serialization failure."""
