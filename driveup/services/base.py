"""Base service with common methods for all drive services."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator

if TYPE_CHECKING:
    from driveup.core.client import GraphClient


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, client: "GraphClient") -> None:
        """Initialize service with a Graph client.

        Args:
            client: Authenticated GraphClient instance
        """
        self.client = client

    def _get(self, path: str, **kwargs: Any) -> Any:
        """Execute GET request and return JSON data."""
        resp = self.client.get(path, **kwargs)
        return resp.json()

    def _post(self, path: str, **kwargs: Any) -> Any:
        """Execute POST request and return parsed JSON or text."""
        resp = self.client.post(path, **kwargs)
        if resp.headers.get("content-type", "").startswith("application/json"):
            return resp.json()
        return resp.text

    def _put(self, path: str, **kwargs: Any) -> Any:
        """Execute PUT request and return parsed JSON or text."""
        resp = self.client.put(path, **kwargs)
        if resp.headers.get("content-type", "").startswith("application/json"):
            return resp.json()
        return resp.text

    def _patch(self, path: str, **kwargs: Any) -> Any:
        """Execute PATCH request and return JSON data."""
        resp = self.client.patch(path, **kwargs)
        return resp.json()

    def _delete(self, path: str, **kwargs: Any) -> bool:
        """Execute DELETE request."""
        self.client.delete(path, **kwargs)
        return True

    def _paginate(self, path: str, **kwargs: Any) -> Iterator[dict[str, Any]]:
        """Iterate over every item of a paginated collection."""
        yield from self.client.paginate(path, **kwargs)
