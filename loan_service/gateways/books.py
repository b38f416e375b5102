"""Books service gateway."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from loan_service.config import RemoteServiceConfig
from loan_service.exceptions import (
    RemoteNotFoundError,
    RemoteRejectedError,
    RemoteUnavailableError,
)
from loan_service.models import UNAVAILABLE_TITLE, BookSummary

logger = logging.getLogger(__name__)


class BookAvailabilityGateway(ABC):
    """What the loan service needs from the Books service.

    Every method may raise ``RemoteNotFoundError`` for an unknown book and
    ``RemoteUnavailableError`` when the service cannot be reached. Stock
    mutations are not transactional with local loan writes.
    """

    @abstractmethod
    def is_available(self, book_id: int) -> bool:
        """True iff the book has at least one lendable copy."""

    @abstractmethod
    def fetch_summary(self, book_id: int) -> BookSummary:
        """Title and stock metadata for display."""

    @abstractmethod
    def decrement_stock(self, book_id: int) -> None:
        """Mark one copy as loaned out."""

    @abstractmethod
    def increment_stock(self, book_id: int) -> None:
        """Mark one copy as back on the shelf."""

    def fetch_summary_or_placeholder(self, book_id: int) -> BookSummary:
        """Best-effort :meth:`fetch_summary` that never raises remote errors."""
        try:
            return self.fetch_summary(book_id)
        except (RemoteUnavailableError, RemoteNotFoundError, RemoteRejectedError) as exc:
            logger.warning("Could not fetch book %s summary: %s", book_id, exc)
            return BookSummary.placeholder(book_id)

    def ping(self) -> bool:
        """Whether the service answers at all."""
        return True


class HttpClientMixin:
    """Shared request/response handling for JSON upstream services."""

    service_name = "upstream"

    def __init__(
        self,
        config: RemoteServiceConfig,
        client: httpx.Client | None = None,
    ) -> None:
        self.config = config
        self._client = client or httpx.Client(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            headers={"Accept": "application/json"},
        )

    def _request(self, method: str, path: str, entity_id: int | None = None) -> Any:
        try:
            response = self._client.request(method, path)
        except httpx.TimeoutException as exc:
            raise RemoteUnavailableError(f"{self.service_name} timed out on {method} {path}") from exc
        except httpx.HTTPError as exc:
            raise RemoteUnavailableError(f"{self.service_name} unreachable on {method} {path}: {exc}") from exc

        if response.status_code == 404:
            raise RemoteNotFoundError(f"{self.service_name} has no entity {entity_id}")
        if 400 <= response.status_code < 500:
            raise RemoteRejectedError(
                f"{self.service_name} rejected {method} {path} with {response.status_code}"
            )
        if response.status_code >= 500:
            raise RemoteUnavailableError(
                f"{self.service_name} failed {method} {path} with {response.status_code}"
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteUnavailableError(f"{self.service_name} sent invalid JSON for {path}") from exc

    def ping(self) -> bool:
        try:
            health_url = httpx.URL(self.config.base_url).copy_with(path=self.config.health_path)
            response = self._client.get(health_url)
        except httpx.HTTPError:
            return False
        return response.is_success

    def close(self) -> None:
        self._client.close()


class HttpBookGateway(HttpClientMixin, BookAvailabilityGateway):
    """Books service client over HTTP/JSON."""

    service_name = "books-service"

    def is_available(self, book_id: int) -> bool:
        return bool(self._request("GET", f"/books/{book_id}/available", book_id))

    def fetch_summary(self, book_id: int) -> BookSummary:
        payload = self._request("GET", f"/books/{book_id}", book_id)
        if not isinstance(payload, dict):
            raise RemoteUnavailableError(
                f"{self.service_name} sent an unexpected body for book {book_id}"
            )
        return BookSummary(
            book_id=payload.get("id", book_id),
            title=payload.get("title") or UNAVAILABLE_TITLE,
            stock_count=payload.get("stockCount"),
            available=payload.get("available"),
        )

    def decrement_stock(self, book_id: int) -> None:
        self._request("POST", f"/books/{book_id}/loan", book_id)
        logger.info("Decremented stock of book %s", book_id)

    def increment_stock(self, book_id: int) -> None:
        self._request("POST", f"/books/{book_id}/return", book_id)
        logger.info("Incremented stock of book %s", book_id)
