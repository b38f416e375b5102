"""Users service gateway (diagnostics only)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from loan_service.exceptions import RemoteNotFoundError
from loan_service.gateways.books import HttpClientMixin


class UserDirectoryGateway(ABC):
    @abstractmethod
    def exists(self, user_id: int) -> bool: ...

    def ping(self) -> bool:
        return True


class HttpUserGateway(HttpClientMixin, UserDirectoryGateway):
    """Users service client over HTTP/JSON."""

    service_name = "users-service"

    def exists(self, user_id: int) -> bool:
        try:
            self._request("GET", f"/users/{user_id}", user_id)
        except RemoteNotFoundError:
            return False
        return True
