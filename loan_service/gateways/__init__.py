"""Clients for the upstream Books and Users services."""

from loan_service.gateways.books import BookAvailabilityGateway, HttpBookGateway
from loan_service.gateways.users import HttpUserGateway, UserDirectoryGateway

__all__ = [
    "BookAvailabilityGateway",
    "HttpBookGateway",
    "HttpUserGateway",
    "UserDirectoryGateway",
]
