"""Loans back-office service for a digital library."""

__version__ = "0.1.0"
