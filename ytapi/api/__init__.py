"""Low-level Google REST API access."""

from .client import API_BASE, ApiClient, encode_query_data

__all__ = ["API_BASE", "ApiClient", "encode_query_data"]
