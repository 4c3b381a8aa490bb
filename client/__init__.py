"""Legajos - API client
HTTP client and form helpers for the Legajos REST API.
"""

from .api import ApiError, LegajosClient, normalize_base_url

__all__ = ["ApiError", "LegajosClient", "normalize_base_url"]
