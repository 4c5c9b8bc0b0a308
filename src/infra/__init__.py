# src/infra/__init__.py
"""
Инфраструктурный слой.
Работа с внешними сервисами: HTTP API backend.
"""

from src.infra.api_client import ApiClient, resolve_api_url

__all__ = [
    "ApiClient",
    "resolve_api_url",
]
