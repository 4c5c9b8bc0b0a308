# src/infra/api_client.py
"""
HTTP-клиент backend API.
Тонкая обёртка над httpx.AsyncClient: базовый адрес, bearer-токен, raise_for_status.
"""

from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import urljoin, urlsplit

import httpx

from src.common.constants import TypeMsg
from src.common.logger import log_info


def resolve_api_url(api_url: str, page_url: str | None = None) -> str:
    """
    Относительный API_URL (например "/api") достраивается от origin страницы.
    """
    if urlsplit(api_url).scheme:
        return api_url.rstrip("/")
    if not page_url:
        raise ValueError(f"Относительный API_URL '{api_url}' требует адреса страницы")
    parts = urlsplit(page_url)
    origin = f"{parts.scheme}://{parts.netloc}/"
    return urljoin(origin, api_url.lstrip("/")).rstrip("/")


class ApiClient:
    """Клиент REST API поездок и панели администратора."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        from src.config import settings

        self.base_url = resolve_api_url(
            base_url or settings.api.API_URL,
            settings.realtime.WS_PAGE_URL,
        )
        self.timeout = timeout if timeout is not None else settings.api.API_TIMEOUT
        self._token = token if token is not None else settings.api.API_TOKEN

        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=headers,
            transport=transport,
        )

    def set_token(self, token: str | None) -> None:
        """Меняет токен для последующих запросов."""
        self._token = token
        if token:
            self.client.headers["Authorization"] = f"Bearer {token}"
        else:
            self.client.headers.pop("Authorization", None)

    async def close(self):
        await self.client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        response = await self.client.get(path, params=params)
        response.raise_for_status()
        return response.json()

    async def post(self, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        response = await self.client.post(path, json=json)
        response.raise_for_status()
        if not response.content:
            return None
        return response.json()

    async def patch(self, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        response = await self.client.patch(path, json=json)
        response.raise_for_status()
        return response.json()

    async def get_or_none(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET, где 404 означает «нет такого объекта»."""
        try:
            return await self.get(path, params=params)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                await log_info(f"Не найдено: {path}", type_msg=TypeMsg.DEBUG, logger_name="api")
                return None
            raise
