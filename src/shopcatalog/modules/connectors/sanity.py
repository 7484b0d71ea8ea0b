"""
Sanity Content Store Connector.

Executes GROQ queries against the Sanity HTTP query API and returns the raw
``result`` payload. No merging or transformation happens here.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from shopcatalog.core.config import Config, SanityConfig
from shopcatalog.core.exceptions import ConfigurationError, ContentStoreError

logger = logging.getLogger(__name__)


class SanityConnector:
    """Connector for the Sanity query API.

    Usage:
        connector = SanityConnector(config=config)
        records = await connector.fetch('*[_type == "product"][0...10]')
        record = await connector.fetch(
            '*[_type == "product" && slug.current == $handle][0]',
            {"handle": "some-record"},
        )
    """

    def __init__(
        self,
        *,
        config: Config | None = None,
        settings: SanityConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize Sanity connector.

        Args:
            config: Optional core config (uses ``config.sanity``)
            settings: Explicit Sanity settings; wins over ``config``
            client: Optional shared ``httpx.AsyncClient`` (tests inject one
                with a mock transport)
        """
        if settings is None:
            if config is None:
                from shopcatalog.core.config import get_core_config

                config = get_core_config()
            settings = config.sanity

        if not settings.project_id:
            raise ConfigurationError("Sanity project id not configured")

        self.settings = settings
        self._client = client

    @property
    def base_url(self) -> str:
        host = "apicdn.sanity.io" if self.settings.use_cdn else "api.sanity.io"
        return f"https://{self.settings.project_id}.{host}/v{self.settings.api_version}"

    @property
    def query_url(self) -> str:
        return f"{self.base_url}/data/query/{self.settings.dataset}"

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.settings.token:
            headers["Authorization"] = f"Bearer {self.settings.token}"
        return headers

    @staticmethod
    def encode_params(params: dict[str, Any] | None) -> dict[str, str]:
        """Encode GROQ parameters as ``$name`` query-string entries (JSON values)."""
        encoded: dict[str, str] = {}
        for name, value in (params or {}).items():
            encoded[f"${name}"] = json.dumps(value)
        return encoded

    async def fetch(self, query: str, params: dict[str, Any] | None = None) -> Any:
        """Execute a GROQ query and return its ``result``.

        Raises:
            ContentStoreError: transport failure, non-2xx response or a
                payload without ``result``.
        """
        request_params = {"query": query, **self.encode_params(params)}

        try:
            if self._client is not None:
                response = await self._client.get(
                    self.query_url, params=request_params, headers=self._headers()
                )
            else:
                async with httpx.AsyncClient(timeout=self.settings.timeout) as client:
                    response = await client.get(
                        self.query_url, params=request_params, headers=self._headers()
                    )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise ContentStoreError(
                f"Sanity query failed: {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise ContentStoreError(f"Sanity request error: {e}") from e

        if not isinstance(data, dict) or "result" not in data:
            raise ContentStoreError("Sanity response has no result")

        logger.debug("Sanity query ok (%d chars, ms=%s)", len(query), data.get("ms"))
        return data["result"]


__all__ = ["SanityConnector"]
