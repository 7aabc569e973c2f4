"""Base HTTP client for keyless upstream JSON APIs."""
import logging
from typing import Any, Optional
from abc import ABC

import httpx

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """업스트림 호출 실패 (네트워크/타임아웃/비정상 상태 코드)."""

    def __init__(self, source: str, cause: Optional[BaseException] = None):
        self.source = source
        self.cause = cause
        super().__init__(f"{source} unavailable: {cause}")


class TokenNotFoundError(UpstreamError):
    """토큰 조회 시 업스트림이 404를 반환."""

    def __init__(self, token_id: str, cause: Optional[BaseException] = None):
        self.token_id = token_id
        super().__init__("coingecko", cause)

    def __str__(self) -> str:
        return f"Token {self.token_id} not found"


class BaseAPIClient(ABC):
    """Base class for upstream API clients.

    One GET per call, no retries, bounded timeout.
    Every transport/status failure surfaces as UpstreamError.
    """

    source: str = "upstream"

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def get_headers(self) -> dict[str, str]:
        """Return headers for API requests. Override in subclasses."""
        return {"Accept": "application/json"}

    async def get(
        self,
        path: str,
        params: Optional[dict] = None,
    ) -> Any:
        """GET 요청 후 JSON 반환. JSON 파싱 실패 시 None (정규화 단계에서 기본값 처리)."""
        try:
            response = await self.client.get(
                path,
                params=params,
                headers=self.get_headers(),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"HTTP error {e.response.status_code} for GET {self.base_url}{path}"
            )
            raise UpstreamError(self.source, e) from e
        except (httpx.RequestError, httpx.InvalidURL) as e:
            logger.error(f"Request error for GET {self.base_url}{path}: {e!r}")
            raise UpstreamError(self.source, e) from e

        try:
            return response.json()
        except ValueError:
            logger.warning(f"Malformed JSON from {self.source} ({path}), using defaults")
            return None
