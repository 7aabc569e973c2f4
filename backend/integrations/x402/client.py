"""x402 facilitator 클라이언트 (결제 검증/정산)."""
import logging
from typing import Any, Optional

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from core.config import get_settings

logger = logging.getLogger(__name__)

X402_VERSION = 1


class FacilitatorError(Exception):
    """facilitator 호출 실패."""
    pass


class FacilitatorClient:
    """x402 facilitator API 클라이언트.

    - POST /verify: 결제 페이로드 유효성 검증
    - POST /settle: 온체인 정산
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.facilitator_url).rstrip("/")
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

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
        reraise=True,
    )
    async def _post(self, path: str, payload: dict, requirements: dict) -> dict[str, Any]:
        body = {
            "x402Version": X402_VERSION,
            "paymentPayload": payload,
            "paymentRequirements": requirements,
        }
        response = await self.client.post(path, json=body)
        response.raise_for_status()
        return response.json()

    async def _call(self, path: str, payload: dict, requirements: dict) -> dict[str, Any]:
        try:
            data = await self._post(path, payload, requirements)
        except httpx.HTTPStatusError as e:
            logger.error(f"Facilitator HTTP error {e.response.status_code} for POST {path}: {e.response.text}")
            raise FacilitatorError(f"facilitator {path} returned {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error(f"Facilitator request error for POST {path}: {e!r}")
            raise FacilitatorError(f"facilitator {path} unreachable") from e
        except ValueError as e:
            raise FacilitatorError(f"facilitator {path} returned malformed JSON") from e

        if not isinstance(data, dict):
            logger.error(f"Facilitator returned non-object body for POST {path}: {data!r}")
            raise FacilitatorError(f"facilitator {path} returned malformed JSON")
        return data

    async def verify(self, payload: dict, requirements: dict) -> dict[str, Any]:
        """결제 검증.

        Returns:
            {"isValid": True, "invalidReason": None, "payer": "0x..."}
        """
        return await self._call("/verify", payload, requirements)

    async def settle(self, payload: dict, requirements: dict) -> dict[str, Any]:
        """결제 정산.

        Returns:
            {"success": True, "transaction": "0x...", "network": "eip155:84532", "payer": "0x..."}
        """
        return await self._call("/settle", payload, requirements)


# 싱글톤 인스턴스
_facilitator_client: Optional[FacilitatorClient] = None


def get_facilitator_client() -> FacilitatorClient:
    """facilitator 클라이언트 싱글톤 반환."""
    global _facilitator_client
    if _facilitator_client is None:
        _facilitator_client = FacilitatorClient()
    return _facilitator_client
