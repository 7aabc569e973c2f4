"""DefiLlama 공개 API 클라이언트."""
import logging
from typing import Optional

from integrations.base_client import BaseAPIClient
from integrations.normalizer import normalize_dex_volume, normalize_protocols
from schemas.market import DeFiProtocol, DexVolumeSummary
from core.config import get_settings

logger = logging.getLogger(__name__)


class DefiLlamaClient(BaseAPIClient):
    """DefiLlama API 클라이언트.

    API 문서: https://defillama.com/docs/api
    """

    source = "defillama"

    DEX_OVERVIEW_PARAMS = {
        "excludeTotalDataChart": "true",
        "excludeTotalDataChartBreakdown": "true",
    }

    def __init__(self, base_url: Optional[str] = None, **kwargs):
        settings = get_settings()
        super().__init__(
            base_url=base_url or settings.defillama_base_url,
            timeout=kwargs.pop("timeout", settings.upstream_timeout_seconds),
            **kwargs,
        )

    async def get_protocols(self) -> list[DeFiProtocol]:
        """TVL 상위 10개 프로토콜 (TVL 내림차순, TVL ≤ 0 제외)."""
        data = await self.get("/protocols")
        protocols = normalize_protocols(data)
        logger.debug(f"DefiLlama protocols: {len(protocols)} kept")
        return protocols

    async def get_dex_overview(self) -> DexVolumeSummary:
        """DEX 거래량 요약 (24h/7d 변동률 포함)."""
        data = await self.get("/overview/dexs", params=self.DEX_OVERVIEW_PARAMS)
        return normalize_dex_volume(data)


# 싱글톤 인스턴스
_defillama_client: Optional[DefiLlamaClient] = None


def get_defillama_client() -> DefiLlamaClient:
    """DefiLlama 클라이언트 싱글톤 반환."""
    global _defillama_client
    if _defillama_client is None:
        _defillama_client = DefiLlamaClient()
    return _defillama_client
