"""CoinGecko 공개 API 클라이언트."""
import logging
from typing import Optional
from urllib.parse import quote

import httpx

from integrations.base_client import BaseAPIClient, TokenNotFoundError, UpstreamError
from integrations.normalizer import normalize_markets, normalize_token, normalize_trending
from schemas.market import MarketAsset, TokenDetail, TrendingFeed
from core.config import get_settings

logger = logging.getLogger(__name__)


class CoinGeckoClient(BaseAPIClient):
    """CoinGecko v3 공개 API 클라이언트 (키 불필요).

    지원 기능:
    - 트렌딩 코인/NFT
    - 시가총액 상위 코인 시세
    - 단일 토큰 상세
    """

    source = "coingecko"

    MARKETS_PARAMS = {
        "vs_currency": "usd",
        "order": "market_cap_desc",
        "per_page": 10,
        "sparkline": "false",
        "price_change_percentage": "24h,7d",
    }
    COIN_PARAMS = {
        "localization": "false",
        "tickers": "false",
        "community_data": "false",
        "developer_data": "false",
    }

    def __init__(self, base_url: Optional[str] = None, **kwargs):
        settings = get_settings()
        super().__init__(
            base_url=base_url or settings.coingecko_base_url,
            timeout=kwargs.pop("timeout", settings.upstream_timeout_seconds),
            **kwargs,
        )

    async def get_trending(self) -> TrendingFeed:
        """검색 트렌딩 (업스트림 순서 유지)."""
        data = await self.get("/search/trending")
        return normalize_trending(data)

    async def get_markets(self) -> list[MarketAsset]:
        """시가총액 상위 10개 코인. index 0이 1위 (보통 BTC)."""
        data = await self.get("/coins/markets", params=self.MARKETS_PARAMS)
        return normalize_markets(data)

    async def get_coin(self, token_id: str) -> TokenDetail:
        """단일 토큰 상세.

        Args:
            token_id: CoinGecko 토큰 ID (예: "bitcoin", "ethereum")

        Raises:
            TokenNotFoundError: 업스트림 404
            UpstreamError: 그 외 네트워크/상태 오류
        """
        try:
            # 경로 구분자/제어문자가 다른 엔드포인트로 새지 않도록 인코딩
            data = await self.get(f"/coins/{quote(token_id, safe='')}", params=self.COIN_PARAMS)
        except UpstreamError as e:
            if isinstance(e.cause, httpx.HTTPStatusError) and e.cause.response.status_code == 404:
                raise TokenNotFoundError(token_id, e.cause) from e
            raise
        return normalize_token(data)


# 싱글톤 인스턴스
_coingecko_client: Optional[CoinGeckoClient] = None


def get_coingecko_client() -> CoinGeckoClient:
    """CoinGecko 클라이언트 싱글톤 반환."""
    global _coingecko_client
    if _coingecko_client is None:
        _coingecko_client = CoinGeckoClient()
    return _coingecko_client
