"""alternative.me Fear & Greed Index 클라이언트."""
import logging
from typing import Optional

from integrations.base_client import BaseAPIClient
from integrations.normalizer import normalize_sentiment
from schemas.market import SentimentHistory
from core.config import get_settings

logger = logging.getLogger(__name__)


class FearGreedClient(BaseAPIClient):
    """Crypto Fear & Greed Index API 클라이언트.

    API 문서: https://alternative.me/crypto/fear-and-greed-index/#api
    키 불필요, 하루 1회 갱신.
    """

    source = "feargreed"

    def __init__(self, base_url: Optional[str] = None, **kwargs):
        settings = get_settings()
        super().__init__(
            base_url=base_url or settings.fear_greed_base_url,
            timeout=kwargs.pop("timeout", settings.upstream_timeout_seconds),
            **kwargs,
        )

    async def get_index(self, limit: int = 7) -> SentimentHistory:
        """최근 limit일 지수 조회 (최신순).

        Returns:
            SentimentHistory(entries=[SentimentSnapshot(value=25, classification="Extreme Fear", ...), ...])
        """
        data = await self.get("/fng/", params={"limit": limit})
        return normalize_sentiment(data)


# 싱글톤 인스턴스
_fear_greed_client: Optional[FearGreedClient] = None


def get_fear_greed_client() -> FearGreedClient:
    """Fear & Greed 클라이언트 싱글톤 반환."""
    global _fear_greed_client
    if _fear_greed_client is None:
        _fear_greed_client = FearGreedClient()
    return _fear_greed_client
