"""엔트리포인트 invoke 요청/응답 스키마.

와이어 포맷은 camelCase (marketContext, topDeFi, ...), 파이썬 속성은 snake_case.
"""
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.market import AlphaSignal


def to_camel(name: str) -> str:
    """price_change_24h → priceChange24h (숫자 뒤 소문자 유지)."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── 요청 ──

class AlphaSource(str, Enum):
    COINGECKO = "coingecko"
    DEFILLAMA = "defillama"
    FEARGREED = "feargreed"


ALL_SOURCES: tuple[AlphaSource, ...] = tuple(AlphaSource)


class DailyAlphaInput(BaseModel):
    sources: Optional[list[AlphaSource]] = None  # None 또는 빈 리스트 → 전체


class TokenIntelInput(BaseModel):
    token: Optional[str] = None


# ── 응답 ──

class RunStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class InvokeResponse(BaseModel):
    run_id: str
    status: RunStatus
    output: dict[str, Any]


class PingOutput(CamelModel):
    status: str = "alive"
    agent: str
    version: str
    by: str
    timestamp: str


class SentimentReading(CamelModel):
    value: int
    classification: str


class SentimentHistoryItem(CamelModel):
    value: int
    classification: str
    date: Optional[str] = None


class FearGreedOutput(CamelModel):
    current: SentimentReading
    history: list[SentimentHistoryItem] = []
    interpretation: str


class MarketContext(CamelModel):
    fear_greed_index: int
    fear_greed_class: str
    btc_price: Optional[float] = None
    btc_change_24h: Optional[float] = None
    eth_price: Optional[float] = None
    eth_change_24h: Optional[float] = None
    dex_volume_24h: Optional[float] = None
    dex_volume_change: Optional[float] = None


class DigestSignal(CamelModel):
    type: str
    asset: Optional[str] = None
    title: str
    details: str
    confidence: str
    actionable: bool

    @classmethod
    def from_signal(cls, signal: AlphaSignal) -> "DigestSignal":
        return cls(
            type=signal.type.value,
            asset=signal.asset,
            title=signal.title,
            details=signal.details,
            confidence=signal.confidence.value,
            actionable=signal.actionable,
        )


class DigestTrendingItem(CamelModel):
    symbol: Optional[str] = None
    name: Optional[str] = None
    rank: Optional[int] = None


class DigestDeFiItem(CamelModel):
    name: Optional[str] = None
    tvl: Optional[str] = None
    category: Optional[str] = None


class DigestOutput(CamelModel):
    timestamp: str
    summary: str
    market_context: MarketContext
    signals: list[DigestSignal] = []
    trending: list[DigestTrendingItem] = []
    top_defi: list[DigestDeFiItem] = Field(default_factory=list, alias="topDeFi")
    disclaimer: str


class TrendingCoinItem(CamelModel):
    symbol: Optional[str] = None
    name: Optional[str] = None
    rank: Optional[int] = None
    price: Optional[float] = None
    price_change_24h: Optional[float] = None
    market_cap: Optional[str] = None


class TrendingNftItem(CamelModel):
    name: Optional[str] = None
    floor_price: Optional[str] = None
    change_24h: Optional[float] = None


class TrendingOutput(CamelModel):
    timestamp: str
    coins: list[TrendingCoinItem] = []
    nfts: list[TrendingNftItem] = []


class DexVolumeStats(CamelModel):
    total_24h: Optional[str] = None
    change_24h: Optional[str] = None
    change_7d: Optional[str] = None


class ProtocolStats(CamelModel):
    name: Optional[str] = None
    category: Optional[str] = None
    tvl: Optional[str] = None
    change_24h: Optional[str] = None
    change_7d: Optional[str] = None
    chains: list[str] = []


class DeFiStatsOutput(CamelModel):
    timestamp: str
    dex_volume: DexVolumeStats
    top_protocols: list[ProtocolStats] = []


class TokenSnapshot(CamelModel):
    id: Optional[str] = None
    symbol: Optional[str] = None
    name: Optional[str] = None
    price: Optional[float] = None
    price_change_24h: Optional[float] = None
    price_change_7d: Optional[float] = None
    market_cap: Optional[float] = None
    market_cap_rank: Optional[int] = None
    volume_24h: Optional[float] = None
    ath: Optional[float] = None
    ath_date: Optional[str] = None
    ath_change_percentage: Optional[float] = None
    categories: list[str] = []
    description: str = ""


class TokenAnalysis(CamelModel):
    from_ath: Optional[str] = Field(default=None, alias="fromATH")
    momentum: str


class TokenIntelOutput(CamelModel):
    timestamp: str
    token: TokenSnapshot
    analysis: TokenAnalysis


class TokenIntelError(CamelModel):
    error: str
    token: str
    suggestion: str
