"""정규화된 업스트림 레코드 스키마.

모든 레코드는 요청 단위로 생성되는 불변 값 객체.
숫자 필드는 업스트림에 없거나 파싱 불가하면 None (0으로 대체하지 않음).
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SENTIMENT_VALUE = 50
DEFAULT_SENTIMENT_CLASS = "Neutral"


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class SignalType(str, Enum):
    SENTIMENT = "sentiment"
    WHALE = "whale"
    NARRATIVE = "narrative"
    PROTOCOL = "protocol"


class Confidence(str, Enum):
    LOW = "low"  # 현재 규칙에서는 생성되지 않음
    MEDIUM = "medium"
    HIGH = "high"


class SentimentSnapshot(FrozenModel):
    value: int = DEFAULT_SENTIMENT_VALUE
    classification: str = DEFAULT_SENTIMENT_CLASS
    timestamp: Optional[datetime] = None


class SentimentHistory(FrozenModel):
    entries: list[SentimentSnapshot] = Field(default_factory=list)  # 최신순

    @property
    def current(self) -> SentimentSnapshot:
        if self.entries:
            return self.entries[0]
        return SentimentSnapshot()


class MarketAsset(FrozenModel):
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


class TokenDetail(MarketAsset):
    categories: list[str] = Field(default_factory=list)  # 최대 5개
    description: str = ""  # 최대 500자


class TrendingAsset(FrozenModel):
    symbol: Optional[str] = None
    name: Optional[str] = None
    rank: Optional[int] = None
    price: Optional[float] = None
    price_change_24h: Optional[float] = None
    market_cap: Optional[str] = None  # 업스트림이 "$1,234,567" 형태 문자열로 제공


class TrendingNft(FrozenModel):
    name: Optional[str] = None
    floor_price: Optional[str] = None
    change_24h: Optional[float] = None


class TrendingFeed(FrozenModel):
    coins: list[TrendingAsset] = Field(default_factory=list)
    nfts: list[TrendingNft] = Field(default_factory=list)


class DeFiProtocol(FrozenModel):
    name: Optional[str] = None
    category: Optional[str] = None
    tvl: float
    tvl_change_24h: Optional[float] = None
    tvl_change_7d: Optional[float] = None
    chains: list[str] = Field(default_factory=list)  # 최대 5개
    url: Optional[str] = None


class DexVolumeSummary(FrozenModel):
    total_24h: Optional[float] = None
    change_24h: Optional[float] = None
    change_7d: Optional[float] = None
    total_all_time: Optional[float] = None


class AlphaSignal(FrozenModel):
    type: SignalType
    asset: Optional[str] = None
    title: str
    details: str
    confidence: Confidence
    actionable: bool = True
