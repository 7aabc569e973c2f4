from .market import (
    AlphaSignal,
    Confidence,
    DeFiProtocol,
    DexVolumeSummary,
    MarketAsset,
    SentimentHistory,
    SentimentSnapshot,
    SignalType,
    TokenDetail,
    TrendingAsset,
    TrendingFeed,
    TrendingNft,
)
from .entrypoints import (
    AlphaSource,
    DailyAlphaInput,
    DigestOutput,
    InvokeResponse,
    RunStatus,
    TokenIntelError,
    TokenIntelOutput,
    TokenIntelInput,
)

__all__ = [
    "AlphaSignal",
    "Confidence",
    "DeFiProtocol",
    "DexVolumeSummary",
    "MarketAsset",
    "SentimentHistory",
    "SentimentSnapshot",
    "SignalType",
    "TokenDetail",
    "TrendingAsset",
    "TrendingFeed",
    "TrendingNft",
    "AlphaSource",
    "DailyAlphaInput",
    "DigestOutput",
    "InvokeResponse",
    "RunStatus",
    "TokenIntelError",
    "TokenIntelOutput",
    "TokenIntelInput",
]
