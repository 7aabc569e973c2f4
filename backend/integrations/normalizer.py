"""업스트림 JSON → 내부 레코드 정규화.

소스별 필드 스키마(출력 필드 → 업스트림 경로)를 선언하고 한 곳에서 기본값을 적용한다.
모든 함수는 전함수: 어떤 입력에도 예외를 던지지 않는다.
"""
import logging
import math
from typing import Any, Callable, Optional

from core.timezone import from_unix_seconds
from schemas.market import (
    DEFAULT_SENTIMENT_CLASS,
    DEFAULT_SENTIMENT_VALUE,
    DeFiProtocol,
    DexVolumeSummary,
    MarketAsset,
    SentimentHistory,
    SentimentSnapshot,
    TokenDetail,
    TrendingAsset,
    TrendingFeed,
    TrendingNft,
)

logger = logging.getLogger(__name__)

MAX_CHAINS = 5
MAX_CATEGORIES = 5
MAX_DESCRIPTION_CHARS = 500
MAX_PROTOCOLS = 10


# ── 필드 변환기 ──

def to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return result if math.isfinite(result) else None


def to_int(value: Any) -> Optional[int]:
    number = to_float(value)
    if number is None:
        return None
    return int(number)


def to_str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def to_upper(value: Any) -> Optional[str]:
    text = to_str(value)
    return text.upper() if text is not None else None


def dig(raw: Any, path: tuple) -> Any:
    """중첩 dict/list에서 경로를 따라 값을 꺼낸다. 중간에 없으면 None."""
    current = raw
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or len(current) <= key:
                return None
        elif not isinstance(current, dict):
            return None
        current = current[key] if isinstance(key, int) else current.get(key)
        if current is None:
            return None
    return current


FieldSpec = tuple[tuple, Callable[[Any], Any]]


def extract(raw: Any, schema: dict[str, FieldSpec]) -> dict[str, Any]:
    """스키마에 선언된 필드만 추출. 변환 실패 필드는 None."""
    return {field: convert(dig(raw, path)) for field, (path, convert) in schema.items()}


def _as_list(raw: Any) -> list:
    return raw if isinstance(raw, list) else []


def _str_list(raw: Any, limit: int) -> list[str]:
    return [item for item in _as_list(raw) if isinstance(item, str)][:limit]


# ── 소스별 스키마 ──

SENTIMENT_SCHEMA: dict[str, FieldSpec] = {
    "value": (("value",), to_int),
    "classification": (("value_classification",), to_str),
    "timestamp": (("timestamp",), from_unix_seconds),
}

MARKET_SCHEMA: dict[str, FieldSpec] = {
    "id": (("id",), to_str),
    "symbol": (("symbol",), to_upper),
    "name": (("name",), to_str),
    "price": (("current_price",), to_float),
    "price_change_24h": (("price_change_percentage_24h",), to_float),
    "price_change_7d": (("price_change_percentage_7d_in_currency",), to_float),
    "market_cap": (("market_cap",), to_float),
    "market_cap_rank": (("market_cap_rank",), to_int),
    "volume_24h": (("total_volume",), to_float),
    "ath": (("ath",), to_float),
    "ath_date": (("ath_date",), to_str),
    "ath_change_percentage": (("ath_change_percentage",), to_float),
}

TOKEN_SCHEMA: dict[str, FieldSpec] = {
    "id": (("id",), to_str),
    "symbol": (("symbol",), to_upper),
    "name": (("name",), to_str),
    "price": (("market_data", "current_price", "usd"), to_float),
    "price_change_24h": (("market_data", "price_change_percentage_24h"), to_float),
    "price_change_7d": (("market_data", "price_change_percentage_7d"), to_float),
    "market_cap": (("market_data", "market_cap", "usd"), to_float),
    "market_cap_rank": (("market_cap_rank",), to_int),
    "volume_24h": (("market_data", "total_volume", "usd"), to_float),
    "ath": (("market_data", "ath", "usd"), to_float),
    "ath_date": (("market_data", "ath_date", "usd"), to_str),
    "ath_change_percentage": (("market_data", "ath_change_percentage", "usd"), to_float),
}

TRENDING_COIN_SCHEMA: dict[str, FieldSpec] = {
    "symbol": (("item", "symbol"), to_upper),
    "name": (("item", "name"), to_str),
    "rank": (("item", "market_cap_rank"), to_int),
    "price": (("item", "data", "price"), to_float),
    "price_change_24h": (("item", "data", "price_change_percentage_24h", "usd"), to_float),
    "market_cap": (("item", "data", "market_cap"), to_str),
}

TRENDING_NFT_SCHEMA: dict[str, FieldSpec] = {
    "name": (("name",), to_str),
    "floor_price": (("data", "floor_price"), to_str),
    "change_24h": (("data", "floor_price_in_usd_24h_percentage_change"), to_float),
}

PROTOCOL_SCHEMA: dict[str, FieldSpec] = {
    "name": (("name",), to_str),
    "category": (("category",), to_str),
    "tvl": (("tvl",), to_float),
    "tvl_change_24h": (("change_1d",), to_float),
    "tvl_change_7d": (("change_7d",), to_float),
    "url": (("url",), to_str),
}

DEX_VOLUME_SCHEMA: dict[str, FieldSpec] = {
    "total_24h": (("total24h",), to_float),
    "change_24h": (("change_1d",), to_float),
    "change_7d": (("change_7d",), to_float),
    "total_all_time": (("totalAllTime",), to_float),
}


# ── 정규화 함수 ──

def normalize_sentiment(raw: Any) -> SentimentHistory:
    """alternative.me /fng 응답 → SentimentHistory (최신순)."""
    entries = []
    for item in _as_list(dig(raw, ("data",))):
        fields = extract(item, SENTIMENT_SCHEMA)
        entries.append(SentimentSnapshot(
            value=fields["value"] if fields["value"] is not None else DEFAULT_SENTIMENT_VALUE,
            classification=fields["classification"] or DEFAULT_SENTIMENT_CLASS,
            timestamp=fields["timestamp"],
        ))
    return SentimentHistory(entries=entries)


def normalize_markets(raw: Any) -> list[MarketAsset]:
    """CoinGecko /coins/markets 응답 → 시가총액순 MarketAsset 리스트."""
    return [
        MarketAsset(**extract(item, MARKET_SCHEMA))
        for item in _as_list(raw)
        if isinstance(item, dict)
    ]


def normalize_token(raw: Any) -> TokenDetail:
    """CoinGecko /coins/{id} 응답 → TokenDetail."""
    description = to_str(dig(raw, ("description", "en"))) or ""
    return TokenDetail(
        **extract(raw, TOKEN_SCHEMA),
        categories=_str_list(dig(raw, ("categories",)), MAX_CATEGORIES),
        description=description[:MAX_DESCRIPTION_CHARS],
    )


def normalize_trending(raw: Any) -> TrendingFeed:
    """CoinGecko /search/trending 응답 → TrendingFeed (업스트림 순서 유지)."""
    coins = [
        TrendingAsset(**extract(item, TRENDING_COIN_SCHEMA))
        for item in _as_list(dig(raw, ("coins",)))
        if isinstance(item, dict)
    ]
    nfts = [
        TrendingNft(**extract(item, TRENDING_NFT_SCHEMA))
        for item in _as_list(dig(raw, ("nfts",)))
        if isinstance(item, dict)
    ]
    return TrendingFeed(coins=coins, nfts=nfts)


def normalize_protocols(raw: Any) -> list[DeFiProtocol]:
    """DefiLlama /protocols 응답 → TVL 상위 10개 프로토콜.

    TVL이 양수가 아닌(또는 숫자가 아닌) 항목은 제외, TVL 내림차순 정렬 후 10개로 자른다.
    """
    candidates = []
    for item in _as_list(raw):
        if not isinstance(item, dict):
            continue
        tvl = to_float(item.get("tvl"))
        if tvl is None or tvl <= 0:
            continue
        candidates.append((tvl, item))

    candidates.sort(key=lambda pair: pair[0], reverse=True)

    protocols = []
    for _, item in candidates[:MAX_PROTOCOLS]:
        protocols.append(DeFiProtocol(
            **extract(item, PROTOCOL_SCHEMA),
            chains=_str_list(item.get("chains"), MAX_CHAINS),
        ))
    return protocols


def normalize_dex_volume(raw: Any) -> DexVolumeSummary:
    """DefiLlama /overview/dexs 응답 → DexVolumeSummary."""
    return DexVolumeSummary(**extract(raw, DEX_VOLUME_SCHEMA))
