"""알파 시그널 엔진.

정규화된 레코드에 고정 임계값 규칙을 적용하는 순수 함수:
1. 센티먼트 극단 (공포 → 매수 구간, 탐욕 → 주의 구간)
2. 거래량/가격 다이버전스 (고래)
3. 내러티브 모멘텀 (트렌딩 상위 3개)
4. 프로토콜 TVL 성장 (TVL 상위 3개)

시그널 순서는 규칙 평가 순서이며 랭킹이 아니다.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from schemas.market import (
    AlphaSignal,
    Confidence,
    DeFiProtocol,
    DexVolumeSummary,
    MarketAsset,
    SentimentSnapshot,
    SignalType,
    TrendingAsset,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignalThresholds:
    """규칙 임계값. 비교 방향은 각 규칙 주석 참고."""
    fear: int = 25  # value <= fear
    extreme_fear: int = 15  # value <= extreme_fear → high
    greed: int = 75  # value >= greed
    extreme_greed: int = 85  # value >= extreme_greed → high
    dex_volume_surge: float = 5.0  # DEX 24h 변동 > surge
    primary_price_drop: float = -2.0  # 1위 자산 24h 변동 < drop
    narrative_momentum: float = 10.0  # 트렌딩 24h 변동 > momentum
    protocol_tvl_growth: float = 10.0  # 프로토콜 7d TVL 변동 > growth
    window: int = 3  # 트렌딩/프로토콜 평가 개수


SIGNAL_THRESHOLDS = SignalThresholds()


# ── 규칙 1: 센티먼트 극단 ──

def _sentiment_signal(
    sentiment: SentimentSnapshot,
    t: SignalThresholds,
) -> Optional[AlphaSignal]:
    value = sentiment.value
    label = f"{sentiment.classification} ({value})"

    if value <= t.fear:
        return AlphaSignal(
            type=SignalType.SENTIMENT,
            title=f"{label} - Potential Buy Zone",
            details="Extreme fear often precedes market reversals. Consider accumulation.",
            confidence=Confidence.HIGH if value <= t.extreme_fear else Confidence.MEDIUM,
        )
    if value >= t.greed:
        return AlphaSignal(
            type=SignalType.SENTIMENT,
            title=f"{label} - Caution Zone",
            details="Extreme greed often precedes corrections. Consider taking profits.",
            confidence=Confidence.HIGH if value >= t.extreme_greed else Confidence.MEDIUM,
        )
    return None


# ── 규칙 2: 거래량/가격 다이버전스 ──

def _whale_signal(
    dex_volume: Optional[DexVolumeSummary],
    market_assets: Optional[Sequence[MarketAsset]],
    t: SignalThresholds,
) -> Optional[AlphaSignal]:
    if dex_volume is None or not market_assets:
        return None

    volume_change = dex_volume.change_24h
    primary_change = market_assets[0].price_change_24h
    if volume_change is None or primary_change is None:
        return None

    if volume_change > t.dex_volume_surge and primary_change < t.primary_price_drop:
        return AlphaSignal(
            type=SignalType.WHALE,
            title="Volume/Price Divergence - Smart Money Repositioning",
            details=f"DEX volume up {volume_change:.1f}% while prices down. Potential accumulation.",
            confidence=Confidence.MEDIUM,
        )
    return None


# ── 규칙 3: 내러티브 모멘텀 ──

def _narrative_signals(
    trending: Optional[Sequence[TrendingAsset]],
    t: SignalThresholds,
) -> list[AlphaSignal]:
    signals = []
    for coin in (trending or [])[:t.window]:
        change = coin.price_change_24h
        if change is None or change <= t.narrative_momentum:
            continue
        signals.append(AlphaSignal(
            type=SignalType.NARRATIVE,
            asset=coin.symbol,
            title=f"{coin.name} trending +{change:.1f}%",
            details=f"Rank #{coin.rank or '?'}, strong momentum against market",
            confidence=Confidence.MEDIUM,
        ))
    return signals


# ── 규칙 4: 프로토콜 TVL 성장 ──

def _protocol_signals(
    protocols: Optional[Sequence[DeFiProtocol]],
    t: SignalThresholds,
) -> list[AlphaSignal]:
    signals = []
    for protocol in (protocols or [])[:t.window]:
        change = protocol.tvl_change_7d
        if change is None or change <= t.protocol_tvl_growth:
            continue
        signals.append(AlphaSignal(
            type=SignalType.PROTOCOL,
            asset=protocol.name,
            title=f"{protocol.name} TVL up {change:.1f}% weekly",
            details=f"Category: {protocol.category}, TVL: ${protocol.tvl / 1e9:.2f}B",
            confidence=Confidence.MEDIUM,
        ))
    return signals


def build_alpha_signals(
    sentiment: Optional[SentimentSnapshot] = None,
    dex_volume: Optional[DexVolumeSummary] = None,
    market_assets: Optional[Sequence[MarketAsset]] = None,
    trending: Optional[Sequence[TrendingAsset]] = None,
    protocols: Optional[Sequence[DeFiProtocol]] = None,
    thresholds: SignalThresholds = SIGNAL_THRESHOLDS,
) -> list[AlphaSignal]:
    """규칙을 고정 순서로 평가해 시그널 리스트 반환. 예외를 던지지 않는다.

    sentiment가 None이면 기본 스냅샷(50/Neutral)으로 평가하므로 센티먼트 시그널은 생기지 않는다.
    """
    signals: list[AlphaSignal] = []

    sentiment_signal = _sentiment_signal(sentiment or SentimentSnapshot(), thresholds)
    if sentiment_signal:
        signals.append(sentiment_signal)

    whale_signal = _whale_signal(dex_volume, market_assets, thresholds)
    if whale_signal:
        signals.append(whale_signal)

    signals.extend(_narrative_signals(trending, thresholds))
    signals.extend(_protocol_signals(protocols, thresholds))

    logger.debug(f"Alpha signals built: {len(signals)}")
    return signals
