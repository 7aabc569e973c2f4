"""알파 다이제스트 서비스 - 소스 fan-out, 시그널 생성, 응답 조립.

부분 실패 허용: 개별 소스 실패는 해당 섹션만 비우고 전체 응답은 성공.
예외는 토큰 조회 하나뿐이며, 실패가 곧 응답 전체(status=failed)가 된다.
"""
import logging
from typing import Iterable, Optional, Union

from core.config import get_settings
from core.timezone import iso_now
from integrations.base_client import TokenNotFoundError, UpstreamError
from integrations.alternative_me import FearGreedClient, get_fear_greed_client
from integrations.coingecko import CoinGeckoClient, get_coingecko_client
from integrations.defillama import DefiLlamaClient, get_defillama_client
from schemas.entrypoints import (
    ALL_SOURCES,
    AlphaSource,
    DeFiStatsOutput,
    DexVolumeStats,
    DigestDeFiItem,
    DigestOutput,
    DigestSignal,
    DigestTrendingItem,
    FearGreedOutput,
    MarketContext,
    PingOutput,
    ProtocolStats,
    SentimentHistoryItem,
    SentimentReading,
    TokenAnalysis,
    TokenIntelError,
    TokenIntelOutput,
    TokenSnapshot,
    TrendingCoinItem,
    TrendingNftItem,
    TrendingOutput,
)
from schemas.market import (
    DEFAULT_SENTIMENT_VALUE,
    DexVolumeSummary,
    SentimentHistory,
    TokenDetail,
    TrendingFeed,
)
from services.signal_engine import SIGNAL_THRESHOLDS, build_alpha_signals
from services.source_result import gather_sources

logger = logging.getLogger(__name__)

DIGEST_TOP_N = 5
TRENDING_COINS_LIMIT = 10
TRENDING_NFTS_LIMIT = 5
UNKNOWN_CLASS = "Unknown"
DISCLAIMER = "Not financial advice. DYOR."
TOKEN_SUGGESTION = "Use CoinGecko token ID (e.g., bitcoin, ethereum)"
DEFAULT_TOKEN = "bitcoin"


def format_billions(value: Optional[float]) -> Optional[str]:
    """1234567890 → "$1.23B"."""
    if value is None:
        return None
    return f"${value / 1e9:.2f}B"


def format_pct(value: Optional[float]) -> Optional[str]:
    """12.345 → "12.3%"."""
    if value is None:
        return None
    return f"{value:.1f}%"


def interpret_sentiment(value: int) -> str:
    """시그널 엔진과 같은 25/75 경계로 3단계 해석."""
    if value <= SIGNAL_THRESHOLDS.fear:
        return "Extreme fear often signals buying opportunities"
    if value >= SIGNAL_THRESHOLDS.greed:
        return "Extreme greed may signal market tops"
    return "Market sentiment is neutral to moderate"


def token_momentum(change_7d: Optional[float]) -> str:
    if change_7d is None:
        return "neutral"
    if change_7d > 0:
        return "bullish"
    if change_7d < -10:
        return "bearish"
    return "neutral"


def resolve_sources(sources: Optional[Iterable[AlphaSource]]) -> set[AlphaSource]:
    """생략 또는 빈 선택 → 전체 소스."""
    selected = set(sources or [])
    return selected or set(ALL_SOURCES)


class AlphaService:
    """엔트리포인트별 응답 조립 서비스."""

    def __init__(
        self,
        fear_greed: Optional[FearGreedClient] = None,
        coingecko: Optional[CoinGeckoClient] = None,
        defillama: Optional[DefiLlamaClient] = None,
    ):
        self.settings = get_settings()
        self.fear_greed = fear_greed or get_fear_greed_client()
        self.coingecko = coingecko or get_coingecko_client()
        self.defillama = defillama or get_defillama_client()

    # ── 무료 ──

    def ping(self) -> PingOutput:
        return PingOutput(
            agent=f"{self.settings.app_name} 📊",
            version=self.settings.agent_version,
            by=self.settings.agent_author,
            timestamp=iso_now(),
        )

    def health(self) -> dict:
        return {
            "status": "ok",
            "agent": "crypto-alpha",
            "version": self.settings.agent_version,
        }

    async def fear_greed_index(self) -> FearGreedOutput:
        """현재 지수 + 최대 7일 히스토리 + 해석."""
        results = await gather_sources({"feargreed": self.fear_greed.get_index(limit=7)})
        history: Optional[SentimentHistory] = results["feargreed"].value_or()

        if history is None or not history.entries:
            current = SentimentReading(value=DEFAULT_SENTIMENT_VALUE, classification=UNKNOWN_CLASS)
            items = []
        else:
            snapshot = history.current
            current = SentimentReading(value=snapshot.value, classification=snapshot.classification)
            items = [
                SentimentHistoryItem(
                    value=entry.value,
                    classification=entry.classification,
                    date=entry.timestamp.date().isoformat() if entry.timestamp else None,
                )
                for entry in history.entries
            ]

        return FearGreedOutput(
            current=current,
            history=items,
            interpretation=interpret_sentiment(current.value),
        )

    # ── 유료 ──

    async def daily_alpha(self, sources: Optional[Iterable[AlphaSource]] = None) -> DigestOutput:
        """전체 다이제스트. 소스 그룹별로 켜고 끌 수 있고 모두 동시에 조회."""
        selected = resolve_sources(sources)
        use_sentiment = AlphaSource.FEARGREED in selected
        use_coingecko = AlphaSource.COINGECKO in selected
        use_defillama = AlphaSource.DEFILLAMA in selected

        results = await gather_sources({
            "feargreed": self.fear_greed.get_index(limit=7) if use_sentiment else None,
            "trending": self.coingecko.get_trending() if use_coingecko else None,
            "markets": self.coingecko.get_markets() if use_coingecko else None,
            "protocols": self.defillama.get_protocols() if use_defillama else None,
            "dex_volume": self.defillama.get_dex_overview() if use_defillama else None,
        })

        history: Optional[SentimentHistory] = results["feargreed"].value_or()
        trending: Optional[TrendingFeed] = results["trending"].value_or()
        markets = results["markets"].value_or()
        protocols = results["protocols"].value_or()
        dex_volume: Optional[DexVolumeSummary] = results["dex_volume"].value_or()

        sentiment = history.current if history is not None else None
        coins = trending.coins if trending is not None else None

        signals = build_alpha_signals(
            sentiment=sentiment,
            dex_volume=dex_volume,
            market_assets=markets,
            trending=coins,
            protocols=protocols,
        )

        primary = markets[0] if markets else None
        secondary = markets[1] if markets and len(markets) > 1 else None

        # 센티먼트 소스가 꺼졌거나 실패하고 엔트리가 없으면 "Unknown"
        has_sentiment = history is not None and bool(history.entries)
        market_context = MarketContext(
            fear_greed_index=sentiment.value if has_sentiment else DEFAULT_SENTIMENT_VALUE,
            fear_greed_class=sentiment.classification if has_sentiment else UNKNOWN_CLASS,
            btc_price=primary.price if primary else None,
            btc_change_24h=primary.price_change_24h if primary else None,
            eth_price=secondary.price if secondary else None,
            eth_change_24h=secondary.price_change_24h if secondary else None,
            dex_volume_24h=dex_volume.total_24h if dex_volume else None,
            dex_volume_change=dex_volume.change_24h if dex_volume else None,
        )

        summary = (
            f"{len(signals)} alpha signals detected"
            if signals
            else "No strong signals - market neutral"
        )
        logger.info(
            f"daily-alpha: sources={sorted(s.value for s in selected)} signals={len(signals)}"
        )

        return DigestOutput(
            timestamp=iso_now(),
            summary=summary,
            market_context=market_context,
            signals=[DigestSignal.from_signal(s) for s in signals],
            trending=[
                DigestTrendingItem(symbol=c.symbol, name=c.name, rank=c.rank)
                for c in (coins or [])[:DIGEST_TOP_N]
            ],
            top_defi=[
                DigestDeFiItem(name=p.name, tvl=format_billions(p.tvl), category=p.category)
                for p in (protocols or [])[:DIGEST_TOP_N]
            ],
            disclaimer=DISCLAIMER,
        )

    async def trending(self) -> TrendingOutput:
        """트렌딩 코인 상위 10개 + NFT 상위 5개."""
        results = await gather_sources({"trending": self.coingecko.get_trending()})
        feed: TrendingFeed = results["trending"].value_or(TrendingFeed())

        return TrendingOutput(
            timestamp=iso_now(),
            coins=[
                TrendingCoinItem(
                    symbol=c.symbol,
                    name=c.name,
                    rank=c.rank,
                    price=c.price,
                    price_change_24h=c.price_change_24h,
                    market_cap=c.market_cap,
                )
                for c in feed.coins[:TRENDING_COINS_LIMIT]
            ],
            nfts=[
                TrendingNftItem(name=n.name, floor_price=n.floor_price, change_24h=n.change_24h)
                for n in feed.nfts[:TRENDING_NFTS_LIMIT]
            ],
        )

    async def defi_stats(self) -> DeFiStatsOutput:
        """TVL 상위 10개 프로토콜 + DEX 거래량 (표시용 문자열 포맷)."""
        results = await gather_sources({
            "protocols": self.defillama.get_protocols(),
            "dex_volume": self.defillama.get_dex_overview(),
        })
        protocols = results["protocols"].value_or([])
        dex_volume: DexVolumeSummary = results["dex_volume"].value_or(DexVolumeSummary())

        return DeFiStatsOutput(
            timestamp=iso_now(),
            dex_volume=DexVolumeStats(
                total_24h=format_billions(dex_volume.total_24h),
                change_24h=format_pct(dex_volume.change_24h),
                change_7d=format_pct(dex_volume.change_7d),
            ),
            top_protocols=[
                ProtocolStats(
                    name=p.name,
                    category=p.category,
                    tvl=format_billions(p.tvl),
                    change_24h=format_pct(p.tvl_change_24h),
                    change_7d=format_pct(p.tvl_change_7d),
                    chains=p.chains,
                )
                for p in protocols
            ],
        )

    async def token_intel(self, token: Optional[str] = None) -> Union[TokenIntelOutput, TokenIntelError]:
        """단일 토큰 상세 + ATH 대비/모멘텀 분석.

        실패 시 예외 대신 TokenIntelError 반환 (호출부에서 status=failed).
        """
        token_id = (token or "").strip().lower() or DEFAULT_TOKEN

        try:
            detail: TokenDetail = await self.coingecko.get_coin(token_id)
        except TokenNotFoundError as e:
            logger.info(f"token-intel: {token_id} not found")
            return TokenIntelError(error=str(e), token=token_id, suggestion=TOKEN_SUGGESTION)
        except UpstreamError as e:
            logger.warning(f"token-intel: lookup for {token_id} failed: {e}")
            return TokenIntelError(
                error=f"Token lookup for {token_id} failed: upstream unavailable",
                token=token_id,
                suggestion=TOKEN_SUGGESTION,
            )

        return TokenIntelOutput(
            timestamp=iso_now(),
            token=TokenSnapshot(**detail.model_dump()),
            analysis=TokenAnalysis(
                from_ath=format_pct(detail.ath_change_percentage),
                momentum=token_momentum(detail.price_change_7d),
            ),
        )


def get_alpha_service() -> AlphaService:
    """FastAPI 의존성. 테스트에서 dependency_overrides로 교체."""
    return AlphaService()
