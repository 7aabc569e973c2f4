"""엔트리포인트 API 테스트."""
import uuid

import httpx
import pytest

from fakes import invoke, source_down
from integrations.coingecko import CoinGeckoClient
from payloads import TRENDING_PAYLOAD


class TestPing:
    """헬스체크 엔트리포인트."""

    def test_ping(self, client):
        response = invoke(client, "ping")
        assert response.status_code == 200
        data = response.json()

        assert data["status"] == "succeeded"
        uuid.UUID(data["run_id"])
        assert data["output"]["status"] == "alive"
        assert data["output"]["agent"] == "Crypto Alpha 📊"
        assert data["output"]["version"] == "1.0.0"
        assert "timestamp" in data["output"]

    def test_ping_is_idempotent(self, client):
        first = invoke(client, "ping").json()
        second = invoke(client, "ping").json()

        assert first["run_id"] != second["run_id"]
        for key in ("status", "agent", "version", "by"):
            assert first["output"][key] == second["output"][key]

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "agent": "crypto-alpha", "version": "1.0.0"}


class TestFearGreed:
    """Fear & Greed 엔트리포인트."""

    def test_current_history_interpretation(self, client):
        data = invoke(client, "fear-greed").json()
        output = data["output"]

        assert data["status"] == "succeeded"
        assert output["current"] == {"value": 22, "classification": "Extreme Fear"}
        assert len(output["history"]) == 3
        assert output["history"][0] == {"value": 22, "classification": "Extreme Fear", "date": "2025-01-01"}
        assert output["interpretation"] == "Extreme fear often signals buying opportunities"

    @pytest.mark.parametrize("value,expected", [
        ("25", "Extreme fear often signals buying opportunities"),
        ("26", "Market sentiment is neutral to moderate"),
        ("74", "Market sentiment is neutral to moderate"),
        ("75", "Extreme greed may signal market tops"),
    ])
    def test_interpretation_thresholds(self, client, sources, value, expected):
        sources.fear_greed.payload = {"data": [{"value": value, "value_classification": "X", "timestamp": "0"}]}
        output = invoke(client, "fear-greed").json()["output"]
        assert output["interpretation"] == expected

    def test_upstream_down_degrades(self, client, sources):
        sources.fear_greed.error = source_down("feargreed")
        data = invoke(client, "fear-greed").json()

        assert data["status"] == "succeeded"
        assert data["output"]["current"] == {"value": 50, "classification": "Unknown"}
        assert data["output"]["history"] == []
        assert data["output"]["interpretation"] == "Market sentiment is neutral to moderate"


class TestDailyAlpha:
    """알파 다이제스트 엔트리포인트."""

    def test_full_digest(self, client, sources):
        data = invoke(client, "daily-alpha").json()
        output = data["output"]

        assert data["status"] == "succeeded"
        assert output["summary"] == "6 alpha signals detected"
        assert [s["type"] for s in output["signals"]] == [
            "sentiment", "whale", "narrative", "narrative", "protocol", "protocol",
        ]
        assert output["signals"][0]["title"] == "Extreme Fear (22) - Potential Buy Zone"
        assert output["signals"][0]["confidence"] == "medium"
        assert [s["asset"] for s in output["signals"][2:4]] == ["ALP", "GAM"]
        assert [s["asset"] for s in output["signals"][4:]] == ["Lido", "EigenLayer"]

        assert output["marketContext"] == {
            "fearGreedIndex": 22,
            "fearGreedClass": "Extreme Fear",
            "btcPrice": 95000.5,
            "btcChange24h": -3.2,
            "ethPrice": 3300.25,
            "ethChange24h": -1.5,
            "dexVolume24h": 6.5e9,
            "dexVolumeChange": 6.0,
        }
        assert len(output["trending"]) == 5
        assert output["trending"][0] == {"symbol": "ALP", "name": "Alpha", "rank": 120}
        assert output["topDeFi"][0] == {"name": "Lido", "tvl": "$30.00B", "category": "Liquid Staking"}
        assert output["disclaimer"] == "Not financial advice. DYOR."

        assert sources.fear_greed.calls == ["get_index"]
        assert sorted(sources.coingecko.calls) == ["get_markets", "get_trending"]
        assert sorted(sources.defillama.calls) == ["get_dex_overview", "get_protocols"]

    def test_feargreed_only(self, client, sources):
        data = invoke(client, "daily-alpha", {"sources": ["feargreed"]}).json()
        output = data["output"]

        assert output["marketContext"]["fearGreedIndex"] == 22
        assert output["marketContext"]["btcPrice"] is None
        assert output["marketContext"]["dexVolume24h"] is None
        assert output["trending"] == []
        assert output["topDeFi"] == []
        assert [s["type"] for s in output["signals"]] == ["sentiment"]
        assert sources.coingecko.calls == []
        assert sources.defillama.calls == []

    def test_without_feargreed_uses_defaults(self, client, sources):
        output = invoke(client, "daily-alpha", {"sources": ["coingecko", "defillama"]}).json()["output"]

        assert output["marketContext"]["fearGreedIndex"] == 50
        assert output["marketContext"]["fearGreedClass"] == "Unknown"
        assert "sentiment" not in [s["type"] for s in output["signals"]]
        assert sources.fear_greed.calls == []

    @pytest.mark.parametrize("payload", [None, {}, {"sources": []}])
    def test_missing_or_empty_selection_means_all(self, client, sources, payload):
        response = invoke(client, "daily-alpha", payload)
        assert response.status_code == 200
        assert sources.fear_greed.calls == ["get_index"]
        assert len(sources.coingecko.calls) == 2
        assert len(sources.defillama.calls) == 2

    def test_unknown_source_rejected(self, client):
        response = invoke(client, "daily-alpha", {"sources": ["binance"]})
        assert response.status_code == 422

    @pytest.mark.parametrize("kwargs", [
        {"json": {"input": None}},
        {"json": {"input": "feargreed"}},
        {"json": ["not", "an", "object"]},
        {"content": b"not json", "headers": {"Content-Type": "application/json"}},
    ])
    def test_unusable_body_means_no_input(self, client, sources, kwargs):
        response = client.post("/entrypoints/daily-alpha/invoke", **kwargs)
        assert response.status_code == 200
        assert response.json()["status"] == "succeeded"
        assert sources.fear_greed.calls == ["get_index"]
        assert len(sources.coingecko.calls) == 2
        assert len(sources.defillama.calls) == 2

    def test_partial_failure_degrades_section(self, client, sources):
        sources.coingecko.error = source_down("coingecko")
        data = invoke(client, "daily-alpha").json()
        output = data["output"]

        assert data["status"] == "succeeded"
        assert output["trending"] == []
        assert output["marketContext"]["btcPrice"] is None
        assert output["marketContext"]["fearGreedIndex"] == 22
        assert len(output["topDeFi"]) == 3
        # 시세가 없으므로 고래 시그널도 없음
        assert [s["type"] for s in output["signals"]] == ["sentiment", "protocol", "protocol"]
        # 실패한 소스가 다른 소스를 막지 않음
        assert sources.defillama.calls and sources.fear_greed.calls

    def test_all_sources_down(self, client, sources):
        sources.fear_greed.error = source_down("feargreed")
        sources.coingecko.error = source_down("coingecko")
        sources.defillama.error = source_down("defillama")
        data = invoke(client, "daily-alpha").json()

        assert data["status"] == "succeeded"
        assert data["output"]["summary"] == "No strong signals - market neutral"
        assert data["output"]["signals"] == []
        assert data["output"]["marketContext"]["fearGreedIndex"] == 50


class TestTrending:
    """트렌딩 엔트리포인트."""

    def test_coins_and_nfts(self, client):
        output = invoke(client, "trending").json()["output"]

        assert len(output["coins"]) == 5
        assert output["coins"][0] == {
            "symbol": "ALP",
            "name": "Alpha",
            "rank": 120,
            "price": 1.5,
            "priceChange24h": 12.0,
            "marketCap": "$150,000,000",
        }
        assert output["nfts"] == [{"name": "CryptoPunks", "floorPrice": "40.5 ETH", "change24h": 2.5}]

    def test_caps(self, client, sources):
        sources.coingecko.trending = {
            "coins": TRENDING_PAYLOAD["coins"] * 3,
            "nfts": TRENDING_PAYLOAD["nfts"] * 7,
        }
        output = invoke(client, "trending").json()["output"]
        assert len(output["coins"]) == 10
        assert len(output["nfts"]) == 5

    def test_upstream_down(self, client, sources):
        sources.coingecko.error = source_down("coingecko")
        data = invoke(client, "trending").json()
        assert data["status"] == "succeeded"
        assert data["output"]["coins"] == []
        assert data["output"]["nfts"] == []


class TestDefiStats:
    """DeFi 통계 엔트리포인트."""

    def test_formatted_stats(self, client):
        output = invoke(client, "defi-stats").json()["output"]

        assert output["dexVolume"] == {"total24h": "$6.50B", "change24h": "6.0%", "change7d": "-2.3%"}
        assert len(output["topProtocols"]) == 3
        assert output["topProtocols"][0] == {
            "name": "Lido",
            "category": "Liquid Staking",
            "tvl": "$30.00B",
            "change24h": "0.5%",
            "change7d": "12.3%",
            "chains": ["Ethereum", "Solana", "Polygon", "Terra", "Moonbeam"],
        }

    def test_dex_down_keeps_protocols(self, client, sources):
        sources.defillama.dex = None
        output = invoke(client, "defi-stats").json()["output"]
        assert output["dexVolume"] == {"total24h": None, "change24h": None, "change7d": None}
        assert len(output["topProtocols"]) == 3


class TestTokenIntel:
    """토큰 인텔 엔트리포인트."""

    def test_bitcoin(self, client):
        data = invoke(client, "token-intel", {"token": "bitcoin"}).json()

        assert data["status"] == "succeeded"
        token = data["output"]["token"]
        assert token["symbol"] == "BTC"
        assert token["price"] == 95000.5
        assert token["marketCapRank"] == 1
        assert token["athChangePercentage"] == -12.04
        assert len(token["categories"]) == 5
        assert data["output"]["analysis"] == {"fromATH": "-12.0%", "momentum": "bullish"}

    def test_token_id_normalized(self, client, sources):
        invoke(client, "token-intel", {"token": "  BitCoin "})
        assert sources.coingecko.calls == ["get_coin:bitcoin"]

    def test_default_token(self, client, sources):
        data = invoke(client, "token-intel").json()
        assert data["status"] == "succeeded"
        assert sources.coingecko.calls == ["get_coin:bitcoin"]

    def test_null_input_uses_default_token(self, client, sources):
        response = client.post("/entrypoints/token-intel/invoke", json={"input": None})
        assert response.json()["status"] == "succeeded"
        assert sources.coingecko.calls == ["get_coin:bitcoin"]

    @pytest.mark.parametrize("token,coin_path", [
        ("bitcoin/tickers", b"/api/v3/coins/bitcoin%2Ftickers"),
        ("bitcoin?x=1", b"/api/v3/coins/bitcoin%3Fx%3D1"),
        ("bit\tcoin", b"/api/v3/coins/bit%09coin"),
    ])
    def test_token_id_stays_inside_coin_path(self, client, sources, token, coin_path):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            # 다른 엔드포인트(/coins/bitcoin/tickers)는 200을 돌려줌
            if request.url.raw_path.startswith(b"/api/v3/coins/bitcoin/"):
                return httpx.Response(200, json={"name": "Bitcoin", "tickers": []})
            return httpx.Response(404, json={"error": "coin not found"})

        sources.coingecko = CoinGeckoClient(
            base_url="https://cg.test/api/v3",
            transport=httpx.MockTransport(handler),
        )
        response = invoke(client, "token-intel", {"token": token})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "failed"
        assert data["output"]["suggestion"] == "Use CoinGecko token ID (e.g., bitcoin, ethereum)"
        assert len(seen) == 1
        assert seen[0].url.raw_path.split(b"?")[0] == coin_path

    def test_not_found(self, client):
        response = invoke(client, "token-intel", {"token": "notacoin"})
        assert response.status_code == 200
        data = response.json()

        assert data["status"] == "failed"
        assert data["output"]["token"] == "notacoin"
        assert "notacoin" in data["output"]["error"]
        assert data["output"]["suggestion"] == "Use CoinGecko token ID (e.g., bitcoin, ethereum)"

    def test_upstream_down_is_failed_result(self, client, sources):
        sources.coingecko.error = source_down("coingecko")
        data = invoke(client, "token-intel", {"token": "ethereum"}).json()

        assert data["status"] == "failed"
        assert data["output"]["error"] == "Token lookup for ethereum failed: upstream unavailable"

    @pytest.mark.parametrize("change,momentum", [(0.1, "bullish"), (0.0, "neutral"), (-10.0, "neutral"), (-10.5, "bearish")])
    def test_momentum(self, client, sources, change, momentum):
        sources.coingecko.coins = {
            "x": {"id": "x", "symbol": "x", "market_data": {"price_change_percentage_7d": change}},
        }
        output = invoke(client, "token-intel", {"token": "x"}).json()["output"]
        assert output["analysis"]["momentum"] == momentum
        assert output["analysis"]["fromATH"] is None
