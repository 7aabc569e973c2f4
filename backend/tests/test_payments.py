"""x402 결제 게이트 + 디스커버리 문서 테스트."""
import base64
import json

import pytest

import core.payments as payments
from core.config import get_settings
from core.payments import ENTRYPOINTS, PAID_ROUTES, decode_payment_header
from fakes import invoke
from integrations.x402 import FacilitatorError

PAY_TO = "0x1111111111111111111111111111111111111111"


def _header(payload: dict) -> str:
    return base64.b64encode(json.dumps(payload).encode()).decode()


class FakeFacilitator:
    def __init__(self, valid=True, settle_ok=True, verify_error=None):
        self.valid = valid
        self.settle_ok = settle_ok
        self.verify_error = verify_error
        self.verify_body = None
        self.settle_body = None
        self.verified = []
        self.settled = []

    async def verify(self, payload, requirements):
        if self.verify_error:
            raise self.verify_error
        self.verified.append((payload, requirements))
        if self.verify_body is not None:
            return self.verify_body
        return {"isValid": self.valid, "invalidReason": None if self.valid else "insufficient_funds"}

    async def settle(self, payload, requirements):
        self.settled.append((payload, requirements))
        if self.settle_body is not None:
            return self.settle_body
        return {"success": self.settle_ok, "transaction": "0xdeadbeef", "network": requirements["network"]}


@pytest.fixture
def facilitator(monkeypatch):
    fake = FakeFacilitator()
    monkeypatch.setattr(get_settings(), "payments_receivable_address", PAY_TO)
    monkeypatch.setattr(payments, "get_facilitator_client", lambda: fake)
    return fake


class TestPaidRouteTable:

    def test_paid_entrypoints(self):
        assert {e.name: e.price for e in PAID_ROUTES.values()} == {
            "daily-alpha": "5000",
            "trending": "2000",
            "defi-stats": "2000",
            "token-intel": "3000",
        }
        assert set(PAID_ROUTES) == {e.path for e in ENTRYPOINTS if e.price != "0"}

    def test_decode_payment_header(self):
        assert decode_payment_header(_header({"a": 1})) == {"a": 1}
        with pytest.raises(ValueError):
            decode_payment_header("%%%not-base64%%%")
        with pytest.raises(ValueError):
            decode_payment_header(_header([1, 2]))


class TestPaymentGate:
    """유료 경로 결제 검증/정산."""

    def test_missing_header_returns_402(self, client, facilitator):
        response = invoke(client, "daily-alpha")
        assert response.status_code == 402
        body = response.json()

        assert body["x402Version"] == 1
        requirements = body["accepts"][0]
        assert requirements["scheme"] == "exact"
        assert requirements["maxAmountRequired"] == "5000"
        assert requirements["payTo"] == PAY_TO
        assert requirements["network"] == get_settings().network
        assert requirements["resource"].endswith("/entrypoints/daily-alpha/invoke")
        assert facilitator.verified == []

    def test_free_routes_not_gated(self, client, facilitator):
        assert invoke(client, "ping").status_code == 200
        assert invoke(client, "fear-greed").status_code == 200
        assert client.get("/.well-known/agent.json").status_code == 200

    def test_malformed_header(self, client, facilitator):
        response = invoke(client, "trending", headers={"X-PAYMENT": "not base64 at all"})
        assert response.status_code == 402
        assert facilitator.verified == []

    def test_invalid_payment(self, client, facilitator):
        facilitator.valid = False
        response = invoke(client, "trending", headers={"X-PAYMENT": _header({"scheme": "exact"})})
        assert response.status_code == 402
        assert response.json()["error"] == "insufficient_funds"
        assert facilitator.settled == []

    def test_valid_payment_settles(self, client, facilitator):
        response = invoke(client, "defi-stats", headers={"X-PAYMENT": _header({"scheme": "exact"})})
        assert response.status_code == 200
        assert response.json()["status"] == "succeeded"

        settlement = json.loads(base64.b64decode(response.headers["X-PAYMENT-RESPONSE"]))
        assert settlement["transaction"] == "0xdeadbeef"
        assert len(facilitator.settled) == 1
        assert facilitator.settled[0][1]["maxAmountRequired"] == "2000"

    def test_rejected_settlement_has_no_receipt(self, client, facilitator):
        facilitator.settle_ok = False
        response = invoke(client, "token-intel", headers={"X-PAYMENT": _header({"scheme": "exact"})})
        assert response.status_code == 200
        assert "X-PAYMENT-RESPONSE" not in response.headers

    def test_facilitator_down(self, client, facilitator):
        facilitator.verify_error = FacilitatorError("facilitator /verify unreachable")
        response = invoke(client, "daily-alpha", headers={"X-PAYMENT": _header({"scheme": "exact"})})
        assert response.status_code == 502

    def test_non_object_verification(self, client, facilitator):
        facilitator.verify_body = ["isValid", True]
        response = invoke(client, "daily-alpha", headers={"X-PAYMENT": _header({"scheme": "exact"})})
        assert response.status_code == 502
        assert facilitator.settled == []

    def test_non_object_settlement(self, client, facilitator):
        facilitator.settle_body = "settled"
        response = invoke(client, "trending", headers={"X-PAYMENT": _header({"scheme": "exact"})})
        assert response.status_code == 200
        assert "X-PAYMENT-RESPONSE" not in response.headers

    def test_gate_disabled_without_pay_to(self, client):
        assert invoke(client, "daily-alpha").status_code == 200


class TestDiscovery:
    """정적 디스커버리 문서."""

    def test_agent_card(self, client):
        data = client.get("/.well-known/agent.json").json()

        assert data["name"] == "Crypto Alpha"
        assert [s["id"] for s in data["skills"]] == [e.name for e in ENTRYPOINTS]
        assert data["entrypoints"]["ping"]["pricing"] == {"invoke": "0"}
        assert data["entrypoints"]["daily-alpha"]["pricing"] == {"invoke": "5000"}
        assert data["payments"][0]["method"] == "x402"

    def test_erc8004(self, client):
        data = client.get("/.well-known/erc8004.json").json()
        assert data["x402Support"] is True
        assert data["image"].endswith("/icon.png")

    def test_icon(self, client):
        response = client.get("/icon.png")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("image/svg+xml")
        assert "ALPHA" in response.text
