"""x402 결제 게이트.

유료 엔트리포인트 요청은 X-PAYMENT 헤더(base64 JSON 결제 페이로드)가 있어야 핸들러가 실행된다.
- 헤더 없음/디코딩 실패/검증 실패 → 402 + 결제 요구사항
- 검증 성공 → 핸들러 실행 → 2xx면 정산 후 X-PAYMENT-RESPONSE 헤더 첨부

PAYMENTS_RECEIVABLE_ADDRESS가 비어 있으면 게이트 전체가 비활성화된다.
"""
import base64
import json
import logging
from dataclasses import dataclass
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from core.config import Settings, get_settings
from integrations.x402 import X402_VERSION, FacilitatorError, get_facilitator_client

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Entrypoint:
    name: str
    description: str
    skill_description: str
    price: str = "0"  # USDC 최소 단위 (6 decimals), "0" = 무료

    @property
    def path(self) -> str:
        return f"/entrypoints/{self.name}/invoke"

    @property
    def is_paid(self) -> bool:
        return self.price != "0"


ENTRYPOINTS: tuple[Entrypoint, ...] = (
    Entrypoint("ping", "Health check", "Health check"),
    Entrypoint("fear-greed", "Fear & Greed Index", "Fear & Greed Index with history"),
    Entrypoint("daily-alpha", "Full alpha digest", "Full alpha digest with signals", price="5000"),
    Entrypoint("trending", "Trending tokens", "Trending tokens", price="2000"),
    Entrypoint("defi-stats", "DeFi stats", "DeFi protocols and DEX volume", price="2000"),
    Entrypoint("token-intel", "Token intelligence", "Token deep dive", price="3000"),
)

PAID_ROUTES: dict[str, Entrypoint] = {e.path: e for e in ENTRYPOINTS if e.is_paid}


def build_requirements(entrypoint: Entrypoint, resource: str, settings: Settings) -> dict[str, Any]:
    """x402 PaymentRequirements (exact 스킴)."""
    return {
        "scheme": "exact",
        "network": settings.network,
        "maxAmountRequired": entrypoint.price,
        "resource": resource,
        "description": entrypoint.description,
        "mimeType": "application/json",
        "payTo": settings.payments_receivable_address,
        "maxTimeoutSeconds": settings.payment_max_timeout_seconds,
        "asset": settings.payment_asset,
        "extra": {"name": "USDC", "version": "2"},
    }


def decode_payment_header(header: str) -> dict[str, Any]:
    """X-PAYMENT 헤더 디코딩. 형식 오류는 ValueError."""
    try:
        payload = json.loads(base64.b64decode(header, validate=True))
    except (ValueError, TypeError) as e:
        raise ValueError(f"invalid X-PAYMENT header: {e}") from e
    if not isinstance(payload, dict):
        raise ValueError("invalid X-PAYMENT header: payload is not an object")
    return payload


def encode_payment_response(settlement: dict[str, Any]) -> str:
    return base64.b64encode(json.dumps(settlement).encode()).decode()


def payment_required(error: str, requirements: dict[str, Any]) -> JSONResponse:
    return JSONResponse(
        status_code=402,
        content={
            "x402Version": X402_VERSION,
            "error": error,
            "accepts": [requirements],
        },
    )


class PaymentMiddleware(BaseHTTPMiddleware):
    """유료 경로에만 결제 검증/정산 적용."""

    async def dispatch(self, request: Request, call_next):
        settings = get_settings()
        entrypoint = PAID_ROUTES.get(request.url.path)
        if not settings.payments_enabled or entrypoint is None or request.method != "POST":
            return await call_next(request)

        requirements = build_requirements(entrypoint, str(request.url), settings)

        header = request.headers.get("X-PAYMENT")
        if not header:
            return payment_required("X-PAYMENT header is required", requirements)

        try:
            payload = decode_payment_header(header)
        except ValueError as e:
            logger.info(f"Rejected payment for {entrypoint.name}: {e}")
            return payment_required("Invalid or malformed payment header", requirements)

        facilitator = get_facilitator_client()
        try:
            verification = await facilitator.verify(payload, requirements)
            if not isinstance(verification, dict):
                raise FacilitatorError("facilitator /verify returned a non-object body")
        except FacilitatorError as e:
            return JSONResponse(status_code=502, content={"error": str(e)})

        if not verification.get("isValid"):
            reason = verification.get("invalidReason") or "Payment verification failed"
            logger.info(f"Payment invalid for {entrypoint.name}: {reason}")
            return payment_required(reason, requirements)

        response = await call_next(request)
        if not 200 <= response.status_code < 300:
            return response

        try:
            settlement = await facilitator.settle(payload, requirements)
            if not isinstance(settlement, dict):
                raise FacilitatorError("facilitator /settle returned a non-object body")
        except FacilitatorError as e:
            logger.error(f"Settlement failed for {entrypoint.name}: {e}")
            return response

        if settlement.get("success"):
            response.headers["X-PAYMENT-RESPONSE"] = encode_payment_response(settlement)
            logger.info(f"Payment settled for {entrypoint.name}: {settlement.get('transaction')}")
        else:
            logger.warning(f"Settlement rejected for {entrypoint.name}: {settlement.get('errorReason')}")
        return response
