"""에이전트 엔트리포인트 API.

POST /entrypoints/<name>/invoke, 요청 {"input": {...}} (생략 가능),
응답 {"run_id", "status": "succeeded"|"failed", "output"}.
결제 검증은 PaymentMiddleware가 핸들러 이전에 처리한다.
"""
import uuid
from typing import Any, TypeVar

from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from schemas.entrypoints import (
    DailyAlphaInput,
    InvokeResponse,
    RunStatus,
    TokenIntelError,
    TokenIntelInput,
)
from services.alpha_service import AlphaService, get_alpha_service

router = APIRouter()

InputT = TypeVar("InputT", bound=BaseModel)


async def invoke_input(request: Request) -> dict[str, Any]:
    """요청 본문의 input 객체.

    본문 없음, JSON 아님, input이 null/객체 아님 → 빈 입력 (기본값 적용).
    """
    try:
        body = await request.json()
    except ValueError:
        return {}
    raw = body.get("input") if isinstance(body, dict) else None
    return raw if isinstance(raw, dict) else {}


def _parse_input(model: type[InputT], raw: dict[str, Any]) -> InputT:
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False)) from e


def _envelope(output: BaseModel, status: RunStatus = RunStatus.SUCCEEDED) -> InvokeResponse:
    return InvokeResponse(
        run_id=str(uuid.uuid4()),
        status=status,
        output=output.model_dump(by_alias=True),
    )


@router.post("/ping/invoke", response_model=InvokeResponse)
async def ping(service: AlphaService = Depends(get_alpha_service)):
    """헬스체크 (무료)."""
    return _envelope(service.ping())


@router.post("/fear-greed/invoke", response_model=InvokeResponse)
async def fear_greed(service: AlphaService = Depends(get_alpha_service)):
    """Fear & Greed 지수 + 7일 히스토리 (무료)."""
    return _envelope(await service.fear_greed_index())


@router.post("/daily-alpha/invoke", response_model=InvokeResponse)
async def daily_alpha(
    raw: dict = Depends(invoke_input),
    service: AlphaService = Depends(get_alpha_service),
):
    """전체 알파 다이제스트 (유료)."""
    params = _parse_input(DailyAlphaInput, raw)
    return _envelope(await service.daily_alpha(params.sources))


@router.post("/trending/invoke", response_model=InvokeResponse)
async def trending(service: AlphaService = Depends(get_alpha_service)):
    """트렌딩 토큰/NFT (유료)."""
    return _envelope(await service.trending())


@router.post("/defi-stats/invoke", response_model=InvokeResponse)
async def defi_stats(service: AlphaService = Depends(get_alpha_service)):
    """DeFi TVL + DEX 거래량 (유료)."""
    return _envelope(await service.defi_stats())


@router.post("/token-intel/invoke", response_model=InvokeResponse)
async def token_intel(
    raw: dict = Depends(invoke_input),
    service: AlphaService = Depends(get_alpha_service),
):
    """단일 토큰 딥다이브 (유료). 조회 실패는 status=failed로 반환."""
    params = _parse_input(TokenIntelInput, raw)
    result = await service.token_intel(params.token)
    if isinstance(result, TokenIntelError):
        return _envelope(result, status=RunStatus.FAILED)
    return _envelope(result)
