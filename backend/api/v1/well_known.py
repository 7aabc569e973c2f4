"""에이전트 디스커버리 문서 + 아이콘 (정적 응답)."""
from fastapi import APIRouter
from fastapi.responses import Response

from core.config import get_settings
from core.payments import ENTRYPOINTS

router = APIRouter()

ICON_SVG = """<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 512 512">
  <defs>
    <linearGradient id="bg" x1="0%" y1="0%" x2="100%" y2="100%">
      <stop offset="0%" style="stop-color:#1a1a2e"/>
      <stop offset="100%" style="stop-color:#16213e"/>
    </linearGradient>
    <linearGradient id="chart" x1="0%" y1="100%" x2="0%" y2="0%">
      <stop offset="0%" style="stop-color:#00d9ff"/>
      <stop offset="100%" style="stop-color:#00ff88"/>
    </linearGradient>
  </defs>
  <rect width="512" height="512" rx="100" fill="url(#bg)"/>
  <path d="M80 380 L160 280 L240 320 L320 180 L400 220 L432 140"
        stroke="url(#chart)" stroke-width="24" stroke-linecap="round" stroke-linejoin="round" fill="none"/>
  <circle cx="160" cy="280" r="16" fill="#00ff88"/>
  <circle cx="240" cy="320" r="16" fill="#00ff88"/>
  <circle cx="320" cy="180" r="16" fill="#00ff88"/>
  <circle cx="400" cy="220" r="16" fill="#00ff88"/>
  <circle cx="432" cy="140" r="20" fill="#00d9ff"/>
  <text x="256" y="460" text-anchor="middle" fill="#ffffff" font-family="Arial" font-size="48" font-weight="bold">ALPHA</text>
</svg>"""


@router.get("/.well-known/agent.json")
async def agent_card():
    """A2A 에이전트 카드. 가격은 결제 게이트와 같은 ENTRYPOINTS 테이블에서 생성."""
    settings = get_settings()
    return {
        "protocolVersion": "1.0",
        "name": settings.app_name,
        "description": settings.app_description,
        "url": settings.base_url,
        "version": settings.agent_version,
        "capabilities": {
            "streaming": False,
            "pushNotifications": False,
            "stateTransitionHistory": True,
        },
        "skills": [
            {"id": e.name, "name": e.name, "description": e.skill_description}
            for e in ENTRYPOINTS
        ],
        "entrypoints": {
            e.name: {"description": e.description, "pricing": {"invoke": e.price}}
            for e in ENTRYPOINTS
        },
        "payments": [{
            "method": "x402",
            "payee": settings.payments_receivable_address,
            "network": settings.network,
            "endpoint": settings.facilitator_url,
        }],
    }


@router.get("/.well-known/erc8004.json")
async def erc8004_registration():
    """ERC-8004 등록 파일."""
    settings = get_settings()
    base_url = settings.base_url
    return {
        "type": "https://eips.ethereum.org/EIPS/eip-8004#registration-v1",
        "name": settings.app_name,
        "description": (
            "Real-time crypto market intelligence agent. Provides alpha signals, "
            "Fear & Greed sentiment, trending tokens, DeFi protocol stats, and deep token analysis. "
            f"Paid via x402 micropayments. Built by {settings.agent_author}"
        ),
        "image": f"{base_url}/icon.png",
        "services": [
            {"name": "web", "endpoint": base_url},
            {"name": "A2A", "endpoint": f"{base_url}/.well-known/agent.json", "version": "1.0"},
            {"name": "x402", "endpoint": f"{base_url}/entrypoints/daily-alpha/invoke"},
        ],
        "x402Support": True,
        "active": True,
        "registrations": [],  # 온체인 등록 후 채움
        "supportedTrust": ["reputation"],
    }


@router.get("/icon.png")
async def icon():
    return Response(content=ICON_SVG, media_type="image/svg+xml")
