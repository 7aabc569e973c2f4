# Integrations - 외부 서비스 연동 모듈
from integrations.base_client import BaseAPIClient, TokenNotFoundError, UpstreamError

__all__ = [
    "BaseAPIClient",
    "TokenNotFoundError",
    "UpstreamError",
]


async def close_all_clients():
    """생성된 싱글톤 HTTP 클라이언트를 모두 닫는다 (앱 종료 시)."""
    from integrations.alternative_me import client as fear_greed_module
    from integrations.coingecko import client as coingecko_module
    from integrations.defillama import client as defillama_module
    from integrations.x402 import client as x402_module

    for instance in (
        fear_greed_module._fear_greed_client,
        coingecko_module._coingecko_client,
        defillama_module._defillama_client,
        x402_module._facilitator_client,
    ):
        if instance is not None:
            await instance.close()
