from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    app_name: str = "Crypto Alpha"
    app_description: str = "Crypto market intelligence - alpha signals, sentiment, narratives, and DeFi insights"
    agent_version: str = "1.0.0"
    agent_author: str = "CephaloBot 🐙"
    base_url: str = "https://crypto-alpha-production.up.railway.app"
    port: int = 3001
    cors_origins: str = "*"
    log_level: str = "INFO"

    # x402 결제 설정
    network: str = "eip155:84532"  # Base Sepolia
    payments_receivable_address: str = ""  # 비어 있으면 결제 게이트 비활성화
    facilitator_url: str = "https://facilitator.daydreams.systems"
    payment_asset: str = "0x036CbD53842c5426634e7929541eC2318f3dCF7e"  # USDC (Base Sepolia)
    payment_max_timeout_seconds: int = 60

    # 업스트림 API 설정
    upstream_timeout_seconds: float = 10.0
    fear_greed_base_url: str = "https://api.alternative.me"
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    defillama_base_url: str = "https://api.llama.fi"

    class Config:
        env_file = ".env"
        extra = "allow"

    @property
    def payments_enabled(self) -> bool:
        return bool(self.payments_receivable_address)

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
