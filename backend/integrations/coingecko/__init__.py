# CoinGecko API Integration
from integrations.coingecko.client import CoinGeckoClient, get_coingecko_client

__all__ = [
    "CoinGeckoClient",
    "get_coingecko_client",
]
