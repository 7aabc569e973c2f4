# alternative.me (Fear & Greed Index) API Integration
from integrations.alternative_me.client import FearGreedClient, get_fear_greed_client

__all__ = [
    "FearGreedClient",
    "get_fear_greed_client",
]
