# DefiLlama API Integration
from integrations.defillama.client import DefiLlamaClient, get_defillama_client

__all__ = [
    "DefiLlamaClient",
    "get_defillama_client",
]
