# x402 결제 facilitator Integration
from integrations.x402.client import (
    X402_VERSION,
    FacilitatorClient,
    FacilitatorError,
    get_facilitator_client,
)

__all__ = [
    "X402_VERSION",
    "FacilitatorClient",
    "FacilitatorError",
    "get_facilitator_client",
]
