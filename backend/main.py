import logging
from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from core.config import get_settings
from core.payments import ENTRYPOINTS, PaymentMiddleware
from api.v1 import entrypoints, well_known
from integrations import close_all_clients
from services.alpha_service import AlphaService, get_alpha_service

settings = get_settings()

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"{settings.app_name} starting on port {settings.port}")
    if settings.payments_enabled:
        logger.info(f"Payments: {settings.network} → {settings.payments_receivable_address}")
    else:
        logger.warning("Payments disabled (PAYMENTS_RECEIVABLE_ADDRESS not set) - paid entrypoints are open")
    for e in ENTRYPOINTS:
        price = f"{int(e.price) / 1e6:g} USDC" if e.is_paid else "FREE"
        logger.info(f"  POST {e.path:<36} - {e.description} ({price})")

    yield

    # Shutdown
    await close_all_clients()
    logger.info("Application shutdown")


app = FastAPI(
    title=f"{settings.app_name} API",
    description=settings.app_description,
    version=settings.agent_version,
    lifespan=lifespan,
)

app.add_middleware(PaymentMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-PAYMENT-RESPONSE"],
)

app.include_router(entrypoints.router, prefix="/entrypoints", tags=["entrypoints"])
app.include_router(well_known.router, tags=["discovery"])


@app.get("/health")
async def health_check(service: AlphaService = Depends(get_alpha_service)):
    return service.health()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.port)
