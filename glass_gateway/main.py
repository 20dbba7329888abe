# -*- coding: utf-8 -*-
"""
Glass Gateway - Main FastAPI Application
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from glass_gateway.config import get_settings
from glass_gateway.api import glass_router, proxy_router, soap_error_handler
from glass_gateway.services import SoapError, get_credential_provider

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events"""
    # Startup
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENV})...")
    logger.info(f"Vendor URL: {settings.MAG_API_URL}, transport: {settings.MAG_TRANSPORT_MODE}")

    # Fail fast on missing production credentials
    get_credential_provider()

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}...")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Master Auto Glass stock, availability and ordering gateway",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(SoapError, soap_error_handler)

# Include API routers
app.include_router(glass_router, prefix="/api")
app.include_router(proxy_router, prefix="/api")


# ==================== Health Check ====================

@app.get("/health", tags=["system"])
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "service": "glass-gateway"}


# ==================== Run Server ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "glass_gateway.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
