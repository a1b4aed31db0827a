"""
CertiChain Node Server
"""
import logging

from fastapi import FastAPI

from node.config import get_settings
from .routes import router as api_router

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

app = FastAPI(
    title="CertiChain Node",
    description="Semi-private NFT minting and credential helpers for the XRP Ledger.",
    version="0.1.0"
)

# Include API routes
app.include_router(api_router, prefix="/api")

@app.get("/", tags=["Status"])
async def root():
    """Root endpoint to check node status."""
    return {"status": "ok", "message": "CertiChain node is running"}

@app.get("/health", tags=["Status"])
async def health():
    return {"status": "ok"}
