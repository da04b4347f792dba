"""
FastAPI Application — ID Document Scanner.

Endpoints:
  - POST /api/v1/scan      OCR + validation + field extraction
  - POST /api/v1/quality   capture-gate quality score of one frame
  - GET  /api/v1/profiles  built-in document profiles
  - GET  /health
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from idscan.api.routes.scan import router as scan_router
from idscan.config.settings import get_settings
from idscan.core.entities.document_profile import PROFILES

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"

app = FastAPI(
    title="ID Document Scanner",
    description="Quality-gated capture and heuristic field extraction for ID cards.",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(scan_router, prefix="/api/v1", tags=["Scan"])


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "version": VERSION,
        "env": settings.env,
        "profiles": sorted(PROFILES),
        "keyword_match_ratio": settings.keyword_match_ratio,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("idscan.api.main:app", host=settings.api_host, port=settings.api_port, reload=settings.debug)
