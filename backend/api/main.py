"""
FastAPI application entry point.

Run with: uvicorn api.main:app --reload
"""
import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.routes import geocode
from services.reverse_geocoder import get_default_aggregator
from settings import settings

logger = logging.getLogger(__name__)

if settings.GEOCODER_DEBUG:
    # Provider failures are swallowed and only reported at DEBUG.
    logging.basicConfig(level=logging.INFO)
    logging.getLogger("services").setLevel(logging.DEBUG)

# Create app
app = FastAPI(
    title="Sky Watch Geocoding API",
    description="Best-effort place lookup aggregated from free geocoding services",
    version="0.1.0",
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure properly for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(geocode.router, prefix="/geocode", tags=["geocode"])


@app.on_event("startup")
def startup_event():
    """Build the aggregator so configuration errors surface at boot."""
    aggregator = get_default_aggregator()
    logger.info(
        "Reverse geocoder ready: %d known areas, overpass radii %s",
        len(aggregator.known_areas.areas),
        aggregator.overpass.radii_m,
    )


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Sky Watch Geocoding API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
