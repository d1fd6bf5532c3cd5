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

from api.routes import geocode, places  # noqa: E402
from settings import settings  # noqa: E402

logging.basicConfig(level=logging.INFO)

# Create app
app = FastAPI(
    title="FoodPicker API",
    description="Find nearby food places and let a roulette pick one",
    version="0.1.0",
)

# CORS middleware for frontend
if settings.CORS_ALLOW_ALL:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure properly for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Include routers
app.include_router(places.router, prefix="/places", tags=["places"])
app.include_router(geocode.router, prefix="/geocode", tags=["geocode"])


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "FoodPicker API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
