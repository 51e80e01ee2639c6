"""
FastAPI main application

REST API over the tiered match-outcome prediction engine
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cricket_predictor.config import API_VERSION
from cricket_predictor.logging_config import setup_logging
from cricket_predictor.services import prediction_service

# Load .env before settings are read
load_dotenv()

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    logger.info("Starting FastAPI application...")
    prediction_service.get_predictor()
    logger.info("Prediction engine initialized")

    yield

    logger.info("Shutting down FastAPI application...")


app = FastAPI(
    title="Cricket Prediction API",
    description="Tiered match-outcome prediction (Elo, feature ensemble, fallback)",
    version=API_VERSION,
    lifespan=lifespan,
)

# CORS (development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Routers
from cricket_predictor.api.routes import health, predictions, ratings  # noqa: E402

app.include_router(health.router, tags=["health"])
app.include_router(predictions.router, prefix="/api", tags=["predictions"])
app.include_router(ratings.router, prefix="/api", tags=["ratings"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Cricket Prediction API",
        "version": API_VERSION,
        "docs": "/docs",
        "status": "running",
    }


if __name__ == "__main__":
    import uvicorn

    from cricket_predictor.settings import get_settings

    settings = get_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
