from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv
import os

# Load environment variables before modules that read them at import time
load_dotenv()

from app.database import close_db, is_database_enabled
from app.middleware.rate_limit import RateLimitMiddleware
from app.routers import preferences
from app.schemas import HealthResponse


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if is_database_enabled():
        await close_db()


# Initialize FastAPI app
app = FastAPI(
    title="Property Match API",
    description="Matches buyer, tenant, developer and shortlet preferences to property listings",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
frontend_url = os.getenv("FRONTEND_URL", "http://localhost:3000")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[frontend_url, "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RateLimitMiddleware)

app.include_router(preferences.router)


@app.get("/", response_model=HealthResponse)
async def root():
    """Root endpoint - basic health check"""
    return HealthResponse(
        status="healthy",
        message="Property Match API is running. Visit /docs for API documentation."
    )


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint"""
    return HealthResponse(
        status="healthy",
        message="Property Match API is healthy and ready to serve requests"
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
