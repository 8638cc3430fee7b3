import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_log_level, get_reddit_auth_mode, has_search_credentials
from .routes.reddit import router as reddit_router
from .services.sentiment import SentimentAnalyzer


# Load environment variables from .env file
load_dotenv()

logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("threadpulse")


@asynccontextmanager
async def lifespan(app: FastAPI):

    # Startup
    logger.info("Starting ThreadPulse")
    logger.info("Google CSE:  %s", "configured" if has_search_credentials() else "not set (searches return placeholders)")
    logger.info("Reddit auth: %s", get_reddit_auth_mode())
    app.state.analyzer = SentimentAnalyzer()

    yield

    logger.info("Shutting down ThreadPulse")


app = FastAPI(
    title="ThreadPulse: Reddit product sentiment",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",      # Next.js dev server
        "http://127.0.0.1:3000",      # Alternative localhost
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(reddit_router)


@app.get(
    "/",
    summary="API Root",
    description="Welcome endpoint with API information",
    tags=["General"]
)
async def root():
    """Root endpoint with API information."""
    return {
        "name": "ThreadPulse",
        "version": "0.1.0",
        "description": "Reddit discussion discovery and sentiment scoring",
        "docs": "/docs",
        "endpoints": {
            "posts": "POST /reddit/posts - Fetch canonical Reddit posts for a query",
            "sentiment": "POST /reddit/sentiment - Score posts for charting",
            "analyze": "POST /reddit/analyze - Fetch and score in one call",
            "health": "GET /reddit/health - Pipeline health check",
        }
    }


@app.get(
    "/health",
    summary="Global Health Check",
    description="Check if the API server is running",
    tags=["General"]
)
async def health():
    """Global health check endpoint."""
    return {
        "status": "healthy",
        "service": "threadpulse",
        "version": "0.1.0"
    }


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unhandled errors."""
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "detail": str(exc) if os.getenv("DEBUG", "false").lower() == "true" else "An unexpected error occurred"
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "threadpulse.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("DEBUG", "true").lower() == "true",
    )
