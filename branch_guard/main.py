"""
FastAPI application entry point.
"""

from fastapi import FastAPI

from branch_guard import __version__
from branch_guard.api import webhooks
from branch_guard.config import get_settings
from branch_guard.utils.logging import get_logger, setup_logging

# Configure structured logging
setup_logging(get_settings().log_level)

logger = get_logger(__name__)

app = FastAPI(
    title="Pull Request Branch Guard",
    description="Validates and corrects the branch topology of GitHub pull requests",
    version=__version__,
)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "version": __version__}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Pull Request Branch Guard API",
        "version": __version__,
        "docs": "/docs",
    }


app.include_router(webhooks.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
