import logging
import uvicorn
import sys
import os
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Set up path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app.core.config import settings
from app.api.api import api_router
from app.utils.metrics.prometheus import setup_metrics

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.info("Starting Domains API")

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Provisioning of custom domains for hosted sites",
    version="0.1.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.ENABLE_METRICS:
    setup_metrics(app)

app.include_router(api_router)

# Malformed request bodies are client errors like missing parameters
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

# Health check endpoint
@app.get("/health")
def health_check():
    return {"status": "healthy"}

# Startup event
@app.on_event("startup")
async def startup_event():
    """
    Startup event handler.

    Resolves the collaborators from settings once, so configuration errors
    show up at boot rather than on the first request.
    """
    from app.services.domains.provisioning import get_provisioning_service

    get_provisioning_service()
    logger.info(
        f"Domains API ready (composition API {settings.API_ENDPOINT}, "
        f"Redis {settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB})"
    )

# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    """
    Shutdown event handler.

    This function is called when the application shuts down.
    """
    logger.info("Shutting down Domains API")

# Run the app if this file is executed directly
if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
