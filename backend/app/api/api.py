"""
Main API router for the domains backend.

This module sets up the main API router and includes all endpoint routers.
"""
import logging
from fastapi import APIRouter

from app.api.endpoints import domains

logger = logging.getLogger(__name__)

# Create main API router
api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(domains.router)

logger.info("API router initialized with all endpoints")
