"""
Custom domain API endpoints.
Zone provisioning and the domain routing records of sites.
"""

from fastapi import APIRouter

from app.api.endpoints.domains import key_pairs, zones

router = APIRouter(prefix="/api/domains")
router.include_router(zones.router, tags=["domains"])
router.include_router(key_pairs.router, prefix="/key-pairs", tags=["domains", "key-pairs"])
