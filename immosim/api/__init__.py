"""
API routes for the projection model.
"""

from fastapi import APIRouter

from immosim.api import calculations

router = APIRouter()

router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
