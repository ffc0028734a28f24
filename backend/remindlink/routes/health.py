"""
Health Routes - Health check endpoints
"""
from fastapi import APIRouter, Depends

from remindlink.core.dependencies import Services, get_services

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(services: Services = Depends(get_services)):
    """Health check endpoint"""
    return {
        "status": "ok",
        "message": "Server is alive",
        "scheduler_running": services.backend.running
    }
