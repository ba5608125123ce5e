"""Health check endpoint"""

from fastapi import APIRouter
from datetime import datetime

router = APIRouter()

@router.get("/health")
async def health_check():
    """Liveness only; never calls an upstream"""
    return {
        "status": "ok",
        "message": "Servidor proxy Datajud funcionando",
        "timestamp": datetime.now().isoformat(),
        "server": "juris-relay"
    }
