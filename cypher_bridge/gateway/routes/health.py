"""
Health route — GET /health.
"""

from fastapi import APIRouter, Request

from cypher_bridge.pipeline.models import utc_timestamp

router = APIRouter()


@router.get("/health")
async def health(request: Request) -> dict:
    """Simple liveness check for load balancers and the UI."""
    return {
        "status": "ok",
        "timestamp": utc_timestamp(),
        "service": request.app.state.settings.service_name,
    }
