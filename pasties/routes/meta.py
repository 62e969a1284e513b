"""
Reserved meta routes: service notice and health check.
These live outside /api so no paste url can shadow them.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from pasties.dependencies import get_manager
from pasties.manager import PasteManager
from pasties.models import HealthCheck

router = APIRouter(prefix="/meta")


@router.get("/", response_class=PlainTextResponse)
def meta_root() -> str:
    return "This is a route reserved for pasties."


@router.get("/healthz", response_model=HealthCheck)
def health_check(manager: PasteManager = Depends(get_manager)) -> HealthCheck:
    """
    Health check endpoint.
    Returns 200 with ok=true if application and database are healthy.
    """
    is_healthy = manager.database.is_healthy()
    return HealthCheck(ok=is_healthy)
