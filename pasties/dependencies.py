"""
FastAPI dependencies.
"""
from fastapi import Request

from pasties.manager import PasteManager


def get_manager(request: Request) -> PasteManager:
    """The paste manager attached to the application at startup."""
    return request.app.state.manager
