"""
Paste API routes.
Handles create, fetch, update and delete as JSON, plus Markdown previews.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, PlainTextResponse

from pasties.config import settings
from pasties.dependencies import get_manager
from pasties.manager import PasteManager
from pasties.markdown import render_markdown
from pasties.models import (
    PasteCreate,
    PasteCredentials,
    PasteResponse,
    PasteUpdate,
    PasteView,
    RenderRequest,
    UpdateRequest,
)

router = APIRouter(prefix="/api")


def share_link(url: str) -> str:
    base_url = settings.APP_DOMAIN.rstrip("/")
    return f"{base_url}/{url}"


@router.get("/", response_class=PlainTextResponse)
def api_root() -> str:
    return "This is a route reserved for the pasties API."


@router.post("/", response_model=PasteResponse, status_code=201)
def create_paste(
    paste: PasteCreate,
    manager: PasteManager = Depends(get_manager),
) -> PasteResponse:
    """
    Create a new paste.

    Args:
        paste: Paste data (content, optional url, optional password)

    Returns:
        The paste url, its editing password and a shareable link
    """
    created = manager.create_paste(paste)
    return PasteResponse(
        url=created.url,
        password=created.password,
        link=share_link(created.url),
    )


@router.put("/")
def update_paste(
    request: UpdateRequest,
    manager: PasteManager = Depends(get_manager),
) -> dict:
    """
    Update a paste. Empty new_url/new_password keep the current values.

    Returns:
        The url the paste now lives at
    """
    credentials = PasteCredentials(url=request.url, password=request.password)
    update = PasteUpdate(
        url=request.new_url,
        content=request.content,
        password=request.new_password,
    )
    manager.update_paste(credentials, update)
    return {
        "url": request.new_url or request.url,
        "message": "Paste updated successfully",
    }


@router.delete("/")
def delete_paste(
    credentials: PasteCredentials,
    manager: PasteManager = Depends(get_manager),
) -> dict:
    """Delete a paste."""
    manager.delete_paste(credentials)
    return {"message": "Paste deleted successfully"}


@router.post("/render", response_class=HTMLResponse)
def render_preview(request: RenderRequest) -> str:
    """Render Markdown to an HTML fragment for the editor preview."""
    return render_markdown(request.content)


@router.get("/{url}", response_model=PasteView)
def fetch_paste(
    url: str,
    manager: PasteManager = Depends(get_manager),
) -> PasteView:
    """
    Fetch a paste.

    Raises:
        PasteNotFoundError: If no paste is stored under this url (404)
    """
    return manager.retrieve_paste(url)
