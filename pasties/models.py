"""
Pydantic models for paste records, manager inputs and request/response validation.
"""
from pydantic import BaseModel, Field


class Paste(BaseModel):
    """A paste record as persisted by the storage gateway."""
    id: int = Field(..., description="Internal identifier, never exposed")
    url: str = Field(..., description="Unique public identifier")
    password_hash: str = Field(..., description="Hex SHA-256 digest of the editing password")
    content: str = Field(..., description="Text content")
    date_published: int = Field(..., description="Creation time (Unix seconds)")
    date_edited: int = Field(..., description="Last modification time (Unix seconds)")

    def to_view(self) -> "PasteView":
        return PasteView(
            url=self.url,
            content=self.content,
            date_published=self.date_published,
            date_edited=self.date_edited,
        )


class PasteView(BaseModel):
    """Schema for viewing/fetching a paste."""
    url: str = Field(..., description="Paste URL")
    content: str = Field(..., description="Paste text content")
    date_published: int = Field(..., description="Creation time (Unix seconds)")
    date_edited: int = Field(..., description="Last modification time (Unix seconds)")


class PasteCreate(BaseModel):
    """Schema for creating a new paste. Empty url/password are generated."""
    url: str = Field("", description="Custom URL (generated when empty)")
    content: str = Field(..., description="Text content")
    password: str = Field("", description="Editing password (generated when empty)")


class PasteUpdate(BaseModel):
    """New values for an existing paste. Empty url/password keep the current ones."""
    url: str = ""
    content: str
    password: str = ""


class PasteCredentials(BaseModel):
    """URL and password authorizing an update or deletion."""
    url: str = Field(..., description="URL of the paste")
    password: str = Field(..., description="Editing password")


class PasteCreated(BaseModel):
    """Effective url and plaintext password of a newly created paste."""
    url: str
    password: str


class PasteResponse(BaseModel):
    """Schema for paste creation response."""
    url: str = Field(..., description="Paste URL")
    password: str = Field(..., description="Editing password, shown only once")
    link: str = Field(..., description="Shareable link to view the paste")


class UpdateRequest(BaseModel):
    """Schema for the update endpoint: credentials plus the new values."""
    url: str
    password: str
    content: str
    new_url: str = ""
    new_password: str = ""


class RenderRequest(BaseModel):
    """Schema for Markdown preview rendering."""
    content: str


class HealthCheck(BaseModel):
    """Schema for health check response."""
    ok: bool = Field(..., description="Is the application healthy?")
