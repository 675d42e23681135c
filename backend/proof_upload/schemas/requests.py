"""Request schemas for the proof upload endpoint."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ProofUploadForm(BaseModel):
    """Order metadata submitted alongside the screenshot."""

    name: str = Field(default="", description="Customer name")
    order_number: str = Field(default="", description="Order the payment belongs to")
    mobile: str = Field(default="", description="Customer mobile number")
    email: str = Field(default="", description="Customer email address")
    notes: Optional[str] = Field(default=None, description="Free-form notes from the customer")

    @field_validator("notes")
    @classmethod
    def empty_notes_to_none(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        return v


class ScreenshotUpload(BaseModel):
    """The screenshot after it passed the type and size filter."""

    file_name: str = Field(..., description="Filename as sent by the client")
    mime_type: str = Field(..., description="Content type as sent by the client")
    content: bytes = Field(..., description="Raw file bytes")

    @property
    def size(self) -> int:
        return len(self.content)
